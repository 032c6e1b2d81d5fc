"""Start a throwaway ``godoc`` HTTP server on a free local port."""

import contextlib
import logging
import socket
import subprocess
import time
from collections.abc import Iterator

import requests

from .errors import ServerError

log = logging.getLogger(__name__)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


def wait_until_ready(url: str, attempts: int = 10, interval: float = 0.5) -> bool:
    for _ in range(attempts):
        time.sleep(interval)
        try:
            requests.get(url, timeout=interval * 4)
        except requests.RequestException:
            continue
        return True
    return False


@contextlib.contextmanager
def run_godoc(
    binary: str = "godoc",
    *,
    attempts: int = 10,
    interval: float = 0.5,
    quiet: bool = False,
) -> Iterator[str]:
    """
    Run ``godoc -http=localhost:<port>`` for the duration of the block and
    yield its base URL.
    """
    host = f"localhost:{free_port()}"
    output = subprocess.DEVNULL if quiet else None
    try:
        proc = subprocess.Popen([binary, f"-http={host}"], stdout=output, stderr=output)
    except OSError as exc:
        raise ServerError(f"cannot start {binary}: {exc}") from exc

    base_url = f"http://{host}"
    try:
        if not wait_until_ready(base_url, attempts=attempts, interval=interval):
            raise ServerError(f"{binary} did not answer on {base_url}")
        log.info("godoc running on %s", base_url)
        yield base_url
    finally:
        log.info("Killing godoc on %s", base_url)
        try:
            proc.kill()
            proc.wait(timeout=10)
        except (OSError, subprocess.TimeoutExpired) as exc:
            log.error("Error killing godoc on %s: %s", base_url, exc)
