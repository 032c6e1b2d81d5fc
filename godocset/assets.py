"""
Mirror godoc's static files (stylesheets and scripts) into the docset.

godoc serves ``/lib/godoc/`` as plain directory listings: a table whose first
row links to the parent directory and whose other rows link to files or
sub-directories.  Listings are walked concurrently; every listing task hands
back the files and directories it found and the driver loop schedules them,
so the walk is over once no task is outstanding.
"""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

import requests

from .config import CrawlConfig
from .errors import DocsetError
from .fetch import fetch, fetch_html
from .store import DocumentStore

log = logging.getLogger(__name__)

ASSET_SUFFIXES = (".css", ".js")

# Unexpanded template markup, e.g. the entries of lib/godoc/codewalkdir.html.
TEMPLATE_PLACEHOLDER = "{{"

_LISTING = "listing"
_DOWNLOAD = "download"

# seconds between checks of the stop event while requests are in flight
STOP_POLL_INTERVAL = 0.1


@dataclass
class AssetReport:
    saved: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


def is_asset(href: str) -> bool:
    return href.endswith(ASSET_SUFFIXES)


def _url(base_url: str, rel_path: str) -> str:
    return base_url.rstrip("/") + "/" + rel_path


def list_directory(
    session: requests.Session,
    base_url: str,
    rel_path: str,
    config: CrawlConfig,
) -> tuple[list[str], list[str]]:
    """Return ``(files, directories)`` linked from the listing at *rel_path*."""
    soup = fetch_html(
        session,
        _url(base_url, rel_path),
        timeout=config.timeout,
        retries=config.retries,
        backoff=config.backoff,
    )
    files: list[str] = []
    directories: list[str] = []
    # lxml does not add the implicit <tbody> that godoc leaves out
    for row in soup.select("table tr"):
        # skip ".."
        if len(row.find_all(recursive=False)) < 2:
            continue
        link = row.find("a", href=True)
        if link is None:
            continue
        href = link["href"]
        if is_asset(href):
            files.append(rel_path + href)
        else:
            directories.append(rel_path + href)
    return files, directories


def download_asset(
    session: requests.Session,
    base_url: str,
    rel_path: str,
    documents: DocumentStore,
    config: CrawlConfig,
) -> str:
    resp = fetch(
        session,
        _url(base_url, rel_path),
        timeout=config.timeout,
        retries=config.retries,
        backoff=config.backoff,
    )
    documents.write(rel_path, resp.content)
    return rel_path


def mirror_assets(
    base_url: str,
    documents: DocumentStore,
    *,
    config: CrawlConfig | None = None,
    session: requests.Session | None = None,
    logger: logging.Logger | None = None,
    stop: threading.Event | None = None,
) -> AssetReport:
    """
    Walk ``config.asset_root`` on the server and copy every stylesheet and
    script into *documents* under the same relative path.

    A failing listing or download is logged and recorded; its siblings carry
    on.  Once *stop* is set nothing new is scheduled and the walk returns
    without waiting for requests already in flight.
    """
    config = config or CrawlConfig()
    session = session or requests.Session()
    logger = logger or log
    stop = stop or threading.Event()
    report = AssetReport()
    seen: set[str] = set()

    executor = ThreadPoolExecutor(max_workers=config.asset_workers, thread_name_prefix="assets")
    pending: dict[Future, tuple[str, str]] = {}

    def schedule(kind: str, rel_path: str) -> None:
        if stop.is_set():
            return
        if TEMPLATE_PLACEHOLDER in rel_path:
            logger.debug("Skipping template entry %s", rel_path)
            report.skipped.append(rel_path)
            return
        if rel_path in seen:
            return
        seen.add(rel_path)
        if kind == _LISTING:
            future = executor.submit(list_directory, session, base_url, rel_path, config)
        else:
            future = executor.submit(download_asset, session, base_url, rel_path, documents, config)
        pending[future] = (kind, rel_path)

    try:
        schedule(_LISTING, config.asset_root)

        while pending and not stop.is_set():
            done, _ = wait(pending, timeout=STOP_POLL_INTERVAL, return_when=FIRST_COMPLETED)
            for future in done:
                kind, rel_path = pending.pop(future)
                try:
                    result = future.result()
                except (DocsetError, OSError, ValueError) as exc:
                    logger.error("Asset %s failed: %s", rel_path, exc)
                    report.failed.append((rel_path, str(exc)))
                    continue

                if kind == _LISTING:
                    files, directories = result
                    for file_path in files:
                        schedule(_DOWNLOAD, file_path)
                    for dir_path in directories:
                        schedule(_LISTING, dir_path)
                else:
                    logger.debug("Saved %s", rel_path)
                    report.saved.append(rel_path)
    finally:
        stopped = stop.is_set()
        executor.shutdown(wait=not stopped, cancel_futures=stopped)

    if stop.is_set():
        logger.warning("Static file mirror stopped with %d requests outstanding", len(pending))
    logger.info(
        "Mirrored %d static files (%d failed, %d skipped)",
        len(report.saved), len(report.failed), len(report.skipped),
    )
    return report
