"""
Crawl godoc's package pages.

``/pkg/`` lists every import path godoc knows about.  Standard-library
packages are dropped since the official Go docset already covers them; every
remaining page is fetched, parsed, mirrored and indexed on a worker thread.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests

from .config import CrawlConfig
from .errors import DocsetError, ParseError, PersistenceError, TransportError
from .extractor import parse_package
from .fetch import fetch_html
from .index import IndexWriter
from .models import PackageRecord, PackageStatus
from .rewriter import replace_links
from .store import DocumentStore

log = logging.getLogger(__name__)

PACKAGE_LINK_SELECTOR = "div.pkg-dir td.pkg-name a"


def is_standard_package(import_path: str) -> bool:
    """True when the first path segment has no dot, e.g. ``net/http``."""
    domain = import_path.split("/")[0]
    return "." not in domain


def list_packages(
    session: requests.Session,
    base_url: str,
    config: CrawlConfig,
) -> list[str]:
    """Return the non-standard import paths (hrefs, trailing slash kept) listed at ``/pkg/``."""
    soup = fetch_html(
        session,
        base_url.rstrip("/") + "/pkg/",
        timeout=config.timeout,
        retries=config.retries,
        backoff=config.backoff,
    )
    packages: list[str] = []
    for link in soup.select(PACKAGE_LINK_SELECTOR):
        href = link.get("href")
        if not href:
            continue
        if is_standard_package(href):
            continue
        packages.append(href)
    return packages


def _stopped(stop: threading.Event | None, record: PackageRecord) -> bool:
    if stop is not None and stop.is_set():
        record.fail(DocsetError("crawl stopped"))
        return True
    return False


def grab_package(
    session: requests.Session,
    base_url: str,
    href: str,
    documents: DocumentStore,
    index: IndexWriter,
    config: CrawlConfig,
    logger: logging.Logger | None = None,
    stop: threading.Event | None = None,
) -> PackageRecord:
    """
    Fetch one package page and, if it documents anything, mirror and index it.

    Fetch, parse and file errors end up on the returned record.  Index errors
    are raised.  A set *stop* event turns the package into a failed record
    before anything is fetched or indexed.
    """
    logger = logger or log
    record = PackageRecord(import_path=href.strip("/"))
    if _stopped(stop, record):
        return record
    url = base_url.rstrip("/") + "/pkg/" + href

    try:
        soup = fetch_html(
            session,
            url,
            timeout=config.timeout,
            retries=config.retries,
            backoff=config.backoff,
        )
    except (TransportError, ParseError) as exc:
        record.fail(exc)
        return record

    # directory listings have no symbols
    parse_package(soup, record)
    if record.is_empty():
        return record

    doc_path = record.document_path
    replace_links(soup, doc_path, logger=logger)
    try:
        documents.write(doc_path, str(soup))
    except (OSError, ValueError) as exc:
        record.fail(exc)
        return record

    if _stopped(stop, record):
        return record
    index.add(record)
    return record


def log_record(record: PackageRecord, logger: logging.Logger) -> None:
    if record.status is PackageStatus.FAILED:
        logger.error("%s", record.summary())
    else:
        logger.info("%s", record.summary())


def crawl_packages(
    base_url: str,
    index: IndexWriter,
    documents: DocumentStore,
    *,
    config: CrawlConfig | None = None,
    session: requests.Session | None = None,
    logger: logging.Logger | None = None,
    stop: threading.Event | None = None,
) -> list[PackageRecord]:
    """
    List the packages on the server and process them concurrently.

    Per-package failures are recorded and logged.  A :class:`PersistenceError`
    sets *stop*, cancels whatever has not started yet and is re-raised without
    waiting for the packages still in flight.
    """
    config = config or CrawlConfig()
    session = session or requests.Session()
    logger = logger or log
    stop = stop or threading.Event()

    packages = list_packages(session, base_url, config)
    logger.info("Found %d packages to crawl", len(packages))

    records: list[PackageRecord] = []
    executor = ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="pkg")
    try:
        future_map = {
            executor.submit(
                grab_package, session, base_url, href, documents, index, config, logger, stop
            ): href
            for href in packages
        }
        for future in as_completed(future_map):
            try:
                record = future.result()
            except PersistenceError:
                stop.set()
                raise
            except Exception as exc:  # noqa: BLE001
                record = PackageRecord(import_path=future_map[future].strip("/"))
                record.fail(exc)
            log_record(record, logger)
            records.append(record)
    finally:
        stopped = stop.is_set()
        executor.shutdown(wait=not stopped, cancel_futures=stopped)

    records.sort(key=lambda r: r.import_path)
    return records
