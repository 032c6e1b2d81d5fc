"""Run the asset mirror and the package crawl side by side."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

from .assets import AssetReport, mirror_assets
from .config import CrawlConfig
from .index import IndexWriter
from .models import PackageRecord, PackageStatus
from .packages import crawl_packages
from .store import DocumentStore

log = logging.getLogger(__name__)


@dataclass
class CrawlReport:
    packages: list[PackageRecord] = field(default_factory=list)
    assets: AssetReport = field(default_factory=AssetReport)

    def _with_status(self, status: PackageStatus) -> list[PackageRecord]:
        return [r for r in self.packages if r.status is status]

    @property
    def indexed(self) -> list[PackageRecord]:
        return self._with_status(PackageStatus.INDEXED)

    @property
    def not_packages(self) -> list[PackageRecord]:
        return self._with_status(PackageStatus.NOT_A_PACKAGE)

    @property
    def failed(self) -> list[PackageRecord]:
        return self._with_status(PackageStatus.FAILED)


def crawl_and_index(
    base_url: str,
    index: IndexWriter,
    documents: DocumentStore,
    *,
    config: CrawlConfig | None = None,
    session: requests.Session | None = None,
    logger: logging.Logger | None = None,
) -> CrawlReport:
    """
    Mirror godoc's static files and crawl its packages into *index* and
    *documents*.

    Returns once both have finished.  *index* is left open: committing it is
    up to the caller, normally by leaving its ``with`` block.  If the package
    crawl raises, the asset mirror is stopped and the error is re-raised.
    """
    config = config or CrawlConfig()
    session = session or requests.Session()
    logger = logger or log
    stop = threading.Event()

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="crawl") as executor:
        assets_future = executor.submit(
            mirror_assets, base_url, documents,
            config=config, session=session, logger=logger, stop=stop,
        )
        packages_future = executor.submit(
            crawl_packages, base_url, index, documents,
            config=config, session=session, logger=logger, stop=stop,
        )
        try:
            records = packages_future.result()
        except Exception:
            stop.set()
            raise
        assets = assets_future.result()

    report = CrawlReport(packages=records, assets=assets)
    logger.info(
        "Crawl finished: %d indexed, %d not packages, %d failed",
        len(report.indexed), len(report.not_packages), len(report.failed),
    )
    return report
