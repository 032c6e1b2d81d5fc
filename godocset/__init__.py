"""Build Dash docsets from a local godoc server."""

from .config import CrawlConfig, load_config
from .errors import DocsetError, ParseError, PersistenceError, ServerError, TransportError
from .index import IndexWriter
from .models import EntryType, IndexEntry, PackageRecord, SymbolReference, document_path
from .pipeline import CrawlReport, crawl_and_index
from .store import DocumentStore

__version__ = "0.1.0"

__all__ = [
    "CrawlConfig",
    "CrawlReport",
    "DocsetError",
    "DocumentStore",
    "EntryType",
    "IndexEntry",
    "IndexWriter",
    "PackageRecord",
    "ParseError",
    "PersistenceError",
    "ServerError",
    "SymbolReference",
    "TransportError",
    "crawl_and_index",
    "document_path",
    "load_config",
]
