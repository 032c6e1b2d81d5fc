"""Exceptions raised while building a docset."""


class DocsetError(Exception):
    """Base class for every error raised by godocset."""


class TransportError(DocsetError):
    """A GET against the documentation server failed."""

    def __init__(self, url: str, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        message = f"fetching {url} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ParseError(DocsetError):
    """A fetched page could not be parsed as HTML."""

    def __init__(self, source: str, cause: Exception | None = None) -> None:
        self.source = source
        self.cause = cause
        message = f"parsing {source} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class PersistenceError(DocsetError):
    """The search index could not be created or written. Always fatal."""


class ServerError(DocsetError):
    """The local godoc server could not be started."""
