"""Point stylesheet and script references of a mirrored page at the local copies."""

import logging
import posixpath
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

STYLESHEET_SUFFIX = ".css"
SCRIPT_SUFFIX = ".js"

log = logging.getLogger(__name__)


def relative_reference(reference: str, page_dir: str) -> str:
    """
    Turn a server-root path like ``/lib/godoc/style.css`` into a path
    relative to *page_dir*, e.g. ``../../../lib/godoc/style.css``.

    Raises :class:`ValueError` for references that climb above the server
    root, e.g. ``/../style.css``.
    """
    target = posixpath.normpath(reference.lstrip("/"))
    if target == "." or target == ".." or target.startswith("../"):
        raise ValueError(f"{reference!r} does not name a file under the server root")
    return posixpath.relpath(target, page_dir or ".")


def replace_links(
    soup: BeautifulSoup,
    document_path: str,
    logger: logging.Logger | None = None,
) -> int:
    """
    Rewrite ``<link href="*.css">`` and ``<script src="*.js">`` in place.

    A reference that cannot be relativized is logged and left alone.
    Returns the number of rewritten references.
    """
    logger = logger or log
    page_dir = posixpath.dirname(document_path)
    rewritten = 0

    for tag_name, attr, suffix in (
        ("link", "href", STYLESHEET_SUFFIX),
        ("script", "src", SCRIPT_SUFFIX),
    ):
        for tag in soup.find_all(tag_name):
            value = tag.get(attr)
            if not value or not value.endswith(suffix):
                continue
            parts = urlsplit(value)
            if parts.scheme or parts.netloc:
                continue
            try:
                tag[attr] = relative_reference(value, page_dir)
            except ValueError as exc:
                logger.warning("Leaving %s=%r in %s unchanged: %s", attr, value, document_path, exc)
                continue
            rewritten += 1

    return rewritten
