"""Shared fixtures: an in-memory godoc served through a fake requests session."""

from __future__ import annotations

import threading

import pytest
import requests

from godocset.config import CrawlConfig

BASE_URL = "http://godoc.test"

PKG_INDEX = """<html><body>
<div class="pkg-dir">
<table>
<tr><th>Name</th><th>Synopsis</th></tr>
<tr><td class="pkg-name"><a href="archive/tar/">archive/tar</a></td><td>tar archives</td></tr>
<tr><td class="pkg-name"><a href="net/http/">net/http</a></td><td>HTTP</td></tr>
<tr><td class="pkg-name"><a href="github.com/acme/">github.com/acme</a></td><td></td></tr>
<tr><td class="pkg-name"><a href="github.com/acme/io/">github.com/acme/io</a></td><td>io helpers</td></tr>
<tr><td class="pkg-name"><a href="github.com/acme/util/">github.com/acme/util</a></td><td>misc</td></tr>
<tr><td class="pkg-name"><a href="example.org/broken/">example.org/broken</a></td><td></td></tr>
</table>
</div>
</body></html>
"""

IO_PAGE = """<!DOCTYPE html>
<html><head>
<link type="text/css" rel="stylesheet" href="/lib/godoc/style.css">
<script src="/lib/godoc/jquery.js"></script>
<script src="https://cdn.example.com/analytics.js"></script>
</head><body>
<h2 id="pkg-overview">Overview <a class="permalink" href="#pkg-overview">&#xb6;</a></h2>
<h2 id="pkg-constants">Constants</h2>
<pre>const (
    <span id="MaxSize">MaxSize</span> = 10
    <span id="MinSize">MinSize</span> = 1
)</pre>
<h2 id="pkg-variables">Variables</h2>
<pre>var <span id="ErrShort">ErrShort</span> = errors.New("short")</pre>
<h2 id="Copy">func <a href="/src/github.com/acme/io/io.go">Copy</a> <a class="permalink" href="#Copy">&#xb6;</a></h2>
<pre>func Copy(dst Writer, src Reader) (int64, error)</pre>
<h2 id="Reader">type <a href="/src/github.com/acme/io/io.go">Reader</a> <a class="permalink" href="#Reader">&#xb6;</a></h2>
<pre>type Reader interface {
    Read(p []byte) (n int, err error)
}</pre>
<h3 id="Reader.Read">func (*Reader) <a href="/src/github.com/acme/io/io.go">Read</a> <a class="permalink" href="#Reader.Read">&#xb6;</a></h3>
<h2 id="Legacy">type Legacy</h2>
</body></html>
"""

UTIL_PAGE = """<html><head>
<link type="text/css" rel="stylesheet" href="/lib/godoc/style.css">
</head><body>
<h2 id="Must">func <a href="/src/github.com/acme/util/util.go">Must</a> <a class="permalink" href="#Must">&#xb6;</a></h2>
</body></html>
"""

DIRECTORY_PAGE = """<html><body>
<h1>Directory /src/github.com/acme</h1>
<div class="pkg-dir">
<table>
<tr><td class="pkg-name"><a href="io/">io</a></td></tr>
<tr><td class="pkg-name"><a href="util/">util</a></td></tr>
</table>
</div>
</body></html>
"""


def listing(*rows: str) -> str:
    return (
        '<html><body><table class="dir">'
        '<tr><th align="left">File</th><td width="25">&nbsp;</td><th align="right">Bytes</th></tr>'
        '<tr><td align="left"><a href="..">..</a></td></tr>'
        + "".join(rows)
        + "</table></body></html>"
    )


def row(href: str) -> str:
    return f'<tr><td align="left"><a href="{href}">{href}</a></td><td></td><td align="right">42</td></tr>'


LIB_LISTING = listing(
    row("style.css"),
    row("jquery.js"),
    row("images/"),
    row("{{html .Name}}/"),
    row("codewalk/"),
)

IMAGES_LISTING = listing(row("treeview.css"))


class FakeResponse:
    def __init__(self, status_code: int = 200, body: str | bytes = b"") -> None:
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.text = self.content.decode("utf-8", errors="replace")
        self.headers: dict[str, str] = {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Maps URLs to canned outcomes.  An outcome is a response, an exception to
    raise, or a list of those consumed one call at a time.  Unknown URLs 404.
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.requested: list[str] = []
        self._lock = threading.Lock()

    def get(self, url: str, timeout: float | None = None, **kwargs):
        with self._lock:
            self.requested.append(url)
            outcome = self.routes.get(url, FakeResponse(404, "not found"))
            if isinstance(outcome, list):
                outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def godoc_routes() -> dict:
    return {
        f"{BASE_URL}/pkg/": FakeResponse(200, PKG_INDEX),
        f"{BASE_URL}/pkg/github.com/acme/": FakeResponse(200, DIRECTORY_PAGE),
        f"{BASE_URL}/pkg/github.com/acme/io/": FakeResponse(200, IO_PAGE),
        f"{BASE_URL}/pkg/github.com/acme/util/": FakeResponse(200, UTIL_PAGE),
        f"{BASE_URL}/pkg/example.org/broken/": FakeResponse(500, "boom"),
        f"{BASE_URL}/lib/godoc/": FakeResponse(200, LIB_LISTING),
        f"{BASE_URL}/lib/godoc/style.css": FakeResponse(200, b"body { color: black; }"),
        f"{BASE_URL}/lib/godoc/jquery.js": FakeResponse(200, b"/* jquery */"),
        f"{BASE_URL}/lib/godoc/images/": FakeResponse(200, IMAGES_LISTING),
        f"{BASE_URL}/lib/godoc/images/treeview.css": FakeResponse(200, b".tree {}"),
        f"{BASE_URL}/lib/godoc/codewalk/": FakeResponse(500, "boom"),
    }


@pytest.fixture
def godoc_session() -> FakeSession:
    return FakeSession(godoc_routes())


@pytest.fixture
def config() -> CrawlConfig:
    return CrawlConfig(workers=4, asset_workers=2, timeout=5, retries=1, backoff=0)
