"""End-to-end crawl against the fake godoc."""

from __future__ import annotations

import time

import pytest

from conftest import BASE_URL, FakeSession, godoc_routes
from godocset.errors import PersistenceError
from godocset.index import IndexWriter, read_index
from godocset.pipeline import crawl_and_index
from godocset.store import DocumentStore

IO = "pkg/github.com/acme/io/index.html"
UTIL = "pkg/github.com/acme/util/index.html"

EXPECTED_ROWS = {
    ("github.com/acme/io", "Package", IO),
    ("github.com/acme/io.Reader", "Type", IO + "#Reader"),
    ("github.com/acme/io.Copy", "Function", IO + "#Copy"),
    ("github.com/acme/io.Reader.Read", "Function", IO + "#Reader.Read"),
    ("github.com/acme/io.MaxSize", "Constant", IO + "#MaxSize"),
    ("github.com/acme/io.MinSize", "Constant", IO + "#MinSize"),
    ("github.com/acme/io.ErrShort", "Variable", IO + "#ErrShort"),
    ("github.com/acme/util", "Package", UTIL),
    ("github.com/acme/util.Must", "Function", UTIL + "#Must"),
}


def run(tmp_path, config, session=None):
    session = session or FakeSession(godoc_routes())
    documents = DocumentStore(tmp_path / "Documents")
    with IndexWriter(tmp_path / "docSet.dsidx") as index:
        report = crawl_and_index(BASE_URL, index, documents, config=config, session=session)
    return report, read_index(tmp_path / "docSet.dsidx")


def test_full_crawl(tmp_path, config):
    report, rows = run(tmp_path, config)

    assert rows == EXPECTED_ROWS
    assert [r.import_path for r in report.indexed] == ["github.com/acme/io", "github.com/acme/util"]
    assert [r.import_path for r in report.not_packages] == ["github.com/acme"]
    assert [r.import_path for r in report.failed] == ["example.org/broken"]
    assert len(report.assets.saved) == 3

    documents = tmp_path / "Documents"
    assert (documents / IO).exists()
    assert (documents / UTIL).exists()
    assert (documents / "lib/godoc/style.css").exists()


def test_standard_library_never_indexed(tmp_path, config):
    _, rows = run(tmp_path, config)
    assert not any(name.startswith(("net/", "archive/")) for name, _, _ in rows)


def test_every_indexed_package_has_one_package_row(tmp_path, config):
    report, rows = run(tmp_path, config)
    for record in report.indexed:
        package_rows = [r for r in rows if r[1] == "Package" and r[0] == record.import_path]
        assert package_rows == [(record.import_path, "Package", record.document_path)]
        symbol_rows = [r for r in rows if r[0].startswith(record.import_path + ".")]
        assert len(symbol_rows) == record.symbol_count


def test_rerun_is_idempotent(tmp_path, config):
    _, first = run(tmp_path, config)
    _, second = run(tmp_path, config)
    assert first == second == EXPECTED_ROWS


class SlowAssetSession(FakeSession):
    def get(self, url: str, timeout: float | None = None, **kwargs):
        if "/lib/godoc/" in url:
            time.sleep(1.5)
        return super().get(url, timeout=timeout, **kwargs)


class BrokenIndex(IndexWriter):
    def add(self, record):
        raise PersistenceError("disk full")


def test_index_failure_stops_asset_mirror(tmp_path, config):
    session = SlowAssetSession(godoc_routes())
    index = BrokenIndex(tmp_path / "docSet.dsidx")

    started = time.monotonic()
    with pytest.raises(PersistenceError):
        crawl_and_index(BASE_URL, index, DocumentStore(tmp_path / "Documents"), config=config, session=session)

    assert time.monotonic() - started < 1.0
    assert f"{BASE_URL}/lib/godoc/style.css" not in session.requested
    assert not (tmp_path / "Documents/lib/godoc/style.css").exists()
