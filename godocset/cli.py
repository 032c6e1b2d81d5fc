"""
godocset
========
Builds a Dash docset from the packages served by a local ``godoc``.

Usage
-----
    godocset [options]

Options
-------
    --name NAME           Docset name (default: GoDoc)
    --icon PATH           PNG copied to the docset as icon.png (default: bundled icon)
    --silent              Only print warnings and errors
    --server URL          Crawl an already running godoc instead of starting one
    --output-dir DIR      Where to write <name>.docset (default: .)
    --config FILE         YAML file with any of the settings above
    --workers N           Parallel package downloads (default: 8)
    --asset-workers N     Parallel static-file downloads (default: 4)
    --timeout SECONDS     Per-request timeout (default: 30)

Standard-library packages are skipped; the official Go docset covers them.
"""

import argparse
import logging
import sys

import requests
import yaml

from .bundle import DocsetLayout, write_icon, write_info_plist
from .config import CrawlConfig, load_config
from .errors import DocsetError
from .index import IndexWriter
from .pipeline import CrawlReport, crawl_and_index
from .server import run_godoc
from .store import DocumentStore

log = logging.getLogger("godocset")


def setup_logging(silent: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING if silent else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="godocset",
        description="Generate a Dash docset from a local godoc server",
    )
    parser.add_argument("--name", metavar="NAME", help="Docset name (default: GoDoc).")
    parser.add_argument("--icon", metavar="PATH", help="Docset icon .png path.")
    parser.add_argument(
        "--silent",
        action="store_true",
        default=None,
        help="Silent mode (only print warnings and errors).",
    )
    parser.add_argument(
        "--server",
        metavar="URL",
        help="Base URL of a running godoc, e.g. http://localhost:6060. "
        "Without it a godoc is started on a free port.",
    )
    parser.add_argument("--output-dir", metavar="DIR", help="Where the .docset is written (default: .).")
    parser.add_argument("--config", metavar="FILE", help="YAML settings file.")
    parser.add_argument("--workers", type=int, metavar="N", help="Parallel package downloads (default: 8).")
    parser.add_argument(
        "--asset-workers", type=int, metavar="N", help="Parallel static-file downloads (default: 4)."
    )
    parser.add_argument(
        "--timeout", type=float, metavar="SECONDS", help="Per-request timeout (default: 30)."
    )
    return parser


def resolve_config(args: argparse.Namespace) -> CrawlConfig:
    return load_config(args.config).merged(
        name=args.name,
        icon=args.icon,
        silent=args.silent,
        server=args.server,
        output_dir=args.output_dir,
        workers=args.workers,
        asset_workers=args.asset_workers,
        timeout=args.timeout,
    )


def build_docset(config: CrawlConfig, session: requests.Session | None = None) -> CrawlReport:
    """Lay out the docset, crawl godoc into it and commit the index."""
    docset_dir = config.docset_dir
    log.info("=" * 60)
    log.info("Building %s", docset_dir)
    log.info("=" * 60)

    layout = DocsetLayout(docset_dir).create()
    write_icon(layout, config.icon)
    write_info_plist(layout, config.name)

    documents = DocumentStore(layout.documents)
    session = session or requests.Session()

    with IndexWriter(layout.index) as index:
        if config.server:
            report = crawl_and_index(config.server, index, documents, config=config, session=session)
        else:
            with run_godoc(quiet=config.silent) as base_url:
                report = crawl_and_index(base_url, index, documents, config=config, session=session)

    log.info("=" * 60)
    log.info("Docset: %s", docset_dir)
    log.info(
        "Packages: %d indexed, %d not packages, %d failed; static files: %d",
        len(report.indexed), len(report.not_packages), len(report.failed), len(report.assets.saved),
    )
    log.info("=" * 60)
    return report


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = resolve_config(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        parser.error(str(exc))

    setup_logging(config.silent)

    try:
        build_docset(config)
    except (DocsetError, OSError) as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
