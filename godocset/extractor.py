"""
Symbol extraction from godoc package pages.

godoc renders each declaration under a heading whose ``id`` is the symbol
name and which nests an ``<a class="permalink">`` pointing at it.  Free
functions are ``<h2>`` headings, methods sit one level deeper in ``<h3>``.
Constant and variable blocks are ``<pre>`` elements where every declared
name is a ``<span id="...">``.
"""

from concurrent.futures import ThreadPoolExecutor

from bs4 import BeautifulSoup, Tag

from .models import PackageRecord, SymbolReference

TYPE_PREFIX = "type "
FUNC_PREFIX = "func "

# h2 when the function has no receiver, h3 when it does.
FUNC_HEADINGS = ("h2", "h3")


def _heading_reference(heading: Tag) -> SymbolReference | None:
    name = heading.get("id")
    if not name:
        return None
    permalink = heading.select_one("a.permalink")
    if permalink is None or not permalink.get("href"):
        return None
    return SymbolReference(name=name, relative_path=permalink["href"])


def _scan_headings(soup: BeautifulSoup, tag_name: str, prefix: str) -> list[SymbolReference]:
    found: list[SymbolReference] = []
    for heading in soup.find_all(tag_name):
        if not heading.get_text().startswith(prefix):
            continue
        ref = _heading_reference(heading)
        if ref is not None:
            found.append(ref)
    return found


def extract_types(soup: BeautifulSoup) -> list[SymbolReference]:
    return _scan_headings(soup, "h2", TYPE_PREFIX)


def extract_functions(soup: BeautifulSoup) -> list[SymbolReference]:
    found: list[SymbolReference] = []
    for tag_name in FUNC_HEADINGS:
        found.extend(_scan_headings(soup, tag_name, FUNC_PREFIX))
    return found


def extract_constants_and_variables(
    soup: BeautifulSoup,
) -> tuple[list[SymbolReference], list[SymbolReference]]:
    """Return ``(constants, variables)`` declared in ``<pre>`` blocks."""
    constants: list[SymbolReference] = []
    variables: list[SymbolReference] = []
    for pre in soup.find_all("pre"):
        text = pre.get_text()
        if text.startswith("const"):
            target = constants
        elif text.startswith("var"):
            target = variables
        else:
            continue
        for span in pre.find_all("span", id=True):
            target.append(SymbolReference(name=span["id"], relative_path="#" + span["id"]))
    return constants, variables


def parse_package(soup: BeautifulSoup, record: PackageRecord) -> PackageRecord:
    """
    Fill *record* with the symbols documented in *soup*.

    The three scans only read the tree, so they run side by side.  An empty
    record afterwards means the page is a directory listing, not a package.
    """
    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="extract") as executor:
        types_future = executor.submit(extract_types, soup)
        funcs_future = executor.submit(extract_functions, soup)
        values_future = executor.submit(extract_constants_and_variables, soup)

        record.types = types_future.result()
        record.functions = funcs_future.result()
        record.constants, record.variables = values_future.result()

    return record
