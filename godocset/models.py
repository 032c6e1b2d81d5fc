"""Records passed between the crawler, the extractor and the index."""

import posixpath
from dataclasses import dataclass, field
from enum import Enum


class EntryType(str, Enum):
    """Dash entry types written to the ``type`` column of the index."""

    PACKAGE = "Package"
    TYPE = "Type"
    FUNCTION = "Function"
    CONSTANT = "Constant"
    VARIABLE = "Variable"


class PackageStatus(str, Enum):
    INDEXED = "indexed"
    NOT_A_PACKAGE = "not_a_package"
    FAILED = "failed"


def document_path(import_path: str) -> str:
    """Path of a package's mirrored page, relative to ``Documents/``."""
    return posixpath.join("pkg", import_path, "index.html")


@dataclass(frozen=True)
class SymbolReference:
    name: str
    relative_path: str


@dataclass
class PackageRecord:
    """
    Symbols found on one package page.

    A record with a ``fetch_error`` never carries symbols, and neither it nor
    a record without any symbols is written to the index.
    """

    import_path: str
    fetch_error: Exception | None = None
    types: list[SymbolReference] = field(default_factory=list)
    functions: list[SymbolReference] = field(default_factory=list)
    constants: list[SymbolReference] = field(default_factory=list)
    variables: list[SymbolReference] = field(default_factory=list)

    @property
    def document_path(self) -> str:
        return document_path(self.import_path)

    @property
    def symbol_count(self) -> int:
        return (
            len(self.types)
            + len(self.functions)
            + len(self.constants)
            + len(self.variables)
        )

    def is_empty(self) -> bool:
        return self.symbol_count == 0

    @property
    def status(self) -> PackageStatus:
        if self.fetch_error is not None:
            return PackageStatus.FAILED
        if self.is_empty():
            return PackageStatus.NOT_A_PACKAGE
        return PackageStatus.INDEXED

    def fail(self, exc: Exception) -> None:
        """Mark the record as failed, dropping anything already extracted."""
        self.fetch_error = exc
        self.types.clear()
        self.functions.clear()
        self.constants.clear()
        self.variables.clear()

    def grouped_symbols(self) -> list[tuple[EntryType, list[SymbolReference]]]:
        """Symbol lists in the order they are written to the index."""
        return [
            (EntryType.TYPE, self.types),
            (EntryType.FUNCTION, self.functions),
            (EntryType.CONSTANT, self.constants),
            (EntryType.VARIABLE, self.variables),
        ]

    def summary(self) -> str:
        status = self.status
        if status is PackageStatus.FAILED:
            return f"{self.import_path} error: {self.fetch_error}"
        if status is PackageStatus.NOT_A_PACKAGE:
            return f"{self.import_path} is not a package, skip"
        return (
            f"{self.import_path} contains: "
            f"{len(self.constants)} const, {len(self.variables)} var, "
            f"{len(self.functions)} func, {len(self.types)} type"
        )


@dataclass(frozen=True)
class IndexEntry:
    name: str
    entry_type: EntryType
    path: str

    def as_row(self) -> tuple[str, str, str]:
        return self.name, self.entry_type.value, self.path


def index_entries(record: PackageRecord) -> list[IndexEntry]:
    """Rows for *record*: the package itself, then its types, funcs, consts, vars."""
    base = record.document_path
    entries = [IndexEntry(record.import_path, EntryType.PACKAGE, base)]
    for entry_type, symbols in record.grouped_symbols():
        for symbol in symbols:
            entries.append(
                IndexEntry(
                    f"{record.import_path}.{symbol.name}",
                    entry_type,
                    base + symbol.relative_path,
                )
            )
    return entries
