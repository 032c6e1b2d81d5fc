"""
Crawl settings.

Defaults live on :class:`CrawlConfig`.  A YAML file may override any of them
and command-line flags override the file, e.g.::

    name: MyGoDoc
    workers: 16
    timeout: 10
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

DEFAULT_ASSET_ROOT = "lib/godoc/"

_NUMBER = (int, float)
_OPTIONAL_STR = (str, type(None))

_FIELD_TYPES: dict[str, type | tuple[type, ...]] = {
    "name": str,
    "icon": _OPTIONAL_STR,
    "output_dir": str,
    "server": _OPTIONAL_STR,
    "workers": int,
    "asset_workers": int,
    "timeout": _NUMBER,
    "retries": int,
    "backoff": _NUMBER,
    "asset_root": str,
    "silent": bool,
}


def _type_name(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join("null" if t is type(None) else t.__name__ for t in expected)
    return expected.__name__


def _check_type(name: str, value: Any) -> None:
    expected = _FIELD_TYPES[name]
    # bool is an int subclass
    wrong_bool = isinstance(value, bool) and expected is not bool
    if wrong_bool or not isinstance(value, expected):
        raise ValueError(f"{name} must be {_type_name(expected)}, got {type(value).__name__} {value!r}")


@dataclass(frozen=True)
class CrawlConfig:
    name: str = "GoDoc"
    icon: str | None = None
    output_dir: str = "."
    server: str | None = None
    workers: int = 8
    asset_workers: int = 4
    timeout: float = 30.0
    retries: int = 3
    backoff: float = 0.5
    asset_root: str = DEFAULT_ASSET_ROOT
    silent: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_type(f.name, getattr(self, f.name))
        if not self.name:
            raise ValueError("name must not be empty")
        if self.workers < 1 or self.asset_workers < 1:
            raise ValueError("worker counts must be at least 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.retries < 1:
            raise ValueError("retries must be at least 1")
        if self.backoff < 0:
            raise ValueError("backoff must not be negative")
        if not self.asset_root.endswith("/"):
            object.__setattr__(self, "asset_root", self.asset_root + "/")

    @property
    def docset_dir(self) -> Path:
        return Path(self.output_dir) / f"{self.name}.docset"

    def merged(self, **overrides: Any) -> "CrawlConfig":
        """Return a copy with every override that is not ``None`` applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Path | str | None) -> CrawlConfig:
    """Read a :class:`CrawlConfig` from YAML; ``None`` gives the defaults."""
    if path is None:
        return CrawlConfig()

    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        return CrawlConfig()
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(CrawlConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown settings: {', '.join(unknown)}")
    try:
        return CrawlConfig(**data)
    except ValueError as exc:
        raise ValueError(f"{path}: {exc}") from exc
