"""File sink for everything mirrored into ``Contents/Resources/Documents``."""

import logging
from pathlib import Path

log = logging.getLogger(__name__)


class DocumentStore:
    """Writes mirrored pages and assets below a single root directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def path_for(self, rel_path: str) -> Path:
        target = (self.root / rel_path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"{rel_path!r} escapes {self.root}")
        return target

    def write(self, rel_path: str, data: bytes | str) -> Path:
        target = self.path_for(rel_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            target.write_text(data, encoding="utf-8")
        else:
            target.write_bytes(data)
        log.debug("Wrote %s (%d bytes)", rel_path, target.stat().st_size)
        return target
