"""Docset directory layout, ``Info.plist`` and icon."""

import logging
import plistlib
import shutil
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

log = logging.getLogger(__name__)

INDEX_FILENAME = "docSet.dsidx"

# shipped with the package, used when no --icon is given
DEFAULT_ICON = resources.files("godocset") / "data" / "godoc.png"


@dataclass(frozen=True)
class DocsetLayout:
    """Paths inside ``<name>.docset``; nothing is created until :meth:`create`."""

    root: Path

    @property
    def contents(self) -> Path:
        return self.root / "Contents"

    @property
    def resources(self) -> Path:
        return self.contents / "Resources"

    @property
    def documents(self) -> Path:
        return self.resources / "Documents"

    @property
    def index(self) -> Path:
        return self.resources / INDEX_FILENAME

    @property
    def plist(self) -> Path:
        return self.contents / "Info.plist"

    @property
    def icon(self) -> Path:
        return self.root / "icon.png"

    def create(self) -> "DocsetLayout":
        self.documents.mkdir(parents=True, exist_ok=True)
        log.debug("Created %s", self.documents)
        return self


def write_info_plist(layout: DocsetLayout, docset_name: str) -> Path:
    """Write the ``Info.plist`` required by Dash."""
    plist: dict = {
        "CFBundleIdentifier": docset_name,
        "CFBundleName": docset_name[:1].upper() + docset_name[1:],
        "DocSetPlatformFamily": docset_name,
        "isDashDocset": True,
    }
    with open(layout.plist, "wb") as fh:
        plistlib.dump(plist, fh)
    log.debug("Wrote %s", layout.plist)
    return layout.plist


def write_icon(layout: DocsetLayout, icon: str | Path | None) -> Path:
    """Copy *icon*, or the bundled gopher-blue icon, to ``icon.png``."""
    if icon is None:
        layout.icon.write_bytes(DEFAULT_ICON.read_bytes())
        log.info("Copied default icon")
    else:
        shutil.copyfile(icon, layout.icon)
        log.info("Copied icon: %s", icon)
    return layout.icon
