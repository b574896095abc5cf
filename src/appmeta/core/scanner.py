"""Locate the manifest, Info.plist and icon entries of a package archive."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from zipfile import ZipFile, ZipInfo

from appmeta.models.app import IconCandidate

logger = logging.getLogger(__name__)

MANIFEST_NAME = "AndroidManifest.xml"
INFO_PLIST_RE = re.compile(r"Payload/[^/]+/Info\.plist")
ICON_MARKER = "AppIcon"
ICON_RESOLUTION_RE = re.compile(r"AppIcon-(\d{3})")


@dataclass
class ArchiveEntries:
    """Entries of interest found in one archive; absent roles are None."""

    manifest: ZipInfo | None = None
    plist: ZipInfo | None = None
    icon: ZipInfo | None = None
    icon_candidates: list[IconCandidate] = field(default_factory=list)


def score_icon_name(name: str) -> int | None:
    """Return the ``AppIcon-NNN`` resolution of an entry name.

    Names without the suffix score None. A suffix that does not parse as an
    integer scores 0 rather than aborting the scan.
    """
    match = ICON_RESOLUTION_RE.search(name)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return 0


def pick_icon_candidate(candidates: Iterable[IconCandidate]) -> IconCandidate | None:
    """Pick the highest-scored candidate.

    The first candidate to reach the top score wins ties. When no candidate
    has a score, the last one seen is returned.
    """
    best: IconCandidate | None = None
    last: IconCandidate | None = None
    for candidate in candidates:
        last = candidate
        if candidate.score is None:
            continue
        if best is None or candidate.score > best.score:
            best = candidate
    return best if best is not None else last


def pick_icon(names: Iterable[str]) -> str | None:
    """Pick the best ``AppIcon`` entry name out of ``names``."""
    candidates = (
        IconCandidate(name=name, score=score_icon_name(name))
        for name in names
        if ICON_MARKER in name
    )
    picked = pick_icon_candidate(candidates)
    return picked.name if picked is not None else None


def scan_archive(zip_file: ZipFile) -> ArchiveEntries:
    """Classify the entries of ``zip_file`` in one pass over its directory."""
    entries = ArchiveEntries()
    by_name: dict[str, ZipInfo] = {}

    for info in zip_file.infolist():
        name = info.filename
        if name == MANIFEST_NAME:
            entries.manifest = info
        elif INFO_PLIST_RE.fullmatch(name):
            if entries.plist is None:
                entries.plist = info
            else:
                logger.warning("Ignoring extra Info.plist %s", name)
        elif ICON_MARKER in name:
            entries.icon_candidates.append(
                IconCandidate(name=name, score=score_icon_name(name))
            )
            by_name[name] = info

    picked = pick_icon_candidate(entries.icon_candidates)
    if picked is not None:
        entries.icon = by_name[picked.name]
        logger.debug(
            "Picked icon %s out of %d candidates",
            picked.name,
            len(entries.icon_candidates),
        )
    return entries
