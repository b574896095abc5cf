"""IPA metadata: Info.plist fields and the app icon."""

import logging
import plistlib
from typing import Any
from xml.parsers.expat import ExpatError

from PIL import Image

from appmeta.core.cgbi import decode_png
from appmeta.exceptions import MalformedBinaryFormatError, NoIconError
from appmeta.models.app import IosPlistFields

logger = logging.getLogger(__name__)

BINARY_PLIST_MAGIC = b"bplist00"

PLIST_KEYS = {
    "bundle_name": "CFBundleName",
    "bundle_display_name": "CFBundleDisplayName",
    "bundle_version": "CFBundleVersion",
    "bundle_short_version": "CFBundleShortVersionString",
    "bundle_identifier": "CFBundleIdentifier",
}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def parse_info_plist(data: bytes) -> IosPlistFields:
    """Decode an Info.plist in either its XML or binary encoding.

    Raises:
        MalformedBinaryFormatError: If the property list cannot be decoded, its
            root is not a dictionary, or it has no CFBundleIdentifier.
    """
    encoding = "binary" if data.startswith(BINARY_PLIST_MAGIC) else "xml"
    try:
        plist = plistlib.loads(data)
    except (
        plistlib.InvalidFileException,
        ExpatError,
        ValueError,
        OverflowError,
    ) as exc:
        raise MalformedBinaryFormatError(
            f"Cannot decode {encoding} Info.plist: {exc}"
        ) from exc

    if not isinstance(plist, dict):
        raise MalformedBinaryFormatError(
            f"Info.plist root is a {type(plist).__name__}, expected a dictionary"
        )

    fields = IosPlistFields(
        **{field: _as_text(plist.get(key)) for field, key in PLIST_KEYS.items()}
    )
    if not fields.bundle_identifier:
        raise MalformedBinaryFormatError("Info.plist has no CFBundleIdentifier")

    logger.debug("Decoded %s Info.plist for %s", encoding, fields.bundle_identifier)
    return fields


def parse_ipa_icon(data: bytes | None) -> Image.Image:
    """Decode the picked AppIcon entry.

    Raises:
        NoIconError: If no icon entry was found.
        PngDecodeError: If the PNG cannot be reconstructed or decoded.
    """
    if data is None:
        raise NoIconError("IPA contains no AppIcon image")
    return decode_png(data)
