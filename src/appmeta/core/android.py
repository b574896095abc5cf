"""APK metadata: manifest fields, application label and launcher icon.

Binary XML and the resource table are decoded with pyaxmlparser; this module
maps its results onto appmeta's models and errors.
"""

import functools
import io
import logging
from zipfile import ZipFile

from PIL import Image
from pyaxmlparser.arscparser import ARSCParser
from pyaxmlparser.axmlprinter import AXMLPrinter

from appmeta.core.cgbi import IMAGE_ERRORS
from appmeta.exceptions import (
    MalformedArchiveError,
    MalformedBinaryFormatError,
    NoIconError,
)
from appmeta.models.app import AndroidManifestFields
from appmeta.utils.archive import read_entry

logger = logging.getLogger(__name__)

ANDROID_NS = "http://schemas.android.com/apk/res/android"
RESOURCE_TABLE_NAME = "resources.arsc"
BITMAP_SUFFIXES = (".png", ".webp", ".jpg", ".jpeg", ".gif", ".bmp")

DENSITY_DEFAULT = 0
DENSITY_MEDIUM = 160
DENSITY_ANY = 0xFFFE
DENSITY_NONE = 0xFFFF


def parse_resource_id(value: str) -> int | None:
    """Return the resource ID of an ``@7F010000`` style value, or None for literals."""
    if not value.startswith("@"):
        return None
    try:
        res_id = int(value[1:].split(":")[-1], 16)
    except ValueError:
        return None
    return res_id or None


def _android_attribute(element, name: str) -> str:
    for key in (f"{{{ANDROID_NS}}}{name}", f"android:{name}", name):
        value = element.get(key)
        if value is not None:
            return value
    return ""


def parse_android_manifest(data: bytes) -> AndroidManifestFields:
    """Decode a binary AndroidManifest.xml and read its identity fields.

    Args:
        data: Raw bytes of the AndroidManifest.xml entry.

    Returns:
        Fields of the root <manifest> and its <application> element.

    Raises:
        MalformedBinaryFormatError: If the document is corrupt or has no
            ``package`` attribute.
    """
    try:
        root = AXMLPrinter(data).get_xml_obj()
    except Exception as exc:
        raise MalformedBinaryFormatError(
            f"Cannot decode binary manifest: {exc}"
        ) from exc

    if root is None:
        raise MalformedBinaryFormatError("Binary manifest has no root element")
    if root.tag != "manifest":
        logger.warning("Unexpected manifest root element <%s>", root.tag)

    package = root.get("package") or ""
    if not package:
        raise MalformedBinaryFormatError("Manifest has no package attribute")

    application = root.find("application")
    label_ref = icon_ref = ""
    if application is not None:
        label_ref = _android_attribute(application, "label")
        icon_ref = _android_attribute(application, "icon")

    return AndroidManifestFields(
        package=package,
        version_name=_android_attribute(root, "versionName"),
        version_code=_android_attribute(root, "versionCode"),
        label_ref=label_ref,
        icon_ref=icon_ref,
    )


def load_resource_table(zip_file: ZipFile) -> ARSCParser | None:
    """Parse resources.arsc from an open APK, or None if it is absent or corrupt."""
    try:
        data = read_entry(zip_file, RESOURCE_TABLE_NAME)
    except KeyError:
        logger.debug("APK has no %s", RESOURCE_TABLE_NAME)
        return None
    except MalformedArchiveError as exc:
        logger.warning("%s", exc)
        return None

    try:
        return ARSCParser(data)
    except Exception as exc:
        logger.warning("Cannot decode %s: %s", RESOURCE_TABLE_NAME, exc)
        return None


def _is_better_density(this: int, other: int, requested: int) -> bool:
    # ResTable_config::isBetterThan: scaling down is preferred to scaling up.
    # anydpi and nodpi rank last since they usually hold XML drawables.
    if this == other:
        return False
    this_special = this in (DENSITY_ANY, DENSITY_NONE)
    other_special = other in (DENSITY_ANY, DENSITY_NONE)
    if this_special != other_special:
        return other_special
    if this_special:
        return False

    this = this or DENSITY_MEDIUM
    other = other or DENSITY_MEDIUM
    if requested in (DENSITY_DEFAULT, DENSITY_ANY):
        requested = DENSITY_MEDIUM

    high, low, i_am_bigger = this, other, True
    if low > high:
        high, low, i_am_bigger = low, high, False
    if requested >= high:
        return i_am_bigger
    if low >= requested:
        return not i_am_bigger
    if (2 * low - requested) * high > requested * requested:
        return not i_am_bigger
    return i_am_bigger


def rank_candidates(candidates: list[tuple], density: int) -> list[tuple]:
    """Order ``(config, value)`` pairs from best to worst match.

    The default locale comes first, then the density closest to ``density``.
    """

    def compare(a, b) -> int:
        a_locale, b_locale = a[0].locale != 0, b[0].locale != 0
        if a_locale != b_locale:
            return 1 if a_locale else -1
        a_density, b_density = a[0].get_density(), b[0].get_density()
        if _is_better_density(a_density, b_density, density):
            return -1
        if _is_better_density(b_density, a_density, density):
            return 1
        return 0

    return sorted(candidates, key=functools.cmp_to_key(compare))


def _resolve(table: ARSCParser, res_id: int, density: int) -> list[tuple]:
    return rank_candidates(table.get_resolved_res_configs(res_id), density)


def resolve_label(table: ARSCParser | None, label_ref: str, density: int) -> str:
    """Resolve ``android:label`` to text; failures yield an empty string."""
    res_id = parse_resource_id(label_ref)
    if res_id is None:
        return label_ref
    if table is None:
        logger.warning("Cannot resolve label %s without a resource table", label_ref)
        return ""

    try:
        candidates = _resolve(table, res_id, density)
    except Exception as exc:
        logger.warning("Cannot resolve label %s: %s", label_ref, exc)
        return ""

    for _, value in candidates:
        if isinstance(value, str):
            return value
    logger.warning("Label %s has no string value", label_ref)
    return ""


def _icon_paths(table: ARSCParser | None, icon_ref: str, density: int) -> list[str]:
    res_id = parse_resource_id(icon_ref)
    if res_id is None:
        return [icon_ref] if icon_ref else []
    if table is None:
        raise NoIconError(f"Cannot resolve icon {icon_ref}: APK has no resource table")

    try:
        candidates = _resolve(table, res_id, density)
    except Exception as exc:
        raise NoIconError(f"Cannot resolve icon {icon_ref}: {exc}") from exc

    paths = []
    for config, value in candidates:
        if isinstance(value, str) and value:
            logger.debug("Icon candidate %s (density %d)", value, config.get_density())
            paths.append(value)
    return paths


def resolve_icon(
    zip_file: ZipFile,
    table: ARSCParser | None,
    icon_ref: str,
    density: int,
) -> Image.Image:
    """Load the launcher icon bitmap best matching ``density``.

    Candidates are tried in preference order; XML drawables (vectors,
    adaptive icons) are skipped since they cannot be rendered here.

    Raises:
        NoIconError: If the manifest declares no icon or no candidate decodes.
    """
    if not icon_ref:
        raise NoIconError("Manifest declares no application icon")

    for path in _icon_paths(table, icon_ref, density):
        if not path.lower().endswith(BITMAP_SUFFIXES):
            logger.debug("Skipping non-bitmap icon %s", path)
            continue
        try:
            data = read_entry(zip_file, path)
        except KeyError:
            logger.debug("Icon %s is not in the archive", path)
            continue
        except MalformedArchiveError as exc:
            logger.warning("%s", exc)
            continue

        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except IMAGE_ERRORS as exc:
            logger.warning("Cannot decode icon %s: %s", path, exc)
            continue
        return image

    raise NoIconError(f"No bitmap icon found for {icon_ref}")
