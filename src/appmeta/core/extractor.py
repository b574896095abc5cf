"""Package metadata extraction: dispatch by platform and merge the results."""

import logging
from pathlib import Path
from zipfile import BadZipFile, ZipFile

from PIL import Image

from appmeta.core.android import (
    load_resource_table,
    parse_android_manifest,
    resolve_icon,
    resolve_label,
)
from appmeta.core.ios import parse_info_plist, parse_ipa_icon
from appmeta.core.scanner import ArchiveEntries, scan_archive
from appmeta.exceptions import (
    MalformedArchiveError,
    ManifestMissingError,
    NoIconError,
    PlistMissingError,
)
from appmeta.models.app import AppInfo, Platform
from appmeta.utils.archive import (
    detect_platform,
    read_entry,
    validate_package_path,
)
from appmeta.utils.config import DEFAULTS, get_config_value

logger = logging.getLogger(__name__)


def _configured_density() -> int:
    value = get_config_value("icon_density")
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid icon_density %r in configuration", value)
        return DEFAULTS["icon_density"]


class PackageExtractor:
    """Extract metadata from one APK or IPA file."""

    def __init__(self, path: str | Path, density: int | None = None):
        """Initialize package extractor.

        Args:
            path: Path to the .apk or .ipa file.
            density: Screen density (dpi) to prefer for Android icons.
                Defaults to the ``icon_density`` configuration value.
        """
        self.path = Path(path)
        self.density = density if density is not None else _configured_density()

    def extract(self, strict_icon: bool = False) -> AppInfo:
        """Extract metadata from the package.

        Args:
            strict_icon: If True, raise NoIconError instead of returning a
                result without icon.

        Returns:
            AppInfo with every field populated except possibly ``icon``.

        Raises:
            UnknownPlatformError: If the extension is not .apk or .ipa.
            MalformedArchiveError: If the file is not a readable ZIP.
            ManifestMissingError: If an APK has no AndroidManifest.xml.
            PlistMissingError: If an IPA has no Payload/<app>/Info.plist.
            MalformedBinaryFormatError: If the manifest or plist is corrupt.
            NoIconError: If ``strict_icon`` is set and no icon was decoded.
        """
        platform = detect_platform(self.path)
        validate_package_path(self.path, require_zip_header=True)

        try:
            size = self.path.stat().st_size
            zip_file = ZipFile(self.path)
        except (OSError, BadZipFile) as exc:
            raise MalformedArchiveError(
                f"Cannot open {self.path} as ZIP: {exc}"
            ) from exc

        with zip_file:
            entries = scan_archive(zip_file)
            if platform is Platform.ANDROID:
                info, icon_error = self._extract_android(zip_file, entries)
            else:
                info, icon_error = self._extract_ios(zip_file, entries)

        info.size = size
        if icon_error is not None:
            logger.info("%s: %s", self.path.name, icon_error)
            if strict_icon:
                raise icon_error
        return info

    def _extract_android(
        self, zip_file: ZipFile, entries: ArchiveEntries
    ) -> tuple[AppInfo, NoIconError | None]:
        if entries.manifest is None:
            raise ManifestMissingError(
                f"AndroidManifest.xml not found in {self.path.name}"
            )

        manifest = parse_android_manifest(read_entry(zip_file, entries.manifest))
        table = load_resource_table(zip_file)
        label = resolve_label(table, manifest.label_ref, self.density)

        icon: Image.Image | None = None
        icon_error: NoIconError | None = None
        try:
            icon = resolve_icon(zip_file, table, manifest.icon_ref, self.density)
        except NoIconError as exc:
            icon_error = exc

        info = AppInfo(
            platform=Platform.ANDROID,
            name=label,
            bundle_id=manifest.package,
            version=manifest.version_name,
            build=manifest.version_code,
            icon=icon,
            icon_error=str(icon_error) if icon_error else None,
        )
        return info, icon_error

    def _extract_ios(
        self, zip_file: ZipFile, entries: ArchiveEntries
    ) -> tuple[AppInfo, NoIconError | None]:
        if entries.plist is None:
            raise PlistMissingError(
                f"Payload/*/Info.plist not found in {self.path.name}"
            )

        plist = parse_info_plist(read_entry(zip_file, entries.plist))

        icon: Image.Image | None = None
        icon_error: NoIconError | None = None
        try:
            icon_data = read_entry(zip_file, entries.icon) if entries.icon else None
            icon = parse_ipa_icon(icon_data)
        except NoIconError as exc:
            icon_error = exc
        except MalformedArchiveError as exc:
            icon_error = NoIconError(str(exc))

        info = AppInfo(
            platform=Platform.IOS,
            name=plist.display_name,
            bundle_id=plist.bundle_identifier,
            version=plist.bundle_short_version,
            build=plist.bundle_version,
            icon=icon,
            icon_error=str(icon_error) if icon_error else None,
        )
        return info, icon_error


def extract(
    path: str | Path,
    *,
    density: int | None = None,
    strict_icon: bool = False,
) -> AppInfo:
    """Extract metadata from an .apk or .ipa file.

    See ``PackageExtractor.extract`` for the raised errors.
    """
    return PackageExtractor(path, density=density).extract(strict_icon=strict_icon)
