"""Package path validation, platform detection and archive entry reads."""

import zlib
from pathlib import Path
from zipfile import BadZipFile, ZipFile, ZipInfo

from appmeta.exceptions import MalformedArchiveError, UnknownPlatformError
from appmeta.models.app import Platform

# ZIP local file header magic (APKs and IPAs are ZIP files)
ZIP_FILE_HEADER = b"PK\x03\x04"

PLATFORM_EXTENSIONS: dict[str, Platform] = {
    ".apk": Platform.ANDROID,
    ".ipa": Platform.IOS,
}


def detect_platform(path: Path) -> Platform:
    """Map a package path to its platform by file extension.

    Raises:
        UnknownPlatformError: If the extension is neither .apk nor .ipa.
    """
    platform = PLATFORM_EXTENSIONS.get(path.suffix.lower())
    if platform is None:
        raise UnknownPlatformError(path)
    return platform


def validate_package_path(path: Path, *, require_zip_header: bool = False) -> None:
    """Validate that a package file path is valid.

    Performs the following checks:
    - File exists
    - Path is a file (not a directory)
    - Optionally: file starts with a ZIP local file header

    Args:
        path: Path to the package file to validate.
        require_zip_header: If True, also verify the file starts with ZIP header.

    Raises:
        MalformedArchiveError: If validation fails.
    """
    if not path.exists():
        raise MalformedArchiveError(f"Package not found: {path}")

    if not path.is_file():
        raise MalformedArchiveError(f"Not a file: {path}")

    if require_zip_header:
        try:
            with path.open("rb") as f:
                header = f.read(len(ZIP_FILE_HEADER))
        except OSError as e:
            raise MalformedArchiveError(f"Failed to read package header: {e}") from e

        if len(header) < len(ZIP_FILE_HEADER):
            raise MalformedArchiveError(f"File is too small to be a package: {path}")

        if header != ZIP_FILE_HEADER:
            raise MalformedArchiveError(
                f"Not a ZIP archive: {path} (header {header!r})"
            )


def read_entry(zip_file: ZipFile, entry: str | ZipInfo) -> bytes:
    """Read one archive entry fully.

    Raises:
        KeyError: If ``entry`` is a name that is not in the archive.
        MalformedArchiveError: If the entry is corrupt, encrypted or uses an
            unsupported compression method.
    """
    name = entry.filename if isinstance(entry, ZipInfo) else entry
    try:
        return zip_file.read(entry)
    except (BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError) as exc:
        raise MalformedArchiveError(f"Cannot read {name}: {exc}") from exc
