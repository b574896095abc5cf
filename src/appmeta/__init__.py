"""appmeta - read name, version, bundle ID and icon from APK and IPA packages."""

from appmeta.core.extractor import extract
from appmeta.exceptions import (
    AppMetaError,
    MalformedArchiveError,
    MalformedBinaryFormatError,
    ManifestMissingError,
    NoIconError,
    PlistMissingError,
    PngDecodeError,
    StoreLookupError,
    UnknownPlatformError,
)
from appmeta.models.app import AppInfo, Platform

__version__ = "0.1.0"

__all__ = [
    "AppInfo",
    "AppMetaError",
    "MalformedArchiveError",
    "MalformedBinaryFormatError",
    "ManifestMissingError",
    "NoIconError",
    "Platform",
    "PlistMissingError",
    "PngDecodeError",
    "StoreLookupError",
    "UnknownPlatformError",
    "extract",
    "__version__",
]
