"""Typed exception hierarchy for appmeta."""

from pathlib import Path


class AppMetaError(Exception):
    """Base exception for all appmeta errors."""

    pass


class UnknownPlatformError(AppMetaError):
    """Raised when a package path has neither an .apk nor an .ipa extension."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(
            f"Unknown platform for {self.path.name!r} "
            "(expected .apk or .ipa extension)"
        )


class ManifestMissingError(AppMetaError):
    """Raised when an APK has no AndroidManifest.xml entry."""

    pass


class PlistMissingError(AppMetaError):
    """Raised when an IPA has no Payload/<app>/Info.plist entry."""

    pass


class MalformedArchiveError(AppMetaError):
    """Raised when the package cannot be opened as a ZIP or an entry cannot be read."""

    pass


class MalformedBinaryFormatError(AppMetaError):
    """Raised when binary XML, a resource table or a property list is corrupt."""

    pass


class NoIconError(AppMetaError):
    """Raised when a package carries no usable icon.

    Extraction treats this as a soft failure: metadata is still returned with
    ``icon`` unset and the reason recorded on the result.
    """

    pass


class PngDecodeError(NoIconError):
    """Raised when an icon PNG cannot be reconstructed or decoded."""

    pass


class StoreLookupError(AppMetaError):
    """Raised when the App Store lookup request or its payload fails."""

    def __init__(self, bundle_id: str, reason: str):
        self.bundle_id = bundle_id
        self.reason = reason
        super().__init__(f"App Store lookup failed for {bundle_id}: {reason}")
