"""Pydantic models for extracted package metadata."""

from enum import Enum

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Package platform, chosen by file extension."""

    ANDROID = "android"
    IOS = "ios"


class AppInfo(BaseModel):
    """Normalized metadata for one APK or IPA."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    platform: Platform
    """Platform the package targets."""

    name: str = ""
    """Human-readable display name."""

    bundle_id: str
    """Package name / bundle identifier (e.g., com.example.app)."""

    version: str = ""
    """User-facing version string (e.g., 1.2.0)."""

    build: str = ""
    """Internal build number (versionCode / CFBundleVersion)."""

    icon: Image.Image | None = Field(default=None, exclude=True)
    """Decoded icon bitmap, if one could be found."""

    icon_error: str | None = None
    """Why ``icon`` is unset."""

    size: int = 0
    """Package file size in bytes."""

    @property
    def has_icon(self) -> bool:
        """Check if an icon was decoded."""
        return self.icon is not None


class AndroidManifestFields(BaseModel):
    """Fields read from a binary AndroidManifest.xml."""

    package: str
    version_name: str = ""
    version_code: str = ""
    label_ref: str = ""
    """Raw ``android:label`` of <application>: a literal or ``@0x...`` reference."""

    icon_ref: str = ""
    """Raw ``android:icon`` of <application>."""


class IosPlistFields(BaseModel):
    """Fields read from an app bundle's Info.plist."""

    bundle_name: str = ""
    bundle_display_name: str = ""
    bundle_version: str = ""
    bundle_short_version: str = ""
    bundle_identifier: str = ""

    @property
    def display_name(self) -> str:
        """CFBundleDisplayName, falling back to CFBundleName."""
        return self.bundle_display_name or self.bundle_name


class IconCandidate(BaseModel):
    """An ``AppIcon`` archive entry and the resolution parsed from its name."""

    name: str
    score: int | None = None
