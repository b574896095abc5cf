"""Pydantic models for the iTunes lookup API payload."""

from pydantic import BaseModel, ConfigDict, Field


class LookupResult(BaseModel):
    """A single app entry of a lookup response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    track_view_url: str = Field(default="", alias="trackViewUrl")
    """Canonical App Store page of the app."""

    artist_view_url: str = Field(default="", alias="artistViewUrl")
    artwork_url_60: str = Field(default="", alias="artworkUrl60")
    artwork_url_100: str = Field(default="", alias="artworkUrl100")
    artwork_url_512: str = Field(default="", alias="artworkUrl512")
    screenshot_urls: list[str] = Field(default_factory=list, alias="screenshotUrls")
    ipad_screenshot_urls: list[str] = Field(
        default_factory=list, alias="ipadScreenshotUrls"
    )
    appletv_screenshot_urls: list[str] = Field(
        default_factory=list, alias="appletvScreenshotUrls"
    )
    supported_devices: list[str] = Field(default_factory=list, alias="supportedDevices")
    language_codes: list[str] = Field(default_factory=list, alias="languageCodesISO2A")


class Lookup(BaseModel):
    """Response of ``https://itunes.apple.com/lookup?bundleId=...``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    result_count: int = Field(default=0, alias="resultCount")
    results: list[LookupResult] = Field(default_factory=list)
