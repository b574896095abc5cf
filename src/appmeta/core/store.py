"""App Store lookup by bundle identifier and storefront URL rewriting."""

import logging
from urllib.parse import urlsplit, urlunsplit

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from appmeta.exceptions import StoreLookupError
from appmeta.models.store import Lookup
from appmeta.utils.config import get_config_value

logger = logging.getLogger(__name__)


class StoreURL(str):
    """An App Store page URL such as ``https://apps.apple.com/us/app/x/id1``."""

    def for_region(self, region: str) -> "StoreURL":
        """Return the URL for another storefront.

        The first path segment (the storefront code) is replaced by
        ``region``; query and fragment are kept. URLs without a storefront
        segment are returned unchanged.
        """
        try:
            parts = urlsplit(self)
        except ValueError:
            return StoreURL(self)

        segments = parts.path.strip().split("/")
        if len(segments) <= 2:
            return StoreURL(self)

        path = "/" + "/".join(s for s in [region, *segments[2:]] if s)
        return StoreURL(urlunsplit(parts._replace(path=path)))

    def cn(self) -> "StoreURL":
        """Return the URL for the China storefront."""
        return self.for_region("cn")


def create_session(retries: int | None = None) -> requests.Session:
    """Create an HTTP session retrying transient server errors."""
    session = requests.Session()
    retry = Retry(
        total=int(retries if retries is not None else get_config_value("http_retries")),
        backoff_factor=1,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def get_lookup(bundle_id: str, session: requests.Session | None = None) -> Lookup:
    """Query the iTunes lookup API for ``bundle_id``.

    Args:
        bundle_id: Bundle identifier of the app.
        session: Session to use; a retrying one is created (and closed) if None.

    Raises:
        StoreLookupError: On HTTP errors or an unexpected payload.
    """
    owned = session is None
    session = session or create_session()
    url = get_config_value("lookup_url")
    timeout = float(get_config_value("http_timeout"))

    try:
        response = session.get(url, params={"bundleId": bundle_id}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise StoreLookupError(bundle_id, str(exc)) from exc
    finally:
        if owned:
            session.close()

    try:
        return Lookup.model_validate(payload)
    except ValidationError as exc:
        raise StoreLookupError(bundle_id, f"unexpected payload: {exc}") from exc


def get_app_store_url(
    bundle_id: str, session: requests.Session | None = None
) -> StoreURL:
    """Return the App Store page of ``bundle_id``, or an empty URL if unknown."""
    try:
        lookup = get_lookup(bundle_id, session=session)
    except StoreLookupError as exc:
        logger.warning("%s", exc)
        return StoreURL("")

    if lookup.result_count > 0 and lookup.results:
        return StoreURL(lookup.results[0].track_view_url)
    return StoreURL("")
