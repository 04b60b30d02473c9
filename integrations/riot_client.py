"""
Riot Data Dragon client.

Data Dragon is a static CDN: a version list, one item.json per patch
and locale, and one PNG per item icon. No API key is needed.
"""

from typing import Optional
import requests
import structlog

from config import settings
from models.item import RiotItemRecord
from exceptions import RiotAPIError

logger = structlog.get_logger(__name__)


class RiotClient:
    """Thin wrapper over Data Dragon's HTTP endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        locale: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.base_url = (base_url or settings.ddragon_base_url).rstrip("/")
        self.locale = locale or settings.ddragon_locale
        self.timeout = timeout or settings.request_timeout_seconds
        self.session = session or requests.Session()

    def _get(self, url: str) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            logger.error("riot_request_failed", url=url, error=str(e))
            raise RiotAPIError(f"Data Dragon request failed: {e}", url=url)

    def _get_json(self, url: str):
        response = self._get(url)
        try:
            return response.json()
        except ValueError as e:
            logger.error("riot_response_not_json", url=url, error=str(e))
            raise RiotAPIError(f"Data Dragon returned invalid JSON: {e}", url=url)

    # ===================
    # VERSIONS
    # ===================

    def get_versions(self) -> list[str]:
        """All published versions, newest first."""
        versions = self._get_json(f"{self.base_url}/api/versions.json")
        if not isinstance(versions, list):
            raise RiotAPIError("Unexpected versions payload", url=f"{self.base_url}/api/versions.json")
        return versions

    def get_latest_version(self) -> str:
        versions = self.get_versions()
        if not versions:
            raise RiotAPIError("Data Dragon returned no versions")
        return versions[0]

    # ===================
    # ITEMS
    # ===================

    def fetch_item_data(self, version: str, locale: Optional[str] = None) -> dict[str, RiotItemRecord]:
        """
        Fetch every item of a patch.

        Args:
            version: Patch version, e.g. "16.1.1"
            locale: Data locale, defaults to the configured one

        Returns:
            Records keyed by riot_id

        Raises:
            RiotAPIError: If the request fails or the payload has no data
        """
        locale = locale or self.locale
        url = f"{self.base_url}/cdn/{version}/data/{locale}/item.json"

        logger.info("fetching_item_data", version=version, locale=locale)

        payload = self._get_json(url)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise RiotAPIError("Item data payload has no data mapping", url=url)

        records = {
            riot_id: RiotItemRecord.from_riot(riot_id, item)
            for riot_id, item in data.items()
            if isinstance(item, dict)
        }

        logger.info("item_data_fetched", version=version, count=len(records))

        return records

    # ===================
    # IMAGES
    # ===================

    def get_item_image_url(self, version: str, riot_id: str) -> str:
        return f"{self.base_url}/cdn/{version}/img/item/{riot_id}.png"

    def fetch_image(self, url: str) -> bytes:
        """Download an icon."""
        return self._get(url).content


# Singleton instance for convenience
_riot_client: Optional[RiotClient] = None

def get_riot_client() -> RiotClient:
    """Get or create RiotClient instance."""
    global _riot_client
    if _riot_client is None:
        _riot_client = RiotClient()
    return _riot_client
