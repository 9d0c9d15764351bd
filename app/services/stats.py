"""
Client for the external statistics service.

Only two calls are used: recording an endpoint hit and reading view counts.
The service is optional; when it cannot be reached events keep their stored view count.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StatsClient:
    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None, session=None) -> None:
        self.base_url = (base_url or settings.STATS_SERVICE_URL).rstrip("/")
        self.timeout = timeout or settings.STATS_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def record_hit(self, app: str, uri: str, ip: str, timestamp: datetime) -> None:
        payload = {"app": app, "uri": uri, "ip": ip, "timestamp": timestamp.strftime(DATE_FORMAT)}
        response = self.session.post(f"{self.base_url}/hit", json=payload, timeout=self.timeout)
        response.raise_for_status()

    def get_views(
        self,
        uris: Sequence[str],
        start: datetime,
        end: datetime,
        unique: bool = True,
    ) -> dict[str, int]:
        """Return hits per uri; uris the service does not know are left out."""
        params = {
            "start": start.strftime(DATE_FORMAT),
            "end": end.strftime(DATE_FORMAT),
            "uris": list(uris),
            "unique": str(unique).lower(),
        }
        try:
            response = self.session.get(f"{self.base_url}/stats", params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Statistics service unavailable: {e}")
            return {}
        return {item["uri"]: int(item["hits"]) for item in response.json()}


def get_stats_client() -> StatsClient:
    return StatsClient()
