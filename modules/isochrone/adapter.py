import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import requests

from core.exceptions import NetworkFetchError

from .schemas import TransportMode

logger = logging.getLogger(__name__)

# (lat, lng, radius_m, mode) -> raw Overpass elements
NetworkFetcher = Callable[[float, float, float, TransportMode], Awaitable[List[Dict[str, Any]]]]

METERS_PER_DEGREE = 111320.0
BBOX_FACTOR = 1.5

MODE_WAY_FILTER: Dict[str, str] = {
    "walking": '["highway"]["footway"!~"no"]["access"!~"private"]',
    "cycling": '["highway"]["bicycle"!~"no"]["access"!~"private"]',
    "driving": '["highway"]["motorcar"!~"no"]["access"!~"private"]',
}


def radius_to_bbox(lat: float, lng: float, radius_m: float) -> Tuple[float, float, float, float]:
    """(south, west, north, east) around the point. Degrees are not projection-corrected."""
    delta = (radius_m / METERS_PER_DEGREE) * BBOX_FACTOR
    return lat - delta, lng - delta, lat + delta, lng + delta


def build_overpass_query(lat: float, lng: float, radius_m: float, mode: TransportMode) -> str:
    south, west, north, east = radius_to_bbox(lat, lng, radius_m)
    way_filter = MODE_WAY_FILTER.get(mode, '["highway"]')
    return f"""
[out:json][timeout:25];
(
  way{way_filter}({south:.7f},{west:.7f},{north:.7f},{east:.7f});
);
out body;
>;
out skel qt;
"""


class OverpassFetcher:
    """
    Fetch mode-filtered road network elements from an Overpass interpreter.

    Failures surface as NetworkFetchError; nothing is retried here.
    """

    def __init__(
        self,
        endpoint: str,
        timeout_s: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    async def __call__(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        mode: TransportMode,
    ) -> List[Dict[str, Any]]:
        query = build_overpass_query(lat, lng, radius_m, mode)
        logger.info(f"Requesting Overpass: {self.endpoint} | Mode: {mode} | Radius: {radius_m:.0f}m")
        return await asyncio.to_thread(self._post, query)

    def _post(self, query: str) -> List[Dict[str, Any]]:
        try:
            response = self.session.post(
                self.endpoint,
                data={"data": query},
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            logger.error(f"Overpass API connection failed: {exc}")
            raise NetworkFetchError("Road network service unreachable", original_error=str(exc)) from exc

        if response.status_code != 200:
            preview = (response.text or "").strip().replace("\n", " ")[:280]
            raise NetworkFetchError(
                f"Overpass API error (HTTP {response.status_code})",
                original_error=preview,
            )

        raw = (response.text or "").strip()
        if not raw:
            raise NetworkFetchError("Overpass API returned an empty body")
        if raw[:1] != "{":
            raise NetworkFetchError("Overpass API returned a non-JSON body", original_error=raw[:320])

        try:
            payload = response.json()
        except ValueError as exc:
            raise NetworkFetchError("Overpass API returned invalid JSON", original_error=str(exc)) from exc

        elements = payload.get("elements") or []
        logger.info(f"Overpass returned {len(elements)} elements")
        return elements
