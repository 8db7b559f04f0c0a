"""Secondary geocoder: OpenCage forward geocoding.

Used as a keyed, paid fallback when the primary result is weak.  One query
mode: ``GET /geocode/v1/json?q=&key=&limit=3&no_annotations=1`` plus an
optional ``countrycode`` filter.  No pacing is applied.

A client cannot be built without an API key; :meth:`OpenCageClient.from_settings`
returns ``None`` when ``OPENCAGE_API_KEY`` is unset so callers can skip the
provider silently.

Safety rule: raw address text and the API key are never logged.
"""
from __future__ import annotations

import logging

import httpx

from app.core.settings import get_settings
from app.geocoding.results import (
    GeocodeMatch,
    MatchLevel,
    NotFound,
    ProviderError,
    ProviderResult,
    parse_coordinate,
)

logger = logging.getLogger(__name__)

GEOCODE_LIMIT = 3

_STREET_KEYS = ("road", "street", "pedestrian")
_LOCALITY_KEYS = ("suburb", "village", "town", "city", "county")


def match_level_from_components(components: dict) -> MatchLevel:
    """Derive a match level from OpenCage ``components``.

    house
        ``house_number`` together with ``road`` / ``street``, or a
        ``building`` / ``residential`` component.
    street
        Any of ``road``, ``street``, ``pedestrian``.
    locality
        Any of ``suburb``, ``village``, ``town``, ``city``, ``county``.
    """
    has_road = bool(components.get("road") or components.get("street"))
    if (components.get("house_number") and has_road) or components.get("building") or components.get("residential"):
        return "house"
    if any(components.get(key) for key in _STREET_KEYS):
        return "street"
    if any(components.get(key) for key in _LOCALITY_KEYS):
        return "locality"
    return "unknown"


class OpenCageClient:
    """Synchronous client for the OpenCage geocoding API.

    Parameters
    ----------
    api_key:
        OpenCage API key.  Required.
    base_url:
        Endpoint URL.  Defaults to ``settings.opencage_url``.
    timeout_s:
        Request timeout in seconds.  Defaults to
        ``settings.geocoder_timeout_s``.

    Raises
    ------
    ValueError
        If *api_key* is empty.
    """

    name = "opencage"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("OpenCage API key is required")
        settings = get_settings()
        self.api_key = api_key
        self.base_url = base_url or settings.opencage_url
        self.timeout_s = timeout_s if timeout_s is not None else settings.geocoder_timeout_s

    @classmethod
    def from_settings(cls) -> "OpenCageClient | None":
        """Return a configured client, or ``None`` when no key is provisioned."""
        key = (get_settings().opencage_api_key or "").strip()
        if not key:
            logger.info("OPENCAGE_API_KEY not set; secondary geocoder disabled")
            return None
        return cls(key)

    def geocode(self, query: str, *, country: str | None = None) -> ProviderResult:
        """Geocode *query*, filtered to *country* when given."""
        params: dict[str, str] = {
            "q": query,
            "key": self.api_key,
            "limit": str(GEOCODE_LIMIT),
            "no_annotations": "1",
        }
        if country:
            params["countrycode"] = country.lower()

        logger.debug("opencage geocode country=%s key=****", params.get("countrycode", "-"))

        try:
            response = httpx.get(self.base_url, params=params, timeout=self.timeout_s)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("opencage geocode failed: HTTP %d", exc.response.status_code)
            return ProviderError(f"OpenCage HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.warning("opencage geocode failed: %s", type(exc).__name__)
            return ProviderError(f"OpenCage {type(exc).__name__}")
        except ValueError:
            logger.warning("opencage geocode returned a non-JSON body")
            return ProviderError("OpenCage invalid JSON")

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results:
            return NotFound()

        best = results[0] if isinstance(results[0], dict) else {}
        components = best.get("components") or {}
        geometry = best.get("geometry") or {}
        lat = parse_coordinate(geometry.get("lat"))
        lon = parse_coordinate(geometry.get("lng"))
        postal = components.get("postcode") or components.get("postal_code")
        confidence = best.get("confidence")

        return GeocodeMatch(
            match_level=match_level_from_components(components),
            reverse_ok=lat is not None and lon is not None,
            candidates=len(results),
            lat=lat,
            lon=lon,
            postal_code=str(postal).strip() if postal else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
        )
