"""Primary geocoder: Nominatim search API.

Two query modes against ``GET /search``:

- **free-form** -- one ``q`` string, optional ``countrycodes`` filter;
- **structured** -- ``street`` / ``city`` / ``state`` / ``postalcode`` /
  ``country`` fields, used for US addresses whose components are known.

Both request ``format=jsonv2``, ``addressdetails=1`` and ``limit=5`` and send
the configured ``User-Agent`` as required by the Nominatim usage policy.

Every call goes through the caller's :class:`~app.geocoding.pacing.Pacer`
(one request per ``NOMINATIM_INTERVAL_MS``).  Failures never raise past this
client: they come back as :class:`~app.geocoding.results.ProviderError`.

Safety rule: raw address text is never logged.
"""
from __future__ import annotations

import logging

import httpx

from app.core.settings import get_settings
from app.geocoding.pacing import Pacer
from app.geocoding.results import (
    GeocodeMatch,
    MatchLevel,
    NotFound,
    ProviderError,
    ProviderResult,
    parse_coordinate,
)
from app.normalization.address_normalizer import USAddressParts

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 5

_HOUSE_TYPES = frozenset({"house", "building", "residential", "address"})
_STREET_TYPES = frozenset({"road", "street", "service", "primary", "secondary", "tertiary"})
_LOCALITY_TYPES = frozenset({
    "suburb", "neighbourhood", "hamlet", "quarter",
    "city", "town", "village", "municipality", "county", "district",
})


def match_level_from_place_type(place_type: str | None) -> MatchLevel:
    """Map a Nominatim ``type`` string onto a coarse match level."""
    t = (place_type or "").strip().lower()
    if t in _HOUSE_TYPES:
        return "house"
    if t in _STREET_TYPES:
        return "street"
    if t in _LOCALITY_TYPES:
        return "locality"
    return "unknown"


def _match_from_candidates(candidates: list) -> ProviderResult:
    best = candidates[0] if isinstance(candidates[0], dict) else {}
    lat = parse_coordinate(best.get("lat"))
    lon = parse_coordinate(best.get("lon"))
    address = best.get("address") or {}
    postal = address.get("postcode") if isinstance(address, dict) else None

    return GeocodeMatch(
        match_level=match_level_from_place_type(best.get("type") or best.get("addresstype")),
        reverse_ok=lat is not None and lon is not None,
        candidates=len(candidates),
        lat=lat,
        lon=lon,
        postal_code=str(postal).strip() if postal else None,
    )


class NominatimClient:
    """Synchronous client for the Nominatim ``/search`` endpoint.

    Parameters
    ----------
    base_url:
        Nominatim base URL.  Defaults to ``settings.nominatim_url``.
    user_agent:
        Identifying ``User-Agent`` header.  Defaults to
        ``settings.nominatim_user_agent``.
    timeout_s:
        Request timeout in seconds.  Defaults to
        ``settings.geocoder_timeout_s``.
    """

    name = "nominatim"

    def __init__(
        self,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout_s = timeout_s if timeout_s is not None else settings.geocoder_timeout_s

    # -- public API ---------------------------------------------------------

    def search_free(
        self,
        query: str,
        *,
        country: str | None = None,
        pacer: Pacer | None = None,
    ) -> ProviderResult:
        """Free-form search for *query*, filtered to *country* when given."""
        params: dict[str, str] = {
            "format": "jsonv2",
            "addressdetails": "1",
            "limit": str(SEARCH_LIMIT),
            "q": query,
        }
        if country:
            params["countrycodes"] = country.lower()
        return self._search(params, mode="free-form", pacer=pacer)

    def search_structured(
        self,
        parts: USAddressParts,
        *,
        country: str = "US",
        pacer: Pacer | None = None,
    ) -> ProviderResult:
        """Structured search using separately labelled address fields."""
        params: dict[str, str] = {
            "format": "jsonv2",
            "addressdetails": "1",
            "limit": str(SEARCH_LIMIT),
            "street": parts.street,
            "city": parts.city,
            "state": parts.state,
            "postalcode": parts.postalcode or "",
            "country": country,
        }
        return self._search(params, mode="structured", pacer=pacer)

    # -- internals ----------------------------------------------------------

    def _search(
        self,
        params: dict[str, str],
        *,
        mode: str,
        pacer: Pacer | None,
    ) -> ProviderResult:
        if pacer is not None:
            pacer.wait()

        logger.debug(
            "nominatim %s search country=%s fields=%s",
            mode,
            params.get("countrycodes") or params.get("country") or "-",
            ",".join(sorted(k for k in params if k not in {"format", "addressdetails", "limit"})),
        )

        try:
            response = httpx.get(
                f"{self.base_url}/search",
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("nominatim %s search failed: HTTP %d", mode, exc.response.status_code)
            return ProviderError(f"nominatim_error:HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.warning("nominatim %s search failed: %s", mode, type(exc).__name__)
            return ProviderError(f"nominatim_error:{str(exc) or type(exc).__name__}")
        except ValueError:
            logger.warning("nominatim %s search returned a non-JSON body", mode)
            return ProviderError("nominatim_error:invalid JSON")

        if not isinstance(data, list) or not data:
            return NotFound()

        return _match_from_candidates(data)
