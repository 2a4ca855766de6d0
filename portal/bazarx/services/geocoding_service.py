"""
Geocoding Service

Google Geocoding first, OpenCage as the fallback. Lookups never fail the
request: any error leaves the fields blank for the user to fill in.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from bazarx.config import settings
from bazarx.schemas.address import GeocodedAddress

logger = logging.getLogger(__name__)

# Google address component type -> our field
GOOGLE_COMPONENTS = {
    "sublocality_level_1": "area",
    "locality": "city",
    "administrative_area_level_1": "state",
    "country": "country",
    "postal_code": "pincode",
}


def _results(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    results = data.get("results")
    if not isinstance(results, list):
        return []
    return [r for r in results if isinstance(r, dict)]


def parse_google_result(result: Dict[str, Any]) -> GeocodedAddress:
    fields: Dict[str, Any] = {}
    for comp in result.get("address_components") or []:
        if not isinstance(comp, dict):
            continue
        for kind in comp.get("types") or []:
            name = GOOGLE_COMPONENTS.get(kind)
            if name:
                fields[name] = comp.get("long_name") or ""
    location = (result.get("geometry") or {}).get("location") or {}
    return GeocodedAddress(
        formatted_address=result.get("formatted_address") or "",
        lat=location.get("lat"),
        lng=location.get("lng"),
        **fields,
    )


def parse_opencage_result(result: Dict[str, Any]) -> GeocodedAddress:
    comp = result.get("components") or {}
    geometry = result.get("geometry") or {}
    return GeocodedAddress(
        area=comp.get("suburb") or comp.get("neighbourhood") or "",
        city=comp.get("city") or comp.get("town") or comp.get("village") or "",
        state=comp.get("state") or "",
        country=comp.get("country") or "",
        pincode=comp.get("postcode") or "",
        formatted_address=result.get("formatted") or "",
        lat=geometry.get("lat"),
        lng=geometry.get("lng"),
    )


class GeocodingService:

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: Optional[float] = None):
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS

    async def _get_json(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected geocoding response: {type(data).__name__}")
        return data

    async def _google(self, params: Dict[str, str]) -> Optional[List[Dict[str, Any]]]:
        if not settings.GOOGLE_MAPS_API_KEY:
            return None
        data = await self._get_json(settings.GOOGLE_GEOCODE_URL, {**params, "key": settings.GOOGLE_MAPS_API_KEY})
        results = _results(data)
        if data.get("status") == "OK" and results:
            return results
        logger.debug("Google geocoding returned status %s", data.get("status"))
        return None

    async def _opencage(self, query: str) -> Optional[List[Dict[str, Any]]]:
        if not settings.OPENCAGE_API_KEY:
            return None
        data = await self._get_json(settings.OPENCAGE_GEOCODE_URL, {"q": query, "key": settings.OPENCAGE_API_KEY})
        return _results(data) or None

    async def _lookup(self, google_params: Dict[str, str], opencage_query: str) -> Optional[GeocodedAddress]:
        try:
            results = await self._google(google_params)
            if results:
                return parse_google_result(results[0])
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Google geocoding failed: %s", exc)

        try:
            results = await self._opencage(opencage_query)
            if results:
                return parse_opencage_result(results[0])
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("OpenCage geocoding failed: %s", exc)
        return None

    async def reverse_geocode(self, lat: float, lng: float) -> GeocodedAddress:
        """
        Resolve a map position to address fields

        Args:
            lat: latitude of the marker
            lng: longitude of the marker

        Returns:
            GeocodedAddress carrying the given coordinates; fields are blank when
            neither provider answered
        """
        found = await self._lookup({"latlng": f"{lat},{lng}"}, f"{lat}+{lng}")
        if found is None:
            return GeocodedAddress(lat=lat, lng=lng)
        return found.model_copy(update={"lat": lat, "lng": lng})

    async def forward_geocode(self, query: str) -> GeocodedAddress:
        """Resolve a typed place to coordinates and address fields."""
        found = await self._lookup({"address": query}, query)
        return found or GeocodedAddress()


def get_geocoding_service() -> GeocodingService:
    return GeocodingService()
