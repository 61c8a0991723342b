"""Geocoding provider clients.

Both providers wrap a geopy geocoder. geopy handles the HTTP transport and
the error taxonomy (``GeocoderQuotaExceeded``, ``GeocoderAuthenticationFailure``,
``GeocoderTimedOut``, ``GeocoderUnavailable``), all of which subclass
``GeocoderServiceError`` and propagate unchanged. The ``parse_*`` functions
turn each location's ``.raw`` payload into ``GeocodeResult`` /
``ReverseGeocodeResult`` so the resolution pipeline never sees
provider-specific shapes.

geopy geocoders are synchronous here and run in a worker thread. Providers
do not validate coordinates and do not retry; the geocoding service does the
former and the injected executor the latter.
"""

import asyncio
from typing import Any, Optional

from geopy.geocoders import GoogleV3, Nominatim
from geopy.location import Location

from georesolver.core.errors import NotFoundError, ProviderError
from georesolver.core.geocoding.constants import (
    GOOGLE_LOCATION_TYPE_ACCURACY,
    NOMINATIM_HIGH_ACCURACY,
    NOMINATIM_MEDIUM_ACCURACY,
)
from georesolver.models.geographic import (
    AddressComponents,
    BoundingBox,
    Coordinates,
    GeocodeResult,
    ReverseAddressComponents,
    ReverseGeocodeResult,
)

GOOGLE = "google"
NOMINATIM = "nominatim"


def _raw(provider: str, location: Optional[Location], query: str) -> dict[str, Any]:
    if location is None:
        raise NotFoundError(provider, query)
    return location.raw


# --- Google -----------------------------------------------------------------


def google_accuracy(location_type: Optional[str]) -> str:
    return GOOGLE_LOCATION_TYPE_ACCURACY.get(location_type or "", "low")


def _google_components(address_components: list[dict[str, Any]]) -> dict[str, str]:
    found: dict[str, str] = {}
    type_map = {
        "street_number": "street_number",
        "route": "route",
        "locality": "locality",
        "administrative_area_level_1": "admin_area",
        "country": "country",
        "postal_code": "postal_code",
    }
    for component in address_components or []:
        for google_type, field in type_map.items():
            if google_type in component.get("types", []):
                found.setdefault(field, component.get("long_name"))
                break
    return found


def parse_google_result(raw: dict[str, Any]) -> GeocodeResult:
    """Convert one Google result (``Location.raw``)."""
    try:
        geometry = raw["geometry"]
        location = geometry["location"]
        coordinates = Coordinates(lat=location["lat"], lng=location["lng"])

        bounding_box = None
        bounds = geometry.get("bounds")
        if bounds:
            bounding_box = BoundingBox(
                northeast=Coordinates(
                    lat=bounds["northeast"]["lat"], lng=bounds["northeast"]["lng"]
                ),
                southwest=Coordinates(
                    lat=bounds["southwest"]["lat"], lng=bounds["southwest"]["lng"]
                ),
            )

        components = _google_components(raw.get("address_components", []))
        return GeocodeResult(
            coordinates=coordinates,
            formatted_address=raw.get("formatted_address", ""),
            place_id=raw.get("place_id"),
            accuracy=google_accuracy(geometry.get("location_type")),
            source=GOOGLE,
            components=AddressComponents(
                country=components.get("country"),
                admin_area=components.get("admin_area"),
                locality=components.get("locality"),
                postal_code=components.get("postal_code"),
            ),
            bounding_box=bounding_box,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(GOOGLE, "parse", f"unexpected result shape: {e}") from e


def parse_google_reverse(
    raw: dict[str, Any], coordinates: Coordinates
) -> ReverseGeocodeResult:
    components = _google_components(raw.get("address_components", []))
    return ReverseGeocodeResult(
        address=raw.get("formatted_address", ""),
        coordinates=coordinates,
        accuracy=google_accuracy(raw.get("geometry", {}).get("location_type")),
        source=GOOGLE,
        components=ReverseAddressComponents(**components),
    )


class GoogleGeocoder:
    """Primary provider: Google Geocoding API (requires an API key)."""

    name = GOOGLE

    def __init__(
        self,
        api_key: str,
        timeout: float,
        domain: str = "maps.googleapis.com",
        geocoder: Optional[GoogleV3] = None,
    ):
        self.geocoder = (
            geocoder
            if geocoder is not None
            else GoogleV3(api_key=api_key, domain=domain, timeout=timeout)
        )

    async def geocode(self, address: str) -> GeocodeResult:
        location = await asyncio.to_thread(
            self.geocoder.geocode, address, exactly_one=True
        )
        return parse_google_result(_raw(GOOGLE, location, address))

    async def reverse(self, coordinates: Coordinates) -> ReverseGeocodeResult:
        location = await asyncio.to_thread(
            self.geocoder.reverse,
            (coordinates.lat, coordinates.lng),
            exactly_one=True,
        )
        query = f"{coordinates.lat},{coordinates.lng}"
        return parse_google_reverse(_raw(GOOGLE, location, query), coordinates)


# --- Nominatim --------------------------------------------------------------


def nominatim_accuracy(osm_class: Optional[str], osm_type: Optional[str]) -> str:
    if (
        osm_class in NOMINATIM_HIGH_ACCURACY["class"]
        or osm_type in NOMINATIM_HIGH_ACCURACY["type"]
    ):
        return "high"
    if (
        osm_class in NOMINATIM_MEDIUM_ACCURACY["class"]
        or osm_type in NOMINATIM_MEDIUM_ACCURACY["type"]
    ):
        return "medium"
    return "low"


def _nominatim_locality(address: dict[str, Any]) -> Optional[str]:
    return address.get("city") or address.get("town") or address.get("village")


def parse_nominatim_result(raw: dict[str, Any]) -> GeocodeResult:
    """Convert one Nominatim ``/search`` entry (``Location.raw``)."""
    try:
        coordinates = Coordinates(lat=float(raw["lat"]), lng=float(raw["lon"]))

        bounding_box = None
        bbox = raw.get("boundingbox")
        if bbox and len(bbox) == 4:
            # Nominatim order: [south, north, west, east]
            bounding_box = BoundingBox(
                northeast=Coordinates(lat=float(bbox[1]), lng=float(bbox[3])),
                southwest=Coordinates(lat=float(bbox[0]), lng=float(bbox[2])),
            )

        address = raw.get("address") or {}
        return GeocodeResult(
            coordinates=coordinates,
            formatted_address=raw.get("display_name", ""),
            place_id=str(raw["place_id"]) if raw.get("place_id") is not None else None,
            accuracy=nominatim_accuracy(raw.get("class"), raw.get("type")),
            source=NOMINATIM,
            components=AddressComponents(
                country=address.get("country"),
                admin_area=address.get("state") or address.get("region"),
                locality=_nominatim_locality(address),
                postal_code=address.get("postcode"),
            ),
            bounding_box=bounding_box,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(NOMINATIM, "parse", f"unexpected result shape: {e}") from e


def parse_nominatim_reverse(
    raw: dict[str, Any], coordinates: Coordinates
) -> ReverseGeocodeResult:
    address = raw.get("address") or {}
    return ReverseGeocodeResult(
        address=raw.get("display_name", ""),
        coordinates=coordinates,
        accuracy=nominatim_accuracy(raw.get("class"), raw.get("type")),
        source=NOMINATIM,
        components=ReverseAddressComponents(
            street_number=address.get("house_number"),
            route=address.get("road") or address.get("street"),
            locality=_nominatim_locality(address),
            admin_area=address.get("state") or address.get("region"),
            country=address.get("country"),
            postal_code=address.get("postcode"),
        ),
    )


class NominatimGeocoder:
    """Secondary provider: OpenStreetMap Nominatim (no key, slower)."""

    name = NOMINATIM

    def __init__(
        self,
        user_agent: str,
        timeout: float,
        domain: str = "nominatim.openstreetmap.org",
        geocoder: Optional[Nominatim] = None,
    ):
        self.geocoder = (
            geocoder
            if geocoder is not None
            else Nominatim(user_agent=user_agent, domain=domain, timeout=timeout)
        )

    async def geocode(self, address: str) -> GeocodeResult:
        location = await asyncio.to_thread(
            self.geocoder.geocode, address, exactly_one=True, addressdetails=True
        )
        return parse_nominatim_result(_raw(NOMINATIM, location, address))

    async def reverse(self, coordinates: Coordinates) -> ReverseGeocodeResult:
        location = await asyncio.to_thread(
            self.geocoder.reverse,
            (coordinates.lat, coordinates.lng),
            exactly_one=True,
            addressdetails=True,
        )
        query = f"{coordinates.lat},{coordinates.lng}"
        return parse_nominatim_reverse(_raw(NOMINATIM, location, query), coordinates)
