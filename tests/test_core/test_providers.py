"""Tests for the Google and Nominatim provider clients."""

from unittest.mock import MagicMock

import pytest
from geopy.exc import (
    GeocoderAuthenticationFailure,
    GeocoderQuotaExceeded,
    GeocoderServiceError,
    GeocoderTimedOut,
    GeocoderUnavailable,
)
from geopy.geocoders import GoogleV3, Nominatim
from geopy.location import Location

from georesolver.core.errors import NotFoundError, ProviderError
from georesolver.core.geocoding.executor import DirectExecutor
from georesolver.core.geocoding.providers import (
    GoogleGeocoder,
    NominatimGeocoder,
    google_accuracy,
    nominatim_accuracy,
)
from georesolver.core.geocoding.service import GeocodingService
from georesolver.models.geographic import Coordinates

GOOGLE_RAW = {
    "formatted_address": "Champ de Mars, 5 Av. Anatole France, 75007 Paris, France",
    "place_id": "ChIJLU7jZClu5kcR4PcOOO6p3I0",
    "geometry": {
        "location": {"lat": 48.8583701, "lng": 2.2944813},
        "location_type": "ROOFTOP",
        "bounds": {
            "northeast": {"lat": 48.8597, "lng": 2.2958},
            "southwest": {"lat": 48.8570, "lng": 2.2931},
        },
    },
    "address_components": [
        {"long_name": "Paris", "types": ["locality", "political"]},
        {"long_name": "Île-de-France", "types": ["administrative_area_level_1"]},
        {"long_name": "France", "types": ["country", "political"]},
        {"long_name": "75007", "types": ["postal_code"]},
    ],
}

NOMINATIM_RAW = {
    "place_id": 12345,
    "lat": "48.8582602",
    "lon": "2.2944990",
    "display_name": "Tour Eiffel, Paris, Île-de-France, France",
    "class": "building",
    "type": "yes",
    "boundingbox": ["48.8574753", "48.8590465", "2.2933084", "2.2956897"],
    "address": {
        "city": "Paris",
        "state": "Île-de-France",
        "country": "France",
        "postcode": "75007",
    },
}

POINT = Coordinates(lat=48.8584, lng=2.2945)


def location_for(raw: dict, lat: float = 48.8584, lng: float = 2.2945) -> Location:
    return Location(raw.get("formatted_address", "somewhere"), (lat, lng), raw)


@pytest.fixture
def google_api():
    return MagicMock(spec=GoogleV3)


@pytest.fixture
def nominatim_api():
    return MagicMock(spec=Nominatim)


@pytest.fixture
def google_geocoder(google_api):
    return GoogleGeocoder(api_key="test-key", timeout=5, geocoder=google_api)


@pytest.fixture
def nominatim_geocoder(nominatim_api):
    return NominatimGeocoder(
        user_agent="georesolver-tests", timeout=10, geocoder=nominatim_api
    )


class TestGoogleGeocoder:
    def test_builds_geopy_client(self):
        geocoder = GoogleGeocoder(
            api_key="test-key", timeout=5, domain="maps.example.test"
        ).geocoder

        assert isinstance(geocoder, GoogleV3)
        assert geocoder.api_key == "test-key"
        assert geocoder.domain == "maps.example.test"
        assert geocoder.timeout == 5

    async def test_geocode_parses_result(self, google_geocoder, google_api):
        google_api.geocode.return_value = location_for(GOOGLE_RAW)

        result = await google_geocoder.geocode("Eiffel Tower")

        google_api.geocode.assert_called_once_with("Eiffel Tower", exactly_one=True)
        assert result.source == "google"
        assert result.accuracy == "high"
        assert result.coordinates == Coordinates(lat=48.8583701, lng=2.2944813)
        assert result.place_id == "ChIJLU7jZClu5kcR4PcOOO6p3I0"
        assert result.components.country == "France"
        assert result.components.locality == "Paris"
        assert result.components.admin_area == "Île-de-France"
        assert result.components.postal_code == "75007"
        assert result.bounding_box.northeast.lat == 48.8597

    async def test_zero_results(self, google_geocoder, google_api):
        google_api.geocode.return_value = None

        with pytest.raises(NotFoundError):
            await google_geocoder.geocode("Qwzxylocation9999")

    @pytest.mark.parametrize(
        "error",
        [
            GeocoderQuotaExceeded("OVER_QUERY_LIMIT"),
            GeocoderAuthenticationFailure("REQUEST_DENIED"),
            GeocoderTimedOut("Service timed out"),
            GeocoderUnavailable("Service not available"),
        ],
    )
    async def test_geopy_errors_propagate(self, google_geocoder, google_api, error):
        google_api.geocode.side_effect = error

        with pytest.raises(type(error)) as exc_info:
            await google_geocoder.geocode("Paris")

        assert isinstance(exc_info.value, GeocoderServiceError)

    async def test_unexpected_payload(self, google_geocoder, google_api):
        google_api.geocode.return_value = location_for({"formatted_address": "Paris"})

        with pytest.raises(ProviderError) as exc_info:
            await google_geocoder.geocode("Paris")

        assert exc_info.value.reason == "parse"
        assert exc_info.value.provider == "google"

    async def test_reverse(self, google_geocoder, google_api):
        google_api.reverse.return_value = location_for(GOOGLE_RAW)

        result = await google_geocoder.reverse(POINT)

        google_api.reverse.assert_called_once_with((48.8584, 2.2945), exactly_one=True)
        assert result.address.endswith("Paris, France")
        assert result.coordinates == POINT
        assert result.components.postal_code == "75007"

    async def test_reverse_without_result(self, google_geocoder, google_api):
        google_api.reverse.return_value = None

        with pytest.raises(NotFoundError):
            await google_geocoder.reverse(POINT)


class TestNominatimGeocoder:
    def test_builds_geopy_client(self):
        geocoder = NominatimGeocoder(
            user_agent="georesolver-tests", timeout=10, domain="nominatim.example.test"
        ).geocoder

        assert isinstance(geocoder, Nominatim)
        assert geocoder.domain == "nominatim.example.test"
        assert geocoder.headers["User-Agent"] == "georesolver-tests"

    async def test_geocode_parses_result(self, nominatim_geocoder, nominatim_api):
        nominatim_api.geocode.return_value = location_for(NOMINATIM_RAW)

        result = await nominatim_geocoder.geocode("Eiffel Tower")

        nominatim_api.geocode.assert_called_once_with(
            "Eiffel Tower", exactly_one=True, addressdetails=True
        )
        assert result.source == "nominatim"
        assert result.accuracy == "high"
        assert result.place_id == "12345"
        assert result.coordinates == Coordinates(lat=48.8582602, lng=2.294499)
        assert result.components.locality == "Paris"
        assert result.bounding_box.southwest == Coordinates(lat=48.8574753, lng=2.2933084)
        assert result.bounding_box.northeast == Coordinates(lat=48.8590465, lng=2.2956897)

    async def test_empty_result(self, nominatim_geocoder, nominatim_api):
        nominatim_api.geocode.return_value = None

        with pytest.raises(NotFoundError):
            await nominatim_geocoder.geocode("Qwzxylocation9999")

    async def test_reverse(self, nominatim_geocoder, nominatim_api):
        nominatim_api.reverse.return_value = location_for(
            {
                "display_name": "5, Avenue Anatole France, Paris, France",
                "class": "highway",
                "type": "residential",
                "address": {
                    "house_number": "5",
                    "road": "Avenue Anatole France",
                    "city": "Paris",
                    "country": "France",
                },
            }
        )

        result = await nominatim_geocoder.reverse(POINT)

        nominatim_api.reverse.assert_called_once_with(
            (48.8584, 2.2945), exactly_one=True, addressdetails=True
        )
        assert result.accuracy == "medium"
        assert result.components.street_number == "5"
        assert result.components.route == "Avenue Anatole France"

    async def test_reverse_without_address(self, nominatim_geocoder, nominatim_api):
        nominatim_api.reverse.return_value = None

        with pytest.raises(NotFoundError):
            await nominatim_geocoder.reverse(Coordinates(lat=10.5, lng=-30.5))


async def test_service_falls_back_on_geopy_error(
    google_geocoder, google_api, nominatim_geocoder, nominatim_api, clock
):
    google_api.geocode.side_effect = GeocoderQuotaExceeded("OVER_QUERY_LIMIT")
    nominatim_api.geocode.return_value = location_for(NOMINATIM_RAW)
    service = GeocodingService(
        executor=DirectExecutor(),
        primary=google_geocoder,
        secondary=nominatim_geocoder,
        clock=clock,
    )

    result = await service.geocode("Eiffel Tower")

    assert result.source == "nominatim"
    assert service.stats.nominatim_requests == 1


@pytest.mark.parametrize(
    "location_type,expected",
    [("ROOFTOP", "high"), ("RANGE_INTERPOLATED", "medium"), ("APPROXIMATE", "low"), (None, "low")],
)
def test_google_accuracy(location_type, expected):
    assert google_accuracy(location_type) == expected


@pytest.mark.parametrize(
    "osm_class,osm_type,expected",
    [
        ("building", "yes", "high"),
        ("place", "house", "high"),
        ("highway", "primary", "medium"),
        ("place", "residential", "medium"),
        ("boundary", "administrative", "low"),
    ],
)
def test_nominatim_accuracy(osm_class, osm_type, expected):
    assert nominatim_accuracy(osm_class, osm_type) == expected
