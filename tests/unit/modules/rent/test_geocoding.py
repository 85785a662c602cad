"""Geocoding client tests."""

import pytest
from botocore.exceptions import ClientError

from src.modules.rent.infrastructure.geocoding import (
    GeocodingClient,
    build_address_query,
    extract_coordinates,
)
from src.utils.settings.aws import AWSSettings
from tests.utils.fakes import FakePlaceSearch


def test_build_address_query_with_street():
    assert (
        build_address_query("Av. Santa Fe 3200", "Palermo")
        == "Av. Santa Fe 3200, Palermo, Buenos Aires, Argentina"
    )


def test_build_address_query_without_street():
    assert build_address_query("  ", "Palermo") == "Palermo, Buenos Aires, Argentina"


def test_extract_coordinates_reads_lng_lat_order():
    coordinates = extract_coordinates({"Place": {"Geometry": {"Point": [-58.42, -34.58]}}})
    assert coordinates.lat == -34.58
    assert coordinates.lng == -58.42


@pytest.mark.parametrize(
    "result",
    [{}, {"Place": {}}, {"Place": {"Geometry": {"Point": [1.0]}}}, {"Place": None}],
)
def test_extract_coordinates_without_point(result):
    assert extract_coordinates(result) is None


@pytest.mark.asyncio
async def test_geocode_sends_city_and_country_filter(aws_settings):
    search = FakePlaceSearch(point=[-58.42, -34.58])
    client = GeocodingClient(search, aws_settings)

    coordinates = await client.geocode("Gorriti 4800", "Palermo")

    assert (coordinates.lat, coordinates.lng) == (-34.58, -58.42)
    assert search.calls == [
        {
            "index_name": "test-places",
            "text": "Gorriti 4800, Palermo, Buenos Aires, Argentina",
            "max_results": 1,
            "country_filter": ["ARG"],
        }
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("neighborhood", [None, "", "   "])
async def test_geocode_without_neighborhood_makes_no_call(aws_settings, neighborhood):
    search = FakePlaceSearch(point=[-58.42, -34.58])
    client = GeocodingClient(search, aws_settings)

    assert await client.geocode("Gorriti 4800", neighborhood) is None
    assert search.calls == []


@pytest.mark.asyncio
async def test_geocode_without_place_index_makes_no_call():
    search = FakePlaceSearch(point=[-58.42, -34.58])
    client = GeocodingClient(search, AWSSettings(AWS_LOCATION_PLACE_INDEX=""))

    assert await client.geocode(None, "Palermo") is None
    assert search.calls == []


@pytest.mark.asyncio
async def test_geocode_no_results(aws_settings):
    client = GeocodingClient(FakePlaceSearch(results=[]), aws_settings)
    assert await client.geocode(None, "Palermo") is None


@pytest.mark.asyncio
async def test_geocode_timeout_returns_none(aws_settings):
    client = GeocodingClient(
        FakePlaceSearch(point=[-58.42, -34.58], delay=1.0), aws_settings
    )
    assert await client.geocode(None, "Palermo") is None


@pytest.mark.asyncio
async def test_geocode_aws_error_returns_none(aws_settings):
    error = ClientError(
        {"Error": {"Code": "ResourceNotFoundException", "Message": "no index"}},
        "SearchPlaceIndexForText",
    )
    client = GeocodingClient(FakePlaceSearch(error=error), aws_settings)
    assert await client.geocode(None, "Palermo") is None
