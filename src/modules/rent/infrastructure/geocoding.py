"""Address geocoding through Amazon Location Service."""

import asyncio
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from src.api.rent.schemas import Coordinates
from src.modules.rent.infrastructure.aws import client_config, create_session
from src.utils.logger import get_logger
from src.utils.settings.aws import AWSSettings

CITY_SUFFIX = "Buenos Aires, Argentina"
COUNTRY_FILTER = ["ARG"]


class PlaceSearch(Protocol):
    async def search_text(
        self,
        index_name: str,
        text: str,
        max_results: int,
        country_filter: list[str],
    ) -> list[dict[str, Any]]: ...


class AwsPlaceSearch:
    """Thin wrapper over ``search_place_index_for_text``."""

    def __init__(self, settings: AWSSettings | None = None):
        self.settings = settings or AWSSettings()
        self._session = create_session(self.settings)

    async def search_text(
        self,
        index_name: str,
        text: str,
        max_results: int,
        country_filter: list[str],
    ) -> list[dict[str, Any]]:
        async with self._session.client(
            "location",
            config=client_config(self.settings.GEOCODING_TIMEOUT_SECONDS),
        ) as client:
            response = await client.search_place_index_for_text(
                IndexName=index_name,
                Text=text,
                MaxResults=max_results,
                FilterCountries=country_filter,
            )
        return response.get("Results", [])


def build_address_query(street: str | None, neighborhood: str) -> str:
    parts = [part.strip() for part in (street, neighborhood) if part and part.strip()]
    parts.append(CITY_SUFFIX)
    return ", ".join(parts)


def extract_coordinates(result: dict[str, Any]) -> Coordinates | None:
    """Read ``Place.Geometry.Point``; AWS orders it as [lng, lat]."""
    point = (result.get("Place") or {}).get("Geometry", {}).get("Point")
    if not isinstance(point, (list, tuple)) or len(point) < 2:
        return None
    lng, lat = point[0], point[1]
    try:
        return Coordinates(lat=float(lat), lng=float(lng))
    except (TypeError, ValueError):
        return None


class GeocodingClient:
    """Resolves street + neighborhood to coordinates, or None."""

    def __init__(
        self,
        place_search: PlaceSearch,
        settings: AWSSettings | None = None,
        logger=None,
    ):
        self.place_search = place_search
        self.settings = settings or AWSSettings()
        self.index_name = self.settings.AWS_LOCATION_PLACE_INDEX
        self.timeout = self.settings.GEOCODING_TIMEOUT_SECONDS
        self.logger = logger or get_logger(self.__class__.__name__)

    async def geocode(
        self, street: str | None, neighborhood: str | None
    ) -> Coordinates | None:
        if not neighborhood or not neighborhood.strip():
            self.logger.warning("No neighborhood given, skipping geocoding")
            return None

        if not self.index_name:
            self.logger.warning("AWS_LOCATION_PLACE_INDEX is not configured")
            return None

        text = build_address_query(street, neighborhood)
        self.logger.info("Geocoding address", address=text)

        try:
            results = await asyncio.wait_for(
                self.place_search.search_text(
                    self.index_name, text, 1, COUNTRY_FILTER
                ),
                self.timeout,
            )
        except asyncio.TimeoutError:
            self.logger.warning("Geocoding timed out", address=text, timeout=self.timeout)
            return None
        except (ClientError, BotoCoreError) as e:
            self.logger.error("Geocoding request failed", address=text, error=str(e))
            return None

        if not results:
            self.logger.info("No geocoding match", address=text)
            return None

        coordinates = extract_coordinates(results[0])
        if coordinates is None:
            self.logger.warning("Geocoding match without usable geometry", address=text)
            return None

        self.logger.info(
            "Address geocoded", address=text, lat=coordinates.lat, lng=coordinates.lng
        )
        return coordinates
