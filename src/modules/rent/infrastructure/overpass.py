"""Nearby points of interest from the OpenStreetMap Overpass API."""

import asyncio
from typing import Any, Protocol

import aiohttp

from src.api.rent.schemas import Coordinates, NearbyPlace, NearbyPlacesResult
from src.modules.rent.distance import haversine_m
from src.utils.logger import get_logger
from src.utils.settings.overpass import OverpassSettings

ADDRESS_PLACEHOLDER = "Dirección no disponible"
ADDRESS_TAGS = ("addr:street", "addr:housenumber", "addr:suburb", "addr:city")
SECONDARY_TYPE_TAGS = ("amenity", "shop", "leisure", "cuisine")

# (element type, tag key, tag value) filters per category.
CATEGORY_FILTERS: dict[str, tuple[tuple[str, str, str], ...]] = {
    "transporte": (
        ("node", "public_transport", "station"),
        ("node", "public_transport", "stop_position"),
        ("node", "railway", "station"),
        ("node", "railway", "subway_entrance"),
        ("node", "highway", "bus_stop"),
        ("way", "public_transport", "station"),
    ),
    "sitios_interes": (
        ("node", "leisure", "park"),
        ("node", "leisure", "garden"),
        ("node", "leisure", "playground"),
        ("node", "tourism", "attraction"),
        ("node", "tourism", "museum"),
        ("node", "tourism", "viewpoint"),
        ("way", "leisure", "park"),
        ("way", "leisure", "garden"),
        ("way", "tourism", "attraction"),
    ),
    "edificios_administrativos": (
        ("node", "amenity", "bank"),
        ("node", "amenity", "atm"),
        ("node", "office", "government"),
        ("node", "amenity", "townhall"),
        ("node", "amenity", "post_office"),
        ("node", "amenity", "police"),
        ("way", "amenity", "bank"),
        ("way", "office", "government"),
        ("way", "amenity", "townhall"),
    ),
    "instituciones_educativas": (
        ("node", "amenity", "school"),
        ("node", "amenity", "university"),
        ("node", "amenity", "college"),
        ("node", "amenity", "kindergarten"),
        ("way", "amenity", "school"),
        ("way", "amenity", "university"),
        ("way", "amenity", "college"),
    ),
    "centros_salud": (
        ("node", "amenity", "hospital"),
        ("node", "amenity", "clinic"),
        ("node", "amenity", "pharmacy"),
        ("node", "amenity", "doctors"),
        ("node", "healthcare", "hospital"),
        ("node", "healthcare", "clinic"),
        ("way", "amenity", "hospital"),
        ("way", "amenity", "clinic"),
    ),
    "restaurantes": (
        ("node", "amenity", "restaurant"),
        ("node", "amenity", "cafe"),
        ("node", "amenity", "fast_food"),
        ("node", "amenity", "bar"),
        ("way", "amenity", "restaurant"),
        ("way", "amenity", "cafe"),
    ),
}

CATEGORIES = tuple(CATEGORY_FILTERS)


def build_query(
    category: str, lat: float, lng: float, radius: int, timeout: int = 10
) -> str:
    """Overpass QL union of the category's tag filters around a point."""
    statements = "\n".join(
        f'  {element}["{key}"="{value}"](around:{radius},{lat},{lng});'
        for element, key, value in CATEGORY_FILTERS[category]
    )
    return f"[out:json][timeout:{timeout}];\n(\n{statements}\n);\nout center;"


def build_address(tags: dict[str, Any]) -> str:
    parts = [str(tags[tag]) for tag in ADDRESS_TAGS if tags.get(tag)]
    return ", ".join(parts) if parts else ADDRESS_PLACEHOLDER


def place_types(tags: dict[str, Any], category: str) -> list[str]:
    types = [category]
    for tag in SECONDARY_TYPE_TAGS:
        value = tags.get(tag)
        if value and value not in types:
            types.append(value)
    return types


def element_location(element: dict[str, Any]) -> tuple[float, float] | None:
    """Nodes carry lat/lon directly; ways only their ``center``."""
    lat, lon = element.get("lat"), element.get("lon")
    if lat is None or lon is None:
        center = element.get("center") or {}
        lat, lon = center.get("lat"), center.get("lon")
    if lat is None or lon is None:
        return None
    return float(lat), float(lon)


def parse_elements(
    elements: list[dict[str, Any]], category: str, lat: float, lng: float
) -> list[NearbyPlace]:
    places = []
    for element in elements:
        tags = element.get("tags") or {}
        if not tags.get("name"):
            continue
        location = element_location(element)
        if location is None:
            continue
        place_lat, place_lng = location
        places.append(
            NearbyPlace(
                name=tags["name"],
                address=build_address(tags),
                distance=haversine_m(lat, lng, place_lat, place_lng),
                types=place_types(tags, category),
                location=Coordinates(lat=place_lat, lng=place_lng),
                source_id=element.get("id"),
                source_type=element.get("type"),
            )
        )
    places.sort(key=lambda place: place.distance)
    return places


class OverpassFetcher(Protocol):
    async def query(self, ql: str) -> dict[str, Any]: ...


class OverpassClient:
    """POSTs raw Overpass QL to the interpreter endpoint."""

    def __init__(self, settings: OverpassSettings | None = None):
        self.settings = settings or OverpassSettings()
        self.url = self.settings.OVERPASS_URL
        self.timeout = self.settings.OVERPASS_TIMEOUT_SECONDS

    async def query(self, ql: str) -> dict[str, Any]:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self.url,
                data=ql.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                response.raise_for_status()
                return await response.json(content_type=None)


class NearbyPlacesAggregator:
    """Runs the six category searches concurrently and merges them."""

    def __init__(
        self,
        fetcher: OverpassFetcher,
        settings: OverpassSettings | None = None,
        logger=None,
    ):
        self.fetcher = fetcher
        self.settings = settings or OverpassSettings()
        self.radius = self.settings.OVERPASS_SEARCH_RADIUS_METERS
        self.timeout = self.settings.OVERPASS_TIMEOUT_SECONDS
        self.logger = logger or get_logger(self.__class__.__name__)

    async def nearby(self, lat: float, lng: float) -> NearbyPlacesResult:
        self.logger.info(
            "Searching nearby places", lat=lat, lng=lng, radius=self.radius
        )
        try:
            results = await asyncio.gather(
                *(self.search_category(category, lat, lng) for category in CATEGORIES)
            )
        except Exception as e:
            self.logger.error("Nearby places search failed", error=str(e))
            return NearbyPlacesResult.empty(lat, lng)

        result = NearbyPlacesResult.from_categories(
            lat, lng, dict(zip(CATEGORIES, results))
        )
        self.logger.info("Nearby places found", total=result.summary.total)
        return result

    async def search_category(
        self, category: str, lat: float, lng: float
    ) -> list[NearbyPlace]:
        """One category; any failure yields an empty list."""
        ql = build_query(
            category, lat, lng, self.radius, timeout=max(1, int(self.timeout))
        )
        try:
            data = await asyncio.wait_for(self.fetcher.query(ql), self.timeout)
            elements = data.get("elements") if isinstance(data, dict) else None
            if not isinstance(elements, list):
                return []
            places = parse_elements(elements, category, lat, lng)
        except asyncio.TimeoutError:
            self.logger.warning("Overpass query timed out", category=category)
            return []
        except Exception as e:
            self.logger.error(
                "Overpass query failed",
                category=category,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        self.logger.debug("Category searched", category=category, count=len(places))
        return places
