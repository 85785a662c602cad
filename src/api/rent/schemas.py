"""Rent prediction API schemas (combined models/requests)."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Every accepted spelling of each request field. The frontend sends the
# Spanish keys, older clients the English ones.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "neighborhood": ("barrio", "neighborhood"),
    "rooms": ("ambientes", "rooms"),
    "bedrooms": ("dormitorios", "bedrooms"),
    "bathrooms": ("banos", "bathrooms"),
    "garages": ("garajes", "garages"),
    "age": ("antiguedad", "antiquity", "age"),
    "street": ("calle", "street"),
    "surface": ("metrosCuadrados", "total_area", "surface_total", "surface"),
    "surface_min": ("metrosCuadradosMin", "surface_min"),
    "surface_max": ("metrosCuadradosMax", "surface_max"),
}


def _aliased(field_name: str, **kwargs: Any) -> Any:
    return Field(
        default=None,
        validation_alias=AliasChoices(*FIELD_ALIASES[field_name]),
        **kwargs,
    )


class PredictionRequest(BaseModel):
    """Canonical prediction input, whatever key spelling the client used."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    neighborhood: str | None = _aliased("neighborhood")
    rooms: int | None = _aliased("rooms", ge=0)
    bedrooms: int | None = _aliased("bedrooms", ge=0)
    bathrooms: int | None = _aliased("bathrooms", ge=0)
    garages: int | None = _aliased("garages", ge=0)
    age: int | None = _aliased("age", ge=0)
    street: str | None = _aliased("street")
    surface: float | None = _aliased("surface", gt=0)
    surface_min: float | None = _aliased("surface_min", gt=0)
    surface_max: float | None = _aliased("surface_max", gt=0)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("neighborhood", "street")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        return value.strip() if value else value

    @property
    def is_range(self) -> bool:
        """Both bounds present and different: two inference calls."""
        return (
            self.surface_min is not None
            and self.surface_max is not None
            and self.surface_min != self.surface_max
        )

    @property
    def single_surface(self) -> float | None:
        if self.surface is not None:
            return self.surface
        if self.surface_min is not None:
            return self.surface_min
        return self.surface_max

    def to_input_data(self) -> dict[str, Any]:
        """Echo of the request using the keys the frontend sends."""
        surface_min = self.surface_min
        surface_max = self.surface_max
        if surface_min is None and surface_max is None and self.surface is not None:
            surface_min = surface_max = self.surface

        return {
            "barrio": self.neighborhood,
            "ambientes": self.rooms,
            "metrosCuadradosMin": surface_min,
            "metrosCuadradosMax": surface_max,
            "dormitorios": self.bedrooms,
            "banos": self.bathrooms,
            "garajes": self.garages,
            "antiguedad": self.age,
            "calle": self.street,
        }


class Coordinates(BaseModel):
    lat: float
    lng: float


class InferenceResult(BaseModel):
    """Rounded price estimates returned by the inference gateway."""

    prediction: int | None = None
    prediction_min: int | None = Field(default=None, serialization_alias="predictionMin")
    prediction_max: int | None = Field(default=None, serialization_alias="predictionMax")
    input_data: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_range(self) -> bool:
        return self.prediction_min is not None and self.prediction_max is not None

    @property
    def price_floor(self) -> int | None:
        return self.prediction_min if self.is_range else self.prediction

    @property
    def price_ceiling(self) -> int | None:
        return self.prediction_max if self.is_range else self.prediction

    def prediction_fields(self) -> dict[str, Any]:
        """Only the price keys that apply to this request shape."""
        if self.is_range:
            return {
                "predictionMin": self.prediction_min,
                "predictionMax": self.prediction_max,
            }
        return {"prediction": self.prediction}


class NearbyPlace(BaseModel):
    name: str
    address: str
    rating: float | None = None  # OSM has no ratings
    distance: int  # meters
    types: list[str]
    location: Coordinates
    source_id: int | None = None
    source_type: str | None = None


class NearbyPlacesSummary(BaseModel):
    total: int = 0
    transporte: int = 0
    sitios_interes: int = 0
    edificios_administrativos: int = 0
    instituciones_educativas: int = 0
    centros_salud: int = 0
    restaurantes: int = 0


class NearbyPlacesResult(BaseModel):
    coordinates: Coordinates
    transporte: list[NearbyPlace] = Field(default_factory=list)
    sitios_interes: list[NearbyPlace] = Field(default_factory=list)
    edificios_administrativos: list[NearbyPlace] = Field(default_factory=list)
    instituciones_educativas: list[NearbyPlace] = Field(default_factory=list)
    centros_salud: list[NearbyPlace] = Field(default_factory=list)
    restaurantes: list[NearbyPlace] = Field(default_factory=list)
    summary: NearbyPlacesSummary = Field(default_factory=NearbyPlacesSummary)

    @classmethod
    def empty(cls, lat: float, lng: float) -> "NearbyPlacesResult":
        return cls(coordinates=Coordinates(lat=lat, lng=lng))

    @classmethod
    def from_categories(
        cls, lat: float, lng: float, places: dict[str, list[NearbyPlace]]
    ) -> "NearbyPlacesResult":
        counts = {category: len(items) for category, items in places.items()}
        return cls(
            coordinates=Coordinates(lat=lat, lng=lng),
            **places,
            summary=NearbyPlacesSummary(total=sum(counts.values()), **counts),
        )


class ReportImages(BaseModel):
    """Public URLs of the neighborhood report charts, null when not published."""

    price_by_m2_evolution: str | None = None
    price_evolution: str | None = None
    bar_price_by_amb: str | None = None
    bar_m2_price_by_amb: str | None = None
    bar_price_by_amb_neighborhood: str | None = None
    bar_m2_price_by_amb_neighborhood: str | None = None
    pie_property_amb_distribution: str | None = None
    pie_property_m2_distribution_neighborhood: str | None = None
    pie_property_amb_distribution_neighborhood: str | None = None


class ReportAssets(BaseModel):
    images: ReportImages = Field(default_factory=ReportImages)
    metrics: dict[str, Any] | None = None
