from pydantic_settings import BaseSettings, SettingsConfigDict


class OverpassSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_SEARCH_RADIUS_METERS: int = 500
    OVERPASS_TIMEOUT_SECONDS: float = 10.0
