"""AWS settings: Lambda inference, S3 report assets and Location geocoding."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY_ID: SecretStr = SecretStr("")

    LAMBDA_PREDICTION_FUNCTION_NAME: str = "rent-prediction-function"
    LAMBDA_TIMEOUT_SECONDS: float = 30.0

    BUCKET_NAME: str = ""

    AWS_LOCATION_PLACE_INDEX: str = "observatorio-places"
    GEOCODING_TIMEOUT_SECONDS: float = 10.0

    def missing_configuration(self) -> list[str]:
        """Names of required settings that are still empty."""
        required = {
            "AWS_REGION": self.AWS_REGION,
            "AWS_ACCESS_KEY_ID": self.AWS_ACCESS_KEY_ID,
            "AWS_SECRET_ACCESS_KEY_ID": self.AWS_SECRET_ACCESS_KEY_ID.get_secret_value(),
            "LAMBDA_PREDICTION_FUNCTION_NAME": self.LAMBDA_PREDICTION_FUNCTION_NAME,
            "BUCKET_NAME": self.BUCKET_NAME,
        }
        return [name for name, value in required.items() if not value]
