"""Neighborhood report charts and metrics published to S3."""

import json
import re
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from src.api.rent.schemas import ReportAssets, ReportImages
from src.modules.rent.infrastructure.aws import client_config, create_session
from src.modules.rent.neighborhoods import strip_accents
from src.utils.logger import get_logger
from src.utils.settings.aws import AWSSettings

IMAGE_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
IMAGE_KEYS = tuple(ReportImages.model_fields)

S3_TIMEOUT_SECONDS = 10.0


def normalize_barrio_key(barrio: str) -> str:
    """Folder name for a barrio: "Palermo Soho" -> "PALERMO_SOHO", "Núñez" -> "NUNEZ"."""
    key = "_".join(strip_accents(barrio).upper().split())
    return re.sub(r"[^A-Z0-9_]", "", key)


def month_folder(now: datetime) -> str:
    """Reports are grouped by publication month: ``MM_YYYY``."""
    return f"{now.month:02d}_{now.year}"


class S3Reader(Protocol):
    async def list_keys(self, bucket: str, prefix: str) -> list[str]: ...

    async def get_json(self, bucket: str, key: str) -> Any | None: ...


class AwsS3Reader:
    def __init__(self, settings: AWSSettings | None = None):
        self.settings = settings or AWSSettings()
        self._session = create_session(self.settings)

    async def list_keys(self, bucket: str, prefix: str) -> list[str]:
        async with self._session.client(
            "s3", config=client_config(S3_TIMEOUT_SECONDS)
        ) as client:
            response = await client.list_objects_v2(Bucket=bucket, Prefix=prefix)
        return [item["Key"] for item in response.get("Contents", []) if item.get("Key")]

    async def get_json(self, bucket: str, key: str) -> Any | None:
        """Parsed JSON object, or None when the key does not exist."""
        async with self._session.client(
            "s3", config=client_config(S3_TIMEOUT_SECONDS)
        ) as client:
            try:
                response = await client.get_object(Bucket=bucket, Key=key)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                    return None
                raise
            async with response["Body"] as stream:
                body = await stream.read()
        return json.loads(body)


class ReportAssetsClient:
    """Looks up this month's report images and metrics for a barrio."""

    def __init__(
        self,
        reader: S3Reader,
        settings: AWSSettings | None = None,
        logger=None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.reader = reader
        self.settings = settings or AWSSettings()
        self.bucket = self.settings.BUCKET_NAME
        self.region = self.settings.AWS_REGION
        self.logger = logger or get_logger(self.__class__.__name__)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def get_report_assets(self, barrio: str | None) -> ReportAssets:
        images = await self.get_report_images(barrio)
        metrics = await self.get_neighborhood_metrics(barrio)
        return ReportAssets(images=images, metrics=metrics)

    async def get_report_images(self, barrio: str | None) -> ReportImages:
        images = ReportImages()
        if not self.bucket:
            self.logger.warning("BUCKET_NAME is not configured, skipping report images")
            return images
        if not barrio:
            return images

        prefix = (
            f"reporting/report_pictures/{month_folder(self.clock())}/"
            f"{normalize_barrio_key(barrio)}/"
        )
        try:
            keys = await self.reader.list_keys(self.bucket, prefix)
        except (ClientError, BotoCoreError) as e:
            self.logger.error("Could not list report images", prefix=prefix, error=str(e))
            return images

        found = {}
        for key in keys:
            if not IMAGE_EXTENSIONS.search(key):
                continue
            file_name = key.rsplit("/", 1)[-1].split(".", 1)[0].strip().lower()
            if file_name in IMAGE_KEYS:
                found[file_name] = self.public_url(key)

        self.logger.info(
            "Report images mapped", prefix=prefix, found=len(found), expected=len(IMAGE_KEYS)
        )
        return images.model_copy(update=found)

    async def get_neighborhood_metrics(self, barrio: str | None) -> dict[str, Any] | None:
        if not self.bucket or not barrio:
            return None

        key = (
            f"reporting/metrics/{month_folder(self.clock())}/"
            f"{normalize_barrio_key(barrio)}/metrics.json"
        )
        try:
            metrics = await self.reader.get_json(self.bucket, key)
        except (ClientError, BotoCoreError, ValueError) as e:
            self.logger.error("Could not read neighborhood metrics", key=key, error=str(e))
            return None

        if metrics is None:
            self.logger.info("No metrics published", key=key)
            return None
        if not isinstance(metrics, dict):
            self.logger.warning("Metrics file is not a JSON object", key=key)
            return None
        return metrics
