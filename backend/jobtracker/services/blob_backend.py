import logging
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from jobtracker.config import Settings
from jobtracker.errors import BackendWriteError
from jobtracker.utils.filesystem import atomic_write_bytes

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound", "NoSuchBucket"}


class BlobBackend(ABC):
    """Raw byte storage for the table blob.

    ``read`` returns None when there is nothing to read, including when the
    store itself is unavailable. ``write`` replaces the whole blob or raises
    ``BackendWriteError`` leaving the previous content in place.
    """

    name: str = "abstract"

    @abstractmethod
    def read(self) -> bytes | None: ...

    @abstractmethod
    def write(self, data: bytes) -> None: ...

    @abstractmethod
    def describe(self) -> str: ...


class LocalFileBackend(BlobBackend):
    name = "filesystem"

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read %s: %s", self.path, exc)
            return None

    def write(self, data: bytes) -> None:
        try:
            atomic_write_bytes(self.path, data)
        except OSError as exc:
            logger.error("Could not write %s: %s", self.path, exc)
            raise BackendWriteError(f"Failed to write {self.path}: {exc}") from exc

    def describe(self) -> str:
        return str(self.path)


class S3Backend(BlobBackend):
    name = "s3"

    def __init__(self, bucket: str | None, key: str, client=None, region: str | None = None,
                 endpoint_url: str | None = None):
        self.bucket = bucket
        self.key = key
        self._client = client
        self._region = region
        self._endpoint_url = endpoint_url

    @property
    def configured(self) -> bool:
        return bool(self.bucket)

    def _s3(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self._region or None,
                endpoint_url=self._endpoint_url or None,
            )
        return self._client

    def read(self) -> bytes | None:
        if not self.configured:
            logger.warning("S3 storage selected but no bucket configured; treating table as absent")
            return None
        try:
            response = self._s3().get_object(Bucket=self.bucket, Key=self.key)
            return response["Body"].read()
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code not in _MISSING_KEY_CODES:
                logger.warning("Could not fetch s3://%s/%s: %s", self.bucket, self.key, exc)
            return None
        except BotoCoreError as exc:
            logger.warning("Could not fetch s3://%s/%s: %s", self.bucket, self.key, exc)
            return None

    def write(self, data: bytes) -> None:
        if not self.configured:
            raise BackendWriteError("S3 storage is not configured; set TRACKER_S3_BUCKET")
        # A single PUT either lands completely or not at all.
        try:
            self._s3().put_object(
                Bucket=self.bucket,
                Key=self.key,
                Body=data,
                ContentType=XLSX_CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Could not upload s3://%s/%s: %s", self.bucket, self.key, exc)
            raise BackendWriteError(f"Failed to upload to s3://{self.bucket}/{self.key}: {exc}") from exc

    def describe(self) -> str:
        if not self.configured:
            return "s3 (not configured)"
        return f"s3://{self.bucket}/{self.key}"


def build_backend(config: Settings) -> BlobBackend:
    if config.storage_backend == "s3":
        backend: BlobBackend = S3Backend(
            bucket=config.s3_bucket,
            key=config.s3_key,
            region=config.aws_region,
            endpoint_url=config.s3_endpoint_url,
        )
    else:
        backend = LocalFileBackend(config.table_path)
    logger.info("Using %s storage at %s", backend.name, backend.describe())
    return backend
