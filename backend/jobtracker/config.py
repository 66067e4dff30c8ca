from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # "local" keeps the table on disk, "s3" in an object store bucket.
    storage_backend: Literal["local", "s3"] = "local"
    data_dir: Path = Path("data")
    table_file_name: str = "applications.xlsx"
    sheet_name: str = "Applications"

    s3_bucket: str | None = None
    s3_key: str = "applications.xlsx"
    aws_region: str | None = None
    s3_endpoint_url: str | None = None

    recent_window_days: int = 7
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB

    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    @property
    def table_path(self) -> Path:
        return self.data_dir / self.table_file_name

    model_config = {"env_prefix": "TRACKER_"}


settings = Settings()
