from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlobSettings(BaseModel):
    model_config = SettingsConfigDict(extra="ignore")

    access_key_id: Optional[str] = Field(default=None)
    secret_access_key: Optional[str] = Field(default=None)
    region: str = Field(default="us-east-1")
    s3_bucket: str = Field(default="doctrack-dev")
    s3_endpoint_url: Optional[str] = Field(default=None)
    public_base_url: Optional[str] = Field(default=None)
    key_prefix: str = Field(default="documents")

    @property
    def has_write_credentials(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


class MetadataSettings(BaseModel):
    model_config = SettingsConfigDict(extra="ignore")

    backend: Literal["remote", "local"] = Field(default="local")
    collection_url: Optional[str] = Field(default=None)
    master_key: Optional[str] = Field(default=None, repr=False)
    key_header: str = Field(default="X-Master-Key")
    local_path: str = Field(default="var/doctrack_db.json")
    timeout_seconds: float = Field(default=10.0)


_BASE_DIR = Path(__file__).resolve().parent.parent
_ROOT_ENV = _BASE_DIR / ".env"


def _parse_env_line(raw_line: str) -> Optional[tuple[str, str]]:
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None
    if line.lower().startswith("export "):
        line = line[7:].strip()
    key, sep, value = line.partition("=")
    if not sep:
        return None
    return key.strip(), value.strip().strip('"').strip("'")


def _load_env_files(paths: tuple[Path, ...]) -> None:
    """Export .env values so the flat AWS_*/METADATA_* names reach nested settings."""
    for path in paths:
        if not path.is_file():
            continue
        for raw_line in path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


_load_env_files((_ROOT_ENV,))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ROOT_ENV),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development", alias="APP_ENV")
    allow_origins: list[str] | str = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"], alias="CORS_ALLOW_ORIGINS")
    cookie_name: str = Field(default="doctrack_session", alias="SESSION_COOKIE_NAME")
    session_ttl_hours: int = Field(default=12, alias="SESSION_TTL_HOURS")
    session_max_active: int = Field(default=500, alias="SESSION_MAX_ACTIVE")
    upload_endpoint_url: Optional[str] = Field(default=None, alias="UPLOAD_ENDPOINT_URL")

    sentry_dsn: Optional[str] = Field(default=None, alias="SENTRY_DSN")
    sentry_traces_sample_rate: float = Field(default=0.0, alias="SENTRY_TRACES_SAMPLE_RATE")
    sentry_profiles_sample_rate: float = Field(default=0.0, alias="SENTRY_PROFILES_SAMPLE_RATE")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")

    blob: BlobSettings = Field(default_factory=BlobSettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)

    @model_validator(mode="after")
    def load_nested_env(self) -> "Settings":
        """Populate nested storage settings from their flat environment names."""
        self.blob = BlobSettings(
            access_key_id=os.getenv("AWS_ACCESS_KEY_ID", self.blob.access_key_id),
            secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", self.blob.secret_access_key),
            region=os.getenv("AWS_REGION", self.blob.region),
            s3_bucket=os.getenv("S3_BUCKET", self.blob.s3_bucket),
            s3_endpoint_url=os.getenv("S3_ENDPOINT_URL", self.blob.s3_endpoint_url),
            public_base_url=os.getenv("BLOB_PUBLIC_BASE_URL", self.blob.public_base_url),
            key_prefix=os.getenv("BLOB_KEY_PREFIX", self.blob.key_prefix),
        )
        self.metadata = MetadataSettings(
            backend=os.getenv("METADATA_BACKEND", self.metadata.backend),
            collection_url=os.getenv("METADATA_COLLECTION_URL", self.metadata.collection_url),
            master_key=os.getenv("METADATA_MASTER_KEY", self.metadata.master_key),
            key_header=os.getenv("METADATA_KEY_HEADER", self.metadata.key_header),
            local_path=os.getenv("METADATA_LOCAL_PATH", self.metadata.local_path),
            timeout_seconds=float(os.getenv("METADATA_TIMEOUT_SECONDS", self.metadata.timeout_seconds)),
        )

        raw_origins = self.allow_origins if isinstance(self.allow_origins, str) else os.getenv("CORS_ALLOW_ORIGINS")
        if raw_origins:
            self.allow_origins = _split_origins(raw_origins)

        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
