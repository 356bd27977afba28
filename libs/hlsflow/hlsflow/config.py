"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hlsflow.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]

_STORAGE_BACKENDS = {"gcs", "s3", "local"}
_DOCUMENT_BACKENDS = {"firestore", "postgres", "memory"}


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class StorageSettings(BaseSettings):
    """Object storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: str = "gcs"
    bucket: str = ""
    # Host serving token-authorized downloads (`/v0/b/<bucket>/o/<path>`).
    download_host: str = "firebasestorage.googleapis.com"
    token_metadata_key: str = "firebaseStorageDownloadTokens"

    local_dir: str = "./data/objects"

    # S3/MinIO
    s3_endpoint: str | None = None
    s3_access_key: str = ""
    s3_secret_key: str = ""
    s3_region: str = "us-east-1"

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        name = str(value or "").strip().lower()
        if name not in _STORAGE_BACKENDS:
            raise ConfigurationError(
                f"Unknown storage backend: {value!r} (expected: {', '.join(sorted(_STORAGE_BACKENDS))})"
            )
        return name

    @model_validator(mode="after")
    def _resolve_paths(self) -> "StorageSettings":
        self.local_dir = _resolve_repo_path(self.local_dir)
        return self


class EncoderConfig(BaseSettings):
    """External encoder (ffmpeg) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ENCODER_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ffmpeg_bin: str = "ffmpeg"
    preset: str = "veryfast"
    # Constant GOP; with `sc_threshold=0` segments cut on GOP boundaries.
    gop_size: int = Field(default=48, ge=1)
    segment_seconds: int = Field(default=6, ge=1)
    poster_offset: str = "00:00:01"
    timeout_s: float | None = Field(default=None, gt=0)


class DocumentStoreSettings(BaseSettings):
    """Document database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DOCUMENT_STORE_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: str = "firestore"
    firestore_project: str | None = None
    firestore_database: str | None = None
    postgres_pool_min: int = Field(default=1, ge=1)
    postgres_pool_max: int = Field(default=4, ge=1)

    @field_validator("backend")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        name = str(value or "").strip().lower()
        if name not in _DOCUMENT_BACKENDS:
            raise ConfigurationError(
                f"Unknown document store backend: {value!r} "
                f"(expected: {', '.join(sorted(_DOCUMENT_BACKENDS))})"
            )
        return name


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)
    quiet_loggers: list[str] = Field(
        default_factory=lambda: ["botocore", "boto3", "s3transfer", "urllib3", "google.auth", "google.api_core"]
    )
    quiet_level: str = "WARNING"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    # Scratch root for per-job workspaces; empty means the system temp dir.
    work_dir: str = ""
    log_dir: str = "./logs"

    # Database (document_store.backend == "postgres")
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "hlsflow"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # Redis (bucket-notification queue consumed by apps/worker)
    redis_url: str = "redis://localhost:6379"
    events_queue: str = "hlsflow:storage-events"

    storage: StorageSettings = StorageSettings()
    encoder: EncoderConfig = EncoderConfig()
    document_store: DocumentStoreSettings = DocumentStoreSettings()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    def model_post_init(self, __context: Any) -> None:
        def _abs_dir(p: str) -> str:
            out = Path(_resolve_repo_path(p))
            out.mkdir(parents=True, exist_ok=True)
            return str(out)

        self.log_dir = _abs_dir(self.log_dir)
        if self.work_dir:
            self.work_dir = _abs_dir(self.work_dir)

    @property
    def database_url(self) -> str:
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    def require_bucket(self) -> str:
        bucket = str(self.storage.bucket or "").strip()
        if not bucket:
            raise ConfigurationError("STORAGE_BUCKET is not configured")
        return bucket
