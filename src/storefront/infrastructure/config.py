"""Runtime settings, read from ``STOREFRONT_*`` environment variables or ``.env``."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# When installed in editable mode the project root is the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=".env", extra="ignore")

    # Persistence
    data_dir: Path = _PROJECT_ROOT / "data"

    # Local image storage
    upload_dir: Path = _PROJECT_ROOT / "uploads" / "products"
    upload_url_prefix: str = "/uploads/products"
    base_url: str = ""
    placeholder_url: str = "/placeholder-image.png"

    # Remote object store (S3 or any S3-compatible host)
    remote_host: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "ap-south-1"
    s3_endpoint_url: str | None = None
    s3_public_base_url: str | None = None
    remote_folder_root: str = "ecommerce/products"
    upload_workers: int = 1

    # Inventory and carts
    cart_max_quantity: int = 10
    conflict_retry_attempts: int = 5
    conflict_backoff_seconds: float = 0.01

    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()
