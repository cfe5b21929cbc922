"""Raw-document conversions shared by the JSON repositories.

Image fields are normalized here, once: a bare string becomes a
``LegacyImage`` and a mapping becomes an ``ImageRecord``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from storefront.domain.model.image import (
    ImageRecord,
    LegacyImage,
    MigrationStatus,
    ProductImage,
    StorageMode,
)
from storefront.domain.model.value_objects import Money


def money_to_raw(money: Money) -> dict:
    return {"amount": str(money.amount), "currency": money.currency}


def money_from_raw(raw) -> Money:
    # older documents store plain numbers
    if isinstance(raw, dict):
        return Money(Decimal(raw["amount"]), raw.get("currency", "INR"))
    return Money.of(raw if raw is not None else 0)


def dt_to_raw(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def dt_from_raw(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def image_to_raw(image: ProductImage) -> str | dict:
    if isinstance(image, LegacyImage):
        return image.url
    return {
        "filename": image.filename,
        "original_name": image.original_name,
        "local_path": image.local_path,
        "remote_id": image.remote_id,
        "remote_url": image.remote_url,
        "alternate_url": image.alternate_url,
        "url": image.url,
        "migration_status": image.migration_status.value,
        "storage_mode": image.storage_mode.value,
        "uploaded_at": dt_to_raw(image.uploaded_at),
        "remote_uploaded_at": dt_to_raw(image.remote_uploaded_at),
        "byte_size": image.byte_size,
        "width": image.width,
        "height": image.height,
        "format": image.format,
        "content_type": image.content_type,
    }


def image_from_raw(raw: str | dict) -> ProductImage:
    if isinstance(raw, str):
        return LegacyImage(raw)
    record = ImageRecord(
        filename=raw.get("filename"),
        original_name=raw.get("original_name"),
        local_path=raw.get("local_path"),
        remote_id=raw.get("remote_id"),
        remote_url=raw.get("remote_url"),
        alternate_url=raw.get("alternate_url") or raw.get("secure_url"),
        url=raw.get("url"),
        migration_status=MigrationStatus(raw.get("migration_status", "not_required")),
        storage_mode=StorageMode(raw.get("storage_mode", "local")),
        remote_uploaded_at=dt_from_raw(raw.get("remote_uploaded_at")),
        byte_size=raw.get("byte_size"),
        width=raw.get("width"),
        height=raw.get("height"),
        format=raw.get("format"),
        content_type=raw.get("content_type"),
    )
    uploaded_at = dt_from_raw(raw.get("uploaded_at"))
    if uploaded_at is not None:
        record.uploaded_at = uploaded_at
    return record
