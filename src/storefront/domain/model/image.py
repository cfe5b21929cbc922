"""Image records for hybrid (local + remote) storage.

A product image is either a structured ``ImageRecord`` or a ``LegacyImage``
wrapping a bare URL from older documents. Persistence normalizes raw values
into one of the two at load time, so nothing past the repository has to
inspect raw types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union

from storefront.domain.exceptions import InvalidImageRecord, ValidationError


class MigrationStatus(Enum):
    PENDING = "pending"
    MIGRATING = "migrating"
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_REQUIRED = "not_required"


class StorageMode(Enum):
    LOCAL = "local"
    REMOTE = "remote"
    HYBRID = "hybrid"
    LEGACY = "legacy"


_FINAL_STATUSES = (
    MigrationStatus.COMPLETED,
    MigrationStatus.FAILED,
    MigrationStatus.NOT_REQUIRED,
)


@dataclass(frozen=True)
class RemoteUpload:
    """What the remote object store reports back for one stored blob."""

    id: str
    url: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    byte_size: int | None = None


@dataclass
class ImageRecord:
    """One uploaded asset.

    Use ``ImageRecord.create_local()`` for new uploads; plain construction
    does not validate so stored documents can be reconstituted as they are,
    including corrupt ones (see ``is_valid``).
    """

    filename: str | None = None
    original_name: str | None = None
    local_path: str | None = None
    remote_id: str | None = None
    remote_url: str | None = None
    alternate_url: str | None = None
    url: str | None = None
    migration_status: MigrationStatus = MigrationStatus.NOT_REQUIRED
    storage_mode: StorageMode = StorageMode.LOCAL
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    remote_uploaded_at: datetime | None = None
    byte_size: int | None = None
    width: int | None = None
    height: int | None = None
    format: str | None = None
    content_type: str | None = None

    @staticmethod
    def create_local(
        filename: str,
        local_path: str,
        original_name: str,
        byte_size: int,
        migration_status: MigrationStatus = MigrationStatus.PENDING,
        content_type: str | None = None,
    ) -> ImageRecord:
        if not local_path:
            raise InvalidImageRecord("A new image needs a local path")
        if migration_status not in (MigrationStatus.PENDING, MigrationStatus.NOT_REQUIRED):
            raise ValidationError(
                f"New images start as pending or not_required, not {migration_status.value}"
            )
        return ImageRecord(
            filename=filename,
            original_name=original_name,
            local_path=local_path,
            migration_status=migration_status,
            storage_mode=StorageMode.LOCAL,
            byte_size=byte_size,
            content_type=content_type,
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.local_path or self.remote_url)

    @property
    def is_final(self) -> bool:
        return self.migration_status in _FINAL_STATUSES

    @property
    def awaits_replication(self) -> bool:
        return self.migration_status in (MigrationStatus.PENDING, MigrationStatus.MIGRATING)

    # --- Migration transitions ------------------------------------------------

    def begin_migration(self) -> None:
        if self.migration_status != MigrationStatus.PENDING:
            raise ValidationError(
                f"Cannot start migration of {self.filename} from "
                f"{self.migration_status.value}"
            )
        self.migration_status = MigrationStatus.MIGRATING

    def mark_replicated(self, upload: RemoteUpload) -> None:
        """Record the remote copy. Remote fields are written exactly once."""
        self._assert_in_flight()
        self.remote_id = upload.id
        self.remote_url = upload.url
        self.width = upload.width if upload.width is not None else self.width
        self.height = upload.height if upload.height is not None else self.height
        self.format = upload.format or self.format
        if upload.byte_size is not None:
            self.byte_size = upload.byte_size
        self.remote_uploaded_at = datetime.now(timezone.utc)
        self.storage_mode = StorageMode.HYBRID
        self.migration_status = MigrationStatus.COMPLETED

    def mark_failed(self) -> None:
        # the local copy stays the record of truth
        self._assert_in_flight()
        self.migration_status = MigrationStatus.FAILED

    def _assert_in_flight(self) -> None:
        if not self.awaits_replication:
            raise ValidationError(
                f"Image {self.filename} is already {self.migration_status.value}"
            )


@dataclass(frozen=True)
class LegacyImage:
    """A bare URL string stored by older versions of the catalog."""

    url: str


ProductImage = Union[ImageRecord, LegacyImage]
