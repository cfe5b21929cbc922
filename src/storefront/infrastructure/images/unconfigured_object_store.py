"""Stand-in remote store used when no bucket is configured.

Every call fails, so images uploaded in this mode stay local-only; callers
normally skip replication altogether (``migration_status=not_required``).
"""

from __future__ import annotations

from storefront.domain.exceptions import RemoteStoreError
from storefront.domain.model.image import RemoteUpload
from storefront.domain.repository.image_store import RemoteObjectStore


class UnconfiguredObjectStore(RemoteObjectStore):

    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        raise RemoteStoreError("No remote object store is configured")

    def delete(self, remote_id: str) -> None:
        raise RemoteStoreError("No remote object store is configured")
