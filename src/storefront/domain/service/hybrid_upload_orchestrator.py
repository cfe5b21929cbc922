"""Domain service: Hybrid Upload Orchestrator.

Splits "file accepted" from "file durably replicated". ``accept`` writes
the bytes to local storage and hands back a record the caller can persist
and serve straight away; a background worker then copies the bytes to the
remote object store and updates the persisted record.

The queue is a ``ThreadPoolExecutor``: FIFO, one worker by default, which
caps the process at one in-flight remote upload per orchestrator. Each
replication gets a future the caller may keep or drop.

Replication failures never reach the request that uploaded the file. They
are logged and recorded as ``migration_status=failed`` on the record; the
local copy stays and nothing is retried automatically.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable

from storefront.domain.exceptions import RemoteStoreError, ValidationError
from storefront.domain.model.image import (
    ImageRecord,
    LegacyImage,
    MigrationStatus,
    ProductImage,
    RemoteUpload,
)
from storefront.domain.repository.image_store import LocalImageStore, RemoteObjectStore
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.concurrency import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF,
    run_with_retry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    data: bytes
    original_name: str
    content_type: str | None = None


@dataclass(frozen=True)
class UploadTicket:
    """The provisional record plus a handle on its replication.

    ``future`` resolves to the updated record (or None if no product holds
    it any more); it is None when no replication was queued.
    """

    record: ImageRecord
    future: Future | None = None


@dataclass(frozen=True)
class UploadQueueStats:
    queued: int
    in_flight: int
    completed: int
    failed: int


class HybridUploadOrchestrator:

    def __init__(
        self,
        local_store: LocalImageStore,
        remote_store: RemoteObjectStore,
        product_repo: ProductRepository,
        workers: int = 1,
        max_attempts: int = DEFAULT_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF,
    ) -> None:
        if workers < 1:
            raise ValidationError("At least one replication worker is required")
        self._local_store = local_store
        self._remote_store = remote_store
        self._product_repo = product_repo
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="image-replication"
        )
        self._lock = threading.Lock()
        self._closed = False
        self._queued = 0
        self._in_flight = 0
        self._completed = 0
        self._failed = 0

    # --- Accepting files ------------------------------------------------------

    def accept(
        self,
        file_bytes: bytes,
        original_name: str,
        folder: str,
        migration_status: MigrationStatus = MigrationStatus.PENDING,
        persist: Callable[[list[ImageRecord]], None] | None = None,
        content_type: str | None = None,
    ) -> UploadTicket:
        """Store one file locally and queue its replication."""
        return self.accept_all(
            [IncomingFile(file_bytes, original_name, content_type)],
            folder,
            migration_status=migration_status,
            persist=persist,
        )[0]

    def accept_all(
        self,
        files: list[IncomingFile],
        folder: str,
        migration_status: MigrationStatus = MigrationStatus.PENDING,
        persist: Callable[[list[ImageRecord]], None] | None = None,
    ) -> list[UploadTicket]:
        """Store every file locally, let the caller persist the records, then queue.

        ``persist`` runs before anything is queued so the background update
        always finds the record it is looking for. If it raises, the local
        files written here are removed again.
        """
        self._assert_open()
        records: list[ImageRecord] = []
        try:
            for incoming in files:
                stored = self._local_store.write(incoming.data, incoming.original_name)
                records.append(
                    ImageRecord.create_local(
                        filename=stored.filename,
                        local_path=stored.public_path,
                        original_name=incoming.original_name,
                        byte_size=stored.byte_size,
                        migration_status=migration_status,
                        content_type=incoming.content_type,
                    )
                )
            if persist is not None:
                persist(records)
        except Exception:
            for record in records:
                self._delete_local(record.local_path)
            raise

        tickets = []
        for incoming, record in zip(files, records):
            future = None
            if record.migration_status == MigrationStatus.PENDING:
                future = self._submit(incoming.data, record.filename, folder)
            tickets.append(UploadTicket(record=record, future=future))
        logger.info("Accepted %d image(s) for %s", len(tickets), folder)
        return tickets

    def replicate_existing(self, record: ImageRecord, folder: str) -> Future:
        """Queue replication of a persisted pending record whose file is already local."""
        self._assert_open()
        if record.migration_status != MigrationStatus.PENDING or not record.local_path:
            raise ValidationError(f"Image {record.filename} is not waiting for replication")
        data = self._local_store.read(record.local_path)
        return self._submit(data, record.filename, folder)

    # --- Removing files -------------------------------------------------------

    def discard(self, image: ProductImage) -> None:
        """Delete an image's bytes from both stores. Failures are only logged."""
        if isinstance(image, LegacyImage):
            if image.url.startswith("/"):
                self._delete_local(image.url)
            return
        self._delete_local(image.local_path)
        if image.remote_id:
            try:
                self._remote_store.delete(image.remote_id)
            except RemoteStoreError:
                logger.error("Could not delete remote image %s", image.remote_id, exc_info=True)

    # --- Lifecycle ------------------------------------------------------------

    def stats(self) -> UploadQueueStats:
        with self._lock:
            return UploadQueueStats(
                queued=self._queued,
                in_flight=self._in_flight,
                completed=self._completed,
                failed=self._failed,
            )

    def shutdown(self, drain: bool = True) -> None:
        """Stop accepting files.

        With ``drain`` every queued replication runs first; without it queued
        work is cancelled (those records stay pending) and only the in-flight
        upload is waited for.
        """
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=not drain)
        with self._lock:
            self._queued = 0
        logger.info("Image replication stopped (drain=%s)", drain)

    # --- Background work ------------------------------------------------------

    def _submit(self, data: bytes, filename: str, folder: str) -> Future:
        with self._lock:
            if self._closed:
                raise ValidationError("Image uploads are shut down")
            self._queued += 1
            return self._executor.submit(self._replicate, data, filename, folder)

    def _replicate(self, data: bytes, filename: str, folder: str) -> ImageRecord | None:
        with self._lock:
            self._queued -= 1
            self._in_flight += 1
        try:
            if self._claim(filename) is None:
                return None
            try:
                upload = self._remote_store.upload(
                    data, folder, desired_name=PurePosixPath(filename).stem
                )
            except RemoteStoreError:
                logger.error("Remote upload failed for %s, keeping local copy",
                             filename, exc_info=True)
                self._count(failed=True)
                return self._update(filename, lambda r: r.mark_failed())

            record = self._update(filename, lambda r: r.mark_replicated(upload))
            if record is None:
                logger.warning("Image %s was removed during upload, deleting remote copy", filename)
                self._delete_remote_orphan(upload)
            else:
                logger.info("Replicated %s to %s", filename, upload.url)
            self._count(failed=False)
            return record
        except Exception:
            logger.exception("Replication of %s crashed", filename)
            raise
        finally:
            with self._lock:
                self._in_flight -= 1

    def _claim(self, filename: str) -> ImageRecord | None:
        """Move the persisted record from pending to migrating.

        Returns None when there is nothing to upload: no product holds the
        record, or another queued task already took it.
        """

        def attempt() -> ImageRecord | None:
            product = self._product_repo.find_by_image_filename(filename)
            record = product.find_image(filename) if product is not None else None
            if record is None:
                logger.warning("No product holds image %s any more, skipping upload", filename)
                return None
            if record.migration_status != MigrationStatus.PENDING:
                logger.info("Image %s is already %s, skipping upload",
                            filename, record.migration_status.value)
                return None
            record.begin_migration()
            self._product_repo.save(product)
            return record

        return run_with_retry(
            attempt, attempts=self._max_attempts, backoff_base=self._backoff_base
        )

    def _update(
        self, filename: str, mutate: Callable[[ImageRecord], None]
    ) -> ImageRecord | None:
        """Apply ``mutate`` to the persisted record with a conditional save."""

        def attempt() -> ImageRecord | None:
            product = self._product_repo.find_by_image_filename(filename)
            if product is None:
                return None
            record = product.find_image(filename)
            if record is None:
                return None
            mutate(record)
            self._product_repo.save(product)
            return record

        return run_with_retry(
            attempt, attempts=self._max_attempts, backoff_base=self._backoff_base
        )

    def _count(self, failed: bool) -> None:
        with self._lock:
            if failed:
                self._failed += 1
            else:
                self._completed += 1

    def _delete_remote_orphan(self, upload: RemoteUpload) -> None:
        try:
            self._remote_store.delete(upload.id)
        except RemoteStoreError:
            logger.error("Could not delete orphaned remote image %s", upload.id, exc_info=True)

    def _delete_local(self, public_path: str | None) -> None:
        if not public_path:
            return
        try:
            self._local_store.delete(public_path)
        except OSError:
            logger.error("Could not delete local image %s", public_path, exc_info=True)

    def _assert_open(self) -> None:
        with self._lock:
            if self._closed:
                raise ValidationError("Image uploads are shut down")