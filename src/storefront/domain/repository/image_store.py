"""Ports for the two places image bytes live.

``LocalImageStore`` is the filesystem the server can serve from right away;
``RemoteObjectStore`` is the durable remote host (CDN / object storage)
that copies are replicated to in the background.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.domain.model.image import RemoteUpload


@dataclass(frozen=True)
class StoredFile:
    filename: str
    public_path: str
    byte_size: int


class LocalImageStore(ABC):

    @abstractmethod
    def write(self, data: bytes, original_name: str) -> StoredFile:
        """Write ``data`` once under a newly generated unique name."""

    @abstractmethod
    def exists(self, public_path: str) -> bool:
        """True if the file behind ``public_path`` is present right now."""

    @abstractmethod
    def read(self, public_path: str) -> bytes:
        """Return the bytes behind ``public_path``."""

    @abstractmethod
    def delete(self, public_path: str) -> bool:
        """Delete the file. Returns False if it was already gone."""


class RemoteObjectStore(ABC):
    """Remote blob host. Both calls raise RemoteStoreError on failure."""

    @abstractmethod
    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        """Store ``data`` under ``folder`` and return its remote id and URL."""

    @abstractmethod
    def delete(self, remote_id: str) -> None:
        """Delete a previously uploaded object."""
