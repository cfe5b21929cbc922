"""Local image storage on the server's filesystem.

Files are written once under a generated ``<millis>-<random><ext>`` name and
addressed by their public path (``<url_prefix>/<filename>``), which is what
image records store.
"""

from __future__ import annotations

import logging
import secrets
import time
from pathlib import Path, PurePosixPath

from storefront.domain.exceptions import ValidationError
from storefront.domain.repository.image_store import LocalImageStore, StoredFile

logger = logging.getLogger(__name__)


class FilesystemImageStore(LocalImageStore):

    def __init__(self, root: Path, url_prefix: str = "/uploads/products") -> None:
        self._root = root
        self._url_prefix = "/" + url_prefix.strip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    def write(self, data: bytes, original_name: str) -> StoredFile:
        if not data:
            raise ValidationError(f"File {original_name!r} is empty")
        suffix = PurePosixPath(original_name).suffix.lower()
        while True:
            filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"
            path = self._root / filename
            try:
                # "xb": never overwrite an existing upload
                with path.open("xb") as fh:
                    fh.write(data)
                break
            except FileExistsError:
                continue
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return StoredFile(
            filename=filename,
            public_path=f"{self._url_prefix}/{filename}",
            byte_size=len(data),
        )

    def exists(self, public_path: str) -> bool:
        path = self._path_for(public_path)
        return path is not None and path.is_file()

    def read(self, public_path: str) -> bytes:
        path = self._path_for(public_path)
        if path is None:
            raise FileNotFoundError(public_path)
        return path.read_bytes()

    def delete(self, public_path: str) -> bool:
        path = self._path_for(public_path)
        if path is None or not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted local image %s", public_path)
        return True

    def _path_for(self, public_path: str) -> Path | None:
        """Map a public path back to a file under the root, or None if it is not ours."""
        name = PurePosixPath(public_path).name
        if not name or not public_path.startswith(self._url_prefix + "/"):
            return None
        return self._root / name
