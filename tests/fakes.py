"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON repositories and
file/S3 stores but keep everything in dicts. Repositories hand out deep
copies and save conditionally on ``version``, like the real ones, so
concurrency tests see real conflicts.
"""

from __future__ import annotations

import copy
import threading
from typing import Callable

from storefront.domain.exceptions import ConcurrentUpdateConflict, RemoteStoreError
from storefront.domain.model.cart import Cart, Wishlist
from storefront.domain.model.category import Category
from storefront.domain.model.image import RemoteUpload
from storefront.domain.model.order import Order
from storefront.domain.model.product import Product
from storefront.domain.repository.cart_repository import CartRepository, WishlistRepository
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.domain.repository.image_store import (
    LocalImageStore,
    RemoteObjectStore,
    StoredFile,
)
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository


class _VersionedStore:
    """Dict of deep copies with a compare-and-set ``put``."""

    def __init__(self) -> None:
        self._docs: dict = {}
        self._lock = threading.Lock()
        self.saves = 0

    def get(self, key):
        with self._lock:
            doc = self._docs.get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def values(self) -> list:
        with self._lock:
            return [copy.deepcopy(doc) for doc in self._docs.values()]

    def seed(self, key, doc) -> None:
        self._docs[key] = copy.deepcopy(doc)

    def put(self, key, entity) -> None:
        with self._lock:
            stored = self._docs.get(key)
            stored_version = stored.version if stored is not None else 0
            if stored_version != entity.version:
                raise ConcurrentUpdateConflict(
                    f"{key!r}: expected version {entity.version}, found {stored_version}"
                )
            entity.version += 1
            self._docs[key] = copy.deepcopy(entity)
            self.saves += 1

    def remove(self, key) -> None:
        with self._lock:
            self._docs.pop(key, None)


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store = _VersionedStore()
        for p in products or []:
            self._store.seed(p.id, p)

    @property
    def saves(self) -> int:
        return self._store.saves

    def get_by_id(self, product_id: str) -> Product | None:
        return self._store.get(product_id)

    def list_all(self) -> list[Product]:
        return self._store.values()

    def find_by_image_filename(self, filename: str) -> Product | None:
        for product in self.list_all():
            if product.find_image(filename) is not None:
                return product
        return None

    def save(self, product: Product) -> None:
        self._store.put(product.id, product)

    def delete(self, product_id: str) -> None:
        self._store.remove(product_id)


class ContendedProductRepository(FakeProductRepository):
    """Every save of a product in ``contended`` loses to a concurrent writer."""

    def __init__(self, products: list[Product] | None = None) -> None:
        super().__init__(products)
        self.contended: set[str] = set()

    def save(self, product: Product) -> None:
        if product.id in self.contended:
            raise ConcurrentUpdateConflict(f"{product.id!r} is being written elsewhere")
        super().save(product)


class FakeCategoryRepository(CategoryRepository):

    def __init__(self, categories: list[Category] | None = None) -> None:
        self._store = {c.id: c for c in categories or []}

    def get_by_id(self, category_id: str) -> Category | None:
        return self._store.get(category_id)


class FakeCartRepository(CartRepository):

    def __init__(self, carts: list[Cart] | None = None) -> None:
        self._store = _VersionedStore()
        for cart in carts or []:
            self._store.seed(cart.user_id, cart)

    def get_for_user(self, user_id: str) -> Cart | None:
        return self._store.get(user_id)

    def save(self, cart: Cart) -> None:
        self._store.put(cart.user_id, cart)


class FakeWishlistRepository(WishlistRepository):

    def __init__(self, wishlists: list[Wishlist] | None = None) -> None:
        self._store = _VersionedStore()
        for wishlist in wishlists or []:
            self._store.seed(wishlist.user_id, wishlist)

    def get_for_user(self, user_id: str) -> Wishlist | None:
        return self._store.get(user_id)

    def save(self, wishlist: Wishlist) -> None:
        self._store.put(wishlist.user_id, wishlist)


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store = _VersionedStore()
        self._next_id = 1
        self.fail_next_saves = 0

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def save(self, order: Order) -> None:
        if self.fail_next_saves:
            self.fail_next_saves -= 1
            raise ConcurrentUpdateConflict("simulated conflict")
        if order.id is None:
            order.id = self._next_id
            self._next_id += 1
        self._store.put(order.id, order)


class ConflictingCartRepository(FakeCartRepository):
    """Loses the next ``conflicts`` saves to a simulated concurrent writer.

    ``interloper``, when set, runs just before each lost save and stands in
    for what the other writer did.
    """

    def __init__(self, conflicts: int = 1, carts: list[Cart] | None = None) -> None:
        super().__init__(carts)
        self.conflicts = conflicts
        self.interloper: Callable[[], object] | None = None

    def save(self, cart: Cart) -> None:
        if self.conflicts:
            self.conflicts -= 1
            if self.interloper is not None:
                self.interloper()
            raise ConcurrentUpdateConflict("simulated conflict")
        super().save(cart)


# --- Image stores -------------------------------------------------------------


class FakeLocalImageStore(LocalImageStore):

    def __init__(self, prefix: str = "/uploads/products") -> None:
        self._prefix = prefix
        self.files: dict[str, bytes] = {}
        self._counter = 0

    def add(self, public_path: str, data: bytes = b"img") -> None:
        self.files[public_path] = data

    def write(self, data: bytes, original_name: str) -> StoredFile:
        self._counter += 1
        filename = f"{self._counter}-{original_name}"
        public_path = f"{self._prefix}/{filename}"
        self.files[public_path] = data
        return StoredFile(filename=filename, public_path=public_path, byte_size=len(data))

    def exists(self, public_path: str) -> bool:
        return public_path in self.files

    def read(self, public_path: str) -> bytes:
        return self.files[public_path]

    def delete(self, public_path: str) -> bool:
        return self.files.pop(public_path, None) is not None


class FakeRemoteStore(RemoteObjectStore):

    def __init__(self, host: str = "cdn.example.com") -> None:
        self._host = host
        self.objects: dict[str, bytes] = {}
        self.uploaded: list[str] = []
        self.deleted: list[str] = []

    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        key = f"{folder}/{desired_name}"
        self.objects[key] = data
        self.uploaded.append(key)
        return RemoteUpload(
            id=key,
            url=f"https://{self._host}/{key}.jpg",
            width=640,
            height=480,
            format="jpg",
            byte_size=len(data),
        )

    def delete(self, remote_id: str) -> None:
        self.objects.pop(remote_id, None)
        self.deleted.append(remote_id)


class FailingRemoteStore(RemoteObjectStore):

    def __init__(self) -> None:
        self.calls = 0

    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        self.calls += 1
        raise RemoteStoreError("remote host unreachable")

    def delete(self, remote_id: str) -> None:
        raise RemoteStoreError("remote host unreachable")


class BlockingRemoteStore(FakeRemoteStore):
    """Holds every upload until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        self.started.set()
        if not self.release.wait(timeout=5):
            raise RemoteStoreError("upload never released")
        return super().upload(data, folder, desired_name)
