"""JSON-file-backed implementation of CategoryRepository."""

from __future__ import annotations

from pathlib import Path

from storefront.domain.model.category import Category
from storefront.domain.repository.category_repository import CategoryRepository
from storefront.infrastructure.persistence.json_collection import JsonCollection


class JsonCategoryRepository(CategoryRepository):

    def __init__(self, file_path: Path) -> None:
        self._collection = JsonCollection(file_path, key_field="id")

    def get_by_id(self, category_id: str) -> Category | None:
        raw = self._collection.find(category_id)
        if raw is None:
            return None
        return Category(
            id=raw["id"],
            name=raw["name"],
            tracks_size_variants=raw.get("tracks_size_variants", False),
        )
