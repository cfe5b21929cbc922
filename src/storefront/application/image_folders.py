"""Remote folder layout for product images."""

from __future__ import annotations

from storefront.domain.model.product import Product


def product_folder(root: str, product: Product, color: str = "") -> str:
    """``<root>/<category>/<product_id>[/<color>]``."""
    parts = [root.strip("/"), product.category_id or "uncategorized", product.id]
    if color:
        parts.append(color.strip().lower().replace(" ", "-"))
    return "/".join(parts)
