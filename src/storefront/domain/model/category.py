"""Category lookup entry.

Categories are managed elsewhere; the core only needs to know whether a
category sells its products per size.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    tracks_size_variants: bool = False
