"""
Slug Generation Utilities
Derives URL-safe slugs from display names and resolves collisions
"""

import re
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


def slugify(text: str, fallback: str = "item") -> str:
    """Lower-case, collapse anything non-alphanumeric into single dashes"""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").strip().lower()).strip("-")
    return slug or fallback


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


async def generate_unique_slug(db: AsyncSession, model, name: str, fallback: str = "item") -> str:
    """
    Generate a slug unique within the model's table.

    A taken slug is retried with a millisecond timestamp suffix, e.g.
    "grand-gate" then "grand-gate-1718000000000".
    """
    base_slug = slugify(name, fallback)

    result = await db.execute(select(model.id).where(model.slug == base_slug))
    if result.first() is None:
        return base_slug

    stamp = _timestamp_ms()
    while True:
        candidate = f"{base_slug}-{stamp}"
        result = await db.execute(select(model.id).where(model.slug == candidate))
        if result.first() is None:
            return candidate
        stamp += 1
