"""Published-article storage helpers on top of the Supabase client."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime

from aperio.db import NOT_FOUND, UNIQUE_VIOLATION, DatabaseError, SupabaseClient
from aperio.models import WORDS_PER_MINUTE_READ, ValidationError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

LIST_COLUMNS = "id,title,slug,excerpt,category,tags,reading_time,published_at"
DETAIL_COLUMNS = (
    "id,title,slug,excerpt,content,category,tags,status,reading_time,"
    "published_at,created_at,updated_at,author_id"
)


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower()).strip()
    return re.sub(r"\s+", "-", slug)


def validate_signup(email: str, password: str, confirm_password: str) -> None:
    if not email.strip():
        raise ValidationError("Email is required")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


async def create_article(
    db: SupabaseClient,
    author_id: str,
    title: str,
    content: str,
    category: str = "markets",
    excerpt: str = "",
    tags: str | list[str] = "",
    status: str = "draft",
) -> dict:
    """Insert an article and return the stored row.

    A title whose slug already exists raises ValidationError with a message
    fit to show the author; other database errors propagate.
    """
    if not title.strip() or not content.strip():
        raise ValidationError("Title and content are required")

    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]

    row = {
        "title": title.strip(),
        "slug": slugify(title),
        "excerpt": excerpt.strip() or None,
        "content": content.strip(),
        "author_id": author_id,
        "category": category,
        "tags": tags,
        "status": status,
        "reading_time": max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE_READ)),
        "published_at": datetime.utcnow().isoformat() if status == "published" else None,
    }

    try:
        inserted = await db.insert("articles", row)
    except DatabaseError as exc:
        if exc.code == UNIQUE_VIOLATION:
            raise ValidationError(
                "An article with this title already exists. "
                "Please choose a different title."
            ) from exc
        raise

    logger.info("Created %s article '%s'", status, row["slug"])
    return inserted[0] if inserted else row


async def list_published(
    db: SupabaseClient, category: str | None = None, limit: int = 50,
) -> list[dict]:
    filters = {"status": "published"}
    if category and category != "all":
        filters["category"] = category
    return await db.select(
        "articles", LIST_COLUMNS, filters,
        order="published_at.desc.nullslast", limit=limit,
    ) or []


async def get_published_by_slug(db: SupabaseClient, slug: str) -> dict:
    try:
        return await db.select(
            "articles", DETAIL_COLUMNS, {"slug": slug, "status": "published"},
            single=True,
        )
    except DatabaseError as exc:
        if exc.code == NOT_FOUND:
            raise LookupError(f"Article not found: {slug}") from exc
        raise


async def record_view(db: SupabaseClient, article_id: str, user_id: str | None = None) -> bool:
    """Best effort; a failed write is logged and reported as False."""
    try:
        await db.insert("article_views", {
            "article_id": article_id,
            "user_id": user_id,
            "view_date": datetime.utcnow().isoformat(),
        })
    except DatabaseError as exc:
        logger.warning("Could not record view of article %s: %s", article_id, exc)
        return False
    return True


async def is_bookmarked(db: SupabaseClient, user_id: str, article_id: str) -> bool:
    rows = await db.select(
        "bookmarks", "id", {"user_id": user_id, "article_id": article_id},
    )
    return bool(rows)


async def toggle_bookmark(db: SupabaseClient, user_id: str, article_id: str) -> bool:
    """Flip the bookmark and return the new state."""
    keys = {"user_id": user_id, "article_id": article_id}
    if await is_bookmarked(db, user_id, article_id):
        await db.delete("bookmarks", keys)
        return False
    await db.insert("bookmarks", keys)
    return True


async def related_articles(
    db: SupabaseClient, category: str, exclude_id: str, limit: int = 3,
) -> list[dict]:
    return await db.select(
        "articles", "id,title,slug,excerpt,reading_time,published_at",
        {"category": category, "status": "published", "id": ("neq", exclude_id)},
        order="published_at.desc", limit=limit,
    ) or []


async def list_categories(db: SupabaseClient) -> list[dict]:
    return await db.select("categories", "*", order="name") or []
