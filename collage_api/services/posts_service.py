import datetime
import logging
import re
from typing import Any, Dict, List, Optional

from dateutil import parser as dateparse

from collage_api.errors import (
    BlobFormatError,
    PostNotFound,
    PostValidationError,
    StorageError,
)
from collage_api.schemas.post import PostCreate, PostRecord, PostSummary

logger = logging.getLogger(__name__)

SLUG_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._~-]*$")
_EPOCH = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


class PostsService:
    def __init__(self, repo):
        self.repo = repo

    def list_posts(self, show_hidden: bool = False) -> List[PostSummary]:
        posts = []
        for slug, data in self.repo.load_records():
            summary = normalize_record(slug, data)
            if not show_hidden and not summary.visible:
                continue
            posts.append(summary)

        posts.sort(key=lambda p: _sort_timestamp(p.date or p.created_at), reverse=True)
        return posts

    def get_post(self, slug: str) -> Optional[Dict[str, Any]]:
        slug = (slug or "").strip()
        if not slug:
            raise PostValidationError("slug required")
        record = self.repo.get_record(slug)
        if record is None:
            return None
        if "visible" not in record:
            record = {**record, "visible": True}
        return record

    def create_post(self, payload: Optional[PostCreate]) -> PostRecord:
        payload = payload or PostCreate()
        slug = _require_slug(payload.slug)
        if not SLUG_RE.match(slug):
            raise PostValidationError("invalid slug")
        if not payload.items:
            raise PostValidationError("items required")

        record = PostRecord(
            slug=slug,
            title=payload.title or "",
            date=payload.date or "",
            tags=payload.tags or [],
            items=payload.items,
            created_at=utc_timestamp(),
            preview=payload.items[0].url or None,
            visible=True,
        )
        self.repo.save_record(slug, record.model_dump())
        logger.info(f"Created post {slug} with {len(record.items)} item(s)")
        return record

    def set_visibility(self, slug: Optional[str], visible: Any) -> bool:
        slug = _require_slug(slug)
        new_visible = visible is not False

        try:
            record = self.repo.get_record(slug)
        except BlobFormatError as e:
            logger.error(f"Stored data for {slug} is unreadable: {e}")
            raise StorageError("Invalid data.json format") from e
        if record is None:
            raise PostNotFound(f"data.json not found for slug {slug}")

        record["visible"] = new_visible
        self.repo.save_record(slug, record)
        logger.info(f"Set visibility of {slug} to {new_visible}")
        return new_visible

    def delete_post(self, slug: Optional[str]) -> List[str]:
        slug = _require_slug(slug)
        deleted = self.repo.delete_record(slug)
        if not deleted:
            raise PostNotFound("not found")
        logger.info(f"Deleted post {slug}: {deleted}")
        return deleted


def normalize_record(slug: str, data: dict) -> PostSummary:
    """Build a listing entry from a stored record, filling legacy gaps."""
    items = data.get("items") if isinstance(data.get("items"), list) else []
    tags = data.get("tags") if isinstance(data.get("tags"), list) else []
    created_at = _as_text(data.get("created_at"))
    first_url = items[0].get("url") if items and isinstance(items[0], dict) else None

    return PostSummary(
        slug=slug,
        title=_as_text(data.get("title")),
        date=_as_text(data.get("date")) or created_at,
        tags=[str(tag) for tag in tags],
        items=items,
        created_at=created_at,
        visible=data.get("visible") is not False,
        preview=_non_empty_text(data.get("preview")) or _non_empty_text(first_url),
    )


def utc_timestamp(now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require_slug(value) -> str:
    slug = value.strip() if isinstance(value, str) else ""
    if not slug:
        raise PostValidationError("slug required")
    return slug


def _as_text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _non_empty_text(value) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _sort_timestamp(value: str) -> datetime.datetime:
    if not value:
        return _EPOCH
    try:
        parsed = dateparse.parse(value)
    except (ValueError, OverflowError):
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed
