from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from markdown import markdown
from slugify import slugify

import config
from errors import NotFound, ValidationError
from store import JsonDocumentStore


logger = logging.getLogger(__name__)

POST_FIELDS = ("title", "slug", "excerpt", "content", "published", "createdAt", "updatedAt")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def slugify_title(title: str) -> str:
    """Lowercase ``title`` with every run of other characters turned into one hyphen.

    Entities are left undecoded and letters are not transliterated, so only
    ASCII letters and digits survive.
    """
    return slugify(
        title or "",
        entities=False,
        decimal=False,
        hexadecimal=False,
        regex_pattern=r"[^a-z0-9]+",
        allow_unicode=True,
        replacements=[[",", "-"]],
    )


def parse_date(date_str: Optional[str]) -> datetime:
    if not date_str:
        return datetime.min.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(date_str)
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def render_content(md_text: str) -> str:
    return markdown(
        md_text or "",
        extensions=["fenced_code", "codehilite", "tables", "sane_lists"],
        output_format="html5",
    )


def clean_fields(fields: Dict) -> Dict:
    """Validate an incoming post payload and derive its slug.

    ``title``, ``excerpt`` and ``content`` must be present as strings and the
    title must produce a non-empty slug. ``published`` defaults to False.
    """
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be a JSON object")

    missing = [name for name in ("title", "excerpt", "content") if fields.get(name) is None]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    for name in ("title", "excerpt", "content"):
        if not isinstance(fields[name], str):
            raise ValidationError(f"Field '{name}' must be a string")

    title = fields["title"]
    if not title.strip():
        raise ValidationError("Title is required")
    slug = slugify_title(title)
    if not slug:
        raise ValidationError("Slug could not be generated from title")

    published = fields.get("published", False)
    if published is None:
        published = False
    if not isinstance(published, bool):
        raise ValidationError("Field 'published' must be a boolean")

    return {
        "title": title,
        "slug": slug,
        "excerpt": fields["excerpt"],
        "content": fields["content"],
        "published": published,
    }


def to_post(doc: Dict) -> Dict:
    post = {"id": doc["_id"]}
    post.update({name: doc.get(name) for name in POST_FIELDS})
    return post


class PostRepository:
    """Post lifecycle on top of a document store collection."""

    def __init__(
        self,
        store: JsonDocumentStore,
        collection: str = config.POSTS_COLLECTION,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.collection = collection
        self.clock = clock

    def list(self) -> List[Dict]:
        posts = [to_post(doc) for doc in self.store.find(self.collection)]
        return sorted(posts, key=lambda p: parse_date(p.get("createdAt")), reverse=True)

    def list_published(self) -> List[Dict]:
        return [p for p in self.list() if p.get("published")]

    def get(self, post_id: str) -> Dict:
        doc = self.store.find_one(self.collection, post_id)
        if doc is None:
            raise NotFound("Post not found")
        return to_post(doc)

    def get_by_slug(self, slug: str, published_only: bool = True) -> Dict:
        # Slugs may collide; the newest post wins.
        for post in self.list():
            if post.get("slug") != slug:
                continue
            if published_only and not post.get("published"):
                continue
            return post
        raise NotFound("Post not found")

    def create(self, fields: Dict) -> str:
        payload = clean_fields(fields)
        now = self.clock().isoformat(timespec="microseconds")
        payload["createdAt"] = now
        payload["updatedAt"] = now
        post_id = self.store.insert_one(self.collection, payload)
        logger.info("Created post %s (%s)", post_id, payload["slug"])
        return post_id

    def update(self, post_id: str, fields: Dict) -> None:
        payload = clean_fields(fields)
        existing = self.store.find_one(self.collection, post_id)
        if existing is None:
            raise NotFound("Post not found")

        now = self.clock()
        previous = parse_date(existing.get("updatedAt"))
        if now <= previous:
            # clock has not advanced since the last write
            now = previous + timedelta(microseconds=1)
        payload["updatedAt"] = now.isoformat(timespec="microseconds")

        if not self.store.update_one(self.collection, post_id, payload):
            raise NotFound("Post not found")
        logger.info("Updated post %s (%s)", post_id, payload["slug"])

    def delete(self, post_id: str) -> None:
        if not self.store.delete_one(self.collection, post_id):
            raise NotFound("Post not found")
        logger.info("Deleted post %s", post_id)
