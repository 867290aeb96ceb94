"""
Content records as the build sees them.

Entries are read-only snapshots of what the content store returned for this
build; summaries and path descriptors are derived from them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .utils import https_url, parse_date


@dataclass(frozen=True)
class ImageRef:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class Asset:
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def image(self) -> Optional[ImageRef]:
        """The asset's file as an image reference, if it has a URL."""
        file = self.fields.get("file") or {}
        url = file.get("url")
        if not url:
            return None
        dims = (file.get("details") or {}).get("image") or {}
        return ImageRef(
            url=https_url(url),
            width=dims.get("width"),
            height=dims.get("height"),
            title=self.fields.get("title") or self.fields.get("description"),
        )


@dataclass(frozen=True)
class Entry:
    id: str
    content_type: str
    fields: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def title(self) -> str:
        return self.fields.get("title") or ""

    @property
    def slug(self) -> Optional[str]:
        return self.fields.get("slug")

    @property
    def date(self) -> Optional[str]:
        return self.fields.get("date")

    @property
    def body(self):
        return self.fields.get("body")

    @property
    def created(self) -> Optional[datetime]:
        return parse_date(self.created_at)

    @property
    def featured_image(self) -> Optional[ImageRef]:
        ref = self.fields.get("featuredImage")
        if isinstance(ref, Asset):
            return ref.image
        return None


@dataclass(frozen=True)
class PostSummary:
    """What the index page needs to list a post."""

    id: str
    title: str
    slug: str
    date: Optional[str] = None

    @property
    def url(self) -> str:
        return f"/posts/{self.slug}"

    @classmethod
    def from_entry(cls, entry: Entry) -> "PostSummary":
        return cls(
            id=entry.id,
            title=entry.title,
            slug=entry.slug or "",
            date=entry.date,
        )


# Route parameter name -> value, e.g. {"slug": "hello-world"}
PathDescriptor = Dict[str, str]


@dataclass
class Post:
    """A detail page ready for the rendering surface."""

    entry: Entry
    html: str
    image: Optional[ImageRef] = None

    @property
    def title(self) -> str:
        return self.entry.title

    @property
    def slug(self) -> str:
        return self.entry.slug or ""

    @property
    def date(self) -> Optional[str]:
        return self.entry.date
