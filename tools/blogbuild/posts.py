from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from .config import CONTENT_TYPE
from .content_source import ContentSource
from .errors import DuplicateSlugError, EntryNotFoundError, InvalidEntryError
from .markdown_processing import markdown_to_html
from .models import Entry, PathDescriptor, Post, PostSummary
from .rich_text import is_rich_text, rich_text_to_html
from .utils import date_sort_key, is_safe_slug


def sort_by_date(entries: List[Entry]) -> List[Entry]:
    """
    Newest first. Missing or unparsable dates count as the earliest date, so
    those entries end up last; ties keep the store's order.
    """
    return sorted(entries, key=lambda e: date_sort_key(e.date), reverse=True)


def _check_unique_slugs(entries: List[Entry]) -> None:
    by_slug: Dict[str, List[str]] = defaultdict(list)
    for e in entries:
        by_slug[e.slug].append(e.id)
    for slug, ids in by_slug.items():
        if len(ids) > 1:
            raise DuplicateSlugError(slug, ids)


def list_posts(
    source: ContentSource, content_type: str = CONTENT_TYPE
) -> List[PostSummary]:
    entries = source.get_entries(content_type)
    return [PostSummary.from_entry(e) for e in sort_by_date(entries)]


def enumerate_paths(
    source: ContentSource, content_type: str = CONTENT_TYPE
) -> List[PathDescriptor]:
    """
    One {"slug": ...} descriptor per entry, in store order.

    Only these paths are built; anything else is a not-found page. Entries
    without a usable slug or sharing a slug fail the build.
    """
    entries = source.get_entries(content_type)
    for e in entries:
        if not isinstance(e.slug, str) or not e.slug.strip():
            raise InvalidEntryError(f"{content_type} entry {e.id} has no slug")
        if not is_safe_slug(e.slug):
            raise InvalidEntryError(
                f"{content_type} entry {e.id} has slug {e.slug!r}, "
                "which cannot be used as a path segment"
            )
    _check_unique_slugs(entries)
    return [{"slug": e.slug} for e in entries]


def get_entry(
    source: ContentSource, slug: str, content_type: str = CONTENT_TYPE
) -> Entry:
    entries = source.get_entries(content_type, {"fields.slug": slug})
    # the store matches exactly, but do not trust a sloppy filter
    entries = [e for e in entries if e.slug == slug]
    if not entries:
        raise EntryNotFoundError(content_type, slug)
    if len(entries) > 1:
        raise DuplicateSlugError(slug, [e.id for e in entries])
    return entries[0]


def body_to_html(body) -> str:
    if body is None:
        return ""
    if is_rich_text(body):
        return rich_text_to_html(body)
    if isinstance(body, str):
        return markdown_to_html(body)
    raise InvalidEntryError(
        f"unsupported body of type {type(body).__name__}"
    )


def get_post(
    source: ContentSource, slug: str, content_type: str = CONTENT_TYPE
) -> Post:
    """The entry for `slug` with its body converted and image resolved."""
    entry = get_entry(source, slug, content_type)
    try:
        html = body_to_html(entry.body)
    except InvalidEntryError as e:
        raise InvalidEntryError(f"{content_type} entry {entry.id}: {e}") from e
    return Post(entry=entry, html=html, image=entry.featured_image)


def neighbours(
    posts_sorted: List[PostSummary], slug: str
) -> Tuple[Optional[PostSummary], Optional[PostSummary]]:
    """(newer, older) around `slug` in list order."""
    for i, p in enumerate(posts_sorted):
        if p.slug != slug:
            continue
        newer = posts_sorted[i - 1] if i > 0 else None
        older = posts_sorted[i + 1] if i < len(posts_sorted) - 1 else None
        return newer, older
    return None, None
