from __future__ import annotations

import pathlib
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import yaml

from .config import PROTOCOL_RELATIVE, SAFE_SLUG

# Sort key for entries whose date is missing or unparsable.
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def is_safe_slug(s) -> bool:
    """Usable as a single path segment: no separators, no dot-dirs."""
    return isinstance(s, str) and bool(SAFE_SLUG.match(s))


def read_yaml(path: pathlib.Path) -> Dict[str, Any]:
    if path.exists():
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {}


def write_yaml(path: pathlib.Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )


def parse_date(v) -> Optional[datetime]:
    """
    Coerce a stored date field to an aware datetime.

    Accepts date/datetime objects and ISO-8601 strings ("2022-06-01",
    "2022-06-01T10:00", "2022-06-01T10:00:00.000Z"). Naive values are UTC.
    Returns None for anything else.
    """
    if isinstance(v, datetime):
        dt = v
    elif isinstance(v, date):
        dt = datetime(v.year, v.month, v.day)
    elif isinstance(v, str):
        s = v.strip().strip('"').strip("'")
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def date_sort_key(v) -> datetime:
    return parse_date(v) or EARLIEST


def https_url(url: str) -> str:
    """Asset URLs come back protocol-relative (//images.ctfassets.net/...)."""
    if url and PROTOCOL_RELATIVE.match(url):
        return "https:" + url
    return url


def ensure_dir(p: pathlib.Path) -> None:
    p.mkdir(parents=True, exist_ok=True)
