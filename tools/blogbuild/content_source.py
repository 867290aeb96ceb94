from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import RETRY_STATUSES, ClientConfig
from .errors import ContentSourceError
from .models import Asset, Entry

# How many levels of linked entries/assets the store embeds in `includes`.
INCLUDE_DEPTH = 2
# Stable ordering so skip/limit paging neither repeats nor drops entries.
PAGE_ORDER = "sys.createdAt,sys.id"
# Query parameters the adapter owns; filters may not set them.
RESERVED_PARAMS = frozenset({"content_type", "include", "order", "limit", "skip"})


def make_session(max_retries: int) -> requests.Session:
    session = requests.Session()
    if max_retries > 0:
        retry = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset({"GET"}),
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
    return session


def _is_link(v: Any) -> bool:
    return (
        isinstance(v, dict)
        and isinstance(v.get("sys"), dict)
        and v["sys"].get("type") == "Link"
    )


def _error_details(body: Any):
    if not isinstance(body, dict):
        return None, None
    sys_block = body.get("sys") or {}
    error_id = sys_block.get("id") if isinstance(sys_block, dict) else None
    message = body.get("message")
    errors = (body.get("details") or {}).get("errors") or []
    extra = [
        f"{e.get('name')}={e.get('value')}" if e.get("value") is not None
        else str(e.get("name"))
        for e in errors
        if isinstance(e, dict) and e.get("name")
    ]
    if message and extra:
        message = f"{message} [{'; '.join(extra)}]"
    return error_id, message


class _LinkIndex:
    """Resolves `Link` objects against one response page."""

    def __init__(self, includes: Mapping[str, Any], items: List[Dict[str, Any]]):
        self.raw_entries: Dict[str, Dict[str, Any]] = {}
        self.raw_assets: Dict[str, Dict[str, Any]] = {}
        for raw in list(items) + list(includes.get("Entry") or []):
            rid = (raw.get("sys") or {}).get("id")
            if rid:
                self.raw_entries.setdefault(rid, raw)
        for raw in includes.get("Asset") or []:
            rid = (raw.get("sys") or {}).get("id")
            if rid:
                self.raw_assets[rid] = raw

    def entry(self, raw: Dict[str, Any], depth: int = INCLUDE_DEPTH) -> Entry:
        sys_block = raw.get("sys") or {}
        if not sys_block.get("id"):
            raise ContentSourceError("malformed response: entry without sys.id")
        ctype = ((sys_block.get("contentType") or {}).get("sys") or {}).get("id")
        return Entry(
            id=sys_block["id"],
            content_type=ctype or "",
            fields=self._resolve(raw.get("fields") or {}, depth),
            created_at=sys_block.get("createdAt"),
            updated_at=sys_block.get("updatedAt"),
        )

    def asset(self, raw: Dict[str, Any]) -> Asset:
        return Asset(id=raw["sys"]["id"], fields=dict(raw.get("fields") or {}))

    def _resolve(self, v: Any, depth: int) -> Any:
        if _is_link(v):
            link_type = v["sys"].get("linkType")
            lid = v["sys"].get("id")
            if link_type == "Asset" and lid in self.raw_assets:
                return self.asset(self.raw_assets[lid])
            if link_type == "Entry" and lid in self.raw_entries and depth > 0:
                return self.entry(self.raw_entries[lid], depth - 1)
            return None
        if isinstance(v, dict):
            return {k: self._resolve(x, depth) for k, x in v.items()}
        if isinstance(v, list):
            return [self._resolve(x, depth) for x in v]
        return v


class ContentSource:
    """
    Read-only client for the content delivery API.

    Every call goes to the network; nothing is cached between calls.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self._owns_session = session is None
        self.session = session or make_session(config.max_retries)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def get_entries(
        self,
        content_type: str,
        filters: Optional[Mapping[str, str]] = None,
    ) -> List[Entry]:
        """
        All entries of `content_type` whose fields match `filters` exactly.

        `filters` maps a field path such as "fields.slug" to a value.
        Follows skip/limit paging until the reported total has been read.
        """
        params: Dict[str, Any] = {
            "content_type": content_type,
            "include": INCLUDE_DEPTH,
            "order": PAGE_ORDER,
            "limit": self.config.page_size,
        }
        for key, value in (filters or {}).items():
            if key in RESERVED_PARAMS:
                raise ContentSourceError(f"filter may not override {key!r}")
            params[key] = value

        entries: List[Entry] = []
        skip = 0
        while True:
            page = self._get("/entries", dict(params, skip=skip))
            items = page.get("items")
            if not isinstance(items, list):
                raise ContentSourceError("malformed response: missing items")
            links = _LinkIndex(page.get("includes") or {}, items)
            entries.extend(links.entry(raw) for raw in items)
            skip += len(items)
            total = page.get("total")
            if not items or not isinstance(total, int) or skip >= total:
                break
        return entries

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = self.config.base_url + path
        shown = " ".join(
            f"{k}={params[k]}" for k in params
            if k not in ("include", "order", "limit")
        )
        print(f"+ GET {path} {shown}")
        try:
            resp = self.session.get(
                url,
                params=params,
                headers={
                    "Authorization": f"Bearer {self.config.access_token}",
                    "Accept": "application/json",
                },
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            raise ContentSourceError(f"request to {url} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code != 200:
            error_id, message = _error_details(body)
            raise ContentSourceError(
                message or f"content store returned HTTP {resp.status_code}",
                status=resp.status_code,
                error_id=error_id,
            )
        if not isinstance(body, dict):
            raise ContentSourceError(
                f"malformed response from {url}: expected a JSON object",
                status=resp.status_code,
            )
        return body
