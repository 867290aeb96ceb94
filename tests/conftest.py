"""
Shared fixtures: a fake content delivery API behind a requests-like session.
"""
from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict, List, Optional

import pytest

from tools.blogbuild.config import ClientConfig
from tools.blogbuild.content_source import ContentSource


class FakeResponse:
    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeStore:
    """
    In-memory stand-in for the entries endpoint.

    Honours content_type, fields.* equality filters and skip/limit paging.
    Set `error` to answer every request with (status, body) instead.
    """

    def __init__(self):
        self.items: List[Dict[str, Any]] = []
        self.assets: List[Dict[str, Any]] = []
        self.linked_entries: List[Dict[str, Any]] = []
        self.content_types = {"blogPost"}
        self.error: Optional[tuple] = None
        self.calls: List[Dict[str, Any]] = []

    def add_post(self, slug, date="2022-01-01", title=None, body="Hello",
                 entry_id=None, created_at="2021-12-01T00:00:00.000Z",
                 **fields):
        entry_id = entry_id or f"id-{slug}-{len(self.items)}"
        if title is None:
            title = slug.title() if slug else "Untitled"
        f = {"title": title, "slug": slug, "body": body}
        if date is not None:
            f["date"] = date
        f.update(fields)
        self.items.append({
            "sys": {
                "id": entry_id,
                "type": "Entry",
                "createdAt": created_at,
                "updatedAt": created_at,
                "contentType": {"sys": {"type": "Link", "linkType": "ContentType",
                                        "id": "blogPost"}},
            },
            "fields": f,
        })
        return entry_id

    def add_asset(self, asset_id, url="//images.ctfassets.net/abc/hero.png",
                  width=800, height=600, title="Hero"):
        self.assets.append({
            "sys": {"id": asset_id, "type": "Asset"},
            "fields": {
                "title": title,
                "file": {
                    "url": url,
                    "details": {"size": 1234, "image": {"width": width, "height": height}},
                    "fileName": "hero.png",
                    "contentType": "image/png",
                },
            },
        })

    def get(self, url, params=None, headers=None, timeout=None):
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, "headers": headers,
                           "timeout": timeout})
        if self.error:
            return FakeResponse(*self.error)
        if params.get("content_type") not in self.content_types:
            return FakeResponse(400, {
                "sys": {"type": "Error", "id": "InvalidQuery"},
                "message": "The query you sent was invalid.",
                "details": {"errors": [{"name": "unknownContentType",
                                        "value": "DOESNOTEXIST"}]},
            })
        matched = [
            it for it in self.items
            if all(
                it["fields"].get(k[len("fields."):]) == v
                for k, v in params.items() if k.startswith("fields.")
            )
        ]
        skip = int(params.get("skip", 0))
        limit = int(params.get("limit", 100))
        page = matched[skip : skip + limit]
        return FakeResponse(200, {
            "sys": {"type": "Array"},
            "total": len(matched),
            "skip": skip,
            "limit": limit,
            "items": page,
            "includes": {"Asset": self.assets, "Entry": self.linked_entries},
        })

    def close(self):
        pass


@pytest.fixture
def client_config():
    return ClientConfig(space="space123", access_token="token-abc", page_size=2)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def source(client_config, store):
    return ContentSource(client_config, session=store)


class _ScriptedHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        server = self.server
        server.hits.append(self.path)
        status, body = server.script.pop(0) if server.script else (500, {})
        data = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, *args):
        pass


@pytest.fixture
def scripted_server():
    """
    A real HTTP server on localhost answering GETs from `server.script`,
    a list of (status, json_body) consumed in order.
    """
    server = HTTPServer(("127.0.0.1", 0), _ScriptedHandler)
    server.script = []
    server.hits = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
