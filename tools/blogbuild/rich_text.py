"""
Structured rich-text documents -> HTML.

A document is a tree of nodes: `{"nodeType": ..., "content": [...],
"data": {...}}` with `text` leaves carrying `value` and `marks`. Link
targets in `data.target` are already resolved to Asset/Entry objects by the
content source, or None when the store did not include them.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from markupsafe import escape

from .models import Asset, Entry

MARK_TAGS = {
    "bold": "b",
    "italic": "i",
    "underline": "u",
    "code": "code",
    "superscript": "sup",
    "subscript": "sub",
    "strikethrough": "s",
}

BLOCK_TAGS = {
    "paragraph": "p",
    "heading-1": "h1",
    "heading-2": "h2",
    "heading-3": "h3",
    "heading-4": "h4",
    "heading-5": "h5",
    "heading-6": "h6",
    "unordered-list": "ul",
    "ordered-list": "ol",
    "list-item": "li",
    "blockquote": "blockquote",
    "table": "table",
    "table-row": "tr",
    "table-header-cell": "th",
    "table-cell": "td",
}


def is_rich_text(body: Any) -> bool:
    return isinstance(body, dict) and body.get("nodeType") == "document"


def _entry_url(entry: Entry) -> Optional[str]:
    if entry.slug:
        return f"/posts/{escape(entry.slug)}"
    return None


class RichTextRenderer:
    def __init__(self):
        self.handlers: Dict[str, Callable[[Dict[str, Any]], str]] = {
            "document": self._children,
            "text": self._text,
            "hr": lambda node: "<hr/>",
            "hyperlink": self._hyperlink,
            "entry-hyperlink": self._entry_link,
            "embedded-entry-inline": self._entry_link,
            "embedded-entry-block": self._entry_block,
            "asset-hyperlink": self._asset_link,
            "embedded-asset-block": self._asset_block,
        }

    def render(self, node: Dict[str, Any]) -> str:
        ntype = node.get("nodeType")
        if ntype == "paragraph" and self._is_code_only(node):
            code = "".join(
                c.get("value") or "" for c in node["content"] if isinstance(c, dict)
            )
            return f"<pre><code>{escape(code)}</code></pre>"
        handler = self.handlers.get(ntype)
        if handler:
            return handler(node)
        tag = BLOCK_TAGS.get(ntype)
        if tag:
            return f"<{tag}>{self._children(node)}</{tag}>"
        # unknown node types keep their text
        return self._children(node)

    def _children(self, node: Dict[str, Any]) -> str:
        content: List[Dict[str, Any]] = node.get("content") or []
        return "".join(self.render(c) for c in content if isinstance(c, dict))

    def _is_code_only(self, node: Dict[str, Any]) -> bool:
        content = [c for c in node.get("content") or [] if isinstance(c, dict)]
        if not all(c.get("nodeType") == "text" for c in content):
            return False
        texts = [c for c in content if c.get("value")]
        return bool(texts) and all(
            any(m.get("type") == "code" for m in c.get("marks") or [])
            for c in texts
        )

    def _text(self, node: Dict[str, Any]) -> str:
        out = str(escape(node.get("value") or "")).replace("\n", "<br/>")
        for mark in node.get("marks") or []:
            tag = MARK_TAGS.get(mark.get("type"))
            if tag:
                out = f"<{tag}>{out}</{tag}>"
        return out

    def _hyperlink(self, node: Dict[str, Any]) -> str:
        uri = (node.get("data") or {}).get("uri") or ""
        return f'<a href="{escape(uri)}">{self._children(node)}</a>'

    def _target(self, node: Dict[str, Any]):
        return (node.get("data") or {}).get("target")

    def _entry_link(self, node: Dict[str, Any]) -> str:
        target = self._target(node)
        inner = self._children(node)
        if isinstance(target, Entry):
            inner = inner or str(escape(target.title))
            url = _entry_url(target)
            if url:
                return f'<a href="{url}">{inner}</a>'
        return f"<span>{inner}</span>" if inner else ""

    def _entry_block(self, node: Dict[str, Any]) -> str:
        link = self._entry_link(node)
        return f"<div>{link}</div>" if link else ""

    def _asset_link(self, node: Dict[str, Any]) -> str:
        target = self._target(node)
        inner = self._children(node)
        image = target.image if isinstance(target, Asset) else None
        if image is None:
            return inner
        return f'<a href="{escape(image.url)}">{inner or escape(image.title or image.url)}</a>'

    def _asset_block(self, node: Dict[str, Any]) -> str:
        target = self._target(node)
        image = target.image if isinstance(target, Asset) else None
        if image is None:
            return ""
        attrs = [f'src="{escape(image.url)}"', f'alt="{escape(image.title or "")}"']
        if image.width:
            attrs.append(f'width="{int(image.width)}"')
        if image.height:
            attrs.append(f'height="{int(image.height)}"')
        return f"<figure><img {' '.join(attrs)}/></figure>"


def rich_text_to_html(document: Dict[str, Any]) -> str:
    return RichTextRenderer().render(document)
