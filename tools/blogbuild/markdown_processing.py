from __future__ import annotations

import re

import markdown

from .config import FENCE, SPACES_EOL

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists", "toc"]


def _norm_text(s: str) -> str:
    return s.replace('\r\n', '\n').replace('\r', '\n').lstrip('\ufeff')


def map_noncode(md: str, fn):
    parts, last = [], 0
    for m in FENCE.finditer(md):
        pre = md[last : m.start()]
        parts.append(fn(pre))
        parts.append(md[m.start() : m.end()])
        last = m.end()
    parts.append(fn(md[last:]))
    return "".join(parts)


def normalize_markdown_light(md: str) -> str:
    # keep two-space hard breaks, drop any other trailing whitespace
    md = SPACES_EOL.sub(lambda m: m.group(0) if m.group(0) == "  " else "", md)
    md = re.sub(r'\n{3,}', '\n\n', md)
    md = re.sub(r'([^\n])\n(#{1,6}\s)', r'\1\n\n\2', md)
    return md


def slugify_heading(text: str, separator: str = "-") -> str:
    s = text.strip().lower()
    s = re.sub(r"\s+", separator, s)
    s = re.sub(r"[^a-z0-9\-]", "", s)
    s = re.sub(r"-{2,}", "-", s).strip("-")
    return s or "section"


def markdown_to_html(text: str) -> str:
    """Plain markdown body -> HTML fragment; headings get stable ids."""
    md = map_noncode(_norm_text(text or ""), normalize_markdown_light)
    converter = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs={"toc": {"slugify": slugify_heading}},
        output_format="html",
    )
    return converter.convert(md)
