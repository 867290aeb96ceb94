from __future__ import annotations

import pathlib
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from .config import SITE_DEFAULTS, TEMPLATE_DIR
from .models import Post, PostSummary
from .utils import parse_date


def format_date(value) -> str:
    """'2022-06-01' -> 'June 1, 2022'; anything unparsable is shown as is."""
    dt = parse_date(value)
    if dt is None:
        return "" if value is None else str(value)
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


def iso_date(value) -> str:
    dt = parse_date(value)
    return dt.isoformat() if dt else ""


class Renderer:
    def __init__(
        self,
        template_dir: pathlib.Path = TEMPLATE_DIR,
        site: Optional[Dict[str, Any]] = None,
    ):
        self.site = dict(SITE_DEFAULTS)
        self.site.update(site or {})
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "j2"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["format_date"] = format_date
        self.env.filters["iso_date"] = iso_date
        self.env.globals["site"] = self.site

    def _render(self, template_file: str, **context) -> str:
        return self.env.get_template(template_file).render(**context)

    def render_index(self, posts: List[PostSummary]) -> str:
        return self._render("index.html.j2", home=True, posts=posts)

    def render_post(
        self,
        post: Post,
        newer: Optional[PostSummary] = None,
        older: Optional[PostSummary] = None,
    ) -> str:
        return self._render(
            "post.html.j2",
            home=False,
            post=post,
            body=Markup(post.html),
            newer=newer,
            older=older,
        )

    def render_not_found(self) -> str:
        return self._render("404.html.j2", home=False)
