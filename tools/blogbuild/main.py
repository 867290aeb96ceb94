#!/usr/bin/env python3
"""
Static build of the blog from the headless content store.

- Index    -> <out>/index.html        (posts newest first)
- Posts    -> <out>/posts/<slug>/index.html
- Fallback -> <out>/404.html          (no on-demand pages)
- Paths    -> <out>/paths.yml         (the slugs that were built)

Key behaviour:
- Credentials from CONTENTFUL_SPACE_ID / CONTENTFUL_ACCESS_TOKEN (.env honoured)
- Site settings from site.yml at the repo root
- Paged, retried reads; any store error fails the whole build
- Duplicate or missing slugs fail the build
- Post folders from earlier builds whose slug disappeared are removed
"""

from __future__ import annotations

import pathlib
import shutil
import sys
from typing import Any, Dict, List

from .config import OUT_DIR, ROOT, client_config_from_env, load_site_settings
from .content_source import ContentSource
from .errors import BuildError
from .models import PathDescriptor
from .posts import enumerate_paths, get_post, list_posts, neighbours
from .render import Renderer
from .utils import ensure_dir, write_yaml


def _write_page(path: pathlib.Path, html: str) -> None:
    ensure_dir(path.parent)
    path.write_text(html, encoding="utf-8")


def _remove_stale_post_dirs(posts_dir: pathlib.Path, current: set) -> None:
    if not posts_dir.exists():
        return
    for child in posts_dir.iterdir():
        if child.is_dir() and child.name not in current:
            print(f"- removing stale post folder {child.name}")
            shutil.rmtree(child)


def build_site(
    source: ContentSource,
    renderer: Renderer,
    out_dir: pathlib.Path,
    content_type: str,
) -> List[PathDescriptor]:
    """
    Fetch and render every page first; nothing touches `out_dir` until the
    whole site rendered without error.
    """
    summaries = list_posts(source, content_type)
    paths = enumerate_paths(source, content_type)

    pages: Dict[str, str] = {"index.html": renderer.render_index(summaries)}
    for params in paths:
        slug = params["slug"]
        post = get_post(source, slug, content_type)
        newer, older = neighbours(summaries, slug)
        pages[f"posts/{slug}/index.html"] = renderer.render_post(
            post, newer=newer, older=older
        )
    pages["404.html"] = renderer.render_not_found()

    ensure_dir(out_dir)
    for rel, html in pages.items():
        _write_page(out_dir / rel, html)
    print(f"✓ index with {len(summaries)} posts")
    for params in paths:
        print(f"✓ post {params['slug']}")

    _remove_stale_post_dirs(out_dir / "posts", {p["slug"] for p in paths})
    write_yaml(
        out_dir / "paths.yml",
        {"paths": [{"params": p} for p in paths], "fallback": False},
    )
    print(f"✓ {len(paths)} paths, fallback disabled")
    return paths


def run_build(site: Dict[str, Any]) -> List[PathDescriptor]:
    client_config = client_config_from_env()
    out_dir = pathlib.Path(site.get("output_dir") or OUT_DIR)
    if not out_dir.is_absolute():
        out_dir = ROOT / out_dir
    renderer = Renderer(site=site)
    with ContentSource(client_config) as source:
        return build_site(source, renderer, out_dir, site["content_type"])


def main():
    try:
        site = load_site_settings()
        run_build(site)
    except (BuildError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
