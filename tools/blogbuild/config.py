#!/usr/bin/env python3
from __future__ import annotations

import os
import pathlib
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

# ---------- Paths

# This assumes config.py sits in tools/blogbuild/ at the repo root.
ROOT = pathlib.Path(__file__).resolve().parents[2]
TEMPLATE_DIR = ROOT / "tools" / "templates" / "blog"
OUT_DIR = ROOT / "out"
SITE_CONFIG = ROOT / "site.yml"

# ---------- Content store

CONTENT_TYPE = "blogPost"
DEFAULT_HOST = "cdn.contentful.com"
DEFAULT_ENVIRONMENT = "master"
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 10.0
RETRY_STATUSES = (429, 500, 502, 503, 504)

# ---------- Site defaults

SITE_DEFAULTS: Dict[str, Any] = {
    "title": "Hoang Nguyen Blog",
    "author": "Hoang Nguyen",
    "description": "Hoang Nguyen Blog",
    "intro": "I'm learning web development and writing about my journey.",
    "profile_image": "/images/profile.jpg",
    "content_type": CONTENT_TYPE,
    "output_dir": None,
}

# Shared regexes

SAFE_SLUG = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._~-]*$")
PROTOCOL_RELATIVE = re.compile(r"^//")
FENCE = re.compile(r"(^```.*?$)(.*?)(^```$)",
                   re.MULTILINE | re.DOTALL)
SPACES_EOL = re.compile(r'[ \t]+$', re.MULTILINE)


@dataclass(frozen=True)
class ClientConfig:
    """Which remote account is queried, and how."""

    space: str
    access_token: str
    environment: str = DEFAULT_ENVIRONMENT
    host: str = DEFAULT_HOST
    page_size: int = DEFAULT_PAGE_SIZE
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT
    scheme: str = "https"

    def __post_init__(self):
        if self.scheme not in ("https", "http"):
            raise ConfigError(f"unsupported scheme {self.scheme!r}")
        if not self.space:
            raise ConfigError("content store space id is empty")
        if not self.access_token:
            raise ConfigError("content store access token is empty")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigError(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}, "
                f"got {self.page_size}"
            )
        if self.max_retries < 0:
            raise ConfigError("max_retries must not be negative")

    @property
    def base_url(self) -> str:
        return (
            f"{self.scheme}://{self.host}/spaces/{self.space}"
            f"/environments/{self.environment}"
        )


def _int_env(env: Dict[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def client_config_from_env(
    env: Optional[Dict[str, str]] = None,
    dotenv_path: Optional[pathlib.Path] = None,
) -> ClientConfig:
    """
    Build the client record from CONTENTFUL_* variables.

    When `env` is not given, a `.env` file at the repo root (or `dotenv_path`)
    is loaded first; variables already set in the process win.
    """
    if env is None:
        load_dotenv(dotenv_path or ROOT / ".env", override=False)
        env = dict(os.environ)

    space = env.get("CONTENTFUL_SPACE_ID", "")
    token = env.get("CONTENTFUL_ACCESS_TOKEN", "")
    missing = [
        k for k, v in (
            ("CONTENTFUL_SPACE_ID", space),
            ("CONTENTFUL_ACCESS_TOKEN", token),
        ) if not v
    ]
    if missing:
        raise ConfigError(
            "missing environment variable(s): " + ", ".join(missing)
        )

    return ClientConfig(
        space=space,
        access_token=token,
        environment=env.get("CONTENTFUL_ENVIRONMENT") or DEFAULT_ENVIRONMENT,
        host=env.get("CONTENTFUL_HOST") or DEFAULT_HOST,
        page_size=_int_env(env, "CONTENTFUL_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        max_retries=_int_env(env, "CONTENTFUL_MAX_RETRIES", DEFAULT_MAX_RETRIES),
    )


def load_site_settings(path: Optional[pathlib.Path] = None) -> Dict[str, Any]:
    from .utils import read_yaml

    path = path or SITE_CONFIG
    try:
        meta = read_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path.name} is not valid YAML: {e}") from e
    if not isinstance(meta, dict):
        raise ConfigError(f"{path.name} must contain a mapping")
    unknown = sorted(set(meta) - set(SITE_DEFAULTS))
    if unknown:
        print(f"- ignoring unknown site settings: {', '.join(unknown)}")
    site = dict(SITE_DEFAULTS)
    site.update({k: v for k, v in meta.items() if k in SITE_DEFAULTS})
    return site
