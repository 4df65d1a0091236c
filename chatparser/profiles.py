"""Extraction profiles: marker names and title rules, overridable from YAML.

Profile files look like::

    default:
      title_suffixes: [" | Claude"]
    domains:
      claude.ai:
        assistant_marker: font-claude-response
        min_assistant_chars: 20

The ``default`` block is merged with the longest ``domains`` key matching the
URL's host (exact host or a parent domain).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, NonNegativeInt, ValidationError

from chatparser import settings
from chatparser.items import ChatSource


class ProfileError(ValueError):
    """Raised when a profile file cannot be read or does not validate."""

    def __init__(self, message: str, path: str | Path = "") -> None:
        super().__init__(message)
        self.path = str(path)


class ExtractionProfile(BaseModel):
    """Per-site knobs for the share-page extractor."""

    model_config = {"frozen": True, "extra": "forbid"}

    source: ChatSource = settings.DEFAULT_SOURCE
    hosts: list[str] = Field(default_factory=lambda: list(settings.SHARE_HOSTS))
    share_path_prefix: str = settings.SHARE_PATH_PREFIX

    render_count_attr: str = settings.RENDER_COUNT_ATTR
    user_marker: str = settings.USER_MARKER
    assistant_marker: str = settings.ASSISTANT_MARKER
    min_assistant_chars: NonNegativeInt = settings.MIN_ASSISTANT_CHARS

    title_suffixes: list[str] = Field(default_factory=lambda: list(settings.TITLE_SUFFIXES))
    untitled_title: str = Field(default=settings.UNTITLED_TITLE, min_length=1)
    assistant_brand: str = settings.ASSISTANT_BRAND


DEFAULT_PROFILE = ExtractionProfile()


def load_profile(path: str | Path, url: str = "") -> ExtractionProfile:
    """Load the YAML profile at *path* and return the settings for *url*."""
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ProfileError(f"Cannot read profile {path}: {exc}", path=path) from exc
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {path} must be a mapping", path=path)

    merged = merge_profile_data(data, url)
    try:
        return ExtractionProfile(**merged)
    except ValidationError as exc:
        raise ProfileError(
            f"Invalid profile {path}: {exc.error_count()} error(s)\n{exc}", path=path,
        ) from exc


def merge_profile_data(data: dict[str, Any], url: str) -> dict[str, Any]:
    """Merge the ``default`` block with the best matching ``domains`` entry."""
    default = data.get("default", {})
    domains = data.get("domains", {})

    netloc = urlparse(url).netloc.lower() if url else ""
    best_key = ""
    best_cfg: dict[str, Any] = {}
    if netloc and isinstance(domains, dict):
        for key, cfg in domains.items():
            if not isinstance(key, str) or not isinstance(cfg, dict):
                continue
            key_lower = key.lower()
            if (netloc == key_lower or netloc.endswith("." + key_lower)) and (
                len(key_lower) > len(best_key)
            ):
                best_key = key_lower
                best_cfg = cfg

    merged: dict[str, Any] = {}
    if isinstance(default, dict):
        merged.update(default)
    merged.update(best_cfg)
    return merged
