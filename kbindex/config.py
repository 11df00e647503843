from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "kbindex.toml"

DEFAULT_THUMBNAIL_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp", ".gif")


@dataclass(frozen=True)
class Settings:
    """Layout and retrieval settings for one content tree."""

    root_segment: str = "experiment"
    document_segment: str = "KB"
    document_suffix: str = ".md"
    kb_text_name: str = "KB.txt"
    free_text_suffix: str = ".txt"
    latest_version: str = "latest"
    thumbnail_suffixes: tuple[str, ...] = field(default=DEFAULT_THUMBNAIL_SUFFIXES)
    base_url: str = "/"
    http_timeout_s: float = 10.0


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_segment(data: dict[str, Any], key: str, default: str) -> str:
    value = str(data.get(key, default)).strip()
    if not value:
        raise ValueError(f"{key} must not be empty")
    if "/" in value or "\\" in value:
        raise ValueError(f"{key} must be a single path segment, got {value!r}")
    return value


def _coerce_suffix(value: Any, key: str, fold_case: bool = False) -> str:
    suffix = str(value).strip()
    if fold_case:
        suffix = suffix.lower()
    if not suffix:
        raise ValueError(f"{key} must not be empty")
    return suffix if suffix.startswith(".") else f".{suffix}"


def settings_from_dict(data: dict[str, Any]) -> Settings:
    """Build settings from a decoded `[kbindex]` table, validating each field."""
    defaults = Settings()

    suffixes_raw = data.get("thumbnail_suffixes", list(defaults.thumbnail_suffixes))
    if isinstance(suffixes_raw, str):
        suffixes_raw = [suffixes_raw]
    if not isinstance(suffixes_raw, list):
        raise ValueError("thumbnail_suffixes must be a list of extensions")
    thumbnail_suffixes = tuple(_coerce_suffix(s, "thumbnail_suffixes", fold_case=True) for s in suffixes_raw)

    base_url = str(data.get("base_url", defaults.base_url)).strip() or "/"
    if not base_url.endswith("/"):
        base_url += "/"

    try:
        timeout = float(data.get("http_timeout_s", defaults.http_timeout_s))
    except (TypeError, ValueError) as e:
        raise ValueError("http_timeout_s must be a number") from e
    if timeout <= 0:
        raise ValueError("http_timeout_s must be positive")

    return Settings(
        root_segment=_coerce_segment(data, "root_segment", defaults.root_segment),
        document_segment=_coerce_segment(data, "document_segment", defaults.document_segment),
        document_suffix=_coerce_suffix(data.get("document_suffix", defaults.document_suffix), "document_suffix"),
        kb_text_name=_coerce_segment(data, "kb_text_name", defaults.kb_text_name),
        free_text_suffix=_coerce_suffix(data.get("free_text_suffix", defaults.free_text_suffix), "free_text_suffix"),
        latest_version=_coerce_segment(data, "latest_version", defaults.latest_version),
        thumbnail_suffixes=thumbnail_suffixes,
        base_url=base_url,
        http_timeout_s=timeout,
    )


def load_settings(path: Path | None) -> Settings:
    """
    Load settings from the `[kbindex]` table of a TOML file.

    A missing file (or None) yields defaults; invalid values raise ValueError.
    """
    if path is None or not path.exists():
        return Settings()

    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    return settings_from_dict(_coerce_dict(data.get("kbindex")))
