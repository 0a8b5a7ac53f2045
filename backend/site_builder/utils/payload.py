"""Lenient readers for fields of model-produced JSON objects."""
from __future__ import annotations

from typing import Any, List, Mapping, Optional


def text_field(doc: Optional[Mapping[str, Any]], key: str, default: str = "") -> str:
    value = (doc or {}).get(key)
    if isinstance(value, str) and value.strip():
        return value
    return default


def optional_text(doc: Optional[Mapping[str, Any]], key: str) -> Optional[str]:
    return text_field(doc, key) or None


def string_list(doc: Optional[Mapping[str, Any]], key: str) -> List[str]:
    value = (doc or {}).get(key)
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]
