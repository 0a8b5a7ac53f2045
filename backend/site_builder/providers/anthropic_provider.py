from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from site_builder.providers.base import GenerationOptions

ANTHROPIC_VERSION = "2023-06-01"


def build_anthropic_headers(api_key: str, options: GenerationOptions) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }


def build_messages_body(model: str, instructions: str, options: GenerationOptions) -> Dict[str, Any]:
    return {
        "model": model,
        "max_tokens": options.max_tokens,
        "messages": [{"role": "user", "content": instructions}],
    }


def extract_messages_text(data: Mapping[str, Any]) -> Optional[str]:
    try:
        text = data["content"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
