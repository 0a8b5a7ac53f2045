"""
OpenAI-compatible chat-completions envelope.

Shared by OpenAI, OpenRouter and DeepSeek, which differ only in endpoint,
default model and attribution headers.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from site_builder.providers.base import GenerationOptions


def build_bearer_headers(api_key: str, options: GenerationOptions) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def build_openrouter_headers(api_key: str, options: GenerationOptions) -> Dict[str, str]:
    headers = build_bearer_headers(api_key, options)
    headers["HTTP-Referer"] = options.openrouter_referer
    headers["X-Title"] = options.openrouter_title
    return headers


def build_chat_completions_body(
    model: str, instructions: str, options: GenerationOptions
) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [{"role": "user", "content": instructions}],
        "max_tokens": options.max_tokens,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "response_format": {"type": "json_object"},
    }


def extract_chat_completions_text(data: Mapping[str, Any]) -> Optional[str]:
    """Return ``choices[0].message.content`` or None when the envelope is malformed."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
