from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from site_builder.providers.base import GenerationOptions


def build_gemini_headers(api_key: str, options: GenerationOptions) -> Dict[str, str]:
    # Header auth instead of ?key= so the secret never appears in a logged URL.
    return {
        "Content-Type": "application/json",
        "x-goog-api-key": api_key,
    }


def build_generate_content_body(
    model: str, instructions: str, options: GenerationOptions
) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": instructions}]}],
        "generationConfig": {
            "temperature": options.temperature,
            "topP": options.top_p,
            "maxOutputTokens": options.max_tokens,
            "responseMimeType": "application/json",
        },
    }


def extract_generate_content_text(data: Mapping[str, Any]) -> Optional[str]:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
