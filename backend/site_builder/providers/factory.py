from __future__ import annotations

from typing import Dict, Tuple

from site_builder.providers.anthropic_provider import (
    build_anthropic_headers,
    build_messages_body,
    extract_messages_text,
)
from site_builder.providers.base import ProviderSpec
from site_builder.providers.gemini_provider import (
    build_gemini_headers,
    build_generate_content_body,
    extract_generate_content_text,
)
from site_builder.providers.openai_provider import (
    build_bearer_headers,
    build_chat_completions_body,
    build_openrouter_headers,
    extract_chat_completions_text,
)

PROVIDERS: Dict[str, ProviderSpec] = {
    spec.name: spec
    for spec in (
        ProviderSpec(
            name="openrouter",
            endpoint="https://openrouter.ai/api/v1/chat/completions",
            default_model="meta-llama/llama-3.2-3b-instruct:free",
            build_headers=build_openrouter_headers,
            build_body=build_chat_completions_body,
            extract_text=extract_chat_completions_text,
        ),
        ProviderSpec(
            name="openai",
            endpoint="https://api.openai.com/v1/chat/completions",
            default_model="gpt-4o-mini",
            build_headers=build_bearer_headers,
            build_body=build_chat_completions_body,
            extract_text=extract_chat_completions_text,
        ),
        ProviderSpec(
            name="deepseek",
            endpoint="https://api.deepseek.com/chat/completions",
            default_model="deepseek-coder",
            build_headers=build_bearer_headers,
            build_body=build_chat_completions_body,
            extract_text=extract_chat_completions_text,
        ),
        ProviderSpec(
            name="gemini",
            endpoint="https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
            default_model="gemini-2.5-flash",
            build_headers=build_gemini_headers,
            build_body=build_generate_content_body,
            extract_text=extract_generate_content_text,
        ),
        ProviderSpec(
            name="anthropic",
            endpoint="https://api.anthropic.com/v1/messages",
            default_model="claude-3-5-haiku-20241022",
            build_headers=build_anthropic_headers,
            build_body=build_messages_body,
            extract_text=extract_messages_text,
        ),
    )
}

DEFAULT_PROVIDER_ORDER: Tuple[str, ...] = ("openrouter", "openai", "deepseek", "gemini", "anthropic")


def get_provider(provider_name: str) -> ProviderSpec:
    """Return the strategy record for the given provider name."""
    name = (provider_name or "").strip().lower()
    spec = PROVIDERS.get(name)
    if spec is None:
        raise ValueError(
            f"Unsupported LLM provider: {provider_name!r}. "
            f"Use one of: {', '.join(PROVIDERS)}."
        )
    return spec
