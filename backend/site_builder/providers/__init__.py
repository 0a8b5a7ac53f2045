"""
LLM provider strategy table.

Each provider is a single ProviderSpec record (endpoint, default model,
header/body builders, response extractor). The gateway depends only on
these records, never on provider-specific branches.
"""

from site_builder.providers.base import CredentialSet, GenerationOptions, ProviderChoice, ProviderSpec
from site_builder.providers.factory import DEFAULT_PROVIDER_ORDER, PROVIDERS, get_provider

__all__ = [
    "CredentialSet",
    "DEFAULT_PROVIDER_ORDER",
    "GenerationOptions",
    "PROVIDERS",
    "ProviderChoice",
    "ProviderSpec",
    "get_provider",
]
