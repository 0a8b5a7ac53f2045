from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call tuning shared by every provider envelope."""

    max_tokens: int = 8000
    temperature: float = 0.7
    top_p: float = 0.9
    openrouter_referer: str = "https://webcrafter.ai"
    openrouter_title: str = "AI Website Builder"


HeaderBuilder = Callable[[str, GenerationOptions], Dict[str, str]]
BodyBuilder = Callable[[str, str, GenerationOptions], Dict[str, Any]]
TextExtractor = Callable[[Mapping[str, Any]], Optional[str]]


@dataclass(frozen=True)
class ProviderSpec:
    """
    One row of the provider strategy table.

    ``endpoint`` may contain a ``{model}`` placeholder for providers that put
    the model in the URL path.
    """

    name: str
    endpoint: str
    default_model: str
    build_headers: HeaderBuilder
    build_body: BodyBuilder
    extract_text: TextExtractor

    def endpoint_for(self, model: str) -> str:
        return self.endpoint.format(model=model)


@dataclass(frozen=True)
class ProviderChoice:
    """Result of routing: the provider to call and everything needed to call it."""

    provider: str
    endpoint: str
    model: str
    headers: Dict[str, str] = field(repr=False)


@dataclass(frozen=True)
class CredentialSet:
    """
    Caller-supplied API keys plus optional preferred model per provider.

    Values are trimmed on construction; blank entries are dropped so that
    "configured" simply means "present".
    """

    keys: Dict[str, str] = field(default_factory=dict, repr=False)
    selected_models: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", _trimmed(self.keys))
        object.__setattr__(self, "selected_models", _trimmed(self.selected_models))

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "CredentialSet":
        """Build from the wire shape ``{"openai": "...", "selectedModels": {...}}``."""
        data = data or {}
        models = data.get("selectedModels") or data.get("selected_models") or {}
        keys = {
            name: value
            for name, value in data.items()
            if name not in ("selectedModels", "selected_models")
        }
        return cls(keys=keys, selected_models=dict(models) if isinstance(models, Mapping) else {})

    def key_for(self, provider: str) -> Optional[str]:
        return self.keys.get(provider)

    def model_for(self, provider: str) -> Optional[str]:
        return self.selected_models.get(provider)

    def is_configured(self, provider: str) -> bool:
        return provider in self.keys


def _trimmed(values: Mapping[str, Any]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for name, value in (values or {}).items():
        if isinstance(value, str) and value.strip():
            out[str(name).strip().lower()] = value.strip()
    return out
