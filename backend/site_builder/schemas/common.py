from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from site_builder.providers.base import CredentialSet


class WireModel(BaseModel):
    """Base for request/response bodies that use the UI's camelCase field names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApiKeys(WireModel):
    """
    Caller-supplied provider credentials.

    Keys are used for a single request and never stored or logged.
    """

    openai: Optional[str] = None
    anthropic: Optional[str] = None
    openrouter: Optional[str] = None
    deepseek: Optional[str] = None
    gemini: Optional[str] = None
    selected_models: Dict[str, str] = Field(default_factory=dict, alias="selectedModels")

    def to_credentials(self) -> CredentialSet:
        keys = {
            "openai": self.openai,
            "anthropic": self.anthropic,
            "openrouter": self.openrouter,
            "deepseek": self.deepseek,
            "gemini": self.gemini,
        }
        return CredentialSet(
            keys={name: value for name, value in keys.items() if value},
            selected_models=self.selected_models,
        )

    def __repr__(self) -> str:
        configured = sorted(self.to_credentials().keys)
        return f"ApiKeys(configured={configured!r})"

    __str__ = __repr__


class CodeChange(WireModel):
    file: str
    content: str


class HistoryEntry(WireModel):
    type: Literal["user", "ai"]
    content: str = ""


class ErrorResponse(WireModel):
    """Envelope returned for hard failures so the UI can render a failure bubble."""

    error: str
    response: str
    files: Dict[str, str] = Field(default_factory=dict)
    code_changes: List[CodeChange] = Field(default_factory=list, alias="codeChanges")
