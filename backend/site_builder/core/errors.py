"""
Gateway error types.

Every error carries a user-facing ``user_message`` so the HTTP layer can
render a failure bubble without inspecting the exception type.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for provider gateway errors."""

    user_message = "I encountered an error processing your request. Please try again."

    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class NoCredentialsError(GatewayError):
    """Raised when no provider has a non-blank API key."""

    user_message = "Please configure your API keys in Settings."

    def __init__(self, message: str = "No API key configured"):
        super().__init__(message)


class ProviderUnavailableError(GatewayError):
    """Raised when the selected provider is recognized but disabled for this service."""

    user_message = "The selected AI provider is not available right now. Please choose a different provider in Settings."

    def __init__(self, provider: str):
        super().__init__(f"Provider {provider!r} is not available", provider)


class UpstreamError(GatewayError):
    """Raised when the provider answers with a non-2xx status or cannot be reached."""

    user_message = (
        "I encountered an error processing your request. "
        "Please try again or check your API configuration."
    )

    def __init__(self, status: int, status_text: str = "", provider: Optional[str] = None):
        self.status = status
        self.status_text = status_text
        super().__init__(f"API error: {status} - {status_text}".rstrip(" -"), provider)


class EmptyUpstreamResponseError(GatewayError):
    """Raised when the provider answers 2xx but carries no extractable text."""

    user_message = UpstreamError.user_message

    def __init__(self, provider: Optional[str] = None):
        super().__init__("No response from AI", provider)


class InvalidStructureError(GatewayError):
    """Raised when a usable reply lacks the structure an operation requires."""

    user_message = (
        "The AI response could not be applied to your project. "
        "Please try again or rephrase your request."
    )

    def __init__(self, detail: str, provider: Optional[str] = None):
        self.detail = detail
        super().__init__(f"AI returned invalid structure: {detail}", provider)


RETRYABLE_ERRORS =(UpstreamError, EmptyUpstreamResponseError)
