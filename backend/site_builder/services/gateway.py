from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Sequence

import httpx

from site_builder.core.config import Settings
from site_builder.core.errors import (
    RETRYABLE_ERRORS,
    EmptyUpstreamResponseError,
    NoCredentialsError,
    ProviderUnavailableError,
    UpstreamError,
)
from site_builder.providers.base import CredentialSet, GenerationOptions, ProviderChoice
from site_builder.providers.factory import DEFAULT_PROVIDER_ORDER, get_provider
from site_builder.services.response_parser import (
    DEFAULT_DISPLAY_LIMIT,
    NormalizedResult,
    normalize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayReply:
    provider: str
    model: str
    result: NormalizedResult


class ProviderGateway:
    """
    Translate one generation request into exactly one upstream HTTP call.

    Pipeline: route -> build_request_body -> send -> extract_text -> normalize.
    The gateway keeps no per-request state; credentials arrive on every call
    and each ``send`` opens its own connection, so concurrent use is safe.
    """

    def __init__(
        self,
        *,
        provider_order: Sequence[str] = DEFAULT_PROVIDER_ORDER,
        disabled_providers: Iterable[str] = (),
        options: Optional[GenerationOptions] = None,
        display_limit: int = DEFAULT_DISPLAY_LIMIT,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._order = tuple(get_provider(name).name for name in provider_order)
        self._disabled = frozenset(name.strip().lower() for name in disabled_providers)
        self._options = options or GenerationOptions()
        self._display_limit = display_limit
        self._timeout = timeout
        self._transport = transport

    @property
    def options(self) -> GenerationOptions:
        return self._options

    def route(self, credentials: CredentialSet) -> ProviderChoice:
        """
        Return the first configured provider in preference order.

        A disabled provider that would be chosen fails fast instead of being
        skipped, so a user never silently gets a different vendor.
        """
        for name in self._order:
            if not credentials.is_configured(name):
                continue
            if name in self._disabled:
                raise ProviderUnavailableError(name)
            spec = get_provider(name)
            model = credentials.model_for(name) or spec.default_model
            return ProviderChoice(
                provider=name,
                endpoint=spec.endpoint_for(model),
                model=model,
                headers=spec.build_headers(credentials.key_for(name) or "", self._options),
            )
        raise NoCredentialsError()

    def build_request_body(
        self,
        provider: str,
        model: str,
        instructions: str,
        options: Optional[GenerationOptions] = None,
    ) -> Dict[str, Any]:
        return get_provider(provider).build_body(model, instructions, options or self._options)

    async def send(
        self,
        endpoint: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
        *,
        provider: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        POST ``body`` once.

        Non-2xx answers, transport failures and unusable endpoint URLs raise
        UpstreamError; a body that is not a JSON object raises
        EmptyUpstreamResponseError.
        """
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(endpoint, headers=dict(headers), json=dict(body))
            except (httpx.RequestError, httpx.InvalidURL) as exc:
                logger.warning("Upstream request failed: provider=%s error=%s", provider, type(exc).__name__)
                raise UpstreamError(0, type(exc).__name__, provider) from exc
        if not response.is_success:
            logger.warning(
                "Upstream returned error status: provider=%s status=%s",
                provider,
                response.status_code,
            )
            raise UpstreamError(response.status_code, response.reason_phrase, provider)
        try:
            data = response.json()
        except (ValueError, RecursionError) as exc:
            raise EmptyUpstreamResponseError(provider) from exc
        if not isinstance(data, dict):
            raise EmptyUpstreamResponseError(provider)
        return data

    def extract_text(self, provider: str, raw: Mapping[str, Any]) -> str:
        text = get_provider(provider).extract_text(raw)
        if not text or not text.strip():
            raise EmptyUpstreamResponseError(provider)
        return text

    def normalize(self, text: str) -> NormalizedResult:
        return normalize(text, display_limit=self._display_limit)

    async def generate(
        self,
        credentials: CredentialSet,
        instructions: str,
        options: Optional[GenerationOptions] = None,
        *,
        context: Optional[str] = None,
    ) -> GatewayReply:
        """Run the full pipeline once. ``context`` is only used for logging."""
        choice = self.route(credentials)
        logger.info(
            "Gateway request: provider=%s model=%s context=%s prompt_chars=%d",
            choice.provider,
            choice.model,
            context or "-",
            len(instructions),
        )
        body = self.build_request_body(choice.provider, choice.model, instructions, options)
        raw = await self.send(choice.endpoint, choice.headers, body, provider=choice.provider)
        text = self.extract_text(choice.provider, raw)
        result = self.normalize(text)
        logger.info(
            "Gateway response: provider=%s result=%s",
            choice.provider,
            type(result).__name__,
        )
        return GatewayReply(provider=choice.provider, model=choice.model, result=result)


def build_gateway(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderGateway:
    """Construct a gateway from service settings. Credentials are never part of settings."""
    return ProviderGateway(
        provider_order=settings.provider_order,
        disabled_providers=settings.disabled_providers,
        options=GenerationOptions(
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            top_p=settings.top_p,
            openrouter_referer=settings.openrouter_referer,
            openrouter_title=settings.openrouter_title,
        ),
        display_limit=settings.message_display_limit,
        timeout=float(settings.request_timeout_seconds),
        transport=transport,
    )


async def generate_with_retry(
    gateway: ProviderGateway,
    credentials: CredentialSet,
    instructions: str,
    *,
    retries: int = 1,
    backoff_ms: int = 800,
    options: Optional[GenerationOptions] = None,
    context: Optional[str] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> GatewayReply:
    """
    Caller-level retry: at most one extra attempt after a fixed backoff.

    Only upstream failures are retried; missing or unavailable providers
    are raised immediately.
    """
    retries = max(0, min(retries, 1))
    attempt = 0
    while True:
        attempt += 1
        try:
            return await gateway.generate(credentials, instructions, options, context=context)
        except RETRYABLE_ERRORS as exc:
            if attempt > retries:
                raise
            logger.warning(
                "Gateway attempt %d failed (%s); retrying in %dms",
                attempt,
                exc.message,
                backoff_ms,
            )
            await sleep(backoff_ms / 1000)
