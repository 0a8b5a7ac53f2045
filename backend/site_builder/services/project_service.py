from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from site_builder.core.config import Settings, get_settings
from site_builder.core.errors import InvalidStructureError
from site_builder.schemas.project import ProjectGenerationRequest, ProjectGenerationResponse
from site_builder.services.gateway import ProviderGateway, build_gateway, generate_with_retry
from site_builder.services.response_parser import FileEdits
from site_builder.utils.payload import string_list, text_field
from site_builder.utils.project_profile import (
    determine_framework,
    framework_label,
    resolve_theme_colors,
)
from site_builder.utils.prompt_builder import build_project_prompt

logger = logging.getLogger(__name__)

# New projects sample a little hotter than edits to existing code.
PROJECT_TEMPERATURE = 0.8


class ProjectService:
    """Generate a complete new project from the creation wizard's answers."""

    def __init__(
        self,
        gateway: Optional[ProviderGateway] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._gateway = gateway or build_gateway(self._settings)

    async def generate(self, payload: ProjectGenerationRequest) -> ProjectGenerationResponse:
        framework = determine_framework(
            payload.description,
            payload.template,
            payload.special_requests,
        )
        theme_colors = resolve_theme_colors(payload.color_theme)
        logger.info("Generating project: title=%r framework=%s", payload.title[:80], framework)

        prompt = build_project_prompt(
            title=payload.title,
            description=payload.description,
            framework=framework,
            framework_label=framework_label(framework),
            theme_colors=theme_colors,
            template=payload.template,
            animations=payload.animations,
            special_requests=payload.special_requests,
        )
        reply = await generate_with_retry(
            self._gateway,
            payload.api_keys.to_credentials(),
            prompt,
            retries=0,
            options=replace(self._gateway.options, temperature=PROJECT_TEMPERATURE),
            context=f"project title={payload.title[:40]!r}",
        )
        result = reply.result
        if not isinstance(result, FileEdits):
            raise InvalidStructureError("AI response did not contain any project files.", reply.provider)

        doc = result.payload
        return ProjectGenerationResponse(
            files=result.files,
            structure=text_field(doc, "structure"),
            features=string_list(doc, "features"),
            instructions=text_field(doc, "instructions"),
            framework=text_field(doc, "framework", framework),
            dependencies=string_list(doc, "dependencies"),
            provider=reply.provider,
            model=reply.model,
        )
