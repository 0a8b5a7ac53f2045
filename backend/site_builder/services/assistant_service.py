from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import uuid4

from pydantic import ValidationError

from site_builder.core.config import Settings, get_settings
from site_builder.core.errors import GatewayError, InvalidStructureError
from site_builder.providers.base import CredentialSet, GenerationOptions
from site_builder.schemas.assistant import (
    AnalysisRequest,
    AnalysisResponse,
    AutoFixRequest,
    AutoFixResponse,
    AutoFixResult,
    ChatRequest,
    ChatResponse,
    PlanRequest,
    PlanResponse,
    PlanTask,
    Suggestion,
    TaskExecutionRequest,
    TaskExecutionResponse,
)
from site_builder.schemas.common import CodeChange
from site_builder.services.gateway import (
    GatewayReply,
    ProviderGateway,
    build_gateway,
    generate_with_retry,
)
from site_builder.services.response_parser import NO_VALID_CHANGES, FileEdits, Message
from site_builder.utils.payload import optional_text, text_field
from site_builder.utils.prompt_builder import (
    build_analysis_prompt,
    build_assistant_prompt,
    build_fix_prompt,
    build_plan_prompt,
    build_task_prompt,
)

logger = logging.getLogger(__name__)

ANALYSIS_FILE_BUDGET = 1000


class AssistantService:
    """
    Code assistant operations on an existing project.

    Route handlers stay thin; prompts are assembled here and every model
    call goes through the provider gateway.
    """

    def __init__(
        self,
        gateway: Optional[ProviderGateway] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._settings = settings or get_settings()
        self._gateway = gateway or build_gateway(self._settings)
        self._sleep = sleep

    async def _generate(
        self,
        credentials: CredentialSet,
        prompt: str,
        *,
        retries: int = 0,
        options: Optional[GenerationOptions] = None,
        context: Optional[str] = None,
    ) -> GatewayReply:
        return await generate_with_retry(
            self._gateway,
            credentials,
            prompt,
            retries=retries,
            backoff_ms=self._settings.retry_backoff_ms,
            options=options,
            context=context,
            sleep=self._sleep,
        )

    async def chat(self, payload: ChatRequest) -> ChatResponse:
        prompt = build_assistant_prompt(
            payload.message,
            payload.project_content,
            history=[entry.model_dump() for entry in payload.conversation_history],
            file_char_budget=self._settings.file_char_budget,
            history_limit=self._settings.history_limit,
        )
        retries = self._settings.chat_retries if payload.retries is None else payload.retries
        reply = await self._generate(
            payload.api_keys.to_credentials(),
            prompt,
            retries=retries,
            context=f"chat project={payload.project_id or '-'}",
        )
        result = reply.result
        if isinstance(result, FileEdits):
            files = result.files
            message = f"Changes applied successfully. {len(files)} file(s) updated."
        else:
            files = {}
            message = result.text if isinstance(result, Message) else (result.message_text or "")
        return ChatResponse(
            response=message,
            files=files,
            code_changes=[CodeChange(file=path, content=content) for path, content in files.items()],
            provider=reply.provider,
            model=reply.model,
        )

    async def plan(self, payload: PlanRequest) -> PlanResponse:
        prompt = build_plan_prompt(payload.message, payload.project_content.keys())
        reply = await self._generate(
            payload.api_keys.to_credentials(),
            prompt,
            context=f"plan project={payload.project_id or '-'}",
        )
        doc = reply.result.payload
        if doc is None:
            raise InvalidStructureError("expected a JSON to-do list.", reply.provider)

        tasks: List[PlanTask] = []
        for raw in doc.get("tasks") or []:
            if not isinstance(raw, dict):
                continue
            data = {**raw, "id": str(raw.get("id") or uuid4()), "status": "pending"}
            try:
                tasks.append(PlanTask.model_validate(data))
            except ValidationError as exc:
                logger.warning("Skipping malformed task in plan: %s", exc.errors()[:3])

        logger.info("Generated plan with %d task(s) for project=%s", len(tasks), payload.project_id or "-")
        return PlanResponse(
            id=str(uuid4()),
            project_id=payload.project_id,
            title=text_field(doc, "title", "Generated Tasks"),
            description=text_field(doc, "description", payload.message),
            total_estimated_time=text_field(doc, "totalEstimatedTime", "Unknown"),
            tasks=tasks,
            provider=reply.provider,
            model=reply.model,
        )

    async def execute_task(self, payload: TaskExecutionRequest) -> TaskExecutionResponse:
        prompt = build_task_prompt(
            payload.task.model_dump(by_alias=True),
            payload.project_content,
            file_char_budget=self._settings.file_char_budget,
        )
        reply = await self._generate(
            payload.api_keys.to_credentials(),
            prompt,
            context=f"task={payload.task.id} project={payload.project_id or '-'}",
        )
        result = reply.result
        if not isinstance(result, FileEdits):
            raise InvalidStructureError(NO_VALID_CHANGES, reply.provider)
        return TaskExecutionResponse(
            task_id=payload.task.id,
            status="completed",
            files=result.files,
            analysis=result.analysis,
            summary=result.summary,
            verification=optional_text(result.payload, "verification"),
            provider=reply.provider,
            model=reply.model,
        )

    async def analyze(self, payload: AnalysisRequest) -> AnalysisResponse:
        prompt = build_analysis_prompt(
            payload.project_content,
            metrics=payload.metrics,
            file_char_budget=ANALYSIS_FILE_BUDGET,
        )
        reply = await self._generate(
            payload.api_keys.to_credentials(),
            prompt,
            context=f"analyze project={payload.project_id or '-'}",
        )
        doc = reply.result.payload
        if doc is None:
            raise InvalidStructureError("expected a JSON list of suggestions.", reply.provider)

        suggestions: List[Suggestion] = []
        for raw in doc.get("suggestions") or []:
            try:
                suggestions.append(Suggestion.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping malformed suggestion: %s", str(raw)[:200])
        return AnalysisResponse(suggestions=suggestions, provider=reply.provider, model=reply.model)

    async def _fix_one(
        self,
        issue: Suggestion,
        project_content: Dict[str, str],
        credentials: CredentialSet,
        project_id: Optional[str],
    ) -> AutoFixResult:
        prompt = build_fix_prompt(issue.model_dump(by_alias=True), project_content)
        try:
            reply = await self._generate(
                credentials,
                prompt,
                context=f"auto-fix project={project_id or '-'}",
            )
        except GatewayError as exc:
            logger.warning("Auto-fix failed for issue %r: %s", issue.issue[:80], exc.message)
            return AutoFixResult(issue=issue.issue, status="failed", error=exc.message)
        except Exception as exc:
            # One issue's failure must not cancel its siblings in the gather below.
            logger.exception("Auto-fix crashed for issue %r: %s", issue.issue[:80], type(exc).__name__)
            return AutoFixResult(issue=issue.issue, status="failed", error=GatewayError.user_message)
        if not isinstance(reply.result, FileEdits):
            return AutoFixResult(issue=issue.issue, status="no_changes")
        return AutoFixResult(issue=issue.issue, status="fixed", files=reply.result.files)

    async def auto_fix(self, payload: AutoFixRequest) -> AutoFixResponse:
        """Issue one independent gateway call per issue, concurrently."""
        credentials = payload.api_keys.to_credentials()
        # Missing or unavailable providers would fail every issue the same way.
        self._gateway.route(credentials)

        results = await asyncio.gather(
            *(
                self._fix_one(issue, payload.project_content, credentials, payload.project_id)
                for issue in payload.issues
            )
        )
        merged: Dict[str, str] = {}
        for result in results:
            merged.update(result.files)
        logger.info(
            "Auto-fix finished: %d issue(s), %d fixed",
            len(results),
            sum(1 for r in results if r.status == "fixed"),
        )
        return AutoFixResponse(results=list(results), files=merged)
