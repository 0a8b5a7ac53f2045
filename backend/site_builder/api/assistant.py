from fastapi import APIRouter, Depends

from site_builder.schemas.assistant import (
    AnalysisRequest,
    AnalysisResponse,
    AutoFixRequest,
    AutoFixResponse,
    ChatRequest,
    ChatResponse,
    PlanRequest,
    PlanResponse,
    TaskExecutionRequest,
    TaskExecutionResponse,
)
from site_builder.services.assistant_service import AssistantService


router = APIRouter()

_service: AssistantService | None = None


def get_service() -> AssistantService:
    global _service
    if _service is None:
        _service = AssistantService()
    return _service


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Apply a chat instruction to the project files",
)
async def chat(
    payload: ChatRequest,
    service: AssistantService = Depends(get_service),
) -> ChatResponse:
    """
    Send one instruction plus the current project files to the first configured
    provider. Returns complete replacement contents for changed files, or a
    plain message when the model made no file changes.
    """
    return await service.chat(payload)


@router.post(
    "/plan",
    response_model=PlanResponse,
    summary="Break a request into a to-do list of tasks",
)
async def plan(
    payload: PlanRequest,
    service: AssistantService = Depends(get_service),
) -> PlanResponse:
    return await service.plan(payload)


@router.post(
    "/execute-task",
    response_model=TaskExecutionResponse,
    summary="Execute one approved task from a to-do list",
)
async def execute_task(
    payload: TaskExecutionRequest,
    service: AssistantService = Depends(get_service),
) -> TaskExecutionResponse:
    return await service.execute_task(payload)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    summary="Ask the model for improvement suggestions",
)
async def analyze(
    payload: AnalysisRequest,
    service: AssistantService = Depends(get_service),
) -> AnalysisResponse:
    return await service.analyze(payload)


@router.post(
    "/auto-fix",
    response_model=AutoFixResponse,
    summary="Fix several issues concurrently, one model call per issue",
)
async def auto_fix(
    payload: AutoFixRequest,
    service: AssistantService = Depends(get_service),
) -> AutoFixResponse:
    """Per-issue failures are reported in ``results`` and never fail the whole request."""
    return await service.auto_fix(payload)
