from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from site_builder.schemas.project import (
    PreviewRequest,
    ProjectGenerationRequest,
    ProjectGenerationResponse,
)
from site_builder.services.project_service import ProjectService
from site_builder.utils.preview import render_preview


router = APIRouter()

_service: ProjectService | None = None


def get_service() -> ProjectService:
    global _service
    if _service is None:
        _service = ProjectService()
    return _service


@router.post(
    "/generate",
    response_model=ProjectGenerationResponse,
    summary="Generate a complete new project",
)
async def generate_project(
    payload: ProjectGenerationRequest,
    service: ProjectService = Depends(get_service),
) -> ProjectGenerationResponse:
    """
    Detect the target framework, build the generation prompt and return the
    files produced by the first configured provider.
    """
    return await service.generate(payload)


@router.post(
    "/preview",
    response_class=HTMLResponse,
    summary="Render project files into a single HTML preview document",
)
async def preview(payload: PreviewRequest) -> HTMLResponse:
    return HTMLResponse(content=render_preview(payload.project_content))
