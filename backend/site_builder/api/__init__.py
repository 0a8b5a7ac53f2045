from typing import Tuple

from fastapi import APIRouter, FastAPI

from site_builder.core.config import get_settings

from . import assistant, health, projects

# (router, mount path, OpenAPI tag); all mounted below the configured api_prefix.
ROUTE_TABLE: Tuple[Tuple[APIRouter, str, str], ...] = (
    (health.router, "", "health"),
    (assistant.router, "/assistant", "assistant"),
    (projects.router, "/projects", "projects"),
)


def get_api_router() -> APIRouter:
    """Gateway router: health probe, code assistant and project generation/preview."""
    root_router = APIRouter()
    for router, path, tag in ROUTE_TABLE:
        root_router.include_router(router, prefix=path, tags=[tag])
    return root_router


def register_routes(app: FastAPI) -> None:
    settings = get_settings()
    app.include_router(get_api_router(), prefix=settings.api_prefix)
