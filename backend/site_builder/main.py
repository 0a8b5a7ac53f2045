"""
Single entrypoint for the AI Site Builder backend.

Run from backend directory: uvicorn site_builder.main:app --reload
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from site_builder.api import register_routes
from site_builder.api.errors import register_error_handlers
from site_builder.api.middleware import register_middleware
from site_builder.core.config import get_settings
from site_builder.core.logging_config import configure_logging


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.
    """
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="AI Site Builder",
        description=(
            "Backend for an AI website builder. Routes generation requests to "
            "OpenRouter, OpenAI, DeepSeek, Gemini or Anthropic using the "
            "caller's own API keys and normalizes the output into project file edits."
        ),
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_error_handlers(app)
    register_routes(app)

    return app


app = create_app()
