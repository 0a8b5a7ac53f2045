"""
Run the site builder gateway with uvicorn.

    cd backend && python main.py

Host and port come from SITE_BUILDER_HOST / SITE_BUILDER_PORT; auto-reload
follows SITE_BUILDER_DEBUG.
"""
if __name__ == "__main__":
    import uvicorn

    from site_builder.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "site_builder.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
