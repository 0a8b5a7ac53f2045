"""
Allow running as: python -m site_builder
"""
import uvicorn

from site_builder.core.config import get_settings
from site_builder.main import create_app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
        workers=1,
    )


if __name__ == "__main__":
    main()
