"""Entry point for serving the API.

Usage:
    python -m gitgud.api
"""

import sys

import uvicorn

from gitgud.api.app import create_app
from gitgud.config.settings import Settings
from gitgud.core.logging import get_logger, level_from_name, setup_logging

logger = get_logger("gitgud.api")


def main() -> int:
    settings = Settings()
    setup_logging(level_from_name(settings.log_level))

    missing = settings.missing_keys()
    if missing:
        logger.error("Missing required configuration", extra={"missing": missing})
        return 1

    app = create_app(settings)
    logger.info(
        "GitGud backend starting",
        extra={
            "port": settings.port,
            "openai_model": settings.openai_model,
            "cors_origins": settings.allowed_origins or "*",
        },
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
