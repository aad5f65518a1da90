"""ASGI entry point for launching the FastAPI application."""

from __future__ import annotations

import logging

import uvicorn

from .config import Settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def main() -> None:
    """Run the API using uvicorn."""

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        "cammeasure.api:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
