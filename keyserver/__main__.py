import uvicorn

from keyserver.log import configure_logging
from keyserver.settings import settings

# uvicorn names the highest and lowest levels differently.
UVICORN_LOG_LEVELS = {"FATAL": "critical", "NOTSET": "trace"}


def main() -> None:
    """Entrypoint of the application."""
    configure_logging()
    level = settings.log_level.value
    uvicorn.run(
        "keyserver.web.application:get_app",
        workers=settings.workers_count,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=UVICORN_LOG_LEVELS.get(level, level.lower()),
        factory=True,
    )


if __name__ == "__main__":
    main()
