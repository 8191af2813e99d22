"""
Process entry point: `todo-reminder` (or `python -m src.todo_reminder.server`).

Configures logging from settings and serves the FastAPI app with uvicorn.
"""
from __future__ import annotations

import logging
from typing import Optional

from .settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Install the root log handler used by the service."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main(settings: Optional[Settings] = None) -> None:
    """Start the HTTP server and the reminder sweep."""
    import uvicorn

    from .main import create_app

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    logging.getLogger(__name__).info("HTTP server listening on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
