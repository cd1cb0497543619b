from __future__ import annotations

import logging

import uvicorn

from app.api_service import app
from config.settings import settings

log = logging.getLogger("smsrelay.server")


def main() -> None:
    log.info(
        "server_starting",
        extra={"extra": {"event": "server_starting", "host": settings.HOST, "port": settings.PORT,
                         "environment": settings.ENVIRONMENT, "api_key_configured": bool(settings.API_KEY)}},
    )
    # log_config=None keeps the JSON handler installed by setup_logging.
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
