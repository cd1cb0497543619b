from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any, Dict

from utils.request_context import get_request_id

SERVICE_NAME = "sms-relay"


def dest_hint(v: str, keep: int = 4) -> str:
    v = (v or "").strip()
    if not v:
        return ""
    if len(v) <= keep:
        return v
    return f"...{v[-keep:]}"


class JsonFormatter(logging.Formatter):
    def __init__(self, environment: str = "", version: str = ""):
        super().__init__()
        self.environment = environment
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time_unix": time.time(),
            "service": SERVICE_NAME,
            "environment": self.environment,
            "version": self.version,
        }
        rid = get_request_id()
        if rid:
            payload["request_id"] = rid
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            payload.update(record.extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", environment: str = "", version: str = "") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(environment=environment, version=version))

    # Telegram bot tokens are part of the request URL; httpx logs full URLs at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    root.handlers[:] = [handler]
