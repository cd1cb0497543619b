from __future__ import annotations

import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Wire format is camelCase; Python attributes are snake_case.

MAX_TIMESTAMP_MS = 253402300799999  # 9999-12-31T23:59:59.999Z

_LEADING_INT = re.compile(r"\s*([+-]?\d+)(?:\.\d*)?\s*")


def _number_to_str(v: Any) -> Any:
    # Device ids, chat ids and phone-number senders are commonly sent as JSON numbers.
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SendToTelegramRequest(_Body):
    bot_token: str = Field(..., alias="botToken", min_length=1)
    chat_id: str = Field(..., alias="chatId", min_length=1)
    message: str = Field(..., min_length=1)

    @field_validator("chat_id", "message", mode="before")
    @classmethod
    def _numbers_as_str(cls, v: Any) -> Any:
        return _number_to_str(v)


class RegisterDeviceRequest(_Body):
    device_id: str = Field(..., alias="deviceId", min_length=1)
    bot_token: str = Field(..., alias="botToken", min_length=1)
    chat_id: str = Field(..., alias="chatId", min_length=1)

    @field_validator("device_id", "chat_id", mode="before")
    @classmethod
    def _numbers_as_str(cls, v: Any) -> Any:
        return _number_to_str(v)


class ProcessSmsRequest(_Body):
    device_id: str = Field(..., alias="deviceId", min_length=1)
    sender: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    timestamp: Optional[int] = Field(default=None, ge=0, le=MAX_TIMESTAMP_MS)

    @field_validator("device_id", "sender", "message", mode="before")
    @classmethod
    def _numbers_as_str(cls, v: Any) -> Any:
        return _number_to_str(v)

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_ms(cls, v: Any) -> Any:
        """
        Milliseconds are truncated to a whole number. Absent, blank or 0 means "now".
        """
        if isinstance(v, float) and math.isfinite(v):
            v = int(v)
        elif isinstance(v, str):
            if not v.strip():
                return None
            m = _LEADING_INT.fullmatch(v)
            if m:
                v = int(m.group(1))
        if v is None or v == 0:
            return None
        return v


class StatusResponse(BaseModel):
    status: str = "success"
    message: str


class RegisterDeviceResponse(StatusResponse):
    deviceId: str


class VersionResponse(StatusResponse):
    version: str


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str


def error_body(message: str) -> dict:
    return ErrorResponse(message=message).model_dump()
