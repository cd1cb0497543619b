from __future__ import annotations

import json
from typing import Any, Callable, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from messaging.telegram import TelegramClient
from repos.device_repo import DeviceRepository

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

Body = TypeVar("Body", bound=BaseModel)

# Both live on app.state so each create_app() gets its own instances.


def get_device_repo(request: Request) -> DeviceRepository:
    return request.app.state.device_repo


def get_telegram(request: Request) -> TelegramClient:
    return request.app.state.telegram


async def _read_payload(request: Request) -> Any:
    ctype = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if ctype == FORM_CONTENT_TYPE:
        form = await request.form()
        return {k: v for k, v in form.items()}

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": {}, "ctx": {"error": str(e)}}]
        )


def request_body(model: Type[Body]) -> Callable[..., Any]:
    """
    Dependency validating a JSON or form-encoded body against model.

    Runs after the router's API key dependency, so unauthorised calls are
    rejected before the body is looked at.
    """
    async def dependency(request: Request) -> Body:
        payload = await _read_payload(request)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
            raise RequestValidationError(errors)

    return dependency
