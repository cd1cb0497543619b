from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request

log = logging.getLogger("smsrelay.api_key")

API_KEY_HEADER = "X-Api-Key"


def verify_api_key(request: Request) -> None:
    expected = request.app.state.settings.API_KEY
    provided = request.headers.get(API_KEY_HEADER, "")

    # Fail closed: an unconfigured key rejects every call.
    if not expected or not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
        log.warning(
            "api_key_rejected",
            extra={"extra": {"event": "api_key_rejected", "path": request.url.path, "header_present": bool(provided)}},
        )
        raise HTTPException(status_code=401, detail="Invalid API key")


ApiKeyRequired = Depends(verify_api_key)
