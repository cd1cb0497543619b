from __future__ import annotations

from fastapi import APIRouter, Request

from models.schema import StatusResponse, VersionResponse

router = APIRouter()


@router.get("/ping", response_model=StatusResponse)
def ping():
    # Keep-alive target for uptime pingers; no dependencies touched.
    return StatusResponse(message="Server is alive")


@router.get("/", response_model=VersionResponse)
def root(request: Request):
    return VersionResponse(message="SMS to Telegram API is running", version=request.app.version)
