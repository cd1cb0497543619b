from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_device_repo, get_telegram, request_body
from messaging.formatter import format_sms_notification
from messaging.telegram import TelegramClient
from models.schema import (
    ProcessSmsRequest,
    RegisterDeviceRequest,
    RegisterDeviceResponse,
    SendToTelegramRequest,
    StatusResponse,
)
from ops.structured_logger import dest_hint
from repos.device_repo import DeviceRepository
from security.api_key import ApiKeyRequired

log = logging.getLogger("smsrelay.router.relay")
router = APIRouter(dependencies=[ApiKeyRequired])


@router.post("/sendToTelegram", response_model=StatusResponse)
async def send_to_telegram(
    body: SendToTelegramRequest = Depends(request_body(SendToTelegramRequest)),
    telegram: TelegramClient = Depends(get_telegram),
):
    await telegram.send_message(bot_token=body.bot_token, chat_id=body.chat_id, text=body.message)
    log.info("message_relayed", extra={"extra": {"event": "message_relayed", "dest": dest_hint(body.chat_id)}})
    return StatusResponse(message="Message sent successfully")


@router.post("/registerDevice", response_model=RegisterDeviceResponse)
async def register_device(
    body: RegisterDeviceRequest = Depends(request_body(RegisterDeviceRequest)),
    devices: DeviceRepository = Depends(get_device_repo),
):
    created = devices.upsert(body.device_id, bot_token=body.bot_token, chat_id=body.chat_id)
    event = "device_registered" if created else "device_updated"
    log.info(event, extra={"extra": {"event": event, "device_id": body.device_id, "dest": dest_hint(body.chat_id)}})
    return RegisterDeviceResponse(
        message="Device registered successfully" if created else "Device updated successfully",
        deviceId=body.device_id,
    )


@router.post("/processSms", response_model=StatusResponse)
async def process_sms(
    request: Request,
    body: ProcessSmsRequest = Depends(request_body(ProcessSmsRequest)),
    devices: DeviceRepository = Depends(get_device_repo),
    telegram: TelegramClient = Depends(get_telegram),
):
    device = devices.get(body.device_id)
    settings = request.app.state.settings
    text = format_sms_notification(
        body.sender,
        body.message,
        timestamp_ms=body.timestamp,
        tz=request.app.state.display_tz,
        fmt=settings.TIMESTAMP_FORMAT,
    )
    await telegram.send_message(bot_token=device.bot_token, chat_id=device.chat_id, text=text)
    log.info(
        "sms_forwarded",
        extra={"extra": {"event": "sms_forwarded", "device_id": device.device_id, "sender": dest_hint(body.sender)}},
    )
    return StatusResponse(message="SMS processed and forwarded to Telegram")
