from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from config.settings import settings
from ops.structured_logger import dest_hint

log = logging.getLogger("smsrelay.telegram")


class RelayError(Exception):
    """Outbound Telegram call failed. str(exc) carries the cause and never the bot token."""


def _describe_failure(r: httpx.Response, data: Dict[str, Any]) -> str:
    desc = str(data.get("description") or "").strip()
    if desc:
        return f"{r.status_code} {desc}"
    return f"{r.status_code} {r.reason_phrase}".strip()


class TelegramClient:
    """
    Sends one message per call to the Bot API sendMessage endpoint.

    The bot token is supplied per call because every registered device routes
    through its own bot. No retries.
    """
    def __init__(self, api_base: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_base = (api_base or settings.TELEGRAM_API_BASE).rstrip("/")
        self._transport = transport

    async def send_message(self, bot_token: str, chat_id: str, text: str, parse_mode: str = "HTML") -> Dict[str, Any]:
        url = f"{self.api_base}/bot{bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": parse_mode}

        t0 = time.time()
        log.info(
            "telegram_send_attempt",
            extra={"extra": {"event": "telegram_send_attempt", "channel": "telegram", "dest": dest_hint(chat_id)}},
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                r = await client.post(url, json=payload)
        except httpx.InvalidURL as e:
            # Raised before any I/O when the token holds characters a URL cannot carry.
            raise RelayError("Telegram send failed: invalid bot token") from e
        except httpx.HTTPError as e:
            log.error(
                "telegram_send_exception",
                extra={
                    "extra": {
                        "event": "telegram_send_exception",
                        "channel": "telegram",
                        "dest": dest_hint(chat_id),
                        "error_type": type(e).__name__,
                        "latency_ms": int((time.time() - t0) * 1000),
                    }
                },
            )
            # httpx messages for transport errors do not include the request URL.
            raise RelayError(f"Telegram send failed: {str(e) or type(e).__name__}") from e

        try:
            data = r.json()
        except ValueError:
            data = {"ok": False, "text": (r.text or "")[:500]}
        if not isinstance(data, dict):
            data = {"ok": False}

        dt_ms = int((time.time() - t0) * 1000)
        ok = r.is_success and bool(data.get("ok", False))
        log.info(
            "telegram_send_result",
            extra={
                "extra": {
                    "event": "telegram_send_result",
                    "channel": "telegram",
                    "dest": dest_hint(chat_id),
                    "ok": ok,
                    "status_code": r.status_code,
                    "latency_ms": dt_ms,
                }
            },
        )

        if not ok:
            log.warning(
                "telegram_send_failed",
                extra={"extra": {"event": "telegram_send_failed", "status_code": r.status_code, "resp": data}},
            )
            raise RelayError(f"Telegram send failed: {_describe_failure(r, data)}")
        return data
