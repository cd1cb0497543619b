from __future__ import annotations

import html
from datetime import datetime, timezone, tzinfo
from typing import Optional

DEFAULT_TIMESTAMP_FORMAT = "%d.%m.%Y, %H:%M:%S"


def format_sms_time(timestamp_ms: Optional[int] = None, tz: tzinfo = timezone.utc,
                    fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    """Epoch milliseconds (or now, when None) rendered day-first in tz."""
    if timestamp_ms is None:
        ts = datetime.now(tz)
    else:
        ts = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    return ts.strftime(fmt)


def format_sms_notification(sender: str, message: str, timestamp_ms: Optional[int] = None,
                            tz: tzinfo = timezone.utc, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    # Sent with parse_mode=HTML, so user-supplied text must be escaped.
    return (
        "📱 <b>New SMS</b>\n\n"
        f"From: <b>{html.escape(sender)}</b>\n"
        f"Time: {format_sms_time(timestamp_ms, tz=tz, fmt=fmt)}\n\n"
        "Message:\n"
        f"{html.escape(message)}"
    )
