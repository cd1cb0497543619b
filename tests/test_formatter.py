from datetime import timedelta, timezone

from messaging.formatter import format_sms_notification, format_sms_time


def test_format_sms_time_day_first():
    # 2024-01-02T03:04:05Z
    assert format_sms_time(1704164645000) == "02.01.2024, 03:04:05"


def test_format_sms_time_uses_tz():
    msk = timezone(timedelta(hours=3))
    assert format_sms_time(1704164645000, tz=msk) == "02.01.2024, 06:04:05"


def test_notification_contains_sender_time_and_text():
    text = format_sms_notification("+1555", "hello", timestamp_ms=1704164645000)
    assert text.startswith("📱 <b>New SMS</b>")
    assert "From: <b>+1555</b>" in text
    assert "Time: 02.01.2024, 03:04:05" in text
    assert text.endswith("Message:\nhello")


def test_notification_escapes_html():
    text = format_sms_notification("<Bank>", "code <b>1234</b> & more", timestamp_ms=0)
    assert "&lt;Bank&gt;" in text
    assert "code &lt;b&gt;1234&lt;/b&gt; &amp; more" in text


def test_notification_without_timestamp_uses_now():
    text = format_sms_notification("+1555", "hi")
    assert "Time: " in text
