from typing import List

from config.settings import Settings
from messaging.telegram import RelayError

API_KEY = "test-key"


class FakeTelegram:
    def __init__(self, fail_with: str = ""):
        self.sent: List[dict] = []
        self.fail_with = fail_with

    async def send_message(self, bot_token, chat_id, text, parse_mode="HTML"):
        self.sent.append({"bot_token": bot_token, "chat_id": chat_id, "text": text})
        if self.fail_with:
            raise RelayError(self.fail_with)
        return {"ok": True, "result": {"message_id": len(self.sent)}}


def make_settings(**overrides) -> Settings:
    values = {"API_KEY": API_KEY, "RATE_LIMIT_MAX_REQUESTS": 100, "RATE_LIMIT_WINDOW_SECONDS": 900}
    values.update(overrides)
    return Settings(_env_file=None, **values)
