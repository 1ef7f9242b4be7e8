from __future__ import annotations

from typing import Optional, Protocol

import httpx
from loguru import logger


class NotificationSink(Protocol):
    def notify(self, player_id: str, text: str) -> bool:
        ...


class BotNotifier:
    """
    Надсилає POST на бекенд бота, щоб той уже відправив повідомлення в Telegram.
    Наприклад:
      BOT_NOTIFY_URL = "https://pixelarena-bot.up.railway.app/admin/notify"
    """

    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.Client] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    def notify(self, player_id: str, text: str) -> bool:
        """
        True, якщо бот відповів 2xx, інакше False. Не кидає - сповіщення
        не повинно ламати ігрову операцію.
        """
        try:
            if self._client is not None:
                resp = self._client.post(self.url, json={"tg_id": player_id, "text": text})
            else:
                resp = httpx.post(
                    self.url,
                    json={"tg_id": player_id, "text": text},
                    timeout=self.timeout,
                )

            if 200 <= resp.status_code < 300:
                return True

            logger.error(
                "Notify request failed: status={status} body={body}",
                status=resp.status_code,
                body=resp.text[:500],
            )
            return False

        except httpx.HTTPError as e:
            logger.error("notify error for tg_id={tg_id}: {err!r}", tg_id=player_id, err=e)
            return False


class LogNotifier:
    """Коли BOT_NOTIFY_URL не заданий - просто пишемо в лог."""

    def notify(self, player_id: str, text: str) -> bool:
        logger.info("[notify] tg_id={tg_id}: {text}", tg_id=player_id, text=text)
        return True


def build_notifier(url: Optional[str]) -> NotificationSink:
    if not url:
        logger.warning("BOT_NOTIFY_URL is not set – notifications go to the log only")
        return LogNotifier()
    return BotNotifier(url)


def class_change_message() -> str:
    return (
        "🎉 Congratulations! You have reached level 3!\n"
        "You can now change your hero class in the game profile."
    )
