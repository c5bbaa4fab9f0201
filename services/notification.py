import logging
from typing import Hashable, Iterable, Protocol

import aiohttp
from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from services.order_formatter import build_telegram_message

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    name: str

    async def send(self, payload: dict) -> None:
        ...


class DiscordWebhookSink:
    name = "discord"

    def __init__(self, webhook_url: str, timeout_seconds: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds

    async def send(self, payload: dict) -> None:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.webhook_url, json=payload) as response:
                response.raise_for_status()
                logger.info(f"Order notification sent to Discord (HTTP {response.status})")


class TelegramAdminSink:
    """
    Sends the notification to every admin chat through one shared aiogram Bot.

    The Bot (and its HTTP session) is created on first use and closed by close().
    """
    name = "telegram"

    def __init__(self, token: str, admin_ids: Iterable[int]):
        self.token = token
        self.admin_ids = list(admin_ids)
        self._bot: Bot | None = None

    def get_bot(self) -> Bot:
        if self._bot is None:
            self._bot = Bot(token=self.token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
        return self._bot

    async def send(self, payload: dict) -> None:
        await self.send_text(build_telegram_message(payload))

    async def send_text(self, message: str) -> None:
        bot = self.get_bot()
        for admin_id in self.admin_ids:
            try:
                await bot.send_message(admin_id, message)
            except Exception as e:
                logger.error(f"Failed to notify admin {admin_id}: {e}")

    async def close(self) -> None:
        if self._bot is not None:
            await self._bot.session.close()
            self._bot = None


class NotificationDispatcher:
    """
    Fires a downstream notification at most once per dedupe key.

    The key is recorded before any sink is awaited, so a concurrent duplicate
    sees it and backs off even while the first delivery is still in flight.
    Sink failures are logged and swallowed: the operation that triggered the
    notification never fails because of them.
    """

    def __init__(self, sinks: Iterable[NotificationSink] = ()):
        self.sinks = list(sinks)
        self._fired: set[Hashable] = set()

    def was_fired(self, dedupe_key: Hashable) -> bool:
        return dedupe_key in self._fired

    def forget(self, dedupe_key: Hashable) -> None:
        """Drop a key whose subject can never trigger the notification again (e.g. a swept order)."""
        self._fired.discard(dedupe_key)

    @property
    def fired_count(self) -> int:
        return len(self._fired)

    async def notify_once(self, dedupe_key: Hashable, payload: dict) -> bool:
        """
        Returns:
            True if this call fired the notification, False for a duplicate key
        """
        if dedupe_key in self._fired:
            logger.info(f"Notification {dedupe_key} already fired, skipping")
            return False
        self._fired.add(dedupe_key)

        if not self.sinks:
            logger.warning(f"No notification sinks configured, notification {dedupe_key} dropped")
            return True

        for sink in self.sinks:
            try:
                await sink.send(payload)
            except Exception as e:
                logger.error(f"Notification sink '{sink.name}' failed for {dedupe_key}: {e}")
        return True

    async def alert_admins(self, message: str) -> None:
        """Operational alert (crash reports) to every sink that accepts plain text, not deduplicated."""
        for sink in self.sinks:
            send_text = getattr(sink, "send_text", None)
            if send_text is None:
                continue
            try:
                await send_text(message)
            except Exception as e:
                logger.error(f"Admin alert via '{sink.name}' failed: {e}")

    async def close(self) -> None:
        for sink in self.sinks:
            close = getattr(sink, "close", None)
            if close is not None:
                await close()
