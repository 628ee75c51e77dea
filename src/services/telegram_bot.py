"""
Telegram bot over the Bot HTTP API (long polling)

Commands:
- /start     welcome message
- /getimage  send the most recent daily image
- /similar   past daily analyses closest to a free-text query
"""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import structlog

logger = structlog.get_logger(__name__)

WELCOME_MESSAGE = "Welcome to the News Image Bot! Use /getimage to get today's image."
NO_IMAGE_MESSAGE = "No images available yet. Please try again later."
IMAGE_ERROR_MESSAGE = "Sorry, there was an error retrieving the image. Please try again later."
SIMILAR_USAGE_MESSAGE = "Usage: /similar <what you are looking for>"
NO_MATCHES_MESSAGE = "No similar news found."
SIMILAR_ERROR_MESSAGE = "Sorry, the news search is unavailable right now. Please try again later."

LatestImageFn = Callable[[], Optional[str]]
SimilarNewsFn = Callable[[str, int], Awaitable[List[Dict[str, Any]]]]


def parse_command(text: str) -> Optional[tuple]:
    """Split '/cmd@bot args' into ('cmd', 'args'); None when text is not a command."""
    if not text or not text.startswith("/"):
        return None
    head, _, args = text.strip().partition(" ")
    command = head[1:].split("@", 1)[0].lower()
    if not command:
        return None
    return command, args.strip()


class TelegramBot:
    def __init__(
        self,
        token: str,
        latest_image: LatestImageFn,
        similar_news: Optional[SimilarNewsFn] = None,
        api_url: str = "https://api.telegram.org",
        poll_timeout_seconds: int = 30,
        retry_delay_seconds: float = 5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ValueError("Telegram bot token is not set")
        self.base_url = f"{api_url.rstrip('/')}/bot{token}"
        self.latest_image = latest_image
        self.similar_news = similar_news
        self.poll_timeout_seconds = poll_timeout_seconds
        self.retry_delay_seconds = retry_delay_seconds
        self.client = client or httpx.AsyncClient(timeout=poll_timeout_seconds + 10)
        self._offset: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.running:
            self._task = asyncio.create_task(self._poll_loop(), name="telegram-bot")
            logger.info("telegram_bot_running")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error("telegram_bot_task_failed", error=str(e))
            self._task = None
        await self.client.aclose()
        logger.info("telegram_bot_stopped")

    async def _poll_loop(self) -> None:
        while True:
            try:
                updates = await self.get_updates()
            except Exception as e:
                # Transport errors and malformed payloads both back off and retry
                logger.warning("telegram_poll_failed", error=str(e))
                await asyncio.sleep(self.retry_delay_seconds)
                continue

            for update in updates:
                update_id = update.get("update_id") if isinstance(update, dict) else None
                if not isinstance(update_id, int):
                    logger.warning("telegram_update_malformed", update=str(update)[:200])
                    continue
                self._offset = update_id + 1
                try:
                    await self.handle_update(update)
                except Exception as e:
                    logger.error("telegram_update_failed", update_id=update.get("update_id"), error=str(e))

    async def get_updates(self) -> List[Dict[str, Any]]:
        params = {"timeout": self.poll_timeout_seconds, "allowed_updates": '["message"]'}
        if self._offset is not None:
            params["offset"] = self._offset
        response = await self.client.get(f"{self.base_url}/getUpdates", params=params)
        response.raise_for_status()
        return response.json().get("result", [])

    async def handle_update(self, update: Dict[str, Any]) -> None:
        message = update.get("message") or {}
        chat_id = (message.get("chat") or {}).get("id")
        parsed = parse_command(message.get("text", ""))
        if chat_id is None or parsed is None:
            return

        command, args = parsed
        if command == "start":
            await self.send_message(chat_id, WELCOME_MESSAGE)
        elif command == "getimage":
            await self._handle_get_image(chat_id)
        elif command == "similar":
            await self._handle_similar(chat_id, args)

    async def _handle_get_image(self, chat_id: int) -> None:
        try:
            latest_image = self.latest_image()
            if not latest_image:
                await self.send_message(chat_id, NO_IMAGE_MESSAGE)
                return
            await self.send_photo(chat_id, latest_image)
        except Exception as e:
            logger.error("telegram_send_image_failed", chat_id=chat_id, error=str(e))
            await self.send_message(chat_id, IMAGE_ERROR_MESSAGE)

    async def _handle_similar(self, chat_id: int, query: str) -> None:
        if not query:
            await self.send_message(chat_id, SIMILAR_USAGE_MESSAGE)
            return
        if self.similar_news is None:
            await self.send_message(chat_id, SIMILAR_ERROR_MESSAGE)
            return

        try:
            matches = await self.similar_news(query, 3)
        except Exception as e:
            logger.error("telegram_similar_failed", chat_id=chat_id, error=str(e))
            await self.send_message(chat_id, SIMILAR_ERROR_MESSAGE)
            return

        if not matches:
            await self.send_message(chat_id, NO_MATCHES_MESSAGE)
            return

        lines = [f"{match['date']} (score {match['score']:.2f})\n{match['analysis'][:300]}" for match in matches]
        await self.send_message(chat_id, "\n\n".join(lines))

    async def send_message(self, chat_id: int, text: str) -> None:
        response = await self.client.post(f"{self.base_url}/sendMessage", data={"chat_id": chat_id, "text": text})
        response.raise_for_status()

    async def send_photo(self, chat_id: int, image_path: str) -> None:
        path = Path(image_path)
        with path.open("rb") as photo:
            response = await self.client.post(
                f"{self.base_url}/sendPhoto",
                data={"chat_id": chat_id},
                files={"photo": (path.name, photo, "image/png")},
            )
        response.raise_for_status()
