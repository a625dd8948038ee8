"""Telegram Bot API client for getMyCommands / setMyCommands

Success is the "ok" field of the JSON body, not the HTTP status: Telegram
answers 400 with {"ok": false, "description": "..."} and that description
is what the user gets to see.
"""

import logging
from dataclasses import dataclass
from typing import Any

import aiohttp

logger = logging.getLogger("bot.telegram_api")


class TelegramApiError(Exception):
    """Transport-level failure: the response was not a Bot API envelope"""


@dataclass
class ApiResponse:
    ok: bool
    result: Any = None
    description: str = ""


class BotCommandsClient:
    """Thin aiohttp wrapper, one request per call, no retries"""

    def __init__(self, token: str, api_url: str = "https://api.telegram.org", timeout: float = 10.0):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.token}/{method}"

    async def _call(self, http_method: str, method: str, payload: dict = None) -> ApiResponse:
        async with aiohttp.ClientSession() as session:
            async with session.request(
                http_method,
                self._url(method),
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                status = resp.status
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    raise TelegramApiError(f"{method}: HTTP {status}, response is not JSON")

        if not isinstance(data, dict) or "ok" not in data:
            raise TelegramApiError(f"{method}: HTTP {status}, unexpected response")

        if not data["ok"]:
            logger.warning(f"{method} rejected: {data.get('description')}")
        return ApiResponse(
            ok=bool(data["ok"]),
            result=data.get("result"),
            description=data.get("description") or ("" if data["ok"] else f"{method} failed (HTTP {status})"),
        )

    async def get_commands(self) -> ApiResponse:
        return await self._call("GET", "getMyCommands")

    async def set_commands(self, commands: list) -> ApiResponse:
        return await self._call("POST", "setMyCommands", {"commands": commands})
