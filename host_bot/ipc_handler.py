"""IPC handler for telegram_* requests

Every recognized request gets exactly one result file, including the ones
that cannot run (foreign group, no token), so the container never waits
for nothing. Add/remove are read-modify-write over setMyCommands and are
not atomic against other writers of the same bot (BotFather, a second
host); within this process they are serialized by a lock.
"""

import asyncio
import logging
from typing import Callable, Optional

from ipc_bridge.protocol import TaskEntry, ResultEntry, write_result
from ipc_bridge.commands import normalize_command, validate_command, clean_commands
from host_bot.telegram_api import BotCommandsClient

logger = logging.getLogger("bot.ipc")

NOT_MAIN_MESSAGE = "Only the main group can manage bot commands."
NOT_CONFIGURED_MESSAGE = "Telegram bot token is not configured (set TELEGRAM_BOT_TOKEN)"


class RequestError(Exception):
    """Request is invalid or the API refused it; message goes to the user as is"""


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


class TelegramCommandsHandler:
    """Executes telegram_* tasks with the bot token the host was configured with"""

    namespace = "telegram_"

    def __init__(
        self,
        token: Optional[str],
        api_url: str = "https://api.telegram.org",
        client_factory: Callable = None,
    ):
        self.token = token
        self._client_factory = client_factory or (lambda tok: BotCommandsClient(tok, api_url))
        self._mutation_lock = asyncio.Lock()
        self._actions = {
            "telegram_list_commands": self._list_commands,
            "telegram_set_commands": self._set_commands,
            "telegram_add_command": self._add_command,
            "telegram_remove_command": self._remove_command,
            "telegram_clear_commands": self._clear_commands,
        }

    def claims(self, entry: TaskEntry) -> bool:
        return entry.type.startswith(self.namespace)

    async def handle_request(self, entry: TaskEntry, results_dir, is_main: bool = True) -> bool:
        """False if the type is not ours, otherwise answer it and return True"""
        if not self.claims(entry):
            return False

        result = await self._execute(entry, is_main)
        result.request_id = entry.request_id
        write_result(results_dir, result)

        status = "ok" if result.success else "failed"
        logger.info(f"[ipc] {entry.type} {entry.request_id}: {status} - {result.message}")
        return True

    async def _execute(self, entry: TaskEntry, is_main: bool) -> ResultEntry:
        if not is_main:
            logger.warning(f"[ipc] {entry.type} from non-main group refused")
            return ResultEntry.failure(NOT_MAIN_MESSAGE)

        if not self.token:
            return ResultEntry.failure(NOT_CONFIGURED_MESSAGE)

        action = self._actions.get(entry.type)
        if action is None:
            return ResultEntry.failure(f"Unknown telegram request type: {entry.type}")

        try:
            client = self._client_factory(self.token)
            return await action(client, entry.payload)
        except RequestError as e:
            return ResultEntry.failure(str(e))
        except Exception as e:
            logger.error(f"[ipc] {entry.type} {entry.request_id} error: {e!r}")
            return ResultEntry.failure(str(e) or type(e).__name__)

    async def _current_commands(self, client) -> list[dict]:
        resp = await client.get_commands()
        if not resp.ok:
            raise RequestError(resp.description)
        return [
            {"command": c.get("command", ""), "description": c.get("description", "")}
            for c in (resp.result or [])
        ]

    async def _replace_commands(self, client, commands: list[dict]):
        resp = await client.set_commands(commands)
        if not resp.ok:
            raise RequestError(resp.description)

    async def _list_commands(self, client, payload: dict) -> ResultEntry:
        commands = await self._current_commands(client)
        return ResultEntry.ok(f"Found {_plural(len(commands), 'command')}", data=commands)

    async def _set_commands(self, client, payload: dict) -> ResultEntry:
        try:
            commands = clean_commands(payload.get("commands"))
        except ValueError as e:
            raise RequestError(str(e)) from e
        async with self._mutation_lock:
            await self._replace_commands(client, commands)
        return ResultEntry.ok(f"Successfully set {_plural(len(commands), 'command')}", data=commands)

    async def _add_command(self, client, payload: dict) -> ResultEntry:
        command = normalize_command(payload.get("command", ""))
        description = str(payload.get("description") or "").strip()
        error = validate_command(command, description)
        if error:
            raise RequestError(error)

        async with self._mutation_lock:
            commands = await self._current_commands(client)
            existing = next((c for c in commands if c["command"] == command), None)
            if existing:
                existing["description"] = description
            else:
                commands.append({"command": command, "description": description})
            await self._replace_commands(client, commands)

        verb = "updated" if existing else "added"
        return ResultEntry.ok(f"Successfully {verb} command: /{command}", data=commands)

    async def _remove_command(self, client, payload: dict) -> ResultEntry:
        command = normalize_command(payload.get("command", ""))
        if not command:
            raise RequestError("command is required")

        async with self._mutation_lock:
            commands = await self._current_commands(client)
            remaining = [c for c in commands if c["command"] != command]
            if len(remaining) == len(commands):
                raise RequestError(f"Command not found: /{command}")
            await self._replace_commands(client, remaining)

        return ResultEntry.ok(f"Successfully removed command: /{command}", data=remaining)

    async def _clear_commands(self, client, payload: dict) -> ResultEntry:
        async with self._mutation_lock:
            await self._replace_commands(client, [])
        return ResultEntry.ok("Successfully cleared all commands", data=[])
