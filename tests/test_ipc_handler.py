# tests/test_ipc_handler.py

from __future__ import annotations

from pathlib import Path

import pytest

from host_bot.ipc_handler import NOT_MAIN_MESSAGE, TelegramCommandsHandler
from ipc_bridge.protocol import ResultEntry, TaskEntry, entry_path, list_entries, read_json

from .fakes import FakeCommandsClient


def _handler(client: FakeCommandsClient, token: str | None = "123:abc") -> TelegramCommandsHandler:
    return TelegramCommandsHandler(token, client_factory=lambda tok: client)


async def _run(handler: TelegramCommandsHandler, results: Path, task_type: str, is_main: bool = True, **payload) -> ResultEntry:
    task = TaskEntry.create(task_type, payload)
    assert await handler.handle_request(task, results, is_main=is_main) is True
    path = entry_path(results, task.request_id)
    result = ResultEntry.model_validate(read_json(path))
    path.unlink()
    return result


@pytest.mark.asyncio
async def test_foreign_namespace_is_not_claimed(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    task = TaskEntry.create("schedule_task", {"prompt": "hi"})

    assert await _handler(fake_client).handle_request(task, tmp_path) is False
    assert list_entries(tmp_path) == []


@pytest.mark.asyncio
async def test_missing_token_still_answers(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(_handler(fake_client, token=None), tmp_path, "telegram_list_commands")

    assert result.success is False
    assert "not configured" in result.message
    assert fake_client.set_calls == []


@pytest.mark.asyncio
async def test_non_main_group_is_refused(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(_handler(fake_client), tmp_path, "telegram_clear_commands", is_main=False)

    assert result.success is False
    assert result.message == NOT_MAIN_MESSAGE
    assert fake_client.set_calls == []


@pytest.mark.asyncio
async def test_add_list_remove_round_trip(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    handler = _handler(fake_client)

    added = await _run(handler, tmp_path, "telegram_add_command", command="demo", description="desc")
    assert added.success is True
    assert added.message == "Successfully added command: /demo"

    listed = await _run(handler, tmp_path, "telegram_list_commands")
    assert {"command": "demo", "description": "desc"} in listed.data
    assert listed.message == "Found 1 command"

    removed = await _run(handler, tmp_path, "telegram_remove_command", command="/demo")
    assert removed.success is True
    assert removed.message == "Successfully removed command: /demo"

    listed = await _run(handler, tmp_path, "telegram_list_commands")
    assert all(c["command"] != "demo" for c in listed.data)


@pytest.mark.asyncio
async def test_add_existing_command_updates_in_place(tmp_path: Path) -> None:
    client = FakeCommandsClient([
        {"command": "start", "description": "Start"},
        {"command": "help", "description": "Help"},
    ])

    result = await _run(_handler(client), tmp_path, "telegram_add_command", command="start", description="Begin")

    assert result.message == "Successfully updated command: /start"
    assert client.commands == [
        {"command": "start", "description": "Begin"},
        {"command": "help", "description": "Help"},
    ]


@pytest.mark.asyncio
async def test_clear_twice_succeeds(tmp_path: Path) -> None:
    client = FakeCommandsClient([{"command": "start", "description": "Start"}])
    handler = _handler(client)

    first = await _run(handler, tmp_path, "telegram_clear_commands")
    second = await _run(handler, tmp_path, "telegram_clear_commands")
    listed = await _run(handler, tmp_path, "telegram_list_commands")

    assert first.success and second.success
    assert listed.data == []


@pytest.mark.asyncio
async def test_set_commands_replaces_list(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(
        _handler(fake_client), tmp_path, "telegram_set_commands",
        commands=[{"command": "/Start", "description": "Start"}, {"command": "help", "description": "Help"}],
    )

    assert result.message == "Successfully set 2 commands"
    assert fake_client.commands == [
        {"command": "start", "description": "Start"},
        {"command": "help", "description": "Help"},
    ]


@pytest.mark.asyncio
async def test_invalid_set_payload_is_rejected_before_api(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(
        _handler(fake_client), tmp_path, "telegram_set_commands",
        commands=[{"command": "has space", "description": "x"}],
    )

    assert result.success is False
    assert "Invalid command name" in result.message
    assert fake_client.set_calls == []


@pytest.mark.asyncio
async def test_set_commands_rejects_non_list_and_duplicates(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    handler = _handler(fake_client)

    not_list = await _run(handler, tmp_path, "telegram_set_commands", commands="start")
    dup = await _run(
        handler, tmp_path, "telegram_set_commands",
        commands=[{"command": "a", "description": "x"}, {"command": "/A", "description": "y"}],
    )

    assert not_list.success is False
    assert not_list.message == "commands must be a list of {command, description}"
    assert dup.message == "Duplicate command: /a"
    assert fake_client.set_calls == []


@pytest.mark.asyncio
async def test_remove_unknown_command_fails(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(_handler(fake_client), tmp_path, "telegram_remove_command", command="ghost")

    assert result.success is False
    assert result.message == "Command not found: /ghost"
    assert fake_client.set_calls == []


@pytest.mark.asyncio
async def test_api_refusal_description_is_surfaced(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    fake_client.refuse_set = "Bad Request: BOT_COMMAND_INVALID"

    result = await _run(_handler(fake_client), tmp_path, "telegram_add_command", command="demo", description="d")

    assert result.success is False
    assert result.message == "Bad Request: BOT_COMMAND_INVALID"


@pytest.mark.asyncio
async def test_exceptions_become_failure_results(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    fake_client.raise_on_get = ConnectionError("network is unreachable")

    result = await _run(_handler(fake_client), tmp_path, "telegram_list_commands")

    assert result.success is False
    assert result.message == "network is unreachable"


@pytest.mark.asyncio
async def test_unknown_subtype_is_answered(tmp_path: Path, fake_client: FakeCommandsClient) -> None:
    result = await _run(_handler(fake_client), tmp_path, "telegram_rename_bot")

    assert result.success is False
    assert result.message == "Unknown telegram request type: telegram_rename_bot"
