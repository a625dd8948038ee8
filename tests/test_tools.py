# tests/test_tools.py

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from agent_core.models import ToolContext
from agent_core.tools import TOOL_DEFINITIONS, execute_tool, get_tool_definitions
from agent_core.tools.bot_commands import NOT_MAIN_MESSAGE, tool_add_command, tool_set_commands
from ipc_bridge.protocol import ResultEntry, TaskEntry, list_entries, read_json, write_result


def _names(definitions: list) -> set[str]:
    return {d["function"]["name"] for d in definitions}


def test_group_sessions_do_not_see_privileged_tools(group_ctx: ToolContext, main_ctx: ToolContext) -> None:
    assert _names(get_tool_definitions(group_ctx)) == {"get_weather"}
    assert _names(get_tool_definitions(main_ctx)) == _names(TOOL_DEFINITIONS)


@pytest.mark.asyncio
@pytest.mark.parametrize("tool", [
    "telegram_list_commands",
    "telegram_set_commands",
    "telegram_add_command",
    "telegram_remove_command",
    "telegram_clear_commands",
])
async def test_non_main_is_rejected_without_task_file(group_ctx: ToolContext, tool: str) -> None:
    args = {"command": "demo", "description": "desc", "commands": []}

    result = await execute_tool(tool, args, group_ctx)

    assert result.success is False
    assert NOT_MAIN_MESSAGE in result.error
    assert list_entries(group_ctx.ipc_dir / "tasks") == []


@pytest.mark.asyncio
async def test_tool_guards_itself_when_called_directly(group_ctx: ToolContext) -> None:
    result = await tool_add_command({"command": "demo", "description": "desc"}, group_ctx)

    assert result.error == NOT_MAIN_MESSAGE
    assert list_entries(group_ctx.ipc_dir / "tasks") == []


@pytest.mark.asyncio
@pytest.mark.parametrize("args, message", [
    ({"command": "Bad Name", "description": "x"}, "Invalid command name"),
    ({"command": "demo", "description": ""}, "Description for /demo is required"),
    ({"command": "demo", "description": "x" * 257}, "too long"),
])
async def test_bad_command_input_never_reaches_host(main_ctx: ToolContext, args: dict, message: str) -> None:
    result = await tool_add_command(args, main_ctx)

    assert result.success is False
    assert message in result.error
    assert list_entries(main_ctx.ipc_dir / "tasks") == []


@pytest.mark.asyncio
async def test_set_commands_rejects_duplicates(main_ctx: ToolContext) -> None:
    result = await tool_set_commands({"commands": [
        {"command": "start", "description": "a"},
        {"command": "/START", "description": "b"},
    ]}, main_ctx)

    assert result.error == "Duplicate command: /start"


@pytest.mark.asyncio
async def test_list_output_renders_commands(main_ctx: ToolContext) -> None:
    async def host() -> None:
        tasks = main_ctx.ipc_dir / "tasks"
        while not list_entries(tasks):
            await asyncio.sleep(0.005)
        task = TaskEntry.model_validate(read_json(list_entries(tasks)[0]))
        write_result(main_ctx.ipc_dir / "results", ResultEntry.ok(
            "Found 2 commands",
            data=[{"command": "start", "description": "Start"}, {"command": "weather", "description": "Forecast"}],
            request_id=task.request_id,
        ))

    responder = asyncio.create_task(host())
    result = await execute_tool("telegram_list_commands", {}, main_ctx)
    await responder

    assert result.success is True
    assert result.output == "Found 2 commands\n/start - Start\n/weather - Forecast"


@pytest.mark.asyncio
async def test_unknown_tool(main_ctx: ToolContext) -> None:
    result = await execute_tool("rm_rf", {}, main_ctx)
    assert result.error == "Unknown tool: rm_rf"
