"""Tool registry and dispatch"""

import asyncio

from agent_core.config import CONFIG
from agent_core.logger import log_tool_call, log_tool_result, tool_logger
from agent_core.models import ToolResult, ToolContext
from agent_core.tools.permissions import check_tool_permission, filter_tools_for_session
from agent_core.tools.weather import tool_get_weather
from agent_core.tools.bot_commands import (
    tool_list_commands, tool_set_commands, tool_add_command,
    tool_remove_command, tool_clear_commands,
)

_COMMAND_ITEM = {
    "type": "object",
    "properties": {
        "command": {"type": "string", "description": "Command name without '/', a-z 0-9 _ (max 32)"},
        "description": {"type": "string", "description": "Shown in the Telegram menu (max 256)"}
    },
    "required": ["command", "description"]
}


# Tool definitions for OpenAI
TOOL_DEFINITIONS = [
    {
        "type": "function",
        "function": {
            "name": "get_weather",
            "description": "Current weather and a 1-3 day forecast for a city, airport code or coordinates.",
            "parameters": {
                "type": "object",
                "properties": {
                    "location": {"type": "string", "description": "City name, airport code or 'lat,lon'"},
                    "days": {"type": "integer", "description": "Forecast days, 1-3 (default 1)"}
                },
                "required": ["location"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "telegram_list_commands",
            "description": "List the slash commands registered for the Telegram bot. Main group only.",
            "parameters": {"type": "object", "properties": {}, "required": []}
        }
    },
    {
        "type": "function",
        "function": {
            "name": "telegram_set_commands",
            "description": "Replace ALL bot slash commands with the given list. Main group only.",
            "parameters": {
                "type": "object",
                "properties": {
                    "commands": {"type": "array", "items": _COMMAND_ITEM}
                },
                "required": ["commands"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "telegram_add_command",
            "description": "Add a bot slash command or update its description. Main group only.",
            "parameters": _COMMAND_ITEM
        }
    },
    {
        "type": "function",
        "function": {
            "name": "telegram_remove_command",
            "description": "Remove one bot slash command. Main group only.",
            "parameters": {
                "type": "object",
                "properties": {
                    "command": {"type": "string", "description": "Command name, with or without '/'"}
                },
                "required": ["command"]
            }
        }
    },
    {
        "type": "function",
        "function": {
            "name": "telegram_clear_commands",
            "description": "Remove all bot slash commands. Main group only.",
            "parameters": {"type": "object", "properties": {}, "required": []}
        }
    },
]


# Tool registry
TOOL_EXECUTORS = {
    "get_weather": tool_get_weather,
    "telegram_list_commands": tool_list_commands,
    "telegram_set_commands": tool_set_commands,
    "telegram_add_command": tool_add_command,
    "telegram_remove_command": tool_remove_command,
    "telegram_clear_commands": tool_clear_commands,
}


def get_tool_definitions(ctx: ToolContext) -> list:
    return filter_tools_for_session(TOOL_DEFINITIONS, ctx.session_type)


async def execute_tool(name: str, args: dict, ctx: ToolContext) -> ToolResult:
    """Execute a tool by name with permission check"""
    log_tool_call(name, args)

    executor = TOOL_EXECUTORS.get(name)
    if not executor:
        log_tool_result(False, None, f"Unknown tool: {name}")
        return ToolResult(False, error=f"Unknown tool: {name}")

    perm = check_tool_permission(name, ctx.session_type)
    if not perm.allowed:
        log_tool_result(False, None, f"PERMISSION DENIED: {perm.reason}")
        return ToolResult(False, error=f"🔒 Tool '{name}' not available in {perm.session_type} sessions. {perm.reason}")

    try:
        result = await asyncio.wait_for(executor(args or {}, ctx), timeout=CONFIG.tool_timeout)
    except asyncio.TimeoutError:
        result = ToolResult(False, error=f"Tool {name} timed out")
    except Exception as e:
        tool_logger.exception(f"Tool {name} crashed")
        result = ToolResult(False, error=str(e))

    log_tool_result(result.success, result.output, result.error)
    return result
