"""Telegram bot command management

The bot token lives on the host only. Every tool here turns into one IPC
task ("telegram_*") and waits for the host's result.
"""

from ipc_bridge.commands import normalize_command, validate_command, clean_commands, format_command_list
from agent_core.ipc import call_privileged
from agent_core.logger import tool_logger
from agent_core.models import ToolResult, ToolContext

NOT_MAIN_MESSAGE = "Only the main group can manage bot commands."


async def _request(ctx: ToolContext, request_type: str, payload: dict = None) -> ToolResult:
    if not ctx.is_main:
        tool_logger.warning(f"{request_type} rejected for group {ctx.group_folder}")
        return ToolResult(False, error=NOT_MAIN_MESSAGE)

    result = await call_privileged(request_type, payload, ipc_dir=ctx.ipc_dir)
    if not result.success:
        return ToolResult(False, error=result.message, metadata={"data": result.data})

    output = result.message
    if request_type == "telegram_list_commands":
        output = f"{result.message}\n{format_command_list(result.data or [])}"
    return ToolResult(True, output=output, metadata={"data": result.data})


def _checked_command(args: dict, need_description: bool = True) -> tuple[str, str, str]:
    """Returns (command, description, error)"""
    command = normalize_command(args.get("command", ""))
    description = str(args.get("description") or "").strip()
    error = validate_command(command, description if need_description else "-")
    return command, description, error


async def tool_list_commands(args: dict, ctx: ToolContext) -> ToolResult:
    """Show the commands currently registered with the bot"""
    return await _request(ctx, "telegram_list_commands")


async def tool_set_commands(args: dict, ctx: ToolContext) -> ToolResult:
    """Replace the whole command list"""
    try:
        commands = clean_commands(args.get("commands"))
    except ValueError as e:
        return ToolResult(False, error=str(e))
    return await _request(ctx, "telegram_set_commands", {"commands": commands})


async def tool_add_command(args: dict, ctx: ToolContext) -> ToolResult:
    """Add one command, or update its description if it already exists"""
    command, description, error = _checked_command(args)
    if error:
        return ToolResult(False, error=error)
    return await _request(ctx, "telegram_add_command", {"command": command, "description": description})


async def tool_remove_command(args: dict, ctx: ToolContext) -> ToolResult:
    command, _, error = _checked_command(args, need_description=False)
    if error:
        return ToolResult(False, error=error)
    return await _request(ctx, "telegram_remove_command", {"command": command})


async def tool_clear_commands(args: dict, ctx: ToolContext) -> ToolResult:
    return await _request(ctx, "telegram_clear_commands")
