"""Bot command values shared by the container tools and the host handler"""

import re
from typing import Optional

# Telegram BotCommand limits
COMMAND_RE = re.compile(r"^[a-z0-9_]{1,32}$")
MAX_DESCRIPTION = 256
COMMAND_LIST_MESSAGE = "commands must be a list of {command, description}"


def normalize_command(name: str) -> str:
    """'/Weather ' -> 'weather'"""
    name = (name or "").strip()
    if name.startswith("/"):
        name = name[1:]
    return name.lower()


def validate_command(name: str, description: str) -> Optional[str]:
    """Return an error message, or None if Telegram would accept the pair"""
    if not COMMAND_RE.match(name or ""):
        return f"Invalid command name '{name}': use 1-32 characters a-z, 0-9 or _"
    description = (description or "").strip()
    if not description:
        return f"Description for /{name} is required"
    if len(description) > MAX_DESCRIPTION:
        return f"Description for /{name} is too long (max {MAX_DESCRIPTION} chars)"
    return None


def clean_commands(raw) -> list[dict]:
    """Normalize and validate a full command list; ValueError carries the user-facing message"""
    if not isinstance(raw, list):
        raise ValueError(COMMAND_LIST_MESSAGE)
    commands = []
    seen = set()
    for item in raw:
        if not isinstance(item, dict):
            raise ValueError(COMMAND_LIST_MESSAGE)
        command = normalize_command(item.get("command", ""))
        description = str(item.get("description") or "").strip()
        error = validate_command(command, description)
        if error:
            raise ValueError(error)
        if command in seen:
            raise ValueError(f"Duplicate command: /{command}")
        seen.add(command)
        commands.append({"command": command, "description": description})
    return commands


def format_command_list(commands: list) -> str:
    if not commands:
        return "No commands registered"
    return "\n".join(f"/{c['command']} - {c['description']}" for c in commands)
