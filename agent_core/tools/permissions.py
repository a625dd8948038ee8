"""Tool Permissions - Allowlist/Denylist by session type

- Main group: all tools allowed
- Other groups: no bot command management

The host re-checks the group on its side, this only saves a round-trip
and keeps the tools out of the LLM context of ordinary groups.
"""

import json
import os
from pathlib import Path
from dataclasses import dataclass
import logging

logger = logging.getLogger("core.permissions")

# Tools that reach the host through IPC and act with the bot token
PRIVILEGED_TOOLS = {
    "telegram_list_commands",
    "telegram_set_commands",
    "telegram_add_command",
    "telegram_remove_command",
    "telegram_clear_commands",
}

DEFAULT_PERMISSIONS = {
    "main": {
        "mode": "allowlist",
        "tools": "*",
        "description": "Full access for the main group"
    },
    "group": {
        "mode": "denylist",
        "tools": sorted(PRIVILEGED_TOOLS),
        "description": "No bot administration from ordinary groups"
    },
}

PERMISSIONS_FILE = Path(os.getenv("TOOL_PERMISSIONS_FILE", "/workspace/_shared/tool_permissions.json"))


@dataclass
class PermissionResult:
    allowed: bool
    reason: str
    tool: str
    session_type: str


class ToolPermissions:
    """Manage tool access by session type"""

    def __init__(self, permissions_file: Path = PERMISSIONS_FILE):
        self.permissions = {k: dict(v) for k, v in DEFAULT_PERMISSIONS.items()}
        self._load_custom_permissions(permissions_file)

    def _load_custom_permissions(self, perm_file: Path):
        """Overrides may narrow access, privileged tools stay main-only regardless"""
        if not perm_file.exists():
            return
        try:
            custom = json.loads(perm_file.read_text())
            for session_type, config in custom.items():
                self.permissions.setdefault(session_type, {}).update(config)
            logger.info(f"Loaded custom permissions from {perm_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load custom permissions: {e}")

    def check_permission(self, tool_name: str, session_type: str = "group") -> PermissionResult:
        config = self.permissions.get(session_type, self.permissions["group"])
        mode = config.get("mode", "allowlist")
        tools = config.get("tools", "*")

        if mode == "allowlist":
            allowed = tools == "*" or tool_name in tools
            reason = f"Tool {'in' if allowed else 'not in'} allowlist"
        elif mode == "denylist":
            allowed = tools != "*" and tool_name not in tools
            reason = f"Tool {'not in' if allowed else 'in'} denylist"
        else:
            allowed = False
            reason = f"Unknown mode '{mode}'"

        if session_type != "main" and tool_name in PRIVILEGED_TOOLS:
            allowed = False
            reason = "Only the main group can manage bot commands."

        return PermissionResult(allowed=allowed, reason=reason, tool=tool_name, session_type=session_type)

    def filter_tool_definitions(self, definitions: list, session_type: str) -> list:
        """Drop definitions the session may not call, so the LLM never sees them"""
        filtered = [
            d for d in definitions
            if self.check_permission(d.get("function", {}).get("name", ""), session_type).allowed
        ]
        logger.debug(f"Filtered tools for {session_type}: {len(filtered)}/{len(definitions)}")
        return filtered


tool_permissions = ToolPermissions()


def check_tool_permission(tool_name: str, session_type: str = "group") -> PermissionResult:
    return tool_permissions.check_permission(tool_name, session_type)


def filter_tools_for_session(definitions: list, session_type: str) -> list:
    return tool_permissions.filter_tool_definitions(definitions, session_type)
