"""File-based request/response bridge between the agent container and the host"""

from ipc_bridge.protocol import (
    TaskEntry, ResultEntry, new_request_id, now_iso,
    atomic_write_json, read_json, list_entries, entry_path, write_result,
)
from ipc_bridge.commands import (
    normalize_command, validate_command, clean_commands, format_command_list,
)

__all__ = [
    "TaskEntry", "ResultEntry", "new_request_id", "now_iso",
    "atomic_write_json", "read_json", "list_entries", "entry_path", "write_result",
    "normalize_command", "validate_command", "clean_commands", "format_command_list",
]
