"""Common types for the container tools"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class ToolResult:
    """Result of tool execution"""
    success: bool
    output: str = ""
    error: str = ""
    metadata: Optional[dict] = None  # e.g. raw command list from the host


@dataclass
class ToolContext:
    """Context passed to tool execution"""
    group_folder: str
    chat_jid: str = ""
    is_main: bool = False  # only the main group may call privileged tools
    ipc_dir: Optional[Path] = None  # overrides CONFIG.ipc_dir

    @property
    def session_type(self) -> str:
        return "main" if self.is_main else "group"
