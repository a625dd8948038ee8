"""Logging for the container side"""

import json
import logging
import sys

from agent_core.config import CONFIG

_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
_configured = False


def setup_logging(level: str = None):
    """Attach one stderr handler to the 'core' logger tree (stdout is tool output)"""
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root = logging.getLogger("core")
    root.addHandler(handler)
    root.setLevel((level or CONFIG.log_level).upper())
    _configured = True


tool_logger = logging.getLogger("core.tools")
ipc_logger = logging.getLogger("core.ipc")


def _truncate(text: str, limit: int = 200) -> str:
    if text is None:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."


def log_tool_call(name: str, args: dict):
    try:
        rendered = json.dumps(args, ensure_ascii=False)
    except (TypeError, ValueError):
        rendered = repr(args)
    tool_logger.info(f"→ {name} {_truncate(rendered)}")


def log_tool_result(success: bool, output: str = None, error: str = None):
    if success:
        tool_logger.info(f"← ok: {_truncate(output)}")
    else:
        tool_logger.warning(f"← failed: {_truncate(error)}")
