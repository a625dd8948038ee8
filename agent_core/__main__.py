"""Run container tools from the shell

Usage:
    python -m agent_core list
    python -m agent_core call get_weather '{"location": "Berlin", "days": 2}'
"""

import sys
import json
import asyncio
import argparse

from agent_core.config import CONFIG
from agent_core.logger import setup_logging
from agent_core.models import ToolContext
from agent_core.tools import execute_tool, get_tool_definitions


def build_context() -> ToolContext:
    return ToolContext(
        group_folder=CONFIG.group_folder,
        chat_jid=CONFIG.chat_jid,
        is_main=CONFIG.is_main,
    )


def main(argv: list = None) -> int:
    parser = argparse.ArgumentParser(prog="agent_core", description="Agent container tools")
    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("list", help="Print tool definitions available to this group")
    call = sub.add_parser("call", help="Run one tool")
    call.add_argument("tool")
    call.add_argument("args", nargs="?", default="{}", help="JSON object with tool arguments")
    opts = parser.parse_args(argv)

    setup_logging()
    ctx = build_context()

    if opts.action == "list":
        print(json.dumps(get_tool_definitions(ctx), indent=2, ensure_ascii=False))
        return 0

    try:
        args = json.loads(opts.args)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON arguments: {e}", file=sys.stderr)
        return 2
    if not isinstance(args, dict):
        print("Tool arguments must be a JSON object", file=sys.stderr)
        return 2

    result = asyncio.run(execute_tool(opts.tool, args, ctx))
    if result.success:
        print(result.output)
        return 0
    print(f"❌ {result.error}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
