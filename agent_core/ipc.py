"""Privileged requests to the host over the shared IPC directory

The container has no bot token. Privileged calls are written as task files,
the host executes them and answers with <requestId>.json in the results dir.
"""

import time
import asyncio
from pathlib import Path
from typing import Optional

from ipc_bridge.protocol import TaskEntry, ResultEntry, atomic_write_json, entry_path
from agent_core.config import CONFIG
from agent_core.logger import ipc_logger

TIMEOUT_MESSAGE = "Request timed out"


def write_task(tasks_dir: Path, task: TaskEntry) -> Path:
    path = atomic_write_json(tasks_dir, entry_path(tasks_dir, task.request_id).name, task.to_wire())
    ipc_logger.debug(f"Task written: {path.name} ({task.type})")
    return path


def _claim_result(path: Path, request_id: str) -> ResultEntry:
    """Read and delete in one go. Malformed results are deleted too, content goes to the log."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        ipc_logger.error(f"Cannot read result {path.name}: {e}")
        return ResultEntry.failure(f"Failed to read result: {e}", request_id)
    finally:
        path.unlink(missing_ok=True)

    try:
        result = ResultEntry.model_validate_json(raw.decode("utf-8"))
    except ValueError as e:
        ipc_logger.warning(f"Malformed result {path.name}: {raw[:500]!r}")
        return ResultEntry.failure(f"Failed to parse result: {e}", request_id)

    if result.request_id and result.request_id != request_id:
        ipc_logger.warning(f"Result {path.name} carries foreign requestId {result.request_id}")
        return ResultEntry.failure("Result does not match request", request_id)

    result.request_id = request_id
    return result


async def wait_for_result(
    results_dir: Path,
    request_id: str,
    timeout_ms: int,
    poll_interval_ms: int = 500,
) -> ResultEntry:
    """Poll for <request_id>.json until it shows up or the wait budget runs out"""
    path = entry_path(results_dir, request_id)
    deadline = time.monotonic() + timeout_ms / 1000
    interval = poll_interval_ms / 1000

    while True:
        if path.exists():
            return _claim_result(path, request_id)
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    ipc_logger.warning(f"No result for {request_id} after {timeout_ms}ms")
    return ResultEntry.failure(TIMEOUT_MESSAGE, request_id)


async def call_privileged(
    request_type: str,
    payload: Optional[dict] = None,
    timeout_ms: Optional[int] = None,
    *,
    ipc_dir: Optional[Path] = None,
    poll_interval_ms: Optional[int] = None,
) -> ResultEntry:
    """Submit a task and wait for the host's answer. Never raises on timeout.

    On timeout the task (and any late result) is left for the host sweeper.
    """
    ipc_dir = Path(ipc_dir) if ipc_dir else CONFIG.ipc_dir
    tasks_dir = ipc_dir / CONFIG.tasks_subdir
    results_dir = ipc_dir / CONFIG.results_subdir
    timeout_ms = CONFIG.ipc_timeout_ms if timeout_ms is None else timeout_ms
    poll_interval_ms = CONFIG.ipc_poll_interval_ms if poll_interval_ms is None else poll_interval_ms

    task = TaskEntry.create(request_type, payload)
    try:
        write_task(tasks_dir, task)
    except OSError as e:
        ipc_logger.error(f"Failed to write task {task.request_id}: {e}")
        return ResultEntry.failure(f"Failed to submit request: {e}", task.request_id)

    ipc_logger.info(f"Submitted {request_type} as {task.request_id}")
    return await wait_for_result(results_dir, task.request_id, timeout_ms, poll_interval_ms)
