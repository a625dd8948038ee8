"""IPC watcher - polls every group's task directory and dispatches to handlers

Layout under <DATA_DIR>/ipc/<group>/:
    tasks/    written by the container, consumed here
    results/  written here, consumed by the container
    errors/   task files that could not be parsed or that nobody handled

Tasks are processed one at a time. A handled task file is deleted; stale
entries in all three directories are swept by age.
"""

import time
import asyncio
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from ipc_bridge.protocol import TaskEntry, list_entries, read_json
from ipc_bridge.sweeper import sweep_directory
from host_bot.config import HostConfig

logger = logging.getLogger("bot.watcher")

TASKS = "tasks"
RESULTS = "results"
ERRORS = "errors"

MAX_REMEMBERED_IDS = 1000


class IpcWatcher:
    def __init__(self, config: HostConfig, handlers: list):
        self.config = config
        self.handlers = handlers
        # requestId -> time processed, to drop re-submitted tasks
        self._recent: OrderedDict[str, float] = OrderedDict()
        self._last_sweep: Optional[float] = None
        self.stats = {"processed": 0, "failed": 0, "duplicates": 0, "unhandled": 0, "swept": 0}

    def group_dirs(self) -> list[Path]:
        root = self.config.ipc_root
        try:
            return sorted(p for p in root.iterdir() if p.is_dir() and not p.name.startswith("."))
        except FileNotFoundError:
            return []

    def pending_count(self) -> int:
        return sum(len(list_entries(g / TASKS)) for g in self.group_dirs())

    def _seen(self, request_id: str, now: float) -> bool:
        window = self.config.task_max_age
        while self._recent:
            oldest_id, ts = next(iter(self._recent.items()))
            if now - ts < window and len(self._recent) <= MAX_REMEMBERED_IDS:
                break
            self._recent.pop(oldest_id)
        return request_id in self._recent

    def _remember(self, request_id: str, now: float):
        self._recent[request_id] = now

    def _quarantine(self, path: Path, group_dir: Path):
        errors_dir = group_dir / ERRORS
        try:
            errors_dir.mkdir(parents=True, exist_ok=True)
            path.replace(errors_dir / path.name)
            logger.warning(f"[ipc] Moved {group_dir.name}/{path.name} to {ERRORS}/")
        except OSError as e:
            logger.error(f"[ipc] Cannot quarantine {path}: {e}")
            path.unlink(missing_ok=True)

    async def _process_file(self, path: Path, group_dir: Path, is_main: bool):
        group = group_dir.name
        try:
            entry = TaskEntry.model_validate(read_json(path))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as e:
            logger.error(f"[ipc] Bad task file {group}/{path.name}: {e}")
            self.stats["failed"] += 1
            self._quarantine(path, group_dir)
            return

        now = time.time()
        if self._seen(entry.request_id, now):
            logger.warning(f"[ipc] Duplicate request {entry.request_id} from {group}, dropped")
            self.stats["duplicates"] += 1
            path.unlink(missing_ok=True)
            return

        handled = False
        try:
            for handler in self.handlers:
                if await handler.handle_request(entry, group_dir / RESULTS, is_main=is_main):
                    handled = True
                    break
        except Exception as e:
            logger.exception(f"[ipc] Handler failed on {group}/{path.name}: {e}")
            self.stats["failed"] += 1
            self._quarantine(path, group_dir)
            return

        if not handled:
            logger.warning(f"[ipc] No handler for type '{entry.type}' ({group}/{path.name})")
            self.stats["unhandled"] += 1
            self._quarantine(path, group_dir)
            return

        self._remember(entry.request_id, now)
        self.stats["processed"] += 1
        path.unlink(missing_ok=True)

    async def process_once(self) -> int:
        """One pass over all groups. Returns number of task files looked at."""
        count = 0
        for group_dir in self.group_dirs():
            is_main = group_dir.name == self.config.main_group_folder
            for path in list_entries(group_dir / TASKS):
                await self._process_file(path, group_dir, is_main)
                count += 1
        return count

    def sweep(self, now: Optional[float] = None) -> int:
        removed = 0
        for group_dir in self.group_dirs():
            removed += sweep_directory(group_dir / TASKS, self.config.task_max_age, now)
            removed += sweep_directory(group_dir / RESULTS, self.config.result_max_age, now)
            removed += sweep_directory(group_dir / ERRORS, self.config.error_max_age, now)
        self.stats["swept"] += removed
        return removed

    async def run(self, stop: Optional[asyncio.Event] = None):
        """Main loop - process tasks every poll_interval, sweep every sweep_interval"""
        stop = stop or asyncio.Event()
        logger.info(f"IPC watcher started on {self.config.ipc_root}")

        while not stop.is_set():
            try:
                await self.process_once()
                if self._last_sweep is None or time.monotonic() - self._last_sweep >= self.config.sweep_interval:
                    self._last_sweep = time.monotonic()
                    self.sweep()
            except Exception as e:
                logger.error(f"IPC watcher loop error: {e}")

            try:
                await asyncio.wait_for(stop.wait(), timeout=self.config.poll_interval)
            except asyncio.TimeoutError:
                pass

        logger.info("IPC watcher stopped")
