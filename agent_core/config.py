"""Container configuration from environment"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    # Shared IPC mount (host side is <DATA_DIR>/ipc/<group>)
    ipc_dir: Path = field(default_factory=lambda: Path(os.getenv("IPC_DIR", "/workspace/ipc")))
    tasks_subdir: str = field(default_factory=lambda: os.getenv("TASKS_SUBDIR", "tasks"))
    results_subdir: str = field(default_factory=lambda: os.getenv("RESULTS_SUBDIR", "results"))
    ipc_timeout_ms: int = field(default_factory=lambda: int(os.getenv("IPC_TIMEOUT_MS", "10000")))
    ipc_poll_interval_ms: int = field(default_factory=lambda: int(os.getenv("IPC_POLL_INTERVAL_MS", "500")))

    # Tools
    tool_timeout: float = field(default_factory=lambda: float(os.getenv("TOOL_TIMEOUT", "30")))
    weather_url: str = field(default_factory=lambda: os.getenv("WEATHER_URL", "https://wttr.in").rstrip("/"))

    # Identity of the group this container serves; unset means an unprivileged session
    group_folder: str = field(default_factory=lambda: os.getenv("GROUP_FOLDER", ""))
    chat_jid: str = field(default_factory=lambda: os.getenv("CHAT_JID", ""))
    is_main: bool = field(default_factory=lambda: _env_bool("IS_MAIN"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @property
    def tasks_dir(self) -> Path:
        return self.ipc_dir / self.tasks_subdir

    @property
    def results_dir(self) -> Path:
        return self.ipc_dir / self.results_subdir


CONFIG = Config()
