"""Host configuration from environment"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class HostConfig:
    telegram_token: Optional[str] = None
    telegram_api_url: str = "https://api.telegram.org"
    data_dir: Path = Path("data")
    main_group_folder: str = "main"

    # Seconds
    poll_interval: float = 1.0
    sweep_interval: float = 60.0
    task_max_age: float = 300.0
    result_max_age: float = 300.0
    error_max_age: float = 7 * 24 * 3600.0

    http_host: str = "0.0.0.0"
    http_port: int = 4001  # 0 disables the status server
    log_level: str = "INFO"

    @property
    def ipc_root(self) -> Path:
        return self.data_dir / "ipc"

    @classmethod
    def from_env(cls) -> "HostConfig":
        return cls(
            telegram_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
            telegram_api_url=os.getenv("TELEGRAM_API_URL", "https://api.telegram.org").rstrip("/"),
            data_dir=Path(os.getenv("DATA_DIR", "data")),
            main_group_folder=os.getenv("MAIN_GROUP_FOLDER", "main"),
            poll_interval=float(os.getenv("IPC_POLL_INTERVAL", "1.0")),
            sweep_interval=float(os.getenv("SWEEP_INTERVAL", "60")),
            task_max_age=float(os.getenv("TASK_MAX_AGE", "300")),
            result_max_age=float(os.getenv("RESULT_MAX_AGE", "300")),
            error_max_age=float(os.getenv("ERROR_MAX_AGE", str(7 * 24 * 3600))),
            http_host=os.getenv("HTTP_HOST", "0.0.0.0"),
            http_port=int(os.getenv("HTTP_PORT", "4001")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
