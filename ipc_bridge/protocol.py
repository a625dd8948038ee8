"""Task/result wire format and file lifecycle

Container writes task files into <ipc>/tasks, host writes result files into
<ipc>/results. Both sides only ever publish a file with os.replace() from a
temp name in the same directory, so a reader sees nothing or the whole file.

Task file:   {"type", "requestId", ...payload, "timestamp"}
Result file: {"requestId", "success", "message", "data"?}  named <requestId>.json
"""

import os
import re
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

# requestId becomes a file name on the host, keep it path-safe
REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")

TMP_SUFFIX = ".tmp"


def new_request_id(prefix: str = "req") -> str:
    """Correlation id: epoch millis + 32 random bits"""
    return f"{prefix}_{int(time.time() * 1000)}_{os.urandom(4).hex()}"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TaskEntry(BaseModel):
    """Pending cross-process request. Payload fields live flat next to the header."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    request_id: str = Field(alias="requestId")
    timestamp: str = ""

    @field_validator("request_id")
    @classmethod
    def _check_request_id(cls, value: str) -> str:
        if not REQUEST_ID_RE.match(value):
            raise ValueError(f"invalid requestId: {value!r}")
        return value

    @property
    def payload(self) -> dict:
        return dict(self.model_extra or {})

    @classmethod
    def create(cls, task_type: str, payload: Optional[dict] = None, request_id: str = None) -> "TaskEntry":
        fields = dict(payload or {})
        # header keys win over payload keys with the same name
        for key in ("type", "requestId", "request_id", "timestamp"):
            fields.pop(key, None)
        return cls(
            type=task_type,
            requestId=request_id or new_request_id(),
            timestamp=now_iso(),
            **fields,
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class ResultEntry(BaseModel):
    """Outcome of a task, written once by the host and consumed once by the container"""
    model_config = ConfigDict(populate_by_name=True)

    request_id: Optional[str] = Field(default=None, alias="requestId")
    success: StrictBool
    message: str = ""
    data: Any = None

    @classmethod
    def ok(cls, message: str, data: Any = None, request_id: str = None) -> "ResultEntry":
        return cls(requestId=request_id, success=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, request_id: str = None) -> "ResultEntry":
        return cls(requestId=request_id, success=False, message=message)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


def entry_path(directory, request_id: str) -> Path:
    """Task and result files share the <requestId>.json naming"""
    return Path(directory) / f"{request_id}.json"


def atomic_write_json(directory, name: str, data: dict) -> Path:
    """Write JSON to a temp file in the same directory, fsync, then rename into place"""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / name
    tmp = directory / f".{name}.{os.urandom(4).hex()}{TMP_SUFFIX}"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, target)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    return target


def read_json(path) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{Path(path).name}: expected a JSON object, got {type(data).__name__}")
    return data


def list_entries(directory) -> list[Path]:
    """Published *.json entries only; temp files and subdirectories are skipped"""
    directory = Path(directory)
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".json" and not p.name.startswith(".")
        )
    except FileNotFoundError:
        return []


def write_result(results_dir, result: ResultEntry) -> Path:
    """Publish <requestId>.json; os.replace keeps it to one file per requestId"""
    if not result.request_id:
        raise ValueError("result without requestId cannot be published")
    return atomic_write_json(results_dir, entry_path(results_dir, result.request_id).name, result.to_wire())
