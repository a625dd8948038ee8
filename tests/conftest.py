# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from agent_core.config import CONFIG
from agent_core.models import ToolContext
from host_bot.config import HostConfig

from .fakes import FakeCommandsClient, FakeTelegramApi

TOKEN = "123:abc"


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch: pytest.MonkeyPatch) -> None:
    """Container-side polling at test speed; timeouts stay generous."""
    monkeypatch.setattr(CONFIG, "ipc_poll_interval_ms", 10)
    monkeypatch.setattr(CONFIG, "ipc_timeout_ms", 5000)
    monkeypatch.setattr(CONFIG, "tasks_subdir", "tasks")
    monkeypatch.setattr(CONFIG, "results_subdir", "results")


@pytest.fixture()
def host_config(tmp_path: Path) -> HostConfig:
    return HostConfig(
        telegram_token=TOKEN,
        data_dir=tmp_path / "data",
        main_group_folder="main",
        poll_interval=0.01,
        http_port=0,
    )


@pytest.fixture()
def main_ipc(host_config: HostConfig) -> Path:
    """Host-side IPC dir of the main group, as mounted into its container"""
    path = host_config.ipc_root / "main"
    path.mkdir(parents=True)
    return path


@pytest.fixture()
def main_ctx(main_ipc: Path) -> ToolContext:
    return ToolContext(group_folder="main", is_main=True, ipc_dir=main_ipc)


@pytest.fixture()
def group_ctx(host_config: HostConfig) -> ToolContext:
    path = host_config.ipc_root / "family"
    path.mkdir(parents=True)
    return ToolContext(group_folder="family", is_main=False, ipc_dir=path)


@pytest.fixture()
def fake_client() -> FakeCommandsClient:
    return FakeCommandsClient()


@pytest_asyncio.fixture()
async def telegram_api():
    """Fake Bot API served over real HTTP. Yields (api, base_url)."""
    api = FakeTelegramApi(token=TOKEN)
    server = TestServer(api.app())
    await server.start_server()
    try:
        yield api, str(server.make_url("/")).rstrip("/")
    finally:
        await server.close()
