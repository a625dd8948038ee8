"""Host process entry point: IPC watcher + status server"""

import asyncio
import logging

from aiohttp import web

from host_bot.config import HostConfig
from host_bot.ipc_handler import TelegramCommandsHandler
from host_bot.server import create_http_app
from host_bot.watcher import IpcWatcher

logger = logging.getLogger("bot.main")


def build_watcher(config: HostConfig) -> IpcWatcher:
    handlers = [TelegramCommandsHandler(config.telegram_token, api_url=config.telegram_api_url)]
    return IpcWatcher(config, handlers)


async def run(config: HostConfig, stop: asyncio.Event = None):
    watcher = build_watcher(config)
    config.ipc_root.mkdir(parents=True, exist_ok=True)

    runner = None
    if config.http_port:
        runner = web.AppRunner(create_http_app(watcher))
        await runner.setup()
        await web.TCPSite(runner, config.http_host, config.http_port).start()
        logger.info(f"Status server on {config.http_host}:{config.http_port}")

    try:
        await watcher.run(stop)
    finally:
        if runner:
            await runner.cleanup()


def main():
    config = HostConfig.from_env()
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s"
    )
    if not config.telegram_token:
        logger.warning("TELEGRAM_BOT_TOKEN not set - telegram_* requests will be answered with an error")

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
