"""HTTP status endpoint for the host process"""

import logging
from aiohttp import web

from host_bot.watcher import IpcWatcher

logger = logging.getLogger("bot.server")

WATCHER_KEY = web.AppKey("watcher", IpcWatcher)


async def handle_health(request):
    """Health check with queue numbers"""
    watcher = request.app[WATCHER_KEY]
    try:
        return web.json_response({
            "status": "ok",
            "groups": len(watcher.group_dirs()),
            "pending_tasks": watcher.pending_count(),
            "telegram_configured": bool(watcher.config.telegram_token),
            **watcher.stats,
        })
    except OSError as e:
        logger.error(f"[server] Health error: {e}")
        return web.json_response({"status": "error", "error": str(e)}, status=500)


def create_http_app(watcher: IpcWatcher) -> web.Application:
    """Create HTTP application"""
    app = web.Application()
    app[WATCHER_KEY] = watcher
    app.router.add_get("/health", handle_health)
    return app
