"""
Health check endpoint served alongside the bot
"""

import logging

from aiohttp import web

logger = logging.getLogger(__name__)


def create_health_app(engine, deployer_address: str) -> web.Application:
    """Application exposing GET /health"""

    async def handle_health(request):
        return web.json_response({
            'status': 'ok',
            'deployer': deployer_address,
            'active_workflows': engine.active_count(),
        })

    app = web.Application()
    app.router.add_get('/health', handle_health)
    return app


async def start_health_server(engine, deployer_address: str, port: int) -> web.AppRunner:
    """Start the health server, returns the runner for cleanup"""
    runner = web.AppRunner(create_health_app(engine, deployer_address))
    await runner.setup()
    site = web.TCPSite(runner, '0.0.0.0', port)
    await site.start()

    logger.info(f"✅ Health server running on port {port}")
    return runner
