"""
Health endpoint test
"""

import asyncio
import json
from unittest.mock import MagicMock

from launchpad.health import create_health_app


def test_health_reports_active_workflows():
    engine = MagicMock()
    engine.active_count.return_value = 3
    app = create_health_app(engine, '0xdeployer')

    route, = [r for r in app.router.routes() if r.method == 'GET']
    assert route.resource.canonical == '/health'

    response = asyncio.run(route.handler(MagicMock()))
    assert response.status == 200
    assert json.loads(response.text) == {
        'status': 'ok',
        'deployer': '0xdeployer',
        'active_workflows': 3,
    }
