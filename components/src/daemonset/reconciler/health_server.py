# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Read-only /health and /metrics endpoints served next to the control loop."""

import logging

from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from daemonset.reconciler.defaults import HEALTH_RESPONSE_TEXT
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)

METRICS_KEY = web.AppKey("metrics", ReconcilerMetrics)


async def health(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_RESPONSE_TEXT)


async def metrics(request: web.Request) -> web.Response:
    registry = request.app[METRICS_KEY].registry
    return web.Response(
        body=generate_latest(registry),
        headers={"Content-Type": CONTENT_TYPE_LATEST},
    )


def create_health_app(reconciler_metrics: ReconcilerMetrics) -> web.Application:
    app = web.Application()
    app[METRICS_KEY] = reconciler_metrics
    app.router.add_get("/health", health)
    app.router.add_get("/metrics", metrics)
    return app


async def start_health_server(
    reconciler_metrics: ReconcilerMetrics, port: int, host: str = "0.0.0.0"
) -> web.AppRunner:
    """Start serving in the background; the caller owns ``runner.cleanup()``."""
    runner = web.AppRunner(create_health_app(reconciler_metrics), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Web server starting on {port}")
    logger.info("Access /health to check the health status.")
    logger.info("Access /metrics for the Prometheus metrics.")
    return runner
