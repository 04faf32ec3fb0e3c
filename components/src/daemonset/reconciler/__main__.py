# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Daemonset reconciler entry point.

Usage: python -m daemonset.reconciler [args]

Every flag can be given as a DAEMONSET_* environment variable instead; see
--help for the names.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvloop

from daemonset.reconciler.health_server import start_health_server
from daemonset.reconciler.http_client import (
    ClusterHttpClient,
    MarathonClient,
    MesosClient,
)
from daemonset.reconciler.utils.app_registry import ApplicationRegistry
from daemonset.reconciler.utils.control_loop import ControlLoop
from daemonset.reconciler.utils.exceptions import ConfigError
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.reconciler.utils.node_inventory import NodeInventorySource
from daemonset.reconciler.utils.reconciler_argparse import (
    create_reconciler_parser,
    validate_reconciler_args,
)
from daemonset.reconciler.utils.reconciler_core import Reconciler
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse and validate configuration.

    Raises:
        ConfigError: If any value is missing or malformed
    """
    try:
        parser = create_reconciler_parser()
    except ValueError as e:
        # A DAEMONSET_* variable could not be converted to its flag's type
        raise ConfigError([str(e)]) from e
    args = parser.parse_args(argv)
    validate_reconciler_args(args)
    return args


def build_control_loop(
    args: argparse.Namespace, metrics: ReconcilerMetrics
) -> ControlLoop:
    http = ClusterHttpClient(
        timeout=args.request_timeout,
        authorization=args.authorization,
        skip_tls=args.skip_tls,
    )
    marathon = MarathonClient(http, args.marathon_host)
    mesos = MesosClient(http, args.mesos_host)
    return ControlLoop(
        registry=ApplicationRegistry(marathon),
        inventory_source=NodeInventorySource(mesos),
        reconciler=Reconciler(marathon, metrics, dry_run=args.dry_run),
        metrics=metrics,
        update_frequency=args.update_frequency,
    )


async def async_main(args: argparse.Namespace) -> None:
    if args.dry_run:
        logger.info("Running in dry-run mode")

    metrics = ReconcilerMetrics()
    loop = build_control_loop(args, metrics)
    runner = await start_health_server(metrics, args.server_port)
    try:
        await loop.run()
    finally:
        await runner.cleanup()


def main(argv: Optional[List[str]] = None) -> None:
    try:
        args = parse_args(argv)
    except ConfigError as e:
        logger.error(str(e))
        sys.exit(1)

    configure_daemonset_logging(logging.DEBUG if args.debug else logging.INFO)
    logger.debug(
        f"Configuration: mesos_host={args.mesos_host} marathon_host={args.marathon_host} "
        f"server_port={args.server_port} update_frequency={args.update_frequency}s "
        f"dry_run={args.dry_run} skip_tls={args.skip_tls} "
        f"authorization={'set' if args.authorization else 'unset'}"
    )

    try:
        uvloop.run(async_main(args))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
