# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from daemonset.reconciler.utils.app_registry import ApplicationRegistry
from daemonset.reconciler.utils.exceptions import DaemonsetError
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.reconciler.utils.node_inventory import NodeInventorySource
from daemonset.reconciler.utils.reconciler_core import (
    ReconcileAction,
    ReconciliationOutcome,
    Reconciler,
)
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    app_count: int = 0
    node_count: Optional[int] = None
    outcomes: List[ReconciliationOutcome] = field(default_factory=list)
    skipped_reason: Optional[str] = None
    duration: float = 0.0


class ControlLoop:
    """Runs reconciliation cycles for the lifetime of the process.

    One cycle: refresh the registry, stop if it is empty; refresh the
    inventory, stop if it failed or has no nodes; reconcile every app in turn;
    then sleep for ``update_frequency`` seconds. Registry and inventory are
    rebuilt from scratch each cycle and dropped at its end.
    """

    def __init__(
        self,
        registry: ApplicationRegistry,
        inventory_source: NodeInventorySource,
        reconciler: Reconciler,
        metrics: ReconcilerMetrics,
        update_frequency: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.registry = registry
        self.inventory_source = inventory_source
        self.reconciler = reconciler
        self.metrics = metrics
        self.update_frequency = update_frequency
        self._sleep = sleep

    async def run_cycle(self) -> CycleReport:
        start = time.monotonic()
        report = CycleReport()
        try:
            await self._run_cycle(report)
        finally:
            report.duration = time.monotonic() - start
        return report

    async def _run_cycle(self, report: CycleReport) -> None:
        try:
            apps = await self.registry.refresh()
        except DaemonsetError as e:
            logger.error(f"Unable to get Marathon app listing: {e}")
            self.metrics.record_error()
            report.skipped_reason = "registry-error"
            return

        report.app_count = len(apps)
        if not apps:
            logger.warning("No daemonset apps found!")
            report.skipped_reason = "no-apps"
            return
        logger.info(f"Found {len(apps)} daemonset apps")

        try:
            inventory = await self.inventory_source.refresh()
        except DaemonsetError as e:
            logger.error(f"There was a problem getting the agents: {e}")
            self.metrics.record_error()
            report.skipped_reason = "inventory-error"
            return

        report.node_count = inventory.total()
        if inventory.total() == 0:
            logger.warning("No agents found - cannot process apps")
            report.skipped_reason = "no-nodes"
            return
        inventory.log_summary()

        for app in apps.values():
            try:
                outcome = await self.reconciler.reconcile(app, inventory)
            except Exception as e:
                logger.exception(f"Unexpected error reconciling {app.app_id}: {e}")
                self.metrics.record_error()
                outcome = ReconciliationOutcome(
                    app_id=app.app_id, action=ReconcileAction.ERROR, error=str(e)
                )
            report.outcomes.append(outcome)

    async def run(self) -> None:
        """Main loop; never returns, cancellation propagates as CancelledError."""
        while True:
            logger.info("New reconciliation cycle started")
            try:
                report = await self.run_cycle()
            except Exception as e:
                logger.exception(f"Reconciliation cycle failed: {e}")
                self.metrics.record_error()
            else:
                logger.info(
                    f"Reconciliation cycle completed in {report.duration:.3f}s "
                    f"(apps={report.app_count}, nodes={report.node_count}, "
                    f"skipped={report.skipped_reason})"
                )
            logger.info(f"Sleeping for {self.update_frequency}s...")
            await self._sleep(self.update_frequency)
