# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from daemonset.reconciler.http_client import MarathonClient
from daemonset.reconciler.utils.app_registry import LabeledApplication
from daemonset.reconciler.utils.exceptions import (
    ConflictError,
    DaemonsetError,
)
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.reconciler.utils.node_inventory import NodeInventory
from daemonset.reconciler.utils.placement import AllNodes
from daemonset.reconciler.utils.target_calculator import compute_target
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


class ReconcileAction(str, Enum):
    NO_OP = "no-op"
    INCREASE = "increase"
    DECREASE = "decrease"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass
class ReconciliationOutcome:
    app_id: str
    action: ReconcileAction
    target: Optional[int] = None
    current: Optional[int] = None
    dry_run: bool = False
    error: Optional[str] = None

    @property
    def delta(self) -> int:
        if self.target is None or self.current is None:
            return 0
        return self.target - self.current


def calculate_percent_difference(expected: int, found: int) -> float:
    if expected == found:
        return 0.0
    if found < expected:
        return 100 - (found / expected * 100)
    return 100 - (expected / found * 100)


def describe_change(expected: int, found: int) -> str:
    if found < expected:
        return f"Adding {expected - found} instance(s)"
    return f"Removing {found - expected} instance(s)"


class Reconciler:
    """Brings one labelled application's instance count to its target.

    Never raises for collaborator failures: they are logged, counted and
    reported as an ``ERROR`` outcome so the next app can proceed. Nothing is
    retried within a cycle; the next cycle re-reads the current count.
    """

    def __init__(
        self,
        marathon: MarathonClient,
        metrics: ReconcilerMetrics,
        dry_run: bool = False,
    ):
        self.marathon = marathon
        self.metrics = metrics
        self.dry_run = dry_run

    async def reconcile(
        self, app: LabeledApplication, inventory: NodeInventory
    ) -> ReconciliationOutcome:
        start = time.monotonic()
        try:
            return await self._reconcile(app, inventory)
        finally:
            logger.debug(
                f"Reconcile of {app.app_id} completed in {time.monotonic() - start:.3f}s"
            )

    async def _reconcile(
        self, app: LabeledApplication, inventory: NodeInventory
    ) -> ReconciliationOutcome:
        try:
            current = await self.marathon.get_instances(app.app_id)
        except DaemonsetError as e:
            logger.error(
                f"Unable to get the current instance count for {app.app_id}: {e}"
            )
            self.metrics.record_error()
            return ReconciliationOutcome(
                app_id=app.app_id, action=ReconcileAction.ERROR, error=str(e)
            )

        target = compute_target(app.rule, inventory)
        kind = (
            "daemonset" if isinstance(app.rule, AllNodes) else "attribute constrained"
        )
        logger.info(
            f"Processing {kind} app {app.app_id} (rule={app.rule.describe()}): "
            f"target={target} current={current}"
        )

        if target == 0:
            # No matching nodes means nothing to reconcile to, never scale-to-zero
            logger.warning(
                f"No matching nodes for {app.app_id} (rule={app.rule.describe()}); "
                "leaving instance count unchanged"
            )
            return ReconciliationOutcome(
                app_id=app.app_id,
                action=ReconcileAction.SKIPPED,
                target=target,
                current=current,
            )

        if target == current:
            return ReconciliationOutcome(
                app_id=app.app_id,
                action=ReconcileAction.NO_OP,
                target=target,
                current=current,
            )

        action = (
            ReconcileAction.INCREASE if target > current else ReconcileAction.DECREASE
        )
        logger.warning(
            f"Incorrect instance count for {app.app_id}: found={current} "
            f"expected={target} "
            f"pct-change={calculate_percent_difference(target, current):.0f}% "
            f"change={describe_change(target, current)!r}"
        )

        if self.dry_run:
            logger.info(
                f"In dry-run mode so not updating {app.app_id} to {target} instance(s)"
            )
            return ReconciliationOutcome(
                app_id=app.app_id,
                action=action,
                target=target,
                current=current,
                dry_run=True,
            )

        try:
            body = await self.marathon.update_instances(app.app_id, target)
        except ConflictError as e:
            logger.warning(
                f"Conflict preventing Marathon app update for {app.app_id} "
                f"(status={e.status_code}, url={e.url}): {e.body}"
            )
            self.metrics.record_error()
            return ReconciliationOutcome(
                app_id=app.app_id,
                action=ReconcileAction.ERROR,
                target=target,
                current=current,
                error=str(e),
            )
        except DaemonsetError as e:
            logger.error(f"Unable to update Marathon app {app.app_id}: {e}")
            self.metrics.record_error()
            return ReconciliationOutcome(
                app_id=app.app_id,
                action=ReconcileAction.ERROR,
                target=target,
                current=current,
                error=str(e),
            )

        logger.info(f"Marathon app update successful for {app.app_id}: {body}")
        self.metrics.record_success()
        return ReconciliationOutcome(
            app_id=app.app_id, action=action, target=target, current=current
        )
