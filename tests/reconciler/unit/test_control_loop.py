# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the reconciliation control loop."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import CollectorRegistry

from daemonset.reconciler.utils.app_registry import LabeledApplication
from daemonset.reconciler.utils.control_loop import ControlLoop
from daemonset.reconciler.utils.exceptions import ParseError, TransportError
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.reconciler.utils.node_inventory import Node, NodeInventory
from daemonset.reconciler.utils.placement import AllNodes, parse_placement_rule
from daemonset.reconciler.utils.reconciler_core import (
    ReconcileAction,
    ReconciliationOutcome,
    Reconciler,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.reconciler,
]


def _nodes(*tiers: str) -> NodeInventory:
    return NodeInventory(
        nodes=tuple(
            Node(id=f"n{i}", hostname=f"n{i}", active=True, attributes={"tier": tier})
            for i, tier in enumerate(tiers)
        )
    )


@pytest.fixture
def metrics():
    return ReconcilerMetrics(registry=CollectorRegistry())


@pytest.fixture
def marathon():
    client = MagicMock()
    client.get_instances = AsyncMock(return_value=3)
    client.update_instances = AsyncMock(return_value="{}")
    return client


def _loop(apps, inventory, reconciler, metrics, sleep=None):
    registry = MagicMock()
    if isinstance(apps, Exception):
        registry.refresh = AsyncMock(side_effect=apps)
    else:
        registry.refresh = AsyncMock(return_value=apps)
    inventory_source = MagicMock()
    if isinstance(inventory, Exception):
        inventory_source.refresh = AsyncMock(side_effect=inventory)
    else:
        inventory_source.refresh = AsyncMock(return_value=inventory)
    kwargs = {"sleep": sleep} if sleep is not None else {}
    return ControlLoop(
        registry=registry,
        inventory_source=inventory_source,
        reconciler=reconciler,
        metrics=metrics,
        update_frequency=300.0,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_all_nodes_scenario_updates_to_active_count(marathon, metrics):
    apps = {"/web": LabeledApplication(app_id="/web", rule=AllNodes())}
    loop = _loop(apps, _nodes(*["public"] * 5), Reconciler(marathon, metrics), metrics)

    report = await loop.run_cycle()

    marathon.update_instances.assert_awaited_once_with("/web", 5)
    assert report.outcomes[0].action == ReconcileAction.INCREASE
    assert metrics.updated_count == 1


@pytest.mark.asyncio
async def test_attribute_scenario_already_converged(marathon, metrics):
    apps = {
        "/cache": LabeledApplication(
            app_id="/cache", rule=parse_placement_rule("tier|public")
        )
    }
    inventory = _nodes("public", "public", "public", "private", "private")
    loop = _loop(apps, inventory, Reconciler(marathon, metrics), metrics)

    report = await loop.run_cycle()

    marathon.update_instances.assert_not_awaited()
    assert report.outcomes[0].target == 3
    assert report.outcomes[0].action == ReconcileAction.NO_OP


@pytest.mark.asyncio
async def test_empty_registry_skips_inventory_and_reconcile(metrics):
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock()
    loop = _loop({}, _nodes("public"), reconciler, metrics)

    report = await loop.run_cycle()

    loop.inventory_source.refresh.assert_not_awaited()
    reconciler.reconcile.assert_not_awaited()
    assert report.skipped_reason == "no-apps"
    assert metrics.error_count == 0


@pytest.mark.asyncio
async def test_zero_node_inventory_skips_reconcile(marathon, metrics, caplog):
    apps = {"/web": LabeledApplication(app_id="/web", rule=AllNodes())}
    loop = _loop(apps, NodeInventory(), Reconciler(marathon, metrics), metrics)

    report = await loop.run_cycle()

    marathon.get_instances.assert_not_awaited()
    marathon.update_instances.assert_not_awaited()
    assert report.skipped_reason == "no-nodes"
    assert "No agents found" in caplog.text


@pytest.mark.asyncio
async def test_inventory_failure_counts_error_and_skips(marathon, metrics):
    apps = {"/web": LabeledApplication(app_id="/web", rule=AllNodes())}
    loop = _loop(
        apps, TransportError("refused", "http://mesos"), Reconciler(marathon, metrics), metrics
    )

    report = await loop.run_cycle()

    marathon.update_instances.assert_not_awaited()
    assert report.skipped_reason == "inventory-error"
    assert metrics.error_count == 1


@pytest.mark.asyncio
async def test_registry_failure_counts_error_and_skips(metrics):
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock()
    loop = _loop(ParseError("bad apps json"), _nodes("public"), reconciler, metrics)

    report = await loop.run_cycle()

    loop.inventory_source.refresh.assert_not_awaited()
    reconciler.reconcile.assert_not_awaited()
    assert report.skipped_reason == "registry-error"
    assert metrics.error_count == 1


@pytest.mark.asyncio
async def test_one_failing_app_does_not_stop_the_others(metrics):
    apps = {
        "/a": LabeledApplication(app_id="/a", rule=AllNodes()),
        "/b": LabeledApplication(app_id="/b", rule=AllNodes()),
        "/c": LabeledApplication(app_id="/c", rule=AllNodes()),
    }
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock(
        side_effect=[
            ReconciliationOutcome(app_id="/a", action=ReconcileAction.NO_OP),
            RuntimeError("unexpected"),
            ReconciliationOutcome(app_id="/c", action=ReconcileAction.NO_OP),
        ]
    )
    loop = _loop(apps, _nodes("public"), reconciler, metrics)

    report = await loop.run_cycle()

    assert reconciler.reconcile.await_count == 3
    assert [o.action for o in report.outcomes] == [
        ReconcileAction.NO_OP,
        ReconcileAction.ERROR,
        ReconcileAction.NO_OP,
    ]
    assert metrics.error_count == 1


@pytest.mark.asyncio
async def test_apps_reconciled_sequentially_against_same_snapshot(marathon, metrics):
    inventory = _nodes("public", "private")
    apps = {
        "/a": LabeledApplication(app_id="/a", rule=AllNodes()),
        "/b": LabeledApplication(app_id="/b", rule=parse_placement_rule("tier|private")),
    }
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock(
        return_value=ReconciliationOutcome(app_id="x", action=ReconcileAction.NO_OP)
    )
    loop = _loop(apps, inventory, reconciler, metrics)

    await loop.run_cycle()

    calls = reconciler.reconcile.await_args_list
    assert [c.args[0].app_id for c in calls] == ["/a", "/b"]
    assert all(c.args[1] is inventory for c in calls)
    loop.inventory_source.refresh.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_sleeps_after_every_cycle(metrics):
    sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])
    reconciler = MagicMock()
    reconciler.reconcile = AsyncMock()
    loop = _loop({}, _nodes("public"), reconciler, metrics, sleep=sleep)

    with pytest.raises(asyncio.CancelledError):
        await loop.run()

    assert loop.registry.refresh.await_count == 2
    assert sleep.await_count == 2
    sleep.assert_awaited_with(300.0)


@pytest.mark.asyncio
async def test_run_survives_unexpected_cycle_failure(metrics):
    sleep = AsyncMock(side_effect=[None, asyncio.CancelledError()])
    reconciler = MagicMock()
    loop = _loop(RuntimeError("bug"), _nodes("public"), reconciler, metrics, sleep=sleep)

    with pytest.raises(asyncio.CancelledError):
        await loop.run()

    assert loop.registry.refresh.await_count == 2
    assert metrics.error_count == 2
