# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the node inventory snapshot and attribute matching."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from daemonset.reconciler.protocol import MesosAgentsResponse
from daemonset.reconciler.utils.attribute_matcher import count_matching
from daemonset.reconciler.utils.exceptions import ParseError, TransportError
from daemonset.reconciler.utils.node_inventory import (
    Node,
    NodeInventory,
    NodeInventorySource,
    attribute_to_str,
)

pytestmark = [
    pytest.mark.pre_merge,
    pytest.mark.unit,
    pytest.mark.reconciler,
]


def _node(node_id: str, active: bool = True, **attributes) -> Node:
    return Node(id=node_id, hostname=f"{node_id}.local", active=active, attributes=attributes)


def test_from_agents_ignores_unknown_fields_and_stringifies_attributes():
    payload = {
        "slaves": [
            {
                "id": "a1",
                "hostname": "agent-1",
                "active": True,
                "attributes": {"tier": "public", "rack": 2.0, "gpus": 4, "ssd": True},
                "resources": {"cpus": 4.0, "mem": 1024.0},
                "version": "1.11.0",
            },
            {"id": "a2", "hostname": "agent-2", "active": False, "attributes": {}},
        ]
    }
    inventory = NodeInventory.from_agents(MesosAgentsResponse.model_validate(payload))

    assert inventory.total() == 2
    assert inventory.total_active() == 1
    assert inventory.nodes[0].attributes == {
        "tier": "public",
        "rack": "2",
        "gpus": "4",
        "ssd": "true",
    }


@pytest.mark.parametrize(
    "value,expected",
    [("public", "public"), (3, "3"), (3.0, "3"), (2.5, "2.5"), (False, "false")],
)
def test_attribute_to_str(value, expected):
    assert attribute_to_str(value) == expected


def test_matching_is_exact_and_case_sensitive():
    inventory = NodeInventory(
        nodes=(
            _node("a", tier="public"),
            _node("b", tier="Public"),
            _node("c", rack="public"),
            _node("d"),
        )
    )
    assert inventory.matching("tier", "public") == 1


def test_matching_counts_inactive_nodes():
    inventory = NodeInventory(
        nodes=(_node("a", tier="public"), _node("b", active=False, tier="public"))
    )
    assert inventory.matching("tier", "public") == 2
    assert inventory.total_active() == 1


def test_zero_matches_warns_but_returns_zero(caplog):
    caplog.set_level(logging.WARNING)
    assert count_matching([_node("a", tier="public")], "tier", "gpu") == 0
    assert "matched no nodes" in caplog.text


def test_empty_inventory():
    inventory = NodeInventory()
    assert inventory.total() == 0
    assert inventory.total_active() == 0


def test_log_summary_reports_tiers(caplog):
    caplog.set_level(logging.INFO)
    inventory = NodeInventory(
        nodes=(_node("a", tier="public"), _node("b", tier="public"))
    )
    inventory.log_summary()
    assert "Found 2 public agents" in caplog.text
    assert "No private agents found" in caplog.text


@pytest.mark.asyncio
async def test_refresh_builds_new_snapshot_each_call():
    mesos = MagicMock()
    mesos.get_agents = AsyncMock(
        side_effect=[
            MesosAgentsResponse.model_validate(
                {"slaves": [{"id": "a1", "hostname": "h1", "active": True}]}
            ),
            MesosAgentsResponse.model_validate({"slaves": []}),
        ]
    )
    source = NodeInventorySource(mesos)

    first = await source.refresh()
    second = await source.refresh()

    assert first.total() == 1
    assert second.total() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error", [TransportError("boom", "http://mesos"), ParseError("bad body")]
)
async def test_refresh_propagates_errors(error):
    mesos = MagicMock()
    mesos.get_agents = AsyncMock(side_effect=error)

    with pytest.raises(type(error)):
        await NodeInventorySource(mesos).refresh()
