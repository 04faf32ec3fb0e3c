# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Tuple

from daemonset.reconciler.defaults import PRIVATE_TIER, PUBLIC_TIER, TIER_ATTRIBUTE
from daemonset.reconciler.http_client import MesosClient
from daemonset.reconciler.protocol import MesosAgent, MesosAgentsResponse
from daemonset.reconciler.utils.attribute_matcher import (
    count_matching,
    count_matching_predicates,
)
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


def attribute_to_str(value: Any) -> str:
    """Render a Mesos attribute value for string matching.

    Scalar attributes arrive as JSON numbers; ``2.0`` and ``2`` both render
    as ``"2"`` so they match a ``rack|2`` label.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Node:
    id: str
    hostname: str
    active: bool
    attributes: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_agent(cls, agent: MesosAgent) -> "Node":
        return cls(
            id=agent.id,
            hostname=agent.hostname,
            active=agent.active,
            attributes={k: attribute_to_str(v) for k, v in agent.attributes.items()},
        )


@dataclass(frozen=True)
class NodeInventory:
    """Snapshot of the cluster's agents for a single reconciliation cycle."""

    nodes: Tuple[Node, ...] = ()

    @classmethod
    def from_agents(cls, response: MesosAgentsResponse) -> "NodeInventory":
        return cls(nodes=tuple(Node.from_agent(a) for a in response.slaves))

    def total(self) -> int:
        return len(self.nodes)

    def total_active(self) -> int:
        return sum(1 for node in self.nodes if node.active)

    def matching(self, attribute: str, value: str) -> int:
        return count_matching(self.nodes, attribute, value)

    def matching_predicates(self, predicates: Iterable) -> int:
        return count_matching_predicates(self.nodes, predicates)

    def log_summary(self) -> None:
        """Log the overall node count and the size of the public/private tiers."""
        total = self.total()
        if total > 0:
            logger.info(f"Found {total} agents ({self.total_active()} active)")
        else:
            logger.warning("No agents found")

        for tier in (PUBLIC_TIER, PRIVATE_TIER):
            count = sum(
                1 for n in self.nodes if n.attributes.get(TIER_ATTRIBUTE) == tier
            )
            if count > 0:
                logger.info(f"Found {count} {tier} agents")
            else:
                logger.warning(f"No {tier} agents found")


class NodeInventorySource:
    """Builds a fresh NodeInventory from the Mesos master on every call."""

    def __init__(self, mesos: MesosClient):
        self.mesos = mesos

    async def refresh(self) -> NodeInventory:
        """
        Raises:
            FetchError: Transport failure or non-success status
            ParseError: Malformed agents payload
        """
        start = time.monotonic()
        agents = await self.mesos.get_agents()
        inventory = NodeInventory.from_agents(agents)
        logger.debug(
            f"Node inventory refreshed with {inventory.total()} nodes "
            f"in {time.monotonic() - start:.3f}s"
        )
        return inventory
