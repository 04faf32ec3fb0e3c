# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from daemonset.reconciler.utils.node_inventory import NodeInventory
from daemonset.reconciler.utils.placement import (
    AllNodes,
    AttributeConstrained,
    PlacementRule,
)


def compute_target(rule: PlacementRule, inventory: NodeInventory) -> int:
    """Desired instance count for ``rule`` against the current inventory.

    ``AllNodes`` counts active nodes; ``AttributeConstrained`` sums the
    per-predicate match counts (see ``attribute_matcher``). Zero is a valid
    result.
    """
    if isinstance(rule, AllNodes):
        return inventory.total_active()
    if isinstance(rule, AttributeConstrained):
        return inventory.matching_predicates(rule.predicates)
    raise TypeError(f"Unsupported placement rule: {rule!r}")
