# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Count nodes by exact attribute match.

Multi-predicate rules are aggregated by *summing* the per-predicate counts,
not by taking the union of matching nodes. A node that satisfies two
predicates of the same rule is counted twice. Rules are expected to address
disjoint pools (``tier|public,tier|private``); overlapping predicates inflate
the target. This is the established behaviour and is pinned by tests; change
it deliberately if a union is ever wanted.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from daemonset.runtime.logging import configure_daemonset_logging

if TYPE_CHECKING:
    from daemonset.reconciler.utils.node_inventory import Node
    from daemonset.reconciler.utils.placement import AttributePredicate

configure_daemonset_logging()
logger = logging.getLogger(__name__)


def count_matching(nodes: Iterable["Node"], attribute: str, value: str) -> int:
    """Return how many nodes carry ``attribute`` with exactly ``value``.

    Comparison is case-sensitive; a node without the attribute never matches.
    Zero matches usually means a mistyped label, so it is logged as a warning
    but is still a valid answer.
    """
    count = sum(1 for node in nodes if node.attributes.get(attribute) == value)
    if count == 0:
        logger.warning(f"Attribute {attribute}={value} matched no nodes")
    return count


def count_matching_predicates(
    nodes: Sequence["Node"], predicates: Iterable["AttributePredicate"]
) -> int:
    """Sum of :func:`count_matching` over every predicate (no deduplication)."""
    total = 0
    for predicate in predicates:
        logger.debug(f"Processing attribute pair {predicate.name}|{predicate.value}")
        total += count_matching(nodes, predicate.name, predicate.value)
    return total
