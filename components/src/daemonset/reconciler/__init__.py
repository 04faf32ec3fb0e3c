# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Daemonset reconciler.

Keeps every Marathon app labelled ``daemonset=all`` at one instance per
active Mesos agent, and every app labelled ``daemonset=<attr>|<value>[,...]``
at one instance per agent matching each attribute pair.

Usage:
    DAEMONSET_MESOSHOST=http://leader.mesos:5050 \\
    DAEMONSET_MARATHONHOST=http://marathon.mesos:8080 \\
        python -m daemonset.reconciler
"""

__all__ = [
    "AllNodes",
    "ApplicationRegistry",
    "AttributeConstrained",
    "AttributePredicate",
    "ControlLoop",
    "LabeledApplication",
    "Node",
    "NodeInventory",
    "NodeInventorySource",
    "ReconcileAction",
    "ReconciliationOutcome",
    "Reconciler",
    "ReconcilerMetrics",
    "compute_target",
    "parse_placement_rule",
]

from daemonset.reconciler.utils.app_registry import (
    ApplicationRegistry,
    LabeledApplication,
)
from daemonset.reconciler.utils.control_loop import ControlLoop
from daemonset.reconciler.utils.metrics import ReconcilerMetrics
from daemonset.reconciler.utils.node_inventory import (
    Node,
    NodeInventory,
    NodeInventorySource,
)
from daemonset.reconciler.utils.placement import (
    AllNodes,
    AttributeConstrained,
    AttributePredicate,
    parse_placement_rule,
)
from daemonset.reconciler.utils.reconciler_core import (
    ReconcileAction,
    ReconciliationOutcome,
    Reconciler,
)
from daemonset.reconciler.utils.target_calculator import compute_target
