# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Optional

from prometheus_client import CollectorRegistry, Counter

from daemonset.reconciler.defaults import METRICS_NAMESPACE, METRICS_SUBSYSTEM


class ReconcilerMetrics:
    """Process-wide counters for successful updates and errors.

    prometheus_client counters are lock-protected, so the health server may
    scrape them while the control loop increments them.
    """

    UPDATED_NAME = "apps_updated_count"
    ERROR_NAME = "apps_updated_error_count"

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()
        self.apps_updated = Counter(
            self.UPDATED_NAME,
            "Number of apps updated.",
            namespace=METRICS_NAMESPACE,
            subsystem=METRICS_SUBSYSTEM,
            registry=self.registry,
        )
        self.apps_update_errors = Counter(
            self.ERROR_NAME,
            "Number of errors.",
            namespace=METRICS_NAMESPACE,
            subsystem=METRICS_SUBSYSTEM,
            registry=self.registry,
        )

    def record_success(self) -> None:
        self.apps_updated.inc()

    def record_error(self) -> None:
        self.apps_update_errors.inc()

    def _sample(self, name: str) -> int:
        value = self.registry.get_sample_value(
            f"{METRICS_NAMESPACE}_{METRICS_SUBSYSTEM}_{name}_total"
        )
        return int(value or 0)

    @property
    def updated_count(self) -> int:
        return self._sample(self.UPDATED_NAME)

    @property
    def error_count(self) -> int:
        return self._sample(self.ERROR_NAME)
