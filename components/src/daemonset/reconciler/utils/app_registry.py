# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import time
from dataclasses import dataclass
from typing import Dict

from daemonset.reconciler.defaults import DAEMONSET_LABEL
from daemonset.reconciler.http_client import MarathonClient
from daemonset.reconciler.protocol import MarathonAppsResponse
from daemonset.reconciler.utils.placement import PlacementRule, parse_placement_rule
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabeledApplication:
    """A Marathon app opted into daemonset management via its label."""

    app_id: str
    rule: PlacementRule


def discover_labeled_applications(
    response: MarathonAppsResponse,
) -> Dict[str, LabeledApplication]:
    """Pick out the apps carrying the daemonset label, keyed by app id."""
    apps: Dict[str, LabeledApplication] = {}
    for app in response.apps:
        label_value = app.labels.get(DAEMONSET_LABEL)
        if label_value is None:
            logger.debug(f"Found normal app {app.id}")
            continue
        logger.info(f"Found daemonset app {app.id} ({DAEMONSET_LABEL}={label_value})")
        apps[app.id] = LabeledApplication(
            app_id=app.id, rule=parse_placement_rule(label_value)
        )
    return apps


class ApplicationRegistry:
    """Rebuilds the set of labelled applications from Marathon on every call."""

    def __init__(self, marathon: MarathonClient):
        self.marathon = marathon

    async def refresh(self) -> Dict[str, LabeledApplication]:
        """
        Returns:
            Mapping of app id to LabeledApplication; empty when no app is labelled

        Raises:
            FetchError: Transport failure or non-success status
            ParseError: Malformed apps payload
        """
        start = time.monotonic()
        response = await self.marathon.list_apps()
        apps = discover_labeled_applications(response)
        logger.debug(
            f"Application registry refreshed: {len(apps)} of {len(response.apps)} "
            f"apps labelled, took {time.monotonic() - start:.3f}s"
        )
        return apps
