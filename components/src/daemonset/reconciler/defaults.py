# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Constants and default settings for the daemonset reconciler."""

# Collaborator endpoints
MESOS_AGENTS_PATH = "/master/slaves"
MARATHON_APPS_PATH = "/v2/apps"

# Label micro-format: daemonset=all or daemonset=<attr>|<value>[,<attr>|<value>...]
DAEMONSET_LABEL = "daemonset"
LABEL_ALL_VALUE = "all"
PREDICATE_SEPARATOR = ","
ATTRIBUTE_VALUE_SEPARATOR = "|"

# Pools summarised after every inventory refresh
TIER_ATTRIBUTE = "tier"
PUBLIC_TIER = "public"
PRIVATE_TIER = "private"

METRICS_NAMESPACE = "marathon_daemonset"
METRICS_SUBSYSTEM = "updated"

HEALTH_RESPONSE_TEXT = (
    "We are the metric makers, And we are the dreamers of dreams... "
    "and yes, I am healthy. Thanks for asking!\n"
)


class ReconcilerDefaults:
    server_port = 8889
    update_frequency = "5m0s"
    dry_run = False
    debug = False
    skip_tls = True
    authorization = ""
    request_timeout = 10.0
