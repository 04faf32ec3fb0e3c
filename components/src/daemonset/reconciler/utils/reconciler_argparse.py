# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import re
from urllib.parse import urlparse

from daemonset.common.configuration.utils import (
    add_argument,
    add_negatable_bool_argument,
)
from daemonset.reconciler.defaults import ReconcilerDefaults
from daemonset.reconciler.utils.exceptions import ConfigError

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_BARE_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_duration(value: str) -> float:
    """Parse a Go-style duration ("5m0s", "1h30m", "1.5m") into seconds.

    A bare number is taken as seconds.

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    if _BARE_NUMBER.fullmatch(text):
        return float(text)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return total


def create_reconciler_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the reconciler.

    Every flag can also be supplied through its ``DAEMONSET_*`` environment
    variable, which is how the daemon is normally deployed.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Keep daemonset-labelled Marathon apps at one instance per matching Mesos agent"
    )
    g = parser.add_argument_group("Collaborators")
    add_argument(
        g,
        flag_name="--mesos-host",
        env_var="DAEMONSET_MESOSHOST",
        default=None,
        help="Mesos master URL, e.g. http://leader.mesos:5050",
    )
    add_argument(
        g,
        flag_name="--marathon-host",
        env_var="DAEMONSET_MARATHONHOST",
        default=None,
        help="Marathon URL, e.g. http://marathon.mesos:8080",
    )
    add_argument(
        g,
        flag_name="--authorization",
        env_var="DAEMONSET_AUTHORIZATION",
        default=ReconcilerDefaults.authorization,
        help="Value sent as the Authorization header on outbound requests",
    )
    add_negatable_bool_argument(
        g,
        flag_name="--skip-tls",
        env_var="DAEMONSET_SKIPTLS",
        default=ReconcilerDefaults.skip_tls,
        help="Skip TLS certificate verification on outbound requests",
    )
    add_argument(
        g,
        flag_name="--request-timeout",
        env_var="DAEMONSET_REQUESTTIMEOUT",
        default=ReconcilerDefaults.request_timeout,
        help="Timeout in seconds for every outbound request",
        arg_type=float,
    )

    g = parser.add_argument_group("Reconciliation")
    add_argument(
        g,
        flag_name="--update-frequency",
        env_var="DAEMONSET_UPDATEFREQUENCY",
        default=ReconcilerDefaults.update_frequency,
        help="Pause between reconciliation cycles (Go duration or seconds)",
    )
    add_negatable_bool_argument(
        g,
        flag_name="--dry-run",
        env_var="DAEMONSET_DRYRUN",
        default=ReconcilerDefaults.dry_run,
        help="Log intended instance changes without applying them",
    )

    g = parser.add_argument_group("Server")
    add_argument(
        g,
        flag_name="--server-port",
        env_var="DAEMONSET_SERVERPORT",
        default=ReconcilerDefaults.server_port,
        help="Port for the /health and /metrics endpoints",
        arg_type=int,
    )
    add_negatable_bool_argument(
        g,
        flag_name="--debug",
        env_var="DAEMONSET_DEBUG",
        default=ReconcilerDefaults.debug,
        help="Enable debug logging",
    )
    return parser


def _validate_host(name: str, value) -> str:
    if not value:
        raise ValueError(f"{name} is required")
    uri = urlparse(str(value))
    if uri.scheme not in ("http", "https"):
        raise ValueError(
            f"{name}: invalid URL ({value}): scheme must be http or https"
        )
    if not uri.netloc:
        raise ValueError(f"{name}: empty host in URL ({value})")
    return str(value).rstrip("/")


def validate_reconciler_args(args: argparse.Namespace) -> None:
    """Validate and normalise parsed arguments in place.

    Hosts lose any trailing slash and ``update_frequency`` becomes seconds.

    Raises:
        ConfigError: Listing every problem found
    """
    errors = []

    for name in ("mesos_host", "marathon_host"):
        try:
            flag = f"--{name.replace('_', '-')}"
            setattr(args, name, _validate_host(flag, getattr(args, name)))
        except ValueError as e:
            errors.append(str(e))

    frequency = args.update_frequency
    if not isinstance(frequency, (int, float)):
        try:
            frequency = parse_duration(str(frequency))
        except ValueError as e:
            errors.append(f"--update-frequency: {e}")
            frequency = None
    if frequency is not None:
        if frequency <= 0:
            errors.append("--update-frequency must be greater than zero")
        args.update_frequency = float(frequency)

    if not 0 < args.server_port < 65536:
        errors.append(
            f"--server-port must be between 1 and 65535, got {args.server_port}"
        )
    if args.request_timeout <= 0:
        errors.append("--request-timeout must be greater than zero")

    if errors:
        raise ConfigError(errors)
