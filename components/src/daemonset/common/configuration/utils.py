# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Helpers for argparse flags that fall back to environment variables."""

import argparse
import os
from typing import Any, Callable, Optional, TypeVar, Union

T = TypeVar("T")

_TRUTHY = ("true", "1", "yes", "on", "t")
_FALSY = ("false", "0", "no", "off", "f", "")


def parse_bool(value: str) -> bool:
    """Parse a boolean the way env-configured daemons usually accept them."""
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def env_or_default(
    env_var: str,
    default: T,
    value_type: Optional[Union[type, Callable[..., Any]]] = None,
) -> T:
    """
    Get value from environment variable or return default.

    The raw string is converted with ``value_type`` when given, otherwise with
    ``type(default)``. Booleans go through :func:`parse_bool`. With neither a
    type nor a non-None default the raw string is returned.

    Raises:
        ValueError: If the environment value cannot be converted
    """
    value = os.environ.get(env_var)
    if value is None:
        return default

    if value_type is None and default is None:
        return value  # type: ignore[return-value]

    target_type = value_type if value_type is not None else type(default)

    if target_type is bool:
        return parse_bool(value)  # type: ignore[return-value]
    if target_type is str:
        return value  # type: ignore[return-value]
    try:
        return target_type(value)  # type: ignore[misc]
    except (TypeError, ValueError) as e:
        raise ValueError(f"{env_var}={value!r}: {e}") from e


def add_argument(
    parser,
    *,
    flag_name: str,
    env_var: str,
    default: Any,
    help: str,
    arg_type: Optional[Union[type, Callable[..., Any]]] = str,
    **kwargs: Any,
) -> None:
    """
    Add a CLI flag whose default comes from ``env_var`` when it is set.

    Args:
        parser: ArgumentParser or argument group
        flag_name: Primary flag (must start with '--', e.g. "--mesos-host")
        env_var: Environment variable name (e.g. "DAEMONSET_MESOSHOST")
        default: Value used when neither the flag nor the env var is given
        help: Help text; env var and default are appended
        arg_type: Conversion applied to the flag (and to the env value when
            it is a plain type)
    """
    env_type = arg_type if isinstance(arg_type, type) else None
    add_arg_opts = {
        "dest": kwargs.pop("dest", None) or _get_dest_name(flag_name),
        "default": env_or_default(env_var, default, value_type=env_type),
        "help": _build_help_message(help, env_var, default),
    }
    if arg_type is not None:
        add_arg_opts["type"] = arg_type
    kwargs.update(add_arg_opts)
    parser.add_argument(flag_name, **kwargs)


def add_negatable_bool_argument(
    parser,
    *,
    flag_name: str,
    env_var: str,
    default: bool,
    help: str,
) -> None:
    """Add a ``--foo / --no-foo`` flag backed by ``env_var``."""
    add_argument(
        parser,
        flag_name=flag_name,
        env_var=env_var,
        default=default,
        help=help,
        arg_type=None,
        action=argparse.BooleanOptionalAction,
    )


def _build_help_message(help_text: str, env_var: str, default: Any) -> str:
    return f"{help_text} (env var: {env_var} | default: {default})"


def _get_dest_name(flag_name: str) -> str:
    return flag_name.lstrip("-").replace("-", "_")
