# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Daemonset-style instance reconciliation for Marathon applications."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("marathon-daemonset")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
