# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Error taxonomy for the daemonset reconciler.

Hierarchy::

    DaemonsetError
    ├── FetchError
    │   ├── TransportError      network failure or timeout
    │   └── ResponseError       non-2xx status
    │       └── ConflictError   409 on update
    ├── ParseError              body is not the expected JSON document
    └── ConfigError             invalid startup configuration (also a ValueError)
"""

from typing import List, Optional


class DaemonsetError(Exception):
    """Base class for every error raised by the reconciler."""


class FetchError(DaemonsetError):
    """A collaborator call did not produce a usable response."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class TransportError(FetchError):
    pass


class ResponseError(FetchError):
    def __init__(self, url: str, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{url} returned non-success status {status_code}", url)


class ConflictError(ResponseError):
    """The scheduler rejected an update because the app is being modified."""


class ParseError(DaemonsetError):
    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class ConfigError(DaemonsetError, ValueError):
    """Raised when startup configuration is missing or malformed."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors)
        )
