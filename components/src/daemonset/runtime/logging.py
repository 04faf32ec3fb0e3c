# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Process-wide logging setup shared by daemonset components."""

import logging
import sys
from typing import Optional

_HANDLER_FLAG = "_daemonset_stream_handler"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_daemonset_logging(
    level: int = logging.INFO, fmt: Optional[str] = None
) -> None:
    """Install (or refresh) a single stdout handler on the root logger.

    Safe to call more than once: modules call it at import time and the entry
    point calls it again once ``--debug`` is known.
    """
    root_logger = logging.getLogger()
    formatter = logging.Formatter(fmt or _DEFAULT_FORMAT)

    handler = None
    for existing in root_logger.handlers:
        if getattr(existing, _HANDLER_FLAG, False):
            handler = existing
            break

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        setattr(handler, _HANDLER_FLAG, True)
        root_logger.addHandler(handler)

    handler.setFormatter(formatter)
    handler.setLevel(level)
    root_logger.setLevel(level)
