# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Wire models for the Mesos and Marathon payloads the reconciler reads and writes.

Only the fields the reconciler needs are declared; everything else in the
collaborators' responses is ignored so newer API versions keep parsing.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class MesosAgent(BaseModel):
    """One entry of the ``slaves`` array from ``/master/slaves``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    hostname: str = ""
    active: bool = False
    attributes: Dict[str, Any] = Field(default_factory=dict)


class MesosAgentsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slaves: List[MesosAgent] = Field(default_factory=list)


class MarathonAppRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    instances: int = 0
    labels: Dict[str, str] = Field(default_factory=dict)


class MarathonAppsResponse(BaseModel):
    """Response of ``GET /v2/apps``."""

    model_config = ConfigDict(extra="ignore")

    apps: List[MarathonAppRecord] = Field(default_factory=list)


class MarathonAppResponse(BaseModel):
    """Response of ``GET /v2/apps/<id>``."""

    model_config = ConfigDict(extra="ignore")

    app: MarathonAppRecord


class InstancesUpdate(BaseModel):
    """Body of ``PUT /v2/apps/<id>``."""

    instances: int = Field(ge=0)
