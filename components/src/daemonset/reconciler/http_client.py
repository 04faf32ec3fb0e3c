# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""HTTP access to the Mesos master and Marathon.

``ClusterHttpClient`` owns the transport concerns (timeout, Authorization
header, TLS verification) and turns every failure into the reconciler's
error taxonomy. ``MesosClient`` and ``MarathonClient`` know the endpoints and
payload shapes.
"""

import asyncio
import json
import logging
import time
from typing import Any, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from daemonset.reconciler.defaults import MARATHON_APPS_PATH, MESOS_AGENTS_PATH
from daemonset.reconciler.protocol import (
    InstancesUpdate,
    MarathonAppResponse,
    MarathonAppsResponse,
    MesosAgentsResponse,
)
from daemonset.reconciler.utils.exceptions import (
    ConflictError,
    ParseError,
    ResponseError,
    TransportError,
)
from daemonset.runtime.logging import configure_daemonset_logging

configure_daemonset_logging()
logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _as_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


class ClusterHttpClient:
    """Issues JSON requests with a fixed timeout and optional auth header."""

    def __init__(
        self,
        timeout: float = 10.0,
        authorization: Optional[str] = None,
        skip_tls: bool = True,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.authorization = authorization or None
        self.skip_tls = skip_tls

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.authorization:
            headers["Authorization"] = self.authorization
        return headers

    async def _request(
        self, method: str, url: str, payload: Optional[dict] = None
    ) -> tuple[int, bytes]:
        kwargs: dict[str, Any] = {"headers": self._headers()}
        if payload is not None:
            kwargs["json"] = payload
        if self.skip_tls:
            kwargs["ssl"] = False
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, **kwargs) as response:
                    return response.status, await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {url} timed out", url) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}", url) from e

    async def get_json(self, url: str) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            TransportError: Network failure or timeout
            ResponseError: Non-2xx status
            ParseError: Body is not UTF-8 JSON
        """
        status, body = await self._request("GET", url)
        if not 200 <= status < 300:
            raise ResponseError(url, status, _as_text(body))
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {url}: {e}", url) from e

    async def put_json(self, url: str, payload: dict) -> str:
        """PUT ``payload`` to ``url`` and return the response body.

        Raises:
            TransportError: Network failure or timeout
            ConflictError: 409, the app is locked by another deployment
            ResponseError: Any other non-2xx status
        """
        status, body = await self._request("PUT", url, payload)
        if status == 409:
            raise ConflictError(url, status, _as_text(body))
        if not 200 <= status < 300:
            raise ResponseError(url, status, _as_text(body))
        return _as_text(body)

    async def get_model(self, url: str, model: Type[M]) -> M:
        data = await self.get_json(url)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ParseError(
                f"Unexpected {model.__name__} payload from {url}: {e}", url
            ) from e


class MesosClient:
    def __init__(self, http: ClusterHttpClient, mesos_host: str):
        self.http = http
        self.mesos_host = mesos_host.rstrip("/")

    @property
    def agents_url(self) -> str:
        return f"{self.mesos_host}{MESOS_AGENTS_PATH}"

    async def get_agents(self) -> MesosAgentsResponse:
        start = time.monotonic()
        logger.debug(f"Reading agents from {self.agents_url}")
        agents = await self.http.get_model(self.agents_url, MesosAgentsResponse)
        logger.debug(
            f"MesosClient.get_agents completed in {time.monotonic() - start:.3f}s"
        )
        return agents


class MarathonClient:
    def __init__(self, http: ClusterHttpClient, marathon_host: str):
        self.http = http
        self.marathon_host = marathon_host.rstrip("/")

    @property
    def apps_url(self) -> str:
        return f"{self.marathon_host}{MARATHON_APPS_PATH}"

    def app_url(self, app_id: str) -> str:
        # Marathon ids are absolute ("/web"); avoid a double slash either way
        return f"{self.apps_url}/{app_id.lstrip('/')}"

    async def list_apps(self) -> MarathonAppsResponse:
        logger.info(f"Reading app JSON from marathon: {self.apps_url}")
        return await self.http.get_model(self.apps_url, MarathonAppsResponse)

    async def get_instances(self, app_id: str) -> int:
        """Fetch the instance count Marathon currently reports for one app."""
        start = time.monotonic()
        response = await self.http.get_model(
            self.app_url(app_id), MarathonAppResponse
        )
        logger.debug(
            f"get_instances({app_id}) completed in {time.monotonic() - start:.3f}s"
        )
        return response.app.instances

    async def update_instances(self, app_id: str, instances: int) -> str:
        payload = InstancesUpdate(instances=instances).model_dump()
        url = self.app_url(app_id)
        logger.info(f"Posting app JSON {json.dumps(payload)} to {url}")
        return await self.http.put_json(url, payload)
