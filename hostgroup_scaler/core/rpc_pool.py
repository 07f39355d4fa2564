"""RPC client pool — failover across redundant management endpoints.

The pool is owned by a single tick: endpoint order, the active endpoint and
the per-endpoint clients live only as long as the pool object does.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable

from hostgroup_scaler.core.interfaces import ClientBuilder, ManagementClient

logger = logging.getLogger(__name__)


class RpcError(RuntimeError):
    """Base class for management-plane RPC failures."""


class RpcTransportError(RpcError):
    """The endpoint could not be reached or returned an unusable reply."""


class RpcRemoteError(RpcError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, message: str, code: int | None = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class NoAvailableEndpointsError(RpcError):
    """Every candidate endpoint failed or was dropped."""


class MalformedResponseError(ValueError):
    """A management-plane reply did not have the expected shape."""


class RpcPool:
    def __init__(
        self,
        ips: list[str],
        builder: ClientBuilder,
        rng: random.Random | None = None,
    ):
        self._rng = rng if rng is not None else random.Random()
        self._ips = list(dict.fromkeys(ips))
        self._rng.shuffle(self._ips)
        self._builder = builder
        self._clients: dict[str, ManagementClient] = {}
        self._active: str | None = None

    @property
    def ips(self) -> list[str]:
        """Remaining candidate endpoints, in the order they will be tried."""
        return list(self._ips)

    @property
    def active(self) -> str | None:
        return self._active

    def call(
        self,
        method: str,
        params: dict | None = None,
        decode: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Call `method` on the active endpoint, failing over on transport errors."""
        while True:
            ip = self._select_active()
            try:
                result = self._client(ip).call(method, params)
            except RpcTransportError as exc:
                logger.warning("RPC %s failed on %s, failing over: %s", method, ip, exc)
                self.drop(ip)
                continue
            if decode is None:
                return result
            return decode(result)

    def drop(self, ip: str) -> None:
        """Remove an endpoint for the remainder of the tick."""
        if ip in self._ips:
            self._ips.remove(ip)
            logger.debug("Dropped endpoint %s from pool", ip)
        client = self._clients.pop(ip, None)
        if client is not None:
            client.close()
        if self._active == ip:
            self._active = None

    def close(self) -> None:
        """Close every client opened by this pool."""
        clients, self._clients = list(self._clients.values()), {}
        for client in clients:
            client.close()
        self._active = None

    def _select_active(self) -> str:
        if self._active is None:
            if not self._ips:
                raise NoAvailableEndpointsError("no management endpoints left to try")
            self._active = self._ips[0]
            logger.debug("Using management endpoint %s", self._active)
        return self._active

    def _client(self, ip: str) -> ManagementClient:
        client = self._clients.get(ip)
        if client is None:
            client = self._builder(ip)
            self._clients[ip] = client
        return client
