"""JSON-RPC 2.0 over HTTP client for one management-plane endpoint."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import requests

from hostgroup_scaler.core.rpc_pool import RpcRemoteError, RpcTransportError

logger = logging.getLogger(__name__)

API_PATH = "/api/v1"


class JsonRpcClient:
    def __init__(
        self,
        ip: str,
        port: int,
        username: str,
        password: str,
        scheme: str = "http",
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.url = f"{scheme}://{ip}:{port}{API_PATH}"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (username, password)
        self._ids = itertools.count(1)

    def call(self, method: str, params: dict | None = None) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or {},
            "id": next(self._ids),
        }
        logger.debug("POST %s %s", self.url, method)
        try:
            resp = self._session.post(self.url, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RpcTransportError(f"{method} to {self.url} failed: {exc}") from exc

        if resp.status_code != 200:
            raise RpcTransportError(f"{method} to {self.url} returned HTTP {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise RpcTransportError(f"{method} to {self.url} returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise RpcTransportError(f"{method} to {self.url} returned a non-object reply")

        error = body.get("error")
        if error:
            if isinstance(error, dict):
                raise RpcRemoteError(
                    f"{method}: {error.get('message', 'unknown error')}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcRemoteError(f"{method}: {error}")
        return body.get("result")

    def close(self) -> None:
        self._session.close()


def make_client_builder(
    port: int,
    username: str,
    password: str,
    scheme: str = "http",
    timeout: float = 30,
):
    """Return a callable that builds a JsonRpcClient per endpoint IP."""

    def build(ip: str) -> JsonRpcClient:
        return JsonRpcClient(ip, port, username, password, scheme=scheme, timeout=timeout)

    return build
