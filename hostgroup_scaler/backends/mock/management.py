"""Fake management plane for testing.

Keeps cluster state in the same wire format the real management plane
returns, serves it through per-endpoint clients, and records every call.
Endpoints listed in `down_ips` fail with a transport error; methods listed in
`failing_methods` answer with a JSON-RPC error.
"""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime

from hostgroup_scaler.core import management
from hostgroup_scaler.core.management import format_id
from hostgroup_scaler.core.rpc_pool import RpcRemoteError, RpcTransportError

MUTATING_METHODS = (
    management.DEACTIVATE_DRIVES,
    management.DEACTIVATE_HOSTS,
    management.REMOVE_HOST,
    management.REMOVE_DRIVES,
)


def _ts(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class FakeManagementPlane:
    def __init__(self, io_status: str = "STARTED", upgrade: str = ""):
        self.io_status = io_status
        self.upgrade = upgrade
        self.hosts: dict[str, dict] = {}
        self.drives: dict[str, dict] = {}
        self.nodes: dict[str, dict] = {}
        self.down_ips: set[str] = set()
        self.failing_methods: dict[str, str] = {}
        self.calls: list[tuple[str, str, dict]] = []
        self.built: list[str] = []
        self.closed: list[str] = []

    # --- Cluster state ---

    def add_host(
        self,
        host_id: int,
        ip: str,
        instance_id: str = "",
        state: str = "ACTIVE",
        status: str = "UP",
        added_time: datetime | str | None = "2026-01-01T00:00:00+00:00",
        state_changed_time: datetime | str | None = "2026-01-01T00:00:00+00:00",
    ) -> None:
        self.hosts[format_id(host_id, "HostId")] = {
            "host_ip": ip,
            "state": state,
            "status": status,
            "added_time": _ts(added_time),
            "state_changed_time": _ts(state_changed_time),
            "aws": {"instance_id": instance_id},
        }

    def add_drive(
        self,
        drive_id: int,
        host_id: int,
        status: str = "ACTIVE",
        should_be_active: bool = True,
        uuid: str | None = None,
    ) -> str:
        drive_uuid = uuid or str(uuid_lib.uuid4())
        self.drives[format_id(drive_id, "DiskId")] = {
            "uuid": drive_uuid,
            "host_id": format_id(host_id, "HostId"),
            "status": status,
            "should_be_active": should_be_active,
        }
        return drive_uuid

    def add_node(
        self,
        node_id: int,
        host_id: int,
        status: str = "UP",
        last_fencing_time: datetime | str | None = None,
    ) -> None:
        self.nodes[format_id(node_id, "NodeId")] = {
            "host_id": format_id(host_id, "HostId"),
            "status": status,
            "last_fencing_time": _ts(last_fencing_time),
        }

    # --- Call inspection ---

    def calls_to(self, method: str) -> list[dict]:
        return [params for _, m, params in self.calls if m == method]

    @property
    def mutating_calls(self) -> list[tuple[str, str, dict]]:
        return [c for c in self.calls if c[1] in MUTATING_METHODS]

    # --- Transport ---

    def client(self, ip: str) -> "FakeManagementClient":
        self.built.append(ip)
        return FakeManagementClient(self, ip)

    def handle(self, ip: str, method: str, params: dict | None):
        params = params or {}
        if ip in self.down_ips:
            raise RpcTransportError(f"connection to {ip} refused")
        self.calls.append((ip, method, params))
        if method in self.failing_methods:
            raise RpcRemoteError(self.failing_methods[method], code=-32000)

        if method == management.STATUS:
            return {"io_status": self.io_status, "upgrade": self.upgrade}
        if method == management.HOSTS_LIST:
            return self.hosts
        if method == management.DRIVES_LIST:
            return self.drives
        if method == management.NODES_LIST:
            return self.nodes
        if method == management.DEACTIVATE_DRIVES:
            for drive in self._drives_by_uuid(params.get("drive_uuids", [])):
                drive["should_be_active"] = False
            return None
        if method == management.DEACTIVATE_HOSTS:
            for host_id in params.get("host_ids", []):
                host = self.hosts.get(format_id(host_id, "HostId"))
                if host is not None and host["state"] == "ACTIVE":
                    host["state"] = "DEACTIVATING"
            return None
        if method == management.REMOVE_HOST:
            self.hosts.pop(format_id(params["host_id"], "HostId"), None)
            return None
        if method == management.REMOVE_DRIVES:
            uuids = set(params.get("drive_uuids", []))
            self.drives = {k: v for k, v in self.drives.items() if v["uuid"] not in uuids}
            return None
        raise RpcRemoteError(f"Method not found: {method}", code=-32601)

    def _drives_by_uuid(self, uuids: list[str]) -> list[dict]:
        wanted = set(uuids)
        return [d for d in self.drives.values() if d["uuid"] in wanted]


class FakeManagementClient:
    def __init__(self, plane: FakeManagementPlane, ip: str):
        self._plane = plane
        self.ip = ip

    def call(self, method: str, params: dict | None = None):
        return self._plane.handle(self.ip, method, params)

    def close(self) -> None:
        self._plane.closed.append(self.ip)
