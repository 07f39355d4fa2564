"""Management-plane RPC methods and typed listings.

Listings are JSON objects keyed by typed ids such as ``HostId<3>``. Decoders
turn them into int-keyed dicts of frozen dataclasses and raise
MalformedResponseError on anything unexpected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from hostgroup_scaler.core.rpc_pool import MalformedResponseError

STATUS = "status"
HOSTS_LIST = "hosts_list"
DRIVES_LIST = "disks_list"
NODES_LIST = "nodes_list"
DEACTIVATE_DRIVES = "cluster_deactivate_drives"
DEACTIVATE_HOSTS = "cluster_deactivate_hosts"
REMOVE_HOST = "cluster_remove_host"
REMOVE_DRIVES = "cluster_remove_drives"

ORPHAN_HOST_ID = -1

_ID_RE = re.compile(r"^(?P<kind>[A-Za-z]+)<(?P<value>-?\d+)>$")


def parse_id(raw, kind: str) -> int:
    """Parse ``Kind<N>`` (or a bare integer) into N."""
    if isinstance(raw, bool):
        raise MalformedResponseError(f"invalid {kind}: {raw!r}")
    if isinstance(raw, int):
        return raw
    match = _ID_RE.match(str(raw))
    if match is None or match.group("kind") != kind:
        raise MalformedResponseError(f"invalid {kind}: {raw!r}")
    return int(match.group("value"))


def format_id(value: int, kind: str) -> str:
    return f"{kind}<{value}>"


def is_management_node(node_id: int) -> bool:
    return node_id % 100 == 0


def parse_time(raw) -> datetime | None:
    if raw in (None, ""):
        return None
    if not isinstance(raw, str):
        raise MalformedResponseError(f"invalid timestamp: {raw!r}")
    try:
        value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise MalformedResponseError(f"invalid timestamp: {raw!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class SystemStatus:
    io_status: str
    upgrade: str


@dataclass(frozen=True)
class Host:
    host_ip: str
    state: str
    status: str
    instance_id: str
    added_time: datetime | None
    state_changed_time: datetime | None


@dataclass(frozen=True)
class Drive:
    uuid: str
    host_id: int
    status: str
    should_be_active: bool


@dataclass(frozen=True)
class Node:
    host_id: int
    status: str
    last_fencing_time: datetime | None


def _require(entry, key: str, where: str):
    if not isinstance(entry, dict) or key not in entry:
        raise MalformedResponseError(f"{where}: missing field {key!r}")
    return entry[key]


def _require_bool(entry, key: str, where: str) -> bool:
    value = _require(entry, key, where)
    if not isinstance(value, bool):
        raise MalformedResponseError(f"{where}: {key} must be a boolean, got {value!r}")
    return value


def _listing(result, method: str) -> dict:
    if not isinstance(result, dict):
        raise MalformedResponseError(f"{method}: expected an object, got {type(result).__name__}")
    return result


def decode_status(result) -> SystemStatus:
    result = _listing(result, STATUS)
    return SystemStatus(
        io_status=str(_require(result, "io_status", STATUS)),
        upgrade=str(result.get("upgrade") or ""),
    )


def decode_hosts(result) -> dict[int, Host]:
    hosts = {}
    for raw_id, entry in _listing(result, HOSTS_LIST).items():
        where = f"{HOSTS_LIST}[{raw_id}]"
        aws = entry.get("aws") if isinstance(entry, dict) else None
        if aws is not None and not isinstance(aws, dict):
            raise MalformedResponseError(f"{where}: aws must be an object, got {aws!r}")
        hosts[parse_id(raw_id, "HostId")] = Host(
            host_ip=str(_require(entry, "host_ip", where)),
            state=str(_require(entry, "state", where)),
            status=str(_require(entry, "status", where)),
            instance_id=str((aws or {}).get("instance_id") or ""),
            added_time=parse_time(entry.get("added_time")),
            state_changed_time=parse_time(entry.get("state_changed_time")),
        )
    return hosts


def decode_drives(result) -> dict[int, Drive]:
    drives = {}
    for raw_id, entry in _listing(result, DRIVES_LIST).items():
        where = f"{DRIVES_LIST}[{raw_id}]"
        drives[parse_id(raw_id, "DiskId")] = Drive(
            uuid=str(_require(entry, "uuid", where)),
            host_id=parse_id(_require(entry, "host_id", where), "HostId"),
            status=str(_require(entry, "status", where)),
            should_be_active=_require_bool(entry, "should_be_active", where),
        )
    return drives


def decode_nodes(result) -> dict[int, Node]:
    nodes = {}
    for raw_id, entry in _listing(result, NODES_LIST).items():
        where = f"{NODES_LIST}[{raw_id}]"
        nodes[parse_id(raw_id, "NodeId")] = Node(
            host_id=parse_id(_require(entry, "host_id", where), "HostId"),
            status=str(_require(entry, "status", where)),
            last_fencing_time=parse_time(entry.get("last_fencing_time")),
        )
    return nodes
