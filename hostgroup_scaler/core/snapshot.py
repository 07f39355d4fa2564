"""Cluster snapshot — a tick-scoped relational view of hosts, drives and nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hostgroup_scaler.core import management
from hostgroup_scaler.core.management import Drive, Host, Node, SystemStatus
from hostgroup_scaler.core.rpc_pool import RpcPool

if TYPE_CHECKING:
    from hostgroup_scaler.core.classifier import ScaleState

logger = logging.getLogger(__name__)


class ScaleNotAllowedError(RuntimeError):
    """The cluster is in a state where scaling is unsafe."""


@dataclass
class HostInfo:
    host_id: int
    host: Host
    drives: dict[int, Drive] = field(default_factory=dict)
    nodes: dict[int, Node] = field(default_factory=dict)
    scale_state: ScaleState | None = None  # set by the classifier

    @property
    def host_ip(self) -> str:
        return self.host.host_ip

    @property
    def state(self) -> str:
        return self.host.state

    @property
    def status(self) -> str:
        return self.host.status

    @property
    def instance_id(self) -> str:
        return self.host.instance_id


@dataclass
class ClusterSnapshot:
    status: SystemStatus
    hosts: dict[int, HostInfo]
    drives: dict[int, Drive]
    nodes: dict[int, Node]


def ensure_allowed_to_scale(status: SystemStatus) -> None:
    if status.io_status != "STARTED":
        raise ScaleNotAllowedError(f"io status:{status.io_status}, aborting scale")
    if status.upgrade:
        raise ScaleNotAllowedError("upgrade is running, aborting scale")


def build_snapshot(pool: RpcPool, role: str) -> ClusterSnapshot:
    """Query the management plane and join hosts with their drives and nodes.

    Any failure here is fatal to the tick; nothing has been mutated yet.
    """
    status = pool.call(management.STATUS, {}, decode=management.decode_status)
    ensure_allowed_to_scale(status)

    hosts = pool.call(management.HOSTS_LIST, {}, decode=management.decode_hosts)
    drives: dict[int, Drive] = {}
    if role == "backend":
        drives = pool.call(management.DRIVES_LIST, {}, decode=management.decode_drives)
    nodes = pool.call(management.NODES_LIST, {}, decode=management.decode_nodes)

    infos = {host_id: HostInfo(host_id=host_id, host=host) for host_id, host in hosts.items()}
    for drive_id, drive in drives.items():
        if drive.host_id in infos:
            infos[drive.host_id].drives[drive_id] = drive
    for node_id, node in nodes.items():
        if node.host_id in infos:
            infos[node.host_id].nodes[node_id] = node

    logger.info(
        "Snapshot: %d hosts, %d drives, %d nodes (role=%s)",
        len(infos),
        len(drives),
        len(nodes),
        role,
    )
    return ClusterSnapshot(status=status, hosts=infos, drives=drives, nodes=nodes)
