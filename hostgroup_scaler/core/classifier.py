"""Host classification — group membership and per-host scale state."""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta

from hostgroup_scaler.core.management import is_management_node
from hostgroup_scaler.core.protocol import HgInstance, HostGroupInfo
from hostgroup_scaler.core.snapshot import ClusterSnapshot, HostInfo

logger = logging.getLogger(__name__)

UNHEALTHY_DEACTIVATE_TIMEOUT = timedelta(minutes=120)
# Gives the host's own group a chance to clean up before we do.
BACKEND_CLEANUP_DELAY = timedelta(minutes=5)
DOWN_KICK_OUT_TIMEOUT = timedelta(hours=3)

UNHEALTHY_DRIVE_STATUSES = ("INACTIVE",)
DEACTIVATING_HOST_STATES = ("DEACTIVATING", "REMOVING", "INACTIVE")


class ScaleState(enum.IntEnum):
    # Order is removal priority: lower values are removed first.
    DEACTIVATING = 0
    UNHEALTHY = 1
    HEALTHY = 2


def belongs_to_group(host: HostInfo, instances: list[HgInstance]) -> bool:
    return bool(host.instance_id) and any(host.instance_id == i.id for i in instances)


def belongs_to_group_by_ip(host: HostInfo, instances: list[HgInstance]) -> bool:
    return any(host.host_ip == i.private_ip for i in instances)


def num_unhealthy_drives(host: HostInfo) -> int:
    return sum(1 for d in host.drives.values() if d.status in UNHEALTHY_DRIVE_STATUSES)


def all_drives_being_removed(host: HostInfo) -> bool:
    """True if the host has drives and none of them should be active."""
    return bool(host.drives) and not any(d.should_be_active for d in host.drives.values())


def any_drive_being_removed(host: HostInfo) -> bool:
    return any(not d.should_be_active for d in host.drives.values())


def all_drives_inactive(host: HostInfo) -> bool:
    return all(d.status == "INACTIVE" for d in host.drives.values())


def management_timed_out(host: HostInfo, timeout: timedelta, now: datetime) -> bool:
    """True if a management node of the host has been down longer than `timeout`."""
    for node_id, node in host.nodes.items():
        if not is_management_node(node_id):
            continue
        if node.status != "DOWN" or node.last_fencing_time is None:
            continue
        if now - node.last_fencing_time > timeout:
            return True
    return False


def derive_host_state(host: HostInfo, now: datetime) -> ScaleState:
    if all_drives_being_removed(host):
        logger.info("Marking host %s as deactivating, all drives being removed", host.host_id)
        return ScaleState.DEACTIVATING
    if host.state in DEACTIVATING_HOST_STATES:
        return ScaleState.DEACTIVATING
    if host.status == "DOWN" and management_timed_out(host, UNHEALTHY_DEACTIVATE_TIMEOUT, now):
        logger.info("Marking host %s as unhealthy, down for too long", host.host_id)
        return ScaleState.UNHEALTHY
    if num_unhealthy_drives(host) > 0 or any_drive_being_removed(host):
        logger.info("Marking host %s as unhealthy due to unhealthy drives", host.host_id)
        return ScaleState.UNHEALTHY
    return ScaleState.HEALTHY


def calculate_hosts_state(hosts: list[HostInfo], now: datetime) -> None:
    for host in hosts:
        host.scale_state = derive_host_state(host, now)


def partition_hosts(
    snapshot: ClusterSnapshot,
    info: HostGroupInfo,
    now: datetime,
) -> tuple[list[HostInfo], list[HostInfo], list[HostInfo]]:
    """Split snapshot hosts into (in_scope, inactive_cleanup, forced_down).

    Down hosts can lose their recorded instance id, so they are matched to
    the group by private IP instead.
    """
    in_scope: list[HostInfo] = []
    inactive: list[HostInfo] = []
    down: list[HostInfo] = []
    is_backend = info.role == "backend"

    for host_id in sorted(snapshot.hosts):
        host = snapshot.hosts[host_id]
        if host.state == "INACTIVE":
            if belongs_to_group_by_ip(host, info.instances):
                inactive.append(host)
            elif is_backend and _inactive_for(host, now) > BACKEND_CLEANUP_DELAY:
                # Leftovers of earlier, partially failed removals.
                inactive.append(host)
        elif belongs_to_group(host, info.instances):
            in_scope.append(host)
        elif host.status == "DOWN":
            logger.info("Found down host %s : %s : %s", host.host_id, host.status, host.host_ip)
            if belongs_to_group_by_ip(host, info.instances):
                logger.info("Including down host %s in known hosts", host.host_id)
                in_scope.append(host)

        if (
            is_backend
            and host.status == "DOWN"
            and host.state != "INACTIVE"
            and management_timed_out(host, DOWN_KICK_OUT_TIMEOUT, now)
        ):
            logger.info("Host %s is still active but down for too long, kicking out", host.host_id)
            down.append(host)

    return in_scope, inactive, down


def _inactive_for(host: HostInfo, now: datetime) -> timedelta:
    changed = host.host.state_changed_time
    if changed is None:
        return timedelta(0)
    return now - changed


def removal_priority(host: HostInfo) -> tuple:
    """Sort key: deactivating first, then most unhealthy drives, then oldest."""
    added = host.host.added_time
    return (
        host.scale_state,
        -num_unhealthy_drives(host),
        added is None,
        added.timestamp() if added else 0.0,
        host.host_id,
    )


def sort_by_removal_priority(hosts: list[HostInfo]) -> list[HostInfo]:
    return sorted(hosts, key=removal_priority)
