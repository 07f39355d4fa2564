"""Lifecycle executor — mutating management-plane calls.

Failures here never abort the tick: each one is logged, recorded on the
response as a transient error and the next target is processed. The next
tick retries whatever is still pending. The management plane treats repeated
deactivate/remove calls on an already-processed target as no-ops.
"""

from __future__ import annotations

import logging

from hostgroup_scaler.core import management
from hostgroup_scaler.core.classifier import all_drives_inactive
from hostgroup_scaler.core.management import Drive
from hostgroup_scaler.core.protocol import HgInstance, ScaleResponse
from hostgroup_scaler.core.rpc_pool import RpcError, RpcPool
from hostgroup_scaler.core.snapshot import HostInfo

logger = logging.getLogger(__name__)


def deactivate_host(host: HostInfo, pool: RpcPool, response: ScaleResponse) -> None:
    logger.info("Trying to deactivate host %s", host.host_id)
    for drive in host.drives.values():
        if not drive.should_be_active:
            continue
        try:
            pool.call(management.DEACTIVATE_DRIVES, {"drive_uuids": [drive.uuid]})
        except RpcError as exc:
            logger.error("Failed to deactivate drive %s of host %s: %s", drive.uuid, host.host_id, exc)
            response.add_transient_error(exc, "deactivateDrive")

    if not all_drives_inactive(host):
        return

    # The host's own endpoint may go away once it is deactivated.
    pool.drop(host.host_ip)
    try:
        pool.call(
            management.DEACTIVATE_HOSTS,
            {"host_ids": [host.host_id], "skip_resource_validation": False},
        )
    except RpcError as exc:
        logger.error("Failed to deactivate host %s: %s", host.host_id, exc)
        response.add_transient_error(exc, "deactivateHost")


def select_instance_by_ip(ip: str, instances: list[HgInstance]) -> HgInstance | None:
    for instance in instances:
        if instance.private_ip == ip:
            return instance
    return None


def remove_inactive(
    hosts: list[HostInfo],
    pool: RpcPool,
    instances: list[HgInstance],
    response: ScaleResponse,
) -> None:
    for host in hosts:
        pool.drop(host.host_ip)
        try:
            pool.call(management.REMOVE_HOST, {"host_id": host.host_id, "no_wait": True})
        except RpcError as exc:
            logger.error("Failed to remove inactive host %s: %s", host.host_id, exc)
            response.add_transient_error(exc, "removeInactive")
            continue

        instance = select_instance_by_ip(host.host_ip, instances)
        if instance is not None:
            logger.info("Host %s removed, instance %s can be terminated", host.host_id, instance.id)
            response.add_to_terminate(instance)

        for drive in host.drives.values():
            remove_drive(drive, pool, response)


def remove_old_drives(drives: dict[int, Drive], pool: RpcPool, response: ScaleResponse) -> None:
    """Remove inactive drives that no longer belong to any host."""
    for drive_id in sorted(drives):
        drive = drives[drive_id]
        if drive.host_id == management.ORPHAN_HOST_ID and drive.status == "INACTIVE":
            remove_drive(drive, pool, response)


def remove_drive(drive: Drive, pool: RpcPool, response: ScaleResponse) -> None:
    try:
        pool.call(management.REMOVE_DRIVES, {"drive_uuids": [drive.uuid]})
    except RpcError as exc:
        logger.error("Failed to remove drive %s: %s", drive.uuid, exc)
        response.add_transient_error(exc, "removeDrive")
