"""Scale tick — decide which hosts and drives to deactivate and remove.

Cloud-agnostic: depends only on a ManagementClient builder. Every tick
rebuilds its view from the live management plane and the supplied group
membership; nothing survives between ticks.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone

from hostgroup_scaler.core import classifier, executor, planner
from hostgroup_scaler.core.interfaces import ClientBuilder
from hostgroup_scaler.core.protocol import HostGroupInfo, ScaleResponse, ScaleResponseHost
from hostgroup_scaler.core.rpc_pool import RpcPool
from hostgroup_scaler.core.snapshot import HostInfo, build_snapshot

logger = logging.getLogger(__name__)


def scale(
    info: HostGroupInfo,
    builder: ClientBuilder,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> ScaleResponse:
    """Run one tick for a host group.

    Raises on any failure before the snapshot is complete (no mutating call
    has been made at that point). Failures of mutating calls are returned in
    ScaleResponse.transient_errors instead.
    """
    now = now or datetime.now(timezone.utc)
    pool = RpcPool(info.backend_ips, builder, rng=rng)
    try:
        response = _run(info, pool, now)
    finally:
        pool.close()
    if response.transient_errors:
        logger.warning("Tick finished with %d transient errors", len(response.transient_errors))
    return response


def _run(info: HostGroupInfo, pool: RpcPool, now: datetime) -> ScaleResponse:
    snapshot = build_snapshot(pool, info.role)

    hosts, inactive_hosts, down_hosts = classifier.partition_hosts(snapshot, info, now)
    classifier.calculate_hosts_state(hosts, now)
    hosts = classifier.sort_by_removal_priority(hosts)

    response = ScaleResponse()
    executor.remove_inactive(inactive_hosts, pool, info.instances, response)
    executor.remove_old_drives(snapshot.drives, pool, response)

    selected = planner.select_for_deactivation(hosts, info.desired_capacity)
    for host in selected:
        executor.deactivate_host(host, pool, response)
    done = {host.host_id for host in selected}
    for host in down_hosts:
        if host.host_id not in done:
            executor.deactivate_host(host, pool, response)

    response.hosts = [_response_host(host) for host in hosts]
    return response


def _response_host(host: HostInfo) -> ScaleResponseHost:
    return ScaleResponseHost(
        instance_id=host.instance_id,
        state=host.state,
        added_time=host.host.added_time,
        host_id=host.host_id,
    )
