"""Deactivation planner — how many hosts to start removing this tick.

    H - healthy hosts
    U - unhealthy hosts (DOWN host, failed drive, ...), want them gone
    D - hosts already deactivating
    T - desired capacity

    target = max(D, max(H + U + D - T, min(2 - D, U)))

The first term sheds capacity above T. The second starts replacing unhealthy
hosts, never more than two in flight at once. The outer max keeps hosts that
are already deactivating selected.
"""

from __future__ import annotations

import logging

from hostgroup_scaler.core.classifier import ScaleState
from hostgroup_scaler.core.snapshot import HostInfo

logger = logging.getLogger(__name__)

MAX_CONCURRENT_DEACTIVATIONS = 2


def calculate_deactivate_target(healthy: int, unhealthy: int, deactivating: int, desired: int) -> int:
    surplus = healthy + unhealthy + deactivating - desired
    replace = min(MAX_CONCURRENT_DEACTIVATIONS - deactivating, unhealthy)
    return max(deactivating, max(surplus, replace))


def get_num_to_deactivate(hosts: list[HostInfo], desired: int) -> int:
    counts = {state: 0 for state in ScaleState}
    for host in hosts:
        counts[host.scale_state] += 1

    target = calculate_deactivate_target(
        counts[ScaleState.HEALTHY],
        counts[ScaleState.UNHEALTHY],
        counts[ScaleState.DEACTIVATING],
        desired,
    )
    logger.info(
        "%d hosts set to deactivate. healthy:%d unhealthy:%d deactivating:%d desired:%d",
        target,
        counts[ScaleState.HEALTHY],
        counts[ScaleState.UNHEALTHY],
        counts[ScaleState.DEACTIVATING],
        desired,
    )
    return min(target, len(hosts))


def select_for_deactivation(sorted_hosts: list[HostInfo], desired: int) -> list[HostInfo]:
    """Pick hosts to act on from a list already sorted by removal priority."""
    return sorted_hosts[: get_num_to_deactivate(sorted_hosts, desired)]
