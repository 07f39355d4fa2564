"""Host group discovery — assemble the input of a scale tick."""

from __future__ import annotations

import logging

from hostgroup_scaler.core.interfaces import CredentialStore, HostGroupBackend
from hostgroup_scaler.core.protocol import HgInstance, HostGroupInfo

logger = logging.getLogger(__name__)


def fetch_host_group_info(
    group_name: str,
    host_groups: HostGroupBackend,
    credentials: CredentialStore,
    backend_group_name: str | None = None,
) -> HostGroupInfo:
    """Describe a host group and attach management-plane access details.

    Client groups reach the cluster through the backend group, so pass
    `backend_group_name` for them; backend groups use their own members.
    """
    group = host_groups.describe(group_name)
    if group is None:
        raise ValueError(f"Unknown host group: {group_name}")

    instances = [HgInstance.from_dict(i) for i in group.get("instances", [])]
    backend_ips = [i.private_ip for i in instances if i.private_ip]

    if backend_group_name and backend_group_name != group_name:
        backend_group = host_groups.describe(backend_group_name)
        if backend_group is None:
            raise ValueError(f"Unknown backend host group: {backend_group_name}")
        backend_ips = [i["private_ip"] for i in backend_group.get("instances", []) if i.get("private_ip")]

    username, password = credentials.get_credentials()
    logger.info(
        "Host group %s: role=%s desired=%s instances=%d endpoints=%d",
        group_name,
        group.get("role", ""),
        group.get("desired_capacity"),
        len(instances),
        len(backend_ips),
    )
    return HostGroupInfo(
        username=username,
        password=password,
        desired_capacity=int(group.get("desired_capacity", 0)),
        role=group.get("role", ""),
        instances=instances,
        backend_ips=backend_ips,
    )
