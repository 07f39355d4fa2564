"""Terminate instances the scale tick released."""

from __future__ import annotations

import logging

from hostgroup_scaler.core.interfaces import HostGroupBackend
from hostgroup_scaler.core.protocol import HgInstance, ScaleResponse

logger = logging.getLogger(__name__)


def terminate_candidates(
    response: ScaleResponse | dict,
    group_name: str,
    host_groups: HostGroupBackend,
) -> dict:
    """Terminate every `to_terminate` instance still in the group.

    Instances no longer in the group were already handled by an earlier run.
    Returns {"set_to_terminate_instances": [...], "transient_errors": [...]}.
    """
    if isinstance(response, dict):
        candidates = [HgInstance.from_dict(i) for i in response.get("to_terminate") or []]
    else:
        candidates = list(response.to_terminate)

    result = {"set_to_terminate_instances": [], "transient_errors": []}
    if not candidates:
        return result

    group = host_groups.describe(group_name)
    if group is None:
        raise ValueError(f"Unknown host group: {group_name}")
    members = {i["id"]: i for i in group.get("instances", [])}

    for candidate in candidates:
        member = members.get(candidate.id)
        if member is None:
            logger.info("Instance %s already left group %s, skipping", candidate.id, group_name)
            continue
        try:
            host_groups.set_termination_protection([candidate.id], False)
            host_groups.terminate([candidate.id])
        except Exception as exc:
            logger.exception("Failed to terminate instance %s", candidate.id)
            result["transient_errors"].append(f"terminate:{exc}")
            continue

        launch_time = member.get("launch_time")
        result["set_to_terminate_instances"].append(
            {
                "instance_id": candidate.id,
                "creation_date": launch_time.isoformat() if hasattr(launch_time, "isoformat") else launch_time,
            }
        )

    return result
