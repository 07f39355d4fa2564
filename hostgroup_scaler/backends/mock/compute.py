"""Mock host group backend for testing."""

from __future__ import annotations


class MockHostGroupBackend:
    """Holds host groups in memory and records terminations."""

    def __init__(self):
        self.groups: dict[str, dict] = {}
        self.protection: dict[str, bool] = {}
        self.terminated: list[str] = []
        self.fail_terminate: set[str] = set()

    def put_group(self, name: str, desired_capacity: int, role: str, instances: list[dict]) -> None:
        self.groups[name] = {
            "desired_capacity": desired_capacity,
            "role": role,
            "instances": [dict(i) for i in instances],
        }

    def describe(self, group_name: str) -> dict | None:
        group = self.groups.get(group_name)
        if group is None:
            return None
        return {**group, "instances": [dict(i) for i in group["instances"]]}

    def set_termination_protection(self, instance_ids: list[str], enabled: bool) -> None:
        for instance_id in instance_ids:
            self.protection[instance_id] = enabled

    def terminate(self, instance_ids: list[str]) -> None:
        for instance_id in instance_ids:
            if instance_id in self.fail_terminate:
                raise RuntimeError(f"cannot terminate {instance_id}")
            self.terminated.append(instance_id)
            for group in self.groups.values():
                group["instances"] = [i for i in group["instances"] if i["id"] != instance_id]
