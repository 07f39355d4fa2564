"""Auto Scaling group backend — describes and terminates host group members."""

from __future__ import annotations

import boto3

from hostgroup_scaler.shared.config import ROLE_TAG


class AutoScalingGroupBackend:
    def __init__(self, endpoint_url: str | None = None, region_name: str | None = None):
        kwargs = {}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if region_name:
            kwargs["region_name"] = region_name
        self._asg = boto3.client("autoscaling", **kwargs)
        self._ec2 = boto3.client("ec2", **kwargs)

    def describe(self, group_name: str) -> dict | None:
        resp = self._asg.describe_auto_scaling_groups(AutoScalingGroupNames=[group_name])
        groups = resp.get("AutoScalingGroups", [])
        if not groups:
            return None
        group = groups[0]

        role = ""
        for tag in group.get("Tags", []):
            if tag.get("Key") == ROLE_TAG:
                role = tag.get("Value", "")

        instance_ids = [
            i["InstanceId"]
            for i in group.get("Instances", [])
            if i.get("LifecycleState") == "InService"
        ]
        return {
            "desired_capacity": group.get("DesiredCapacity", 0),
            "role": role,
            "instances": self._describe_instances(instance_ids),
        }

    def _describe_instances(self, instance_ids: list[str]) -> list[dict]:
        if not instance_ids:
            return []
        instances = []
        paginator = self._ec2.get_paginator("describe_instances")
        for page in paginator.paginate(
            InstanceIds=instance_ids,
            Filters=[{"Name": "instance-state-name", "Values": ["running"]}],
        ):
            for reservation in page.get("Reservations", []):
                for inst in reservation.get("Instances", []):
                    instances.append(
                        {
                            "id": inst["InstanceId"],
                            "private_ip": inst.get("PrivateIpAddress", ""),
                            "launch_time": inst.get("LaunchTime"),
                        }
                    )
        return instances

    def set_termination_protection(self, instance_ids: list[str], enabled: bool) -> None:
        for instance_id in instance_ids:
            self._ec2.modify_instance_attribute(
                InstanceId=instance_id,
                DisableApiTermination={"Value": enabled},
            )

    def terminate(self, instance_ids: list[str]) -> None:
        self._ec2.terminate_instances(InstanceIds=instance_ids)
