"""Payloads exchanged with the invoking scheduler."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class HgInstance:
    id: str
    private_ip: str

    @classmethod
    def from_dict(cls, data: dict) -> "HgInstance":
        return cls(id=data.get("id", ""), private_ip=data.get("private_ip", ""))

    def to_dict(self) -> dict:
        return {"id": self.id, "private_ip": self.private_ip}


@dataclass
class HostGroupInfo:
    """Input of one scale tick."""

    username: str
    password: str
    desired_capacity: int
    role: str
    instances: list[HgInstance] = field(default_factory=list)
    backend_ips: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "HostGroupInfo":
        missing = [k for k in ("username", "password", "desired_capacity", "role") if k not in data]
        if missing:
            raise ValueError(f"Host group info is missing fields: {', '.join(missing)}")
        try:
            desired = int(data["desired_capacity"])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid desired_capacity: {data['desired_capacity']!r}")
        return cls(
            username=data["username"],
            password=data["password"],
            desired_capacity=desired,
            role=data["role"],
            instances=[HgInstance.from_dict(i) for i in data.get("instances") or []],
            backend_ips=list(data.get("backend_ips") or []),
        )

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "password": self.password,
            "desired_capacity": self.desired_capacity,
            "role": self.role,
            "instances": [i.to_dict() for i in self.instances],
            "backend_ips": list(self.backend_ips),
        }


@dataclass(frozen=True)
class ScaleResponseHost:
    instance_id: str
    state: str
    added_time: datetime | None
    host_id: int

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "status": self.state,
            "added_time": self.added_time.isoformat() if self.added_time else None,
            "host_id": self.host_id,
        }


@dataclass
class ScaleResponse:
    """Output of one scale tick."""

    hosts: list[ScaleResponseHost] = field(default_factory=list)
    to_terminate: list[HgInstance] = field(default_factory=list)
    transient_errors: list[str] = field(default_factory=list)

    def add_transient_error(self, err: Exception, caller: str) -> None:
        self.transient_errors.append(f"{caller}:{err}")

    def add_to_terminate(self, instance: HgInstance) -> None:
        if instance not in self.to_terminate:
            self.to_terminate.append(instance)

    def to_dict(self) -> dict:
        return {
            "hosts": [h.to_dict() for h in self.hosts],
            "to_terminate": [i.to_dict() for i in self.to_terminate],
            "transient_errors": list(self.transient_errors),
        }
