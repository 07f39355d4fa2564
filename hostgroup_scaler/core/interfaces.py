"""Abstract interfaces for hostgroup-scaler backends.

Core scaling logic depends only on these protocols, never on cloud-specific
SDKs like boto3 or on a concrete HTTP transport. To add a new cloud backend,
implement these protocols and wire them up in a thin handler layer.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


class ManagementClient(Protocol):
    """A connection to one management-plane endpoint."""

    def call(self, method: str, params: dict | None = None) -> Any:
        """Issue a single RPC and return its raw result.

        Raises RpcTransportError when the endpoint could not be reached or
        answered garbage, RpcRemoteError when it returned an error object.
        """
        ...

    def close(self) -> None:
        """Release the connection. The client is not used afterwards."""
        ...


ClientBuilder = Callable[[str], ManagementClient]


class HostGroupBackend(Protocol):
    """Describe and terminate members of a cloud host group."""

    def describe(self, group_name: str) -> dict | None:
        """Describe a host group.

        Returns {"desired_capacity", "role", "instances": [{"id",
        "private_ip", "launch_time"}]} for members that are in service and
        running, or None if the group does not exist.
        """
        ...

    def set_termination_protection(self, instance_ids: list[str], enabled: bool) -> None:
        """Toggle API termination protection on instances."""
        ...

    def terminate(self, instance_ids: list[str]) -> None:
        """Terminate instances by ID."""
        ...


class CredentialStore(Protocol):
    """Storage for management-plane credentials."""

    def get_credentials(self) -> tuple[str, str]:
        """Return (username, password)."""
        ...

    def put_credentials(self, username: str, password: str) -> None:
        """Store credentials, overwriting any existing pair."""
        ...
