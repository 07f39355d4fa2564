"""Shared fixtures for unit tests — uses mock backends, no network needed."""

import pytest
import random
import sys
import os
from datetime import datetime, timezone

# Add project root to path so hostgroup_scaler is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from hostgroup_scaler.backends.mock.compute import MockHostGroupBackend
from hostgroup_scaler.backends.mock.management import FakeManagementPlane
from hostgroup_scaler.backends.mock.state import InMemoryCredentialStore
from hostgroup_scaler.core.protocol import HgInstance, HostGroupInfo


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

BACKEND_INSTANCES = [
    HgInstance(id="i-0001", private_ip="10.0.0.1"),
    HgInstance(id="i-0002", private_ip="10.0.0.2"),
    HgInstance(id="i-0003", private_ip="10.0.0.3"),
]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def rng():
    return random.Random(7)


@pytest.fixture
def plane():
    return FakeManagementPlane()


@pytest.fixture
def info():
    return HostGroupInfo(
        username="admin",
        password="secret",
        desired_capacity=3,
        role="backend",
        instances=list(BACKEND_INSTANCES),
        backend_ips=[i.private_ip for i in BACKEND_INSTANCES],
    )


@pytest.fixture
def healthy_cluster(plane):
    """Three healthy backend hosts, two drives and a management node each."""
    for n, instance in enumerate(BACKEND_INSTANCES, start=1):
        plane.add_host(
            n,
            instance.private_ip,
            instance_id=instance.id,
            added_time=f"2026-01-0{n}T00:00:00+00:00",
        )
        plane.add_drive(n * 10, n, uuid=f"drive-{n}-a")
        plane.add_drive(n * 10 + 1, n, uuid=f"drive-{n}-b")
        plane.add_node(n * 100, n)
        plane.add_node(n * 100 + 1, n)
    return plane


@pytest.fixture
def host_groups():
    return MockHostGroupBackend()


@pytest.fixture
def credentials():
    return InMemoryCredentialStore("admin", "secret")
