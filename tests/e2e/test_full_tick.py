"""E2E scale ticks over real HTTP against the mock management server."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from hostgroup_scaler.backends.jrpc.client import make_client_builder
from hostgroup_scaler.core.protocol import HgInstance, HostGroupInfo
from hostgroup_scaler.core.rpc_pool import NoAvailableEndpointsError, RpcPool, RpcTransportError
from hostgroup_scaler.core.scale import scale

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ENDPOINTS = ["127.0.0.1", "127.0.0.2"]


def _info(desired: int) -> HostGroupInfo:
    return HostGroupInfo(
        username="admin",
        password="secret",
        desired_capacity=desired,
        role="backend",
        instances=[HgInstance(f"i-{n}", f"10.0.0.{n}") for n in (1, 2, 3)],
        backend_ips=list(ENDPOINTS),
    )


def _seed(plane):
    for n in (1, 2, 3):
        plane.add_host(n, f"10.0.0.{n}", instance_id=f"i-{n}", added_time=f"2026-01-0{n}T00:00:00Z")
        plane.add_drive(n * 10, n, uuid=f"drive-{n}")
        plane.add_node(n * 100, n)


def test_scale_down_over_http(management):
    _seed(management.plane)
    builder = make_client_builder(port=management.port, username="admin", password="secret", timeout=5)

    response = scale(_info(desired=2), builder, rng=random.Random(0), now=NOW)

    assert [h.host_id for h in response.hosts] == [1, 2, 3]
    assert management.plane.calls_to("cluster_deactivate_drives") == [{"drive_uuids": ["drive-1"]}]
    assert response.transient_errors == []


def test_failover_to_second_endpoint_over_http(management):
    _seed(management.plane)
    builder = make_client_builder(port=management.port, username="admin", password="secret", timeout=5)
    rng = random.Random(0)
    order = list(ENDPOINTS)
    random.Random(0).shuffle(order)
    management.plane.down_ips.add(order[0])

    response = scale(_info(desired=3), builder, rng=rng, now=NOW)

    assert len(response.hosts) == 3
    assert {ip for ip, _, _ in management.plane.calls} == {order[1]}


def test_inactive_cleanup_and_orphans_over_http(management):
    _seed(management.plane)
    management.plane.add_host(
        4, "10.0.0.4", state="INACTIVE", state_changed_time=NOW - timedelta(minutes=1)
    )
    management.plane.add_drive(99, -1, status="INACTIVE", uuid="orphan")
    info = _info(desired=3)
    info.instances.append(HgInstance("i-4", "10.0.0.4"))
    builder = make_client_builder(port=management.port, username="admin", password="secret", timeout=5)

    response = scale(info, builder, rng=random.Random(0), now=NOW)

    assert response.to_dict()["to_terminate"] == [{"id": "i-4", "private_ip": "10.0.0.4"}]
    assert management.plane.calls_to("cluster_remove_drives") == [{"drive_uuids": ["orphan"]}]
    assert "HostId<4>" not in management.plane.hosts


def test_wrong_credentials_fail_over_and_abort(management):
    _seed(management.plane)
    builder = make_client_builder(port=management.port, username="admin", password="wrong", timeout=5)
    pool = RpcPool(ENDPOINTS, builder, rng=random.Random(0))

    with pytest.raises(NoAvailableEndpointsError):
        pool.call("status")
    assert management.plane.calls == []


def test_unreachable_port_is_transport_error(management):
    builder = make_client_builder(port=1, username="admin", password="secret", timeout=1)

    with pytest.raises(RpcTransportError):
        builder("127.0.0.1").call("status")
