"""Unit tests for the lifecycle executor."""

from __future__ import annotations

from hostgroup_scaler.core import executor
from hostgroup_scaler.core.protocol import HgInstance, ScaleResponse
from hostgroup_scaler.core.rpc_pool import RpcPool
from hostgroup_scaler.core.snapshot import build_snapshot

IPS = ["10.0.0.1", "10.0.0.2", "10.0.0.3"]


def _snapshot(plane, rng):
    pool = RpcPool(IPS, plane.client, rng=rng)
    return pool, build_snapshot(pool, "backend")


def test_deactivate_host_deactivates_only_active_drives(plane, rng):
    plane.add_host(1, "10.0.0.1", instance_id="i-1")
    plane.add_drive(10, 1, uuid="keep-going")
    plane.add_drive(11, 1, should_be_active=False, uuid="already")
    pool, snapshot = _snapshot(plane, rng)
    response = ScaleResponse()

    executor.deactivate_host(snapshot.hosts[1], pool, response)

    assert plane.calls_to("cluster_deactivate_drives") == [{"drive_uuids": ["keep-going"]}]
    assert plane.calls_to("cluster_deactivate_hosts") == []
    assert response.transient_errors == []


def test_deactivate_host_deactivates_host_once_drives_inactive(plane, rng):
    plane.add_host(1, "10.0.0.1", instance_id="i-1")
    plane.add_drive(10, 1, status="INACTIVE", should_be_active=False)
    pool, snapshot = _snapshot(plane, rng)

    executor.deactivate_host(snapshot.hosts[1], pool, ScaleResponse())

    assert plane.calls_to("cluster_deactivate_hosts") == [
        {"host_ids": [1], "skip_resource_validation": False}
    ]
    assert "10.0.0.1" not in pool.ips
    assert plane.calls[-1][0] != "10.0.0.1"


def test_deactivate_driveless_host_deactivates_host(plane, rng):
    plane.add_host(1, "10.0.0.1", instance_id="i-1")
    pool, snapshot = _snapshot(plane, rng)

    executor.deactivate_host(snapshot.hosts[1], pool, ScaleResponse())

    assert len(plane.calls_to("cluster_deactivate_hosts")) == 1


def test_deactivate_failures_are_transient_and_do_not_stop(plane, rng):
    plane.add_host(1, "10.0.0.1", instance_id="i-1")
    plane.add_drive(10, 1)
    plane.add_drive(11, 1)
    pool, snapshot = _snapshot(plane, rng)
    plane.failing_methods["cluster_deactivate_drives"] = "drive busy"
    response = ScaleResponse()

    executor.deactivate_host(snapshot.hosts[1], pool, response)

    assert len(plane.calls_to("cluster_deactivate_drives")) == 2
    assert response.transient_errors == [
        "deactivateDrive:drive busy",
        "deactivateDrive:drive busy",
    ]


def test_remove_inactive_removes_host_drives_and_marks_instance(plane, rng):
    plane.add_host(1, "10.0.0.1", state="INACTIVE")
    plane.add_drive(10, 1, status="INACTIVE", should_be_active=False, uuid="d-10")
    pool, snapshot = _snapshot(plane, rng)
    instances = [HgInstance("i-1", "10.0.0.1")]
    response = ScaleResponse()

    executor.remove_inactive([snapshot.hosts[1]], pool, instances, response)

    assert plane.calls_to("cluster_remove_host") == [{"host_id": 1, "no_wait": True}]
    assert plane.calls_to("cluster_remove_drives") == [{"drive_uuids": ["d-10"]}]
    assert response.to_terminate == instances
    assert "10.0.0.1" not in pool.ips


def test_remove_inactive_skips_host_after_failed_remove(plane, rng):
    plane.add_host(1, "10.0.0.1", state="INACTIVE")
    plane.add_drive(10, 1, status="INACTIVE", should_be_active=False)
    plane.add_host(2, "10.0.0.2", state="INACTIVE")
    pool, snapshot = _snapshot(plane, rng)
    plane.failing_methods["cluster_remove_host"] = "not yet"
    response = ScaleResponse()

    executor.remove_inactive(
        [snapshot.hosts[1], snapshot.hosts[2]],
        pool,
        [HgInstance("i-1", "10.0.0.1"), HgInstance("i-2", "10.0.0.2")],
        response,
    )

    assert len(plane.calls_to("cluster_remove_host")) == 2
    assert plane.calls_to("cluster_remove_drives") == []
    assert response.to_terminate == []
    assert response.transient_errors == [
        "removeInactive:not yet",
        "removeInactive:not yet",
    ]


def test_remove_old_drives_only_removes_inactive_orphans(plane, rng):
    plane.add_host(1, "10.0.0.1", instance_id="i-1")
    plane.add_drive(10, 1, status="INACTIVE", uuid="owned")
    plane.add_drive(20, -1, status="INACTIVE", uuid="orphan")
    plane.add_drive(21, -1, status="PHASING_OUT", uuid="orphan-busy")
    pool, snapshot = _snapshot(plane, rng)

    executor.remove_old_drives(snapshot.drives, pool, ScaleResponse())

    assert plane.calls_to("cluster_remove_drives") == [{"drive_uuids": ["orphan"]}]


def test_select_instance_by_ip():
    instances = [HgInstance("i-1", "10.0.0.1"), HgInstance("i-2", "10.0.0.2")]

    assert executor.select_instance_by_ip("10.0.0.2", instances) == instances[1]
    assert executor.select_instance_by_ip("10.0.0.9", instances) is None
