"""Tests for export and repair-on-import of job bindings."""

import copy

import pytest

from settlejobs.world import IDLE, WORKING, JobAssignment
from tests.helpers.factories import mock_building, mock_system, mock_worker


def _fresh_copy(system):
    """Same buildings and workers, nobody employed."""
    world = copy.deepcopy(system.world)
    for w in world.workers:
        w.job_assignment = None
        w.status = IDLE
    return mock_system(world)


def test_serialize_layout(tiny_system):
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    tiny_system.assign_worker_to_job("w1", "global", "builder")

    data = tiny_system.serialize()

    assert data["jobAssignments"] == {
        "farm1": {"farmer": ["w0"]},
        "global": {"builder": ["w1"]},
    }
    assert data["availableJobs"]["global"] == {"builder": 4}
    assert data["availableJobs"]["quarry1"] == {"rockcutter": 3}


def test_round_trip_restores_bindings(tiny_system):
    tiny_system.auto_assign()
    data = tiny_system.serialize()

    restored = _fresh_copy(tiny_system)
    n = restored.deserialize(data)

    assert n == 6
    assert restored.serialize() == data
    for w in restored.world.workers:
        assert w.status == WORKING
        assert w.job_assignment is not None


def test_missing_workers_and_buildings_are_dropped(tiny_system):
    data = {
        "jobAssignments": {
            "farm1": {"farmer": ["w0", "ghost"]},
            "demolished": {"sawyer": ["w1"]},
            "tc": {"gatherer": ["w2", "w3", "w4"]},
        },
        "availableJobs": {"demolished": {"sawyer": 3}},
    }
    assert tiny_system.deserialize(data) == 3
    assert tiny_system.registry.assignments() == {
        "farm1": {"farmer": ["w0"]},
        "tc": {"gatherer": ["w2", "w3"]},
    }
    assert tiny_system.world.find_worker("w1").job_assignment is None
    assert tiny_system.world.find_worker("w4").status == IDLE


def test_saved_capacities_are_ignored(tiny_system):
    data = {
        "jobAssignments": {},
        "availableJobs": {"farm1": {"farmer": 99}},
    }
    tiny_system.deserialize(data)
    assert tiny_system.registry.capacity("farmer") == 2


def test_restore_replaces_live_bindings(tiny_system):
    tiny_system.assign_worker_to_job("w5", "quarry1", "rockcutter")
    tiny_system.deserialize({"jobAssignments": {"farm1": {"farmer": ["w0"]}}})

    assert tiny_system.registry.find_slot_by_worker("w5") is None
    w5 = tiny_system.world.find_worker("w5")
    assert w5.job_assignment is None and w5.status == IDLE


def test_duplicate_worker_is_bound_once(tiny_system):
    data = {
        "jobAssignments": {"farm1": {"farmer": ["w0"]}, "tc": {"gatherer": ["w0"]}}
    }
    assert tiny_system.deserialize(data) == 1
    assert tiny_system.world.find_worker("w0").job_assignment.job_kind == "farmer"


def test_none_is_a_noop(tiny_system):
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    assert tiny_system.deserialize(None) == 0
    assert tiny_system.registry.count_occupied("farmer") == 1


@pytest.mark.parametrize(
    "data",
    [
        "corrupted",
        ["farm1", "farmer"],
        {"jobAssignments": ["w0"]},
        {"jobAssignments": {"farm1": "w0"}},
        {"jobAssignments": {"farm1": {"farmer": "w0"}}},
    ],
    ids=["string", "list", "section", "building", "worker-list"],
)
def test_malformed_payloads_restore_nothing(tiny_system, data, caplog):
    with caplog.at_level("WARNING", logger="settlejobs"):
        assert tiny_system.deserialize(data) == 0
    assert "malformed" in caplog.text.lower() or "ignoring" in caplog.text.lower()


def test_stale_worker_assignment_is_reset():
    ghost_job = JobAssignment("farm1", "farmer", assigned_day=3)
    worker = mock_worker("w0", status=WORKING, job_assignment=ghost_job)
    system = mock_system()
    system.world.workers.append(worker)
    system.world.buildings.append(mock_building("farm1", "farm"))

    system.deserialize({"jobAssignments": {}})

    assert worker.job_assignment is None
    assert worker.status == IDLE


def test_assigned_day_kept_for_unchanged_binding(tiny_system):
    tiny_system.world.day = 4
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    data = tiny_system.serialize()

    tiny_system.world.day = 9
    tiny_system.deserialize(data)

    assert tiny_system.world.find_worker("w0").job_assignment.assigned_day == 4
