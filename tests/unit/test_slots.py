"""Tests for the slot table and its reconciliation against buildings."""

import pytest

from settlejobs.notify import (
    JOB_ASSIGNED,
    JOB_UNASSIGNED,
    SLOT_CREATED,
    RecordingNotifier,
)
from settlejobs.slots import SlotRegistry
from tests.helpers.factories import mock_building

BUILDING_JOBS = {
    "farm": {"farmer": 2},
    "townCenter": {"gatherer": 2},
    "grandLibrary": {"scholar": 1.5},
    "buildersHut": {"builder": 4, "foreman": 1},
}


@pytest.fixture
def registry() -> SlotRegistry:
    return SlotRegistry(BUILDING_JOBS, global_builder_slots=4)


def _ids(registry, building_id):
    return sorted(s.id for s in registry.slots_for_building(building_id))


def test_rebuild_seeds_global_builders_and_building_slots(registry):
    created = registry.rebuild([mock_building("farm1", "farm")])

    assert created == 6
    assert _ids(registry, "global") == [f"global_builder_{i}" for i in range(4)]
    assert _ids(registry, "farm1") == ["farm1_farmer_0", "farm1_farmer_1"]
    assert all(s.is_global for s in registry.slots_for_building("global"))


def test_rebuild_is_idempotent(registry):
    buildings = [mock_building("farm1", "farm"), mock_building("tc", "townCenter")]
    registry.rebuild(buildings)
    before = [s.id for s in registry]

    assert registry.rebuild(buildings) == 0
    assert [s.id for s in registry] == before


def test_global_pool_exists_without_buildings(registry):
    registry.rebuild([])
    assert registry.capacity("builder") == 4
    assert len(registry) == 4


def test_level_up_adds_slots_with_stable_ids(registry):
    farm = mock_building("farm1", "farm")
    registry.rebuild([farm])
    registry.bind(registry.get("farm1_farmer_0"), "w0")

    farm.level = 2
    assert registry.rebuild([farm]) == 2
    assert _ids(registry, "farm1") == [f"farm1_farmer_{i}" for i in range(4)]
    assert registry.get("farm1_farmer_0").occupant == "w0"


def test_level_down_trims_only_vacant_surplus(registry):
    farm = mock_building("farm1", "farm", level=2)
    registry.rebuild([farm])
    registry.bind(registry.get("farm1_farmer_3"), "w3")

    farm.level = 1
    registry.rebuild([farm])

    assert _ids(registry, "farm1") == ["farm1_farmer_0", "farm1_farmer_3"]
    assert registry.get("farm1_farmer_3").occupant == "w3"
    assert registry.rebuild([farm]) == 0
    assert _ids(registry, "farm1") == ["farm1_farmer_0", "farm1_farmer_3"]


def test_level_down_leaves_no_vacancy_beside_occupied_surplus(registry):
    farm = mock_building("farm1", "farm", level=2)
    registry.rebuild([farm])
    registry.bind(registry.get("farm1_farmer_0"), "w0")
    registry.bind(registry.get("farm1_farmer_3"), "w3")

    farm.level = 1
    registry.rebuild([farm])

    assert _ids(registry, "farm1") == ["farm1_farmer_0", "farm1_farmer_3"]
    assert registry.vacant_slots_for_building("farm1") == []

    # once the surplus worker leaves, capacity is back to floor(2 × 1)
    registry.unbind(registry.get("farm1_farmer_3"))
    registry.rebuild([farm])
    assert registry.capacity("farmer") == 2
    assert [s.id for s in registry.vacant_slots_for_building("farm1")] == [
        "farm1_farmer_3"
    ]


def test_unbinding_occupied_surplus_drops_the_slot(registry):
    farm = mock_building("farm1", "farm", level=2)
    registry.rebuild([farm])
    for i in range(4):
        registry.bind(registry.get(f"farm1_farmer_{i}"), f"w{i}")
    farm.level = 1
    registry.rebuild([farm])
    assert registry.capacity("farmer") == 4

    assert registry.unbind(registry.get("farm1_farmer_1")) == "w1"
    assert "farm1_farmer_1" not in registry
    registry.unbind(registry.get("farm1_farmer_2"))
    assert registry.capacity("farmer") == 2

    # back at capacity: a vacated slot is kept for the next worker
    registry.unbind(registry.get("farm1_farmer_3"))
    assert [s.id for s in registry.vacant_slots_for_building("farm1")] == [
        "farm1_farmer_3"
    ]


def test_level_down_refills_lowest_free_index(registry):
    farm = mock_building("farm1", "farm", level=2)
    registry.rebuild([farm])
    registry.bind(registry.get("farm1_farmer_3"), "w3")
    farm.level = 1
    registry.rebuild([farm])
    registry.unbind(registry.get("farm1_farmer_3"))

    farm.level = 2
    assert registry.rebuild([farm]) == 2
    assert _ids(registry, "farm1") == [f"farm1_farmer_{i}" for i in range(4)]


def test_fractional_level_is_floored_not_clamped(registry):
    farm = mock_building("farm1", "farm", level=0.5)
    assert registry.desired_counts(farm) == {"farmer": 1}
    registry.rebuild([farm])
    assert registry.capacity("farmer") == 1

    farm.level = 0.4
    registry.rebuild([farm])
    assert registry.capacity("farmer") == 0


def test_fractional_base_is_floored(registry):
    library = mock_building("lib", "grandLibrary")
    registry.rebuild([library])
    assert registry.capacity("scholar") == 1

    library.level = 3
    registry.rebuild([library])
    assert registry.capacity("scholar") == 4


@pytest.mark.parametrize(
    "overrides", [{"built": False}, {"level": 0}], ids=["unbuilt", "level-0"]
)
def test_inactive_buildings_have_no_slots(registry, overrides):
    registry.rebuild([mock_building("farm1", "farm", **overrides)])
    assert registry.slots_for_building("farm1") == []


def test_unknown_building_type_has_no_slots(registry):
    assert registry.rebuild([mock_building("x", "watchtower")]) == 4
    assert registry.slots_for_building("x") == []


def test_removed_building_releases_occupants(registry):
    farm = mock_building("farm1", "farm")
    registry.rebuild([farm])
    registry.bind(registry.get("farm1_farmer_1"), "w7")

    released = []
    registry.rebuild([], release=released.append)

    assert released == ["w7"]
    assert registry.slots_for_building("farm1") == []
    assert registry.find_slot_by_worker("w7") is None


def test_malformed_buildings_are_skipped(registry, caplog):
    class NoType:
        id = "ghost"

    bad_level = mock_building("farm2", "farm", level="high")
    with caplog.at_level("WARNING", logger="settlejobs"):
        registry.rebuild([NoType(), bad_level, mock_building("farm1", "farm")])

    assert registry.slots_for_building("ghost") == []
    assert registry.slots_for_building("farm2") == []
    assert registry.capacity("farmer") == 2
    assert "malformed" in caplog.text
    assert "non-numeric level" in caplog.text


def test_create_slots_for_building_is_idempotent(registry):
    hut = mock_building("hut1", "buildersHut")
    assert registry.create_slots_for_building(hut) == 5
    assert registry.create_slots_for_building(hut) == 0
    assert registry.desired_counts(hut) == {"builder": 4, "foreman": 1}


def test_bind_rules(registry):
    registry.rebuild([mock_building("farm1", "farm")])
    first, second = registry.slots_for_building("farm1")

    assert registry.bind(first, "w0")
    assert not registry.bind(first, "w1"), "occupied slot"
    assert not registry.bind(second, "w0"), "worker already holds a job"
    assert registry.find_slot_by_worker("w0") is first
    assert registry.count_occupied("farmer") == 1
    assert registry.missing("farmer") == 1


def test_unbind_returns_previous_occupant(registry):
    registry.rebuild([mock_building("farm1", "farm")])
    slot = registry.get("farm1_farmer_0")
    registry.bind(slot, "w0")

    assert registry.unbind(slot) == "w0"
    assert registry.unbind(slot) is None
    assert not slot.is_occupied


def test_vacancy_queries(registry):
    registry.rebuild([mock_building("farm1", "farm")])
    registry.bind(registry.get("farm1_farmer_0"), "w0")

    assert [s.id for s in registry.vacant_slots_for_building("farm1")] == [
        "farm1_farmer_1"
    ]
    assert registry.find_vacant_slot("farm1", "farmer").id == "farm1_farmer_1"
    assert registry.find_vacant_slot("farm1", "builder") is None
    assert registry.has_slot("farm1", "farmer")
    assert not registry.has_slot("farm1", "builder")
    assert len(registry.occupied_slots()) == 1
    assert "farm1_farmer_0" in registry


def test_assignment_and_capacity_maps(registry):
    registry.rebuild([mock_building("farm1", "farm")])
    registry.bind(registry.get("farm1_farmer_1"), "w1")
    registry.bind(registry.get("global_builder_0"), "w2")

    assert registry.assignments() == {
        "farm1": {"farmer": ["w1"]},
        "global": {"builder": ["w2"]},
    }
    assert registry.capacities() == {"global": {"builder": 4}, "farm1": {"farmer": 2}}


def test_clear_occupants_is_silent():
    notifier = RecordingNotifier()
    registry = SlotRegistry(BUILDING_JOBS, notifier=notifier)
    registry.rebuild([])
    registry.bind(registry.get("global_builder_0"), "w0")
    notifier.clear()

    registry.clear_occupants()

    assert registry.occupied_slots() == []
    assert notifier.events == []


def test_notifications():
    notifier = RecordingNotifier()
    registry = SlotRegistry(BUILDING_JOBS, global_builder_slots=1, notifier=notifier)
    registry.rebuild([mock_building("farm1", "farm")])
    slot = registry.get("farm1_farmer_0")
    registry.bind(slot, "w0")
    registry.unbind(slot)

    assert notifier.topics() == [SLOT_CREATED] * 3 + [JOB_ASSIGNED, JOB_UNASSIGNED]
    assert notifier.events[3][1] == {
        "slot_id": "farm1_farmer_0",
        "worker_id": "w0",
        "building_id": "farm1",
        "job_kind": "farmer",
    }


def test_failing_listener_does_not_break_binding(caplog):
    class Broken:
        def emit(self, topic, payload):
            raise RuntimeError("listener down")

    registry = SlotRegistry(BUILDING_JOBS, notifier=Broken())
    with caplog.at_level("ERROR", logger="settlejobs"):
        registry.rebuild([])
        assert registry.bind(registry.get("global_builder_0"), "w0")

    assert registry.find_slot_by_worker("w0") is not None
    assert "Notifier failed" in caplog.text
