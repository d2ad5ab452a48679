"""
Authoritative job-slot table.

Slots are bound to buildings (``floor(base_per_level × level)`` per job
kind) plus a fixed pool of global builder slots that exists independent
of any building. The registry is reconciled against the live building set
by :meth:`SlotRegistry.rebuild`; it never raises on malformed building
data, it logs and skips.

Slot ids are ``"{building_id}_{job_kind}_{slot_index}"`` with the index
counted per (building, job kind), so ids are stable across level-ups.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from settlejobs import logging
from settlejobs.notify import (
    JOB_ASSIGNED,
    JOB_UNASSIGNED,
    SLOT_CREATED,
    Notifier,
    NullNotifier,
    safe_emit,
)
from settlejobs.typing import (
    AssignmentMap,
    BuildingId,
    CapacityMap,
    JobKindId,
    SlotId,
    WorkerId,
)
from settlejobs.world import GLOBAL_BUILDING_ID

__all__ = ["JobSlot", "SlotRegistry", "ReleaseFn"]

log = logging.getLogger(__name__)

GLOBAL_BUILDER_KIND: JobKindId = "builder"

ReleaseFn = Callable[[WorkerId], None]


@dataclass(slots=True)
class JobSlot:
    """One schedulable position, occupiable by a single worker."""

    id: SlotId
    building_id: BuildingId
    job_kind: JobKindId
    slot_index: int
    occupant: WorkerId | None = None

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None

    @property
    def is_global(self) -> bool:
        return self.building_id == GLOBAL_BUILDING_ID


class SlotRegistry:
    """
    Slot table keyed by slot id, in creation order.

    Parameters
    ----------
    building_jobs : Mapping[str, Mapping[str, float]]
        Building type → job kind → base slots per level.
    global_builder_slots : int
        Size of the building-independent builder pool.
    notifier : Notifier, optional
        Receives ``job:slot_created``, ``job:assigned`` and
        ``job:unassigned`` events.
    """

    __slots__ = ("_slots", "_desired", "_building_jobs", "_n_global", "_notifier")

    def __init__(
        self,
        building_jobs: Mapping[str, Mapping[JobKindId, float]],
        *,
        global_builder_slots: int = 4,
        notifier: Notifier | None = None,
    ) -> None:
        self._slots: dict[SlotId, JobSlot] = {}
        self._desired: dict[tuple[BuildingId, JobKindId], int] = {}
        self._building_jobs = building_jobs
        self._n_global = global_builder_slots
        self._notifier: Notifier = notifier or NullNotifier()

    @staticmethod
    def slot_id(building_id: BuildingId, job_kind: JobKindId, index: int) -> SlotId:
        return f"{building_id}_{job_kind}_{index}"

    # reconciliation
    # ---------------------------------------------------------------------
    def rebuild(
        self, buildings: Iterable[Any], release: ReleaseFn | None = None
    ) -> int:
        """
        Reconcile the slot table with *buildings*.

        Idempotent: seeds the global builder pool, removes slots whose
        building is gone or unbuilt (releasing occupants first), tops every
        live building up to its desired count per job kind, and trims
        surplus *vacant* slots after a level decrease. Occupied slots are
        never evicted by a level change.

        Returns
        -------
        int
            Number of slots created.
        """
        created = self._seed_global_slots()

        live: dict[BuildingId, Any] = {}
        for building in buildings:
            bid = _building_key(building)
            if bid is None:
                continue
            if _is_active(building):
                live[bid] = building

        removed = self.remove_slots_where(
            lambda s: not s.is_global and s.building_id not in live, release
        )

        for building in live.values():
            created += self.create_slots_for_building(building)
            removed += self._trim_surplus(building)

        if (created or removed) and log.isEnabledFor(logging.DEBUG):
            log.debug(
                f"Slot rebuild: {created} created, {removed} removed, "
                f"{len(self._slots)} total"
            )
        return created

    def create_slots_for_building(self, building: Any) -> int:
        """
        Create the slots one completed building is entitled to.

        Idempotent: a job kind that already has its desired slot count
        (occupied surplus included) gets nothing new. Missing slots take
        the lowest free indices.

        Returns
        -------
        int
            Number of slots created.
        """
        bid = _building_key(building)
        if bid is None:
            return 0
        desired = self.desired_counts(building)
        created = 0
        for kind, count in desired.items():
            self._desired[(bid, kind)] = count
            have = {
                s.slot_index
                for s in self._slots.values()
                if s.building_id == bid and s.job_kind == kind
            }
            idx = 0
            while len(have) < count:
                if idx not in have:
                    self._add(JobSlot(self.slot_id(bid, kind, idx), bid, kind, idx))
                    have.add(idx)
                    created += 1
                idx += 1
        return created

    def desired_counts(self, building: Any) -> dict[JobKindId, int]:
        """``floor(base × level)`` per job kind for *building*."""
        btype = getattr(building, "type", None)
        jobs = self._building_jobs.get(btype, {}) if btype is not None else {}
        if not jobs:
            return {}
        try:
            level = float(getattr(building, "level", 0) or 0)
        except (TypeError, ValueError):
            log.warning(
                f"Building {getattr(building, 'id', None)!r} has non-numeric "
                f"level {getattr(building, 'level', None)!r}; skipped"
            )
            return {}
        return {kind: max(0, math.floor(base * level)) for kind, base in jobs.items()}

    def _seed_global_slots(self) -> int:
        created = 0
        for idx in range(self._n_global):
            sid = self.slot_id(GLOBAL_BUILDING_ID, GLOBAL_BUILDER_KIND, idx)
            if sid not in self._slots:
                self._add(JobSlot(sid, GLOBAL_BUILDING_ID, GLOBAL_BUILDER_KIND, idx))
                created += 1
        return created

    def _trim_surplus(self, building: Any) -> int:
        """
        Drop vacant slots, highest index first, while a job kind holds more
        slots than its desired count. Occupied surplus stays until vacated.
        """
        desired = self.desired_counts(building)
        by_kind: dict[JobKindId, list[JobSlot]] = {}
        for slot in self._slots.values():
            if slot.building_id == building.id:
                by_kind.setdefault(slot.job_kind, []).append(slot)

        trimmed = 0
        for kind, slots in by_kind.items():
            excess = len(slots) - desired.get(kind, 0)
            for slot in sorted(slots, key=lambda s: s.slot_index, reverse=True):
                if excess <= 0:
                    break
                if slot.is_occupied:
                    continue
                del self._slots[slot.id]
                excess -= 1
                trimmed += 1
        return trimmed

    def _add(self, slot: JobSlot) -> None:
        self._slots[slot.id] = slot
        safe_emit(
            self._notifier,
            SLOT_CREATED,
            {
                "slot_id": slot.id,
                "building_id": slot.building_id,
                "job_kind": slot.job_kind,
            },
        )

    def remove_slots_where(
        self, predicate: Callable[[JobSlot], bool], release: ReleaseFn | None = None
    ) -> int:
        """Remove matching slots, releasing any occupant first."""
        doomed = [s for s in self._slots.values() if predicate(s)]
        for slot in doomed:
            if slot.occupant is not None:
                if release is not None:
                    release(slot.occupant)
                self.unbind(slot)
            self._slots.pop(slot.id, None)
        return len(doomed)

    # occupant mutation
    # ---------------------------------------------------------------------
    def bind(self, slot: JobSlot, worker_id: WorkerId) -> bool:
        """Set *worker_id* as occupant; refuses occupied slots and double jobs."""
        if slot.is_occupied or slot.id not in self._slots:
            return False
        if self.find_slot_by_worker(worker_id) is not None:
            return False
        slot.occupant = worker_id
        safe_emit(self._notifier, JOB_ASSIGNED, _payload(slot, worker_id))
        return True

    def unbind(self, slot: JobSlot) -> WorkerId | None:
        """
        Clear the occupant and return it (None if already vacant).

        A vacated slot that sits above its building's capacity (kept only
        because it was occupied through a level decrease) is dropped.
        """
        wid = slot.occupant
        if wid is None:
            return None
        slot.occupant = None
        safe_emit(self._notifier, JOB_UNASSIGNED, _payload(slot, wid))

        want = self._desired.get((slot.building_id, slot.job_kind))
        if want is not None and slot.id in self._slots:
            have = sum(
                1
                for s in self._slots.values()
                if s.building_id == slot.building_id and s.job_kind == slot.job_kind
            )
            if have > want:
                del self._slots[slot.id]
        return wid

    def clear_occupants(self) -> None:
        """Vacate every slot without notifications (restore path)."""
        for slot in self._slots.values():
            slot.occupant = None

    # queries
    # ---------------------------------------------------------------------
    def get(self, slot_id: SlotId) -> JobSlot | None:
        return self._slots.get(slot_id)

    def all(self) -> list[JobSlot]:
        return list(self._slots.values())

    def slots_for_building(self, building_id: BuildingId) -> list[JobSlot]:
        return [s for s in self._slots.values() if s.building_id == building_id]

    def vacant_slots_for_building(self, building_id: BuildingId) -> list[JobSlot]:
        return [s for s in self.slots_for_building(building_id) if not s.is_occupied]

    def slots_by_job_kind(self, job_kind: JobKindId) -> list[JobSlot]:
        return [s for s in self._slots.values() if s.job_kind == job_kind]

    def vacant_slots(self) -> list[JobSlot]:
        return [s for s in self._slots.values() if not s.is_occupied]

    def occupied_slots(self) -> list[JobSlot]:
        return [s for s in self._slots.values() if s.is_occupied]

    def find_slot_by_worker(self, worker_id: WorkerId) -> JobSlot | None:
        for slot in self._slots.values():
            if slot.occupant == worker_id:
                return slot
        return None

    def find_vacant_slot(
        self, building_id: BuildingId, job_kind: JobKindId
    ) -> JobSlot | None:
        for slot in self._slots.values():
            if (
                slot.building_id == building_id
                and slot.job_kind == job_kind
                and not slot.is_occupied
            ):
                return slot
        return None

    def has_slot(self, building_id: BuildingId, job_kind: JobKindId) -> bool:
        return any(
            s.building_id == building_id and s.job_kind == job_kind
            for s in self._slots.values()
        )

    def count_occupied(self, job_kind: JobKindId) -> int:
        return sum(1 for s in self.slots_by_job_kind(job_kind) if s.is_occupied)

    def capacity(self, job_kind: JobKindId) -> int:
        return len(self.slots_by_job_kind(job_kind))

    def missing(self, job_kind: JobKindId) -> int:
        return max(0, self.capacity(job_kind) - self.count_occupied(job_kind))

    def assignments(self) -> AssignmentMap:
        """Building → job kind → occupant ids."""
        out: AssignmentMap = {}
        for slot in self._slots.values():
            if slot.occupant is None:
                continue
            out.setdefault(slot.building_id, {}).setdefault(slot.job_kind, []).append(
                slot.occupant
            )
        return out

    def capacities(self) -> CapacityMap:
        """Building → job kind → slot count."""
        out: CapacityMap = {}
        for slot in self._slots.values():
            by_kind = out.setdefault(slot.building_id, {})
            by_kind[slot.job_kind] = by_kind.get(slot.job_kind, 0) + 1
        return out

    def __iter__(self) -> Iterator[JobSlot]:
        return iter(list(self._slots.values()))

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot_id: object) -> bool:
        return slot_id in self._slots

    def __repr__(self) -> str:
        n_occ = sum(1 for s in self._slots.values() if s.is_occupied)
        return f"SlotRegistry(n_slots={len(self._slots)}, n_occupied={n_occ})"


def _building_key(building: Any) -> BuildingId | None:
    bid = getattr(building, "id", None)
    btype = getattr(building, "type", None)
    if bid is None or btype is None:
        log.warning(f"Skipping malformed building {building!r} (missing id or type)")
        return None
    return bid


def _is_active(building: Any) -> bool:
    try:
        return bool(getattr(building, "built", False)) and float(building.level) > 0
    except (TypeError, ValueError):
        log.warning(
            f"Building {building.id!r} has non-numeric level "
            f"{getattr(building, 'level', None)!r}; skipped"
        )
        return False


def _payload(slot: JobSlot, worker_id: WorkerId) -> dict[str, Any]:
    return {
        "slot_id": slot.id,
        "worker_id": worker_id,
        "building_id": slot.building_id,
        "job_kind": slot.job_kind,
    }
