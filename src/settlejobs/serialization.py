"""
Export and repair-on-import of worker↔slot bindings.

Persisted layout::

    {
        "jobAssignments": {building_id: {job_kind: [worker_id, ...]}},
        "availableJobs":  {building_id: {job_kind: slot_count}},
    }

``availableJobs`` is informational. On import capacities are always
recomputed from the *current* buildings, and saved bindings are replayed
into whatever matching slots exist; bindings whose worker or slot is gone
are dropped, never raised.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from settlejobs import logging
from settlejobs.slots import SlotRegistry
from settlejobs.world import IDLE, WORKING, JobAssignment

__all__ = ["serialize", "deserialize", "sync_worker_state"]

log = logging.getLogger(__name__)

ASSIGNMENTS_KEY = "jobAssignments"
CAPACITIES_KEY = "availableJobs"


def serialize(registry: SlotRegistry) -> dict[str, Any]:
    return {
        ASSIGNMENTS_KEY: registry.assignments(),
        CAPACITIES_KEY: registry.capacities(),
    }


def deserialize(data: Any, registry: SlotRegistry, world: Any) -> int:
    """
    Restore bindings from *data* into *registry*.

    Parameters
    ----------
    data : Mapping or None
        Output of :func:`serialize` (possibly from an older world). ``None``
        is a no-op.
    registry : SlotRegistry
        Live slot table; its occupants are cleared before replay.
    world : World
        Current buildings and workers.

    Returns
    -------
    int
        Number of bindings restored.
    """
    if data is None:
        return 0
    if not isinstance(data, Mapping):
        log.warning(f"Ignoring job data of type {type(data).__name__}")
        return 0

    registry.clear_occupants()
    registry.rebuild(world.buildings)

    saved = data.get(ASSIGNMENTS_KEY) or {}
    if not isinstance(saved, Mapping):
        log.warning(f"Ignoring malformed {ASSIGNMENTS_KEY!r} section")
        saved = {}

    live_ids = {getattr(w, "id", None) for w in world.workers}
    restored = dropped = 0
    for building_id, kinds in saved.items():
        if not isinstance(kinds, Mapping):
            log.warning(f"Skipping malformed bindings for building {building_id!r}")
            continue
        for job_kind, worker_ids in kinds.items():
            if not isinstance(worker_ids, list):
                log.warning(
                    f"Skipping malformed worker list for {building_id}/{job_kind}"
                )
                continue
            for wid in worker_ids:
                if wid not in live_ids:
                    dropped += 1
                    continue
                slot = registry.find_vacant_slot(building_id, job_kind)
                if slot is None or not registry.bind(slot, wid):
                    dropped += 1
                    continue
                restored += 1

    sync_worker_state(registry, world)

    if dropped:
        log.info(f"  Restored {restored} job bindings, dropped {dropped} stale ones")
    else:
        log.debug(f"  Restored {restored} job bindings")
    return restored


def sync_worker_state(registry: SlotRegistry, world: Any) -> None:
    """
    Make every worker's status/assignment mirror the slot table.

    Bound workers become ``working`` (keeping their assigned day when the
    binding is unchanged); workers holding an assignment without a slot are
    reset to idle.
    """
    day = int(getattr(world, "day", 0) or 0)
    for worker in world.workers:
        slot = registry.find_slot_by_worker(worker.id)
        current = getattr(worker, "job_assignment", None)
        if slot is None:
            if current is not None:
                worker.job_assignment = None
                worker.status = IDLE
            continue
        if (
            current is None
            or current.building_id != slot.building_id
            or current.job_kind != slot.job_kind
        ):
            worker.job_assignment = JobAssignment(slot.building_id, slot.job_kind, day)
        worker.status = WORKING
