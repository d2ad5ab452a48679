"""
Daily tick events: slot reconciliation, assignment and production.

Each event delegates to the matching :class:`~settlejobs.jobsystem.JobSystem`
operation so the same logic is reachable both from the pipeline and from
direct calls by a host game loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from settlejobs import logging
from settlejobs.core.decorators import event

if TYPE_CHECKING:
    from settlejobs.jobsystem import JobSystem


@event
class RebuildSlots:
    """
    Reconcile the slot table with the current building set.

    Rule
    ----
        slots(b, j) = floor(base(type(b), j) · level(b))   for built b, level > 0
        slots(global, builder) = global_builder_slots

    Slots of removed or unbuilt buildings are dropped after releasing their
    occupants.
    """

    def execute(self, system: JobSystem) -> None:
        created = system.rebuild_slots()
        log = self.get_logger()
        if created and log.isEnabledFor(logging.DEBUG):
            log.debug(f"  {created} slots created, {len(system.registry)} total")


@event
class CleanupInvalidAssignments:
    """
    Drop slots whose building vanished and bindings whose worker vanished.

    Workers that lost their slot return to the idle pool.
    """

    def execute(self, system: JobSystem) -> None:
        removed = system.cleanup_invalid_assignments()
        if removed:
            self.get_logger().info(f"  Cleaned up {removed} dangling job bindings")


@event
class AutoAssignWorkers:
    """
    Release, score and greedily fill vacant postings with idle workers.

    Rule
    ----
        order  = sort(postings, by=-score, builder first, (building, kind))
        worker = argmax_w efficiency(w, kind)  over the idle snapshot
    """

    def execute(self, system: JobSystem) -> None:
        system.last_assigned = system.auto_assign()


@event
class SyncBuildingWorkers:
    """
    Rewrite every building's ``workers`` roster from the slot table.

    The global builder pool has no building and is skipped.
    """

    def execute(self, system: JobSystem) -> None:
        system.sync_building_workers()


@event
class CalcDailyProduction:
    """
    Compute today's resource deltas from occupied slots.

    Rule
    ----
        Δr = Σ_slots base_r · eff · season · tech · terrain   (base_r > 0)
        Δr = Σ_slots base_r · eff                             (base_r ≤ 0)

    The deltas are stored on ``system.last_production``; they are never
    applied to the resource stock.
    """

    def execute(self, system: JobSystem) -> None:
        system.last_production = system.daily_production()
        log = self.get_logger()
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                "  Production: "
                + ", ".join(
                    f"{r}={v:+.2f}" for r, v in system.last_production.items() if v
                )
            )
