"""
Built-in pipeline events.

Importing this package registers every event under its snake_case name so
that pipelines can refer to them from YAML.

Events
------
rebuild_slots
    Reconcile slots with the building set.
cleanup_invalid_assignments
    Drop slots and bindings that reference missing buildings or workers.
auto_assign_workers
    Release/score/match pass.
sync_building_workers
    Mirror slot occupants into building rosters.
calc_daily_production
    Compute the day's resource deltas.
"""

from settlejobs.events.daily import (
    AutoAssignWorkers,
    CalcDailyProduction,
    CleanupInvalidAssignments,
    RebuildSlots,
    SyncBuildingWorkers,
)

__all__ = [
    "AutoAssignWorkers",
    "CalcDailyProduction",
    "CleanupInvalidAssignments",
    "RebuildSlots",
    "SyncBuildingWorkers",
]
