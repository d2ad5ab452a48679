"""
Employment summaries and multi-day run history.

The summary functions are pure views over the slot table and world; dict
keys follow the persisted camelCase layout so host UIs can consume them
unchanged.

Note: pandas is an optional dependency, only needed for
:meth:`RunResults.to_dataframe`. Install with
``pip install settlejobs[pandas]``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from settlejobs.catalog import JobCatalog, skill_level_from_xp
from settlejobs.efficiency import best_relevant_xp
from settlejobs.slots import SlotRegistry
from settlejobs.typing import ResourceMap
from settlejobs.world import GLOBAL_BUILDING_ID

if TYPE_CHECKING:  # pragma: no cover
    from pandas import DataFrame

__all__ = [
    "employment_stats",
    "job_summary",
    "worker_stats",
    "job_distribution_stats",
    "DayRecord",
    "RunResults",
]

SKILL_TIERS = ("novice", "apprentice", "journeyman", "expert", "master")


def _import_pandas() -> Any:
    try:
        import pandas as pd

        return pd
    except ImportError:  # pragma: no cover
        raise ImportError(
            "pandas is required for DataFrame export. "
            "Install it with: pip install pandas"
        ) from None


def employment_stats(registry: SlotRegistry) -> dict[str, int]:
    """Slot totals and the filled share as a rounded percentage."""
    total = len(registry)
    filled = len(registry.occupied_slots())
    return {
        "totalSlots": total,
        "filledSlots": filled,
        "vacantSlots": total - filled,
        "employmentRate": round(filled / total * 100) if total > 0 else 0,
    }


def job_summary(registry: SlotRegistry, world: Any) -> dict[str, Any]:
    """
    Capacity and occupancy per job kind and per building.

    The global builder pool is reported as a building of type ``village``.
    """
    summary: dict[str, Any] = {
        "totalJobs": 0,
        "totalWorkers": 0,
        "jobTypes": {},
        "buildings": {},
    }
    filled = registry.assignments()
    for bid, kinds in registry.capacities().items():
        building = world.find_building(bid) if bid != GLOBAL_BUILDING_ID else None
        entry = summary["buildings"].setdefault(
            bid,
            {"type": getattr(building, "type", "village"), "jobs": {}},
        )
        for kind, max_workers in kinds.items():
            current = len(filled.get(bid, {}).get(kind, []))
            summary["totalJobs"] += max_workers
            summary["totalWorkers"] += current
            by_kind = summary["jobTypes"].setdefault(
                kind, {"available": 0, "filled": 0}
            )
            by_kind["available"] += max_workers
            by_kind["filled"] += current
            entry["jobs"][kind] = {"current": current, "max": max_workers}
    return summary


def worker_stats(
    registry: SlotRegistry,
    world: Any,
    in_workforce: Callable[[Any, Any], bool],
) -> dict[str, int]:
    """Workforce size, bound workers and the idle remainder."""
    total = sum(1 for w in world.workers if in_workforce(w, world))
    assigned = len(registry.occupied_slots())
    return {
        "total": total,
        "assigned": min(assigned, total),
        "idle": max(0, total - assigned),
    }


def job_distribution_stats(
    registry: SlotRegistry, world: Any, catalog: JobCatalog
) -> dict[str, Any]:
    """Occupied slots per job kind, bucketed by the worker's experience tier."""
    stats: dict[str, Any] = {"jobCounts": {}, "experienceLevels": {}, "totalWorkers": 0}
    for slot in registry.occupied_slots():
        kind = slot.job_kind
        if kind not in stats["jobCounts"]:
            stats["jobCounts"][kind] = 0
            stats["experienceLevels"][kind] = dict.fromkeys(SKILL_TIERS, 0)
        worker = world.find_worker(slot.occupant)
        if worker is None:
            continue
        stats["jobCounts"][kind] += 1
        stats["totalWorkers"] += 1
        xp = best_relevant_xp(worker, catalog.skills_for(kind))
        stats["experienceLevels"][kind][skill_level_from_xp(xp)] += 1
    return stats


@dataclass(slots=True, frozen=True)
class DayRecord:
    day: int
    assigned: int
    filled_slots: int
    total_slots: int
    production: ResourceMap


@dataclass(slots=True)
class RunResults:
    """
    Per-day history collected by :meth:`JobSystem.run`.

    Examples
    --------
    >>> results = system.run(30)
    >>> results.employment_rate[-1]  # doctest: +SKIP
    0.83
    """

    days: list[DayRecord] = field(default_factory=list)

    def append(self, record: DayRecord) -> None:
        self.days.append(record)

    @property
    def employment_rate(self) -> np.ndarray:
        """Filled share of slots per day (0 for days without slots)."""
        filled = np.array([d.filled_slots for d in self.days], dtype=np.float64)
        total = np.array([d.total_slots for d in self.days], dtype=np.float64)
        return np.divide(filled, total, out=np.zeros_like(filled), where=total > 0)

    def production(self, resource: str) -> np.ndarray:
        return np.array(
            [d.production.get(resource, 0.0) for d in self.days], dtype=np.float64
        )

    def totals(self) -> ResourceMap:
        """Summed production per resource across all days."""
        out: ResourceMap = {}
        for d in self.days:
            for r, v in d.production.items():
                out[r] = out.get(r, 0.0) + v
        return out

    def to_dataframe(self) -> DataFrame:
        """One row per day: counters plus one column per resource."""
        pd = _import_pandas()
        rows = [
            {
                "day": d.day,
                "assigned": d.assigned,
                "filled_slots": d.filled_slots,
                "total_slots": d.total_slots,
                **d.production,
            }
            for d in self.days
        ]
        return pd.DataFrame(rows).set_index("day") if rows else pd.DataFrame()

    def __len__(self) -> int:
        return len(self.days)

    def __repr__(self) -> str:
        return f"RunResults(n_days={len(self.days)})"
