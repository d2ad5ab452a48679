"""
External collaborators read (and narrowly written) by the engine.

The engine reads these objects by attribute only. The dataclasses below are
the reference implementations used by :class:`~settlejobs.jobsystem.JobSystem`,
the demo CLI and the test-suite; host games may pass their own objects as
long as they expose the same attributes.

Write access is limited to ``Worker.status`` and ``Worker.job_assignment``
(through the scheduler's binding helpers) and ``Building.workers`` (roster
sync).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from settlejobs.typing import BuildingId, JobKindId, ResourceMap, WorkerId

GLOBAL_BUILDING_ID: BuildingId = "global"

IDLE = "idle"
WORKING = "working"


@dataclass(slots=True)
class JobAssignment:
    """Where a worker is bound, mirrored from its slot."""

    building_id: BuildingId
    job_kind: JobKindId
    assigned_day: int = 0


@dataclass(slots=True)
class Worker:
    """A settler that can hold at most one job slot."""

    id: WorkerId
    age: float = 25
    health: float = 100
    happiness: float = 75
    status: str = IDLE
    role: str = "villager"
    experience: dict[str, float] = field(default_factory=dict)
    skills: dict[str, float] = field(default_factory=dict)
    job_assignment: JobAssignment | None = None


@dataclass(slots=True)
class Building:
    """A placed building; slots exist only while ``built`` and ``level > 0``."""

    id: BuildingId
    type: str
    level: float = 1
    built: bool = True
    terrain: str | None = None
    efficiency_multiplier: float = 1.0
    workers: list[WorkerId] = field(default_factory=list)


@dataclass(slots=True)
class ConstructionSite:
    id: str
    points_remaining: float


@dataclass(slots=True)
class World:
    """
    Mutable world snapshot handed to the engine by the driving loop.

    Attributes
    ----------
    workers : list
        Live population, each shaped like :class:`Worker`.
    buildings : list
        Placed buildings, each shaped like :class:`Building`.
    resources : dict
        Resource stock; read for needs, never written by the engine.
    season : str
        Current season name (``Spring``, ``Summer``, ...).
    day : int
        Current simulated day, stamped on new assignments.
    tech_bonuses : dict
        Tech key → additive production bonus (0.2 = +20 %).
    construction_sites : list
        Active construction sites, in queue order.
    monarch_id : str or None
        Governing monarch; never auto-assigned.
    """

    workers: list[Any] = field(default_factory=list)
    buildings: list[Any] = field(default_factory=list)
    resources: ResourceMap = field(default_factory=dict)
    season: str = "Spring"
    day: int = 0
    tech_bonuses: dict[str, float] = field(default_factory=dict)
    construction_sites: list[ConstructionSite] = field(default_factory=list)
    monarch_id: WorkerId | None = None

    def find_worker(self, worker_id: WorkerId) -> Any | None:
        for w in self.workers:
            if getattr(w, "id", None) == worker_id:
                return w
        return None

    def find_building(self, building_id: BuildingId) -> Any | None:
        for b in self.buildings:
            if getattr(b, "id", None) == building_id:
                return b
        return None

    @property
    def population(self) -> int:
        return len(self.workers)
