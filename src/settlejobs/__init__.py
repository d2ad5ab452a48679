"""
settlejobs - Job-slot Allocation and Production for Settlement Simulations
==========================================================================

settlejobs keeps a settlement's job slots in step with its buildings,
assigns idle workers to vacant jobs under a resource-scarcity heuristic,
and turns filled jobs into daily resource deltas.

Quick Start
-----------
>>> import settlejobs as sj
>>> world = sj.World(
...     workers=[sj.Worker("w1"), sj.Worker("w2")],
...     buildings=[sj.Building("farm1", "farm")],
...     resources={"food": 2.0},
... )
>>> system = sj.JobSystem.init(world=world, seed=42)
>>> system.rebuild_slots()
6
>>> system.auto_assign()
2
>>> system.daily_production()["food"] > 0
True

Custom configuration via YAML file or keyword overrides:

>>> system = sj.JobSystem.init(config="my_config.yml", target_builder_days=5)  # doctest: +SKIP

Key Concepts
------------
**Slots**
  A building of type T and level L offers ``floor(base(T, j) · L)`` slots
  of each job kind j; four global builder slots always exist.

**Daily pipeline**
  ``JobSystem.step()`` runs: rebuild_slots → cleanup_invalid_assignments →
  auto_assign_workers → sync_building_workers → calc_daily_production.

**Deltas, not mutations**
  Production is returned, never applied to the resource stock.

Public API
----------
JobSystem
    Service facade.
World, Worker, Building, ConstructionSite, JobAssignment
    Reference world objects.
JobCatalog, JobKind
    Static job definitions.
Event, Pipeline, event
    Daily pipeline customization.
Notifier, RecordingNotifier
    Assignment notifications.
"""

from settlejobs import logging  # noqa: F401  (must precede modules that log)
from settlejobs.catalog import JobCatalog, JobKind
from settlejobs.config import Config
from settlejobs.core import Event, Pipeline, event
from settlejobs.jobsystem import JobSystem
from settlejobs.notify import Notifier, NullNotifier, RecordingNotifier
from settlejobs.results import RunResults
from settlejobs.scheduler import AssignmentResult
from settlejobs.world import (
    Building,
    ConstructionSite,
    JobAssignment,
    Worker,
    World,
)

__version__ = "0.1.0"

__all__ = [
    "AssignmentResult",
    "Building",
    "Config",
    "ConstructionSite",
    "Event",
    "JobAssignment",
    "JobCatalog",
    "JobKind",
    "JobSystem",
    "Notifier",
    "NullNotifier",
    "Pipeline",
    "RecordingNotifier",
    "RunResults",
    "Worker",
    "World",
    "event",
]
