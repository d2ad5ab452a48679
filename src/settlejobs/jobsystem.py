"""
Service facade: one object owning the slot table, scheduler and production
model for one settlement.

There are no module-level singletons; a host game builds a
:class:`JobSystem` once (``JobSystem.init``) and passes it to its game loop
and command handlers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from numpy.random import Generator, default_rng

import settlejobs.events  # noqa: F401 - needed to register events
from settlejobs import logging
from settlejobs.catalog import JobCatalog
from settlejobs.config import Config, ConfigValidator
from settlejobs.core.default_pipeline import create_default_pipeline
from settlejobs.core.pipeline import Pipeline
from settlejobs.notify import Notifier, NullNotifier
from settlejobs.production import ProductionBreakdown, ProductionModel
from settlejobs.results import (
    DayRecord,
    RunResults,
    employment_stats,
    job_distribution_stats,
    job_summary,
    worker_stats,
)
from settlejobs.scheduler import (
    AssignmentResult,
    AssignmentScheduler,
    Posting,
    reset_worker,
)
from settlejobs.serialization import deserialize, serialize, sync_worker_state
from settlejobs.slots import SlotRegistry
from settlejobs.typing import BuildingId, JobKindId, ResourceMap, WorkerId
from settlejobs.world import GLOBAL_BUILDING_ID, World

__all__ = ["JobSystem"]

log = logging.getLogger(__name__)

_TUPLE_FIELDS = (
    "excluded_roles",
    "excluded_statuses",
    "food_release_kinds",
    "builder_release_order",
    "tracked_resources",
)


# helpers
# ---------------------------------------------------------------------------
def _read_yaml(obj: str | Path | Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a plain dict – {} if *obj* is None."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    p = Path(obj)
    with p.open("rt", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"config root must be mapping, got {type(data)!r}")
    return dict(data)


def _package_defaults() -> dict[str, Any]:
    """Load settlejobs/defaults.yml"""
    txt = resources.files("settlejobs").joinpath("defaults.yml").read_text()
    return yaml.safe_load(txt) or {}


class JobSystem:
    """
    Job-slot allocation and production engine for one settlement.

    Attributes
    ----------
    config : Config
        Validated, immutable parameters.
    catalog : JobCatalog
        Job definitions.
    world : World
        Workers, buildings, resources and calendar the engine reads.
    registry : SlotRegistry
        Authoritative slot table.
    scheduler : AssignmentScheduler
        Release/score/match logic and manual overrides.
    production : ProductionModel
        Daily resource deltas.
    pipeline : Pipeline
        Events run by :meth:`step`.
    rng : numpy.random.Generator
        Drives the gatherer's random resource draw.
    last_production : dict
        Deltas computed by the most recent ``calc_daily_production``.
    last_assigned : int
        Bindings made by the most recent ``auto_assign_workers``.
    """

    def __init__(
        self,
        config: Config,
        catalog: JobCatalog,
        *,
        world: World | None = None,
        rng: Generator | None = None,
        notifier: Notifier | None = None,
        pipeline: Pipeline | None = None,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.world = world if world is not None else World()
        self.rng = rng if rng is not None else default_rng()
        self.notifier = notifier if notifier is not None else NullNotifier()
        self.registry = SlotRegistry(
            config.building_jobs,
            global_builder_slots=config.global_builder_slots,
            notifier=self.notifier,
        )
        self.scheduler = AssignmentScheduler(self.registry, catalog, config)
        self.production = ProductionModel(
            catalog,
            season_multipliers=config.season_multipliers,
            terrain_bonuses=config.terrain_bonuses,
            tracked_resources=config.tracked_resources,
            rng=self.rng,
            food_upkeep_per_worker=config.food_upkeep_per_worker,
        )
        self.pipeline = pipeline if pipeline is not None else create_default_pipeline()
        self.last_production: ResourceMap = {}
        self.last_assigned = 0

    # Constructor
    # ---------------------------------------------------------------------
    @classmethod
    def init(
        cls,
        config: str | Path | Mapping[str, Any] | None = None,
        *,
        world: World | None = None,
        notifier: Notifier | None = None,
        **overrides: Any,  # anything here wins last
    ) -> JobSystem:
        """
        Build a JobSystem.

        Order of precedence (later overrides earlier):

            1. package defaults  (settlejobs/defaults.yml)
            2. *config*  (Path / str / Mapping / None)
            3. explicit keyword arguments (**overrides)

        Raises
        ------
        ValueError
            On invalid parameters, unknown keys, or a malformed job catalog.
        """
        cfg_dict: dict[str, Any] = _package_defaults()
        cfg_dict.update(_read_yaml(config))
        cfg_dict.update(overrides)

        ConfigValidator.validate_config(cfg_dict)

        catalog_path = cfg_dict.pop("catalog_path", None)
        pipeline_path = cfg_dict.pop("pipeline_path", None)
        if catalog_path is not None:
            ConfigValidator.validate_path("catalog_path", catalog_path)
        if pipeline_path is not None:
            ConfigValidator.validate_path("pipeline_path", pipeline_path)

        logging.configure(cfg_dict.pop("logging", None) or {})

        seed_val = cfg_dict.pop("seed", None)
        rng: Generator = (
            seed_val if isinstance(seed_val, Generator) else default_rng(seed_val)
        )

        known = {f.name for f in fields(Config)}
        unknown = sorted(set(cfg_dict) - known)
        if unknown:
            raise ValueError(f"Unknown config parameter(s): {', '.join(unknown)}")

        catalog = JobCatalog.from_yaml(catalog_path)
        cfg_dict["building_jobs"] = catalog.filter_building_jobs(
            cfg_dict.get("building_jobs") or {}
        )
        for key in _TUPLE_FIELDS:
            cfg_dict[key] = tuple(cfg_dict[key])

        pipeline = (
            Pipeline.from_yaml(pipeline_path) if pipeline_path is not None else None
        )

        return cls(
            Config(**cfg_dict),
            catalog,
            world=world,
            rng=rng,
            notifier=notifier,
            pipeline=pipeline,
        )

    # slot table
    # ---------------------------------------------------------------------
    def rebuild_slots(self) -> int:
        """Reconcile slots with ``world.buildings``; returns slots created."""
        return self.registry.rebuild(self.world.buildings, release=self._release_worker)

    def create_slots_for_building(self, building: Any) -> int:
        return self.registry.create_slots_for_building(building)

    def on_building_completed(self, building: Any) -> int:
        """Add the new building's slots and run an assignment pass."""
        self.create_slots_for_building(building)
        return self.auto_assign()

    def cleanup_invalid_assignments(self) -> int:
        """
        Remove slots of vanished buildings and bindings of vanished workers.

        Returns
        -------
        int
            Number of bindings dropped.
        """
        building_ids = {getattr(b, "id", None) for b in self.world.buildings}
        building_ids.add(GLOBAL_BUILDING_ID)
        dropped = sum(
            1
            for s in self.registry
            if s.building_id not in building_ids and s.occupant is not None
        )
        self.registry.remove_slots_where(
            lambda s: s.building_id not in building_ids, self._release_worker
        )

        worker_ids = {getattr(w, "id", None) for w in self.world.workers}
        for slot in self.registry.occupied_slots():
            if slot.occupant not in worker_ids:
                self.registry.unbind(slot)
                dropped += 1

        sync_worker_state(self.registry, self.world)
        return dropped

    def sync_building_workers(self) -> None:
        """Rewrite each building's ``workers`` roster from the slot table."""
        rosters: dict[BuildingId, list[WorkerId]] = {}
        for slot in self.registry.occupied_slots():
            if slot.building_id != GLOBAL_BUILDING_ID:
                rosters.setdefault(slot.building_id, []).append(slot.occupant)
        for building in self.world.buildings:
            building.workers = rosters.get(getattr(building, "id", None), [])

    # assignment
    # ---------------------------------------------------------------------
    def assign_worker_to_job(
        self, worker_id: WorkerId, building_id: BuildingId, job_kind: JobKindId
    ) -> AssignmentResult:
        result = self.scheduler.assign(worker_id, building_id, job_kind, self.world)
        if not result:
            log.debug(
                f"  Rejected {worker_id} → {building_id}/{job_kind}: {result.reason}"
            )
        return result

    def remove_worker_from_job(self, worker_id: WorkerId) -> bool:
        return self.scheduler.unassign(worker_id, self.world)

    def auto_assign(self) -> int:
        return self.scheduler.auto_assign(self.world)

    def release_workers_from_job_kind(
        self, job_kind: JobKindId, max_release: float = float("inf")
    ) -> int:
        return self.scheduler.release_workers_from_job_kind(
            job_kind, max_release, self.world
        )

    def compute_desired_builders(self, target_days: float | None = None) -> int:
        return self.scheduler.compute_desired_builders(self.world, target_days)

    def fill_all_builders(self) -> int:
        return self.scheduler.fill_all_builders(self.world)

    def maximize_builder_assignments(self) -> int:
        return self.scheduler.maximize_builder_assignments(self.world)

    def available_postings(self) -> list[Posting]:
        return self.scheduler.available_postings(self.world)

    # production
    # ---------------------------------------------------------------------
    def daily_production(self) -> ResourceMap:
        return self.production.daily_production(self.registry, self.world)

    def detailed_daily_production(self) -> ProductionBreakdown:
        self.cleanup_invalid_assignments()
        return self.production.detailed_daily_production(self.registry, self.world)

    def total_consumption(self) -> ResourceMap:
        return self.production.total_consumption(self.registry, self.world)

    # persistence
    # ---------------------------------------------------------------------
    def serialize(self) -> dict[str, Any]:
        return serialize(self.registry)

    def deserialize(self, data: Any) -> int:
        return deserialize(data, self.registry, self.world)

    # stats
    # ---------------------------------------------------------------------
    def employment_stats(self) -> dict[str, int]:
        return employment_stats(self.registry)

    def job_summary(self) -> dict[str, Any]:
        return job_summary(self.registry, self.world)

    def worker_stats(self) -> dict[str, int]:
        return worker_stats(self.registry, self.world, self.scheduler.in_workforce)

    def job_distribution_stats(self) -> dict[str, Any]:
        return job_distribution_stats(self.registry, self.world, self.catalog)

    # public API
    # ---------------------------------------------------------------------
    def step(self) -> None:
        """
        Advance the settlement by one day using the event pipeline.

        The pipeline can be customized by users before calling step().
        """
        self.world.day += 1
        self.pipeline.execute(self)

    def run(self, n_days: int) -> RunResults:
        """
        Advance *n_days* days, recording assignments, occupancy and
        production for each.
        """
        results = RunResults()
        for _ in range(int(n_days)):
            self.step()
            stats = self.employment_stats()
            results.append(
                DayRecord(
                    day=self.world.day,
                    assigned=self.last_assigned,
                    filled_slots=stats["filledSlots"],
                    total_slots=stats["totalSlots"],
                    production=dict(self.last_production),
                )
            )
        return results

    def _release_worker(self, worker_id: WorkerId) -> None:
        worker = self.world.find_worker(worker_id)
        if worker is not None:
            reset_worker(worker)

    def __repr__(self) -> str:
        return (
            f"JobSystem(day={self.world.day}, n_workers={self.world.population}, "
            f"n_slots={len(self.registry)})"
        )
