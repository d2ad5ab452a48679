"""
Resource-aware auto-assignment of idle workers to vacant job slots.

One pass per simulated day:

1. **Release pre-pass**: free builders/foremen when nothing is under
   construction, surface gatherers when builders are short, free sawyers
   when wood is scarce and shed low-priority jobs when food runs out.
2. **Enumeration**: eligible idle workers (snapshot) and open postings,
   i.e. vacant-slot counts grouped by (building, job kind).
3. **Scoring**: additive heuristic per job family, biased by urgency.
4. **Ordering**: score descending; ties put builder first, then
   ``(building_id, job_kind)`` ascending.
5. **Greedy matching**: each non-vetoed posting takes the most efficient
   workers left in the snapshot.

Manual overrides (:meth:`AssignmentScheduler.assign`,
:meth:`AssignmentScheduler.unassign`) bypass the heuristic but go through
the same binding helpers, so the worker↔slot invariants hold either way.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from settlejobs import logging
from settlejobs.catalog import JobCatalog
from settlejobs.config import Config
from settlejobs.efficiency import pick_best
from settlejobs.needs import DEFAULT_CAP, ResourceNeeds, compute_needs
from settlejobs.slots import JobSlot, SlotRegistry
from settlejobs.typing import BuildingId, JobKindId, WorkerId
from settlejobs.world import GLOBAL_BUILDING_ID, IDLE, WORKING, JobAssignment

__all__ = [
    "AssignmentResult",
    "AssignmentScheduler",
    "Posting",
    "ScoringContext",
    "score_posting",
    "reset_worker",
    "SLOT_OCCUPIED",
    "WORKER_UNAVAILABLE",
    "NO_SUCH_SLOT",
]

log = logging.getLogger(__name__)

SLOT_OCCUPIED = "slot occupied"
WORKER_UNAVAILABLE = "worker unavailable"
NO_SUCH_SLOT = "no slot of that kind"

BUILDER = "builder"
FOREMAN = "foreman"
GATHERER = "gatherer"
SAWYER = "sawyer"
FARMER = "farmer"

SOFT_CAP_PENALTY = 30.0


@dataclass(slots=True, frozen=True)
class AssignmentResult:
    """Outcome of a manual assignment; truthy iff it succeeded."""

    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass(slots=True, frozen=True)
class Posting:
    """Open vacancies of one job kind at one building."""

    building_id: BuildingId
    job_kind: JobKindId
    vacancies: int
    building_type: str | None = None


@dataclass(slots=True, frozen=True)
class ScoringContext:
    """Per-pass snapshot of everything the scoring policy reads."""

    needs: ResourceNeeds
    resources: Mapping[str, float]
    has_construction: bool
    population: int
    wood_cap: float
    current_farmers: int
    current_builders: int
    current_foremen: int
    desired_builders: int
    desired_foremen: int
    sawyer_min_wood: float = 3
    blacksmith_min_metal: float = 2
    farmers_per_capita: int = 8

    @property
    def min_farmers(self) -> int:
        return max(0, math.ceil(self.population / self.farmers_per_capita))

    def stock(self, resource: str) -> float:
        return float(self.resources.get(resource, 0) or 0)


def score_posting(family: str, job_kind: JobKindId, ctx: ScoringContext) -> float:
    """
    Heuristic desirability of filling one *job_kind* posting.

    Scores are additive and only meaningful relative to each other: every
    real building job starts at +5, gatherer at +1, construction jobs swing
    on whether anything is being built.
    """
    n = ctx.needs
    wood = ctx.stock("wood")

    match family:
        case "farmer":
            score = 5 + 10 * n.food_urgency
            if ctx.current_farmers < ctx.min_farmers:
                score += 15
        case "hunter":
            score = 5 + 8 * n.food_urgency
        case "gatherer":
            score = 1 + 2 * n.basic_urgency
        case "wood":
            score = 5 + 6 * n.wood_urgency
        case "stone":
            score = 5 + 4 * n.stone_urgency
        case "sawyer":
            score = 5.0
            if ctx.wood_cap > 0 and wood / ctx.wood_cap >= 0.4:
                score += 6
            if wood >= 5:
                score += 2
            score += 3 * n.planks_urgency
            if wood < ctx.sawyer_min_wood:
                score -= 15
        case "smith":
            score = 5 + 2 * n.weapons_urgency + 2 * n.tools_urgency
            if ctx.stock("metal") < ctx.blacksmith_min_metal:
                score -= 10
        case "trade":
            score = 5 + 1.5 * n.gold_urgency
        case "engineer":
            score = 5 + n.production_urgency
        case "builder":
            score = 8.0 if ctx.has_construction else -10.0
        case "foreman":
            score = 6.0 if ctx.has_construction else -20.0
        case "military" | "academic":
            score = -5.0
        case _:
            score = 0.0

    if job_kind == BUILDER and ctx.current_builders >= ctx.desired_builders:
        score -= SOFT_CAP_PENALTY
    if job_kind == FOREMAN and ctx.current_foremen >= ctx.desired_foremen:
        score -= SOFT_CAP_PENALTY
    return float(score)


class AssignmentScheduler:
    """
    Release / score / match passes over a :class:`SlotRegistry`.

    Parameters
    ----------
    registry : SlotRegistry
        Slot table mutated by every bind and release.
    catalog : JobCatalog
        Provides scoring families and efficiency skills per job kind.
    config : Config
        Scheduler constants (ages, thresholds, release lists, caps).
    """

    def __init__(
        self, registry: SlotRegistry, catalog: JobCatalog, config: Config
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.config = config
        self._in_pass = False

    # eligibility
    # ---------------------------------------------------------------------
    def in_workforce(self, worker: Any, world: Any) -> bool:
        """Working age, healthy enough and not excluded by role/status."""
        cfg = self.config
        age = getattr(worker, "age", None)
        if age is None or age < cfg.min_working_age or age > cfg.max_working_age:
            return False
        health = getattr(worker, "health", None)
        if health is not None and health < cfg.min_work_health:
            return False
        if getattr(worker, "role", None) in cfg.excluded_roles:
            return False
        if getattr(worker, "status", None) in cfg.excluded_statuses:
            return False
        monarch = getattr(world, "monarch_id", None)
        return monarch is None or getattr(worker, "id", None) != monarch

    def is_eligible(self, worker: Any, world: Any) -> bool:
        """In the workforce and holding no job."""
        if getattr(worker, "job_assignment", None) is not None:
            return False
        if not self.in_workforce(worker, world):
            return False
        return self.registry.find_slot_by_worker(worker.id) is None

    def eligible_workers(self, world: Any) -> list[Any]:
        return [w for w in world.workers if self.is_eligible(w, world)]

    # postings and demand
    # ---------------------------------------------------------------------
    def postings(self, world: Any) -> list[Posting]:
        """Vacant-slot counts grouped by (building, job kind), in slot order."""
        counts: dict[tuple[BuildingId, JobKindId], int] = {}
        for slot in self.registry.vacant_slots():
            key = (slot.building_id, slot.job_kind)
            counts[key] = counts.get(key, 0) + 1

        out = []
        for (bid, kind), n in counts.items():
            building = (
                world.find_building(bid) if bid != GLOBAL_BUILDING_ID else None
            )
            out.append(Posting(bid, kind, n, getattr(building, "type", None)))
        return out

    def available_postings(self, world: Any) -> list[Posting]:
        """Open postings, builders first, then by building type."""
        return sorted(
            self.postings(world),
            key=lambda p: (p.job_kind != BUILDER, p.building_type or ""),
        )

    def compute_desired_builders(
        self, world: Any, target_days: float | None = None
    ) -> int:
        """
        Builders needed to finish the first unfinished site in *target_days*.

        ``clamp(ceil(points_remaining / target_days), 1, builder capacity)``,
        or 0 with no site left to build.
        """
        target_days = target_days or self.config.target_builder_days
        site = next(
            (
                s
                for s in getattr(world, "construction_sites", [])
                if getattr(s, "points_remaining", 0) > 0
            ),
            None,
        )
        if site is None:
            return 0
        desired = max(1, math.ceil(site.points_remaining / target_days))
        return min(desired, self.registry.capacity(BUILDER))

    def desired_foremen(self, desired_builders: int) -> int:
        if desired_builders <= 0:
            return 0
        return max(1, desired_builders // self.config.foremen_per_builders)

    def needs(self, world: Any) -> ResourceNeeds:
        return compute_needs(
            world.resources, world.population, self.config.resource_caps
        )

    def scoring_context(self, world: Any) -> ScoringContext:
        cfg = self.config
        desired_builders = self.compute_desired_builders(world)
        return ScoringContext(
            needs=self.needs(world),
            resources=world.resources,
            has_construction=bool(getattr(world, "construction_sites", None)),
            population=world.population,
            wood_cap=float(cfg.resource_caps.get("wood", DEFAULT_CAP)),
            current_farmers=self.registry.count_occupied(FARMER),
            current_builders=self.registry.count_occupied(BUILDER),
            current_foremen=self.registry.count_occupied(FOREMAN),
            desired_builders=desired_builders,
            desired_foremen=self.desired_foremen(desired_builders),
            sawyer_min_wood=cfg.sawyer_min_wood,
            blacksmith_min_metal=cfg.blacksmith_min_metal,
            farmers_per_capita=cfg.farmers_per_capita,
        )

    def score(self, posting: Posting, ctx: ScoringContext) -> float:
        kind = self.catalog.get(posting.job_kind)
        family = kind.scoring if kind is not None else "other"
        return score_posting(family, posting.job_kind, ctx)

    @staticmethod
    def order(scored: list[tuple[float, Posting]]) -> list[tuple[float, Posting]]:
        """Score descending; ties: builder first, then (building, kind)."""
        return sorted(
            scored,
            key=lambda sp: (
                -sp[0],
                sp[1].job_kind != BUILDER,
                sp[1].building_id,
                sp[1].job_kind,
            ),
        )

    def fill_limit(self, posting: Posting, ctx: ScoringContext, world: Any) -> int:
        """
        Workers this posting may take right now (0 = vetoed).

        Sawyers are vetoed while wood is below the minimum; builders and
        foremen are capped at their desired counts, using live counts.
        """
        if posting.job_kind == SAWYER:
            if ctx.stock("wood") < self.config.sawyer_min_wood:
                return 0
        if posting.job_kind == BUILDER:
            room = ctx.desired_builders - self.registry.count_occupied(BUILDER)
            return max(0, min(posting.vacancies, room))
        if posting.job_kind == FOREMAN:
            room = ctx.desired_foremen - self.registry.count_occupied(FOREMAN)
            return max(0, min(posting.vacancies, room))
        return posting.vacancies

    # release
    # ---------------------------------------------------------------------
    def release_workers_from_job_kind(
        self, job_kind: JobKindId, max_release: float, world: Any
    ) -> int:
        """Unbind up to *max_release* occupants of *job_kind*, in slot order."""
        released = 0
        for slot in self.registry.slots_by_job_kind(job_kind):
            if released >= max_release:
                break
            if slot.occupant is None:
                continue
            self._release_slot(slot, world)
            released += 1
        if released:
            log.debug(f"  Released {released} {job_kind} workers")
        return released

    def release_pass(self, world: Any) -> int:
        """Free workers whose current job is no longer worth keeping."""
        cfg = self.config
        released = 0

        if not getattr(world, "construction_sites", None):
            released += self.release_workers_from_job_kind(BUILDER, math.inf, world)
            released += self.release_workers_from_job_kind(FOREMAN, math.inf, world)
        else:
            desired = self.compute_desired_builders(world)
            needed = desired - self.registry.count_occupied(BUILDER)
            if needed > 0:
                released += self.release_workers_from_job_kind(
                    GATHERER, needed, world
                )

        if float(world.resources.get("wood", 0) or 0) < cfg.sawyer_min_wood:
            released += self.release_workers_from_job_kind(SAWYER, math.inf, world)

        food_urgency = self.needs(world).food_urgency
        if food_urgency > 1.0:
            n = math.ceil(food_urgency)
            for kind in cfg.food_release_kinds:
                released += self.release_workers_from_job_kind(kind, n, world)

        return released

    # the pass
    # ---------------------------------------------------------------------
    def auto_assign(self, world: Any) -> int:
        """
        Run one release + match pass.

        Returns
        -------
        int
            Number of new bindings (0 is a normal outcome). A re-entrant
            call made while a pass is running returns 0 without touching
            state.
        """
        if self._in_pass:
            log.warning("Re-entrant auto-assign ignored; a pass is already running")
            return 0
        self._in_pass = True
        try:
            return self._auto_assign(world)
        finally:
            self._in_pass = False

    def _auto_assign(self, world: Any) -> int:
        debug_enabled = log.isEnabledFor(logging.DEBUG)
        if debug_enabled:
            log.debug("--- Auto-assigning Workers ---")

        self.release_pass(world)

        pool = self.eligible_workers(world)
        postings = self.postings(world)
        if not pool or not postings:
            if debug_enabled:
                log.debug(
                    f"  Nothing to match: {len(pool)} idle workers, "
                    f"{len(postings)} open postings"
                )
            return 0

        ctx = self.scoring_context(world)
        ranked = self.order([(self.score(p, ctx), p) for p in postings])

        if log.isEnabledFor(logging.DEEP_DEBUG):
            for score, p in ranked:
                log.deep(
                    f"    {p.building_id}/{p.job_kind}: score={score:.2f} "
                    f"vacancies={p.vacancies}"
                )

        assigned = 0
        for _, posting in ranked:
            if not pool:
                break
            limit = min(self.fill_limit(posting, ctx, world), len(pool))
            if limit <= 0:
                continue
            skills = self.catalog.skills_for(posting.job_kind)
            for _ in range(limit):
                slot = self.registry.find_vacant_slot(
                    posting.building_id, posting.job_kind
                )
                if slot is None or not pool:
                    break
                worker = pool.pop(max(0, pick_best(pool, skills)))
                if self._bind(slot, worker, world):
                    assigned += 1

        if assigned:
            log.info(f"  Auto-assigned {assigned} workers")
        if debug_enabled:
            log.debug(f"  {len(pool)} eligible workers left idle")
            log.debug("--- Auto-assigning Workers complete ---")
        return assigned

    # builder helpers
    # ---------------------------------------------------------------------
    def fill_all_builders(self, world: Any) -> int:
        """Put the best eligible workers into every vacant builder slot."""
        vacant = [
            s for s in self.registry.slots_by_job_kind(BUILDER) if not s.is_occupied
        ]
        if not vacant:
            return 0
        pool = self.eligible_workers(world)
        skills = self.catalog.skills_for(BUILDER)
        assigned = 0
        for slot in vacant:
            if not pool:
                break
            worker = pool.pop(max(0, pick_best(pool, skills)))
            if self._bind(slot, worker, world):
                assigned += 1
        return assigned

    def maximize_builder_assignments(self, world: Any) -> int:
        """
        Staff every builder slot, pulling workers off other jobs if needed.

        Releases along ``builder_release_order`` until enough workers are
        free, then fills builders.
        """
        missing = self.registry.missing(BUILDER)
        if missing <= 0:
            return 0
        missing -= len(self.eligible_workers(world))
        for kind in self.config.builder_release_order:
            if missing <= 0:
                break
            missing -= self.release_workers_from_job_kind(kind, missing, world)
        return self.fill_all_builders(world)

    # manual overrides
    # ---------------------------------------------------------------------
    def assign(
        self,
        worker_id: WorkerId,
        building_id: BuildingId,
        job_kind: JobKindId,
        world: Any,
    ) -> AssignmentResult:
        """Bind *worker_id* to the first vacant (building, kind) slot."""
        worker = world.find_worker(worker_id)
        if (
            worker is None
            or getattr(worker, "job_assignment", None) is not None
            or self.registry.find_slot_by_worker(worker_id) is not None
        ):
            return AssignmentResult(False, WORKER_UNAVAILABLE)
        if not self.registry.has_slot(building_id, job_kind):
            return AssignmentResult(False, NO_SUCH_SLOT)
        slot = self.registry.find_vacant_slot(building_id, job_kind)
        if slot is None:
            return AssignmentResult(False, SLOT_OCCUPIED)
        if not self._bind(slot, worker, world):
            return AssignmentResult(False, SLOT_OCCUPIED)
        return AssignmentResult(True)

    def unassign(self, worker_id: WorkerId, world: Any) -> bool:
        slot = self.registry.find_slot_by_worker(worker_id)
        if slot is None:
            return False
        self._release_slot(slot, world)
        return True

    # binding helpers
    # ---------------------------------------------------------------------
    def _bind(self, slot: JobSlot, worker: Any, world: Any) -> bool:
        if not self.registry.bind(slot, worker.id):
            return False
        worker.status = WORKING
        worker.job_assignment = JobAssignment(
            slot.building_id, slot.job_kind, int(getattr(world, "day", 0) or 0)
        )
        return True

    def _release_slot(self, slot: JobSlot, world: Any) -> None:
        wid = slot.occupant
        if wid is None:
            return
        worker = world.find_worker(wid)
        if worker is not None:
            reset_worker(worker)
        self.registry.unbind(slot)


def reset_worker(worker: Any) -> None:
    """Return *worker* to the idle pool."""
    worker.job_assignment = None
    worker.status = IDLE
