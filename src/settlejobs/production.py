"""
Daily resource deltas from occupied job slots.

For every occupied slot and every ``(resource, base)`` in its job's fixed
table::

    amount = base · eff · season · tech · terrain      (base > 0)
    amount = base · eff                                (base ≤ 0)

Multipliers only touch production, never consumption. A random-choice job
(gatherer) instead draws one resource per slot and adds ``eff · season``
to it. Deltas are *returned*; applying them to the stock (and capping) is
the caller's business.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from settlejobs import logging
from settlejobs.catalog import Fixed, JobCatalog, JobKind, RandomChoice
from settlejobs.efficiency import efficiency
from settlejobs.slots import JobSlot
from settlejobs.typing import JobKindId, ResourceMap

__all__ = ["BreakdownLine", "ProductionBreakdown", "ProductionModel"]

log = logging.getLogger(__name__)

UPKEEP_LABEL = "Population Upkeep"


@dataclass(slots=True, frozen=True)
class BreakdownLine:
    label: str
    workers: int
    amount: float


@dataclass(slots=True)
class ProductionBreakdown:
    """
    Per-job view of one day's production.

    Attributes
    ----------
    production : dict
        Resource → net amount (same keys as ``daily_production``).
    worker_counts : dict
        Resource → number of workers contributing a positive amount.
    breakdown : dict
        Resource → ``{"income": [...], "expense": [...]}`` line items.
    """

    production: ResourceMap
    worker_counts: dict[str, int]
    breakdown: dict[str, dict[str, list[BreakdownLine]]] = field(default_factory=dict)

    def income(self, resource: str) -> list[BreakdownLine]:
        return self.breakdown.get(resource, {}).get("income", [])

    def expense(self, resource: str) -> list[BreakdownLine]:
        return self.breakdown.get(resource, {}).get("expense", [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "production": dict(self.production),
            "workerCounts": dict(self.worker_counts),
            "breakdown": {
                r: {
                    side: [
                        {"label": ln.label, "workers": ln.workers, "amount": ln.amount}
                        for ln in lines
                    ]
                    for side, lines in sides.items()
                }
                for r, sides in self.breakdown.items()
            },
        }


class ProductionModel:
    """
    Aggregates occupied-slot output into resource deltas.

    Parameters
    ----------
    catalog : JobCatalog
        Job definitions (rules, skills, seasonal overrides, tech keys).
    season_multipliers : Mapping
        Season → resource → multiplier, used when a job has no override.
    terrain_bonuses : Mapping
        Terrain → building type (or ``_default``) → resource → bonus.
    tracked_resources : Sequence[str]
        Keys always present in the result; other resources are ignored.
    rng : numpy.random.Generator, optional
        Source for the random-choice draw.
    food_upkeep_per_worker : float
        Food consumed per live worker per day (detailed view only).
    """

    def __init__(
        self,
        catalog: JobCatalog,
        *,
        season_multipliers: Mapping[str, Mapping[str, float]] | None = None,
        terrain_bonuses: Mapping[str, Mapping[str, Mapping[str, float]]] | None = None,
        tracked_resources: Sequence[str] = (
            "food",
            "wood",
            "stone",
            "metal",
            "planks",
            "weapons",
            "tools",
            "gold",
            "production",
        ),
        rng: np.random.Generator | None = None,
        food_upkeep_per_worker: float = 1.0,
    ) -> None:
        self.catalog = catalog
        self.season_multipliers = season_multipliers or {}
        self.terrain_bonuses = terrain_bonuses or {}
        self.tracked_resources = tuple(tracked_resources)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.food_upkeep_per_worker = food_upkeep_per_worker

    # multipliers
    # ---------------------------------------------------------------------
    def seasonal_multiplier(
        self, kind: JobKind | None, resource: str, season: str
    ) -> float:
        """Job override, else global season table, else 1.0."""
        if kind is not None and season in kind.seasonal_modifiers:
            return float(kind.seasonal_modifiers[season])
        mult = self.season_multipliers.get(season, {}).get(resource)
        return float(mult) if mult is not None else 1.0

    @staticmethod
    def tech_multiplier(
        kind: JobKind | None, tech_bonuses: Mapping[str, float] | None
    ) -> float:
        if kind is None or kind.tech_key is None or not tech_bonuses:
            return 1.0
        return 1.0 + float(tech_bonuses.get(kind.tech_key, 0) or 0)

    def terrain_multiplier(self, building: Any, resource: str) -> float:
        terrain = getattr(building, "terrain", None) if building is not None else None
        if not terrain:
            return 1.0
        entry = self.terrain_bonuses.get(terrain)
        if not entry:
            return 1.0
        bonus = entry.get(getattr(building, "type", None)) or entry.get("_default")
        if not bonus:
            return 1.0
        return 1.0 + float(bonus.get(resource, 0) or 0)

    # aggregation
    # ---------------------------------------------------------------------
    def daily_production(self, slots: Iterable[JobSlot], world: Any) -> ResourceMap:
        """
        Net resource deltas for one day.

        Parameters
        ----------
        slots : Iterable[JobSlot]
            Slot table; vacant slots and unknown job kinds contribute nothing.
        world : World
            Supplies workers, buildings, ``season`` and ``tech_bonuses``.

        Returns
        -------
        dict
            Every tracked resource, zero-filled.
        """
        production: ResourceMap = dict.fromkeys(self.tracked_resources, 0.0)
        workers, buildings = _index(world)
        season = getattr(world, "season", "Spring")
        tech = getattr(world, "tech_bonuses", None)

        n_active = 0
        for slot in slots:
            if slot.occupant is None:
                continue
            worker = workers.get(slot.occupant)
            kind = self.catalog.get(slot.job_kind)
            if worker is None or kind is None:
                continue
            n_active += 1
            eff = efficiency(worker, kind.skills)

            match kind.rule:
                case RandomChoice(choices=choices):
                    choice = choices[int(self.rng.integers(len(choices)))]
                    if choice in production:
                        production[choice] += eff * self.seasonal_multiplier(
                            kind, choice, season
                        )
                case Fixed():
                    building = buildings.get(slot.building_id)
                    for resource, amount in self._slot_amounts(
                        kind, eff, building, season, tech
                    ):
                        if resource in production:
                            production[resource] += amount

        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                f"  Daily production from {n_active} workers: "
                + ", ".join(f"{r}={v:+.2f}" for r, v in production.items() if v)
            )
        return production

    def detailed_daily_production(
        self, slots: Iterable[JobSlot], world: Any
    ) -> ProductionBreakdown:
        """
        Per-job income/expense lines plus population upkeep.

        Applies each building's ``efficiency_multiplier`` on top of the
        daily multipliers. Random-choice jobs are reported at their
        expected value, split evenly over their choices, so the view is
        deterministic and draws nothing from the generator.
        """
        tracked = self.tracked_resources
        production: ResourceMap = dict.fromkeys(tracked, 0.0)
        worker_counts: dict[str, int] = dict.fromkeys(tracked, 0)
        breakdown: dict[str, dict[str, list[BreakdownLine]]] = {
            r: {"income": [], "expense": []} for r in tracked
        }
        workers, buildings = _index(world)
        season = getattr(world, "season", "Spring")
        tech = getattr(world, "tech_bonuses", None)

        per_job: dict[JobKindId, tuple[JobKind, list[int], dict[str, float]]] = {}
        for slot in slots:
            if slot.occupant is None:
                continue
            worker = workers.get(slot.occupant)
            kind = self.catalog.get(slot.job_kind)
            if worker is None or kind is None:
                continue
            building = buildings.get(slot.building_id)
            eff = efficiency(worker, kind.skills)
            eff *= _building_multiplier(building)

            _, count, totals = per_job.setdefault(kind.id, (kind, [0], {}))
            count[0] += 1

            for resource, amount in self._slot_amounts(
                kind, eff, building, season, tech
            ):
                if resource not in production:
                    continue
                production[resource] += amount
                if amount > 0:
                    worker_counts[resource] += 1
                totals[resource] = totals.get(resource, 0.0) + amount

        for kind, (n,), totals in per_job.values():
            label = f"{kind.label} ({n} worker{'' if n == 1 else 's'})"
            for resource, total in totals.items():
                if not total:
                    continue
                side = "income" if total >= 0 else "expense"
                breakdown[resource][side].append(
                    BreakdownLine(label, n, round(total, 2))
                )

        population = getattr(world, "population", 0)
        if population > 0 and "food" in breakdown:
            upkeep = population * self.food_upkeep_per_worker
            breakdown["food"]["expense"].append(
                BreakdownLine(UPKEEP_LABEL, population, -round(upkeep, 2))
            )

        return ProductionBreakdown(production, worker_counts, breakdown)

    def total_consumption(self, slots: Iterable[JobSlot], world: Any) -> ResourceMap:
        """Static consumption of occupied slots, as positive amounts."""
        workers, _ = _index(world)
        out: ResourceMap = {}
        for slot in slots:
            if slot.occupant is None or slot.occupant not in workers:
                continue
            kind = self.catalog.get(slot.job_kind)
            if kind is None:
                continue
            for resource, amount in kind.base_consumption.items():
                out[resource] = out.get(resource, 0.0) + amount
        return out

    def _slot_amounts(
        self,
        kind: JobKind,
        eff: float,
        building: Any,
        season: str,
        tech: Mapping[str, float] | None,
    ) -> list[tuple[str, float]]:
        match kind.rule:
            case RandomChoice(choices=choices):
                share = eff / len(choices)
                return [
                    (c, share * self.seasonal_multiplier(kind, c, season))
                    for c in choices
                ]
            case Fixed(table=table):
                tech_mult = self.tech_multiplier(kind, tech)
                out = []
                for resource, base in table.items():
                    if base > 0:
                        amount = (
                            base
                            * eff
                            * self.seasonal_multiplier(kind, resource, season)
                            * tech_mult
                            * self.terrain_multiplier(building, resource)
                        )
                    else:
                        amount = base * eff
                    out.append((resource, amount))
                return out
        return []


def _index(world: Any) -> tuple[dict[Any, Any], dict[Any, Any]]:
    workers = {getattr(w, "id", None): w for w in getattr(world, "workers", [])}
    buildings = {getattr(b, "id", None): b for b in getattr(world, "buildings", [])}
    return workers, buildings


def _building_multiplier(building: Any) -> float:
    mult = getattr(building, "efficiency_multiplier", None)
    if isinstance(mult, (int, float)) and not isinstance(mult, bool):
        return float(mult)
    return 1.0
