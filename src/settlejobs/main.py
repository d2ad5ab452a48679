"""Command-line demo runner for settlejobs."""

from __future__ import annotations

import argparse

import numpy as np

from settlejobs import logging
from settlejobs.jobsystem import JobSystem
from settlejobs.notify import RecordingNotifier
from settlejobs.world import Building, ConstructionSite, Worker, World

SEASONS = ("Spring", "Summer", "Autumn", "Winter")
DAYS_PER_SEASON = 30


def _cli() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a small settlejobs demo village.")
    p.add_argument("--days", type=int, default=30, help="Simulated days")
    p.add_argument("--seed", type=int, default=42, help="RNG seed")
    p.add_argument("--workers", type=int, default=20, help="Initial population")
    p.add_argument("--log-level", default="INFO", help="settlejobs log level")
    return p.parse_args()


def demo_world(n_workers: int, rng: np.random.Generator) -> World:
    """A village with a few production buildings and one construction site."""
    workers = [
        Worker(
            id=f"w{i}",
            age=int(rng.integers(14, 70)),
            health=float(rng.integers(40, 101)),
            happiness=float(rng.integers(50, 101)),
            experience={"Agriculture": float(rng.integers(0, 600))},
        )
        for i in range(n_workers)
    ]
    buildings = [
        Building("tc", "townCenter"),
        Building("farm1", "farm", terrain="fertile"),
        Building("farm2", "farm"),
        Building("lodge1", "woodcutterLodge"),
        Building("quarry1", "quarry", terrain="hills"),
        Building("mill1", "lumberMill"),
        Building("hut1", "buildersHut"),
    ]
    return World(
        workers=workers,
        buildings=buildings,
        resources={"food": 30.0, "wood": 10.0, "stone": 5.0},
        construction_sites=[ConstructionSite("house1", points_remaining=40)],
    )


def _apply(system: JobSystem) -> None:
    """Apply the day's deltas, upkeep and construction progress."""
    world = system.world
    caps = system.config.resource_caps
    for r, delta in system.last_production.items():
        stock = world.resources.get(r, 0.0) + delta
        world.resources[r] = float(np.clip(stock, 0.0, caps.get(r, np.inf)))
    world.resources["food"] = max(
        0.0,
        world.resources.get("food", 0.0)
        - world.population * system.config.food_upkeep_per_worker,
    )

    if world.construction_sites:
        world.construction_sites[0].points_remaining -= system.registry.count_occupied(
            "builder"
        )
    world.construction_sites = [
        s for s in world.construction_sites if s.points_remaining > 0
    ]
    world.season = SEASONS[(world.day // DAYS_PER_SEASON) % len(SEASONS)]


def main() -> None:
    args = _cli()
    log = logging.getLogger("settlejobs.main")

    rng = np.random.default_rng(args.seed)
    notifier = RecordingNotifier()
    system = JobSystem.init(
        world=demo_world(args.workers, rng),
        notifier=notifier,
        seed=args.seed,
        logging={"default_level": args.log_level},
    )

    for _ in range(args.days):
        system.step()
        _apply(system)
        stats = system.employment_stats()
        log.info(
            "=== DAY %d === employed %d/%d (%d%%), food %.1f, wood %.1f, stone %.1f",
            system.world.day,
            stats["filledSlots"],
            stats["totalSlots"],
            stats["employmentRate"],
            system.world.resources.get("food", 0.0),
            system.world.resources.get("wood", 0.0),
            system.world.resources.get("stone", 0.0),
        )

    saved = system.serialize()["jobAssignments"]
    n_bindings = sum(len(ws) for kinds in saved.values() for ws in kinds.values())
    log.info(
        "Demo finished: %d notifications, %d bindings saved.",
        len(notifier.events),
        n_bindings,
    )


if __name__ == "__main__":
    main()
