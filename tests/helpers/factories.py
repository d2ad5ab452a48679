"""
Reusable builders for world objects in unit / property tests.

* They construct the **reference** dataclasses from `settlejobs.world`.
* Every field has a small, deterministic default.
* You can override any field via keyword arguments.

Example
-------
>>> w = mock_worker("w1", age=17)
>>> world = mock_world(3, buildings=[mock_building("farm1", "farm", level=2)])
"""

from __future__ import annotations

from typing import Any

from settlejobs.jobsystem import JobSystem
from settlejobs.world import Building, ConstructionSite, Worker, World

# ───────────────────────── default dictionaries ────────────────────────── #


def _worker_defaults() -> dict[str, Any]:
    return dict(age=30, health=100, happiness=100)


def _world_defaults() -> dict[str, Any]:
    return dict(
        resources={"food": 50.0, "wood": 50.0, "stone": 25.0},
        season="Spring",
        day=0,
    )


# ───────────────────────────── builders ───────────────────────────────── #


def mock_worker(wid: str = "w0", **overrides: Any) -> Worker:
    """An able-bodied adult (efficiency 1.0 at an unskilled job)."""
    cfg = _worker_defaults()
    cfg.update(overrides)
    return Worker(id=wid, **cfg)


def mock_building(
    bid: str = "farm1", btype: str = "farm", **overrides: Any
) -> Building:
    return Building(id=bid, type=btype, **overrides)


def mock_site(sid: str = "site1", points: float = 40.0) -> ConstructionSite:
    return ConstructionSite(id=sid, points_remaining=points)


def mock_world(
    n_workers: int = 0,
    *,
    buildings: list[Any] | None = None,
    workers: list[Any] | None = None,
    **overrides: Any,
) -> World:
    """World with *n_workers* default workers ``w0 … w{n-1}``."""
    cfg = _world_defaults()
    cfg.update(overrides)
    if workers is None:
        workers = [mock_worker(f"w{i}") for i in range(n_workers)]
    return World(workers=workers, buildings=list(buildings or []), **cfg)


def mock_system(world: World | None = None, **overrides: Any) -> JobSystem:
    """Seeded JobSystem over *world* with its slot table already built."""
    overrides.setdefault("seed", 0)
    if world is None:
        world = mock_world()
    system = JobSystem.init(world=world, **overrides)
    system.rebuild_slots()
    return system
