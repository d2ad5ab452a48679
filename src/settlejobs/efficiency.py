"""
Per-worker, per-job effectiveness.

    efficiency = max(0.1, age · health · happiness · skill)

    age       : <18 → 0.7 | 18–24 → 0.9 | 25–45 → 1.0 | 46–60 → 0.95 | >60 → 0.8
    health    : max(0.5, health / 100)
    happiness : max(0.7, happiness / 100)
    skill     : 1 + min(0.5, best_xp / 1000 · 0.5)

``best_xp`` is the largest experience value among the job's mapped skill
names, read from ``worker.experience`` first and ``worker.skills`` second.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from settlejobs.typing import Float1D

EFFICIENCY_FLOOR = 0.1

_DEFAULT_AGE = 25
_DEFAULT_HEALTH = 100
_DEFAULT_HAPPINESS = 75


def age_factor(age: float) -> float:
    if age < 18:
        return 0.7
    if age < 25:
        return 0.9
    if age <= 45:
        return 1.0
    if age <= 60:
        return 0.95
    return 0.8


def best_relevant_xp(worker: Any, skills: Iterable[str]) -> float:
    """Largest experience value among *skills* (0 when none recorded)."""
    experience = getattr(worker, "experience", None) or {}
    legacy = getattr(worker, "skills", None) or {}
    best = 0.0
    for name in skills:
        xp = experience.get(name) or legacy.get(name) or 0
        try:
            xp = float(xp)
        except (TypeError, ValueError):
            continue
        if xp > best:
            best = xp
    return best


def efficiency(worker: Any, skills: Iterable[str]) -> float:
    """
    Effectiveness of *worker* at a job whose relevant skills are *skills*.

    Missing or falsy attributes fall back to age 25, health 100 and
    happiness 75.
    """
    age = getattr(worker, "age", None) or _DEFAULT_AGE
    health = getattr(worker, "health", None) or _DEFAULT_HEALTH
    happiness = getattr(worker, "happiness", None) or _DEFAULT_HAPPINESS

    health_f = max(0.5, health / 100)
    happiness_f = max(0.7, happiness / 100)
    skill_f = 1.0 + min(0.5, (best_relevant_xp(worker, skills) / 1000) * 0.5)

    return max(EFFICIENCY_FLOOR, age_factor(age) * health_f * happiness_f * skill_f)


def efficiencies(workers: Sequence[Any], skills: Sequence[str]) -> Float1D:
    """Vector of :func:`efficiency` over *workers*."""
    return np.fromiter(
        (efficiency(w, skills) for w in workers),
        dtype=np.float64,
        count=len(workers),
    )


def pick_best(workers: Sequence[Any], skills: Sequence[str]) -> int:
    """
    Index of the most effective worker, or -1 for an empty pool.

    Ties go to the first-encountered worker.
    """
    if len(workers) == 0:
        return -1
    return int(np.argmax(efficiencies(workers, skills)))
