"""Tests for the per-worker efficiency model."""

import numpy as np
import pytest

from settlejobs.efficiency import (
    age_factor,
    best_relevant_xp,
    efficiencies,
    efficiency,
    pick_best,
)
from tests.helpers.factories import mock_worker


@pytest.mark.parametrize(
    "age, expected",
    [
        (10, 0.7),
        (17, 0.7),
        (18, 0.9),
        (24, 0.9),
        (25, 1.0),
        (45, 1.0),
        (46, 0.95),
        (60, 0.95),
        (61, 0.8),
        (90, 0.8),
    ],
)
def test_age_factor(age, expected):
    assert age_factor(age) == expected


def test_default_worker_efficiency():
    """Age 25, health 100, happiness 75, no experience."""
    w = mock_worker(age=25, health=100, happiness=75)
    assert efficiency(w, ["Agriculture"]) == pytest.approx(0.75)


def test_factor_floors():
    w = mock_worker(health=20, happiness=10)
    # health floor 0.5, happiness floor 0.7
    assert efficiency(w, []) == pytest.approx(0.5 * 0.7)


def test_skill_bonus_is_capped():
    half = mock_worker(experience={"Agriculture": 500})
    full = mock_worker(experience={"Agriculture": 1000})
    over = mock_worker(experience={"Agriculture": 5000})
    assert efficiency(half, ["Agriculture"]) == pytest.approx(1.25)
    assert efficiency(full, ["Agriculture"]) == pytest.approx(1.5)
    assert efficiency(over, ["Agriculture"]) == pytest.approx(1.5)


def test_irrelevant_experience_is_ignored():
    w = mock_worker(experience={"Masonry": 1000})
    assert efficiency(w, ["Agriculture"]) == pytest.approx(1.0)


def test_best_relevant_xp_takes_max_and_falls_back_to_skills():
    w = mock_worker(
        experience={"Hunting": 120, "Forestry": 0},
        skills={"Forestry": 300, "Agriculture": 50},
    )
    assert best_relevant_xp(w, ["Hunting", "Forestry", "Agriculture"]) == 300
    assert best_relevant_xp(w, []) == 0


def test_missing_attributes_use_defaults():
    class Bare:
        id = "x"

    assert efficiency(Bare(), ["Agriculture"]) == pytest.approx(0.75)


def test_efficiencies_vector():
    pool = [mock_worker("a", age=17), mock_worker("b"), mock_worker("c", age=70)]
    np.testing.assert_allclose(efficiencies(pool, []), [0.7, 1.0, 0.8])


def test_pick_best_prefers_skill_and_first_on_ties():
    pool = [
        mock_worker("a"),
        mock_worker("b", experience={"Forestry": 400}),
        mock_worker("c", experience={"Forestry": 400}),
    ]
    assert pick_best(pool, ["Forestry"]) == 1
    assert pick_best(pool, ["Agriculture"]) == 0


def test_pick_best_empty_pool():
    assert pick_best([], ["Agriculture"]) == -1
