"""Pytest configuration and fixtures for settlejobs tests."""

import os

import pytest

import settlejobs.events  # noqa: F401 - register all events
from settlejobs import logging
from settlejobs.core.registry import clear_registry
from settlejobs.jobsystem import JobSystem
from tests.helpers.factories import mock_building, mock_worker, mock_world


@pytest.fixture
def clean_registry():
    """
    Save registry state, clear it for the test, then restore it.

    Request it explicitly in tests that register throwaway events.

    DO NOT use autouse=True, as it would interfere with tests that rely on
    the built-in daily events being registered.
    """
    # noinspection PyProtectedMember
    from settlejobs.core.registry import _EVENT_REGISTRY

    saved_events = dict(_EVENT_REGISTRY)
    clear_registry()

    yield

    _EVENT_REGISTRY.clear()
    _EVENT_REGISTRY.update(saved_events)


@pytest.fixture
def village():
    """Town centre, a farm and a quarry with six able workers."""
    return mock_world(
        n_workers=6,
        buildings=[
            mock_building("tc", "townCenter"),
            mock_building("farm1", "farm"),
            mock_building("quarry1", "quarry"),
        ],
        resources={"food": 10.0, "wood": 20.0, "stone": 5.0},
    )


@pytest.fixture
def tiny_system(village) -> JobSystem:
    """A deterministic system over :func:`village` with slots built."""
    system = JobSystem.init(world=village, seed=123)
    system.rebuild_slots()
    return system


@pytest.fixture
def worker():
    return mock_worker("w0", happiness=100)


@pytest.fixture(autouse=True)
def mute_settlejobs_logs(caplog):
    # Optimize log level based on context:
    # - CI coverage run: DEBUG so every logging branch executes
    # - Everything else: ERROR for faster tests
    if os.environ.get("COVERAGE_RUN") == "true":
        level = logging.DEBUG
    else:
        level = logging.ERROR

    caplog.set_level(level, logger="settlejobs")
    logging.getLogger("settlejobs").setLevel(level)
