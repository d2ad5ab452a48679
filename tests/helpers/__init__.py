# tests/helpers/__init__.py
from tests.helpers.factories import (
    mock_building,
    mock_site,
    mock_system,
    mock_worker,
    mock_world,
)
from tests.helpers.invariants import assert_basic_invariants

__all__ = [
    "assert_basic_invariants",
    "mock_building",
    "mock_site",
    "mock_system",
    "mock_worker",
    "mock_world",
]
