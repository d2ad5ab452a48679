"""Tests for employment summaries and run history."""

import numpy as np
import pytest

from settlejobs.results import DayRecord, RunResults
from tests.helpers.factories import mock_system


def test_employment_stats(tiny_system):
    assert tiny_system.employment_stats() == {
        "totalSlots": 11,
        "filledSlots": 0,
        "vacantSlots": 11,
        "employmentRate": 0,
    }
    tiny_system.auto_assign()
    stats = tiny_system.employment_stats()
    assert stats["filledSlots"] == 6
    assert stats["employmentRate"] == round(6 / 11 * 100)


def test_employment_stats_without_slots():
    with pytest.warns(UserWarning, match="global_builder_slots is 0"):
        system = mock_system(global_builder_slots=0)
    assert system.employment_stats()["employmentRate"] == 0


def test_job_summary(tiny_system):
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    summary = tiny_system.job_summary()

    assert summary["totalJobs"] == 11
    assert summary["totalWorkers"] == 1
    assert summary["jobTypes"]["farmer"] == {"available": 2, "filled": 1}
    assert summary["buildings"]["global"]["type"] == "village"
    assert summary["buildings"]["farm1"] == {
        "type": "farm",
        "jobs": {"farmer": {"current": 1, "max": 2}},
    }


def test_worker_stats_counts_workforce_only(tiny_system):
    tiny_system.world.find_worker("w5").age = 8
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    assert tiny_system.worker_stats() == {"total": 5, "assigned": 1, "idle": 4}


def test_job_distribution_stats(tiny_system):
    tiny_system.world.find_worker("w0").experience["Agriculture"] = 700
    tiny_system.assign_worker_to_job("w0", "farm1", "farmer")
    tiny_system.assign_worker_to_job("w1", "farm1", "farmer")

    stats = tiny_system.job_distribution_stats()

    assert stats["totalWorkers"] == 2
    assert stats["jobCounts"] == {"farmer": 2}
    levels = stats["experienceLevels"]["farmer"]
    assert levels["expert"] == 1
    assert levels["novice"] == 1
    assert sum(levels.values()) == 2


@pytest.fixture
def history():
    results = RunResults()
    results.append(DayRecord(1, 3, 3, 6, {"food": 2.0, "wood": 1.0}))
    results.append(DayRecord(2, 1, 4, 8, {"food": 3.0}))
    results.append(DayRecord(3, 0, 0, 0, {"food": 0.0}))
    return results


def test_run_results_arrays(history):
    assert len(history) == 3
    np.testing.assert_allclose(history.employment_rate, [0.5, 0.5, 0.0])
    np.testing.assert_allclose(history.production("food"), [2.0, 3.0, 0.0])
    np.testing.assert_allclose(history.production("wood"), [1.0, 0.0, 0.0])
    assert history.totals() == {"food": 5.0, "wood": 1.0}


def test_run_results_to_dataframe(history):
    pd = pytest.importorskip("pandas")
    df = history.to_dataframe()
    assert isinstance(df, pd.DataFrame)
    assert list(df.index) == [1, 2, 3]
    assert df.loc[2, "filled_slots"] == 4
    assert df.loc[1, "wood"] == 1.0


def test_empty_run_results_dataframe():
    pytest.importorskip("pandas")
    assert RunResults().to_dataframe().empty
