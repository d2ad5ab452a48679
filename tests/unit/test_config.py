"""Tests for configuration loading, precedence and validation."""

import numpy as np
import pytest

from settlejobs import logging
from settlejobs.jobsystem import JobSystem


def test_defaults_yml_loads():
    system = JobSystem.init(seed=42)

    assert system.config.global_builder_slots == 4
    assert system.config.target_builder_days == 7
    assert system.config.resource_caps["food"] == 100
    assert system.config.building_jobs["farm"] == {"farmer": 2.0}
    assert isinstance(system.config.excluded_roles, tuple)


def test_user_yaml_overrides_defaults(tmp_path):
    path = tmp_path / "village.yml"
    path.write_text("target_builder_days: 3\nsawyer_min_wood: 10\n")

    system = JobSystem.init(config=path, seed=42)

    assert system.config.target_builder_days == 3
    assert system.config.sawyer_min_wood == 10
    assert system.config.min_working_age == 16  # from defaults.yml


def test_kwargs_override_yaml(tmp_path):
    path = tmp_path / "village.yml"
    path.write_text("target_builder_days: 3\n")

    system = JobSystem.init(config=str(path), target_builder_days=5)

    assert system.config.target_builder_days == 5


def test_mapping_config():
    system = JobSystem.init({"farmers_per_capita": 4}, min_working_age=14)
    assert system.config.farmers_per_capita == 4
    assert system.config.min_working_age == 14


def test_config_is_frozen():
    system = JobSystem.init()
    with pytest.raises(AttributeError):
        system.config.min_working_age = 3  # type: ignore[misc]


def test_unknown_key_is_rejected():
    with pytest.raises(ValueError, match="Unknown config parameter"):
        JobSystem.init(n_farms=3)


@pytest.mark.parametrize(
    "overrides, match",
    [
        ({"global_builder_slots": 2.5}, "must be int"),
        ({"target_builder_days": True}, "must be int"),
        ({"seed": "abc"}, "must be int or numpy Generator"),
        ({"min_work_health": "high"}, "must be float"),
        ({"excluded_roles": "player"}, "list of str"),
        ({"target_builder_days": 0}, ">= 1"),
        ({"min_work_health": 150}, "<= 100"),
        ({"min_working_age": 70, "max_working_age": 60}, "must be <"),
        ({"resource_caps": {"food": "lots"}}, "must be numeric"),
        ({"building_jobs": {"farm": {"farmer": -1}}}, ">= 0"),
        ({"building_jobs": ["farm"]}, "must be a mapping"),
        ({"terrain_bonuses": {"hills": {"quarry": 0.3}}}, "must be a mapping"),
        ({"logging": {"default_level": "LOUD"}}, "Invalid log level"),
        ({"logging": {"events": {"rebuild_slots": 10}}}, "must be str"),
    ],
)
def test_invalid_parameters_raise(overrides, match):
    with pytest.raises(ValueError, match=match):
        JobSystem.init(**overrides)


def test_config_root_must_be_mapping(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(TypeError, match="mapping"):
        JobSystem.init(config=path)


def test_warnings_for_suspicious_values():
    with pytest.warns(UserWarning, match="very large"):
        JobSystem.init(target_builder_days=90)


def test_missing_catalog_path_raises(tmp_path):
    with pytest.raises(ValueError, match="does not exist"):
        JobSystem.init(catalog_path=tmp_path / "nope.yml")


def test_custom_catalog_filters_building_table(tmp_path, caplog):
    path = tmp_path / "jobs.yml"
    path.write_text(
        "builder:\n  rule: {fixed: {construction: 1}}\n  scoring: builder\n"
        "farmer:\n  rule: {fixed: {food: 5}}\n  scoring: farmer\n"
    )
    with caplog.at_level(logging.WARNING, logger="settlejobs"):
        system = JobSystem.init(catalog_path=str(path))

    assert system.catalog.ids() == ["builder", "farmer"]
    assert system.config.building_jobs["farm"] == {"farmer": 2.0}
    assert system.config.building_jobs["quarry"] == {}
    assert "unknown job kind" in caplog.text


def test_custom_pipeline_path(tmp_path):
    path = tmp_path / "pipeline.yml"
    path.write_text("events:\n  - rebuild_slots\n  - auto_assign_workers\n")

    system = JobSystem.init(pipeline_path=path)

    assert system.pipeline.names() == ["rebuild_slots", "auto_assign_workers"]


def test_seed_accepts_generator():
    rng = np.random.default_rng(5)
    system = JobSystem.init(seed=rng)
    assert system.rng is rng
    assert system.production.rng is rng
