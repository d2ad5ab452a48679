"""Centralized configuration validation for settlejobs."""

from __future__ import annotations

import warnings
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from numpy.random import Generator


class ConfigValidator:
    """
    Centralized validation for engine configuration.

    All validation happens once at JobSystem.init() to ensure:
    - Type correctness
    - Valid parameter ranges
    - Relationship constraints between parameters
    - Well-formed lookup tables (the only data allowed to fail loudly)
    """

    # Valid log levels for logging configuration
    VALID_LOG_LEVELS = {"DEEP_DEBUG", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    @staticmethod
    def validate_config(cfg: dict[str, Any]) -> None:
        """
        Validate all configuration parameters.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ValueError
            If any validation check fails.
        """
        ConfigValidator._validate_types(cfg)
        ConfigValidator._validate_ranges(cfg)
        ConfigValidator._validate_relationships(cfg)
        ConfigValidator._validate_tables(cfg)

        if "logging" in cfg:
            ConfigValidator._validate_logging(cfg["logging"])

    @staticmethod
    def _validate_types(cfg: dict[str, Any]) -> None:
        """
        Ensure correct types for configuration parameters.

        Raises
        ------
        ValueError
            If any parameter has incorrect type.
        """
        int_params = [
            "global_builder_slots",
            "target_builder_days",
            "min_working_age",
            "max_working_age",
            "farmers_per_capita",
            "foremen_per_builders",
        ]

        float_params = [
            "min_work_health",
            "sawyer_min_wood",
            "blacksmith_min_metal",
            "food_upkeep_per_worker",
        ]

        list_params = [
            "excluded_roles",
            "excluded_statuses",
            "food_release_kinds",
            "builder_release_order",
            "tracked_resources",
        ]

        seed = cfg.get("seed")
        if seed is not None and not isinstance(seed, Generator) and (
            isinstance(seed, bool) or not isinstance(seed, int)
        ):
            raise ValueError(
                "Config parameter 'seed' must be int or numpy Generator, "
                f"got {type(seed).__name__}"
            )

        for key in int_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if val is not None and (isinstance(val, bool) or not isinstance(val, int)):
                raise ValueError(
                    f"Config parameter '{key}' must be int, got {type(val).__name__}"
                )

        for key in float_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Config parameter '{key}' must be float, got {type(val).__name__}"
                )

        for key in list_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if not isinstance(val, (list, tuple)) or not all(
                isinstance(v, str) for v in val
            ):
                raise ValueError(
                    f"Config parameter '{key}' must be a list of str, got {val!r}"
                )

        for key in ("catalog_path", "pipeline_path"):
            if key in cfg:
                val = cfg[key]
                if val is not None and not isinstance(val, (str, Path)):
                    raise ValueError(
                        f"Config parameter '{key}' must be str or None, "
                        f"got {type(val).__name__}"
                    )

    @staticmethod
    def _validate_ranges(cfg: dict[str, Any]) -> None:
        """
        Ensure parameters are in valid ranges.

        Raises
        ------
        ValueError
            If any parameter is out of valid range.
        """
        # (min_val, max_val); None means unbounded
        constraints = {
            "global_builder_slots": (0, None),
            "target_builder_days": (1, None),
            "min_working_age": (0, None),
            "max_working_age": (0, None),
            "min_work_health": (0.0, 100.0),
            "sawyer_min_wood": (0.0, None),
            "blacksmith_min_metal": (0.0, None),
            "farmers_per_capita": (1, None),
            "foremen_per_builders": (1, None),
            "food_upkeep_per_worker": (0.0, None),
        }

        for key, (min_val, max_val) in constraints.items():
            if key not in cfg:
                continue

            val = cfg[key]
            if val is None:
                continue

            if min_val is not None and val < min_val:
                raise ValueError(
                    f"Config parameter '{key}' must be >= {min_val}, got {val}"
                )
            if max_val is not None and val > max_val:
                raise ValueError(
                    f"Config parameter '{key}' must be <= {max_val}, got {val}"
                )

    @staticmethod
    def _validate_relationships(cfg: dict[str, Any]) -> None:
        """Validate cross-parameter constraints."""
        lo = cfg.get("min_working_age", 0)
        hi = cfg.get("max_working_age", lo + 1)
        if lo >= hi:
            raise ValueError(
                f"min_working_age ({lo}) must be < max_working_age ({hi})"
            )

        days = cfg.get("target_builder_days", 1)
        if days > 60:
            warnings.warn(
                f"target_builder_days ({days}) is very large. "
                "Construction will rarely attract more than one builder.",
                UserWarning,
                stacklevel=3,
            )

        if cfg.get("global_builder_slots", 1) == 0:
            warnings.warn(
                "global_builder_slots is 0. Construction needs a builder's hut "
                "before anyone can build.",
                UserWarning,
                stacklevel=3,
            )

    @staticmethod
    def _validate_tables(cfg: dict[str, Any]) -> None:
        """
        Validate the nested lookup tables.

        Raises
        ------
        ValueError
            If a table is not a mapping or holds non-numeric leaves.
        """
        if "resource_caps" in cfg:
            ConfigValidator._check_numeric_map("resource_caps", cfg["resource_caps"])

        for key in ("season_multipliers", "building_jobs"):
            if key not in cfg:
                continue
            table = cfg[key]
            if not isinstance(table, Mapping):
                raise ValueError(
                    f"Config table '{key}' must be a mapping, "
                    f"got {type(table).__name__}"
                )
            for outer, inner in table.items():
                ConfigValidator._check_numeric_map(f"{key}.{outer}", inner)

        if "building_jobs" in cfg:
            for btype, jobs in cfg["building_jobs"].items():
                for kind, count in jobs.items():
                    if count < 0:
                        raise ValueError(
                            f"building_jobs.{btype}.{kind} must be >= 0, got {count}"
                        )

        if "terrain_bonuses" in cfg:
            table = cfg["terrain_bonuses"]
            if not isinstance(table, Mapping):
                raise ValueError(
                    "Config table 'terrain_bonuses' must be a mapping, "
                    f"got {type(table).__name__}"
                )
            for terrain, by_building in table.items():
                if not isinstance(by_building, Mapping):
                    raise ValueError(
                        f"terrain_bonuses.{terrain} must be a mapping, "
                        f"got {type(by_building).__name__}"
                    )
                for btype, bonus in by_building.items():
                    ConfigValidator._check_numeric_map(
                        f"terrain_bonuses.{terrain}.{btype}", bonus
                    )

    @staticmethod
    def _check_numeric_map(name: str, table: Any) -> None:
        if not isinstance(table, Mapping):
            raise ValueError(
                f"Config table '{name}' must be a mapping, got {type(table).__name__}"
            )
        for key, val in table.items():
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Config table '{name}' entry '{key}' must be numeric, "
                    f"got {type(val).__name__}"
                )

    @staticmethod
    def _validate_logging(log_config: dict[str, Any]) -> None:
        """
        Validate logging configuration.

        Parameters
        ----------
        log_config : dict
            Logging configuration dictionary with keys:
            - default_level: str (e.g., 'INFO', 'DEBUG')
            - events: dict[str, str] (per-event overrides)

        Raises
        ------
        ValueError
            If logging configuration is invalid.
        """
        if not isinstance(log_config, Mapping):
            raise ValueError(
                f"Logging config must be dict, got {type(log_config).__name__}"
            )

        if "default_level" in log_config:
            level = log_config["default_level"]
            if not isinstance(level, str):
                raise ValueError(
                    f"Logging default_level must be str, got {type(level).__name__}"
                )

            if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                raise ValueError(
                    f"Invalid log level '{level}'. "
                    f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                )

        events = log_config.get("events") or {}
        if not isinstance(events, Mapping):
            raise ValueError(
                f"Logging events must be dict, got {type(events).__name__}"
            )

        for event_name, level in events.items():
            if not isinstance(level, str):
                raise ValueError(
                    f"Log level for event '{event_name}' must be str, "
                    f"got {type(level).__name__}"
                )
            if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                raise ValueError(
                    f"Invalid log level '{level}' for event '{event_name}'. "
                    f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                )

    @staticmethod
    def validate_path(key: str, path_like: str | Path) -> None:
        """
        Validate a user-supplied YAML path exists and is a file.

        Raises
        ------
        ValueError
            If path does not exist or is not a file.
        """
        path = Path(path_like)

        if not path.exists():
            raise ValueError(f"{key} '{path_like}' does not exist")

        if not path.is_file():
            raise ValueError(f"{key} '{path_like}' is not a file")

        if path.suffix not in (".yml", ".yaml"):
            warnings.warn(
                f"{key} '{path_like}' does not have .yml/.yaml extension",
                UserWarning,
                stacklevel=2,
            )
