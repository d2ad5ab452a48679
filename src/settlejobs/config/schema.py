"""
Configuration dataclass for engine parameters.

This module defines the Config dataclass, which groups all scheduler,
production and slot-table parameters in one immutable object. Config
instances are created by JobSystem.init() after merging defaults, user
config, and kwargs.

Design Notes
------------
- Immutable (frozen=True) to prevent accidental modification
- Memory-efficient (slots=True)
- Simple dataclass, no methods - validation happens in ConfigValidator

See Also
--------
ConfigValidator : Centralized validation for configuration parameters
settlejobs.jobsystem.JobSystem.init : Creates Config from merged parameters
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Config:
    """
    Immutable configuration for the job allocation and production engine.

    Parameters
    ----------
    global_builder_slots : int
        Builder slots that exist independent of any building.
    target_builder_days : int
        Days in which the active construction site should be finished;
        drives the desired builder count.
    min_working_age, max_working_age : int
        Inclusive working-age window for auto-assignment.
    min_work_health : float
        Workers below this health are never auto-assigned.
    sawyer_min_wood : float
        Wood stock below which sawyers are released and vetoed.
    blacksmith_min_metal : float
        Metal stock below which blacksmith postings are penalised.
    farmers_per_capita : int
        One farmer is wanted per this many people.
    foremen_per_builders : int
        One foreman is wanted per this many desired builders.
    excluded_roles : tuple of str
        Worker roles never auto-assigned.
    excluded_statuses : tuple of str
        Worker statuses never auto-assigned.
    food_release_kinds : tuple of str
        Job kinds released first when food urgency exceeds 1.
    builder_release_order : tuple of str
        Order in which job kinds are drained to fill every builder slot.
    food_upkeep_per_worker : float
        Daily food eaten by each live worker (detailed view only).
    tracked_resources : tuple of str
        Resources reported by the production model.
    resource_caps : Mapping[str, float]
        Storage caps read by the needs estimator.
    season_multipliers : Mapping[str, Mapping[str, float]]
        Global season → resource multiplier table.
    terrain_bonuses : Mapping[str, Mapping[str, Mapping[str, float]]]
        Terrain → building type (or ``_default``) → resource → bonus.
    building_jobs : Mapping[str, Mapping[str, float]]
        Building type → job kind → base slots per level.

    Examples
    --------
    >>> from settlejobs import JobSystem
    >>> system = JobSystem.init(seed=42)
    >>> system.config.global_builder_slots
    4
    """

    # Slot table
    global_builder_slots: int

    # Auto-assignment
    target_builder_days: int
    min_working_age: int
    max_working_age: int
    min_work_health: float
    sawyer_min_wood: float
    blacksmith_min_metal: float
    farmers_per_capita: int
    foremen_per_builders: int
    excluded_roles: tuple[str, ...]
    excluded_statuses: tuple[str, ...]
    food_release_kinds: tuple[str, ...]
    builder_release_order: tuple[str, ...]

    # Production
    food_upkeep_per_worker: float
    tracked_resources: tuple[str, ...]

    # Lookup tables
    resource_caps: Mapping[str, float] = field(default_factory=dict)
    season_multipliers: Mapping[str, Mapping[str, float]] = field(
        default_factory=dict
    )
    terrain_bonuses: Mapping[str, Mapping[str, Mapping[str, float]]] = field(
        default_factory=dict
    )
    building_jobs: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
