"""
Static job-kind catalog.

Job kinds are registered once at startup from ``jobs.yml`` and are
read-only afterwards. This is the only place where malformed data fails
loudly (``ValueError``); everything downstream treats a missing kind as
"no effect".

A job's output is described by a :data:`ProductionRule`:

- :class:`Fixed`: a signed per-worker daily rate table
  (positive = production, negative = consumption);
- :class:`RandomChoice`: one resource drawn uniformly per occupied slot
  per day (unskilled foraging).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeAlias

import yaml

from settlejobs.logging import getLogger
from settlejobs.typing import JobKindId, RateTable

__all__ = [
    "Fixed",
    "RandomChoice",
    "ProductionRule",
    "JobKind",
    "JobCatalog",
    "SCORING_FAMILIES",
    "skill_level_from_xp",
]

log = getLogger(__name__)

SCORING_FAMILIES = frozenset(
    {
        "farmer",
        "hunter",
        "gatherer",
        "wood",
        "stone",
        "sawyer",
        "smith",
        "trade",
        "engineer",
        "builder",
        "foreman",
        "military",
        "academic",
        "other",
    }
)


@dataclass(slots=True, frozen=True)
class Fixed:
    table: RateTable


@dataclass(slots=True, frozen=True)
class RandomChoice:
    choices: tuple[str, ...]


ProductionRule: TypeAlias = Fixed | RandomChoice


@dataclass(slots=True, frozen=True)
class JobKind:
    """
    Immutable job definition.

    Attributes
    ----------
    id : str
        Catalog key (``farmer``, ``builder``, ...).
    label : str
        Display name.
    rule : ProductionRule
        How an occupied slot turns into resource deltas.
    required_skill : str or None
        Nominal skill the job trains (informational).
    skills : tuple of str
        Experience keys consulted by the efficiency model.
    base_efficiency : float
        Catalog-level efficiency multiplier.
    seasonal_modifiers : Mapping[str, float]
        Season → multiplier overriding the global season table.
    scoring : str
        Heuristic family used by the scheduler (see ``SCORING_FAMILIES``).
    tech_key : str or None
        Key into the tech-bonus map.
    """

    id: JobKindId
    label: str
    rule: ProductionRule
    required_skill: str | None = None
    skills: tuple[str, ...] = ()
    base_efficiency: float = 1.0
    seasonal_modifiers: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    scoring: str = "other"
    tech_key: str | None = None

    @property
    def base_production(self) -> dict[str, float]:
        """Positive part of a fixed table (empty for random rules)."""
        match self.rule:
            case Fixed(table=table):
                return {r: v for r, v in table.items() if v > 0}
            case RandomChoice():
                return {}

    @property
    def base_consumption(self) -> dict[str, float]:
        """Negative part of a fixed table, as positive amounts."""
        match self.rule:
            case Fixed(table=table):
                return {r: -v for r, v in table.items() if v < 0}
            case RandomChoice():
                return {}


class JobCatalog:
    """
    Read-only registry of :class:`JobKind` definitions.

    Examples
    --------
    >>> catalog = JobCatalog.from_yaml()
    >>> catalog.get("farmer").label
    'Farmer'
    >>> catalog.get("unknown") is None
    True
    """

    __slots__ = ("_kinds",)

    def __init__(self, kinds: Mapping[JobKindId, JobKind]) -> None:
        self._kinds: dict[JobKindId, JobKind] = dict(kinds)

    # construction
    # ---------------------------------------------------------------------
    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> JobCatalog:
        """Load the packaged ``jobs.yml`` or a user file at *path*."""
        if path is None:
            txt = resources.files("settlejobs").joinpath("jobs.yml").read_text()
        else:
            txt = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(txt) or {}
        if not isinstance(data, Mapping):
            raise ValueError(f"job catalog root must be mapping, got {type(data)!r}")
        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> JobCatalog:
        kinds = {}
        for job_id, spec in data.items():
            kinds[str(job_id)] = _parse_kind(str(job_id), spec)
        log.debug(f"Job catalog loaded with {len(kinds)} kinds")
        return cls(kinds)

    # queries
    # ---------------------------------------------------------------------
    def get(self, job_id: JobKindId) -> JobKind | None:
        return self._kinds.get(job_id)

    def ids(self) -> list[JobKindId]:
        return list(self._kinds)

    def skills_for(self, job_id: JobKindId) -> tuple[str, ...]:
        kind = self._kinds.get(job_id)
        return kind.skills if kind is not None else ()

    def filter_building_jobs(
        self, table: Mapping[str, Mapping[str, float]]
    ) -> dict[str, dict[JobKindId, float]]:
        """
        Drop building-table entries that name unknown job kinds.

        Unknown kinds are logged at WARNING and skipped; the building keeps
        its other job kinds.
        """
        out: dict[str, dict[JobKindId, float]] = {}
        for btype, jobs in table.items():
            kept: dict[JobKindId, float] = {}
            for kind, base in jobs.items():
                if kind not in self._kinds:
                    log.warning(
                        f"Building type {btype!r} lists unknown job kind "
                        f"{kind!r}; skipped"
                    )
                    continue
                kept[kind] = float(base)
            out[btype] = kept
        return out

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._kinds

    def __iter__(self) -> Iterator[JobKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    def __repr__(self) -> str:
        return f"JobCatalog(n_kinds={len(self._kinds)})"


def skill_level_from_xp(xp: float) -> str:
    """Name the experience tier for *xp* points."""
    if xp >= 1001:
        return "master"
    if xp >= 601:
        return "expert"
    if xp >= 301:
        return "journeyman"
    if xp >= 101:
        return "apprentice"
    return "novice"


# parsing
# ---------------------------------------------------------------------------
def _parse_kind(job_id: str, spec: Any) -> JobKind:
    if not isinstance(spec, Mapping):
        raise ValueError(f"Job '{job_id}' must be a mapping, got {type(spec)!r}")

    rule = _parse_rule(job_id, spec.get("rule", {"fixed": {}}))

    base_eff = spec.get("base_efficiency", 1.0)
    if not _is_number(base_eff) or base_eff <= 0:
        raise ValueError(
            f"Job '{job_id}' base_efficiency must be a positive number, "
            f"got {base_eff!r}"
        )

    seasonal = spec.get("seasonal_modifiers") or {}
    _check_rates(job_id, "seasonal_modifiers", seasonal)

    skills = spec.get("skills") or []
    if not isinstance(skills, list) or not all(isinstance(s, str) for s in skills):
        raise ValueError(f"Job '{job_id}' skills must be a list of str")

    scoring = spec.get("scoring", "other")
    if scoring not in SCORING_FAMILIES:
        raise ValueError(
            f"Job '{job_id}' has unknown scoring family {scoring!r}. "
            f"Must be one of {sorted(SCORING_FAMILIES)}"
        )

    return JobKind(
        id=job_id,
        label=str(spec.get("label", job_id)),
        rule=rule,
        required_skill=spec.get("required_skill"),
        skills=tuple(skills),
        base_efficiency=float(base_eff),
        seasonal_modifiers=MappingProxyType(
            {str(k): float(v) for k, v in seasonal.items()}
        ),
        scoring=scoring,
        tech_key=spec.get("tech_key"),
    )


def _parse_rule(job_id: str, spec: Any) -> ProductionRule:
    if not isinstance(spec, Mapping) or len(spec) != 1:
        raise ValueError(
            f"Job '{job_id}' rule must have exactly one of 'fixed' or "
            f"'random_choice', got {spec!r}"
        )
    (kind, body), = spec.items()
    match kind:
        case "fixed":
            body = body or {}
            _check_rates(job_id, "rule.fixed", body)
            return Fixed(MappingProxyType({str(r): float(v) for r, v in body.items()}))
        case "random_choice":
            if not isinstance(body, list) or not body:
                raise ValueError(
                    f"Job '{job_id}' random_choice must be a non-empty list"
                )
            return RandomChoice(tuple(str(r) for r in body))
        case _:
            raise ValueError(f"Job '{job_id}' has unknown rule type {kind!r}")


def _check_rates(job_id: str, name: str, table: Any) -> None:
    if not isinstance(table, Mapping):
        raise ValueError(f"Job '{job_id}' {name} must be a mapping")
    for key, val in table.items():
        if not _is_number(val):
            raise ValueError(
                f"Job '{job_id}' {name}.{key} must be numeric, got {val!r}"
            )


def _is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)
