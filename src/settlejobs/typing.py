"""
Type aliases for settlejobs.

Identifiers are plain strings so that host games can use whatever id
scheme they already have; resource tables are string-keyed float maps.
"""

from collections.abc import Mapping
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

# === Internal Type Aliases (precise numpy types) ===

Float1D: TypeAlias = NDArray[np.float64]
Idx1D: TypeAlias = NDArray[np.intp]

# === Domain Aliases ===

WorkerId: TypeAlias = str
BuildingId: TypeAlias = str
JobKindId: TypeAlias = str
SlotId: TypeAlias = str

ResourceMap: TypeAlias = dict[str, float]
"""Resource name → amount (stock, rate or delta)."""

RateTable: TypeAlias = Mapping[str, float]
"""Read-only resource name → per-worker daily rate."""

AssignmentMap: TypeAlias = dict[BuildingId, dict[JobKindId, list[WorkerId]]]
"""Building → job kind → occupant worker ids (persisted ``jobAssignments``)."""

CapacityMap: TypeAlias = dict[BuildingId, dict[JobKindId, int]]
"""Building → job kind → slot count (persisted ``availableJobs``)."""

__all__ = [
    "Float1D",
    "Idx1D",
    "WorkerId",
    "BuildingId",
    "JobKindId",
    "SlotId",
    "ResourceMap",
    "RateTable",
    "AssignmentMap",
    "CapacityMap",
]
