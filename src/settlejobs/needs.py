"""
Resource scarcity signals for the auto-assignment heuristic.

    food      = max(0, 3 − food / population)
    cap(r)    = max(0, 1 − stock_r / cap_r)          (0 if cap_r ≤ 0)
    planks    = 0.6·cap(planks)  + 0.4·wood
    weapons   = 0.6·cap(weapons) + 0.4·metal
    tools     = cap(tools)
    gold      = 0.3·cap(gold)
    basic     = 0.5·max(wood, stone) + 0.5·food

Pure and cheap: recomputed on every pass, never cached or persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

FOOD_BUFFER_DAYS = 3.0
PRODUCTION_URGENCY = 0.1
DEFAULT_CAP = 50.0
DEFAULT_GOLD_CAP = 100.0


@dataclass(slots=True, frozen=True)
class ResourceNeeds:
    food_urgency: float
    wood_urgency: float
    stone_urgency: float
    metal_urgency: float
    planks_urgency: float
    weapons_urgency: float
    tools_urgency: float
    gold_urgency: float
    basic_urgency: float
    production_urgency: float = PRODUCTION_URGENCY


def cap_urgency(stock: float, cap: float) -> float:
    if cap <= 0:
        return 0.0
    return max(0.0, 1.0 - stock / cap)


def compute_needs(
    resources: Mapping[str, float],
    population: int,
    caps: Mapping[str, float],
) -> ResourceNeeds:
    """
    Derive urgency scores from stock, population and storage caps.

    Parameters
    ----------
    resources : Mapping[str, float]
        Current stock; missing resources count as 0.
    population : int
        Live population (daily food use is one unit per person).
    caps : Mapping[str, float]
        Storage caps; missing caps default to 50 (gold: 100).

    Returns
    -------
    ResourceNeeds
    """

    def stock(name: str) -> float:
        return float(resources.get(name, 0) or 0)

    def cap(name: str) -> float:
        default = DEFAULT_GOLD_CAP if name == "gold" else DEFAULT_CAP
        return float(caps.get(name, default) or default)

    if population > 0:
        food = max(0.0, FOOD_BUFFER_DAYS - stock("food") / population)
    else:
        food = 0.0

    wood = cap_urgency(stock("wood"), cap("wood"))
    stone = cap_urgency(stock("stone"), cap("stone"))
    metal = cap_urgency(stock("metal"), cap("metal"))

    return ResourceNeeds(
        food_urgency=food,
        wood_urgency=wood,
        stone_urgency=stone,
        metal_urgency=metal,
        planks_urgency=0.6 * cap_urgency(stock("planks"), cap("planks")) + 0.4 * wood,
        weapons_urgency=0.6 * cap_urgency(stock("weapons"), cap("weapons"))
        + 0.4 * metal,
        tools_urgency=cap_urgency(stock("tools"), cap("tools")),
        gold_urgency=0.3 * cap_urgency(stock("gold"), cap("gold")),
        basic_urgency=0.5 * max(wood, stone) + 0.5 * food,
    )
