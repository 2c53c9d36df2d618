"""
Kingshot Formation Optimizer - Playstyle Detection
==================================================
Classifies a stat profile into the troop-type archetype it is built around.
"""

from typing import Dict

from .constants import (
    PLAYSTYLE_DOMINANT_SHARE,
    PLAYSTYLE_HYBRID_SHARE,
    TROOP_TYPES,
    Playstyle,
    TroopType,
)
from .stats import StatProfile, TroopStats


SINGLE_TYPE_PLAYSTYLES: Dict[TroopType, Playstyle] = {
    TroopType.INFANTRY: Playstyle.INFANTRY,
    TroopType.CAVALRY: Playstyle.CAVALRY,
    TroopType.ARCHER: Playstyle.ARCHER,
}

HYBRID_PLAYSTYLES: Dict[frozenset, Playstyle] = {
    frozenset((TroopType.INFANTRY, TroopType.CAVALRY)): Playstyle.INFANTRY_CAVALRY,
    frozenset((TroopType.INFANTRY, TroopType.ARCHER)): Playstyle.INFANTRY_ARCHER,
    frozenset((TroopType.CAVALRY, TroopType.ARCHER)): Playstyle.CAVALRY_ARCHER,
}


def calculate_troop_efficiency(stats: TroopStats) -> float:
    """
    Combined strength score for one troop type.

    Formula:
        offensive = (0.6 * ATK + 0.4 * LETH) / 100
        defensive = (0.5 * DEF + 0.5 * HP) / 100
        efficiency = 0.7 * offensive + 0.3 * defensive
    """
    offensive = (0.6 * stats.attack + 0.4 * stats.lethality) / 100
    defensive = (0.5 * stats.defense + 0.5 * stats.health) / 100
    return 0.7 * offensive + 0.3 * defensive


def calculate_relative_strengths(stats: StatProfile) -> Dict[TroopType, float]:
    """Per-type efficiency normalized to sum to 1 (all zeros if no stats)."""
    efficiencies = {t: calculate_troop_efficiency(stats[t]) for t in TROOP_TYPES}
    total = sum(efficiencies.values())
    if total <= 0:
        return {t: 0.0 for t in TROOP_TYPES}
    return {t: value / total for t, value in efficiencies.items()}


def detect_playstyle(stats: StatProfile,
                     dominant_share: float = PLAYSTYLE_DOMINANT_SHARE,
                     hybrid_share: float = PLAYSTYLE_HYBRID_SHARE) -> Playstyle:
    """
    Detect the playstyle a stat profile is built for.

    A single type with relative strength >= dominant_share (0.38) defines
    the playstyle. Otherwise, if two or more types exceed hybrid_share
    (0.30), the two strongest form a hybrid. Anything else (including all-zero stats) is balanced.
    """
    strengths = calculate_relative_strengths(stats)
    if not any(strengths.values()):
        return Playstyle.BALANCED

    ranked = sorted(TROOP_TYPES, key=lambda t: strengths[t], reverse=True)
    strongest = ranked[0]
    if strengths[strongest] >= dominant_share:
        return SINGLE_TYPE_PLAYSTYLES[strongest]

    contenders = [t for t in ranked if strengths[t] > hybrid_share]
    if len(contenders) >= 2:
        return HYBRID_PLAYSTYLES[frozenset(contenders[:2])]

    return Playstyle.BALANCED
