"""
Kingshot Formation Optimizer - Core Damage Calculation
======================================================
Single source of truth for the effective-damage formula and the match
simulator. Both optimizers evaluate formations exclusively through
run_match().

The formula is a heuristic approximation of the game's combat, tuned so
that relative comparisons between formations are meaningful.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .constants import (
    ADVANTAGE_MATRIX,
    DAMAGE_DECIMALS,
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    RATIO_DECIMALS,
    REFERENCE_FORMATION,
    SAFE_DEFAULT_RATIO,
    TROOP_TYPES,
    WIN_CURVE_STEEPNESS,
    WIN_PERCENT_DECIMALS,
    TroopType,
)
from .stats import Formation, Side, StatProfile


# =============================================================================
# BALANCE CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class RoleBand:
    """
    Synergy modifier for one troop type.

    Inside `band` the ratio is multiplied by `bonus`; outside `limits` it is
    multiplied by `penalty`; anywhere else it is left alone.
    """
    troop_type: TroopType
    band: Tuple[float, float]
    bonus: float
    limits: Tuple[float, float]
    penalty: float

    def multiplier(self, fraction: float) -> float:
        lo, hi = self.band
        if lo <= fraction <= hi:
            return self.bonus
        floor, ceiling = self.limits
        if fraction < floor or fraction > ceiling:
            return self.penalty
        return 1.0


DEFAULT_ROLE_BANDS: Tuple[RoleBand, ...] = (
    RoleBand(TroopType.ARCHER, band=(0.40, 0.60), bonus=1.02, limits=(0.25, 1.0), penalty=0.98),
    RoleBand(TroopType.INFANTRY, band=(0.20, 0.40), bonus=1.01, limits=(0.0, 0.50), penalty=0.99),
    RoleBand(TroopType.CAVALRY, band=(0.15, 0.30), bonus=1.01, limits=(0.0, 0.40), penalty=0.98),
)


@dataclass(frozen=True)
class BalanceConfig:
    """
    Game-balance knobs for the synergy layer and the win curve.

    The synergy layer biases results toward the reference
    formation. Set synergy_enabled=False to compare raw damage only.
    """
    reference_formation: Tuple[float, float, float] = REFERENCE_FORMATION
    synergy_strength: float = 0.03
    role_bands: Tuple[RoleBand, ...] = DEFAULT_ROLE_BANDS
    win_curve_steepness: float = WIN_CURVE_STEEPNESS
    synergy_enabled: bool = True


DEFAULT_BALANCE = BalanceConfig()


# =============================================================================
# RESULT DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class DamageTotals:
    """Total effective damage of one side plus the per-type breakdown."""
    total: float
    breakdown: Dict[TroopType, float] = field(default_factory=dict)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one simulated match, from your side's point of view."""
    formation: Formation
    ratio: float
    win_percentage: float
    your_damage: float
    enemy_damage: float
    your_breakdown: Dict[TroopType, float] = field(default_factory=dict)
    enemy_breakdown: Dict[TroopType, float] = field(default_factory=dict)

    def breakdown(self) -> str:
        """Return formatted per-type damage table."""
        lines = [
            "Type   Your Damage     Enemy Damage",
            "-----------------------------------",
        ]
        for t in TROOP_TYPES:
            lines.append(
                f"{t.value:<6} {self.your_breakdown.get(t, 0):>14,.2f} {self.enemy_breakdown.get(t, 0):>16,.2f}"
            )
        lines.append("-----------------------------------")
        lines.append(f"Ratio: {self.ratio:.4f}   Win: {self.win_percentage:.1f}%")
        return "\n".join(lines)


# =============================================================================
# ADVANTAGE
# =============================================================================

def calculate_advantage(your_type: TroopType, enemy_formation: Formation) -> float:
    """
    Multiplier for one of your troop types against a mixed enemy formation.

    Formula:
        advantage = sum(enemy_fraction[e] * MATRIX[your_type][e])

    With a normalized enemy formation this is a convex combination of the
    matrix row, so it stays within [ADVANTAGE_MIN, ADVANTAGE_MAX].
    """
    row = ADVANTAGE_MATRIX[your_type]
    return sum(enemy_formation[enemy_type] * row[enemy_type] for enemy_type in TROOP_TYPES)


# =============================================================================
# EFFECTIVE DAMAGE
# =============================================================================

def calculate_mitigation(enemy_def: float, enemy_hp: float,
                         alpha: float = DEFAULT_ALPHA, beta: float = DEFAULT_BETA) -> float:
    """
    Divisor representing how enemy DEF and HP suppress incoming damage.

    Formula:
        mitigation = (1 + DEF/100)^alpha * (1 + HP/100)^beta

    DEF or HP at or below -100% has no real-valued mitigation; NaN is
    returned and run_match() masks the resulting ratio.
    """
    def_base = 1 + enemy_def / 100
    hp_base = 1 + enemy_hp / 100
    if def_base <= 0 or hp_base <= 0:
        return math.nan
    return math.pow(def_base, alpha) * math.pow(hp_base, beta)


def calculate_effective_damage(
    troop_count: float,
    attack: float,
    lethality: float,
    advantage: float,
    enemy_def: float,
    enemy_hp: float,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
) -> float:
    """
    Effective damage dealt by one troop type.

    Formula:
        damage = troops * (1 + ATK/100) * (1 + LETH/100) * advantage / mitigation

    Args:
        troop_count: Troops of this type (total troops * formation fraction)
        attack: Attack % of the attacking type
        lethality: Lethality % of the attacking type
        advantage: Output of calculate_advantage()
        enemy_def: Defense % of the matching enemy type
        enemy_hp: Health % of the matching enemy type
        alpha: Exponent on enemy defense
        beta: Exponent on enemy health

    Returns:
        Effective damage (0 for zero troops, NaN for degenerate mitigation)
    """
    mitigation = calculate_mitigation(enemy_def, enemy_hp, alpha, beta)
    if not mitigation > 0:
        return math.nan
    return troop_count * (1 + attack / 100) * (1 + lethality / 100) * advantage / mitigation


def calculate_total_damage(
    side: Side,
    enemy_formation: Formation,
    enemy_stats: StatProfile,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
) -> DamageTotals:
    """
    Total effective damage of `side` attacking through the enemy's formation
    and DEF/HP.

    Each type's damage is rounded to 2 places before it is added to the
    total, so the total equals the sum of the displayed breakdown.
    """
    breakdown: Dict[TroopType, float] = {}
    total = 0.0

    for t in TROOP_TYPES:
        advantage = calculate_advantage(t, enemy_formation)
        stats = side.stats[t]
        enemy = enemy_stats[t]
        value = calculate_effective_damage(
            side.troop_count(t),
            stats.attack,
            stats.lethality,
            advantage,
            enemy.defense,
            enemy.health,
            alpha,
            beta,
        )
        breakdown[t] = round(value, DAMAGE_DECIMALS)
        total += breakdown[t]

    return DamageTotals(total=round(total, DAMAGE_DECIMALS), breakdown=breakdown)


# =============================================================================
# SYNERGY & WIN PROBABILITY
# =============================================================================

def calculate_formation_synergy(formation: Formation, config: BalanceConfig = DEFAULT_BALANCE) -> float:
    """
    Heuristic multiplier rewarding formations close to the reference mix.

    Formula:
        deviation = sum(|f[t] - reference[t]|)       (0..2)
        synergy = 1 + strength * (1 - deviation / 2)
        synergy *= role band bonus/penalty for each type
    """
    reference = Formation.from_tuple(config.reference_formation)
    deviation = sum(abs(formation[t] - reference[t]) for t in TROOP_TYPES)
    synergy = 1 + config.synergy_strength * (1 - deviation / 2)

    for role in config.role_bands:
        synergy *= role.multiplier(formation[role.troop_type])

    return synergy


def calculate_win_probability(ratio: float, steepness: float = WIN_CURVE_STEEPNESS) -> float:
    """
    Logistic win probability (0..1) for a damage ratio.

    Formula:
        P(win) = 1 / (1 + e^(-k * (ratio - 1)))
    """
    exponent = -steepness * (ratio - 1.0)
    # math.exp overflows past ~709; the probability is already 0 there
    if exponent > 700:
        return 0.0
    return 1.0 / (1.0 + math.exp(exponent))


def win_percentage_from_ratio(ratio: float, steepness: float = WIN_CURVE_STEEPNESS) -> float:
    """Win probability as a percentage with one decimal place."""
    return round(calculate_win_probability(ratio, steepness) * 100, WIN_PERCENT_DECIMALS)


# =============================================================================
# MATCH SIMULATION
# =============================================================================

def run_match(
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: Optional[BalanceConfig] = None,
) -> MatchResult:
    """
    Simulate one match and return the damage ratio and win chance.

    Both directions are computed: your troops attack through the enemy's
    formation and DEF/HP, and the enemy's troops attack through yours.
    The ratio is then adjusted by your formation's synergy.

    A zero enemy total yields ratio 1.0 (synergy is not applied), and any
    non-finite ratio is clamped to 1.0.
    """
    if config is None:
        config = DEFAULT_BALANCE

    yours = calculate_total_damage(your_side, enemy_side.formation, enemy_side.stats, alpha, beta)
    theirs = calculate_total_damage(enemy_side, your_side.formation, your_side.stats, alpha, beta)

    if theirs.total <= 0:
        ratio = SAFE_DEFAULT_RATIO
    else:
        ratio = yours.total / theirs.total
        if config.synergy_enabled:
            ratio *= calculate_formation_synergy(your_side.formation, config)

    if not math.isfinite(ratio):
        ratio = SAFE_DEFAULT_RATIO

    ratio = round(ratio, RATIO_DECIMALS)

    return MatchResult(
        formation=your_side.formation,
        ratio=ratio,
        win_percentage=win_percentage_from_ratio(ratio, config.win_curve_steepness),
        your_damage=yours.total,
        enemy_damage=theirs.total,
        your_breakdown=yours.breakdown,
        enemy_breakdown=theirs.breakdown,
    )
