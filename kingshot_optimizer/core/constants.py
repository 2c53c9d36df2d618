"""
Kingshot Formation Optimizer - Core Constants
=============================================
Single source of truth for troop types, the matchup table, formation bands
and the reference tables used by the optimizers.

The multipliers here are a game-balance approximation, not values read out
of the game client. Tune them here rather than in the formulas.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Tuple


# =============================================================================
# ENUMS
# =============================================================================

class TroopType(Enum):
    """The three troop types. Values match the snapshot/CSV labels."""
    INFANTRY = "Inf"
    CAVALRY = "Cav"
    ARCHER = "Arch"


# Canonical iteration order (Inf, Cav, Arch)
TROOP_TYPES: Tuple[TroopType, ...] = (
    TroopType.INFANTRY,
    TroopType.CAVALRY,
    TroopType.ARCHER,
)


class Playstyle(Enum):
    """Archetype detected from a player's stat profile."""
    INFANTRY = "infantry"
    CAVALRY = "cavalry"
    ARCHER = "archer"
    INFANTRY_CAVALRY = "infantry_cavalry"
    INFANTRY_ARCHER = "infantry_archer"
    CAVALRY_ARCHER = "cavalry_archer"
    BALANCED = "balanced"


# =============================================================================
# DAMAGE CONSTANTS
# =============================================================================

# Exponents for enemy DEF / HP in the mitigation divisor
DEFAULT_ALPHA = 0.7
DEFAULT_BETA = 0.3

# Logistic steepness for win probability: 1 / (1 + e^(-k * (ratio - 1)))
WIN_CURVE_STEEPNESS = 8.0

# Returned whenever the ratio cannot be computed (zero or non-finite)
SAFE_DEFAULT_RATIO = 1.0

# Per-type damage is rounded to this many places before summing
DAMAGE_DECIMALS = 2
RATIO_DECIMALS = 4
WIN_PERCENT_DECIMALS = 1


# =============================================================================
# ADVANTAGE MATRIX
# =============================================================================
# Infantry beats Cavalry, Cavalry beats Archer, Archer beats Infantry.
# ADVANTAGE_MATRIX[attacker][defender]

ADVANTAGE_MATRIX: Dict[TroopType, Dict[TroopType, float]] = MappingProxyType({
    TroopType.INFANTRY: MappingProxyType({
        TroopType.INFANTRY: 1.0,
        TroopType.CAVALRY: 1.20,
        TroopType.ARCHER: 0.85,
    }),
    TroopType.CAVALRY: MappingProxyType({
        TroopType.INFANTRY: 0.80,
        TroopType.CAVALRY: 1.0,
        TroopType.ARCHER: 1.30,
    }),
    TroopType.ARCHER: MappingProxyType({
        TroopType.INFANTRY: 1.35,
        TroopType.CAVALRY: 0.75,
        TroopType.ARCHER: 1.0,
    }),
})

ADVANTAGE_MIN = 0.75
ADVANTAGE_MAX = 1.35


# =============================================================================
# FORMATION CONSTRAINTS
# =============================================================================

# Admissible (min, max) fraction per type for optimizer-generated formations
FORMATION_BANDS: Dict[TroopType, Tuple[float, float]] = MappingProxyType({
    TroopType.INFANTRY: (0.15, 0.60),
    TroopType.CAVALRY: (0.10, 0.55),
    TroopType.ARCHER: (0.15, 0.60),
})

# Fractions must sum to 1 within this tolerance to pass validation
FORMATION_SUM_TOLERANCE = 0.01

# UI boundary: user-entered formations must sum to 1 within this tolerance
INPUT_SUM_TOLERANCE = 0.001

# Largest fraction / (sum of the other two) may not exceed this
MAX_IMBALANCE_RATIO = 2.5

# Rounding granularity for reported formations
FORMATION_STEP = 0.05

# Perturbation used by constrained generation
CONSTRAINED_PERTURBATION = 0.075
CONSTRAINED_ATTEMPTS = 10

# Grid used by the exhaustive search (inclusive percent bounds, per type)
GRID_SEARCH_BOUNDS: Dict[TroopType, Tuple[int, int]] = MappingProxyType({
    TroopType.INFANTRY: (10, 55),
    TroopType.CAVALRY: (10, 55),
    TroopType.ARCHER: (10, 55),
})
GRID_SEARCH_STEP_PCT = 5


# =============================================================================
# REFERENCE FORMATIONS (Inf, Cav, Arch)
# =============================================================================

# Formation the synergy layer pulls toward
REFERENCE_FORMATION = (0.30, 0.20, 0.50)

# Returned by round_to_5_percent for unusable input
FALLBACK_FORMATION = (0.30, 0.20, 0.50)

# Starting point when constrained generation gives up
BALANCED_FORMATION = (0.33, 0.33, 0.34)


# =============================================================================
# BLIND PVP
# =============================================================================

# Average enemy stats assumed when the enemy profile is unknown
# (attack, defense, lethality, health) for every troop type
BLIND_ENEMY_STATS = (500.0, 500.0, 400.0, 400.0)

# Named meta formations with selection weights (weights sum to 1).
# (label, description, (inf, cav, arch), weight)
META_FORMATIONS: Tuple[Tuple[str, str, Tuple[float, float, float], float], ...] = (
    ("Archer Meta", "Standard archer-backed line", (0.30, 0.20, 0.50), 0.20),
    ("Infantry Wall", "Heavy frontline, light backline", (0.60, 0.20, 0.20), 0.15),
    ("Cavalry Rush", "Cavalry-led flanking push", (0.25, 0.50, 0.25), 0.10),
    ("Even Split", "Roughly equal thirds", (0.33, 0.33, 0.34), 0.15),
    ("Glass Cannon", "Archer stack with a thin screen", (0.20, 0.10, 0.70), 0.10),
    ("Bruiser", "Infantry and cavalry melee push", (0.45, 0.35, 0.20), 0.10),
    ("Skirmisher", "Mobile cavalry with archer support", (0.20, 0.40, 0.40), 0.10),
    ("Anti-Cavalry", "Infantry screen over archers", (0.50, 0.10, 0.40), 0.10),
)

# Archetype base formations per playstyle: (label, (inf, cav, arch))
PLAYSTYLE_FORMATIONS: Dict[Playstyle, Tuple[Tuple[str, Tuple[float, float, float]], ...]] = MappingProxyType({
    Playstyle.INFANTRY: (
        ("Shield Wall", (0.50, 0.20, 0.30)),
        ("Infantry Anchor", (0.45, 0.15, 0.40)),
        ("Iron Front", (0.55, 0.15, 0.30)),
    ),
    Playstyle.CAVALRY: (
        ("Cavalry Charge", (0.35, 0.40, 0.25)),
        ("Flanking Riders", (0.25, 0.40, 0.35)),
        ("Mounted Vanguard", (0.30, 0.45, 0.25)),
    ),
    Playstyle.ARCHER: (
        ("Archer Volley", (0.25, 0.15, 0.60)),
        ("Longbow Line", (0.30, 0.15, 0.55)),
        ("Standard Archer", (0.30, 0.20, 0.50)),
    ),
    Playstyle.INFANTRY_CAVALRY: (
        ("Melee Hammer", (0.40, 0.35, 0.25)),
        ("Heavy Push", (0.45, 0.30, 0.25)),
        ("Melee Mix", (0.35, 0.35, 0.30)),
    ),
    Playstyle.INFANTRY_ARCHER: (
        ("Fortified Volley", (0.40, 0.15, 0.45)),
        ("Screened Archers", (0.35, 0.15, 0.50)),
        ("Turtle", (0.45, 0.15, 0.40)),
    ),
    Playstyle.CAVALRY_ARCHER: (
        ("Horse Archers", (0.25, 0.30, 0.45)),
        ("Raiders", (0.20, 0.35, 0.45)),
        ("Mobile Volley", (0.25, 0.25, 0.50)),
    ),
    Playstyle.BALANCED: (
        ("Balanced", (0.35, 0.30, 0.35)),
        ("Reference Mix", (0.30, 0.20, 0.50)),
        ("Steady Line", (0.35, 0.25, 0.40)),
    ),
})

# Relative strength at which a single type defines the playstyle
PLAYSTYLE_DOMINANT_SHARE = 0.38
# Relative strength a type needs to count toward a hybrid
PLAYSTYLE_HYBRID_SHARE = 0.30
