"""
Kingshot Formation Optimizer - Core Engine
==========================================
Single source of truth for the damage formula, the match simulator and the
formation searches.

All other modules should import from here rather than implementing their own formulas.
"""

from .constants import (
    # Enums
    TroopType,
    TROOP_TYPES,
    Playstyle,
    # Damage defaults
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    WIN_CURVE_STEEPNESS,
    # Tables
    ADVANTAGE_MATRIX,
    ADVANTAGE_MIN,
    ADVANTAGE_MAX,
    FORMATION_BANDS,
    INPUT_SUM_TOLERANCE,
    META_FORMATIONS,
    PLAYSTYLE_FORMATIONS,
    REFERENCE_FORMATION,
    FALLBACK_FORMATION,
    BALANCED_FORMATION,
)

from .stats import (
    TroopStats,
    StatProfile,
    Formation,
    Side,
)

from .damage import (
    # Configuration
    RoleBand,
    BalanceConfig,
    DEFAULT_BALANCE,
    # Results
    DamageTotals,
    MatchResult,
    # Formulas
    calculate_advantage,
    calculate_mitigation,
    calculate_effective_damage,
    calculate_total_damage,
    calculate_formation_synergy,
    calculate_win_probability,
    win_percentage_from_ratio,
    run_match,
)

from .formations import (
    validate_formation_constraints,
    round_to_5_percent,
    generate_random_formation,
    generate_constrained_formation,
    neighbor_formations,
)

from .playstyle import (
    calculate_troop_efficiency,
    calculate_relative_strengths,
    detect_playstyle,
)

from .optimizer import (
    SearchMode,
    OptimizerConfig,
    DEFAULT_OPTIMIZER_CONFIG,
    Candidate,
    Recommendation,
    calculate_formation_efficiency,
    evaluate_fitness,
    genetic_search,
    grid_formations,
    grid_search,
    search_best_formations,
)

from .blind_optimizer import (
    EnemyScenario,
    blind_enemy_stats,
    generate_candidate_formations,
    generate_enemy_scenarios,
    blind_search,
)

__all__ = [
    # Constants
    'TroopType',
    'TROOP_TYPES',
    'Playstyle',
    'DEFAULT_ALPHA',
    'DEFAULT_BETA',
    'WIN_CURVE_STEEPNESS',
    'ADVANTAGE_MATRIX',
    'ADVANTAGE_MIN',
    'ADVANTAGE_MAX',
    'FORMATION_BANDS',
    'INPUT_SUM_TOLERANCE',
    'META_FORMATIONS',
    'PLAYSTYLE_FORMATIONS',
    'REFERENCE_FORMATION',
    'FALLBACK_FORMATION',
    'BALANCED_FORMATION',
    # Input types
    'TroopStats',
    'StatProfile',
    'Formation',
    'Side',
    # Damage calculation
    'RoleBand',
    'BalanceConfig',
    'DEFAULT_BALANCE',
    'DamageTotals',
    'MatchResult',
    'calculate_advantage',
    'calculate_mitigation',
    'calculate_effective_damage',
    'calculate_total_damage',
    'calculate_formation_synergy',
    'calculate_win_probability',
    'win_percentage_from_ratio',
    'run_match',
    # Formation space
    'validate_formation_constraints',
    'round_to_5_percent',
    'generate_random_formation',
    'generate_constrained_formation',
    'neighbor_formations',
    # Playstyle
    'calculate_troop_efficiency',
    'calculate_relative_strengths',
    'detect_playstyle',
    # Search
    'SearchMode',
    'OptimizerConfig',
    'DEFAULT_OPTIMIZER_CONFIG',
    'Candidate',
    'Recommendation',
    'calculate_formation_efficiency',
    'evaluate_fitness',
    'genetic_search',
    'grid_formations',
    'grid_search',
    'search_best_formations',
    # Blind PVP
    'EnemyScenario',
    'blind_enemy_stats',
    'generate_candidate_formations',
    'generate_enemy_scenarios',
    'blind_search',
]
