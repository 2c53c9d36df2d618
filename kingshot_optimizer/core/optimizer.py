"""
Kingshot Formation Optimizer - Formation Search
===============================================
Finds the formations that maximize your effectiveness against an enemy.

Three search modes share one entry point, search_best_formations():

- GENETIC (default): constrained genetic search against a known enemy
  formation and stat profile. Fitness blends damage ratio, win chance and
  a formation-efficiency score; invalid formations are penalized, not
  rejected, and repaired after mutation.
- GRID: exhaustive scan of the 5% grid, ranked by damage ratio.
- BLIND: used automatically when the enemy stats are all zero (no intel).
  See core/blind_optimizer.py.

Every mode evaluates formations through run_match() only.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .constants import (
    BLIND_ENEMY_STATS,
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    GRID_SEARCH_BOUNDS,
    GRID_SEARCH_STEP_PCT,
    META_FORMATIONS,
    PLAYSTYLE_DOMINANT_SHARE,
    PLAYSTYLE_HYBRID_SHARE,
    TROOP_TYPES,
    FORMATION_BANDS,
    TroopType,
)
from .damage import (
    DEFAULT_BALANCE,
    BalanceConfig,
    MatchResult,
    calculate_formation_synergy,
    run_match,
)
from .formations import (
    generate_constrained_formation,
    round_to_5_percent,
    validate_formation_constraints,
)
from .stats import Formation, Side

logger = logging.getLogger(__name__)


class SearchMode(Enum):
    """How search_best_formations() explores the formation space."""
    GENETIC = "genetic"
    GRID = "grid"
    BLIND = "blind"


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class OptimizerConfig:
    """All search heuristics in one place."""
    # Genetic search
    population_size: int = 60
    generations: int = 30
    mutation_rate: float = 0.12
    tournament_size: int = 3
    crossover_noise: float = 0.05
    mutation_noise: float = 0.05

    # Fitness = w_ratio * ratio + w_win * win% / 100 + w_eff * efficiency
    ratio_weight: float = 0.5
    win_weight: float = 0.3
    efficiency_weight: float = 0.2
    constraint_penalty: float = 0.5

    # Efficiency: fraction of types inside their ideal band, times synergy
    ideal_bands: Tuple[Tuple[TroopType, Tuple[float, float]], ...] = (
        (TroopType.ARCHER, (0.35, 0.55)),
        (TroopType.INFANTRY, (0.25, 0.45)),
        (TroopType.CAVALRY, (0.15, 0.35)),
    )
    imbalance_ratio: float = 3.0
    imbalance_penalty: float = 0.8

    # Blind PVP
    candidate_variants: int = 3
    scenario_count: int = 8
    scenario_jitter: float = 0.04
    blind_enemy_stats: Tuple[float, float, float, float] = BLIND_ENEMY_STATS
    meta_formations: Tuple[Tuple[str, str, Tuple[float, float, float], float], ...] = META_FORMATIONS
    playstyle_dominant_share: float = PLAYSTYLE_DOMINANT_SHARE
    playstyle_hybrid_share: float = PLAYSTYLE_HYBRID_SHARE

    top_k: int = 5
    balance: BalanceConfig = DEFAULT_BALANCE


DEFAULT_OPTIMIZER_CONFIG = OptimizerConfig()


# =============================================================================
# RESULT DATACLASSES
# =============================================================================

@dataclass
class Candidate:
    """A formation and its fitness within one genetic run."""
    formation: Formation
    fitness: float = 0.0


@dataclass(frozen=True)
class Recommendation:
    """
    One recommended formation with its evaluated match.

    `score` is the value the search ranked by: fitness for GENETIC, ratio
    for GRID and scenario-weighted mean ratio for BLIND. Blind results also
    carry a label, a description and the best/worst-case spread.
    """
    formation: Formation
    result: MatchResult
    score: float
    label: str = ""
    description: str = ""
    best_ratio: Optional[float] = None
    worst_ratio: Optional[float] = None

    @property
    def ratio(self) -> float:
        return self.result.ratio

    @property
    def win_percentage(self) -> float:
        return self.result.win_percentage

    @property
    def consistency(self) -> Optional[float]:
        """Best minus worst scenario ratio (lower = more robust)."""
        if self.best_ratio is None or self.worst_ratio is None:
            return None
        return round(self.best_ratio - self.worst_ratio, 4)


# =============================================================================
# FITNESS
# =============================================================================

def calculate_formation_efficiency(formation: Formation,
                                   config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG) -> float:
    """
    Score how well a formation fills its ideal role bands.

    Formula:
        efficiency = (types inside ideal band / 3) * synergy(formation)
        efficiency *= 0.8 if max fraction / min fraction > 3
    """
    in_band = 0
    for troop_type, (lo, hi) in config.ideal_bands:
        if lo <= formation[troop_type] <= hi:
            in_band += 1
    efficiency = in_band / len(config.ideal_bands)
    efficiency *= calculate_formation_synergy(formation, config.balance)

    smallest = min(formation.as_tuple())
    largest = max(formation.as_tuple())
    if smallest <= 0 or largest / smallest > config.imbalance_ratio:
        efficiency *= config.imbalance_penalty

    return efficiency


def evaluate_fitness(
    formation: Formation,
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG,
) -> float:
    """Fitness of `formation` against a fixed enemy (higher is better)."""
    result = run_match(your_side.with_formation(formation), enemy_side, alpha, beta, config.balance)
    fitness = (
        config.ratio_weight * result.ratio
        + config.win_weight * (result.win_percentage / 100)
        + config.efficiency_weight * calculate_formation_efficiency(formation, config)
    )
    if not validate_formation_constraints(formation):
        fitness *= config.constraint_penalty
    return fitness


# =============================================================================
# GENETIC OPERATORS
# =============================================================================

def tournament_select(population: List[Candidate], rng: random.Random,
                      tournament_size: int = 3) -> List[Candidate]:
    """Pick len(population) parents, each the fittest of a random group."""
    size = min(tournament_size, len(population))
    return [
        max(rng.sample(population, size), key=lambda c: c.fitness)
        for _ in range(len(population))
    ]


def blend_crossover(parent_a: Formation, parent_b: Formation, rng: random.Random,
                    noise: float = 0.05) -> Tuple[Formation, Formation]:
    """Two children: the parents' average plus independent uniform noise."""
    average = [(a + b) / 2 for a, b in zip(parent_a.as_tuple(), parent_b.as_tuple())]
    child_a = Formation(*(v + rng.uniform(-noise, noise) for v in average))
    child_b = Formation(*(v + rng.uniform(-noise, noise) for v in average))
    return child_a, child_b


def recombine(parents: List[Candidate], rng: random.Random,
              noise: float = 0.05) -> List[Formation]:
    """
    Cross consecutive parents pairwise. An unpaired last parent is crossed
    with the first one. Returns as many children as there are parents.
    """
    children: List[Formation] = []
    for i in range(0, len(parents), 2):
        mate = parents[i + 1] if i + 1 < len(parents) else parents[0]
        children.extend(blend_crossover(parents[i].formation, mate.formation, rng, noise))
    return children[:len(parents)]


def mutate_and_repair(child: Formation, rng: random.Random,
                      config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG) -> Formation:
    """
    Normalize, maybe nudge one component (clamped to its band), normalize
    again, and replace the child with a constrained formation if it is
    still invalid.
    """
    child = child.normalized()

    if rng.random() < config.mutation_rate:
        index = rng.randrange(len(TROOP_TYPES))
        lo, hi = FORMATION_BANDS[TROOP_TYPES[index]]
        values = list(child.as_tuple())
        values[index] = min(hi, max(lo, values[index] + rng.uniform(-config.mutation_noise, config.mutation_noise)))
        child = Formation(*values).normalized()

    if not validate_formation_constraints(child):
        child = generate_constrained_formation(child, rng)

    return child


# =============================================================================
# SEARCHES
# =============================================================================

def _top_recommendations(ranked: List[Tuple[Formation, float]], your_side: Side, enemy_side: Side,
                         alpha: float, beta: float, config: OptimizerConfig) -> List[Recommendation]:
    """Round ranked formations to 5%, drop duplicates and re-evaluate the top K."""
    recommendations: List[Recommendation] = []
    seen = set()
    for formation, score in ranked:
        rounded = round_to_5_percent(formation)
        if rounded.key() in seen:
            continue
        seen.add(rounded.key())
        result = run_match(your_side.with_formation(rounded), enemy_side, alpha, beta, config.balance)
        recommendations.append(Recommendation(formation=rounded, result=result, score=score))
        if len(recommendations) >= config.top_k:
            break
    return recommendations


def genetic_search(
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG,
    rng: Optional[random.Random] = None,
) -> List[Recommendation]:
    """
    Evolve formations against a known enemy and return the top K.

    Each generation: evaluate -> tournament select -> blend crossover ->
    mutate and repair. The final population is ranked by fitness; the
    reported formations are rounded to 5% and re-evaluated, so their
    ratio and breakdown describe the rounded formation.
    """
    rng = rng or random.Random()

    if config.population_size <= 0:
        logger.warning("genetic search skipped: population size %d", config.population_size)
        return []

    population = [
        Candidate(generate_constrained_formation(rng=rng))
        for _ in range(config.population_size)
    ]

    def evaluate(candidates: List[Candidate]) -> None:
        for candidate in candidates:
            candidate.fitness = evaluate_fitness(
                candidate.formation, your_side, enemy_side, alpha, beta, config
            )

    for generation in range(config.generations):
        evaluate(population)
        logger.debug("generation %d best fitness %.4f", generation,
                     max(c.fitness for c in population))

        parents = tournament_select(population, rng, config.tournament_size)
        children = recombine(parents, rng, config.crossover_noise)
        population = [Candidate(mutate_and_repair(child, rng, config)) for child in children]

    evaluate(population)
    population.sort(key=lambda c: c.fitness, reverse=True)

    return _top_recommendations(
        [(c.formation, c.fitness) for c in population],
        your_side, enemy_side, alpha, beta, config,
    )


def grid_formations() -> List[Formation]:
    """Every formation on the 5% grid inside GRID_SEARCH_BOUNDS."""
    inf_lo, inf_hi = GRID_SEARCH_BOUNDS[TroopType.INFANTRY]
    cav_lo, cav_hi = GRID_SEARCH_BOUNDS[TroopType.CAVALRY]
    arch_lo, arch_hi = GRID_SEARCH_BOUNDS[TroopType.ARCHER]

    formations = []
    for inf_pct in range(inf_lo, inf_hi + 1, GRID_SEARCH_STEP_PCT):
        for cav_pct in range(cav_lo, cav_hi + 1, GRID_SEARCH_STEP_PCT):
            arch_pct = 100 - inf_pct - cav_pct
            if arch_lo <= arch_pct <= arch_hi:
                formations.append(Formation.from_percentages(inf_pct, cav_pct, arch_pct))
    return formations


def grid_search(
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG,
) -> List[Recommendation]:
    """Evaluate the whole 5% grid and return the top K by damage ratio."""
    results = [
        run_match(your_side.with_formation(f), enemy_side, alpha, beta, config.balance)
        for f in grid_formations()
    ]
    results.sort(key=lambda r: r.ratio, reverse=True)
    return [
        Recommendation(formation=r.formation, result=r, score=r.ratio)
        for r in results[:config.top_k]
    ]


def search_best_formations(
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: Optional[OptimizerConfig] = None,
    rng: Optional[random.Random] = None,
    mode: SearchMode = SearchMode.GENETIC,
) -> List[Recommendation]:
    """
    Recommend up to top_k formations against `enemy_side`.

    `mode` may be a SearchMode or its value ("genetic", "grid", "blind").

    All-zero enemy stats mean nothing is known about the enemy, so the
    blind optimizer is used regardless of `mode`.
    """
    from .blind_optimizer import blind_search

    if config is None:
        config = DEFAULT_OPTIMIZER_CONFIG
    rng = rng or random.Random()
    mode = SearchMode(mode)

    if mode is SearchMode.BLIND or enemy_side.stats.is_zero():
        logger.info("enemy stats unknown, running blind search")
        return blind_search(your_side, enemy_side, alpha, beta, config, rng)

    if mode is SearchMode.GRID:
        logger.info("running grid search")
        return grid_search(your_side, enemy_side, alpha, beta, config)

    logger.info("running genetic search (population %d, generations %d)",
                config.population_size, config.generations)
    return genetic_search(your_side, enemy_side, alpha, beta, config, rng)
