"""
Kingshot Formation Optimizer - Blind PVP
========================================
Recommends formations when nothing is known about the enemy (all-zero
enemy stats).

Steps:
1. Detect your playstyle from your stats.
2. Build ~12 candidates: the playstyle's archetype formations plus a few
   random one-step (5%) neighbours of each.
3. Draw enemy scenarios from the weighted META_FORMATIONS table, each
   jittered by up to +/-4% per type.
4. Run every candidate against every scenario using average placeholder
   enemy stats, and rank candidates by scenario-weighted mean ratio.
"""

import logging
import random
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import (
    BLIND_ENEMY_STATS,
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    META_FORMATIONS,
    PLAYSTYLE_FORMATIONS,
    Playstyle,
)
from .damage import MatchResult, run_match
from .formations import neighbor_formations, round_to_5_percent
from .optimizer import DEFAULT_OPTIMIZER_CONFIG, OptimizerConfig, Recommendation
from .playstyle import detect_playstyle
from .stats import Formation, Side, StatProfile

logger = logging.getLogger(__name__)

# Enemy fractions never drop below this after jitter
_MIN_SCENARIO_FRACTION = 0.01

# (label, description, (inf, cav, arch), weight)
MetaFormation = Tuple[str, str, Tuple[float, float, float], float]


@dataclass(frozen=True)
class EnemyScenario:
    """One probable enemy formation and how much it counts."""
    formation: Formation
    weight: float
    label: str
    description: str = ""


@dataclass
class _ScenarioTally:
    """Running results of one candidate across all scenarios."""
    label: str
    formation: Formation
    weighted_ratio: float = 0.0
    total_weight: float = 0.0
    best: Optional[Tuple[MatchResult, EnemyScenario]] = None
    worst: Optional[Tuple[MatchResult, EnemyScenario]] = None

    def add(self, result: MatchResult, scenario: EnemyScenario) -> None:
        self.weighted_ratio += result.ratio * scenario.weight
        self.total_weight += scenario.weight
        if self.best is None or result.ratio > self.best[0].ratio:
            self.best = (result, scenario)
        if self.worst is None or result.ratio < self.worst[0].ratio:
            self.worst = (result, scenario)

    @property
    def mean_ratio(self) -> float:
        if self.total_weight <= 0:
            return 0.0
        return self.weighted_ratio / self.total_weight


def blind_enemy_stats(values: Tuple[float, float, float, float] = BLIND_ENEMY_STATS) -> StatProfile:
    """Placeholder average enemy used when the real stats are unknown."""
    return StatProfile.uniform(*values)


def generate_candidate_formations(
    playstyle: Playstyle,
    rng: Optional[random.Random] = None,
    variants: int = 3,
) -> List[Tuple[str, Formation]]:
    """
    Labelled candidate formations tailored to a playstyle.

    Each archetype formation is included as-is, followed by up to
    `variants` randomly chosen 5% neighbours. Duplicates (at 1%
    granularity) keep their first label.
    """
    rng = rng or random.Random()
    candidates: List[Tuple[str, Formation]] = []
    seen = set()

    def add(label: str, formation: Formation) -> None:
        if formation.key() not in seen:
            seen.add(formation.key())
            candidates.append((label, formation))

    for label, values in PLAYSTYLE_FORMATIONS[playstyle]:
        base = round_to_5_percent(Formation.from_tuple(values))
        add(label, base)
        neighbors = neighbor_formations(base)
        for variant in rng.sample(neighbors, min(variants, len(neighbors))):
            add(f"{label} (variant)", variant)

    return candidates


def generate_enemy_scenarios(
    rng: Optional[random.Random] = None,
    count: int = 8,
    jitter: float = 0.04,
    meta_formations: Sequence[MetaFormation] = META_FORMATIONS,
) -> List[EnemyScenario]:
    """
    Draw `count` enemy scenarios from `meta_formations` by weight.

    Every draw is jittered by up to +/- `jitter` per type and renormalized;
    it keeps the table weight of the meta formation it came from.
    """
    rng = rng or random.Random()
    weights = [entry[3] for entry in meta_formations]
    draws = rng.choices(meta_formations, weights=weights, k=count)

    scenarios = []
    for label, description, values, weight in draws:
        jittered = Formation(*(
            max(_MIN_SCENARIO_FRACTION, v + rng.uniform(-jitter, jitter)) for v in values
        )).normalized()
        scenarios.append(EnemyScenario(jittered, weight, label, description))
    return scenarios


def _describe(tally: _ScenarioTally) -> str:
    best_result, best_scenario = tally.best
    worst_result, worst_scenario = tally.worst
    return (
        f"Best vs {best_scenario.label} ({best_result.ratio:.3f}), "
        f"worst vs {worst_scenario.label} ({worst_result.ratio:.3f})"
    )


def blind_search(
    your_side: Side,
    enemy_side: Side,
    alpha: float = DEFAULT_ALPHA,
    beta: float = DEFAULT_BETA,
    config: OptimizerConfig = DEFAULT_OPTIMIZER_CONFIG,
    rng: Optional[random.Random] = None,
) -> List[Recommendation]:
    """
    Rank playstyle candidates across probable enemy scenarios.

    The enemy's troop count is used when given; otherwise the enemy is
    assumed to field as many troops as you. Reported figures per
    recommendation:
        ratio          scenario-weighted mean ratio
        win_percentage mean of best- and worst-case win percentage
        breakdown      damage of the best-case scenario
    """
    rng = rng or random.Random()

    playstyle = detect_playstyle(
        your_side.stats, config.playstyle_dominant_share, config.playstyle_hybrid_share
    )
    candidates = generate_candidate_formations(playstyle, rng, config.candidate_variants)
    scenarios = generate_enemy_scenarios(
        rng, config.scenario_count, config.scenario_jitter, config.meta_formations
    )
    logger.info("blind search: playstyle %s, %d candidates x %d scenarios",
                playstyle.value, len(candidates), len(scenarios))

    enemy_stats = blind_enemy_stats(config.blind_enemy_stats)
    enemy_troops = enemy_side.troops if enemy_side.troops > 0 else your_side.troops

    tallies: Dict[tuple, _ScenarioTally] = {}
    for label, formation in candidates:
        tally = tallies.setdefault(formation.key(), _ScenarioTally(label, formation))
        for scenario in scenarios:
            enemy = Side(enemy_stats, scenario.formation, enemy_troops)
            result = run_match(your_side.with_formation(formation), enemy, alpha, beta, config.balance)
            tally.add(result, scenario)
            logger.debug("%s vs %s: ratio %.4f", label, scenario.label, result.ratio)

    ranked = sorted(tallies.values(), key=lambda t: t.mean_ratio, reverse=True)

    recommendations: List[Recommendation] = []
    seen = set()
    for tally in ranked:
        if tally.best is None:
            continue
        rounded = round_to_5_percent(tally.formation)
        if rounded.key() in seen:
            continue
        seen.add(rounded.key())

        best_result = tally.best[0]
        worst_result = tally.worst[0]
        win = (best_result.win_percentage + worst_result.win_percentage) / 2
        result = replace(
            best_result,
            formation=rounded,
            ratio=round(tally.mean_ratio, 4),
            win_percentage=round(win, 1),
        )
        recommendations.append(Recommendation(
            formation=rounded,
            result=result,
            score=tally.mean_ratio,
            label=tally.label,
            description=_describe(tally),
            best_ratio=best_result.ratio,
            worst_ratio=worst_result.ratio,
        ))
        if len(recommendations) >= config.top_k:
            break

    return recommendations
