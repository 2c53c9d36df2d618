"""
Kingshot Formation Optimizer - Formation Space
==============================================
Constraint checks and generators for formations used by the optimizers.

The simulator accepts any normalized formation. Optimizer candidates must
also pass validate_formation_constraints().
"""

import math
import random
from typing import List, Optional

from .constants import (
    BALANCED_FORMATION,
    CONSTRAINED_ATTEMPTS,
    CONSTRAINED_PERTURBATION,
    FALLBACK_FORMATION,
    FORMATION_BANDS,
    FORMATION_STEP,
    FORMATION_SUM_TOLERANCE,
    MAX_IMBALANCE_RATIO,
    TROOP_TYPES,
)
from .stats import Formation

# Float slack for band edges such as 0.6 computed as 0.30 + 0.30
_EPSILON = 1e-9


# =============================================================================
# VALIDATION
# =============================================================================

def validate_formation_constraints(formation: Formation) -> bool:
    """
    Check whether a formation is admissible as an optimizer candidate.

    Rules:
        - every fraction inside its FORMATION_BANDS range
        - fractions sum to 1 within FORMATION_SUM_TOLERANCE
        - cavalry <= infantry + archer
        - sorted fractions a >= b >= c satisfy a / (b + c) <= MAX_IMBALANCE_RATIO
    """
    if not formation.is_finite():
        return False

    for t in TROOP_TYPES:
        lo, hi = FORMATION_BANDS[t]
        if not (lo - _EPSILON <= formation[t] <= hi + _EPSILON):
            return False

    if abs(formation.total() - 1.0) > FORMATION_SUM_TOLERANCE:
        return False

    if formation.cavalry > formation.infantry + formation.archer + _EPSILON:
        return False

    a, b, c = sorted(formation.as_tuple(), reverse=True)
    if b + c <= 0 or a / (b + c) > MAX_IMBALANCE_RATIO:
        return False

    return True


# =============================================================================
# ROUNDING
# =============================================================================

def round_to_5_percent(formation: Formation) -> Formation:
    """
    Snap every fraction to the nearest 5% and repair the sum.

    The input is normalized first, each fraction is snapped (half up) and
    the leftover is added to the largest snapped component so the result
    sums to exactly 100%. Archer takes the floating-point remainder, so
    `total()` is exactly 1.0. Non-finite or all-zero input returns
    FALLBACK_FORMATION.
    """
    if not formation.is_finite() or formation.total() <= 0:
        return Formation.from_tuple(FALLBACK_FORMATION)

    steps_total = int(round(1 / FORMATION_STEP))
    normalized = formation.normalized().as_tuple()
    steps = [int(math.floor(v / FORMATION_STEP + 0.5)) for v in normalized]

    residual = steps_total - sum(steps)
    if residual:
        # Ties on the snapped value go to the larger raw fraction
        largest = max(range(3), key=lambda i: (steps[i], normalized[i]))
        steps[largest] += residual

    infantry, cavalry = steps[0] / steps_total, steps[1] / steps_total
    return Formation(infantry, cavalry, 1.0 - (infantry + cavalry))


# =============================================================================
# GENERATION
# =============================================================================

def generate_random_formation(rng: Optional[random.Random] = None) -> Formation:
    """Draw each fraction from its band, normalize, then round to 5%."""
    rng = rng or random.Random()
    raw = Formation(*(rng.uniform(*FORMATION_BANDS[t]) for t in TROOP_TYPES))
    return round_to_5_percent(raw.normalized())


def generate_constrained_formation(
    base: Optional[Formation] = None,
    rng: Optional[random.Random] = None,
    attempts: int = CONSTRAINED_ATTEMPTS,
    perturbation: float = CONSTRAINED_PERTURBATION,
) -> Formation:
    """
    Generate a formation that passes validate_formation_constraints().

    Each attempt perturbs every component of `base` by up to
    +/- `perturbation` (or draws a fresh random formation when no base is
    given), renormalizes and validates. The first valid candidate wins;
    after `attempts` failures the rounded BALANCED_FORMATION is returned.
    """
    rng = rng or random.Random()

    for _ in range(attempts):
        if base is not None and base.is_finite():
            candidate = Formation(*(
                v + rng.uniform(-perturbation, perturbation) for v in base.as_tuple()
            )).normalized()
        else:
            candidate = generate_random_formation(rng)

        if validate_formation_constraints(candidate):
            return candidate

    return round_to_5_percent(Formation.from_tuple(BALANCED_FORMATION))


def neighbor_formations(formation: Formation, step: float = FORMATION_STEP) -> List[Formation]:
    """
    All valid formations one `step` away from `formation`.

    A neighbour moves `step` of weight from one troop type to another; the
    result is rounded to 5% and kept only when it passes validation.
    Results are unique and never include the (rounded) input itself.
    """
    origin = round_to_5_percent(formation)
    seen = {origin.key()}
    neighbors: List[Formation] = []

    for give in range(3):
        for take in range(3):
            if give == take:
                continue
            values = list(origin.as_tuple())
            values[give] -= step
            values[take] += step
            if min(values) < 0:
                continue
            candidate = round_to_5_percent(Formation(*values))
            if candidate.key() in seen or not validate_formation_constraints(candidate):
                continue
            seen.add(candidate.key())
            neighbors.append(candidate)

    return neighbors
