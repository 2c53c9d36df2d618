"""
Unit tests for core/damage.py - Advantage, effective damage and match simulation.
"""
import math
import random

import pytest
from core import (
    ADVANTAGE_MAX,
    ADVANTAGE_MIN,
    TROOP_TYPES,
    BalanceConfig,
    Formation,
    Side,
    StatProfile,
    TroopStats,
    TroopType,
    calculate_advantage,
    calculate_effective_damage,
    calculate_formation_synergy,
    calculate_mitigation,
    calculate_total_damage,
    calculate_win_probability,
    run_match,
    win_percentage_from_ratio,
)

NO_SYNERGY = BalanceConfig(synergy_enabled=False)


def make_side(formation, troops=100000, stats=None):
    return Side(stats=stats or StatProfile(), formation=Formation(*formation), troops=troops)


class TestAdvantage:
    """Tests for calculate_advantage."""

    def test_pure_enemy_formation_uses_matrix_row(self):
        """Against a single-type enemy the advantage is the matrix entry."""
        pure_inf = Formation(1.0, 0.0, 0.0)
        assert calculate_advantage(TroopType.ARCHER, pure_inf) == pytest.approx(1.35)
        assert calculate_advantage(TroopType.CAVALRY, pure_inf) == pytest.approx(0.80)
        assert calculate_advantage(TroopType.INFANTRY, pure_inf) == pytest.approx(1.0)

    def test_rock_paper_scissors(self):
        """Each type beats one type and loses to another."""
        inf, cav, arch = Formation(1, 0, 0), Formation(0, 1, 0), Formation(0, 0, 1)
        assert calculate_advantage(TroopType.INFANTRY, cav) > 1.0
        assert calculate_advantage(TroopType.CAVALRY, arch) > 1.0
        assert calculate_advantage(TroopType.ARCHER, inf) > 1.0
        assert calculate_advantage(TroopType.INFANTRY, arch) < 1.0
        assert calculate_advantage(TroopType.CAVALRY, inf) < 1.0
        assert calculate_advantage(TroopType.ARCHER, cav) < 1.0

    def test_mixed_enemy_is_weighted_sum(self):
        """Mixed formations weight the matrix row by enemy fractions."""
        enemy = Formation(0.60, 0.30, 0.10)
        expected = 0.60 * 1.35 + 0.30 * 0.75 + 0.10 * 1.0
        assert calculate_advantage(TroopType.ARCHER, enemy) == pytest.approx(expected)

    def test_advantage_stays_within_matrix_bounds(self):
        """Any normalized enemy formation keeps advantage in [min, max]."""
        rng = random.Random(3)
        for _ in range(200):
            enemy = Formation(rng.random(), rng.random(), rng.random()).normalized()
            for t in TROOP_TYPES:
                value = calculate_advantage(t, enemy)
                assert ADVANTAGE_MIN - 1e-9 <= value <= ADVANTAGE_MAX + 1e-9


class TestEffectiveDamage:
    """Tests for calculate_mitigation and calculate_effective_damage."""

    def test_no_stats_is_troops_times_advantage(self):
        """With zero stats the formula collapses to troops * advantage."""
        assert calculate_effective_damage(1000, 0, 0, 1.2, 0, 0) == pytest.approx(1200)

    def test_full_formula(self):
        """ATK, LETH, DEF and HP all apply."""
        damage = calculate_effective_damage(1000, 100, 50, 1.2, 300, 100, alpha=0.7, beta=0.3)
        expected = 1000 * 2.0 * 1.5 * 1.2 / (4 ** 0.7 * 2 ** 0.3)
        assert damage == pytest.approx(expected)

    def test_alpha_beta_are_free_parameters(self):
        """Raising alpha strengthens enemy defense."""
        low = calculate_effective_damage(1000, 0, 0, 1.0, 500, 0, alpha=0.5, beta=0.3)
        high = calculate_effective_damage(1000, 0, 0, 1.0, 500, 0, alpha=1.0, beta=0.3)
        assert high < low
        assert high == pytest.approx(1000 / 6.0)

    def test_mitigation_is_one_without_stats(self):
        """No enemy DEF/HP means no mitigation."""
        assert calculate_mitigation(0, 0) == pytest.approx(1.0)

    def test_zero_troops_deal_no_damage(self):
        """Zero troops give zero damage."""
        assert calculate_effective_damage(0, 500, 500, 1.3, 100, 100) == 0

    def test_degenerate_mitigation_is_nan(self):
        """DEF at or below -100% has no real mitigation."""
        assert math.isnan(calculate_mitigation(-150, 0))
        assert math.isnan(calculate_effective_damage(1000, 0, 0, 1.0, -100, 0))


class TestTotalDamage:
    """Tests for calculate_total_damage."""

    def test_archer_heavy_vs_infantry_heavy(self):
        """Zero-stat damage per type is troops * fraction * advantage."""
        yours = make_side((0.25, 0.15, 0.60))
        enemy = make_side((0.60, 0.30, 0.10))
        totals = calculate_total_damage(yours, enemy.formation, enemy.stats)

        assert totals.breakdown[TroopType.INFANTRY] == pytest.approx(26125.0, abs=0.01)
        assert totals.breakdown[TroopType.CAVALRY] == pytest.approx(13650.0, abs=0.01)
        assert totals.breakdown[TroopType.ARCHER] == pytest.approx(68100.0, abs=0.01)
        assert totals.total == pytest.approx(107875.0, abs=0.01)

    def test_total_is_sum_of_rounded_breakdown(self):
        """Per-type values are rounded before they are summed."""
        stats = StatProfile(
            infantry=TroopStats(123.4, 56.7, 89.1, 23.4),
            cavalry=TroopStats(321.9, 65.4, 98.7, 43.2),
            archer=TroopStats(111.1, 222.2, 333.3, 444.4),
        )
        yours = make_side((0.33, 0.33, 0.34), troops=98765, stats=stats)
        totals = calculate_total_damage(yours, Formation(0.4, 0.3, 0.3), stats)

        for value in totals.breakdown.values():
            assert value == round(value, 2)
        assert totals.total == round(sum(totals.breakdown.values()), 2)

    def test_enemy_defense_reduces_damage(self):
        """Enemy DEF on a type lowers damage dealt to it."""
        yours = make_side((0.30, 0.20, 0.50))
        soft = calculate_total_damage(yours, Formation(0.3, 0.2, 0.5), StatProfile())
        hard = calculate_total_damage(yours, Formation(0.3, 0.2, 0.5), StatProfile.uniform(defense=500))
        assert hard.total < soft.total


class TestSynergy:
    """Tests for calculate_formation_synergy."""

    def test_reference_formation_gets_full_bonus(self):
        """The reference formation gets base synergy and every role bonus."""
        synergy = calculate_formation_synergy(Formation(0.30, 0.20, 0.50))
        assert synergy == pytest.approx(1.03 * 1.02 * 1.01 * 1.01)

    def test_far_formation_is_penalized(self):
        """A formation far from the reference scores below the reference."""
        far = calculate_formation_synergy(Formation(0.60, 0.30, 0.10))
        near = calculate_formation_synergy(Formation(0.30, 0.20, 0.50))
        assert far < near

    def test_synergy_strength_is_configurable(self):
        """With no strength and no role bands synergy is exactly 1."""
        config = BalanceConfig(synergy_strength=0.0, role_bands=())
        assert calculate_formation_synergy(Formation(0.6, 0.3, 0.1), config) == 1.0


class TestWinProbability:
    """Tests for the logistic win curve."""

    def test_even_ratio_is_fifty_percent(self):
        """Ratio 1.0 means a coin flip."""
        assert win_percentage_from_ratio(1.0) == 50.0

    def test_strictly_increasing(self):
        """Higher ratio, higher win probability."""
        ratios = [0.5, 0.8, 0.95, 1.0, 1.05, 1.2, 1.5]
        probs = [calculate_win_probability(r) for r in ratios]
        assert all(a < b for a, b in zip(probs, probs[1:]))

    def test_extreme_ratios_do_not_overflow(self):
        """Very low or high ratios saturate instead of raising."""
        assert calculate_win_probability(-1000) == 0.0
        assert calculate_win_probability(1000) == pytest.approx(1.0)

    def test_one_decimal_place(self):
        """Percentages are rounded to one decimal."""
        value = win_percentage_from_ratio(1.0314)
        assert value == round(value, 1)


class TestRunMatch:
    """Tests for run_match."""

    def test_mirror_match_is_even(self):
        """Equal sides give ratio 1 and 50% without synergy."""
        side = make_side((0.33, 0.33, 0.34))
        result = run_match(side, side, config=NO_SYNERGY)
        assert result.ratio == 1.0
        assert result.win_percentage == 50.0

    def test_mirror_match_within_synergy_noise(self):
        """With synergy the mirror match only moves by the synergy factor."""
        side = make_side((0.33, 0.33, 0.34))
        result = run_match(side, side)
        synergy = calculate_formation_synergy(side.formation)
        assert result.ratio == pytest.approx(synergy, abs=1e-4)
        assert abs(result.ratio - 1.0) < 0.05

    def test_archer_heavy_beats_infantry_heavy(self):
        """Archers' advantage over infantry shows in the ratio."""
        yours = make_side((0.25, 0.15, 0.60))
        enemy = make_side((0.60, 0.30, 0.10))
        result = run_match(yours, enemy, alpha=0.7, beta=0.3)
        assert result.your_damage == pytest.approx(107875.0, abs=0.01)
        assert result.enemy_damage == pytest.approx(100800.0, abs=0.01)
        assert result.ratio > 1.0
        assert result.win_percentage > 50.0

    def test_ratio_symmetry_without_synergy(self):
        """Swapping sides inverts the ratio when synergy is off."""
        a = make_side((0.30, 0.20, 0.50), troops=120000,
                      stats=StatProfile.uniform(attack=300, defense=200, lethality=150, health=250))
        b = make_side((0.45, 0.25, 0.30), troops=90000,
                      stats=StatProfile.uniform(attack=250, defense=350, lethality=100, health=300))
        forward = run_match(a, b, config=NO_SYNERGY).ratio
        backward = run_match(b, a, config=NO_SYNERGY).ratio
        assert forward * backward == pytest.approx(1.0, rel=1e-3)

    def test_ratio_symmetry_with_synergy_factored_out(self):
        """With synergy on, dividing out each side's synergy restores symmetry."""
        a = make_side((0.30, 0.20, 0.50))
        b = make_side((0.50, 0.30, 0.20))
        forward = run_match(a, b).ratio / calculate_formation_synergy(a.formation)
        backward = run_match(b, a).ratio / calculate_formation_synergy(b.formation)
        assert forward * backward == pytest.approx(1.0, rel=1e-3)

    def test_zero_enemy_troops_is_safe(self):
        """An enemy dealing no damage gives the safe default ratio."""
        result = run_match(make_side((0.3, 0.2, 0.5)), make_side((0.3, 0.2, 0.5), troops=0))
        assert result.ratio == 1.0
        assert result.win_percentage == 50.0
        assert math.isfinite(result.ratio)

    def test_degenerate_stats_are_masked(self):
        """Non-finite ratios are clamped to 1.0."""
        enemy = make_side((0.3, 0.2, 0.5), stats=StatProfile.uniform(defense=-150))
        result = run_match(make_side((0.3, 0.2, 0.5)), enemy)
        assert result.ratio == 1.0
        assert result.win_percentage == 50.0

    def test_result_reports_formation_and_breakdowns(self):
        """The result carries your formation and both breakdowns."""
        yours = make_side((0.30, 0.20, 0.50))
        result = run_match(yours, make_side((0.4, 0.3, 0.3)))
        assert result.formation == yours.formation
        assert set(result.your_breakdown) == set(TROOP_TYPES)
        assert set(result.enemy_breakdown) == set(TROOP_TYPES)
        assert "Ratio:" in result.breakdown()

    def test_ratio_has_four_decimals(self):
        """Ratio is rounded to 4 places."""
        result = run_match(make_side((0.30, 0.20, 0.50)), make_side((0.35, 0.30, 0.35), troops=87654))
        assert result.ratio == round(result.ratio, 4)
