"""
Unit tests for core/playstyle.py - Playstyle detection.
"""
import pytest
from core import (
    Playstyle,
    StatProfile,
    TroopStats,
    TroopType,
    calculate_relative_strengths,
    calculate_troop_efficiency,
    detect_playstyle,
)


def attack_profile(inf, cav, arch):
    return StatProfile(
        infantry=TroopStats(attack=inf),
        cavalry=TroopStats(attack=cav),
        archer=TroopStats(attack=arch),
    )


class TestTroopEfficiency:
    """Tests for calculate_troop_efficiency."""

    def test_weights(self):
        """Offense weighs 70%, defense 30%."""
        stats = TroopStats(attack=100, defense=200, lethality=50, health=300)
        # offensive 0.8, defensive 2.5
        assert calculate_troop_efficiency(stats) == pytest.approx(0.7 * 0.8 + 0.3 * 2.5)

    def test_zero_stats(self):
        """No stats, no efficiency."""
        assert calculate_troop_efficiency(TroopStats()) == 0


class TestRelativeStrengths:
    """Tests for calculate_relative_strengths."""

    def test_sums_to_one(self):
        """Relative strengths are normalized."""
        strengths = calculate_relative_strengths(attack_profile(400, 300, 200))
        assert sum(strengths.values()) == pytest.approx(1.0)

    def test_all_zero(self):
        """All-zero stats give all-zero strengths."""
        strengths = calculate_relative_strengths(StatProfile())
        assert all(v == 0 for v in strengths.values())


class TestDetectPlaystyle:
    """Tests for detect_playstyle."""

    def test_all_zero_is_balanced(self):
        """No stats means balanced."""
        assert detect_playstyle(StatProfile()) == Playstyle.BALANCED

    def test_dominant_archer(self):
        """A clearly strongest type defines the playstyle."""
        stats = StatProfile(
            infantry=TroopStats(attack=100),
            cavalry=TroopStats(attack=100),
            archer=TroopStats(attack=1000, lethality=800),
        )
        assert detect_playstyle(stats) == Playstyle.ARCHER

    def test_dominant_by_defense(self):
        """Defensive stats count toward dominance too."""
        stats = StatProfile(infantry=TroopStats(defense=1000, health=1000))
        assert detect_playstyle(stats) == Playstyle.INFANTRY

    def test_infantry_cavalry_hybrid(self):
        """Two types above 30% but below 38% form a hybrid."""
        assert detect_playstyle(attack_profile(400, 400, 300)) == Playstyle.INFANTRY_CAVALRY

    def test_hybrid_is_order_independent(self):
        """The stronger of the two does not change the hybrid."""
        assert detect_playstyle(attack_profile(380, 400, 300)) == Playstyle.INFANTRY_CAVALRY

    def test_infantry_archer_hybrid(self):
        """Infantry and archer pair up."""
        assert detect_playstyle(attack_profile(400, 300, 400)) == Playstyle.INFANTRY_ARCHER

    def test_cavalry_archer_hybrid(self):
        """Cavalry and archer pair up."""
        assert detect_playstyle(attack_profile(300, 400, 400)) == Playstyle.CAVALRY_ARCHER

    def test_dominance_threshold(self):
        """A share of exactly 38% or more is single-type."""
        strengths = calculate_relative_strengths(attack_profile(500, 450, 350))
        assert strengths[TroopType.INFANTRY] >= 0.38
        assert detect_playstyle(attack_profile(500, 450, 350)) == Playstyle.INFANTRY

    def test_custom_thresholds(self):
        """Thresholds can be tuned per call."""
        profile = attack_profile(400, 400, 300)
        assert detect_playstyle(profile, dominant_share=0.36) == Playstyle.INFANTRY
        assert detect_playstyle(profile, dominant_share=0.50, hybrid_share=0.40) == Playstyle.BALANCED
