"""
Kingshot Formation Optimizer - Input Types
==========================================
Typed containers for the values the surrounding application hands the
engine: per-type stat profiles, formations and the side that bundles them.

All containers are immutable; the engine never mutates its inputs.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Tuple

from .constants import TROOP_TYPES, TroopType


@dataclass(frozen=True)
class TroopStats:
    """Percentage-style modifiers for one troop type (typically 0-2000)."""
    attack: float = 0.0
    defense: float = 0.0
    lethality: float = 0.0
    health: float = 0.0

    def is_zero(self) -> bool:
        return not (self.attack or self.defense or self.lethality or self.health)


@dataclass(frozen=True)
class StatProfile:
    """Stats for all three troop types."""
    infantry: TroopStats = field(default_factory=TroopStats)
    cavalry: TroopStats = field(default_factory=TroopStats)
    archer: TroopStats = field(default_factory=TroopStats)

    def __getitem__(self, troop_type: TroopType) -> TroopStats:
        if troop_type is TroopType.INFANTRY:
            return self.infantry
        if troop_type is TroopType.CAVALRY:
            return self.cavalry
        return self.archer

    def is_zero(self) -> bool:
        """All-zero stats are the 'no intel' sentinel used for blind PVP."""
        return all(self[t].is_zero() for t in TROOP_TYPES)

    @classmethod
    def uniform(cls, attack: float = 0.0, defense: float = 0.0,
                lethality: float = 0.0, health: float = 0.0) -> 'StatProfile':
        """Same stats for every troop type."""
        stats = TroopStats(attack, defense, lethality, health)
        return cls(infantry=stats, cavalry=stats, archer=stats)

    @classmethod
    def from_dict(cls, data: Mapping[TroopType, TroopStats]) -> 'StatProfile':
        return cls(
            infantry=data.get(TroopType.INFANTRY, TroopStats()),
            cavalry=data.get(TroopType.CAVALRY, TroopStats()),
            archer=data.get(TroopType.ARCHER, TroopStats()),
        )


@dataclass(frozen=True)
class Formation:
    """
    Fraction of an army assigned to each troop type.

    A well-formed formation sums to 1.0. The simulator accepts any
    normalized formation; the optimizers additionally enforce the
    per-type bands in core.constants.FORMATION_BANDS.
    """
    infantry: float
    cavalry: float
    archer: float

    def __getitem__(self, troop_type: TroopType) -> float:
        if troop_type is TroopType.INFANTRY:
            return self.infantry
        if troop_type is TroopType.CAVALRY:
            return self.cavalry
        return self.archer

    def __iter__(self) -> Iterator[float]:
        return iter(self.as_tuple())

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.infantry, self.cavalry, self.archer)

    def as_dict(self) -> Dict[TroopType, float]:
        return dict(zip(TROOP_TYPES, self.as_tuple()))

    def total(self) -> float:
        return self.infantry + self.cavalry + self.archer

    def is_finite(self) -> bool:
        return all(isinstance(v, (int, float)) and math.isfinite(v) for v in self.as_tuple())

    def normalized(self) -> 'Formation':
        """
        Scale so the fractions sum to 1. Negative components are clipped to
        zero first; an all-zero formation comes back unchanged.
        """
        values = [max(0.0, v) for v in self.as_tuple()]
        total = sum(values)
        if total <= 0:
            return self
        return Formation(*(v / total for v in values))

    def key(self, decimals: int = 2) -> Tuple[float, float, float]:
        """Hashable key rounded to the given granularity (0.01 by default)."""
        return tuple(round(v, decimals) for v in self.as_tuple())

    def percentages(self) -> Tuple[int, int, int]:
        """Integer percentages, as shown in the UI and written to snapshots."""
        return tuple(int(round(v * 100)) for v in self.as_tuple())

    @classmethod
    def from_tuple(cls, values) -> 'Formation':
        inf, cav, arch = values
        return cls(float(inf), float(cav), float(arch))

    @classmethod
    def from_dict(cls, data: Mapping[TroopType, float]) -> 'Formation':
        return cls(
            data.get(TroopType.INFANTRY, 0.0),
            data.get(TroopType.CAVALRY, 0.0),
            data.get(TroopType.ARCHER, 0.0),
        )

    @classmethod
    def from_percentages(cls, infantry: float, cavalry: float, archer: float) -> 'Formation':
        return cls(infantry / 100, cavalry / 100, archer / 100)


@dataclass(frozen=True)
class Side:
    """One army: its stats, formation and troop count."""
    stats: StatProfile
    formation: Formation
    troops: int = 0

    def troop_count(self, troop_type: TroopType) -> float:
        return self.troops * self.formation[troop_type]

    def with_formation(self, formation: Formation) -> 'Side':
        return Side(stats=self.stats, formation=formation, troops=self.troops)
