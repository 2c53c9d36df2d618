"""
Data manager for the calculator page.
Converts between form inputs, engine types and the CSV snapshot format.
Nothing here is persisted; snapshots are downloaded/uploaded by the user.
"""
import os
import sys
from typing import Dict, List, Optional, Tuple

import pandas as pd

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core import (
    BALANCED_FORMATION,
    INPUT_SUM_TOLERANCE,
    TROOP_TYPES,
    Formation,
    Recommendation,
    Side,
    StatProfile,
    TroopStats,
    TroopType,
)
from constants import format_formation, get_troop_display_name
from formation_csv import SnapshotFormatError, export_snapshot, import_snapshot

# Order of the stat inputs on the page
STAT_FIELDS = ["attack", "defense", "lethality", "health"]
STAT_LABELS = {
    "attack": "Attack %",
    "defense": "Defense %",
    "lethality": "Lethality %",
    "health": "Health %",
}


def default_side() -> Side:
    """Zero stats, an even split and no troops (the page's starting state)."""
    return Side(
        stats=StatProfile(),
        formation=Formation.from_tuple(BALANCED_FORMATION),
        troops=0,
    )


def side_from_inputs(
    stat_inputs: Dict[TroopType, Dict[str, float]],
    formation_pcts: Dict[TroopType, float],
    troops: int,
) -> Side:
    """
    Build a Side from the page widgets.

    Args:
        stat_inputs: troop type -> {attack, defense, lethality, health}
        formation_pcts: troop type -> percentage (0-100)
        troops: total troop count
    """
    stats = {
        t: TroopStats(**{f: float(stat_inputs.get(t, {}).get(f, 0)) for f in STAT_FIELDS})
        for t in TROOP_TYPES
    }
    return Side(
        stats=StatProfile.from_dict(stats),
        formation=Formation.from_dict({t: formation_pcts.get(t, 0) / 100 for t in TROOP_TYPES}),
        troops=int(troops),
    )


def validate_inputs(your_side: Side, enemy_side: Side) -> List[str]:
    """Return user-facing problems that block a calculation (empty if none)."""
    errors = []
    if your_side.troops <= 0 or enemy_side.troops <= 0:
        errors.append("Please enter troop numbers for both sides!")
    if abs(your_side.formation.total() - 1.0) > INPUT_SUM_TOLERANCE:
        errors.append("Your formation percentages must total 100%!")
    if abs(enemy_side.formation.total() - 1.0) > INPUT_SUM_TOLERANCE:
        errors.append("Enemy formation percentages must total 100%!")
    return errors


def export_sides_csv(your_side: Side, enemy_side: Side) -> str:
    """CSV snapshot text for the download button."""
    return export_snapshot(your_side, enemy_side)


def import_sides_csv(csv_content: str) -> Tuple[Optional[Tuple[Side, Side]], Optional[str]]:
    """
    Parse an uploaded snapshot.
    Returns ((your_side, enemy_side), None) on success, (None, message) on failure.
    """
    try:
        return import_snapshot(csv_content), None
    except SnapshotFormatError as e:
        return None, str(e)


def recommendations_to_dataframe(recommendations: List[Recommendation]) -> pd.DataFrame:
    """Tabular view of recommendations for st.dataframe()."""
    rows = []
    for rank, rec in enumerate(recommendations, start=1):
        row = {
            "Rank": rank,
            "Formation (Inf:Cav:Arch)": format_formation(rec.formation),
            "Ratio": rec.ratio,
            "Win %": rec.win_percentage,
        }
        for t in TROOP_TYPES:
            row[f"{get_troop_display_name(t)} Dmg"] = rec.result.your_breakdown.get(t, 0.0)
        if rec.label:
            row["Archetype"] = rec.label
        if rec.consistency is not None:
            row["Spread"] = rec.consistency
        rows.append(row)
    return pd.DataFrame(rows)
