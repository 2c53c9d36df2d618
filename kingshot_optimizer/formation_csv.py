"""
Snapshot exchange format for the calculator inputs.

One header row and six data rows, one per (side, troop type):

    Side,Type,Attack,Defense,Lethality,Health,Formation %,Total Troops
    Your,Inf,...,33,100000
    Your,Cav,...,33,
    ...

`Formation %` is the fraction x 100 as an integer; `Total Troops` is only
filled on each side's first row.
"""
import csv
import io
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from core import TROOP_TYPES, Formation, Side, StatProfile, TroopStats, TroopType

logger = logging.getLogger(__name__)

HEADER = ['Side', 'Type', 'Attack', 'Defense', 'Lethality', 'Health', 'Formation %', 'Total Troops']

YOUR_SIDE_LABEL = 'Your'
ENEMY_SIDE_LABEL = 'Enemy'

# Header plus one row per side and troop type
MIN_LINES = 1 + 2 * len(TROOP_TYPES)

# Rows shorter than this (no formation column) are skipped
MIN_FIELDS = 7


class SnapshotFormatError(ValueError):
    """Raised when a snapshot cannot be read at all."""


def snapshot_filename(on: Optional[date] = None) -> str:
    """Default download name, e.g. kingshot_stats_2026-10-19.csv."""
    on = on or date.today()
    return f"kingshot_stats_{on.isoformat()}.csv"


def _side_rows(label: str, side: Side) -> List[list]:
    rows = []
    for i, t in enumerate(TROOP_TYPES):
        stats = side.stats[t]
        rows.append([
            label,
            t.value,
            _format_number(stats.attack),
            _format_number(stats.defense),
            _format_number(stats.lethality),
            _format_number(stats.health),
            int(round(side.formation[t] * 100)),
            side.troops if i == 0 else '',
        ])
    return rows


def _format_number(value: float):
    """Write whole numbers without a trailing .0."""
    if float(value).is_integer():
        return int(value)
    return value


def export_snapshot(your_side: Side, enemy_side: Side) -> str:
    """Serialize both sides to snapshot CSV text."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(HEADER)
    writer.writerows(_side_rows(YOUR_SIDE_LABEL, your_side))
    writer.writerows(_side_rows(ENEMY_SIDE_LABEL, enemy_side))
    return output.getvalue()


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_int(value: str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def import_snapshot(csv_content: str) -> Tuple[Side, Side]:
    """
    Parse snapshot CSV text into (your_side, enemy_side).

    Unparsable numbers read as 0 and short or unknown rows are skipped.
    Troop types missing from the file keep zero stats and a zero fraction.

    Raises:
        SnapshotFormatError: fewer than 7 non-empty lines
    """
    lines = [line for line in csv_content.splitlines() if line.strip()]
    if len(lines) < MIN_LINES:
        raise SnapshotFormatError('Invalid CSV format: not enough rows')

    stats: Dict[str, Dict[TroopType, TroopStats]] = {YOUR_SIDE_LABEL: {}, ENEMY_SIDE_LABEL: {}}
    fractions: Dict[str, Dict[TroopType, float]] = {YOUR_SIDE_LABEL: {}, ENEMY_SIDE_LABEL: {}}
    troops: Dict[str, int] = {YOUR_SIDE_LABEL: 0, ENEMY_SIDE_LABEL: 0}

    # Skip header row
    for line_no, row in enumerate(csv.reader(lines[1:]), start=2):
        parts = [p.strip() for p in row]
        if len(parts) < MIN_FIELDS:
            logger.warning("snapshot line %d skipped: %d fields", line_no, len(parts))
            continue

        side, type_label, atk, defense, leth, hp, formation_pct = parts[:7]
        total_troops = parts[7] if len(parts) > 7 else ''

        if side not in stats:
            logger.warning("snapshot line %d skipped: unknown side %r", line_no, side)
            continue
        try:
            troop_type = TroopType(type_label)
        except ValueError:
            logger.warning("snapshot line %d skipped: unknown troop type %r", line_no, type_label)
            continue

        stats[side][troop_type] = TroopStats(
            attack=_parse_float(atk),
            defense=_parse_float(defense),
            lethality=_parse_float(leth),
            health=_parse_float(hp),
        )
        fractions[side][troop_type] = _parse_float(formation_pct) / 100
        if total_troops:
            troops[side] = _parse_int(total_troops)

    def build(side: str) -> Side:
        return Side(
            stats=StatProfile.from_dict(stats[side]),
            formation=Formation.from_dict(fractions[side]),
            troops=troops[side],
        )

    return build(YOUR_SIDE_LABEL), build(ENEMY_SIDE_LABEL)
