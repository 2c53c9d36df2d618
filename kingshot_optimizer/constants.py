"""
Kingshot Formation Optimizer - Display Constants
================================================
Colors, labels and formatting helpers shared by the UI and reports.
"""

from typing import Dict, Tuple

from core import TROOP_TYPES, Formation, Playstyle, TroopType


# =============================================================================
# COLORS
# =============================================================================

# (minimum value, color) from best to worst; the last entry is the floor
RATIO_COLORS: Tuple[Tuple[float, str], ...] = (
    (1.1, "#00ff00"),
    (1.0, "#90ee90"),
    (0.9, "#ffff00"),
    (0.8, "#ffa500"),
    (float("-inf"), "#ff4444"),
)

WIN_COLORS: Tuple[Tuple[float, str], ...] = (
    (80, "#00ff00"),
    (60, "#90ee90"),
    (40, "#ffff00"),
    (20, "#ffa500"),
    (float("-inf"), "#ff4444"),
)

TROOP_COLORS: Dict[TroopType, str] = {
    TroopType.INFANTRY: "#5599ff",
    TroopType.CAVALRY: "#ffcc00",
    TroopType.ARCHER: "#66ff66",
}


# =============================================================================
# LABELS
# =============================================================================

TROOP_DISPLAY_NAMES: Dict[TroopType, str] = {
    TroopType.INFANTRY: "Infantry",
    TroopType.CAVALRY: "Cavalry",
    TroopType.ARCHER: "Archer",
}

PLAYSTYLE_DISPLAY_NAMES: Dict[Playstyle, str] = {
    Playstyle.INFANTRY: "Infantry Focus",
    Playstyle.CAVALRY: "Cavalry Focus",
    Playstyle.ARCHER: "Archer Focus",
    Playstyle.INFANTRY_CAVALRY: "Infantry / Cavalry Hybrid",
    Playstyle.INFANTRY_ARCHER: "Infantry / Archer Hybrid",
    Playstyle.CAVALRY_ARCHER: "Cavalry / Archer Hybrid",
    Playstyle.BALANCED: "Balanced",
}

FORMATION_LABEL = "Inf:Cav:Arch"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _pick_color(value: float, thresholds: Tuple[Tuple[float, str], ...]) -> str:
    for minimum, color in thresholds:
        if value >= minimum:
            return color
    return thresholds[-1][1]


def get_ratio_color(ratio: float) -> str:
    """Color for a damage ratio (green = favorable)."""
    return _pick_color(ratio, RATIO_COLORS)


def get_win_color(win_percentage: float) -> str:
    """Color for a win percentage (green = favorable)."""
    return _pick_color(win_percentage, WIN_COLORS)


def get_troop_display_name(troop_type: TroopType) -> str:
    return TROOP_DISPLAY_NAMES.get(troop_type, troop_type.value)


def get_playstyle_display_name(playstyle: Playstyle) -> str:
    return PLAYSTYLE_DISPLAY_NAMES.get(playstyle, playstyle.value.replace("_", " ").title())


def format_formation(formation: Formation) -> str:
    """Formation as integer percentages, e.g. '30:20:50'."""
    return ":".join(str(p) for p in formation.percentages())


def format_ratio(ratio: float, decimals: int = 4) -> str:
    return f"{ratio:.{decimals}f}"


def format_win_percentage(win_percentage: float) -> str:
    return f"{win_percentage:.1f}%"


def format_damage(damage: float) -> str:
    """Damage with thousands separators, e.g. '107,875.00'."""
    return f"{damage:,.2f}"


def troop_labels() -> Tuple[str, ...]:
    """Short labels in canonical order ('Inf', 'Cav', 'Arch')."""
    return tuple(t.value for t in TROOP_TYPES)
