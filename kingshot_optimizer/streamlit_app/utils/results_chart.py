"""
Battle Result Charts

Plotly figures for the calculator page: per-type damage comparison for the
current match and a ratio chart for the recommended formations.
"""

import os
import sys
from typing import List

import plotly.graph_objects as go

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core import TROOP_TYPES, MatchResult, Recommendation
from constants import format_formation, get_ratio_color, get_troop_display_name


def create_damage_breakdown_chart(result: MatchResult, height: int = 320) -> go.Figure:
    """
    Grouped bars of your vs enemy effective damage per troop type.

    Args:
        result: MatchResult from run_match()
        height: Figure height in pixels

    Returns:
        Plotly Figure object ready for display with st.plotly_chart()
    """
    names = [get_troop_display_name(t) for t in TROOP_TYPES]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Your Damage",
        x=names,
        y=[result.your_breakdown.get(t, 0.0) for t in TROOP_TYPES],
        marker_color="#00d4ff",
        hovertemplate="%{x}: %{y:,.2f}<extra>Your Damage</extra>",
    ))
    fig.add_trace(go.Bar(
        name="Enemy Damage",
        x=names,
        y=[result.enemy_breakdown.get(t, 0.0) for t in TROOP_TYPES],
        marker_color="#ff6666",
        hovertemplate="%{x}: %{y:,.2f}<extra>Enemy Damage</extra>",
    ))

    fig.update_layout(
        barmode="group",
        title=f"Damage Breakdown (ratio {result.ratio:.4f})",
        height=height,
        margin=dict(l=40, r=20, t=50, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color="#ddd"),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def create_recommendation_chart(recommendations: List[Recommendation], height: int = 300) -> go.Figure:
    """
    Horizontal bars of damage ratio per recommended formation, colored like
    the ratio metric. Blind recommendations get an error bar spanning their
    worst- to best-case ratio.
    """
    labels = [f"#{i} {format_formation(r.formation)}" for i, r in enumerate(recommendations, start=1)]
    ratios = [r.ratio for r in recommendations]

    bar = go.Bar(
        x=ratios,
        y=labels,
        orientation="h",
        marker_color=[get_ratio_color(r) for r in ratios],
        hovertemplate="%{y}<br>Ratio: %{x:.3f}<extra></extra>",
    )
    if recommendations and all(r.best_ratio is not None for r in recommendations):
        bar.error_x = dict(
            type="data",
            symmetric=False,
            array=[r.best_ratio - r.ratio for r in recommendations],
            arrayminus=[r.ratio - r.worst_ratio for r in recommendations],
            color="#aaa",
        )

    fig = go.Figure(bar)
    fig.add_vline(x=1.0, line_dash="dash", line_color="#888")
    fig.update_layout(
        title="Recommended Formations",
        height=height,
        margin=dict(l=40, r=20, t=50, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color="#ddd"),
        yaxis=dict(autorange="reversed"),
    )
    return fig
