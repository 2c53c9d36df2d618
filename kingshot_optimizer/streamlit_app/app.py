"""
Kingshot Formation Optimizer - Streamlit Web App
Total effective damage calculator and formation recommendations.
"""
import logging
import os
import sys

import streamlit as st

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core import (
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    TROOP_TYPES,
    SearchMode,
    detect_playstyle,
    run_match,
    search_best_formations,
)
from constants import (
    FORMATION_LABEL,
    format_damage,
    format_formation,
    format_ratio,
    format_win_percentage,
    get_playstyle_display_name,
    get_ratio_color,
    get_troop_display_name,
    get_win_color,
)
from formation_csv import snapshot_filename
from utils.data_manager import (
    STAT_FIELDS,
    STAT_LABELS,
    default_side,
    export_sides_csv,
    import_sides_csv,
    recommendations_to_dataframe,
    side_from_inputs,
    validate_inputs,
)
from utils.results_chart import create_damage_breakdown_chart, create_recommendation_chart

logging.basicConfig(level=logging.INFO)

# Page config
st.set_page_config(
    page_title="Kingshot Formation Optimizer",
    page_icon="🏹",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for dark theme
st.markdown("""
<style>
    .stApp {
        background-color: #1a1a2e;
    }
    .main-title {
        color: #00d4ff;
        font-size: 2.5em;
        font-weight: bold;
        text-align: center;
        margin-bottom: 5px;
    }
    .sub-title {
        color: #888;
        text-align: center;
        margin-bottom: 30px;
    }
    .big-stat {
        font-size: 2em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

SIDES = ("you", "enemy")


def init_session_state():
    """Initialize session state variables."""
    for prefix in SIDES:
        if f'{prefix}_side' not in st.session_state:
            st.session_state[f'{prefix}_side'] = default_side()
    if 'alpha' not in st.session_state:
        st.session_state.alpha = DEFAULT_ALPHA
    if 'beta' not in st.session_state:
        st.session_state.beta = DEFAULT_BETA
    if 'result' not in st.session_state:
        st.session_state.result = None
    if 'recommendations' not in st.session_state:
        st.session_state.recommendations = None
    if 'form_version' not in st.session_state:
        st.session_state.form_version = 0


def reset_results():
    st.session_state.result = None
    st.session_state.recommendations = None


def side_inputs(prefix: str, title: str):
    """Render stat, formation and troop inputs for one side; return the Side."""
    side = st.session_state[f'{prefix}_side']
    version = st.session_state.form_version

    st.subheader(title)
    stat_inputs = {}
    for t in TROOP_TYPES:
        st.markdown(f"**{get_troop_display_name(t)}**")
        cols = st.columns(len(STAT_FIELDS))
        stat_inputs[t] = {}
        for col, field_name in zip(cols, STAT_FIELDS):
            with col:
                stat_inputs[t][field_name] = st.number_input(
                    STAT_LABELS[field_name],
                    min_value=0.0,
                    value=float(getattr(side.stats[t], field_name)),
                    step=10.0,
                    key=f"{prefix}_{t.value}_{field_name}_{version}",
                )

    st.markdown(f"**Formation ({FORMATION_LABEL})**")
    formation_pcts = {}
    cols = st.columns(len(TROOP_TYPES))
    for col, t, pct in zip(cols, TROOP_TYPES, side.formation.percentages()):
        with col:
            formation_pcts[t] = st.number_input(
                f"{t.value} %",
                min_value=0,
                max_value=100,
                value=int(pct),
                step=5,
                key=f"{prefix}_{t.value}_pct_{version}",
            )
    total_pct = sum(formation_pcts.values())
    if total_pct != 100:
        st.caption(f"⚠️ Formation totals {total_pct}%")

    troops = st.number_input(
        "Total Troops",
        min_value=0,
        value=int(side.troops),
        step=1000,
        key=f"{prefix}_troops_{version}",
    )

    new_side = side_from_inputs(stat_inputs, formation_pcts, troops)
    st.session_state[f'{prefix}_side'] = new_side
    return new_side


def sidebar():
    """Advanced parameters, search mode and snapshot import/export."""
    with st.sidebar:
        st.markdown("### ⚙️ Advanced Parameters")
        st.session_state.alpha = st.number_input(
            "Alpha (Defense Weight)", value=float(st.session_state.alpha), step=0.1, format="%.2f")
        st.session_state.beta = st.number_input(
            "Beta (HP Weight)", value=float(st.session_state.beta), step=0.1, format="%.2f")
        mode_label = st.radio("Search Mode", ["Genetic", "Exhaustive grid"], index=0)
        st.session_state.search_mode = SearchMode.GRID if mode_label == "Exhaustive grid" else SearchMode.GENETIC
        st.caption("Blind PVP is used automatically when all enemy stats are 0.")

        st.divider()
        st.markdown("### 💾 Snapshot")
        st.download_button(
            "📥 Export to CSV",
            data=export_sides_csv(st.session_state.you_side, st.session_state.enemy_side),
            file_name=snapshot_filename(),
            mime="text/csv",
        )

        uploaded = st.file_uploader("📤 Import from CSV", type=["csv"])
        if uploaded is not None and st.button("Load snapshot"):
            sides, error = import_sides_csv(uploaded.getvalue().decode("utf-8"))
            if error:
                st.error(f"Import failed: {error}")
            else:
                st.session_state.you_side, st.session_state.enemy_side = sides
                st.session_state.form_version += 1
                reset_results()
                st.success("Stats imported successfully!")
                st.rerun()


def render_results():
    """Main stats, damage breakdown and recommendations."""
    result = st.session_state.result
    if result is None:
        return

    st.divider()
    st.header("📊 Battle Results")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("Damage Ratio")
        st.markdown(
            f'<div class="big-stat" style="color:{get_ratio_color(result.ratio)}">{format_ratio(result.ratio)}</div>',
            unsafe_allow_html=True)
    with col2:
        st.markdown("Win Probability")
        st.markdown(
            f'<div class="big-stat" style="color:{get_win_color(result.win_percentage)}">'
            f'{format_win_percentage(result.win_percentage)}</div>',
            unsafe_allow_html=True)
    with col3:
        st.metric("Your Damage", format_damage(result.your_damage))
        st.metric("Enemy Damage", format_damage(result.enemy_damage))

    st.plotly_chart(create_damage_breakdown_chart(result), use_container_width=True)

    recommendations = st.session_state.recommendations
    if not recommendations:
        return

    st.header("🧠 Top Recommended Formations")
    if st.session_state.get('blind_playstyle'):
        st.info(f"🕵️ Blind PVP: enemy stats unknown. Detected playstyle: "
                f"**{st.session_state.blind_playstyle}**")

    for rank, rec in enumerate(recommendations, start=1):
        line = (
            f"**#{rank}** `{format_formation(rec.formation)}` ({FORMATION_LABEL}) · "
            f"<span style='color:{get_ratio_color(rec.ratio)}'>Ratio: {rec.ratio:.3f}</span> · "
            f"<span style='color:{get_win_color(rec.win_percentage)}'>Win: {format_win_percentage(rec.win_percentage)}</span>"
        )
        if rec.label:
            line += f" · {rec.label}"
        st.markdown(line, unsafe_allow_html=True)
        if rec.description:
            st.caption(rec.description)

    st.plotly_chart(create_recommendation_chart(recommendations), use_container_width=True)
    st.dataframe(recommendations_to_dataframe(recommendations), hide_index=True, use_container_width=True)


def main():
    """Main entry point."""
    init_session_state()
    sidebar()

    st.markdown('<div class="main-title">🏹 Kingshot Formation Optimizer</div>', unsafe_allow_html=True)
    st.markdown('<div class="sub-title">Total Effective Damage & Formation Calculator</div>', unsafe_allow_html=True)

    col_you, col_swap, col_enemy = st.columns([10, 1, 10])
    with col_you:
        your_side = side_inputs("you", "👤 Your Stats")
    with col_swap:
        st.write("")
        if st.button("⇄", help="Swap Your ↔ Enemy"):
            st.session_state.you_side, st.session_state.enemy_side = st.session_state.enemy_side, your_side
            st.session_state.form_version += 1
            reset_results()
            st.rerun()
    with col_enemy:
        enemy_side = side_inputs("enemy", "💀 Enemy Stats")

    if st.button("🎯 Calculate", type="primary"):
        errors = validate_inputs(your_side, enemy_side)
        if errors:
            for error in errors:
                st.warning(f"⚠️ {error}")
        else:
            alpha = st.session_state.alpha
            beta = st.session_state.beta
            st.session_state.result = run_match(your_side, enemy_side, alpha, beta)
            st.session_state.blind_playstyle = None
            if enemy_side.stats.is_zero():
                st.session_state.blind_playstyle = get_playstyle_display_name(detect_playstyle(your_side.stats))
            with st.spinner("Searching formations..."):
                st.session_state.recommendations = search_best_formations(
                    your_side, enemy_side, alpha, beta, mode=st.session_state.search_mode)

    render_results()


if __name__ == "__main__":
    main()
