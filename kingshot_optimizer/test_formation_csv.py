"""
Unit tests for formation_csv.py - Snapshot export and import.
"""
from datetime import date

import pytest
from core import Formation, Side, StatProfile, TroopStats
from formation_csv import (
    HEADER,
    SnapshotFormatError,
    export_snapshot,
    import_snapshot,
    snapshot_filename,
)

YOUR_SIDE = Side(
    stats=StatProfile(
        infantry=TroopStats(attack=400, defense=350, lethality=300, health=380),
        cavalry=TroopStats(attack=420.5, defense=300, lethality=320, health=350),
        archer=TroopStats(attack=520, defense=280, lethality=410, health=300),
    ),
    formation=Formation(0.30, 0.20, 0.50),
    troops=150000,
)
ENEMY_SIDE = Side(
    stats=StatProfile.uniform(attack=450, defense=400, lethality=350, health=400),
    formation=Formation(0.33, 0.33, 0.34),
    troops=140000,
)


class TestExport:
    """Tests for export_snapshot."""

    def test_header_and_row_count(self):
        lines = export_snapshot(YOUR_SIDE, ENEMY_SIDE).splitlines()
        assert lines[0] == ",".join(HEADER)
        assert len(lines) == 7

    def test_rows(self):
        lines = export_snapshot(YOUR_SIDE, ENEMY_SIDE).splitlines()
        assert lines[1] == "Your,Inf,400,350,300,380,30,150000"
        assert lines[2] == "Your,Cav,420.5,300,320,350,20,"
        assert lines[4] == "Enemy,Inf,450,400,350,400,33,140000"
        assert lines[6] == "Enemy,Arch,450,400,350,400,34,"

    def test_troops_only_on_first_row(self):
        lines = export_snapshot(YOUR_SIDE, ENEMY_SIDE).splitlines()[1:]
        troop_column = [line.split(",")[7] for line in lines]
        assert troop_column == ["150000", "", "", "140000", "", ""]


class TestImport:
    """Tests for import_snapshot."""

    def test_round_trip(self):
        your, enemy = import_snapshot(export_snapshot(YOUR_SIDE, ENEMY_SIDE))
        assert your.stats == YOUR_SIDE.stats
        assert enemy.stats == ENEMY_SIDE.stats
        assert your.troops == 150000
        assert enemy.troops == 140000
        assert your.formation.as_tuple() == pytest.approx(YOUR_SIDE.formation.as_tuple())
        assert enemy.formation.as_tuple() == pytest.approx(ENEMY_SIDE.formation.as_tuple())

    def test_too_few_rows(self):
        """Fewer than seven lines is rejected outright."""
        text = "\n".join(export_snapshot(YOUR_SIDE, ENEMY_SIDE).splitlines()[:6])
        with pytest.raises(SnapshotFormatError, match="not enough rows"):
            import_snapshot(text)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            import_snapshot("")

    def test_short_and_unknown_rows_skipped(self):
        """Malformed rows are skipped and their values stay at zero."""
        text = "\n".join([
            ",".join(HEADER),
            "Your,Inf,400,350,300,380,30,150000",
            "Your,Cav,420",
            "Your,Arch,520,280,410,300,50,",
            "Ally,Inf,1,1,1,1,10,",
            "Enemy,Pike,1,1,1,1,10,",
            "Enemy,Inf,450,400,350,400,40,140000",
        ])
        your, enemy = import_snapshot(text)
        assert your.stats.cavalry == TroopStats()
        assert your.formation.cavalry == 0
        assert your.stats.archer.lethality == 410
        assert enemy.stats.infantry.attack == 450
        assert enemy.formation.infantry == pytest.approx(0.40)
        assert enemy.stats.archer == TroopStats()

    def test_unparsable_values_read_as_zero(self):
        lines = export_snapshot(YOUR_SIDE, ENEMY_SIDE).splitlines()
        lines[1] = "Your,Inf,lots,350,300,380,30,many"
        your, _ = import_snapshot("\n".join(lines))
        assert your.stats.infantry.attack == 0
        assert your.stats.infantry.defense == 350
        assert your.troops == 0

    def test_blank_lines_ignored(self):
        text = export_snapshot(YOUR_SIDE, ENEMY_SIDE).replace("\n", "\n\n")
        your, _ = import_snapshot(text)
        assert your.troops == 150000


class TestFilename:
    def test_dated_filename(self):
        assert snapshot_filename(date(2026, 10, 19)) == "kingshot_stats_2026-10-19.csv"
