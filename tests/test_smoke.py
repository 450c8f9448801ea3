"""Smoke tests for the command-line interface."""

import json
from datetime import date

import pytest

from rotaplan.cli import build_demo_store, main
from rotaplan.scheduling.roster_generator import RosterGenerator


class TestSmoke:
    """End-to-end smoke tests through the CLI."""

    @pytest.fixture
    def definitions_file(self, tmp_path):
        path = tmp_path / "definitions.json"
        path.write_text(json.dumps([
            {"id": "late-t1", "shift_type": "late", "start_time": "13:00",
             "end_time": "21:00", "team_id": "T1", "description": "Team 1 late"},
            {"id": "weekend", "shift_type": "weekend", "start_time": "09:00",
             "end_time": "17:00"},
        ]))
        return str(path)

    @pytest.fixture
    def pattern_file(self, tmp_path):
        path = tmp_path / "pattern.json"
        path.write_text(json.dumps({
            "type": "fixed_days",
            "cycle": {"work_days": 4, "off_days": 4, "shift_type": "early"},
        }))
        return str(path)

    def test_demo(self, capsys):
        assert main(["demo"]) == 0
        out = capsys.readouterr().out
        assert "Created" in out
        assert "implemented" in out
        assert "4-on-4-off" in out
        assert "Jonas Roth" in out
        assert "Bulk scheduling team T1" in out
        assert "Created 13 entries" in out

    def test_demo_store_generates(self):
        store = build_demo_store(date(2024, 1, 1))
        result = RosterGenerator(store).generate_for_roster("R1", requested_by="test")
        assert result.success
        assert result.entries_created > 0

    def test_resolve_definition(self, capsys, definitions_file):
        code = main(["resolve", definitions_file, "late", "--date", "2024-01-17", "--team", "T1"])
        assert code == 0
        out = capsys.readouterr().out
        assert "13:00-21:00" in out
        assert "late-t1" in out

    def test_resolve_default(self, capsys, definitions_file):
        code = main(["resolve", definitions_file, "weekend", "--date", "2024-01-17"])
        assert code == 0
        assert "08:00-16:00 (built-in default)" in capsys.readouterr().out

    def test_resolve_holiday(self, capsys, definitions_file):
        code = main([
            "resolve", definitions_file, "weekend",
            "--date", "2024-01-17", "--holiday", "2024-01-17",
        ])
        assert code == 0
        assert "09:00-17:00" in capsys.readouterr().out

    def test_expand(self, capsys, pattern_file):
        code = main([
            "expand", pattern_file, "--start", "2024-01-01", "--end", "2024-01-09",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "4-on-4-off" in out
        assert "5 work days, 4 off days" in out

    def test_expand_skip_weekends(self, capsys, pattern_file):
        code = main([
            "expand", pattern_file, "--start", "2024-01-01", "--end", "2024-01-07",
            "--skip-weekends",
        ])
        assert code == 0
        assert "(Weekend)" in capsys.readouterr().out

    def test_flextime_valid(self, capsys):
        code = main([
            "flextime", "--date", "2024-01-17", "--start", "08:00", "--end", "17:00",
            "--break", "60",
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "Delta:  +0:00" in out
        assert "PASSED" in out

    def test_flextime_defaults(self, capsys):
        assert main(["flextime", "--date", "2024-01-19"]) == 0
        assert "Target: 6.00 h" in capsys.readouterr().out

    def test_flextime_violation(self, capsys):
        code = main([
            "flextime", "--date", "2024-01-17", "--start", "07:00", "--end", "19:00",
            "--break", "30",
        ])
        assert code == 1
        out = capsys.readouterr().out
        assert "break_too_short" in out
        assert "daily_limit_exceeded" in out

    def test_no_command(self, capsys):
        assert main([]) == 1
