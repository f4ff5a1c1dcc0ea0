"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from camp_scheduler.cli import app
from camp_scheduler.loaders import save_catalog, save_roster

runner = CliRunner()


@pytest.fixture
def input_files(tmp_path, camp_catalog, camp_roster):
    classes = tmp_path / "classes.json"
    roster = tmp_path / "roster.csv"
    save_catalog(camp_catalog, classes)
    save_roster(camp_roster, roster)
    return classes, roster


class TestScheduleCommand:
    """Tests for the schedule command."""

    def test_json_export(self, tmp_path, input_files):
        classes, roster = input_files
        output = tmp_path / "result.json"
        result = runner.invoke(
            app,
            ["schedule", str(classes), str(roster), "-o", str(output),
             "--attempts", "10", "--seed", "7"],
        )
        assert result.exit_code == 0, result.output
        assert "Best score" in result.output

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["statistics"]["attempted"] == 10
        assert data["statistics"]["base_seed"] == 7

    def test_excel_suffix_added(self, tmp_path, input_files):
        classes, roster = input_files
        output = tmp_path / "result"
        result = runner.invoke(
            app,
            ["schedule", str(classes), str(roster), "-o", str(output),
             "-f", "excel", "--attempts", "3", "--seed", "1"],
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "result.xlsx").exists()

    def test_csv_directory(self, tmp_path, input_files):
        classes, roster = input_files
        output = tmp_path / "csv_out"
        result = runner.invoke(
            app,
            ["schedule", str(classes), str(roster), "-o", str(output),
             "-f", "csv", "--attempts", "3", "--seed", "1"],
        )
        assert result.exit_code == 0, result.output
        assert (output / "campers.csv").exists()

    def test_config_file(self, tmp_path, input_files):
        classes, roster = input_files
        config = tmp_path / "search.json"
        config.write_text(json.dumps({"max_attempts": 4, "seed": 11}))
        output = tmp_path / "result.json"
        result = runner.invoke(
            app,
            ["schedule", str(classes), str(roster), "--config", str(config),
             "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["statistics"]["attempted"] == 4
        assert data["statistics"]["base_seed"] == 11

    def test_verbose_table(self, input_files):
        classes, roster = input_files
        result = runner.invoke(
            app,
            ["schedule", str(classes), str(roster), "--attempts", "2", "--seed", "1", "-v"],
        )
        assert result.exit_code == 0, result.output
        assert "Camper Schedules" in result.output

    def test_missing_file(self, tmp_path, input_files):
        classes, _ = input_files
        result = runner.invoke(app, ["schedule", str(classes), str(tmp_path / "none.csv")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_config(self, tmp_path, input_files):
        classes, roster = input_files
        config = tmp_path / "search.json"
        config.write_text(json.dumps({"workers": 0}))
        result = runner.invoke(
            app, ["schedule", str(classes), str(roster), "--config", str(config)]
        )
        assert result.exit_code == 1
        assert "Invalid search configuration" in result.output


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_inputs(self, input_files):
        classes, roster = input_files
        result = runner.invoke(app, ["validate", str(classes), str(roster)])
        assert result.exit_code == 0, result.output
        assert "Inputs are valid" in result.output

    def test_invalid_inputs(self, tmp_path, input_files, camp_roster):
        classes, _ = input_files
        roster = tmp_path / "roster.json"
        save_roster([camp_roster[0], camp_roster[0]], roster)
        result = runner.invoke(app, ["validate", str(classes), str(roster)])
        assert result.exit_code == 1
        assert "appears 2 times" in result.output


class TestDemandCommand:
    """Tests for the demand command."""

    def test_demand_table(self, input_files):
        classes, roster = input_files
        result = runner.invoke(app, ["demand", str(classes), str(roster)])
        assert result.exit_code == 0, result.output
        assert "Class Demand" in result.output
        assert "Total periods needed: 13" in result.output

    def test_threshold_eliminates(self, input_files):
        classes, roster = input_files
        result = runner.invoke(app, ["demand", str(classes), str(roster), "--threshold", "6"])
        assert result.exit_code == 0, result.output
        assert "eliminated" in result.output
        assert "Eliminated classes: 4" in result.output
