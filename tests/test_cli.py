"""
Tests for the digital-rain command line.
"""

import argparse
import json
import logging
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from digital_rain.cli import (
    EXIT_BAD_OPTIONS,
    EXIT_OK,
    build_parser,
    load_options,
    main,
    parse_range,
    run_simulation,
)
from digital_rain.options import DEFAULT_DROPS_RANGE, DigitalRainOptions
from digital_rain.utils.error_handling import get_error_aggregator


BASE_ARGS = ["--width", "40", "--height", "20", "--ticks", "50", "--seed", "5"]


@pytest.fixture(autouse=True)
def clear_aggregator():
    get_error_aggregator().clear()
    yield
    get_error_aggregator().clear()


# ===========================================================================
# Argument Parsing Tests
# ===========================================================================

class TestParseRange:
    def test_valid(self):
        assert parse_range("3,9") == (3, 9)

    @pytest.mark.parametrize("value", ["3", "1,2,3", "a,b", "1.5,2", ""])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_range(value)

    def test_parser_rejects_bad_range(self):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--speed", "fast"])
        assert exc.value.code == 2


class TestLoadOptions:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert load_options(args) == DigitalRainOptions()

    def test_cli_overrides_config(self, tmp_path):
        path = tmp_path / "rain.json"
        path.write_text(json.dumps({'drops_range': [5, 6], 'speed_range': [3, 4]}))
        args = build_parser().parse_args(["--config", str(path), "--speed", "7,8"])
        options = load_options(args)
        assert options.drops_range == (5, 6)
        assert options.speed_range == (7, 8)


# ===========================================================================
# Simulation Tests
# ===========================================================================

class TestRunSimulation:
    def test_summary(self):
        options = DigitalRainOptions(drops_range=(10, 10), speed_range=(4, 8))
        summary = run_simulation(30, 15, options, ticks=25, dt_ms=20, seed=1)
        assert summary['frames'] == 25
        assert summary['elapsed_seconds'] == 0.5
        assert summary['drops'] == 10
        assert summary['width'] == 30
        assert summary['height'] == 15
        assert summary['options'] == {'drops_range': [10, 10], 'speed_range': [4, 8]}
        assert summary['seed'] == 1
        assert summary['visible_cells'] <= summary['body_cells']

    def test_seed_is_reproducible(self):
        options = DigitalRainOptions(drops_range=(5, 20))
        a = run_simulation(40, 20, options, ticks=100, dt_ms=16, seed=9)
        b = run_simulation(40, 20, options, ticks=100, dt_ms=16, seed=9)
        assert a == b


# ===========================================================================
# main() Tests
# ===========================================================================

class TestMain:
    def test_json_output(self, capsys):
        code = main(BASE_ARGS + ["--drops", "8,8", "--json"])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data['frames'] == 50
        assert data['width'] == 40
        assert data['height'] == 20
        assert data['drops'] == 8

    def test_text_output(self, capsys):
        code = main(BASE_ARGS + ["--drops", "4,6"])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "Digital Rain Simulation" in out
        assert "Screen:         40x20" in out
        assert "Phases:" in out

    def test_same_seed_same_output(self, capsys):
        main(BASE_ARGS + ["--json"])
        first = capsys.readouterr().out
        main(BASE_ARGS + ["--json"])
        second = capsys.readouterr().out
        assert first == second

    def test_inverted_speed_range(self, capsys):
        code = main(BASE_ARGS + ["--speed", "9,1"])
        assert code == EXIT_BAD_OPTIONS
        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "speed_range" in captured.err
        assert captured.out == ""

    def test_invalid_options_logged_once(self, caplog):
        with caplog.at_level(logging.DEBUG):
            code = main(BASE_ARGS + ["--speed", "9,1"])
        assert code == EXIT_BAD_OPTIONS
        errors = [r.getMessage() for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "in build_options" in errors[0]

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "rain.json"
        path.write_text(json.dumps({'drops_range': [3, 3], 'speed_range': [2, 4]}))
        code = main(BASE_ARGS + ["--config", str(path), "--json"])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data['drops'] == 3
        assert data['options']['speed_range'] == [2, 4]

    def test_invalid_config_file(self, tmp_path, capsys):
        path = tmp_path / "rain.json"
        path.write_text("{broken")
        code = main(BASE_ARGS + ["--config", str(path)])
        assert code == EXIT_BAD_OPTIONS
        assert "Invalid JSON" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        code = main(BASE_ARGS + ["--config", str(tmp_path / "nope.json")])
        assert code == EXIT_BAD_OPTIONS
        assert "Error:" in capsys.readouterr().err

    def test_zero_ticks(self, capsys):
        code = main(["--width", "10", "--height", "10", "--ticks", "0", "--json"])
        assert code == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data['frames'] == 0
        assert DEFAULT_DROPS_RANGE[0] <= data['drops'] <= DEFAULT_DROPS_RANGE[1]

    @pytest.mark.parametrize(
        "extra",
        [["--width", "0"], ["--height", "-3"], ["--ticks", "-1"], ["--dt-ms", "-5"]],
    )
    def test_rejects_bad_dimensions(self, extra):
        with pytest.raises(SystemExit) as exc:
            main(BASE_ARGS + extra)
        assert exc.value.code == 2
