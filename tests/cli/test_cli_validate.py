"""Tests for the CLI validate command and the shared CLI helpers."""

from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from cellgraph.cli._shared import parse_param_value
from cellgraph.cli._shared import parse_settings
from cellgraph.cli.base import cli


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_graph(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["validate", "tests.examples.graphs.math_graph", "-p", "x=1"])
        assert result.exit_code == 0, result.output
        assert "Graph OK: 4 task(s)" in result.output

    def test_dangling_inputs(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["validate", "tests.examples.graphs.dangling_graph"])
        assert result.exit_code == 1
        assert "Task 'orphan' depends on unknown task(s): missing" in result.output

    def test_cycle(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["validate", "tests.examples.graphs.cyclic_graph"])
        assert result.exit_code == 1
        assert "Circular dependency: a -> b -> a" in result.output


class TestBaseCommand:
    def test_version(self):
        import cellgraph

        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert cellgraph.__version__ in result.output

    def test_help_lists_commands(self):
        result = CliRunner().invoke(cli, ["-h"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "validate" in result.output


class TestParseParamValue:
    """Tests for parse_param_value."""

    @pytest.mark.parametrize(
        ("value", "param_type", "expected"),
        [
            ("5", int, 5),
            ("2.5", float, 2.5),
            ("yes", bool, True),
            ("off", bool, False),
            ("text", str, "text"),
            ("raw", None, "raw"),
        ],
    )
    def test_conversions(self, value, param_type, expected):
        assert parse_param_value(value, param_type) == expected

    def test_invalid_int(self):
        with pytest.raises(ValueError, match="Cannot convert 'x' to int"):
            parse_param_value("x", int)


class TestParseSettings:
    """Tests for parse_settings."""

    def test_converts_by_field_type(self):
        settings = parse_settings(
            ("max_concurrency=3", "strict_validation=true", "download_timeout=2.5")
        )
        assert settings.max_concurrency == 3
        assert settings.strict_validation is True
        assert settings.download_timeout == 2.5

    def test_overrides_ignore_none(self):
        settings = parse_settings((), run_timeout=None, max_concurrency=4)
        assert settings.run_timeout is None
        assert settings.max_concurrency == 4

    def test_bad_format(self):
        with pytest.raises(click.BadParameter, match="Invalid setting format"):
            parse_settings(("strict_validation",))
