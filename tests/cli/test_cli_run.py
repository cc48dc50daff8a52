"""Tests for the CLI run command."""

from __future__ import annotations

from click.testing import CliRunner

from cellgraph.cli.base import cli


class TestRunCommand:
    """Tests for the run command."""

    def test_run_help(self):
        """Test that run --help works."""
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--help"])
        assert result.exit_code == 0
        assert "Run a cellgraph task graph" in result.output
        assert "--param" in result.output
        assert "--settings" in result.output

    def test_run_without_graph_path(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run"])
        assert result.exit_code != 0
        assert "Missing argument" in result.output

    def test_run_with_invalid_graph_path(self):
        """Test run command with invalid graph path (no dot)."""
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "invalid"])
        assert result.exit_code != 0
        assert "Invalid graph path" in result.output

    def test_run_with_nonexistent_module(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "nonexistent.module.graph"])
        assert result.exit_code != 0
        assert "No module named" in result.output

    def test_run_with_nonexistent_graph(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.nope"])
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_run_with_non_graph_object(self):
        """Test run command with an object that does not hold tasks."""
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.not_a_graph"])
        assert result.exit_code != 0
        assert "Expected a TaskStore or an iterable of Task objects" in result.output

    def test_run_graph_builder_with_params(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["run", "tests.examples.graphs.math_graph", "--param", "x=5", "-p", "y=7"]
        )
        assert result.exit_code == 0, result.output
        assert "Running graph: tests.examples.graphs.math_graph (4 tasks)" in result.output
        assert "Completed 4 task(s)" in result.output
        assert "  total: 12" in result.output
        assert "  scaled: 24" in result.output

    def test_run_uses_default_params(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.math_graph", "-p", "x=1"])
        assert result.exit_code == 0, result.output
        assert "  total: 11" in result.output

    def test_run_prebuilt_store(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.notebook"])
        assert result.exit_code == 0, result.output
        assert "  greeting: 'hello penguins'" in result.output

    def test_run_empty_graph(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.empty_graph"])
        assert result.exit_code == 0
        assert "Completed 0 task(s)" in result.output
        assert "Stalled:" not in result.output

    def test_run_reports_stalled_tasks(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.cyclic_graph"])
        assert result.exit_code == 0, result.output
        assert "Stalled:" in result.output
        assert "  a (waiting on b)" in result.output

    def test_run_failing_graph(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.failing_graph"])
        assert result.exit_code != 0
        assert "Graph execution failed: ZeroDivisionError: division by zero" in result.output

    def test_strict_validation_setting(self):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["run", "tests.examples.graphs.dangling_graph", "-s", "strict_validation=true"],
        )
        assert result.exit_code != 0
        assert "GraphError" in result.output

    def test_run_with_log_level(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["run", "tests.examples.graphs.math_graph", "-p", "x=2", "--log-level", "DEBUG"]
        )
        assert result.exit_code == 0, result.output


class TestRunParameters:
    """Tests for --param and --settings validation."""

    def test_missing_required_param(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.math_graph"])
        assert result.exit_code != 0
        assert "Missing required parameters: ['x']" in result.output

    def test_unknown_param(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["run", "tests.examples.graphs.math_graph", "-p", "x=1", "-p", "z=2"]
        )
        assert result.exit_code != 0
        assert "Unknown parameter: 'z'" in result.output

    def test_invalid_param_format(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.math_graph", "-p", "x"])
        assert result.exit_code != 0
        assert "Expected 'name=value'" in result.output

    def test_invalid_param_value(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.math_graph", "-p", "x=five"])
        assert result.exit_code != 0
        assert "Cannot convert 'five' to int" in result.output

    def test_param_for_prebuilt_store(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.notebook", "-p", "x=1"])
        assert result.exit_code != 0
        assert "only supported when the graph is built by a function" in result.output

    def test_unknown_setting(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "tests.examples.graphs.empty_graph", "-s", "speed=11"])
        assert result.exit_code != 0
        assert "Unknown setting: 'speed'" in result.output

    def test_invalid_setting_value(self):
        runner = CliRunner()
        result = runner.invoke(
            cli, ["run", "tests.examples.graphs.empty_graph", "-s", "max_concurrency=0"]
        )
        assert result.exit_code != 0
        assert "max_concurrency must be a positive integer" in result.output
