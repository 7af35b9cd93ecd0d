"""
Test the fabricplan CLI commands end to end with click's CliRunner.
"""

import pytest
import yaml
from click.testing import CliRunner
from fabricplan_cli.cli import cli

LEGACY_SPEC = """
name: {name}
spineModelId: DS3000
leafModelId: DS2000
uplinksPerLeaf: {uplinks}
endpointCount: {endpoints}
endpointProfile:
  name: server
  count: {endpoints}
  esLag: {es_lag}
  nics: {nics}
"""

OVERLOADED_CLASS_SPEC = """
fabric:
  name: overloaded
  spineModelId: DS3000
  leafModelId: DS2000
  leafClasses:
    - id: compute
      uplinksPerLeaf: 4
      count: 1
      endpointProfiles:
        - name: server
          count: 100
"""


@pytest.fixture
def runner():
    return CliRunner()


def write_spec(tmp_path, name="cli-fabric", uplinks=12, endpoints=40, es_lag="false", nics=2):
    path = tmp_path / "fabric.yaml"
    path.write_text(LEGACY_SPEC.format(name=name, uplinks=uplinks, endpoints=endpoints, es_lag=es_lag, nics=nics))
    return path


class TestTopologyDerive:
    def test_derive_prints_sizing(self, runner, tmp_path):
        spec = write_spec(tmp_path, uplinks=4, endpoints=100)

        result = runner.invoke(cli, ["topology", "derive", "--spec", str(spec)])

        assert result.exit_code == 0, result.output
        assert "Derived Topology: cli-fabric" in result.output
        assert "Oversubscription too high: 8.33:1" in result.output

    def test_derive_export(self, runner, tmp_path):
        spec = write_spec(tmp_path)
        export = tmp_path / "derived.yaml"

        result = runner.invoke(cli, ["topology", "derive", "--spec", str(spec), "--export", str(export)])

        assert result.exit_code == 0, result.output
        assert "Topology sizing is valid" in result.output
        derived = yaml.safe_load(export.read_text())
        assert derived["leaves_needed"] == 2
        assert derived["spines_needed"] == 1
        assert derived["total_ports"] == 128

    def test_invalid_spec(self, runner, tmp_path):
        spec = write_spec(tmp_path, uplinks=-1)

        result = runner.invoke(cli, ["topology", "derive", "--spec", str(spec)])

        assert result.exit_code == 1
        assert "Error deriving topology" in result.output


class TestTopologyValidate:
    def test_clean_spec_exits_zero(self, runner, tmp_path):
        spec = write_spec(tmp_path)

        result = runner.invoke(cli, ["topology", "validate", "--spec", str(spec), "--strict"])

        assert result.exit_code == 0, result.output
        assert "Validation Summary" in result.output
        # info findings never fail validation
        assert "BREAKOUT_RECOMMENDED" in result.output
        assert "Validation completed successfully" in result.output

    def test_errors_exit_one(self, runner, tmp_path):
        spec = tmp_path / "overloaded.yaml"
        spec.write_text(OVERLOADED_CLASS_SPEC)

        result = runner.invoke(cli, ["topology", "validate", "--spec", str(spec)])

        assert result.exit_code == 1
        assert "LEAF_CAPACITY_EXCEEDED [compute]" in result.output
        assert "Validation failed with 1 errors" in result.output

    def test_warnings_exit_two_in_strict_mode(self, runner, tmp_path):
        spec = write_spec(tmp_path, uplinks=4, endpoints=20, es_lag="true", nics=1)

        lenient = runner.invoke(cli, ["topology", "validate", "--spec", str(spec)])
        strict = runner.invoke(cli, ["topology", "validate", "--spec", str(spec), "--strict"])

        assert lenient.exit_code == 0
        assert strict.exit_code == 2
        assert "ES_LAG_SINGLE_NIC" in strict.output
        assert "strict mode" in strict.output

    def test_export_evaluation(self, runner, tmp_path):
        spec = write_spec(tmp_path, uplinks=4, endpoints=20, es_lag="true", nics=1)
        export = tmp_path / "evaluation.yaml"

        runner.invoke(cli, ["topology", "validate", "--spec", str(spec), "--export", str(export)])

        evaluation = yaml.safe_load(export.read_text())
        assert evaluation["summary"]["improvement_warnings"] == 1
        assert evaluation["core"]["warnings"][0]["code"] == "ES_LAG_SINGLE_NIC"
        assert evaluation["integration_results"] is None

    def test_missing_dry_run_command_is_skipped(self, runner, tmp_path):
        spec = write_spec(tmp_path)

        result = runner.invoke(
            cli,
            ["topology", "validate", "--spec", str(spec), "--dry-run-command", "fabricplan-no-such-validator --in"],
        )

        assert result.exit_code == 0, result.output
        assert "SKIP integration dry-run" in result.output


class TestBreakoutCommands:
    def test_allocate_ds2000(self, runner, tmp_path):
        export = tmp_path / "allocation.yaml"

        result = runner.invoke(cli, ["breakout", "allocate", "--groups", "2", "--export", str(export)])

        assert result.exit_code == 0, result.output
        assert "Remaining ports: 46" in result.output
        allocation = yaml.safe_load(export.read_text())
        groups = allocation["allocated_groups"]
        assert [g["base_port"] for g in groups] == ["E1/1", "E1/10"]
        assert groups[0]["child_ports"][0] == "Ethernet1/0/1"
        assert groups[1]["child_ports"][0] == "Ethernet10/0/1"

    def test_allocate_unknown_model(self, runner):
        result = runner.invoke(cli, ["breakout", "allocate", "--model", "NOPE", "--groups", "1"])

        assert result.exit_code == 1
        assert "Unknown switch model NOPE" in result.output

    def test_allocate_requires_breakout_support(self, runner):
        result = runner.invoke(cli, ["breakout", "allocate", "--model", "DS3000", "--groups", "1"])

        assert result.exit_code == 1
        assert "does not support breakout" in result.output

    def test_allocate_shortfall_warning(self, runner):
        result = runner.invoke(cli, ["breakout", "allocate", "--groups", "3", "--ports", "E1/1-2"])

        assert result.exit_code == 0
        assert "Requested 3 breakout groups but only 2 ports available" in result.output

    def test_exported_allocation_validates(self, runner, tmp_path):
        export = tmp_path / "allocation.yaml"
        runner.invoke(cli, ["breakout", "allocate", "--groups", "4", "--export", str(export)])

        result = runner.invoke(cli, ["breakout", "validate", "--allocation", str(export)])

        assert result.exit_code == 0, result.output
        assert "Allocation is consistent" in result.output

    def test_duplicate_base_port_exits_one(self, runner, tmp_path):
        allocation = tmp_path / "allocation.yaml"
        allocation.write_text(
            """
allocated_groups:
  - group_id: 1
    base_port: E1/1
    child_ports: [Ethernet1/0/1]
  - group_id: 2
    base_port: E1/1
    child_ports: [Ethernet1/0/2]
regular_ports: [E1/2]
"""
        )

        result = runner.invoke(cli, ["breakout", "validate", "--allocation", str(allocation)])

        assert result.exit_code == 1
        assert "Duplicate base port E1/1 in groups 1 and 2" in result.output
        assert "Allocation invalid with 1 errors" in result.output

    def test_mixed_allocation_strict(self, runner, tmp_path):
        allocation = tmp_path / "allocation.yaml"
        allocation.write_text(
            """
allocated_groups:
  - group_id: 1
    base_port: E1/1
    child_ports: [Ethernet1/0/1]
regular_ports: [E1/2]
"""
        )

        lenient = runner.invoke(cli, ["breakout", "validate", "--allocation", str(allocation)])
        strict = runner.invoke(cli, ["breakout", "validate", "--allocation", str(allocation), "--strict"])
        allowed = runner.invoke(
            cli, ["breakout", "validate", "--allocation", str(allocation), "--strict", "--allow-mixed"]
        )

        assert lenient.exit_code == 0
        assert strict.exit_code == 2
        assert allowed.exit_code == 0
