import shlex
import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .common import SEVERITY_COLORS, export_yaml, open_catalog

_spec_option = click.option(
    "--spec",
    "spec_path",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    required=True,
    help="Fabric spec YAML (legacy or leafClasses).",
)
_catalog_option = click.option(
    "--catalog",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    default=None,
    help="Switch profile YAML. Defaults to the built-in DS2000/DS3000 catalog.",
)
_policy_option = click.option(
    "--policy",
    type=click.Path(path_type=str, dir_okay=False, exists=False),
    default=None,
    help="Planning policy YAML (oversubscription ceiling, port defaults).",
)


@click.command("derive")
@_spec_option
@_catalog_option
@_policy_option
@click.option(
    "--export",
    type=click.Path(path_type=str, dir_okay=False),
    help="Write the derived topology to this YAML file.",
)
def derive(spec_path: str, catalog: Optional[str], policy: Optional[str], export: Optional[str]) -> None:
    """Compute leaves, spines and port totals for a fabric spec."""
    console = Console()

    try:
        from fabricplan_core.data.manifests import load_fabric_spec, load_planning_policy
        from fabricplan_tools.topology import compute_derived

        spec = load_fabric_spec(spec_path)
        derived = compute_derived(spec, open_catalog(catalog), load_planning_policy(policy))

        if export:
            export_yaml(derived.model_dump(mode="json"), export)
            console.print(f"[green]✓[/green] Topology exported to {export}")

        table = Table(title=f"Derived Topology: {spec.name}")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Leaves", str(derived.leaves_needed))
        table.add_row("Spines", str(derived.spines_needed))
        table.add_row("Total ports", str(derived.total_ports))
        table.add_row("Used ports", str(derived.used_ports))
        table.add_row("Oversubscription", f"{derived.oversubscription_ratio:.2f}:1")
        console.print(table)

        for message in derived.validation_errors:
            console.print(f"[yellow]⚠[/yellow] {message}")
        if derived.is_valid:
            console.print("[green]✓[/green] Topology sizing is valid")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error deriving topology: {escape(str(e))}[/red]")
        sys.exit(1)


@click.command("validate")
@_spec_option
@_catalog_option
@_policy_option
@click.option("--strict", is_flag=True, help="Treat warnings as failures (exit code 2).")
@click.option(
    "--export",
    type=click.Path(path_type=str, dir_okay=False),
    help="Export the evaluation to a YAML file.",
)
@click.option(
    "--dry-run-command",
    type=str,
    default=None,
    help="External validator to run against the spec, e.g. 'hhfab validate --in'.",
)
def validate(
    spec_path: str,
    catalog: Optional[str],
    policy: Optional[str],
    strict: bool,
    export: Optional[str],
    dry_run_command: Optional[str],
) -> None:
    """Evaluate fabric rules and breakout configuration for a spec."""
    console = Console()

    try:
        from fabricplan_core.data.manifests import load_fabric_spec, load_planning_policy
        from fabricplan_core.validation.evaluation import EvaluationOptions, evaluate_topology
        from fabricplan_tools.integrations import CommandDryRunHook
        from fabricplan_tools.topology import compute_derived

        console.print("\n[bold cyan]Fabric Validation[/bold cyan]")

        spec = load_fabric_spec(spec_path)
        planning_policy = load_planning_policy(policy)
        switch_catalog = open_catalog(catalog)
        derived = compute_derived(spec, switch_catalog, planning_policy)

        hooks = (CommandDryRunHook(shlex.split(dry_run_command)),) if dry_run_command else ()
        options = EvaluationOptions(enable_integrations=bool(hooks), hooks=hooks, policy=planning_policy)
        evaluation = evaluate_topology(spec, derived, switch_catalog, options)

        if export:
            export_yaml(evaluation.model_dump(mode="json"), export)
            console.print(f"[green]✓[/green] Evaluation exported to {export}")

        summary = evaluation.summary
        table = Table(title="Validation Summary")
        table.add_column("Severity", style="cyan")
        table.add_column("Count", justify="right")
        table.add_row("ERROR", str(summary.blocking_errors), style="red")
        table.add_row("WARNING", str(summary.improvement_warnings), style="yellow")
        table.add_row("INFO", str(summary.informational), style="blue")
        console.print(table)

        violations = [*evaluation.errors, *evaluation.warnings, *evaluation.info]
        if violations:
            console.print("\n[bold]Findings:[/bold]")
            for violation in violations:
                color = SEVERITY_COLORS[violation.severity]
                scope = escape(f" [{violation.leaf_class_id}]") if violation.leaf_class_id else ""
                console.print(
                    f"[{color}]{violation.severity.upper()}[/{color}] {violation.code}{scope}: {escape(violation.message)}"
                )
                if violation.remediation:
                    console.print(f"    → {escape(violation.remediation.what)}. {escape(violation.remediation.how)}")
        else:
            console.print("\n[green]✓ All rule checks passed[/green]")

        for result in (evaluation.integration_results or {}).values():
            status = "[dim]SKIP[/dim]" if result.skipped else ("[green]PASS[/green]" if result.passed else "[red]FAIL[/red]")
            console.print(f"{status} integration {result.name}: {escape(result.message)}")

        if summary.blocking_errors:
            console.print(f"\n[red]✗[/red] Validation failed with {summary.blocking_errors} errors")
            sys.exit(1)
        elif evaluation.has_blocking_errors:
            console.print("\n[red]✗[/red] Validation failed: integration checks did not pass")
            sys.exit(1)
        elif strict and summary.improvement_warnings > 0:
            console.print(
                f"\n[yellow]⚠[/yellow] Validation completed with {summary.improvement_warnings} warnings (strict mode)"
            )
            sys.exit(2)
        else:
            console.print("\n[green]✓[/green] Validation completed successfully")
            sys.exit(0)

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error during validation: {escape(str(e))}[/red]")
        sys.exit(1)
