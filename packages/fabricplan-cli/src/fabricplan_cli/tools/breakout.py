import sys
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .common import export_yaml, open_catalog


@click.command("allocate")
@click.option("--model", "model_id", type=str, default="DS2000", show_default=True, help="Leaf switch model id.")
@click.option(
    "--catalog",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    default=None,
    help="Switch profile YAML. Defaults to the built-in DS2000/DS3000 catalog.",
)
@click.option("--groups", type=click.IntRange(min=0), required=True, help="Number of breakout groups to allocate.")
@click.option(
    "--ports",
    type=str,
    default=None,
    help="Comma-separated ports or ranges to allocate from (default: the model's endpoint ports).",
)
@click.option("--type", "breakout_type", type=str, default=None, help="Breakout type override, e.g. 4x25G.")
@click.option(
    "--export",
    type=click.Path(path_type=str, dir_okay=False),
    help="Write the allocation to this YAML file.",
)
def allocate(
    model_id: str,
    catalog: Optional[str],
    groups: int,
    ports: Optional[str],
    breakout_type: Optional[str],
    export: Optional[str],
) -> None:
    """Split ports of a switch model into deterministic breakout groups."""
    console = Console()

    try:
        from fabricplan_core.data.ports import expand_port_ranges
        from fabricplan_tools.breakout import allocate_breakout_groups

        profile = open_catalog(catalog).get_switch_profile(model_id)
        if profile is None:
            console.print(f"[red]Unknown switch model {model_id}[/red]")
            sys.exit(1)
        if not profile.breakout.supports_breakout and breakout_type is None:
            console.print(f"[red]{model_id} does not support breakout[/red]")
            sys.exit(1)

        if ports:
            available = expand_port_ranges(p.strip() for p in ports.split(",") if p.strip())
        else:
            available = expand_port_ranges(profile.ports.endpoint_assignable)
        allocation = allocate_breakout_groups(available, groups, breakout_type or profile.breakout.breakout_type)

        if export:
            export_yaml(allocation.model_dump(mode="json"), export)
            console.print(f"[green]✓[/green] Allocation exported to {export}")

        table = Table(title=f"Breakout Allocation: {model_id}")
        table.add_column("Group", justify="right", style="cyan")
        table.add_column("Base port")
        table.add_column("Child ports")
        for group in allocation.allocated_groups:
            table.add_row(str(group.group_id), group.base_port, ", ".join(group.child_ports))
        console.print(table)
        console.print(f"Remaining ports: {len(allocation.remaining_ports)}")

        for warning in allocation.warnings:
            console.print(f"[yellow]⚠[/yellow] {warning}")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error during allocation: {escape(str(e))}[/red]")
        sys.exit(1)


@click.command("validate")
@click.option(
    "--allocation",
    "allocation_path",
    type=click.Path(path_type=str, dir_okay=False, exists=True),
    required=True,
    help="YAML with allocated_groups and optional regular_ports.",
)
@click.option("--allow-mixed", is_flag=True, help="Do not warn about breakout groups next to regular ports.")
@click.option("--strict", is_flag=True, help="Treat warnings as failures (exit code 2).")
def validate_allocation(allocation_path: str, allow_mixed: bool, strict: bool) -> None:
    """Check a breakout allocation for duplicate and conflicting ports."""
    console = Console()

    try:
        from fabricplan_core.data.loader import load_yaml_typed
        from fabricplan_tools.breakout import AllocationManifest, validate_breakout_allocation

        manifest = load_yaml_typed(allocation_path, model=AllocationManifest)
        result = validate_breakout_allocation(
            manifest.allocated_groups, manifest.regular_ports, allow_mixed_mode=allow_mixed
        )

        for error in result.errors:
            console.print(f"[red]ERROR[/red] {error}")
        for warning in result.warnings:
            console.print(f"[yellow]WARNING[/yellow] {warning}")

        if not result.is_valid:
            console.print(f"\n[red]✗[/red] Allocation invalid with {len(result.errors)} errors")
            sys.exit(1)
        elif strict and result.warnings:
            console.print(f"\n[yellow]⚠[/yellow] Allocation has {len(result.warnings)} warnings (strict mode)")
            sys.exit(2)
        else:
            console.print("\n[green]✓[/green] Allocation is consistent")
            sys.exit(0)

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error during validation: {escape(str(e))}[/red]")
        sys.exit(1)
