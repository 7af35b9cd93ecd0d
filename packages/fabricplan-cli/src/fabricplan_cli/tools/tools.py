import click

from .breakout import allocate, validate_allocation
from .topology import derive, validate


@click.group()
def topology() -> None:
    """Fabric sizing and rule validation."""
    pass


@click.group()
def breakout() -> None:
    """Breakout port allocation."""
    pass


topology.add_command(derive)
topology.add_command(validate)
breakout.add_command(allocate)
breakout.add_command(validate_allocation)
