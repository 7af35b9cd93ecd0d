import logging

import click
from fabricplan_cli.tools.tools import breakout, topology


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# add cli groups here

cli.add_command(topology)
cli.add_command(breakout)
