"""
ipgraph CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from ..config import configure_logging, load_config
from .commands import filter_graph, neighbors, path, stats


@click.group()
@click.version_option(package_name="ipgraph")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """ipgraph: Relationship graphs for digital IP assets.

    Inspects relationship responses and built graphs saved as JSON.

    \b
    Quick Start:
      ipgraph stats relations.json
      ipgraph path relations.json 0xroot 0xderivative
      ipgraph filter relations.json --node-type derivative --search remix
    """
    config = load_config()
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


# Register commands
main.add_command(stats.stats)
main.add_command(path.path)
main.add_command(neighbors.neighbors)
main.add_command(filter_graph.filter_graph, name="filter")

if __name__ == "__main__":
    main()
