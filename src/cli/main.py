"""Bansheng CLI: pregnancy knowledge base and assistant."""

import sys
from pathlib import Path

import click

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cli.commands import ask, intent, kb, triage
from cli.config import load_config_model
from cli.logging_config import setup_logging


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Bansheng - knowledge-grounded pregnancy companion."""
    try:
        log_cfg = load_config_model().logging
        level, json_mode, log_file = log_cfg.level, log_cfg.json_mode, log_cfg.log_file
    except ValueError:
        # Reported properly by the command that loads components
        level, json_mode, log_file = "INFO", False, None
    setup_logging(json_mode=json_mode, level="DEBUG" if verbose else level, log_file=log_file)


cli.add_command(kb)
cli.add_command(intent)
cli.add_command(triage)
cli.add_command(ask)


if __name__ == "__main__":
    cli()
