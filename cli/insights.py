"""
Insights Subcommand Module

Extracts insights from pipeline data for a free-text question.
"""

import sys
from typing import Optional

import click

from cli.runtime import get_mediator, read_json, write_json
from cli.shared_options import input_option, output_option
from mediator.errors import MediationError


@click.command(help="Extract insights from pipeline data")
@input_option(help="JSON file with the data to analyze")
@click.option("--query", "-q", required=True, help="Question to answer about the data")
@output_option()
@click.pass_context
def insights(ctx: click.Context, input_path: str, query: str, output: Optional[str]):
    """Extract insights from a JSON file.

    Example:
        semantic-mediator insights -i validations.json -q "Which checks fail most?"
    """
    mediator = get_mediator(ctx)
    try:
        result = mediator.extract_insights(read_json(input_path), query)
    except MediationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    write_json(result.model_dump(mode="json"), output)
