"""
Translate Subcommand Module

Translates a JSON payload produced by one pipeline stage into the shape
expected by another stage.
"""

import logging
import sys
from typing import Optional

import click

from cli.runtime import get_mediator, read_json, write_json
from cli.shared_options import input_option, output_option
from mediator.errors import MediationError


logger = logging.getLogger(__name__)


@click.command(help="Translate data from one pipeline stage's shape into another's")
@click.option("--from", "source_module", required=True, help="Stage that produced the data")
@click.option("--to", "target_module", required=True, help="Stage that will consume the data")
@input_option(help="JSON file with the payload to translate")
@click.option(
    "--target-schema",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='JSON file mapping attribute names to types, e.g. {"title": "string"}',
)
@output_option()
@click.pass_context
def translate(
    ctx: click.Context,
    source_module: str,
    target_module: str,
    input_path: str,
    target_schema: Optional[str],
    output: Optional[str],
):
    """Translate a payload between pipeline stages.

    Examples:
        # Translate model output for the synthesize stage
        semantic-mediator translate --from model --to synthesize -i model.json

        # Validate against a fixed target shape
        semantic-mediator translate --from model --to validate -i model.json \\
            --target-schema validate_schema.json -o translated.json
    """
    mediator = get_mediator(ctx)
    data = read_json(input_path)

    if target_schema:
        attributes = read_json(target_schema)
        if not isinstance(attributes, dict):
            raise click.ClickException("--target-schema must contain a JSON object")
        mediator.register_target(target_module, {k: str(v) for k, v in attributes.items()})

    try:
        result = mediator.translate(source_module, target_module, data)
    except MediationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    write_json(result, output)
