"""
Context Subcommand Module

Generates an adaptive validation context for a subject record checked
against a target record, using prior validation records from the store.
"""

import sys
from typing import Optional, Tuple

import click
from pydantic import ValidationError

from cli.runtime import get_mediator, write_json
from cli.shared_options import output_option
from mediator.errors import MediationError
from mediator.schemas.validation import CATEGORIES, ValidationContextOptions, ValidationStrategy


def _parse_weights(values: Tuple[str, ...]) -> Optional[dict]:
    if not values:
        return None
    weights = {}
    for item in values:
        category, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected CATEGORY=WEIGHT, got '{item}'", param_hint="--weight")
        try:
            weights[category.strip().lower()] = float(value)
        except ValueError:
            raise click.BadParameter(f"Weight for '{category}' is not a number", param_hint="--weight")
    return weights


@click.command("context", help="Generate an adaptive validation context")
@click.option("--target-id", required=True, help="Store id of the target (e.g. requirements)")
@click.option("--subject-id", required=True, help="Store id of the subject under validation")
@click.option(
    "--previous", "-p",
    "previous_ids",
    multiple=True,
    help="Store id of a prior validation (repeatable, oldest first)",
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in ValidationStrategy], case_sensitive=False),
    default=ValidationStrategy.BALANCED.value,
    help="Weight preset (default: balanced)",
)
@click.option(
    "--weight", "-w",
    "weights",
    multiple=True,
    help=f"Weight override CATEGORY=WEIGHT (repeatable); categories: {', '.join(CATEGORIES)}",
)
@click.option("--focus", "-f", "focus_areas", multiple=True, help="Explicit focus area (repeatable)")
@output_option()
@click.pass_context
def context(
    ctx: click.Context,
    target_id: str,
    subject_id: str,
    previous_ids: Tuple[str, ...],
    strategy: str,
    weights: Tuple[str, ...],
    focus_areas: Tuple[str, ...],
    output: Optional[str],
):
    """Generate a validation context.

    Examples:
        semantic-mediator --store records.json context \\
            --target-id req-1 --subject-id code-1 -p val-1 -p val-2

        semantic-mediator --store records.json context \\
            --target-id req-1 --subject-id code-1 --strategy strict --focus security
    """
    try:
        options = ValidationContextOptions(
            strategy=strategy.lower(),
            custom_weights=_parse_weights(weights),
            focus_areas=list(focus_areas) or None,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))

    mediator = get_mediator(ctx)
    try:
        result = mediator.generate_validation_context(
            target_id, subject_id, list(previous_ids), options
        )
    except MediationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    write_json(result.model_dump(mode="json"), output)
