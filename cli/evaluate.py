"""
Evaluate Subcommand Module

Scores how well a transformation preserved the meaning of its source.
"""

import sys
from typing import Optional

import click

from cli.runtime import get_mediator, read_json, write_json
from cli.shared_options import input_option, output_option


@click.command(help="Score the quality of a transformation")
@input_option("--source", "-s", "source_path", help="JSON file with the original data")
@input_option("--transformed", "-t", "transformed_path", help="JSON file with the transformed data")
@click.option(
    "--expected", "-e",
    default=None,
    help="Description of the expected outcome",
)
@click.option(
    "--min-score",
    type=click.FloatRange(0, 100),
    default=None,
    help="Exit with status 1 when overall quality is below this score",
)
@output_option()
@click.pass_context
def evaluate(
    ctx: click.Context,
    source_path: str,
    transformed_path: str,
    expected: Optional[str],
    min_score: Optional[float],
    output: Optional[str],
):
    """Evaluate a transformation.

    Examples:
        semantic-mediator evaluate -s model.json -t synthesized.json

        # Fail a CI step when quality drops
        semantic-mediator evaluate -s model.json -t synthesized.json --min-score 70
    """
    mediator = get_mediator(ctx)
    scores = mediator.evaluate_transformation(
        read_json(source_path),
        read_json(transformed_path),
        expected,
    )
    write_json(scores.model_dump(mode="json"), output)

    if scores.error:
        click.echo(f"Warning: evaluation unavailable: {scores.error}", err=True)
        sys.exit(1)
    if min_score is not None and scores.overall_quality < min_score:
        click.echo(
            f"Overall quality {scores.overall_quality:.1f} is below {min_score:.1f}",
            err=True,
        )
        sys.exit(1)
