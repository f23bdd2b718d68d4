"""
CLI Package for the Semantic Mediator

Click group with one module per subcommand. The main() group collects the
shared options (config file, provider, record store, log level) into the
click context; subcommands build the mediator from them on first use. The
cli() function is the console script entry point declared in setup.py.
"""

import os
from typing import Optional

import click
from dotenv import load_dotenv

from mediator import __version__
from mediator.utils.logging_config import configure_logging
from .shared_options import config_option, log_level_option, provider_option, store_option

# Load environment variables from .env files
# Priority: .env.dev (if exists) overrides .env
if os.path.exists('.env.dev'):
    load_dotenv('.env.dev')
elif os.path.exists('.env'):
    load_dotenv('.env')
from .translate import translate
from .insights import insights
from .evaluate import evaluate
from .validation_context import context


@click.group()
@click.version_option(version=__version__, prog_name='semantic-mediator')
@config_option()
@provider_option()
@store_option()
@log_level_option()
@click.pass_context
def main(
    ctx: click.Context,
    config: Optional[str],
    provider: Optional[str],
    store: Optional[str],
    log_level: str,
):
    """Semantic Mediator CLI - translate, reconcile and validate pipeline data.

    Mediates between independent stages of a content pipeline: translates
    payloads between stage shapes, extracts insights, scores transformations
    and builds adaptive validation contexts from validation history.
    """
    configure_logging(level=log_level.lower())
    obj = ctx.ensure_object(dict)
    obj.setdefault("config_path", config)
    obj.setdefault("provider", provider.lower() if provider else None)
    obj.setdefault("store_path", store)


# Register subcommands
main.add_command(translate)
main.add_command(insights)
main.add_command(evaluate)
main.add_command(context)


# Entry point for setup.py console script
def cli():
    """Console script entry point.

    Called when the semantic-mediator command is executed after
    installation via pip.
    """
    main()
