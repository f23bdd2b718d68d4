"""
Shared CLI Option Decorators

Reusable Click decorators for options common to several subcommands.
"""

import click


def input_option(name='--input', short='-i', dest='input_path', help=None, required=True):
    """Decorator for a JSON input file option."""
    def decorator(f):
        return click.option(
            name, short, dest,
            required=required,
            type=click.Path(exists=True, dir_okay=False),
            help=help or 'Path to a JSON input file'
        )(f)
    return decorator


def output_option(help=None):
    """Decorator for output file options."""
    def decorator(f):
        return click.option(
            '--output', '-o',
            default=None,
            type=click.Path(dir_okay=False),
            help=help or 'Write JSON output to this file instead of stdout'
        )(f)
    return decorator


def config_option(help=None):
    """Decorator for configuration file options."""
    def decorator(f):
        return click.option(
            '--config',
            default=None,
            type=click.Path(dir_okay=False),
            help=help or 'Path to configuration file (default: .semantic-mediator/config.yaml)'
        )(f)
    return decorator


def provider_option(help=None):
    """Decorator for content-generation provider selection."""
    def decorator(f):
        return click.option(
            '--provider', '-p',
            default=None,
            type=click.Choice(
                ['auto', 'cloud-openai', 'cloud-anthropic', 'local-ollama'],
                case_sensitive=False
            ),
            help=help or 'Content-generation provider (overrides config)'
        )(f)
    return decorator


def store_option(help=None):
    """Decorator for the record store file option."""
    def decorator(f):
        return click.option(
            '--store',
            default=None,
            type=click.Path(exists=True, dir_okay=False),
            help=help or 'JSON file of records (targets, subjects, validations) to load into the store'
        )(f)
    return decorator


def log_level_option(help=None):
    """Decorator for logging level options."""
    def decorator(f):
        return click.option(
            '--log-level',
            default='WARNING',
            type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
            help=help or 'Logging level (default: WARNING)'
        )(f)
    return decorator
