"""
CLI Runtime Helpers

Lazily builds the mediator for a CLI invocation from the group options and
handles JSON input and output. Tests inject collaborators through the click
context object (``content_service``, ``store``, ``sink`` or a ready ``mediator``).
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click

from mediator.config import MediatorConfig
from mediator.llm.errors import ConfigurationError
from mediator.service import SemanticMediator, build_mediator
from mediator.store import InMemoryStore


logger = logging.getLogger(__name__)


def get_mediator(ctx: click.Context) -> SemanticMediator:
    """Build (once per invocation) the mediator described by the group options."""
    obj = ctx.ensure_object(dict)
    if obj.get("mediator") is not None:
        return obj["mediator"]

    try:
        config = MediatorConfig.load_from_yaml(obj.get("config_path"))
    except ConfigurationError as e:
        raise click.ClickException(str(e))
    if obj.get("provider"):
        config.mediation.provider = obj["provider"]

    store = obj.get("store")
    if store is None:
        store_path = obj.get("store_path")
        store = InMemoryStore.from_json_file(store_path) if store_path else InMemoryStore()

    mediator = build_mediator(
        config,
        content_service=obj.get("content_service"),
        store=store,
        sink=obj.get("sink"),
    )
    obj["mediator"] = mediator
    ctx.call_on_close(mediator.close)
    return mediator


def read_json(path: str) -> Any:
    """Load a JSON input file, failing with a CLI error on bad JSON."""
    try:
        with open(Path(path), 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {path}: {e}")


def write_json(value: Any, output: Optional[str]) -> None:
    """Write JSON to ``output`` or stdout."""
    text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n", encoding='utf-8')
        click.echo(f"Wrote {output_path}", err=True)
    else:
        click.echo(text)
