"""
Prompt Templates

YAML prompt templates (``templates/*.yaml``) for every content-generation
call the mediation core makes, loaded by ``PromptLoader`` and rendered with
Jinja2 by ``PromptRenderer``.
"""

from pathlib import Path
from typing import Any, Optional

from mediator.prompts.loader import PromptLoader
from mediator.prompts.renderer import PromptRenderer, pretty_json


class PromptLibrary:
    """Loader and renderer bundled behind a single ``render(name, **context)``."""

    def __init__(
        self,
        loader: Optional[PromptLoader] = None,
        renderer: Optional[PromptRenderer] = None,
        custom_prompts_dir: Optional[Path] = None
    ):
        self.loader = loader or PromptLoader(custom_prompts_dir=custom_prompts_dir)
        self.renderer = renderer or PromptRenderer()

    def render(self, name: str, **context: Any) -> str:
        return self.renderer.render(self.loader.load_prompt(name), context)


__all__ = [
    "PromptLibrary",
    "PromptLoader",
    "PromptRenderer",
    "pretty_json",
]
