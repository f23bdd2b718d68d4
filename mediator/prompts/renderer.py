"""
Prompt Renderer

Renders prompt templates with Jinja2. Structured values are passed to the
templates as-is and serialized with the ``pretty_json`` filter.
"""

import json
from typing import Dict, Any

from jinja2 import Environment, StrictUndefined, TemplateError

from mediator.errors import PromptRenderError


def pretty_json(value: Any) -> str:
    """Serialize a value for inclusion in a prompt."""
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)


class PromptRenderer:
    """Renders prompt templates with context variables.

    Attributes:
        strict_mode: If True, undefined variables raise errors
    """

    def __init__(self, strict_mode: bool = True):
        self.strict_mode = strict_mode
        if strict_mode:
            self.env = Environment(undefined=StrictUndefined)
        else:
            self.env = Environment()
        self.env.filters["pretty_json"] = pretty_json

    def render(self, prompt_template: Dict[str, Any], context: Dict[str, Any]) -> str:
        """Render system prompt, user prompt and the expected output shape.

        Args:
            prompt_template: Template dict from ``PromptLoader``
            context: Template variables

        Returns:
            Combined prompt string

        Raises:
            PromptRenderError: If rendering fails
        """
        try:
            system_prompt = self.env.from_string(prompt_template["system"]).render(**context)
            user_prompt = self.env.from_string(prompt_template["user_template"]).render(**context)
        except TemplateError as e:
            raise PromptRenderError(f"Error rendering prompt template: {e}")
        except KeyError as e:
            raise PromptRenderError(f"Prompt template missing required field: {e}")

        expected = pretty_json(prompt_template.get("expected_output", {}))
        return (
            f"{system_prompt.strip()}\n\n{user_prompt.strip()}\n\n"
            f"Respond with a single JSON value shaped like:\n{expected}"
        )
