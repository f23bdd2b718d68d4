"""
Prompt Loader

Loads and validates YAML prompt templates for the content-generation calls
made by the mediation core. Supports a custom template directory with
fallback to the packaged defaults.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from mediator.errors import PromptTemplateError


DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

REQUIRED_FIELDS = ("system", "user_template", "expected_output")


class PromptLoader:
    """Loads and validates YAML prompt templates.

    Templates are looked up by name (``<name>.yaml``) in the custom directory
    first, then in the default directory. Loaded templates are cached.

    Attributes:
        default_prompts_dir: Directory containing default prompt templates
        custom_prompts_dir: Optional directory for custom templates
    """

    def __init__(
        self,
        default_prompts_dir: Optional[Path] = None,
        custom_prompts_dir: Optional[Path] = None
    ):
        self.default_prompts_dir = Path(default_prompts_dir or DEFAULT_TEMPLATES_DIR)
        self.custom_prompts_dir = Path(custom_prompts_dir) if custom_prompts_dir else None
        self._prompt_cache: Dict[str, Dict[str, Any]] = {}

        if not self.default_prompts_dir.exists():
            raise PromptTemplateError(
                f"Default prompts directory does not exist: {self.default_prompts_dir}"
            )

    def load_prompt(self, name: str) -> Dict[str, Any]:
        """Load the prompt template with the given name.

        Args:
            name: Template name, e.g. "generate_path"

        Returns:
            Template dict with 'system', 'user_template' and 'expected_output'

        Raises:
            PromptTemplateError: If the template is missing or invalid
        """
        if name in self._prompt_cache:
            return self._prompt_cache[name]

        filename = f"{name}.yaml"
        candidates = []
        if self.custom_prompts_dir:
            candidates.append(self.custom_prompts_dir / filename)
        candidates.append(self.default_prompts_dir / filename)

        for path in candidates:
            if path.exists():
                prompt = self._load_yaml(path)
                self._validate_prompt(prompt, name)
                self._prompt_cache[name] = prompt
                return prompt

        raise PromptTemplateError(
            f"No prompt template found for '{name}'. "
            f"Available templates: {', '.join(self.available_templates())}"
        )

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PromptTemplateError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise PromptTemplateError(f"Error reading {path}: {e}")

        if not isinstance(data, dict):
            raise PromptTemplateError(
                f"YAML file must contain a dictionary, got {type(data).__name__}"
            )
        return data

    def _validate_prompt(self, prompt: Dict[str, Any], name: str):
        for field in REQUIRED_FIELDS:
            if field not in prompt:
                raise PromptTemplateError(
                    f"Prompt '{name}' missing required field: {field}"
                )

        for field in ("system", "user_template"):
            if not isinstance(prompt[field], str) or not prompt[field].strip():
                raise PromptTemplateError(
                    f"Prompt '{name}' field '{field}' must be a non-empty string"
                )

        if not isinstance(prompt["expected_output"], dict):
            raise PromptTemplateError(
                f"Prompt '{name}' field 'expected_output' must be a dictionary, "
                f"got {type(prompt['expected_output']).__name__}"
            )

    def available_templates(self) -> List[str]:
        """Names of all templates visible to this loader."""
        names = {p.stem for p in self.default_prompts_dir.glob("*.yaml")}
        if self.custom_prompts_dir and self.custom_prompts_dir.exists():
            names.update(p.stem for p in self.custom_prompts_dir.glob("*.yaml"))
        return sorted(names)

    def clear_cache(self):
        """Forget loaded templates so edits on disk are picked up."""
        self._prompt_cache.clear()
