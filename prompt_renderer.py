# prompt_renderer.py
"""Utilities for rendering LLM prompts using Jinja2 templates."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

PROMPTS_PATH = Path(__file__).parent / "prompts"
_env = Environment(
    loader=FileSystemLoader(PROMPTS_PATH),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def _or_unspecified(value: Any, placeholder: str = "（未指定）") -> Any:
    """Render blank premise fields as an explicit placeholder."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return placeholder
    return value


_env.filters["or_unspecified"] = _or_unspecified


def render_prompt(template_name: str, context: dict[str, Any]) -> str:
    """Render a Jinja2 template from the prompts directory."""
    template = _env.get_template(template_name)
    return template.render(**context)
