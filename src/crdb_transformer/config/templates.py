"""Manifest template loading and rendering."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
)

from crdb_transformer.config.defaults import DEFAULT_TEMPLATE
from crdb_transformer.config.models import ResolvedConfig
from crdb_transformer.errors import RenderError

logger = structlog.get_logger()

TEMPLATES_DIR = Path(__file__).parent / "templates"

# Templates are YAML, not markup: no autoescaping, and the trailing newline
# of the file is part of the emitted stream.
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)


def load_template(name: str = DEFAULT_TEMPLATE) -> Template:
    """Load a manifest template by name from the templates directory."""
    path = TEMPLATES_DIR / f"{name}.yaml.j2"
    if not path.exists():
        msg = f"Template '{name}' not found at {path}"
        raise FileNotFoundError(msg)
    return _env.get_template(path.name)


def template_context(config: ResolvedConfig) -> dict[str, Any]:
    """Build the substitution values for *config*."""
    try:
        context = {
            "name": config.name,
            "replicas": config.replicas,
            "app_label": config.app_label,
        }
    except AttributeError as exc:
        msg = f"Resolved config is missing a required field: {exc}"
        raise RenderError(msg) from exc
    if not isinstance(context["name"], str):
        msg = f"Resolved name must be a string, got {type(context['name']).__name__}"
        raise RenderError(msg)
    if not isinstance(context["replicas"], int) or isinstance(
        context["replicas"], bool
    ):
        msg = (
            "Resolved replicas must be an integer, "
            f"got {type(context['replicas']).__name__}"
        )
        raise RenderError(msg)
    return context


def render_manifests(
    config: ResolvedConfig,
    *,
    template: str = DEFAULT_TEMPLATE,
) -> str:
    """Render the generated resources for *config* as a YAML stream."""
    context = template_context(config)
    try:
        rendered = load_template(template).render(context)
    except TemplateError as exc:
        msg = f"Failed to render template '{template}': {exc}"
        raise RenderError(msg) from exc
    logger.debug("manifests.rendered", template=template, size=len(rendered))
    return rendered
