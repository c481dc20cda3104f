"""Function config parsing and replica defaulting."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from crdb_transformer.config.defaults import (
    DEFAULT_REPLICAS,
    MAX_REPLICAS,
    MIN_REPLICAS,
)
from crdb_transformer.config.models import FunctionConfig, ResolvedConfig
from crdb_transformer.errors import InvalidDefaultError, ParseError

logger = structlog.get_logger()

# Optional sign followed by ASCII digits, nothing else.
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

_NULL_TAG = "tag:yaml.org,2002:null"


def _first_document(text: str) -> tuple[Any, yaml.Node | None]:
    """Decode only the first YAML document in *text*, with its node tree."""
    loader = yaml.SafeLoader(text)
    try:
        if not loader.check_node():
            return None, None
        node = loader.get_node()
        return loader.construct_document(node), node
    except yaml.YAMLError as exc:
        msg = "Failed to parse function config"
        if hasattr(exc, "problem_mark") and exc.problem_mark is not None:
            mark = exc.problem_mark
            msg += f" at line {mark.line + 1}, column {mark.column + 1}"
        msg += f": {exc}"
        raise ParseError(msg) from exc
    finally:
        loader.dispose()


def _mapping_value(node: yaml.Node | None, key: str) -> yaml.Node | None:
    """Return the value node for *key*; the last one wins, as in the data."""
    if not isinstance(node, yaml.MappingNode):
        return None
    found = None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            found = value_node
    return found


def _name_source_text(node: yaml.Node | None) -> str | None:
    """Source text of a plain ``metadata.name`` scalar like ``2024`` or ``no``."""
    name = _mapping_value(_mapping_value(node, "metadata"), "name")
    if not isinstance(name, yaml.ScalarNode) or name.tag == _NULL_TAG:
        return None
    return name.value


def parse_config(text: str) -> FunctionConfig:
    """Decode the function config, ignoring any fields it does not know."""
    if not text.strip():
        raise ParseError("Function config is empty")
    data, node = _first_document(text)
    if data is None:
        raise ParseError("Function config contains no document")
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping at top level, got {type(data).__name__}"
        raise ParseError(msg)
    name = _name_source_text(node)
    metadata = data.get("metadata")
    if name is not None and isinstance(metadata, dict):
        data["metadata"] = {**metadata, "name": name}
    try:
        return FunctionConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid function config:\n{exc}"
        raise ParseError(msg) from exc


def parse_default_replicas(raw: str | None) -> int | None:
    """Parse the environment default replica count.

    Returns None when the value is unset or empty.
    """
    if not raw:
        return None
    if not _INT_PATTERN.fullmatch(raw):
        msg = f"Invalid default replica count {raw!r}: not an integer"
        raise InvalidDefaultError(msg)
    value = int(raw)
    if not MIN_REPLICAS <= value <= MAX_REPLICAS:
        msg = f"Invalid default replica count {raw!r}: value out of range"
        raise InvalidDefaultError(msg)
    return value


def resolve_replicas(explicit: int | None, raw_default: str | None) -> int:
    """Pick the replica count: explicit value, then env default, then 1."""
    if explicit is not None:
        return explicit
    default = parse_default_replicas(raw_default)
    if default is not None:
        logger.debug("replicas.defaulted", source="environment", replicas=default)
        return default
    logger.debug("replicas.defaulted", source="fallback", replicas=DEFAULT_REPLICAS)
    return DEFAULT_REPLICAS


def resolve_config(
    text: str,
    default_replicas: str | None = None,
) -> ResolvedConfig:
    """Parse *text* and resolve it into the parameters used for rendering."""
    config = parse_config(text)
    replicas = resolve_replicas(config.spec.replicas, default_replicas)
    resolved = ResolvedConfig(name=config.metadata.name, replicas=replicas)
    logger.debug(
        "config.resolved", name=resolved.name, replicas=resolved.replicas
    )
    return resolved


def load_config_text(path: str | Path) -> str:
    """Read a function config document from a file."""
    p = Path(path)
    if not p.exists():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    try:
        return p.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Config file {p} is not valid UTF-8: {exc}"
        raise ParseError(msg) from exc
