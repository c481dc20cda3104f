"""Single-invocation transform: resolve the config, then compose the stream."""

from __future__ import annotations

from typing import BinaryIO

import structlog

from crdb_transformer.config.loader import resolve_config
from crdb_transformer.config.models import ResolvedConfig
from crdb_transformer.streaming.composer import compose

logger = structlog.get_logger()


def transform(
    config_text: str,
    default_replicas: str | None,
    source: BinaryIO,
    sink: BinaryIO,
) -> ResolvedConfig:
    """Run one transform and return the config it rendered.

    Resolution happens before anything is read from *source* or written to
    *sink*, so config errors never leave partial output behind.
    """
    config = resolve_config(config_text, default_replicas)
    logger.info("transform.started", name=config.name, replicas=config.replicas)
    compose(source, sink, config)
    logger.info("transform.completed", name=config.name)
    return config
