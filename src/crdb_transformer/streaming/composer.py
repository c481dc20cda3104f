"""Passthrough of upstream resources followed by the generated manifests."""

from __future__ import annotations

from typing import BinaryIO

import structlog

from crdb_transformer.config.models import ResolvedConfig
from crdb_transformer.config.templates import render_manifests
from crdb_transformer.errors import StreamCopyError

logger = structlog.get_logger()

# A blank line and a document marker, so the generated resources always
# start a new YAML document even if upstream lacks a trailing newline.
SEPARATOR = b"\n---\n"

_CHUNK_SIZE = 64 * 1024


def copy_stream(source: BinaryIO, sink: BinaryIO) -> int:
    """Copy *source* to *sink* until EOF and return the number of bytes."""
    copied = 0
    try:
        while chunk := source.read(_CHUNK_SIZE):
            sink.write(chunk)
            copied += len(chunk)
    except OSError as exc:
        msg = f"Failed to copy upstream resources after {copied} bytes: {exc}"
        raise StreamCopyError(msg) from exc
    logger.debug("stream.copied", bytes=copied)
    return copied


def compose(source: BinaryIO, sink: BinaryIO, config: ResolvedConfig) -> None:
    """Write upstream resources, the separator, then the rendered manifests.

    The upstream stream is copied in full before rendering starts; if the
    copy fails nothing further is written.
    """
    copy_stream(source, sink)
    try:
        sink.write(SEPARATOR)
    except OSError as exc:
        raise StreamCopyError(f"Failed to write document separator: {exc}") from exc
    rendered = render_manifests(config)
    try:
        sink.write(rendered.encode("utf-8"))
        sink.flush()
    except OSError as exc:
        raise StreamCopyError(f"Failed to write generated manifests: {exc}") from exc
