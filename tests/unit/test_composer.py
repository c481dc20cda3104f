"""Unit tests for the upstream passthrough and manifest composition."""

from __future__ import annotations

import io

import pytest

from crdb_transformer.config.models import ResolvedConfig
from crdb_transformer.config.templates import render_manifests
from crdb_transformer.errors import RenderError, StreamCopyError
from crdb_transformer.streaming.composer import SEPARATOR, compose, copy_stream


class _FailingReader(io.RawIOBase):
    """Yields one chunk, then fails."""

    def __init__(self) -> None:
        self._calls = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self._calls += 1
        if self._calls == 1:
            return b"kind: ConfigMap\n"
        raise OSError("connection reset")


class _FailingWriter(io.BytesIO):
    def write(self, data) -> int:  # type: ignore[override]
        raise OSError("broken pipe")


CONFIG = ResolvedConfig(name="mydb", replicas=3)


class TestCopyStream:
    def test_copies_bytes(self):
        sink = io.BytesIO()
        assert copy_stream(io.BytesIO(b"abc\n"), sink) == 4
        assert sink.getvalue() == b"abc\n"

    def test_empty_source(self):
        sink = io.BytesIO()
        assert copy_stream(io.BytesIO(b""), sink) == 0
        assert sink.getvalue() == b""

    def test_large_source_copied_verbatim(self):
        data = bytes(range(256)) * 1024
        sink = io.BytesIO()
        assert copy_stream(io.BytesIO(data), sink) == len(data)
        assert sink.getvalue() == data

    def test_read_error_raises(self):
        with pytest.raises(StreamCopyError, match="connection reset"):
            copy_stream(_FailingReader(), io.BytesIO())

    def test_write_error_raises(self):
        with pytest.raises(StreamCopyError, match="broken pipe"):
            copy_stream(io.BytesIO(b"abc"), _FailingWriter())


class TestCompose:
    def test_output_layout(self):
        sink = io.BytesIO()
        compose(io.BytesIO(b"A\n"), sink, CONFIG)
        out = sink.getvalue()
        assert out.startswith(b"A\n\n---\n")
        assert out == b"A\n" + SEPARATOR + render_manifests(CONFIG).encode()
        assert b"app: mydb-cockroachdb" in out
        assert b"  replicas: 3\n" in out

    def test_empty_upstream_still_separated(self):
        sink = io.BytesIO()
        compose(io.BytesIO(b""), sink, CONFIG)
        assert sink.getvalue().startswith(b"\n---\n\napiVersion: v1\n")

    def test_upstream_without_trailing_newline(self):
        sink = io.BytesIO()
        compose(io.BytesIO(b"kind: ConfigMap"), sink, CONFIG)
        assert sink.getvalue().startswith(b"kind: ConfigMap\n---\n")

    def test_upstream_bytes_untouched(self):
        upstream = b"# \xff not utf-8\r\nkind: Secret\r\n"
        sink = io.BytesIO()
        compose(io.BytesIO(upstream), sink, CONFIG)
        assert sink.getvalue().startswith(upstream + SEPARATOR)

    def test_deterministic(self):
        first, second = io.BytesIO(), io.BytesIO()
        compose(io.BytesIO(b"A\n"), first, CONFIG)
        compose(io.BytesIO(b"A\n"), second, CONFIG)
        assert first.getvalue() == second.getvalue()

    def test_copy_failure_writes_no_manifests(self):
        sink = io.BytesIO()
        with pytest.raises(StreamCopyError):
            compose(_FailingReader(), sink, CONFIG)
        assert sink.getvalue() == b"kind: ConfigMap\n"

    def test_render_failure_after_passthrough(self):
        sink = io.BytesIO()
        with pytest.raises(RenderError):
            compose(io.BytesIO(b"A\n"), sink, ResolvedConfig.model_construct(name="x"))
        assert sink.getvalue() == b"A\n" + SEPARATOR
