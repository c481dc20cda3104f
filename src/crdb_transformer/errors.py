"""Exception hierarchy for the transformer."""

from __future__ import annotations


class TransformerError(Exception):
    """Base class for fatal transformer errors."""


class ParseError(TransformerError):
    """Raised when the configuration document cannot be decoded."""


class InvalidDefaultError(TransformerError):
    """Raised when the environment default replica count is not an integer."""


class StreamCopyError(TransformerError):
    """Raised when relaying the upstream stream fails."""


class RenderError(TransformerError):
    """Raised when the manifest template cannot be rendered.

    Only reachable with a config that bypassed resolution, so this signals a
    programming error rather than bad user input.
    """
