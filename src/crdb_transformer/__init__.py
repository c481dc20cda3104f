"""CockroachDB manifest transformer for declarative config pipelines."""

__version__ = "0.1.0"
