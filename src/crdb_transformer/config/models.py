"""Pydantic models for the function configuration and its resolved form."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, StrictInt, field_validator

from crdb_transformer.config.defaults import (
    APP_LABEL_SUFFIX,
    MAX_REPLICAS,
    MIN_REPLICAS,
)

ReplicaCount = Annotated[StrictInt, Field(ge=MIN_REPLICAS, le=MAX_REPLICAS)]


class Metadata(BaseModel, extra="ignore"):
    """Identity of the generated cluster."""

    # Name of the StatefulSet, the headless Service and the label prefix.
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def scalar_name_as_text(cls, v: Any) -> Any:
        # Plain scalars such as 2024 or no are names too; the loader passes
        # their source text, this covers values built in code.
        if v is None:
            return ""
        if isinstance(v, bool | int | float):
            return str(v)
        return v


class Spec(BaseModel, extra="ignore"):
    """Desired state of the cluster."""

    # None means "not set", which is distinct from an explicit 0.
    replicas: ReplicaCount | None = None


class FunctionConfig(BaseModel, extra="ignore"):
    """The configuration document as supplied to the function.

    Decoding is permissive: keys other than ``metadata.name`` and
    ``spec.replicas`` are ignored at every level, so documents carrying
    ``apiVersion``, ``kind`` or annotations decode without complaint.
    """

    metadata: Metadata = Field(default_factory=Metadata)
    spec: Spec = Field(default_factory=Spec)

    @field_validator("metadata", "spec", mode="before")
    @classmethod
    def null_section_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class ResolvedConfig(BaseModel, frozen=True):
    """Fully resolved parameters consumed by the manifest template."""

    name: str
    replicas: int

    @property
    def app_label(self) -> str:
        return f"{self.name}{APP_LABEL_SUFFIX}"
