"""Pydantic base schema utilities shared by catalog and broker models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all wire-facing schemas.

    Configures common Pydantic behaviors:
    - ``alias_generator=to_camel``: Fields are read and written in camelCase on the wire.
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="ignore"``: Unknown keys in externally produced documents are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump the model using camelCase aliases, as returned to API callers."""
        return self.model_dump(by_alias=True, mode="json")


class FrozenSchema(BaseSchema):
    """Immutable value object variant of ``BaseSchema``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )
