"""Reusable base models for persisted allocation documents."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `chain_id_mapping` in a Python model will be
    represented as `chainIdMapping` when it is serialized to JSON.

    Every file written under the storage root goes through this model, so the
    on-disk layout stays compatible with tooling that reads camel-case keys.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def to_json(self) -> str:
        """Serialize with camel-case keys and stable two-space indentation."""
        return self.model_dump_json(by_alias=True, indent=2)


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }
