"""Schemas communs / Common schemas."""

import enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Currency(str, enum.Enum):
    """Devise / Currency."""
    USD = "USD"
    ZAR = "ZAR"


class DocumentModel(BaseModel):
    """Base des documents stockes / Base for stored documents.

    Attributs snake_case, format document camelCase. Les cles inconnues sont
    conservees pour que les fusions venant de sources externes ne perdent rien.
    Snake_case attributes, camelCase document format. Unknown keys are kept so
    merges coming from external sources are not lossy.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        use_enum_values=True,
    )

    def to_document(self) -> dict:
        """Serialiser vers le format document / Serialize to document format."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class PatchModel(BaseModel):
    """Base des schemas de mise a jour partielle / Base for partial update schemas."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_patch(self) -> dict:
        """Champs fournis uniquement, format document / Set fields only, document format."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
