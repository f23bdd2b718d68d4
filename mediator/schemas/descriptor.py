"""
Semantic Descriptor Schema

Structural and semantic summary of an entity exchanged between pipeline
stages. Descriptors are built fresh per call from a snapshot and are frozen
once created.
"""

from typing import Any, Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field


class AttributeSpec(BaseModel):
    """Type tag and description of a single descriptor attribute.

    Type tags: string, boolean, integer, number, array, object, null, any,
    or a runtime class name for values outside JSON.
    """
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1)
    description: str = ""


class SemanticDescriptor(BaseModel):
    """Summary of an exchanged entity.

    Attributes:
        entity: Non-empty entity tag (usually the producing module)
        description: Human-readable description
        attributes: Ordered map of attribute name to AttributeSpec
        metadata: Free-form tags; ``open=True`` marks a descriptor with no
            fixed attribute list
    """
    model_config = ConfigDict(frozen=True)

    entity: str = Field(..., min_length=1)
    description: str = ""
    attributes: Dict[str, AttributeSpec] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return bool(self.metadata.get("open"))

    @property
    def attribute_names(self) -> FrozenSet[str]:
        return frozenset(self.attributes)

    def summary(self) -> Dict[str, Any]:
        """Compact view used in prompts."""
        return {
            "entity": self.entity,
            "description": self.description,
            "open": self.is_open,
            "attributes": {name: spec.type for name, spec in self.attributes.items()},
        }
