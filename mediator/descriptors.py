"""
Descriptor Model

Builds ``SemanticDescriptor`` summaries from payload snapshots, computes the
cache signature of a descriptor pair, and keeps the registry of fixed target
descriptors declared by pipeline modules.
"""

import hashlib
import json
import logging
import threading
from typing import Any, Dict, List, Optional

from mediator.schemas.descriptor import AttributeSpec, SemanticDescriptor


logger = logging.getLogger(__name__)


def type_tag(value: Any) -> str:
    """Runtime type tag of a value.

    ``bool`` is checked before ``int`` because it is an ``int`` subclass.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def describe(payload: Any, module_tag: str) -> SemanticDescriptor:
    """Describe a payload produced or consumed by a module.

    Attributes enumerate the payload's top-level fields with their runtime
    type tags. Payloads that are not objects yield an empty attribute map.

    Args:
        payload: Data snapshot
        module_tag: Tag of the module the payload belongs to

    Returns:
        Frozen descriptor with ``entity == module_tag``
    """
    module_tag = module_tag or "unknown"
    attributes: Dict[str, AttributeSpec] = {}
    declared_type = type_tag(payload)

    if isinstance(payload, dict):
        for name, value in payload.items():
            attributes[str(name)] = AttributeSpec(type=type_tag(value))
        if isinstance(payload.get("type"), str) and payload["type"]:
            declared_type = payload["type"]

    return SemanticDescriptor(
        entity=module_tag,
        description=f"{declared_type} payload from {module_tag}",
        attributes=attributes,
        metadata={"module": module_tag, "payload_type": declared_type},
    )


def open_descriptor(module_tag: str, description: str = "") -> SemanticDescriptor:
    """Descriptor with no fixed attribute list; validated semantically."""
    return SemanticDescriptor(
        entity=module_tag,
        description=description or f"Open schema for {module_tag}",
        metadata={"module": module_tag, "open": True},
    )


def signature(source: SemanticDescriptor, target: SemanticDescriptor) -> str:
    """Stable cache key of a (source, target) descriptor pair."""
    canonical = json.dumps(
        [source.model_dump(mode="json"), target.model_dump(mode="json")],
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class DescriptorRegistry:
    """Fixed target descriptors declared by pipeline modules.

    Modules without a registered descriptor are treated as open targets.

    Example:
        >>> registry = DescriptorRegistry()
        >>> registry.register_schema("validator", {"code": "string", "tests": "array"})
        >>> registry.target_for("validator").attribute_names
        frozenset({'code', 'tests'})
    """

    def __init__(self):
        self._descriptors: Dict[str, SemanticDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, module_tag: str, descriptor: SemanticDescriptor) -> None:
        with self._lock:
            self._descriptors[module_tag] = descriptor
        logger.debug(f"Registered descriptor for {module_tag}: {sorted(descriptor.attributes)}")

    def register_schema(
        self,
        module_tag: str,
        attributes: Dict[str, str],
        description: str = ""
    ) -> SemanticDescriptor:
        """Register a descriptor from a plain ``{name: type}`` mapping."""
        descriptor = SemanticDescriptor(
            entity=module_tag,
            description=description or f"Registered schema for {module_tag}",
            attributes={name: AttributeSpec(type=t) for name, t in attributes.items()},
            metadata={"module": module_tag, "registered": True},
        )
        self.register(module_tag, descriptor)
        return descriptor

    def get(self, module_tag: str) -> Optional[SemanticDescriptor]:
        return self._descriptors.get(module_tag)

    def target_for(self, module_tag: str) -> SemanticDescriptor:
        """Registered descriptor for the module, or an open descriptor."""
        return self._descriptors.get(module_tag) or open_descriptor(module_tag)

    def modules(self) -> List[str]:
        return sorted(self._descriptors)
