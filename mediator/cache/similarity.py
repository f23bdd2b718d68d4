"""
Descriptor Similarity

Similarity between descriptors is half entity match and half Jaccard
overlap of attribute names. A descriptor pair is compared side by side and
the two scores are averaged, so the result lies in [0, 1] and equals 1.0
only for pairs with identical entities and attribute names.
"""

from typing import AbstractSet

from mediator.schemas.descriptor import SemanticDescriptor


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Jaccard index; two empty sets count as identical."""
    if not a and not b:
        return 1.0
    return len(a & b) / len(a | b)


def descriptor_similarity(a: SemanticDescriptor, b: SemanticDescriptor) -> float:
    entity_match = 1.0 if a.entity == b.entity else 0.0
    return 0.5 * entity_match + 0.5 * jaccard(a.attribute_names, b.attribute_names)


def pair_similarity(
    source: SemanticDescriptor,
    target: SemanticDescriptor,
    entry_source: SemanticDescriptor,
    entry_target: SemanticDescriptor,
) -> float:
    """Similarity of a requested (source, target) pair to a stored pair."""
    return (
        descriptor_similarity(source, entry_source)
        + descriptor_similarity(target, entry_target)
    ) / 2.0
