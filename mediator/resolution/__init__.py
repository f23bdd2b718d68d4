"""
Conflict Resolution

Priority-ordered strategies for reconciling two versions of the same
information, with cached results.
"""

from mediator.resolution.resolver import ConflictResolver
from mediator.resolution.strategies import (
    ExplicitMappingStrategy,
    LLMResolutionStrategy,
    PatternMatchingStrategy,
    ResolutionOutcome,
    ResolutionRequest,
    ResolutionStrategy,
    default_strategies,
    merge_values,
)

__all__ = [
    "ConflictResolver",
    "ExplicitMappingStrategy",
    "LLMResolutionStrategy",
    "PatternMatchingStrategy",
    "ResolutionOutcome",
    "ResolutionRequest",
    "ResolutionStrategy",
    "default_strategies",
    "merge_values",
]
