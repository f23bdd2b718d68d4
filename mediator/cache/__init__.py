"""
Transformation Cache

Similarity-retrieving cache of validated transformation paths.
"""

from mediator.cache.intelligent_cache import CacheEntry, CacheMatch, IntelligentCache
from mediator.cache.similarity import descriptor_similarity, jaccard, pair_similarity

__all__ = [
    "CacheEntry",
    "CacheMatch",
    "IntelligentCache",
    "descriptor_similarity",
    "jaccard",
    "pair_similarity",
]
