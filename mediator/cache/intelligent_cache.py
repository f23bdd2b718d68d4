"""
Intelligent Transformation Cache

Stores descriptor-pair -> transformation-path mappings and retrieves them by
similarity rather than exact key. The cache is an explicitly owned component:
it starts empty, is injected into the components that use it, and is torn
down with ``close()``.

Concurrency model:
    Entries are frozen and replaced whole under a short-lived lock, so a
    stored path is never observed half-written (last writer wins).
    Similarity scoring runs on a snapshot outside the lock. Usage counters
    are incremented under the lock; a counter bump racing an overwrite of
    the same key may be lost, which only makes the counter approximate.
"""

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from mediator.cache.similarity import pair_similarity
from mediator.descriptors import signature
from mediator.errors import UpstreamFailure
from mediator.llm.service import ask_json
from mediator.schemas.descriptor import SemanticDescriptor
from mediator.schemas.transformation import TransformationPath


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cache entry; updates replace the whole entry.

    Attributes:
        key: Signature of the (source, target) descriptor pair
        source: Source descriptor the path was generated for
        target: Target descriptor the path was generated for
        path: Validated transformation path
        created_at: Epoch seconds when the entry was stored
        last_used_at: Epoch seconds of the most recent hit (or creation)
        hit_count: Number of hits recorded
        metadata: Caller-supplied metadata plus the last usage context
    """
    key: str
    source: SemanticDescriptor
    target: SemanticDescriptor
    path: TransformationPath
    created_at: float
    last_used_at: float
    hit_count: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "source": self.source.entity,
            "target": self.target.entity,
            "path_id": self.path.id,
            "strategy": self.path.recommended_strategy,
            "steps": [step.type for step in self.path.steps],
            "created_at": _iso(self.created_at),
            "last_used_at": _iso(self.last_used_at),
            "hit_count": self.hit_count,
        }


@dataclass(frozen=True)
class CacheMatch:
    """A stored entry that qualified for a lookup, with its similarity."""
    entry: CacheEntry
    similarity: float

    @property
    def key(self) -> str:
        return self.entry.key

    @property
    def path(self) -> TransformationPath:
        """Detached copy of the stored path; edits never reach the cache."""
        return _detached(self.entry.path)


def _detached(path: TransformationPath) -> TransformationPath:
    # frozen only blocks attribute assignment; step lists and parameter
    # dicts stay mutable, so paths cross the cache boundary as copies
    return path.model_copy(deep=True)


def _iso(epoch: float) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


class IntelligentCache:
    """Similarity-retrieving cache of transformation paths.

    Args:
        capacity: Maximum number of entries before eviction
        decay_seconds: Age scale for eviction scoring
        clock: Time source returning epoch seconds
        content_service: Optional collaborator for usage analysis
        prompts: Optional ``PromptLibrary`` for usage analysis

    Example:
        >>> cache = IntelligentCache(capacity=128)
        >>> cache.store(source, target, path)
        >>> cache.retrieve(source, target, threshold=0.85)
    """

    def __init__(
        self,
        capacity: int = 256,
        decay_seconds: float = 3600.0,
        clock: Callable[[], float] = time.time,
        content_service=None,
        prompts=None,
    ):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if decay_seconds <= 0:
            raise ValueError("decay_seconds must be positive")

        self.capacity = capacity
        self.decay_seconds = decay_seconds
        self.clock = clock
        self.content_service = content_service
        self.prompts = prompts

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _snapshot(self) -> List[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    def candidates(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        threshold: float,
    ) -> List[CacheMatch]:
        """All entries with similarity >= threshold, best first.

        Ties on similarity are ordered by most recent use.
        """
        matches = []
        for entry in self._snapshot():
            score = pair_similarity(source, target, entry.source, entry.target)
            if score >= threshold:
                matches.append(CacheMatch(entry=entry, similarity=score))

        matches.sort(key=lambda m: (m.similarity, m.entry.last_used_at), reverse=True)
        return matches

    def lookup(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        threshold: float,
    ) -> Optional[CacheMatch]:
        """Best qualifying match, or None below threshold."""
        matches = self.candidates(source, target, threshold)
        with self._lock:
            if matches:
                self._hits += 1
            else:
                self._misses += 1

        if not matches:
            logger.debug(f"Cache miss for {source.entity} -> {target.entity} at {threshold}")
            return None

        best = matches[0]
        logger.debug(
            f"Cache hit for {source.entity} -> {target.entity}: "
            f"{best.key[:12]} similarity={best.similarity:.3f}"
        )
        return best

    def retrieve(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        threshold: float,
    ) -> Optional[TransformationPath]:
        match = self.lookup(source, target, threshold)
        return match.path if match else None

    def store(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        path: TransformationPath,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Insert or overwrite the entry for the descriptor pair.

        Returns:
            The entry key
        """
        key = signature(source, target)
        now = self.clock()
        entry = CacheEntry(
            key=key,
            source=source,
            target=target,
            path=_detached(path),
            created_at=now,
            last_used_at=now,
            hit_count=0,
            metadata=dict(metadata or {}),
        )

        with self._lock:
            self._entries[key] = entry
            evicted = self._evict_locked(protect=key)

        for old in evicted:
            logger.debug(f"Evicted cache entry {old.key[:12]} (hits={old.hit_count})")
        logger.debug(f"Stored cache entry {key[:12]} for {source.entity} -> {target.entity}")
        return key

    def update_usage_statistics(self, key: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """Record a hit on an entry.

        Returns:
            False if the entry no longer exists
        """
        now = self.clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            metadata = dict(entry.metadata)
            if context:
                metadata["last_context"] = dict(context)
            self._entries[key] = replace(
                entry,
                hit_count=entry.hit_count + 1,
                last_used_at=now,
                metadata=metadata,
            )
        return True

    def _eviction_score(self, entry: CacheEntry, now: float) -> float:
        age = max(0.0, now - entry.created_at)
        return entry.hit_count / (1.0 + age / self.decay_seconds)

    def _evict_locked(self, protect: str) -> List[CacheEntry]:
        evicted = []
        now = self.clock()
        while len(self._entries) > self.capacity:
            victims = [e for e in self._entries.values() if e.key != protect]
            if not victims:
                break
            victim = min(
                victims,
                key=lambda e: (self._eviction_score(e, now), e.last_used_at)
            )
            del self._entries[victim.key]
            self._evictions += 1
            evicted.append(victim)
        return evicted

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return replace(entry, path=_detached(entry.path))

    def most_used(self, limit: int = 10) -> List[CacheEntry]:
        entries = self._snapshot()
        entries.sort(key=lambda e: (e.hit_count, e.last_used_at), reverse=True)
        return entries[:limit]

    def recently_used(self, limit: int = 10) -> List[CacheEntry]:
        entries = self._snapshot()
        entries.sort(key=lambda e: e.last_used_at, reverse=True)
        return entries[:limit]

    def clear(self, older_than: Optional[float] = None) -> int:
        """Remove entries.

        Args:
            older_than: If given, only remove entries not used for this many seconds

        Returns:
            Number of entries removed
        """
        with self._lock:
            if older_than is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                cutoff = self.clock() - older_than
                stale = [k for k, e in self._entries.items() if e.last_used_at < cutoff]
                for key in stale:
                    del self._entries[key]
                removed = len(stale)

        logger.info(f"Cleared {removed} cache entries")
        return removed

    def stats(self) -> Dict[str, Any]:
        entries = self._snapshot()
        lookups = self._hits + self._misses
        return {
            "entries": len(entries),
            "capacity": self.capacity,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / lookups, 4) if lookups else 0.0,
            "evictions": self._evictions,
            "total_entry_hits": sum(e.hit_count for e in entries),
        }

    def analyze_usage_patterns(self, limit: int = 10) -> Dict[str, Any]:
        """Summarize cache usage, with collaborator suggestions when available.

        Falls back to the local statistics alone, marked ``degraded``, when no
        collaborator is configured or the call fails.
        """
        report: Dict[str, Any] = {
            "stats": self.stats(),
            "most_used": [e.to_dict() for e in self.most_used(limit)],
            "recently_used": [e.to_dict() for e in self.recently_used(limit)],
        }

        if self.content_service is None or self.prompts is None:
            report["analysis"] = {"degraded": True, "error": "No content service configured"}
            return report

        try:
            report["analysis"] = ask_json(
                self.content_service,
                self.prompts,
                "analyze_usage",
                stats=report["stats"],
                entries=report["most_used"],
            )
        except UpstreamFailure as e:
            logger.warning(f"Cache usage analysis failed: {e}")
            report["analysis"] = {"degraded": True, "error": str(e)}
        return report

    def close(self) -> None:
        """Tear down the cache at the end of the process-scoped lifetime."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Cache closed, dropped {count} entries")
