"""
Conflict Resolver

Picks a resolution strategy by priority, runs it, and caches successful
resolutions under a descriptor pair scoped to the exact request, so asking
to reconcile the same two records again returns the stored resolution
without consulting any strategy.
"""

import copy
import hashlib
import json
import logging
from typing import Iterable, List, Optional, Tuple

from mediator.cache.intelligent_cache import IntelligentCache
from mediator.descriptors import describe
from mediator.errors import MediationError
from mediator.monitoring import SafeMonitor
from mediator.resolution.strategies import (
    ExplicitMappingStrategy,
    MappingFunction,
    ResolutionOutcome,
    ResolutionRequest,
    ResolutionStrategy,
)
from mediator.schemas.descriptor import SemanticDescriptor
from mediator.schemas.mediation import ConflictResolution
from mediator.schemas.transformation import TransformationPath, TransformationStep


logger = logging.getLogger(__name__)

RESOLUTION_STEP_TYPE = "conflict_resolution"
DEFAULT_RESOLUTION_THRESHOLD = 0.95


class ConflictResolver:
    """Priority-ordered chain of resolution strategies with a result cache.

    Args:
        strategies: Strategies to register (ordered by priority, highest first)
        cache: Cache holding earlier resolutions
        monitor: Monitoring shim
        threshold: Similarity a cached resolution must reach to be reused

    Example:
        >>> resolver = ConflictResolver(default_strategies(service, prompts), cache)
        >>> resolver.resolve(request, force_strategy="pattern_matching")
    """

    def __init__(
        self,
        strategies: Iterable[ResolutionStrategy],
        cache: IntelligentCache,
        monitor: Optional[SafeMonitor] = None,
        threshold: float = DEFAULT_RESOLUTION_THRESHOLD
    ):
        self.cache = cache
        self.monitor = monitor or SafeMonitor()
        self.threshold = threshold
        self._strategies: List[ResolutionStrategy] = []
        for strategy in strategies:
            self.register_strategy(strategy)

    @property
    def strategies(self) -> List[ResolutionStrategy]:
        return list(self._strategies)

    def register_strategy(self, strategy: ResolutionStrategy) -> None:
        """Add a strategy; a strategy with the same name is replaced."""
        self._strategies = [s for s in self._strategies if s.name != strategy.name]
        self._strategies.append(strategy)
        self._strategies.sort(key=lambda s: s.priority, reverse=True)
        logger.debug(f"Registered resolution strategy {strategy.name} (priority {strategy.priority})")

    def strategy(self, name: str) -> Optional[ResolutionStrategy]:
        for strategy in self._strategies:
            if strategy.name == name:
                return strategy
        return None

    def register_mapping(self, module_a: str, module_b: str, mapping: MappingFunction) -> None:
        explicit = self.strategy(ExplicitMappingStrategy.name)
        if not isinstance(explicit, ExplicitMappingStrategy):
            raise ValueError("No explicit_mapping strategy is registered")
        explicit.register_mapping(module_a, module_b, mapping)

    def select(self, request: ResolutionRequest, force_strategy: Optional[str] = None) -> ResolutionStrategy:
        """Forced strategy if it exists and applies, else the highest-priority one that applies."""
        if force_strategy:
            forced = self.strategy(force_strategy)
            if forced is None:
                logger.warning(f"Unknown resolution strategy {force_strategy}, selecting automatically")
            elif not forced.can_resolve(request):
                logger.warning(
                    f"Strategy {force_strategy} cannot resolve {request.module_a} / "
                    f"{request.module_b}, selecting automatically"
                )
            else:
                return forced

        for strategy in self._strategies:
            if strategy.can_resolve(request):
                return strategy
        raise MediationError(
            f"No registered resolution strategy can resolve {request.module_a} / {request.module_b}"
        )

    def resolve(self, request: ResolutionRequest, force_strategy: Optional[str] = None) -> ConflictResolution:
        """Reconcile the two records of a request.

        A forced strategy bypasses the cached resolution.

        Raises:
            MediationError: If the selected strategy fails
        """
        source, target = self._descriptors(request)

        if not force_strategy:
            match = self.cache.lookup(source, target, self.threshold)
            if match is not None:
                cached = self._cached_resolution(match.path)
                if cached is not None:
                    self.cache.update_usage_statistics(match.key, {"operation": "resolve_conflicts"})
                    self.monitor.log_event(
                        "conflict_resolution_cache_hit",
                        module_a=request.module_a,
                        module_b=request.module_b,
                        strategy_used=cached.strategy_used,
                    )
                    logger.debug(f"Cached resolution for {request.module_a} / {request.module_b}")
                    return cached

        strategy = self.select(request, force_strategy)
        logger.debug(
            f"Resolving {request.module_a} / {request.module_b} with {strategy.name}"
        )
        outcome = strategy.resolve(request)
        resolution = self._resolution(request, strategy, outcome)
        self._store(source, target, resolution)
        return resolution

    def _resolution(
        self,
        request: ResolutionRequest,
        strategy: ResolutionStrategy,
        outcome: ResolutionOutcome
    ) -> ConflictResolution:
        return ConflictResolution(
            module_a=request.module_a,
            module_b=request.module_b,
            conflicts=list(request.conflicts),
            resolved_data=copy.deepcopy(outcome.resolved_data),
            resolutions=outcome.resolutions,
            explanation=outcome.explanation,
            strategy_used=strategy.name,
            confidence=outcome.confidence,
        )

    def _descriptors(self, request: ResolutionRequest) -> Tuple[SemanticDescriptor, SemanticDescriptor]:
        canonical = json.dumps(
            {
                "module_a": request.module_a,
                "data_a": request.data_a,
                "module_b": request.module_b,
                "data_b": request.data_b,
            },
            sort_keys=True,
            ensure_ascii=False,
            default=str,
        )
        digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
        return (
            describe(request.data_a, f"conflict-a:{digest}"),
            describe(request.data_b, f"conflict-b:{digest}"),
        )

    def _cached_resolution(self, path: TransformationPath) -> Optional[ConflictResolution]:
        if not path.steps:
            return None
        step = path.steps[0]
        if step.type != RESOLUTION_STEP_TYPE or "resolution" not in step.parameters:
            return None
        resolution = ConflictResolution.model_validate(step.parameters["resolution"])
        return resolution.model_copy(update={"cached": True})

    def _store(self, source: SemanticDescriptor, target: SemanticDescriptor, resolution: ConflictResolution) -> None:
        path = TransformationPath(
            source=source,
            target=target,
            steps=[TransformationStep(
                type=RESOLUTION_STEP_TYPE,
                parameters={"resolution": resolution.model_dump(mode="json")},
                description=f"Resolved with {resolution.strategy_used}",
            )],
            recommended_strategy=resolution.strategy_used,
            metadata={"module_a": resolution.module_a, "module_b": resolution.module_b},
        )
        self.cache.store(
            source,
            target,
            path,
            metadata={"kind": RESOLUTION_STEP_TYPE, "confidence": resolution.confidence},
        )
