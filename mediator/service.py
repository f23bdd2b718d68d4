"""
Semantic Mediator

Facade exposed to the pipeline orchestrator. Composes the descriptor model,
the intelligent cache, the transformation engine and the validation context
generator behind seven operations:

    translate, enrich, resolve_conflicts, extract_insights,
    track_transformation, evaluate_transformation,
    generate_validation_context

Usage:
    >>> mediator = build_mediator(MediatorConfig.load_from_yaml(), store=store)
    >>> data = mediator.translate("model", "synthesize", model_output)
    >>> context = mediator.generate_validation_context("req-1", "code-1", ["val-1"])
    >>> mediator.close()
"""

import copy
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from mediator.cache.intelligent_cache import IntelligentCache
from mediator.config import MediatorConfig
from mediator.descriptors import DescriptorRegistry, describe
from mediator.errors import (
    ErrorKind,
    MalformedResponseError,
    MediationError,
    NotFoundError,
    TransformationExecutionError,
    UpstreamFailure,
)
from mediator.llm.factory import LLMProviderFactory
from mediator.llm.service import ContentGenerationService, ProviderContentService, ask_json
from mediator.monitoring import MonitoringSink, SafeMonitor
from mediator.parsing import expect_object
from mediator.prompts import PromptLibrary
from mediator.resolution import ConflictResolver, ResolutionRequest, default_strategies
from mediator.schemas.mediation import ConflictResolution, FieldConflict, Insights
from mediator.schemas.transformation import QualityScores, TransformationPath, TransformationRecord
from mediator.schemas.validation import ValidationContext, ValidationContextOptions
from mediator.store import InMemoryStore, Store
from mediator.transformation.engine import TransformationEngine
from mediator.validation_context.classifier import KeywordClassifier
from mediator.validation_context.generator import ValidationContextGenerator


logger = logging.getLogger(__name__)

ENRICH_MEMORY_LIMIT = 5


@dataclass
class TrackingOptions:
    """Options for ``track_transformation``.

    Attributes:
        track_differences: Compute structural and semantic differences
        analyze_transformation: Ask the content service to assess the transformation
        save_to_store: Append the record to the store
    """
    track_differences: bool = True
    analyze_transformation: bool = False
    save_to_store: bool = True


def structural_diff(source: Any, transformed: Any) -> Dict[str, Any]:
    """Top-level field differences between two records."""
    if not isinstance(source, dict) or not isinstance(transformed, dict):
        return {
            "added": [],
            "removed": [],
            "changed": [] if source == transformed else ["<root>"],
        }
    return {
        "added": [k for k in transformed if k not in source],
        "removed": [k for k in source if k not in transformed],
        "changed": [k for k in source if k in transformed and source[k] != transformed[k]],
    }


def find_conflicts(data_a: Any, data_b: Any) -> List[FieldConflict]:
    """Fields present in both records with different values."""
    if not isinstance(data_a, dict) or not isinstance(data_b, dict):
        if data_a == data_b:
            return []
        return [FieldConflict(field="<root>", value_a=data_a, value_b=data_b)]
    return [
        FieldConflict(field=name, value_a=data_a[name], value_b=data_b[name])
        for name in data_a
        if name in data_b and data_a[name] != data_b[name]
    ]


class SemanticMediator:
    """Mediation facade.

    Args:
        content_service: Content-generation collaborator
        store: Record store
        cache: Transformation cache (owned by the mediator; closed by ``close``)
        engine: Transformation engine
        context_generator: Validation context generator
        registry: Registered target descriptors
        monitor: Monitoring shim
        prompts: Prompt library
        translate_threshold: Cache similarity threshold for ``translate``
        resolver: Conflict resolver (default strategy chain over ``cache`` when omitted)
    """

    def __init__(
        self,
        content_service: ContentGenerationService,
        store: Store,
        cache: IntelligentCache,
        engine: TransformationEngine,
        context_generator: ValidationContextGenerator,
        registry: Optional[DescriptorRegistry] = None,
        monitor: Optional[SafeMonitor] = None,
        prompts: Optional[PromptLibrary] = None,
        translate_threshold: float = 0.85,
        resolver: Optional[ConflictResolver] = None
    ):
        self.content_service = content_service
        self.store = store
        self.cache = cache
        self.engine = engine
        self.context_generator = context_generator
        self.registry = registry or DescriptorRegistry()
        self.monitor = monitor or SafeMonitor()
        self.prompts = prompts or PromptLibrary()
        self.translate_threshold = translate_threshold
        self.resolver = resolver or ConflictResolver(
            default_strategies(content_service, self.prompts), cache, self.monitor
        )
        self._closed = False

    def _ask(self, template: str, **context: Any) -> Any:
        return ask_json(self.content_service, self.prompts, template, **context)

    def _fail(self, operation: str, message: str, error: Exception, **context: Any) -> MediationError:
        logger.error(f"{message}: {error}")
        self.monitor.log_error(error, operation=operation, **context)
        return MediationError(f"{message}: {error}")

    def translate(
        self,
        source_module: str,
        target_module: str,
        data: Any,
        context: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Translate data produced by one stage into the shape another expects.

        Collaborator failures during path generation fall back to the
        identity path; a result that fails validation is still returned but
        its path is not cached.

        Raises:
            MediationError: If a transformation step cannot be executed
        """
        start = time.time()
        source = describe(data, source_module)
        target = self.registry.target_for(target_module)
        step_context = {
            "source_module": source_module,
            "target_module": target_module,
            **(context or {}),
        }

        with self.monitor.session(
            operation="translate",
            source_module=source_module,
            target_module=target_module,
        ) as session:
            # 1. Cache lookup
            match = self.cache.lookup(source, target, self.translate_threshold)
            if match is not None:
                self.cache.update_usage_statistics(match.key, step_context)
                path = match.path
                session.log(step="cache_lookup", hit=True, similarity=match.similarity)
            else:
                session.log(step="cache_lookup", hit=False)
                # 2. Generate on miss
                path = self.engine.generate(source, target, step_context)
                session.log(
                    step="generate",
                    path_id=path.id,
                    steps=[s.type for s in path.steps],
                    fallback=path.fallback,
                )

            # 3. Execute
            try:
                result = self.engine.execute(data, path, step_context)
            except TransformationExecutionError as e:
                raise self._fail(
                    "translate",
                    f"Failed to translate data from {source_module} to {target_module}",
                    e,
                    path_id=path.id,
                    step_index=e.step_index,
                ) from e
            session.log(step="execute", path_id=path.id)

            # 4. Validate and cache new paths
            if match is None:
                self._validate_and_cache(source, target, path, result, step_context, session)

        logger.debug(
            f"Translated {source_module} -> {target_module} in {(time.time() - start) * 1000:.0f}ms"
        )
        return result

    def _validate_and_cache(self, source, target, path: TransformationPath, result, step_context, session) -> None:
        if path.fallback:
            # The fallback is never cached, so a later call can generate a real path
            session.log(step="validate", skipped=True, reason="fallback path")
            return

        outcome = self.engine.validate(result, target, step_context)
        session.log(step="validate", valid=outcome.valid, reasons=outcome.reasons)
        if outcome.valid:
            self.cache.store(
                source,
                target,
                path,
                metadata={
                    "source_module": step_context["source_module"],
                    "target_module": step_context["target_module"],
                },
            )
            return

        logger.warning(
            f"Translation {step_context['source_module']} -> {step_context['target_module']} "
            f"failed validation, path not cached: {'; '.join(outcome.reasons)}"
        )
        self.monitor.log_event(
            "validation_failure",
            source_module=step_context["source_module"],
            target_module=step_context["target_module"],
            path_id=path.id,
            reasons=outcome.reasons,
            error_kind=(outcome.error_kind or ErrorKind.VALIDATION_FAILURE).value,
        )

    def enrich(self, module: str, data: Any, context_query: str) -> Any:
        """Enrich data with related records found in the store.

        Returns the data unchanged when nothing related is found.

        Raises:
            MediationError: If the content service fails
        """
        memories = self.store.query({"text": context_query, "limit": ENRICH_MEMORY_LIMIT})
        if not memories:
            logger.debug(f"No related records for '{context_query}', returning data unchanged")
            return copy.deepcopy(data)

        try:
            answer = expect_object(
                self._ask("enrich", module=module, query=context_query, data=data, memories=memories),
                "enrichment",
            )
            if "enrichedData" not in answer:
                raise MalformedResponseError("Enrichment answer has no enrichedData", str(answer))
        except UpstreamFailure as e:
            raise self._fail("enrich", f"Failed to enrich data for {module}", e) from e

        self.monitor.log_event(
            "data_enriched",
            module=module,
            memories=len(memories),
            added_context=answer.get("addedContext") or [],
        )
        return answer["enrichedData"]

    def resolve_conflicts(
        self,
        module_a: str,
        data_a: Any,
        module_b: str,
        data_b: Any,
        force_strategy: Optional[str] = None
    ) -> ConflictResolution:
        """Reconcile two versions of the same information.

        Strategies are tried by priority (explicit_mapping, pattern_matching,
        llm_resolution); ``force_strategy`` names one to try first and skips
        the cached resolution.

        Raises:
            MediationError: If the selected strategy fails
        """
        request = ResolutionRequest(
            module_a=module_a,
            data_a=data_a,
            module_b=module_b,
            data_b=data_b,
            conflicts=tuple(find_conflicts(data_a, data_b)),
        )
        try:
            resolution = self.resolver.resolve(request, force_strategy=force_strategy)
        except MediationError as e:
            raise self._fail(
                "resolve_conflicts",
                f"Failed to resolve conflicts between {module_a} and {module_b}",
                e,
            ) from e

        self.monitor.log_event(
            "conflicts_resolved",
            module_a=module_a,
            module_b=module_b,
            conflicts=len(request.conflicts),
            strategy_used=resolution.strategy_used,
            confidence=resolution.confidence,
            cached=resolution.cached,
        )
        return resolution

    def register_resolution_mapping(self, module_a: str, module_b: str, mapping: Callable[[Any, Any], Any]) -> None:
        """Register a merge function the explicit_mapping strategy applies to this module pair."""
        self.resolver.register_mapping(module_a, module_b, mapping)

    def extract_insights(self, data: Any, query: str) -> Insights:
        """
        Raises:
            MediationError: If the content service fails
        """
        try:
            answer = expect_object(self._ask("extract_insights", query=query, data=data), "insights")
        except UpstreamFailure as e:
            raise self._fail("extract_insights", "Failed to extract insights", e, query=query) from e

        return Insights(
            query=query,
            key_insights=list(answer.get("keyInsights") or []),
            patterns=list(answer.get("patterns") or []),
            suggested_actions=list(answer.get("suggestedActions") or []),
            summary=answer.get("summary"),
        )

    def track_transformation(
        self,
        source_module: str,
        target_module: str,
        source_data: Any,
        transformed_data: Any,
        options: Optional[TrackingOptions] = None
    ) -> TransformationRecord:
        """Record a transformation in the history.

        Semantic differences and analysis degrade instead of failing.

        Raises:
            MediationError: If the record cannot be stored
        """
        options = options or TrackingOptions()

        differences = None
        if options.track_differences:
            structural = structural_diff(source_data, transformed_data)
            differences = {
                **structural,
                "semantic": self.engine.analyze_differences(source_data, transformed_data, structural),
            }

        analysis = None
        if options.analyze_transformation:
            analysis = self.engine.analyze_transformation(
                source_module, target_module, source_data, transformed_data
            )

        record = TransformationRecord(
            source_module=source_module,
            target_module=target_module,
            source_data=copy.deepcopy(source_data),
            transformed_data=copy.deepcopy(transformed_data),
            differences=differences,
            analysis=analysis,
        )

        if options.save_to_store:
            try:
                self.store.append({
                    "id": record.transformation_id,
                    "kind": "transformation",
                    **record.model_dump(mode="json"),
                })
            except Exception as e:
                raise self._fail(
                    "track_transformation",
                    "Failed to store transformation record",
                    e,
                    transformation_id=record.transformation_id,
                ) from e

        self.monitor.log_event(
            "transformation_tracked",
            transformation_id=record.transformation_id,
            source_module=source_module,
            target_module=target_module,
        )
        return record

    def evaluate_transformation(
        self,
        source_data: Any,
        transformed_data: Any,
        expected_outcome: Optional[Any] = None
    ) -> QualityScores:
        """Score a transformation; zero scores with ``error`` when unavailable."""
        return self.engine.evaluate(source_data, transformed_data, expected_outcome)

    def generate_validation_context(
        self,
        target_id: str,
        subject_id: str,
        previous_validation_ids: Optional[Sequence[str]] = None,
        options: Optional[Union[ValidationContextOptions, Dict[str, Any]]] = None
    ) -> ValidationContext:
        """Generate an adaptive validation context.

        Raises:
            NotFoundError: If the target or subject does not exist
        """
        if isinstance(options, dict):
            options = ValidationContextOptions.model_validate(options)

        outcome = self.context_generator.generate(
            target_id, subject_id, previous_validation_ids, options
        )
        if outcome.error_kind == ErrorKind.NOT_FOUND:
            raise NotFoundError(outcome.message, record_id=outcome.record_id)
        return outcome.context

    # Supplementary operations

    def register_target(self, module: str, attributes: Dict[str, str], description: str = ""):
        """Declare the fixed shape a module expects."""
        return self.registry.register_schema(module, attributes, description)

    def optimize_path(self, path: TransformationPath, metrics: Optional[Dict[str, Any]] = None) -> TransformationPath:
        return self.engine.optimize_path(path, metrics)

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    def analyze_cache_usage(self, limit: int = 10) -> Dict[str, Any]:
        return self.cache.analyze_usage_patterns(limit)

    def clear_cache(self, older_than: Optional[float] = None) -> int:
        return self.cache.clear(older_than)

    def close(self) -> None:
        """Tear down the owned cache. Safe to call more than once."""
        if self._closed:
            return
        self.cache.close()
        self._closed = True
        logger.info("Semantic mediator closed")


def build_mediator(
    config: Optional[MediatorConfig] = None,
    content_service: Optional[ContentGenerationService] = None,
    store: Optional[Store] = None,
    sink: Optional[MonitoringSink] = None,
    clock: Optional[Callable[[], float]] = None,
    prompts: Optional[PromptLibrary] = None
) -> SemanticMediator:
    """Wire a mediator from configuration.

    Args:
        config: Mediator configuration (loaded from the default file when omitted)
        content_service: Content-generation collaborator (provider-backed when omitted)
        store: Record store (empty in-memory store when omitted)
        sink: Monitoring sink (logging sink when omitted)
        clock: Time source for the cache
        prompts: Prompt library (bundled templates when omitted)

    Returns:
        SemanticMediator owning a fresh, empty cache
    """
    config = config or MediatorConfig.load_from_yaml()
    prompts = prompts or PromptLibrary(custom_prompts_dir=config.mediation.prompts_dir)
    if content_service is None:
        content_service = ProviderContentService(
            LLMProviderFactory(config.llm),
            provider=config.mediation.provider,
        )
    store = store if store is not None else InMemoryStore()
    monitor = SafeMonitor(sink)

    cache = IntelligentCache(
        capacity=config.cache.capacity,
        decay_seconds=config.cache.decay_seconds,
        clock=clock or time.time,
        content_service=content_service,
        prompts=prompts,
    )
    engine = TransformationEngine(content_service, prompts, monitor)
    generator = ValidationContextGenerator(
        store=store,
        cache=cache,
        engine=engine,
        classifier=KeywordClassifier.from_yaml(config.mediation.keyword_table),
        monitor=monitor,
        threshold=config.mediation.context_threshold,
    )
    resolver = ConflictResolver(
        default_strategies(content_service, prompts),
        cache,
        monitor,
        threshold=config.mediation.resolution_threshold,
    )

    logger.debug(
        f"Built mediator: provider={config.mediation.provider}, "
        f"cache capacity={config.cache.capacity}, store={type(store).__name__}"
    )
    return SemanticMediator(
        content_service=content_service,
        store=store,
        cache=cache,
        engine=engine,
        context_generator=generator,
        monitor=monitor,
        prompts=prompts,
        translate_threshold=config.mediation.translate_threshold,
        resolver=resolver,
    )
