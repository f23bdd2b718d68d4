"""
Adaptive Validation Context Generator

Builds the validation context for a subject checked against a target:
strategy weights adjusted by prior failures, focus areas mined from prior
findings, and a semantic bundle of subject features, target/subject
relationship and history summary.

Contexts are cached like transformation paths under a descriptor pair scoped
to the exact request, so repeating a request returns the stored context.
"""

import hashlib
import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from mediator.cache.intelligent_cache import IntelligentCache
from mediator.descriptors import describe
from mediator.errors import ErrorKind
from mediator.monitoring import SafeMonitor
from mediator.schemas.descriptor import SemanticDescriptor
from mediator.schemas.transformation import TransformationPath, TransformationStep
from mediator.schemas.validation import (
    SemanticContext,
    ValidationContext,
    ValidationContextOptions,
    ValidationStrategy,
)
from mediator.store import Store
from mediator.transformation.engine import TransformationEngine
from mediator.validation_context.classifier import KeywordClassifier
from mediator.validation_context.history import failing_details, summarize_history
from mediator.validation_context.weights import (
    adjust_for_history,
    apply_overrides,
    resolve_base_weights,
)


logger = logging.getLogger(__name__)

CONTEXT_STEP_TYPE = "validation_context"
DEFAULT_CONTEXT_THRESHOLD = 0.95


@dataclass(frozen=True)
class ContextOutcome:
    """Result of a context generation request.

    Exactly one of ``context`` and ``error_kind`` is set.

    Attributes:
        context: Generated or cached validation context
        error_kind: ``not_found`` when the target or subject is missing
        message: Error description
        record_id: Id of the missing record
        cached: True when the context came from the cache
    """
    context: Optional[ValidationContext] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    record_id: str = ""
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.context is not None


def _insight_texts(detail: Dict[str, Any]) -> List[str]:
    insights = detail.get("semantic_insights")
    if isinstance(insights, str):
        return [insights]
    if isinstance(insights, list):
        return [str(i) for i in insights]
    return []


class ValidationContextGenerator:
    """Generate adaptive validation contexts.

    Args:
        store: Record store holding targets, subjects and validation records
        cache: Shared transformation cache
        engine: Transformation engine used for feature and relationship analysis
        classifier: Keyword classifier (bundled table when omitted)
        monitor: Monitoring shim
        threshold: Cache similarity threshold for the fast path
    """

    def __init__(
        self,
        store: Store,
        cache: IntelligentCache,
        engine: TransformationEngine,
        classifier: Optional[KeywordClassifier] = None,
        monitor: Optional[SafeMonitor] = None,
        threshold: float = DEFAULT_CONTEXT_THRESHOLD
    ):
        self.store = store
        self.cache = cache
        self.engine = engine
        self.classifier = classifier or KeywordClassifier.from_yaml()
        self.monitor = monitor or SafeMonitor()
        self.threshold = threshold

    def generate(
        self,
        target_id: str,
        subject_id: str,
        previous_validation_ids: Optional[Sequence[str]] = None,
        options: Optional[ValidationContextOptions] = None
    ) -> ContextOutcome:
        """Generate the validation context for ``subject_id`` against ``target_id``.

        Returns:
            ContextOutcome with the context, or ``not_found`` before any cache
            or collaborator call when the target or subject is missing
        """
        options = options or ValidationContextOptions()
        previous_ids = list(previous_validation_ids or [])

        # 1. Resolve snapshots
        target = self.store.get_by_id(target_id)
        if target is None:
            logger.warning(f"Validation target {target_id} not found")
            return ContextOutcome(
                error_kind=ErrorKind.NOT_FOUND,
                message=f"Validation target not found: {target_id}",
                record_id=target_id,
            )
        subject = self.store.get_by_id(subject_id)
        if subject is None:
            logger.warning(f"Validation subject {subject_id} not found")
            return ContextOutcome(
                error_kind=ErrorKind.NOT_FOUND,
                message=f"Validation subject not found: {subject_id}",
                record_id=subject_id,
            )

        with self.monitor.session(
            operation="generate_validation_context",
            target_id=target_id,
            subject_id=subject_id,
        ) as session:
            # 2. Cache fast path under a request-scoped descriptor pair
            digest = self._request_digest(target_id, subject_id, previous_ids, options, target, subject)
            source_desc = describe(subject, f"validation-subject:{digest}")
            target_desc = describe(target, f"validation-target:{digest}")

            match = self.cache.lookup(source_desc, target_desc, self.threshold)
            if match is not None:
                cached = self._cached_context(match.path)
                if cached is not None:
                    self.cache.update_usage_statistics(
                        match.key, {"operation": "generate_validation_context"}
                    )
                    session.log(step="cache_lookup", hit=True, similarity=match.similarity)
                    logger.debug(f"Validation context cache hit for {subject_id} -> {target_id}")
                    return ContextOutcome(context=cached, cached=True)
            session.log(step="cache_lookup", hit=False)

            # 3. Collaborator-backed analysis (degrades instead of failing)
            features = self.engine.extract_features(subject, describe(subject, "validation-subject"))
            relationship = self.engine.analyze_relationship(target, subject)
            session.log(step="analysis", degraded=bool(features.get("degraded") or relationship.get("degraded")))

            records = self._load_records(previous_ids)
            details = list(failing_details(records))

            # 4-6. Weights
            weights = self._weights(options, details)

            # 7. Focus areas
            focus_areas = options.explicit_focus_areas or self._derived_focus_areas(details)

            # 8. History
            history = summarize_history(records) if records else None

            # 9. Assemble, cache and report
            context = ValidationContext(
                strategy=options.strategy,
                weights=weights,
                focus_areas=focus_areas,
                semantic_context=SemanticContext(
                    subject_features=features,
                    relationship_analysis=relationship,
                    target_summary={"id": target_id, **describe(target, "validation-target").summary()},
                    history_summary=history,
                ),
            )

            if features.get("degraded") or relationship.get("degraded"):
                logger.warning(
                    f"Validation context for {subject_id} -> {target_id} is partial; not caching"
                )
            else:
                self._store_context(source_desc, target_desc, context, target_id, subject_id)

            self.monitor.log_event(
                "validation_context_generated",
                target_id=target_id,
                subject_id=subject_id,
                strategy=options.strategy.value,
                focus_areas=focus_areas,
                previous_validations=len(records),
            )
            return ContextOutcome(context=context)

    def _request_digest(
        self,
        target_id: str,
        subject_id: str,
        previous_ids: List[str],
        options: ValidationContextOptions,
        target: Dict[str, Any],
        subject: Dict[str, Any]
    ) -> str:
        canonical = json.dumps(
            {
                "target_id": target_id,
                "subject_id": subject_id,
                "previous": previous_ids,
                "options": options.model_dump(mode="json"),
                "target": target,
                "subject": subject,
            },
            sort_keys=True,
            ensure_ascii=False,
            default=str,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]

    def _cached_context(self, path: TransformationPath) -> Optional[ValidationContext]:
        step = path.steps[0]
        if step.type != CONTEXT_STEP_TYPE or "context" not in step.parameters:
            return None
        return ValidationContext.model_validate(step.parameters["context"])

    def _store_context(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        context: ValidationContext,
        target_id: str,
        subject_id: str
    ) -> None:
        path = TransformationPath(
            source=source,
            target=target,
            steps=[TransformationStep(
                type=CONTEXT_STEP_TYPE,
                parameters={"context": context.model_dump(mode="json")},
                description="Generated validation context",
            )],
            recommended_strategy=context.strategy.value,
            metadata={"target_id": target_id, "subject_id": subject_id},
        )
        self.cache.store(source, target, path, metadata={"kind": CONTEXT_STEP_TYPE})

    def _load_records(self, previous_ids: List[str]) -> List[Dict[str, Any]]:
        records = []
        for record_id in previous_ids:
            record = self.store.get_by_id(record_id)
            if record is None:
                logger.warning(f"Previous validation {record_id} not found, skipping")
                continue
            records.append(record)
        return records

    def _weights(
        self,
        options: ValidationContextOptions,
        details: List[Dict[str, Any]]
    ) -> Dict[str, float]:
        if options.strategy == ValidationStrategy.CUSTOM:
            weights = resolve_base_weights(options.strategy, options.custom_weights)
        else:
            weights = apply_overrides(
                resolve_base_weights(options.strategy),
                options.custom_weights,
            )

        failure_counts: Counter = Counter()
        for detail in details:
            for category in self.classifier.categories_for(str(detail.get("message") or "")):
                failure_counts[category] += 1

        if failure_counts:
            logger.debug(f"Prior failures by category: {dict(failure_counts)}")
        return adjust_for_history(weights, failure_counts)

    def _derived_focus_areas(self, details: List[Dict[str, Any]]) -> List[str]:
        areas = set()
        for detail in details:
            areas |= self.classifier.categories_for(str(detail.get("message") or ""))
            for text in _insight_texts(detail):
                areas |= self.classifier.insight_tags(text)
        return sorted(areas)
