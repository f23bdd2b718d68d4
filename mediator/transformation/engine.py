"""
Transformation Engine

Generates transformation paths with the content-generation collaborator,
executes them step by step and validates results against target descriptors.

Collaborator failures never escape the engine: path generation falls back to
the identity path, analysis calls return degraded results, and semantic
validation reports an invalid outcome tagged ``upstream_failure``.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mediator.descriptors import type_tag
from mediator.errors import (
    ErrorKind,
    MalformedResponseError,
    PromptRenderError,
    PromptTemplateError,
    TransformationExecutionError,
    UpstreamFailure,
)
from mediator.llm.service import ContentGenerationService, ask_json
from mediator.monitoring import SafeMonitor
from mediator.parsing import expect_object
from mediator.prompts import PromptLibrary
from mediator.schemas.descriptor import SemanticDescriptor
from mediator.schemas.transformation import (
    QualityScores,
    TransformationPath,
    TransformationStep,
)
from mediator.transformation.handlers import BUILTIN_HANDLERS, StepHandler


logger = logging.getLogger(__name__)

FALLBACK_STEP_TYPE = "direct_mapping"
FALLBACK_STRATEGY = "identity"

# Type tags a declared attribute type accepts at runtime
_COMPATIBLE_TYPES = {
    "number": {"number", "integer"},
    "float": {"number", "integer"},
    "int": {"integer"},
    "str": {"string"},
    "bool": {"boolean"},
    "list": {"array"},
    "dict": {"object"},
}


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating transformed data against a target descriptor.

    Attributes:
        valid: True when the data matches the target
        reasons: Human-readable mismatch descriptions
        error_kind: ``validation_failure`` or ``upstream_failure`` when invalid
    """
    valid: bool
    reasons: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None


def type_compatible(declared: str, value: Any) -> bool:
    """Check a runtime value against a declared attribute type tag."""
    declared = (declared or "any").lower()
    if declared in ("any", "unknown", "mixed"):
        return True
    actual = type_tag(value)
    return actual in _COMPATIBLE_TYPES.get(declared, {declared})


def degraded(error: Exception) -> Dict[str, Any]:
    """Degraded analysis result carrying an error marker."""
    return {"error": str(error), "degraded": True}


class TransformationEngine:
    """Generate, execute and validate transformation paths.

    Args:
        content_service: Content-generation collaborator
        prompts: Prompt library used to render collaborator requests
        monitor: Monitoring shim receiving errors and boundary events

    Example:
        >>> engine = TransformationEngine(service, PromptLibrary(), SafeMonitor())
        >>> path = engine.generate(source, target, {"source_module": "model"})
        >>> result = engine.execute(data, path, {})
        >>> engine.validate(result, target, {}).valid
        True
    """

    def __init__(
        self,
        content_service: ContentGenerationService,
        prompts: Optional[PromptLibrary] = None,
        monitor: Optional[SafeMonitor] = None
    ):
        self.content_service = content_service
        self.prompts = prompts or PromptLibrary()
        self.monitor = monitor or SafeMonitor()
        self._handlers: Dict[str, StepHandler] = dict(BUILTIN_HANDLERS)

    def register_step_handler(self, step_type: str, handler: StepHandler) -> None:
        """Register a local handler for a step type, replacing any existing one."""
        if not step_type:
            raise ValueError("step_type must be non-empty")
        self._handlers[step_type] = handler
        logger.debug(f"Registered step handler '{step_type}'")

    def available_step_types(self) -> List[str]:
        """Step types executed locally, without the collaborator."""
        return sorted(self._handlers)

    def _ask(self, template: str, **context: Any) -> Any:
        return ask_json(self.content_service, self.prompts, template, **context)

    # Generation

    def generate(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        context: Optional[Dict[str, Any]] = None
    ) -> TransformationPath:
        """Generate a path converting ``source`` data into ``target`` data.

        Never raises for collaborator or prompt template failures; returns the identity fallback
        path (``fallback=True``) instead and reports the failure once.
        """
        context = context or {}
        try:
            answer = expect_object(
                self._ask(
                    "generate_path",
                    source=source.summary(),
                    target=target.summary(),
                    context=context,
                    step_types=self.available_step_types(),
                ),
                "transformation path",
            )
            steps = self._parse_steps(answer.get("steps"))
            strategy = str(answer.get("recommendedStrategy") or "semantic")
        except (UpstreamFailure, PromptTemplateError, PromptRenderError) as e:
            logger.warning(
                f"Path generation for {source.entity} -> {target.entity} failed, "
                f"using identity fallback: {e}"
            )
            self.monitor.log_error(
                e,
                operation="generate_path",
                source=source.entity,
                target=target.entity,
            )
            return self.fallback_path(source, target, reason=str(e))

        path = TransformationPath(
            source=source,
            target=target,
            steps=steps,
            recommended_strategy=strategy,
            metadata={"generated_by": "content_service"},
        )
        logger.debug(
            f"Generated path {path.id[:8]} for {source.entity} -> {target.entity}: "
            f"{[s.type for s in steps]} ({strategy})"
        )
        return path

    def fallback_path(
        self,
        source: SemanticDescriptor,
        target: SemanticDescriptor,
        reason: str = ""
    ) -> TransformationPath:
        return TransformationPath(
            source=source,
            target=target,
            steps=[TransformationStep(
                type=FALLBACK_STEP_TYPE,
                description="Identity mapping used when no path could be generated",
            )],
            recommended_strategy=FALLBACK_STRATEGY,
            fallback=True,
            metadata={"fallback_reason": reason} if reason else {},
        )

    def _parse_steps(self, raw_steps: Any) -> List[TransformationStep]:
        if not isinstance(raw_steps, list) or not raw_steps:
            raise MalformedResponseError(
                "Transformation path has no steps",
                response_text=str(raw_steps),
            )

        steps = []
        for index, raw in enumerate(raw_steps):
            if not isinstance(raw, dict) or not isinstance(raw.get("type"), str) or not raw["type"]:
                raise MalformedResponseError(
                    f"Step {index} has no type",
                    response_text=str(raw),
                )
            parameters = raw.get("parameters") or {}
            if not isinstance(parameters, dict):
                raise MalformedResponseError(
                    f"Step {index} parameters must be an object",
                    response_text=str(raw),
                )
            steps.append(TransformationStep(
                type=raw["type"],
                parameters=parameters,
                description=str(raw.get("description") or ""),
            ))
        return steps

    # Execution

    def execute(
        self,
        data: Any,
        path: TransformationPath,
        context: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Apply the path's steps strictly in order.

        Raises:
            TransformationExecutionError: If a step fails; earlier step
                results are discarded
        """
        context = context or {}
        current = copy.deepcopy(data)

        for index, step in enumerate(path.steps):
            handler = self._handlers.get(step.type, self._semantic_step)
            try:
                current = handler(current, step, context)
            except TransformationExecutionError as e:
                e.step_index = index
                e.step_type = e.step_type or step.type
                raise
            except UpstreamFailure as e:
                raise TransformationExecutionError(
                    f"Semantic step {index} ({step.type}) failed: {e}",
                    step_type=step.type,
                    step_index=index,
                ) from e
            except (KeyError, TypeError, ValueError, AttributeError, ArithmeticError) as e:
                raise TransformationExecutionError(
                    f"Step {index} ({step.type}) failed: {e}",
                    step_type=step.type,
                    step_index=index,
                ) from e
            logger.debug(f"Path {path.id[:8]} step {index} ({step.type}) applied")

        return current

    def _semantic_step(
        self,
        data: Any,
        step: TransformationStep,
        context: Dict[str, Any]
    ) -> Any:
        """Delegate a step with no local handler to the collaborator."""
        answer = self._ask(
            "semantic_step",
            step_type=step.type,
            parameters=step.parameters,
            data=data,
            context=context,
        )
        if isinstance(answer, dict) and "result" in answer:
            return answer["result"]
        raise MalformedResponseError(
            f"Semantic step '{step.type}' answer has no result",
            response_text=str(answer),
        )

    # Validation

    def validate(
        self,
        result: Any,
        target: SemanticDescriptor,
        context: Optional[Dict[str, Any]] = None
    ) -> ValidationOutcome:
        """Validate a result against the target descriptor.

        Declared attributes must be present and type-compatible. Open
        targets are checked semantically by the collaborator; a failing
        collaborator makes the outcome invalid so the path is not cached.
        """
        context = context or {}
        if target.is_open:
            return self._semantic_validate(result, target, context)

        if not isinstance(result, dict):
            return ValidationOutcome(
                valid=False,
                reasons=[f"Expected an object for {target.entity}, got {type_tag(result)}"],
                error_kind=ErrorKind.VALIDATION_FAILURE,
            )

        reasons = []
        for name, spec in target.attributes.items():
            if name not in result:
                reasons.append(f"Missing attribute '{name}'")
            elif not type_compatible(spec.type, result[name]):
                reasons.append(
                    f"Attribute '{name}' should be {spec.type}, got {type_tag(result[name])}"
                )

        if reasons:
            return ValidationOutcome(
                valid=False,
                reasons=reasons,
                error_kind=ErrorKind.VALIDATION_FAILURE,
            )
        return ValidationOutcome(valid=True)

    def _semantic_validate(
        self,
        result: Any,
        target: SemanticDescriptor,
        context: Dict[str, Any]
    ) -> ValidationOutcome:
        try:
            answer = expect_object(
                self._ask(
                    "semantic_validation",
                    target=target.summary(),
                    data=result,
                    context=context,
                ),
                "semantic validation",
            )
        except UpstreamFailure as e:
            logger.warning(f"Semantic validation for {target.entity} unavailable: {e}")
            self.monitor.log_error(e, operation="semantic_validation", target=target.entity)
            return ValidationOutcome(
                valid=False,
                reasons=[f"Semantic validation unavailable: {e}"],
                error_kind=ErrorKind.UPSTREAM_FAILURE,
            )

        issues = [str(i) for i in answer.get("issues") or []]
        if answer.get("valid") is True:
            return ValidationOutcome(valid=True, reasons=issues)
        return ValidationOutcome(
            valid=False,
            reasons=issues or ["Rejected by semantic validation"],
            error_kind=ErrorKind.VALIDATION_FAILURE,
        )

    # Optimisation and evaluation

    def optimize_path(
        self,
        path: TransformationPath,
        metrics: Optional[Dict[str, Any]] = None
    ) -> TransformationPath:
        """Ask the collaborator for a simpler equivalent path.

        Returns the original path when optimisation fails.
        """
        try:
            answer = expect_object(
                self._ask(
                    "optimize_path",
                    steps=[s.model_dump() for s in path.steps],
                    source=path.source.summary(),
                    target=path.target.summary(),
                    metrics=metrics or {},
                ),
                "optimised path",
            )
            steps = self._parse_steps(answer.get("steps"))
        except UpstreamFailure as e:
            logger.warning(f"Path optimisation for {path.id[:8]} failed: {e}")
            self.monitor.log_error(e, operation="optimize_path", path_id=path.id)
            return path

        return path.model_copy(update={
            "steps": steps,
            "recommended_strategy": str(
                answer.get("recommendedStrategy") or path.recommended_strategy
            ),
            "metadata": {
                **path.metadata,
                "optimized_from": path.id,
                "changes": list(answer.get("changes") or []),
            },
        })

    def evaluate(
        self,
        source_data: Any,
        transformed_data: Any,
        expected_outcome: Optional[Any] = None
    ) -> QualityScores:
        """Score a transformation; zero scores with ``error`` on failure."""
        try:
            answer = expect_object(
                self._ask(
                    "evaluate_transformation",
                    source_data=source_data,
                    transformed_data=transformed_data,
                    expected_outcome=expected_outcome,
                ),
                "quality evaluation",
            )
        except UpstreamFailure as e:
            logger.warning(f"Transformation evaluation failed: {e}")
            self.monitor.log_error(e, operation="evaluate_transformation")
            return QualityScores(error=str(e))

        return QualityScores(
            semantic_preservation=answer.get("semanticPreservation", 0),
            structural_adaptability=answer.get("structuralAdaptability", 0),
            information_completeness=answer.get("informationCompleteness", 0),
            overall_quality=answer.get("overallQuality", 0),
            strengths=[str(s) for s in answer.get("strengths") or []],
            weaknesses=[str(s) for s in answer.get("weaknesses") or []],
            recommendations=[str(s) for s in answer.get("recommendations") or []],
        )

    # Analysis calls (degrade instead of failing)

    def _analyze(self, operation: str, template: str, **context: Any) -> Dict[str, Any]:
        try:
            return expect_object(self._ask(template, **context), operation)
        except UpstreamFailure as e:
            logger.warning(f"{operation} degraded: {e}")
            self.monitor.log_error(e, operation=operation)
            return degraded(e)

    def extract_features(
        self,
        data: Any,
        descriptor: Optional[SemanticDescriptor] = None
    ) -> Dict[str, Any]:
        """Summarize a record's features."""
        return self._analyze(
            "extract_features",
            "extract_features",
            descriptor=descriptor.summary() if descriptor else {},
            data=data,
        )

    def analyze_relationship(self, target_data: Any, subject_data: Any) -> Dict[str, Any]:
        """Analyze how well the subject covers the target."""
        return self._analyze(
            "analyze_relationship",
            "analyze_relationship",
            target_data=target_data,
            subject_data=subject_data,
        )

    def analyze_differences(
        self,
        source_data: Any,
        transformed_data: Any,
        structural: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        return self._analyze(
            "analyze_differences",
            "analyze_differences",
            source_data=source_data,
            transformed_data=transformed_data,
            structural=structural or {},
        )

    def analyze_transformation(
        self,
        source_module: str,
        target_module: str,
        source_data: Any,
        transformed_data: Any
    ) -> Dict[str, Any]:
        return self._analyze(
            "analyze_transformation",
            "analyze_transformation",
            source_module=source_module,
            target_module=target_module,
            source_data=source_data,
            transformed_data=transformed_data,
        )
