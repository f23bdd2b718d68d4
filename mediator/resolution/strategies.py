"""
Conflict Resolution Strategies

Each strategy decides whether it can reconcile a pair of records and, if so,
produces the reconciled record with a confidence in [0, 1]. The resolver
tries strategies from highest to lowest priority:

    explicit_mapping  (3)  registered per module-pair merge functions
    pattern_matching  (2)  local rules for empties, substrings, lists and objects
    llm_resolution    (1)  the content-generation collaborator
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from mediator.errors import MalformedResponseError, MediationError
from mediator.llm.service import ContentGenerationService, ask_json
from mediator.parsing import expect_object
from mediator.schemas.mediation import FieldConflict


logger = logging.getLogger(__name__)

EXPLICIT_CONFIDENCE = 1.0
PATTERN_CONFIDENCE = 0.8
MERGE_CONFIDENCE = 1.0
DEFAULT_LLM_CONFIDENCE = 0.7

MappingFunction = Callable[[Any, Any], Any]


@dataclass(frozen=True)
class ResolutionRequest:
    """Two versions of the same information and their local conflicts."""
    module_a: str
    data_a: Any
    module_b: str
    data_b: Any
    conflicts: Tuple[FieldConflict, ...] = ()


@dataclass
class ResolutionOutcome:
    """What a strategy produced.

    Attributes:
        resolved_data: Reconciled record
        confidence: Strategy confidence in [0, 1]
        resolutions: Per-field decisions (``field``, ``choice``, ``reason``)
        explanation: Summary of the reconciliation
    """
    resolved_data: Any
    confidence: float
    resolutions: List[Dict[str, Any]] = field(default_factory=list)
    explanation: str = ""


class ResolutionStrategy(ABC):
    """Contract every conflict resolution strategy follows."""

    name: str = ""
    priority: int = 0

    @abstractmethod
    def can_resolve(self, request: ResolutionRequest) -> bool:
        pass

    @abstractmethod
    def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        """
        Raises:
            MediationError: If the records cannot be reconciled
        """
        pass


class ExplicitMappingStrategy(ResolutionStrategy):
    """Applies merge functions registered for a (module_a, module_b) pair.

    Example:
        >>> strategy = ExplicitMappingStrategy()
        >>> strategy.register_mapping("model", "synthesize", lambda a, b: {**a, **b})
    """

    name = "explicit_mapping"
    priority = 3

    def __init__(self):
        self._mappings: Dict[Tuple[str, str], MappingFunction] = {}

    def register_mapping(self, module_a: str, module_b: str, mapping: MappingFunction) -> None:
        if not callable(mapping):
            raise TypeError(f"Mapping for {module_a} -> {module_b} must be callable")
        self._mappings[(module_a, module_b)] = mapping
        logger.info(f"Registered explicit resolution mapping {module_a} -> {module_b}")

    def has_mapping(self, module_a: str, module_b: str) -> bool:
        return (module_a, module_b) in self._mappings

    def can_resolve(self, request: ResolutionRequest) -> bool:
        return self.has_mapping(request.module_a, request.module_b)

    def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        mapping = self._mappings.get((request.module_a, request.module_b))
        if mapping is None:
            raise MediationError(
                f"No explicit mapping registered for {request.module_a} -> {request.module_b}"
            )

        try:
            resolved = mapping(request.data_a, request.data_b)
        except Exception as e:
            raise MediationError(
                f"Explicit mapping {request.module_a} -> {request.module_b} failed: {e}"
            ) from e

        return ResolutionOutcome(
            resolved_data=resolved,
            confidence=EXPLICIT_CONFIDENCE,
            resolutions=[
                {"field": c.field, "choice": "explicit_mapping", "reason": "registered mapping"}
                for c in request.conflicts
            ],
            explanation=f"Applied registered mapping {request.module_a} -> {request.module_b}",
        )


_UNRESOLVED = object()


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def merge_values(value_a: Any, value_b: Any) -> Tuple[Any, str]:
    """Reconcile two values with local rules.

    Returns:
        (merged value, reason), or (``_UNRESOLVED``, "") when no rule applies
    """
    if value_a == value_b:
        return value_a, "equal"
    if _is_empty(value_a):
        return value_b, "only b has a value"
    if _is_empty(value_b):
        return value_a, "only a has a value"

    if isinstance(value_a, str) and isinstance(value_b, str):
        lower_a, lower_b = value_a.casefold(), value_b.casefold()
        if lower_a in lower_b:
            return value_b, "b extends a"
        if lower_b in lower_a:
            return value_a, "a extends b"
        return _UNRESOLVED, ""

    if isinstance(value_a, list) and isinstance(value_b, list):
        merged = list(value_a)
        merged.extend(item for item in value_b if item not in value_a)
        return merged, "union of both lists"

    if isinstance(value_a, dict) and isinstance(value_b, dict):
        merged = dict(value_a)
        for key, item in value_b.items():
            if key not in merged:
                merged[key] = item
                continue
            value, _ = merge_values(merged[key], item)
            if value is _UNRESOLVED:
                return _UNRESOLVED, ""
            merged[key] = value
        return merged, "merged nested fields"

    return _UNRESOLVED, ""


class PatternMatchingStrategy(ResolutionStrategy):
    """Reconciles records whose every conflict matches a local rule.

    Rules: an empty value yields to a present one, a string contained in the
    other (ignoring case) yields to the longer one, lists are unioned in
    order and objects are merged recursively under the same rules.
    """

    name = "pattern_matching"
    priority = 2

    def _merge(self, request: ResolutionRequest) -> Tuple[Any, List[Dict[str, Any]]]:
        if not isinstance(request.data_a, dict) or not isinstance(request.data_b, dict):
            value, reason = merge_values(request.data_a, request.data_b)
            if value is _UNRESOLVED:
                return _UNRESOLVED, []
            decisions = [{"field": "<root>", "choice": value, "reason": reason}] if request.conflicts else []
            return value, decisions

        resolved = {**request.data_a, **request.data_b}
        decisions = []
        for conflict in request.conflicts:
            value, reason = merge_values(conflict.value_a, conflict.value_b)
            if value is _UNRESOLVED:
                return _UNRESOLVED, []
            resolved[conflict.field] = value
            decisions.append({"field": conflict.field, "choice": value, "reason": reason})
        return resolved, decisions

    def can_resolve(self, request: ResolutionRequest) -> bool:
        resolved, _ = self._merge(request)
        return resolved is not _UNRESOLVED

    def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        resolved, decisions = self._merge(request)
        if resolved is _UNRESOLVED:
            raise MediationError(
                f"Conflicts between {request.module_a} and {request.module_b} match no local rule"
            )

        if not request.conflicts:
            return ResolutionOutcome(
                resolved_data=resolved,
                confidence=MERGE_CONFIDENCE,
                explanation="No conflicting fields; records merged",
            )
        return ResolutionOutcome(
            resolved_data=resolved,
            confidence=PATTERN_CONFIDENCE,
            resolutions=decisions,
            explanation=f"Resolved {len(decisions)} conflict(s) with local merge rules",
        )


def _confidence(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_LLM_CONFIDENCE
    if score != score:
        return DEFAULT_LLM_CONFIDENCE
    return max(0.0, min(1.0, score))


class LLMResolutionStrategy(ResolutionStrategy):
    """Asks the content-generation collaborator to reconcile the records.

    Args:
        content_service: Content-generation collaborator
        prompts: ``PromptLibrary`` holding the ``resolve_conflicts`` template
    """

    name = "llm_resolution"
    priority = 1

    def __init__(self, content_service: ContentGenerationService, prompts):
        self.content_service = content_service
        self.prompts = prompts

    def can_resolve(self, request: ResolutionRequest) -> bool:
        return True

    def resolve(self, request: ResolutionRequest) -> ResolutionOutcome:
        """
        Raises:
            UpstreamFailure: If the collaborator fails or the answer has no resolvedData
        """
        answer = expect_object(
            ask_json(
                self.content_service,
                self.prompts,
                "resolve_conflicts",
                module_a=request.module_a,
                data_a=request.data_a,
                module_b=request.module_b,
                data_b=request.data_b,
                conflicts=[c.model_dump() for c in request.conflicts],
            ),
            "conflict resolution",
        )
        if "resolvedData" not in answer:
            raise MalformedResponseError("Conflict resolution answer has no resolvedData", str(answer))

        return ResolutionOutcome(
            resolved_data=answer["resolvedData"],
            confidence=_confidence(answer.get("confidence")),
            resolutions=list(answer.get("resolutions") or []),
            explanation=str(answer.get("explanation") or ""),
        )


def default_strategies(content_service: ContentGenerationService, prompts) -> List[ResolutionStrategy]:
    return [
        ExplicitMappingStrategy(),
        PatternMatchingStrategy(),
        LLMResolutionStrategy(content_service, prompts),
    ]
