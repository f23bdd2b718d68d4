"""
Unit Tests for Conflict Resolution Strategies

Tests the local merge rules, registered mappings and the collaborator-backed
strategy in isolation.
"""

import pytest

from mediator.errors import MalformedResponseError, MediationError, UpstreamFailure
from mediator.prompts import PromptLibrary
from mediator.resolution.strategies import (
    ExplicitMappingStrategy,
    LLMResolutionStrategy,
    PatternMatchingStrategy,
    ResolutionRequest,
    default_strategies,
    merge_values,
)
from mediator.service import find_conflicts
from tests.fixtures.mock_llm_responses import MOCK_RESOLUTION
from tests.fixtures.scripted_service import ScriptedContentService


def request(data_a, data_b, module_a="model", module_b="synthesize"):
    return ResolutionRequest(
        module_a=module_a,
        data_a=data_a,
        module_b=module_b,
        data_b=data_b,
        conflicts=tuple(find_conflicts(data_a, data_b)),
    )


class TestMergeValues:

    @pytest.mark.parametrize("value_a,value_b,expected", [
        (None, "x", "x"),
        ("x", "", "x"),
        ([], [1], [1]),
        ({}, {"a": 1}, {"a": 1}),
        ("Auth", "auth flows", "auth flows"),
        ("Login and logout", "login", "Login and logout"),
        ([1, 2], [2, 3], [1, 2, 3]),
        ([{"k": 1}], [{"k": 1}, {"k": 2}], [{"k": 1}, {"k": 2}]),
        ({"a": "x", "b": None}, {"b": 2, "c": 3}, {"a": "x", "b": 2, "c": 3}),
    ])
    def test_rules(self, value_a, value_b, expected):
        merged, reason = merge_values(value_a, value_b)
        assert merged == expected
        assert reason

    @pytest.mark.parametrize("value_a,value_b", [
        (1, 2),
        ("Auth", "Login"),
        ("1", 1),
        ({"a": 1}, {"a": 2}),
        ([1], "1"),
    ])
    def test_unresolvable(self, value_a, value_b):
        _, reason = merge_values(value_a, value_b)
        assert reason == ""
        assert not PatternMatchingStrategy().can_resolve(request({"v": value_a}, {"v": value_b}))


class TestPatternMatchingStrategy:

    def test_resolves_every_conflict(self):
        strategy = PatternMatchingStrategy()
        req = request(
            {"title": "Auth", "tags": ["a"], "owner": "platform"},
            {"title": "Auth flows", "tags": ["b"], "owner": None, "stage": "synthesize"},
        )

        assert strategy.can_resolve(req)
        outcome = strategy.resolve(req)

        assert outcome.resolved_data == {
            "title": "Auth flows",
            "tags": ["a", "b"],
            "owner": "platform",
            "stage": "synthesize",
        }
        assert outcome.confidence == 0.8
        assert [d["field"] for d in outcome.resolutions] == ["title", "tags", "owner"]

    def test_one_unresolvable_conflict_blocks_the_strategy(self):
        strategy = PatternMatchingStrategy()
        req = request({"title": "Auth", "n": 1}, {"title": "Auth flows", "n": 2})

        assert not strategy.can_resolve(req)
        with pytest.raises(MediationError, match="match no local rule"):
            strategy.resolve(req)

    def test_no_conflicts_is_a_full_confidence_merge(self):
        outcome = PatternMatchingStrategy().resolve(request({"a": 1}, {"b": 2}))

        assert outcome.resolved_data == {"a": 1, "b": 2}
        assert outcome.confidence == 1.0
        assert outcome.resolutions == []

    def test_non_object_records(self):
        outcome = PatternMatchingStrategy().resolve(request(["a"], ["b"]))

        assert outcome.resolved_data == ["a", "b"]
        assert outcome.resolutions[0]["field"] == "<root>"


class TestExplicitMappingStrategy:

    def test_applies_registered_mapping(self):
        strategy = ExplicitMappingStrategy()
        strategy.register_mapping("model", "synthesize", lambda a, b: {"merged": [a, b]})
        req = request({"x": 1}, {"x": 2})

        assert strategy.can_resolve(req)
        outcome = strategy.resolve(req)

        assert outcome.resolved_data == {"merged": [{"x": 1}, {"x": 2}]}
        assert outcome.confidence == 1.0
        assert outcome.resolutions[0]["field"] == "x"

    def test_mapping_is_directional(self):
        strategy = ExplicitMappingStrategy()
        strategy.register_mapping("model", "synthesize", lambda a, b: a)

        assert not strategy.can_resolve(request({}, {}, module_a="synthesize", module_b="model"))

    def test_mapping_must_be_callable(self):
        with pytest.raises(TypeError, match="callable"):
            ExplicitMappingStrategy().register_mapping("a", "b", {"x": 1})

    def test_failing_mapping_raises_mediation_error(self):
        strategy = ExplicitMappingStrategy()
        strategy.register_mapping("model", "synthesize", lambda a, b: a["missing"])

        with pytest.raises(MediationError, match="failed"):
            strategy.resolve(request({}, {}))

    def test_unregistered_pair(self):
        with pytest.raises(MediationError, match="No explicit mapping"):
            ExplicitMappingStrategy().resolve(request({}, {}))


class TestLLMResolutionStrategy:

    def make(self, answer):
        service = ScriptedContentService({"resolve_conflicts": answer})
        return LLMResolutionStrategy(service, PromptLibrary()), service

    def test_uses_answer(self):
        strategy, service = self.make(MOCK_RESOLUTION)
        req = request({"title": "Auth flows"}, {"title": "Sign-in flows"})

        outcome = strategy.resolve(req)

        assert outcome.resolved_data == MOCK_RESOLUTION["resolvedData"]
        assert outcome.confidence == 0.9
        assert outcome.explanation == "Kept the newer title"
        assert '"field": "title"' in service.calls[0]["prompt"]

    @pytest.mark.parametrize("confidence,expected", [
        (None, 0.7),
        ("high", 0.7),
        (1.7, 1.0),
        (-0.2, 0.0),
        ("0.4", 0.4),
    ])
    def test_confidence_is_clamped(self, confidence, expected):
        answer = {"resolvedData": {"x": 1}}
        if confidence is not None:
            answer["confidence"] = confidence
        strategy, _ = self.make(answer)

        assert strategy.resolve(request({"x": 1}, {"x": 2})).confidence == expected

    def test_missing_resolved_data(self):
        strategy, _ = self.make({"explanation": "no idea"})
        with pytest.raises(MalformedResponseError, match="resolvedData"):
            strategy.resolve(request({"x": 1}, {"x": 2}))

    def test_collaborator_failure(self):
        strategy = LLMResolutionStrategy(ScriptedContentService(), PromptLibrary())
        with pytest.raises(UpstreamFailure):
            strategy.resolve(request({"x": 1}, {"x": 2}))

    def test_always_applicable(self):
        strategy, _ = self.make(MOCK_RESOLUTION)
        assert strategy.can_resolve(request(1, 2))


def test_default_strategies_in_priority_order():
    strategies = default_strategies(ScriptedContentService(), PromptLibrary())

    assert [(s.name, s.priority) for s in strategies] == [
        ("explicit_mapping", 3),
        ("pattern_matching", 2),
        ("llm_resolution", 1),
    ]
