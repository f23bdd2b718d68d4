"""
Unit Tests for Validation History Summaries
"""

import copy

import pytest

from mediator.validation_context.history import (
    common_issues,
    failing_details,
    improvement_areas,
    order_records,
    score_trend,
    summarize_history,
)
from tests.fixtures.mock_llm_responses import VALIDATION_HISTORY, failed_detail, validation_record


@pytest.fixture
def history():
    return copy.deepcopy(VALIDATION_HISTORY)


class TestScoreTrend:

    @pytest.mark.parametrize("scores,expected", [
        ([60, 65, 70], "improving"),
        ([80, 78, 79], "stable"),
        ([90, 70, 65], "declining"),
        ([70, 75], "stable"),
        ([70, 75.5], "improving"),
        ([70], "stable"),
        ([], "stable"),
    ])
    def test_trend(self, scores, expected):
        assert score_trend(scores) == expected


class TestOrdering:

    def test_sorted_by_created_at(self, history):
        shuffled = [history[2], history[0], history[1]]
        assert [r["id"] for r in order_records(shuffled)] == ["val-1", "val-2", "val-3"]

    def test_request_order_kept_without_dates(self):
        records = [{"id": "b"}, {"id": "a", "created_at": "2026-01-01"}]
        assert [r["id"] for r in order_records(records)] == ["b", "a"]


class TestIssuesAndImprovements:

    def test_failing_details_skip_passed(self, history):
        statuses = [d["status"] for d in failing_details(history)]
        assert statuses == ["failed", "partial", "failed"]

    def test_common_issues_by_frequency(self, history):
        assert common_issues(history) == [
            "Security check failed: SQL injection in login query",
            "Performance below target on token refresh",
        ]

    def test_common_issue_ties_keep_first_seen_order(self):
        records = [validation_record("v", 50, "2026-01-01", details=[
            failed_detail(f"issue {i}") for i in range(7)
        ])]
        assert common_issues(records) == [f"issue {i}" for i in range(5)]

    def test_improvement_areas_from_recent_records(self):
        records = [
            validation_record(f"v{i}", 50, f"2026-01-0{i + 1}", improvements=[f"fix {i}"])
            for i in range(5)
        ]
        assert improvement_areas(records) == ["fix 2", "fix 3", "fix 4"]

    def test_improvement_areas_deduplicated(self, history):
        assert improvement_areas(history) == [
            "Use parameterized queries",
            "Validate all inputs",
            "Add rate limiting",
        ]


class TestSummarizeHistory:

    def test_summary(self, history):
        summary = summarize_history(history)

        assert summary.validation_count == 3
        assert summary.latest_score == 70
        assert summary.score_trend == "improving"
        assert summary.common_issues[0] == "Security check failed: SQL injection in login query"
        assert summary.validation_dates == [
            "2026-03-01T10:00:00Z", "2026-03-02T10:00:00Z", "2026-03-03T10:00:00Z",
        ]

    def test_records_without_scores(self):
        summary = summarize_history([{"id": "v1"}, {"id": "v2", "score": "n/a"}])
        assert summary.latest_score is None
        assert summary.score_trend == "stable"

    def test_empty(self):
        summary = summarize_history([])
        assert summary.validation_count == 0
        assert summary.common_issues == []
