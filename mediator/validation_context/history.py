"""
Validation History

Summarizes prior validation records: score trend, most frequent issues and
improvement areas from the most recent validations.
"""

from collections import Counter
from typing import Any, Dict, Iterator, List, Optional, Sequence

from mediator.schemas.validation import ScoreTrend, ValidationHistorySummary


TREND_THRESHOLD = 5.0
COMMON_ISSUE_LIMIT = 5
RECENT_VALIDATIONS = 3

FAILING_STATUSES = ("failed", "partial")


def order_records(records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Oldest first.

    Records are sorted by ``created_at`` when every record has one; otherwise
    the given order (the order of the requested ids) is kept.
    """
    records = list(records)
    if records and all(r.get("created_at") for r in records):
        return sorted(records, key=lambda r: str(r["created_at"]))
    return records


def failing_details(records: Sequence[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
    """Failed or partial details across records, in record order."""
    for record in records:
        for detail in record.get("details") or []:
            if isinstance(detail, dict) and detail.get("status") in FAILING_STATUSES:
                yield detail


def _score(record: Dict[str, Any]) -> Optional[float]:
    try:
        return float(record["score"])
    except (KeyError, TypeError, ValueError):
        return None


def score_trend(scores: Sequence[float]) -> ScoreTrend:
    """Trend between the first and last score."""
    if len(scores) < 2:
        return "stable"
    delta = scores[-1] - scores[0]
    if delta > TREND_THRESHOLD:
        return "improving"
    if delta < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def common_issues(records: Sequence[Dict[str, Any]], limit: int = COMMON_ISSUE_LIMIT) -> List[str]:
    """Most frequent failing/partial messages; ties keep first-seen order."""
    counts: Counter = Counter()
    first_seen: Dict[str, int] = {}
    for detail in failing_details(records):
        message = str(detail.get("message") or "").strip()
        if not message:
            continue
        counts[message] += 1
        first_seen.setdefault(message, len(first_seen))

    ranked = sorted(counts, key=lambda m: (-counts[m], first_seen[m]))
    return ranked[:limit]


def improvement_areas(records: Sequence[Dict[str, Any]], recent: int = RECENT_VALIDATIONS) -> List[str]:
    """Improvement annotations from the most recent validations, deduplicated."""
    areas: Dict[str, None] = {}
    for record in list(records)[-recent:]:
        for detail in record.get("details") or []:
            if isinstance(detail, dict) and detail.get("improvement"):
                areas.setdefault(str(detail["improvement"]).strip(), None)
        for improvement in record.get("improvements") or []:
            if improvement:
                areas.setdefault(str(improvement).strip(), None)
    return [a for a in areas if a]


def summarize_history(records: Sequence[Dict[str, Any]]) -> ValidationHistorySummary:
    """Build the history summary for prior validation records.

    Args:
        records: Validation records in request order

    Returns:
        ValidationHistorySummary; an empty summary for no records
    """
    ordered = order_records(records)
    scores = [s for s in (_score(r) for r in ordered) if s is not None]

    return ValidationHistorySummary(
        validation_count=len(ordered),
        latest_score=scores[-1] if scores else None,
        score_trend=score_trend(scores),
        common_issues=common_issues(ordered),
        improvement_areas=improvement_areas(ordered),
        validation_dates=[str(r["created_at"]) for r in ordered if r.get("created_at")],
    )
