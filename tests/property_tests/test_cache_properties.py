"""
Property-Based Tests for the Transformation Cache

Properties:
1. Similarity is symmetric, bounded by [0, 1] and 1.0 for identical pairs
2. The cache never holds more than its capacity
3. A freshly stored entry survives the eviction it triggers
4. Lookups only return matches at or above the requested threshold
5. Lowering the threshold never removes candidates
"""

from hypothesis import given, settings, strategies as st

from mediator.cache.intelligent_cache import IntelligentCache
from mediator.cache.similarity import descriptor_similarity, jaccard, pair_similarity
from mediator.descriptors import describe
from mediator.schemas.transformation import TransformationPath, TransformationStep


field_names = st.text(alphabet="abcdefgh", min_size=1, max_size=4)
payloads = st.dictionaries(field_names, st.one_of(st.integers(), st.text(max_size=5)), max_size=5)
modules = st.sampled_from(["model", "synthesize", "validate", "generator"])
descriptors = st.builds(describe, payloads, modules)


class FakeClock:
    def __init__(self):
        self.now = 1_700_000_000.0

    def __call__(self):
        self.now += 1.0
        return self.now


def make_path(source, target):
    return TransformationPath(
        source=source,
        target=target,
        steps=[TransformationStep(type="rename_fields", parameters={"renames": {}})],
    )


class TestSimilarityProperties:
    """Property tests for descriptor similarity."""

    @given(a=st.frozensets(field_names), b=st.frozensets(field_names))
    @settings(max_examples=50, deadline=None)
    def test_jaccard_bounded_and_symmetric(self, a, b):
        score = jaccard(a, b)
        assert 0.0 <= score <= 1.0
        assert score == jaccard(b, a)

    @given(a=descriptors, b=descriptors)
    @settings(max_examples=50, deadline=None)
    def test_descriptor_similarity_symmetric(self, a, b):
        score = descriptor_similarity(a, b)
        assert 0.0 <= score <= 1.0
        assert score == descriptor_similarity(b, a)

    @given(source=descriptors, target=descriptors)
    @settings(max_examples=50, deadline=None)
    def test_identical_pair_scores_one(self, source, target):
        assert pair_similarity(source, target, source, target) == 1.0

    @given(a=descriptors, b=descriptors)
    @settings(max_examples=50, deadline=None)
    def test_different_entities_score_at_most_half(self, a, b):
        if a.entity != b.entity:
            assert descriptor_similarity(a, b) <= 0.5


class TestCacheProperties:
    """Property tests for capacity and retrieval."""

    @given(
        capacity=st.integers(min_value=1, max_value=5),
        pairs=st.lists(st.tuples(descriptors, descriptors), min_size=1, max_size=12),
    )
    @settings(max_examples=50, deadline=None)
    def test_capacity_never_exceeded(self, capacity, pairs):
        cache = IntelligentCache(capacity=capacity, clock=FakeClock())

        for source, target in pairs:
            key = cache.store(source, target, make_path(source, target))
            assert len(cache) <= capacity
            assert cache.get(key) is not None

    @given(
        stored=st.lists(st.tuples(descriptors, descriptors), min_size=1, max_size=6),
        query=st.tuples(descriptors, descriptors),
        threshold=st.floats(min_value=0.0, max_value=1.0, allow_nan=False),
    )
    @settings(max_examples=50, deadline=None)
    def test_lookup_respects_threshold(self, stored, query, threshold):
        cache = IntelligentCache(capacity=10, clock=FakeClock())
        for source, target in stored:
            cache.store(source, target, make_path(source, target))

        match = cache.lookup(query[0], query[1], threshold)
        matches = cache.candidates(query[0], query[1], threshold)

        if match is None:
            assert matches == []
        else:
            assert match.similarity >= threshold
            assert match.similarity == max(m.similarity for m in matches)

    @given(
        stored=st.lists(st.tuples(descriptors, descriptors), min_size=1, max_size=6),
        query=st.tuples(descriptors, descriptors),
        thresholds=st.tuples(
            st.floats(min_value=0.0, max_value=1.0, allow_nan=False),
            st.floats(min_value=0.0, max_value=1.0, allow_nan=False),
        ),
    )
    @settings(max_examples=50, deadline=None)
    def test_lower_threshold_returns_superset(self, stored, query, thresholds):
        low, high = sorted(thresholds)
        cache = IntelligentCache(capacity=10, clock=FakeClock())
        for source, target in stored:
            cache.store(source, target, make_path(source, target))

        low_keys = {m.key for m in cache.candidates(query[0], query[1], low)}
        high_keys = {m.key for m in cache.candidates(query[0], query[1], high)}

        assert high_keys <= low_keys

    @given(pair=st.tuples(descriptors, descriptors))
    @settings(max_examples=50, deadline=None)
    def test_exact_pair_always_hits(self, pair):
        cache = IntelligentCache(capacity=3, clock=FakeClock())
        key = cache.store(pair[0], pair[1], make_path(*pair))

        match = cache.lookup(pair[0], pair[1], 1.0)

        assert match is not None
        assert match.key == key
