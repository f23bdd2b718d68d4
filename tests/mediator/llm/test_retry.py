"""
Unit Tests for Retry Logic with Exponential Backoff
"""

import pytest
from unittest.mock import Mock

from mediator.llm.errors import (
    AuthenticationError,
    NetworkError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from mediator.llm.retry import calculate_backoff_delay, is_transient_error, retry_with_backoff


class TestClassification:

    @pytest.mark.parametrize("error,expected", [
        (RateLimitError("x"), True),
        (TimeoutError("x"), True),
        (NetworkError("x"), True),
        (AuthenticationError("x"), False),
        (ProviderError("x"), False),
    ])
    def test_is_transient_error(self, error, expected):
        assert is_transient_error(error) is expected

    def test_backoff_doubles(self):
        assert [calculate_backoff_delay(a, 0.5) for a in range(4)] == [0.5, 1.0, 2.0, 4.0]


class TestRetryWithBackoff:

    def test_success_needs_no_retry(self):
        sleep = Mock()
        func = Mock(return_value="ok", __name__="func")

        assert retry_with_backoff(sleep=sleep)(func)() == "ok"
        sleep.assert_not_called()

    def test_transient_errors_retried(self):
        sleep = Mock()
        func = Mock(side_effect=[RateLimitError("slow down"), NetworkError("reset"), "ok"], __name__="func")

        assert retry_with_backoff(max_attempts=3, base_delay=1.0, sleep=sleep)(func)() == "ok"
        assert func.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_gives_up_after_max_attempts(self):
        sleep = Mock()
        func = Mock(side_effect=TimeoutError("timed out"), __name__="func")

        with pytest.raises(TimeoutError):
            retry_with_backoff(max_attempts=2, sleep=sleep)(func)()
        assert func.call_count == 2
        assert sleep.call_count == 1

    def test_permanent_errors_not_retried(self):
        sleep = Mock()
        func = Mock(side_effect=AuthenticationError("bad key"), __name__="func")

        with pytest.raises(AuthenticationError):
            retry_with_backoff(sleep=sleep)(func)()
        assert func.call_count == 1
        sleep.assert_not_called()

    def test_unclassified_errors_propagate(self):
        func = Mock(side_effect=ProviderError("boom"), __name__="func")
        with pytest.raises(ProviderError):
            retry_with_backoff(sleep=Mock())(func)()
        assert func.call_count == 1
