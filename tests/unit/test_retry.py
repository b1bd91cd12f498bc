from unittest.mock import MagicMock, patch

import pytest

from app.analysis.exceptions import RetryExhaustedError
from app.analysis.retry import RetryingModelInvoker, is_rate_limited
from app.providers.exceptions import ModelNetworkError, RateLimitedError


class _StatusError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class TestIsRateLimited:
    def test_rate_limited_error(self) -> None:
        assert is_rate_limited(RateLimitedError("slow down")) is True

    def test_status_code_attribute(self) -> None:
        assert is_rate_limited(_StatusError(429)) is True

    @pytest.mark.parametrize(
        "message",
        [
            "429 Too Many Requests",
            "Quota exceeded for requests per minute",
            "RESOURCE_EXHAUSTED",
            "Resource exhausted, try later",
            "Rate limit reached",
        ],
    )
    def test_message_markers(self, message: str) -> None:
        assert is_rate_limited(RuntimeError(message)) is True

    def test_other_errors_are_not_rate_limits(self) -> None:
        assert is_rate_limited(_StatusError(500)) is False
        assert is_rate_limited(ModelNetworkError("connection reset")) is False


class TestRetryingModelInvoker:
    def test_returns_first_success_without_sleeping(self) -> None:
        invoker = RetryingModelInvoker(max_retries=3, initial_delay_seconds=5.0)
        activity = MagicMock()
        with patch("app.analysis.retry.time.sleep") as sleep:
            assert invoker.invoke(lambda: "ok", description="Analysis", activity=activity) == "ok"
        sleep.assert_not_called()
        activity.processing.assert_not_called()

    def test_recovers_after_rate_limit(self) -> None:
        invoker = RetryingModelInvoker(max_retries=3, initial_delay_seconds=5.0)
        call = MagicMock(side_effect=[RateLimitedError("429"), "ok"])
        activity = MagicMock()
        with patch("app.analysis.retry.time.sleep") as sleep:
            result = invoker.invoke(call, description="Initial analysis", activity=activity)
        assert result == "ok"
        assert call.call_count == 2
        sleep.assert_called_once_with(5.0)
        activity.processing.assert_called_once()

    def test_persistent_rate_limit_exhausts_after_max_calls(self) -> None:
        invoker = RetryingModelInvoker(max_retries=3, initial_delay_seconds=5.0)
        call = MagicMock(side_effect=RateLimitedError("429"))
        activity = MagicMock()
        with patch("app.analysis.retry.time.sleep") as sleep:
            with pytest.raises(RetryExhaustedError) as exc_info:
                invoker.invoke(call, description="Initial analysis", activity=activity)
        assert call.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [5.0, 10.0]
        assert activity.processing.call_count == 2
        assert exc_info.value.max_retries == 3
        assert "Initial analysis" in str(exc_info.value)
        assert "rate limiting" in str(exc_info.value)

    def test_backoff_events_precede_waits(self) -> None:
        invoker = RetryingModelInvoker(max_retries=2, initial_delay_seconds=1.0)
        order: list[str] = []
        activity = MagicMock()
        activity.processing.side_effect = lambda *_: order.append("event")
        call = MagicMock(side_effect=[RateLimitedError("429"), "ok"])
        with patch("app.analysis.retry.time.sleep", side_effect=lambda _: order.append("sleep")):
            invoker.invoke(call, description="Chunk", activity=activity)
        assert order == ["event", "sleep"]
        phase, message = activity.processing.call_args.args
        assert phase == "Rate Limit Backoff"
        assert "Retrying in 1s" in message

    def test_non_rate_limit_error_propagates_immediately(self) -> None:
        invoker = RetryingModelInvoker(max_retries=3, initial_delay_seconds=5.0)
        call = MagicMock(side_effect=ModelNetworkError("boom"))
        with patch("app.analysis.retry.time.sleep") as sleep:
            with pytest.raises(ModelNetworkError):
                invoker.invoke(call, description="Analysis", activity=MagicMock())
        assert call.call_count == 1
        sleep.assert_not_called()

    def test_single_attempt_never_sleeps(self) -> None:
        invoker = RetryingModelInvoker(max_retries=1, initial_delay_seconds=5.0)
        call = MagicMock(side_effect=RateLimitedError("429"))
        with patch("app.analysis.retry.time.sleep") as sleep:
            with pytest.raises(RetryExhaustedError):
                invoker.invoke(call, description="Analysis", activity=MagicMock())
        sleep.assert_not_called()

    def test_backoff_delay_doubles(self) -> None:
        invoker = RetryingModelInvoker(max_retries=4, initial_delay_seconds=2.0)
        assert [invoker.backoff_delay(i) for i in range(3)] == [2.0, 4.0, 8.0]

    def test_rejects_zero_retries(self) -> None:
        with pytest.raises(ValueError):
            RetryingModelInvoker(max_retries=0)
