"""Unit tests for the exponential-backoff retry helper.

Tests cover:
- Attempt counts and backoff delays
- Non-retryable errors propagating immediately
- Last error surfacing after exhaustion
"""

from unittest.mock import AsyncMock, call, patch

import pytest

from proposal_engine.llm.errors import (
    AuthenticationError,
    ConfigurationError,
    ContentFilterError,
    InvalidRequestError,
    ModelNotFoundError,
    OverloadedError,
    ProviderError,
    RateLimitError,
    TimeoutError,
)
from proposal_engine.llm.retry import backoff_delay, is_retryable, with_retry
from proposal_engine.models.error_codes import AIErrorCode
from proposal_engine.services.ai_errors import AIServiceError


def retryable_error(n: int = 0) -> AIServiceError:
    return AIServiceError(f"busy {n}", AIErrorCode.API_OVERLOADED, retryable=True)


class TestBackoff:
    """Tests for delay computation and retryability."""

    def test_delays_double(self):
        """Test delays are initial * 2**attempt."""
        assert [backoff_delay(a, 1.0) for a in range(4)] == [1.0, 2.0, 4.0, 8.0]
        assert backoff_delay(2, 0.5) == 2.0

    def test_is_retryable(self):
        """Test retryability comes from the error's flag."""
        assert is_retryable(retryable_error()) is True
        assert is_retryable(AIServiceError("x", AIErrorCode.API_KEY_INVALID)) is False
        assert is_retryable(RateLimitError("slow")) is True
        assert is_retryable(AuthenticationError("bad")) is False
        # Plain exceptions carry no flag
        assert is_retryable(RuntimeError("boom")) is True

    @pytest.mark.parametrize(
        "error_cls,retryable",
        [
            (RateLimitError, True),
            (OverloadedError, True),
            (TimeoutError, True),
            (ProviderError, True),
            (ConfigurationError, False),
            (AuthenticationError, False),
            (InvalidRequestError, False),
            (ContentFilterError, False),
            (ModelNotFoundError, False),
        ],
    )
    def test_error_class_flags(self, error_cls, retryable):
        """Test provider error classes declare their retryability."""
        assert error_cls("x").retryable is retryable
        assert is_retryable(error_cls("x")) is retryable


class TestWithRetry:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self):
        """Test a successful call is made once and not delayed."""
        fn = AsyncMock(return_value="ok")
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            assert await with_retry(fn) == "ok"
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_recovers_after_retryable_failures(self):
        """Test two retryable failures then success with 1s and 2s delays."""
        fn = AsyncMock(side_effect=[retryable_error(1), retryable_error(2), "ok"])
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await with_retry(fn, max_retries=2, initial_delay=1.0)

        assert result == "ok"
        assert fn.call_count == 3
        assert mock_sleep.call_args_list == [call(1.0), call(2.0)]

    @pytest.mark.asyncio
    async def test_non_retryable_raised_immediately(self):
        """Test a non-retryable error stops the loop unchanged."""
        error = AIServiceError("bad key", AIErrorCode.API_KEY_INVALID, retryable=False)
        fn = AsyncMock(side_effect=error)
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(AIServiceError) as exc_info:
                await with_retry(fn, max_retries=2)

        assert exc_info.value is error
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    @pytest.mark.asyncio
    async def test_exhaustion_raises_last_error(self):
        """Test the final error is raised once attempts run out."""
        errors = [retryable_error(i) for i in range(3)]
        fn = AsyncMock(side_effect=errors)
        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(AIServiceError) as exc_info:
                await with_retry(fn, max_retries=2, initial_delay=0.5)

        assert exc_info.value is errors[-1]
        assert fn.call_count == 3
        assert mock_sleep.call_args_list == [call(0.5), call(1.0)]

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        """Test max_retries=0 makes a single attempt."""
        fn = AsyncMock(side_effect=retryable_error())
        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(AIServiceError):
                await with_retry(fn, max_retries=0)
        assert fn.call_count == 1

    @pytest.mark.asyncio
    async def test_negative_retries_rejected(self):
        """Test negative max_retries is a programming error."""
        with pytest.raises(ValueError):
            await with_retry(AsyncMock(return_value="ok"), max_retries=-1)

    @pytest.mark.asyncio
    async def test_flagless_errors_are_retried(self):
        """Test exceptions without a retryable flag are retried."""
        fn = AsyncMock(side_effect=[RuntimeError("flaky"), "ok"])
        with patch("asyncio.sleep", new_callable=AsyncMock):
            assert await with_retry(fn, max_retries=1) == "ok"
        assert fn.call_count == 2
