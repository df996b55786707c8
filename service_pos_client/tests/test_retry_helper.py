"""
Unit tests for the shared retry helper.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.retry import RetryConfig, RetryError, retry_on_exception


class TestRetryHelper:
    """Test cases for retry_on_exception."""

    @pytest.fixture
    def config(self):
        return RetryConfig(max_attempts=3, base_delay=0.0, jitter=False)

    @pytest.fixture
    def logger(self):
        return MagicMock()

    def test_delay_is_exponential_and_capped(self):
        config = RetryConfig(base_delay=0.5, max_delay=1.5, jitter=False)

        assert [config.delay_for(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 1.5, 1.5]

    def test_attempts_at_least_one(self):
        assert RetryConfig(max_attempts=0).max_attempts == 1

    @pytest.mark.asyncio
    async def test_recovers_and_logs_through_caller_logger(self, config, logger):
        """Test a transient failure is retried with the caller's logger."""
        func = AsyncMock(side_effect=[ConnectionError("reset"), "ok"])

        async def fetch():
            return await func()

        result = await retry_on_exception((ConnectionError,), config=config, logger=logger)(fetch)()

        assert result == "ok"
        assert func.await_count == 2
        logger.info.assert_any_call("Succeeded after retry", attempt=2)

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_retry_error(self, config, logger):
        func = AsyncMock(side_effect=ConnectionError("down"))

        async def fetch():
            return await func()

        with pytest.raises(RetryError) as exc_info:
            await retry_on_exception((ConnectionError,), config=config, logger=logger)(fetch)()

        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_exception, ConnectionError)
        logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_other_exceptions_are_not_retried(self, config, logger):
        func = AsyncMock(side_effect=ValueError("bad body"))

        async def fetch():
            return await func()

        with pytest.raises(ValueError):
            await retry_on_exception((ConnectionError,), config=config, logger=logger)(fetch)()

        assert func.await_count == 1
