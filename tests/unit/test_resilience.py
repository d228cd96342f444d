"""Unit tests for storage error translation and retry."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from learnhub.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StorageUnavailableError,
)
from learnhub.repositories.resilience import (
    RetryConfig,
    classify_integrity_error,
    is_transient_error,
    translate_storage_errors,
    with_retry,
)


def _operational_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, ConnectionRefusedError("refused"))


def _integrity_error(message: str, sqlstate: str | None = None) -> IntegrityError:
    orig = Exception(message)
    if sqlstate is not None:
        orig.sqlstate = sqlstate
    return IntegrityError("INSERT", {}, orig)


class TestTransientClassification:
    def test_operational_is_transient(self):
        assert is_transient_error(_operational_error()) is True

    def test_timeout_is_transient(self):
        assert is_transient_error(TimeoutError()) is True

    def test_integrity_is_not_transient(self):
        assert is_transient_error(IntegrityError("INSERT", {}, Exception("dup"))) is False

    def test_value_error_is_not_transient(self):
        assert is_transient_error(ValueError("bad")) is False


class TestIntegrityClassification:
    @pytest.mark.parametrize(
        "message, sqlstate, expected",
        [
            ("UNIQUE constraint failed: submissions.challenge_id, submissions.user_id", None, "unique"),
            ("duplicate key value violates unique constraint", None, "unique"),
            ("whatever the driver says", "23505", "unique"),
            ("FOREIGN KEY constraint failed", None, "foreign_key"),
            ("insert violates a constraint", "23503", "foreign_key"),
            ("CHECK constraint failed: ck_user_level_derived", None, "other"),
            ("null value in column", "23502", "other"),
        ],
    )
    def test_classification(self, message, sqlstate, expected):
        assert classify_integrity_error(_integrity_error(message, sqlstate)) == expected


class TestTranslateStorageErrors:
    @pytest.mark.asyncio
    async def test_integrity_becomes_conflict(self):
        with pytest.raises(ConflictError):
            async with translate_storage_errors():
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))

    @pytest.mark.asyncio
    async def test_foreign_key_violation_is_invalid_argument(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            async with translate_storage_errors():
                raise _integrity_error("FOREIGN KEY constraint failed")
        assert exc_info.value.error_type == "invalid_argument"

    @pytest.mark.asyncio
    async def test_check_violation_is_invalid_argument(self):
        with pytest.raises(InvalidArgumentError):
            async with translate_storage_errors():
                raise _integrity_error("CHECK constraint failed: ck_user_xp_non_negative")

    @pytest.mark.asyncio
    async def test_stale_data_becomes_conflict(self):
        with pytest.raises(ConflictError):
            async with translate_storage_errors():
                raise StaleDataError("version mismatch")

    @pytest.mark.asyncio
    async def test_connection_loss_becomes_unavailable(self):
        with pytest.raises(StorageUnavailableError) as exc_info:
            async with translate_storage_errors():
                raise _operational_error()
        assert exc_info.value.retryable is True
        assert exc_info.value.details["error_type"] == "OperationalError"

    @pytest.mark.asyncio
    async def test_domain_errors_pass_through(self):
        with pytest.raises(NotFoundError):
            async with translate_storage_errors():
                raise NotFoundError("Challenge", "abc")


class TestRetryConfig:
    def test_delay_without_jitter(self):
        config = RetryConfig(base_delay=0.1, exponential_base=2.0, jitter=False)
        assert config.calculate_delay(0) == pytest.approx(0.1)
        assert config.calculate_delay(2) == pytest.approx(0.4)

    def test_delay_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=2.0, jitter=False)
        assert config.calculate_delay(10) == 2.0


class TestWithRetry:
    @staticmethod
    def _flaky(outcomes: list):
        """Async callable that raises or returns each outcome in turn."""
        calls = {"count": 0}

        async def operation():
            outcome = outcomes[min(calls["count"], len(outcomes) - 1)]
            calls["count"] += 1
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        return operation, calls

    @pytest.mark.asyncio
    async def test_retries_storage_failures(self):
        operation, calls = self._flaky([StorageUnavailableError(), "ok"])
        wrapped = with_retry(RetryConfig(max_retries=2, base_delay=0, jitter=False))(operation)

        assert await wrapped() == "ok"
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        operation, calls = self._flaky([StorageUnavailableError()])
        wrapped = with_retry(RetryConfig(max_retries=1, base_delay=0, jitter=False))(operation)

        with pytest.raises(StorageUnavailableError):
            await wrapped()
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_domain_errors_not_retried(self):
        operation, calls = self._flaky([ConflictError("taken")])
        wrapped = with_retry(RetryConfig(max_retries=3, base_delay=0, jitter=False))(operation)

        with pytest.raises(ConflictError):
            await wrapped()
        assert calls["count"] == 1
