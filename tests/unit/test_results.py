"""Tests for tagged call results and the error taxonomy."""

import pytest

from coldchain_ledger.common.errors import (
    AlertError,
    BatchError,
    ErrorCategory,
    IncentiveError,
)
from coldchain_ledger.common.exceptions import CallRejectedError
from coldchain_ledger.common.results import CallResult


class TestCallResult:
    def test_success(self):
        result = CallResult.success(7)
        assert result.ok is True
        assert result.value == 7
        assert result.code is None
        assert result.category is None
        assert result.unwrap() == 7

    def test_failure_carries_numeric_code(self):
        result = CallResult.failure(BatchError.MAX_BATCHES_EXCEEDED)
        assert result.ok is False
        assert result.value == 120
        assert result.category is ErrorCategory.CAPACITY
        assert result.message == "MAX_BATCHES_EXCEEDED"

    def test_refused_value_is_false(self):
        result = CallResult.refused(AlertError.ALERT_NOT_FOUND)
        assert result.value is False
        assert result.code is AlertError.ALERT_NOT_FOUND

    def test_unwrap_raises(self):
        with pytest.raises(CallRejectedError) as exc_info:
            CallResult.failure(IncentiveError.STAKE_LOCKED).unwrap()
        assert exc_info.value.error_code is IncentiveError.STAKE_LOCKED
        assert exc_info.value.code == "CALL_REJECTED"

    def test_repr(self):
        assert "STAKE_LOCKED" in repr(CallResult.failure(IncentiveError.STAKE_LOCKED))
        assert "value=3" in repr(CallResult.success(3))


class TestErrorCodes:
    def test_codes_keep_their_numbers(self):
        assert BatchError.NOT_AUTHORIZED == 100
        assert BatchError.INVALID_TEMP == 103
        assert AlertError.INVALID_TEMP == 102
        assert AlertError.MAX_ALERTS_EXCEEDED == 114
        assert IncentiveError.STAKE_LOCKED == 105
        assert IncentiveError.INSUFFICIENT_REWARDS == 118

    def test_lookup_by_value(self):
        assert IncentiveError(115) is IncentiveError.REWARD_ALREADY_CLAIMED

    @pytest.mark.parametrize(
        "code, category",
        [
            (BatchError.NOT_AUTHORIZED, ErrorCategory.AUTHORIZATION),
            (BatchError.BATCH_NOT_FOUND, ErrorCategory.NOT_FOUND),
            (AlertError.MAX_ALERTS_EXCEEDED, ErrorCategory.CAPACITY),
            (AlertError.INVALID_SENSOR_ID, ErrorCategory.VALIDATION),
            (AlertError.ALERT_ALREADY_RESOLVED, ErrorCategory.STATE_CONFLICT),
            (IncentiveError.STAKE_LOCKED, ErrorCategory.TEMPORAL),
            (IncentiveError.INSUFFICIENT_BALANCE, ErrorCategory.INSUFFICIENT_RESOURCE),
        ],
    )
    def test_categories(self, code, category):
        assert code.category is category
