"""
Tests for diskcensus.core.logging module.
"""

from unittest.mock import MagicMock

import pytest

from diskcensus.core.logging import OperationLogger


@pytest.fixture
def bound() -> MagicMock:
    logger = MagicMock()
    logger.bind.return_value.bind.return_value = logger.bind.return_value
    return logger


class TestOperationLogger:
    def test_context_is_bound(self, bound: MagicMock) -> None:
        OperationLogger("tool run", bound, command="diskpart.exe")
        bound.bind.assert_called_once_with(operation="tool run", command="diskpart.exe")

    def test_completion(self, bound: MagicMock) -> None:
        with OperationLogger("disk inventory", bound):
            pass

        log = bound.bind.return_value
        log.debug.assert_called_once_with("Starting disk inventory")
        assert log.info.call_args.args == ("Completed disk inventory",)
        assert log.info.call_args.kwargs["issues"] == 0
        log.warning.assert_not_called()

    def test_issues_make_completion_a_warning(self, bound: MagicMock) -> None:
        with OperationLogger("disk inventory", bound) as op:
            message = op.issue("Failed to parse disk 1: garbled block", disk_number=1)

        log = bound.bind.return_value
        assert message == "Failed to parse disk 1: garbled block"
        assert op.issues == [message]
        assert log.warning.call_count == 2
        assert log.warning.call_args.kwargs["issues"] == 1
        log.info.assert_not_called()

    def test_failure(self, bound: MagicMock) -> None:
        with pytest.raises(TimeoutError):
            with OperationLogger("tool run", bound):
                raise TimeoutError("diskpart hung")

        kwargs = bound.bind.return_value.error.call_args.kwargs
        assert kwargs["error_type"] == "TimeoutError"
        assert kwargs["error"] == "diskpart hung"

    def test_update_binds_more_context(self, bound: MagicMock) -> None:
        op = OperationLogger("disk inventory", bound)
        op.update(disk_numbers=[0, 1])
        bound.bind.return_value.bind.assert_called_once_with(disk_numbers=[0, 1])
