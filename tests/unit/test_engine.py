"""엔진 구성요소 유닛 테스트 (상태 머신, 재시도 전략, 단계 결과, 예외)"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from inmate_search.core.exceptions import (
    ErrorKind,
    FormNotFoundException,
    LaunchException,
    NavigationException,
    NavigationTimeoutException,
    SubmissionFailedException,
    UnknownFailureException,
    ValidationException,
)
from inmate_search.engine.result import Err, Ok, run_stage
from inmate_search.engine.state import PipelineState, PipelineTracker
from inmate_search.engine.strategy import RetryStrategy


class TestPipelineTracker:
    """상태 전이"""

    def test_happy_path(self):
        tracker = PipelineTracker()
        tracker.start()
        for state in (
            PipelineState.SESSION_ACQUIRED,
            PipelineState.NAVIGATED,
            PipelineState.FORM_SUBMITTED,
            PipelineState.SETTLED,
            PipelineState.EXTRACTED,
        ):
            tracker.advance(state)
        tracker.finish(success=True)

        assert tracker.state is PipelineState.RELEASED_SUCCESS
        assert tracker.is_terminal
        assert tracker.states()[-1] == "Released(Success)"

    def test_not_started(self):
        with pytest.raises(RuntimeError):
            PipelineTracker().advance(PipelineState.SESSION_ACQUIRED)

    def test_illegal_transition(self):
        tracker = PipelineTracker()
        tracker.start()
        with pytest.raises(RuntimeError):
            tracker.advance(PipelineState.EXTRACTED)

    def test_retry_returns_to_navigated(self):
        tracker = PipelineTracker()
        tracker.start()
        tracker.advance(PipelineState.SESSION_ACQUIRED)
        tracker.advance(PipelineState.NAVIGATED)
        tracker.advance(PipelineState.FORM_SUBMITTED)
        tracker.advance(PipelineState.NAVIGATED)

        assert tracker.states().count("Navigated") == 2

    def test_failure_from_any_state(self):
        tracker = PipelineTracker()
        tracker.start()
        tracker.finish(success=False)
        tracker.finish(success=True)

        assert tracker.state is PipelineState.RELEASED_FAILURE

    def test_report(self):
        tracker = PipelineTracker()
        tracker.start()
        tracker.advance(PipelineState.SESSION_ACQUIRED)

        report = tracker.get_report()

        assert report["state"] == "SessionAcquired"
        assert [t["state"] for t in report["transitions"]] == ["Idle", "SessionAcquired"]
        assert report["elapsed_ms"] >= 0

    def test_elapsed_before_start(self):
        assert PipelineTracker().elapsed() == 0.0


class TestRetryStrategy:
    """재시도 판단"""

    @pytest.mark.parametrize(
        "err,expected",
        [
            (Err(NavigationException("https://x", "reset"), "navigate"), True),
            (Err(NavigationTimeoutException("https://x", 100), "navigate"), True),
            (Err(UnknownFailureException("RuntimeError: gone"), "extract"), True),
            (Err(UnknownFailureException("RuntimeError: gone"), "submit"), False),
            (Err(FormNotFoundException("no inputs"), "locate"), False),
            (Err(SubmissionFailedException("no button"), "submit"), False),
            (Err(LaunchException("no binary"), "acquire"), False),
        ],
    )
    def test_is_retryable(self, err, expected):
        assert RetryStrategy.is_retryable(err) is expected

    def test_attempt_budget(self):
        strategy = RetryStrategy(max_attempts=2)
        err = Err(NavigationException("https://x", "reset"), "navigate")

        assert strategy.should_retry(err, 1) is True
        assert strategy.should_retry(err, 2) is False

    def test_linear_backoff_capped(self):
        strategy = RetryStrategy(max_attempts=5, backoff_s=2.0, backoff_max_s=5.0)

        assert strategy.backoff_for(1) == 2.0
        assert strategy.backoff_for(2) == 4.0
        assert strategy.backoff_for(3) == 5.0


class TestRunStage:
    """단계 결과 변환"""

    @pytest.mark.asyncio
    async def test_ok(self):
        result = await run_stage("navigate", AsyncMock(return_value="done")())
        assert result == Ok("done")

    @pytest.mark.asyncio
    async def test_domain_error_kept(self):
        error = FormNotFoundException("no inputs")
        result = await run_stage("locate", AsyncMock(side_effect=error)())

        assert isinstance(result, Err)
        assert result.error is error
        assert result.stage == "locate"

    @pytest.mark.asyncio
    async def test_unexpected_error_wrapped(self):
        result = await run_stage("extract", AsyncMock(side_effect=ValueError("bad html"))())

        assert isinstance(result.error, UnknownFailureException)
        assert result.error.message == "ValueError: bad html"

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self):
        result = await run_stage("extract", AsyncMock(side_effect=asyncio.TimeoutError())())

        assert result.error.error_kind is ErrorKind.UNKNOWN_FAILURE
        assert "timed out" in result.error.message

    @pytest.mark.asyncio
    async def test_cancel_not_swallowed(self):
        with pytest.raises(asyncio.CancelledError):
            await run_stage("extract", AsyncMock(side_effect=asyncio.CancelledError())())


class TestExceptions:
    """예외 계층"""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (ValidationException("firstName", "required"), "ValidationError"),
            (LaunchException("no binary"), "LaunchError"),
            (NavigationException("https://x", "reset"), "NavigationError"),
            (NavigationTimeoutException("https://x", 100), "NavigationTimeout"),
            (FormNotFoundException("no inputs"), "FormNotFound"),
            (SubmissionFailedException("no button"), "SubmissionFailed"),
            (UnknownFailureException("?"), "UnknownFailure"),
        ],
    )
    def test_error_code_matches_kind(self, error, kind):
        assert error.error_code == kind
        assert error.error_kind.value == kind
        assert str(error).startswith(f"[{kind}]")

    def test_details(self):
        error = NavigationTimeoutException("https://x", 100)
        assert error.details == {"url": "https://x", "timeout_ms": 100}
        assert error.message == "Navigation to https://x timed out after 100ms"

    def test_wrap_keeps_type_and_message_only(self):
        error = UnknownFailureException.wrap(KeyError("frame"))

        assert error.message == "KeyError: 'frame'"
        assert error.details == {"type": "KeyError"}

    def test_wrap_drops_engine_call_log(self):
        error = UnknownFailureException.wrap(
            RuntimeError("Target page, context or browser has been closed\nCall log:\n  - navigating to \"https://x\"")
        )

        assert error.message == "RuntimeError: Target page, context or browser has been closed"
