"""Pipeline State Tracker - 요청별 상태 전이/소요 시간 기록

상태 전이:
    Idle → SessionAcquired → Navigated → FormSubmitted → Settled → Extracted → Released(Success)
    어느 단계에서든 오류 → Released(Failure)
    재시도는 항상 Navigated부터 다시 시작
"""

from __future__ import annotations

from enum import Enum
from time import monotonic
from typing import Optional


class PipelineState(str, Enum):
    """파이프라인 상태"""

    IDLE = "Idle"
    SESSION_ACQUIRED = "SessionAcquired"
    NAVIGATED = "Navigated"
    FORM_SUBMITTED = "FormSubmitted"
    SETTLED = "Settled"
    EXTRACTED = "Extracted"
    RELEASED_SUCCESS = "Released(Success)"
    RELEASED_FAILURE = "Released(Failure)"


_FAILURE = PipelineState.RELEASED_FAILURE

_ALLOWED: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.SESSION_ACQUIRED, _FAILURE}),
    PipelineState.SESSION_ACQUIRED: frozenset({PipelineState.NAVIGATED, _FAILURE}),
    PipelineState.NAVIGATED: frozenset(
        {PipelineState.FORM_SUBMITTED, PipelineState.SETTLED, PipelineState.NAVIGATED, _FAILURE}
    ),
    PipelineState.FORM_SUBMITTED: frozenset({PipelineState.SETTLED, PipelineState.NAVIGATED, _FAILURE}),
    PipelineState.SETTLED: frozenset({PipelineState.EXTRACTED, PipelineState.NAVIGATED, _FAILURE}),
    PipelineState.EXTRACTED: frozenset({PipelineState.RELEASED_SUCCESS, _FAILURE}),
    PipelineState.RELEASED_SUCCESS: frozenset(),
    PipelineState.RELEASED_FAILURE: frozenset(),
}


class PipelineTracker:
    """요청 하나의 상태 머신

    Usage:
        tracker = PipelineTracker()
        tracker.start()
        tracker.advance(PipelineState.SESSION_ACQUIRED)
        ...
        tracker.finish(success=True)
        report = tracker.get_report()
    """

    def __init__(self) -> None:
        self.state = PipelineState.IDLE
        self.start_time: Optional[float] = None
        self._history: list[tuple[PipelineState, float]] = []

    def start(self) -> None:
        self.state = PipelineState.IDLE
        self.start_time = monotonic()
        self._history = [(PipelineState.IDLE, 0.0)]

    def elapsed(self) -> float:
        """경과 시간 (초). start() 전에는 0.0"""
        if self.start_time is None:
            return 0.0
        return monotonic() - self.start_time

    def elapsed_ms(self) -> float:
        return self.elapsed() * 1000

    @property
    def is_terminal(self) -> bool:
        return not _ALLOWED[self.state]

    def advance(self, target: PipelineState) -> None:
        """상태 전이

        Raises:
            RuntimeError: start() 전이거나 허용되지 않은 전이
        """
        if self.start_time is None:
            raise RuntimeError("Tracker not started. Call start() first.")
        if target not in _ALLOWED[self.state]:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {target.value}")
        self.state = target
        self._history.append((target, self.elapsed()))

    def finish(self, success: bool) -> None:
        if self.is_terminal:
            return
        self.advance(PipelineState.RELEASED_SUCCESS if success else PipelineState.RELEASED_FAILURE)

    def states(self) -> list[str]:
        return [state.value for state, _ in self._history]

    def get_report(self) -> dict:
        return {
            "state": self.state.value,
            "elapsed_ms": self.elapsed_ms(),
            "transitions": [
                {"state": state.value, "at_ms": round(at * 1000, 1)} for state, at in self._history
            ],
        }
