"""Retry Strategy - 재시도 여부/대기 시간 결정

오류 유형에 따라 재시도를 결정합니다.
재시도는 항상 새 이동(Navigated)부터 시작하며, 이미 제출한 폼을 다시 제출하지 않습니다.
"""

from __future__ import annotations

from dataclasses import dataclass

from inmate_search.core.exceptions import (
    NavigationException,
    NavigationTimeoutException,
    UnknownFailureException,
)

from .result import Err


@dataclass(frozen=True)
class RetryStrategy:
    """재시도 전략

    Usage:
        strategy = RetryStrategy(max_attempts=2)
        if strategy.should_retry(err, attempt):
            await asyncio.sleep(strategy.backoff_for(attempt))
    """

    max_attempts: int = 1
    backoff_s: float = 1.0
    backoff_max_s: float = 5.0

    @staticmethod
    def is_retryable(err: Err) -> bool:
        """재시도 가능한 오류인지 판단

        - NavigationException / NavigationTimeoutException: 일시적 네트워크 문제
        - 추출 단계의 미분류 오류: 페이지 전환 중 스냅샷 실패 등
        - 폼/제출 오류: 페이지 구조 문제이므로 재시도 무의미
        """
        if isinstance(err.error, (NavigationException, NavigationTimeoutException)):
            return True
        if err.stage == "extract" and isinstance(err.error, UnknownFailureException):
            return True
        return False

    def should_retry(self, err: Err, attempt: int) -> bool:
        return attempt < self.max_attempts and self.is_retryable(err)

    def backoff_for(self, attempt: int) -> float:
        """선형 증가 대기 (상한 backoff_max_s)"""
        return min(self.backoff_s * attempt, self.backoff_max_s)
