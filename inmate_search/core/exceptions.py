"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from enum import Enum
from typing import Any, Optional

from inmate_search.utils.text import describe_error


class ErrorKind(str, Enum):
    """외부로 노출되는 안정적인 오류 종류"""

    VALIDATION_ERROR = "ValidationError"
    LAUNCH_ERROR = "LaunchError"
    NAVIGATION_ERROR = "NavigationError"
    NAVIGATION_TIMEOUT = "NavigationTimeout"
    FORM_NOT_FOUND = "FormNotFound"
    SUBMISSION_FAILED = "SubmissionFailed"
    UNKNOWN_FAILURE = "UnknownFailure"


# 기본 예외 클래스
class InmateSearchException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""

    error_kind: ErrorKind = ErrorKind.UNKNOWN_FAILURE

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.error_kind.value
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationException(InmateSearchException):
    """입력값 검증 실패 (리소스 사용 전)"""

    error_kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, details=details or {"field": field, "reason": reason})


# 세션 관련 예외
class LaunchException(InmateSearchException):
    """브라우저 프로세스 실행 실패 (바이너리 없음, 리소스 부족 등)"""

    error_kind = ErrorKind.LAUNCH_ERROR

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Browser launch failed: {reason}"
        super().__init__(message, details=details or {"reason": reason})


# 이동 관련 예외
class NavigationException(InmateSearchException):
    """페이지 이동 실패"""

    error_kind = ErrorKind.NAVIGATION_ERROR

    def __init__(self, url: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Navigation to {url} failed: {reason}"
        super().__init__(message, details=details or {"url": url, "reason": reason})


class NavigationTimeoutException(InmateSearchException):
    """페이지 이동 타임아웃"""

    error_kind = ErrorKind.NAVIGATION_TIMEOUT

    def __init__(self, url: str, timeout_ms: int, details: Optional[dict[str, Any]] = None):
        message = f"Navigation to {url} timed out after {timeout_ms}ms"
        super().__init__(message, details=details or {"url": url, "timeout_ms": timeout_ms})


# 폼 관련 예외
class FormNotFoundException(InmateSearchException):
    """검색 폼(텍스트 입력란)을 찾을 수 없음"""

    error_kind = ErrorKind.FORM_NOT_FOUND

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Search form not found: {reason}"
        super().__init__(message, details=details or {"reason": reason})


class SubmissionFailedException(InmateSearchException):
    """모든 제출 경로 실패"""

    error_kind = ErrorKind.SUBMISSION_FAILED

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Form submission failed: {reason}"
        super().__init__(message, details=details or {"reason": reason})


class UnknownFailureException(InmateSearchException):
    """분류되지 않은 오류 (원본 예외 타입/메시지만 보존)"""

    error_kind = ErrorKind.UNKNOWN_FAILURE

    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(reason, details=details)

    @classmethod
    def wrap(cls, error: BaseException) -> "UnknownFailureException":
        return cls(describe_error(error), details={"type": type(error).__name__})
