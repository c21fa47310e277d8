"""Crawlers - 세션, 이동/폼 처리, 결과 추출"""

from .driver import BrowserDriver
from .extractor import ResultExtractor
from .navigator import NavigatorFormFiller, SubmissionResult
from .session import BrowserSession, SessionController, SessionLease, SessionState

__all__ = [
    "BrowserDriver",
    "BrowserSession",
    "NavigatorFormFiller",
    "ResultExtractor",
    "SessionController",
    "SessionLease",
    "SessionState",
    "SubmissionResult",
]
