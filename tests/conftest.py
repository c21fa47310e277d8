"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 브라우저 없이 파이프라인을 돌리기 위한 가짜 드라이버 제공

금지:
- 실제 브라우저 실행
- 실제 사이트 접속
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("ENVIRONMENT", "test")

from inmate_search.core.config import Settings  # noqa: E402
from inmate_search.crawlers.playwright.scripts import (  # noqa: E402
    CURRENT_URL_SCRIPT,
    FILL_FIELDS_SCRIPT,
    OUTER_HTML_SCRIPT,
    SUBMIT_FORM_SCRIPT,
)
from inmate_search.crawlers.session import SessionController  # noqa: E402
from tests.fixtures import pages  # noqa: E402


@dataclass
class FakeDriver:
    """BrowserDriver 프로토콜을 흉내내는 가짜 드라이버

    - html: 현재 페이지 HTML (outer HTML 스냅샷으로 반환)
    - results_html: 폼 제출 후 보여줄 HTML
    - navigate_errors: navigate 호출마다 순서대로 던질 예외 (None이면 성공)
    - submit_method: 제출 스크립트 반환값 (None이면 제출 경로 없음)
    - snapshot_error: 제출 이후 스냅샷 시 던질 예외
    """

    html: str = pages.SEARCH_FORM_PAGE
    results_html: str = pages.JOHN_SMITH_TABLE_PAGE
    url: str = "about:blank"
    final_url: Optional[str] = None
    navigate_errors: list[Optional[Exception]] = field(default_factory=list)
    submit_method: Optional[str] = "labeled"
    submit_error: Optional[Exception] = None
    snapshot_error: Optional[Exception] = None
    close_error: Optional[Exception] = None

    calls: list[tuple[str, Any]] = field(default_factory=list)
    filled: list[dict[str, Any]] = field(default_factory=list)
    submitted: bool = False
    close_calls: int = 0

    async def navigate(self, url: str, wait_policy, timeout_ms: int) -> None:
        self.calls.append(("navigate", url))
        if self.navigate_errors:
            error = self.navigate_errors.pop(0)
            if error is not None:
                raise error
        self.url = url
        self.submitted = False

    async def evaluate(self, script: str, arg: Optional[Any] = None) -> Any:
        if script == OUTER_HTML_SCRIPT:
            self.calls.append(("snapshot", None))
            if self.submitted and self.snapshot_error is not None:
                raise self.snapshot_error
            return self.results_html if self.submitted else self.html
        if script == CURRENT_URL_SCRIPT:
            return self.final_url or self.url
        if script == FILL_FIELDS_SCRIPT:
            self.calls.append(("fill", arg))
            self.filled = list(arg["assignments"])
            return len(self.filled)
        if script == SUBMIT_FORM_SCRIPT:
            self.calls.append(("submit", arg))
            if self.submit_error is not None:
                raise self.submit_error
            if self.submit_method:
                self.submitted = True
            return self.submit_method
        raise AssertionError(f"unexpected script: {script[:40]}")

    async def screenshot(self, path: str) -> None:
        self.calls.append(("screenshot", path))

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeDriverFactory:
    """SessionController에 주입할 드라이버 팩토리 (생성된 드라이버 기록)"""

    def __init__(self, make_driver=None, launch_error: Optional[Exception] = None):
        self._make_driver = make_driver or FakeDriver
        self.launch_error = launch_error
        self.drivers: list[FakeDriver] = []

    async def __call__(self, config) -> FakeDriver:
        if self.launch_error is not None:
            raise self.launch_error
        driver = self._make_driver()
        self.drivers.append(driver)
        return driver


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def test_settings() -> Settings:
    """지연 없는 테스트용 설정"""
    return Settings(
        settle_delay_ms=0,
        navigation_settle_ms=0,
        max_attempts=1,
        retry_backoff_s=0,
        max_concurrent_sessions=4,
        screenshot_dir=None,
    )


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def driver_factory() -> FakeDriverFactory:
    return FakeDriverFactory()


@pytest.fixture
def session_controller(driver_factory: FakeDriverFactory) -> SessionController:
    return SessionController(driver_factory=driver_factory)
