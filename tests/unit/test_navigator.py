"""NavigatorFormFiller 유닛 테스트 (가짜 드라이버)"""

from typing import Any, Optional

import pytest

from inmate_search.core.config import NavigationConfig, WaitPolicy
from inmate_search.core.exceptions import (
    FormNotFoundException,
    NavigationTimeoutException,
    SubmissionFailedException,
)
from inmate_search.crawlers.navigator import NavigatorFormFiller
from inmate_search.crawlers.playwright.scripts import FILL_FIELDS_SCRIPT
from inmate_search.crawlers.session import BrowserSession
from tests.conftest import FakeDriver
from tests.fixtures import pages


VALUES = {"first_name": "John", "last_name": "Smith", "location": "KS"}


class SleepRecorder:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_config(**overrides) -> NavigationConfig:
    values = dict(
        wait_policy=WaitPolicy.DOM_READY,
        timeout_ms=30000,
        dom_ready_settle_ms=1500,
        submit_keywords=("search", "submit", "find", "go"),
    )
    values.update(overrides)
    return NavigationConfig(**values)


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def navigator(sleeper):
    return NavigatorFormFiller(make_config(), sleep=sleeper)


class TestNavigate:
    """페이지 이동"""

    @pytest.mark.asyncio
    async def test_dom_ready_waits_settle(self, navigator, sleeper):
        driver = FakeDriver()
        await navigator.navigate(BrowserSession(driver), "https://example.org/")

        assert driver.calls == [("navigate", "https://example.org/")]
        assert sleeper.calls == [1.5]

    @pytest.mark.asyncio
    async def test_network_idle_no_settle(self, navigator, sleeper):
        driver = FakeDriver()
        await navigator.navigate(BrowserSession(driver), "https://example.org/", WaitPolicy.NETWORK_IDLE)

        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, navigator):
        driver = FakeDriver(navigate_errors=[NavigationTimeoutException("https://example.org/", 30000)])

        with pytest.raises(NavigationTimeoutException):
            await navigator.navigate(BrowserSession(driver), "https://example.org/")

    @pytest.mark.asyncio
    async def test_current_url(self, navigator):
        driver = FakeDriver(final_url="https://example.org/results?id=1")
        assert await navigator.current_url(BrowserSession(driver)) == "https://example.org/results?id=1"


class TestLocateFields:
    """입력란 탐색"""

    @pytest.mark.asyncio
    async def test_named_form(self, navigator):
        located = await navigator.locate_fields(BrowserSession(FakeDriver()))

        assert located["first_name"].index == 1
        assert located["last_name"].index == 2
        assert located["location"].index == 3

    @pytest.mark.asyncio
    async def test_no_inputs(self, navigator):
        with pytest.raises(FormNotFoundException):
            await navigator.locate_fields(BrowserSession(FakeDriver(html=pages.NO_INPUT_PAGE)))


class TestFillAndSubmit:
    """입력 및 제출"""

    @pytest.mark.asyncio
    async def test_fill_then_submit(self, navigator):
        driver = FakeDriver()
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        result = await navigator.fill_and_submit(session, located, VALUES)

        assert result.submitted is True
        assert result.method == "labeled"
        assert driver.filled == [
            {"index": 1, "value": "John"},
            {"index": 2, "value": "Smith"},
            {"index": 3, "value": "KS"},
        ]
        submit_arg = next(arg for name, arg in driver.calls if name == "submit")
        assert submit_arg["anchorIndex"] == 1
        assert submit_arg["controlIndex"] == 0
        assert submit_arg["submitTypes"] == ["submit", "image"]
        assert submit_arg["textTypes"] == ["", "text", "search"]

    @pytest.mark.asyncio
    async def test_labeled_control_chosen_by_whole_word(self, navigator):
        """"Select Category"/"Logout"이 아니라 "Search Now" 버튼을 클릭 대상으로 전달"""
        driver = FakeDriver(html=pages.CATEGORY_BUTTON_FORM_PAGE)
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        await navigator.fill_and_submit(session, located, VALUES)

        submit_arg = next(arg for name, arg in driver.calls if name == "submit")
        assert submit_arg["anchorIndex"] == 0
        assert submit_arg["controlIndex"] == 2

    @pytest.mark.asyncio
    async def test_no_labeled_control_passes_none(self):
        navigator = NavigatorFormFiller(make_config(submit_keywords=("lookup",)), sleep=SleepRecorder())
        driver = FakeDriver()
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        await navigator.fill_and_submit(session, located, VALUES)

        submit_arg = next(arg for name, arg in driver.calls if name == "submit")
        assert submit_arg["controlIndex"] is None

    @pytest.mark.asyncio
    async def test_fill_precedes_submit(self, navigator):
        driver = FakeDriver()
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)
        await navigator.fill_and_submit(session, located, VALUES)

        names = [name for name, _ in driver.calls]
        assert names.index("fill") < names.index("submit")

    @pytest.mark.asyncio
    async def test_missing_value_not_filled(self, navigator):
        driver = FakeDriver()
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        await navigator.fill_and_submit(session, located, {**VALUES, "location": None})

        assert [item["index"] for item in driver.filled] == [1, 2]

    @pytest.mark.asyncio
    async def test_no_submit_path(self, navigator):
        driver = FakeDriver(submit_method=None)
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        with pytest.raises(SubmissionFailedException):
            await navigator.fill_and_submit(session, located, VALUES)

    @pytest.mark.asyncio
    async def test_navigation_during_submit_counts_as_submitted(self, navigator):
        """클릭 직후 페이지 이동으로 evaluate가 끊겨도 제출 성공"""
        driver = FakeDriver(
            submit_error=RuntimeError("Execution context was destroyed, most likely because of a navigation")
        )
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        result = await navigator.fill_and_submit(session, located, VALUES)

        assert result.method == "navigation"

    @pytest.mark.asyncio
    async def test_script_error_is_submission_failure(self, navigator):
        driver = FakeDriver(submit_error=RuntimeError("boom"))
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        with pytest.raises(SubmissionFailedException) as exc_info:
            await navigator.fill_and_submit(session, located, VALUES)
        assert "boom" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_script_error_message_first_line_only(self, navigator):
        driver = FakeDriver(submit_error=RuntimeError("Evaluation failed: boom\n    at <anonymous>:12:7\n=== logs ==="))
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        with pytest.raises(SubmissionFailedException) as exc_info:
            await navigator.fill_and_submit(session, located, VALUES)
        assert "\n" not in exc_info.value.message
        assert "RuntimeError: Evaluation failed: boom" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_partial_fill_is_submission_failure(self, navigator):
        class PartialFillDriver(FakeDriver):
            async def evaluate(self, script: str, arg: Optional[Any] = None) -> Any:
                if script == FILL_FIELDS_SCRIPT:
                    return 1
                return await super().evaluate(script, arg)

        driver = PartialFillDriver()
        session = BrowserSession(driver)
        located = await navigator.locate_fields(session)

        with pytest.raises(SubmissionFailedException) as exc_info:
            await navigator.fill_and_submit(session, located, VALUES)
        assert exc_info.value.details == {"filled": 1, "expected": 3}
        assert not any(name == "submit" for name, _ in driver.calls)

    @pytest.mark.asyncio
    async def test_no_values(self, navigator):
        session = BrowserSession(FakeDriver())
        located = await navigator.locate_fields(session)

        with pytest.raises(SubmissionFailedException):
            await navigator.fill_and_submit(session, located, {})
