"""Navigator / Form Filler - 페이지 이동, 검색 폼 탐색/입력/제출"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from inmate_search.core.config import NavigationConfig, WaitPolicy
from inmate_search.core.exceptions import SubmissionFailedException
from inmate_search.core.logging import logger
from inmate_search.utils.text import describe_error

from .boundary.field_matching import (
    DEFAULT_FIELD_SPECS,
    TEXT_INPUT_TYPES,
    FieldSpec,
    InputDescriptor,
    assign_fields,
    discover_text_inputs,
)
from .boundary.submit_matching import SUBMIT_INPUT_TYPES, pick_submit_control
from .playwright.scripts import (
    CURRENT_URL_SCRIPT,
    FILL_FIELDS_SCRIPT,
    OUTER_HTML_SCRIPT,
    SUBMIT_FORM_SCRIPT,
)
from .session import BrowserSession


# 제출 클릭으로 페이지가 바로 이동하면 evaluate가 이 메시지로 실패함
_NAVIGATED_AWAY_HINTS = ("execution context was destroyed", "frame was detached")


@dataclass(frozen=True)
class SubmissionResult:
    submitted: bool
    method: str  # labeled | submit_type | form | navigation


class NavigatorFormFiller:
    """페이지 이동 및 검색 폼 처리"""

    def __init__(
        self,
        config: NavigationConfig,
        field_specs: Sequence[FieldSpec] = DEFAULT_FIELD_SPECS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config
        self.field_specs = tuple(field_specs)
        self._sleep = sleep

    async def navigate(
        self,
        session: BrowserSession,
        url: str,
        wait_policy: Optional[WaitPolicy] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        """URL 이동

        domReady 정책은 DOM 파싱 완료 후 고정 지연(settle)을 추가로 기다립니다.

        Raises:
            NavigationException: 이동 실패
            NavigationTimeoutException: 타임아웃
        """
        policy = wait_policy or self.config.wait_policy
        timeout = timeout_ms or self.config.timeout_ms

        logger.info(f"[Navigator] Navigating: url={url}, policy={policy.value}, timeout={timeout}ms")
        await session.driver.navigate(url, policy, timeout)

        if policy is WaitPolicy.DOM_READY and self.config.dom_ready_settle_ms > 0:
            await self._sleep(self.config.dom_ready_settle_ms / 1000)

    async def current_url(self, session: BrowserSession) -> str:
        url = await session.driver.evaluate(CURRENT_URL_SCRIPT)
        return url if isinstance(url, str) else ""

    async def locate_fields(
        self,
        session: BrowserSession,
        field_specs: Optional[Sequence[FieldSpec]] = None,
    ) -> dict[str, InputDescriptor]:
        """검색 폼 입력란 탐색

        Raises:
            FormNotFoundException: 텍스트 입력란이 없거나 필수 필드를 배정할 수 없음
        """
        html = await session.driver.evaluate(OUTER_HTML_SCRIPT)
        inputs = discover_text_inputs(html if isinstance(html, str) else "")
        located = assign_fields(inputs, field_specs or self.field_specs)
        logger.debug(
            "[Navigator] Located fields: "
            + ", ".join(f"{key}=#{d.index}({d.name or d.element_id or d.placeholder or '-'})" for key, d in located.items())
        )
        return located

    async def fill_and_submit(
        self,
        session: BrowserSession,
        located: Mapping[str, InputDescriptor],
        values: Mapping[str, Optional[str]],
    ) -> SubmissionResult:
        """입력란 값 설정(input/change 이벤트 포함) 후 제출

        제출 순서: 키워드와 라벨 단어가 일치하는 버튼 → type=submit 요소 → form.submit()
        키워드는 설정 순서가 우선순위이며, 같은 키워드면 문서 순서로 고릅니다.

        Raises:
            SubmissionFailedException: 입력 또는 모든 제출 경로 실패
        """
        assignments = [
            {"index": descriptor.index, "value": values[key]}
            for key, descriptor in located.items()
            if values.get(key)
        ]
        if not assignments:
            raise SubmissionFailedException("no values to fill")

        filled = await session.driver.evaluate(
            FILL_FIELDS_SCRIPT,
            {"textTypes": list(TEXT_INPUT_TYPES), "assignments": assignments},
        )
        if filled != len(assignments):
            raise SubmissionFailedException(
                f"filled {filled} of {len(assignments)} fields",
                details={"filled": filled, "expected": len(assignments)},
            )

        anchor_index = min(item["index"] for item in assignments)
        # 입력 후 상태(활성화된 버튼 등) 기준으로 제출 버튼 선택
        html = await session.driver.evaluate(OUTER_HTML_SCRIPT)
        control_index = pick_submit_control(
            html if isinstance(html, str) else "", anchor_index, self.config.submit_keywords
        )
        try:
            method = await session.driver.evaluate(
                SUBMIT_FORM_SCRIPT,
                {
                    "textTypes": list(TEXT_INPUT_TYPES),
                    "submitTypes": list(SUBMIT_INPUT_TYPES),
                    "anchorIndex": anchor_index,
                    "controlIndex": control_index,
                },
            )
        except Exception as e:
            if any(hint in str(e).lower() for hint in _NAVIGATED_AWAY_HINTS):
                logger.debug("[Navigator] Page navigated away during submit")
                return SubmissionResult(submitted=True, method="navigation")
            raise SubmissionFailedException(describe_error(e)) from e

        if not method:
            raise SubmissionFailedException("no submit control or form found")

        logger.info(f"[Navigator] Form submitted via {method}")
        return SubmissionResult(submitted=True, method=str(method))
