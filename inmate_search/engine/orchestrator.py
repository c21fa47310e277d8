"""Search Orchestrator - Main Engine Entry Point

Coordinates the entire search pipeline:
1. Input validation (no resource touched on failure)
2. Session acquisition (scoped lease, released exactly once)
3. Navigation + form fill/submit (with bounded retry from Navigated)
4. Settle wait + result extraction
5. Outcome composition
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from inmate_search.core.config import SearchMode, Settings, settings as default_settings
from inmate_search.core.exceptions import ValidationException
from inmate_search.core.logging import logger, mask_name, sanitize_for_log
from inmate_search.crawlers.extractor import ResultExtractor
from inmate_search.crawlers.navigator import NavigatorFormFiller
from inmate_search.crawlers.session import BrowserSession, SessionController
from inmate_search.schemas.booking_schema import ExtractionResult, SearchOutcome, SearchQuery
from inmate_search.utils.url import build_search_url

from .result import Err, Ok, StageResult, run_stage
from .state import PipelineState, PipelineTracker
from .strategy import RetryStrategy


@dataclass(frozen=True)
class _PipelineOutput:
    final_url: str
    extraction: ExtractionResult


class SearchOrchestrator:
    """검색 파이프라인 오케스트레이터

    요청마다 전용 세션을 하나 띄우고, 어떤 경로로 끝나든 해제한 뒤 결과를 반환합니다.
    예외를 밖으로 던지지 않으며 실패는 SearchOutcome(success=False)로 표현합니다.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        session_controller: Optional[SessionController] = None,
        navigator: Optional[NavigatorFormFiller] = None,
        extractor: Optional[ResultExtractor] = None,
        retry_strategy: Optional[RetryStrategy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            config: 불변 설정 (없으면 기본 settings)
            session_controller: 세션 관리자 (테스트에서 가짜 드라이버 주입용)
            navigator: 이동/폼 처리기
            extractor: 결과 추출기
            retry_strategy: 재시도 전략
            sleep: 대기 함수 (settle 지연/백오프)
        """
        self.config = config or default_settings
        self.sessions = session_controller or SessionController()
        self.navigator = navigator or NavigatorFormFiller(self.config.navigation_config(), sleep=sleep)
        self.extractor = extractor or ResultExtractor(self.config.extraction_config())
        self.retry = retry_strategy or RetryStrategy(
            max_attempts=self.config.max_attempts,
            backoff_s=self.config.retry_backoff_s,
            backoff_max_s=self.config.retry_backoff_max_s,
        )
        self._sleep = sleep
        # 동시 세션 수 제한 (브라우저 프로세스 비용)
        self._admission = asyncio.Semaphore(self.config.max_concurrent_sessions)

    async def search(
        self,
        first_name: Any,
        last_name: Any,
        location_hint: Optional[str] = None,
    ) -> SearchOutcome:
        """검색 실행

        Args:
            first_name: 이름
            last_name: 성
            location_hint: 주/지역 (없으면 설정 기본값)

        Returns:
            SearchOutcome: 성공/실패 공용 결과
        """
        tracker = PipelineTracker()
        tracker.start()

        validated = self._validate(first_name, last_name, location_hint)
        if isinstance(validated, Err):
            echo = SearchQuery.model_construct(
                first_name="" if first_name is None else str(first_name),
                last_name="" if last_name is None else str(last_name),
                location_hint=location_hint,
            )
            tracker.finish(success=False)
            return self._failure(echo, validated, tracker)

        query = validated.value
        search_url = self._search_url(query)
        logger.info(f"Search started: name='{mask_name(query.first_name, query.last_name)}', url={search_url}")

        async with self._admission:
            acquired = await run_stage("acquire", self.sessions.acquire(self.config.browser_config()))
            if isinstance(acquired, Err):
                tracker.finish(success=False)
                return self._failure(query, acquired, tracker)

            tracker.advance(PipelineState.SESSION_ACQUIRED)
            async with self.sessions.lease(acquired.value) as session:
                result = await self._run_with_retry(session, query, search_url, tracker)
                if isinstance(result, Err):
                    await self._capture_diagnostics(session, result)

        tracker.finish(success=isinstance(result, Ok))
        logger.debug(f"Pipeline report: {tracker.get_report()}")

        if isinstance(result, Err):
            return self._failure(query, result, tracker)

        output = result.value
        logger.info(
            f"Search completed: kind={output.extraction.kind.value}, "
            f"records={len(output.extraction.records)}, elapsed={tracker.elapsed():.2f}s"
        )
        return SearchOutcome.succeeded(
            query=query,
            search_url=search_url,
            final_url=output.final_url,
            extraction=output.extraction,
            elapsed_ms=tracker.elapsed_ms(),
            states=tracker.states(),
        )

    def _validate(self, first_name: Any, last_name: Any, location_hint: Optional[str]) -> StageResult[SearchQuery]:
        for field, value in (("firstName", first_name), ("lastName", last_name)):
            if value is None or not str(value).strip():
                return Err(ValidationException(field, "First name and last name are required"), "validate")
        try:
            query = SearchQuery(first_name=first_name, last_name=last_name, location_hint=location_hint)
        except ValidationError as e:
            first_error = e.errors()[0]
            field = ".".join(str(part) for part in first_error.get("loc", ())) or "query"
            return Err(ValidationException(field, first_error.get("msg", "invalid value")), "validate")
        return Ok(query)

    def _search_url(self, query: SearchQuery) -> str:
        if self.config.search_mode is SearchMode.QUERY_URL:
            return build_search_url(
                self.config.search_results_url,
                query.first_name,
                query.last_name,
                query.location_hint or self.config.default_location_hint,
            )
        return self.config.search_page_url

    async def _run_with_retry(
        self,
        session: BrowserSession,
        query: SearchQuery,
        search_url: str,
        tracker: PipelineTracker,
    ) -> StageResult[_PipelineOutput]:
        attempt = 0
        while True:
            attempt += 1
            result = await self._attempt(session, query, search_url, tracker)
            if isinstance(result, Ok):
                return result
            if not self.retry.should_retry(result, attempt):
                return result

            delay = self.retry.backoff_for(attempt)
            logger.warning(
                f"Retrying from navigation (attempt {attempt + 1}/{self.retry.max_attempts}) "
                f"after {result.stage} failure: {result.error.error_code}, waiting {delay:.1f}s"
            )
            await self._sleep(delay)

    async def _attempt(
        self,
        session: BrowserSession,
        query: SearchQuery,
        search_url: str,
        tracker: PipelineTracker,
    ) -> StageResult[_PipelineOutput]:
        navigated = await run_stage("navigate", self.navigator.navigate(session, search_url))
        if isinstance(navigated, Err):
            return navigated
        tracker.advance(PipelineState.NAVIGATED)

        if self.config.search_mode is SearchMode.FORM:
            located = await run_stage("locate", self.navigator.locate_fields(session))
            if isinstance(located, Err):
                return located

            values = {
                "first_name": query.first_name,
                "last_name": query.last_name,
                "location": query.location_hint or self.config.default_location_hint,
            }
            submitted = await run_stage(
                "submit", self.navigator.fill_and_submit(session, located.value, values)
            )
            if isinstance(submitted, Err):
                return submitted
            tracker.advance(PipelineState.FORM_SUBMITTED)

        if self.config.settle_delay_ms > 0:
            await self._sleep(self.config.settle_delay_ms / 1000)
        tracker.advance(PipelineState.SETTLED)

        extracted = await run_stage("extract", self.extractor.run(session))
        if isinstance(extracted, Err):
            return extracted
        tracker.advance(PipelineState.EXTRACTED)

        # 최종 URL 조회 실패는 결과를 무효화하지 않음
        current = await run_stage("final_url", self.navigator.current_url(session))
        final_url = current.value if isinstance(current, Ok) and current.value else search_url

        return Ok(_PipelineOutput(final_url=final_url, extraction=extracted.value))

    async def _capture_diagnostics(self, session: BrowserSession, err: Err) -> None:
        """실패 시 스크린샷 저장 (설정된 경우만, 실패해도 무시)"""
        if not self.config.screenshot_dir or err.stage in ("acquire", "validate"):
            return
        path = Path(self.config.screenshot_dir) / f"failure-{err.stage}-{uuid.uuid4().hex[:8]}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await session.driver.screenshot(str(path))
            logger.info(f"Diagnostic screenshot saved: {path}")
        except Exception as e:
            logger.warning(f"Diagnostic screenshot failed: {type(e).__name__}: {e}")

    def _failure(self, query: SearchQuery, err: Err, tracker: PipelineTracker) -> SearchOutcome:
        logger.warning(f"Search failed at {err.stage or 'unknown'}: {sanitize_for_log(str(err.error), 200)}")
        return SearchOutcome.failed(
            query=query,
            error=err.error.error_kind,
            message=err.error.message,
            elapsed_ms=tracker.elapsed_ms(),
            states=tracker.states(),
        )


# 이벤트 루프별 공유 오케스트레이터 (동시 호출이 같은 admission 세마포어를 쓰도록)
_shared_loop: Optional[asyncio.AbstractEventLoop] = None
_shared_orchestrators: dict[Settings, SearchOrchestrator] = {}


def get_default_orchestrator(config: Optional[Settings] = None) -> SearchOrchestrator:
    """설정별로 하나만 만들어 재사용 (실행 중인 이벤트 루프 안에서 호출)"""
    global _shared_loop
    loop = asyncio.get_running_loop()
    if loop is not _shared_loop:
        # 세마포어는 루프에 묶이므로 루프가 바뀌면 새로 생성
        _shared_orchestrators.clear()
        _shared_loop = loop

    config = config or default_settings
    orchestrator = _shared_orchestrators.get(config)
    if orchestrator is None:
        orchestrator = SearchOrchestrator(config)
        _shared_orchestrators[config] = orchestrator
    return orchestrator


async def search(
    first_name: str,
    last_name: str,
    location_hint: Optional[str] = None,
    *,
    config: Optional[Settings] = None,
) -> SearchOutcome:
    """검색 실행 (공유 오케스트레이터 사용 - 동시 세션 수 제한이 호출 전체에 적용)"""
    return await get_default_orchestrator(config).search(first_name, last_name, location_hint)
