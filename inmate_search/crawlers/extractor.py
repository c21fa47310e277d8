"""Result Extractor - 안정화된 페이지에서 결과 추출"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from inmate_search.core.config import ExtractionConfig
from inmate_search.core.logging import logger
from inmate_search.schemas.booking_schema import ExtractionKind, ExtractionResult

from .boundary.result_parsing import extract_results
from .playwright.scripts import OUTER_HTML_SCRIPT
from .session import BrowserSession


class ResultExtractor:
    """페이지 스냅샷(outer HTML)을 한 번 받아 전략 체인으로 분류"""

    def __init__(self, config: ExtractionConfig):
        self.config = config

    async def run(
        self,
        session: BrowserSession,
        field_map: Optional[Sequence[str]] = None,
        negative_markers: Optional[Sequence[str]] = None,
    ) -> ExtractionResult:
        """결과 추출

        Args:
            session: 사용 중인 세션
            field_map: 컬럼 순서 → 필드명 (없으면 설정값)
            negative_markers: 결과 없음 문구 (없으면 설정값)

        Returns:
            ExtractionResult: table | card | empty | rawFallback
        """
        config = self.config
        if field_map is not None:
            config = replace(config, field_map=tuple(field_map))
        if negative_markers is not None:
            config = replace(config, negative_markers=tuple(m.lower() for m in negative_markers))

        html = await session.driver.evaluate(OUTER_HTML_SCRIPT)
        if not isinstance(html, str):
            html = ""

        result = extract_results(html, config)

        if result.kind is ExtractionKind.RAW_FALLBACK:
            logger.warning(
                f"[Extractor] Page did not match any known structure (html={len(html)} chars), returning raw text"
            )
        else:
            logger.info(f"[Extractor] kind={result.kind.value}, records={len(result.records)}")
        return result
