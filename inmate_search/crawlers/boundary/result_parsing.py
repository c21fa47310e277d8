"""검색 결과 HTML 파싱 - 전략 체인.

네트워크/브라우저와 분리된 순수 파싱 로직입니다. 같은 HTML에는 항상 같은 결과를 냅니다.

부정 마커("no records found" 등)가 페이지 텍스트에 있으면 표/카드가 있어도 empty가 우선합니다.
마커가 없을 때의 전략 순서 (처음으로 레코드를 1개 이상 만든 전략이 채택):
1. table  - 표의 데이터 행을 컬럼 순서대로 필드에 매핑
2. card   - class에 result/inmate/record가 포함된 요소 중 가장 안쪽 요소의 텍스트
3. rawFallback - 위 모두 실패 시 본문 앞부분을 디버그 텍스트로 반환
"""

from __future__ import annotations

from typing import Callable, Optional

from selectolax.parser import HTMLParser, Node

from inmate_search.core.config import ExtractionConfig
from inmate_search.schemas.booking_schema import BookingRecord, CardRecord, ExtractionResult
from inmate_search.utils.text import find_marker, normalize_whitespace


_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]

_MAIN_CONTENT_SELECTORS = (
    "main",
    '[role="main"]',
    "#content",
    "#main",
    ".content",
    "article",
)


ExtractionStrategy = Callable[[HTMLParser, ExtractionConfig], Optional[ExtractionResult]]


def parse_page(html: str) -> HTMLParser:
    parser = HTMLParser(html or "")
    parser.strip_tags(_NON_CONTENT_TAGS)
    return parser


def node_text(node: Optional[Node]) -> str:
    if node is None:
        return ""
    return normalize_whitespace(node.text(deep=True, separator=" "))


def page_text(parser: HTMLParser) -> str:
    return node_text(parser.body or parser.root)


def _owning_table_id(row: Node) -> Optional[int]:
    parent = row.parent
    while parent is not None:
        if parent.tag == "table":
            return parent.mem_id
        parent = parent.parent
    return None


def _table_rows(table: Node) -> list[Node]:
    """중첩 표의 행을 제외한 이 표의 행 목록"""
    return [row for row in table.css("tr") if _owning_table_id(row) == table.mem_id]


def extract_table_records(parser: HTMLParser, config: ExtractionConfig) -> list[BookingRecord]:
    records: list[BookingRecord] = []
    min_name_length = max(1, config.min_name_length)

    for table in parser.css("table"):
        for position, row in enumerate(_table_rows(table)):
            if position == 0 and config.skip_first_row:
                continue
            children = [child for child in row.iter() if child.tag in ("td", "th")]
            if any(child.tag == "th" for child in children):
                continue
            # 중첩 표를 감싸는 레이아웃 행
            if any(child.css_first("table") is not None for child in children):
                continue
            cells = [node_text(child) for child in children]
            if not cells:
                continue

            values = {
                field: (cells[ordinal] if ordinal < len(cells) else "")
                for ordinal, field in enumerate(config.field_map)
            }
            # 장식/간격용 행 제외
            if len(values.get("name", "")) < min_name_length:
                continue
            # "No records found" 같은 안내 행은 레코드가 아님
            if find_marker(" ".join(cells), config.negative_markers):
                continue
            records.append(BookingRecord(**values))

    return records


def extract_card_records(parser: HTMLParser, config: ExtractionConfig) -> list[CardRecord]:
    """클래스 키워드가 일치하는 요소 중 가장 안쪽 요소만 카드로 채택

    결과 목록 컨테이너(.search-results)와 그 안의 카드(.inmate-card)가 모두 일치하면
    컨테이너 텍스트가 카드들을 중복해서 담으므로 컨테이너는 제외합니다.
    """
    keywords = tuple(k.lower() for k in config.card_class_keywords)

    candidates: list[tuple[Node, str]] = []
    for node in parser.css("[class]"):
        class_attr = (node.attributes.get("class") or "").lower()
        if not any(keyword in class_attr for keyword in keywords):
            continue
        text = node_text(node)
        if len(text) <= config.card_min_text_length:
            continue
        candidates.append((node, text))

    candidate_ids = {node.mem_id for node, _ in candidates}
    containers: set[int] = set()
    for node, _ in candidates:
        parent = node.parent
        while parent is not None:
            if parent.mem_id in candidate_ids:
                containers.add(parent.mem_id)
            parent = parent.parent

    return [
        CardRecord(content=text)
        for node, text in candidates
        if node.mem_id not in containers and not find_marker(text, config.negative_markers)
    ]


def main_content_text(parser: HTMLParser, limit: int) -> str:
    """본문 컨테이너 추정 후 앞부분 텍스트 반환"""
    for selector in _MAIN_CONTENT_SELECTORS:
        text = node_text(parser.css_first(selector))
        if text:
            return text[:limit]
    return page_text(parser)[:limit]


def table_strategy(parser: HTMLParser, config: ExtractionConfig) -> Optional[ExtractionResult]:
    records = extract_table_records(parser, config)
    return ExtractionResult.table(records) if records else None


def card_strategy(parser: HTMLParser, config: ExtractionConfig) -> Optional[ExtractionResult]:
    records = extract_card_records(parser, config)
    return ExtractionResult.card(records) if records else None


def negative_marker_strategy(parser: HTMLParser, config: ExtractionConfig) -> Optional[ExtractionResult]:
    if find_marker(page_text(parser), config.negative_markers):
        return ExtractionResult.empty()
    return None


# 부정 마커가 유일한 "결과 없음" 신호이므로 구조 전략보다 먼저 확인
EXTRACTION_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    negative_marker_strategy,
    table_strategy,
    card_strategy,
)


def extract_results(html: str, config: ExtractionConfig) -> ExtractionResult:
    """HTML 전체에 전략 체인 적용"""
    parser = parse_page(html)
    for strategy in EXTRACTION_STRATEGIES:
        result = strategy(parser, config)
        if result is not None:
            return result
    return ExtractionResult.raw_fallback(main_content_text(parser, config.raw_text_limit))
