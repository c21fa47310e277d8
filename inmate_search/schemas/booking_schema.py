"""Pydantic 스키마 정의 (검색 요청/추출 결과/응답)"""
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from inmate_search.core.exceptions import ErrorKind


class _CamelModel(BaseModel):
    """JSON 응답은 camelCase, 코드에서는 snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchQuery(_CamelModel):
    """검색 요청 (생성 후 불변)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    first_name: str = Field(..., min_length=1, max_length=100, description="이름")
    last_name: str = Field(..., min_length=1, max_length=100, description="성")
    location_hint: Optional[str] = Field(None, max_length=100, description="주/지역 (예: KS)")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("location_hint", mode="before")
    @classmethod
    def blank_location_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class BookingRecord(_CamelModel):
    """예약(수감) 레코드 - 모든 필드는 문자열, 없으면 빈 문자열"""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    booking_number: str = ""
    booking_date: str = ""
    charges: str = ""
    bond: str = ""
    facility: str = ""
    status: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce_missing(cls, data: Any):
        if not isinstance(data, dict):
            return data
        # None → "" (null은 절대 노출하지 않음)
        return {k: ("" if v is None else str(v)) for k, v in data.items()}


class CardRecord(_CamelModel):
    """카드형 결과 - 자유 텍스트 한 덩어리"""

    model_config = ConfigDict(extra="forbid")

    content: str


class ExtractionKind(str, Enum):
    """추출 결과 분류"""

    TABLE = "table"
    CARD = "card"
    EMPTY = "empty"  # 부정 마커가 확인된 경우에만
    RAW_FALLBACK = "rawFallback"  # 구조 해석 실패 (디버그 텍스트 포함)


class ExtractionResult(_CamelModel):
    """추출 결과"""

    kind: ExtractionKind
    records: list[Union[BookingRecord, CardRecord]] = Field(default_factory=list)
    debug_text: Optional[str] = None

    @model_validator(mode="after")
    def _check_kind(self) -> "ExtractionResult":
        if self.kind == ExtractionKind.RAW_FALLBACK:
            if self.debug_text is None:
                raise ValueError("rawFallback requires debug_text")
            if self.records:
                raise ValueError("rawFallback carries no records")
        elif self.debug_text is not None:
            raise ValueError("debug_text is only allowed for rawFallback")
        if self.kind == ExtractionKind.EMPTY and self.records:
            raise ValueError("empty result must not carry records")
        if self.kind in (ExtractionKind.TABLE, ExtractionKind.CARD) and not self.records:
            raise ValueError(f"{self.kind.value} result requires at least one record")
        return self

    @classmethod
    def table(cls, records: list[BookingRecord]) -> "ExtractionResult":
        return cls(kind=ExtractionKind.TABLE, records=records)

    @classmethod
    def card(cls, records: list[CardRecord]) -> "ExtractionResult":
        return cls(kind=ExtractionKind.CARD, records=records)

    @classmethod
    def empty(cls) -> "ExtractionResult":
        return cls(kind=ExtractionKind.EMPTY)

    @classmethod
    def raw_fallback(cls, debug_text: str) -> "ExtractionResult":
        return cls(kind=ExtractionKind.RAW_FALLBACK, debug_text=debug_text)


class SearchOutcome(_CamelModel):
    """검색 결과 표준 포맷 (성공/실패 공용)

    Attributes:
        success: 성공 여부
        query: 요청 쿼리 (실패 시에도 그대로 반환)
        search_url: 이동한 URL
        final_url: 리다이렉트 후 최종 URL
        extraction: 추출 결과 (성공 시)
        error: 오류 종류 (실패 시)
        message: 사람이 읽을 수 있는 오류 메시지 (실패 시)
        elapsed_ms: 소요 시간 (밀리초)
        states: 거쳐간 파이프라인 상태
    """

    success: bool
    query: SearchQuery
    search_url: Optional[str] = None
    final_url: Optional[str] = None
    extraction: Optional[ExtractionResult] = None
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    elapsed_ms: Optional[float] = None
    states: list[str] = Field(default_factory=list)

    @computed_field(alias="resultsCount")
    @property
    def results_count(self) -> int:
        return len(self.extraction.records) if self.extraction else 0

    @classmethod
    def succeeded(
        cls,
        query: SearchQuery,
        search_url: str,
        final_url: str,
        extraction: ExtractionResult,
        elapsed_ms: Optional[float] = None,
        states: Optional[list[str]] = None,
    ) -> "SearchOutcome":
        return cls(
            success=True,
            query=query,
            search_url=search_url,
            final_url=final_url,
            extraction=extraction,
            elapsed_ms=elapsed_ms,
            states=states or [],
        )

    @classmethod
    def failed(
        cls,
        query: SearchQuery,
        error: ErrorKind,
        message: str,
        elapsed_ms: Optional[float] = None,
        states: Optional[list[str]] = None,
    ) -> "SearchOutcome":
        return cls(
            success=False,
            query=query,
            error=error,
            message=message,
            elapsed_ms=elapsed_ms,
            states=states or [],
        )

    def to_response(self) -> dict[str, Any]:
        """API 레이어로 그대로 내보낼 JSON 딕셔너리"""
        if self.success:
            include = {"success", "query", "search_url", "final_url", "extraction", "results_count", "elapsed_ms"}
        else:
            include = {"success", "error", "message", "query", "elapsed_ms"}
        return self.model_dump(mode="json", by_alias=True, include=include, exclude_none=True)
