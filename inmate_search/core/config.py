"""설정 관리 - 환경 변수 로드 및 검증"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class WaitPolicy(str, Enum):
    """페이지 로드 대기 정책"""

    NETWORK_IDLE = "networkIdle"  # 네트워크 유휴까지 대기 (완전하지만 멈출 수 있음)
    DOM_READY = "domReady"  # DOM 파싱 완료 + 고정 settle 지연 (기본값)


class SearchMode(str, Enum):
    """검색 실행 방식"""

    FORM = "form"  # 검색 페이지 이동 → 폼 입력 → 제출
    QUERY_URL = "query_url"  # 쿼리 파라미터가 포함된 결과 URL로 바로 이동


# 컬럼 순서 → 출력 필드명
FIELD_MAPS: dict[str, tuple[str, ...]] = {
    "six_column": ("name", "booking_number", "booking_date", "charges", "bond", "facility"),
    "seven_column": ("name", "booking_number", "booking_date", "charges", "bond", "facility", "status"),
}

DEFAULT_NEGATIVE_MARKERS: tuple[str, ...] = (
    "no records found",
    "no results",
    "not found",
    "no inmates found",
    "no matches",
)


@dataclass(frozen=True)
class BrowserConfig:
    """세션(브라우저) 실행 설정"""

    headless: bool
    user_agent: str
    viewport_width: int
    viewport_height: int
    disable_automation_flags: bool
    disable_gpu: bool
    disable_sandbox: bool
    block_resources: bool
    launch_timeout_s: float
    default_timeout_ms: int


@dataclass(frozen=True)
class NavigationConfig:
    """이동/폼 제출 설정"""

    wait_policy: WaitPolicy
    timeout_ms: int
    dom_ready_settle_ms: int
    submit_keywords: tuple[str, ...]


@dataclass(frozen=True)
class ExtractionConfig:
    """결과 추출 설정"""

    field_map: tuple[str, ...]
    negative_markers: tuple[str, ...]
    card_class_keywords: tuple[str, ...]
    min_name_length: int
    card_min_text_length: int
    raw_text_limit: int
    skip_first_row: bool


class Settings(BaseSettings):
    """애플리케이션 설정 (불변)

    요청마다 새로 만들지 않고 한 번 생성해 오케스트레이터에 주입합니다.
    """

    # 대상 사이트
    search_page_url: str = "https://sedgwickcountycourt.org/"
    search_results_url: str = "https://sedgwickcountycourt.org/loading/"
    search_mode: SearchMode = SearchMode.FORM
    default_location_hint: str = "KS"

    # 브라우저
    browser_headless: bool = True
    browser_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    browser_viewport_width: int = 1366
    browser_viewport_height: int = 900
    browser_disable_automation_flags: bool = True
    browser_disable_gpu: bool = True
    browser_disable_sandbox: bool = True
    browser_block_resources: bool = True
    browser_launch_timeout_s: float = 25.0

    # 이동/대기
    navigation_wait_policy: WaitPolicy = WaitPolicy.DOM_READY
    navigation_timeout_ms: int = 30000
    navigation_settle_ms: int = 1500
    settle_delay_ms: int = 5000
    submit_keywords: tuple[str, ...] = ("search", "submit", "find", "go")

    # 추출
    field_map_variant: str = "six_column"
    field_map: Optional[tuple[str, ...]] = None  # 지정 시 variant보다 우선
    negative_markers: tuple[str, ...] = DEFAULT_NEGATIVE_MARKERS
    card_class_keywords: tuple[str, ...] = ("result", "inmate", "record")
    min_name_length: int = 2
    card_min_text_length: int = 10
    raw_text_limit: int = 3000
    skip_first_row: bool = True

    # 동시성/재시도
    max_concurrent_sessions: int = 2
    max_attempts: int = 2
    retry_backoff_s: float = 1.0
    retry_backoff_max_s: float = 5.0

    # 진단
    screenshot_dir: Optional[str] = None

    # 로깅
    log_level: str = "INFO"

    @field_validator(
        "navigation_timeout_ms",
        "browser_viewport_width",
        "browser_viewport_height",
        "raw_text_limit",
        "max_concurrent_sessions",
        "max_attempts",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("navigation_settle_ms", "settle_delay_ms", "min_name_length", "card_min_text_length")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("value must be >= 0")
        return v

    @field_validator("browser_launch_timeout_s")
    @classmethod
    def validate_launch_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("browser_launch_timeout_s must be positive")
        return v

    @field_validator("retry_backoff_s", "retry_backoff_max_s")
    @classmethod
    def validate_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError("seconds must be >= 0")
        return v

    @field_validator("field_map_variant")
    @classmethod
    def validate_field_map_variant(cls, v: str) -> str:
        if v not in FIELD_MAPS:
            raise ValueError(f"field_map_variant must be one of {sorted(FIELD_MAPS)}")
        return v

    @field_validator("field_map")
    @classmethod
    def validate_field_map(cls, v: Optional[tuple[str, ...]]) -> Optional[tuple[str, ...]]:
        if v is None:
            return None
        if not v or v[0] != "name":
            raise ValueError("field_map must start with 'name'")
        allowed = set(FIELD_MAPS["seven_column"])
        unknown = [f for f in v if f not in allowed]
        if unknown:
            raise ValueError(f"unknown fields in field_map: {unknown}")
        return v

    @field_validator("negative_markers")
    @classmethod
    def validate_negative_markers(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        markers = tuple(m.strip().lower() for m in v if m and m.strip())
        if not markers:
            raise ValueError("negative_markers must not be empty")
        return markers

    def resolved_field_map(self) -> tuple[str, ...]:
        return self.field_map or FIELD_MAPS[self.field_map_variant]

    def browser_config(self) -> BrowserConfig:
        return BrowserConfig(
            headless=self.browser_headless,
            user_agent=self.browser_user_agent,
            viewport_width=self.browser_viewport_width,
            viewport_height=self.browser_viewport_height,
            disable_automation_flags=self.browser_disable_automation_flags,
            disable_gpu=self.browser_disable_gpu,
            disable_sandbox=self.browser_disable_sandbox,
            block_resources=self.browser_block_resources,
            launch_timeout_s=self.browser_launch_timeout_s,
            default_timeout_ms=self.navigation_timeout_ms,
        )

    def navigation_config(self) -> NavigationConfig:
        return NavigationConfig(
            wait_policy=self.navigation_wait_policy,
            timeout_ms=self.navigation_timeout_ms,
            dom_ready_settle_ms=self.navigation_settle_ms,
            submit_keywords=tuple(k.lower() for k in self.submit_keywords),
        )

    def extraction_config(self) -> ExtractionConfig:
        return ExtractionConfig(
            field_map=self.resolved_field_map(),
            negative_markers=self.negative_markers,
            card_class_keywords=self.card_class_keywords,
            min_name_length=self.min_name_length,
            card_min_text_length=self.card_min_text_length,
            raw_text_limit=self.raw_text_limit,
            skip_first_row=self.skip_first_row,
        )

    class Config:
        env_file = ".env"
        env_prefix = "INMATE_SEARCH_"
        case_sensitive = False
        frozen = True


settings = Settings()
