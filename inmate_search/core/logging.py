"""로깅 설정 (검색 대상 이름 마스킹 포함)"""
import logging
import os
import sys
from typing import Optional

from inmate_search.core.config import settings


LOGGER_NAME = "inmate_search"

# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

_FORMATS = {
    True: "%(asctime)s - %(levelname)s - %(message)s",
    False: "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or settings.log_level).upper()
    if IS_PRODUCTION and name == "DEBUG":
        name = "INFO"
    return getattr(logging, name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """패키지 로거 초기화 (여러 번 호출해도 핸들러는 하나)

    Args:
        level: 로그 레벨 (없으면 settings.log_level)
    """
    log_level = _resolve_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMATS[IS_PRODUCTION], datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(log_level)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """로깅용 문자열 반환 (공백 축약 + 길이 제한)

    Args:
        value: 로깅할 문자열
        max_length: 최대 길이

    Returns:
        절단된 문자열
    """
    if not value:
        return "[empty]"

    result = " ".join(str(value).split())
    if len(result) > max_length:
        result = result[:max_length] + "..."
    return result


def mask_name(first_name: str, last_name: str) -> str:
    """검색 대상 이름을 이니셜로 마스킹 (예: "J. S***")"""
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    first_part = f"{first[0]}." if first else "?"
    last_part = f"{last[0]}***" if last else "?"
    return f"{first_part} {last_part}"
