"""텍스트 정규화/매칭 유틸"""

from __future__ import annotations

from typing import Iterable, Optional


def normalize_whitespace(text: Optional[str]) -> str:
    """연속 공백/개행을 공백 하나로 축약"""
    if not text:
        return ""
    return " ".join(text.split())


def find_marker(text: Optional[str], markers: Iterable[str]) -> Optional[str]:
    """대소문자 무시 부분 문자열 매칭 - 처음 일치한 마커 반환"""
    if not text:
        return None
    lowered = text.lower()
    for marker in markers:
        if marker and marker.lower() in lowered:
            return marker
    return None


def first_line(error: BaseException) -> str:
    """예외 메시지의 첫 줄 (엔진 호출 로그/배너 제외)"""
    text = str(error).strip()
    return text.splitlines()[0].strip() if text else type(error).__name__


def describe_error(error: BaseException) -> str:
    """외부 노출용 오류 요약 ("Type: 첫 줄")"""
    return f"{type(error).__name__}: {first_line(error)}"
