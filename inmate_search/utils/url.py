"""URL 유틸"""

from __future__ import annotations

from urllib.parse import quote, urlencode


def build_search_url(base_url: str, first_name: str, last_name: str, state: str) -> str:
    """쿼리 파라미터가 포함된 결과 페이지 URL 생성

    예: https://sedgwickcountycourt.org/loading/?firstname=John&lastname=Smith&state=KS&search=Search%20Now
    """
    params = {
        "firstname": first_name,
        "lastname": last_name,
        "state": state,
        "search": "Search Now",
    }
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode(params, quote_via=quote)}"
