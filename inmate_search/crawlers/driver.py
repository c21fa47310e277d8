"""Browser Driver Protocol - 자동화 엔진 경계

세션이 엔진에 요구하는 기능은 아래 4가지뿐입니다.
다른 엔진(Playwright 외)으로 교체할 때 이 프로토콜만 구현하면 됩니다.
"""

from typing import Any, Optional, Protocol

from inmate_search.core.config import WaitPolicy


class BrowserDriver(Protocol):
    """자동화 엔진 드라이버 프로토콜

    구현 예시:
        class PlaywrightDriver(BrowserDriver):
            async def navigate(self, url, wait_policy, timeout_ms) -> None:
                ...
    """

    async def navigate(self, url: str, wait_policy: WaitPolicy, timeout_ms: int) -> None:
        """페이지 이동

        Raises:
            NavigationException: 이동 실패
            NavigationTimeoutException: 타임아웃
        """
        ...

    async def evaluate(self, script: str, arg: Optional[Any] = None) -> Any:
        """페이지 컨텍스트에서 스크립트 실행 후 결과 반환"""
        ...

    async def screenshot(self, path: str) -> None:
        """진단용 스크린샷 저장 (선택 기능)"""
        ...

    async def close(self) -> None:
        """엔진 리소스(프로세스 포함) 정리"""
        ...
