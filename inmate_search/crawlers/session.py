"""Session Controller - 자동화 세션 생명주기 관리

세션은 요청 하나가 독점하며, 어떤 경로로 종료되든 정확히 한 번 해제됩니다.
"""

from __future__ import annotations

import asyncio
import itertools
from enum import Enum
from typing import Awaitable, Callable, Optional

from inmate_search.core.config import BrowserConfig
from inmate_search.core.exceptions import LaunchException
from inmate_search.core.logging import logger
from inmate_search.utils.text import describe_error

from .driver import BrowserDriver


DriverFactory = Callable[[BrowserConfig], Awaitable[BrowserDriver]]

_session_ids = itertools.count(1)


class SessionState(str, Enum):
    """세션 상태"""

    ACQUIRED = "acquired"
    IN_USE = "in_use"
    RELEASED = "released"


class BrowserSession:
    """자동화 세션 핸들 (드라이버 + 상태)"""

    def __init__(self, driver: BrowserDriver) -> None:
        self.driver = driver
        self.session_id = next(_session_ids)
        self.state = SessionState.ACQUIRED

    @property
    def released(self) -> bool:
        return self.state is SessionState.RELEASED

    def mark_in_use(self) -> None:
        if self.released:
            raise RuntimeError(f"Session {self.session_id} already released")
        self.state = SessionState.IN_USE

    def __repr__(self) -> str:
        return f"BrowserSession(id={self.session_id}, state={self.state.value})"


def _default_driver_factory() -> DriverFactory:
    from .playwright import launch_playwright_driver

    return launch_playwright_driver


class SessionController:
    """세션 획득/해제 담당

    Usage:
        controller = SessionController()
        session = await controller.acquire(settings.browser_config())
        async with controller.lease(session):
            await session.driver.navigate(...)
    """

    def __init__(self, driver_factory: Optional[DriverFactory] = None):
        """
        Args:
            driver_factory: BrowserConfig → BrowserDriver 생성 함수 (없으면 Playwright)
        """
        self._driver_factory = driver_factory or _default_driver_factory()

    async def acquire(self, config: BrowserConfig) -> BrowserSession:
        """새 세션 획득

        Raises:
            LaunchException: 엔진 실행 실패 (바이너리 없음, 리소스 부족, 타임아웃)
        """
        try:
            driver = await asyncio.wait_for(
                self._driver_factory(config),
                timeout=config.launch_timeout_s,
            )
        except LaunchException:
            raise
        except asyncio.TimeoutError as e:
            raise LaunchException(f"launch timed out after {config.launch_timeout_s}s") from e
        except Exception as e:
            raise LaunchException(describe_error(e)) from e

        session = BrowserSession(driver)
        logger.debug(f"[Session] acquired: {session}")
        return session

    async def release(self, session: BrowserSession) -> None:
        """세션 해제 (멱등 - 이미 해제된 세션이면 아무것도 하지 않음)"""
        if session.released:
            return
        session.state = SessionState.RELEASED
        try:
            await session.driver.close()
        except Exception as e:
            # 해제는 모든 종료 경로에서 호출되므로 예외를 전파하지 않음
            logger.warning(f"[Session] close failed for {session}: {type(e).__name__}: {e}")
        logger.debug(f"[Session] released: {session}")

    def lease(self, session: BrowserSession) -> "SessionLease":
        return SessionLease(self, session)


class SessionLease:
    """세션 소유권 핸들 (async context manager)

    진입 시 세션을 InUse로 전환하고, 종료 시(예외/취소 포함) 반드시 해제합니다.
    """

    def __init__(self, controller: SessionController, session: BrowserSession) -> None:
        self._controller = controller
        self._session = session

    async def __aenter__(self) -> BrowserSession:
        self._session.mark_in_use()
        return self._session

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._controller.release(self._session)
