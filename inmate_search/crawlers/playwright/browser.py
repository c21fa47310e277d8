"""Playwright 브라우저 드라이버.

요청마다 독립된 playwright/browser/context/page를 띄우고,
BrowserDriver 프로토콜의 4가지 기능만 노출합니다.
"""

from __future__ import annotations

import platform
from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from inmate_search.core.config import BrowserConfig, WaitPolicy
from inmate_search.core.exceptions import NavigationException, NavigationTimeoutException
from inmate_search.core.logging import logger
from inmate_search.utils.text import first_line

from .pages import configure_page


_WAIT_UNTIL = {
    WaitPolicy.NETWORK_IDLE: "networkidle",
    WaitPolicy.DOM_READY: "domcontentloaded",
}


def build_launch_args(config: BrowserConfig) -> list[str]:
    args: list[str] = [
        "--disable-dev-shm-usage",
        "--disable-background-timer-throttling",
        "--disable-renderer-backgrounding",
        "--disable-default-apps",
        "--disable-extensions",
        "--no-first-run",
        "--no-default-browser-check",
    ]

    if config.disable_automation_flags:
        args.append("--disable-blink-features=AutomationControlled")

    if config.disable_gpu:
        args.extend(["--disable-gpu", "--disable-software-rasterizer"])

    if config.disable_sandbox and platform.system().lower() == "linux":
        args.extend(["--no-sandbox", "--disable-setuid-sandbox"])

    deduped: list[str] = []
    seen: set[str] = set()
    for a in args:
        if a not in seen:
            seen.add(a)
            deduped.append(a)
    return deduped


class PlaywrightDriver:
    """Playwright 기반 BrowserDriver 구현"""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page

    async def navigate(self, url: str, wait_policy: WaitPolicy, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, wait_until=_WAIT_UNTIL[wait_policy], timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutException(url, timeout_ms) from e
        except PlaywrightError as e:
            raise NavigationException(url, first_line(e)) from e

    async def evaluate(self, script: str, arg: Optional[Any] = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def screenshot(self, path: str) -> None:
        await self._page.screenshot(path=path, full_page=True)

    async def close(self) -> None:
        await _shutdown(self._playwright, self._browser, self._context)


async def _shutdown(
    playwright: Optional[Playwright],
    browser: Optional[Browser],
    context: Optional[BrowserContext],
) -> None:
    if context is not None:
        try:
            await context.close()
        except Exception as e:
            logger.debug(f"[Playwright] context close failed: {type(e).__name__}")
    if browser is not None:
        try:
            await browser.close()
        except Exception as e:
            logger.debug(f"[Playwright] browser close failed: {type(e).__name__}")
    if playwright is not None:
        try:
            await playwright.stop()
        except Exception as e:
            logger.debug(f"[Playwright] stop failed: {type(e).__name__}")


async def launch_playwright_driver(config: BrowserConfig) -> PlaywrightDriver:
    """브라우저 실행 후 설정 완료된 드라이버 반환

    실행 도중 실패하거나 취소되면 이미 띄운 리소스를 정리한 뒤 예외를 다시 던집니다.
    """
    playwright: Optional[Playwright] = None
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None

    try:
        logger.info(f"[Playwright] Launching browser (headless={config.headless})...")
        playwright = await async_playwright().start()
        browser = await playwright.chromium.launch(
            headless=config.headless,
            args=build_launch_args(config),
            timeout=config.launch_timeout_s * 1000,
        )
        context = await browser.new_context(
            user_agent=config.user_agent,
            viewport={"width": config.viewport_width, "height": config.viewport_height},
            locale="en-US",
            extra_http_headers={
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
        )
        page = await context.new_page()
        await configure_page(page, config)
    except BaseException:
        await _shutdown(playwright, browser, context)
        raise

    logger.info("[Playwright] Browser launched successfully")
    return PlaywrightDriver(playwright, browser, context, page)
