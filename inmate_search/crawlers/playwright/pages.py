"""Playwright page 설정/보조 함수.

Page 생성 후 타임아웃, 자동화 흔적 숨김, 리소스 차단 등 공통 설정을 분리합니다.
"""

from __future__ import annotations

from playwright.async_api import Page

from inmate_search.core.config import BrowserConfig

from .scripts import STEALTH_INIT_SCRIPT


_BLOCKED_RESOURCE_TYPES = {"image", "media", "font"}
_BLOCKED_EXTENSIONS = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".webp",
    ".svg",
    ".woff",
    ".woff2",
    ".ttf",
    ".mp4",
)


def should_block(resource_type: str, url: str) -> bool:
    """이미지/미디어/폰트 요청 차단 여부"""
    if resource_type in _BLOCKED_RESOURCE_TYPES:
        return True
    lowered = (url or "").lower().split("?", 1)[0]
    return lowered.endswith(_BLOCKED_EXTENSIONS)


async def configure_page(page: Page, config: BrowserConfig) -> Page:
    page.set_default_timeout(config.default_timeout_ms)

    if config.disable_automation_flags:
        await page.add_init_script(STEALTH_INIT_SCRIPT)

    if config.block_resources:
        async def _route_handler(route, request):
            try:
                if should_block(request.resource_type, request.url):
                    await route.abort()
                    return
                await route.continue_()
            except Exception:
                # 페이지가 닫히는 중이면 라우팅 실패는 무시
                return

        await page.route("**/*", _route_handler)

    return page
