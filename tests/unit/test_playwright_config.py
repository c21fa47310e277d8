"""Playwright 실행 인자/리소스 차단 규칙 유닛 테스트 (브라우저 실행 없음)"""

import platform

import pytest

from inmate_search.core.config import Settings
from inmate_search.crawlers.playwright.browser import build_launch_args
from inmate_search.crawlers.playwright.pages import should_block


class TestLaunchArgs:
    def test_default_flags(self):
        args = build_launch_args(Settings().browser_config())

        assert "--disable-blink-features=AutomationControlled" in args
        assert "--disable-gpu" in args
        assert len(args) == len(set(args))

    def test_flags_disabled(self):
        config = Settings(
            browser_disable_automation_flags=False,
            browser_disable_gpu=False,
            browser_disable_sandbox=False,
        ).browser_config()

        args = build_launch_args(config)

        assert "--disable-blink-features=AutomationControlled" not in args
        assert "--disable-gpu" not in args
        assert "--no-sandbox" not in args

    @pytest.mark.skipif(platform.system().lower() != "linux", reason="sandbox flags are linux-only")
    def test_sandbox_flags_on_linux(self):
        args = build_launch_args(Settings().browser_config())
        assert "--no-sandbox" in args
        assert "--disable-setuid-sandbox" in args


class TestShouldBlock:
    @pytest.mark.parametrize(
        "resource_type,url,expected",
        [
            ("image", "https://example.org/a", True),
            ("font", "https://example.org/f", True),
            ("media", "https://example.org/v", True),
            ("other", "https://example.org/logo.PNG?v=2", True),
            ("document", "https://example.org/", False),
            ("script", "https://example.org/app.js", False),
            ("xhr", "https://example.org/api/search?q=png", False),
        ],
    )
    def test_should_block(self, resource_type, url, expected):
        assert should_block(resource_type, url) is expected
