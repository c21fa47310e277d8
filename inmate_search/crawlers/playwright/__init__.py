"""Playwright module for the inmate search crawler."""

from .browser import PlaywrightDriver, build_launch_args, launch_playwright_driver
from .pages import configure_page

__all__ = [
    "PlaywrightDriver",
    "build_launch_args",
    "launch_playwright_driver",
    "configure_page",
]
