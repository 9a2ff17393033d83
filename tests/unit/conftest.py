"""Shared fixtures: in-memory browser, options, virtual-time scheduler."""

import asyncio

import pytest

from imgsearch.app import Background
from imgsearch.browser.memory import (
    InMemoryBrowser,
    RecordingAction,
    RecordingContextMenu,
    RecordingNotifier,
)
from imgsearch.browser.models import Tab
from imgsearch.config.models import RuntimeConfig
from imgsearch.config.provider import MemoryOptionsStore
from imgsearch.store.scheduler import ManualScheduler

PNG_DATA_URI = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def source_tab():
    return Tab(id=1, index=4, url="https://site.example/gallery", active=True)


@pytest.fixture
def browser(source_tab):
    return InMemoryBrowser(tabs=[source_tab])


@pytest.fixture
def options():
    return MemoryOptionsStore({
        "engines": ["google", "bing", "yandex"],
        "disabledEngines": [],
    })


@pytest.fixture
def config():
    return RuntimeConfig(target_env="chrome")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def menus():
    return RecordingContextMenu()


@pytest.fixture
def action_surface():
    return RecordingAction()


@pytest.fixture
def background(browser, menus, action_surface, notifier, options, config, scheduler):
    bg = Background(
        browser=browser,
        menus=menus,
        action=action_surface,
        notifier=notifier,
        options=options,
        config=config,
        scheduler=scheduler,
    )
    run(bg.start())
    return bg
