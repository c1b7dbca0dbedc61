"""Shared pytest fixtures."""

from dataclasses import replace

import pytest

from cartsync import cache as C
from cartsync import mutation as M
from cartsync.config import Settings
from cartsync.storefront import Storefront

from support import FakeBackend, FakeNavigator, FakeSession, RecordingNotifier


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return C.OptimisticCache(clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def coordinator(cache, notifier, navigator):
    return M.Coordinator(cache, notifier, navigator, login_path="/auth")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def settings():
    return Settings(api_url="http://shop.test", timeout=5.0, tax_rate=0.21)


@pytest.fixture
def make_shop(backend, session, notifier, navigator, settings):
    """Build a Storefront against the fake backend."""

    def make(path: str = "/", **overrides) -> Storefront:
        shop_settings = replace(settings, **overrides)
        return Storefront.from_settings(
            shop_settings,
            session,
            notifier,
            navigator,
            transport=backend.transport(),
            path=path,
        )

    return make
