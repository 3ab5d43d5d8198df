"""Global test configuration and fixtures."""

import os

import pytest

from eni_lifecycle.config.settings import ReconcilerConfig
from eni_lifecycle.infrastructure.resilience.poller import Poller
from tests.fixtures.fake_provider import FakeNetworkInterfaceClient


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    os.environ.update(
        {
            "AWS_DEFAULT_REGION": "eu-west-1",
            "AWS_ACCESS_KEY_ID": "testing",
            "AWS_SECRET_ACCESS_KEY": "testing",
            "AWS_SECURITY_TOKEN": "testing",
            "AWS_SESSION_TOKEN": "testing",
        }
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def poller(clock: FakeClock) -> Poller:
    """Poller with a 5 second interval bound to the fake clock."""
    return Poller(interval=5.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def reconciler_config() -> ReconcilerConfig:
    """Default deadlines with a small page size to exercise pagination."""
    return ReconcilerConfig(page_size=5)


@pytest.fixture
def fake_client() -> FakeNetworkInterfaceClient:
    return FakeNetworkInterfaceClient()
