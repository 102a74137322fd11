import pytest

from app.services.ghl.filter_builder import DashboardType
from app.services.metrics_cache import MetricsCache


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metrics_cache(clock):
    return MetricsCache(ttl_seconds=240, clock=clock)


@pytest.fixture
def tag_counts_caches(clock):
    return {dashboard_type: MetricsCache(ttl_seconds=300, clock=clock) for dashboard_type in DashboardType}
