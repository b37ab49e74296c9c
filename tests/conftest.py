import matplotlib

matplotlib.use("Agg")

import pytest

from mlfq.scheduler import MLFQScheduler
from mlfq.scheduler_base import SimulatedClock


@pytest.fixture
def make_scheduler():
    """tick 단위 시뮬레이션 시계를 가진 스케줄러 생성"""
    def _make(tick=10, processes=None, **kwargs):
        return MLFQScheduler(processes, clock=SimulatedClock(tick=tick), **kwargs)
    return _make
