import asyncio
import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable

import pytest


class FastSchedule:
    """
    Schedule ticking every `seconds`, for driving the scheduler quickly in tests.
    """
    def __init__(self, seconds: float, tz: tzinfo = timezone.utc):
        self.seconds = seconds
        self.tz = tz

    def next(self, after: datetime) -> datetime:
        return after + timedelta(seconds=self.seconds)

    def describe(self) -> str:
        return f"every {self.seconds} second(s)"


async def _wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def wait_until() -> Callable:
    return _wait_until


@pytest.fixture
def fast_schedule() -> FastSchedule:
    return FastSchedule(0.05)


@pytest.fixture
def slow_schedule() -> FastSchedule:
    return FastSchedule(3600)
