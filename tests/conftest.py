import queue
from datetime import datetime

import pytest


@pytest.fixture
def outbox():
    return queue.Queue()


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 1, 1, 12, 0, 0)
