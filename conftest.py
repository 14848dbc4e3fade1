import asyncio
import shutil
from pathlib import Path

import pytest

from backend import storage

TEST_DATA_DIR = Path("data-tests")
PRESETS_DIR = Path(__file__).parent / "presets"


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe and re-init data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR, presets_dir=PRESETS_DIR)
    yield
    # leave data-tests around after tests for inspection; CI can ignore it


class FakeClock:
    """Sleeper that records each wait instead of sleeping.

    Yields to the event loop once per wait so other tasks can interleave.
    If `observe` is set, its result is recorded alongside every wait.
    """

    def __init__(self, observe=None):
        self.waits: list[float] = []
        self.observed: list = []
        self.observe = observe

    async def __call__(self, seconds: float) -> None:
        self.waits.append(seconds)
        if self.observe is not None:
            self.observed.append(self.observe())
        await asyncio.sleep(0)

    @property
    def elapsed(self) -> float:
        return sum(self.waits)


@pytest.fixture
def clock():
    return FakeClock()
