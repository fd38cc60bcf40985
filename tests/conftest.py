import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mockxhr.core import MockXhr  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_hooks():
    MockXhr.reset_hooks()
    MockXhr.scheduler.clear()
    yield
    MockXhr.reset_hooks()
    MockXhr.scheduler.clear()


@pytest.fixture
def xhr() -> MockXhr:
    return MockXhr()
