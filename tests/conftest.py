from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from tests.shared.virtual_timers import CallRecorder, VirtualTimerService  # noqa: E402


@pytest.fixture
def timers() -> VirtualTimerService:
    return VirtualTimerService()


@pytest.fixture
def recorder(timers: VirtualTimerService) -> CallRecorder:
    return CallRecorder(timers.now)
