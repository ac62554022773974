from __future__ import annotations

from typing import Callable

import pytest

from tests.lumberjack_installer.support import FakeRunner


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner
