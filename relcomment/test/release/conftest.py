from __future__ import annotations

import pytest

from fakes import FakeForge, FakeVcs


@pytest.fixture
def forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def vcs() -> FakeVcs:
    return FakeVcs()
