"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import pytest

from fakes import FakeFetcher


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def no_sleep():
    delays = []
    return delays.append, delays
