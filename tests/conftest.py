"""Shared fixtures for the test suite."""

import pytest

from p2parb.config import Config


@pytest.fixture
def config() -> Config:
    return Config(
        exchange_rate_api_base_url="https://rates.test",
        p2p_api_base_url="https://p2p.test",
        p2p_page_size=20,
    )
