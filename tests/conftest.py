"""Test configuration and fixtures for Stake Tracker."""
import os
import pytest
from unittest.mock import MagicMock
import aiohttp
from loguru import logger
from stake_tracker.core.stake import StakeRecord, YieldKind
from stake_tracker.core.store import RecordStore

class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, payload=None, status=200, error=None):
        self.payload = payload
        self.status = status
        self.error = error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                MagicMock(), (), status=self.status, message="Too Many Requests"
            )

    async def json(self, content_type="application/json"):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

class FakeSession:
    """Records GET calls and hands back a canned response."""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.calls = []

    def get(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        return self.response

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own settings out of the tests."""
    for name in list(os.environ):
        if name.startswith("STAKE_TRACKER_"):
            monkeypatch.delenv(name, raising=False)

@pytest.fixture
def make_session():
    """Factory for fake aiohttp sessions."""
    def _make(payload=None, status=200, error=None):
        return FakeSession(FakeResponse(payload=payload, status=status, error=error))
    return _make

@pytest.fixture
def log_messages():
    """Collect loguru output emitted during a test."""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)

@pytest.fixture
def store(tmp_path):
    """Record store backed by a temporary file."""
    return RecordStore(tmp_path / "stakes.json")

@pytest.fixture
def eth_stake():
    return StakeRecord(
        platform="Lido",
        staked_token="ETH",
        price_asset_id="ethereum",
        staked_quantity=1.5,
        derivative_token="stETH",
        fee_paid=0.0,
        yield_rate=3.5,
        yield_kind=YieldKind.APY,
        lockup_status="No",
        withdrawal_terms="7-14 days",
        wallet_label="MetaMask",
        notes="Liquid Staking",
        created_at=1700000000.0,
    )

@pytest.fixture
def usdc_stake():
    return StakeRecord(
        platform="Aave V3",
        staked_token="USDC",
        price_asset_id="usd-coin",
        staked_quantity=1000.0,
        derivative_token="aUSDC",
        fee_paid=0.10,
        yield_rate=2.15,
        yield_kind=YieldKind.APR,
        lockup_status="No",
        withdrawal_terms="Immediate",
        wallet_label="Trust Wallet",
        notes="Lending",
        created_at=1700000100.0,
    )
