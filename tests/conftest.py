"""Shared test fixtures for the cold-chain ledger."""

import logging

import pytest

from coldchain_ledger.alerts.engine import DeviationAlertEngine
from coldchain_ledger.batches.registry import BatchRegistry
from coldchain_ledger.common.config import ColdChainSettings
from coldchain_ledger.common.context import CallContext
from coldchain_ledger.incentives.accounting import IncentiveAccounting
from coldchain_ledger.settlement.native import NativeLedger


HMAC_KEY = "test-journal-key-for-unit-tests"
AUTHORITY = "ST2AUTH"
MANUFACTURER = "ST1MANUFACTURER"
DISTRIBUTOR = "ST2DISTRIBUTOR"
STAKER = "ST1STAKER"
OUTSIDER = "ST3HACKER"
BURN = "SP000000000000000000002Q6VF78"


def make_settings(**overrides) -> ColdChainSettings:
    defaults = {"hmac_key": HMAC_KEY, "db_url": "sqlite+aiosqlite://"}
    defaults.update(overrides)
    return ColdChainSettings(**defaults)


def ctx(caller: str, height: int = 100) -> CallContext:
    return CallContext(caller=caller, height=height)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def native():
    return NativeLedger()


@pytest.fixture
def registry(settings, native):
    return BatchRegistry(settings, native)


@pytest.fixture
def alerts(settings, native):
    return DeviationAlertEngine(settings, native)


@pytest.fixture
def incentives(settings):
    return IncentiveAccounting(settings)


@pytest.fixture
def cli_env(monkeypatch):
    """Point the cached settings at an in-memory journal for CLI runs."""
    monkeypatch.setenv("COLDCHAIN_DB_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("COLDCHAIN_HMAC_KEY", HMAC_KEY)

    from coldchain_ledger.common.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    package_logger = logging.getLogger("coldchain_ledger")
    package_logger.handlers.clear()
    package_logger.propagate = True
