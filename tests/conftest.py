"""Shared fixtures for the test suite."""

import pytest
import structlog

from bankguard.clock import FixedClock, SequenceTiebreaker
from bankguard.main import BankSystem
from bankguard.models import RulesConfig, Transaction, TransactionRequest, TransactionType
from bankguard.storage.btree import TransactionIndex
from bankguard.storage.directory import CustomerDirectory

# 2026-02-22T12:00:00Z
NOW = 1771761600


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


@pytest.fixture
def config():
    return RulesConfig()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def tiebreaker():
    return SequenceTiebreaker()


@pytest.fixture
def index():
    return TransactionIndex()


@pytest.fixture
def directory():
    return CustomerDirectory()


@pytest.fixture
def system(config, clock, tiebreaker):
    return BankSystem(config=config, clock=clock, tiebreaker=tiebreaker)


def make_txn(
    txn_id=1,
    time_key=None,
    date_time=None,
    type="D",
    amount=100.0,
    counterparty_id=9001,
    channel="WEB",
    terminal_id=101,
) -> Transaction:
    """Build a transaction directly, bypassing the clock.

    With only `date_time` given the time key is date_time * 10**6 + id;
    with only `time_key` given the date_time is derived from it.
    """
    if time_key is None and date_time is None:
        date_time = NOW
    if time_key is None:
        time_key = date_time * 1_000_000 + txn_id
    if date_time is None:
        date_time = time_key // 1_000_000
    return Transaction(
        id=txn_id,
        time_key=time_key,
        date_time=date_time,
        type=TransactionType(type),
        amount=amount,
        counterparty_id=counterparty_id,
        channel=channel,
        terminal_id=terminal_id,
    )


def make_request(
    txn_id=1,
    type="D",
    amount=100.0,
    date_time=None,
    channel="WEB",
    counterparty_id=9001,
    terminal_id=101,
) -> TransactionRequest:
    return TransactionRequest(
        id=txn_id,
        type=type,
        amount=amount,
        counterparty_id=counterparty_id,
        channel=channel,
        terminal_id=terminal_id,
        date_time=date_time,
    )
