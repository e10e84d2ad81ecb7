"""Bank transaction store with on-demand fraud analysis.

Wires the customer directory, the per-customer transaction indexes and
the fraud analyzer behind a single facade. The interactive driver in
`bankguard.cli` is a thin layer over `BankSystem`.
"""

import json
from pathlib import Path
from typing import Iterator, Optional

import structlog

from bankguard.clock import Clock, RandomTiebreaker, SystemClock, Tiebreaker, make_time_key
from bankguard.errors import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    DuplicateTransactionIdError,
)
from bankguard.models import (
    Customer,
    FraudReport,
    RulesConfig,
    Transaction,
    TransactionRequest,
)
from bankguard.screening.engine import FraudAnalyzer
from bankguard.storage.btree import TransactionIndex
from bankguard.storage.directory import CustomerDirectory

# Resolve the data/ directory relative to this file so the driver works
# regardless of the current working directory.
DATA_DIR = Path(__file__).parent.parent / "data"

logger = structlog.get_logger()


class BankSystem:
    """Owns the customer directory and runs analyses against it."""

    def __init__(
        self,
        config: Optional[RulesConfig] = None,
        clock: Optional[Clock] = None,
        tiebreaker: Optional[Tiebreaker] = None,
    ) -> None:
        self.config = config or RulesConfig()
        self.clock = clock or SystemClock()
        self.tiebreaker = tiebreaker or RandomTiebreaker()
        self.directory = CustomerDirectory(self.config.bucket_count)
        self.analyzer = FraudAnalyzer(self.config)
        # Analyses that ended with a critical velocity finding
        self.incident_count = 0

    def add_customer(
        self,
        customer_id: int,
        name: str,
        debit_threshold: Optional[float] = None,
        credit_threshold: Optional[float] = None,
    ) -> Customer:
        """Create a customer with an empty transaction index.

        Raises DuplicateCustomerError if the id is taken; the directory
        is left unchanged.
        """
        existing = self.directory.find(customer_id)
        if existing is not None:
            raise DuplicateCustomerError(customer_id)

        customer = Customer(
            id=customer_id,
            name=name,
            debit_threshold=(
                self.config.default_debit_threshold
                if debit_threshold is None
                else debit_threshold
            ),
            credit_threshold=(
                self.config.default_credit_threshold
                if credit_threshold is None
                else credit_threshold
            ),
            index=TransactionIndex(self.config.min_degree),
        )
        self.directory.insert(customer)
        logger.info(
            "customer_added",
            customer_id=customer.id,
            bucket=self.directory.bucket_index(customer.id),
        )
        return customer

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self.directory.find(customer_id)

    def require_customer(self, customer_id: int) -> Customer:
        customer = self.directory.find(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        return customer

    def add_transaction(self, customer: Customer, request: TransactionRequest) -> Transaction:
        """Stamp a transaction with a time key and insert it into the customer's index.

        Raises DuplicateTransactionIdError if the customer already has a
        transaction with the same id; the index is left unchanged.
        """
        if customer.index.find_by_id(request.id) is not None:
            raise DuplicateTransactionIdError(customer.id, request.id)

        date_time = self.clock.now() if request.date_time is None else request.date_time
        txn = Transaction(
            id=request.id,
            time_key=make_time_key(date_time, self.tiebreaker.next()),
            date_time=date_time,
            type=request.type,
            amount=request.amount,
            counterparty_id=request.counterparty_id,
            channel=request.channel,
            terminal_id=request.terminal_id,
        )
        customer.index.insert(txn)
        logger.debug(
            "transaction_inserted",
            customer_id=customer.id,
            transaction_id=txn.id,
            time_key=txn.time_key,
            index_size=len(customer.index),
        )
        return txn

    def history(self, customer: Customer) -> Iterator[Transaction]:
        """Lazily yield the customer's transactions in time-key order."""
        return customer.index.in_order()

    def analyze(self, customer: Customer, now: Optional[int] = None) -> FraudReport:
        report = self.analyzer.analyze(customer, self.clock.now() if now is None else now)
        if report.is_incident:
            self.incident_count += 1
        return report

    def close(self) -> None:
        """Tear down the directory, releasing every customer and index."""
        self.directory.teardown()


def load_config(path: Optional[Path] = None) -> RulesConfig:
    """Load rule thresholds from JSON, or use defaults if the file is missing."""
    config_path = path if path is not None else DATA_DIR / "rules_config.json"
    if config_path.exists():
        with open(config_path, "r") as f:
            return RulesConfig(**json.load(f))
    return RulesConfig()


def create_system(
    config_path: Optional[Path] = None,
    clock: Optional[Clock] = None,
    tiebreaker: Optional[Tiebreaker] = None,
) -> BankSystem:
    config = load_config(config_path)
    system = BankSystem(config=config, clock=clock, tiebreaker=tiebreaker)
    logger.info(
        "bank_system_initialized",
        bucket_count=config.bucket_count,
        min_degree=config.min_degree,
    )
    return system


def load_demo_data(system: BankSystem, path: Optional[Path] = None) -> int:
    """Seed customers and their transactions from a JSON fixture file.

    Transactions may carry `offset_seconds`, applied to the system clock
    to spread them in time. Returns the number of transactions loaded.
    """
    demo_path = path if path is not None else DATA_DIR / "demo_customers.json"
    with open(demo_path, "r") as f:
        fixtures = json.load(f)

    loaded = 0
    now = system.clock.now()
    for entry in fixtures:
        customer = system.add_customer(
            entry["id"],
            entry["name"],
            entry.get("debit_threshold"),
            entry.get("credit_threshold"),
        )
        for raw in entry.get("transactions", []):
            fields = dict(raw)
            offset = fields.pop("offset_seconds", 0)
            fields.setdefault("date_time", now + offset)
            system.add_transaction(customer, TransactionRequest(**fields))
            loaded += 1
    logger.info("demo_data_loaded", customers=len(fixtures), transactions=loaded)
    return loaded
