"""Pydantic models for the transaction store and fraud analyzer."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bankguard.clock import TIEBREAK_SPAN
from bankguard.storage.btree import MIN_DEGREE, TransactionIndex

# Fixed field capacities (one slot of each is reserved, as in a C string)
CHANNEL_CAPACITY = 10
NAME_CAPACITY = 50


class TransactionType(str, Enum):
    """Direction of funds flow relative to the customer's account."""
    DEBIT = "D"
    CREDIT = "C"

    @classmethod
    def _missing_(cls, value):
        # Accept "d", "debit", "CREDIT", ... in addition to the single letters
        if isinstance(value, str):
            token = value.strip().upper()
            for member in cls:
                if token in (member.value, member.name):
                    return member
        return None


class VelocityLevel(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class Transaction(BaseModel):
    """A transaction as stored in a customer's index. Immutable once built.

    `time_key` is the ordering key: the wall-clock second scaled by 10^6
    plus a sub-second tiebreaker, so ordering by `time_key` also orders
    by `date_time`.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    time_key: int
    date_time: int  # seconds since epoch
    type: TransactionType
    amount: float
    counterparty_id: int
    channel: str
    terminal_id: int

    @field_validator("channel")
    @classmethod
    def _truncate_channel(cls, value: str) -> str:
        return value[: CHANNEL_CAPACITY - 1]

    @model_validator(mode="after")
    def _check_time_key(self) -> "Transaction":
        if self.time_key // TIEBREAK_SPAN != self.date_time:
            raise ValueError(
                f"time_key {self.time_key} does not belong to second {self.date_time}"
            )
        return self

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.date_time, tz=timezone.utc)


class TransactionRequest(BaseModel):
    """Caller-supplied fields for a new transaction.

    The time key is assigned on insertion. `date_time` defaults to the
    system clock; passing it explicitly records a backdated entry.
    """
    id: int
    type: TransactionType
    amount: float
    counterparty_id: int = 0
    channel: str = "WEB"
    terminal_id: int = 0
    date_time: Optional[int] = None

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value):
        if isinstance(value, str):
            return TransactionType(value)
        return value


class Customer(BaseModel):
    """A customer record owning its own transaction index."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: int
    name: str
    debit_threshold: float = Field(default=5000.0, ge=0)
    credit_threshold: float = Field(default=10000.0, ge=0)
    index: TransactionIndex = Field(default_factory=TransactionIndex, exclude=True)

    @field_validator("name")
    @classmethod
    def _truncate_name(cls, value: str) -> str:
        return value[: NAME_CAPACITY - 1]

    @property
    def transaction_count(self) -> int:
        return len(self.index)


class VelocityFinding(BaseModel):
    """Number of transactions inside the velocity window and its classification."""
    count: int
    level: VelocityLevel


class FraudReport(BaseModel):
    """Result of analyzing one customer's transaction history."""
    customer_id: int
    analyzed_at: int
    velocity: VelocityFinding
    debit_alerts: list[Transaction]
    credit_alerts: list[Transaction]
    reasons: list[str]
    matched_rules: list[str]

    @property
    def is_incident(self) -> bool:
        return self.velocity.level == VelocityLevel.CRITICAL


class RulesConfig(BaseModel):
    """Tunable thresholds and structural parameters."""
    velocity_window_seconds: int = 3600
    velocity_warning_threshold: int = 15
    velocity_critical_threshold: int = 25
    bucket_count: int = Field(default=100, ge=1)
    min_degree: int = Field(default=MIN_DEGREE, ge=2)
    default_debit_threshold: float = Field(default=5000.0, ge=0)
    default_credit_threshold: float = Field(default=10000.0, ge=0)

    @model_validator(mode="after")
    def _check_velocity_bands(self) -> "RulesConfig":
        if self.velocity_window_seconds <= 0:
            raise ValueError("velocity_window_seconds must be positive")
        if self.velocity_warning_threshold > self.velocity_critical_threshold:
            raise ValueError(
                "velocity_warning_threshold must not exceed velocity_critical_threshold"
            )
        return self
