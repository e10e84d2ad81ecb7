"""High-value transaction rules.

Flags debits above the customer's debit threshold and credits above
the customer's credit threshold. The comparison is strict: an amount
equal to the threshold is not flagged.
"""

from bankguard.models import Transaction, TransactionType


def is_high_value_debit(txn: Transaction, threshold: float) -> bool:
    return txn.type == TransactionType.DEBIT and txn.amount > threshold


def is_high_value_credit(txn: Transaction, threshold: float) -> bool:
    return txn.type == TransactionType.CREDIT and txn.amount > threshold


def describe_alert(txn: Transaction, threshold: float) -> str:
    kind = "debit" if txn.type == TransactionType.DEBIT else "credit"
    return (
        f"High-value {kind} {txn.id}: amount ${txn.amount:.2f} exceeds "
        f"threshold of ${threshold:.2f} (channel {txn.channel}, terminal {txn.terminal_id})"
    )
