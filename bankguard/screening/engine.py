"""Fraud analyzer.

Runs the three checks over one customer's transaction history:
  1. Velocity (one range count over the index)
  2. High-value debits
  3. High-value credits
Checks 2 and 3 share a single in-order pass. The analyzer holds no
per-customer state and never mutates the customer.
"""

import structlog

from bankguard.models import Customer, FraudReport, RulesConfig, Transaction, VelocityLevel
from bankguard.screening.report import build_report, empty_report
from bankguard.screening.rules.amount import is_high_value_credit, is_high_value_debit
from bankguard.screening.rules.velocity import check_velocity

logger = structlog.get_logger()


class FraudAnalyzer:
    """Evaluates a customer's history against the velocity and amount rules."""

    def __init__(self, config: RulesConfig) -> None:
        self.config = config

    def analyze(self, customer: Customer, now: int) -> FraudReport:
        """Analyze a customer as of `now` (seconds since epoch).

        A customer with no transactions gets an all-clear report without
        touching the index.
        """
        if not customer.index:
            return empty_report(customer.id, now)

        velocity = check_velocity(
            index=customer.index,
            now=now,
            window_seconds=self.config.velocity_window_seconds,
            warning_threshold=self.config.velocity_warning_threshold,
            critical_threshold=self.config.velocity_critical_threshold,
        )

        debit_alerts: list[Transaction] = []
        credit_alerts: list[Transaction] = []
        for txn in customer.index.in_order():
            if is_high_value_debit(txn, customer.debit_threshold):
                debit_alerts.append(txn)
            elif is_high_value_credit(txn, customer.credit_threshold):
                credit_alerts.append(txn)

        report = build_report(
            customer_id=customer.id,
            analyzed_at=now,
            velocity=velocity,
            debit_alerts=debit_alerts,
            credit_alerts=credit_alerts,
            debit_threshold=customer.debit_threshold,
            credit_threshold=customer.credit_threshold,
            window_seconds=self.config.velocity_window_seconds,
        )

        if velocity.level == VelocityLevel.CRITICAL:
            logger.warning(
                "velocity_critical",
                customer_id=customer.id,
                count=velocity.count,
            )
        logger.info(
            "fraud_analysis_completed",
            customer_id=customer.id,
            velocity_level=velocity.level.value,
            velocity_count=velocity.count,
            debit_alerts=len(debit_alerts),
            credit_alerts=len(credit_alerts),
        )
        return report
