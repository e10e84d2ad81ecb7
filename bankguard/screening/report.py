"""Report assembly.

Combines the three independent findings into a single FraudReport with
the reasons and rule codes that fired, in a fixed order: velocity first,
then debit alerts, then credit alerts.
"""

from bankguard.models import FraudReport, Transaction, VelocityFinding, VelocityLevel
from bankguard.screening.rules.amount import describe_alert
from bankguard.screening.rules.velocity import describe_velocity

_VELOCITY_RULES = {
    VelocityLevel.WARNING: "VELOCITY_WARNING",
    VelocityLevel.CRITICAL: "VELOCITY_CRITICAL",
}


def build_report(
    customer_id: int,
    analyzed_at: int,
    velocity: VelocityFinding,
    debit_alerts: list[Transaction],
    credit_alerts: list[Transaction],
    debit_threshold: float,
    credit_threshold: float,
    window_seconds: int = 3600,
) -> FraudReport:
    reasons: list[str] = describe_velocity(velocity, window_seconds)
    matched_rules: list[str] = []

    if velocity.level in _VELOCITY_RULES:
        matched_rules.append(_VELOCITY_RULES[velocity.level])
    if debit_alerts:
        matched_rules.append("HIGH_VALUE_DEBIT")
        reasons.extend(describe_alert(t, debit_threshold) for t in debit_alerts)
    if credit_alerts:
        matched_rules.append("HIGH_VALUE_CREDIT")
        reasons.extend(describe_alert(t, credit_threshold) for t in credit_alerts)

    return FraudReport(
        customer_id=customer_id,
        analyzed_at=analyzed_at,
        velocity=velocity,
        debit_alerts=debit_alerts,
        credit_alerts=credit_alerts,
        reasons=reasons,
        matched_rules=matched_rules,
    )


def empty_report(customer_id: int, analyzed_at: int) -> FraudReport:
    return FraudReport(
        customer_id=customer_id,
        analyzed_at=analyzed_at,
        velocity=VelocityFinding(count=0, level=VelocityLevel.NORMAL),
        debit_alerts=[],
        credit_alerts=[],
        reasons=[],
        matched_rules=[],
    )
