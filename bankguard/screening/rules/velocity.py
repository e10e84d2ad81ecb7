"""Transaction velocity rule.

Counts a customer's transactions inside a fixed lookback window ending
at "now". A burst of activity is a common sign of account takeover or
card testing: 15 or more in an hour warrants attention, 25 or more
breaches the hard limit.
"""

from bankguard.models import VelocityFinding, VelocityLevel
from bankguard.storage.btree import TransactionIndex


def classify_velocity(
    count: int,
    warning_threshold: int = 15,
    critical_threshold: int = 25,
) -> VelocityLevel:
    if count >= critical_threshold:
        return VelocityLevel.CRITICAL
    if count >= warning_threshold:
        return VelocityLevel.WARNING
    return VelocityLevel.NORMAL


def check_velocity(
    index: TransactionIndex,
    now: int,
    window_seconds: int = 3600,
    warning_threshold: int = 15,
    critical_threshold: int = 25,
) -> VelocityFinding:
    """Count transactions with date_time >= now - window_seconds and classify them."""
    cutoff = now - window_seconds
    count = index.count_since(cutoff)
    return VelocityFinding(
        count=count,
        level=classify_velocity(count, warning_threshold, critical_threshold),
    )


def describe_velocity(finding: VelocityFinding, window_seconds: int = 3600) -> list[str]:
    """Human-readable reasons for a non-normal finding."""
    if finding.level == VelocityLevel.CRITICAL:
        return [
            f"Hard velocity limit exceeded: {finding.count} transactions in the last "
            f"{window_seconds} seconds"
        ]
    if finding.level == VelocityLevel.WARNING:
        return [
            f"Elevated velocity: {finding.count} transactions in the last "
            f"{window_seconds} seconds"
        ]
    return []
