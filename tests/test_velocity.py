"""Tests for the transaction velocity rule."""

import pytest

from bankguard.models import VelocityFinding, VelocityLevel
from bankguard.screening.rules.velocity import check_velocity, classify_velocity, describe_velocity
from tests.conftest import NOW, make_txn


def fill(index, recent=0, old=0):
    for i in range(recent):
        index.insert(make_txn(i, date_time=NOW - 60 * i))
    for i in range(old):
        index.insert(make_txn(1000 + i, date_time=NOW - 3601 - 60 * i))


class TestClassifyVelocity:
    @pytest.mark.parametrize(
        "count,level",
        [
            (0, VelocityLevel.NORMAL),
            (14, VelocityLevel.NORMAL),
            (15, VelocityLevel.WARNING),
            (24, VelocityLevel.WARNING),
            (25, VelocityLevel.CRITICAL),
            (100, VelocityLevel.CRITICAL),
        ],
    )
    def test_default_bands(self, count, level):
        assert classify_velocity(count) == level

    def test_custom_bands(self):
        assert classify_velocity(3, warning_threshold=2, critical_threshold=4) == VelocityLevel.WARNING
        assert classify_velocity(4, warning_threshold=2, critical_threshold=4) == VelocityLevel.CRITICAL


class TestCheckVelocity:
    def test_no_history(self, index):
        finding = check_velocity(index, NOW)
        assert finding.count == 0
        assert finding.level == VelocityLevel.NORMAL

    def test_critical_when_all_recent(self, index):
        fill(index, recent=25)
        finding = check_velocity(index, NOW)
        assert finding.count == 25
        assert finding.level == VelocityLevel.CRITICAL

    def test_warning_with_old_transactions_excluded(self, index):
        fill(index, recent=15, old=10)
        finding = check_velocity(index, NOW)
        assert finding.count == 15
        assert finding.level == VelocityLevel.WARNING

    def test_outside_window_not_counted(self, index):
        fill(index, old=30)
        assert check_velocity(index, NOW).level == VelocityLevel.NORMAL

    def test_window_start_is_inclusive(self, index):
        index.insert(make_txn(1, date_time=NOW - 3600))
        index.insert(make_txn(2, date_time=NOW - 3601))
        assert check_velocity(index, NOW).count == 1

    def test_custom_window(self, index):
        fill(index, recent=20)
        # Only transactions from the last 10 minutes: offsets 0..600 in steps of 60
        finding = check_velocity(index, NOW, window_seconds=600)
        assert finding.count == 11
        assert finding.level == VelocityLevel.NORMAL


class TestDescribeVelocity:
    def test_normal_has_no_reasons(self):
        assert describe_velocity(VelocityFinding(count=3, level=VelocityLevel.NORMAL)) == []

    def test_critical_reason(self):
        reasons = describe_velocity(VelocityFinding(count=30, level=VelocityLevel.CRITICAL))
        assert len(reasons) == 1
        assert "Hard velocity limit" in reasons[0]
        assert "30 transactions" in reasons[0]

    def test_warning_reason(self):
        reasons = describe_velocity(VelocityFinding(count=16, level=VelocityLevel.WARNING))
        assert "Elevated velocity" in reasons[0]
