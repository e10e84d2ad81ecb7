"""Tests for the chained-hash customer directory."""

import pytest

from bankguard.models import Customer
from bankguard.storage.directory import CustomerDirectory
from tests.conftest import make_txn


def make_customer(customer_id, name="Test Customer"):
    return Customer(id=customer_id, name=name)


class TestBucketIndex:
    def test_division_method(self, directory):
        assert directory.bucket_count == 100
        assert directory.bucket_index(1001) == 1
        assert directory.bucket_index(42) == 42

    def test_negative_ids_use_absolute_value(self, directory):
        assert directory.bucket_index(-7) == 7
        assert directory.bucket_index(-1001) == 1

    def test_bucket_count_must_be_positive(self):
        with pytest.raises(ValueError):
            CustomerDirectory(bucket_count=0)


class TestInsertAndFind:
    def test_find_after_insert(self, directory):
        customer = make_customer(1001, "Alice Johnson")
        directory.insert(customer)
        assert directory.find(1001) is customer
        assert 1001 in directory
        assert len(directory) == 1

    def test_missing_customer(self, directory):
        directory.insert(make_customer(1))
        assert directory.find(2) is None
        assert directory.find(101) is None
        assert 2 not in directory

    def test_repeated_lookup_returns_same_handle(self, directory):
        directory.insert(make_customer(5))
        assert directory.find(5) is directory.find(5)

    def test_negative_id_roundtrip(self, directory):
        customer = make_customer(-15)
        directory.insert(customer)
        assert directory.find(-15) is customer
        assert directory.find(15) is None


class TestChaining:
    def test_colliding_ids_share_a_bucket(self):
        directory = CustomerDirectory(bucket_count=10)
        for customer_id in (1, 11, 21):
            directory.insert(make_customer(customer_id))

        for customer_id in (1, 11, 21):
            assert directory.find(customer_id).id == customer_id

        chain = directory.bucket(1)
        assert sorted(c.id for c in chain) == [1, 11, 21]

    def test_chain_is_newest_first(self):
        directory = CustomerDirectory(bucket_count=10)
        for customer_id in (1, 11, 21):
            directory.insert(make_customer(customer_id))
        assert [c.id for c in directory.bucket(1)] == [21, 11, 1]

    def test_bucket_returns_a_copy(self):
        directory = CustomerDirectory(bucket_count=10)
        directory.insert(make_customer(3))
        directory.bucket(3).clear()
        assert directory.find(3) is not None

    def test_duplicate_id_shadows_earlier_record(self, directory):
        first = make_customer(9, "First")
        second = make_customer(9, "Second")
        directory.insert(first)
        directory.insert(second)
        assert directory.find(9) is second
        assert first in directory.bucket(9)

    def test_iterates_every_customer(self):
        directory = CustomerDirectory(bucket_count=4)
        ids = [1, 2, 5, 9, 12]
        for customer_id in ids:
            directory.insert(make_customer(customer_id))
        assert sorted(c.id for c in directory) == ids


class TestTeardown:
    def test_teardown_releases_customers_and_indexes(self, directory):
        customer = make_customer(1)
        for i in range(1, 20):
            customer.index.insert(make_txn(i, time_key=i))
        directory.insert(customer)
        directory.insert(make_customer(2))

        directory.teardown()

        assert len(directory) == 0
        assert directory.find(1) is None
        assert list(directory) == []
        assert len(customer.index) == 0
