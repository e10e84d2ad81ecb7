"""Customer directory: a fixed-size chained hash table keyed by customer id.

Each bucket is a chain of customer records, newest first. Lookups walk
the chain for `abs(id) % bucket_count`. Duplicate ids are rejected one
level up, in the banking facade.
"""

from typing import Iterator, List, Optional

import structlog

from bankguard.models import Customer

logger = structlog.get_logger()

DEFAULT_BUCKET_COUNT = 100


class CustomerDirectory:
    """In-memory directory of customers and, through them, their transactions."""

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT) -> None:
        if bucket_count < 1:
            raise ValueError(f"bucket_count must be at least 1, got {bucket_count}")
        self._buckets: List[List[Customer]] = [[] for _ in range(bucket_count)]
        self._count = 0

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def bucket_index(self, customer_id: int) -> int:
        """Division-method hash; the absolute value keeps negative ids in range."""
        return abs(customer_id) % len(self._buckets)

    def bucket(self, index: int) -> List[Customer]:
        """Return a copy of the chain stored at `index`, head first."""
        return list(self._buckets[index])

    def insert(self, customer: Customer) -> None:
        """Prepend a customer to its bucket's chain.

        The caller must have checked for an existing record with the same
        id; a duplicate would shadow the older record on lookup.
        """
        index = self.bucket_index(customer.id)
        self._buckets[index].insert(0, customer)
        self._count += 1
        logger.debug(
            "customer_chained",
            customer_id=customer.id,
            bucket=index,
            chain_length=len(self._buckets[index]),
        )

    def find(self, customer_id: int) -> Optional[Customer]:
        """Return the first customer in the chain with a matching id."""
        for customer in self._buckets[self.bucket_index(customer_id)]:
            if customer.id == customer_id:
                return customer
        return None

    def __contains__(self, customer_id: int) -> bool:
        return self.find(customer_id) is not None

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Customer]:
        for chain in self._buckets:
            yield from chain

    def teardown(self) -> None:
        """Release every customer and its transaction index."""
        released_nodes = 0
        for chain in self._buckets:
            for customer in chain:
                released_nodes += customer.index.clear()
            chain.clear()
        logger.info(
            "directory_torn_down",
            customers=self._count,
            released_nodes=released_nodes,
        )
        self._count = 0
