"""Ordered Transaction Index: a per-customer B-tree keyed by time key.

Every non-root node holds between t-1 and 2t-1 transactions; internal
nodes hold one more child than keys. Insertion is single-pass and
top-down: any full node about to be entered is split first, so the
recursion never lands in a full node.

The tree is ordered on `time_key`, not on the transaction id, so lookups
by id scan the whole tree.
"""

from bisect import bisect_left, bisect_right
from operator import attrgetter
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional

import structlog

if TYPE_CHECKING:
    from bankguard.models import Transaction

logger = structlog.get_logger()

MIN_DEGREE = 3

_time_key = attrgetter("time_key")
_date_time = attrgetter("date_time")


class BTreeNode:
    """A single node: sorted keys plus, when internal, len(keys) + 1 children."""

    __slots__ = ("keys", "children", "is_leaf")

    def __init__(self, is_leaf: bool) -> None:
        self.keys: List["Transaction"] = []
        self.children: List["BTreeNode"] = []
        self.is_leaf = is_leaf

    @property
    def n(self) -> int:
        return len(self.keys)

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf else "internal"
        return f"BTreeNode({kind}, keys={[k.time_key for k in self.keys]})"


class TransactionIndex:
    """B-tree of transactions for one customer.

    Supports insert-with-split, in-order traversal, lookup by
    transaction id, and counting transactions at or after a cutoff.
    """

    def __init__(self, min_degree: int = MIN_DEGREE) -> None:
        if min_degree < 2:
            raise ValueError(f"min_degree must be at least 2, got {min_degree}")
        self._t = min_degree
        self._root: Optional[BTreeNode] = None
        self._size = 0

    @property
    def min_degree(self) -> int:
        return self._t

    @property
    def max_keys(self) -> int:
        return 2 * self._t - 1

    @property
    def root(self) -> Optional[BTreeNode]:
        return self._root

    @property
    def height(self) -> int:
        """Number of levels; 0 for an empty index."""
        depth = 0
        node = self._root
        while node is not None:
            depth += 1
            node = None if node.is_leaf else node.children[0]
        return depth

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator["Transaction"]:
        return self.in_order()

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def insert(self, txn: "Transaction") -> None:
        """Place a transaction in the tree, splitting full nodes on the way down.

        Duplicate time keys and duplicate ids are accepted; id uniqueness
        is enforced by the caller.
        """
        root = self._root
        if root is None:
            root = BTreeNode(is_leaf=True)
            self._root = root
        elif root.n == self.max_keys:
            new_root = BTreeNode(is_leaf=False)
            new_root.children.append(root)
            self._split_child(new_root, 0)
            self._root = new_root
            root = new_root
            logger.debug(
                "btree_root_split",
                height=self.height,
                median_time_key=new_root.keys[0].time_key,
            )
        self._insert_non_full(root, txn)
        self._size += 1

    def _insert_non_full(self, node: BTreeNode, txn: "Transaction") -> None:
        key = txn.time_key
        while not node.is_leaf:
            i = bisect_right(node.keys, key, key=_time_key)
            if node.children[i].n == self.max_keys:
                self._split_child(node, i)
                if key >= node.keys[i].time_key:
                    i += 1
            node = node.children[i]
        # Equal keys are placed after existing ones
        node.keys.insert(bisect_right(node.keys, key, key=_time_key), txn)

    def _split_child(self, parent: BTreeNode, i: int) -> None:
        """Split the full child at `parent.children[i]` around its median.

        The upper t-1 keys (and t children) move to a new right sibling and
        the median moves up into `parent` at position i.
        """
        t = self._t
        full = parent.children[i]
        sibling = BTreeNode(is_leaf=full.is_leaf)

        median = full.keys[t - 1]
        sibling.keys = full.keys[t:]
        full.keys = full.keys[: t - 1]
        if not full.is_leaf:
            sibling.children = full.children[t:]
            full.children = full.children[:t]

        parent.children.insert(i + 1, sibling)
        parent.keys.insert(i, median)

    # ------------------------------------------------------------------
    # Traversal and queries
    # ------------------------------------------------------------------

    def in_order(self) -> Iterator["Transaction"]:
        """Yield every transaction in ascending time-key order.

        Each call returns a fresh iterator; nodes are visited with an
        explicit stack so deep trees don't hit the recursion limit.
        """
        if self._root is None:
            return
        # Stack of (node, next key position)
        stack = [(self._root, 0)]
        while stack:
            node, pos = stack.pop()
            if node.is_leaf:
                yield from node.keys
                continue
            if pos > 0:
                yield node.keys[pos - 1]
            if pos < node.n:
                stack.append((node, pos + 1))
            stack.append((node.children[pos], 0))

    def walk(self, visit: Callable[["Transaction"], None]) -> None:
        """Call `visit` on every transaction in ascending time-key order."""
        for txn in self.in_order():
            visit(txn)

    def find_by_id(self, txn_id: int) -> Optional["Transaction"]:
        """Return the first transaction with the given id, or None.

        Nodes are searched depth-first; a node's own keys are scanned
        before its children, left to right.
        """
        if self._root is None:
            return None
        stack = [self._root]
        while stack:
            node = stack.pop()
            for txn in node.keys:
                if txn.id == txn_id:
                    return txn
            stack.extend(reversed(node.children))
        return None

    def count_since(self, cutoff: int) -> int:
        """Count transactions whose `date_time` is at or after `cutoff`.

        Relies on time-key order implying date_time order: subtrees left
        of the first qualifying key are skipped and subtrees right of it
        are counted wholesale.
        """
        if self._root is None:
            return 0
        total = 0
        node = self._root
        while True:
            first = bisect_left(node.keys, cutoff, key=_date_time)
            total += node.n - first
            if node.is_leaf:
                return total
            for child in node.children[first + 1:]:
                total += _subtree_size(child)
            # Only the child just left of the first qualifying key straddles the cutoff
            node = node.children[first]

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def clear(self) -> int:
        """Release every node, children before parents. Returns the node count."""
        if self._root is None:
            return 0
        released = 0
        stack = [(self._root, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded or node.is_leaf:
                node.keys = []
                node.children = []
                released += 1
                continue
            stack.append((node, True))
            stack.extend((child, False) for child in node.children)
        self._root = None
        self._size = 0
        return released


def _subtree_size(node: BTreeNode) -> int:
    size = 0
    stack = [node]
    while stack:
        current = stack.pop()
        size += current.n
        stack.extend(current.children)
    return size
