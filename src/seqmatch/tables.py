"""
Run tables: the sparse DP state of the matching engine.

A run table maps the end point of every live diagonal run to its length. The
scan in engine.py is written once against RunTable; the three layouts below
only differ in how they store and prune entries.

Every layout traverses its entries in row-major order and prunes every
qualifying entry, whatever order the entries were inserted in.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional, Tuple

import numpy as np
from numba import njit

from .commons import EndPoint
from .config import INITIAL_BUCKETS, LAYOUTS, MAX_LOAD_FACTOR

logger = logging.getLogger(__name__)


class RunTable(ABC):
    layout = ""

    @abstractmethod
    def get(self, row: int, col: int) -> int:
        """Length of the run ending at (row, col), 0 when there is none."""

    @abstractmethod
    def pop(self, row: int, col: int) -> int:
        """Remove the run ending at (row, col) and return its length (0 if absent)."""

    @abstractmethod
    def insert(self, row: int, col: int, length: int):
        ...

    @abstractmethod
    def prune(self, row: int, max_len: int) -> int:
        """
        Drop dead ends: runs ending before `row` that are shorter than `max_len`.

        Returns the number of removed entries.
        """

    @abstractmethod
    def items(self) -> Iterator[Tuple[EndPoint, int]]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...

    def hash_stats(self) -> Tuple[Optional[float], Optional[int]]:
        """(load factor, bucket count) for open-addressing layouts."""
        return None, None


class OrderedRunTable(RunTable):
    """Flat dict keyed by EndPoint tuples."""
    layout = "ordered"

    def __init__(self):
        self._entries: Dict[EndPoint, int] = {}

    def get(self, row, col):
        return self._entries.get((row, col), 0)

    def pop(self, row, col):
        return self._entries.pop((row, col), 0)

    def insert(self, row, col, length):
        self._entries[EndPoint(row, col)] = length

    def prune(self, row, max_len):
        dead = [point for point, length in self._entries.items() if point.row < row and length < max_len]
        for point in dead:
            del self._entries[point]
        return len(dead)

    def items(self):
        return iter(sorted(self._entries.items()))

    def __len__(self):
        return len(self._entries)


class NestedRunTable(RunTable):
    """Two-level table: row -> {col -> length}. Emptied rows are dropped whole."""
    layout = "nested"

    def __init__(self):
        self._rows: Dict[int, Dict[int, int]] = {}
        self._size = 0

    def get(self, row, col):
        cols = self._rows.get(row)
        if cols is None:
            return 0
        return cols.get(col, 0)

    def pop(self, row, col):
        cols = self._rows.get(row)
        if cols is None or col not in cols:
            return 0
        length = cols.pop(col)
        self._size -= 1
        if not cols:
            del self._rows[row]
        return length

    def insert(self, row, col, length):
        cols = self._rows.setdefault(row, {})
        if col not in cols:
            self._size += 1
        cols[col] = length

    def prune(self, row, max_len):
        removed = 0
        exhausted = []
        for r, cols in self._rows.items():
            if r >= row:
                continue
            dead = [c for c, length in cols.items() if length < max_len]
            for c in dead:
                del cols[c]
            removed += len(dead)
            if not cols:
                exhausted.append(r)
        for r in exhausted:
            del self._rows[r]
        self._size -= removed
        return removed

    def items(self):
        for row in sorted(self._rows):
            cols = self._rows[row]
            for col in sorted(cols):
                yield EndPoint(row, col), cols[col]

    def __len__(self):
        return self._size


# Composite keys pack the row into the high 32 bits and the column into the
# low 32 bits. All-ones marks an empty slot; positions never reach 2**32 - 1.
_EMPTY = np.uint64(0xFFFFFFFFFFFFFFFF)
_GOLDEN = np.uint64(0x9E3779B97F4A7C15)
_COL_BITS = np.uint64(32)
_COL_MASK = np.uint64(0xFFFFFFFF)


@njit
def _home(key, shift):
    # Fibonacci hashing: top bits of the product select the bucket
    return np.int64((key * _GOLDEN) >> shift)


@njit
def _find_slot(keys, key, shift):
    mask = keys.shape[0] - 1
    i = _home(key, shift)
    while keys[i] != key and keys[i] != _EMPTY:
        i = (i + 1) & mask
    return i


@njit
def _lookup(keys, values, key, shift):
    i = _find_slot(keys, key, shift)
    if keys[i] != key:
        return 0
    return values[i]


@njit
def _insert(keys, values, key, value, shift):
    i = _find_slot(keys, key, shift)
    added = keys[i] == _EMPTY
    keys[i] = key
    values[i] = value
    return added


@njit
def _delete_slot(keys, values, i, shift):
    """Backward-shift deletion, keeping every probe chain unbroken."""
    mask = keys.shape[0] - 1
    j = i
    while True:
        j = (j + 1) & mask
        k = keys[j]
        if k == _EMPTY:
            break
        home = _home(k, shift)
        # k stays put if its home bucket lies cyclically in (i, j]
        if i <= j:
            stays = i < home <= j
        else:
            stays = home > i or home <= j
        if not stays:
            keys[i] = k
            values[i] = values[j]
            i = j
    keys[i] = _EMPTY
    values[i] = 0


@njit
def _pop(keys, values, key, shift):
    i = _find_slot(keys, key, shift)
    if keys[i] != key:
        return 0
    value = values[i]
    _delete_slot(keys, values, i, shift)
    return value


@njit
def _prune(keys, values, row, max_len, shift):
    dead = np.empty(keys.shape[0], dtype=np.uint64)
    count = 0
    for i in range(keys.shape[0]):
        k = keys[i]
        if k != _EMPTY and values[i] < max_len and (k >> _COL_BITS) < row:
            dead[count] = k
            count += 1
    for n in range(count):
        _pop(keys, values, dead[n], shift)
    return count


@njit
def _rehash(keys, values, new_keys, new_values, shift):
    for i in range(keys.shape[0]):
        if keys[i] != _EMPTY:
            _insert(new_keys, new_values, keys[i], values[i], shift)


class PackedRunTable(RunTable):
    """
    Open-addressing hash table keyed on the packed (row, col) composite.

    Keys and lengths live in numpy arrays; probing, insertion, backward-shift
    deletion and pruning run as numba kernels. The bucket count is a power of
    two and doubles whenever the load would exceed MAX_LOAD_FACTOR.
    """
    layout = "packed"

    def __init__(self, buckets: int = INITIAL_BUCKETS):
        self._allocate(1 << max(int(buckets - 1).bit_length(), 1))
        self._size = 0

    def _allocate(self, capacity):
        self._keys = np.full(capacity, _EMPTY, dtype=np.uint64)
        self._values = np.zeros(capacity, dtype=np.int64)
        self._shift = np.uint64(64 - (capacity.bit_length() - 1))

    def _grow(self):
        keys, values = self._keys, self._values
        self._allocate(2 * len(keys))
        _rehash(keys, values, self._keys, self._values, self._shift)
        logger.debug(f"Packed run table grown to {len(self._keys)} buckets ({self._size} entries)")

    @staticmethod
    def pack(row: int, col: int) -> np.uint64:
        return np.uint64((row << 32) | col)

    @staticmethod
    def unpack(key) -> EndPoint:
        key = int(key)
        return EndPoint(key >> 32, key & 0xFFFFFFFF)

    def get(self, row, col):
        return int(_lookup(self._keys, self._values, self.pack(row, col), self._shift))

    def pop(self, row, col):
        length = int(_pop(self._keys, self._values, self.pack(row, col), self._shift))
        if length:
            self._size -= 1
        return length

    def insert(self, row, col, length):
        key = self.pack(row, col)
        if self._size + 1 > MAX_LOAD_FACTOR * len(self._keys):
            # overwriting a present key never needs room
            if _lookup(self._keys, self._values, key, self._shift) == 0:
                self._grow()
        if _insert(self._keys, self._values, key, length, self._shift):
            self._size += 1

    def prune(self, row, max_len):
        removed = int(_prune(self._keys, self._values, np.uint64(row), max_len, self._shift))
        self._size -= removed
        return removed

    def items(self):
        occupied = self._keys != _EMPTY
        keys = self._keys[occupied]
        order = np.argsort(keys, kind="stable")
        keys = keys[order]
        rows = (keys >> _COL_BITS).tolist()
        cols = (keys & _COL_MASK).tolist()
        lengths = self._values[occupied][order].tolist()
        for row, col, length in zip(rows, cols, lengths):
            yield EndPoint(row, col), length

    def __len__(self):
        return self._size

    def hash_stats(self):
        return self._size / len(self._keys), len(self._keys)


_TABLES = {
    OrderedRunTable.layout: OrderedRunTable,
    PackedRunTable.layout: PackedRunTable,
    NestedRunTable.layout: NestedRunTable,
}


def make_table(layout: str) -> RunTable:
    try:
        return _TABLES[layout]()
    except KeyError:
        raise ValueError(f"Unknown layout {layout!r}, expected one of {LAYOUTS}") from None
