"""
Dense DP-matrix reference for the sparse engine.

Fills the whole (|Q|+1) x (|R|+1) run-length matrix, so memory grows with the
product of the sequence lengths. Used to cross-check the sparse engine and for
small inputs.
"""

from collections import defaultdict
from typing import Hashable, Sequence, Tuple

import numpy as np
from numba import jit

from .commons import EndPoint, Runs
from .index import encode_symbols


@jit(nopython=True)
def _compute_dp_matrix_2d(s1: np.ndarray, s2: np.ndarray) -> np.ndarray:
    """
    Compute the dynamic programming matrix for substring matching.

    Parameters
    ----------
    s1 : np.ndarray
        Row sequence (query codes)
    s2 : np.ndarray
        Column sequence (reference codes)

    Returns
    -------
    np.ndarray
        Dynamic programming matrix where dp[i,j] represents the length of
        the common substring ending at s1[i-1] and s2[j-1]
    """
    m, n = len(s1), len(s2)
    dp = np.zeros((m + 1, n + 1), dtype=np.int32)

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if s1[i-1] == s2[j-1]:
                dp[i, j] = dp[i-1, j-1] + 1

    return dp


@jit(nopython=True)
def _find_run_ends(dp: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Find the cells of the DP matrix where a run ends.
    Returns arrays of lengths, rows and cols (0-based sequence positions).
    """
    m, n = dp.shape
    # Pre-allocate maximum possible size
    max_ends = (m-1) * (n-1)
    lengths = np.zeros(max_ends, dtype=np.int32)
    rows = np.zeros(max_ends, dtype=np.int64)
    cols = np.zeros(max_ends, dtype=np.int64)

    count = 0
    for i in range(1, m):
        for j in range(1, n):
            length = dp[i, j]
            if length == 0:
                continue
            # the run continues if the next diagonal cell extends it
            if i + 1 < m and j + 1 < n and dp[i+1, j+1] > 0:
                continue
            lengths[count] = length
            rows[count] = i - 1
            cols[count] = j - 1
            count += 1

    return lengths[:count], rows[:count], cols[:count]


@jit(nopython=True)
def _find_longest_match(dp: np.ndarray) -> Tuple[int, int, int]:
    """
    Find the first longest run from the DP matrix directly.
    Returns (length, row, col) of its end, or (0, -1, -1) if nothing matches.
    """
    m, n = dp.shape
    max_length = 0
    end_row = end_col = -1

    for i in range(1, m):
        for j in range(1, n):
            length = dp[i, j]
            if length > max_length:
                max_length = length
                end_row = i - 1
                end_col = j - 1

    return max_length, end_row, end_col


def dense_run_lengths(reference: Sequence[Hashable], query: Sequence[Hashable]) -> np.ndarray:
    """Run-length matrix with query positions on axis 0 and reference positions on axis 1, both offset by one."""
    ref_codes, query_codes = encode_symbols(reference, query)
    return _compute_dp_matrix_2d(query_codes, ref_codes)


def dense_find_all(reference: Sequence[Hashable], query: Sequence[Hashable]) -> Runs:
    """Histogram of every run, keyed by ascending length, end points in row-major order."""
    lengths, rows, cols = _find_run_ends(dense_run_lengths(reference, query))
    grouped = defaultdict(list)
    for length, row, col in zip(lengths.tolist(), rows.tolist(), cols.tolist()):
        grouped[length].append(EndPoint(row, col))
    return {length: grouped[length] for length in sorted(grouped)}


def dense_longest(reference: Sequence[Hashable], query: Sequence[Hashable]) -> Tuple[int, int, int]:
    length, row, col = _find_longest_match(dense_run_lengths(reference, query))
    return int(length), int(row), int(col)
