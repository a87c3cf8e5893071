import numpy as np
import pytest

from seqmatch import LAYOUTS


def random_pair(seed, symbols, n1, n2):
    """Two random sequences over the first `symbols` capital letters."""
    rng = np.random.default_rng(seed)
    letters = np.array(list("ABCDEFGHIJKLMNOPQRSTUVWXYZ"[:symbols]))
    return rng.choice(letters, size=n1).tolist(), rng.choice(letters, size=n2).tolist()


def is_run(reference, query, row, col, length):
    """Check that a run of `length` ends at (row, col) and cannot be extended left."""
    if row - length + 1 < 0 or col - length + 1 < 0:
        return False
    for i in range(length):
        if query[row - i] != reference[col - i]:
            return False
    before_row, before_col = row - length, col - length
    if before_row >= 0 and before_col >= 0:
        return query[before_row] != reference[before_col]
    return True


@pytest.fixture(params=LAYOUTS)
def layout(request):
    return request.param


@pytest.fixture(params=[(7, 2, 60, 40), (11, 3, 100, 80), (23, 4, 150, 150), (42, 20, 300, 200)])
def random_sequences(request):
    return random_pair(*request.param)
