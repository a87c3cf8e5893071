from collections import defaultdict
from typing import Dict, Hashable, List, Sequence, Tuple

import numpy as np

from .commons import SequenceTooLongError
from .config import MAX_POSITION


def build_index(reference: Sequence[Hashable]) -> Dict[Hashable, List[int]]:
    """
    Map each distinct symbol to the ascending positions where it occurs.

    Parameters
    ----------
    reference : Sequence
        Reference sequence (the column axis of the match grid)

    Returns
    -------
    dict
        Symbol -> list of positions; empty for an empty reference
    """
    index = defaultdict(list)
    for pos, symbol in enumerate(reference):
        index[symbol].append(pos)
    return dict(index)


def validate_length(sequence: Sequence, name: str, max_position: int = MAX_POSITION):
    """Reject a sequence whose last position would not fit in max_position."""
    last = len(sequence) - 1
    if last > max_position:
        raise SequenceTooLongError(
            f"{name} sequence has {len(sequence)} symbols; "
            f"last position {last} exceeds the supported maximum {max_position}"
        )


def encode_symbols(reference: Sequence[Hashable], query: Sequence[Hashable]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Encode both sequences with one shared symbol -> code table.

    Equal symbols get equal codes across both sequences, so the results can be
    compared inside numba kernels regardless of the original symbol type.
    """
    codes = {}
    ref_codes = np.fromiter(
        (codes.setdefault(symbol, len(codes)) for symbol in reference),
        dtype=np.int64,
        count=len(reference),
    )
    query_codes = np.fromiter(
        (codes.setdefault(symbol, len(codes)) for symbol in query),
        dtype=np.int64,
        count=len(query),
    )
    return ref_codes, query_codes
