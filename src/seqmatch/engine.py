import logging
from collections import defaultdict
from typing import Hashable, Optional, Sequence, Tuple

from .commons import Diagnostics, MatchResult
from .config import DEFAULT_ALL_LAYOUT, DEFAULT_MAX_LAYOUT, MatchConfig
from .index import build_index, validate_length
from .tables import RunTable, make_table

logger = logging.getLogger(__name__)


def _scan(reference: Sequence[Hashable], query: Sequence[Hashable], table: RunTable, prune: bool) -> Tuple[int, int, int]:
    """
    Walk the query row by row, extending diagonal runs in `table`.

    Parameters
    ----------
    reference : Sequence
        Column axis of the match grid
    query : Sequence
        Row axis of the match grid
    table : RunTable
        Empty table that receives the runs
    prune : bool
        Drop dead ends after every row

    Returns
    -------
    tuple
        (max_len, peak_table_size, pruned_entries)
    """
    index = build_index(reference)
    max_len = 0
    peak = 0
    pruned = 0

    for row, symbol in enumerate(query):
        for col in index.get(symbol, ()):
            length = 1
            if row > 0 and col > 0:
                # the run ending at the predecessor now ends here
                length += table.pop(row - 1, col - 1)
            table.insert(row, col, length)
            if length > max_len:
                max_len = length

        peak = max(peak, len(table))
        if prune:
            # a run from an earlier row missed its only chance to extend
            pruned += table.prune(row, max_len)

    return max_len, peak, pruned


def _prepare(reference, query, config: Optional[MatchConfig], default_layout: str) -> Tuple[MatchConfig, str]:
    config = config or MatchConfig()
    validate_length(reference, "reference", config.max_position)
    validate_length(query, "query", config.max_position)
    return config, config.layout_for(default_layout)


def _diagnostics(table: RunTable, peak: int) -> Diagnostics:
    load_factor, bucket_count = table.hash_stats()
    return Diagnostics(
        layout=table.layout,
        peak_table_size=peak,
        load_factor=load_factor,
        bucket_count=bucket_count,
    )


def find_all(reference: Sequence[Hashable], query: Sequence[Hashable], config: Optional[MatchConfig] = None) -> MatchResult:
    """
    Find every diagonal run and group the end points by run length.

    Parameters
    ----------
    reference : Sequence
        Reference sequence, indexed by the `col` of each end point
    query : Sequence
        Query sequence, indexed by the `row` of each end point
    config : MatchConfig, optional
        Layout and position limit; the ordered layout is used by default

    Returns
    -------
    MatchResult
        Runs keyed by ascending length, every run of the grid included

    Raises
    ------
    SequenceTooLongError
        If either sequence has positions beyond `config.max_position`
    """
    config, layout = _prepare(reference, query, config, DEFAULT_ALL_LAYOUT)
    if len(reference) == 0 or len(query) == 0:
        return MatchResult({}, Diagnostics(layout=layout))

    table = make_table(layout)
    _, peak, _ = _scan(reference, query, table, prune=False)

    grouped = defaultdict(list)
    for point, length in table.items():
        grouped[length].append(point)
    runs = {length: grouped[length] for length in sorted(grouped)}

    logger.debug(
        f"find_all[{layout}]: |R|={len(reference)} |Q|={len(query)} "
        f"runs={len(table)} peak={peak}"
    )
    return MatchResult(runs, _diagnostics(table, peak))


def find_max(reference: Sequence[Hashable], query: Sequence[Hashable], config: Optional[MatchConfig] = None) -> MatchResult:
    """
    Find the longest diagonal run(s) while pruning dead ends after every row.

    Ties are all reported under the single maximal length key. Uses the packed
    layout unless `config.layout` says otherwise; every layout gives the same
    answer.
    """
    config, layout = _prepare(reference, query, config, DEFAULT_MAX_LAYOUT)
    if len(reference) == 0 or len(query) == 0:
        return MatchResult({}, Diagnostics(layout=layout))

    table = make_table(layout)
    max_len, peak, pruned = _scan(reference, query, table, prune=True)

    runs = {}
    if len(table) > 0:
        runs[max_len] = [point for point, length in table.items() if length == max_len]

    logger.debug(
        f"find_max[{layout}]: |R|={len(reference)} |Q|={len(query)} "
        f"max_len={max_len} peak={peak} pruned={pruned}"
    )
    return MatchResult(runs, _diagnostics(table, peak))


class SeqMatcher:
    """Reusable matcher; keeps only its configuration between calls."""

    def __init__(self, config: Optional[MatchConfig] = None):
        self.config = config or MatchConfig()

    def run_all(self, reference, query) -> MatchResult:
        return find_all(reference, query, self.config)

    def run_max(self, reference, query) -> MatchResult:
        return find_max(reference, query, self.config)
