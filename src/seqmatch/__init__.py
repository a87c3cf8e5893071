"""Longest common substring finder over arbitrary symbol sequences."""

from .batch import match_batch, results_to_frame
from .commons import Diagnostics, EndPoint, Match, MatchResult, SequenceTooLongError
from .config import LAYOUTS, MAX_POSITION, MatchConfig
from .dense import dense_find_all, dense_longest, dense_run_lengths
from .engine import SeqMatcher, find_all, find_max
from .index import build_index, encode_symbols
from .tables import NestedRunTable, OrderedRunTable, PackedRunTable, RunTable, make_table
from .timer import ElapsedTimer

__all__ = [
    "find_all",
    "find_max",
    "SeqMatcher",
    "MatchConfig",
    "MatchResult",
    "Diagnostics",
    "EndPoint",
    "Match",
    "SequenceTooLongError",
    "LAYOUTS",
    "MAX_POSITION",
    "build_index",
    "encode_symbols",
    "RunTable",
    "OrderedRunTable",
    "PackedRunTable",
    "NestedRunTable",
    "make_table",
    "dense_run_lengths",
    "dense_find_all",
    "dense_longest",
    "match_batch",
    "results_to_frame",
    "ElapsedTimer",
]
