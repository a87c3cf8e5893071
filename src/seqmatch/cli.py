import argparse
import logging
import string
from typing import List, Optional, Sequence

import numpy as np

from .commons import MatchResult
from .config import LAYOUTS, MatchConfig
from .engine import find_all, find_max
from .timer import ElapsedTimer

logger = logging.getLogger(__name__)


def format_grid(reference: Sequence, query: Sequence) -> str:
    """Match grid: '@' where query[row] == reference[col], '+' elsewhere."""
    lines = ["  " + "".join(str(c) for c in reference)]
    for q in query:
        lines.append(f"{q} " + "".join("@" if c == q else "+" for c in reference))
    return "\n".join(lines) + "\n"


def random_sequence(rng: np.random.Generator, symbols: int, n: int) -> List[str]:
    letters = string.ascii_uppercase[:symbols]
    return [letters[i] for i in rng.integers(0, symbols, size=n).tolist()]


def _print_longest(result: MatchResult):
    diag = result.diagnostics
    print(f"Max Map Sz = {diag.peak_table_size}")
    if diag.bucket_count is not None:
        print(f"Load Factor = {diag.load_factor:.3f} Buckets = {diag.bucket_count}")
    print(f"Max Length = {result.max_length}")
    for point in result.longest():
        print(f"{point.row},{point.col}")


def run_strings(args) -> int:
    reference, query = list(args.reference), list(args.query)
    result = find_all(reference, query)
    for length, points in result.runs.items():
        ends = " ".join(f"({p.row},{p.col})" for p in points)
        print(f"{length}: {len(points)} -> {ends}")
    if args.dump:
        print(format_grid(reference, query))
    return 0


def run_random(args) -> int:
    if not 1 <= args.symbols <= len(string.ascii_uppercase):
        logger.error(f"--symbols must be within [1, {len(string.ascii_uppercase)}], got {args.symbols}")
        return 2

    print("-------------------")
    print(f" SYM#={args.symbols} n1={args.n1} n2={args.n2}")

    rng = np.random.default_rng(args.seed)
    reference = random_sequence(rng, args.symbols, args.n1)
    query = random_sequence(rng, args.symbols, args.n2)
    if args.dump:
        print(format_grid(reference, query))

    for layout in args.layout or LAYOUTS:
        with ElapsedTimer() as timer:
            result = find_max(reference, query, MatchConfig(layout=layout))
        print(f"[{layout}] {timer.elapsed_time():.6f}s")
        _print_longest(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seqmatch", description="Longest common substring finder")
    parser.add_argument("--log-level", default="WARNING", help="Root logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    strings = subparsers.add_parser("strings", help="Histogram of every run between two literal strings")
    strings.add_argument("reference")
    strings.add_argument("query")
    strings.add_argument("--dump", action="store_true", help="Print the match grid")
    strings.set_defaults(func=run_strings)

    rand = subparsers.add_parser("random", help="Time the longest-run search on random sequences")
    rand.add_argument("--seed", type=int, default=12345)
    rand.add_argument("--symbols", type=int, default=20, help="Alphabet size")
    rand.add_argument("--n1", type=int, default=1000, help="Reference length")
    rand.add_argument("--n2", type=int, default=1000, help="Query length")
    rand.add_argument("--layout", action="append", choices=LAYOUTS, help="Repeat to time several layouts")
    rand.add_argument("--dump", action="store_true", help="Print the match grid")
    rand.set_defaults(func=run_random)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )
    return args.func(args)
