import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

import pandas as pd
from tqdm import tqdm

from .commons import MatchResult
from .config import MatchConfig
from .engine import find_all, find_max

logger = logging.getLogger(__name__)

MODES = {"all": find_all, "max": find_max}

FRAME_COLUMNS = ['idx', 'length', 'start_pos1', 'end_pos1', 'start_pos2', 'end_pos2']


def match_batch(
    references: Sequence[Sequence],
    queries: Sequence[Sequence],
    config: Optional[MatchConfig] = None,
    mode: str = "max",
) -> List[MatchResult]:
    """
    Match each reference against the query at the same position.

    Parameters
    ----------
    references : Sequence of sequences
        Reference side of every pair
    queries : Sequence of sequences
        Query side of every pair
    config : MatchConfig, optional
        `progress` shows a tqdm bar, `workers > 1` runs pairs on a thread pool
    mode : str
        "max" for the longest runs only, "all" for the full histogram

    Returns
    -------
    List[MatchResult]
        One result per pair, in input order
    """
    if len(references) != len(queries):
        raise ValueError("references and queries must have the same length")
    if mode not in MODES:
        raise ValueError(f"Unknown mode {mode!r}, expected one of {sorted(MODES)}")

    config = config or MatchConfig()
    run = MODES[mode]
    pairs = zip(references, queries)
    progress = dict(total=len(references), desc="Finding matches", unit="pair", disable=not config.progress)

    logger.info(f"Matching {len(references)} sequence pairs (mode={mode}, workers={config.workers})")
    if config.workers == 1:
        return [run(ref, query, config) for ref, query in tqdm(pairs, **progress)]

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        futures = [executor.submit(run, ref, query, config) for ref, query in pairs]
        return [fut.result() for fut in tqdm(futures, **progress)]


def results_to_frame(
    results: Sequence[MatchResult],
    references: Sequence[Sequence],
    min_length: int = 1,
) -> pd.DataFrame:
    """
    Flatten batch results into one row per reported run.

    Position 1 refers to the reference and position 2 to the query; end
    positions are exclusive.
    """
    rows = []
    for idx, (result, ref) in enumerate(zip(results, references)):
        for match in result.to_matches(ref, idx=idx):
            if match.length < min_length:
                continue
            rows.append([getattr(match, column) for column in FRAME_COLUMNS])
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
