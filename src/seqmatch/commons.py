from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Sequence


class SequenceTooLongError(ValueError):
    """Raised when a sequence has positions beyond the supported range."""


class EndPoint(NamedTuple):
    """Where a diagonal run ends: row indexes the query, col the reference."""
    row: int
    col: int


Runs = Dict[int, List[EndPoint]]


@dataclass
class Match:
    """Represents a matching substring between two sequences."""
    idx: int
    length: int
    start_pos1: int
    end_pos1: int
    start_pos2: int
    end_pos2: int
    values: Any

    def __repr__(self):
        return (
            f"Match(idx={self.idx}, "
            f"length={self.length}, "
            f"s1[{self.start_pos1}:{self.end_pos1}], "
            f"s2[{self.start_pos2}:{self.end_pos2}]), "
            f"values={self.values})"
        )


@dataclass(frozen=True)
class Diagnostics:
    """Table statistics collected during one matching call.

    Observational only; nothing in the scan reads these back.
    """
    layout: str
    peak_table_size: int = 0
    load_factor: Optional[float] = None
    bucket_count: Optional[int] = None


@dataclass(frozen=True)
class MatchResult:
    """Runs grouped by length, plus the diagnostics of the call that found them."""
    runs: Runs = field(default_factory=dict)
    diagnostics: Optional[Diagnostics] = None

    @property
    def max_length(self) -> int:
        return max(self.runs) if self.runs else 0

    def longest(self) -> List[EndPoint]:
        if not self.runs:
            return []
        return self.runs[self.max_length]

    def to_matches(self, reference: Sequence, idx: int = 0) -> List[Match]:
        """
        Convert every end point into a Match with half-open spans.

        Parameters
        ----------
        reference : Sequence
            Reference sequence (columns), reported as position 1 and the
            source of each Match.values; query spans are position 2
        idx : int
            Pair index stored on each Match

        Returns
        -------
        List[Match]
            Longest runs first, row-major within a length
        """
        matches = []
        for length in sorted(self.runs, reverse=True):
            for point in self.runs[length]:
                end1 = point.col + 1
                end2 = point.row + 1
                matches.append(
                    Match(
                        idx=idx,
                        length=length,
                        start_pos1=end1 - length,
                        end_pos1=end1,
                        start_pos2=end2 - length,
                        end_pos2=end2,
                        values=reference[end1 - length:end1],
                    )
                )
        return matches
