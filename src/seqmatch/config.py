from dataclasses import dataclass
from typing import Optional

# Positions are stored in 32-bit fields; the all-ones value is reserved
MAX_POSITION = 2 ** 32 - 2

LAYOUTS = ("ordered", "packed", "nested")
DEFAULT_ALL_LAYOUT = "ordered"
DEFAULT_MAX_LAYOUT = "packed"

# Open-addressing table parameters for the packed layout
INITIAL_BUCKETS = 64
MAX_LOAD_FACTOR = 0.7


@dataclass(frozen=True)
class MatchConfig:
    """Configuration for a matching call or a batch of them."""
    layout: Optional[str] = None
    max_position: int = MAX_POSITION
    progress: bool = False
    workers: int = 1

    def __post_init__(self):
        if self.layout is not None and self.layout not in LAYOUTS:
            raise ValueError(f"Unknown layout {self.layout!r}, expected one of {LAYOUTS}")
        if not 0 <= self.max_position <= MAX_POSITION:
            raise ValueError(f"max_position must be within [0, {MAX_POSITION}], got {self.max_position}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    def layout_for(self, default: str) -> str:
        return self.layout if self.layout is not None else default
