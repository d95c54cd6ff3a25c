"""
Performance tracking for terminal-brief.
Records how long each module spent in setup and display.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple


@dataclass
class Timings:
    """Named durations in seconds, in the order they were recorded."""
    durations: Dict[str, float] = field(default_factory=dict)

    @contextmanager
    def measure(self, name: str) -> Iterator[None]:
        """Time the enclosed block and record it under name, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.durations[name] = round(time.perf_counter() - start, 3)

    def get(self, name: str) -> float:
        return self.durations.get(name, 0.0)

    def items(self) -> List[Tuple[str, float]]:
        return list(self.durations.items())
