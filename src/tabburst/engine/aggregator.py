"""engine/aggregator.py — Count per-tab outcomes."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class Tally:
    """One boolean per tab; reports counts and a rounded success rate."""

    total: int
    results: list[bool] = field(default_factory=list)

    def add(self, outcomes: Iterable[bool]) -> Tally:
        self.results.extend(bool(o) for o in outcomes)
        return self

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(self.results)

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded

    @property
    def percent(self) -> int:
        """Success rate over ``total``, rounded half up."""
        if self.total <= 0:
            return 0
        return math.floor(self.succeeded / self.total * 100 + 0.5)

    def progress_line(self) -> str:
        return f"Progress: {self.processed}/{self.total} tabs processed, {self.succeeded} successful"

    def summary_line(self) -> str:
        return (
            f"Successfully triggered prompts on {self.succeeded}/{self.total} tabs "
            f"({self.percent}% success rate)"
        )
