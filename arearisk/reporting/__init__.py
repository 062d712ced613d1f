"""Selection helpers consumed by downstream reporting and mapping."""

from .ranking import RankingReporter

__all__ = ["RankingReporter"]
