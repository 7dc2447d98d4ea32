# -*- coding: utf-8 -*-
"""
playtree.stats
==============

Outcome statistics for groups of plays.

Two kinds of summary exist.  :class:`OverallSummary` describes every play of
one type in the whole data set and is computed once, when the store is
finalized.  :class:`DetailedSummary` describes the plays of one type that fall
into a single tree leaf; besides its own statistics it records what share of
the leaf and what share of the type's data set total those plays represent.

All figures are integers, matching the way results are reported: averages use
integer division truncating toward zero, the spread is the truncated square
root of the integer population variance and rates are in tenths of a percent.
"""

from __future__ import annotations

import math

import numpy as np

from .play import PLAY_TYPE_COUNT, PlayType


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _trunc_div(num: int, den: int) -> int:
    q = abs(num) // abs(den)
    return q if (num >= 0) == (den >= 0) else -q

def _per_mille(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return (int(part) * 1000) // int(whole)


# -----------------------------------------------------------------------------
# Summaries
# -----------------------------------------------------------------------------
class OverallSummary:
    """Yardage and turnover figures for a group of same-type plays.

    Parameters
    ----------
    distances : array-like of int
        Yards gained on each play.
    turnover_count : int
        Number of those plays that ended in a turnover.
    """

    __slots__ = ("average_distance", "distance_variance", "turnover_percentage", "total_count")

    def __init__(self, distances, turnover_count: int):
        d = np.asarray(distances, dtype=np.int64)
        self.total_count = int(d.size)
        if self.total_count > 0:
            self.turnover_percentage = _per_mille(turnover_count, self.total_count)
            self.average_distance = _trunc_div(int(d.sum()), self.total_count)
            spread = int(((d - self.average_distance) ** 2).sum()) // self.total_count
            self.distance_variance = int(math.isqrt(spread))
        else:
            self.average_distance = 0
            self.distance_variance = 0
            self.turnover_percentage = 0

    def __repr__(self) -> str:
        return (f"OverallSummary(count={self.total_count}, avg={self.average_distance}, "
                f"var={self.distance_variance}, turnover={self.turnover_percentage})")


class DetailedSummary:
    """Statistics for the plays of one type inside one leaf.

    ``percent_of_condition_plays`` is the share of the leaf's plays of this
    type and ``percent_of_type_plays`` the share of all the data set's plays of
    this type, both per mille.  ``play_distances`` is kept sorted so summaries
    can be merged and inspected cheaply.

    Instances are not modified after creation; merging produces a new one.
    """

    __slots__ = ("play_distances", "turnover_count", "group", "overall",
                 "percent_of_condition_plays", "percent_of_type_plays")

    def __init__(self, distances, turnover_count: int, condition_play_count: int,
                 overall: OverallSummary):
        self.play_distances = np.sort(np.asarray(distances, dtype=np.int64))
        self.turnover_count = int(turnover_count)
        self.group = OverallSummary(self.play_distances, self.turnover_count)
        self.overall = overall
        self.percent_of_condition_plays = _per_mille(self.play_count, condition_play_count)
        self.percent_of_type_plays = _per_mille(self.play_count, overall.total_count)

    @property
    def play_count(self) -> int:
        return int(self.play_distances.size)

    @property
    def average_distance(self) -> int:
        return self.group.average_distance

    @property
    def distance_variance(self) -> int:
        return self.group.distance_variance

    @property
    def turnover_percentage(self) -> int:
        return self.group.turnover_percentage

    def with_condition_total(self, condition_play_count: int) -> "DetailedSummary":
        """Return a copy whose share of node is taken against a new total."""
        return DetailedSummary(self.play_distances, self.turnover_count,
                               condition_play_count, self.overall)

    def __str__(self) -> str:
        return (f"pct of category:{self.percent_of_condition_plays}"
                f" pct of all type plays:{self.percent_of_type_plays}"
                f" avg dist:{self.average_distance}"
                f" dist var:{self.distance_variance}"
                f" Turnover pct:{self.turnover_percentage}")

    def __repr__(self) -> str:
        return f"DetailedSummary(count={self.play_count}, {self})"


# -----------------------------------------------------------------------------
# Factory
# -----------------------------------------------------------------------------
class PlaySummaryFactory:
    """Builds summaries from indexed plays and merges them."""

    @staticmethod
    def _gather(table, ids):
        ids = np.asarray(ids, dtype=np.intp)
        types = table.play_type[ids]
        distances = table.distance_gained[ids]
        turnovers = np.bincount(types[table.turned_over[ids]], minlength=PLAY_TYPE_COUNT)
        return types, distances, turnovers

    @staticmethod
    def build_baseline(table) -> list[OverallSummary]:
        """One :class:`OverallSummary` per play type over every play in ``table``.

        The result is indexed by :class:`PlayType` and is the fixed
        denominator for every detailed summary built afterwards.
        """
        types, distances, turnovers = PlaySummaryFactory._gather(table, np.arange(len(table)))
        return [OverallSummary(distances[types == pt], int(turnovers[pt]))
                for pt in range(PLAY_TYPE_COUNT)]

    @staticmethod
    def build_detailed(index_set, baseline) -> dict[PlayType, DetailedSummary]:
        """Summaries of the plays an index set covers, keyed by play type.

        Only play types with at least one play get an entry.  Share of node is
        taken against the index set's record count, share of type against the
        matching ``baseline`` entry.
        """
        ids = index_set.record_ids()
        if ids.size == 0:
            return {}
        types, distances, turnovers = PlaySummaryFactory._gather(index_set.table, ids)
        total = int(ids.size)
        data = {}
        for pt in np.unique(types):
            pt = PlayType(int(pt))
            data[pt] = DetailedSummary(distances[types == pt], int(turnovers[pt]),
                                       total, baseline[pt])
        return data

    @staticmethod
    def merge(a: DetailedSummary, b: DetailedSummary, total_merged_plays: int) -> DetailedSummary:
        """Combine two summaries of the same play type.

        The baseline is data set wide, so share of type keeps its denominator;
        share of node is recomputed against ``total_merged_plays``.
        """
        distances = np.concatenate([a.play_distances, b.play_distances])
        return DetailedSummary(distances, a.turnover_count + b.turnover_count,
                               total_merged_plays, a.overall)

    @staticmethod
    def merge_data(result: dict, other: dict) -> dict[PlayType, DetailedSummary]:
        """Merge two leaf maps into a new one.

        Types found in both are merged; types found in only one are carried
        over.  Every entry's share of node is recomputed against the combined
        play count of both maps.
        """
        total = sum(s.play_count for s in result.values()) + sum(s.play_count for s in other.values())
        merged = {}
        for pt in sorted(set(result) | set(other)):
            if pt in result and pt in other:
                merged[pt] = PlaySummaryFactory.merge(result[pt], other[pt], total)
            else:
                source = result[pt] if pt in result else other[pt]
                merged[pt] = source.with_condition_total(total)
        return merged
