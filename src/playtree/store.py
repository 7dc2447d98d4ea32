# -*- coding: utf-8 -*-
"""
playtree.store
==============

Append-only play store.

The store has two phases.  Plays are inserted first; :meth:`DataStore.finalize`
then marks the end of loading and derives everything else from them: a column
table of the plays, the index set over that table and the data set wide
summary of every play type.  Plays inserted after finalizing are kept but are
not part of any derived data.
"""

from __future__ import annotations

import logging

import numpy as np

from .index import PlayIndexSet
from .play import Characteristic, SinglePlay
from .stats import PlaySummaryFactory

logger = logging.getLogger(__name__)


class PlayTable:
    """Column view of the plays of a finalized store.

    Row ``i`` is the play with ``ref_id == i``.  Index sets refer to plays by
    row number only, so the table is the single owner of play data.

    Attributes
    ----------
    codes : ndarray of shape (n_plays, 5)
        Category code of every characteristic, columns in ``Characteristic`` order.
    play_type : ndarray of shape (n_plays,)
    distance_gained : ndarray of shape (n_plays,)
    turned_over : ndarray of shape (n_plays,), bool
    """

    def __init__(self, plays):
        plays = list(plays)
        n = len(plays)
        self.codes = np.zeros((n, len(Characteristic)), dtype=np.int8)
        self.play_type = np.zeros(n, dtype=np.intp)
        self.distance_gained = np.zeros(n, dtype=np.int64)
        self.turned_over = np.zeros(n, dtype=bool)
        for i, play in enumerate(plays):
            self.codes[i] = [int(v) for v in play.situation]
            self.play_type[i] = play.play_type
            self.distance_gained[i] = play.distance_gained
            self.turned_over[i] = play.turned_over

    def __len__(self) -> int:
        return int(self.play_type.shape[0])


class DataStore:
    """Collection of plays plus the indexes and baseline derived from them."""

    def __init__(self):
        self._plays: list[SinglePlay] = []
        self.table: PlayTable | None = None
        self._indexes: PlayIndexSet | None = None
        self.baseline = None

    def insert(self, play_type, down: int, distance_needed: int, yard_line: int,
               minutes: int, own_score: int, opp_score: int,
               distance_gained: int, turned_over: bool) -> SinglePlay:
        """Add a play from raw values; its id is its position in the store."""
        play = SinglePlay(len(self._plays), play_type, down, distance_needed, yard_line,
                          minutes, own_score, opp_score, distance_gained, turned_over)
        self._plays.append(play)
        return play

    @property
    def finalized(self) -> bool:
        return self._indexes is not None

    def finalize(self) -> None:
        """
        Build the indexes and the per play type baseline.

        Does nothing on an empty store or when already finalized.

        Raises
        ------
        ConsistencyError
            If an index is empty after the build.
        """
        if self.finalized:
            logger.warning("finalize called twice; later plays are not indexed")
            return
        if not self._plays:
            logger.warning("finalize called on an empty play store")
            return
        self.table = PlayTable(self._plays)
        self._indexes = PlayIndexSet.from_table(self.table)
        self.baseline = PlaySummaryFactory.build_baseline(self.table)
        logger.info("indexed %d plays", len(self.table))

    def index_set(self) -> PlayIndexSet:
        """A fresh copy of the full index set, for a tree build to consume."""
        if self._indexes is None:
            raise ValueError("Store not finalized. Call finalize() after inserting plays.")
        return self._indexes.copy()

    def __len__(self) -> int:
        return len(self._plays)

    def __getitem__(self, ref_id: int) -> SinglePlay:
        return self._plays[ref_id]

    def __iter__(self):
        return iter(self._plays)
