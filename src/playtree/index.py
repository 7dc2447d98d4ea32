# -*- coding: utf-8 -*-
"""
playtree.index
==============

Star-schema indexes over a finalized play table.

A :class:`PlayIndexSet` holds, for every characteristic still worth splitting
on, a partition of the same subset of plays: one array of play ids per
category.  Because every play carries its category code for every
characteristic, splitting the set on a characteristic only needs one direct
column lookup per play, instead of rebuilding the indexes from the plays or
searching for ids in sets.

Index sets are consumed destructively.  Splitting mutates the set in place so
that it describes the first populated category and returns new sets for the
others; a set is handed to exactly one tree node and is not reused.
"""

from __future__ import annotations

import logging

import numpy as np

from .errors import ConsistencyError
from .play import Characteristic

logger = logging.getLogger(__name__)

_EMPTY_IDS = np.empty(0, dtype=np.intp)


class PlayIndexSet:
    """Per-characteristic partitions of a subset of plays.

    Parameters
    ----------
    table : PlayTable
        Column table of the finalized store.  Play ids index its rows.
    partitions : dict
        ``{Characteristic: [ids_for_category_0, ids_for_category_1, ...]}``.
        Every partition must cover the same plays.

    Attributes
    ----------
    table : PlayTable
        The shared, read-only play table.
    """

    def __init__(self, table, partitions: dict):
        self.table = table
        self._partitions = {Characteristic(c): [np.asarray(ids, dtype=np.intp) for ids in cats]
                            for c, cats in partitions.items()}

    @classmethod
    def from_table(cls, table) -> "PlayIndexSet":
        """Index every play in ``table`` on every characteristic."""
        ids = np.arange(len(table), dtype=np.intp)
        partitions = {}
        for c in Characteristic:
            column = table.codes[:, c]
            partitions[c] = [ids[column == cat] for cat in range(c.category_count)]
            if not any(p.size for p in partitions[c]):
                raise ConsistencyError(
                    f"Index create failed, {c.label} index empty after build")
        return cls(table, partitions)

    def copy(self) -> "PlayIndexSet":
        other = PlayIndexSet(self.table, {})
        other._partitions = {c: list(cats) for c, cats in self._partitions.items()}
        return other

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def partition_for(self, characteristic) -> list[np.ndarray]:
        """Id arrays by category, or an empty list if the characteristic is not tracked."""
        return self._partitions.get(Characteristic(characteristic), [])

    def tracked_attributes(self) -> list[Characteristic]:
        return sorted(self._partitions)

    def record_ids(self) -> np.ndarray:
        """Ids of the covered plays, flattened from the first tracked partition."""
        if not self._partitions:
            return _EMPTY_IDS
        cats = self._partitions[self.tracked_attributes()[0]]
        return np.concatenate(cats) if cats else _EMPTY_IDS

    def __len__(self) -> int:
        if not self._partitions:
            return 0
        return sum(int(ids.size) for ids in self._partitions[self.tracked_attributes()[0]])

    # ------------------------------------------------------------------
    # Destructive operations
    # ------------------------------------------------------------------
    def drop(self, characteristic) -> None:
        """Stop tracking a characteristic.  The last tracked one is never dropped."""
        characteristic = Characteristic(characteristic)
        if len(self._partitions) == 1:
            return
        self._partitions.pop(characteristic, None)

    def split_by(self, characteristic) -> list["PlayIndexSet"]:
        """
        Split the covered plays by the categories of ``characteristic``.

        This set is changed to cover the first populated category; one new
        set per further populated category is returned, in category order.
        The split characteristic is dropped everywhere, since it can no longer
        discriminate.  When it is the last tracked characteristic it cannot be
        dropped, so it is split along with the others.

        Parameters
        ----------
        characteristic : Characteristic
            Characteristic to split on.

        Returns
        -------
        list[PlayIndexSet]
            The sibling sets.  Empty when fewer than two categories hold
            plays, in which case no split took place.

        Raises
        ------
        ConsistencyError
            If the pieces produced do not match the populated categories or
            plays are lost.
        """
        characteristic = Characteristic(characteristic)
        populated = [cat for cat, ids in enumerate(self.partition_for(characteristic)) if ids.size]
        before = len(self)
        self.drop(characteristic)
        if len(populated) <= 1:
            return []

        column = self.table.codes[:, characteristic]
        siblings = [PlayIndexSet(self.table, {}) for _ in populated[1:]]
        for c in self.tracked_attributes():
            groups = self._split_partition(self._partitions[c], column, populated)
            self._partitions[c] = groups[0]
            for sibling, group in zip(siblings, groups[1:]):
                sibling._partitions[c] = group

        after = len(self) + sum(len(s) for s in siblings)
        if after != before:
            raise ConsistencyError(
                f"Index split failed, {before} plays before split and {after} after")
        logger.debug("split %d plays on %s into %d pieces",
                     before, characteristic.label, len(populated))
        return siblings

    @staticmethod
    def _split_partition(partition, column, populated):
        # Re-bucket each category's ids by the split column: result is
        # indexed [split category][this partition's category].
        groups = [[] for _ in populated]
        counts = [0] * len(populated)
        for ids in partition:
            codes = column[ids]
            for g, cat in enumerate(populated):
                piece = ids[codes == cat]
                groups[g].append(piece)
                counts[g] += piece.size
        produced = sum(1 for n in counts if n)
        if produced != len(populated):
            raise ConsistencyError(
                f"Index split failed, generated {produced} pieces for "
                f"{len(populated)} populated categories")
        return groups

    def __repr__(self) -> str:
        names = ", ".join(c.label for c in self.tracked_attributes())
        return f"PlayIndexSet(plays={len(self)}, tracked=[{names}])"
