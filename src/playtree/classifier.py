# -*- coding: utf-8 -*-
"""
playtree.classifier
===================

scikit-learn style estimator around the play tree.

:class:`PlayCallClassifier` takes raw situations as a feature matrix with the
columns ``down, distance_needed, yard_line, minutes, own_score, opp_score``
and the called play types as targets.  Outcomes (yards gained and turnovers)
are passed to :meth:`~PlayCallClassifier.fit` alongside, the way sample
weights are passed to other estimators, so that leaves carry full outcome
summaries.
"""

from __future__ import annotations

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from .play import PLAY_TYPE_COUNT, PlayType, Situation
from .store import DataStore
from .tree import MIN_GAIN_RATIO, build_tree, export_graphviz, export_text, prune_tree

FEATURE_NAMES = ["down", "distance_needed", "yard_line", "minutes", "own_score", "opp_score"]


class PlayCallClassifier(ClassifierMixin, BaseEstimator):
    """
    Decision tree classifier of play calls by game situation.

    Parameters
    ----------
    min_gain_ratio : float, default=0.02
        Minimum information gain ratio for a characteristic to be split on.
    pruning : bool, default=True
        Whether to merge over-fit leaves after the tree is built.

    Attributes
    ----------
    tree_ : TreeNode
        Root of the fitted (and pruned) tree.
    store_ : DataStore
        Store holding the training plays.
    classes_ : ndarray
        Play type codes seen during ``fit``, sorted.
    """

    def __init__(self, *, min_gain_ratio: float = MIN_GAIN_RATIO, pruning: bool = True):
        self.min_gain_ratio = min_gain_ratio
        self.pruning = pruning

    def fit(self, X, y, distance_gained=None, turned_over=None):
        """
        Build the tree from raw situations.

        Parameters
        ----------
        X : array-like of shape (n_samples, 6)
            Raw situations, columns as in ``FEATURE_NAMES``.
        y : array-like of shape (n_samples,)
            Play types (``PlayType`` members or their integer codes).
        distance_gained : array-like of shape (n_samples,), optional
            Yards gained on each play; zeros when omitted.
        turned_over : array-like of shape (n_samples,), optional
            Turnover flag of each play; all False when omitted.

        Returns
        -------
        self
        """
        X = np.asarray(X)
        y = np.asarray(y, dtype=int)
        if X.ndim != 2 or X.shape[1] != len(FEATURE_NAMES):
            raise ValueError(f"X must have {len(FEATURE_NAMES)} columns: {FEATURE_NAMES}")
        if len(y) != len(X):
            raise ValueError("X and y must have the same number of rows")
        if len(y) == 0:
            raise ValueError("Cannot fit on an empty data set")
        if np.any((y < 0) | (y >= PLAY_TYPE_COUNT)):
            raise ValueError("y contains unknown play types")
        gained = np.zeros(len(y), dtype=int) if distance_gained is None else np.asarray(distance_gained, dtype=int)
        lost = np.zeros(len(y), dtype=bool) if turned_over is None else np.asarray(turned_over, dtype=bool)
        if len(gained) != len(y) or len(lost) != len(y):
            raise ValueError("distance_gained and turned_over must have the same length as y")

        store = DataStore()
        for row, pt, g, t in zip(X, y, gained, lost):
            store.insert(PlayType(int(pt)), *(int(v) for v in row), int(g), bool(t))
        store.finalize()

        tree = build_tree(store.index_set(), store.baseline, self.min_gain_ratio)
        if self.pruning:
            tree = prune_tree(tree)
        self.store_ = store
        self.tree_ = tree
        self.classes_ = np.unique(y)
        counts = np.array([store.baseline[c].total_count for c in self.classes_], dtype=float)
        self.prior_ = counts / counts.sum()
        return self

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")

    def _situations(self, X):
        X = np.asarray(X)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        return [Situation.from_raw(*(int(v) for v in row)) for row in X]

    def find_plays(self, situation):
        """Leaf summaries for one situation (a ``Situation`` or raw values)."""
        self._check_fitted()
        if not isinstance(situation, Situation):
            situation = Situation.from_raw(*situation)
        return self.tree_.find_plays(situation)

    def predict(self, X):
        """
        Most frequent play type for each situation.

        Situations without historical precedent get the play type most
        frequent in the whole training set.

        Returns
        -------
        ndarray of shape (n_samples,)
        """
        self._check_fitted()
        return self.classes_[np.argmax(self.predict_proba(X), axis=1)]

    def predict_proba(self, X):
        """
        Share of each play type in the leaf reached by each situation.

        Returns
        -------
        ndarray of shape (n_samples, n_classes)
            Columns follow ``classes_``.  Rows for situations without
            precedent hold the training set's play type distribution.
        """
        self._check_fitted()
        rows = []
        for situation in self._situations(X):
            plays = self.tree_.find_plays(situation)
            counts = np.array([plays[PlayType(c)].play_count if PlayType(c) in plays else 0
                               for c in self.classes_], dtype=float)
            rows.append(counts / counts.sum() if counts.sum() > 0 else self.prior_)
        return np.array(rows)

    def export_text(self) -> str:
        self._check_fitted()
        return export_text(self.tree_)

    def print_tree(self):
        """Pretty-print the fitted tree to ``stdout``."""
        print(self.export_text(), end="")

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        self._check_fitted()
        return export_graphviz(self.tree_, filename, format=format)
