# playtree/__init__.py
"""
playtree: decision trees over football game situations.

Exports:
    - DataStore, PlayIndexSet
    - build_tree, prune_tree, export_text, export_graphviz
    - PlayCallClassifier
"""
from .errors import ConsistencyError
from .play import Characteristic, PlayType, Situation, SinglePlay
from .store import DataStore
from .index import PlayIndexSet
from .stats import DetailedSummary, OverallSummary, PlaySummaryFactory
from .tree import (MIN_GAIN_RATIO, DecisionNode, LeafNode, TreeNode, build_tree,
                   export_graphviz, export_text, prune_tree)
from .loader import PlayLoader
from .config import LoaderConfig
from .classifier import PlayCallClassifier

__all__ = [
    "ConsistencyError", "Characteristic", "PlayType", "Situation", "SinglePlay",
    "DataStore", "PlayIndexSet", "DetailedSummary", "OverallSummary", "PlaySummaryFactory",
    "MIN_GAIN_RATIO", "DecisionNode", "LeafNode", "TreeNode", "build_tree",
    "export_graphviz", "export_text", "prune_tree", "PlayLoader", "LoaderConfig",
    "PlayCallClassifier",
]
__version__ = "0.1.0"
