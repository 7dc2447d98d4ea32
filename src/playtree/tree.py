# -*- coding: utf-8 -*-
"""
playtree.tree
=============

Decision tree over play situations.

The tree is grown top down from a :class:`~playtree.index.PlayIndexSet`.  At
every node each still tracked characteristic is scored with the information
gain ratio; characteristics scoring below :data:`MIN_GAIN_RATIO` are dropped
from the index set for good, so neither this node nor its descendants look at
them again.  If some characteristic clears the threshold the node becomes a
:class:`DecisionNode` with one child per populated category, otherwise it
becomes a :class:`LeafNode` holding a summary of the plays it covers.

Play calling is probabilistic, and information gain keeps splitting long after
the point where a coach's choice actually changes.  :func:`prune_tree`
therefore walks the finished tree bottom up and merges sibling leaves that
look like noise or that agree on which plays matter.

The module also renders a tree as indented text and as a Graphviz graph.
"""

from __future__ import annotations

import logging

import numpy as np

from .errors import ConsistencyError
from .play import PLAY_TYPE_COUNT, Characteristic, Situation
from .stats import PlaySummaryFactory

logger = logging.getLogger(__name__)

# Lower limit of the information gain ratio for a split to be worth making.
MIN_GAIN_RATIO = 0.02

# Pruning: a play type is significant in a leaf when its share is at least
# 3/4 of the leaf's largest share; leaves whose most frequent type has at
# most LOW_SAMPLE_COUNT plays treat every type as significant.
SIGNIFICANT_NUM, SIGNIFICANT_DEN = 3, 4
LOW_SAMPLE_COUNT = 5


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _entropy(dist_vec: np.ndarray) -> float:
    tot = dist_vec.sum()
    if tot <= 0:
        return 0.0
    p = dist_vec / tot
    p = p[p > 0]
    return float(-np.sum(p * np.log2(p)))

def _split_info(children: list[np.ndarray]) -> float:
    tot = sum(d.sum() for d in children)
    if tot <= 0:
        return 0.0
    w = [d.sum() / tot for d in children if d.sum() > 0]
    return float(-sum(wi * np.log2(wi) for wi in w))

def _gain_ratio(parent: np.ndarray, children: list[np.ndarray]) -> float:
    g = _entropy(parent) - sum(d.sum() / max(parent.sum(), 1e-12) * _entropy(d) for d in children)
    s = _split_info(children)
    return float(g / s) if s > 0 else 0.0

def _play_counts(table, ids) -> np.ndarray:
    return np.bincount(table.play_type[ids], minlength=PLAY_TYPE_COUNT)

def characteristic_gain_ratio(index_set, characteristic, parent: np.ndarray | None = None) -> float:
    """
    Information gain ratio of splitting an index set on one characteristic.

    Parameters
    ----------
    index_set : PlayIndexSet
        Plays to split.
    characteristic : Characteristic
        Candidate split.
    parent : ndarray, optional
        Play counts by type for the whole set; computed when omitted.

    Returns
    -------
    float
        ``0.0`` when the plays occupy a single category.
    """
    table = index_set.table
    if parent is None:
        parent = _play_counts(table, index_set.record_ids())
    children = [_play_counts(table, ids) for ids in index_set.partition_for(characteristic) if ids.size]
    if len(children) <= 1:
        return 0.0
    return _gain_ratio(parent, children)


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
class TreeNode:
    """Common interface of decision nodes and leaves."""

    is_leaf: bool = False

    def find_plays(self, situation: Situation) -> dict:
        raise NotImplementedError

    def find_plays_raw(self, down: int, distance_needed: int, yard_line: int,
                       minutes: int, own_score: int, opp_score: int) -> dict:
        """Same as :meth:`find_plays`, taking the situation as raw values."""
        return self.find_plays(Situation.from_raw(down, distance_needed, yard_line,
                                                  minutes, own_score, opp_score))

    def iter_leaves(self):
        raise NotImplementedError

    def prune(self) -> "TreeNode":
        raise NotImplementedError

    @property
    def depth(self) -> int:
        raise NotImplementedError


class LeafNode(TreeNode):
    """Terminal node: summaries of its plays keyed by play type.

    An empty ``plays`` map means there is no historical precedent for the
    situation.
    """

    is_leaf = True

    def __init__(self, plays: dict):
        self.plays = dict(sorted(plays.items()))

    @property
    def play_count(self) -> int:
        return sum(s.play_count for s in self.plays.values())

    def find_plays(self, situation):
        return self.plays

    def iter_leaves(self):
        yield self

    def prune(self):
        return self

    @property
    def depth(self) -> int:
        return 0

    def __repr__(self) -> str:
        return f"LeafNode(plays={self.play_count}, types={[pt.name for pt in self.plays]})"


class DecisionNode(TreeNode):
    """Internal node splitting on one characteristic.

    Attributes
    ----------
    characteristic : Characteristic
        Split attribute.
    category_children : dict
        ``{category: child slot}``.  Only populated categories appear; slots
        follow category order.
    children : list[TreeNode]
        Owned child nodes, one per populated category.
    plays : dict
        Always empty; returned for categories never seen in training.
    """

    def __init__(self, characteristic, category_children: dict, children: list):
        self.characteristic = Characteristic(characteristic)
        self.category_children = dict(category_children)
        self.children = list(children)
        self.plays: dict = {}

    def find_plays(self, situation):
        slot = self.category_children.get(situation.value(self.characteristic))
        if slot is None:
            return self.plays
        return self.children[slot].find_plays(situation)

    def iter_leaves(self):
        for child in self.children:
            yield from child.iter_leaves()

    @property
    def depth(self) -> int:
        return 1 + max(child.depth for child in self.children)

    def prune(self) -> TreeNode:
        """
        Prune the subtree under this node; return the node to keep in its place.

        Children that are decision nodes are pruned first.  Only when every
        child is then a leaf is this node itself considered, and it collapses
        into a single :class:`LeafNode` when any of the merge heuristics holds.
        """
        self.children = [child if child.is_leaf else child.prune() for child in self.children]
        if not all(child.is_leaf for child in self.children):
            return self
        if not _should_merge(self.children):
            return self
        plays = self.children[0].plays
        for child in self.children[1:]:
            plays = PlaySummaryFactory.merge_data(plays, child.plays)
        logger.debug("merged %d leaves split on %s", len(self.children), self.characteristic.label)
        return LeafNode(plays)

    def __repr__(self) -> str:
        return f"DecisionNode({self.characteristic.label}, children={len(self.children)})"


# -----------------------------------------------------------------------------
# Pruning heuristics
# -----------------------------------------------------------------------------
def _is_single_play_leaf(leaf: LeafNode) -> bool:
    return len(leaf.plays) == 1 and next(iter(leaf.plays.values())).play_count == 1

def _significant_types(leaf: LeafNode) -> frozenset:
    if not leaf.plays:
        return frozenset()
    most_frequent = max(s.play_count for s in leaf.plays.values())
    if most_frequent <= LOW_SAMPLE_COUNT:
        return frozenset(leaf.plays)
    threshold = max(s.percent_of_condition_plays for s in leaf.plays.values())
    threshold = threshold * SIGNIFICANT_NUM // SIGNIFICANT_DEN
    return frozenset(pt for pt, s in leaf.plays.items()
                     if s.percent_of_condition_plays >= threshold)

def _should_merge(leaves: list[LeafNode]) -> bool:
    # Leaves holding one play are almost surely the result of splitting a
    # probabilistic call; merge if all, or all but one, are like that.
    singles = sum(1 for leaf in leaves if _is_single_play_leaf(leaf))
    if singles >= len(leaves) - 1:
        return True

    significant = [_significant_types(leaf) for leaf in leaves]
    any_significant = frozenset().union(*significant)
    all_significant = frozenset.intersection(*significant)
    if any_significant == all_significant:
        return True

    single_types, multi_types = set(), set()
    total = 0
    for leaf in leaves:
        for pt, s in leaf.plays.items():
            total += s.play_count
            (multi_types if s.play_count > 1 else single_types).add(pt)
    single_only = frozenset(single_types - multi_types)
    some_not_all = any_significant - all_significant
    if single_only != some_not_all:
        return False
    rare = sum(s.play_count for leaf in leaves for pt, s in leaf.plays.items() if pt in single_only)
    return 2 * rare <= total


# -----------------------------------------------------------------------------
# Build / prune entry points
# -----------------------------------------------------------------------------
def build_tree(index_set, baseline, min_gain_ratio: float = MIN_GAIN_RATIO) -> TreeNode:
    """
    Grow a decision tree from an index set.

    The index set is consumed: characteristics found useless are dropped from
    it and it is split in place to serve as the first child's input.  Do not
    use it afterwards.

    Parameters
    ----------
    index_set : PlayIndexSet
        Plays to classify.  Must not be empty.
    baseline : list[OverallSummary]
        Data set wide summary per play type, used by every leaf.
    min_gain_ratio : float, default=MIN_GAIN_RATIO
        Minimum information gain ratio for a characteristic to be split on.

    Returns
    -------
    TreeNode
        Root of the fully built subtree.

    Raises
    ------
    ConsistencyError
        If the index set is empty or a split does not produce the expected
        pieces.
    """
    table = index_set.table
    parent = _play_counts(table, index_set.record_ids())
    if parent.sum() == 0:
        raise ConsistencyError("DecisionNode create failed, passed play store empty")

    chosen = None
    # A single play type means no gain is possible.
    if np.count_nonzero(parent) > 1:
        for characteristic in index_set.tracked_attributes():
            populated = sum(1 for ids in index_set.partition_for(characteristic) if ids.size)
            ratio = characteristic_gain_ratio(index_set, characteristic, parent)
            # One populated category cannot split, whatever the threshold.
            if populated <= 1 or ratio < min_gain_ratio:
                index_set.drop(characteristic)
            else:
                # Last characteristic clearing the threshold wins, not the best one.
                chosen = characteristic
                logger.debug("%s gain ratio %.4f on %d plays", characteristic.label,
                             ratio, int(parent.sum()))

    if chosen is None:
        return LeafNode(PlaySummaryFactory.build_detailed(index_set, baseline))

    category_children = {}
    for category, ids in enumerate(index_set.partition_for(chosen)):
        if ids.size:
            category_children[category] = len(category_children)
    siblings = index_set.split_by(chosen)
    if not siblings:
        raise ConsistencyError("DecisionNode create failed, split of play store data failed")
    if len(siblings) != len(category_children) - 1:
        raise ConsistencyError(
            f"DecisionNode create failed, split produced {len(siblings) + 1} pieces "
            f"for {len(category_children)} categories")

    # Children are attached only once all of them built.
    children = [build_tree(index_set, baseline, min_gain_ratio)]
    for sibling in siblings:
        children.append(build_tree(sibling, baseline, min_gain_ratio))
    return DecisionNode(chosen, category_children, children)


def prune_tree(node: TreeNode) -> TreeNode:
    """Prune ``node`` and return the root to use from now on."""
    return node.prune()


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
def _leader(level: int, last_node: list[bool]) -> str:
    return "".join("  " if last_node[i] else "| " for i in range(level))

def _render(node: TreeNode, level: int, last_node: list[bool], out: list[str]) -> None:
    out.append(_leader(level, last_node))
    if node.is_leaf:
        for i, (pt, summary) in enumerate(node.plays.items()):
            if i:
                out.append(_leader(level, last_node))
            out.append(f"{pt.label}: {summary}\n")
        return
    c = node.characteristic
    last_node.append(False)
    out.append(f"Split: {c.label}\n")
    for category, slot in sorted(node.category_children.items()):
        if slot == len(node.children) - 1:
            last_node[-1] = True
        out.append(_leader(level, last_node))
        out.append(f"Value:{c.category_label(category)}\n")
        _render(node.children[slot], level + 1, last_node, out)
    last_node.pop()

def export_text(node: TreeNode) -> str:
    """
    Render a tree as indented text.

    A decision node prints ``Split: <characteristic>`` and then, for every
    populated category, ``Value:<category>`` followed by the child one level
    deeper.  A leaf prints one line per play type with its summary.  Levels
    are marked with ``"| "``, or ``"  "`` below a parent's last child.
    """
    out: list[str] = []
    _render(node, 0, [], out)
    return "".join(out)


def export_graphviz(node: TreeNode, filename: str | None = None, *, format: str = "png") -> str:
    """
    Export a tree in Graphviz format.

    Parameters
    ----------
    node : TreeNode
        Root of the tree.
    filename : str or None, default=None
        Basename of the output file.  If None the DOT source is returned and
        nothing is written.
    format : str, default="png"
        Output format.  ``'dot'`` writes the DOT source directly without the
        external ``dot`` command; other formats fall back to a ``.dot`` file
        when rendering fails.

    Returns
    -------
    str
        Path of the written file, or the DOT source if ``filename`` is None.
    """
    try:
        import graphviz
    except ImportError:
        raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
    dot = graphviz.Digraph(format=format)
    _add_graph_nodes(dot, node, "0")

    if filename is None:
        return dot.source
    if format.lower() == "dot":
        path = f"{filename}.dot"
        dot.save(path)
        return path
    try:
        dot.render(filename, cleanup=True)
        return f"{filename}.{format}"
    except Exception:
        fallback_path = f"{filename}.dot"
        dot.save(fallback_path)
        return fallback_path

def _add_graph_nodes(dot, node: TreeNode, name: str) -> None:
    if node.is_leaf:
        lines = [f"{pt.label}: {s.percent_of_condition_plays / 10:.1f}% (n={s.play_count})"
                 for pt, s in node.plays.items()] or ["no plays"]
        dot.node(name, "\n".join(lines), shape="box", style="filled", color="lightgrey")
        return
    c = node.characteristic
    dot.node(name, c.label, shape="ellipse", style="filled", color="lightblue")
    for category, slot in sorted(node.category_children.items()):
        child_id = f"{name}_{slot}"
        _add_graph_nodes(dot, node.children[slot], child_id)
        dot.edge(name, child_id, label=c.category_label(category))
