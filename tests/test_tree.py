import numpy as np
import pytest

from playtree import (Characteristic, ConsistencyError, DataStore, DecisionNode, LeafNode,
                      PlayIndexSet, PlayType, Situation, build_tree, prune_tree)
from playtree.tree import characteristic_gain_ratio


def _store(rows):
    store = DataStore()
    for row in rows:
        store.insert(*row)
    store.finalize()
    return store


def _time_split_store():
    """Runs outside the two minute warning, punts inside; nothing else differs."""
    return _store([
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 5, False),
        (PlayType.PUNT, 1, 10, 50, 1, 0, 0, 40, False),
        (PlayType.PUNT, 1, 10, 50, 1, 0, 0, 44, False),
    ])


def _random_store(n=300, seed=0):
    rng = np.random.RandomState(seed)
    store = DataStore()
    for _ in range(n):
        down = int(rng.randint(1, 5))
        togo = int(rng.randint(1, 25))
        # make the call depend on the situation, with noise
        if down == 4:
            pt = PlayType.PUNT if togo > 3 else PlayType.RUN_MIDDLE
        elif togo > 8:
            pt = PlayType(int(rng.choice([3, 4, 5, 6, 7, 8])))
        else:
            pt = PlayType(int(rng.randint(0, 3)))
        if rng.rand() < 0.1:
            pt = PlayType(int(rng.randint(0, 11)))
        store.insert(pt, down, togo, int(rng.randint(1, 100)), int(rng.randint(0, 60)),
                     int(rng.randint(0, 35)), int(rng.randint(0, 35)),
                     int(rng.randint(-5, 30)), bool(rng.rand() < 0.05))
    store.finalize()
    return store


def test_perfect_split_has_gain_ratio_one():
    store = _time_split_store()
    index_set = store.index_set()
    assert characteristic_gain_ratio(index_set, Characteristic.TIME_REMAINING) == 1.0
    assert characteristic_gain_ratio(index_set, Characteristic.DOWN_NUMBER) == 0.0


def test_build_splits_on_separating_characteristic():
    store = _time_split_store()
    tree = build_tree(store.index_set(), store.baseline)
    assert isinstance(tree, DecisionNode)
    assert tree.characteristic is Characteristic.TIME_REMAINING
    assert tree.category_children == {0: 0, 1: 1}
    run_leaf, punt_leaf = tree.children
    assert list(run_leaf.plays) == [PlayType.RUN_LEFT]
    assert list(punt_leaf.plays) == [PlayType.PUNT]
    assert run_leaf.plays[PlayType.RUN_LEFT].play_count == 2
    assert tree.depth == 1


def test_single_play_type_gives_leaf():
    store = _store([
        (PlayType.RUN_RIGHT, d, 10, 50, m, 0, 0, d, False)
        for d in (1, 2, 3) for m in (1, 10)
    ])
    tree = build_tree(store.index_set(), store.baseline)
    assert isinstance(tree, LeafNode)
    assert list(tree.plays) == [PlayType.RUN_RIGHT]
    summary = tree.plays[PlayType.RUN_RIGHT]
    assert summary.play_count == 6
    assert summary.percent_of_condition_plays == 1000
    assert summary.percent_of_type_plays == 1000


def test_last_clearing_characteristic_is_chosen():
    # down separates perfectly, time only partly; time comes later and wins
    store = _store([
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.PUNT, 4, 10, 50, 1, 0, 0, 40, False),
        (PlayType.PUNT, 4, 10, 50, 10, 0, 0, 40, False),
    ])
    index_set = store.index_set()
    down = characteristic_gain_ratio(index_set, Characteristic.DOWN_NUMBER)
    time = characteristic_gain_ratio(index_set, Characteristic.TIME_REMAINING)
    assert down > time > 0.02
    tree = build_tree(index_set, store.baseline)
    assert tree.characteristic is Characteristic.TIME_REMAINING


def test_unseen_category_has_no_plays():
    store = _store([
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 5, False),
        (PlayType.PUNT, 1, 10, 50, 10, 3, 0, 40, False),
        (PlayType.PUNT, 1, 10, 50, 10, 3, 0, 44, False),
    ])
    tree = build_tree(store.index_set(), store.baseline)
    assert tree.characteristic is Characteristic.SCORE_DIFFERENTIAL
    assert tree.find_plays_raw(1, 10, 50, 10, 0, 30) == {}
    assert list(tree.find_plays_raw(1, 10, 50, 10, 3, 0)) == [PlayType.PUNT]


def test_find_plays_returns_leaf_of_every_training_play():
    store = _random_store()
    tree = build_tree(store.index_set(), store.baseline)
    for play in store:
        plays = tree.find_plays(play.situation)
        assert plays[play.play_type].play_count >= 1


def test_leaves_conserve_plays():
    store = _random_store()
    tree = build_tree(store.index_set(), store.baseline)
    assert sum(leaf.play_count for leaf in tree.iter_leaves()) == len(store)
    for leaf in tree.iter_leaves():
        shares = sum(s.percent_of_condition_plays for s in leaf.plays.values())
        assert 1000 - len(leaf.plays) < shares <= 1000
    pruned = prune_tree(tree)
    assert sum(leaf.play_count for leaf in pruned.iter_leaves()) == len(store)


def test_find_plays_raw_buckets_situation():
    store = _time_split_store()
    tree = build_tree(store.index_set(), store.baseline)
    assert tree.find_plays_raw(1, 10, 50, 31, 0, 0) is tree.find_plays(
        Situation.from_raw(1, 10, 50, 1, 0, 0))


def test_empty_index_set_is_rejected():
    store = _time_split_store()
    empty = PlayIndexSet(store.table, {Characteristic.DOWN_NUMBER: [np.empty(0, dtype=int)] * 5})
    with pytest.raises(ConsistencyError):
        build_tree(empty, store.baseline)


def test_higher_threshold_gives_smaller_tree():
    store = _random_store()
    full = build_tree(store.index_set(), store.baseline)
    coarse = build_tree(store.index_set(), store.baseline, min_gain_ratio=2.0)
    assert isinstance(coarse, LeafNode)
    assert coarse.play_count == len(store)
    assert sum(1 for _ in full.iter_leaves()) > 1


def test_zero_threshold_skips_single_category_characteristics():
    store = _time_split_store()
    tree = build_tree(store.index_set(), store.baseline, min_gain_ratio=0.0)
    assert tree.characteristic is Characteristic.TIME_REMAINING
    assert [leaf.play_count for leaf in tree.iter_leaves()] == [2, 2]


def test_zero_threshold_keeps_every_play():
    store = _random_store()
    tree = build_tree(store.index_set(), store.baseline, min_gain_ratio=0.0)
    assert sum(leaf.play_count for leaf in tree.iter_leaves()) == len(store)
    for play in store:
        assert tree.find_plays(play.situation)[play.play_type].play_count >= 1
