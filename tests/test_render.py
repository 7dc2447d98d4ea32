import pytest

from playtree import DataStore, PlayType, build_tree, export_graphviz, export_text
from test_tree import _time_split_store


def test_decision_node_text():
    store = _time_split_store()
    tree = build_tree(store.index_set(), store.baseline)
    assert export_text(tree) == (
        "Split: time_remaining\n"
        "Value:Outside two minute warning\n"
        "| Run Left: pct of category:1000 pct of all type plays:1000 avg dist:4 dist var:1 Turnover pct:0\n"
        "Value:Inside two minute warning\n"
        "  Punt: pct of category:1000 pct of all type plays:1000 avg dist:42 dist var:2 Turnover pct:0\n"
    )


def test_leaf_lists_every_play_type():
    store = DataStore()
    store.insert(PlayType.PUNT, 4, 10, 50, 20, 0, 0, 40, False)
    store.insert(PlayType.RUN_LEFT, 4, 10, 50, 20, 0, 0, 2, True)
    store.finalize()
    tree = build_tree(store.index_set(), store.baseline)
    # nothing to split on: a single leaf, play types in enum order
    assert export_text(tree) == (
        "Run Left: pct of category:500 pct of all type plays:1000 avg dist:2 dist var:0 Turnover pct:1000\n"
        "Punt: pct of category:500 pct of all type plays:1000 avg dist:40 dist var:0 Turnover pct:0\n"
    )


def test_nested_leaders():
    store = DataStore()
    rows = [
        # outside two minutes: runs on 1st down, punts on 4th
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.RUN_LEFT, 1, 10, 50, 10, 0, 0, 3, False),
        (PlayType.PUNT, 4, 10, 50, 10, 0, 0, 40, False),
        (PlayType.PUNT, 4, 10, 50, 10, 0, 0, 40, False),
        # inside two minutes: deep passes
        (PlayType.PASS_DEEP_LEFT, 1, 10, 50, 1, 0, 0, 20, False),
        (PlayType.PASS_DEEP_LEFT, 4, 10, 50, 1, 0, 0, 20, False),
    ]
    for row in rows:
        store.insert(*row)
    store.finalize()
    tree = build_tree(store.index_set(), store.baseline)
    lines = export_text(tree).splitlines()
    assert lines[0] == "Split: time_remaining"
    assert lines[1] == "Value:Outside two minute warning"
    assert lines[2] == "| Split: down_number"
    assert lines[3] == "| Value:1"
    assert lines[4].startswith("| | Run Left: ")
    assert lines[5] == "| Value:4"
    assert lines[6].startswith("|   Punt: ")
    assert lines[7] == "Value:Inside two minute warning"
    assert lines[8].startswith("  Deep Pass Left: ")
    assert len(lines) == 9


def test_graphviz_source():
    pytest.importorskip("graphviz")
    store = _time_split_store()
    tree = build_tree(store.index_set(), store.baseline)
    src = export_graphviz(tree)
    assert "time_remaining" in src
    assert "Run Left" in src
    assert "Inside two minute warning" in src
