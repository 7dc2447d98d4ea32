import numpy as np

from playtree import DetailedSummary, OverallSummary, PlaySummaryFactory, PlayType


def test_average_truncates_toward_zero():
    assert OverallSummary([3, -4], 0).average_distance == 0
    assert OverallSummary([-3, -4], 0).average_distance == -3
    assert OverallSummary([3, 4], 0).average_distance == 3


def test_variance_is_truncated_root_of_integer_variance():
    s = OverallSummary([3, -4], 1)
    # ((3 - 0)^2 + (-4 - 0)^2) // 2 = 12, isqrt -> 3
    assert s.distance_variance == 3
    assert s.turnover_percentage == 500
    assert s.total_count == 2


def test_empty_summary_is_zero():
    s = OverallSummary([], 0)
    assert (s.total_count, s.average_distance, s.distance_variance, s.turnover_percentage) == (0, 0, 0, 0)


def test_detailed_summary_shares():
    overall = OverallSummary(np.zeros(12, dtype=int), 0)
    s = DetailedSummary([5, 1, 3], 0, 6, overall)
    assert s.play_distances.tolist() == [1, 3, 5]
    assert s.play_count == 3
    assert s.percent_of_condition_plays == 500
    assert s.percent_of_type_plays == 250
    assert s.average_distance == 3
    assert s.overall is overall


def test_detailed_summary_str():
    overall = OverallSummary([4, -2], 1)
    s = DetailedSummary([4], 1, 1, overall)
    assert str(s) == ("pct of category:1000 pct of all type plays:500 avg dist:4 "
                      "dist var:0 Turnover pct:1000")


def test_merge_two_single_plays():
    overall = OverallSummary([4, -2], 1)
    a = DetailedSummary([4], 1, 1, overall)
    b = DetailedSummary([-2], 0, 1, overall)
    merged = PlaySummaryFactory.merge(a, b, 2)
    assert merged.play_count == 2
    assert merged.turnover_count == 1
    assert merged.play_distances.tolist() == [-2, 4]
    assert merged.percent_of_condition_plays == 1000
    assert merged.percent_of_type_plays == 1000
    assert merged.average_distance == 1
    # inputs are left alone
    assert a.play_count == 1 and b.play_count == 1


def test_merge_data_recomputes_every_share():
    runs = OverallSummary(np.zeros(10, dtype=int), 0)
    punts = OverallSummary(np.zeros(10, dtype=int), 0)
    result = {PlayType.RUN_LEFT: DetailedSummary([2], 0, 1, runs)}
    other = {
        PlayType.RUN_LEFT: DetailedSummary([6], 0, 3, runs),
        PlayType.PUNT: DetailedSummary([40, 44], 0, 3, punts),
    }
    merged = PlaySummaryFactory.merge_data(result, other)
    assert list(merged) == [PlayType.RUN_LEFT, PlayType.PUNT]
    assert merged[PlayType.RUN_LEFT].play_count == 2
    assert merged[PlayType.RUN_LEFT].percent_of_condition_plays == 500
    assert merged[PlayType.PUNT].percent_of_condition_plays == 500
    assert merged[PlayType.PUNT].percent_of_type_plays == 200
    assert sum(s.play_count for s in merged.values()) == 4
