import math
import random

import pytest

from halofinder.fast3tree import Fast3Tree
from halofinder.tree_queries import (
    find_inside_of_box,
    find_next_closest_distance,
    find_outside_of_box,
)


def _random_points(n, seed=7):
    rng = random.Random(seed)
    return [(rng.uniform(0, 10), rng.uniform(0, 10), rng.uniform(0, 10)) for _ in range(n)]


def _inside(pos, box):
    return all(box[j] <= pos[j] <= box[j + 3] for j in range(3))


@pytest.fixture
def tree():
    return Fast3Tree(_random_points(300), points_per_leaf=4)


BOX = (2.0, 3.0, 1.0, 7.0, 8.0, 6.5)


def test_inside_matches_filter(tree):
    found = sorted(find_inside_of_box(tree, BOX))
    expected = [i for i, p in enumerate(tree.points) if _inside(p, BOX)]
    assert found == expected


def test_outside_matches_filter(tree):
    found = sorted(find_outside_of_box(tree, BOX))
    expected = [i for i, p in enumerate(tree.points) if not _inside(p, BOX)]
    assert found == expected


def test_inside_and_outside_partition_points(tree):
    inside = set(find_inside_of_box(tree, BOX))
    outside = set(find_outside_of_box(tree, BOX))
    assert not inside & outside
    assert inside | outside == set(range(tree.num_points))


def test_box_covering_everything(tree):
    whole = (-1.0, -1.0, -1.0, 11.0, 11.0, 11.0)
    assert sorted(find_inside_of_box(tree, whole)) == list(range(tree.num_points))
    assert find_outside_of_box(tree, whole) == []


def test_box_edges_count_as_inside():
    t = Fast3Tree([(1.0, 1.0, 1.0), (2.0, 2.0, 2.0), (5.0, 5.0, 5.0)])
    box = (1.0, 1.0, 1.0, 2.0, 2.0, 2.0)
    inside = sorted(t.points[i] for i in find_inside_of_box(t, box))
    assert inside == [(1.0, 1.0, 1.0), (2.0, 2.0, 2.0)]
    assert [t.points[i] for i in find_outside_of_box(t, box)] == [(5.0, 5.0, 5.0)]


def test_short_box_rejected(tree):
    with pytest.raises(ValueError):
        find_inside_of_box(tree, (0.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        find_outside_of_box(tree, (0.0, 0.0, 0.0, 1.0))


def test_next_closest_on_a_line():
    t = Fast3Tree([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (3.0, 0.0, 0.0)])
    assert find_next_closest_distance(t, (0.0, 0.0, 0.0)) == pytest.approx(1.0)
    assert find_next_closest_distance(t, (3.0, 0.0, 0.0)) == pytest.approx(2.0)


def test_next_closest_matches_nearest_neighbour(tree):
    pts = list(tree.points)
    for p in pts[:40]:
        nearest = min(math.dist(p, q) for q in pts if q != p)
        assert find_next_closest_distance(tree, p) == pytest.approx(nearest, rel=1e-9)


def test_next_closest_is_positive_for_distinct_points(tree):
    for p in list(tree.points)[:20]:
        assert find_next_closest_distance(tree, p) > 0