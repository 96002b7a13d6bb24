import numpy as np
import pytest

from sweepmesh.errors import DegenerateInputError, MeshInconsistencyError
from sweepmesh.geometry import clockwise
from sweepmesh.hull import AdvancingHull
from sweepmesh.seed import SeedTriangle, bounding_box_span, get_sorted_ids, select_seed
from sweepmesh.topology import INVALID_INDEX

SQUARE = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


def test_select_seed_square():
    seed = select_seed(SQUARE)
    # (0, 1, 2) is counterclockwise, so the last two get swapped
    assert seed.vertices == (0, 2, 1)
    assert (seed.cx, seed.cy) == pytest.approx((0.5, 0.5))
    assert clockwise(*SQUARE[list(seed.vertices)].ravel())


def test_select_seed_skips_duplicates_of_first():
    points = np.array([[0.5, 0.5], [0.5, 0.5], [0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    seed = select_seed(points)
    assert seed.i0 == 0
    assert 1 not in seed.vertices


def test_select_seed_collinear():
    with pytest.raises(DegenerateInputError):
        select_seed(np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]]))


def test_select_seed_coincident():
    with pytest.raises(DegenerateInputError):
        select_seed(np.zeros((4, 2)))


def test_bounding_box_span():
    assert bounding_box_span(SQUARE) == 2.0
    assert bounding_box_span(SQUARE * 3 + 7) == 18.0


def test_get_sorted_ids():
    points = np.array([[3.0, 0.0], [1.0, 0.0], [0.0, 2.0], [0.0, -1.0]])
    np.testing.assert_array_equal(get_sorted_ids(points, 0.0, 0.0), [1, 3, 2, 0])


def test_get_sorted_ids_ties_keep_input_order():
    np.testing.assert_array_equal(get_sorted_ids(SQUARE, 0.5, 0.5), [0, 1, 2, 3])


def _triangle_hull():
    # clockwise seed (0, 0) -> (0, 1) -> (1, 0), plus a free point at (1, 1)
    xs = [0.0, 0.0, 1.0, 1.0]
    ys = [0.0, 1.0, 0.0, 1.0]
    seed = SeedTriangle(i0=0, i1=1, i2=2, cx=0.5, cy=0.5)
    return AdvancingHull(xs, ys, seed)


def test_seed_hull():
    hull = _triangle_hull()
    assert list(hull) == [0, 1, 2]
    assert hull.size == 3
    assert hull.prev[:3] == [2, 0, 1]
    assert hull.tri[:3] == [0, 1, 2]
    assert hull.tri[3] == INVALID_INDEX
    assert all(hull.is_live(i) for i in range(3))
    assert hull.hash_size == 2
    assert all(0 <= hull.hash_key(x, y) < hull.hash_size for x, y in zip(hull.xs, hull.ys))


def test_find_visible_edge():
    hull = _triangle_hull()
    e, start = hull.find_visible_edge(1.0, 1.0, 2.0)
    # only the edge (0, 1) -> (1, 0) faces (1, 1)
    assert e == 1
    assert start in (0, 1, 2)


def test_find_visible_edge_near_duplicate():
    hull = _triangle_hull()
    assert hull.find_visible_edge(0.0, 1.0 + 1e-12, 2.0) is None


def test_find_visible_edge_empty_hash():
    hull = _triangle_hull()
    hull.hash = [INVALID_INDEX] * hull.hash_size
    with pytest.raises(MeshInconsistencyError):
        hull.find_visible_edge(1.0, 1.0, 2.0)


def test_splice_and_remove():
    hull = _triangle_hull()
    hull.splice(1, 3, 2)
    assert list(hull) == [1, 3, 2, 0]
    assert hull.size == 4
    assert hull.prev[3] == 1
    assert hull.prev[2] == 3

    hull.remove(3)
    assert not hull.is_live(3)
    assert hull.size == 3


def test_remember():
    hull = _triangle_hull()
    hull.remember(3)
    assert hull.hash[hull.hash_key(1.0, 1.0)] == 3


def test_replace_tri():
    hull = _triangle_hull()
    hull.replace_tri(1, 7)
    assert hull.tri[:3] == [0, 7, 2]
    # unknown half-edges are left alone
    hull.replace_tri(42, 8)
    assert hull.tri[:3] == [0, 7, 2]
