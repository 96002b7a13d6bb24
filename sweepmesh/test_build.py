import itertools

import numpy as np
import pytest

from sweepmesh.build import triangulate
from sweepmesh.delaunay import INVALID_INDEX, signed
from sweepmesh.errors import DegenerateInputError
from sweepmesh.geometry import clockwise, in_circle
from sweepmesh.validate import (
    check_halfedges,
    check_hull,
    find_delaunay_violations,
    hull_is_convex,
    validate,
)

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


def assert_float_delaunay(tri):
    """No point lies inside the circumcircle of a triangle, with the float predicate."""
    points = tri.points.tolist()
    for a, b, c in tri.triangle_vertices.tolist():
        for p, (x, y) in enumerate(points):
            if p in (a, b, c):
                continue
            assert not in_circle(*points[a], *points[b], *points[c], x, y)


def test_unit_square():
    tri = triangulate(SQUARE)
    assert tri.num_triangles == 2
    assert len(tri.triangles) == len(tri.halfedges) == 6
    assert tri.hull_area / 2 == pytest.approx(1.0)
    assert tri.triangle_area_sum() / 2 == pytest.approx(1.0)
    assert sorted(tri.hull.tolist()) == [0, 1, 2, 3]
    # one interior edge, seen from both sides
    assert np.count_nonzero(tri.halfedges != INVALID_INDEX) == 2
    assert len(tri.edges()) == 5
    validate(tri)
    assert_float_delaunay(tri)


def test_square_with_center():
    tri = triangulate(SQUARE + [(0.5, 0.5)])
    assert tri.num_triangles == 4
    assert all(4 in t for t in tri.triangle_vertices.tolist())
    assert sorted(tri.hull.tolist()) == [0, 1, 2, 3]
    assert len(tri.edges()) == 8
    assert tri.hull_area / 2 == pytest.approx(1.0)
    validate(tri)
    assert_float_delaunay(tri)


def test_duplicate_point_is_ignored():
    once = triangulate(SQUARE + [(0.5, 0.5)])
    twice = triangulate(SQUARE + [(0.5, 0.5), (0.5, 0.5)])
    np.testing.assert_array_equal(once.triangles, twice.triangles)
    np.testing.assert_array_equal(once.halfedges, twice.halfedges)
    assert 5 not in twice.triangles.tolist()


def test_near_duplicate_point_is_ignored():
    # 1e-13 away from the corner (1, 1): not an exact duplicate, but too close to see any hull edge
    tri = triangulate(SQUARE + [(0.5, 0.5), (1.0, 1.0 + 1e-13)])
    assert tri.num_triangles == 4
    assert 5 not in tri.triangles.tolist()
    validate(tri)


def test_triangles_are_clockwise():
    rng = np.random.default_rng(7)
    tri = triangulate(rng.random((100, 2)))
    points = tri.points
    for a, b, c in tri.triangle_vertices.tolist():
        assert clockwise(*points[a], *points[b], *points[c])


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_random_points(seed):
    rng = np.random.default_rng(seed)
    points = rng.random((300, 2)) * 100 - 50
    tri = triangulate(points)

    validate(tri)
    hull = tri.hull
    assert hull_is_convex(tri.points, hull)
    # Euler: T = 2n - 2 - h when every point is used
    assert tri.num_triangles == 2 * len(points) - 2 - len(hull)
    assert set(tri.triangles.tolist()) == set(range(len(points)))
    assert tri.hull_area == pytest.approx(tri.triangle_area_sum(), rel=1e-9)


def test_random_points_float_delaunay():
    rng = np.random.default_rng(11)
    tri = triangulate(rng.random((60, 2)))
    assert_float_delaunay(tri)


def test_grid():
    points = list(itertools.product(range(10), range(10)))
    tri = triangulate(points)
    validate(tri)
    assert set(tri.triangles.tolist()) == set(range(100))
    assert tri.hull_area / 2 == pytest.approx(81.0)
    assert tri.triangle_area_sum() / 2 == pytest.approx(81.0)


def test_points_on_a_circle():
    theta = np.linspace(0, 2 * np.pi, 32, endpoint=False)
    points = np.column_stack([np.cos(theta), np.sin(theta)])
    tri = triangulate(points)
    # nearly cocircular: only the structure is checked, exact predicates would disagree with floats
    check_halfedges(tri)
    check_hull(tri)
    assert tri.num_triangles == 30
    assert len(tri.hull) == 32


def test_collinear_points():
    with pytest.raises(DegenerateInputError):
        triangulate([(0, 0), (1, 0), (2, 0)])


def test_collinear_is_a_value_error():
    with pytest.raises(ValueError):
        triangulate([(0, 0), (1, 1), (2, 2), (3, 3)])


@pytest.mark.parametrize("points", [[], [(0, 0)], [(0, 0), (1, 1)]])
def test_too_few_points(points):
    with pytest.raises(DegenerateInputError):
        triangulate(np.array(points, dtype=float).reshape(-1, 2))


def test_coincident_points():
    with pytest.raises(DegenerateInputError):
        triangulate([(1, 1)] * 5)


@pytest.mark.parametrize(
    "points",
    [
        np.zeros((4, 3)),
        np.zeros(8),
        [(0, 0), (1, 0), (0, np.nan)],
        [(0, 0), (1, 0), (np.inf, 1)],
    ],
)
def test_malformed_input(points):
    with pytest.raises(ValueError):
        triangulate(points)


def test_input_is_copied():
    points = np.array(SQUARE)
    tri = triangulate(points)
    points[0] = (5.0, 5.0)
    assert tri.points[0].tolist() == [0.0, 0.0]


def test_signed_view():
    tri = triangulate(SQUARE)
    halfedges = signed(tri.halfedges)
    assert halfedges.dtype == np.int32
    assert np.count_nonzero(halfedges == -1) == 4
    np.testing.assert_array_equal(signed(tri.triangles), tri.triangles.astype(np.int32))


def test_hull_lists_are_inverse():
    rng = np.random.default_rng(3)
    tri = triangulate(rng.normal(size=(200, 2)))
    hull = tri.hull.tolist()
    assert hull[0] == tri.hull_start
    for a, b in zip(hull, hull[1:] + hull[:1]):
        assert tri.hull_next[a] == b
        assert tri.hull_prev[b] == a


def test_no_violations_reported_on_cocircular_points():
    tri = triangulate(SQUARE + [(2.0, 0.0), (2.0, 1.0)])
    assert find_delaunay_violations(tri) == []


@pytest.mark.parametrize("seed", [0, 1])
def test_hull_tri_is_boundary_halfedge(seed):
    # clustered points flip many edges next to the hull while it grows
    rng = np.random.default_rng(seed)
    points = np.concatenate([rng.normal(size=(1500, 2)), rng.random((500, 2)) * 8 - 4])
    tri = triangulate(points)

    hull = tri.hull.astype(np.intp)
    hull_tri = tri.hull_tri[hull].astype(np.intp)
    np.testing.assert_array_equal(tri.triangles[hull_tri], hull)
    assert np.all(tri.halfedges[hull_tri] == INVALID_INDEX)
    # the half-edge runs along the hull to the next vertex
    nxt = np.where(hull_tri % 3 == 2, hull_tri - 2, hull_tri + 1)
    np.testing.assert_array_equal(tri.triangles[nxt], tri.hull_next[hull])
    check_hull(tri)
