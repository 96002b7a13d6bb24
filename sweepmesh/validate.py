import numpy as np
from loguru import logger
from numpy.typing import NDArray
from shewchuk import incircle_test

from sweepmesh.delaunay import Triangulation
from sweepmesh.errors import MeshInconsistencyError
from sweepmesh.topology import INVALID_INDEX

# relative error bound under which the float in-circle determinant is double-checked exactly
INCIRCLE_FILTER = 1e-12

# float cells per (triangles x points) block of the vectorized in-circle filter
CHUNK_CELLS = 2**20


def check_halfedges(triangulation: Triangulation) -> None:
    """
    Every paired half-edge points back to its opposite, and the two run
    between the same vertices in opposite directions.
    """
    triangles = triangulation.triangles
    halfedges = triangulation.halfedges

    if len(triangles) != len(halfedges):
        raise MeshInconsistencyError(
            f"{len(triangles)} triangle vertices but {len(halfedges)} half-edges"
        )
    if len(triangles) % 3:
        raise MeshInconsistencyError(f"{len(triangles)} is not a multiple of 3")

    e = np.arange(len(halfedges), dtype=np.uintp)
    paired = halfedges != INVALID_INDEX
    if np.any(halfedges[paired] >= len(halfedges)):
        raise MeshInconsistencyError("Half-edge pointing outside the mesh")

    opposite = halfedges[paired]
    bad = np.flatnonzero(halfedges[opposite] != e[paired])
    if len(bad):
        raise MeshInconsistencyError(f"Asymmetric half-edge {e[paired][bad[0]]}")

    # e runs from triangles[e] to triangles[next(e)], its opposite the other way
    nxt = np.where(opposite % 3 == 2, opposite - 2, opposite + 1)
    bad = np.flatnonzero(triangles[e[paired]] != triangles[nxt])
    if len(bad):
        raise MeshInconsistencyError(
            f"Half-edge {e[paired][bad[0]]} and its opposite don't share vertices"
        )


def check_hull(triangulation: Triangulation) -> None:
    """
    The hull is one closed cycle from hull_start, hull_prev walks it backwards
    and hull_tri gives the hull half-edge starting at every hull vertex.
    """
    nxt = triangulation.hull_next.tolist()
    prev = triangulation.hull_prev.tolist()
    start = triangulation.hull_start
    n = len(nxt)

    hull = [start]
    e = nxt[start]
    while e != start:
        if e == INVALID_INDEX or nxt[e] == e:
            raise MeshInconsistencyError(f"Hull walk reached a removed vertex {e}")
        if len(hull) > n:
            raise MeshInconsistencyError("Hull walk doesn't return to its start")
        hull.append(e)
        e = nxt[e]

    if len(hull) < 3:
        raise MeshInconsistencyError(f"Hull with only {len(hull)} vertices")
    if len(set(hull)) != len(hull):
        raise MeshInconsistencyError("Hull visits a vertex twice")

    for a, b in zip(hull, hull[1:] + hull[:1]):
        if prev[b] != a:
            raise MeshInconsistencyError(f"hull_prev[{b}] is {prev[b]}, expected {a}")

    # hull_tri[e] is the boundary half-edge leaving e
    triangles = triangulation.triangles
    halfedges = triangulation.halfedges
    vertices = np.array(hull, dtype=np.uintp)
    hull_tri = triangulation.hull_tri[vertices]
    bad = np.flatnonzero(hull_tri >= len(triangles))
    if len(bad):
        raise MeshInconsistencyError(f"hull_tri[{vertices[bad[0]]}] points outside the mesh")
    bad = np.flatnonzero(
        (triangles[hull_tri] != vertices) | (halfedges[hull_tri] != INVALID_INDEX)
    )
    if len(bad):
        e = vertices[bad[0]]
        raise MeshInconsistencyError(
            f"hull_tri[{e}] is {hull_tri[bad[0]]}, not a hull half-edge leaving {e}"
        )


def find_delaunay_violations(
    triangulation: Triangulation, chunk_size: int | None = None
) -> list[tuple[int, int]]:
    """
    Find points lying strictly inside the circumcircle of a triangle they are
    not a vertex of.

    A vectorized float determinant picks the candidates, Shewchuk's exact
    predicate decides, so cocircular points are never reported.

    :param chunk_size: triangles tested per block, by default sized so a block
        holds about CHUNK_CELLS values
    :return: (triangle index, point index) pairs
    """
    points = triangulation.points
    if chunk_size is None:
        chunk_size = max(1, CHUNK_CELLS // len(points))
    tris = triangulation.triangle_vertices.astype(np.intp)
    px = points[:, 0][None, :]
    py = points[:, 1][None, :]
    violations = []

    for offset in range(0, len(tris), chunk_size):
        chunk = tris[offset : offset + chunk_size]
        a, b, c = (points[chunk[:, k]] for k in range(3))

        dx = a[:, 0:1] - px
        dy = a[:, 1:2] - py
        ex = b[:, 0:1] - px
        ey = b[:, 1:2] - py
        fx = c[:, 0:1] - px
        fy = c[:, 1:2] - py
        ap = dx * dx + dy * dy
        bp = ex * ex + ey * ey
        cp = fx * fx + fy * fy

        t1 = dx * (ey * cp - bp * fy)
        t2 = dy * (ex * cp - bp * fx)
        t3 = ap * (ex * fy - ey * fx)
        det = t1 - t2 + t3
        bound = INCIRCLE_FILTER * (np.abs(t1) + np.abs(t2) + np.abs(t3))

        # triangles are clockwise: negative means inside
        candidates = det < bound
        rows = np.arange(len(chunk))[:, None]
        candidates[rows, chunk] = False

        for t, p in zip(*np.nonzero(candidates)):
            i0, i1, i2 = chunk[t].tolist()
            x, y = points[p].tolist()
            # exact predicate wants counterclockwise vertices
            inside = incircle_test(
                x, y, *points[i0].tolist(), *points[i2].tolist(), *points[i1].tolist()
            )
            if inside > 0:
                violations.append((offset + int(t), int(p)))

    return violations


def check_delaunay(triangulation: Triangulation) -> None:
    violations = find_delaunay_violations(triangulation)
    if violations:
        t, p = violations[0]
        raise MeshInconsistencyError(
            f"Point {p} lies inside the circumcircle of triangle {t} "
            f"({len(violations)} violations)"
        )


def validate(triangulation: Triangulation) -> None:
    """Run every check, raising MeshInconsistencyError on the first failure."""
    check_halfedges(triangulation)
    check_hull(triangulation)
    check_delaunay(triangulation)
    logger.info(f"Triangulation with {triangulation.num_triangles} triangles is valid")


def hull_is_convex(points: NDArray[np.floating], hull: NDArray[np.integer]) -> bool:
    """True when every turn along the hull goes clockwise (or straight)."""
    h = points[np.asarray(hull, dtype=np.intp)]
    v0 = np.roll(h, -1, axis=0) - h
    v1 = np.roll(h, -2, axis=0) - np.roll(h, -1, axis=0)
    cross = v0[:, 0] * v1[:, 1] - v0[:, 1] * v1[:, 0]
    return bool(np.all(cross <= 0))
