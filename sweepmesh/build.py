import math

import numpy as np
from loguru import logger
from numpy.typing import ArrayLike, NDArray

from sweepmesh.delaunay import Triangulation
from sweepmesh.errors import DegenerateInputError
from sweepmesh.geometry import counterclockwise, points_equal
from sweepmesh.hull import AdvancingHull
from sweepmesh.seed import bounding_box_span, get_sorted_ids, select_seed
from sweepmesh.topology import INVALID_INDEX, Legalizer, MeshStore


def check_points(points: ArrayLike) -> NDArray[np.floating]:
    """Copy the input into a (n, 2) float64 array, rejecting anything else."""
    points = np.array(points, dtype=np.float64)

    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"Points must be 2D (shape: Nx2), got shape {points.shape}")

    if not np.all(np.isfinite(points)):
        raise ValueError("Points must have finite coordinates")

    if len(points) < 3:
        raise DegenerateInputError("Need at least 3 points")

    return points


def triangulate(points: ArrayLike) -> Triangulation:
    """
    Delaunay triangulation of a set of 2D points with the sweep-hull algorithm.

    Starting from a seed triangle close to the center of the point set, points
    are inserted by increasing distance from the seed circumcenter. Each new
    point lies outside the current convex hull: it is joined to every hull edge
    it can see, the new triangles are legalized by edge flips and the hull is
    updated.

    Near-duplicate points are skipped: the first one inserted at a location wins.

    :param points: (n, 2) array-like of coordinates, n >= 3
    :return: the triangulation, with triangles in clockwise order
    :raises ValueError: on malformed input
    :raises DegenerateInputError: when there is no triangle to start from
    """
    points = check_points(points)
    n = len(points)
    logger.info(f"Triangulating {n} points")

    span = bounding_box_span(points)
    seed = select_seed(points)
    ids = get_sorted_ids(points, seed.cx, seed.cy).tolist()

    xs = points[:, 0].tolist()
    ys = points[:, 1].tolist()

    hull = AdvancingHull(xs, ys, seed)
    mesh = MeshStore(n)
    legalizer = Legalizer(mesh, xs, ys, hull)
    i0, i1, i2 = seed.vertices
    mesh.add_triangle(i0, i1, i2, INVALID_INDEX, INVALID_INDEX, INVALID_INDEX)

    skipped = 0
    xp = yp = math.nan
    for k, i in enumerate(ids):
        x = xs[i]
        y = ys[i]

        # skip near-duplicate points
        if k > 0 and points_equal(x, y, xp, yp):
            skipped += 1
            continue
        xp = x
        yp = y

        # skip seed triangle points
        if i == i0 or i == i1 or i == i2:
            continue

        visible = hull.find_visible_edge(x, y, span)
        if visible is None:
            logger.debug(f"Skipping point {i} ({x}, {y}): near-duplicate of a hull vertex")
            skipped += 1
            continue
        e, start = visible

        # add the first triangle from the point
        t = mesh.add_triangle(
            e, i, hull.next[e], INVALID_INDEX, INVALID_INDEX, hull.tri[e]
        )
        hull.tri[i] = legalizer.legalize(t + 2)
        hull.tri[e] = t

        # walk forward through the hull, adding more triangles and flipping
        nxt = hull.next[e]
        while True:
            q = hull.next[nxt]
            if not counterclockwise(x, y, xs[nxt], ys[nxt], xs[q], ys[q]):
                break
            t = mesh.add_triangle(nxt, i, q, hull.tri[i], INVALID_INDEX, hull.tri[nxt])
            hull.tri[i] = legalizer.legalize(t + 2)
            hull.remove(nxt)
            nxt = q

        # walk backward from the other side, adding more triangles and flipping
        if e == start:
            while True:
                q = hull.prev[e]
                if not counterclockwise(x, y, xs[q], ys[q], xs[e], ys[e]):
                    break
                t = mesh.add_triangle(q, i, e, INVALID_INDEX, hull.tri[e], hull.tri[q])
                legalizer.legalize(t + 2)
                hull.tri[q] = t
                hull.remove(e)
                e = q

        hull.splice(e, i, nxt)
        hull.remember(i)
        hull.remember(e)

    if skipped:
        logger.debug(f"Skipped {skipped} near-duplicate points")

    triangulation = Triangulation(
        points=points,
        triangles=np.array(mesh.triangles, dtype=np.uintp),
        halfedges=np.array(mesh.halfedges, dtype=np.uintp),
        hull_prev=np.array(hull.prev, dtype=np.uintp),
        hull_next=np.array(hull.next, dtype=np.uintp),
        hull_tri=np.array(hull.tri, dtype=np.uintp),
        hull_start=hull.start,
    )
    logger.info(
        f"Built {triangulation.num_triangles} triangles, {hull.size} hull vertices, "
        f"{legalizer.flips} flips"
    )
    return triangulation
