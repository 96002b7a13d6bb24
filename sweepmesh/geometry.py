import math

import numpy as np

# two coordinates closer than this on both axes are the same point
EPSILON = float(np.finfo(np.float64).eps)

# (|v0|^2 + |v1|^2) / |v0 x v1| above this means the triple is too close to collinear to orient
ORIENT_RELATIVE_LIMIT = 1e14

# squared distance / squared bounding box diagonal below this means near-duplicate
SPAN_EQUAL_LIMIT = 1e-20


def dist(ax: float, ay: float, bx: float, by: float) -> float:
    """Squared euclidean distance between (ax, ay) and (bx, by)."""
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy


def circumradius(
    ax: float, ay: float, bx: float, by: float, cx: float, cy: float
) -> float:
    """
    Squared radius of the circle through a, b and c.

    Returns math.inf when the three points are collinear or two of them coincide,
    so the result can be used directly in a "smallest circumcircle" search.
    """
    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay

    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    det = dx * ey - dy * ex

    if bl == 0.0 or cl == 0.0 or det == 0.0:
        return math.inf

    x = (ey * bl - dy * cl) * 0.5 / det
    y = (dx * cl - ex * bl) * 0.5 / det
    r = x * x + y * y
    if not math.isfinite(r):
        return math.inf
    return r


def circumcenter(
    ax: float, ay: float, bx: float, by: float, cx: float, cy: float
) -> tuple[float, float]:
    """
    Center of the circle through a, b and c.

    The caller must make sure the triangle is not degenerate (see circumradius):
    for a zero determinant the result is not finite.
    """
    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay

    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    det = dx * ey - dy * ex
    if det == 0.0:
        return math.nan, math.nan

    x = ax + (ey * bl - dy * cl) * 0.5 / det
    y = ay + (dx * cl - ex * bl) * 0.5 / det
    return x, y


def _oriented_det(
    px: float, py: float, qx: float, qy: float, rx: float, ry: float
) -> float:
    """
    Cross product of (q - p) and (r - p), or 0.0 when the triple is so close to
    collinear that its sign can't be trusted.
    """
    v0x = qx - px
    v0y = qy - py
    v1x = rx - px
    v1y = ry - py
    det = v0x * v1y - v0y * v1x
    if det == 0.0:
        return 0.0
    length = v0x * v0x + v0y * v0y + v1x * v1x + v1y * v1y
    if abs(length / det) > ORIENT_RELATIVE_LIMIT:
        return 0.0
    return det


def clockwise(px: float, py: float, qx: float, qy: float, rx: float, ry: float) -> bool:
    return _oriented_det(px, py, qx, qy, rx, ry) < 0.0


def counterclockwise(
    px: float, py: float, qx: float, qy: float, rx: float, ry: float
) -> bool:
    return _oriented_det(px, py, qx, qy, rx, ry) > 0.0


def in_circle(
    ax: float,
    ay: float,
    bx: float,
    by: float,
    cx: float,
    cy: float,
    px: float,
    py: float,
) -> bool:
    """
    True if p lies strictly inside the circle through a, b and c.

    a, b, c must be in clockwise order, as every triangle of the mesh is.
    """
    dx = ax - px
    dy = ay - py
    ex = bx - px
    ey = by - py
    fx = cx - px
    fy = cy - py

    ap = dx * dx + dy * dy
    bp = ex * ex + ey * ey
    cp = fx * fx + fy * fy

    return dx * (ey * cp - bp * fy) - dy * (ex * cp - bp * fx) + ap * (ex * fy - ey * fx) < 0.0


def pseudo_angle(dx: float, dy: float) -> float:
    """
    Monotonically increases with the real angle of (dx, dy), in [0, 1), without
    trigonometry. The zero vector maps to 0.
    """
    norm = abs(dx) + abs(dy)
    if norm == 0.0:
        return 0.0
    p = dx / norm
    if dy > 0.0:
        return (3.0 - p) / 4.0
    return (1.0 + p) / 4.0


def points_equal(ax: float, ay: float, bx: float, by: float) -> bool:
    return abs(ax - bx) <= EPSILON and abs(ay - by) <= EPSILON


def points_close(ax: float, ay: float, bx: float, by: float, span: float) -> bool:
    """Near-duplicate test relative to the squared bounding box diagonal `span`."""
    return dist(ax, ay, bx, by) / span < SPAN_EQUAL_LIMIT
