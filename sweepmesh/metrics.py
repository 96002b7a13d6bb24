from collections.abc import Iterable

import numpy as np
from numpy.typing import NDArray


def neumaier_sum(values: Iterable[float]) -> float:
    """
    Kahan-Babuska summation, Neumaier variant: accumulates the rounding error of
    every addition separately and adds it back at the end.
    """
    total = 0.0
    err = 0.0
    for k in values:
        m = total + k
        if abs(total) >= abs(k):
            err += total - m + k
        else:
            err += k - m + total
        total = m
    return total + err


def hull_area(
    points: NDArray[np.floating],
    hull_prev: NDArray[np.integer],
    hull_next: NDArray[np.integer],
    hull_start: int,
) -> float:
    """
    Twice the signed area of the hull polygon (shoelace formula), positive
    for the clockwise hull built by the sweep. Divide by two for the actual area.
    """
    coords = points.tolist()
    prev = hull_prev.tolist()
    nxt = hull_next.tolist()

    def terms():
        e = hull_start
        while True:
            x, y = coords[e]
            px, py = coords[prev[e]]
            yield (x - px) * (y + py)
            e = nxt[e]
            if e == hull_start:
                return

    return neumaier_sum(terms())


def triangle_area_sum(
    points: NDArray[np.floating], triangles: NDArray[np.integer]
) -> float:
    """
    Twice the summed absolute areas of the triangles. Used to cross-check
    hull_area, not tuned for speed.
    """
    tri = points[np.asarray(triangles, dtype=np.intp).reshape(-1, 3)]
    a, b, c = tri[:, 0], tri[:, 1], tri[:, 2]
    vals = np.abs(
        (b[:, 1] - a[:, 1]) * (c[:, 0] - b[:, 0])
        - (b[:, 0] - a[:, 0]) * (c[:, 1] - b[:, 1])
    )
    return neumaier_sum(vals.tolist())
