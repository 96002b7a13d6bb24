import math
from dataclasses import dataclass

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from sweepmesh.errors import DegenerateInputError
from sweepmesh.geometry import circumcenter, circumradius, counterclockwise


@dataclass(frozen=True)
class SeedTriangle:
    """First triangle of the sweep, in clockwise order, and its circumcenter."""

    i0: int
    i1: int
    i2: int
    cx: float
    cy: float

    @property
    def vertices(self) -> tuple[int, int, int]:
        return self.i0, self.i1, self.i2


def bounding_box_span(points: NDArray[np.floating]) -> float:
    """Squared length of the bounding box diagonal."""
    width, height = np.max(points, axis=0) - np.min(points, axis=0)
    return float(width * width + height * height)


def select_seed(points: NDArray[np.floating]) -> SeedTriangle:
    """
    Pick the seed triangle of the sweep.

    - i0 is the point closest to the center of the bounding box
    - i1 is the point closest to i0 (ignoring exact duplicates of i0)
    - i2 is the point forming the smallest circumcircle with i0 and i1

    :param points: (n, 2) array of coordinates
    :return: the seed triangle, oriented clockwise
    :raises DegenerateInputError: when all the points are collinear or coincide
    """
    center = (np.min(points, axis=0) + np.max(points, axis=0)) / 2
    i0 = int(np.argmin(np.sum((points - center) ** 2, axis=1)))

    d = np.sum((points - points[i0]) ** 2, axis=1)
    d[d <= 0] = np.inf  # exact duplicates of i0, including i0 itself
    i1 = int(np.argmin(d))
    if not np.isfinite(d[i1]):
        raise DegenerateInputError("All the input points coincide")

    coords = points.tolist()
    i0x, i0y = coords[i0]
    i1x, i1y = coords[i1]

    # find the third point which forms the smallest circumcircle with the first two
    i2 = -1
    min_radius = math.inf
    for i, (x, y) in enumerate(coords):
        if i == i0 or i == i1:
            continue
        r = circumradius(i0x, i0y, i1x, i1y, x, y)
        if r < min_radius:
            i2 = i
            min_radius = r

    if min_radius == math.inf:
        raise DegenerateInputError("No triangulation exists: all the points are collinear")

    i2x, i2y = coords[i2]

    # the rest of the sweep relies on a clockwise seed
    if counterclockwise(i0x, i0y, i1x, i1y, i2x, i2y):
        i1, i2 = i2, i1
        i1x, i1y, i2x, i2y = i2x, i2y, i1x, i1y

    cx, cy = circumcenter(i0x, i0y, i1x, i1y, i2x, i2y)
    if not (math.isfinite(cx) and math.isfinite(cy)):
        raise DegenerateInputError(
            f"Seed triangle ({i0}, {i1}, {i2}) is too flat to have a circumcenter"
        )

    logger.debug(f"Seed triangle ({i0}, {i1}, {i2}) with circumcenter ({cx}, {cy})")
    return SeedTriangle(i0=i0, i1=i1, i2=i2, cx=cx, cy=cy)


def get_sorted_ids(
    points: NDArray[np.floating], cx: float, cy: float
) -> NDArray[np.integer]:
    """
    Order the point indices by distance from (cx, cy), so that every new point
    lands right outside the current hull.

    Ties keep the input order.
    """
    dists = (points[:, 0] - cx) ** 2 + (points[:, 1] - cy) ** 2
    return np.argsort(dists, kind="stable")
