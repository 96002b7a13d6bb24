import math
from collections.abc import Iterator

from loguru import logger

from sweepmesh.errors import MeshInconsistencyError
from sweepmesh.geometry import counterclockwise, points_close, pseudo_angle
from sweepmesh.seed import SeedTriangle
from sweepmesh.topology import INVALID_INDEX


class AdvancingHull:
    """
    Convex hull of the points inserted so far, as a circular doubly linked list
    over point indices, plus an angular hash to find a hull vertex close to a
    new point.

    A vertex that left the hull points to itself in `next`.
    `tri[i]` is a half-edge of the hull edge starting at vertex i.
    """

    def __init__(self, xs: list[float], ys: list[float], seed: SeedTriangle) -> None:
        n = len(xs)
        self.xs = xs
        self.ys = ys
        self.cx = seed.cx
        self.cy = seed.cy

        self.prev = [INVALID_INDEX] * n
        self.next = [INVALID_INDEX] * n
        self.tri = [INVALID_INDEX] * n

        self.hash_size = math.ceil(math.sqrt(n))
        self.hash = [INVALID_INDEX] * self.hash_size

        i0, i1, i2 = seed.vertices
        self.start = i0
        self.size = 3

        self.next[i0] = self.prev[i2] = i1
        self.next[i1] = self.prev[i0] = i2
        self.next[i2] = self.prev[i1] = i0

        self.tri[i0] = 0
        self.tri[i1] = 1
        self.tri[i2] = 2

        for i in seed.vertices:
            self.remember(i)

    def hash_key(self, x: float, y: float) -> int:
        angle = pseudo_angle(x - self.cx, y - self.cy)
        return math.floor(angle * self.hash_size) % self.hash_size

    def remember(self, i: int) -> None:
        """Record i as the latest hull vertex in its angular bucket."""
        self.hash[self.hash_key(self.xs[i], self.ys[i])] = i

    def is_live(self, i: int) -> bool:
        return self.next[i] != i

    def remove(self, i: int) -> None:
        self.next[i] = i
        self.size -= 1

    def splice(self, e: int, i: int, n: int) -> None:
        """Insert i between e and n, dropping whatever used to be in between."""
        self.start = self.prev[i] = e
        self.next[e] = self.prev[n] = i
        self.next[i] = n
        self.size += 1

    def _probe(self, x: float, y: float) -> int:
        key = self.hash_key(x, y)
        for j in range(self.hash_size):
            start = self.hash[(key + j) % self.hash_size]
            if start != INVALID_INDEX and self.is_live(start):
                return start
        logger.error(f"No live hull vertex in the angular hash for ({x}, {y})")
        raise MeshInconsistencyError("Angular hash holds no live hull vertex")

    def find_visible_edge(
        self, x: float, y: float, span: float
    ) -> tuple[int, int] | None:
        """
        Find a hull edge (e, next[e]) that (x, y) sees from outside, walking
        forward from a vertex picked through the angular hash.

        :param span: squared bounding box diagonal, for the near-duplicate test
        :return: the starting vertex e of the edge and the vertex the walk started
            from, or None when the point is a near-duplicate of a hull vertex
            (or sees no edge at all)
        """
        xs, ys = self.xs, self.ys
        start = self.prev[self._probe(x, y)]
        e = start
        while True:
            q = self.next[e]
            if points_close(x, y, xs[e], ys[e], span) or points_close(
                x, y, xs[q], ys[q], span
            ):
                return None
            if counterclockwise(x, y, xs[e], ys[e], xs[q], ys[q]):
                return e, start
            e = q
            if e == start:
                return None

    def replace_tri(self, old: int, new: int) -> None:
        """Point the hull edge cached as half-edge `old` to `new` instead."""
        e = self.start
        while True:
            if self.tri[e] == old:
                logger.trace(f"Hull vertex {e}: half-edge {old} -> {new}")
                self.tri[e] = new
                return
            e = self.prev[e]
            if e == self.start:
                return

    def __iter__(self) -> Iterator[int]:
        e = self.start
        while True:
            yield e
            e = self.next[e]
            if e == self.start:
                return
