from typing import TYPE_CHECKING

import numpy as np
from loguru import logger

from sweepmesh.errors import MeshInconsistencyError
from sweepmesh.geometry import in_circle

if TYPE_CHECKING:
    from sweepmesh.hull import AdvancingHull

# "no opposite half-edge" / "no vertex"; reads back as -1 through a signed integer view
INVALID_INDEX = int(np.iinfo(np.uintp).max)


def next_halfedge(e: int) -> int:
    return e - 2 if e % 3 == 2 else e + 1


def prev_halfedge(e: int) -> int:
    return e + 2 if e % 3 == 0 else e - 1


def triangle_of_edge(e: int) -> int:
    return e // 3


def edges_of_triangle(t: int) -> tuple[int, int, int]:
    return 3 * t, 3 * t + 1, 3 * t + 2


class MeshStore:
    """
    Flat triangle mesh: `triangles[3t:3t+3]` are the vertices of triangle t and
    `halfedges[e]` is the half-edge opposite to e (INVALID_INDEX on the hull).
    Both lists only ever grow by appending whole triangles.
    """

    def __init__(self, n_points: int) -> None:
        # every triangulation of n points has at most 2n - 5 triangles
        self.max_triangles = max(2 * n_points - 5, 1)
        self.triangles: list[int] = []
        self.halfedges: list[int] = []

    def __len__(self) -> int:
        return len(self.triangles)

    def link(self, a: int, b: int) -> None:
        """Make half-edges a and b opposite to each other (b may be INVALID_INDEX)."""
        halfedges = self.halfedges
        s = len(halfedges)
        if a == s:
            halfedges.append(b)
        elif a < s:
            halfedges[a] = b
        else:
            logger.error(f"Cannot link half-edge {a}: only {s} half-edges exist")
            raise MeshInconsistencyError(f"Cannot link edge {a}")

        if b != INVALID_INDEX:
            s = len(halfedges)
            if b == s:
                halfedges.append(a)
            elif b < s:
                halfedges[b] = a
            else:
                logger.error(f"Cannot link half-edge {b}: only {s} half-edges exist")
                raise MeshInconsistencyError(f"Cannot link edge {b}")

    def add_triangle(self, i0: int, i1: int, i2: int, a: int, b: int, c: int) -> int:
        """
        Append triangle (i0, i1, i2) whose edges are opposite to half-edges a, b, c.

        :return: the first half-edge of the new triangle
        """
        t = len(self.triangles)
        if t >= 3 * self.max_triangles:
            logger.error(f"Triangle {t // 3} exceeds the {self.max_triangles} triangle limit")
            raise MeshInconsistencyError("Too many triangles for the number of points")
        self.triangles.extend((i0, i1, i2))
        self.link(t, a)
        self.link(t + 1, b)
        self.link(t + 2, c)
        return t


class Legalizer:
    """
    Restore the Delaunay condition around a half-edge by flipping edges.

    The flips that a flip makes necessary are tracked on an explicit stack,
    reused between calls.
    """

    def __init__(
        self, mesh: MeshStore, xs: list[float], ys: list[float], hull: "AdvancingHull"
    ) -> None:
        self.mesh = mesh
        self.xs = xs
        self.ys = ys
        self.hull = hull
        self.flips = 0
        self._stack: list[int] = []

    def legalize(self, a: int) -> int:
        r"""
        If the pair of triangles sharing edge a doesn't satisfy the Delaunay
        condition (p1 is inside the circumcircle of [p0, pr, pl]), flip them,
        then do the same check for the new pair of triangles.

                  pl                    pl
                 /||\                  /  \
              al/ || \bl            al/    \a
               /  ||  \              /      \
              /  a||b  \    flip    /___ar___\
            p0\   ||   /p1   =>   p0\---bl---/p1
               \  ||  /              \      /
              ar\ || /br             b\    /br
                 \||/                  \  /
                  pr                    pr

        :return: the last half-edge `ar` processed, a hull edge of the new point
            when called on the edge opposite to it
        """
        triangles = self.mesh.triangles
        halfedges = self.mesh.halfedges
        link = self.mesh.link
        xs, ys = self.xs, self.ys
        stack = self._stack
        stack.clear()

        while True:
            b = halfedges[a]
            a0 = a - a % 3
            ar = a0 + (a + 2) % 3

            if b == INVALID_INDEX:
                if not stack:
                    break
                a = stack.pop()
                continue

            b0 = b - b % 3
            al = a0 + (a + 1) % 3
            bl = b0 + (b + 2) % 3

            p0 = triangles[ar]
            pr = triangles[a]
            pl = triangles[al]
            p1 = triangles[bl]

            illegal = in_circle(
                xs[p0], ys[p0], xs[pr], ys[pr], xs[pl], ys[pl], xs[p1], ys[p1]
            )
            if not illegal:
                if not stack:
                    break
                a = stack.pop()
                continue

            logger.trace(f"Flipping edge {pr}-{pl} into {p0}-{p1}")
            triangles[a] = p1
            triangles[b] = p0
            self.flips += 1

            hbl = halfedges[bl]
            if hbl == INVALID_INDEX:
                # edge swapped on the other side of the hull (rare)
                self.hull.replace_tri(bl, a)

            link(a, hbl)
            link(b, halfedges[ar])
            link(ar, bl)

            stack.append(b0 + (b + 1) % 3)

        return ar
