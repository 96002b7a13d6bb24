from dataclasses import dataclass

import numpy as np
from numpy.typing import DTypeLike, NDArray

from sweepmesh import metrics
from sweepmesh.topology import INVALID_INDEX

__all__ = ["INVALID_INDEX", "Triangulation", "signed"]


def signed(indices: NDArray[np.integer], dtype: DTypeLike = np.int32) -> NDArray[np.integer]:
    """
    View an index array through a signed integer type, as a host expecting
    int32 indices would: INVALID_INDEX reads back as -1.
    """
    return np.asarray(indices, dtype=np.uintp).view(np.intp).astype(dtype)


@dataclass
class Triangulation:
    """
    Delaunay triangulation of `points`.

    Triangle t has vertices `triangles[3t:3t+3]`, in clockwise order, and
    `halfedges[e]` is the half-edge opposite to half-edge e, or INVALID_INDEX
    when e lies on the convex hull.
    """

    points: NDArray[np.floating]
    triangles: NDArray[np.unsignedinteger]
    halfedges: NDArray[np.unsignedinteger]
    hull_prev: NDArray[np.unsignedinteger]
    hull_next: NDArray[np.unsignedinteger]
    hull_tri: NDArray[np.unsignedinteger]
    hull_start: int

    @property
    def num_triangles(self) -> int:
        return len(self.triangles) // 3

    @property
    def triangle_vertices(self) -> NDArray[np.unsignedinteger]:
        return self.triangles.reshape(-1, 3)

    @property
    def hull(self) -> NDArray[np.unsignedinteger]:
        """Hull vertices, walking hull_next from hull_start."""
        nxt = self.hull_next.tolist()
        hull = [self.hull_start]
        e = nxt[self.hull_start]
        while e != self.hull_start:
            hull.append(e)
            e = nxt[e]
        return np.array(hull, dtype=np.uintp)

    @property
    def hull_area(self) -> float:
        """Twice the hull area; divide by two for the actual area."""
        return metrics.hull_area(
            self.points, self.hull_prev, self.hull_next, self.hull_start
        )

    def triangle_area_sum(self) -> float:
        """Twice the summed triangle areas; should match hull_area."""
        return metrics.triangle_area_sum(self.points, self.triangles)

    def edges(self) -> NDArray[np.unsignedinteger]:
        """
        Undirected edges of the mesh, one row each.

        Every interior edge appears as two half-edges; the one with the larger
        index of the pair is kept, along with every hull half-edge.
        """
        e = np.arange(len(self.halfedges), dtype=np.uintp)
        keep = (self.halfedges == INVALID_INDEX) | (e > self.halfedges)
        nxt = np.where(e % 3 == 2, e - 2, e + 1)
        return np.column_stack([self.triangles[e[keep]], self.triangles[nxt[keep]]])
