class TriangulationError(Exception):
    """Base class for errors raised while building a triangulation."""


class DegenerateInputError(TriangulationError, ValueError):
    """The input has no triangulation: too few points, or all of them collinear."""


class MeshInconsistencyError(TriangulationError, RuntimeError):
    """An internal invariant of the mesh or of the advancing hull was broken."""
