import sys
from argparse import ArgumentParser
from pathlib import Path

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from sweepmesh.build import triangulate
from sweepmesh.delaunay import signed
from sweepmesh.errors import TriangulationError
from sweepmesh.validate import validate


def load_points(path: Path) -> NDArray[np.floating]:
    """Read a .npy array, or a text file with one "x y" (or "x,y") pair per line."""
    if path.suffix == ".npy":
        return np.load(path)

    text = path.read_text().replace(",", " ")
    rows = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        row = line.split()
        if not row or row[0].startswith("#"):
            continue
        if len(row) != 2:
            raise ValueError(f"{path}:{lineno}: expected 2 values, got {len(row)}")
        rows.append(row)
    return np.array(rows, dtype=np.float64).reshape(-1, 2)


def run(
    points_file: str, output: str | None = None, check: bool = False
) -> None:
    logger.info(f"Reading points from {points_file}")
    points = load_points(Path(points_file))

    triangulation = triangulate(points)
    hull = triangulation.hull
    logger.info(
        f"{triangulation.num_triangles} triangles, {len(hull)} hull vertices, "
        f"hull area {triangulation.hull_area / 2}"
    )

    if check:
        validate(triangulation)

    if output is not None:
        np.savez(
            output,
            triangles=signed(triangulation.triangles),
            halfedges=signed(triangulation.halfedges),
            hull=signed(hull),
        )
        logger.info(f"Saved triangulation to {output}")


def main(argv: list[str] | None = None) -> int:
    parser = ArgumentParser(description="Delaunay triangulation of 2D points")
    parser.add_argument("filename", help="input points (.npy, or text with 2 columns)")
    parser.add_argument("-o", "--output", help="save triangles, halfedges and hull to a .npz file")
    parser.add_argument(
        "--validate", action="store_true", help="check the result with exact predicates"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true")
    verbosity.add_argument("-q", "--quiet", action="store_true")
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else "WARNING" if args.quiet else "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level)

    try:
        run(args.filename, output=args.output, check=args.validate)
    except (TriangulationError, ValueError) as e:
        logger.error(f"Triangulation failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
