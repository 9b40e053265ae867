import math
import numpy as np

from .mesh import Mesh


def _project_to_sphere(V: np.ndarray) -> np.ndarray:
    return V / np.linalg.norm(V, axis=1, keepdims=True)


def make_icosphere(R=0.5, center=(0, 0, 0), subdivisions=2) -> Mesh:
    t = (1.0 + math.sqrt(5.0)) / 2.0
    V = _project_to_sphere(np.array([
        [-1, t, 0], [1, t, 0], [-1, -t, 0], [1, -t, 0],
        [0, -1, t], [0, 1, t], [0, -1, -t], [0, 1, -t],
        [t, 0, -1], [t, 0, 1], [-t, 0, -1], [-t, 0, 1],
    ], float))
    F = [
        (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
        (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
        (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
        (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
    ]
    verts = [row for row in V]
    for _ in range(subdivisions):
        midpoints = {}

        def midpoint(i, j):
            key = (min(i, j), max(i, j))
            if key not in midpoints:
                verts.append(0.5 * (verts[i] + verts[j]))
                midpoints[key] = len(verts) - 1
            return midpoints[key]

        refined = []
        for i, j, k in F:
            a, b, c = midpoint(i, j), midpoint(j, k), midpoint(k, i)
            refined += [(i, a, c), (a, j, b), (c, b, k), (a, b, c)]
        F = refined
    V = _project_to_sphere(np.asarray(verts, float))
    return Mesh(V=R * V + np.asarray(center, float), F=np.asarray(F, int))


def make_tetrahedron(scale=1.0, center=(0, 0, 0)) -> Mesh:
    V = np.array([[1, 1, 1], [1, -1, -1], [-1, 1, -1], [-1, -1, 1]], float)
    F = np.array([(0, 1, 2), (0, 3, 1), (0, 2, 3), (1, 3, 2)], int)
    return Mesh(V=scale * V + np.asarray(center, float), F=F)


def make_unit_square() -> Mesh:
    V = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], float)
    F = np.array([(0, 1, 2), (0, 2, 3)], int)
    return Mesh(V=V, F=F)
