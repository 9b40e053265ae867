from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple
import numpy as np

from .errors import MeshTopologyError


NULL_FACE = -1
NULL_HALFEDGE = -1


@dataclass
class Mesh:
    V: np.ndarray
    F: np.ndarray

    def to_halfedge(self) -> "HalfedgeMesh":
        return HalfedgeMesh.from_mesh(self)


class HalfedgeMesh:
    """Index-based half-edge view of a triangle mesh.

    Face ``f`` owns half-edges ``3f``, ``3f+1``, ``3f+2``; half-edge ``3f+k``
    runs from ``F[f, k]`` to ``F[f, (k+1) % 3]``. Edges without a twin get a
    border half-edge (face ``NULL_FACE``) appended after the face half-edges.
    """

    def __init__(self, points: np.ndarray, he_target: np.ndarray, he_next: np.ndarray,
                 he_opposite: np.ndarray, he_face: np.ndarray, n_faces: int):
        self.points = points
        self._target = he_target
        self._next = he_next
        self._opposite = he_opposite
        self._face = he_face
        self._n_faces = int(n_faces)

    @classmethod
    def from_mesh(cls, mesh: Mesh) -> "HalfedgeMesh":
        return cls.from_arrays(mesh.V, mesh.F)

    @classmethod
    def from_arrays(cls, V, F) -> "HalfedgeMesh":
        V = np.asarray(V, dtype=float).reshape(-1, 3)
        F = np.asarray(F, dtype=int).reshape(-1, 3)
        n_v = V.shape[0]
        n_f = F.shape[0]
        if n_f and (F.min() < 0 or F.max() >= n_v):
            raise MeshTopologyError("face references a vertex index out of range")
        target: List[int] = []
        nxt: List[int] = []
        face: List[int] = []
        directed: Dict[Tuple[int, int], int] = {}
        for f in range(n_f):
            tri = [int(F[f, 0]), int(F[f, 1]), int(F[f, 2])]
            if len(set(tri)) != 3:
                raise MeshTopologyError(f"face {f} repeats a vertex: {tri}")
            for k in range(3):
                h = 3 * f + k
                src, tgt = tri[k], tri[(k + 1) % 3]
                if (src, tgt) in directed:
                    raise MeshTopologyError(
                        f"directed edge ({src}, {tgt}) is used by faces {directed[(src, tgt)] // 3} and {f}")
                directed[(src, tgt)] = h
                target.append(tgt)
                nxt.append(3 * f + (k + 1) % 3)
                face.append(f)
        opposite = [NULL_HALFEDGE] * len(target)
        border: List[Tuple[int, int]] = []
        for (src, tgt), h in directed.items():
            twin = directed.get((tgt, src))
            if twin is None:
                border.append((h, src))
            else:
                opposite[h] = twin
        for h, src in border:
            b = len(target)
            target.append(src)
            nxt.append(NULL_HALFEDGE)
            face.append(NULL_FACE)
            opposite.append(h)
            opposite[h] = b
        return cls(V, np.asarray(target, int), np.asarray(nxt, int),
                   np.asarray(opposite, int), np.asarray(face, int), n_f)

    def number_of_faces(self) -> int:
        return self._n_faces

    def number_of_vertices(self) -> int:
        return int(self.points.shape[0])

    def number_of_halfedges(self) -> int:
        return int(self._target.shape[0])

    def faces(self) -> Iterator[int]:
        return iter(range(self._n_faces))

    def vertices(self) -> Iterator[int]:
        return iter(range(self.number_of_vertices()))

    def halfedge(self, f: int) -> int:
        return 3 * int(f)

    def next(self, h: int) -> int:
        return int(self._next[h])

    def prev(self, h: int) -> int:
        return self.next(self.next(h))

    def opposite(self, h: int) -> int:
        return int(self._opposite[h])

    def target(self, h: int) -> int:
        return int(self._target[h])

    def source(self, h: int) -> int:
        return int(self._target[self._opposite[h]])

    def face(self, h: int) -> int:
        return int(self._face[h])

    def is_border(self, h: int) -> bool:
        return self.face(h) == NULL_FACE

    def point(self, v: int) -> np.ndarray:
        return self.points[v]

    def face_vertices(self, f: int) -> Tuple[int, int, int]:
        h = self.halfedge(f)
        return self.target(h), self.target(self.next(h)), self.source(h)

    def is_triangle_mesh(self) -> bool:
        for f in self.faces():
            h = self.halfedge(f)
            if self.next(self.next(self.next(h))) != h:
                return False
        return True
