from typing import Any, Callable, List, Tuple

from ..core.aabb import FaceBox
from ..core.errors import MeshTopologyError
from ..core.geometry import Sign
from ..core.mesh import HalfedgeMesh
from .execution import RelaxedCounter


def _triangle_vertices(h: int, mesh: HalfedgeMesh) -> List[int]:
    n1 = mesh.next(h)
    n2 = mesh.next(n1)
    if mesh.next(n2) != h:
        raise MeshTopologyError(f"face {mesh.face(h)} is not a triangle")
    return [mesh.target(h), mesh.target(n1), mesh.source(h)]


def do_faces_intersect(h: int, g: int, mesh: HalfedgeMesh, vpm, kernel) -> bool:
    """True when the faces of ``h`` and ``g`` overlap beyond a shared edge or vertex."""
    hv = _triangle_vertices(h, mesh)
    gv = _triangle_vertices(g, mesh)
    fg = mesh.face(g)

    # shared edge: only a coplanar fold-over counts
    e = h
    for i in range(3):
        opp = mesh.opposite(e)
        if mesh.face(opp) == fg:
            p = vpm[hv[i]]
            q = vpm[hv[(i + 1) % 3]]
            r = vpm[hv[(i + 2) % 3]]
            apex = vpm[mesh.target(mesh.next(opp))]
            return (kernel.coplanar(p, q, r, apex)
                    and kernel.coplanar_orientation(r, p, q, apex) == Sign.POSITIVE)
        e = mesh.next(e)

    shared = next(((i, j) for i in range(3) for j in range(3) if hv[i] == gv[j]), None)
    th = kernel.construct_triangle(vpm[hv[0]], vpm[hv[1]], vpm[hv[2]])
    tg = kernel.construct_triangle(vpm[gv[0]], vpm[gv[1]], vpm[gv[2]])
    if shared is not None:
        i, j = shared
        sh = kernel.construct_segment(vpm[hv[(i + 1) % 3]], vpm[hv[(i + 2) % 3]])
        sg = kernel.construct_segment(vpm[gv[(j + 1) % 3]], vpm[gv[(j + 2) % 3]])
        return kernel.do_intersect(th, sg) or kernel.do_intersect(tg, sh)

    return kernel.do_intersect(th, tg)


class StrictIntersectFaces:
    """Pair consumer for the broad phase: emits ``(face_a, face_b)`` for true intersections."""

    def __init__(self, mesh: HalfedgeMesh, vpm, kernel, emit: Callable[[Tuple[Any, Any]], None]):
        self.mesh = mesh
        self.vpm = vpm
        self.kernel = kernel
        self.emit = emit
        self.calls = RelaxedCounter()

    def __call__(self, a: FaceBox, b: FaceBox) -> None:
        self.calls.increment()
        h = self.mesh.halfedge(a.face)
        g = self.mesh.halfedge(b.face)
        if do_faces_intersect(h, g, self.mesh, self.vpm, self.kernel):
            self.emit((a.face, b.face))
