import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..core.aabb import Aabb, FaceBox
from ..core.mesh import HalfedgeMesh


logger = logging.getLogger(__name__)


@dataclass
class FaceBoxes:
    boxes: List[FaceBox] = field(default_factory=list)
    degenerate: List[Tuple[Any, Any]] = field(default_factory=list)
    stopped: bool = False


def build_face_boxes(faces: Iterable, mesh: HalfedgeMesh, vpm, kernel,
                     on_degenerate: Optional[Callable[[Tuple[Any, Any]], bool]] = None) -> FaceBoxes:
    """One box per non-degenerate face; collinear faces become ``(f, f)`` pairs.

    ``on_degenerate`` sees each degenerate pair as it is found and returns
    False to stop building (test mode, or a reached result cap).
    """
    result = FaceBoxes()
    for f in dict.fromkeys(faces):
        h = mesh.halfedge(f)
        p = vpm[mesh.target(h)]
        q = vpm[mesh.target(mesh.next(h))]
        r = vpm[mesh.target(mesh.prev(h))]
        # a degenerate face may still cross other faces; only (f, f) is reported for it
        if kernel.collinear(p, q, r):
            pair = (f, f)
            result.degenerate.append(pair)
            if on_degenerate is not None and not on_degenerate(pair):
                result.stopped = True
                break
        else:
            result.boxes.append(FaceBox(Aabb.from_points(p, q, r), f))
    logger.debug("built %d face boxes, %d degenerate faces", len(result.boxes), len(result.degenerate))
    return result
