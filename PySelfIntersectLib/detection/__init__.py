from .box_builder import FaceBoxes, build_face_boxes
from .broad_phase import DEFAULT_CUTOFF, box_self_intersection, box_intersection
from .narrow_phase import do_faces_intersect, StrictIntersectFaces
from .execution import (
    CancellationToken,
    RelaxedCounter,
    ConcurrentPairs,
    SequentialExecution,
    ParallelExecution,
)

__all__ = [
    "FaceBoxes", "build_face_boxes",
    "DEFAULT_CUTOFF", "box_self_intersection", "box_intersection",
    "do_faces_intersect", "StrictIntersectFaces",
    "CancellationToken", "RelaxedCounter", "ConcurrentPairs", "SequentialExecution", "ParallelExecution",
]
