from .mesh import Mesh, HalfedgeMesh, NULL_FACE
from .aabb import Aabb, FaceBox
from .geometry import GeometryKernel, ExactPredicatesKernel, FloatKernel, Sign, Segment, Triangle

__all__ = [
    "Mesh", "HalfedgeMesh", "NULL_FACE",
    "Aabb", "FaceBox",
    "GeometryKernel", "ExactPredicatesKernel", "FloatKernel", "Sign", "Segment", "Triangle",
]
