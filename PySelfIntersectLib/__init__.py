from .core.mesh import Mesh, HalfedgeMesh
from .core.geometry import ExactPredicatesKernel, FloatKernel, Sign
from .core.errors import SelfIntersectionError, MeshTopologyError, ParallelExecutionError
from .io.obj_loader import load_obj
from .api.options import Concurrency, SelfIntersectionOptions
from .api.self_intersections import self_intersections, does_self_intersect

__all__ = [
    "Mesh",
    "HalfedgeMesh",
    "ExactPredicatesKernel",
    "FloatKernel",
    "Sign",
    "SelfIntersectionError",
    "MeshTopologyError",
    "ParallelExecutionError",
    "load_obj",
    "Concurrency",
    "SelfIntersectionOptions",
    "self_intersections",
    "does_self_intersect",
]
