from ..core.mesh import Mesh, HalfedgeMesh


def ensure_mesh(mesh):
    if not hasattr(mesh, "V") or not hasattr(mesh, "F"):
        raise TypeError("mesh must have V and F")


def as_halfedge_mesh(mesh) -> HalfedgeMesh:
    if isinstance(mesh, HalfedgeMesh):
        return mesh
    if isinstance(mesh, Mesh):
        return HalfedgeMesh.from_mesh(mesh)
    ensure_mesh(mesh)
    return HalfedgeMesh.from_arrays(mesh.V, mesh.F)
