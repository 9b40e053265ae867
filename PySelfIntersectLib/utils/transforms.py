import numpy as np

from ..core.mesh import Mesh


def quat_wxyz_to_rotmat(q):
    q = np.asarray(q, dtype=float).reshape(4)
    norm = np.linalg.norm(q)
    if norm == 0:
        raise ValueError("zero-norm quaternion")
    w, x, y, z = q / norm
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ], dtype=float)


def apply_pose_to_mesh(mesh: Mesh, origin, quat_wxyz=(1.0, 0.0, 0.0, 0.0)) -> Mesh:
    R = quat_wxyz_to_rotmat(quat_wxyz)
    p = np.asarray(origin, float).reshape(3)
    V_world = np.asarray(mesh.V, float) @ R.T + p[None, :]
    return Mesh(V=V_world, F=np.asarray(mesh.F, int).copy())


def merge_meshes(*meshes: Mesh) -> Mesh:
    """Concatenate meshes into one; face indices of later meshes are shifted."""
    Vs, Fs = [], []
    offset = 0
    for m in meshes:
        V = np.asarray(m.V, float).reshape(-1, 3)
        Vs.append(V)
        Fs.append(np.asarray(m.F, int).reshape(-1, 3) + offset)
        offset += V.shape[0]
    if not Vs:
        return Mesh(V=np.zeros((0, 3)), F=np.zeros((0, 3), int))
    return Mesh(V=np.vstack(Vs), F=np.vstack(Fs))
