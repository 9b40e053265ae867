import os
import numpy as np

from ..core.mesh import Mesh


def _parse_index(tok: str, n_vertices: int) -> int:
    i = int(tok.split("/")[0])
    # OBJ indices are 1-based; negative ones count back from the last vertex
    return i - 1 if i > 0 else n_vertices + i


def load_obj(path: str) -> Mesh:
    if not os.path.isfile(path):
        raise FileNotFoundError(path)
    vertices = []
    faces = []
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for lineno, line in enumerate(f, 1):
            parts = line.split()
            if not parts or parts[0].startswith("#"):
                continue
            if parts[0] == "v":
                if len(parts) < 4:
                    raise ValueError(f"{path}:{lineno}: vertex needs three coordinates")
                vertices.append(tuple(float(x) for x in parts[1:4]))
            elif parts[0] == "f":
                idx = [_parse_index(t, len(vertices)) for t in parts[1:]]
                if len(idx) < 3:
                    raise ValueError(f"{path}:{lineno}: face needs at least three vertices")
                for i in range(1, len(idx) - 1):
                    faces.append((idx[0], idx[i], idx[i + 1]))
    if not vertices or not faces:
        raise ValueError(f"OBJ '{path}' has no vertices or faces")
    return Mesh(V=np.asarray(vertices, dtype=float), F=np.asarray(faces, dtype=int))
