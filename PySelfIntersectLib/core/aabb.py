from dataclasses import dataclass
from typing import Any
import numpy as np


class Aabb:
    def __init__(self, m_min: np.ndarray | None = None, m_max: np.ndarray | None = None):
        if m_min is None or m_max is None:
            self.invalidate()
        else:
            self.m_min = np.asarray(m_min, float).copy()
            self.m_max = np.asarray(m_max, float).copy()

    @classmethod
    def from_points(cls, *points) -> "Aabb":
        box = cls()
        for p in points:
            box.merge_vec(p)
        return box

    def invalidate(self) -> None:
        self.m_min = np.full(3, np.inf)
        self.m_max = np.full(3, -np.inf)

    def is_valid(self) -> bool:
        return bool(np.all(self.m_min <= self.m_max))

    def merge(self, box: "Aabb") -> None:
        self.m_min = np.minimum(self.m_min, box.m_min)
        self.m_max = np.maximum(self.m_max, box.m_max)

    def merge_vec(self, data) -> None:
        v = np.asarray(data, float)
        self.m_min = np.minimum(self.m_min, v)
        self.m_max = np.maximum(self.m_max, v)

    def intersect(self, other: "Aabb") -> bool:
        # closed boxes: touching faces count as overlap
        for k in range(3):
            if self.m_min[k] > other.m_max[k] or self.m_max[k] < other.m_min[k]:
                return False
        return True

    def __repr__(self) -> str:
        return f"Aabb(min={self.m_min.tolist()}, max={self.m_max.tolist()})"


@dataclass
class FaceBox:
    bbox: Aabb
    face: Any
