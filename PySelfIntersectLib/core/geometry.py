"""Geometric kernels used by the narrow phase.

A kernel is a small capability object: orientation-style predicates plus
segment/triangle constructions and closed ``do_intersect`` tests. Every
higher-level test is written on top of two sign primitives, ``_orient2d`` and
``_orient3d``, so swapping the kernel swaps the arithmetic only.

``ExactPredicatesKernel`` evaluates each determinant in doubles first and
accepts the sign when it clears Shewchuk's static error bound; otherwise it
recomputes the determinant with ``fractions.Fraction`` on the (exactly
representable) input coordinates. ``FloatKernel`` trusts the doubles.
"""
from enum import IntEnum
from fractions import Fraction
from typing import NamedTuple, Tuple
import numpy as np


Point = Tuple[float, float, float]

_EPS = np.finfo(np.float64).eps / 2.0
CCW_ERRBOUND_A = (3.0 + 16.0 * _EPS) * _EPS
O3D_ERRBOUND_A = (7.0 + 56.0 * _EPS) * _EPS


class Sign(IntEnum):
    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1


class Segment(NamedTuple):
    source: Point
    target: Point


class Triangle(NamedTuple):
    a: Point
    b: Point
    c: Point

    def edges(self):
        return (Segment(self.a, self.b), Segment(self.b, self.c), Segment(self.c, self.a))


def _as_point(p) -> Point:
    return (float(p[0]), float(p[1]), float(p[2]))


def _sign(x) -> int:
    return (x > 0) - (x < 0)


class GeometryKernel:
    name = "abstract"

    def _orient2d(self, ax, ay, bx, by, cx, cy) -> int:
        raise NotImplementedError

    def _orient3d(self, p: Point, q: Point, r: Point, s: Point) -> int:
        raise NotImplementedError

    def _orient2d_projected(self, p: Point, q: Point, r: Point, axis: int) -> int:
        i, j = (axis + 1) % 3, (axis + 2) % 3
        return self._orient2d(p[i], p[j], q[i], q[j], r[i], r[j])

    def _supporting_projection(self, a: Point, b: Point, c: Point) -> Tuple[int, int]:
        for axis in (2, 0, 1):
            o = self._orient2d_projected(a, b, c, axis)
            if o != 0:
                return axis, o
        raise ValueError("triangle is degenerate")

    # predicates

    def orientation(self, p, q, r, s) -> Sign:
        return Sign(self._orient3d(_as_point(p), _as_point(q), _as_point(r), _as_point(s)))

    def coplanar(self, p, q, r, s) -> bool:
        return self.orientation(p, q, r, s) == Sign.ZERO

    def collinear(self, p, q, r) -> bool:
        p, q, r = _as_point(p), _as_point(q), _as_point(r)
        return all(self._orient2d_projected(p, q, r, axis) == 0 for axis in (2, 0, 1))

    def coplanar_orientation(self, p, q, r, s) -> Sign:
        """Side of ``s`` relative to line ``pq``, compared with ``r``.

        Requires the four points to be coplanar and ``p, q, r`` not collinear.
        POSITIVE when ``r`` and ``s`` are on the same side of ``pq``, NEGATIVE
        when on opposite sides, ZERO when ``s`` lies on the line.
        """
        p, q, r, s = _as_point(p), _as_point(q), _as_point(r), _as_point(s)
        try:
            axis, o_r = self._supporting_projection(p, q, r)
        except ValueError:
            raise ValueError("coplanar_orientation requires p, q, r not collinear") from None
        o_s = self._orient2d_projected(p, q, s, axis)
        return Sign(o_r * o_s)

    # constructions

    def construct_segment(self, p, q) -> Segment:
        return Segment(_as_point(p), _as_point(q))

    def construct_triangle(self, p, q, r) -> Triangle:
        return Triangle(_as_point(p), _as_point(q), _as_point(r))

    # intersection tests

    def do_intersect(self, first, second) -> bool:
        if isinstance(first, Triangle) and isinstance(second, Triangle):
            return self._triangle_triangle(first, second)
        if isinstance(first, Triangle) and isinstance(second, Segment):
            return self._segment_triangle(second, first)
        if isinstance(first, Segment) and isinstance(second, Triangle):
            return self._segment_triangle(first, second)
        raise TypeError(f"do_intersect not defined for {type(first).__name__} and {type(second).__name__}")

    def _triangle_triangle(self, t1: Triangle, t2: Triangle) -> bool:
        # two closed triangles meet iff an edge of one meets the other
        for e in t1.edges():
            if self._segment_triangle(e, t2):
                return True
        for e in t2.edges():
            if self._segment_triangle(e, t1):
                return True
        return False

    def _segment_triangle(self, seg: Segment, tri: Triangle) -> bool:
        p, q = seg
        a, b, c = tri
        op = self._orient3d(a, b, c, p)
        oq = self._orient3d(a, b, c, q)
        if op * oq > 0:
            return False
        if op == 0 and oq == 0:
            return self._coplanar_segment_triangle(p, q, a, b, c)
        if op == 0:
            return self._coplanar_point_in_triangle(p, a, b, c)
        if oq == 0:
            return self._coplanar_point_in_triangle(q, a, b, c)
        if op < 0:
            p, q = q, p
        return (self._orient3d(p, q, a, b) <= 0
                and self._orient3d(p, q, b, c) <= 0
                and self._orient3d(p, q, c, a) <= 0)

    def _coplanar_point_in_triangle(self, p: Point, a: Point, b: Point, c: Point) -> bool:
        axis, o = self._supporting_projection(a, b, c)
        return (self._orient2d_projected(a, b, p, axis) * o >= 0
                and self._orient2d_projected(b, c, p, axis) * o >= 0
                and self._orient2d_projected(c, a, p, axis) * o >= 0)

    def _coplanar_segment_triangle(self, p: Point, q: Point, a: Point, b: Point, c: Point) -> bool:
        if self._coplanar_point_in_triangle(p, a, b, c) or self._coplanar_point_in_triangle(q, a, b, c):
            return True
        axis, _ = self._supporting_projection(a, b, c)
        for e0, e1 in ((a, b), (b, c), (c, a)):
            if self._segments_meet_projected(p, q, e0, e1, axis):
                return True
        return False

    def _segments_meet_projected(self, p: Point, q: Point, r: Point, s: Point, axis: int) -> bool:
        d1 = self._orient2d_projected(p, q, r, axis)
        d2 = self._orient2d_projected(p, q, s, axis)
        d3 = self._orient2d_projected(r, s, p, axis)
        d4 = self._orient2d_projected(r, s, q, axis)
        if d1 * d2 < 0 and d3 * d4 < 0:
            return True
        i, j = (axis + 1) % 3, (axis + 2) % 3
        if d1 == 0 and _within(r, p, q, i, j):
            return True
        if d2 == 0 and _within(s, p, q, i, j):
            return True
        if d3 == 0 and _within(p, r, s, i, j):
            return True
        if d4 == 0 and _within(q, r, s, i, j):
            return True
        return False


def _within(x: Point, p: Point, q: Point, i: int, j: int) -> bool:
    # x is known to be collinear with pq in the projection
    return (min(p[i], q[i]) <= x[i] <= max(p[i], q[i])
            and min(p[j], q[j]) <= x[j] <= max(p[j], q[j]))


class FloatKernel(GeometryKernel):
    name = "float"

    def _orient2d(self, ax, ay, bx, by, cx, cy) -> int:
        return _sign((ax - cx) * (by - cy) - (ay - cy) * (bx - cx))

    def _orient3d(self, p, q, r, s) -> int:
        ux, uy, uz = q[0] - p[0], q[1] - p[1], q[2] - p[2]
        vx, vy, vz = r[0] - p[0], r[1] - p[1], r[2] - p[2]
        wx, wy, wz = s[0] - p[0], s[1] - p[1], s[2] - p[2]
        det = ux * (vy * wz - vz * wy) + uy * (vz * wx - vx * wz) + uz * (vx * wy - vy * wx)
        return _sign(det)


class ExactPredicatesKernel(GeometryKernel):
    name = "exact_predicates"

    def _orient2d(self, ax, ay, bx, by, cx, cy) -> int:
        left = (ax - cx) * (by - cy)
        right = (ay - cy) * (bx - cx)
        det = left - right
        errbound = CCW_ERRBOUND_A * (abs(left) + abs(right))
        if det > errbound or -det > errbound:
            return _sign(det)
        ax, ay, bx, by, cx, cy = (Fraction(v) for v in (ax, ay, bx, by, cx, cy))
        return _sign((ax - cx) * (by - cy) - (ay - cy) * (bx - cx))

    def _orient3d(self, p, q, r, s) -> int:
        ux, uy, uz = q[0] - p[0], q[1] - p[1], q[2] - p[2]
        vx, vy, vz = r[0] - p[0], r[1] - p[1], r[2] - p[2]
        wx, wy, wz = s[0] - p[0], s[1] - p[1], s[2] - p[2]
        vywz, vzwy = vy * wz, vz * wy
        vzwx, vxwz = vz * wx, vx * wz
        vxwy, vywx = vx * wy, vy * wx
        det = ux * (vywz - vzwy) + uy * (vzwx - vxwz) + uz * (vxwy - vywx)
        permanent = (abs(ux) * (abs(vywz) + abs(vzwy))
                     + abs(uy) * (abs(vzwx) + abs(vxwz))
                     + abs(uz) * (abs(vxwy) + abs(vywx)))
        errbound = O3D_ERRBOUND_A * permanent
        if det > errbound or -det > errbound:
            return _sign(det)
        return _exact_orient3d(p, q, r, s)


def _exact_orient3d(p: Point, q: Point, r: Point, s: Point) -> int:
    p, q, r, s = ([Fraction(c) for c in pt] for pt in (p, q, r, s))
    ux, uy, uz = q[0] - p[0], q[1] - p[1], q[2] - p[2]
    vx, vy, vz = r[0] - p[0], r[1] - p[1], r[2] - p[2]
    wx, wy, wz = s[0] - p[0], s[1] - p[1], s[2] - p[2]
    return _sign(ux * (vy * wz - vz * wy) + uy * (vz * wx - vx * wz) + uz * (vx * wy - vy * wx))
