import unittest
import numpy as np

from PySelfIntersectLib import (
    Mesh, ExactPredicatesKernel, FloatKernel, ParallelExecutionError, SelfIntersectionOptions,
    self_intersections, does_self_intersect,
)
from PySelfIntersectLib.core.primitives import make_icosphere, make_tetrahedron, make_unit_square
from PySelfIntersectLib.io.perf import perf
from PySelfIntersectLib.utils.transforms import apply_pose_to_mesh, merge_meshes


def folded_square() -> Mesh:
    sq = make_unit_square()
    V = sq.V.copy()
    V[3] = (0.7, 0.1, 0.0)
    return Mesh(V=V, F=sq.F)


def with_degenerate_face(mesh: Mesh, x0=10.0) -> Mesh:
    n = mesh.V.shape[0]
    V = np.vstack([mesh.V, [[x0, 0, 0], [x0 + 1, 0, 0], [x0 + 2, 0, 0]]])
    F = np.vstack([mesh.F, [[n, n + 1, n + 2]]])
    return Mesh(V=V, F=F)


def triangle_bundle(n=6) -> Mesh:
    """n triangles that all contain a piece of the z axis and share no vertex."""
    V, F = [], []
    for k in range(n):
        t = k * np.pi / n
        c, s = np.cos(t), np.sin(t)
        V += [(c, s, -1.0), (-c, -s, -1.0), (0.0, 0.0, 1.0 + 0.1 * k)]
        F.append((3 * k, 3 * k + 1, 3 * k + 2))
    return Mesh(V=np.asarray(V, float), F=np.asarray(F, int))


def as_set(pairs):
    return {frozenset(p) for p in pairs}


class CountingKernel(ExactPredicatesKernel):
    def __init__(self):
        self.do_intersect_calls = 0

    def do_intersect(self, a, b):
        self.do_intersect_calls += 1
        return super().do_intersect(a, b)


class FailingKernel(ExactPredicatesKernel):
    def do_intersect(self, a, b):
        raise RuntimeError("kernel failure")


class CleanMeshTests(unittest.TestCase):
    def test_tetrahedron(self):
        tet = make_tetrahedron()
        for mode in ("sequential", "parallel"):
            self.assertEqual(self_intersections(tet, concurrency=mode), [])
            self.assertFalse(does_self_intersect(tet, concurrency=mode))

    def test_flat_square(self):
        self.assertEqual(self_intersections(make_unit_square()), [])
        self.assertFalse(does_self_intersect(make_unit_square()))

    def test_icosphere(self):
        for subdivisions in (1, 2):
            sphere = make_icosphere(R=0.5, subdivisions=subdivisions)
            self.assertEqual(self_intersections(sphere, cutoff=16), [])
            self.assertFalse(does_self_intersect(sphere, concurrency="parallel", max_workers=3))

    def test_empty_face_range(self):
        self.assertEqual(self_intersections(folded_square(), faces=[]), [])
        self.assertFalse(does_self_intersect(folded_square(), faces=[]))


class IntersectingMeshTests(unittest.TestCase):
    def test_folded_square(self):
        pairs = self_intersections(folded_square())
        self.assertEqual(as_set(pairs), {frozenset((0, 1))})
        self.assertEqual(len(pairs), 1)
        self.assertTrue(does_self_intersect(folded_square()))

    def test_overlapping_spheres(self):
        a = make_icosphere(R=0.5, center=(0, 0, 0.3), subdivisions=1)
        b = make_icosphere(R=0.5, center=(0, 0, -0.3), subdivisions=1)
        mesh = merge_meshes(a, b)
        n_a = a.F.shape[0]
        pairs = self_intersections(mesh, cutoff=8)
        self.assertGreater(len(pairs), 0)
        self.assertEqual(len(as_set(pairs)), len(pairs))
        for f, g in pairs:
            self.assertNotEqual(f < n_a, g < n_a)
        for seed in (0, 11):
            parallel = self_intersections(mesh, cutoff=8, concurrency="parallel", max_workers=4, random_seed=seed)
            self.assertEqual(as_set(parallel), as_set(pairs))
            self.assertEqual(len(parallel), len(pairs))
        self.assertTrue(does_self_intersect(mesh, concurrency="parallel", max_workers=4))

    def test_posed_tetrahedra(self):
        tet = make_tetrahedron()
        c, s = np.cos(np.pi / 8), np.sin(np.pi / 8)
        near = apply_pose_to_mesh(tet, origin=(0.5, 0.0, 0.0), quat_wxyz=(c, 0.0, 0.0, s))
        far = apply_pose_to_mesh(tet, origin=(10.0, 0.0, 0.0), quat_wxyz=(c, 0.0, 0.0, s))
        self.assertTrue(does_self_intersect(merge_meshes(tet, near)))
        self.assertFalse(does_self_intersect(merge_meshes(tet, far)))
        self.assertEqual(self_intersections(merge_meshes(tet, far)), [])

    def test_degenerate_face_comes_first(self):
        mesh = with_degenerate_face(folded_square())
        for mode in ("sequential", "parallel"):
            pairs = self_intersections(mesh, concurrency=mode)
            self.assertEqual(pairs[0], (2, 2))
            self.assertEqual(as_set(pairs[1:]), {frozenset((0, 1))})
        self.assertTrue(does_self_intersect(with_degenerate_face(make_unit_square())))

    def test_face_subset(self):
        mesh = with_degenerate_face(folded_square())
        self.assertEqual(self_intersections(mesh, faces=[0, 2]), [(2, 2)])
        self.assertEqual(as_set(self_intersections(mesh, faces=[1, 0])), {frozenset((0, 1))})
        self.assertFalse(does_self_intersect(mesh, faces=[0]))
        # repeated faces are tested once
        self.assertEqual(len(self_intersections(mesh, faces=[0, 1, 0, 1])), 1)

    def test_vertex_point_map_overrides_positions(self):
        sq = make_unit_square()
        points = {i: tuple(p) for i, p in enumerate(sq.V)}
        self.assertFalse(does_self_intersect(sq, vertex_point_map=points))
        points[3] = (0.7, 0.1, 0.0)
        self.assertTrue(does_self_intersect(sq, vertex_point_map=points))

    def test_float_kernel(self):
        self.assertEqual(as_set(self_intersections(folded_square(), kernel=FloatKernel())), {frozenset((0, 1))})
        self.assertFalse(does_self_intersect(make_tetrahedron(), kernel=FloatKernel()))


class MaximumNumberTests(unittest.TestCase):
    def setUp(self):
        self.bundle = triangle_bundle()

    def test_all_pairs_of_bundle(self):
        self.assertEqual(len(self_intersections(self.bundle)), 15)

    def test_sequential_cap_is_exact(self):
        self.assertEqual(len(self_intersections(self.bundle, maximum_number=4)), 4)
        self.assertEqual(len(self_intersections(self.bundle, maximum_number=40)), 15)

    def test_parallel_cap_is_a_lower_bound(self):
        pairs = self_intersections(self.bundle, maximum_number=4, concurrency="parallel", max_workers=4, cutoff=2)
        self.assertGreaterEqual(len(pairs), 4)
        self.assertLessEqual(len(pairs), 15)
        self.assertEqual(len(as_set(pairs)), len(pairs))

    def test_zero_returns_nothing(self):
        self.assertEqual(self_intersections(self.bundle, maximum_number=0), [])

    def test_degenerate_faces_count_toward_cap(self):
        mesh = with_degenerate_face(self.bundle)
        self.assertEqual(self_intersections(mesh, maximum_number=1), [(6, 6)])
        pairs = self_intersections(mesh, maximum_number=3)
        self.assertEqual(len(pairs), 3)
        self.assertEqual(pairs[0], (6, 6))

    def test_options_object_and_overrides(self):
        opts = SelfIntersectionOptions(maximum_number=2)
        self.assertEqual(len(self_intersections(self.bundle, options=opts)), 2)
        self.assertEqual(len(self_intersections(self.bundle, options=opts, maximum_number=5)), 5)
        self.assertEqual(opts.maximum_number, 2)

    def test_custom_output_sink(self):
        class Sink:
            def __init__(self):
                self.items = []

            def append(self, pair):
                self.items.append(pair)

        sink = Sink()
        self.assertIs(self_intersections(self.bundle, out=sink), sink)
        self.assertEqual(len(sink.items), 15)
        existing = [("x", "y")]
        self_intersections(folded_square(), out=existing)
        self.assertEqual(len(existing), 2)


class NarrowPhaseUsageTests(unittest.TestCase):
    def test_far_apart_faces_are_not_classified(self):
        V = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [100, 0, 0], [101, 0, 0], [100, 1, 0]], float)
        mesh = Mesh(V=V, F=np.array([(0, 1, 2), (3, 4, 5)]))
        kernel = CountingKernel()
        self.assertEqual(self_intersections(mesh, kernel=kernel), [])
        self.assertEqual(kernel.do_intersect_calls, 0)

    def test_sequential_test_stops_at_first_witness(self):
        kernel = CountingKernel()
        self.assertTrue(does_self_intersect(triangle_bundle(), kernel=kernel))
        self.assertEqual(kernel.do_intersect_calls, 1)

    def test_kernel_failure_propagates(self):
        with self.assertRaises(RuntimeError) as ctx:
            self_intersections(triangle_bundle(), kernel=FailingKernel())
        self.assertNotIsInstance(ctx.exception, ParallelExecutionError)
        with self.assertRaises(ParallelExecutionError):
            self_intersections(triangle_bundle(), kernel=FailingKernel(), concurrency="parallel", max_workers=2)
        with self.assertRaises(ParallelExecutionError):
            does_self_intersect(triangle_bundle(), kernel=FailingKernel(), concurrency="parallel", max_workers=2)


class ConfigurationTests(unittest.TestCase):
    def test_invalid_options(self):
        for kwargs in ({"maximum_number": -1}, {"concurrency": "sometimes"}, {"cutoff": 0},
                       {"random_seed": -3}, {"max_workers": 0}, {"kernel": object()}):
            with self.assertRaises(ValueError):
                SelfIntersectionOptions(**kwargs)

    def test_invalid_mesh(self):
        with self.assertRaises(TypeError):
            self_intersections(object())

    def test_debug_logging_and_perf_sections(self):
        perf.reset()
        with self.assertLogs("PySelfIntersectLib", level="DEBUG") as logs:
            self_intersections(folded_square())
        self.assertTrue(any("reported" in line for line in logs.output))
        self.assertEqual(perf.counts.get("box_build"), 1)
        self.assertEqual(perf.counts.get("broad_phase"), 1)


if __name__ == "__main__":
    unittest.main()
