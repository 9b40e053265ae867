import os
import tempfile
import unittest

from PySelfIntersectLib import load_obj, self_intersections


OBJ_TEXT = """# unit square as a quad, then a triangle by negative indices
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
f 1/1/1 2/2/1 3/3/1 4/4/1
v 0 0 1
v 1 0 1
v 0 1 1
f -3 -2 -1
"""


class ObjLoaderTests(unittest.TestCase):
    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix=".obj")
        with os.fdopen(fd, "w") as f:
            f.write(OBJ_TEXT)

    def tearDown(self):
        os.remove(self.path)

    def test_quad_is_fanned_and_negative_indices_resolve(self):
        mesh = load_obj(self.path)
        self.assertEqual(mesh.V.shape, (7, 3))
        self.assertEqual(mesh.F.tolist(), [[0, 1, 2], [0, 2, 3], [4, 5, 6]])
        self.assertEqual(self_intersections(mesh), [])

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_obj(self.path + ".missing")

    def test_face_without_vertices(self):
        with open(self.path, "w") as f:
            f.write("v 0 0 0\nv 1 0 0\nf 1 2\n")
        with self.assertRaises(ValueError):
            load_obj(self.path)


if __name__ == "__main__":
    unittest.main()
