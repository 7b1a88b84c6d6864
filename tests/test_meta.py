import io
import math
import unittest

import numpy as np

from nrrdmeta.config import StateConfig, configure, reset_nrrd_config
from nrrdmeta.enums import DIM_MAX, SPACE_DIM_MAX, AxisInfoField, Center, Kind, NrrdType, Space
from nrrdmeta.errors import StructuralError, TypeSizeError
from nrrdmeta.meta import AxisInfo, Nrrd


class TestConstruction(unittest.TestCase):
    def test_empty_nrrd(self):
        nrrd = Nrrd()
        self.assertIsNone(nrrd.data)
        self.assertEqual(nrrd.dim, 0)
        self.assertEqual(nrrd.type, NrrdType.UNKNOWN)
        self.assertEqual(len(nrrd.axis), DIM_MAX)
        self.assertEqual(nrrd.space, Space.UNKNOWN)
        self.assertEqual(nrrd.space_dim, 0)
        self.assertEqual(nrrd.space_origin.shape, (SPACE_DIM_MAX,))
        self.assertTrue(np.isnan(nrrd.space_origin).all())
        self.assertEqual(nrrd.measurement_frame.shape, (SPACE_DIM_MAX, SPACE_DIM_MAX))
        self.assertTrue(np.isnan(nrrd.measurement_frame).all())
        self.assertEqual(nrrd.space_units, [None] * SPACE_DIM_MAX)
        self.assertTrue(math.isnan(nrrd.old_min))
        for axis in nrrd.axis:
            self.assertEqual(axis.size, 0)
            self.assertTrue(math.isnan(axis.spacing))
            self.assertFalse(axis.has_direction)

    def test_axis_list_is_padded_and_coerced(self):
        nrrd = Nrrd(axis=[{"size": 3, "kind": 2}, AxisInfo(size=4)])
        self.assertEqual(len(nrrd.axis), DIM_MAX)
        self.assertEqual(nrrd.axis[0].size, 3)
        self.assertIs(nrrd.axis[0].kind, Kind.SPACE)
        self.assertEqual(nrrd.axis[1].size, 4)

    def test_short_vectors_are_padded_with_nan(self):
        nrrd = Nrrd(space_origin=[1.0, 2.0, 3.0], measurement_frame=[[1, 0], [0, 1]])
        self.assertEqual(list(nrrd.space_origin[:3]), [1.0, 2.0, 3.0])
        self.assertTrue(np.isnan(nrrd.space_origin[3:]).all())
        self.assertEqual(nrrd.measurement_frame[1, 1], 1.0)
        self.assertTrue(np.isnan(nrrd.measurement_frame[2, 2]))

    def test_bad_vectors_rejected(self):
        with self.assertRaises(TypeError):
            Nrrd(space_origin="origin")
        with self.assertRaises(ValueError):
            Nrrd(space_origin=[0.0] * (SPACE_DIM_MAX + 1))
        with self.assertRaises(ValueError):
            AxisInfo(space_direction=[[1.0, 0.0]])

    def test_invalid_enum_values_are_kept_for_checking(self):
        nrrd = Nrrd(type=99)
        self.assertEqual(nrrd.type, 99)
        self.assertNotIsInstance(nrrd.type, NrrdType)

    def test_wrap(self):
        data = np.zeros((4, 3, 2), dtype=np.uint16)
        nrrd = Nrrd.wrap(data)
        self.assertIs(nrrd.data, data)
        self.assertEqual(nrrd.type, NrrdType.USHORT)
        self.assertEqual(nrrd.dim, 3)
        self.assertEqual(nrrd.axis_info_get(AxisInfoField.SIZE), [2, 3, 4])

    def test_wrap_rejects_unsupported_dtype(self):
        with self.assertRaises(TypeSizeError):
            Nrrd.wrap(np.zeros(3, dtype=np.complex64))
        with self.assertRaises(StructuralError):
            Nrrd.wrap(np.float32(1.0))

    def test_reset_and_copy(self):
        nrrd = Nrrd.wrap(np.ones((2, 2), dtype=np.float32))
        nrrd.comment_add("hello")
        twin = nrrd.copy()
        twin.data[0, 0] = 5
        self.assertEqual(nrrd.data[0, 0], 1)
        self.assertEqual(twin.comments, ["hello"])
        nrrd.reset()
        self.assertIsNone(nrrd.data)
        self.assertEqual(nrrd.dim, 0)
        self.assertEqual(nrrd.comments, [])


class TestAxisInfo(unittest.TestCase):
    def setUp(self):
        self.nrrd = Nrrd(type=NrrdType.FLOAT, dim=2)

    def test_set_then_get(self):
        self.nrrd.axis_info_set(AxisInfoField.SPACING, [0.5, 2.0])
        self.nrrd.axis_info_set(AxisInfoField.CENTER, [Center.CELL, 1])
        self.nrrd.axis_info_set(AxisInfoField.LABEL, ["x", "y"])
        self.assertEqual(self.nrrd.axis_info_get(AxisInfoField.SPACING), [0.5, 2.0])
        self.assertEqual(self.nrrd.axis_info_get(AxisInfoField.CENTER), [Center.CELL, Center.NODE])
        self.assertEqual(self.nrrd.axis_info_get(AxisInfoField.LABEL), ["x", "y"])
        # inactive axes untouched
        self.assertTrue(math.isnan(self.nrrd.axis[2].spacing))

    def test_directions_are_copied(self):
        self.nrrd.axis_info_set(AxisInfoField.SPACE_DIRECTION, [[1, 0, 0], [0, 1, 0]])
        got = self.nrrd.axis_info_get(AxisInfoField.SPACE_DIRECTION)
        got[0][0] = 99.0
        self.assertEqual(self.nrrd.axis[0].space_direction[0], 1.0)

    def test_wrong_count_rejected(self):
        with self.assertRaises(StructuralError):
            self.nrrd.axis_info_set(AxisInfoField.SIZE, [1, 2, 3])

    def test_invalid_field_rejected(self):
        with self.assertRaises(StructuralError):
            self.nrrd.axis_info_get(AxisInfoField.UNKNOWN)
        with self.assertRaises(StructuralError):
            self.nrrd.axis_info_get(42)

    def test_unset_scalars_become_nan(self):
        self.nrrd.axis_info_set(AxisInfoField.SPACING, [None, 2])
        spacing = self.nrrd.axis_info_get(AxisInfoField.SPACING)
        self.assertTrue(math.isnan(spacing[0]))
        self.assertEqual(spacing[1], 2.0)
        self.assertIsInstance(spacing[1], float)
        with self.assertRaises(TypeError):
            self.nrrd.axis_info_set(AxisInfoField.MIN, ["0", 1.0])

        axis = AxisInfo(size=3, spacing=None, thickness=None, min=None, max=None)
        for value in (axis.spacing, axis.thickness, axis.min, axis.max):
            self.assertTrue(math.isnan(value))
        self.assertIsInstance(AxisInfo(min=1).min, float)

    def test_unset_scalars_pass_the_checks(self):
        nrrd = Nrrd(type=NrrdType.FLOAT, dim=1, axis=[{"size": 4, "spacing": None, "min": None}])
        nrrd.check()

    def test_copy_from(self):
        src = AxisInfo(size=3, spacing=1.5, label="z", space_direction=[0, 0, 2])
        dst = AxisInfo()
        dst.copy_from(src)
        self.assertEqual(dst.size, 3)
        self.assertEqual(dst.label, "z")
        self.assertEqual(dst.space_direction[2], 2.0)
        dst.space_direction[2] = 7.0
        self.assertEqual(src.space_direction[2], 2.0)
        dst.reset()
        self.assertEqual(dst.size, 0)
        self.assertFalse(dst.has_direction)


class TestSpaceSetters(unittest.TestCase):
    def test_space_set(self):
        nrrd = Nrrd(dim=3)
        nrrd.space_set(Space.LEFT_POSTERIOR_SUPERIOR)
        self.assertEqual(nrrd.space, Space.LEFT_POSTERIOR_SUPERIOR)
        self.assertEqual(nrrd.space_dim, 3)
        nrrd.space_set(Space.SCANNER_XYZ_TIME)
        self.assertEqual(nrrd.space_dim, 4)

    def test_space_set_unknown_clears_everything(self):
        nrrd = Nrrd(dim=2)
        nrrd.space_set(Space.RIGHT_ANTERIOR_SUPERIOR)
        nrrd.space_origin_set([1.0, 2.0, 3.0])
        nrrd.space_units[0] = "mm"
        nrrd.axis[0].space_direction = np.array([1.0, 0, 0, np.nan, np.nan, np.nan, np.nan, np.nan])
        nrrd.axis[7].space_direction[:3] = 1.0

        nrrd.space_set(Space.UNKNOWN)
        self.assertEqual(nrrd.space, Space.UNKNOWN)
        self.assertEqual(nrrd.space_dim, 0)
        self.assertTrue(np.isnan(nrrd.space_origin).all())
        self.assertEqual(nrrd.space_units, [None] * SPACE_DIM_MAX)
        for axis in nrrd.axis:
            self.assertTrue(np.isnan(axis.space_direction).all())

    def test_space_set_invalid(self):
        nrrd = Nrrd()
        with self.assertRaises(StructuralError):
            nrrd.space_set(Space.last())
        with self.assertRaises(StructuralError):
            nrrd.space_set(-1)

    def test_space_dimension_set(self):
        nrrd = Nrrd()
        nrrd.space_set(Space.RIGHT_ANTERIOR_SUPERIOR)
        nrrd.space_dimension_set(2)
        self.assertEqual(nrrd.space, Space.UNKNOWN)
        self.assertEqual(nrrd.space_dim, 2)
        with self.assertRaises(StructuralError):
            nrrd.space_dimension_set(SPACE_DIM_MAX + 1)

    def test_space_origin_round_trip(self):
        nrrd = Nrrd()
        nrrd.space_dimension_set(2)
        nrrd.space_origin_set([4.0, 5.0, 6.0])
        sdim, origin = nrrd.space_origin_get()
        self.assertEqual(sdim, 2)
        self.assertEqual(list(origin[:2]), [4.0, 5.0])
        self.assertTrue(np.isnan(origin[2:]).all())
        origin[0] = -1.0
        self.assertEqual(nrrd.space_origin[0], 4.0)

    def test_space_origin_set_requires_space_dim(self):
        nrrd = Nrrd()
        with self.assertRaises(StructuralError):
            nrrd.space_origin_set([1.0, 2.0, 3.0])
        nrrd.space_dimension_set(3)
        with self.assertRaises(StructuralError):
            nrrd.space_origin_set([1.0])


class TestContent(unittest.TestCase):
    def tearDown(self):
        reset_nrrd_config()

    def test_content_set(self):
        nin = Nrrd(content="head")
        nout = Nrrd()
        nout.content_set("crop", nin, "%d,%d", 1, 2)
        self.assertEqual(nout.content, "crop(head,1,2)")
        nout.content_set("slice", nin)
        self.assertEqual(nout.content, "slice(head)")

    def test_content_set_on_itself(self):
        nrrd = Nrrd(content="vol")
        nrrd.content_set("quantize", nrrd, "%s", "8")
        self.assertEqual(nrrd.content, "quantize(vol,8)")

    def test_missing_input_content(self):
        nin = Nrrd()
        nout = Nrrd()
        nout.content_set("flip", nin)
        self.assertEqual(nout.content, "flip(???)")

        configure(state=StateConfig(always_set_content=False))
        nout.content_set("flip", nin)
        self.assertIsNone(nout.content)

    def test_content_disabled(self):
        configure(state=StateConfig(disable_content=True))
        nout = Nrrd(content="old")
        nout.content_set("flip", Nrrd(content="in"))
        self.assertIsNone(nout.content)

    def test_none_arguments_rejected(self):
        with self.assertRaises(StructuralError):
            Nrrd().content_set(None, Nrrd())
        with self.assertRaises(StructuralError):
            Nrrd().content_set("f", None)


class TestCommentsAndDescribe(unittest.TestCase):
    def test_comments_and_key_values(self):
        nrrd = Nrrd()
        nrrd.comment_add("  first  ")
        nrrd.comment_add("   ")
        self.assertEqual(nrrd.comments, ["first"])
        nrrd.comment_clear()
        self.assertEqual(nrrd.comments, [])
        nrrd.key_value_add("modality", "MR")
        nrrd.key_value_add("modality", "CT")
        self.assertEqual(nrrd.key_value, {"modality": "CT"})
        with self.assertRaises(TypeError):
            nrrd.key_value_add("n", 1)

    def test_describe(self):
        nrrd = Nrrd.wrap(np.zeros((3, 4), dtype=np.float32))
        nrrd.content = "zeros"
        nrrd.axis[0].label = "x"
        nrrd.comment_add("made in a test")
        out = io.StringIO()
        nrrd.describe(out)
        text = out.getvalue()
        self.assertIn("Data is 12 elements of type float.", text)
        self.assertIn('Content = "zeros"', text)
        self.assertIn("2-dimensional array, with axes:", text)
        self.assertIn('0: ("x") ', text)
        self.assertIn("made in a test", text)


if __name__ == "__main__":
    unittest.main()
