import unittest

import numpy as np

from nrrdmeta.check import FIELD_CHECKS, check, check_field, nrrd_check
from nrrdmeta.enums import DIM_MAX, Center, Field, Kind, NrrdType, Space
from nrrdmeta.errors import (
    NRRD,
    FieldCheckError,
    NumericDomainError,
    SpaceInfoError,
    StructuralError,
    TypeSizeError,
    biff,
)
from nrrdmeta.meta import Nrrd


def _volume() -> Nrrd:
    nrrd = Nrrd.wrap(np.zeros((4, 5, 6), dtype=np.float32))
    nrrd.space_set(Space.LEFT_POSTERIOR_SUPERIOR)
    for ai in range(3):
        nrrd.axis[ai].space_direction[:3] = np.eye(3)[ai]
        nrrd.axis[ai].center = Center.CELL
        nrrd.axis[ai].kind = Kind.SPACE
    nrrd.space_origin_set([0.0, 0.0, 0.0])
    return nrrd


class TestDispatchTable(unittest.TestCase):
    def test_every_field_has_a_validator(self):
        self.assertEqual(set(FIELD_CHECKS), {f for f in Field if f != Field.UNKNOWN})

    def test_noop_fields_accept_anything(self):
        nrrd = Nrrd(type=99, dim=-1)
        for field in (Field.COMMENT, Field.CONTENT, Field.LABELS, Field.ENCODING, Field.KEYVALUE, Field.DATA_FILE):
            check_field(nrrd, field)

    def test_check_field_rejects_unknown_field(self):
        with self.assertRaises(StructuralError):
            check_field(Nrrd(), Field.UNKNOWN)

    def test_single_field_on_partial_nrrd(self):
        nrrd = Nrrd(type=NrrdType.SHORT)
        check_field(nrrd, Field.TYPE)
        with self.assertRaises(StructuralError):
            check_field(nrrd, Field.DIMENSION)

    def test_space_field_with_dimension_past_max(self):
        nrrd = Nrrd(type=NrrdType.FLOAT, dim=DIM_MAX + 1)
        nrrd.space_set(Space.RIGHT_ANTERIOR_SUPERIOR)
        check_field(nrrd, Field.SPACE)
        with self.assertRaises(StructuralError):
            check_field(nrrd, Field.DIMENSION)


class TestFieldValidators(unittest.TestCase):
    def setUp(self):
        self.nrrd = _volume()

    def test_type(self):
        self.nrrd.type = NrrdType.UNKNOWN
        with self.assertRaises(TypeSizeError):
            check_field(self.nrrd, Field.TYPE)

    def test_block_size(self):
        self.nrrd.block_size = 12
        with self.assertRaisesRegex(TypeSizeError, "not block"):
            check_field(self.nrrd, Field.BLOCK_SIZE)
        self.nrrd.type = NrrdType.BLOCK
        check_field(self.nrrd, Field.BLOCK_SIZE)
        self.nrrd.block_size = 0
        with self.assertRaises(TypeSizeError):
            check_field(self.nrrd, Field.BLOCK_SIZE)

    def test_dimension(self):
        for dim in (0, 17):
            self.nrrd.dim = dim
            with self.assertRaises(StructuralError):
                check_field(self.nrrd, Field.DIMENSION)

    def test_sizes(self):
        self.nrrd.axis[1].size = 0
        with self.assertRaises(FieldCheckError) as ctx:
            check_field(self.nrrd, Field.SIZES)
        self.assertIsInstance(ctx.exception.__cause__, StructuralError)

    def test_spacings(self):
        nrrd = Nrrd.wrap(np.zeros((2, 2), dtype=np.int16))
        for bad in (0.0, np.inf, -np.inf):
            nrrd.axis[1].spacing = bad
            with self.assertRaises(NumericDomainError):
                check_field(nrrd, Field.SPACINGS)
        nrrd.axis[1].spacing = -2.0
        check_field(nrrd, Field.SPACINGS)

    def test_spacings_also_checks_space_info(self):
        self.nrrd.axis[0].spacing = 1.0
        with self.assertRaises(FieldCheckError) as ctx:
            check_field(self.nrrd, Field.SPACINGS)
        self.assertIsInstance(ctx.exception.__cause__, SpaceInfoError)

    def test_thicknesses(self):
        self.nrrd.axis[0].thickness = 0.0
        check_field(self.nrrd, Field.THICKNESSES)
        for bad in (-1.0, np.inf):
            self.nrrd.axis[0].thickness = bad
            with self.assertRaises(NumericDomainError):
                check_field(self.nrrd, Field.THICKNESSES)

    def test_axis_min_max(self):
        nrrd = Nrrd.wrap(np.zeros(3, dtype=np.int16))
        nrrd.axis[0].min = -np.inf
        with self.assertRaisesRegex(NumericDomainError, "axis 0 min -inf invalid"):
            check_field(nrrd, Field.AXIS_MINS)
        nrrd.axis[0].min = 0.0
        nrrd.axis[0].max = np.inf
        with self.assertRaisesRegex(NumericDomainError, r"axis 0 max \+inf invalid"):
            check_field(nrrd, Field.AXIS_MAXS)

    def test_centers(self):
        self.nrrd.axis[2].center = Center.UNKNOWN
        check_field(self.nrrd, Field.CENTERS)
        self.nrrd.axis[2].center = 7
        with self.assertRaises(StructuralError):
            check_field(self.nrrd, Field.CENTERS)

    def test_kinds(self):
        nrrd = Nrrd.wrap(np.zeros((5, 3), dtype=np.float64))
        nrrd.axis[0].kind = Kind.RGB_COLOR
        check_field(nrrd, Field.KINDS)
        nrrd.axis[0].kind = Kind.RGBA_COLOR
        with self.assertRaisesRegex(TypeSizeError, "requires size 4, but have 3"):
            check_field(nrrd, Field.KINDS)
        nrrd.axis[0].kind = 77
        with self.assertRaises(StructuralError):
            check_field(nrrd, Field.KINDS)

    def test_old_min_max(self):
        self.nrrd.old_min = 3.0
        self.nrrd.old_max = 3.0
        check_field(self.nrrd, Field.OLD_MIN)
        check_field(self.nrrd, Field.OLD_MAX)
        self.nrrd.old_max = np.inf
        with self.assertRaises(NumericDomainError):
            check_field(self.nrrd, Field.OLD_MAX)

    def test_space_fields_share_the_consistency_check(self):
        self.nrrd.space_origin[1] = np.nan
        for field in (
            Field.SPACE,
            Field.SPACE_DIMENSION,
            Field.SPACE_DIRECTIONS,
            Field.UNITS,
            Field.SPACE_UNITS,
            Field.SPACE_ORIGIN,
            Field.MEASUREMENT_FRAME,
        ):
            with self.subTest(field=field):
                with self.assertRaises(FieldCheckError) as ctx:
                    check_field(self.nrrd, field)
                self.assertIsInstance(ctx.exception.__cause__, SpaceInfoError)


class TestCheck(unittest.TestCase):
    def setUp(self):
        biff.done(NRRD)

    def tearDown(self):
        biff.done(NRRD)

    def test_valid_volume_passes_twice(self):
        nrrd = _volume()
        check(nrrd, require_data=True)
        check(nrrd, require_data=True)
        nrrd.check()

    def test_metadata_only(self):
        nrrd = _volume()
        nrrd.data = None
        check(nrrd)
        with self.assertRaisesRegex(StructuralError, "no data"):
            check(nrrd, require_data=True)

    def test_none(self):
        with self.assertRaises(StructuralError):
            check(None)

    def test_empty_nrrd_fails_on_type_first(self):
        with self.assertRaisesRegex(FieldCheckError, "trouble with type field"):
            check(Nrrd())

    def test_first_failure_in_field_order(self):
        nrrd = _volume()
        nrrd.old_min = np.inf
        nrrd.axis[0].thickness = -1.0
        with self.assertRaises(FieldCheckError) as ctx:
            check(nrrd)
        self.assertEqual(str(ctx.exception), "check: trouble with thicknesses field")
        self.assertIsInstance(ctx.exception.__cause__, NumericDomainError)

    def test_check_does_not_mutate(self):
        nrrd = _volume()
        before = nrrd.space_origin.copy()
        check(nrrd)
        np.testing.assert_array_equal(nrrd.space_origin, before)

    def test_nrrd_check_records_the_chain(self):
        nrrd = _volume()
        nrrd.axis[1].units = "mm"
        self.assertFalse(nrrd_check(nrrd))
        text = biff.get(NRRD)
        lines = text.splitlines()
        self.assertEqual(lines[0], "[nrrd] nrrd_check: trouble")
        self.assertEqual(lines[1], "[nrrd] check: trouble with space field")
        self.assertIn("axis[1] has a direction vector", lines[-1])

    def test_nrrd_check_requires_data_by_default(self):
        nrrd = _volume()
        self.assertTrue(nrrd_check(nrrd))
        nrrd.data = None
        self.assertFalse(nrrd_check(nrrd))
        self.assertTrue(nrrd_check(nrrd, require_data=False))


if __name__ == "__main__":
    unittest.main()
