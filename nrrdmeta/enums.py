"""Enumerations and per-type facts shared by every part of nrrdmeta."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional

import numpy as np

DIM_MAX = 16
SPACE_DIM_MAX = 8

# Declared highest value of each enumeration; "last" is always MAX + 1.
TYPE_MAX = 11
CENTER_MAX = 2
KIND_MAX = 31
SPACE_MAX = 12
FIELD_MAX = 33
AXIS_INFO_MAX = 10
ENCODING_TYPE_MAX = 5
FORMAT_TYPE_MAX = 6
BOUNDARY_MAX = 4
HAS_NON_EXIST_MAX = 3
ORIGIN_STATUS_MAX = 4

TYPE_SIZE_MAX = 8
TYPE_BIGGEST = np.float64

LLONG_MAX = 9223372036854775807
LLONG_MIN = -9223372036854775808
ULLONG_MAX = 18446744073709551615


class NrrdEnum(IntEnum):
    """Integer enumeration whose members carry a human-readable label.

    Value 0 is reserved for the "unknown" member; valid values run from 1 to
    ``last() - 1``.
    """

    def __new__(cls, value: int, label: str):
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.label = label
        return obj

    @classmethod
    def last(cls) -> int:
        """Return the sentinel one past the highest declared value."""
        return max(member.value for member in cls) + 1

    @classmethod
    def valid_range(cls) -> tuple[int, int]:
        """Return the inclusive (lowest, highest) range of valid values."""
        return 1, cls.last() - 1

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        """Return True if value is a valid, non-unknown member value."""
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            return False
        lo, hi = cls.valid_range()
        return lo <= int(value) <= hi

    @classmethod
    def str_of(cls, value: Any) -> str:
        """Return the label for value, or the unknown label when invalid."""
        if cls.is_valid(value):
            return cls(int(value)).label
        return cls(0).label

    @classmethod
    def from_str(cls, text: str):
        """Parse a label or member name (case-insensitive).

        Returns:
            The matching member, or the unknown member when nothing matches.
        """
        key = text.strip().lower()
        for member in cls:
            if member.value == 0:
                continue
            if key == member.label.lower() or key == member.name.lower():
                return member
        return cls(0)


class NrrdType(NrrdEnum):
    """Element type of the samples."""

    UNKNOWN = 0, "(unknown_type)"
    CHAR = 1, "signed char"
    UCHAR = 2, "unsigned char"
    SHORT = 3, "short"
    USHORT = 4, "unsigned short"
    INT = 5, "int"
    UINT = 6, "unsigned int"
    LLONG = 7, "long long int"
    ULLONG = 8, "unsigned long long int"
    FLOAT = 9, "float"
    DOUBLE = 10, "double"
    BLOCK = 11, "block"

    @property
    def size(self) -> int:
        """Declared byte width; 0 for UNKNOWN and BLOCK."""
        return _TYPE_SIZE[self]

    @property
    def is_integral(self) -> bool:
        """Whether values of this type can never be non-existent."""
        return _TYPE_IS_INTEGRAL[self]

    @property
    def dtype(self) -> Optional[np.dtype]:
        """Fixed-width numpy dtype for this type, None for UNKNOWN and BLOCK."""
        dt = _TYPE_DTYPE[self]
        return None if dt is None else np.dtype(dt)


_TYPE_SIZE = {
    NrrdType.UNKNOWN: 0,
    NrrdType.CHAR: 1,
    NrrdType.UCHAR: 1,
    NrrdType.SHORT: 2,
    NrrdType.USHORT: 2,
    NrrdType.INT: 4,
    NrrdType.UINT: 4,
    NrrdType.LLONG: 8,
    NrrdType.ULLONG: 8,
    NrrdType.FLOAT: 4,
    NrrdType.DOUBLE: 8,
    NrrdType.BLOCK: 0,
}

# block counts as integral so that it is never scanned for non-existent values
_TYPE_IS_INTEGRAL = {
    NrrdType.UNKNOWN: False,
    NrrdType.CHAR: True,
    NrrdType.UCHAR: True,
    NrrdType.SHORT: True,
    NrrdType.USHORT: True,
    NrrdType.INT: True,
    NrrdType.UINT: True,
    NrrdType.LLONG: True,
    NrrdType.ULLONG: True,
    NrrdType.FLOAT: False,
    NrrdType.DOUBLE: False,
    NrrdType.BLOCK: True,
}

_TYPE_DTYPE = {
    NrrdType.UNKNOWN: None,
    NrrdType.CHAR: np.int8,
    NrrdType.UCHAR: np.uint8,
    NrrdType.SHORT: np.int16,
    NrrdType.USHORT: np.uint16,
    NrrdType.INT: np.int32,
    NrrdType.UINT: np.uint32,
    NrrdType.LLONG: np.int64,
    NrrdType.ULLONG: np.uint64,
    NrrdType.FLOAT: np.float32,
    NrrdType.DOUBLE: np.float64,
    NrrdType.BLOCK: None,
}


class Center(NrrdEnum):
    """Whether samples sit on grid nodes or fill grid cells."""

    UNKNOWN = 0, "(unknown_center)"
    NODE = 1, "node"
    CELL = 2, "cell"


class Kind(NrrdEnum):
    """Semantic role of an axis."""

    UNKNOWN = 0, "(unknown_kind)"
    DOMAIN = 1, "domain"
    SPACE = 2, "space"
    TIME = 3, "time"
    LIST = 4, "list"
    POINT = 5, "point"
    VECTOR = 6, "vector"
    COVARIANT_VECTOR = 7, "covariant-vector"
    NORMAL = 8, "normal"
    STUB = 9, "stub"
    SCALAR = 10, "scalar"
    COMPLEX = 11, "complex"
    VECTOR2D = 12, "2-vector"
    COLOR3 = 13, "3-color"
    RGB_COLOR = 14, "RGB-color"
    HSV_COLOR = 15, "HSV-color"
    XYZ_COLOR = 16, "XYZ-color"
    COLOR4 = 17, "4-color"
    RGBA_COLOR = 18, "RGBA-color"
    VECTOR3D = 19, "3-vector"
    GRADIENT3D = 20, "3-gradient"
    NORMAL3D = 21, "3-normal"
    VECTOR4D = 22, "4-vector"
    QUATERNION = 23, "quaternion"
    SYM_MATRIX2D = 24, "2D-symmetric-matrix"
    MASKED_SYM_MATRIX2D = 25, "2D-masked-symmetric-matrix"
    MATRIX2D = 26, "2D-matrix"
    MASKED_MATRIX2D = 27, "2D-masked-matrix"
    SYM_MATRIX3D = 28, "3D-symmetric-matrix"
    MASKED_SYM_MATRIX3D = 29, "3D-masked-symmetric-matrix"
    MATRIX3D = 30, "3D-matrix"
    MASKED_MATRIX3D = 31, "3D-masked-matrix"

    @property
    def size(self) -> int:
        """Number of samples an axis of this kind must have, 0 if unconstrained."""
        return _KIND_SIZE.get(self, 0)

    @property
    def is_domain(self) -> bool:
        """Whether this kind describes a domain (sampling) axis."""
        return self in (Kind.UNKNOWN, Kind.DOMAIN, Kind.SPACE, Kind.TIME)


_KIND_SIZE = {
    Kind.STUB: 1,
    Kind.SCALAR: 1,
    Kind.COMPLEX: 2,
    Kind.VECTOR2D: 2,
    Kind.COLOR3: 3,
    Kind.RGB_COLOR: 3,
    Kind.HSV_COLOR: 3,
    Kind.XYZ_COLOR: 3,
    Kind.COLOR4: 4,
    Kind.RGBA_COLOR: 4,
    Kind.VECTOR3D: 3,
    Kind.GRADIENT3D: 3,
    Kind.NORMAL3D: 3,
    Kind.VECTOR4D: 4,
    Kind.QUATERNION: 4,
    Kind.SYM_MATRIX2D: 3,
    Kind.MASKED_SYM_MATRIX2D: 4,
    Kind.MATRIX2D: 4,
    Kind.MASKED_MATRIX2D: 5,
    Kind.SYM_MATRIX3D: 6,
    Kind.MASKED_SYM_MATRIX3D: 7,
    Kind.MATRIX3D: 9,
    Kind.MASKED_MATRIX3D: 10,
}


class Space(NrrdEnum):
    """Coordinate system an array may be registered into."""

    UNKNOWN = 0, "(unknown_space)"
    RIGHT_ANTERIOR_SUPERIOR = 1, "right-anterior-superior"
    LEFT_ANTERIOR_SUPERIOR = 2, "left-anterior-superior"
    LEFT_POSTERIOR_SUPERIOR = 3, "left-posterior-superior"
    RIGHT_ANTERIOR_SUPERIOR_TIME = 4, "right-anterior-superior-time"
    LEFT_ANTERIOR_SUPERIOR_TIME = 5, "left-anterior-superior-time"
    LEFT_POSTERIOR_SUPERIOR_TIME = 6, "left-posterior-superior-time"
    SCANNER_XYZ = 7, "scanner-xyz"
    SCANNER_XYZ_TIME = 8, "scanner-xyz-time"
    RIGHT_HANDED_3D = 9, "3D-right-handed"
    LEFT_HANDED_3D = 10, "3D-left-handed"
    RIGHT_HANDED_3D_TIME = 11, "3D-right-handed-time"
    LEFT_HANDED_3D_TIME = 12, "3D-left-handed-time"

    @classmethod
    def from_str(cls, text: str) -> "Space":
        member = _SPACE_ABBREVIATIONS.get(text.strip().upper())
        if member is not None:
            return member
        return super().from_str(text)


_SPACE_ABBREVIATIONS = {
    "RAS": Space.RIGHT_ANTERIOR_SUPERIOR,
    "LAS": Space.LEFT_ANTERIOR_SUPERIOR,
    "LPS": Space.LEFT_POSTERIOR_SUPERIOR,
    "RAST": Space.RIGHT_ANTERIOR_SUPERIOR_TIME,
    "LAST": Space.LEFT_ANTERIOR_SUPERIOR_TIME,
    "LPST": Space.LEFT_POSTERIOR_SUPERIOR_TIME,
}

_SPACE_DIMENSION = {
    Space.RIGHT_ANTERIOR_SUPERIOR: 3,
    Space.LEFT_ANTERIOR_SUPERIOR: 3,
    Space.LEFT_POSTERIOR_SUPERIOR: 3,
    Space.SCANNER_XYZ: 3,
    Space.RIGHT_HANDED_3D: 3,
    Space.LEFT_HANDED_3D: 3,
    Space.RIGHT_ANTERIOR_SUPERIOR_TIME: 4,
    Space.LEFT_ANTERIOR_SUPERIOR_TIME: 4,
    Space.LEFT_POSTERIOR_SUPERIOR_TIME: 4,
    Space.SCANNER_XYZ_TIME: 4,
    Space.RIGHT_HANDED_3D_TIME: 4,
    Space.LEFT_HANDED_3D_TIME: 4,
}


def space_dimension(space: Any) -> int:
    """Return the expected dimension of a space label.

    0 is the right answer for ``Space.UNKNOWN``; it is also returned for
    values outside the enumeration.

    Args:
        space: A ``Space`` member or its integer value.

    Returns:
        3 for spatial labels, 4 for space+time labels, otherwise 0.
    """
    if not Space.is_valid(space):
        return 0
    return _SPACE_DIMENSION[Space(int(space))]


class Field(NrrdEnum):
    """Identifiers of every metadata field, in checking order."""

    UNKNOWN = 0, "(unknown_field)"
    NONFIELD = 1, "nonfield"
    COMMENT = 2, "comment"
    CONTENT = 3, "content"
    NUMBER = 4, "number"
    TYPE = 5, "type"
    BLOCK_SIZE = 6, "block size"
    DIMENSION = 7, "dimension"
    SPACE = 8, "space"
    SPACE_DIMENSION = 9, "space dimension"
    SIZES = 10, "sizes"
    SPACINGS = 11, "spacings"
    THICKNESSES = 12, "thicknesses"
    AXIS_MINS = 13, "axis mins"
    AXIS_MAXS = 14, "axis maxs"
    SPACE_DIRECTIONS = 15, "space directions"
    CENTERS = 16, "centers"
    KINDS = 17, "kinds"
    LABELS = 18, "labels"
    UNITS = 19, "units"
    MIN = 20, "min"
    MAX = 21, "max"
    OLD_MIN = 22, "old min"
    OLD_MAX = 23, "old max"
    ENDIAN = 24, "endian"
    ENCODING = 25, "encoding"
    LINE_SKIP = 26, "line skip"
    BYTE_SKIP = 27, "byte skip"
    KEYVALUE = 28, "key/value"
    SAMPLE_UNITS = 29, "sample units"
    SPACE_UNITS = 30, "space units"
    SPACE_ORIGIN = 31, "space origin"
    MEASUREMENT_FRAME = 32, "measurement frame"
    DATA_FILE = 33, "data file"


class AxisInfoField(NrrdEnum):
    """Per-axis fields reachable through ``Nrrd.axis_info_get``/``axis_info_set``."""

    UNKNOWN = 0, "(unknown_axis_info)"
    SIZE = 1, "size"
    SPACING = 2, "spacing"
    THICKNESS = 3, "thickness"
    MIN = 4, "min"
    MAX = 5, "max"
    SPACE_DIRECTION = 6, "space_direction"
    CENTER = 7, "center"
    KIND = 8, "kind"
    LABEL = 9, "label"
    UNITS = 10, "units"


class EncodingType(NrrdEnum):
    UNKNOWN = 0, "(unknown_encoding)"
    RAW = 1, "raw"
    ASCII = 2, "ascii"
    HEX = 3, "hex"
    GZIP = 4, "gzip"
    BZIP2 = 5, "bzip2"


class FormatType(NrrdEnum):
    UNKNOWN = 0, "(unknown_format)"
    NRRD = 1, "nrrd"
    PNM = 2, "pnm"
    PNG = 3, "png"
    VTK = 4, "vtk"
    TEXT = 5, "text"
    EPS = 6, "eps"


class Boundary(NrrdEnum):
    """Boundary behavior for resampling consumers."""

    UNKNOWN = 0, "(unknown_boundary)"
    PAD = 1, "pad"
    BLEED = 2, "bleed"
    WRAP = 3, "wrap"
    WEIGHT = 4, "weight"


class HasNonExist(NrrdEnum):
    """Result of scanning the samples for non-existent values.

    Unlike the other enumerations, 0 is a real answer here and UNKNOWN is last.
    """

    FALSE = 0, "false"
    TRUE = 1, "true"
    ONLY = 2, "only"
    UNKNOWN = 3, "unknown"

    @classmethod
    def valid_range(cls) -> tuple[int, int]:
        return 0, cls.last() - 2

    @classmethod
    def str_of(cls, value: Any) -> str:
        if cls.is_valid(value):
            return cls(int(value)).label
        return cls.UNKNOWN.label

    @classmethod
    def from_str(cls, text: str) -> "HasNonExist":
        key = text.strip().lower()
        for member in cls:
            if key == member.label or key == member.name.lower():
                return member
        return cls.UNKNOWN


class OriginStatus(NrrdEnum):
    """Outcome of ``origin_calculate``."""

    UNKNOWN = 0, "unknown"
    DIRECTION = 1, "direction"
    NO_MIN = 2, "no min"
    NO_MAX_OR_SPACING = 3, "no max or spacing"
    OKAY = 4, "okay"


# enum class -> declared MAX, in the order the sanity check walks them
ENUM_MAXES: dict[type[NrrdEnum], int] = {
    FormatType: FORMAT_TYPE_MAX,
    NrrdType: TYPE_MAX,
    EncodingType: ENCODING_TYPE_MAX,
    Center: CENTER_MAX,
    AxisInfoField: AXIS_INFO_MAX,
    Field: FIELD_MAX,
    HasNonExist: HAS_NON_EXIST_MAX,
    Kind: KIND_MAX,
    Space: SPACE_MAX,
    Boundary: BOUNDARY_MAX,
    OriginStatus: ORIGIN_STATUS_MAX,
}
