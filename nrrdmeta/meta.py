from __future__ import annotations

import copy
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, TextIO, Union

import numpy as np

from nrrdmeta.config import get_nrrd_config
from nrrdmeta.enums import (
    DIM_MAX,
    SPACE_DIM_MAX,
    AxisInfoField,
    Center,
    HasNonExist,
    Kind,
    NrrdEnum,
    NrrdType,
    OriginStatus,
    Space,
    space_dimension,
)
from nrrdmeta.errors import StructuralError, TypeSizeError

NAN = float("nan")


def _nan_vector() -> np.ndarray:
    return np.full(SPACE_DIM_MAX, np.nan, dtype=np.float64)


def _nan_matrix() -> np.ndarray:
    return np.full((SPACE_DIM_MAX, SPACE_DIM_MAX), np.nan, dtype=np.float64)


def _cast_to_vector(value: Any, label: str, length: int = SPACE_DIM_MAX) -> np.ndarray:
    """Cast lists/tuples/ndarrays to a float64 vector padded with NaN.

    Args:
        value: Input list-like value.
        label: Label used in error messages.
        length: Length of the returned vector.

    Returns:
        A new float64 vector of the given length.

    Raises:
        TypeError: If the value is not list-like.
        ValueError: If the value is not 1D or has more than length entries.
    """
    if isinstance(value, (list, tuple, np.ndarray)):
        arr = np.asarray(value, dtype=np.float64)
    else:
        raise TypeError(f"{label} must be a list, tuple, or numpy array")
    if arr.ndim != 1:
        raise ValueError(f"{label} must be 1D")
    if arr.size > length:
        raise ValueError(f"{label} must have at most {length} entries")
    out = np.full(length, np.nan, dtype=np.float64)
    out[: arr.size] = arr
    return out


def _cast_to_matrix(value: Any, label: str, length: int = SPACE_DIM_MAX) -> np.ndarray:
    """Cast a list-of-lists or 2D ndarray to a square float64 matrix padded with NaN."""
    if isinstance(value, (list, tuple, np.ndarray)):
        arr = np.asarray(value, dtype=np.float64)
    else:
        raise TypeError(f"{label} must be a list of lists or a numpy array")
    if arr.ndim != 2:
        raise ValueError(f"{label} must be 2D")
    if arr.shape[0] > length or arr.shape[1] > length:
        raise ValueError(f"{label} must be at most [{length}, {length}]")
    out = np.full((length, length), np.nan, dtype=np.float64)
    out[: arr.shape[0], : arr.shape[1]] = arr
    return out


def _cast_to_float(value: Any, label: str) -> float:
    """Cast a scalar to float, mapping None to NaN."""
    if value is None:
        return NAN
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise TypeError(f"{label} must be a number or None")
    return float(value)


def _coerce_enum(enum_cls: type[NrrdEnum], value: Any) -> Any:
    """Return the enum member for value, leaving invalid values untouched.

    Invalid values are kept as-is so that the field checks can report them.
    """
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        return value
    try:
        return enum_cls(int(value))
    except ValueError:
        return value


_AXIS_SCALARS = ("spacing", "thickness", "min", "max")

@dataclass(slots=True, eq=False)
class AxisInfo:
    """Sampling geometry and semantic role of one axis.

    Attributes:
        size: Number of samples along the axis.
        spacing: Distance between samples, NaN when unset.
        thickness: Slab thickness of a sample, NaN when unset.
        min: Position of the first sample, NaN when unset.
        max: Position of the last sample, NaN when unset.
        space_direction: One unit step along this axis, in space coordinates.
            Either all coefficients exist or all are NaN.
        center: Node or cell centering of the samples.
        kind: Semantic role of the axis.
        label: Free-form axis label.
        units: Units of min/max/spacing.
    """
    size: int = 0
    spacing: float = NAN
    thickness: float = NAN
    min: float = NAN
    max: float = NAN
    space_direction: np.ndarray = field(default_factory=_nan_vector)
    center: Center = Center.UNKNOWN
    kind: Kind = Kind.UNKNOWN
    label: Optional[str] = None
    units: Optional[str] = None

    def __post_init__(self) -> None:
        for name in _AXIS_SCALARS:
            setattr(self, name, _cast_to_float(getattr(self, name), f"axis.{name}"))
        self.space_direction = _cast_to_vector(self.space_direction, "axis.space_direction")
        self.center = _coerce_enum(Center, self.center)
        self.kind = _coerce_enum(Kind, self.kind)

    @property
    def has_direction(self) -> bool:
        """Whether the first space direction coefficient exists."""
        return bool(np.isfinite(self.space_direction[0]))

    def reset(self) -> None:
        """Reset all fields to their unset state."""
        self.size = 0
        self.spacing = NAN
        self.thickness = NAN
        self.min = NAN
        self.max = NAN
        self.space_direction = _nan_vector()
        self.center = Center.UNKNOWN
        self.kind = Kind.UNKNOWN
        self.label = None
        self.units = None

    def copy_from(self, other: "AxisInfo") -> None:
        """Copy every field of other into this axis.

        Safe when other is self.
        """
        if not isinstance(other, AxisInfo):
            raise TypeError(f"copy_from expects AxisInfo, got {type(other).__name__}")
        direction = other.space_direction.copy()
        self.size = other.size
        self.spacing = other.spacing
        self.thickness = other.thickness
        self.min = other.min
        self.max = other.max
        self.space_direction = direction
        self.center = other.center
        self.kind = other.kind
        self.label = other.label
        self.units = other.units

    @classmethod
    def ensure(cls, x: Any) -> "AxisInfo":
        """Coerce x into an AxisInfo.

        Args:
            x: None, an AxisInfo, or a mapping of fields.

        Raises:
            TypeError: If x is not None, AxisInfo, or a mapping.
        """
        if x is None:
            return cls()
        if isinstance(x, cls):
            return x
        if isinstance(x, Mapping):
            return cls(**dict(x))
        raise TypeError(f"Expected None, mapping, or AxisInfo; got {type(x).__name__}")


_AXIS_INFO_ATTR = {
    AxisInfoField.SIZE: "size",
    AxisInfoField.SPACING: "spacing",
    AxisInfoField.THICKNESS: "thickness",
    AxisInfoField.MIN: "min",
    AxisInfoField.MAX: "max",
    AxisInfoField.SPACE_DIRECTION: "space_direction",
    AxisInfoField.CENTER: "center",
    AxisInfoField.KIND: "kind",
    AxisInfoField.LABEL: "label",
    AxisInfoField.UNITS: "units",
}

_DTYPE_TYPE = {
    np.dtype(np.int8): NrrdType.CHAR,
    np.dtype(np.uint8): NrrdType.UCHAR,
    np.dtype(np.int16): NrrdType.SHORT,
    np.dtype(np.uint16): NrrdType.USHORT,
    np.dtype(np.int32): NrrdType.INT,
    np.dtype(np.uint32): NrrdType.UINT,
    np.dtype(np.int64): NrrdType.LLONG,
    np.dtype(np.uint64): NrrdType.ULLONG,
    np.dtype(np.float32): NrrdType.FLOAT,
    np.dtype(np.float64): NrrdType.DOUBLE,
}


@dataclass(slots=True, eq=False)
class Nrrd:
    """An N-dimensional array together with its axis and space metadata.

    A freshly constructed Nrrd is empty: ``dim`` is 0, the type is unknown,
    every geometric field is NaN and no space is set. Setters may leave the
    metadata inconsistent; call ``check()`` before handing it to consumers.

    Axis 0 is the fastest-varying axis, so ``axis[i].size`` corresponds to
    ``data.shape[-1 - i]`` for C-ordered numpy data.

    Attributes:
        data: Backing sample storage, or None.
        type: Element type of the samples.
        dim: Number of active axes.
        axis: DIM_MAX axis records; the first ``dim`` are active.
        space: Coordinate system label, or UNKNOWN.
        space_dim: Dimension of the coordinate system, 0 when there is none.
        space_units: Per-space-axis unit strings.
        space_origin: Location of the center of the first sample in space.
        measurement_frame: Matrix relating measurement axes to space axes.
        block_size: Byte width of one element when the type is BLOCK.
        content: Provenance string.
        sample_units: Units of the sample values.
        old_min: Lowest value before quantization, NaN when unset.
        old_max: Highest value before quantization, NaN when unset.
        has_non_exist: Whether the samples contain non-existent values.
        comments: Free-form comments.
        key_value: Free-form key/value pairs.
    """
    data: Optional[np.ndarray] = None
    type: NrrdType = NrrdType.UNKNOWN
    dim: int = 0
    axis: list[AxisInfo] = field(default_factory=lambda: [AxisInfo() for _ in range(DIM_MAX)])
    space: Space = Space.UNKNOWN
    space_dim: int = 0
    space_units: list[Optional[str]] = field(default_factory=lambda: [None] * SPACE_DIM_MAX)
    space_origin: np.ndarray = field(default_factory=_nan_vector)
    measurement_frame: np.ndarray = field(default_factory=_nan_matrix)
    block_size: int = 0
    content: Optional[str] = None
    sample_units: Optional[str] = None
    old_min: float = NAN
    old_max: float = NAN
    has_non_exist: HasNonExist = HasNonExist.UNKNOWN
    comments: list[str] = field(default_factory=list)
    key_value: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize containers and enum-valued fields."""
        axes = [AxisInfo.ensure(a) for a in self.axis]
        if len(axes) > DIM_MAX:
            raise ValueError(f"axis must have at most {DIM_MAX} entries")
        axes.extend(AxisInfo() for _ in range(DIM_MAX - len(axes)))
        self.axis = axes

        units = list(self.space_units)
        if len(units) > SPACE_DIM_MAX:
            raise ValueError(f"space_units must have at most {SPACE_DIM_MAX} entries")
        units.extend([None] * (SPACE_DIM_MAX - len(units)))
        self.space_units = units

        self.space_origin = _cast_to_vector(self.space_origin, "space_origin")
        self.measurement_frame = _cast_to_matrix(self.measurement_frame, "measurement_frame")
        self.old_min = _cast_to_float(self.old_min, "old_min")
        self.old_max = _cast_to_float(self.old_max, "old_max")
        self.type = _coerce_enum(NrrdType, self.type)
        self.space = _coerce_enum(Space, self.space)
        self.has_non_exist = _coerce_enum(HasNonExist, self.has_non_exist)

    @classmethod
    def wrap(cls, data: np.ndarray) -> "Nrrd":
        """Create a Nrrd around an existing numpy array.

        Sets type, dim and per-axis sizes from the array; axis 0 of the Nrrd
        is the last (fastest) numpy axis. The array is not copied.

        Args:
            data: Array with a fixed-width numeric dtype.

        Returns:
            A new Nrrd referencing data.

        Raises:
            TypeSizeError: If the dtype has no matching element type.
            StructuralError: If data has no axes or more than DIM_MAX axes.
        """
        arr = np.asarray(data)
        nrrd_type = _DTYPE_TYPE.get(arr.dtype.newbyteorder("="))
        if nrrd_type is None:
            raise TypeSizeError(f"wrap: dtype {arr.dtype} has no matching element type")
        if not 1 <= arr.ndim <= DIM_MAX:
            raise StructuralError(f"wrap: array dimension {arr.ndim} outside valid range [1,{DIM_MAX}]")
        nrrd = cls(data=arr, type=nrrd_type, dim=arr.ndim)
        nrrd.axis_info_set(AxisInfoField.SIZE, list(reversed(arr.shape)))
        return nrrd

    def reset(self) -> None:
        """Return this Nrrd to the empty state, dropping data and metadata."""
        fresh = Nrrd()
        for name in self.__slots__:
            setattr(self, name, getattr(fresh, name))

    def copy(self) -> "Nrrd":
        """Return a deep copy, including the data."""
        return copy.deepcopy(self)

    # ----- per-axis access -----

    def axis_info_get(self, info: Union[AxisInfoField, int]) -> list[Any]:
        """Return one field across the active axes.

        Vectors are returned as copies.

        Args:
            info: Which per-axis field to read.

        Returns:
            A list with one value per active axis.

        Raises:
            StructuralError: If info is not a valid field or dim is out of range.
        """
        attr = self._axis_attr(info, "axis_info_get")
        out = []
        for ai in range(self.dim):
            value = getattr(self.axis[ai], attr)
            out.append(value.copy() if isinstance(value, np.ndarray) else value)
        return out

    def axis_info_set(self, info: Union[AxisInfoField, int], values: Sequence[Any]) -> None:
        """Set one field across the active axes, in place.

        Args:
            info: Which per-axis field to write.
            values: One value per active axis.

        Raises:
            StructuralError: If info is invalid or len(values) != dim.
        """
        attr = self._axis_attr(info, "axis_info_set")
        values = list(values)
        if len(values) != self.dim:
            raise StructuralError(
                f"axis_info_set: got {len(values)} values for {self.dim} axes"
            )
        for ai, value in enumerate(values):
            if attr in _AXIS_SCALARS:
                value = _cast_to_float(value, f"axis[{ai}].{attr}")
            elif attr == "space_direction":
                value = _cast_to_vector(value, f"axis[{ai}].space_direction")
            elif attr == "center":
                value = _coerce_enum(Center, value)
            elif attr == "kind":
                value = _coerce_enum(Kind, value)
            setattr(self.axis[ai], attr, value)

    def _axis_attr(self, info: Union[AxisInfoField, int], me: str) -> str:
        if not AxisInfoField.is_valid(info):
            raise StructuralError(f"{me}: axis info {info} not valid")
        if not 0 <= self.dim <= DIM_MAX:
            raise StructuralError(f"{me}: dimension {self.dim} outside valid range [0,{DIM_MAX}]")
        return _AXIS_INFO_ATTR[AxisInfoField(int(info))]

    # ----- space -----

    def space_set(self, space: Union[Space, int]) -> None:
        """Set the space label, and with it space_dim.

        ``Space.UNKNOWN`` instead clears all space information: space_dim,
        every axis direction, the space units and the space origin.

        Raises:
            StructuralError: If space is neither UNKNOWN nor a valid label.
        """
        if isinstance(space, (int, np.integer)) and not isinstance(space, bool) and int(space) == Space.UNKNOWN:
            self.space = Space.UNKNOWN
            self.space_dim = 0
            for axis in self.axis:
                axis.space_direction = _nan_vector()
            self.space_units = [None] * SPACE_DIM_MAX
            self.space_origin = _nan_vector()
            return
        if not Space.is_valid(space):
            raise StructuralError(f"space_set: given space ({space}) not valid")
        self.space = Space(int(space))
        self.space_dim = space_dimension(self.space)

    def space_dimension_set(self, space_dim: int) -> None:
        """Set space_dim alone; the space label becomes UNKNOWN.

        Raises:
            StructuralError: If space_dim is not in [0, SPACE_DIM_MAX].
        """
        if isinstance(space_dim, bool) or not isinstance(space_dim, (int, np.integer)) or not 0 <= space_dim <= SPACE_DIM_MAX:
            raise StructuralError(f"space_dimension_set: given space_dim ({space_dim}) not valid")
        self.space = Space.UNKNOWN
        self.space_dim = int(space_dim)

    def space_origin_get(self) -> tuple[int, np.ndarray]:
        """Return space_dim and a copy of the origin, NaN past space_dim."""
        out = _nan_vector()
        sdim = max(0, min(int(self.space_dim), SPACE_DIM_MAX))
        out[:sdim] = self.space_origin[:sdim]
        return int(self.space_dim), out

    def space_origin_set(self, vector: Sequence[float]) -> None:
        """Set the space origin in place; space or space_dim must already be set.

        Coefficients past space_dim are set to NaN.

        Raises:
            StructuralError: If space_dim is not in (0, SPACE_DIM_MAX] or the
                vector is shorter than space_dim.
        """
        if not 0 < self.space_dim <= SPACE_DIM_MAX:
            raise StructuralError(f"space_origin_set: set spaceDim {self.space_dim} not valid")
        vec = np.asarray(vector, dtype=np.float64).ravel()
        if vec.size < self.space_dim:
            raise StructuralError(
                f"space_origin_set: got {vec.size} coefficients for spaceDim {self.space_dim}"
            )
        origin = _nan_vector()
        origin[: self.space_dim] = vec[: self.space_dim]
        self.space_origin = origin

    def origin_calculate(
        self,
        axis_idx: Sequence[int],
        default_center: Optional[Union[Center, int]] = None,
    ) -> tuple[OriginStatus, np.ndarray]:
        """Derive an origin from per-axis min/max/spacing.

        Args:
            axis_idx: Axes to use, typically ``domain_axes_get(nrrd)``.
            default_center: Centering for axes without one; defaults to the
                configured default center.
        """
        from nrrdmeta.space import origin_calculate

        if default_center is None:
            default_center = get_nrrd_config().defaults.center
        return origin_calculate(self, axis_idx, default_center)

    # ----- content, comments, key/value -----

    def content_set(self, func: str, nin: "Nrrd", fmt: str = "", *args: Any) -> None:
        """Compose this Nrrd's content from an input's content, in place.

        The result looks like ``func(nin_content,extra)`` where extra is
        ``fmt % args``. nin may be self.

        Args:
            func: Name of the operation that produced this Nrrd.
            nin: The input Nrrd.
            fmt: Printf-style format for extra information.
            *args: Arguments for fmt.

        Raises:
            StructuralError: If func, nin or fmt is None.
        """
        if func is None or nin is None or fmt is None:
            raise StructuralError("content_set: got None")
        state = get_nrrd_config().state
        if state.disable_content:
            self.content = None
            return
        if nin.content is None and not state.always_set_content:
            self.content = None
            return
        # read the input before touching our own content, nin may be self
        source = nin.content if nin.content is not None else state.unknown_content
        extra = fmt % args if args else fmt
        self.content = f"{func}({source}{',' if extra else ''}{extra})"

    def comment_add(self, text: str) -> None:
        """Append a comment; empty comments are ignored."""
        if not isinstance(text, str):
            raise TypeError("comment must be a str")
        if text.strip():
            self.comments.append(text.strip())

    def comment_clear(self) -> None:
        self.comments = []

    def key_value_add(self, key: str, value: str) -> None:
        """Set a key/value pair, replacing any previous value for key."""
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("key and value must be str")
        self.key_value[key] = value

    # ----- checks and shape -----

    def check(self, require_data: bool = False) -> None:
        """Run every field check; raises FieldCheckError on the first failure."""
        from nrrdmeta.check import check

        check(self, require_data=require_data)

    def element_size(self) -> int:
        from nrrdmeta.shape import element_size

        return element_size(self)

    def element_number(self) -> int:
        from nrrdmeta.shape import element_number

        return element_number(self)

    def same_size(self, other: "Nrrd") -> bool:
        from nrrdmeta.shape import same_size

        return same_size(self, other)

    def describe(self, file: Optional[TextIO] = None) -> None:
        """Write a verbose description of this Nrrd to file (default stdout)."""
        out = sys.stdout if file is None else file
        out.write(
            f"Data is {self.element_number()} elements of type {NrrdType.str_of(self.type)}.\n"
        )
        if self.type == NrrdType.BLOCK:
            out.write(f"The blocks have size {self.block_size}\n")
        if self.content:
            out.write(f'Content = "{self.content}"\n')
        out.write(f"{self.dim}-dimensional array, with axes:\n")
        for ai in range(max(0, min(self.dim, DIM_MAX))):
            axis = self.axis[ai]
            if axis.label:
                out.write(f'{ai}: ("{axis.label}") ')
            else:
                out.write(f"{ai}: ")
            out.write(f"{Center.str_of(axis.center)}-centered, size={axis.size}, ")
            out.write(f"spacing={axis.spacing:g}, \n")
            out.write(f"thickness={axis.thickness:g}, \n")
            out.write(f"    axis(Min,Max) = ({axis.min:g},{axis.max:g})\n")
            if axis.units:
                out.write(f"units={axis.units}, \n")
        out.write(f"The old min, old max values are {self.old_min:g}, {self.old_max:g}\n")
        if self.comments:
            out.write("Comments:\n")
            for comment in self.comments:
                out.write(f"{comment}\n")
        out.write("\n")
