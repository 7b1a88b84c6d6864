"""Space/orientation consistency checking and derived geometry."""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence, Union

import numpy as np

from nrrdmeta.enums import DIM_MAX, SPACE_DIM_MAX, Center, OriginStatus, Space, space_dimension
from nrrdmeta.errors import SpaceInfoError, SpaceRangeError

if TYPE_CHECKING:
    from nrrdmeta.meta import Nrrd


class SpaceViolation(str, Enum):
    """Which space-consistency rule a ``SpaceInfoError`` reports."""

    INVALID_SPACE = "invalid_space"
    SPACE_DIM_RANGE = "space_dim_range"
    SPACE_DIM_MISMATCH = "space_dim_mismatch"
    ORIGIN_PARTIAL = "origin_partial"
    FRAME_PARTIAL = "frame_partial"
    DIRECTION_PARTIAL = "direction_partial"
    DIRECTION_EXCLUSIVE = "direction_exclusive"
    SPACE_WITHOUT_DIM = "space_without_dim"
    UNITS_WITHOUT_DIM = "units_without_dim"
    ORIGIN_WITHOUT_DIM = "origin_without_dim"
    DIRECTION_WITHOUT_DIM = "direction_without_dim"


def exists(value: Any) -> bool:
    """Return True if value is a finite number; NaN and +/-inf do not exist."""
    return math.isfinite(value)


def _space_label(space: Any) -> str:
    return Space.str_of(space)


def _axis_count(dim: Any) -> int:
    """Number of axis entries that can be visited for dim, clamped to [0, DIM_MAX]."""
    if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
        return 0
    return max(0, min(int(dim), DIM_MAX))


def check_space_info(nrrd: "Nrrd") -> None:
    """Check that the space information of nrrd is self-consistent.

    Rules are checked in a fixed order and the first violation is raised.
    With a space dimension set, the space label must match it, the origin,
    the measurement frame and every active axis direction must either exist
    in all coefficients or in none, and an axis with a direction may not
    also set min, max, spacing or units. Without a space dimension, no space
    label, space unit, origin coefficient or axis direction may be set.

    Args:
        nrrd: The array metadata to check. Not modified.

    Raises:
        SpaceRangeError: If the space label or space dimension is out of range.
        SpaceInfoError: If any other consistency rule is violated.
    """
    me = "check_space_info"
    space = nrrd.space
    if not (space == Space.UNKNOWN or Space.is_valid(space)):
        raise SpaceRangeError(
            f"{me}: space {space} invalid", violation=SpaceViolation.INVALID_SPACE
        )
    sdim = nrrd.space_dim
    if isinstance(sdim, bool) or not isinstance(sdim, (int, np.integer)) or not 0 <= sdim <= SPACE_DIM_MAX:
        raise SpaceRangeError(
            f"{me}: space dimension {sdim} is outside valid range [0,SPACE_DIM_MAX] = [0,{SPACE_DIM_MAX}]",
            violation=SpaceViolation.SPACE_DIM_RANGE,
        )

    if sdim:
        if space and space_dimension(space) != sdim:
            raise SpaceInfoError(
                f"{me}: space {_space_label(space)} has dimension {space_dimension(space)} "
                f"but spaceDim is {sdim}",
                violation=SpaceViolation.SPACE_DIM_MISMATCH,
            )
        origin = nrrd.space_origin
        first = exists(origin[0])
        for ii in range(sdim):
            if first != exists(origin[ii]):
                raise SpaceInfoError(
                    f"{me}: existance of space origin coefficients must be consistent "
                    f"(val[0] not like val[{ii}])",
                    violation=SpaceViolation.ORIGIN_PARTIAL,
                    index=ii,
                )
        frame = nrrd.measurement_frame
        first = exists(frame[0][0])
        for dd in range(sdim):
            for ii in range(sdim):
                if first != exists(frame[dd][ii]):
                    raise SpaceInfoError(
                        f"{me}: existance of measurement frame coefficients must be consistent: "
                        f"[col][row] [{dd}][{ii}] not like [0][0])",
                        violation=SpaceViolation.FRAME_PARTIAL,
                        axis=dd,
                        index=ii,
                    )
        for dd in range(_axis_count(nrrd.dim)):
            axis = nrrd.axis[dd]
            first = exists(axis.space_direction[0])
            for ii in range(1, sdim):
                if first != exists(axis.space_direction[ii]):
                    raise SpaceInfoError(
                        f"{me}: existance of space direction {dd} coefficients must be "
                        f"consistent (val[0] not like val[{ii}])",
                        violation=SpaceViolation.DIRECTION_PARTIAL,
                        axis=dd,
                        index=ii,
                    )
            if first and (
                exists(axis.min) or exists(axis.max) or exists(axis.spacing) or axis.units
            ):
                raise SpaceInfoError(
                    f"{me}: axis[{dd}] has a direction vector, and so can't have min, max, "
                    "spacing, or units set",
                    violation=SpaceViolation.DIRECTION_EXCLUSIVE,
                    axis=dd,
                )
        return

    if space:
        raise SpaceInfoError(
            f"{me}: space {_space_label(space)} can't be set with spaceDim {sdim}",
            violation=SpaceViolation.SPACE_WITHOUT_DIM,
        )
    if any(nrrd.space_units[:SPACE_DIM_MAX]):
        raise SpaceInfoError(
            f"{me}: spaceDim is 0, but space units is set",
            violation=SpaceViolation.UNITS_WITHOUT_DIM,
        )
    if np.isfinite(nrrd.space_origin).any():
        raise SpaceInfoError(
            f"{me}: spaceDim is 0, but space origin is set",
            violation=SpaceViolation.ORIGIN_WITHOUT_DIM,
        )
    # all DIM_MAX axes, not only the active ones
    for ai in range(DIM_MAX):
        if np.isfinite(nrrd.axis[ai].space_direction).any():
            raise SpaceInfoError(
                f"{me}: spaceDim is 0, but space directions are set",
                violation=SpaceViolation.DIRECTION_WITHOUT_DIM,
                axis=ai,
            )


# ----- space vectors -----
# All helpers work on every SPACE_DIM_MAX coefficient; NaN propagates.


def space_vec_copy(src: Sequence[float]) -> np.ndarray:
    """Return a float64 copy of src."""
    return np.array(src, dtype=np.float64, copy=True)


def space_vec_scale_add2(scl_a: float, vec_a: Sequence[float], scl_b: float, vec_b: Sequence[float]) -> np.ndarray:
    """Return scl_a*vec_a + scl_b*vec_b."""
    return scl_a * np.asarray(vec_a, dtype=np.float64) + scl_b * np.asarray(vec_b, dtype=np.float64)


def space_vec_scale(scl: float, vec: Sequence[float]) -> np.ndarray:
    """Return scl*vec."""
    return scl * np.asarray(vec, dtype=np.float64)


def space_vec_norm(sdim: int, vec: Sequence[float]) -> float:
    """Return the Euclidean norm of the first sdim coefficients."""
    arr = np.asarray(vec, dtype=np.float64)[:sdim]
    return float(np.sqrt(np.dot(arr, arr)))


def space_vec_set_nan(vec: np.ndarray) -> None:
    """Set every coefficient of vec to NaN, in place."""
    vec[:] = np.nan


def space_vec_exists(sdim: int, vec: Sequence[float]) -> bool:
    """Return True if the first sdim coefficients all exist."""
    return bool(np.isfinite(np.asarray(vec, dtype=np.float64)[:sdim]).all())


# ----- derived geometry -----


def origin_calculate(
    nrrd: "Nrrd",
    axis_idx: Sequence[int],
    default_center: Union[Center, int],
) -> tuple[OriginStatus, np.ndarray]:
    """Calculate the location of the center of the first sample.

    For arrays without space directions, the per-axis min, max and spacing
    still imply an origin. The axes to use are given explicitly; they are
    usually the result of ``domain_axes_get``.

    Args:
        nrrd: Array metadata.
        axis_idx: Indices of the axes to calculate the origin along.
        default_center: Centering used for axes with unknown centering;
            must be NODE or CELL.

    Returns:
        A tuple (status, origin) with one origin coordinate per entry of
        axis_idx. Unless status is ``OriginStatus.OKAY`` every coordinate
        is NaN. ``DIRECTION`` means the caller should use
        ``Nrrd.space_origin_get`` instead.
    """
    axis_idx = list(axis_idx)
    origin = np.full(len(axis_idx), np.nan, dtype=np.float64)

    if nrrd is None or default_center not in (Center.CELL, Center.NODE):
        return OriginStatus.UNKNOWN, origin
    if len(axis_idx) > SPACE_DIM_MAX:
        return OriginStatus.UNKNOWN, origin
    for ai in axis_idx:
        if isinstance(ai, bool) or not isinstance(ai, (int, np.integer)) or not 0 <= ai < _axis_count(nrrd.dim):
            return OriginStatus.UNKNOWN, origin

    axes = [nrrd.axis[ai] for ai in axis_idx]
    if any(axis.has_direction for axis in axes):
        return OriginStatus.DIRECTION, origin
    if not all(exists(axis.min) for axis in axes):
        return OriginStatus.NO_MIN, origin
    if not all(exists(axis.max) or exists(axis.spacing) for axis in axes):
        return OriginStatus.NO_MAX_OR_SPACING, origin

    out = np.empty(len(axes), dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        for ii, axis in enumerate(axes):
            center = axis.center if axis.center != Center.UNKNOWN else default_center
            if exists(axis.spacing):
                spacing = np.float64(axis.spacing)
            else:
                count = axis.size if center == Center.CELL else axis.size - 1
                spacing = np.float64(axis.max - axis.min) / np.float64(count)
            out[ii] = axis.min + (spacing / 2 if center == Center.CELL else 0.0)
    return OriginStatus.OKAY, out
