"""Per-field validators and the aggregate check of a Nrrd.

Every ``Field`` has exactly one validator. Validators only read the Nrrd and
raise on the first problem found, so a partially built Nrrd can be checked
one field at a time with ``check_field``.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional, Protocol

import numpy as np

from nrrdmeta.enums import DIM_MAX, Center, Field, Kind, NrrdType
from nrrdmeta.errors import (
    NRRD,
    FieldCheckError,
    NrrdError,
    NumericDomainError,
    StructuralError,
    TypeSizeError,
    biff,
)
from nrrdmeta.shape import size_check
from nrrdmeta.space import check_space_info

if TYPE_CHECKING:
    from nrrdmeta.meta import Nrrd

log = logging.getLogger(__name__)


class FieldValidator(Protocol):
    def __call__(self, nrrd: "Nrrd") -> None: ...


def _inf_sign(value: float) -> str:
    return "+" if value > 0 else "-"


def _space_info(nrrd: "Nrrd", me: str, what: str = "trouble") -> None:
    try:
        check_space_info(nrrd)
    except NrrdError as err:
        raise FieldCheckError(f"{me}: {what}") from err


def _active_axes(nrrd: "Nrrd"):
    return nrrd.axis[: max(0, min(nrrd.dim, DIM_MAX))]


def _check_noop(nrrd: "Nrrd") -> None:
    pass


def _check_type(nrrd: "Nrrd") -> None:
    if not NrrdType.is_valid(nrrd.type):
        raise TypeSizeError(f"check_type: type ({nrrd.type}) is not valid")


def _check_block_size(nrrd: "Nrrd") -> None:
    me = "check_block_size"
    if nrrd.type == NrrdType.BLOCK and not nrrd.block_size > 0:
        raise TypeSizeError(
            f"{me}: type is {NrrdType.BLOCK.label} but block_size ({nrrd.block_size}) invalid"
        )
    if nrrd.type != NrrdType.BLOCK and nrrd.block_size > 0:
        raise TypeSizeError(
            f"{me}: type is {NrrdType.str_of(nrrd.type)} (not block) but block_size is {nrrd.block_size}"
        )


def _check_dimension(nrrd: "Nrrd") -> None:
    if isinstance(nrrd.dim, bool) or not isinstance(nrrd.dim, (int, np.integer)) or not 1 <= nrrd.dim <= DIM_MAX:
        raise StructuralError(
            f"check_dimension: dimension {nrrd.dim} is outside valid range [1,{DIM_MAX}]"
        )


def _check_space(nrrd: "Nrrd") -> None:
    _space_info(nrrd, "check_space")


def _check_space_dimension(nrrd: "Nrrd") -> None:
    _space_info(nrrd, "check_space_dimension")


def _check_sizes(nrrd: "Nrrd") -> None:
    me = "check_sizes"
    try:
        size_check([axis.size for axis in nrrd.axis], nrrd.dim)
    except StructuralError as err:
        raise FieldCheckError(f"{me}: trouble with array sizes") from err


def _check_spacings(nrrd: "Nrrd") -> None:
    me = "check_spacings"
    for ai, axis in enumerate(_active_axes(nrrd)):
        val = axis.spacing
        if math.isinf(val) or val == 0:
            raise NumericDomainError(f"{me}: axis {ai} spacing ({val:g}) invalid")
    _space_info(nrrd, me)


def _check_thicknesses(nrrd: "Nrrd") -> None:
    for ai, axis in enumerate(_active_axes(nrrd)):
        val = axis.thickness
        # zero thickness is allowed, negative is not
        if math.isinf(val) or val < 0:
            raise NumericDomainError(f"check_thicknesses: axis {ai} thickness ({val:g}) invalid")


def _check_axis_mins(nrrd: "Nrrd") -> None:
    me = "check_axis_mins"
    for ai, axis in enumerate(_active_axes(nrrd)):
        if math.isinf(axis.min):
            raise NumericDomainError(f"{me}: axis {ai} min {_inf_sign(axis.min)}inf invalid")
    _space_info(nrrd, me)


def _check_axis_maxs(nrrd: "Nrrd") -> None:
    me = "check_axis_maxs"
    for ai, axis in enumerate(_active_axes(nrrd)):
        if math.isinf(axis.max):
            raise NumericDomainError(f"{me}: axis {ai} max {_inf_sign(axis.max)}inf invalid")
    _space_info(nrrd, me)


def _check_space_directions(nrrd: "Nrrd") -> None:
    _space_info(nrrd, "check_space_directions", "space info problem")


def _check_centers(nrrd: "Nrrd") -> None:
    for ai, axis in enumerate(_active_axes(nrrd)):
        if not (axis.center == Center.UNKNOWN or Center.is_valid(axis.center)):
            raise StructuralError(f"check_centers: axis {ai} center {axis.center} invalid")


def _check_kinds(nrrd: "Nrrd") -> None:
    me = "check_kinds"
    for ai, axis in enumerate(_active_axes(nrrd)):
        if not (axis.kind == Kind.UNKNOWN or Kind.is_valid(axis.kind)):
            raise StructuralError(f"{me}: axis {ai} kind {axis.kind} invalid")
        want = Kind(int(axis.kind)).size
        if want and want != axis.size:
            raise TypeSizeError(
                f"{me}: axis {ai} kind {Kind.str_of(axis.kind)} requires size {want}, "
                f"but have {axis.size}"
            )


def _check_units(nrrd: "Nrrd") -> None:
    # units are free-form, but an axis with a direction may not have them
    _space_info(nrrd, "check_units", "space info problem")


def _check_old_min(nrrd: "Nrrd") -> None:
    if math.isinf(nrrd.old_min):
        raise NumericDomainError(f"check_old_min: old min {_inf_sign(nrrd.old_min)}inf invalid")


def _check_old_max(nrrd: "Nrrd") -> None:
    if math.isinf(nrrd.old_max):
        raise NumericDomainError(f"check_old_max: old max {_inf_sign(nrrd.old_max)}inf invalid")


def _check_space_units(nrrd: "Nrrd") -> None:
    _space_info(nrrd, "check_space_units", "space info problem")


def _check_space_origin(nrrd: "Nrrd") -> None:
    # an unset origin is fine, only partially set ones are not
    _space_info(nrrd, "check_space_origin", "space info problem")


def _check_measurement_frame(nrrd: "Nrrd") -> None:
    _space_info(nrrd, "check_measurement_frame", "space info problem")


FIELD_CHECKS: dict[Field, FieldValidator] = {
    Field.NONFIELD: _check_noop,
    Field.COMMENT: _check_noop,
    Field.CONTENT: _check_noop,
    Field.NUMBER: _check_noop,
    Field.TYPE: _check_type,
    Field.BLOCK_SIZE: _check_block_size,
    Field.DIMENSION: _check_dimension,
    Field.SPACE: _check_space,
    Field.SPACE_DIMENSION: _check_space_dimension,
    Field.SIZES: _check_sizes,
    Field.SPACINGS: _check_spacings,
    Field.THICKNESSES: _check_thicknesses,
    Field.AXIS_MINS: _check_axis_mins,
    Field.AXIS_MAXS: _check_axis_maxs,
    Field.SPACE_DIRECTIONS: _check_space_directions,
    Field.CENTERS: _check_centers,
    Field.KINDS: _check_kinds,
    Field.LABELS: _check_noop,
    Field.UNITS: _check_units,
    Field.MIN: _check_noop,
    Field.MAX: _check_noop,
    Field.OLD_MIN: _check_old_min,
    Field.OLD_MAX: _check_old_max,
    Field.ENDIAN: _check_noop,
    Field.ENCODING: _check_noop,
    Field.LINE_SKIP: _check_noop,
    Field.BYTE_SKIP: _check_noop,
    Field.KEYVALUE: _check_noop,
    Field.SAMPLE_UNITS: _check_noop,
    Field.SPACE_UNITS: _check_space_units,
    Field.SPACE_ORIGIN: _check_space_origin,
    Field.MEASUREMENT_FRAME: _check_measurement_frame,
    Field.DATA_FILE: _check_noop,
}


def check_field(nrrd: "Nrrd", field: Field) -> None:
    """Run the validator of a single field.

    Args:
        nrrd: The Nrrd to validate.
        field: Which field to validate.

    Raises:
        StructuralError: If field is not a valid ``Field``.
        NrrdError: Whatever the field's validator raises.
    """
    if not Field.is_valid(field):
        raise StructuralError(f"check_field: field {field} not valid")
    FIELD_CHECKS[Field(int(field))](nrrd)


def check(nrrd: Optional["Nrrd"], require_data: bool = False) -> None:
    """Validate every field of nrrd, in ``Field`` order.

    Args:
        nrrd: The Nrrd to validate.
        require_data: Also require that ``nrrd.data`` is set.

    Raises:
        StructuralError: If nrrd is None, or data is required but missing.
        FieldCheckError: On the first failing field; the cause is chained.
    """
    me = "check"
    if nrrd is None:
        raise StructuralError(f"{me}: got None")
    if require_data and nrrd.data is None:
        raise StructuralError(f"{me}: nrrd has no data")
    for field in Field:
        if field == Field.UNKNOWN:
            continue
        try:
            FIELD_CHECKS[field](nrrd)
        except NrrdError as err:
            raise FieldCheckError(f"{me}: trouble with {field.label} field") from err


def nrrd_check(nrrd: Optional["Nrrd"], require_data: bool = True) -> bool:
    """Boolean front end of ``check`` that records failures in the error sink.

    Returns:
        True if nrrd is valid. Otherwise the messages of the whole error
        chain are added to ``biff`` under the "nrrd" key and False is
        returned.
    """
    try:
        check(nrrd, require_data=require_data)
    except NrrdError as err:
        biff.add_exception(NRRD, err)
        biff.add(NRRD, "nrrd_check: trouble")
        log.debug("nrrd_check failed: %s", err)
        return False
    return True
