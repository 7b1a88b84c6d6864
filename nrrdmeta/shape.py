"""Element counts, sizes and other array-shape queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from nrrdmeta.enums import DIM_MAX, HasNonExist, Kind, NrrdType
from nrrdmeta.errors import NRRD, StructuralError, biff

if TYPE_CHECKING:
    from nrrdmeta.meta import Nrrd

SIZE_T_MAX = int(np.iinfo(np.uintp).max)


def size_check(sizes: Sequence[int], dim: int) -> None:
    """Validate a list of axis sizes.

    Args:
        sizes: Per-axis sizes; only the first dim entries are looked at.
        dim: Number of axes.

    Raises:
        StructuralError: If dim is out of range, a size is not a positive
            integer, or the element count does not fit in a size_t.
    """
    me = "size_check"
    if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)) or not 1 <= dim <= DIM_MAX:
        raise StructuralError(f"{me}: dimension {dim} is outside valid range [1,{DIM_MAX}]")
    if len(sizes) < dim:
        raise StructuralError(f"{me}: got {len(sizes)} sizes for dimension {dim}")
    num = 1
    for ai in range(dim):
        size = sizes[ai]
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise StructuralError(f"{me}: axis {ai} size {size!r} is not an integer")
        if size <= 0:
            raise StructuralError(f"{me}: axis {ai} size is {size}, must be positive")
        num *= int(size)
        if num > SIZE_T_MAX:
            raise StructuralError(
                f"{me}: total array size too large for size_t type at axis {ai}"
            )


def element_size(nrrd: Optional["Nrrd"]) -> int:
    """Return the byte width of one element, or 0 if the type is invalid.

    For BLOCK arrays this is the block size, provided it is positive.
    """
    if nrrd is None or not NrrdType.is_valid(nrrd.type):
        return 0
    if nrrd.type != NrrdType.BLOCK:
        return NrrdType(int(nrrd.type)).size
    if nrrd.block_size > 0:
        return int(nrrd.block_size)
    return 0


def element_number(nrrd: Optional["Nrrd"]) -> int:
    """Return the number of elements, the product of the axis sizes.

    Returns 0 when the size information is invalid.
    """
    if nrrd is None:
        return 0
    sizes = [axis.size for axis in nrrd.axis]
    try:
        size_check(sizes, nrrd.dim)
    except StructuralError:
        return 0
    num = 1
    for ai in range(nrrd.dim):
        num *= int(sizes[ai])
    return num


def same_size(a: Optional["Nrrd"], b: Optional["Nrrd"], use_biff: bool = False) -> bool:
    """Return True if a and b have the same dimension and axis sizes.

    The element type is not compared. With use_biff, the reason for a
    mismatch is recorded in the error sink.
    """
    me = "same_size"
    if a is None or b is None:
        biff.maybe_add(NRRD, f"{me}: got None", use_biff)
        return False
    if a.dim != b.dim:
        biff.maybe_add(NRRD, f"{me}: a.dim ({a.dim}) != b.dim ({b.dim})", use_biff)
        return False
    if isinstance(a.dim, bool) or not isinstance(a.dim, (int, np.integer)) or not 0 <= a.dim <= DIM_MAX:
        biff.maybe_add(NRRD, f"{me}: dimension {a.dim} not in valid range [0,{DIM_MAX}]", use_biff)
        return False
    for ai in range(a.dim):
        if a.axis[ai].size != b.axis[ai].size:
            biff.maybe_add(
                NRRD,
                f"{me}: a.axis[{ai}].size ({a.axis[ai].size}) != b.axis[{ai}].size ({b.axis[ai].size})",
                use_biff,
            )
            return False
    return True


def split_sizes(nrrd: "Nrrd", split: int) -> tuple[int, int]:
    """Split the axes at split into a fast and a slow part.

    Requires the per-axis sizes to be set.

    Returns:
        (piece_size, piece_num): the number of samples in axes ``[0, split)``
        and in axes ``[split, dim)``.
    """
    if not 0 <= split <= nrrd.dim:
        raise StructuralError(f"split_sizes: split {split} outside valid range [0,{nrrd.dim}]")
    piece_size = 1
    for ai in range(split):
        piece_size *= int(nrrd.axis[ai].size)
    piece_num = 1
    for ai in range(split, nrrd.dim):
        piece_num *= int(nrrd.axis[ai].size)
    return piece_size, piece_num


def domain_axes_get(nrrd: "Nrrd") -> list[int]:
    """Return the indices of the active axes whose kind is a domain kind.

    Axes with unknown kind count as domain axes.
    """
    out = []
    for ai in range(max(0, min(nrrd.dim, DIM_MAX))):
        kind = nrrd.axis[ai].kind
        if Kind.is_valid(kind) or kind == Kind.UNKNOWN:
            if Kind(int(kind)).is_domain:
                out.append(ai)
    return out


def range_axes_get(nrrd: "Nrrd") -> list[int]:
    """Return the indices of the active axes that are not domain axes."""
    domain = set(domain_axes_get(nrrd))
    return [ai for ai in range(max(0, min(nrrd.dim, DIM_MAX))) if ai not in domain]


def has_non_exist_set(nrrd: Optional["Nrrd"]) -> HasNonExist:
    """Scan the samples for non-existent values and record the answer.

    Integral types (and BLOCK) never hold non-existent values. For floating
    point types every sample is scanned; the previous value of
    ``nrrd.has_non_exist`` is ignored. This is a data pass and is not part
    of ``check()``.

    Returns:
        ``HasNonExist.TRUE`` or ``FALSE``, also stored on the Nrrd.
        ``HasNonExist.UNKNOWN`` without touching the Nrrd if it is None, its
        type is invalid, or a floating point Nrrd has no data or no valid
        axis sizes.
    """
    if nrrd is None or not NrrdType.is_valid(nrrd.type):
        return HasNonExist.UNKNOWN
    if NrrdType(int(nrrd.type)).is_integral:
        nrrd.has_non_exist = HasNonExist.FALSE
        return nrrd.has_non_exist
    if nrrd.data is None:
        return HasNonExist.UNKNOWN
    num = element_number(nrrd)
    if not num:
        return HasNonExist.UNKNOWN
    values = np.asarray(nrrd.data).ravel()[:num]
    if np.isfinite(values).all():
        nrrd.has_non_exist = HasNonExist.FALSE
    else:
        nrrd.has_non_exist = HasNonExist.TRUE
    return nrrd.has_non_exist
