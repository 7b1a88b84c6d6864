"""One-time self-test of the assumptions nrrdmeta makes about the platform.

Call ``require_sanity()`` once at startup; everything else assumes it passed.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Callable, Optional

import numpy as np

from nrrdmeta.config import get_nrrd_config
from nrrdmeta.enums import (
    DIM_MAX,
    ENUM_MAXES,
    LLONG_MAX,
    LLONG_MIN,
    TYPE_BIGGEST,
    TYPE_SIZE_MAX,
    ULLONG_MAX,
    Boundary,
    Center,
    EncodingType,
    NrrdType,
)
from nrrdmeta.errors import NRRD, PlatformError, biff

log = logging.getLogger(__name__)

# host C type matching each fixed-width element type
_HOST_CTYPES = {
    NrrdType.CHAR: np.byte,
    NrrdType.UCHAR: np.ubyte,
    NrrdType.SHORT: np.short,
    NrrdType.USHORT: np.ushort,
    NrrdType.INT: np.intc,
    NrrdType.UINT: np.uintc,
    NrrdType.LLONG: np.longlong,
    NrrdType.ULLONG: np.ulonglong,
    NrrdType.FLOAT: np.single,
    NrrdType.DOUBLE: np.double,
}


def check_enums() -> list[str]:
    """Return one message per enumeration whose last value disagrees with its MAX."""
    problems = []
    for enum_cls, declared in ENUM_MAXES.items():
        if enum_cls.last() - 1 != declared:
            problems.append(
                f"check_enums: last vs. MAX incompatibility for {enum_cls.__name__} enum"
            )
    return problems


def _check_config_defaults() -> list[str]:
    me = "sanity"
    defaults = get_nrrd_config().defaults
    problems = []
    if not EncodingType.is_valid(defaults.write_encoding):
        lo, hi = EncodingType.valid_range()
        problems.append(
            f"{me}: default write encoding ({int(defaults.write_encoding)}) not in valid range [{lo},{hi}]"
        )
    if not Center.is_valid(defaults.center):
        lo, hi = Center.valid_range()
        problems.append(f"{me}: default center ({int(defaults.center)}) not in valid range [{lo},{hi}]")
    # unknown means "same as input" here
    if not (defaults.resample_type == NrrdType.UNKNOWN or NrrdType.is_valid(defaults.resample_type)):
        problems.append(
            f"{me}: default resample type ({int(defaults.resample_type)}) not in valid range "
            f"[{NrrdType.UNKNOWN.value},{NrrdType.last() - 1}]"
        )
    if not Boundary.is_valid(defaults.resample_boundary):
        lo, hi = Boundary.valid_range()
        problems.append(
            f"{me}: default resample boundary ({int(defaults.resample_boundary)}) not in valid range [{lo},{hi}]"
        )
    for name in ("measure_type", "measure_histo_type"):
        value = getattr(defaults, name)
        if not NrrdType.is_valid(value):
            lo, hi = NrrdType.valid_range()
            problems.append(f"{me}: default {name} ({int(value)}) not in valid range [{lo},{hi}]")
    return problems


def _check_type_sizes() -> list[str]:
    expected = [NrrdType(t).size for t in _HOST_CTYPES]
    actual = [np.dtype(ctype).itemsize for ctype in _HOST_CTYPES.values()]
    if expected != actual:
        return [f"sanity: type sizes have problem: expected {tuple(expected)} but got {tuple(actual)}"]
    return []


def _check_type_size_max() -> list[str]:
    problems = []
    maxsize = max(t.size for t in NrrdType if t not in (NrrdType.UNKNOWN, NrrdType.BLOCK))
    if maxsize != TYPE_SIZE_MAX:
        problems.append(f"sanity: actual max type size is {maxsize} != {TYPE_SIZE_MAX} == TYPE_SIZE_MAX")
    biggest = np.dtype(TYPE_BIGGEST).itemsize
    if maxsize != biggest:
        problems.append(
            f"sanity: actual max type size is {maxsize} != {biggest} == size of TYPE_BIGGEST"
        )
    return problems


def _check_wraparound() -> list[str]:
    problems = []
    with np.errstate(over="ignore"):
        signed = np.array([LLONG_MAX], dtype=np.int64) + np.int64(1)
        unsigned = np.array([ULLONG_MAX], dtype=np.uint64) + np.uint64(1)
    if int(signed[0]) != LLONG_MIN:
        problems.append(f"sanity: long long int min ({LLONG_MIN}) or max ({LLONG_MAX}) incorrect")
    if int(unsigned[0]) != 0:
        problems.append(f"sanity: unsigned long long int max ({ULLONG_MAX}) incorrect")
    return problems


def _check_invariants() -> list[str]:
    problems = []
    if DIM_MAX < 3:
        problems.append(f"sanity: DIM_MAX ({DIM_MAX}) must be at least 3")
    if not NrrdType.BLOCK.is_integral:
        problems.append("sanity: block type must be considered integral")
    nan = float("nan")
    if nan == nan or math.isfinite(nan):
        problems.append("sanity: NaN sentinel compares equal to itself or exists")
    if math.isfinite(float("inf")):
        problems.append("sanity: infinity exists")
    return problems


SANITY_CHECKS: list[Callable[[], list[str]]] = [
    check_enums,
    _check_config_defaults,
    _check_type_sizes,
    _check_type_size_max,
    _check_wraparound,
    _check_invariants,
]

_sanity_lock = threading.Lock()
_sanity_result: Optional[bool] = None


def sanity() -> bool:
    """Check the platform once and cache the answer for the process.

    The first call runs every check in ``SANITY_CHECKS`` and records each
    failure reason in ``biff`` under the "nrrd" key. Later calls return the
    cached answer without running the checks again.

    Returns:
        True if every check passed.
    """
    global _sanity_result
    with _sanity_lock:
        if _sanity_result is not None:
            return _sanity_result
        problems: list[str] = []
        for sanity_check in SANITY_CHECKS:
            problems.extend(sanity_check())
        for message in problems:
            biff.add(NRRD, message)
        _sanity_result = not problems
        if problems:
            log.error("nrrdmeta sanity check failed: %s", "; ".join(problems))
        else:
            log.debug("nrrdmeta sanity check passed")
        return _sanity_result


def require_sanity() -> None:
    """Raise PlatformError unless ``sanity()`` passes."""
    if not sanity():
        raise PlatformError(f"require_sanity: sanity check failed:\n{biff.get(NRRD)}")


def reset_sanity() -> None:
    """Forget the cached sanity answer so the next ``sanity()`` runs the checks."""
    global _sanity_result
    with _sanity_lock:
        _sanity_result = None
