"""Metadata model and consistency checks for N-dimensional raster arrays."""

from importlib import metadata as _metadata
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nrrdmeta.meta import AxisInfo, Nrrd
    from nrrdmeta.enums import (
        DIM_MAX,
        SPACE_DIM_MAX,
        AxisInfoField,
        Boundary,
        Center,
        EncodingType,
        Field,
        FormatType,
        HasNonExist,
        Kind,
        NrrdType,
        OriginStatus,
        Space,
        space_dimension,
    )
    from nrrdmeta.errors import (
        ConfigurationError,
        FieldCheckError,
        NrrdError,
        NumericDomainError,
        PlatformError,
        SpaceInfoError,
        SpaceRangeError,
        StructuralError,
        TypeSizeError,
        biff,
    )
    from nrrdmeta.config import configure, get_nrrd_config, reset_nrrd_config
    from nrrdmeta.check import check_field, nrrd_check
    from nrrdmeta.space import check_space_info, origin_calculate
    from nrrdmeta.shape import (
        domain_axes_get,
        element_number,
        element_size,
        has_non_exist_set,
        range_axes_get,
        same_size,
    )
    from nrrdmeta.sanity import require_sanity, reset_sanity

_EXPORTS = {
    "nrrdmeta.meta": ("AxisInfo", "Nrrd"),
    "nrrdmeta.enums": (
        "DIM_MAX",
        "SPACE_DIM_MAX",
        "AxisInfoField",
        "Boundary",
        "Center",
        "EncodingType",
        "Field",
        "FormatType",
        "HasNonExist",
        "Kind",
        "NrrdType",
        "OriginStatus",
        "Space",
        "space_dimension",
    ),
    "nrrdmeta.errors": (
        "ConfigurationError",
        "FieldCheckError",
        "NrrdError",
        "NumericDomainError",
        "PlatformError",
        "SpaceInfoError",
        "SpaceRangeError",
        "StructuralError",
        "TypeSizeError",
        "biff",
    ),
    "nrrdmeta.config": ("configure", "get_nrrd_config", "reset_nrrd_config"),
    "nrrdmeta.check": ("check_field", "nrrd_check"),
    "nrrdmeta.space": ("check_space_info", "origin_calculate"),
    "nrrdmeta.shape": (
        "domain_axes_get",
        "element_number",
        "element_size",
        "has_non_exist_set",
        "range_axes_get",
        "same_size",
    ),
    "nrrdmeta.sanity": ("require_sanity", "reset_sanity"),
}

__all__ = ["__version__"] + [name for names in _EXPORTS.values() for name in names]

try:
    __version__ = _metadata.version(__name__)
except _metadata.PackageNotFoundError:  # pragma: no cover - during editable installs pre-build
    __version__ = "0.0.0"


def __getattr__(name: str):
    for module_name, names in _EXPORTS.items():
        if name in names:
            from importlib import import_module

            return getattr(import_module(module_name), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(__all__)
