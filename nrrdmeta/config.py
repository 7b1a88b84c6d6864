"""Process-wide defaults and state switches for nrrdmeta."""

from __future__ import annotations

import logging
from typing import Self

from pydantic import BaseModel, Field, model_validator

from nrrdmeta.enums import Boundary, Center, EncodingType, NrrdType

log = logging.getLogger(__name__)


class DefaultsConfig(BaseModel):
    """Defaults consulted by writers, resamplers and the origin calculation."""

    write_encoding: EncodingType = Field(
        default=EncodingType.RAW,
        description="Encoding used by writers when none is requested",
    )
    center: Center = Field(
        default=Center.CELL,
        description="Sample centering assumed for axes with unknown centering",
    )
    resample_type: NrrdType = Field(
        default=NrrdType.UNKNOWN,
        description="Output type of resampling (UNKNOWN = same as input)",
    )
    resample_boundary: Boundary = Field(
        default=Boundary.BLEED,
        description="Boundary behavior of resampling",
    )
    measure_type: NrrdType = Field(
        default=NrrdType.FLOAT,
        description="Output type of projection measures",
    )
    measure_histo_type: NrrdType = Field(
        default=NrrdType.FLOAT,
        description="Output type of histogram-based measures",
    )

    @model_validator(mode="after")
    def validate_known_values(self) -> Self:
        """Reject the unknown member where a concrete value is required."""
        from nrrdmeta.errors import ConfigurationError

        required = {
            "write_encoding": self.write_encoding,
            "center": self.center,
            "resample_boundary": self.resample_boundary,
            "measure_type": self.measure_type,
            "measure_histo_type": self.measure_histo_type,
        }
        for name, value in required.items():
            if int(value) == 0:
                raise ConfigurationError(f"{name} cannot be unknown")
        if self.measure_type == NrrdType.BLOCK or self.measure_histo_type == NrrdType.BLOCK:
            raise ConfigurationError("measure types cannot be block")
        return self


class StateConfig(BaseModel):
    """Switches controlling how content strings are composed."""

    disable_content: bool = Field(
        default=False,
        description="Never set content on output arrays",
    )
    always_set_content: bool = Field(
        default=True,
        description="Invent content for outputs even when the input has none",
    )
    unknown_content: str = Field(
        default="???",
        description="Content string used in place of a missing input content",
    )


class NrrdConfig(BaseModel):
    """Configuration for nrrdmeta."""

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    state: StateConfig = Field(default_factory=StateConfig)


# Global mutable configuration
_config: NrrdConfig = NrrdConfig()


def get_nrrd_config() -> NrrdConfig:
    """Get the current nrrdmeta configuration."""
    return _config


def reset_nrrd_config() -> None:
    """Reset nrrdmeta configuration to defaults."""
    global _config
    _config = NrrdConfig()


def configure(
    *,
    defaults: DefaultsConfig | None = None,
    state: StateConfig | None = None,
) -> None:
    """Update global configuration.

    Examples:
        Assume node centering for axes without a known centering:

            configure(defaults=DefaultsConfig(center=Center.NODE))

        Stop composing content strings:

            configure(state=StateConfig(disable_content=True))
    """
    global _config

    updates: dict = {}
    if defaults is not None:
        updates["defaults"] = defaults
    if state is not None:
        updates["state"] = state

    _config = _config.model_copy(update=updates)
    log.debug("nrrdmeta configuration updated: %s", sorted(updates))
