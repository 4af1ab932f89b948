"""Structured output dataclasses for lake ice results.

This module provides dataclasses for organizing and accessing model outputs:
- IceMeltFluxes: Per-timestep diagnostics of the snow/ice layer as arrays
- ModelOutput: Fluxes with time index and the final model states
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Generic, TypeVar

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from .types import LakeState, SnowState

__all__ = ["FLUX_NAMES", "IceMeltFluxes", "ModelOutput"]

# Type variable for flux types
F = TypeVar("F")


@dataclass(frozen=True)
class IceMeltFluxes:
    """Lake ice model outputs as arrays.

    All arrays have the same length as the input forcing data.

    Attributes:
        melt: Liquid water drained from the surface layer to the lake [mm].
        ice_melt: Lake ice melted into the lake [m].
        snowmelt: Melt computed from the surface energy surplus [m].
        refrozen_water: Surface liquid water refrozen [m].
        melt_energy: Energy released by refreezing, negative when melting [W/m2].
        lw_net: Net longwave radiation [W/m2].
        advection: Energy advected by rain [W/m2].
        delta_cc: Cold content change of the ice column [W/m2].
        snow_flux: Conducted flux through the ice column [W/m2].
        latent_heat: Latent heat flux [W/m2].
        sensible_heat: Sensible heat flux [W/m2].
        qnet: Net energy residual at the final surface temperature [W/m2].
        refreeze_energy: Refreeze energy, negative when melting [W/m2].
        surf_temp: Surface temperature after the timestep [C].
        vapor_flux: Vapor flux, positive is a loss to the atmosphere [m].
        mass_error: Mass balance residual [m].
        swq: Snow water equivalent after the timestep [m].
        surf_water: Surface liquid water after the timestep [m].
        hice: Lake ice thickness after the timestep [m].
        fraci: Ice covered fraction after the timestep [-].
        lake_volume: Liquid lake volume after the timestep [m3].
    """

    # Water fluxes
    melt: np.ndarray
    ice_melt: np.ndarray
    snowmelt: np.ndarray
    refrozen_water: np.ndarray

    # Energy fluxes
    melt_energy: np.ndarray
    lw_net: np.ndarray
    advection: np.ndarray
    delta_cc: np.ndarray
    snow_flux: np.ndarray
    latent_heat: np.ndarray
    sensible_heat: np.ndarray
    qnet: np.ndarray
    refreeze_energy: np.ndarray

    # Surface
    surf_temp: np.ndarray
    vapor_flux: np.ndarray
    mass_error: np.ndarray

    # States
    swq: np.ndarray
    surf_water: np.ndarray
    hice: np.ndarray
    fraci: np.ndarray
    lake_volume: np.ndarray

    def to_dict(self) -> dict[str, np.ndarray]:
        """Convert to dictionary of arrays.

        Returns:
            Dictionary mapping field names to their numpy array values.
        """
        return {field.name: getattr(self, field.name) for field in fields(self)}


FLUX_NAMES: tuple[str, ...] = tuple(field.name for field in fields(IceMeltFluxes))


@dataclass(frozen=True)
class ModelOutput(Generic[F]):
    """Complete model output with time index and final states.

    Attributes:
        time: Datetime array for each timestep.
        fluxes: Model flux outputs.
        snow: Snow state after the last timestep.
        lake: Lake state after the last timestep.
    """

    time: np.ndarray
    fluxes: F
    snow: SnowState | None = None
    lake: LakeState | None = None

    def __len__(self) -> int:
        """Return the number of timesteps."""
        return len(self.time)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with time index.

        Returns:
            DataFrame with all flux outputs and time as index.
        """
        df = pd.DataFrame(self.fluxes.to_dict(), index=self.time)  # type: ignore[attr-defined]
        df.index.name = "time"
        return df
