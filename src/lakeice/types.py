"""Lake ice data structures for state variables and forcing.

This module defines the core data types used by the lake ice model:
- SnowState: Mutable state of the snow/ice surface layer
- LakeState: Mutable state of the lake ice and liquid lake reservoirs
- IceForcing: Meteorological forcing for a single timestep
- ForcingData: Validated forcing timeseries for the run() driver
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator, model_validator

logger = logging.getLogger(__name__)

# Forcing bounds for validation warnings
_FORCING_BOUNDS: dict[str, tuple[float, float]] = {
    "air_temp": (-80.0, 50.0),
    "wind": (0.0, 60.0),
    "net_short": (0.0, 1400.0),
    "longwave": (0.0, 600.0),
    "air_density": (0.5, 1.6),
    "pressure": (40.0, 110.0),
    "surf_atten": (0.0, 1.0),
    "fracprv": (0.0, 1.0),
}


def _warn_if_outside_bounds(forcing: IceForcing) -> None:
    """Log warnings for forcing values outside typical physical ranges.

    This does not raise errors - values outside bounds may still be valid
    for specific sites or sensitivity experiments.
    """
    for name, (lower, upper) in _FORCING_BOUNDS.items():
        value = getattr(forcing, name)
        if value < lower or value > upper:
            logger.warning(
                "Forcing %s=%.4f is outside typical range [%.2f, %.2f]",
                name,
                value,
                lower,
                upper,
            )


@dataclass
class SnowState:
    """Snow/ice surface layer state variables.

    Mutable state updated in place by ice_melt_step(). The lake model keeps
    a single layer, so liquid water lives entirely in the surface layer.

    Attributes:
        swq: Snow water equivalent, frozen plus liquid [m]. Constraint: swq >= 0.
        surf_water: Liquid water in the surface layer [m].
            Constraint: 0 <= surf_water <= swq.
        surf_temp: Surface temperature [C]. Seeds the subfreezing root search.
        vapor_flux: Total vapor mass flux [m/timestep]. Positive is a loss to
            the atmosphere once the step has returned.
        blowing_flux: Vapor flux from blowing snow [m/timestep].
        surface_flux: Vapor flux from the snow surface [m/timestep].
        mass_error: Mass balance residual of the last step [m].
    """

    swq: float = 0.0
    surf_water: float = 0.0
    surf_temp: float = 0.0
    vapor_flux: float = 0.0
    blowing_flux: float = 0.0
    surface_flux: float = 0.0
    mass_error: float = 0.0

    @classmethod
    def initialize(cls, swq: float = 0.0, surf_temp: float = 0.0) -> SnowState:
        """Create a dry surface layer holding swq metres of snow ice."""
        return cls(swq=swq, surf_water=0.0, surf_temp=surf_temp)

    def __array__(self, dtype: np.dtype | None = None) -> np.ndarray:
        """Convert state to a 1D array.

        Layout: [swq, surf_water, surf_temp, vapor_flux, blowing_flux,
        surface_flux, mass_error] (7 elements)
        """
        arr = np.array(
            [
                self.swq,
                self.surf_water,
                self.surf_temp,
                self.vapor_flux,
                self.blowing_flux,
                self.surface_flux,
                self.mass_error,
            ],
            dtype=np.float64,
        )
        if dtype is not None:
            arr = arr.astype(dtype)
        return arr

    @classmethod
    def from_array(cls, arr: np.ndarray) -> SnowState:
        """Reconstruct state from array."""
        return cls(
            swq=float(arr[0]),
            surf_water=float(arr[1]),
            surf_temp=float(arr[2]),
            vapor_flux=float(arr[3]),
            blowing_flux=float(arr[4]),
            surface_flux=float(arr[5]),
            mass_error=float(arr[6]),
        )


@dataclass
class LakeState:
    """Lake ice and liquid lake state variables.

    Attributes:
        hice: Lake ice thickness [m], physical depth (not water equivalent).
        fraci: Fraction of the lake surface covered by ice [-].
        volume: Liquid lake volume [m3].
        surface: Area of each lake node [m2]. surface[0] is the lake surface
            area used to move water between the ice and the liquid lake.
    """

    hice: float
    fraci: float
    volume: float
    surface: np.ndarray

    @classmethod
    def initialize(cls, hice: float, area: float, depth: float, fraci: float = 1.0) -> LakeState:
        """Create a single-node lake of the given surface area and mean depth."""
        return cls(
            hice=hice,
            fraci=fraci if hice > 0.0 else 0.0,
            volume=area * depth,
            surface=np.array([area], dtype=np.float64),
        )


@dataclass(frozen=True)
class IceForcing:
    """Meteorological forcing for one timestep over the lake ice.

    Attributes:
        delta_t: Timestep length [h].
        z2: Reference height [m].
        displacement: Displacement height [m].
        z0: Surface roughness length [m].
        aero_resist: Aerodynamic resistance, uncorrected for stability [s/m].
        wind: Wind speed [m/s].
        net_short: Net shortwave radiation [W/m2].
        longwave: Incoming longwave radiation [W/m2].
        air_density: Density of air [kg/m3].
        lv: Latent heat of vaporization [J/kg].
        air_temp: Air temperature [C].
        pressure: Air pressure [kPa].
        vpd: Vapor pressure deficit [kPa].
        vp: Actual vapor pressure [kPa].
        rainfall: Rainfall [mm/timestep].
        snowfall: Snowfall [mm/timestep].
        t_cutoff: Freezing point of the lake water [C].
        surf_atten: Fraction of net shortwave absorbed at the surface [-].
        fracprv: Ice covered fraction at the previous timestep [-].
    """

    delta_t: float
    z2: float
    displacement: float
    z0: float
    aero_resist: float
    wind: float
    net_short: float
    longwave: float
    air_density: float
    lv: float
    air_temp: float
    pressure: float
    vpd: float
    vp: float
    rainfall: float
    snowfall: float
    t_cutoff: float
    surf_atten: float
    fracprv: float

    def __post_init__(self) -> None:
        """Warn if forcing values are outside typical ranges."""
        _warn_if_outside_bounds(self)


# Per-timestep variables carried by ForcingData, in the order of IceForcing
FORCING_VARIABLES: tuple[str, ...] = (
    "aero_resist",
    "wind",
    "net_short",
    "longwave",
    "air_density",
    "lv",
    "air_temp",
    "pressure",
    "vpd",
    "vp",
    "rainfall",
    "snowfall",
)


class ForcingData(BaseModel):
    """Validated forcing timeseries for the lake ice model.

    All arrays must be 1D with the same length. NaN values are rejected.
    Numeric arrays are coerced to float64. Site constants (heights, roughness,
    freezing point, surface attenuation) are scalars.

    Attributes:
        time: Datetime array for each timestep (datetime64).
        aero_resist: Aerodynamic resistance [s/m].
        wind: Wind speed [m/s].
        net_short: Net shortwave radiation [W/m2].
        longwave: Incoming longwave radiation [W/m2].
        air_density: Density of air [kg/m3].
        lv: Latent heat of vaporization [J/kg].
        air_temp: Air temperature [C].
        pressure: Air pressure [kPa].
        vpd: Vapor pressure deficit [kPa].
        vp: Actual vapor pressure [kPa].
        rainfall: Rainfall [mm/timestep].
        snowfall: Snowfall [mm/timestep].
        delta_t: Timestep length [h].
        z2: Reference height [m].
        displacement: Displacement height [m].
        z0: Roughness length [m].
        t_cutoff: Freezing point of the lake water [C].
        surf_atten: Fraction of net shortwave absorbed at the surface [-].
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    time: np.ndarray  # datetime64
    aero_resist: np.ndarray  # [s/m]
    wind: np.ndarray  # [m/s]
    net_short: np.ndarray  # [W/m2]
    longwave: np.ndarray  # [W/m2]
    air_density: np.ndarray  # [kg/m3]
    lv: np.ndarray  # [J/kg]
    air_temp: np.ndarray  # [C]
    pressure: np.ndarray  # [kPa]
    vpd: np.ndarray  # [kPa]
    vp: np.ndarray  # [kPa]
    rainfall: np.ndarray  # [mm/timestep]
    snowfall: np.ndarray  # [mm/timestep]
    delta_t: float = 24.0  # [h]
    z2: float = 2.0  # [m]
    displacement: float = 0.0  # [m]
    z0: float = 0.001  # [m]
    t_cutoff: float = 0.0  # [C]
    surf_atten: float = 0.6  # [-]

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v: np.ndarray) -> np.ndarray:
        """Validate time array: must be 1D and coerced to datetime64."""
        arr = np.asarray(v)
        if arr.ndim != 1:
            msg = f"time array must be 1D, got {arr.ndim}D"
            raise ValueError(msg)
        return arr.astype("datetime64[ns]")

    @field_validator(*FORCING_VARIABLES, mode="before")
    @classmethod
    def validate_variable(cls, v: np.ndarray, info: ValidationInfo) -> np.ndarray:
        """Validate a forcing array: must be 1D float64 with no NaN values."""
        arr = np.asarray(v, dtype=np.float64)
        if arr.ndim != 1:
            msg = f"{info.field_name} array must be 1D, got {arr.ndim}D"
            raise ValueError(msg)
        if np.any(np.isnan(arr)):
            msg = f"{info.field_name} array contains NaN values"
            raise ValueError(msg)
        return arr

    @field_validator("delta_t")
    @classmethod
    def validate_delta_t(cls, v: float) -> float:
        """Timestep length must be positive."""
        if v <= 0.0:
            msg = f"delta_t must be positive, got {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_array_lengths(self) -> ForcingData:
        """Ensure all arrays have the same length."""
        n = len(self.time)
        for name in FORCING_VARIABLES:
            length = len(getattr(self, name))
            if length != n:
                msg = f"{name} length {length} does not match time length {n}"
                raise ValueError(msg)
        return self

    def __len__(self) -> int:
        """Return the number of timesteps."""
        return len(self.time)

    def at(self, index: int, fracprv: float) -> IceForcing:
        """Build the single-timestep forcing for position index.

        Args:
            index: Timestep position.
            fracprv: Ice covered fraction before this timestep [-].

        Returns:
            IceForcing for the timestep.
        """
        return IceForcing(
            delta_t=self.delta_t,
            z2=self.z2,
            displacement=self.displacement,
            z0=self.z0,
            t_cutoff=self.t_cutoff,
            surf_atten=self.surf_atten,
            fracprv=fracprv,
            **{name: float(getattr(self, name)[index]) for name in FORCING_VARIABLES},
        )
