"""Lake ice numerical constants.

Fixed physical values for the lake ice/snow energy and mass balance. They are
collected in an immutable PhysicalConstants value that is passed explicitly to
every computation, so that nothing in the model reads hidden global state.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhysicalConstants:
    """Physical constants used by the lake ice model.

    Attributes:
        rho_w: Density of liquid water [kg/m3].
        rho_ice: Density of lake ice [kg/m3].
        rho_snow: Density of snow on lake ice [kg/m3].
        lf: Latent heat of fusion [J/kg].
        sec_per_hour: Seconds per hour [s/h].
        liquid_water_capacity: Liquid water holding capacity of snow ice [-].
        stefan_b: Stefan-Boltzmann constant [W/m2/K4].
        kelvin: Offset between Celsius and Kelvin [K].
        cp_air: Specific heat of moist air at constant pressure [J/kg/K].
        ch_water: Volumetric heat capacity of water [J/m3/K].
        eps: Ratio of molecular weights of water vapor and dry air [-].
        gravity: Gravitational acceleration [m/s2].
        emissivity_ice: Longwave emissivity of the ice/snow surface [-].
        huge_resist: Aerodynamic resistance used for calm conditions [s/m].
        ri_critical: Critical bulk Richardson number [-].
        snow_dt: Decrement applied to the previous surface temperature to seed
            the subfreezing root search [C].
        cond_ice: Thermal conductivity of lake ice [W/m/K].
        cond_snow: Thermal conductivity of snow on lake ice [W/m/K].
        lam_ice_sw: Extinction coefficient of ice, visible band [1/m].
        lam_ice_lw: Extinction coefficient of ice, near-infrared band [1/m].
        lam_snow_sw: Extinction coefficient of snow, visible band [1/m].
        lam_snow_lw: Extinction coefficient of snow, near-infrared band [1/m].
        frac_sw: Fraction of net shortwave in the visible band [-].
        frac_lw: Fraction of net shortwave in the near-infrared band [-].
    """

    rho_w: float = 1000.0
    rho_ice: float = 917.0
    rho_snow: float = 250.0
    lf: float = 3.337e5
    sec_per_hour: float = 3600.0
    liquid_water_capacity: float = 0.035
    stefan_b: float = 5.6696e-8
    kelvin: float = 273.15
    cp_air: float = 1013.0
    ch_water: float = 4.1868e6
    eps: float = 0.62196351
    gravity: float = 9.81
    emissivity_ice: float = 0.97
    huge_resist: float = 1.0e20
    ri_critical: float = 0.2
    snow_dt: float = 5.0
    cond_ice: float = 2.3
    cond_snow: float = 0.31
    lam_ice_sw: float = 1.5
    lam_ice_lw: float = 20.0
    lam_snow_sw: float = 6.0
    lam_snow_lw: float = 20.0
    frac_sw: float = 0.7
    frac_lw: float = 0.3


DEFAULT_CONSTANTS: PhysicalConstants = PhysicalConstants()

# Root solver sentinel: results at or below the threshold signal failure
SOLVER_FAILURE: float = -9999.0  # [C]
SOLVER_FAILURE_THRESHOLD: float = -9998.0  # [C]

# Tolerance used by callers when checking the mass balance residual
MASS_BALANCE_TOLERANCE: float = 1.0e-9  # [m]

# Conversion between forcing precipitation units and model units
MM_PER_M: float = 1000.0
PA_PER_KPA: float = 1000.0
JOULES_PER_CAL: float = 4.1868  # [J/cal]
GRAMS_PER_KG: float = 1000.0  # [g/kg]

__all__ = [
    "DEFAULT_CONSTANTS",
    "GRAMS_PER_KG",
    "JOULES_PER_CAL",
    "MASS_BALANCE_TOLERANCE",
    "MM_PER_M",
    "PA_PER_KPA",
    "PhysicalConstants",
    "SOLVER_FAILURE",
    "SOLVER_FAILURE_THRESHOLD",
]
