"""Lake ice closed-form process functions.

Numba-compiled functions for the pieces of the surface energy balance that
have a closed form: saturated vapor pressure, the bulk Richardson stability
correction, the latent heat of sublimation and the shortwave/conduction
properties of the snow and ice column (icerad).
"""

from __future__ import annotations

import math

from numba import njit

from .constants import DEFAULT_CONSTANTS, GRAMS_PER_KG, JOULES_PER_CAL, PhysicalConstants

# Saturated vapor pressure coefficients (Tetens form, kPa)
_A_SVP: float = 0.61078
_B_SVP: float = 17.269
_C_SVP: float = 237.3


@njit(cache=True)
def svp(temp: float) -> float:
    """Compute the saturated vapor pressure.

    Uses the Tetens formula over water, with the Buck correction applied
    below freezing to give the saturated vapor pressure over ice.

    Args:
        temp: Temperature [C].

    Returns:
        Saturated vapor pressure [kPa].
    """
    es = _A_SVP * math.exp((_B_SVP * temp) / (_C_SVP + temp))
    if temp < 0.0:
        es *= 1.0 + 0.00972 * temp + 0.000042 * temp * temp
    return es


@njit(cache=True)
def stability_correction(
    z: float,
    d: float,
    t_surf: float,
    t_air: float,
    wind: float,
    z0: float,
    kelvin: float,
    gravity: float,
    ri_critical: float,
) -> float:
    """Compute the atmospheric stability correction for aerodynamic resistance.

    The bulk Richardson number is limited to the value at which the
    transfer coefficient stops decreasing, and to -0.5 on the unstable side.

    Args:
        z: Reference height [m].
        d: Displacement height [m].
        t_surf: Surface temperature [C].
        t_air: Air temperature [C].
        wind: Wind speed [m/s].
        z0: Roughness length [m].
        kelvin: Celsius to Kelvin offset [K].
        gravity: Gravitational acceleration [m/s2].
        ri_critical: Critical Richardson number [-].

    Returns:
        Multiplicative correction for the aerodynamic conductance [-].
    """
    correction = 1.0
    if t_surf != t_air:
        t_mean_k = ((t_air + kelvin) + (t_surf + kelvin)) / 2.0
        ri = gravity * (t_air - t_surf) * (z - d) / (t_mean_k * wind * wind)
        ri_limit = (t_air + kelvin) / (t_mean_k * (math.log((z - d) / z0) + 5.0))
        if ri > ri_limit:
            ri = ri_limit
        if ri > 0.0:
            correction = (1.0 - ri / ri_critical) * (1.0 - ri / ri_critical)
        else:
            if ri < -0.5:
                ri = -0.5
            correction = math.sqrt(1.0 - 16.0 * ri)
    return correction


@njit(cache=True)
def latent_heat_of_sublimation(temp: float) -> float:
    """Latent heat of sublimation [J/kg] at temperature temp [C]."""
    return (677.0 - 0.07 * temp) * JOULES_PER_CAL * GRAMS_PER_KG


@njit(cache=True)
def _icerad_numba(
    sw: float,
    hi: float,
    hs: float,
    cond_ice: float,
    cond_snow: float,
    lam_ice_sw: float,
    lam_ice_lw: float,
    lam_snow_sw: float,
    lam_snow_lw: float,
    frac_sw: float,
    frac_lw: float,
) -> tuple[float, float, float]:
    """Two-band shortwave extinction through snow over ice."""
    resistance = hs / cond_snow + hi / cond_ice
    if resistance <= 0.0:
        return 0.0, 0.0, sw

    a = (1.0 - math.exp(-lam_snow_sw * hs)) / (cond_snow * lam_snow_sw)
    b = math.exp(-lam_snow_sw * hs) * (1.0 - math.exp(-lam_ice_sw * hi)) / (cond_ice * lam_ice_sw)
    c = (1.0 - math.exp(-lam_snow_lw * hs)) / (cond_snow * lam_snow_lw)
    d = math.exp(-lam_snow_lw * hs) * (1.0 - math.exp(-lam_ice_lw * hi)) / (cond_ice * lam_ice_lw)

    avgcond = 1.0 / resistance
    sw_conducted = avgcond * sw * (frac_sw * (a + b) + frac_lw * (c + d))
    sw_transmitted = sw * (
        frac_sw * math.exp(-(lam_snow_sw * hs + lam_ice_sw * hi))
        + frac_lw * math.exp(-(lam_snow_lw * hs + lam_ice_lw * hi))
    )
    return avgcond, sw_conducted, sw_transmitted


def icerad(
    sw: float,
    hi: float,
    hs: float,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
) -> tuple[float, float, float]:
    """Compute conductance and shortwave partitioning of the ice column.

    Shortwave is split into a visible and a near-infrared band, each decaying
    exponentially through the snow layer and then the ice layer (Patterson &
    Hamblin, 1988). The part absorbed inside the column is returned to the
    surface by conduction; the part that passes through the column is lost
    from the surface budget and is reported as the cold content change.

    Args:
        sw: Net shortwave radiation at the surface [W/m2].
        hi: Lake ice thickness [m].
        hs: Snow depth on the ice, at snow density [m].
        constants: Physical constants.

    Returns:
        Tuple of (avgcond, sw_conducted, delta_cc):
        - avgcond: Series thermal conductance of snow and ice [W/m2/K]
        - sw_conducted: Absorbed shortwave conducted to the surface [W/m2]
        - delta_cc: Shortwave transmitted through the column [W/m2]
    """
    return _icerad_numba(
        sw,
        hi,
        hs,
        constants.cond_ice,
        constants.cond_snow,
        constants.lam_ice_sw,
        constants.lam_ice_lw,
        constants.lam_snow_sw,
        constants.lam_snow_lw,
        constants.frac_sw,
        constants.frac_lw,
    )
