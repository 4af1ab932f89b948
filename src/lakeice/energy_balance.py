"""Surface energy balance of the lake ice/snow pack.

The residual function evaluated both directly by the melt step and
repeatedly by the root solver. All inputs travel in a single
EnergyBalanceParams bundle so that every call site (direct evaluation,
solver iteration, error snapshot) sees exactly the same arguments.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .constants import DEFAULT_CONSTANTS, PA_PER_KPA, PhysicalConstants
from .processes import latent_heat_of_sublimation, stability_correction, svp


@dataclass(frozen=True)
class EnergyBalanceParams:
    """Inputs of the ice pack energy balance, apart from the surface temperature.

    Attributes:
        delta_t: Timestep length [h].
        aero_resist: Aerodynamic resistance, uncorrected for stability [s/m].
        z2: Reference height [m].
        displacement: Displacement height [m].
        z0: Roughness length [m].
        wind: Wind speed [m/s].
        net_short: Net shortwave radiation [W/m2].
        longwave: Incoming longwave radiation [W/m2].
        air_density: Density of air [kg/m3].
        lv: Latent heat of vaporization [J/kg].
        air_temp: Air temperature [C].
        pressure: Air pressure [Pa].
        vpd: Vapor pressure deficit [Pa].
        vp: Actual vapor pressure [Pa].
        rain: Rainfall [m/timestep].
        swe_surface_layer: Water equivalent of snow plus lake ice [m].
        surface_liquid_water: Liquid water in the surface layer [m].
        old_surf_temp: Surface temperature at the previous timestep [C].
        delta_cold_content: Change in cold content of the column [W/m2].
        t_freeze: Freezing point at the base of the ice [C].
        avg_cond: Thermal conductance of the snow and ice column [W/m2/K].
        sw_conducted: Absorbed shortwave conducted to the surface [W/m2].
        snow_depth: Snow depth at snow density [m].
        snow_density: Density of snow [kg/m3].
        surf_atten: Fraction of net shortwave absorbed at the surface [-].
        blowing_flux: Vapor flux from blowing snow [m/timestep].
        constants: Physical constants.
    """

    delta_t: float
    aero_resist: float
    z2: float
    displacement: float
    z0: float
    wind: float
    net_short: float
    longwave: float
    air_density: float
    lv: float
    air_temp: float
    pressure: float
    vpd: float
    vp: float
    rain: float
    swe_surface_layer: float
    surface_liquid_water: float
    old_surf_temp: float
    delta_cold_content: float
    t_freeze: float
    avg_cond: float
    sw_conducted: float
    snow_depth: float
    snow_density: float
    surf_atten: float
    blowing_flux: float = 0.0
    constants: PhysicalConstants = DEFAULT_CONSTANTS

    def to_dict(self) -> dict[str, float]:
        """Scalar parameters by name, without the constants."""
        values = asdict(self)
        values.pop("constants")
        return values


@dataclass(frozen=True)
class EnergyBalanceFluxes:
    """Flux terms computed alongside the energy residual.

    Attributes:
        refreeze_energy: Energy available to refreeze surface liquid [W/m2].
            Positive when freezing, negative when the surplus melts ice.
        vapor_flux: Total vapor mass flux [m/timestep], negative is a loss.
        blowing_flux: Vapor flux from blowing snow [m/timestep].
        surface_flux: Vapor flux from the pack surface [m/timestep].
        advected_energy: Energy advected by rain [W/m2].
        ground_flux: Conducted flux through the ice column [W/m2].
        latent_heat: Latent heat flux [W/m2].
        sensible_heat: Sensible heat flux [W/m2].
        lw_net: Net longwave radiation [W/m2].
    """

    refreeze_energy: float = 0.0
    vapor_flux: float = 0.0
    blowing_flux: float = 0.0
    surface_flux: float = 0.0
    advected_energy: float = 0.0
    ground_flux: float = 0.0
    latent_heat: float = 0.0
    sensible_heat: float = 0.0
    lw_net: float = 0.0


def ice_energy_balance(t_surf: float, params: EnergyBalanceParams) -> tuple[float, EnergyBalanceFluxes]:
    """Compute the net energy exchange at the ice pack surface.

    Sums net radiation, turbulent fluxes, rain advection and the conducted
    ground flux, less the cold content change, for a trial surface
    temperature. At 0C the energy that would refreeze the surface liquid
    water is added; when the remaining surplus exceeds the refreeze demand
    the surface is isothermal, the residual is zero and the surplus is
    returned as (negative) refreeze energy.

    Args:
        t_surf: Trial surface temperature [C].
        params: Remaining inputs of the energy balance.

    Returns:
        Tuple of (qnet, fluxes):
        - qnet: Net energy residual [W/m2]
        - fluxes: Flux terms evaluated at t_surf
    """
    c = params.constants
    seconds = params.delta_t * c.sec_per_hour

    # Stability corrected aerodynamic resistance
    if params.wind > 0.0:
        correction = stability_correction(
            params.z2,
            params.displacement,
            t_surf,
            params.air_temp,
            params.wind,
            params.z0,
            c.kelvin,
            c.gravity,
            c.ri_critical,
        )
        ra = params.aero_resist / correction if correction > 0.0 else c.huge_resist
    else:
        ra = c.huge_resist

    # Radiation
    t_kelvin = t_surf + c.kelvin
    longwave_out = c.emissivity_ice * c.stefan_b * t_kelvin**4
    lw_net = params.longwave - longwave_out
    net_rad = params.surf_atten * params.net_short + lw_net

    sensible_heat = params.air_density * c.cp_air * (params.air_temp - t_surf) / ra

    # Vapor mass flux [m/s], negative when the surface sublimates
    es_surface = svp(t_surf) * PA_PER_KPA
    vapor_mass_flux = params.air_density * (c.eps / params.pressure) * (params.vp - es_surface) / ra
    vapor_mass_flux /= c.rho_w
    if params.vpd == 0.0 and vapor_mass_flux < 0.0:
        vapor_mass_flux = 0.0

    latent = params.lv if t_surf >= 0.0 else latent_heat_of_sublimation(t_surf)
    latent_heat = latent * vapor_mass_flux * c.rho_w
    surface_flux = vapor_mass_flux * seconds
    vapor_flux = surface_flux + params.blowing_flux

    advected_energy = c.ch_water * params.air_temp * params.rain / seconds
    ground_flux = params.avg_cond * (params.t_freeze - t_surf) + params.sw_conducted

    rest_term = (
        net_rad + sensible_heat + latent_heat + advected_energy + ground_flux - params.delta_cold_content
    )

    refreeze_energy = params.surface_liquid_water * c.lf * c.rho_w / seconds
    if t_surf == 0.0 and rest_term > -refreeze_energy:
        refreeze_energy = -rest_term
        rest_term = 0.0
    else:
        rest_term += refreeze_energy

    fluxes = EnergyBalanceFluxes(
        refreeze_energy=refreeze_energy,
        vapor_flux=vapor_flux,
        blowing_flux=params.blowing_flux,
        surface_flux=surface_flux,
        advected_energy=advected_energy,
        ground_flux=ground_flux,
        latent_heat=latent_heat,
        sensible_heat=sensible_heat,
        lw_net=lw_net,
    )
    return rest_term, fluxes
