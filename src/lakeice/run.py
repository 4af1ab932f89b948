"""Lake ice model orchestration functions.

This module provides the main entry points for running the lake ice model:
- ice_melt_step(): Energy and mass balance of the snow/ice layer for one timestep
- run(): Execute the model over a forcing timeseries for one lake
"""

from __future__ import annotations

import dataclasses
import logging

import numpy as np
from tqdm.auto import tqdm

from .blowing_snow import BlowingSnowModel, no_blowing_snow
from .constants import (
    DEFAULT_CONSTANTS,
    MASS_BALANCE_TOLERANCE,
    MM_PER_M,
    PA_PER_KPA,
    SOLVER_FAILURE_THRESHOLD,
    PhysicalConstants,
)
from .energy_balance import EnergyBalanceFluxes, EnergyBalanceParams, ice_energy_balance
from .errors import IceEnergyBalanceError
from .outputs import FLUX_NAMES, IceMeltFluxes, ModelOutput
from .processes import icerad
from .solver import DEFAULT_SOLVER_CONFIG, ResidualFunction, RootSolver, SolverConfig, root_brent
from .types import ForcingData, IceForcing, LakeState, SnowState

logger = logging.getLogger(__name__)


def _validate_step_inputs(forcing: IceForcing, snow: SnowState, lake: LakeState) -> None:
    """Raise ValueError when the step preconditions do not hold."""
    if forcing.delta_t <= 0.0:
        msg = f"delta_t must be positive, got {forcing.delta_t}"
        raise ValueError(msg)
    if snow.surf_water < 0.0:
        msg = f"surf_water must be non-negative, got {snow.surf_water}"
        raise ValueError(msg)
    if snow.swq < snow.surf_water:
        msg = f"swq ({snow.swq}) must not be smaller than surf_water ({snow.surf_water})"
        raise ValueError(msg)
    if lake.hice < 0.0:
        msg = f"hice must be non-negative, got {lake.hice}"
        raise ValueError(msg)


def _clamp_vapor_flux(snow: SnowState, available: float) -> None:
    """Limit the vapor fluxes to the mass available for sublimation."""
    snow.blowing_flux *= available / -snow.vapor_flux
    snow.vapor_flux = -available
    snow.surface_flux = -available - snow.blowing_flux


def _apply_vapor_flux_isothermal(
    snow: SnowState,
    lake: LakeState,
    snow_ice: float,
    lake_ice: float,
    fracprv: float,
) -> tuple[float, float]:
    """Remove (or add) the vapor flux from snow ice, surface liquid and lake ice.

    Returns:
        Tuple of (snow_ice, lake_ice) after the adjustment [m].
    """
    demand = -snow.vapor_flux
    available = snow_ice + snow.surf_water + lake_ice

    if available < demand:
        _clamp_vapor_flux(snow, available)
        lake.volume -= lake.surface[0] * fracprv * lake_ice
        snow.surf_water = 0.0
        return 0.0, 0.0

    if snow_ice + snow.surf_water < demand:
        # Lake ice covers what the snow layer cannot
        from_lake = demand - snow_ice - snow.surf_water
        lake.volume -= lake.surface[0] * fracprv * from_lake
        snow.surf_water = 0.0
        return 0.0, lake_ice - from_lake

    if demand > snow.surf_water:
        snow_ice += snow.vapor_flux + snow.surf_water
        snow.surf_water = 0.0
    else:
        snow.surf_water += snow.vapor_flux
    return snow_ice, lake_ice


def _apply_vapor_flux_subfreezing(
    snow: SnowState,
    lake: LakeState,
    snow_ice: float,
    lake_ice: float,
    fracprv: float,
) -> tuple[float, float]:
    """Remove (or add) the vapor flux from snow ice and lake ice.

    Surface liquid water has already frozen, so only the two ice
    reservoirs take part.

    Returns:
        Tuple of (snow_ice, lake_ice) after the adjustment [m].
    """
    demand = -snow.vapor_flux
    available = snow_ice + lake_ice

    if available < demand:
        _clamp_vapor_flux(snow, available)
        lake.volume -= lake.surface[0] * fracprv * lake_ice
        return 0.0, 0.0

    if snow_ice < demand:
        from_lake = demand - snow_ice
        lake.volume -= lake.surface[0] * fracprv * from_lake
        return 0.0, lake_ice - from_lake

    if snow_ice > 0.0:
        return snow_ice + snow.vapor_flux, lake_ice
    if lake_ice > 0.0:
        # Deposition onto bare lake ice
        return snow_ice, lake_ice + snow.vapor_flux

    # No ice cover to deposit on
    snow.vapor_flux = 0.0
    snow.surface_flux = 0.0
    snow.blowing_flux = 0.0
    return snow_ice, lake_ice


def _partition_melt(
    snow: SnowState,
    snowmelt: float,
    snow_ice: float,
    lake_ice: float,
) -> tuple[float, float, float, float]:
    """Take the snowmelt from snow ice first, then from lake ice.

    Melted snow ice joins the surface liquid water; melted lake ice is
    returned separately as ice melt delivered to the lake.

    Returns:
        Tuple of (snowmelt, snow_ice, lake_ice, ice_melt) [m]. snowmelt is
        clamped to the total ice when the pack melts through.
    """
    if snowmelt < snow_ice:
        snow.surf_water += snowmelt
        return snowmelt, snow_ice - snowmelt, lake_ice, 0.0

    if snowmelt < snow_ice + lake_ice:
        snow.surf_water += snow_ice
        ice_melt = snowmelt - snow_ice
        return snowmelt, 0.0, lake_ice - ice_melt, ice_melt

    # Complete melt of snow and lake ice
    snow.surf_water += snow_ice
    return snow_ice + lake_ice, 0.0, 0.0, lake_ice


def ice_melt_step(
    forcing: IceForcing,
    snow: SnowState,
    lake: LakeState,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
    *,
    energy_balance: ResidualFunction = ice_energy_balance,
    solver: RootSolver = root_brent,
    blowing_snow: BlowingSnowModel = no_blowing_snow,
    solver_config: SolverConfig = DEFAULT_SOLVER_CONFIG,
) -> tuple[float, dict[str, float]]:
    """Execute one timestep of the lake snow/ice energy and mass balance.

    Algorithm steps:
    1. Add snowfall to snow ice and rainfall to surface liquid water
    2. Convert lake ice thickness to water equivalent
    3. Compute column conductance and shortwave partitioning (icerad)
    4. Get the blowing snow vapor flux from the configured policy
    5. Evaluate the energy balance at 0C:
       - residual >= 0: isothermal surface, refreeze or melt, then take the
         vapor flux from snow ice, surface liquid and lake ice, then take the
         melt from snow ice and lake ice
       - residual < 0: solve for the subfreezing surface temperature, freeze
         all surface liquid, take the vapor flux from snow ice and lake ice
    6. Drain surface liquid above the holding capacity as melt
    7. Update snow water equivalent, ice thickness and ice fraction
    8. Compute the mass balance residual
    9. Convert melt to mm and report the vapor flux as positive loss

    snow and lake are updated in place once the surface temperature is
    known; when the subfreezing solve fails they are left unchanged.

    Args:
        forcing: Forcing for this timestep.
        snow: Snow/ice surface layer state.
        lake: Lake state.
        constants: Physical constants.
        energy_balance: Residual function (t_surf, params) -> (qnet, fluxes).
        solver: Root solver (lower, upper, func, params, config) -> (root, message).
        blowing_snow: Blowing snow policy.
        solver_config: Settings passed to the solver.

    Returns:
        Tuple of (melt, fluxes) where:
        - melt: Outflow of liquid water from the surface layer [mm]
        - fluxes: Dictionary of diagnostics (see outputs.FLUX_NAMES)

    Raises:
        ValueError: If the step preconditions do not hold.
        IceEnergyBalanceError: If the subfreezing temperature solve fails.
    """
    _validate_step_inputs(forcing, snow, lake)
    c = constants
    seconds = forcing.delta_t * c.sec_per_hour

    # 1. Distribute fresh precipitation
    snowfall = forcing.snowfall / MM_PER_M
    rainfall = forcing.rainfall / MM_PER_M
    ice_melt = 0.0
    melt_energy = 0.0

    initial_swq = snow.swq
    old_surf_temp = snow.surf_temp

    snow_ice = snow.swq - snow.surf_water + snowfall
    surf_water = snow.surf_water + rainfall

    # 2. Lake ice as water equivalent
    lake_ice = lake.hice * c.rho_ice / c.rho_w
    initial_ice = lake_ice

    # 3. Column conductance and shortwave partitioning
    avg_cond, sw_conducted, delta_cc = icerad(
        forcing.net_short, lake.hice, snow_ice * c.rho_w / c.rho_snow, c
    )

    # 4. Blowing snow sublimation
    blowing_flux = blowing_snow(forcing, snow, lake)

    params = EnergyBalanceParams(
        delta_t=forcing.delta_t,
        aero_resist=forcing.aero_resist,
        z2=forcing.z2,
        displacement=forcing.displacement,
        z0=forcing.z0,
        wind=forcing.wind,
        net_short=forcing.net_short,
        longwave=forcing.longwave,
        air_density=forcing.air_density,
        lv=forcing.lv,
        air_temp=forcing.air_temp,
        pressure=forcing.pressure * PA_PER_KPA,
        vpd=forcing.vpd * PA_PER_KPA,
        vp=forcing.vp * PA_PER_KPA,
        rain=rainfall,
        swe_surface_layer=snow.swq + lake_ice,
        surface_liquid_water=surf_water,
        old_surf_temp=old_surf_temp,
        delta_cold_content=delta_cc,
        t_freeze=forcing.t_cutoff,
        avg_cond=avg_cond,
        sw_conducted=sw_conducted,
        snow_depth=snow.swq * c.rho_w / c.rho_snow,
        snow_density=c.rho_snow,
        surf_atten=forcing.surf_atten,
        blowing_flux=blowing_flux,
        constants=c,
    )

    # 5. Surface energy balance at freezing
    qnet, fluxes = energy_balance(0.0, params)
    isothermal = qnet >= 0.0

    if isothermal:
        surf_temp = 0.0
    else:
        surf_temp, message = solver(old_surf_temp - c.snow_dt, 0.0, energy_balance, params, solver_config)
        if surf_temp <= SOLVER_FAILURE_THRESHOLD:
            raise IceEnergyBalanceError(surf_temp, params, fluxes, message)
        qnet, fluxes = energy_balance(surf_temp, params)

    # snow and lake are left untouched until the surface temperature is known
    snow.surf_water = surf_water
    snow.blowing_flux = blowing_flux
    snow.surf_temp = surf_temp
    snow.vapor_flux = fluxes.vapor_flux
    snow.surface_flux = fluxes.surface_flux
    refreeze_energy = fluxes.refreeze_energy

    if isothermal:
        # Isothermal surface at 0C
        if refreeze_energy >= 0.0:
            refrozen_water = refreeze_energy / (c.lf * c.rho_w) * seconds
            if refrozen_water > snow.surf_water:
                refrozen_water = snow.surf_water
                refreeze_energy = refrozen_water * c.lf * c.rho_w / seconds
            melt_energy += refreeze_energy
            snow_ice += refrozen_water
            snow.surf_water -= refrozen_water
            snowmelt = 0.0
        else:
            refrozen_water = 0.0
            snowmelt = abs(refreeze_energy) / (c.lf * c.rho_w) * seconds
            melt_energy += refreeze_energy

        snow_ice, lake_ice = _apply_vapor_flux_isothermal(snow, lake, snow_ice, lake_ice, forcing.fracprv)
        snowmelt, snow_ice, lake_ice, ice_melt = _partition_melt(snow, snowmelt, snow_ice, lake_ice)

    else:
        # Surface below freezing: all surface liquid water freezes
        snowmelt = 0.0
        refrozen_water = snow.surf_water
        snow_ice += snow.surf_water
        melt_energy += snow.surf_water * c.lf * c.rho_w / seconds
        snow.surf_water = 0.0

        snow_ice, lake_ice = _apply_vapor_flux_subfreezing(snow, lake, snow_ice, lake_ice, forcing.fracprv)

    # 6. Drain liquid water above the holding capacity
    max_liquid_water = c.liquid_water_capacity * snow_ice
    if snow.surf_water > max_liquid_water:
        melt = snow.surf_water - max_liquid_water
        snow.surf_water = max_liquid_water
    else:
        melt = 0.0

    # 7. Update snow and ice
    snow.swq = snow_ice + snow.surf_water
    lake.hice = lake_ice * c.rho_w / c.rho_ice
    if lake.hice <= 0.0:
        lake.hice = 0.0
        lake.fraci = 0.0

    # 8. Mass balance
    snow.mass_error = (
        (initial_swq - snow.swq)
        + (initial_ice - lake_ice)
        + (rainfall + snowfall)
        - ice_melt
        - melt
        + snow.vapor_flux
    )

    # 9. Reporting conventions
    melt *= MM_PER_M
    snow.vapor_flux *= -1.0

    step_fluxes = _collect_fluxes(fluxes, snow, lake)
    step_fluxes.update(
        {
            "melt": melt,
            "ice_melt": ice_melt,
            "snowmelt": snowmelt,
            "refrozen_water": refrozen_water,
            "melt_energy": melt_energy,
            "delta_cc": delta_cc,
            "qnet": qnet,
            "refreeze_energy": refreeze_energy,
        }
    )
    return melt, step_fluxes


def _collect_fluxes(fluxes: EnergyBalanceFluxes, snow: SnowState, lake: LakeState) -> dict[str, float]:
    """Energy balance diagnostics and post-step state for the flux dictionary."""
    return {
        "lw_net": fluxes.lw_net,
        "advection": fluxes.advected_energy,
        "snow_flux": fluxes.ground_flux,
        "latent_heat": fluxes.latent_heat,
        "sensible_heat": fluxes.sensible_heat,
        "surf_temp": snow.surf_temp,
        "vapor_flux": snow.vapor_flux,
        "mass_error": snow.mass_error,
        "swq": snow.swq,
        "surf_water": snow.surf_water,
        "hice": lake.hice,
        "fraci": lake.fraci,
        "lake_volume": lake.volume,
    }


def run(
    forcing: ForcingData,
    lake: LakeState,
    snow: SnowState | None = None,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
    *,
    blowing_snow: BlowingSnowModel = no_blowing_snow,
    solver_config: SolverConfig = DEFAULT_SOLVER_CONFIG,
    progress: bool = False,
) -> ModelOutput[IceMeltFluxes]:
    """Run the lake ice model over a timeseries.

    Steps the snow/ice layer through each timestep of the forcing data. The
    ice covered fraction before each timestep is used as fracprv. The initial
    states are copied, not modified; the final states are returned in the
    output.

    Args:
        forcing: Validated forcing timeseries.
        lake: Initial lake state.
        snow: Initial snow state. If None, starts from a dry, snow free surface.
        constants: Physical constants.
        blowing_snow: Blowing snow policy.
        solver_config: Root solver settings.
        progress: Show a progress bar.

    Returns:
        ModelOutput containing IceMeltFluxes outputs and the final states.
        Convert to DataFrame via result.to_dataframe().

    Raises:
        IceEnergyBalanceError: If the surface temperature solve fails at any
            timestep. The parameter dump is logged before the error propagates.
    """
    snow = SnowState.initialize() if snow is None else dataclasses.replace(snow)
    lake = dataclasses.replace(lake, surface=np.array(lake.surface, dtype=np.float64, copy=True))

    n_timesteps = len(forcing)
    outputs = {name: np.zeros(n_timesteps, dtype=np.float64) for name in FLUX_NAMES}

    for t in tqdm(range(n_timesteps), desc="lake ice", disable=not progress):
        step_forcing = forcing.at(t, fracprv=lake.fraci)
        try:
            _, fluxes = ice_melt_step(
                step_forcing,
                snow,
                lake,
                constants,
                blowing_snow=blowing_snow,
                solver_config=solver_config,
            )
        except IceEnergyBalanceError as err:
            logger.error("Timestep %d (%s): %s", t, forcing.time[t], err.dump())
            raise

        if abs(snow.mass_error) > MASS_BALANCE_TOLERANCE:
            logger.warning("Timestep %d: mass balance error %.3e m", t, snow.mass_error)

        for name in FLUX_NAMES:
            outputs[name][t] = fluxes[name]

    return ModelOutput(
        time=forcing.time,
        fluxes=IceMeltFluxes(**outputs),
        snow=snow,
        lake=lake,
    )
