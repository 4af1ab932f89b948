"""Tests for the ice pack surface energy balance."""

from dataclasses import replace

import pytest
from lakeice.constants import DEFAULT_CONSTANTS
from lakeice.energy_balance import EnergyBalanceFluxes, EnergyBalanceParams, ice_energy_balance
from lakeice.processes import latent_heat_of_sublimation

C = DEFAULT_CONSTANTS
SECONDS_PER_DAY = 24.0 * C.sec_per_hour


@pytest.fixture
def params() -> EnergyBalanceParams:
    """Cold, calm-ish conditions over 30 cm of ice and 5 cm of snow."""
    return EnergyBalanceParams(
        delta_t=24.0,
        aero_resist=100.0,
        z2=2.0,
        displacement=0.0,
        z0=0.001,
        wind=3.0,
        net_short=50.0,
        longwave=200.0,
        air_density=1.3,
        lv=2.5e6,
        air_temp=-10.0,
        pressure=95000.0,
        vpd=50.0,
        vp=200.0,
        rain=0.0,
        swe_surface_layer=0.325,
        surface_liquid_water=0.0,
        old_surf_temp=0.0,
        delta_cold_content=2.0,
        t_freeze=0.0,
        avg_cond=1.5,
        sw_conducted=10.0,
        snow_depth=0.2,
        snow_density=C.rho_snow,
        surf_atten=0.6,
    )


class TestResidual:
    """Tests for the net energy residual."""

    def test_cold_air_gives_deficit_at_freezing(self, params: EnergyBalanceParams) -> None:
        """Cold air and weak radiation cannot hold the surface at 0C."""
        qnet, fluxes = ice_energy_balance(0.0, params)
        assert qnet < 0.0
        assert fluxes.refreeze_energy == 0.0

    def test_residual_rises_as_surface_cools(self, params: EnergyBalanceParams) -> None:
        """A colder surface loses less energy."""
        q_cold, _ = ice_energy_balance(-20.0, params)
        q_mild, _ = ice_energy_balance(-2.0, params)
        assert q_cold > q_mild

    def test_components_sum_to_residual(self, params: EnergyBalanceParams) -> None:
        """Below freezing the residual is the plain sum of the terms."""
        t_surf = -5.0
        qnet, fluxes = ice_energy_balance(t_surf, params)
        expected = (
            params.surf_atten * params.net_short
            + fluxes.lw_net
            + fluxes.sensible_heat
            + fluxes.latent_heat
            + fluxes.advected_energy
            + fluxes.ground_flux
            - params.delta_cold_content
            + fluxes.refreeze_energy
        )
        assert qnet == pytest.approx(expected)

    def test_longwave_emission(self, params: EnergyBalanceParams) -> None:
        _, fluxes = ice_energy_balance(-5.0, params)
        emitted = C.emissivity_ice * C.stefan_b * (-5.0 + C.kelvin) ** 4
        assert fluxes.lw_net == pytest.approx(params.longwave - emitted)

    def test_ground_flux(self, params: EnergyBalanceParams) -> None:
        """Conduction from the freezing base plus conducted shortwave."""
        _, fluxes = ice_energy_balance(-4.0, params)
        assert fluxes.ground_flux == pytest.approx(1.5 * 4.0 + 10.0)

    def test_rain_advection(self, params: EnergyBalanceParams) -> None:
        """Rain brings its sensible heat to the surface."""
        warm_rain = replace(params, air_temp=2.0, rain=0.01)
        _, fluxes = ice_energy_balance(0.0, warm_rain)
        assert fluxes.advected_energy == pytest.approx(C.ch_water * 2.0 * 0.01 / SECONDS_PER_DAY)


class TestIsothermalSurface:
    """At 0C a surplus becomes refreeze (negative: melt) energy."""

    def test_surplus_becomes_melt_energy(self, params: EnergyBalanceParams) -> None:
        """A surplus gives zero residual and negative refreeze energy."""
        sunny = replace(params, net_short=400.0, longwave=320.0, air_temp=5.0, vp=800.0)
        qnet, fluxes = ice_energy_balance(0.0, sunny)
        assert qnet == 0.0
        assert fluxes.refreeze_energy < 0.0

    def test_liquid_water_refreezes(self, params: EnergyBalanceParams) -> None:
        """A small deficit is covered by refreezing liquid water."""
        qnet_dry, _ = ice_energy_balance(0.0, params)
        liquid = -qnet_dry * 2.0 * SECONDS_PER_DAY / (C.lf * C.rho_w)
        wet = replace(params, surface_liquid_water=liquid)

        qnet, fluxes = ice_energy_balance(0.0, wet)

        assert qnet == 0.0
        assert fluxes.refreeze_energy == pytest.approx(-qnet_dry)

    def test_below_freezing_adds_full_refreeze(self, params: EnergyBalanceParams) -> None:
        """Below 0C all liquid water contributes its latent heat."""
        wet = replace(params, surface_liquid_water=0.001)
        q_dry, _ = ice_energy_balance(-3.0, params)
        q_wet, fluxes = ice_energy_balance(-3.0, wet)
        expected = 0.001 * C.lf * C.rho_w / SECONDS_PER_DAY
        assert fluxes.refreeze_energy == pytest.approx(expected)
        assert q_wet == pytest.approx(q_dry + expected)


class TestTurbulentFluxes:
    """Tests for the sensible and latent heat exchange."""

    def test_calm_air_has_no_turbulent_exchange(self, params: EnergyBalanceParams) -> None:
        """Zero wind uses the huge resistance."""
        calm = replace(params, wind=0.0)
        _, fluxes = ice_energy_balance(-5.0, calm)
        assert fluxes.sensible_heat == pytest.approx(0.0, abs=1e-12)
        assert fluxes.latent_heat == pytest.approx(0.0, abs=1e-12)

    def test_sensible_heat_toward_colder_surface(self, params: EnergyBalanceParams) -> None:
        _, fluxes = ice_energy_balance(-20.0, params)
        assert fluxes.sensible_heat > 0.0

    def test_saturated_air_suppresses_sublimation(self, params: EnergyBalanceParams) -> None:
        """With no vapor pressure deficit the surface does not lose vapor."""
        saturated = replace(params, vp=0.0, vpd=0.0)
        _, fluxes = ice_energy_balance(-2.0, saturated)
        assert fluxes.surface_flux == 0.0
        assert fluxes.latent_heat == 0.0

    def test_dry_air_sublimates(self, params: EnergyBalanceParams) -> None:
        """Dry air draws vapor from the surface."""
        _, fluxes = ice_energy_balance(-2.0, params)
        assert fluxes.surface_flux < 0.0
        assert fluxes.latent_heat < 0.0

    def test_latent_heat_of_sublimation_below_freezing(self, params: EnergyBalanceParams) -> None:
        """Below 0C the vapor flux carries the latent heat of sublimation."""
        _, fluxes = ice_energy_balance(-2.0, params)
        vapor_rate = fluxes.surface_flux / SECONDS_PER_DAY
        expected = latent_heat_of_sublimation(-2.0) * vapor_rate * C.rho_w
        assert fluxes.latent_heat == pytest.approx(expected)

    def test_latent_heat_of_vaporization_at_freezing(self, params: EnergyBalanceParams) -> None:
        _, fluxes = ice_energy_balance(0.0, params)
        vapor_rate = fluxes.surface_flux / SECONDS_PER_DAY
        assert fluxes.latent_heat == pytest.approx(params.lv * vapor_rate * C.rho_w)

    def test_blowing_flux_added_to_vapor_flux(self, params: EnergyBalanceParams) -> None:
        """Blowing snow adds mass loss without changing the surface energy."""
        windy = replace(params, blowing_flux=-0.002)
        q_calm, calm_fluxes = ice_energy_balance(-3.0, params)
        q_windy, fluxes = ice_energy_balance(-3.0, windy)
        assert fluxes.vapor_flux == pytest.approx(fluxes.surface_flux - 0.002)
        assert fluxes.blowing_flux == -0.002
        assert fluxes.surface_flux == pytest.approx(calm_fluxes.surface_flux)
        assert q_windy == pytest.approx(q_calm)


class TestParams:
    """Tests for the parameter bundle."""

    def test_to_dict_omits_constants(self, params: EnergyBalanceParams) -> None:
        values = params.to_dict()
        assert "constants" not in values
        assert values["air_temp"] == -10.0
        assert len(values) == 26

    def test_fluxes_default_to_zero(self) -> None:
        fluxes = EnergyBalanceFluxes()
        assert fluxes.refreeze_energy == 0.0
        assert fluxes.lw_net == 0.0
