"""Shared fixtures for lake ice tests."""

from collections.abc import Callable
from dataclasses import replace

import numpy as np
import pytest
from lakeice import ForcingData, IceForcing, LakeState, SnowState
from lakeice.constants import DEFAULT_CONSTANTS

LAKE_AREA = 1.0e6  # [m2]


@pytest.fixture
def cold_forcing() -> IceForcing:
    """Clear, cold winter day over a snow covered lake."""
    return IceForcing(
        delta_t=24.0,
        z2=2.0,
        displacement=0.0,
        z0=0.001,
        aero_resist=100.0,
        wind=3.0,
        net_short=50.0,
        longwave=200.0,
        air_density=1.3,
        lv=2.5e6,
        air_temp=-10.0,
        pressure=95.0,
        vpd=0.05,
        vp=0.2,
        rainfall=0.0,
        snowfall=2.0,
        t_cutoff=0.0,
        surf_atten=0.6,
        fracprv=1.0,
    )


@pytest.fixture
def warm_forcing(cold_forcing: IceForcing) -> IceForcing:
    """Sunny spring day with rain, well above freezing."""
    return replace(
        cold_forcing,
        net_short=300.0,
        longwave=300.0,
        air_temp=5.0,
        vp=0.8,
        vpd=0.1,
        rainfall=5.0,
        snowfall=0.0,
    )


@pytest.fixture
def make_forcing(cold_forcing: IceForcing) -> Callable[..., IceForcing]:
    """Factory for forcing variants of the cold day."""

    def _make(**overrides: float) -> IceForcing:
        return replace(cold_forcing, **overrides)

    return _make


@pytest.fixture
def snow() -> SnowState:
    """5 cm water equivalent of dry snow at 0C."""
    return SnowState.initialize(swq=0.05)


@pytest.fixture
def lake() -> LakeState:
    """Lake with 30 cm of ice."""
    return LakeState(hice=0.3, fraci=1.0, volume=5.0e6, surface=np.array([LAKE_AREA]))


@pytest.fixture
def make_lake() -> Callable[..., LakeState]:
    """Factory for lakes holding a given water equivalent of ice."""

    def _make(lake_ice_we: float, fraci: float = 1.0) -> LakeState:
        hice = lake_ice_we * DEFAULT_CONSTANTS.rho_w / DEFAULT_CONSTANTS.rho_ice
        return LakeState(hice=hice, fraci=fraci, volume=5.0e6, surface=np.array([LAKE_AREA]))

    return _make


@pytest.fixture
def make_forcing_data() -> Callable[..., ForcingData]:
    """Factory for constant forcing timeseries of n days."""

    def _make(n: int, **overrides: object) -> ForcingData:
        values = {
            "aero_resist": 100.0,
            "wind": 3.0,
            "net_short": 50.0,
            "longwave": 200.0,
            "air_density": 1.3,
            "lv": 2.5e6,
            "air_temp": -10.0,
            "pressure": 95.0,
            "vpd": 0.05,
            "vp": 0.2,
            "rainfall": 0.0,
            "snowfall": 2.0,
        }
        values.update(overrides)
        arrays = {name: np.broadcast_to(np.asarray(v, dtype=np.float64), (n,)).copy() for name, v in values.items()}
        time = np.arange("2020-01-01", np.datetime64("2020-01-01") + np.timedelta64(n, "D"), dtype="datetime64[D]")
        return ForcingData(time=time, **arrays)

    return _make
