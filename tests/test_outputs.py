"""Tests for output dataclasses: IceMeltFluxes and ModelOutput.

Tests cover field counts, immutability, dictionary conversion, and DataFrame
generation for the structured output dataclasses.
"""

import dataclasses

import numpy as np
import pandas as pd
import pytest
from lakeice import IceMeltFluxes, LakeState, ModelOutput, SnowState
from lakeice.outputs import FLUX_NAMES


def make_fluxes(n: int) -> IceMeltFluxes:
    return IceMeltFluxes(**{name: np.arange(n, dtype=np.float64) for name in FLUX_NAMES})


class TestIceMeltFluxes:
    """Tests for the IceMeltFluxes frozen dataclass."""

    def test_field_names(self) -> None:
        """Test the 21 output fields are exposed in FLUX_NAMES."""
        assert len(FLUX_NAMES) == 21
        assert FLUX_NAMES[0] == "melt"
        assert "mass_error" in FLUX_NAMES
        assert "lake_volume" in FLUX_NAMES

    def test_to_dict_returns_all_fields(self) -> None:
        output = make_fluxes(3)
        result = output.to_dict()

        assert set(result) == set(FLUX_NAMES)
        np.testing.assert_array_equal(result["surf_temp"], [0.0, 1.0, 2.0])

    def test_is_frozen(self) -> None:
        """Test that fields cannot be reassigned."""
        output = make_fluxes(2)
        with pytest.raises(dataclasses.FrozenInstanceError):
            output.melt = np.zeros(2)  # type: ignore[misc]


class TestModelOutput:
    """Tests for the ModelOutput container."""

    def test_len_matches_time(self) -> None:
        time = pd.date_range("2020-01-01", periods=4, freq="D").values
        output = ModelOutput(time=time, fluxes=make_fluxes(4))
        assert len(output) == 4

    def test_to_dataframe(self) -> None:
        """Test DataFrame has a time index and one column per flux."""
        time = pd.date_range("2020-01-01", periods=3, freq="D").values
        output = ModelOutput(time=time, fluxes=make_fluxes(3))

        df = output.to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert df.index.name == "time"
        assert list(df.columns) == list(FLUX_NAMES)
        assert df["hice"].iloc[2] == 2.0
        assert df.index[0] == pd.Timestamp("2020-01-01")

    def test_final_states_optional(self) -> None:
        time = pd.date_range("2020-01-01", periods=1, freq="D").values
        output = ModelOutput(time=time, fluxes=make_fluxes(1))
        assert output.snow is None
        assert output.lake is None

    def test_carries_final_states(self) -> None:
        time = pd.date_range("2020-01-01", periods=1, freq="D").values
        snow = SnowState.initialize(swq=0.1)
        lake = LakeState.initialize(hice=0.2, area=1.0e4, depth=3.0)

        output = ModelOutput(time=time, fluxes=make_fluxes(1), snow=snow, lake=lake)

        assert output.snow is snow
        assert output.lake is lake
