"""lakeice: snow and ice energy balance for lake surfaces.

Computes melt, refreeze, sublimation and the resulting ice and snow
thickness changes of the snow/ice layer over a lake, one timestep at a time,
using an energy balance solved implicitly for the surface temperature.
"""

from lakeice.blowing_snow import BlowingSnowModel, no_blowing_snow
from lakeice.constants import DEFAULT_CONSTANTS, PhysicalConstants
from lakeice.energy_balance import EnergyBalanceFluxes, EnergyBalanceParams, ice_energy_balance
from lakeice.errors import IceEnergyBalanceError
from lakeice.outputs import IceMeltFluxes, ModelOutput
from lakeice.processes import icerad
from lakeice.run import ice_melt_step, run
from lakeice.solver import DEFAULT_SOLVER_CONFIG, SolverConfig, root_brent
from lakeice.types import ForcingData, IceForcing, LakeState, SnowState

__all__ = [
    "BlowingSnowModel",
    "DEFAULT_CONSTANTS",
    "DEFAULT_SOLVER_CONFIG",
    "EnergyBalanceFluxes",
    "EnergyBalanceParams",
    "ForcingData",
    "IceEnergyBalanceError",
    "IceForcing",
    "IceMeltFluxes",
    "LakeState",
    "ModelOutput",
    "PhysicalConstants",
    "SnowState",
    "SolverConfig",
    "ice_energy_balance",
    "ice_melt_step",
    "icerad",
    "no_blowing_snow",
    "root_brent",
    "run",
]
