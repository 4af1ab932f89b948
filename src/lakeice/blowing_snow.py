"""Blowing snow sublimation policies.

The lake ice step asks a policy for the vapor flux from blowing snow once per
timestep. Only the always-zero policy is provided; a physical blowing snow
model can be plugged in through the same signature.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .types import IceForcing, LakeState, SnowState


class BlowingSnowModel(Protocol):
    """Callable returning the blowing snow vapor flux [m/timestep], negative is a loss."""

    def __call__(self, forcing: IceForcing, snow: SnowState, lake: LakeState) -> float: ...


def no_blowing_snow(forcing: IceForcing, snow: SnowState, lake: LakeState) -> float:
    """Blowing snow sublimation is not simulated over lakes."""
    return 0.0
