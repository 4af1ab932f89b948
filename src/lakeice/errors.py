"""Errors raised by the lake ice model."""

from __future__ import annotations

from dataclasses import asdict

from .energy_balance import EnergyBalanceFluxes, EnergyBalanceParams


class IceEnergyBalanceError(RuntimeError):
    """The subfreezing surface temperature solve did not converge.

    Carries the energy balance inputs of the timestep and the flux terms
    evaluated at 0C, the last temperature at which the residual was
    computed before the solve. surf_temp holds the solver result (the
    failure sentinel), not a temperature the fluxes belong to. The run
    that raised it cannot continue; the caller decides whether to log and
    abort or escalate.

    Attributes:
        surf_temp: Value returned by the root solver [C].
        params: Energy balance inputs at the time of failure.
        fluxes: Flux terms evaluated at 0C, before the solve.
        solver_message: Message reported by the root solver.
    """

    def __init__(
        self,
        surf_temp: float,
        params: EnergyBalanceParams,
        fluxes: EnergyBalanceFluxes,
        solver_message: str = "",
    ) -> None:
        self.surf_temp = surf_temp
        self.params = params
        self.fluxes = fluxes
        self.solver_message = solver_message
        super().__init__(
            "ice_melt failed to converge to a solution in root_brent"
            + (f": {solver_message}" if solver_message else "")
        )

    def snapshot(self) -> dict[str, float]:
        """All parameter values by name, with the flux terms suffixed _at_freezing."""
        values: dict[str, float] = {"surf_temp": self.surf_temp}
        values.update(self.params.to_dict())
        values.update({f"{name}_at_freezing": value for name, value in asdict(self.fluxes).items()})
        return values

    def dump(self) -> str:
        """Render the snapshot as one 'name = value' line per parameter."""
        lines = [str(self)]
        lines.extend(f"{name} = {value:f}" for name, value in self.snapshot().items())
        return "\n".join(lines)
