# ode_stepper.py
"""
Second-Order ODE Steppers for the Coulomb Integration Fallback
==============================================================

Integrates scalar equations of the form

    y''(x) = f(x, y)

which is exactly the shape of the Coulomb radial equation

    u''(ρ) = [L(L+1)/ρ² + 2η/ρ - 1] u(ρ).

Design
------
- OdeState is an immutable value (x, y, y', step size, evaluation count).
  Each step consumes one state and returns the next; a state is owned by the
  single integrate() call that threads it.
- OdeStepper is the strategy interface. One concrete stepping algorithm is
  chosen at construction (make_stepper) and driven through step()/integrate().

Strategies
----------
- "bulirsch-stoer": Störmer's rule for y'' = f(x, y) with Richardson
  (Neville) extrapolation in h². Primary method; reaches ~1e-13 relative.
- "dop853": scipy.integrate.DOP853 on the equivalent first-order system.
  Used to cross-check the primary method.

Failure Modes
-------------
Both strategies raise ConvergenceError when the step size underflows
without meeting the accuracy target, or when the right-hand-side
evaluation ceiling is exceeded.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable

import numpy as np
from scipy.integrate import DOP853

from constants import INTEGRATION_ACCURACY, MAX_EVALUATIONS, INITIAL_STEP
from config_types import check_accuracy
from errors import ConvergenceError, CoulombDomainError
from logging_config import get_logger

logger = get_logger(__name__)

RightHandSide = Callable[[float, float], float]


@dataclass(frozen=True)
class OdeState:
    """
    Snapshot of an integration in progress.

    Attributes
    ----------
    x : float
        Independent variable.
    y : float
        Dependent variable y(x).
    y_prime : float
        Derivative y'(x).
    delta_x : float
        Signed step size to try next.
    evaluation_count : int
        Right-hand-side evaluations spent so far.
    """
    x: float
    y: float
    y_prime: float
    delta_x: float = INITIAL_STEP
    evaluation_count: int = 0


class OdeStepper(ABC):
    """Strategy interface: advance an OdeState for y'' = f(x, y)."""

    name: str = "abstract"

    def __init__(
        self,
        right_hand_side: RightHandSide,
        accuracy: float = INTEGRATION_ACCURACY,
        max_evaluations: int = MAX_EVALUATIONS,
    ):
        self.right_hand_side = right_hand_side
        self.accuracy = check_accuracy(accuracy)
        self.max_evaluations = int(max_evaluations)

    @abstractmethod
    def step(self, state: OdeState, x_bound: float) -> OdeState:
        """Take one accepted step from `state` toward `x_bound`, never past it."""

    def integrate(self, state: OdeState, x1: float) -> OdeState:
        """
        Advance `state` until x reaches x1.

        Raises
        ------
        ConvergenceError
            If the evaluation ceiling is exceeded or a step fails.
        """
        if x1 == state.x:
            return state
        direction = 1.0 if x1 > state.x else -1.0
        h = abs(state.delta_x) if state.delta_x != 0.0 else INITIAL_STEP
        state = replace(state, delta_x=direction * h)

        n_steps = 0
        while (x1 - state.x) * direction > 0.0:
            state = self.step(state, x1)
            n_steps += 1
            if state.evaluation_count > self.max_evaluations:
                raise ConvergenceError(
                    f"{self.name} integration",
                    iterations=state.evaluation_count,
                    parameters={"x": state.x, "x1": x1},
                    detail="evaluation ceiling exceeded",
                )

        logger.debug(
            "%s: reached x=%.6g in %d steps, %d evaluations",
            self.name, x1, n_steps, state.evaluation_count,
        )
        return state


class BulirschStoerStoermerStepper(OdeStepper):
    """
    Extrapolated Störmer steps for y'' = f(x, y).

    A macro step of size H is tried with n = 2, 4, 6, ... Störmer sub-steps.
    The error series of Störmer's rule contains only even powers of h, so
    the results are extrapolated to h → 0 with a Neville table in h². The
    step is accepted as soon as two successive diagonal entries agree; the
    level at which that happens drives the next step size.
    """

    name = "bulirsch-stoer"

    SEQUENCE = (2, 4, 6, 8, 10, 12, 14, 16)

    def _trial_step(self, x: float, y: float, yp: float, h: float, n: int):
        f = self.right_hand_side
        hs = h / n
        h2 = hs * hs

        d = hs * (yp + 0.5 * hs * f(x, y))
        y1 = y + d
        for i in range(1, n):
            d += h2 * f(x + i * hs, y1)
            y1 += d
        yp1 = d / hs + 0.5 * hs * f(x + h, y1)
        return y1, yp1, n + 1

    def step(self, state: OdeState, x_bound: float) -> OdeState:
        x, y, yp = state.x, state.y, state.y_prime
        count = state.evaluation_count
        h = state.delta_x
        remaining = x_bound - x
        if abs(h) >= abs(remaining):
            h = remaining

        while True:
            rows_y = []
            rows_yp = []
            for k, n in enumerate(self.SEQUENCE):
                y1, yp1, evals = self._trial_step(x, y, yp, h, n)
                count += evals
                row_y = [y1]
                row_yp = [yp1]
                for j in range(1, k + 1):
                    factor = (n / self.SEQUENCE[k - j]) ** 2 - 1.0
                    row_y.append(row_y[j - 1] + (row_y[j - 1] - rows_y[k - 1][j - 1]) / factor)
                    row_yp.append(row_yp[j - 1] + (row_yp[j - 1] - rows_yp[k - 1][j - 1]) / factor)
                rows_y.append(row_y)
                rows_yp.append(row_yp)

                if k < 2:
                    continue
                y_new, yp_new = row_y[k], row_yp[k]
                scale = max(abs(y_new) + abs(h * yp_new), 1.0e-300)
                error = max(
                    abs(y_new - row_y[k - 1]),
                    abs(h * (yp_new - row_yp[k - 1])),
                ) / scale
                if error <= self.accuracy:
                    if k <= 3:
                        h_next = 2.0 * h
                    elif k <= 5:
                        h_next = 1.25 * h
                    elif k == len(self.SEQUENCE) - 1:
                        h_next = 0.7 * h
                    else:
                        h_next = h
                    # Land exactly on the bound so integrate() terminates
                    x_new = x_bound if h == remaining else x + h
                    return OdeState(x_new, y_new, yp_new, h_next, count)

            h *= 0.25
            logger.debug("%s: step rejected at x=%.6g, new h=%.3g", self.name, x, h)
            if abs(h) <= 1.0e-12 * max(1.0, abs(x)):
                raise ConvergenceError(
                    self.name,
                    iterations=count,
                    parameters={"x": x},
                    detail="step size underflow",
                )
            if count > self.max_evaluations:
                raise ConvergenceError(
                    self.name,
                    iterations=count,
                    parameters={"x": x},
                    detail="evaluation ceiling exceeded",
                )


class DormandPrinceStepper(OdeStepper):
    """
    scipy.integrate.DOP853 on the first-order system (y, y').

    scipy clamps rtol below 100 machine epsilons, so this strategy delivers
    ~1e-13 at best. integrate() drives one solver over the whole interval so
    its step-size controller carries over from step to step.
    """

    name = "dop853"

    _RTOL_FLOOR = 100.0 * np.finfo(float).eps

    def _system(self, x, u):
        return [u[1], self.right_hand_side(x, u[0])]

    def _solver(self, state: OdeState, x_bound: float) -> DOP853:
        first_step = abs(state.delta_x) or None
        if first_step is not None:
            first_step = min(first_step, abs(x_bound - state.x))
        rtol = max(self.accuracy, self._RTOL_FLOOR)
        atol = rtol * max(abs(state.y), abs(state.y_prime), 1.0e-300)
        return DOP853(
            self._system,
            state.x,
            [state.y, state.y_prime],
            x_bound,
            rtol=rtol,
            atol=atol,
            first_step=first_step,
        )

    def _advance(self, solver: DOP853, state: OdeState) -> OdeState:
        message = solver.step()
        count = state.evaluation_count + solver.nfev
        if solver.status == "failed":
            raise ConvergenceError(
                self.name,
                iterations=count,
                parameters={"x": state.x},
                detail=str(message),
            )
        direction = 1.0 if solver.direction > 0 else -1.0
        h_next = direction * (solver.step_size or abs(state.delta_x))
        return OdeState(
            float(solver.t),
            float(solver.y[0]),
            float(solver.y[1]),
            h_next,
            count,
        )

    def step(self, state: OdeState, x_bound: float) -> OdeState:
        return self._advance(self._solver(state, x_bound), state)

    def integrate(self, state: OdeState, x1: float) -> OdeState:
        if x1 == state.x:
            return state
        solver = self._solver(state, x1)
        start_count = state.evaluation_count
        n_steps = 0
        while solver.status == "running":
            # solver.nfev is cumulative, so rebase on the starting count
            state = self._advance(solver, replace(state, evaluation_count=start_count))
            n_steps += 1
            if state.evaluation_count > self.max_evaluations:
                raise ConvergenceError(
                    f"{self.name} integration",
                    iterations=state.evaluation_count,
                    parameters={"x": state.x, "x1": x1},
                    detail="evaluation ceiling exceeded",
                )

        logger.debug(
            "%s: reached x=%.6g in %d steps, %d evaluations",
            self.name, x1, n_steps, state.evaluation_count,
        )
        return replace(state, x=x1)


_STEPPERS = {
    BulirschStoerStoermerStepper.name: BulirschStoerStoermerStepper,
    DormandPrinceStepper.name: DormandPrinceStepper,
}


def make_stepper(
    method: str,
    right_hand_side: RightHandSide,
    accuracy: float = INTEGRATION_ACCURACY,
    max_evaluations: int = MAX_EVALUATIONS,
) -> OdeStepper:
    """Construct the stepping strategy registered under `method`."""
    try:
        cls = _STEPPERS[method]
    except KeyError:
        raise CoulombDomainError(
            f"Unknown ODE method '{method}'. Available: {sorted(_STEPPERS)}"
        ) from None
    return cls(right_hand_side, accuracy=accuracy, max_evaluations=max_evaluations)


def integrate_second_order(
    right_hand_side: RightHandSide,
    x0: float,
    y0: float,
    yp0: float,
    x1: float,
    method: str = "bulirsch-stoer",
    accuracy: float = INTEGRATION_ACCURACY,
    initial_step: float = INITIAL_STEP,
    max_evaluations: int = MAX_EVALUATIONS,
) -> OdeState:
    """
    Integrate y'' = f(x, y) from (x0, y0, yp0) to x1.

    Returns
    -------
    OdeState
        Final state; state.y and state.y_prime hold y(x1), y'(x1).
    """
    stepper = make_stepper(method, right_hand_side, accuracy, max_evaluations)
    return stepper.integrate(OdeState(x0, y0, yp0, initial_step), x1)
