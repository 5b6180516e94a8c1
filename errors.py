# errors.py
"""
Exception Types for the Coulomb Wave Function Engine
=====================================================

Two kinds of failure are reported to callers:

- CoulombDomainError: an argument is outside the domain of the function
  (negative L or rho, non-integral L, accuracy outside [2^-49, 1), a pole
  of the Gamma function). Raised immediately, never recovered locally.
- ConvergenceError: a series, continued fraction or ODE integration did not
  reach its target accuracy within its iteration ceiling. The dispatch layer
  in coulomb.py catches these and falls back to the next applicable regime.

Both derive from the built-in exceptions the rest of the code base already
uses (ValueError / RuntimeError), so generic handlers keep working.
"""

from __future__ import annotations
from typing import Optional


class CoulombDomainError(ValueError):
    """An argument lies outside the domain of the requested function."""


class ConvergenceError(RuntimeError):
    """
    An iterative method failed to converge.

    Attributes
    ----------
    method : str
        Name of the method that failed (e.g. "CF1", "series").
    iterations : int
        Number of iterations (or function evaluations) used before giving up.
    parameters : dict
        The (L, eta, rho) or similar arguments, for diagnostics.
    """

    def __init__(
        self,
        method: str,
        iterations: int = 0,
        parameters: Optional[dict] = None,
        detail: str = "",
    ):
        self.method = method
        self.iterations = iterations
        self.parameters = dict(parameters or {})
        message = f"{method} failed to converge after {iterations} iterations"
        if self.parameters:
            args = ", ".join(f"{k}={v!r}" for k, v in self.parameters.items())
            message += f" ({args})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
