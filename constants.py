# constants.py
"""
Numerical Constants for Coulomb Wave Function Evaluation
========================================================

This module centralizes all magic numbers used throughout the codebase,
providing named constants with documentation for maintainability.

Mathematical Constants
----------------------
- EULER_GAMMA: Euler-Mascheroni constant
- BERNOULLI: even Bernoulli numbers B_2n for Stirling-type series

Numerical Limits
----------------
- MAX_ACCURACY: Tightest relative accuracy any iterative method may target
- SERIES_MAX: Default iteration ceiling for series and continued fractions

Regime Thresholds
-----------------
- Boundaries between power series, Steed's method, asymptotic expansion
  and ODE integration. These are tuned empirically, not derived.
"""

from __future__ import annotations

import math
import sys

# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================

EULER_GAMMA: float = 0.577215664901532860606512
"""Euler-Mascheroni constant γ = 0.5772..."""

SQRT_TWO_PI: float = math.sqrt(2.0 * math.pi)
"""√(2π), prefactor of Stirling and Lanczos formulas."""

HALF_LOG_TWO_PI: float = 0.5 * math.log(2.0 * math.pi)
"""½·ln(2π)."""

BERNOULLI: tuple = (
    1.0, 1.0 / 6.0, -1.0 / 30.0, 1.0 / 42.0, -1.0 / 30.0, 5.0 / 66.0,
    -691.0 / 2730.0, 7.0 / 6.0, -3617.0 / 510.0, 43867.0 / 798.0,
    -174611.0 / 330.0, 854513.0 / 138.0, -236364091.0 / 2730.0,
    8553103.0 / 6.0, -23749461029.0 / 870.0, 8615841276005.0 / 14322.0,
)
"""Even Bernoulli numbers, BERNOULLI[n] = B_2n.

The only non-vanishing odd Bernoulli number is B_1 = -1/2, which any series
using this table must handle separately.
"""

# =============================================================================
# NUMERICAL LIMITS
# =============================================================================

MAX_ACCURACY: float = 2.0 ** -49
"""Tightest relative accuracy allowed for iterative methods.

A double carries 52 mantissa bits; asking for one byte less keeps
termination tests away from round-off noise.
"""

SERIES_MAX: int = 250
"""Default maximum number of terms in a series or continued fraction."""

TINY: float = 1.0e-300
"""Stand-in for zero denominators in Lentz's continued-fraction algorithm."""

LOG_FLOAT_MAX: float = math.log(sys.float_info.max)
"""ln of the largest double; exp() of anything larger overflows."""

# =============================================================================
# REGIME THRESHOLDS
# =============================================================================

SERIES_THRESHOLD: float = 16.0
"""Convergence threshold X of the power series at the origin.

Each series term brings factors of rho^2/(L+1) and 2*eta*rho/(L+1); the
series is used while rho < sqrt(X)*(1 + sqrt(L)/2) and
|eta*rho| < X/2*(1 + L/2), which keeps it within ~30-60 terms.
"""

ASYMPTOTIC_OFFSET: float = 32.0
"""Asymptotic expansion is used for rho > ASYMPTOTIC_OFFSET + (L^2 + eta^2)/2."""

G_SERIES_ETA_RHO: float = 2.5
"""Upper bound on eta*rho (eta > 0) for G from the L = 0 series.

The two parts of G_0 = (v + 2 eta r u)/C_0 cancel by roughly
exp(4*sqrt(2*eta*rho)); beyond this bound the cancellation costs more digits
than the ODE fallback does.
"""

# =============================================================================
# ODE INTEGRATION DEFAULTS
# =============================================================================

INTEGRATION_ACCURACY: float = 2.5e-13
"""Default relative accuracy of the ODE fallback.

Extrapolation steppers cannot reliably reach MAX_ACCURACY; the fallback
returns all but the last 3-4 digits.
"""

INITIAL_STEP: float = 0.25
"""Initial step size in rho for the ODE fallback."""

MAX_EVALUATIONS: int = 100000
"""Ceiling on right-hand-side evaluations during one integration."""

ODE_METHODS: tuple = ("bulirsch-stoer", "dop853")
"""Names of the available ODE stepping strategies."""
