# special_functions.py
"""
Lanczos Approximation to the Gamma Function Family
==================================================

Gamma, LogGamma, Digamma (Psi) and Beta for real arguments, and LogGamma and
Psi for complex arguments, accurate to ~15-16 significant digits. They supply
the normalization constants (Gamow factor, Coulomb phase shift) of the
Coulomb wave function engine.

Lanczos Formula
---------------
    Γ(z) = √(2π) t^(z-1/2) e^(-t) S(z),    t = z + g - 1/2
    S(z) = c_0 + c_1/z + c_2/(z+1) + ... + c_N/(z+N-1)

We use Godfrey's coefficients (g = 607/128, N = 14), documented in
Numerical Recipes 3rd ed. §6.1; measured relative deviation at the integers
is a few × 10^-16. Writing the leading factor as (t/e)^(z-1/2) e^(-g)
instead of calling exp(-t) separately keeps one more digit.

- Real arguments below 1/2 go through the reflection formula.
- Complex arguments with Re z < 0 go through the reflection formula;
  complex arguments with |z| > 15 use the Stirling series, whose terms
  come from the even Bernoulli numbers.
- The complex LogGamma is the branch analytic off the negative real axis,
  so Im LogGamma(L + 1 + iη) is the continuous Coulomb phase.

All functions are pure; the only shared data are the coefficient tables.
"""

from __future__ import annotations
import cmath
import math

from constants import BERNOULLI, HALF_LOG_TWO_PI, SQRT_TWO_PI
from errors import CoulombDomainError

# =============================================================================
# LANCZOS COEFFICIENTS
# =============================================================================

LANCZOS_G: float = 607.0 / 128.0
LANCZOS_C: tuple = (
    0.999999999999997092,
    57.1562356658629235,
    -59.5979603554754912,
    14.1360979747417471,
    -0.491913816097620199,
    0.339946499848118887e-4,
    0.465236289270485756e-4,
    -0.983744753048795646e-4,
    0.158088703224912494e-3,
    -0.210264441724104883e-3,
    0.217439618115212643e-3,
    -0.164318106536763890e-3,
    0.844182239838527433e-4,
    -0.261908384015814087e-4,
    0.368991826595316234e-5,
)

# Derived once: g - 1/2 and e^-g
LANCZOS_GP: float = LANCZOS_G - 0.5
LANCZOS_EXP_G: float = math.exp(-LANCZOS_G)

# Beyond this, |z| is large enough for the Stirling series
_STIRLING_RADIUS = 15.0

# Γ(x) overflows a double just above this
_GAMMA_OVERFLOW = 171.6243769563027


# =============================================================================
# LANCZOS SUMS
# =============================================================================

def lanczos_sum(z):
    """S(z) = c_0 + Σ_k c_k / (z + k - 1). Accepts float or complex."""
    s = LANCZOS_C[0]
    for k in range(1, len(LANCZOS_C)):
        s += LANCZOS_C[k] / (z + (k - 1))
    return s


def lanczos_log_sum_prime(z):
    """d/dz ln S(z) = S'(z)/S(z). Accepts float or complex."""
    s = LANCZOS_C[0]
    sp = 0.0
    for k in range(1, len(LANCZOS_C)):
        zk = z + (k - 1)
        ck_zk = LANCZOS_C[k] / zk
        s += ck_zk
        sp -= ck_zk / zk
    return sp / s


# =============================================================================
# TRIGONOMETRIC HELPERS
# =============================================================================

def _sin_pi(x: float) -> float:
    """sin(πx) with exact argument reduction, so zeros at the integers are exact."""
    r = math.fmod(x, 2.0)
    if r < -1.0:
        r += 2.0
    elif r > 1.0:
        r -= 2.0
    if r > 0.5:
        r = 1.0 - r
    elif r < -0.5:
        r = -1.0 - r
    return math.sin(math.pi * r)


def _cos_pi(x: float) -> float:
    """cos(πx) with exact argument reduction."""
    r = math.fmod(abs(x), 2.0)
    if r > 1.0:
        r = 2.0 - r
    if r > 0.5:
        return -math.sin(math.pi * (r - 0.5))
    return math.sin(math.pi * (0.5 - r))


def _check_pole(x: float, name: str) -> None:
    if x <= 0.0 and x == math.floor(x):
        raise CoulombDomainError(f"{name} has a pole at non-positive integer {x:g}")


# =============================================================================
# REAL ARGUMENT
# =============================================================================

def log_gamma(x: float) -> float:
    """
    Logarithm of the absolute value of Γ(x).

    Raises
    ------
    CoulombDomainError
        For x a non-positive integer (pole).
    """
    x = float(x)
    _check_pole(x, "log_gamma")
    if x < 0.5:
        # Reflection: Γ(x) Γ(1-x) = π / sin(πx)
        return math.log(math.pi / abs(_sin_pi(x))) - log_gamma(1.0 - x)
    t = x + LANCZOS_GP
    return (x - 0.5) * math.log(t) - t + math.log(SQRT_TWO_PI * lanczos_sum(x))


def gamma(x: float) -> float:
    """
    Γ(x) for real x; +inf beyond the double-precision overflow point.

    Raises
    ------
    CoulombDomainError
        For x a non-positive integer (pole).
    """
    x = float(x)
    _check_pole(x, "gamma")
    if x < 0.5:
        return math.pi / (_sin_pi(x) * gamma(1.0 - x))
    if x > _GAMMA_OVERFLOW:
        return math.inf
    t = x + LANCZOS_GP
    # Split the power in two so (t/e)^(x-1/2) cannot overflow before the
    # small prefactor is applied
    p = (t / math.e) ** ((x - 0.5) / 2.0)
    return (SQRT_TWO_PI * LANCZOS_EXP_G * lanczos_sum(x) * p) * p


def psi(x: float) -> float:
    """
    Digamma function ψ(x) = Γ'(x)/Γ(x).

    Raises
    ------
    CoulombDomainError
        For x a non-positive integer (pole).
    """
    x = float(x)
    _check_pole(x, "psi")
    if x < 0.5:
        # ψ(1-x) - ψ(x) = π cot(πx)
        return psi(1.0 - x) - math.pi * _cos_pi(x) / _sin_pi(x)
    t = x + LANCZOS_GP
    return math.log(t) - LANCZOS_G / t + lanczos_log_sum_prime(x)


def log_beta(x: float, y: float) -> float:
    """
    ln B(x, y) for x, y > 0.

    The Lanczos forms of the three Gamma functions are combined so that the
    shifted exponentials cancel analytically:
        t_x + t_y - t_xy = g - 1/2
    """
    x = float(x)
    y = float(y)
    if x <= 0.0 or y <= 0.0:
        raise CoulombDomainError(f"log_beta requires x, y > 0, got x={x:g}, y={y:g}")
    tx = x + LANCZOS_GP
    ty = y + LANCZOS_GP
    txy = x + y + LANCZOS_GP
    s = lanczos_sum(x) * lanczos_sum(y) / lanczos_sum(x + y)
    return (
        (x - 0.5) * math.log1p(-y / txy)
        + (y - 0.5) * math.log1p(-x / txy)
        - 0.5 * math.log(txy)
        - LANCZOS_GP
        + HALF_LOG_TWO_PI
        + math.log(s)
    )


def beta(x: float, y: float) -> float:
    """Euler Beta function B(x, y) = Γ(x)Γ(y)/Γ(x+y) for x, y > 0."""
    return math.exp(log_beta(x, y))


# =============================================================================
# COMPLEX ARGUMENT
# =============================================================================

def _check_complex_pole(z: complex, name: str) -> None:
    if z.imag == 0.0:
        _check_pole(z.real, name)


def log_gamma_stirling(z: complex) -> complex:
    """
    Stirling series for ln Γ(z), accurate to double precision for |z| > 15
    with Re z >= 0.

        ln Γ(z) = (z - 1/2) ln z - z + ln √(2π) + Σ B_2k / (2k(2k-1) z^(2k-1))
    """
    z = complex(z)
    f = (z - 0.5) * cmath.log(z) - z + HALF_LOG_TWO_PI
    zsq = z * z
    zp = z
    for k in range(1, len(BERNOULLI)):
        f_old = f
        f += BERNOULLI[k] / ((2 * k) * (2 * k - 1)) / zp
        if f == f_old:
            return f
        zp *= zsq
    return f


def _psi_stirling(z: complex) -> complex:
    f = cmath.log(z) - 0.5 / z
    zsq = z * z
    zp = zsq
    for k in range(1, len(BERNOULLI)):
        f_old = f
        f -= BERNOULLI[k] / (2 * k) / zp
        if f == f_old:
            return f
        zp *= zsq
    return f


def complex_log_gamma(z: complex) -> complex:
    """
    ln Γ(z) for complex z, on the branch analytic off the negative real axis.

    For Re z < 0 the reflection formula is applied; there the imaginary part
    is only determined modulo 2π.
    """
    z = complex(z)
    _check_complex_pole(z, "complex_log_gamma")
    if z.real < 0.0:
        return (
            math.log(math.pi)
            - cmath.log(cmath.sin(math.pi * z))
            - complex_log_gamma(1.0 - z)
        )
    if abs(z) > _STIRLING_RADIUS:
        return log_gamma_stirling(z)
    t = z + LANCZOS_GP
    return (z - 0.5) * cmath.log(t) - t + cmath.log(SQRT_TWO_PI * lanczos_sum(z))


def complex_psi(z: complex) -> complex:
    """Digamma function ψ(z) for complex z."""
    z = complex(z)
    _check_complex_pole(z, "complex_psi")
    if z.real < 0.0:
        return complex_psi(1.0 - z) - math.pi / cmath.tan(math.pi * z)
    if abs(z) > _STIRLING_RADIUS:
        return _psi_stirling(z)
    t = z + LANCZOS_GP
    return cmath.log(t) - LANCZOS_G / t + lanczos_log_sum_prime(z)
