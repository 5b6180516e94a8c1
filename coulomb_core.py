# coulomb_core.py
"""
Coulomb Wave Function Primitives
================================

Building blocks shared by every evaluation regime of F_L(η,ρ) and G_L(η,ρ),
the regular and irregular solutions of

    u'' + [1 - 2η/ρ - L(L+1)/ρ²] u = 0.

Normalization
-------------
    F_L ~ C_L(η) ρ^(L+1)                     (ρ → 0)
    F_L ~ sin θ_L,  G_L ~ cos θ_L            (ρ → ∞)
    θ_L = ρ - η ln 2ρ - Lπ/2 + σ_L(η),   σ_L = arg Γ(L + 1 + iη)
    F'_L G_L - F_L G'_L = 1

Contents
--------
- SolutionPair: value + derivative of both solutions
- coulomb_turning_point: classical turning point ρ_t(L, η)
- coulomb_log_factor / coulomb_factor: Gamow factor C_L(η)
- coulomb_phase_shift: σ_L(η)
- exp_scaled: x·e^s without overflow exceptions
- coulomb_f_series: power series for F_L near the origin
- coulomb_zero_series: power series for F_0 and G_0
- in_series_region / in_g_series_region: where the origin series are used
- coulomb_cf1: F'/F and sign(F) (real continued fraction)
- coulomb_cf2: (G' + iF')/(G + iF) (complex continued fraction)

References: Abramowitz & Stegun ch. 14; Barnett, Comp. Phys. Comm. 21
(1981) 297; Thompson & Barnett, J. Comp. Phys. 64 (1986) 490.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple

from constants import EULER_GAMMA, G_SERIES_ETA_RHO, LOG_FLOAT_MAX, TINY
from config_types import CoulombConfig, DEFAULT_CONFIG
from errors import ConvergenceError
from special_functions import complex_log_gamma, complex_psi, log_gamma
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SolutionPair:
    """
    Values and derivatives of a pair of solutions of a second-order ODE.

    When one solution is regular at the origin it is the first one; for the
    Coulomb equation first = F, second = G.

    Attributes
    ----------
    first_value, first_derivative : float
        F and F'.
    second_value, second_derivative : float
        G and G'.
    """
    first_value: float
    first_derivative: float
    second_value: float
    second_derivative: float

    @property
    def wronskian(self) -> float:
        """F' G - F G'; equals 1 for a correctly normalized Coulomb pair.

        Subject to cancellation when F and G differ by many orders of
        magnitude, so it is a diagnostic rather than a stored invariant.
        """
        return (
            self.first_derivative * self.second_value
            - self.first_value * self.second_derivative
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.first_value, self.first_derivative,
                self.second_value, self.second_derivative)


# =============================================================================
# TURNING POINT, GAMOW FACTOR, PHASE SHIFT
# =============================================================================

def coulomb_turning_point(L: float, eta: float) -> float:
    """
    Classical turning point ρ_t = η + √(η² + L(L+1)).

    For ρ < ρ_t the functions are exponential (tunneling); beyond it they
    oscillate. Zero for L = 0 with η <= 0.
    """
    return eta + math.hypot(eta, math.sqrt(L * (L + 1.0)))


def _log_factor_zero(eta: float) -> float:
    # C_0² = x / (e^x - 1), x = 2πη, arranged so neither branch overflows
    x = 2.0 * math.pi * eta
    if x == 0.0:
        return 0.0
    if x > 0.0:
        return 0.5 * (math.log(x) - x - math.log(-math.expm1(-x)))
    return 0.5 * (math.log(-x) - math.log(-math.expm1(x)))


def coulomb_log_factor(L: float, eta: float) -> float:
    """
    Natural log of the Gamow factor C_L(η).

        C_L(η) = 2^L e^(-πη/2) |Γ(L + 1 + iη)| / Γ(2L + 2)

    For integral L the product form
        C_L = C_0 ∏_{k=1}^{L} √(k² + η²) / (k (2k+1))
    is summed in log space; otherwise the Gamma ratio is evaluated with
    LogGamma. Either way no intermediate overflows for large L or |η|.
    """
    if L == int(L):
        log_c = _log_factor_zero(eta)
        for k in range(1, int(L) + 1):
            log_c += math.log(math.hypot(k, eta) / (k * (2 * k + 1)))
        return log_c
    return (
        L * math.log(2.0)
        - 0.5 * math.pi * eta
        + complex_log_gamma(complex(L + 1.0, eta)).real
        - log_gamma(2.0 * L + 2.0)
    )


def coulomb_factor(L: float, eta: float) -> float:
    """Gamow factor C_L(η): F ~ C_L ρ^(L+1), G ~ 1/((2L+1) C_L ρ^L) near ρ = 0."""
    return math.exp(coulomb_log_factor(L, eta))


def coulomb_phase_shift(L: float, eta: float) -> float:
    """Coulomb phase shift σ_L(η) = arg Γ(L + 1 + iη) on the continuous branch."""
    return complex_log_gamma(complex(L + 1.0, eta)).imag


def exp_scaled(x: float, log_scale: float) -> float:
    """x · exp(log_scale), overflowing to ±inf instead of raising OverflowError."""
    if x == 0.0:
        return 0.0
    log_value = log_scale + math.log(abs(x))
    if log_value > LOG_FLOAT_MAX:
        return math.copysign(math.inf, x)
    return math.copysign(math.exp(log_value), x)


# =============================================================================
# POWER SERIES AT THE ORIGIN
# =============================================================================

def series_limits(L: float, config: CoulombConfig = DEFAULT_CONFIG) -> Tuple[float, float]:
    """
    Region (ρ_max, |ηρ|_max) inside which the origin series converge.

    Each term brings factors ρ²/(L+1) and 2ηρ/(L+1); with threshold X the
    series stays within the iteration ceiling for
        ρ < √X (1 + √L / 2),   |ηρ| < X/2 (1 + L/2).
    """
    x = config.series_threshold
    return math.sqrt(x) * (1.0 + 0.5 * math.sqrt(L)), 0.5 * x * (1.0 + 0.5 * L)


def in_series_region(L: float, eta: float, rho: float,
                     config: CoulombConfig = DEFAULT_CONFIG) -> bool:
    rho_max, eta_rho_max = series_limits(L, config)
    return rho < rho_max and abs(eta * rho) < eta_rho_max


def in_g_series_region(eta: float, rho: float,
                       config: CoulombConfig = DEFAULT_CONFIG) -> bool:
    """
    Whether G_0 is taken from coulomb_zero_series.

    For η > 0 the two parts of G_0 cancel like exp(4√(2ηρ)), so ηρ is held
    below G_SERIES_ETA_RHO. The bound is lifted once 1/C_0 is so large that
    G_0 > e^(-2√(2ηρ))/C_0 overflows anyway.
    """
    if not in_series_region(0, eta, rho, config):
        return False
    if eta <= 0.0 or eta * rho < G_SERIES_ETA_RHO:
        return True
    return -coulomb_log_factor(0, eta) - 2.0 * math.sqrt(2.0 * eta * rho) > LOG_FLOAT_MAX


def coulomb_f_series(
    L: int, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Tuple[float, float]:
    """
    F_L and F'_L from the power series at the origin.

        F_L = C_L ρ^(L+1) Σ u_n,   u_0 = 1, u_1 = ηρ/(L+1)
        u_n = (2ηρ u_{n-1} - ρ² u_{n-2}) / (n (n + 2L + 1))
        F'_L = C_L ρ^L Σ (L + 1 + n) u_n

    The C_L ρ^L prefactor is applied in log space.

    Raises
    ------
    ConvergenceError
        If two successive terms do not drop below accuracy × partial sum
        within series_max terms.
    """
    if rho == 0.0:
        return 0.0, (coulomb_factor(0, eta) if L == 0 else 0.0)

    u, v = f_series_sums(L, eta, rho, config)
    scale = math.exp(coulomb_log_factor(L, eta) + L * math.log(rho))
    return scale * rho * u, scale * v


def f_series_sums(
    L: int, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Tuple[float, float]:
    """Σ u_n and Σ (L + 1 + n) u_n of coulomb_f_series, without the prefactor."""
    eps = config.accuracy
    eta_rho = eta * rho
    rho_2 = rho * rho

    u0, u1 = 0.0, 1.0
    u = u1
    w1 = (L + 1.0) * u1
    v = w1
    for k in range(2, config.series_max):
        u2 = (2.0 * eta_rho * u1 - rho_2 * u0) / ((k - 1) * (k + 2 * L))
        w2 = (L + k) * u2
        u += u2
        v += w2
        if (abs(u2) + abs(u1) <= eps * abs(u)
                and abs(w2) + abs(w1) <= eps * (abs(v) + abs(u))):
            logger.debug("F series: L=%d eta=%g rho=%g converged in %d terms", L, eta, rho, k)
            return u, v
        u0, u1 = u1, u2
        w1 = w2

    raise ConvergenceError(
        "F series", iterations=config.series_max,
        parameters={"L": L, "eta": eta, "rho": rho},
    )


def coulomb_zero_series(
    eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> SolutionPair:
    """
    F_0, F'_0, G_0, G'_0 from the L = 0 series at the origin.

        F_0 = C_0 u,   u = Σ a_k ρ^k,   a_1 = 1
        G_0 = [v + 2η u (ln 2ρ + Re ψ(1+iη) + 2γ - 1)] / C_0,   v = Σ b_k ρ^k,  b_0 = 1

    with k(k-1) a_k = 2η a_{k-1} - a_{k-2} and
    k(k-1) b_k = 2η b_{k-1} - b_{k-2} - 2η(2k-1) a_k.
    Same convergence region as the L > 0 series for F. C_0 is applied in log
    space: for large η, F underflows to 0 and G overflows to +inf.
    """
    log_c0 = coulomb_log_factor(0, eta)
    c0 = math.exp(log_c0)
    if rho == 0.0:
        return SolutionPair(0.0, c0, exp_scaled(1.0, -log_c0), -math.inf)

    eps = config.accuracy
    eta_rho = eta * rho
    rho_2 = rho * rho

    u0, u1 = 0.0, rho
    u = u1
    up = u1
    v0, v1 = 1.0, 0.0
    v = v0
    vp = 0.0
    for k in range(2, config.series_max):
        kk = k * (k - 1)
        u2 = (2.0 * eta_rho * u1 - rho_2 * u0) / kk
        v2 = (2.0 * eta_rho * v1 - rho_2 * v0 - 2.0 * eta * (2 * k - 1) * u2) / kk
        u += u2
        up += k * u2
        v += v2
        vp += k * v2
        if (abs(u2) + abs(u1) <= eps * abs(u)
                and abs(v2) + abs(v1) <= eps * (abs(v) + abs(u))):
            r = (complex_psi(complex(1.0, eta)).real
                 + 2.0 * EULER_GAMMA - 1.0 + math.log(2.0 * rho))
            F = c0 * u
            FP = c0 * up / rho
            G = exp_scaled(v + 2.0 * eta * r * u, -log_c0)
            GP = exp_scaled((vp + 2.0 * eta * (r * up + u)) / rho, -log_c0)
            logger.debug("zero series: eta=%g rho=%g converged in %d terms", eta, rho, k)
            return SolutionPair(F, FP, G, GP)
        u0, u1 = u1, u2
        v0, v1 = v1, v2

    raise ConvergenceError(
        "L=0 series", iterations=config.series_max,
        parameters={"eta": eta, "rho": rho},
    )


# =============================================================================
# CONTINUED FRACTIONS
# =============================================================================

def coulomb_cf1(
    L: float, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Tuple[float, int]:
    """
    F'_L/F_L and sign(F_L) from Barnett's real continued fraction.

        f = S_{L+1} - R²_{L+1} / (T_{L+1} - R²_{L+2} / (T_{L+2} - ...))
        S_k = k/ρ + η/k,  R²_k = 1 + η²/k²,  T_k = (2k+1)(1/ρ + η/(k(k+1)))

    Evaluated with the modified Lentz algorithm. Each negative denominator
    flips the sign of the ratio F_{k-1}/F_k, so counting them gives sign(F_L).
    Converges quickly below the turning point; beyond it the number of terms
    grows like ρ.

    Returns
    -------
    (f, sign) : (float, int)
    """
    eps = config.accuracy
    max_iterations = config.fraction_max(rho, eta)
    xi = 1.0 / rho

    pk = L + 1.0
    f = pk * xi + eta / pk
    if abs(f) < TINY:
        f = TINY
    c = f
    d = 0.0
    sign = 1

    for k in range(1, max_iterations + 1):
        pk1 = pk + 1.0
        ek = eta / pk
        rk2 = 1.0 + ek * ek
        tk = (pk + pk1) * (xi + ek / pk1)
        d = tk - rk2 * d
        c = tk - rk2 / c
        if abs(c) < TINY:
            c = TINY
        if abs(d) < TINY:
            d = TINY
        d = 1.0 / d
        delta = c * d
        f *= delta
        if d < 0.0:
            sign = -sign
        if abs(delta - 1.0) < eps:
            logger.debug("CF1: L=%g eta=%g rho=%g converged in %d terms", L, eta, rho, k)
            return f, sign
        pk = pk1

    raise ConvergenceError(
        "CF1", iterations=max_iterations,
        parameters={"L": L, "eta": eta, "rho": rho},
    )


def coulomb_cf2(
    L: float, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> complex:
    """
    p + iq = (G'_L + iF'_L)/(G_L + iF_L) from Steed's complex continued fraction.

        p + iq = i(1 - η/ρ) + (i/ρ) · a c / (b_1 + (a+1)(c+1) / (b_2 + ...))
        a = 1 + L + iη,  c = -L + iη,  b_k = 2(ρ - η + ik)

    Converges quickly beyond the turning point and not at all inside it, so
    callers must only use it for ρ >= ρ_t.
    """
    eps = config.accuracy
    max_iterations = config.fraction_max(rho, eta)

    a_1 = complex(-(eta * eta + L * (L + 1.0)), eta)
    a_step = complex(0.0, 2.0 * eta)

    # Lentz on the denominator g = b_1 + a_2/(b_2 + a_3/(b_3 + ...)), then
    # the tail is a_1/g. Im b_k = 2k, so no b_k vanishes.
    g = complex(2.0 * (rho - eta), 2.0)
    c = g
    d = 0j
    # (a+k)(c+k) = (a+k-1)(c+k-1) + 2k + 2iη
    a_k = a_1 + 2.0 + a_step
    for k in range(2, max_iterations + 1):
        b_k = complex(2.0 * (rho - eta), 2.0 * k)
        d = b_k + a_k * d
        if d == 0:
            d = complex(TINY, 0.0)
        c = b_k + a_k / c
        if c == 0:
            c = complex(TINY, 0.0)
        d = 1.0 / d
        delta = c * d
        g *= delta
        if abs(delta - 1.0) < eps:
            logger.debug("CF2: L=%g eta=%g rho=%g converged in %d terms", L, eta, rho, k)
            return complex(0.0, 1.0 - eta / rho) + complex(0.0, 1.0 / rho) * (a_1 / g)
        a_k += 2.0 * k + a_step

    raise ConvergenceError(
        "CF2", iterations=max_iterations,
        parameters={"L": L, "eta": eta, "rho": rho},
    )
