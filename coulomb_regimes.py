# coulomb_regimes.py
"""
Coulomb Wave Function Regime Composers
======================================

Each function here evaluates the Coulomb functions by one complete method,
built from the primitives in coulomb_core.py:

- coulomb_steed: CF1 + CF2 + Wronskian (at and beyond the turning point)
- coulomb_asymptotic: Abramowitz & Stegun 14.5 expansion (far beyond it)
- coulomb_recurse_upward / coulomb_recurse_downward: three-term recursion in L
- coulomb_f_integrate: series at the origin, then ODE integration outward
- coulomb_g_integrate: L = 0 start on or beyond the turning point (moved
  outward while Steed's method fails), ODE integration inward, then upward
  recursion in L

Stability
---------
Inside the turning point F grows with ρ and decays with L, while G does the
opposite. Hence F is integrated outward and recursed downward; G is
integrated inward and recursed upward. Beyond the turning point both are
oscillatory and either direction is neutral.

All functions raise ConvergenceError on failure; choosing a fallback is the
dispatcher's job (coulomb.py).
"""

from __future__ import annotations
import math
from typing import Tuple

from config_types import CoulombConfig, DEFAULT_CONFIG
from coulomb_core import (
    SolutionPair,
    coulomb_cf1,
    coulomb_cf2,
    coulomb_log_factor,
    coulomb_phase_shift,
    coulomb_turning_point,
    series_limits,
    f_series_sums,
)
from errors import ConvergenceError
from ode_stepper import OdeState, integrate_second_order
from logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# STEED'S METHOD
# =============================================================================

def coulomb_steed(
    L: float, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> SolutionPair:
    """
    F, F', G, G' at one L from Steed's method.

    With f = F'/F from CF1 and p + iq = (G' + iF')/(G + iF) from CF2, write
    G = γF. Then f = p + qγ, G' = (pγ - q)F, and the Wronskian
    F'G - FG' = F² q (1 + γ²) = 1 fixes |F|; CF1 supplies its sign.

    Reliable at and beyond the turning point; slow far beyond it, where the
    asymptotic expansion is cheaper.
    """
    f, sign = coulomb_cf1(L, eta, rho, config)
    pq = coulomb_cf2(L, eta, rho, config)
    p, q = pq.real, pq.imag
    if not q > 0.0:
        raise ConvergenceError(
            "Steed", parameters={"L": L, "eta": eta, "rho": rho},
            detail=f"CF2 returned non-positive q={q:g}",
        )
    gam = (f - p) / q
    F = sign / math.sqrt((f - p) * gam + q)
    return SolutionPair(F, f * F, gam * F, (p * gam - q) * F)


# =============================================================================
# ASYMPTOTIC EXPANSION
# =============================================================================

def asymptotic_threshold(L: float, eta: float,
                         config: CoulombConfig = DEFAULT_CONFIG) -> float:
    """Smallest ρ at which the asymptotic expansion is used."""
    return config.asymptotic_offset + 0.5 * (L * L + eta * eta)


def coulomb_asymptotic(
    L: float, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> SolutionPair:
    """
    F, F', G, G' from the asymptotic expansion (A&S 14.5.1-8).

        F = g cos θ + f sin θ       F' = g* cos θ + f* sin θ
        G = f cos θ - g sin θ       G' = f* cos θ - g* sin θ
        θ = ρ - η ln 2ρ - Lπ/2 + σ_L(η)

    f, g, f*, g* are asymptotic series in 1/ρ started from
    f_0 = 1, g_0 = 0, f*_0 = 0, g*_0 = 1 - η/ρ.

    Raises
    ------
    ConvergenceError
        If the terms start growing before reaching the accuracy target, or
        the ceiling is hit.
    """
    eps = config.accuracy
    lam = L * (L + 1.0) + eta * eta

    fk, gk = 1.0, 0.0
    fsk, gsk = 0.0, 1.0 - eta / rho
    f, g, fs, gs = fk, gk, fsk, gsk
    previous = abs(fk) + abs(gk) + abs(fsk) + abs(gsk)
    growing = 0

    for k in range(config.series_max):
        denominator = 2.0 * (k + 1) * rho
        ak = (2 * k + 1) * eta / denominator
        bk = (lam - k * (k + 1.0)) / denominator
        fk1 = ak * fk - bk * gk
        gk1 = ak * gk + bk * fk
        fsk1 = ak * fsk - bk * gsk - fk1 / rho
        gsk1 = ak * gsk + bk * fsk - gk1 / rho
        f += fk1
        g += gk1
        fs += fsk1
        gs += gsk1

        if (abs(fk1) + abs(gk1) <= eps * (abs(f) + abs(g))
                and abs(fsk1) + abs(gsk1) <= eps * (abs(fs) + abs(gs))):
            theta = rho - eta * math.log(2.0 * rho) - 0.5 * L * math.pi + coulomb_phase_shift(L, eta)
            c, s = math.cos(theta), math.sin(theta)
            logger.debug("asymptotic: L=%g eta=%g rho=%g converged in %d terms", L, eta, rho, k + 1)
            return SolutionPair(
                g * c + f * s,
                gs * c + fs * s,
                f * c - g * s,
                fs * c - gs * s,
            )

        current = abs(fk1) + abs(gk1) + abs(fsk1) + abs(gsk1)
        growing = growing + 1 if current > previous else 0
        if growing >= 2:
            raise ConvergenceError(
                "asymptotic expansion", iterations=k + 1,
                parameters={"L": L, "eta": eta, "rho": rho},
                detail="terms began to grow",
            )
        previous = current
        fk, gk, fsk, gsk = fk1, gk1, fsk1, gsk1

    raise ConvergenceError(
        "asymptotic expansion", iterations=config.series_max,
        parameters={"L": L, "eta": eta, "rho": rho},
    )


# =============================================================================
# RECURSION IN L
# =============================================================================

def coulomb_recurse_upward(
    L1: int, L2: int, eta: float, rho: float, u: float, up: float
) -> Tuple[float, float]:
    """
    Carry (u_L, u'_L) from L1 up to L2 >= L1 (u = F or G).

        √(L² + η²) u_L   = (L²/ρ + η) u_{L-1} - L u'_{L-1}
        L u'_L           = √(L² + η²) u_{L-1} - (L²/ρ + η) u_L

    Stable for G everywhere and for F beyond the turning point of L2.
    """
    for k in range(L1 + 1, L2 + 1):
        s = math.hypot(k, eta)
        t = k * k / rho + eta
        u_next = (t * u - k * up) / s
        up = (s * u - t * u_next) / k
        u = u_next
    return u, up


def coulomb_recurse_downward(
    L1: int, L2: int, eta: float, rho: float, u: float, up: float
) -> Tuple[float, float]:
    """
    Carry (u_L, u'_L) from L1 down to L2 <= L1 (u = F or G).

        √(L² + η²) u_{L-1} = (L²/ρ + η) u_L + L u'_L
        L u'_{L-1}         = (L²/ρ + η) u_{L-1} - √(L² + η²) u_L

    Stable for F everywhere.
    """
    for k in range(L1, L2, -1):
        s = math.hypot(k, eta)
        t = k * k / rho + eta
        u_prev = (t * u + k * up) / s
        up = (t * u_prev - s * u) / k
        u = u_prev
    return u, up


# =============================================================================
# ODE INTEGRATION FALLBACK
# =============================================================================

def _coulomb_rhs(L: float, eta: float):
    ll = L * (L + 1.0)

    def rhs(x, u):
        return (ll / (x * x) + 2.0 * eta / x - 1.0) * u

    return rhs


def _integrate(L, eta, rho0, y0, yp0, rho, config: CoulombConfig) -> OdeState:
    return integrate_second_order(
        _coulomb_rhs(L, eta), rho0, y0, yp0, rho,
        method=config.ode_method,
        accuracy=config.effective_integration_accuracy,
        initial_step=config.initial_step,
        max_evaluations=config.max_evaluations,
    )


def coulomb_f_integrate(
    L: int, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Tuple[float, float]:
    """
    F_L, F'_L by integrating outward from the edge of the series region.

    Outward integration is stable for F inside the turning point. The
    solution is carried with the C_L ρ0^L prefactor divided out and the
    prefactor is restored in log space, so deep tunneling values neither
    overflow nor underflow during the integration.
    """
    rho_max, eta_rho_max = series_limits(L, config)
    rho0 = rho_max
    if abs(eta) * rho0 >= eta_rho_max:
        rho0 = eta_rho_max / abs(eta)
    # stay strictly inside the region where the series converges
    rho0 = min(rho0 * 0.99, rho)

    u, v = f_series_sums(L, eta, rho0, config)
    log_scale = coulomb_log_factor(L, eta) + L * math.log(rho0)

    state = _integrate(L, eta, rho0, rho0 * u, v, rho, config)
    y, yp = state.y, state.y_prime
    logger.debug("F integration: L=%d eta=%g %.4g -> %.4g, %d evaluations",
                 L, eta, rho0, rho, state.evaluation_count)
    if y == 0.0:
        return 0.0, math.exp(log_scale) * yp
    F = math.copysign(math.exp(log_scale + math.log(abs(y))), y)
    return F, F * (yp / y)


def coulomb_g_integrate(
    L: int, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Tuple[float, float]:
    """
    G_L, G'_L from an L = 0 start that does not need the origin series.

    G_0 is obtained by Steed's method at max(ρ, ρ_t(0)) = max(ρ, 2η). While
    that fails the start is doubled, and once it would pass the asymptotic
    threshold the asymptotic expansion is used instead. G_0 is then
    integrated inward to ρ (stable for G) and recursed upward to L (stable
    for G).
    """
    rho_start = max(rho, coulomb_turning_point(0, eta))
    threshold = asymptotic_threshold(0, eta, config)
    pair = None
    while pair is None and rho_start < threshold:
        try:
            pair = coulomb_steed(0, eta, rho_start, config)
        except ConvergenceError as err:
            logger.warning("G integration: Steed's method failed at rho=%g (%s); "
                           "moving the start outward", rho_start, err)
            rho_start *= 2.0
    if pair is None:
        rho_start = max(rho_start, 1.01 * threshold)
        pair = coulomb_asymptotic(0, eta, rho_start, config)

    G, GP = pair.second_value, pair.second_derivative
    if rho_start != rho:
        state = _integrate(0, eta, rho_start, G, GP, rho, config)
        G, GP = state.y, state.y_prime
        logger.debug("G integration: eta=%g %.4g -> %.4g, %d evaluations",
                     eta, rho_start, rho, state.evaluation_count)
    return coulomb_recurse_upward(0, L, eta, rho, G, GP)
