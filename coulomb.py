# coulomb.py
"""
Coulomb Wave Functions F_L(η, ρ) and G_L(η, ρ)
==============================================

Public entry points of the engine:

    from coulomb import CoulombF, CoulombG, coulomb_fg

    F = CoulombF(3, 1.5, 10.0)
    pair = coulomb_fg(3, 1.5, 10.0)      # F, F', G, G' together
    pair.wronskian                       # ≈ 1

Every function accepts an optional `config: CoulombConfig`; the shared
DEFAULT_CONFIG (full double precision) is used otherwise.

Regime Selection
----------------
select_regime() is a pure decision on (kind, L, η, ρ):

    F:  series        ρ inside the origin-series region of L
        asymptotic    ρ > asymptotic_offset + (L² + η²)/2
        steed         ρ >= ρ_t(L)
        integration   otherwise (outward from the series region)

    G:  series        ρ inside the L = 0 series region, with ηρ < 2.5 for
                      η > 0 (cancellation), then upward in L
        asymptotic    as for F
        steed         ρ >= ρ_t(L)
        recursion     ρ >= ρ_t(0): Steed at L = 0, then upward in L
        integration   otherwise (inward from ρ_t(0), then upward in L)

Fallback
--------
When the chosen regime raises ConvergenceError the failure is logged at
WARNING and the next applicable regime is tried; ODE integration is always
last. Only when every regime fails is the last ConvergenceError raised.

Domain
------
L must be a non-negative integer, ρ >= 0 and both η and ρ finite;
violations raise CoulombDomainError. At ρ = 0 closed forms are returned:
F = 0, G_0 = 1/C_0 and G_L = +inf for L >= 1.
"""

from __future__ import annotations
import math
import operator
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from config_types import CoulombConfig, DEFAULT_CONFIG
from coulomb_core import (
    SolutionPair,
    coulomb_cf1,
    coulomb_f_series,
    coulomb_factor,
    coulomb_log_factor,
    coulomb_phase_shift,
    coulomb_turning_point,
    coulomb_zero_series,
    exp_scaled,
    in_g_series_region,
    in_series_region,
)
from coulomb_regimes import (
    asymptotic_threshold,
    coulomb_asymptotic,
    coulomb_f_integrate,
    coulomb_g_integrate,
    coulomb_recurse_downward,
    coulomb_recurse_upward,
    coulomb_steed,
)
from errors import ConvergenceError, CoulombDomainError
from logging_config import get_logger

logger = get_logger(__name__)

__all__ = [
    "Regime",
    "select_regime",
    "CoulombF",
    "CoulombG",
    "coulomb_f",
    "coulomb_g",
    "coulomb_fg",
    "coulomb_fg_range",
    "coulomb_penetrability",
    "coulomb_phase_shift",
]


class Regime(Enum):
    """Evaluation method chosen for one (kind, L, η, ρ)."""
    CLOSED_FORM = "closed-form"
    SERIES = "series"
    STEED = "steed"
    ASYMPTOTIC = "asymptotic"
    RECURSION = "recursion"
    INTEGRATION = "integration"


_KINDS = ("F", "G")

# Unnormalized downward recursion for F is rescaled past this magnitude
_RESCALE_LIMIT = 1.0e250


# =============================================================================
# INPUT VALIDATION
# =============================================================================

def _check_order(L) -> int:
    """Return L as an int, rejecting negative or non-integral values."""
    try:
        order = operator.index(L)
    except TypeError:
        if isinstance(L, float) and L.is_integer():
            order = int(L)
        else:
            raise CoulombDomainError(f"L must be a non-negative integer, got {L!r}") from None
    if order < 0:
        raise CoulombDomainError(f"L must be non-negative, got {order}")
    return order


def _check_arguments(L, eta, rho) -> Tuple[int, float, float]:
    order = _check_order(L)
    eta = float(eta)
    rho = float(rho)
    if not math.isfinite(eta):
        raise CoulombDomainError(f"eta must be finite, got {eta!r}")
    if not math.isfinite(rho):
        raise CoulombDomainError(f"rho must be finite, got {rho!r}")
    if rho < 0.0:
        raise CoulombDomainError(f"rho must be non-negative, got {rho:g}")
    return order, eta, abs(rho)


def _check_kind(kind: str) -> str:
    if kind not in _KINDS:
        raise CoulombDomainError(f"kind must be 'F' or 'G', got {kind!r}")
    return kind


# =============================================================================
# REGIME SELECTION
# =============================================================================

def select_regime(
    kind: str, L: int, eta: float, rho: float, config: CoulombConfig = DEFAULT_CONFIG
) -> Regime:
    """
    Decide how F_L(η, ρ) (kind "F") or G_L(η, ρ) (kind "G") is evaluated.

    Pure function of its arguments; see the module docstring for the table.
    """
    _check_kind(kind)
    if rho == 0.0:
        return Regime.CLOSED_FORM
    if kind == "F":
        if in_series_region(L, eta, rho, config):
            return Regime.SERIES
    elif in_g_series_region(eta, rho, config):
        return Regime.SERIES

    if rho > asymptotic_threshold(L, eta, config):
        return Regime.ASYMPTOTIC
    if rho >= coulomb_turning_point(L, eta):
        return Regime.STEED
    if kind == "G" and rho >= coulomb_turning_point(0, eta):
        return Regime.RECURSION
    return Regime.INTEGRATION


def _candidate_regimes(kind: str, primary: Regime, L: int, eta: float, rho: float) -> List[Regime]:
    """Primary regime followed by its fallbacks, ending with integration."""
    beyond_turning_point = rho >= coulomb_turning_point(L, eta)
    chain = [primary]
    if beyond_turning_point:
        chain += [Regime.STEED, Regime.ASYMPTOTIC]
    if kind == "G" and rho >= coulomb_turning_point(0, eta):
        chain.append(Regime.RECURSION)
    chain.append(Regime.INTEGRATION)

    ordered = []
    for regime in chain:
        if regime not in ordered:
            ordered.append(regime)
    return ordered


# =============================================================================
# REGIME EVALUATORS
# =============================================================================

def _g_series(L, eta, rho, config):
    pair = coulomb_zero_series(eta, rho, config)
    return coulomb_recurse_upward(0, L, eta, rho, pair.second_value, pair.second_derivative)


def _f_steed(L, eta, rho, config):
    pair = coulomb_steed(L, eta, rho, config)
    return pair.first_value, pair.first_derivative


def _g_steed(L, eta, rho, config):
    pair = coulomb_steed(L, eta, rho, config)
    return pair.second_value, pair.second_derivative


def _f_asymptotic(L, eta, rho, config):
    pair = coulomb_asymptotic(L, eta, rho, config)
    return pair.first_value, pair.first_derivative


def _g_asymptotic(L, eta, rho, config):
    pair = coulomb_asymptotic(L, eta, rho, config)
    return pair.second_value, pair.second_derivative


def _g_recursion(L, eta, rho, config):
    pair = coulomb_steed(0, eta, rho, config)
    return coulomb_recurse_upward(0, L, eta, rho, pair.second_value, pair.second_derivative)


_Evaluator = Callable[[int, float, float, CoulombConfig], Tuple[float, float]]

_EVALUATORS: Dict[str, Dict[Regime, _Evaluator]] = {
    "F": {
        Regime.SERIES: coulomb_f_series,
        Regime.STEED: _f_steed,
        Regime.ASYMPTOTIC: _f_asymptotic,
        Regime.INTEGRATION: coulomb_f_integrate,
    },
    "G": {
        Regime.SERIES: _g_series,
        Regime.STEED: _g_steed,
        Regime.ASYMPTOTIC: _g_asymptotic,
        Regime.RECURSION: _g_recursion,
        Regime.INTEGRATION: coulomb_g_integrate,
    },
}


def _closed_form(kind: str, L: int, eta: float) -> Tuple[float, float]:
    """Values at ρ = 0."""
    if kind == "F":
        return 0.0, (coulomb_factor(0, eta) if L == 0 else 0.0)
    if L == 0:
        return exp_scaled(1.0, -coulomb_log_factor(0, eta)), -math.inf
    return math.inf, -math.inf


def _evaluate(kind: str, L: int, eta: float, rho: float,
              config: CoulombConfig) -> Tuple[float, float]:
    """Value and derivative of F or G, walking the fallback chain."""
    primary = select_regime(kind, L, eta, rho, config)
    logger.debug("%s_%d(eta=%g, rho=%g): regime %s", kind, L, eta, rho, primary.value)
    if primary is Regime.CLOSED_FORM:
        return _closed_form(kind, L, eta)

    last_error: Optional[ConvergenceError] = None
    for regime in _candidate_regimes(kind, primary, L, eta, rho):
        try:
            return _EVALUATORS[kind][regime](L, eta, rho, config)
        except ConvergenceError as err:
            logger.warning("%s_%d(eta=%g, rho=%g): %s regime failed (%s); trying next",
                           kind, L, eta, rho, regime.value, err)
            last_error = err

    logger.error("%s_%d(eta=%g, rho=%g): every regime failed", kind, L, eta, rho)
    raise last_error


# =============================================================================
# PUBLIC API
# =============================================================================

def coulomb_f(L: int, eta: float, rho: float,
              config: Optional[CoulombConfig] = None) -> float:
    """
    Regular Coulomb wave function F_L(η, ρ).

    Parameters
    ----------
    L : int
        Angular momentum, non-negative integer.
    eta : float
        Sommerfeld parameter (positive for repulsion).
    rho : float
        Radial variable ρ = kr, non-negative.
    config : CoulombConfig, optional
        Accuracy and regime settings.

    Raises
    ------
    CoulombDomainError
        For negative or non-integral L, negative ρ, or non-finite input.
    ConvergenceError
        If every applicable regime fails.
    """
    L, eta, rho = _check_arguments(L, eta, rho)
    return _evaluate("F", L, eta, rho, config or DEFAULT_CONFIG)[0]


def coulomb_g(L: int, eta: float, rho: float,
              config: Optional[CoulombConfig] = None) -> float:
    """Irregular Coulomb wave function G_L(η, ρ). Same arguments as coulomb_f."""
    L, eta, rho = _check_arguments(L, eta, rho)
    return _evaluate("G", L, eta, rho, config or DEFAULT_CONFIG)[0]


CoulombF = coulomb_f
CoulombG = coulomb_g


def coulomb_fg(L: int, eta: float, rho: float,
               config: Optional[CoulombConfig] = None) -> SolutionPair:
    """
    F, F', G, G' at one (L, η, ρ).

    When F and G select the same Steed or asymptotic regime both come from
    a single evaluation.
    """
    L, eta, rho = _check_arguments(L, eta, rho)
    config = config or DEFAULT_CONFIG

    regime = select_regime("F", L, eta, rho, config)
    if regime is select_regime("G", L, eta, rho, config):
        logger.debug("F,G_%d(eta=%g, rho=%g): joint regime %s", L, eta, rho, regime.value)
        try:
            if regime is Regime.STEED:
                return coulomb_steed(L, eta, rho, config)
            if regime is Regime.ASYMPTOTIC:
                return coulomb_asymptotic(L, eta, rho, config)
        except ConvergenceError as err:
            logger.warning("F,G_%d(eta=%g, rho=%g): joint %s evaluation failed (%s)",
                           L, eta, rho, regime.value, err)

    F, FP = _evaluate("F", L, eta, rho, config)
    G, GP = _evaluate("G", L, eta, rho, config)
    return SolutionPair(F, FP, G, GP)


def coulomb_penetrability(L: int, eta: float, rho: float,
                          config: Optional[CoulombConfig] = None) -> float:
    """Barrier penetration factor P_L = ρ / (F_L² + G_L²)."""
    pair = coulomb_fg(L, eta, rho, config)
    F, G = pair.first_value, pair.second_value
    return rho / (F * F + G * G)


def coulomb_fg_range(
    l_max: int, eta: float, rho: float, config: Optional[CoulombConfig] = None
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    F, F', G, G' for L = 0 ... l_max in one pass.

    G is recursed upward from L = 0. F is recursed downward from l_max,
    started from CF1 and normalized against G_0 through the Wronskian; when
    ρ is beyond the turning point of l_max, F is recursed upward from L = 0
    instead.

    Returns
    -------
    (F, FP, G, GP) : tuple of np.ndarray, each of length l_max + 1
    """
    l_max, eta, rho = _check_arguments(l_max, eta, rho)
    config = config or DEFAULT_CONFIG
    n = l_max + 1
    F = np.zeros(n)
    FP = np.zeros(n)
    G = np.empty(n)
    GP = np.empty(n)

    if rho == 0.0:
        log_c0 = coulomb_log_factor(0, eta)
        FP[0] = math.exp(log_c0)
        G[0], G[1:] = exp_scaled(1.0, -log_c0), np.inf
        GP[:] = -np.inf
        return F, FP, G, GP

    g, gp = _evaluate("G", 0, eta, rho, config)
    G[0], GP[0] = g, gp
    for L in range(1, n):
        g, gp = coulomb_recurse_upward(L - 1, L, eta, rho, g, gp)
        G[L], GP[L] = g, gp

    if rho >= coulomb_turning_point(l_max, eta):
        f, fp = _evaluate("F", 0, eta, rho, config)
        F[0], FP[0] = f, fp
        for L in range(1, n):
            f, fp = coulomb_recurse_upward(L - 1, L, eta, rho, f, fp)
            F[L], FP[L] = f, fp
        return F, FP, G, GP

    ratio, sign = coulomb_cf1(l_max, eta, rho, config)
    f, fp = float(sign), sign * ratio
    F[l_max], FP[l_max] = f, fp
    for L in range(l_max, 0, -1):
        f, fp = coulomb_recurse_downward(L, L - 1, eta, rho, f, fp)
        if abs(f) > _RESCALE_LIMIT:
            # Keep the unnormalized values representable; entries above L
            # shrink with them and may underflow to zero.
            F[L:] /= _RESCALE_LIMIT
            FP[L:] /= _RESCALE_LIMIT
            f /= _RESCALE_LIMIT
            fp /= _RESCALE_LIMIT
        F[L - 1], FP[L - 1] = f, fp

    norm = 1.0 / (FP[0] * G[0] - F[0] * GP[0])
    F *= norm
    FP *= norm
    logger.debug("coulomb_fg_range: l_max=%d eta=%g rho=%g normalized by %.6g",
                 l_max, eta, rho, norm)
    return F, FP, G, GP

