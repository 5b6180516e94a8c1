import math

import numpy as np
import numpy.testing as npt
import pytest
from scipy import special

from config_types import CoulombConfig
from coulomb_core import (
    SolutionPair,
    coulomb_cf1,
    coulomb_cf2,
    coulomb_f_series,
    coulomb_factor,
    coulomb_log_factor,
    coulomb_phase_shift,
    coulomb_turning_point,
    coulomb_zero_series,
    in_series_region,
    series_limits,
)
from coulomb_regimes import (
    coulomb_asymptotic,
    coulomb_recurse_downward,
    coulomb_recurse_upward,
    coulomb_steed,
)
from errors import ConvergenceError


def test_turning_point():
    assert coulomb_turning_point(0, 1.0) == pytest.approx(2.0)
    assert coulomb_turning_point(2, 0.0) == pytest.approx(math.sqrt(6.0))
    assert coulomb_turning_point(0, -1.0) == 0.0
    assert coulomb_turning_point(3, 2.0) == pytest.approx(6.0)


@pytest.mark.parametrize("eta", [-3.0, -0.5, 0.0, 0.5, 2.0, 10.0])
def test_gamow_factor_l0(eta):
    x = 2.0 * math.pi * eta
    expected = 1.0 if eta == 0.0 else math.sqrt(x / math.expm1(x))
    npt.assert_allclose(coulomb_factor(0, eta), expected, rtol=1e-13)


def test_gamow_factor_neutral():
    # C_L(0) = 2^L L! / (2L+1)!
    for L in range(8):
        expected = 2.0 ** L * math.factorial(L) / math.factorial(2 * L + 1)
        npt.assert_allclose(coulomb_factor(L, 0.0), expected, rtol=1e-13)


def test_gamow_factor_large_eta_does_not_overflow():
    log_c = coulomb_log_factor(0, 200.0)
    assert math.isfinite(log_c)
    npt.assert_allclose(log_c, 0.5 * (math.log(400.0 * math.pi) - 400.0 * math.pi), rtol=1e-14)


@pytest.mark.parametrize("L, eta", [(2.5, 0.7), (0.5, -1.2), (4.25, 3.0)])
def test_gamow_factor_non_integral_l(L, eta):
    expected = (
        L * math.log(2.0)
        - 0.5 * math.pi * eta
        + special.loggamma(complex(L + 1.0, eta)).real
        - special.gammaln(2.0 * L + 2.0)
    )
    npt.assert_allclose(coulomb_log_factor(L, eta), expected, rtol=1e-12)


def test_gamow_factor_product_matches_gamma_ratio():
    for L in (1, 3, 7):
        eta = 1.3
        ratio = (
            L * math.log(2.0)
            - 0.5 * math.pi * eta
            + special.loggamma(complex(L + 1.0, eta)).real
            - special.gammaln(2.0 * L + 2.0)
        )
        npt.assert_allclose(coulomb_log_factor(L, eta), ratio, rtol=1e-12)


def test_phase_shift():
    assert coulomb_phase_shift(0, 0.0) == 0.0
    for L, eta in [(0, 1.0), (3, -2.0), (10, 0.3)]:
        npt.assert_allclose(
            coulomb_phase_shift(L, eta),
            special.loggamma(complex(L + 1.0, eta)).imag,
            rtol=1e-12,
        )
    # sigma_L - sigma_0 = sum of atan(eta / k)
    eta = 2.0
    expected = sum(math.atan(eta / k) for k in range(1, 4))
    npt.assert_allclose(coulomb_phase_shift(3, eta) - coulomb_phase_shift(0, eta), expected, rtol=1e-12)


def test_series_region():
    rho_max, eta_rho_max = series_limits(0)
    assert rho_max == pytest.approx(4.0)
    assert eta_rho_max == pytest.approx(8.0)
    assert in_series_region(0, 1.0, 3.9)
    assert not in_series_region(0, 1.0, 4.1)
    assert not in_series_region(0, 3.0, 3.0)


@pytest.mark.parametrize("rho", [0.1, 1.0, 3.0])
def test_f_series_neutral_l0_is_sine(rho):
    F, FP = coulomb_f_series(0, 0.0, rho)
    npt.assert_allclose(F, math.sin(rho), rtol=1e-13)
    npt.assert_allclose(FP, math.cos(rho), rtol=1e-13)


def test_f_series_neutral_matches_bessel():
    rho = 2.5
    for L in range(6):
        F, FP = coulomb_f_series(L, 0.0, rho)
        npt.assert_allclose(F, rho * special.spherical_jn(L, rho), rtol=1e-12)
        expected_fp = special.spherical_jn(L, rho) + rho * special.spherical_jn(L, rho, derivative=True)
        npt.assert_allclose(FP, expected_fp, rtol=1e-12, atol=1e-14)


def test_f_series_deep_tunneling_underflows_gracefully():
    F, FP = coulomb_f_series(200, 1.0, 1e-3)
    assert F == 0.0 or math.isfinite(F)
    assert not math.isnan(F)


def test_f_series_ceiling_raises():
    config = CoulombConfig(series_max=10)
    with pytest.raises(ConvergenceError):
        coulomb_f_series(0, 0.0, 3.9, config)


def test_zero_series_neutral():
    pair = coulomb_zero_series(0.0, 2.0)
    npt.assert_allclose(pair.as_tuple(), (math.sin(2.0), math.cos(2.0), math.cos(2.0), -math.sin(2.0)),
                        rtol=1e-13)


@pytest.mark.parametrize("eta, rho", [(1.0, 1.0), (-2.0, 2.0), (0.5, 3.5), (3.0, 0.5)])
def test_zero_series_wronskian(eta, rho):
    pair = coulomb_zero_series(eta, rho)
    npt.assert_allclose(pair.wronskian, 1.0, rtol=1e-12)
    F, FP = coulomb_f_series(0, eta, rho)
    npt.assert_allclose((pair.first_value, pair.first_derivative), (F, FP), rtol=1e-12)


def test_zero_series_at_origin():
    pair = coulomb_zero_series(1.0, 0.0)
    c0 = coulomb_factor(0, 1.0)
    assert pair.first_value == 0.0
    assert pair.first_derivative == c0
    assert pair.second_value == pytest.approx(1.0 / c0, rel=1e-15)
    assert pair.second_derivative == -math.inf


def test_cf1_neutral_l0_is_cotangent():
    f, sign = coulomb_cf1(0, 0.0, 1.0)
    npt.assert_allclose(f, 1.0 / math.tan(1.0), rtol=1e-13)
    assert sign == 1


def test_cf1_sign_tracks_f():
    # sin(4) < 0
    f, sign = coulomb_cf1(0, 0.0, 4.0)
    npt.assert_allclose(f, 1.0 / math.tan(4.0), rtol=1e-12)
    assert sign == -1


def test_cf2_neutral_l0():
    # (G' + iF') / (G + iF) = (-sin + i cos) / (cos + i sin) = i
    pq = coulomb_cf2(0, 0.0, 5.0)
    npt.assert_allclose(pq.real, 0.0, atol=1e-14)
    npt.assert_allclose(pq.imag, 1.0, rtol=1e-14)


@pytest.mark.parametrize("L, eta, rho", [(0, 0.0, 5.0), (0, 1.0, 3.0), (3, 2.0, 8.0), (5, -4.0, 10.0), (10, 0.5, 25.0)])
def test_steed_wronskian(L, eta, rho):
    pair = coulomb_steed(L, eta, rho)
    assert isinstance(pair, SolutionPair)
    npt.assert_allclose(pair.wronskian, 1.0, rtol=1e-12)


def test_steed_neutral_matches_trig():
    pair = coulomb_steed(0, 0.0, 7.0)
    npt.assert_allclose(pair.as_tuple(), (math.sin(7.0), math.cos(7.0), math.cos(7.0), -math.sin(7.0)),
                        rtol=1e-13, atol=1e-14)


@pytest.mark.parametrize("L, eta, rho", [(0, 0.0, 40.0), (2, 1.0, 50.0), (4, -3.0, 60.0)])
def test_asymptotic_agrees_with_steed(L, eta, rho):
    a = coulomb_asymptotic(L, eta, rho)
    b = coulomb_steed(L, eta, rho)
    npt.assert_allclose(a.as_tuple(), b.as_tuple(), rtol=1e-11, atol=1e-12)


def test_asymptotic_neutral_l1_is_exact():
    rho = 35.0
    pair = coulomb_asymptotic(1, 0.0, rho)
    npt.assert_allclose(pair.first_value, math.sin(rho) / rho - math.cos(rho), rtol=1e-13)
    npt.assert_allclose(pair.second_value, math.cos(rho) / rho + math.sin(rho), rtol=1e-13)


def test_asymptotic_raises_close_to_turning_point():
    with pytest.raises(ConvergenceError):
        coulomb_asymptotic(10, 5.0, 16.0)


def test_recursion_round_trip():
    eta, rho = 1.5, 12.0
    pair = coulomb_steed(0, eta, rho)
    F4, FP4 = coulomb_recurse_upward(0, 4, eta, rho, pair.first_value, pair.first_derivative)
    direct = coulomb_steed(4, eta, rho)
    npt.assert_allclose((F4, FP4), (direct.first_value, direct.first_derivative), rtol=1e-11)
    F0, FP0 = coulomb_recurse_downward(4, 0, eta, rho, F4, FP4)
    npt.assert_allclose((F0, FP0), (pair.first_value, pair.first_derivative), rtol=1e-11)


def test_recursion_neutral_bessel():
    rho = 3.0
    G, GP = coulomb_recurse_upward(0, 3, 0.0, rho, math.cos(rho), -math.sin(rho))
    npt.assert_allclose(G, -rho * special.spherical_yn(3, rho), rtol=1e-12)
    assert np.isfinite(GP)
