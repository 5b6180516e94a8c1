import math

import numpy as np
import numpy.testing as npt
import pytest
from scipy import special

from errors import CoulombDomainError
from special_functions import (
    beta,
    complex_log_gamma,
    complex_psi,
    gamma,
    log_beta,
    log_gamma,
    psi,
)

REAL_POINTS = [0.1, 0.5, 1.0, 2.0, 2.5, 7.3, 20.0, 100.7, 170.2, -0.5, -2.7, -10.25]


@pytest.mark.parametrize("x", REAL_POINTS)
def test_log_gamma_matches_scipy(x):
    npt.assert_allclose(log_gamma(x), special.gammaln(x), rtol=1e-13, atol=1e-13)


@pytest.mark.parametrize("x", [0.1, 0.5, 1.0, 3.5, 10.0, 50.5, 170.5, -0.5, -3.3])
def test_gamma_matches_scipy(x):
    npt.assert_allclose(gamma(x), special.gamma(x), rtol=1e-12)


def test_gamma_integers_are_factorials():
    for n in range(1, 20):
        npt.assert_allclose(gamma(n), math.factorial(n - 1), rtol=1e-14)


def test_gamma_overflow_and_poles():
    assert gamma(171.7) == math.inf
    for x in (0.0, -1.0, -7.0):
        with pytest.raises(CoulombDomainError):
            gamma(x)
        with pytest.raises(CoulombDomainError):
            log_gamma(x)
        with pytest.raises(CoulombDomainError):
            psi(x)


@pytest.mark.parametrize("x", [0.3, 1.0, 2.5, 10.0, 100.0, -0.5, -2.3])
def test_psi_matches_scipy(x):
    npt.assert_allclose(psi(x), special.digamma(x), rtol=1e-12, atol=1e-13)


@pytest.mark.parametrize("x, y", [(0.5, 0.5), (2.0, 3.0), (10.5, 20.25), (100.0, 0.3), (1e-3, 5.0)])
def test_beta_matches_scipy(x, y):
    npt.assert_allclose(beta(x, y), special.beta(x, y), rtol=1e-12)
    npt.assert_allclose(log_beta(x, y), special.betaln(x, y), rtol=1e-12, atol=1e-13)


def test_log_beta_rejects_non_positive():
    with pytest.raises(CoulombDomainError):
        log_beta(-1.0, 2.0)


@pytest.mark.parametrize(
    "z",
    [1 + 1j, 0.5 + 3j, 3 + 0.5j, 20 + 5j, 1 + 30j, 10.3 - 7j, 0.2 + 0j, 6 + 12j],
)
def test_complex_log_gamma_matches_scipy(z):
    npt.assert_allclose(complex_log_gamma(z), special.loggamma(z), rtol=1e-12, atol=1e-13)


def test_complex_log_gamma_reflection_determines_gamma():
    # imaginary part is only fixed modulo 2*pi left of the imaginary axis
    z = -2.5 + 0.7j
    npt.assert_allclose(np.exp(complex_log_gamma(z)), special.gamma(z), rtol=1e-12)


@pytest.mark.parametrize("z", [1 + 1j, 2.5 - 4j, 0.5 + 0.5j, 17 + 3j, -1.5 + 2j])
def test_complex_psi_matches_scipy(z):
    npt.assert_allclose(complex_psi(z), special.psi(z), rtol=1e-12, atol=1e-13)


def test_complex_log_gamma_real_axis_agrees_with_real_version():
    for x in (0.75, 4.0, 33.3):
        npt.assert_allclose(complex_log_gamma(x).real, log_gamma(x), rtol=1e-13)
        assert complex_log_gamma(x).imag == 0.0
