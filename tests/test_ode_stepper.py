import math

import numpy.testing as npt
import pytest

from errors import ConvergenceError, CoulombDomainError
from ode_stepper import (
    BulirschStoerStoermerStepper,
    DormandPrinceStepper,
    OdeState,
    integrate_second_order,
    make_stepper,
)

METHODS = ["bulirsch-stoer", "dop853"]


def _harmonic(x, y):
    return -y


def _growth(x, y):
    return y


@pytest.mark.parametrize("method", METHODS)
def test_reproduces_sine_and_cosine(method):
    state = integrate_second_order(_harmonic, 0.0, 0.0, 1.0, 10.0, method=method, accuracy=1e-12)
    assert state.x == 10.0
    npt.assert_allclose(state.y, math.sin(10.0), atol=1e-9)
    npt.assert_allclose(state.y_prime, math.cos(10.0), atol=1e-9)


@pytest.mark.parametrize("method", METHODS)
def test_integrates_backward(method):
    state = integrate_second_order(
        _harmonic, 5.0, math.sin(5.0), math.cos(5.0), 0.5, method=method, accuracy=1e-12
    )
    assert state.x == 0.5
    npt.assert_allclose(state.y, math.sin(0.5), atol=1e-9)
    npt.assert_allclose(state.y_prime, math.cos(0.5), atol=1e-9)


@pytest.mark.parametrize("method", METHODS)
def test_exponential_growth_relative_accuracy(method):
    state = integrate_second_order(_growth, 0.0, 1.0, 1.0, 5.0, method=method, accuracy=1e-12)
    npt.assert_allclose(state.y, math.exp(5.0), rtol=1e-9)
    npt.assert_allclose(state.y_prime, math.exp(5.0), rtol=1e-9)


def test_methods_agree_on_coulomb_like_equation():
    def rhs(x, u):
        return (2.0 / (x * x) + 2.0 / x - 1.0) * u

    a = integrate_second_order(rhs, 1.0, 0.1, 0.3, 8.0, method="bulirsch-stoer", accuracy=1e-12)
    b = integrate_second_order(rhs, 1.0, 0.1, 0.3, 8.0, method="dop853", accuracy=1e-12)
    npt.assert_allclose(a.y, b.y, rtol=1e-8)
    npt.assert_allclose(a.y_prime, b.y_prime, rtol=1e-8)


def test_make_stepper_selects_strategy():
    assert isinstance(make_stepper("bulirsch-stoer", _harmonic), BulirschStoerStoermerStepper)
    assert isinstance(make_stepper("dop853", _harmonic), DormandPrinceStepper)
    with pytest.raises(CoulombDomainError):
        make_stepper("euler", _harmonic)


def test_accuracy_is_validated():
    with pytest.raises(CoulombDomainError):
        make_stepper("bulirsch-stoer", _harmonic, accuracy=1e-20)
    with pytest.raises(CoulombDomainError):
        make_stepper("bulirsch-stoer", _harmonic, accuracy=1.0)


@pytest.mark.parametrize("method", METHODS)
def test_evaluation_ceiling_raises(method):
    stepper = make_stepper(method, _harmonic, accuracy=1e-12, max_evaluations=100)
    with pytest.raises(ConvergenceError) as info:
        stepper.integrate(OdeState(0.0, 0.0, 1.0), 1000.0)
    assert info.value.method.startswith(method)


def test_integrate_to_start_returns_state_unchanged():
    stepper = make_stepper("bulirsch-stoer", _harmonic)
    state = OdeState(2.0, 1.0, 0.5)
    assert stepper.integrate(state, 2.0) is state


def test_state_counts_evaluations():
    state = integrate_second_order(_harmonic, 0.0, 0.0, 1.0, 1.0)
    assert state.evaluation_count > 0


def test_dop853_integrate_reuses_one_solver(monkeypatch):
    import ode_stepper

    created = []

    class CountingDOP853(ode_stepper.DOP853):
        def __init__(self, *args, **kwargs):
            created.append(args[1])
            super().__init__(*args, **kwargs)

    monkeypatch.setattr(ode_stepper, "DOP853", CountingDOP853)
    stepper = make_stepper("dop853", _harmonic, accuracy=1e-12)
    state = stepper.integrate(OdeState(0.0, 0.0, 1.0), 10.0)

    assert created == [0.0]
    assert state.x == 10.0
    npt.assert_allclose(state.y, math.sin(10.0), atol=1e-9)


def test_dop853_single_step_stays_within_bound():
    stepper = make_stepper("dop853", _harmonic, accuracy=1e-12)
    state = stepper.step(OdeState(0.0, 0.0, 1.0, 0.1), 5.0)
    assert 0.0 < state.x <= 5.0
    assert state.delta_x > 0.0
    npt.assert_allclose(state.y, math.sin(state.x), atol=1e-10)
