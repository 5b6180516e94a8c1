import matplotlib

matplotlib.use("Agg")

import numpy as np
import numpy.testing as npt

from coulomb import Regime
from plotter import get_style_config, plot_coulomb_functions, plot_penetrability, sample_functions


def test_sample_functions_reports_regimes():
    data = sample_functions(1, 1.0, np.array([1.0, 10.0, 60.0]))
    assert data['regimes'] == [Regime.SERIES, Regime.STEED, Regime.ASYMPTOTIC]
    npt.assert_array_less(data['wronskian_error'], 1e-8)


def test_plot_coulomb_functions_writes_png(tmp_path):
    out = tmp_path / "coulomb.png"
    path = plot_coulomb_functions(1, 1.0, 20.0, n_points=60, out_name=out)
    assert path == str(out)
    assert out.exists()
    assert out.stat().st_size > 0


def test_plot_penetrability_writes_png(tmp_path):
    out = tmp_path / "penetrability.png"
    plot_penetrability(3, 1.0, 10.0, n_points=20, style='article', out_name=out)
    assert out.exists()


def test_styles():
    assert get_style_config('article')[3] == "_article"
    assert get_style_config('anything')[3] == "_std"
