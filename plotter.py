# plotter.py
#
# Coulomb Wave Function Plotter.
# Samples F_L, G_L over a rho grid and writes diagnostic plots.
#
# Features:
#   - Styles (std/article)
#   - Left Axis: F_L and G_L, with the turning point marked
#   - Right Axis: Wronskian error |F'G - FG' - 1| (Twin Axis, log scale)
#   - Background shading of the regime chosen for F at each rho
#   - Penetrability P_L = rho / (F^2 + G^2) for L = 0..l_max
#
# Usage:
#   python plotter.py [L] [eta] [rho_max] [style]
#

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import sys

from config_types import DEFAULT_CONFIG
from coulomb import Regime, coulomb_fg, coulomb_fg_range, select_regime
from coulomb_core import coulomb_turning_point
from logging_config import get_logger

logger = get_logger(__name__)

REGIME_COLORS = {
    Regime.SERIES: 'tab:purple',
    Regime.STEED: 'tab:cyan',
    Regime.ASYMPTOTIC: 'tab:olive',
    Regime.RECURSION: 'tab:pink',
    Regime.INTEGRATION: 'tab:gray',
}


def get_style_config(style_name):
    # Returns (F style, G style, W style, suffix)
    if style_name == 'article':
        return (
            dict(color='k', linestyle='-', linewidth=2),
            dict(color='k', linestyle='--', linewidth=2),
            dict(color='k', linestyle=':', linewidth=1.5),
            "_article",
        )
    # std
    return (
        dict(color='tab:blue', linestyle='-', linewidth=2),
        dict(color='tab:orange', linestyle='-', linewidth=2),
        dict(color='tab:green', linestyle=':', linewidth=1.5),
        "_std",
    )


def sample_functions(L, eta, rho, config=None):
    """
    Evaluate F, G and the Wronskian error on a rho grid.

    Returns
    -------
    dict
        Arrays 'rho', 'F', 'G', 'wronskian_error' and the list 'regimes'
        (regime chosen for F at each point).
    """
    config = config or DEFAULT_CONFIG
    rho = np.asarray(rho, dtype=float)
    F = np.empty_like(rho)
    G = np.empty_like(rho)
    W = np.empty_like(rho)
    regimes = []
    for i, x in enumerate(rho):
        pair = coulomb_fg(L, eta, x, config)
        F[i], G[i] = pair.first_value, pair.second_value
        W[i] = abs(pair.wronskian - 1.0)
        regimes.append(select_regime("F", L, eta, x, config))
    return {'rho': rho, 'F': F, 'G': G, 'wronskian_error': W, 'regimes': regimes}


def _shade_regimes(ax, rho, regimes):
    start = 0
    for i in range(1, len(rho) + 1):
        if i == len(rho) or regimes[i] is not regimes[start]:
            regime = regimes[start]
            ax.axvspan(rho[start], rho[i - 1], color=REGIME_COLORS.get(regime, 'white'),
                       alpha=0.08, zorder=0)
            start = i


def plot_coulomb_functions(L, eta, rho_max, n_points=400, style='std',
                           out_name=None, config=None):
    """
    Plot F_L(eta, rho) and G_L(eta, rho) for 0 < rho <= rho_max.

    Returns
    -------
    str
        Path of the written PNG.
    """
    if rho_max <= 0.0:
        raise ValueError(f"rho_max must be > 0, got {rho_max}")
    rho = np.linspace(rho_max / n_points, rho_max, n_points)
    data = sample_functions(L, eta, rho, config)
    f_style, g_style, w_style, suffix = get_style_config(style)

    fig, ax = plt.subplots(figsize=(9, 6))
    _shade_regimes(ax, rho, data['regimes'])

    l1, = ax.plot(rho, data['F'], label=f"$F_{{{L}}}$", **f_style)
    l2, = ax.plot(rho, data['G'], label=f"$G_{{{L}}}$", **g_style)

    # G blows up at the origin; keep the oscillations readable
    finite_F = data['F'][np.isfinite(data['F'])]
    limit = max(2.0, 1.5 * np.max(np.abs(finite_F))) if finite_F.size else 2.0
    ax.set_ylim(-limit, limit)

    rho_t = coulomb_turning_point(L, eta)
    if 0.0 < rho_t <= rho_max:
        ax.axvline(rho_t, color='red', linestyle='--', alpha=0.5)

    ax.set_xlabel(r"$\rho$", fontsize=11)
    ax.set_ylabel("Coulomb functions", fontsize=11)
    ax.grid(True, linestyle=':', alpha=0.7)
    ax.set_title(rf"L = {L}, $\eta$ = {eta:g}", fontsize=12, fontweight='bold')

    # --- Right Axis (Wronskian error) ---
    ax2 = ax.twinx()
    W = np.maximum(data['wronskian_error'], 1e-18)
    l3, = ax2.semilogy(rho, W, label="|W - 1|", **w_style)
    ax2.set_ylabel("Wronskian error", fontsize=11)

    lns = [l1, l2, l3]
    ax.legend(lns, [l.get_label() for l in lns], loc='upper right', fontsize=9)

    plt.tight_layout()
    if out_name is None:
        out_name = f"plot_coulomb_L{L}_eta{eta:g}{suffix}.png"
    fig.savefig(out_name, dpi=150)
    plt.close(fig)
    logger.info("Saved %s", out_name)
    return str(out_name)


def plot_penetrability(l_max, eta, rho_max, n_points=200, style='std',
                       out_name=None, config=None):
    """
    Plot P_L = rho / (F_L^2 + G_L^2) for L = 0..l_max on a log scale.

    Returns
    -------
    str
        Path of the written PNG.
    """
    if rho_max <= 0.0:
        raise ValueError(f"rho_max must be > 0, got {rho_max}")
    rho = np.linspace(rho_max / n_points, rho_max, n_points)
    P = np.empty((l_max + 1, n_points))
    for i, x in enumerate(rho):
        F, _, G, _ = coulomb_fg_range(l_max, eta, x, config)
        P[:, i] = x / (F * F + G * G)
    suffix = get_style_config(style)[3]

    import matplotlib.cm as cm
    colors = cm.viridis(np.linspace(0, 0.9, l_max + 1))

    fig, ax = plt.subplots(figsize=(9, 6))
    for L in range(l_max + 1):
        ax.semilogy(rho, P[L], '-', color=colors[L], linewidth=1.5, label=f"L = {L}")
    ax.set_xlabel(r"$\rho$", fontsize=11)
    ax.set_ylabel(r"Penetrability $P_L$", fontsize=11)
    ax.grid(True, which='major', linestyle=':', alpha=0.7)
    ax.set_title(rf"Coulomb penetrability, $\eta$ = {eta:g}", fontsize=12, fontweight='bold')
    ax.legend(fontsize=8, ncol=2, loc='lower right')

    plt.tight_layout()
    if out_name is None:
        out_name = f"plot_penetrability_eta{eta:g}{suffix}.png"
    fig.savefig(out_name, dpi=150)
    plt.close(fig)
    logger.info("Saved %s", out_name)
    return str(out_name)


def main():
    L, eta, rho_max, style = 0, 1.0, 30.0, 'std'

    # Parse arguments: [script, L, eta, rho_max, style]
    if len(sys.argv) > 1:
        L = int(sys.argv[1])
    if len(sys.argv) > 2:
        eta = float(sys.argv[2])
    if len(sys.argv) > 3:
        rho_max = float(sys.argv[3])
    if len(sys.argv) > 4:
        style = sys.argv[4]

    print(f"Generating plots with style: {style}")
    print(f"Saved {plot_coulomb_functions(L, eta, rho_max, style=style)}")
    print(f"Saved {plot_penetrability(max(L, 4), eta, rho_max, style=style)}")


if __name__ == "__main__":
    main()
