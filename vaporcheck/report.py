"""Generate HTML reports with charts and profile tables."""

from __future__ import annotations

import base64
from html import escape
from io import BytesIO
from typing import Iterable, List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


def _encode_fig(fig) -> str:
    buf = BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    return base64.b64encode(buf.getvalue()).decode("ascii")


def axis_labels(n: int) -> List[str]:
    """Interface labels Pi, P1, ..., Pe for a profile of length n."""
    if n < 2:
        return ["Pi"][:n]
    return ["Pi"] + [f"P{i}" for i in range(1, n - 1)] + ["Pe"]


def _plot_temperature(xs: Iterable[float], ys: Iterable[float]) -> str:
    fig, ax = plt.subplots()
    ax.plot(list(xs), list(ys), marker="o")
    ax.set_xlabel("Σd [cm]")
    ax.set_ylabel("θ [°C]")
    ax.set_title("Temperature profile")
    return _encode_fig(fig)


def _plot_vapor(title: str, p: Sequence[float], ps: Sequence[float]) -> str:
    # p may be one longer than ps (barrier case); ps is drawn on its own indices
    labels = axis_labels(max(len(p), len(ps)))
    fig, ax = plt.subplots()
    ax.plot(range(len(ps)), list(ps), marker="o", label="Ps(x)")
    ax.plot(range(len(p)), list(p), marker="o", label="P(x)")
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels)
    ax.set_ylim(0, max(list(ps[:1]) + list(p)) + 200)
    ax.set_ylabel("p [Pa]")
    ax.set_title(title)
    ax.legend()
    return _encode_fig(fig)


def _img(data: str, alt: str) -> str:
    return f"<img src='data:image/png;base64,{data}' alt='{alt}' />"


def _layers_table(layers: Sequence[dict]) -> str:
    trs = "".join(
        f"<tr><td>{escape(str(L['name']))}</td><td>{L['d']:g}</td>"
        f"<td>{L['mu']:g}</td><td>{L['lambda_']:g}</td></tr>"
        for L in layers
    )
    return (
        "<table id='layers'>"
        "<tr><th>Layer</th><th>d (cm)</th><th>μ (-)</th><th>λ (W/mK)</th></tr>"
        f"{trs}</table>"
    )


def _profile_table(
    temps: Sequence[float], ps: Sequence[float], p: Sequence[float], pb: Optional[Sequence[float]]
) -> str:
    n = max(len(temps), len(pb or []))
    labels = axis_labels(n)

    def cell(seq: Optional[Sequence[float]], i: int, fmt: str) -> str:
        if seq is None or i >= len(seq):
            return "<td></td>"
        return f"<td>{seq[i]:{fmt}}</td>"

    head = "<tr><th></th><th>θ (°C)</th><th>Ps (Pa)</th><th>P (Pa)</th>"
    head += "<th>Pb (Pa)</th></tr>" if pb is not None else "</tr>"
    rows = []
    for i in range(n):
        row = f"<tr><th>{labels[i]}</th>" + cell(temps, i, ".2f") + cell(ps, i, ".0f") + cell(p, i, ".0f")
        if pb is not None:
            row += cell(pb, i, ".0f")
        rows.append(row + "</tr>")
    return "<table id='profiles'>" + head + "".join(rows) + "</table>"


def report(results: dict) -> str:
    """Generate an HTML report from analysis results with charts and tables."""

    climate = results.get("climate", {})
    barrier = results.get("barrier", {})
    p_barrier = results.get("p_barrier")
    condensing = bool(results.get("condensing"))
    lis = [
        f"<li>θi: {climate.get('theta_i', float('nan')):.1f} °C, φi: {climate.get('phi_i', float('nan')):.0f} %</li>",
        f"<li>θe: {climate.get('theta_e', float('nan')):.1f} °C, φe: {climate.get('phi_e', float('nan')):.0f} %</li>",
        f"<li>U-value: {results.get('U', float('nan')):.4f} W/m²K</li>",
        f"<li>ΣR: {results.get('R_total', float('nan')):.4f} m²K/W</li>",
        f"<li>p_i: {results.get('p_i', float('nan')):.0f} Pa, p_e: {results.get('p_e', float('nan')):.0f} Pa</li>",
        f"<li>Condensation risk: {'Yes' if condensing else 'No'}</li>",
    ]
    if condensing:
        lis.append(
            f"<li>Vapor barrier: d = {barrier.get('d_mm', float('nan')):g} mm, "
            f"μ = {barrier.get('mu', float('nan')):g}</li>"
        )

    temps = results.get("theta_profile", [])
    p_sat = results.get("p_sat", [])
    p_line = results.get("p_line", [])

    parts = [
        "<h2>Interstitial Condensation Report</h2>",
        "<ul>",
        *lis,
        "</ul>",
        "<h3>Layers</h3>",
        _layers_table(results.get("layers", [])),
        "<h3>Charts</h3>",
        _img(_plot_temperature(results.get("thickness_axis", []), temps), "Temperature chart"),
        _img(_plot_vapor("Vapor pressure", p_line, p_sat), "Vapor chart"),
    ]
    if p_barrier is not None:
        parts.append(_img(_plot_vapor("Vapor pressure with barrier", p_barrier, p_sat), "Barrier chart"))
    parts += [
        "<h3>Profiles</h3>",
        _profile_table(temps, p_sat, p_line, p_barrier),
    ]
    return "\n".join(parts)
