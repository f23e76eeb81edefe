import math
import os
import sys

import pytest

# Ensure package root on path for pytest execution
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from vaporcheck.dataclasses import Layer, Climate
from vaporcheck import core
from vaporcheck.core import (
    analyze,
    barrier_pressure_profile,
    is_condensing,
    partial_pressures,
    p_sat,
    saturation_pressure_profile,
    temperature_profile,
    vapor_pressure_profile,
)


def build_single_layer():
    return [Layer("Concrete", d=20, mu=1.0, lambda_=1.0)]


def build_condensing_wall():
    # open insulation inside, vapor-tight cladding outside
    return [
        Layer("Insulation", d=10, mu=1.0, lambda_=0.04),
        Layer("Cladding", d=2, mu=1000.0, lambda_=1.0),
    ]


def build_three_layer_wall():
    return [
        Layer("Plaster", d=1.5, mu=10, lambda_=0.7),
        Layer("Brick", d=25, mu=8, lambda_=0.8),
        Layer("EPS", d=10, mu=30, lambda_=0.04),
    ]


WINTER = Climate(theta_i=20, phi_i=50, theta_e=-10, phi_e=80)
HUMID_WINTER = Climate(theta_i=20, phi_i=80, theta_e=-10, phi_e=80)


def test_p_sat_uses_positional_coefficients():
    assert p_sat(0) == pytest.approx(610.5)
    assert p_sat(20) == pytest.approx(610.5 * math.exp(17.269 * 20 / 257.3))
    assert p_sat(-10, exterior=True) == pytest.approx(610.5 * math.exp(21.875 * -10 / 255.5))
    # the interior set is used below zero too when not at the exterior position
    assert p_sat(-10) != pytest.approx(p_sat(-10, exterior=True))


def test_single_layer_scenario():
    layers = build_single_layer()
    temps = temperature_profile(layers, WINTER)
    assert len(temps) == 2
    assert temps[0] == pytest.approx(20 - (0.125 / 0.367) * 30)
    assert temps[0] == pytest.approx(9.78, abs=0.01)
    assert temps[1] == pytest.approx(20 - (0.325 / 0.367) * 30)

    p_i, p_e = partial_pressures(WINTER)
    assert p_i == pytest.approx(0.5 * p_sat(20))
    assert p_e == pytest.approx(0.8 * p_sat(-10, exterior=True))
    assert vapor_pressure_profile(layers, WINTER) == [p_i, p_e]


def test_profile_lengths_and_endpoints():
    layers = build_three_layer_wall()
    res = analyze(layers, WINTER)
    n = len(layers)
    assert len(res["theta_profile"]) == len(res["p_sat"]) == len(res["p_line"]) == n + 1
    assert abs(res["p_line"][0] - res["p_i"]) < 1e-9
    assert abs(res["p_line"][-1] - res["p_e"]) < 1e-9
    assert res["R_total"] == pytest.approx(0.125 + 0.015 / 0.7 + 0.25 / 0.8 + 0.1 / 0.04 + 0.042)
    assert res["U"] == pytest.approx(1 / res["R_total"])


def test_temperatures_between_boundaries_and_monotone():
    temps = temperature_profile(build_three_layer_wall(), WINTER)
    assert all(WINTER.theta_e < t < WINTER.theta_i for t in temps)
    assert temps == sorted(temps, reverse=True)


def test_outer_saturation_uses_exterior_coefficients():
    temps = temperature_profile(build_three_layer_wall(), WINTER)
    ps = saturation_pressure_profile(temps)
    assert ps[0] == pytest.approx(p_sat(temps[0]))
    assert ps[-2] == pytest.approx(p_sat(temps[-2]))
    assert ps[-1] == pytest.approx(p_sat(temps[-1], exterior=True))


def test_intermediate_pressures_follow_resistance_fraction():
    layers = build_three_layer_wall()
    p = vapor_pressure_profile(layers, WINTER)
    p_i, p_e = partial_pressures(WINTER)
    rvs = [50e8 * L.d * L.mu for L in layers]
    Rv = sum(rvs)
    assert p[1] == pytest.approx(p_i - rvs[0] / Rv * (p_i - p_e))
    assert p[2] == pytest.approx(p_i - (rvs[0] + rvs[1]) / Rv * (p_i - p_e))


def test_is_condensing_truth_table():
    p = [1000.0, 800.0, 300.0]
    assert not is_condensing(p, [v + 100 for v in p])
    assert is_condensing(p, [1100.0, 700.0, 400.0])
    # equal values are not condensation
    assert not is_condensing(p, list(p))


def test_condensing_wall_gets_barrier_profile():
    layers = build_condensing_wall()
    res = analyze(layers, HUMID_WINTER)
    assert res["p_line"][1] > res["p_sat"][1]
    assert res["condensing"] is True
    assert 1 in res["condensation_indices"]
    pb = res["p_barrier"]
    assert len(pb) == len(layers) + 2 == 4
    assert pb[0] == res["p_i"]
    assert pb[-1] == pytest.approx(res["p_e"])
    # Ps is not recomputed for the barrier case
    assert len(res["p_sat"]) == len(layers) + 1
    assert res["barrier"] == {"d_mm": 0.2, "mu": 0.1}


def test_barrier_profile_inserts_resistance_after_first_layer():
    layers = build_three_layer_wall()
    pb = barrier_pressure_profile(layers, WINTER)
    p_i, p_e = partial_pressures(WINTER)
    rvs = [50e8 * L.d * L.mu for L in layers]
    rvb = 50e8 * (0.2 / 1000) * 0.1
    total = sum(rvs) + rvb
    assert len(pb) == len(layers) + 2
    assert pb[0] == p_i
    assert pb[1] == pytest.approx(p_i - rvs[0] / total * (p_i - p_e))
    assert pb[2] == pytest.approx(p_i - (rvs[0] + rvb) / total * (p_i - p_e))


def test_no_barrier_without_condensation():
    res = analyze(build_single_layer(), WINTER)
    assert res["condensing"] is False
    assert res["condensation_indices"] == []
    assert res["p_barrier"] is None


def test_analyze_is_deterministic():
    layers = build_condensing_wall()
    first = analyze(layers, HUMID_WINTER)
    second = analyze(layers, HUMID_WINTER)
    assert first == second


def test_analyze_echoes_input():
    layers = build_single_layer()
    res = analyze(layers, WINTER)
    assert res["layers"] == [{"name": "Concrete", "d": 20, "mu": 1.0, "lambda_": 1.0}]
    assert res["climate"] == {"theta_i": 20, "phi_i": 50, "theta_e": -10, "phi_e": 80}


def test_analyze_does_not_mutate_layers():
    layers = build_three_layer_wall()
    before = list(layers)
    analyze(layers, HUMID_WINTER)
    assert layers == before


def test_module_constants():
    assert core.RSI == 0.125
    assert core.RSE == 0.042
