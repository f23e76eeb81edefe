import logging
import math
from dataclasses import asdict
from typing import Dict, List, Optional, Sequence, Tuple

from .dataclasses import Barrier, Climate, Layer
from .inputs import validate_climate, validate_layers

logger = logging.getLogger(__name__)

# Surface resistances [m²K/W]
RSI = 0.125
RSE = 0.042

# Saturation pressure coefficients (a, b): interior chain and exterior air
COEF_INTERIOR = (17.269, 237.3)
COEF_EXTERIOR = (21.875, 265.5)

# Vapor resistance factor applied to thickness·permeability
RV_FACTOR = 50e8

DEFAULT_BARRIER = Barrier()


def p_sat(theta: float, exterior: bool = False) -> float:
    """Saturation vapor pressure in Pa at ``theta`` °C.

    The coefficient set is chosen by position in the assembly, not by the sign
    of the temperature: ``exterior=True`` is used for the outdoor air and the
    outermost interface only.
    """
    a, b = COEF_EXTERIOR if exterior else COEF_INTERIOR
    return 610.5 * math.exp(a * theta / (b + theta))


def thermal_resistances(layers: Sequence[Layer]) -> List[float]:
    """Per-layer R = (d/100)/λ in m²K/W (thickness given in cm)."""
    return [(layer.d / 100) / layer.lambda_ for layer in layers]


def u_value(layers: Sequence[Layer]) -> Tuple[float, float]:
    """Return (U, R_total) where R_total includes Rsi, layers, and Rse."""
    R_total = RSI + sum(thermal_resistances(layers)) + RSE
    return 1.0 / R_total, R_total


def temperature_profile(layers: Sequence[Layer], climate: Climate) -> List[float]:
    """Return θsi followed by the temperature after each layer.

    The last value is the external surface temperature θse; it comes from the
    cumulative resistance through all layers, Rse only enters via R_total.
    """
    _, R_total = u_value(layers)
    dt = climate.theta_i - climate.theta_e
    R_accum = RSI
    temps = [climate.theta_i - (R_accum / R_total) * dt]
    for R in thermal_resistances(layers):
        R_accum += R
        temps.append(climate.theta_i - (R_accum / R_total) * dt)
    return temps


def saturation_pressure_profile(temps: Sequence[float]) -> List[float]:
    """p_sat at each interface; the outermost value uses exterior coefficients."""
    last = len(temps) - 1
    return [p_sat(T, exterior=(i == last)) for i, T in enumerate(temps)]


def vapor_resistances(layers: Sequence[Layer]) -> List[float]:
    """Per-layer vapor resistance Rv = 50e8·d·μ."""
    return [RV_FACTOR * layer.d * layer.mu for layer in layers]


def barrier_resistance(barrier: Barrier = DEFAULT_BARRIER) -> float:
    return RV_FACTOR * (barrier.d_mm / 1000) * barrier.mu


def partial_pressures(climate: Climate) -> Tuple[float, float]:
    """Return (p_i, p_e) partial vapor pressures in Pa at interior and exterior air."""
    p_i = climate.phi_i * p_sat(climate.theta_i) / 100
    p_e = climate.phi_e * p_sat(climate.theta_e, exterior=True) / 100
    return p_i, p_e


def _cumulative(values: Sequence[float]) -> List[float]:
    out: List[float] = []
    accum = 0.0
    for v in values:
        accum += v
        out.append(accum)
    return out


def thickness_axis(layers: Sequence[Layer]) -> List[float]:
    """Return Σd [cm] at each interface, starting at 0 on the inside."""
    return [0.0] + _cumulative([layer.d for layer in layers])


def vapor_axis(layers: Sequence[Layer]) -> List[float]:
    """Return ΣRv at each interface, starting at 0 on the inside."""
    return [0.0] + _cumulative(vapor_resistances(layers))


def vapor_pressure_profile(layers: Sequence[Layer], climate: Climate) -> List[float]:
    """Linear p profile over cumulative vapor resistance, pinned to p_i and p_e."""
    p_i, p_e = partial_pressures(climate)
    rvs = vapor_resistances(layers)
    Rv = sum(rvs)
    # interior interfaces only; the outer surface is exactly p_e
    inner = [p_i - (s / Rv) * (p_i - p_e) for s in _cumulative(rvs[:-1])]
    return [p_i] + inner + [p_e]


def barrier_pressure_profile(
    layers: Sequence[Layer], climate: Climate, barrier: Barrier = DEFAULT_BARRIER
) -> List[float]:
    """p profile with a vapor barrier placed after the innermost layer.

    Only the vapor chain changes. The result has one value per augmented
    resistance (N+1) preceded by p_i, so it is one longer than the
    saturation profile it is plotted against.
    """
    p_i, p_e = partial_pressures(climate)
    rvs = vapor_resistances(layers)
    augmented = rvs[:1] + [barrier_resistance(barrier)] + rvs[1:]
    Rv = sum(augmented)
    return [p_i] + [p_i - (s / Rv) * (p_i - p_e) for s in _cumulative(augmented)]


def condensation_indices(p_line: Sequence[float], p_sat_line: Sequence[float]) -> List[int]:
    """Indices where the actual pressure exceeds saturation (compared positionally)."""
    n = min(len(p_line), len(p_sat_line))
    return [i for i in range(n) if p_sat_line[i] < p_line[i]]


def is_condensing(p_line: Sequence[float], p_sat_line: Sequence[float]) -> bool:
    return bool(condensation_indices(p_line, p_sat_line))


def analyze(
    layers: Sequence[Layer], climate: Climate, barrier: Barrier = DEFAULT_BARRIER
) -> Dict[str, object]:
    """End-to-end interstitial condensation check.

    Returns a dict of plain lists and numbers suitable for reporting and JSON.
    ``p_barrier`` is None unless condensation was detected.
    """
    layers = validate_layers(layers)
    climate = validate_climate(climate)

    U, R_total = u_value(layers)
    temps = temperature_profile(layers, climate)
    p_sat_line = saturation_pressure_profile(temps)
    p_line = vapor_pressure_profile(layers, climate)
    p_i, p_e = partial_pressures(climate)
    indices = condensation_indices(p_line, p_sat_line)

    p_barrier: Optional[List[float]] = None
    barrier_indices: List[int] = []
    if indices:
        p_barrier = barrier_pressure_profile(layers, climate, barrier)
        barrier_indices = condensation_indices(p_barrier, p_sat_line)
        logger.debug(
            "condensation at interfaces %s; with barrier %s", indices, barrier_indices
        )
    logger.debug("analyzed %d layers, R_total=%.4f, condensing=%s", len(layers), R_total, bool(indices))

    return {
        "U": U,
        "R_total": R_total,
        "Rv_total": sum(vapor_resistances(layers)),
        "theta_profile": temps,
        "p_sat": p_sat_line,
        "p_line": p_line,
        "p_i": p_i,
        "p_e": p_e,
        "condensing": bool(indices),
        "condensation_indices": indices,
        "p_barrier": p_barrier,
        "barrier_condensation_indices": barrier_indices,
        "thickness_axis": thickness_axis(layers),
        "vapor_axis": vapor_axis(layers),
        "layers": [asdict(layer) for layer in layers],
        "climate": asdict(climate),
        "barrier": asdict(barrier),
    }
