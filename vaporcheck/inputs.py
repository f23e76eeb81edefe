"""Parse and validate layer lists and boundary conditions.

Values arrive as strings from HTML forms or as numbers from JSON. Anything
that is not a finite decimal, or a layer property that is not strictly
positive, raises :class:`InvalidInput` before any resistance is computed.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Mapping, Sequence

from .dataclasses import Climate, Layer

# Pole of the interior saturation formula 610.5·exp(17.269·θ/(237.3+θ)) [°C]
MIN_TEMPERATURE = -237.3


class InvalidInput(ValueError):
    """Raised when analysis input cannot be turned into a valid assembly."""


def _require_float(s: str | float | int | None, field: str, row: int | None = None) -> float:
    """Parse *s* as a finite float or raise ``InvalidInput`` with context."""
    where = f" in row {row}" if row is not None else ""
    if s is None or str(s).strip() == "":
        raise InvalidInput(f"Missing value for {field!r}{where}")
    if isinstance(s, bool):
        raise InvalidInput(f"Invalid number for {field!r}{where}: {s!r}")
    if isinstance(s, (int, float)):
        val = float(s)
    else:
        txt = str(s).strip().replace("\u00a0", " ").replace(" ", "").replace(",", ".")
        try:
            val = float(txt)
        except ValueError as exc:
            raise InvalidInput(f"Invalid number for {field!r}{where}: {s}") from exc
    if not math.isfinite(val):
        raise InvalidInput(f"Non-finite number for {field!r}{where}: {s}")
    return val


def _require_positive(val: float, field: str, row: int) -> float:
    if val <= 0:
        raise InvalidInput(f"{field!r} must be positive in row {row}, got {val}")
    return val


def validate_layers(layers: Sequence[Layer]) -> List[Layer]:
    """Return *layers* rebuilt from finite, positive floats.

    Raises ``InvalidInput`` for an empty list or any unusable property.
    """
    if not layers:
        raise InvalidInput("At least one layer is required")
    out: List[Layer] = []
    for row, layer in enumerate(layers, start=1):
        parsed = {
            field: _require_positive(_require_float(getattr(layer, field), field, row), field, row)
            for field in ("d", "mu", "lambda_")
        }
        out.append(Layer(name=str(layer.name), **parsed))
    return out


def validate_climate(climate: Climate) -> Climate:
    """Return *climate* rebuilt from floats, with humidities in 0..100 %.

    Temperatures must stay above ``MIN_TEMPERATURE`` where the saturation
    pressure formula has its pole.
    """
    parsed = {}
    for field in ("theta_i", "theta_e"):
        theta = _require_float(getattr(climate, field), field)
        if theta <= MIN_TEMPERATURE:
            raise InvalidInput(f"{field!r} must be above {MIN_TEMPERATURE} °C, got {theta}")
        parsed[field] = theta
    for field in ("phi_i", "phi_e"):
        phi = _require_float(getattr(climate, field), field)
        if not 0.0 <= phi <= 100.0:
            raise InvalidInput(f"{field!r} must be within 0..100 %, got {phi}")
        parsed[field] = phi
    return Climate(**parsed)


def layers_from_columns(
    names: Sequence[str],
    ds: Sequence[str | float],
    mus: Sequence[str | float],
    lambdas: Sequence[str | float],
) -> List[Layer]:
    """Build layers from parallel per-field lists (the HTML form layout)."""
    if not (len(names) == len(ds) == len(mus) == len(lambdas)):
        raise InvalidInput(
            "Layer fields differ in length: "
            f"names={len(names)}, d={len(ds)}, mu={len(mus)}, lambda={len(lambdas)}"
        )
    layers: List[Layer] = []
    for row, (name, d, mu, lam) in enumerate(zip(names, ds, mus, lambdas), start=1):
        layers.append(Layer(
            name=str(name).strip() or f"Layer {row}",
            d=_require_positive(_require_float(d, "d", row), "d", row),
            mu=_require_positive(_require_float(mu, "mu", row), "mu", row),
            lambda_=_require_positive(_require_float(lam, "lambda", row), "lambda", row),
        ))
    return validate_layers(layers)


def layers_from_records(records: Iterable[Mapping[str, object]]) -> List[Layer]:
    """Build layers from JSON-style dicts with keys name, d, mu, lambda_."""
    if not isinstance(records, (list, tuple)):
        raise InvalidInput("'layers' must be a list")
    layers: List[Layer] = []
    for row, rec in enumerate(records, start=1):
        if not isinstance(rec, Mapping):
            raise InvalidInput(f"Layer in row {row} must be an object")
        lam = rec.get("lambda_", rec.get("lambda"))
        layers.append(Layer(
            name=str(rec.get("name") or f"Layer {row}"),
            d=_require_positive(_require_float(rec.get("d"), "d", row), "d", row),  # type: ignore[arg-type]
            mu=_require_positive(_require_float(rec.get("mu"), "mu", row), "mu", row),  # type: ignore[arg-type]
            lambda_=_require_positive(_require_float(lam, "lambda", row), "lambda", row),  # type: ignore[arg-type]
        ))
    return validate_layers(layers)


def climate_from_mapping(data: Mapping[str, object]) -> Climate:
    """Build boundary conditions from a mapping with theta_i/phi_i/theta_e/phi_e."""
    if not isinstance(data, Mapping):
        raise InvalidInput("'climate' must be an object")
    climate = Climate(
        theta_i=_require_float(data.get("theta_i"), "theta_i"),  # type: ignore[arg-type]
        phi_i=_require_float(data.get("phi_i"), "phi_i"),  # type: ignore[arg-type]
        theta_e=_require_float(data.get("theta_e"), "theta_e"),  # type: ignore[arg-type]
        phi_e=_require_float(data.get("phi_e"), "phi_e"),  # type: ignore[arg-type]
    )
    return validate_climate(climate)
