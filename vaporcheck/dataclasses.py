from dataclasses import dataclass


@dataclass(frozen=True)
class Layer:
    name: str
    d: float  # thickness [cm]
    mu: float  # vapor permeability factor [-]
    lambda_: float  # thermal conductivity [W/mK]


@dataclass(frozen=True)
class Climate:
    theta_i: float  # indoor temperature [°C]
    phi_i: float    # indoor relative humidity [%]
    theta_e: float  # outdoor temperature [°C]
    phi_e: float    # outdoor relative humidity [%]


@dataclass(frozen=True)
class Barrier:
    d_mm: float = 0.2  # thickness [mm]
    mu: float = 0.1    # vapor permeability factor [-]
