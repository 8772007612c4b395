# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Physical constants shared by the orbital and zone modules.

Values are SI unless the field name says otherwise.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class _PhysicalConstants:
    """Standard physical constants (CODATA/IAU values)."""
    G: float = 6.67430e-11                  # m³/(kg·s²), gravitational constant
    AU_M: float = 149_597_870_700.0         # m, astronomical unit
    AU_KM: float = 149_597_870.7            # km, astronomical unit
    SOLAR_MASS_KG: float = 1.989e30         # kg
    SOLAR_RADIUS_KM: float = 696_340.0      # km
    SOLAR_TEMP_K: float = 5778.0            # K, effective temperature
    EARTH_MASS_KG: float = 5.972e24         # kg
    EARTH_RADIUS_KM: float = 6371.0         # km, mean radius
    EARTH_GRAVITY: float = 9.80665          # m/s²
    UNIVERSAL_GAS_CONSTANT: float = 8.314   # J/(mol·K)
    SECONDS_PER_JULIAN_YEAR: int = 31_557_600


PhysicalConstants: _PhysicalConstants = _PhysicalConstants()


def au_to_m(distance_au: float) -> float:
    """Astronomical units to metres."""
    return distance_au * PhysicalConstants.AU_M


def m_to_au(distance_m: float) -> float:
    """Metres to astronomical units."""
    return distance_m / PhysicalConstants.AU_M


def gravitational_parameter(mass_kg: float) -> float:
    """Gravitational parameter mu = G·M (m³/s²)."""
    return PhysicalConstants.G * mass_kg
