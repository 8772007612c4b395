# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Lagrange point geometry for a host / anchor-body pair.

L4 and L5 are placed co-orbitally: the anchor's host-relative position
rotated by ±60° about the anchor orbit's angular-momentum axis. The
points therefore share the anchor's instantaneous radius and sit exactly
60° ahead (L4) or behind (L5) it. This is a placement approximation,
not a restricted three-body solution.

L1–L3 use the usual Hill-radius approximations along the host–anchor line.
"""
import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from astrolabe.domain.orbital_mechanics import (
    Orbit,
    mean_longitude_rad,
    orbit_normal,
    wrap_angle,
)
from astrolabe.domain.propagation import PropagationWarning, propagate_orbit

TROJAN_PHASE_RAD = math.pi / 3.0


class LagrangePoint(Enum):
    """Co-orbital placement relative to an anchor body."""
    L4 = "L4"   # leading trojan
    L5 = "L5"   # trailing trojan

    @property
    def phase_rad(self) -> float:
        return TROJAN_PHASE_RAD if self is LagrangePoint.L4 else -TROJAN_PHASE_RAD


@dataclass(frozen=True)
class LagrangeSolution:
    """Resolved trojan point at one instant.

    mean_longitude_rad is the anchor's mean longitude shifted by the
    point's ±60° phase: the trojan's nominal phase angle. The position is
    rotated in true anomaly, so for an eccentric anchor this label is not
    the mean longitude a body at position_m would have.
    """
    point: LagrangePoint
    position_m: tuple[float, float, float]
    offset_m: tuple[float, float, float]
    radius_m: float
    mean_longitude_rad: float
    warnings: tuple[PropagationWarning, ...] = ()


@dataclass(frozen=True)
class CollinearPoints:
    """Signed distances of L1–L3 from the primary along the primary→secondary line."""
    l1_m: float
    l2_m: float
    l3_m: float


def rotate_about_axis(
    vector: tuple[float, float, float],
    axis: tuple[float, float, float],
    angle_rad: float,
) -> tuple[float, float, float]:
    """Rodrigues rotation of vector about a unit axis."""
    v = np.array(vector, dtype=np.float64)
    k = np.array(axis, dtype=np.float64)
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    rotated = v * cos_a + np.cross(k, v) * sin_a + k * float(np.dot(k, v)) * (1.0 - cos_a)
    return (float(rotated[0]), float(rotated[1]), float(rotated[2]))


def lagrange_point(
    anchor_orbit: Orbit,
    host_position_m: tuple[float, float, float],
    time_s: int | float,
    point: LagrangePoint,
) -> LagrangeSolution:
    """
    Locate L4 or L5 of an anchor body at time_s.

    Args:
        anchor_orbit: The anchor body's orbit around its host.
        host_position_m: Absolute position of the anchor's host.
        time_s: Query time.
        point: LagrangePoint.L4 or LagrangePoint.L5.

    Returns:
        LagrangeSolution with absolute position, host-relative offset,
        radius (equal to the anchor's) and the nominal phase angle (the
        anchor's mean longitude ± 60°).
    """
    anchor = propagate_orbit(anchor_orbit, time_s)
    elements = anchor_orbit.elements
    phase = point.phase_rad

    offset = rotate_about_axis(anchor.position_m, orbit_normal(elements), phase)
    position = (
        host_position_m[0] + offset[0],
        host_position_m[1] + offset[1],
        host_position_m[2] + offset[2],
    )

    # Mean longitude grows against the direction of travel for retrograde orbits.
    signed_phase = -phase if elements.retrograde else phase
    longitude = wrap_angle(mean_longitude_rad(elements, anchor.mean_anomaly_rad) + signed_phase)

    return LagrangeSolution(
        point=point,
        position_m=position,
        offset_m=offset,
        radius_m=anchor.radius_m,
        mean_longitude_rad=longitude,
        warnings=anchor.warnings,
    )


def collinear_points(
    separation_m: float,
    primary_mass_kg: float,
    secondary_mass_kg: float,
) -> CollinearPoints:
    """
    Approximate L1, L2, L3 positions for a two-body pair.

    r_H = R·(m2 / 3·m1)^(1/3); L1 = R - r_H, L2 = R + r_H,
    L3 = -R·(1 + 5·m2 / 12·m1).

    Args:
        separation_m: Current primary–secondary distance (m).
        primary_mass_kg: Primary mass, must be positive.
        secondary_mass_kg: Secondary mass, must be non-negative.

    Returns:
        CollinearPoints measured from the primary.
    """
    if primary_mass_kg <= 0:
        raise ValueError(f"primary_mass_kg must be positive, got {primary_mass_kg}")
    if secondary_mass_kg < 0:
        raise ValueError(f"secondary_mass_kg must be non-negative, got {secondary_mass_kg}")
    r_hill = separation_m * (secondary_mass_kg / (3.0 * primary_mass_kg)) ** (1.0 / 3.0)
    return CollinearPoints(
        l1_m=separation_m - r_hill,
        l2_m=separation_m + r_hill,
        l3_m=-separation_m * (1.0 + 5.0 * secondary_mass_kg / (12.0 * primary_mass_kg)),
    )
