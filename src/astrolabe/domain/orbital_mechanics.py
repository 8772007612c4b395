# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital mechanics functions.

Keplerian element containers, element validation, the Kepler equation
solver, anomaly conversions and the perifocal-to-reference rotation.
Pure functions over frozen dataclasses; the only dependency is numpy
for the rotation matrix and vector algebra.
"""
import logging
import math
from dataclasses import dataclass

import numpy as np

from astrolabe.domain.contracts import InvalidOrbitalElementsError

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi

KEPLER_TOLERANCE = 1e-10
KEPLER_MAX_ITERATIONS = 50

# Bisection halvings of [0, 2π] needed to get below double-precision spacing.
_BISECTION_ITERATIONS = 64


@dataclass(frozen=True)
class OrbitalElements:
    """Classical Keplerian elements of a bound orbit.

    semi_major_axis_m == 0 marks a surface-fixed placement that is never
    propagated.
    """
    semi_major_axis_m: float
    eccentricity: float = 0.0
    inclination_rad: float = 0.0
    arg_periapsis_rad: float = 0.0
    long_asc_node_rad: float = 0.0
    mean_anomaly_at_epoch_rad: float = 0.0
    retrograde: bool = False

    @property
    def is_surface_fixed(self) -> bool:
        return self.semi_major_axis_m == 0.0


@dataclass(frozen=True)
class Orbit:
    """Elements bound to a host and an epoch.

    host_id is normally the node's parent; Lagrange-anchored placements
    point it at the anchor body instead.
    """
    host_id: str
    host_mu: float
    epoch_s: int | float
    elements: OrbitalElements


@dataclass(frozen=True)
class KeplerSolution:
    """Result of solving E - e·sin(E) = M."""
    eccentric_anomaly_rad: float
    iterations: int
    converged: bool


def validate_elements(elements: OrbitalElements) -> OrbitalElements:
    """
    Reject elements the propagator must never see.

    Raises:
        InvalidOrbitalElementsError: Non-finite values, negative semi-major
            axis, or eccentricity outside [0, 1).
    """
    values = {
        "semi_major_axis_m": elements.semi_major_axis_m,
        "eccentricity": elements.eccentricity,
        "inclination_rad": elements.inclination_rad,
        "arg_periapsis_rad": elements.arg_periapsis_rad,
        "long_asc_node_rad": elements.long_asc_node_rad,
        "mean_anomaly_at_epoch_rad": elements.mean_anomaly_at_epoch_rad,
    }
    for name, value in values.items():
        if not math.isfinite(value):
            raise InvalidOrbitalElementsError(f"{name} must be finite, got {value}")
    if elements.semi_major_axis_m < 0:
        raise InvalidOrbitalElementsError(
            f"semi_major_axis_m must be non-negative, got {elements.semi_major_axis_m}"
        )
    if elements.eccentricity < 0:
        raise InvalidOrbitalElementsError(
            f"eccentricity must be non-negative, got {elements.eccentricity}"
        )
    if elements.eccentricity >= 1:
        raise InvalidOrbitalElementsError(
            f"eccentricity must be < 1 (bound orbit), got {elements.eccentricity}"
        )
    return elements


def validate_orbit(orbit: Orbit) -> Orbit:
    """Validate an orbit's elements, epoch and gravitational parameter."""
    validate_elements(orbit.elements)
    if not math.isfinite(orbit.host_mu):
        raise InvalidOrbitalElementsError(f"host_mu must be finite, got {orbit.host_mu}")
    if isinstance(orbit.epoch_s, float) and not math.isfinite(orbit.epoch_s):
        raise InvalidOrbitalElementsError(f"epoch_s must be finite, got {orbit.epoch_s}")
    return orbit


def wrap_angle(angle_rad: float) -> float:
    """Wrap an angle into [0, 2π)."""
    wrapped = math.fmod(angle_rad, TWO_PI)
    if wrapped < 0:
        wrapped += TWO_PI
    # fmod of a value just below 0 can round up to exactly 2π
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


def mean_motion_rad_s(semi_major_axis_m: float, mu: float) -> float:
    """
    Mean motion n = √(μ / a³).

    Args:
        semi_major_axis_m: Semi-major axis (m), must be positive.
        mu: Host gravitational parameter (m³/s²), must be positive.

    Returns:
        Mean motion in rad/s.
    """
    if semi_major_axis_m <= 0:
        raise ValueError(f"semi_major_axis_m must be positive, got {semi_major_axis_m}")
    if mu <= 0:
        raise ValueError(f"mu must be positive, got {mu}")
    return math.sqrt(mu / semi_major_axis_m**3)


def orbital_period_s(semi_major_axis_m: float, mu: float) -> float:
    """Orbital period T = 2π / n in seconds."""
    return TWO_PI / mean_motion_rad_s(semi_major_axis_m, mu)


def solve_kepler(
    mean_anomaly_rad: float,
    eccentricity: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> KeplerSolution:
    """
    Solve Kepler's equation E - e·sin(E) = M for the eccentric anomaly.

    Newton–Raphson from E0 = M until |ΔE| < tolerance or the iteration cap.
    When the cap is hit the best estimate is refined by bisection on the
    bracket [0, 2π] (the residual is strictly increasing for e < 1) and the
    solution is reported as not converged.

    Args:
        mean_anomaly_rad: Mean anomaly; wrapped into [0, 2π).
        eccentricity: 0 <= e < 1.
        tolerance: Newton step size that counts as converged.
        max_iterations: Newton iteration cap.

    Returns:
        KeplerSolution with E in [0, 2π).
    """
    m = wrap_angle(mean_anomaly_rad)
    if eccentricity == 0.0:
        return KeplerSolution(eccentric_anomaly_rad=m, iterations=0, converged=True)

    e_anom = m
    for iteration in range(1, max_iterations + 1):
        f = e_anom - eccentricity * math.sin(e_anom) - m
        f_prime = 1.0 - eccentricity * math.cos(e_anom)
        delta = f / f_prime
        e_anom -= delta
        if abs(delta) < tolerance:
            return KeplerSolution(
                eccentric_anomaly_rad=wrap_angle(e_anom),
                iterations=iteration,
                converged=True,
            )

    logger.debug(
        "Kepler solver hit %d iterations (M=%.6f, e=%.6f); refining by bisection",
        max_iterations, m, eccentricity,
    )
    lo, hi = 0.0, TWO_PI
    for _ in range(_BISECTION_ITERATIONS):
        mid = 0.5 * (lo + hi)
        if mid - eccentricity * math.sin(mid) - m > 0:
            hi = mid
        else:
            lo = mid
    return KeplerSolution(
        eccentric_anomaly_rad=wrap_angle(0.5 * (lo + hi)),
        iterations=max_iterations,
        converged=False,
    )


def mean_anomaly_from_eccentric(eccentric_anomaly_rad: float, eccentricity: float) -> float:
    """M = E - e·sin(E), wrapped into [0, 2π)."""
    return wrap_angle(eccentric_anomaly_rad - eccentricity * math.sin(eccentric_anomaly_rad))


def true_anomaly_from_eccentric(eccentric_anomaly_rad: float, eccentricity: float) -> float:
    """
    True anomaly from eccentric anomaly.

    ν = 2·atan2(√(1+e)·sin(E/2), √(1-e)·cos(E/2))
    """
    half = 0.5 * eccentric_anomaly_rad
    nu = 2.0 * math.atan2(
        math.sqrt(1.0 + eccentricity) * math.sin(half),
        math.sqrt(1.0 - eccentricity) * math.cos(half),
    )
    return wrap_angle(nu)


def eccentric_anomaly_from_true(true_anomaly_rad: float, eccentricity: float) -> float:
    """Inverse of true_anomaly_from_eccentric."""
    half = 0.5 * true_anomaly_rad
    e_anom = 2.0 * math.atan2(
        math.sqrt(1.0 - eccentricity) * math.sin(half),
        math.sqrt(1.0 + eccentricity) * math.cos(half),
    )
    return wrap_angle(e_anom)


def rotation_matrix(
    inclination_rad: float,
    long_asc_node_rad: float,
    arg_periapsis_rad: float,
) -> np.ndarray:
    """
    Perifocal (PQW) to reference-frame rotation, R = Rz(Ω)·Rx(i)·Rz(ω).

    Returns:
        3x3 numpy array.
    """
    cO = math.cos(long_asc_node_rad)
    sO = math.sin(long_asc_node_rad)
    co = math.cos(arg_periapsis_rad)
    so = math.sin(arg_periapsis_rad)
    ci = math.cos(inclination_rad)
    si = math.sin(inclination_rad)

    return np.array([
        [cO * co - sO * so * ci, -cO * so - sO * co * ci, sO * si],
        [sO * co + cO * so * ci, -sO * so + cO * co * ci, -cO * si],
        [so * si, co * si, ci],
    ])


def perifocal_to_reference(
    x_p: float,
    y_p: float,
    elements: OrbitalElements,
) -> tuple[float, float, float]:
    """Rotate an orbital-plane vector into the reference frame."""
    rotation = rotation_matrix(
        elements.inclination_rad,
        elements.long_asc_node_rad,
        elements.arg_periapsis_rad,
    )
    vec = rotation @ np.array([x_p, y_p, 0.0])
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def orbit_normal(elements: OrbitalElements) -> tuple[float, float, float]:
    """Unit angular-momentum direction of the orbit in the reference frame."""
    rotation = rotation_matrix(
        elements.inclination_rad,
        elements.long_asc_node_rad,
        elements.arg_periapsis_rad,
    )
    normal = rotation[:, 2]
    if elements.retrograde:
        normal = -normal
    return (float(normal[0]), float(normal[1]), float(normal[2]))


def mean_longitude_rad(elements: OrbitalElements, mean_anomaly_rad: float) -> float:
    """Mean longitude λ = Ω + ω + M, wrapped into [0, 2π)."""
    return wrap_angle(
        elements.long_asc_node_rad + elements.arg_periapsis_rad + mean_anomaly_rad
    )


def elements_from_state(
    position_m: tuple[float, float, float],
    velocity_m_s: tuple[float, float, float],
    mu: float,
) -> OrbitalElements:
    """
    Recover classical elements from a state vector.

    The returned mean anomaly is the anomaly at the state's own time, so
    pairing the result with an Orbit whose epoch is that time reproduces
    the state. Equatorial orbits take Ω = 0 and measure ω from the x axis;
    circular orbits take ω = 0 and measure the anomaly from the node.

    Args:
        position_m: Host-relative position (m).
        velocity_m_s: Host-relative velocity (m/s).
        mu: Host gravitational parameter (m³/s²).

    Returns:
        OrbitalElements of the osculating ellipse.

    Raises:
        InvalidOrbitalElementsError: If the state is unbound or degenerate.
    """
    if mu <= 0:
        raise InvalidOrbitalElementsError(f"mu must be positive, got {mu}")
    pos = np.array(position_m, dtype=np.float64)
    vel = np.array(velocity_m_s, dtype=np.float64)
    r_mag = float(np.linalg.norm(pos))
    v_mag = float(np.linalg.norm(vel))
    if r_mag == 0.0:
        raise InvalidOrbitalElementsError("Position vector must be non-zero")

    energy = v_mag**2 / 2.0 - mu / r_mag
    if energy >= 0:
        raise InvalidOrbitalElementsError(
            f"State is unbound (specific energy {energy:.6e} J/kg >= 0)"
        )
    a = -mu / (2.0 * energy)

    h_vec = np.cross(pos, vel)
    h_mag = float(np.linalg.norm(h_vec))
    if h_mag == 0.0:
        raise InvalidOrbitalElementsError("Radial trajectory has no orbital plane")

    e_vec = ((v_mag**2 - mu / r_mag) * pos - float(np.dot(pos, vel)) * vel) / mu
    ecc = float(np.linalg.norm(e_vec))
    if ecc >= 1.0:
        raise InvalidOrbitalElementsError(f"State is unbound (e={ecc})")

    inc = float(np.arccos(np.clip(h_vec[2] / h_mag, -1.0, 1.0)))
    n_vec = np.cross(np.array([0.0, 0.0, 1.0]), h_vec)
    n_mag = float(np.linalg.norm(n_vec))
    equatorial = n_mag < 1e-10 * h_mag
    circular = ecc < 1e-10

    if equatorial:
        raan = 0.0
    else:
        raan = math.atan2(float(n_vec[1]), float(n_vec[0]))

    # Unit vectors spanning the orbital plane, starting at the node.
    h_hat = h_vec / h_mag
    node_hat = np.array([1.0, 0.0, 0.0]) if equatorial else n_vec / n_mag
    side_hat = np.cross(h_hat, node_hat)

    if circular:
        argp = 0.0
        nu = math.atan2(float(np.dot(pos, side_hat)), float(np.dot(pos, node_hat)))
    else:
        argp = math.atan2(float(np.dot(e_vec, side_hat)), float(np.dot(e_vec, node_hat)))
        e_hat = e_vec / ecc
        nu = math.atan2(
            float(np.dot(np.cross(e_hat, pos), h_hat)),
            float(np.dot(e_hat, pos)),
        )

    e_anom = eccentric_anomaly_from_true(wrap_angle(nu), ecc)
    return OrbitalElements(
        semi_major_axis_m=a,
        eccentricity=ecc,
        inclination_rad=inc,
        arg_periapsis_rad=wrap_angle(argp),
        long_asc_node_rad=wrap_angle(raan),
        mean_anomaly_at_epoch_rad=mean_anomaly_from_eccentric(e_anom, ecc),
    )
