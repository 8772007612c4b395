# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Two-body Keplerian propagation.

Turns an Orbit (elements + host gravitational parameter + epoch) and a
query time into a host-relative position and velocity. Elements must be
validated upstream; numerical trouble never raises, it degrades to a
best-effort result with a PropagationWarning attached.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum

from astrolabe.domain.orbital_mechanics import (
    Orbit,
    mean_motion_rad_s,
    perifocal_to_reference,
    solve_kepler,
    true_anomaly_from_eccentric,
    wrap_angle,
)

logger = logging.getLogger(__name__)

ZERO_VECTOR: tuple[float, float, float] = (0.0, 0.0, 0.0)


class PropagationWarning(Enum):
    """Non-fatal conditions raised while propagating one orbit."""
    SOLVER_NOT_CONVERGED = "solver_not_converged"
    NON_POSITIVE_MU = "non_positive_mu"
    NON_FINITE_RESULT = "non_finite_result"


@dataclass(frozen=True)
class PropagationResult:
    """Host-relative state of one orbit at one instant."""
    position_m: tuple[float, float, float]
    velocity_m_s: tuple[float, float, float]
    mean_anomaly_rad: float
    true_anomaly_rad: float
    radius_m: float
    warnings: tuple[PropagationWarning, ...] = ()


def _stationary(
    mean_anomaly_rad: float = 0.0,
    warnings: tuple[PropagationWarning, ...] = (),
) -> PropagationResult:
    return PropagationResult(
        position_m=ZERO_VECTOR,
        velocity_m_s=ZERO_VECTOR,
        mean_anomaly_rad=mean_anomaly_rad,
        true_anomaly_rad=mean_anomaly_rad,
        radius_m=0.0,
        warnings=warnings,
    )


def mean_anomaly_at(orbit: Orbit, time_s: int | float) -> float:
    """
    Mean anomaly at time_s, wrapped into [0, 2π).

    The elapsed time is differenced before float conversion so integer
    clocks far from zero keep full precision.
    """
    elements = orbit.elements
    n = mean_motion_rad_s(elements.semi_major_axis_m, orbit.host_mu)
    if elements.retrograde:
        n = -n
    dt = float(time_s - orbit.epoch_s)
    return wrap_angle(elements.mean_anomaly_at_epoch_rad + n * dt)


def propagate_orbit(orbit: Orbit, time_s: int | float) -> PropagationResult:
    """
    Propagate an orbit to time_s.

    Steps: mean motion n = √(μ/a³), M = wrap(M0 + n·(t - t0)), solve
    E - e·sin(E) = M (skipped for e = 0), true anomaly, r = a(1 - e·cos E),
    then rotate the perifocal state by ω, i, Ω.

    Args:
        orbit: Validated Orbit.
        time_s: Query time on the same clock as orbit.epoch_s.

    Returns:
        PropagationResult relative to the host; surface-fixed elements
        (a = 0) and non-positive μ give a zero offset.
    """
    elements = orbit.elements
    if elements.is_surface_fixed:
        return _stationary(mean_anomaly_rad=wrap_angle(elements.mean_anomaly_at_epoch_rad))

    if orbit.host_mu <= 0:
        logger.warning(
            "Host %s has non-positive gravitational parameter (%g); "
            "returning zero offset",
            orbit.host_id, orbit.host_mu,
        )
        return _stationary(warnings=(PropagationWarning.NON_POSITIVE_MU,))

    a = elements.semi_major_axis_m
    e = elements.eccentricity
    mu = orbit.host_mu
    warnings: tuple[PropagationWarning, ...] = ()

    m = mean_anomaly_at(orbit, time_s)
    if e == 0.0:
        e_anom = m
    else:
        solution = solve_kepler(m, e)
        e_anom = solution.eccentric_anomaly_rad
        if not solution.converged:
            logger.warning(
                "Kepler solver did not converge for orbit around %s "
                "(M=%.6f, e=%.6f); using best estimate",
                orbit.host_id, m, e,
            )
            warnings = (PropagationWarning.SOLVER_NOT_CONVERGED,)

    nu = true_anomaly_from_eccentric(e_anom, e)
    r = a * (1.0 - e * math.cos(e_anom))
    x_p = r * math.cos(nu)
    y_p = r * math.sin(nu)

    p = a * (1.0 - e**2)
    v_scale = math.sqrt(mu / p)
    vx_p = -v_scale * math.sin(nu)
    vy_p = v_scale * (e + math.cos(nu))
    if elements.retrograde:
        vx_p, vy_p = -vx_p, -vy_p

    position = perifocal_to_reference(x_p, y_p, elements)
    velocity = perifocal_to_reference(vx_p, vy_p, elements)

    if not all(math.isfinite(c) for c in position + velocity):
        logger.warning(
            "Non-finite state for orbit around %s at t=%s; returning zero offset",
            orbit.host_id, time_s,
        )
        return _stationary(
            mean_anomaly_rad=m,
            warnings=warnings + (PropagationWarning.NON_FINITE_RESULT,),
        )

    return PropagationResult(
        position_m=position,
        velocity_m_s=velocity,
        mean_anomaly_rad=m,
        true_anomaly_rad=nu,
        radius_m=r,
        warnings=warnings,
    )


def propagate_position(orbit: Orbit, time_s: int | float) -> tuple[float, float, float]:
    """Host-relative position only; see propagate_orbit."""
    return propagate_orbit(orbit, time_s).position_m
