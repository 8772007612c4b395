# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Astrolabe

Deterministic positions for hierarchical star systems and calendar views
over a single master clock. Includes two-body Kepler propagation,
barycentric hierarchy resolution, trojan (L4/L5) placement, orbital and
stellar zone classification, and bucket-drain and ratio-linear calendars
with epoch-offset overrides.
"""

from astrolabe.domain.constants import (
    PhysicalConstants,
    au_to_m,
    m_to_au,
    gravitational_parameter,
)
from astrolabe.domain.contracts import (
    AstrolabeError,
    InvalidOrbitalElementsError,
    HierarchyError,
    CyclicHierarchyError,
    BoundaryOrderError,
    CalendarConfigurationError,
)
from astrolabe.domain.orbital_mechanics import (
    OrbitalElements,
    Orbit,
    KeplerSolution,
    validate_elements,
    validate_orbit,
    solve_kepler,
    orbital_period_s,
    mean_motion_rad_s,
    elements_from_state,
)
from astrolabe.domain.propagation import (
    PropagationWarning,
    PropagationResult,
    propagate_orbit,
    propagate_position,
)
from astrolabe.domain.lagrange import (
    LagrangePoint,
    LagrangeSolution,
    CollinearPoints,
    lagrange_point,
    collinear_points,
)
from astrolabe.domain.hierarchy import (
    NodeKind,
    Placement,
    Node,
    HierarchySnapshot,
    validate_graph,
    resolve_positions,
    resolve_states,
    resolve_node,
    relative_position,
    dominant_body,
)
from astrolabe.domain.rulepack import RulePack
from astrolabe.domain.zones import (
    OrbitalZone,
    StellarZone,
    OrbitalBoundaries,
    PlanetData,
    StarData,
    StellarZones,
    calculate_orbital_boundaries,
    classify_altitude,
    calculate_stellar_zones,
    classify_distance,
    zone_altitude_km,
)
from astrolabe.domain.calendar import (
    MathType,
    CalendarUnit,
    MonthDef,
    LeapLogic,
    BucketDrainCalendar,
    RatioLinearCalendar,
    parse_calendar_definition,
)
from astrolabe.domain.temporal import (
    CalendarFields,
    ResolvedTemporal,
    fields_from_seconds,
    seconds_from_fields,
    time_of_day_s,
    ratio_value,
    ratio_seconds,
    format_calendar,
)
from astrolabe.domain.epoch import (
    EpochOverride,
    override_year,
    override_ratio_value,
    align_calendar,
)
from astrolabe.domain.temporal_state import (
    BIG_BANG_TO_UNIX_EPOCH_S,
    TemporalState,
    create_default_temporal_state,
    resolve_temporal_display,
)

__all__ = [
    "PhysicalConstants",
    "au_to_m",
    "m_to_au",
    "gravitational_parameter",
    "AstrolabeError",
    "InvalidOrbitalElementsError",
    "HierarchyError",
    "CyclicHierarchyError",
    "BoundaryOrderError",
    "CalendarConfigurationError",
    "OrbitalElements",
    "Orbit",
    "KeplerSolution",
    "validate_elements",
    "validate_orbit",
    "solve_kepler",
    "orbital_period_s",
    "mean_motion_rad_s",
    "elements_from_state",
    "PropagationWarning",
    "PropagationResult",
    "propagate_orbit",
    "propagate_position",
    "LagrangePoint",
    "LagrangeSolution",
    "CollinearPoints",
    "lagrange_point",
    "collinear_points",
    "NodeKind",
    "Placement",
    "Node",
    "HierarchySnapshot",
    "validate_graph",
    "resolve_positions",
    "resolve_states",
    "resolve_node",
    "relative_position",
    "dominant_body",
    "RulePack",
    "OrbitalZone",
    "StellarZone",
    "OrbitalBoundaries",
    "PlanetData",
    "StarData",
    "StellarZones",
    "calculate_orbital_boundaries",
    "classify_altitude",
    "calculate_stellar_zones",
    "classify_distance",
    "zone_altitude_km",
    "MathType",
    "CalendarUnit",
    "MonthDef",
    "LeapLogic",
    "BucketDrainCalendar",
    "RatioLinearCalendar",
    "parse_calendar_definition",
    "CalendarFields",
    "ResolvedTemporal",
    "fields_from_seconds",
    "seconds_from_fields",
    "time_of_day_s",
    "ratio_value",
    "ratio_seconds",
    "format_calendar",
    "EpochOverride",
    "override_year",
    "override_ratio_value",
    "align_calendar",
    "BIG_BANG_TO_UNIX_EPOCH_S",
    "TemporalState",
    "create_default_temporal_state",
    "resolve_temporal_display",
]
