# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital and stellar zone classification.

Planet-scale: altitude thresholds (LEO/MEO/HEO, geostationary) derived
from the body's Hill sphere, atmosphere and rotation. Star-scale: kill
zone, habitable zone and condensation (ice) lines derived from stellar
radius, temperature and spectral class.

Classification is a pure lookup against ordered thresholds. Altitudes
are in km above the surface, stellar distances in AU.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum

from astrolabe.domain.constants import PhysicalConstants
from astrolabe.domain.contracts import BoundaryOrderError
from astrolabe.domain.rulepack import DEFAULT_RULE_PACK, RulePack

logger = logging.getLogger(__name__)

# Kopparapu et al. (2013) conservative habitable-zone fits: (S_eff,sun, a, b, c, d)
_RUNAWAY_GREENHOUSE = (1.107, 1.332e-4, 1.58e-8, -8.308e-12, -1.931e-15)
_MAXIMUM_GREENHOUSE = (0.356, 6.171e-5, 1.698e-9, -3.198e-12, -5.575e-16)
_HZ_TEFF_RANGE_K = (2600.0, 7200.0)
_HZ_TEFF_REFERENCE_K = 5780.0

# Condensation temperatures (K)
SILICATE_LINE_K = 1400.0
SOOT_LINE_K = 500.0
FROST_LINE_K = 170.0
CO2_ICE_LINE_K = 70.0
CO_ICE_LINE_K = 30.0

_UV_FACTOR = {"O": 100.0, "B": 50.0, "A": 10.0, "F": 5.0, "G": 1.0, "K": 0.5, "M": 0.1}
_KILL_ZONE_BASE_AU = 0.1


class OrbitalZone(Enum):
    """Named altitude band around a planet or moon."""
    SURFACE = "Surface"
    LOW_ORBIT = "LowOrbit"
    MID_ORBIT = "MidOrbit"
    GEOSTATIONARY_ORBIT = "GeostationaryOrbit"
    HIGH_ORBIT = "HighOrbit"
    FAR_ORBIT = "FarOrbit"


class StellarZone(Enum):
    """Named distance band around a star."""
    KILL_ZONE = "KillZone"
    DANGER_ZONE = "DangerZone"
    INNER = "Inner"
    HABITABLE_ZONE = "HabitableZone"
    OUTER = "Outer"
    BEYOND_SYSTEM_LIMIT = "BeyondSystemLimit"


@dataclass(frozen=True)
class OrbitalBoundaries:
    """Altitude thresholds (km) above a body's surface.

    Thresholds must be non-decreasing; a micro system collapses its upper
    bands to zero width, so equal neighbours are allowed.
    """
    min_leo_km: float
    leo_meo_km: float
    meo_heo_km: float
    heo_upper_km: float
    geostationary_km: float | None = None
    is_geo_fallback: bool = False

    def __post_init__(self) -> None:
        values = (self.min_leo_km, self.leo_meo_km, self.meo_heo_km, self.heo_upper_km)
        if not all(math.isfinite(v) for v in values):
            raise BoundaryOrderError(f"Boundaries must be finite, got {values}")
        if self.min_leo_km < 0:
            raise BoundaryOrderError(f"min_leo_km must be >= 0, got {self.min_leo_km}")
        if not (self.min_leo_km <= self.leo_meo_km <= self.meo_heo_km <= self.heo_upper_km):
            raise BoundaryOrderError(
                "Boundaries must increase: "
                f"min_leo={self.min_leo_km}, leo_meo={self.leo_meo_km}, "
                f"meo_heo={self.meo_heo_km}, heo_upper={self.heo_upper_km}"
            )
        geo = self.geostationary_km
        if geo is not None and not (self.min_leo_km <= geo <= self.heo_upper_km):
            raise BoundaryOrderError(
                f"Geostationary altitude {geo} km outside "
                f"[{self.min_leo_km}, {self.heo_upper_km}]"
            )


@dataclass(frozen=True)
class PlanetData:
    """Physical inputs for boundary derivation.

    radius_km of 0 means "derive from mass and surface gravity".
    """
    mass_kg: float
    radius_km: float = 0.0
    gravity_m_s2: float = PhysicalConstants.EARTH_GRAVITY
    surface_pressure_pa: float = 0.0
    surface_temp_k: float = 288.0
    molar_mass_kg: float = 0.029
    rotation_period_s: float = 0.0
    host_mass_kg: float = 0.0
    distance_to_host_km: float = 0.0


@dataclass(frozen=True)
class StarData:
    """Stellar inputs for zone derivation."""
    radius_km: float
    temperature_k: float
    spectral_class: str = "G"
    radiation_output: float = 1.0


@dataclass(frozen=True)
class HabitableZone:
    inner_au: float
    outer_au: float


@dataclass(frozen=True)
class StellarZones:
    """Distance thresholds (AU) around a star."""
    kill_zone_au: float
    danger_zone_au: float
    habitable_zone: HabitableZone
    silicate_line_au: float
    soot_line_au: float
    frost_line_au: float
    co2_ice_line_au: float
    co_ice_line_au: float
    system_limit_au: float


def hill_radius(distance: float, mass_kg: float, host_mass_kg: float) -> float:
    """Hill-sphere radius r = a·∛(m / 3M), in the units of distance."""
    if host_mass_kg <= 0:
        raise ValueError(f"host_mass_kg must be positive, got {host_mass_kg}")
    if mass_kg < 0:
        raise ValueError(f"mass_kg must be non-negative, got {mass_kg}")
    return distance * math.cbrt(mass_kg / (3.0 * host_mass_kg))


def _planet_radius_km(planet: PlanetData) -> float:
    if planet.radius_km > 0:
        return planet.radius_km
    if planet.gravity_m_s2 <= 0 or planet.mass_kg <= 0:
        raise ValueError(
            "Planet radius cannot be derived without positive mass and surface gravity"
        )
    return math.sqrt(PhysicalConstants.G * planet.mass_kg / planet.gravity_m_s2) / 1000.0


def geostationary_altitude_km(mass_kg: float, rotation_period_s: float, radius_km: float) -> float | None:
    """Synchronous-orbit altitude above the surface, or None without rotation."""
    period = abs(rotation_period_s)
    if period == 0:
        return None
    radius_m = math.cbrt(PhysicalConstants.G * mass_kg * period**2 / (4.0 * math.pi**2))
    return radius_m / 1000.0 - radius_km


def calculate_orbital_boundaries(
    planet: PlanetData,
    rules: RulePack = DEFAULT_RULE_PACK,
) -> OrbitalBoundaries:
    """
    Derive altitude thresholds for a body.

    The ceiling is the Hill sphere minus the body radius (a fixed fraction
    of the host distance for rogue bodies). The floor is where the
    atmosphere thins to the target orbital pressure, or a small default
    altitude for airless bodies. Bodies whose ceiling is below the
    micro-system threshold collapse to a single low-orbit band.

    Args:
        planet: Physical properties of the body.
        rules: Threshold constants.

    Returns:
        OrbitalBoundaries with non-decreasing thresholds.
    """
    radius_km = _planet_radius_km(planet)

    if planet.host_mass_kg > 0:
        soi_km = hill_radius(planet.distance_to_host_km, planet.mass_kg, planet.host_mass_kg)
    else:
        soi_km = planet.distance_to_host_km * rules.ROGUE_SOI_FRACTION
    heo_upper = max(0.1, soi_km - radius_km)

    if planet.surface_pressure_pa < rules.NEGLIGIBLE_ATMOSPHERE_PA:
        min_leo = min(rules.DEFAULT_NO_ATMOSPHERE_LEO_KM, heo_upper * 0.2)
    else:
        denominator = planet.molar_mass_kg * planet.gravity_m_s2
        if denominator <= 0:
            raise ValueError("Atmosphere requires positive molar mass and surface gravity")
        scale_height_m = PhysicalConstants.UNIVERSAL_GAS_CONSTANT * planet.surface_temp_k / denominator
        pressure_ratio = planet.surface_pressure_pa / rules.TARGET_ORBITAL_PRESSURE_PA
        altitude_m = scale_height_m * math.log(pressure_ratio) if pressure_ratio > 1 else 0.0
        min_leo = altitude_m / 1000.0

    if min_leo >= heo_upper:
        logger.warning(
            "Atmosphere floor %.1f km exceeds sphere of influence %.1f km; clamping",
            min_leo, heo_upper,
        )
        min_leo = heo_upper * 0.9

    if heo_upper < rules.MICRO_SYSTEM_THRESHOLD_KM:
        return OrbitalBoundaries(
            min_leo_km=min_leo,
            leo_meo_km=heo_upper,
            meo_heo_km=heo_upper,
            heo_upper_km=heo_upper,
            geostationary_km=None,
            is_geo_fallback=True,
        )

    if min_leo >= rules.DEFAULT_LEO_MEO_BOUNDARY_KM:
        leo_meo = min_leo + rules.DEFAULT_LEO_MEO_BOUNDARY_KM
    else:
        leo_meo = rules.DEFAULT_LEO_MEO_BOUNDARY_KM
    leo_meo = min(leo_meo, heo_upper)

    geo = geostationary_altitude_km(planet.mass_kg, planet.rotation_period_s, radius_km)
    if geo is None or geo < min_leo or geo > heo_upper:
        geo = None
        is_geo_fallback = True
        meo_heo = rules.DEFAULT_MEO_HEO_BOUNDARY_KM
    else:
        is_geo_fallback = False
        meo_heo = geo

    leo_meo = max(min_leo, min(leo_meo, heo_upper))
    meo_heo = max(leo_meo, min(meo_heo, heo_upper))

    return OrbitalBoundaries(
        min_leo_km=min_leo,
        leo_meo_km=leo_meo,
        meo_heo_km=meo_heo,
        heo_upper_km=heo_upper,
        geostationary_km=geo,
        is_geo_fallback=is_geo_fallback,
    )


def classify_altitude(
    altitude_km: float,
    boundaries: OrbitalBoundaries,
    rules: RulePack = DEFAULT_RULE_PACK,
) -> OrbitalZone:
    """
    Classify an altitude above the surface.

    Below the minimum stable orbit counts as SURFACE. The geostationary
    band (± GEO_TOLERANCE_KM) applies only when the body defines one and
    takes precedence over the band it falls in.
    """
    if altitude_km < boundaries.min_leo_km:
        return OrbitalZone.SURFACE
    geo = boundaries.geostationary_km
    if geo is not None and abs(altitude_km - geo) <= rules.GEO_TOLERANCE_KM:
        return OrbitalZone.GEOSTATIONARY_ORBIT
    if altitude_km < boundaries.leo_meo_km:
        return OrbitalZone.LOW_ORBIT
    if altitude_km < boundaries.meo_heo_km:
        return OrbitalZone.MID_ORBIT
    if altitude_km <= boundaries.heo_upper_km:
        return OrbitalZone.HIGH_ORBIT
    return OrbitalZone.FAR_ORBIT


def classify_semi_major_axis(
    semi_major_axis_m: float,
    body_radius_km: float,
    boundaries: OrbitalBoundaries,
    rules: RulePack = DEFAULT_RULE_PACK,
) -> OrbitalZone:
    """Classify a circular orbit by its semi-major axis from the body centre."""
    return classify_altitude(semi_major_axis_m / 1000.0 - body_radius_km, boundaries, rules)


def zone_altitude_km(boundaries: OrbitalBoundaries, zone: OrbitalZone) -> float:
    """
    Representative altitude for placing a body in a named zone.

    Band midpoints for LEO/MEO/HEO, the synchronous altitude for
    GEOSTATIONARY_ORBIT, zero for SURFACE.

    Raises:
        ValueError: GEOSTATIONARY_ORBIT on a body without one, or FAR_ORBIT
            (outside the body's sphere of influence).
    """
    if zone is OrbitalZone.SURFACE:
        return 0.0
    if zone is OrbitalZone.LOW_ORBIT:
        return (boundaries.min_leo_km + boundaries.leo_meo_km) / 2.0
    if zone is OrbitalZone.MID_ORBIT:
        return (boundaries.leo_meo_km + boundaries.meo_heo_km) / 2.0
    if zone is OrbitalZone.HIGH_ORBIT:
        return (boundaries.meo_heo_km + boundaries.heo_upper_km) / 2.0
    if zone is OrbitalZone.GEOSTATIONARY_ORBIT:
        if boundaries.geostationary_km is None:
            raise ValueError("Body has no geostationary orbit")
        return boundaries.geostationary_km
    raise ValueError(f"No orbital altitude for zone {zone.value}")


def stellar_luminosity(star: StarData) -> float:
    """Luminosity relative to the Sun from Stefan–Boltzmann scaling (1.0 if unknown)."""
    if star.radius_km <= 0 or star.temperature_k <= 0:
        return 1.0
    radius_ratio = star.radius_km / PhysicalConstants.SOLAR_RADIUS_KM
    temp_ratio = star.temperature_k / PhysicalConstants.SOLAR_TEMP_K
    return radius_ratio**2 * temp_ratio**4


def _effective_flux(coefficients: tuple[float, ...], t_star: float) -> float:
    s_sun, a, b, c, d = coefficients
    return s_sun + a * t_star + b * t_star**2 + c * t_star**3 + d * t_star**4


def habitable_zone(star: StarData) -> HabitableZone:
    """Conservative habitable zone (runaway to maximum greenhouse), in AU."""
    teff = star.temperature_k if star.temperature_k > 0 else PhysicalConstants.SOLAR_TEMP_K
    lo, hi = _HZ_TEFF_RANGE_K
    t_star = max(lo, min(hi, teff)) - _HZ_TEFF_REFERENCE_K

    luminosity = max(1e-6, stellar_luminosity(star))
    inner_seff = max(1e-6, _effective_flux(_RUNAWAY_GREENHOUSE, t_star))
    outer_seff = max(1e-6, _effective_flux(_MAXIMUM_GREENHOUSE, t_star))
    inner = math.sqrt(luminosity / inner_seff)
    outer = math.sqrt(luminosity / outer_seff)
    return HabitableZone(inner_au=min(inner, outer), outer_au=max(inner, outer))


def distance_for_temperature_au(star: StarData, temperature_k: float) -> float:
    """Distance at which the equilibrium temperature equals temperature_k."""
    if star.radius_km <= 0 or star.temperature_k <= 0:
        return 0.0
    a_km = star.radius_km * (star.temperature_k / temperature_k) ** 2 / 2.0
    return a_km / PhysicalConstants.AU_KM


def kill_zone_au(star: StarData) -> float:
    """UV kill-zone radius scaled by spectral class and radiation output."""
    letter = star.spectral_class[:1].upper() if star.spectral_class else ""
    uv_factor = _UV_FACTOR.get(letter, 1.0)
    return _KILL_ZONE_BASE_AU * math.sqrt(uv_factor * star.radiation_output * stellar_luminosity(star))


def calculate_stellar_zones(
    star: StarData,
    rules: RulePack = DEFAULT_RULE_PACK,
) -> StellarZones:
    """All distance thresholds around a star. The system limit is twice the CO ice line."""
    kill = kill_zone_au(star)
    co_line = distance_for_temperature_au(star, CO_ICE_LINE_K)
    return StellarZones(
        kill_zone_au=kill,
        danger_zone_au=kill * rules.DANGER_ZONE_MULTIPLIER,
        habitable_zone=habitable_zone(star),
        silicate_line_au=distance_for_temperature_au(star, SILICATE_LINE_K),
        soot_line_au=distance_for_temperature_au(star, SOOT_LINE_K),
        frost_line_au=distance_for_temperature_au(star, FROST_LINE_K),
        co2_ice_line_au=distance_for_temperature_au(star, CO2_ICE_LINE_K),
        co_ice_line_au=co_line,
        system_limit_au=co_line * 2.0,
    )


def classify_distance(distance_au: float, zones: StellarZones) -> StellarZone:
    """Classify a distance from a star; inner bands take precedence."""
    if distance_au < zones.kill_zone_au:
        return StellarZone.KILL_ZONE
    if distance_au < zones.danger_zone_au:
        return StellarZone.DANGER_ZONE
    if distance_au < zones.habitable_zone.inner_au:
        return StellarZone.INNER
    if distance_au <= zones.habitable_zone.outer_au:
        return StellarZone.HABITABLE_ZONE
    if distance_au <= zones.system_limit_au:
        return StellarZone.OUTER
    return StellarZone.BEYOND_SYSTEM_LIMIT
