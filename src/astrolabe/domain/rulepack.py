# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Rule-pack constants.

Named numeric thresholds consumed read-only by the zone classifier.
Defaults reproduce the stock rule pack; callers override individual
entries through RulePack.from_mapping.
"""
import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulePack:
    """Orbital thresholds in kilometres / pascals unless noted."""
    DEFAULT_NO_ATMOSPHERE_LEO_KM: float = 30.0
    DEFAULT_LEO_MEO_BOUNDARY_KM: float = 2000.0
    DEFAULT_MEO_HEO_BOUNDARY_KM: float = 50000.0
    TARGET_ORBITAL_PRESSURE_PA: float = 1e-4
    NEGLIGIBLE_ATMOSPHERE_PA: float = 1.0
    MICRO_SYSTEM_THRESHOLD_KM: float = 1000.0
    GEO_TOLERANCE_KM: float = 100.0       # half-width of the geostationary band
    DANGER_ZONE_MULTIPLIER: float = 5.0   # danger zone = kill zone × this
    ROGUE_SOI_FRACTION: float = 0.01      # SOI fallback when the host has no mass

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RulePack":
        """
        Build a RulePack from a mapping of constant name to number.

        Accepts either the flat mapping or one wrapped in an
        ``orbital_constants`` key. Unknown names are ignored with a
        warning; known names must be finite numbers.

        Raises:
            ValueError: A known constant is not a finite number.
        """
        if "orbital_constants" in data:
            data = data["orbital_constants"]

        known = {f.name for f in fields(cls)}
        overrides: dict[str, float] = {}
        for name, value in data.items():
            if name not in known:
                logger.warning("Ignoring unknown rule-pack constant %s", name)
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Rule-pack constant {name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"Rule-pack constant {name} must be finite, got {value}")
            overrides[name] = float(value)
        return replace(cls(), **overrides)

    def to_mapping(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_RULE_PACK = RulePack()
