# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Error contracts for the astrolabe engine.

Every error derives from ValueError so callers that already guard
numeric input with ``except ValueError`` keep working. Structural and
configuration errors are fatal for the whole evaluation; numerical
degradations are reported as warnings instead (see propagation).
"""


class AstrolabeError(ValueError):
    """Base class for all engine rejections."""


class InvalidOrbitalElementsError(AstrolabeError):
    """Orbital elements are non-finite, unbound, or negative in size."""


class HierarchyError(AstrolabeError):
    """Node graph is structurally invalid (duplicate or dangling ids)."""


class CyclicHierarchyError(HierarchyError):
    """Parent (or anchor) links form a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            "Cyclic parent reference: " + " -> ".join(self.cycle)
        )


class BoundaryOrderError(AstrolabeError):
    """Orbital boundary thresholds are not monotonically increasing."""


class CalendarConfigurationError(AstrolabeError):
    """Calendar definition cannot be resolved (unknown model, bad table)."""
