# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interface for position export.

Adapters implement this to export a resolved position map in various
formats.
"""
from typing import Protocol, runtime_checkable

from astrolabe.domain.hierarchy import HierarchySnapshot


@runtime_checkable
class PositionExporter(Protocol):
    """Port for exporting resolved node positions to file."""

    def export(self, snapshot: HierarchySnapshot, path: str) -> int:
        """
        Export every resolved node position in a snapshot.

        Args:
            snapshot: Positions resolved at one query time.
            path: Output file path.

        Returns:
            Number of nodes exported.
        """
        ...
