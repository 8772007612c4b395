# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
CSV position exporter.

Exports a resolved position map as CSV in metres and astronomical units.
External dependencies (csv, file I/O) are confined to this adapter.
"""
import csv
import logging

from astrolabe.domain.hierarchy import HierarchySnapshot
from astrolabe.domain.serialization import snapshot_rows
from astrolabe.ports.export import PositionExporter

logger = logging.getLogger(__name__)

_HEADER = ['node_id', 'x_m', 'y_m', 'z_m', 'x_au', 'y_au', 'z_au']


class CsvPositionExporter(PositionExporter):
    """Exports node positions to CSV."""

    def export(self, snapshot: HierarchySnapshot, path: str) -> int:
        rows = snapshot_rows(snapshot)
        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(_HEADER)
            for node_id, x_m, y_m, z_m, x_au, y_au, z_au in rows:
                writer.writerow([
                    node_id,
                    f'{x_m:.3f}',
                    f'{y_m:.3f}',
                    f'{z_m:.3f}',
                    f'{x_au:.9f}',
                    f'{y_au:.9f}',
                    f'{z_au:.9f}',
                ])

        if snapshot.warnings:
            logger.warning(
                "Exported positions include %d node(s) with propagation warnings: %s",
                len(snapshot.warnings), ", ".join(sorted(snapshot.warnings)),
            )
        return len(rows)
