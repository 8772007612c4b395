# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for system, temporal-state and position I/O.

External dependencies (json, csv, file I/O) are confined to this layer.
"""
from astrolabe.adapters.csv_exporter import CsvPositionExporter
from astrolabe.adapters.json_io import JsonSystemReader, JsonTemporalStore

__all__ = [
    "CsvPositionExporter",
    "JsonSystemReader",
    "JsonTemporalStore",
]
