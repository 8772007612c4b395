# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the JSON and CSV adapters."""
import csv
import json
import logging

import pytest

from astrolabe.adapters import CsvPositionExporter, JsonSystemReader, JsonTemporalStore
from astrolabe.domain.constants import au_to_m, gravitational_parameter
from astrolabe.domain.hierarchy import Node, resolve_positions
from astrolabe.domain.orbital_mechanics import Orbit, OrbitalElements
from astrolabe.domain.temporal_state import (
    STARDATE_KEY,
    advance_display,
    create_default_temporal_state,
    set_active_calendar,
)
from astrolabe.ports import SystemReader, TemporalStore
from astrolabe.ports.export import PositionExporter

MU_SUN = gravitational_parameter(1.989e30)


def _system():
    return [
        Node("sun", None),
        Node("earth", "sun", orbit=Orbit("sun", MU_SUN, 0, OrbitalElements(semi_major_axis_m=au_to_m(1.0)))),
    ]


class TestPortConformance:

    def test_adapters_implement_ports(self):
        assert isinstance(JsonSystemReader(), SystemReader)
        assert isinstance(JsonTemporalStore(), TemporalStore)
        assert isinstance(CsvPositionExporter(), PositionExporter)


class TestJsonSystemReader:

    def test_read_system(self, tmp_path):
        path = tmp_path / "system.json"
        path.write_text(json.dumps({"nodes": [
            {"id": "sun", "parent_id": None},
            {"id": "earth", "parent_id": "sun",
             "orbit": {"host_mu": MU_SUN, "elements": {"semi_major_axis_au": 1.0}}},
        ]}))
        nodes = JsonSystemReader().read_system(str(path))
        assert [n.id for n in nodes] == ["sun", "earth"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{nodes: ")
        with pytest.raises(ValueError, match="invalid JSON"):
            JsonSystemReader().read_system(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonSystemReader().read_system(str(tmp_path / "nope.json"))

    def test_read_rule_pack(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"orbital_constants": {"GEO_TOLERANCE_KM": 42}}))
        assert JsonSystemReader().read_rule_pack(str(path)).GEO_TOLERANCE_KM == 42.0

    def test_rule_pack_must_be_object(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonSystemReader().read_rule_pack(str(path))


class TestJsonTemporalStore:

    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "time.json")
        state = advance_display(set_active_calendar(create_default_temporal_state(unix_s=0), STARDATE_KEY), 99)
        store = JsonTemporalStore()
        store.save_temporal_state(state, path)
        assert store.load_temporal_state(path) == state

    def test_clocks_stored_as_strings(self, tmp_path):
        path = tmp_path / "time.json"
        JsonTemporalStore().save_temporal_state(create_default_temporal_state(unix_s=0), str(path))
        data = json.loads(path.read_text())
        assert data["master_time_s"] == "435084631200000000"

    def test_must_be_object(self, tmp_path):
        path = tmp_path / "time.json"
        path.write_text('"now"')
        with pytest.raises(ValueError):
            JsonTemporalStore().load_temporal_state(str(path))


class TestCsvPositionExporter:

    def test_export(self, tmp_path):
        path = str(tmp_path / "positions.csv")
        n = CsvPositionExporter().export(resolve_positions(_system(), 0), path)
        assert n == 2
        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["node_id", "x_m", "y_m", "z_m", "x_au", "y_au", "z_au"]
        assert rows[1][0] == "sun"
        assert rows[2][0] == "earth"
        assert rows[2][4] == "1.000000000"

    def test_warns_on_degraded_positions(self, tmp_path, caplog):
        nodes = [Node("sun", None), Node("p", "sun", orbit=Orbit("sun", 0.0, 0, OrbitalElements(semi_major_axis_m=1e9)))]
        with caplog.at_level(logging.WARNING, logger="astrolabe.adapters.csv_exporter"):
            CsvPositionExporter().export(resolve_positions(nodes, 0), str(tmp_path / "p.csv"))
        assert any("propagation warnings" in r.message for r in caplog.records)

    def test_clean_export_no_warning(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="astrolabe.adapters.csv_exporter"):
            CsvPositionExporter().export(resolve_positions(_system(), 0), str(tmp_path / "p.csv"))
        assert not [r for r in caplog.records if r.name == "astrolabe.adapters.csv_exporter"]
