# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for system-graph serialization."""
import pytest

from astrolabe.domain.constants import au_to_m, gravitational_parameter
from astrolabe.domain.hierarchy import NodeKind, Placement, resolve_positions
from astrolabe.domain.serialization import (
    elements_from_mapping,
    node_from_mapping,
    node_to_mapping,
    nodes_from_mapping,
    orbit_from_mapping,
    snapshot_rows,
)

SYSTEM = {
    "nodes": [
        {"id": "sun", "parent_id": None, "mass_kg": 1.989e30},
        {
            "id": "earth",
            "parent_id": "sun",
            "orbit": {
                "host_mass_kg": 1.989e30,
                "epoch_s": "435084631200000000",
                "elements": {"semi_major_axis_au": 1.0, "eccentricity": 0.0167},
            },
        },
        {"id": "camp", "parent_id": "earth", "placement": "surface", "kind": "construct"},
        {"id": "greeks", "parent_id": "sun", "placement": "L4", "anchor_id": "earth", "kind": "barycenter"},
    ]
}


class TestNodesFromMapping:

    def test_parses_system(self):
        nodes = {n.id: n for n in nodes_from_mapping(SYSTEM)}
        earth = nodes["earth"]
        assert earth.orbit.host_id == "sun"
        assert earth.orbit.host_mu == pytest.approx(gravitational_parameter(1.989e30))
        assert earth.orbit.epoch_s == 435_084_631_200_000_000
        assert earth.orbit.elements.semi_major_axis_m == pytest.approx(au_to_m(1.0))
        assert nodes["camp"].placement is Placement.SURFACE
        assert nodes["camp"].kind is NodeKind.CONSTRUCT
        assert nodes["greeks"].effective_anchor_id == "earth"
        assert nodes["sun"].mass_kg == 1.989e30

    def test_resolves(self):
        snapshot = resolve_positions(nodes_from_mapping(SYSTEM), 435_084_631_200_000_000)
        assert snapshot.positions["earth"][0] == pytest.approx(au_to_m(1.0) * (1 - 0.0167))

    def test_missing_nodes_list(self):
        with pytest.raises(ValueError):
            nodes_from_mapping({"bodies": []})

    def test_missing_id(self):
        with pytest.raises(ValueError):
            node_from_mapping({"parent_id": None})

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="comet"):
            node_from_mapping({"id": "x", "parent_id": None, "kind": "comet"})

    def test_unknown_placement(self):
        with pytest.raises(ValueError):
            node_from_mapping({"id": "x", "parent_id": None, "placement": "L9"})


class TestOrbitFromMapping:

    def test_needs_host(self):
        with pytest.raises(ValueError):
            orbit_from_mapping({"host_mu": 1.0, "elements": {"semi_major_axis_m": 1.0}})

    def test_needs_mu_or_mass(self):
        with pytest.raises(ValueError):
            orbit_from_mapping({"elements": {"semi_major_axis_m": 1.0}}, "sun")

    def test_needs_semi_major_axis(self):
        with pytest.raises(ValueError):
            elements_from_mapping({"eccentricity": 0.1})

    def test_float_epoch_kept(self):
        orbit = orbit_from_mapping({"host_mu": 1.0, "epoch_s": 2.5, "elements": {"semi_major_axis_m": 1.0}}, "sun")
        assert orbit.epoch_s == 2.5


class TestNodeToMapping:

    def test_round_trip(self):
        for node in nodes_from_mapping(SYSTEM):
            assert node_from_mapping(node_to_mapping(node)) == node

    def test_epoch_written_as_string(self):
        earth = nodes_from_mapping(SYSTEM)[1]
        assert node_to_mapping(earth)["orbit"]["epoch_s"] == "435084631200000000"


class TestSnapshotRows:

    def test_rows_in_metres_and_au(self):
        snapshot = resolve_positions(nodes_from_mapping(SYSTEM), 435_084_631_200_000_000)
        rows = {row[0]: row for row in snapshot_rows(snapshot)}
        assert rows["sun"][1:] == (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert rows["earth"][4] == pytest.approx(1 - 0.0167)
        assert len(rows) == 4
