# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
System-graph serialization.

Pure conversions between JSON-shaped mappings and domain objects.
Clock values (epoch_s) may be given as decimal strings to survive
JSON readers that truncate large integers.
"""
from typing import Any, Mapping

from astrolabe.domain.calendar import parse_clock_seconds
from astrolabe.domain.constants import au_to_m, gravitational_parameter, m_to_au
from astrolabe.domain.hierarchy import HierarchySnapshot, Node, NodeKind, Placement
from astrolabe.domain.orbital_mechanics import Orbit, OrbitalElements

_ELEMENT_ANGLES = (
    "inclination_rad",
    "arg_periapsis_rad",
    "long_asc_node_rad",
    "mean_anomaly_at_epoch_rad",
)


def _epoch(value: Any) -> int | float:
    if isinstance(value, float):
        return value
    return parse_clock_seconds(value)


def elements_from_mapping(data: Mapping[str, Any]) -> OrbitalElements:
    """
    Orbital elements from a mapping.

    The semi-major axis is ``semi_major_axis_m`` or ``semi_major_axis_au``.
    Missing angles default to zero.
    """
    if "semi_major_axis_m" in data:
        a_m = float(data["semi_major_axis_m"])
    elif "semi_major_axis_au" in data:
        a_m = au_to_m(float(data["semi_major_axis_au"]))
    else:
        raise ValueError("Orbital elements need semi_major_axis_m or semi_major_axis_au")
    return OrbitalElements(
        semi_major_axis_m=a_m,
        eccentricity=float(data.get("eccentricity", 0.0)),
        retrograde=bool(data.get("retrograde", False)),
        **{name: float(data.get(name, 0.0)) for name in _ELEMENT_ANGLES},
    )


def orbit_from_mapping(data: Mapping[str, Any], default_host: str | None = None) -> Orbit:
    """Orbit from a mapping; ``host_mass_kg`` may stand in for ``host_mu``."""
    host_id = data.get("host_id", default_host)
    if host_id is None:
        raise ValueError("Orbit needs a host_id")
    if "host_mu" in data:
        mu = float(data["host_mu"])
    elif "host_mass_kg" in data:
        mu = gravitational_parameter(float(data["host_mass_kg"]))
    else:
        raise ValueError(f"Orbit around {host_id} needs host_mu or host_mass_kg")
    return Orbit(
        host_id=str(host_id),
        host_mu=mu,
        epoch_s=_epoch(data.get("epoch_s", 0)),
        elements=elements_from_mapping(data.get("elements", {})),
    )


def node_from_mapping(data: Mapping[str, Any]) -> Node:
    """
    One Node from a mapping.

    Raises:
        ValueError: Missing id, unknown kind/placement, or a malformed orbit.
    """
    if "id" not in data:
        raise ValueError(f"Node record without id: {dict(data)}")
    node_id = str(data["id"])
    parent_id = data.get("parent_id")
    try:
        kind = NodeKind(data.get("kind", NodeKind.BODY.value))
        placement = Placement(data.get("placement", Placement.ORBIT.value))
    except ValueError as e:
        raise ValueError(f"Node '{node_id}': {e}") from None
    orbit_data = data.get("orbit")
    orbit = orbit_from_mapping(orbit_data, parent_id) if orbit_data is not None else None
    return Node(
        id=node_id,
        parent_id=str(parent_id) if parent_id is not None else None,
        kind=kind,
        role_hint=str(data.get("role_hint", "")),
        orbit=orbit,
        placement=placement,
        anchor_id=data.get("anchor_id"),
        name=str(data.get("name", "")),
        mass_kg=float(data.get("mass_kg", 0.0)),
    )


def nodes_from_mapping(data: Mapping[str, Any]) -> list[Node]:
    """All nodes of a ``{"nodes": [...]}`` system document."""
    records = data.get("nodes")
    if not isinstance(records, list):
        raise ValueError("System document needs a 'nodes' list")
    return [node_from_mapping(record) for record in records]


def node_to_mapping(node: Node) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": node.id,
        "parent_id": node.parent_id,
        "kind": node.kind.value,
        "role_hint": node.role_hint,
        "placement": node.placement.value,
        "name": node.name,
    }
    if node.anchor_id is not None:
        data["anchor_id"] = node.anchor_id
    if node.mass_kg:
        data["mass_kg"] = node.mass_kg
    if node.orbit is not None:
        el = node.orbit.elements
        data["orbit"] = {
            "host_id": node.orbit.host_id,
            "host_mu": node.orbit.host_mu,
            "epoch_s": str(node.orbit.epoch_s) if isinstance(node.orbit.epoch_s, int) else node.orbit.epoch_s,
            "elements": {
                "semi_major_axis_m": el.semi_major_axis_m,
                "eccentricity": el.eccentricity,
                "retrograde": el.retrograde,
                **{name: getattr(el, name) for name in _ELEMENT_ANGLES},
            },
        }
    return data


def snapshot_rows(snapshot: HierarchySnapshot) -> list[tuple[str, float, float, float, float, float, float]]:
    """(node_id, x_m, y_m, z_m, x_au, y_au, z_au) per resolved node, in resolution order."""
    return [
        (node_id, x, y, z, m_to_au(x), m_to_au(y), m_to_au(z))
        for node_id, (x, y, z) in snapshot.positions.items()
    ]
