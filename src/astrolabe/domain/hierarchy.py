# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Hierarchical position resolution.

A system is a forest of Nodes. Each non-root node sits at its parent's
absolute position plus its own propagated offset; L4/L5 placements are
located by the Lagrange calculator from their anchor body instead.

Every call builds its memo from scratch: positions are never cached
across query times or graphs. The graph is validated as a whole before
anything is computed, and a cycle rejects the whole graph.
"""
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from astrolabe.domain.contracts import CyclicHierarchyError, HierarchyError
from astrolabe.domain.lagrange import LagrangePoint, lagrange_point, rotate_about_axis
from astrolabe.domain.orbital_mechanics import Orbit, orbit_normal, validate_orbit
from astrolabe.domain.propagation import (
    ZERO_VECTOR,
    PropagationWarning,
    propagate_orbit,
)
from astrolabe.domain.zones import hill_radius

logger = logging.getLogger(__name__)

Vector = tuple[float, float, float]


class NodeKind(Enum):
    """What a node represents physically."""
    BODY = "body"
    BARYCENTER = "barycenter"
    CONSTRUCT = "construct"


class Placement(Enum):
    """How a node is positioned relative to its host."""
    ORBIT = "orbit"
    SURFACE = "surface"
    L4 = "L4"
    L5 = "L5"

    @property
    def lagrange_point(self) -> LagrangePoint | None:
        if self is Placement.L4:
            return LagrangePoint.L4
        if self is Placement.L5:
            return LagrangePoint.L5
        return None


@dataclass(frozen=True)
class Node:
    """One element of the system graph.

    For L4/L5 placements, anchor_id names the body whose orbit defines the
    point; when omitted, the orbit's host_id is used as the anchor.
    """
    id: str
    parent_id: str | None
    kind: NodeKind = NodeKind.BODY
    role_hint: str = ""
    orbit: Orbit | None = None
    placement: Placement = Placement.ORBIT
    anchor_id: str | None = None
    name: str = ""
    mass_kg: float = 0.0

    @property
    def effective_anchor_id(self) -> str | None:
        if self.placement.lagrange_point is None:
            return None
        if self.anchor_id is not None:
            return self.anchor_id
        return self.orbit.host_id if self.orbit is not None else None


@dataclass(frozen=True)
class HierarchySnapshot:
    """Absolute state of every resolved node at one query time."""
    time_s: int | float
    positions: dict[str, Vector]
    velocities: dict[str, Vector]
    warnings: dict[str, tuple[PropagationWarning, ...]] = field(default_factory=dict)

    def position_of(self, node_id: str) -> Vector:
        try:
            return self.positions[node_id]
        except KeyError:
            raise HierarchyError(f"Node '{node_id}' not in snapshot") from None


def _add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _dependencies(node: Node, by_id: dict[str, Node]) -> list[str]:
    """Ids whose absolute state must be known before this node's."""
    anchor_id = node.effective_anchor_id
    if anchor_id is not None:
        deps = [anchor_id]
        anchor_parent = by_id[anchor_id].parent_id
        if anchor_parent is not None:
            deps.append(anchor_parent)
        return deps
    return [node.parent_id] if node.parent_id is not None else []


def _structural_links(node: Node) -> list[str]:
    """Links that must be acyclic: the parent edge and the anchor edge."""
    links = []
    if node.parent_id is not None:
        links.append(node.parent_id)
    anchor_id = node.effective_anchor_id
    if anchor_id is not None and anchor_id != node.parent_id:
        links.append(anchor_id)
    return links


def _find_cycles(by_id: dict[str, Node]) -> None:
    """Iterative DFS over parent/anchor links; raises on the first cycle."""
    done: set[str] = set()
    for start in by_id:
        if start in done:
            continue
        path: list[str] = [start]
        on_path = {start}
        pending: list[list[str]] = [_structural_links(by_id[start])]
        while path:
            if pending[-1]:
                nxt = pending[-1].pop()
                if nxt in on_path:
                    raise CyclicHierarchyError(path[path.index(nxt):] + [nxt])
                if nxt in done:
                    continue
                path.append(nxt)
                on_path.add(nxt)
                pending.append(_structural_links(by_id[nxt]))
            else:
                finished = path.pop()
                on_path.discard(finished)
                pending.pop()
                done.add(finished)


def validate_graph(nodes: Iterable[Node]) -> dict[str, Node]:
    """
    Validate a node graph and index it by id.

    Checks, in order: duplicate ids, dangling parent references, Lagrange
    placements on root nodes or without a usable anchor, orbital element
    validity, and cycles through parent or anchor links.

    Args:
        nodes: Flat collection of Nodes.

    Returns:
        Mapping of node id to Node.

    Raises:
        HierarchyError: Duplicate id, dangling reference, bad anchor, or a
            root node with a Lagrange placement.
        CyclicHierarchyError: Parent/anchor links form a cycle.
        InvalidOrbitalElementsError: A node's orbit is invalid.
    """
    by_id: dict[str, Node] = {}
    for node in nodes:
        if node.id in by_id:
            raise HierarchyError(f"Duplicate node id '{node.id}'")
        by_id[node.id] = node

    for node in by_id.values():
        if node.parent_id is not None and node.parent_id not in by_id:
            raise HierarchyError(
                f"Node '{node.id}' references unknown parent '{node.parent_id}'"
            )
        if node.placement.lagrange_point is not None:
            if node.parent_id is None:
                raise HierarchyError(
                    f"Root node '{node.id}' cannot be placed at {node.placement.value}; "
                    f"roots sit at the origin"
                )
            anchor_id = node.effective_anchor_id
            if anchor_id is None:
                raise HierarchyError(
                    f"Node '{node.id}' is placed at {node.placement.value} "
                    f"but names no anchor body"
                )
            if anchor_id == node.id:
                raise CyclicHierarchyError([node.id, node.id])
            if anchor_id not in by_id:
                raise HierarchyError(
                    f"Node '{node.id}' references unknown anchor '{anchor_id}'"
                )
            if by_id[anchor_id].orbit is None:
                raise HierarchyError(
                    f"Anchor '{anchor_id}' of node '{node.id}' has no orbit"
                )
        if node.orbit is not None:
            validate_orbit(node.orbit)

    _find_cycles(by_id)
    return by_id


def _dependency_order(by_id: dict[str, Node], targets: Iterable[str]) -> list[str]:
    """Post-order of the resolution dependencies of targets (deps first)."""
    order: list[str] = []
    seen: set[str] = set()
    for target in targets:
        if target in seen:
            continue
        stack: list[tuple[str, bool]] = [(target, False)]
        while stack:
            node_id, expanded = stack.pop()
            if expanded:
                order.append(node_id)
                continue
            if node_id in seen:
                continue
            seen.add(node_id)
            stack.append((node_id, True))
            for dep in _dependencies(by_id[node_id], by_id):
                if dep not in seen:
                    stack.append((dep, False))
    return order


def _resolve(
    by_id: dict[str, Node],
    targets: Iterable[str],
    time_s: int | float,
) -> HierarchySnapshot:
    positions: dict[str, Vector] = {}
    velocities: dict[str, Vector] = {}
    warnings: dict[str, tuple[PropagationWarning, ...]] = {}

    for node_id in _dependency_order(by_id, targets):
        node = by_id[node_id]
        point = node.placement.lagrange_point

        if point is not None:
            anchor = by_id[node.effective_anchor_id]
            host_id = anchor.parent_id
            host_pos = positions[host_id] if host_id is not None else ZERO_VECTOR
            host_vel = velocities[host_id] if host_id is not None else ZERO_VECTOR
            solution = lagrange_point(anchor.orbit, host_pos, time_s, point)
            anchor_state = propagate_orbit(anchor.orbit, time_s)
            rotated_vel = rotate_about_axis(
                anchor_state.velocity_m_s,
                orbit_normal(anchor.orbit.elements),
                point.phase_rad,
            )
            positions[node_id] = solution.position_m
            velocities[node_id] = _add(host_vel, rotated_vel)
            if solution.warnings:
                warnings[node_id] = solution.warnings
            continue

        if node.parent_id is None:
            positions[node_id] = ZERO_VECTOR
            velocities[node_id] = ZERO_VECTOR
            continue

        parent_pos = positions[node.parent_id]
        parent_vel = velocities[node.parent_id]
        if node.orbit is None or node.placement is Placement.SURFACE:
            positions[node_id] = parent_pos
            velocities[node_id] = parent_vel
            continue

        result = propagate_orbit(node.orbit, time_s)
        positions[node_id] = _add(parent_pos, result.position_m)
        velocities[node_id] = _add(parent_vel, result.velocity_m_s)
        if result.warnings:
            warnings[node_id] = result.warnings

    logger.debug("Resolved %d nodes at t=%s", len(positions), time_s)
    return HierarchySnapshot(
        time_s=time_s,
        positions=positions,
        velocities=velocities,
        warnings=warnings,
    )


def resolve_positions(nodes: Iterable[Node], time_s: int | float) -> HierarchySnapshot:
    """
    Resolve the absolute position of every node at time_s.

    Roots sit at the origin. The graph is validated first; structural
    problems reject the whole graph before anything is propagated.

    Args:
        nodes: Flat collection of Nodes.
        time_s: Query time on the orbits' clock.

    Returns:
        HierarchySnapshot with positions, velocities and per-node warnings.
    """
    by_id = validate_graph(nodes)
    return _resolve(by_id, list(by_id), time_s)


def resolve_states(nodes: Iterable[Node], time_s: int | float) -> dict[str, tuple[Vector, Vector]]:
    """Absolute (position, velocity) of every node at time_s."""
    snapshot = resolve_positions(nodes, time_s)
    return {
        node_id: (pos, snapshot.velocities[node_id])
        for node_id, pos in snapshot.positions.items()
    }


def resolve_node(nodes: Iterable[Node], node_id: str, time_s: int | float) -> Vector:
    """Absolute position of one node, resolving only its dependency chain."""
    by_id = validate_graph(nodes)
    if node_id not in by_id:
        raise HierarchyError(f"Unknown node '{node_id}'")
    return _resolve(by_id, [node_id], time_s).positions[node_id]


def relative_position(snapshot: HierarchySnapshot, node_id: str, frame_id: str) -> Vector:
    """Position of node_id relative to frame_id (e.g. a moon relative to its planet)."""
    return _sub(snapshot.position_of(node_id), snapshot.position_of(frame_id))


def relative_velocity(snapshot: HierarchySnapshot, node_id: str, frame_id: str) -> Vector:
    """Velocity of node_id relative to frame_id."""
    try:
        return _sub(snapshot.velocities[node_id], snapshot.velocities[frame_id])
    except KeyError as e:
        raise HierarchyError(f"Node {e} not in snapshot") from None


def ancestor_chain(nodes: Iterable[Node], node_id: str) -> list[str]:
    """Ids from node_id up to its root, inclusive."""
    by_id = validate_graph(nodes)
    if node_id not in by_id:
        raise HierarchyError(f"Unknown node '{node_id}'")
    chain = [node_id]
    while by_id[chain[-1]].parent_id is not None:
        chain.append(by_id[chain[-1]].parent_id)
    return chain


def dominant_body(
    nodes: Iterable[Node],
    snapshot: HierarchySnapshot,
    point_m: Vector,
) -> Node | None:
    """
    Body or barycenter whose Hill sphere most tightly contains point_m.

    Roots have an unbounded sphere and win only when nothing smaller
    contains the point. Nodes without mass have no sphere of their own.

    Returns:
        The dominant Node, or None if no body or barycenter contains it.
    """
    by_id = validate_graph(nodes)
    best: Node | None = None
    best_radius = math.inf
    for node in by_id.values():
        if node.kind is NodeKind.CONSTRUCT or node.id not in snapshot.positions:
            continue
        pos = snapshot.positions[node.id]
        distance = math.dist(point_m, pos)
        if node.parent_id is None:
            radius = math.inf
        else:
            parent = by_id[node.parent_id]
            if node.mass_kg <= 0 or parent.mass_kg <= 0:
                continue
            separation = math.dist(pos, snapshot.positions.get(parent.id, ZERO_VECTOR))
            radius = hill_radius(separation, node.mass_kg, parent.mass_kg)
        if distance <= radius and (best is None or radius < best_radius):
            best = node
            best_radius = radius
    return best
