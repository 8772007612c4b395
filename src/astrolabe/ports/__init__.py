# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Port interfaces for system and temporal-state I/O.

Adapters implement these to handle different storage formats.
"""
from typing import Protocol, runtime_checkable

from astrolabe.domain.hierarchy import Node
from astrolabe.domain.rulepack import RulePack
from astrolabe.domain.temporal_state import TemporalState


@runtime_checkable
class SystemReader(Protocol):
    """Port for reading a system graph and its rule pack."""

    def read_system(self, path: str) -> list[Node]:
        """Read and parse a system graph file."""
        ...

    def read_rule_pack(self, path: str) -> RulePack:
        """Read rule-pack constants."""
        ...


@runtime_checkable
class TemporalStore(Protocol):
    """Port for persisting the temporal state."""

    def load_temporal_state(self, path: str) -> TemporalState:
        """Load a temporal state, restoring builtin calendars."""
        ...

    def save_temporal_state(self, state: TemporalState, path: str) -> None:
        """Write a temporal state."""
        ...
