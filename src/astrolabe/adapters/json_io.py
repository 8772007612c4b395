# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON file I/O adapter.

Reads system graphs and rule packs, reads and writes temporal state.
Large clock values travel as decimal strings.
"""
import json
import logging
from typing import Any

from astrolabe.domain.hierarchy import Node
from astrolabe.domain.rulepack import RulePack
from astrolabe.domain.serialization import nodes_from_mapping
from astrolabe.domain.temporal_state import (
    TemporalState,
    temporal_state_from_mapping,
    temporal_state_to_mapping,
)
from astrolabe.ports import SystemReader, TemporalStore

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Any:
    with open(path, encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from None


class JsonSystemReader(SystemReader):
    """Reads system graphs and rule packs from JSON files."""

    def read_system(self, path: str) -> list[Node]:
        nodes = nodes_from_mapping(_read_json(path))
        logger.info("Loaded %d nodes from %s", len(nodes), path)
        return nodes

    def read_rule_pack(self, path: str) -> RulePack:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: rule pack must be a JSON object")
        return RulePack.from_mapping(data)


class JsonTemporalStore(TemporalStore):
    """Reads and writes temporal state as JSON."""

    def load_temporal_state(self, path: str) -> TemporalState:
        data = _read_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: temporal state must be a JSON object")
        return temporal_state_from_mapping(data)

    def save_temporal_state(self, state: TemporalState, path: str) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(temporal_state_to_mapping(state), f, indent=2, ensure_ascii=False)
        logger.debug("Saved temporal state to %s", path)
