"""Durable storage for the persisted subset of a simulation.

A record is one JSON document named after the configured record name and
keyed per user/device. It is loaded wholesale at startup and overwritten
wholesale after each transition via ``attach_store``.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..config.schema import Persistence
from .state_machine import SimulationStateMachine

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"


class StateStore:
    """load/save/clear contract for persisted simulation records."""

    def load(self, key: str = DEFAULT_KEY) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, data: Dict[str, Any], key: str = DEFAULT_KEY):
        raise NotImplementedError

    def clear(self, key: str = DEFAULT_KEY):
        raise NotImplementedError


class MemoryStateStore(StateStore):
    """Process-local store."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}

    def load(self, key: str = DEFAULT_KEY) -> Optional[Dict[str, Any]]:
        record = self.records.get(key)
        return json.loads(json.dumps(record)) if record is not None else None

    def save(self, data: Dict[str, Any], key: str = DEFAULT_KEY):
        self.records[key] = json.loads(json.dumps(data))

    def clear(self, key: str = DEFAULT_KEY):
        self.records.pop(key, None)


class JsonFileStore(StateStore):
    """One JSON file per key under a directory."""

    def __init__(self, directory: str, record_name: str = "future-you-simulation"):
        self.directory = Path(directory)
        self.record_name = record_name

    @classmethod
    def from_settings(cls, settings: Persistence) -> 'JsonFileStore':
        return cls(settings.directory, settings.record_name)

    def path_for(self, key: str = DEFAULT_KEY) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key) or DEFAULT_KEY
        return self.directory / f"{self.record_name}-{safe_key}.json"

    def load(self, key: str = DEFAULT_KEY) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as exc:
            logger.warning("Ignoring unreadable record at %s: %s", path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed record at %s", path)
            return None
        return data

    def save(self, data: Dict[str, Any], key: str = DEFAULT_KEY):
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    def clear(self, key: str = DEFAULT_KEY):
        path = self.path_for(key)
        if path.exists():
            path.unlink()


def attach_store(
    machine: SimulationStateMachine,
    store: StateStore,
    key: str = DEFAULT_KEY,
    load: bool = True,
) -> Callable[[], None]:
    """
    Wire ``store`` to ``machine``: restore now, save after every transition.

    Args:
        machine: State machine to persist
        store: Record store
        key: User/device key
        load: Restore an existing record before subscribing

    Returns:
        Function that detaches the store
    """
    if load:
        record = store.load(key)
        if record is not None:
            machine.restore(record)
            logger.debug("Restored simulation record %r in phase %s", key, machine.phase.value)

    return machine.subscribe(lambda _state: store.save(machine.to_persisted(), key))
