"""Tests for simulation record stores."""

import json
import os
import sys

import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from futureyou.config.schema import Persistence
from futureyou.engine.models import UserProfile
from futureyou.simulation.persistence import JsonFileStore, MemoryStateStore, attach_store
from futureyou.simulation.state_machine import SimulationPhase, SimulationStateMachine


def started_machine():
    machine = SimulationStateMachine(rng=np.random.default_rng(1))
    machine.start(UserProfile.create("Robin", 30), 30, 60)
    return machine


class TestMemoryStateStore:
    """Process-local store."""

    def test_missing_key_loads_none(self):
        assert MemoryStateStore().load("nobody") is None

    def test_records_are_copies(self):
        store = MemoryStateStore()
        record = {"currentAge": 30, "timeline": []}
        store.save(record)
        record["timeline"].append("mutated")
        loaded = store.load()
        assert loaded == {"currentAge": 30, "timeline": []}
        loaded["currentAge"] = 99
        assert store.load()["currentAge"] == 30

    def test_clear(self):
        store = MemoryStateStore()
        store.save({"a": 1}, "k")
        store.clear("k")
        assert store.load("k") is None


class TestJsonFileStore:
    """One JSON file per key."""

    def test_save_and_load(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save({"currentAge": 31}, "user-1")
        assert store.path_for("user-1") == tmp_path / "future-you-simulation-user-1.json"
        assert store.load("user-1") == {"currentAge": 31}
        assert not list(tmp_path.glob("*.tmp"))

    def test_key_is_sanitized(self, tmp_path):
        store = JsonFileStore(str(tmp_path), "sim")
        assert store.path_for("../etc/passwd").parent == tmp_path
        assert store.path_for("a b").name == "sim-a_b.json"

    def test_creates_directory(self, tmp_path):
        store = JsonFileStore.from_settings(Persistence(directory=str(tmp_path / "nested" / "dir")))
        store.save({"x": 1})
        assert (tmp_path / "nested" / "dir" / "future-you-simulation-default.json").exists()

    def test_malformed_record_is_ignored(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.path_for().write_text(json.dumps([1, 2, 3]))
        assert store.load() is None

    def test_truncated_record_is_ignored(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.path_for("lee").write_text('{"profile": {"name": "Le')
        assert store.load("lee") is None

    def test_corrupt_record_starts_fresh(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.path_for().write_text("not json at all")
        machine = SimulationStateMachine()
        attach_store(machine, store)
        assert machine.phase is SimulationPhase.IDLE
        machine.start(UserProfile.create("Robin", 30), 30, 60)
        assert store.load()["profile"]["name"] == "Robin"

    def test_clear_missing_is_noop(self, tmp_path):
        JsonFileStore(str(tmp_path)).clear("ghost")


class TestAttachStore:
    """Save after every transition, restore at startup."""

    def test_transitions_are_saved(self):
        store = MemoryStateStore()
        machine = SimulationStateMachine()
        attach_store(machine, store)
        assert store.load() is None
        machine.start(UserProfile.create("Robin", 30), 30, 60)
        assert store.load()["profile"]["name"] == "Robin"
        machine.advance_age(5)
        assert store.load()["currentAge"] == 35

    def test_existing_record_is_restored(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        machine = started_machine()
        machine.advance_age(4)
        store.save(machine.to_persisted(), "robin")

        restored = SimulationStateMachine()
        attach_store(restored, store, "robin")
        assert restored.phase is SimulationPhase.PLAYING
        assert restored.state.current_age == 34
        assert restored.state.profile.name == "Robin"

    def test_reset_persists_empty_record(self):
        store = MemoryStateStore()
        machine = started_machine()
        attach_store(machine, store, load=False)
        machine.reset()
        record = store.load()
        assert record["profile"] is None
        assert record["timeline"] == []
        assert record["simulationComplete"] is False

    def test_detach_stops_saving(self):
        store = MemoryStateStore()
        machine = SimulationStateMachine()
        detach = attach_store(machine, store)
        detach()
        machine.start(UserProfile.create("Robin", 30), 30, 60)
        assert store.load() is None
