"""Tests for the sync-run phase state machine."""

from __future__ import annotations

import importlib
import warnings

import pytest

from ragsync.sync.fsm import SyncRunSM, create_run_fsm


class TestSyncRunTransitions:
    """Legal run paths succeed; skipping a phase raises."""

    def test_upload_path(self):
        fsm = create_run_fsm()
        assert fsm.current_state.value == "idle"
        fsm.begin()
        fsm.plan()
        fsm.drive()
        fsm.finish()
        assert fsm.current_state.value == "complete"

    def test_cached_path(self):
        fsm = create_run_fsm()
        fsm.begin()
        fsm.use_cache()
        fsm.finish()
        assert fsm.current_state.value == "complete"

    @pytest.mark.parametrize("state", ["resolving", "diffing", "uploading", "cached"])
    def test_fail_from_working_phase(self, state):
        fsm = create_run_fsm(state)
        fsm.fail()
        assert fsm.current_state.value == "failed"

    def test_illegal_idle_to_uploading(self):
        fsm = create_run_fsm()
        with pytest.raises(Exception):
            fsm.drive()

    def test_illegal_finish_from_diffing(self):
        fsm = create_run_fsm("diffing")
        with pytest.raises(Exception):
            fsm.finish()

    def test_illegal_fail_from_complete(self):
        fsm = create_run_fsm("complete")
        with pytest.raises(Exception):
            fsm.fail()

    def test_state_values(self):
        values = {s.value for s in SyncRunSM.states}
        assert values == {"idle", "resolving", "diffing", "uploading", "cached", "complete", "failed"}

    @pytest.mark.parametrize("state", ["complete", "failed"])
    def test_reset_from_finished_run(self, state):
        fsm = create_run_fsm(state)
        fsm.reset()
        assert fsm.current_state.value == "idle"


class TestSyncRunDefinition:
    """The machine definition itself is valid under strict checking."""

    def test_every_state_has_an_exit(self):
        for state in SyncRunSM.states:
            assert state.transitions, f"{state.id} has no outgoing transition"

    def test_definition_emits_no_warning(self):
        import ragsync.sync.fsm as fsm_module

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            reloaded = importlib.reload(fsm_module)
        assert reloaded.create_run_fsm().current_state.value == "idle"
