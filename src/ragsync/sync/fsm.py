"""Phase state machine for one sync run.

Used to validate the order of phases the orchestrator walks through and
to label progress events. It performs no I/O and has no callbacks.
"""

from __future__ import annotations

from statemachine import State, StateMachine


class SyncRunSM(StateMachine):
    """Phases of a sync run.

    States:
        idle      -- Run created, lock not yet taken.
        resolving -- Finding, reconciling or creating the target store.
        diffing   -- Listing the source directory and consulting the ledger.
        uploading -- Driving documents through the uploader.
        cached    -- Store already populated and no upload requested.
        complete  -- Result aggregated.
        failed    -- A setup-level error ended the run.

    No state has ``final=True``; ``reset`` returns a finished run to idle.
    """

    idle = State("idle", initial=True, value="idle")
    resolving = State("resolving", value="resolving")
    diffing = State("diffing", value="diffing")
    uploading = State("uploading", value="uploading")
    cached = State("cached", value="cached")
    complete = State("complete", value="complete")
    failed = State("failed", value="failed")

    begin = idle.to(resolving)
    plan = resolving.to(diffing)
    use_cache = resolving.to(cached)
    drive = diffing.to(uploading)
    finish = uploading.to(complete) | cached.to(complete)
    fail = (
        resolving.to(failed)
        | diffing.to(failed)
        | uploading.to(failed)
        | cached.to(failed)
    )
    reset = complete.to(idle) | failed.to(idle)


def create_run_fsm(current_state: str = "idle") -> SyncRunSM:
    """Create a run FSM positioned at *current_state*."""
    return SyncRunSM(start_value=current_state)
