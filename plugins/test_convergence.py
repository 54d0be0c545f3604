"""
Tests for the stop decision.
"""

from turing_patterns.convergence import (
    DEFAULT_CONVERGENCE_THRESHOLD, RunState, StopReason, evaluate,
)


def test_continue_while_changing():
    assert evaluate(0.01, 100, 5000) is StopReason.CONTINUE


def test_converged_below_threshold():
    assert evaluate(DEFAULT_CONVERGENCE_THRESHOLD / 2, 100, 5000) is StopReason.CONVERGED
    assert evaluate(DEFAULT_CONVERGENCE_THRESHOLD, 100, 5000) is StopReason.CONTINUE


def test_step_limit():
    assert evaluate(0.01, 5000, 5000) is StopReason.STEP_LIMIT
    assert evaluate(0.01, 5005, 5000) is StopReason.STEP_LIMIT


def test_converged_wins_when_both_hold():
    assert evaluate(0.0, 5000, 5000) is StopReason.CONVERGED


def test_custom_threshold():
    assert evaluate(1e-3, 10, 100, threshold=1e-2) is StopReason.CONVERGED


def test_missing_metric_is_not_convergence():
    assert evaluate(None, 0, 10) is StopReason.CONTINUE
    assert evaluate(None, 10, 10) is StopReason.STEP_LIMIT


def test_stopped_flag():
    assert not StopReason.CONTINUE.stopped
    assert StopReason.CONVERGED.stopped
    assert StopReason.STEP_LIMIT.stopped
    assert StopReason.DIVERGED.stopped


def test_run_state_lifecycle():
    state = RunState()
    assert state.current_step == 0 and state.running is False

    state.running = True
    state.current_step = 40
    state.stop(StopReason.CONVERGED)
    assert state.running is False
    assert state.stop_reason is StopReason.CONVERGED

    state.reset_step()
    assert state.current_step == 0
    assert state.stop_reason is None
