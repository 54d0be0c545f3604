"""
Run State and Termination

RunState is the driver's step counter and run flag. evaluate() is the
pure stop decision made after each batch:

  metric < threshold       -> CONVERGED   ("pattern stabilized")
  current_step >= max      -> STEP_LIMIT  ("step budget exhausted")
  otherwise                -> CONTINUE

Both stop reasons mean no further automatic stepping. When both hold at
once, CONVERGED is reported. The metric only covers the last micro-step
of a batch, so a slowly decaying oscillation can stop a little early or
late; termination is advisory.
"""

import enum


DEFAULT_CONVERGENCE_THRESHOLD = 1e-5


class StopReason(enum.Enum):
    CONTINUE = "continue"
    CONVERGED = "converged"
    STEP_LIMIT = "step_limit"
    DIVERGED = "diverged"

    @property
    def stopped(self):
        return self is not StopReason.CONTINUE


def evaluate(metric, current_step, max_steps,
             threshold=DEFAULT_CONVERGENCE_THRESHOLD):
    """Decide whether the driving loop keeps stepping.

    Args:
        metric: convergence metric from the last batch, or None when no
            micro-step ran (treated as "unchanged", never as converged)
        current_step: steps taken since the last seed
        max_steps: step budget
        threshold: convergence threshold on the metric
    """
    if metric is not None and metric < threshold:
        return StopReason.CONVERGED
    if current_step >= max_steps:
        return StopReason.STEP_LIMIT
    return StopReason.CONTINUE


class RunState:
    """Step counter, run flag and the reason the last run stopped."""

    def __init__(self):
        self.current_step = 0
        self.running = False
        self.stop_reason = None
        self.last_metric = None

    def reset_step(self):
        """Zero the step counter; the run flag is left alone."""
        self.current_step = 0
        self.stop_reason = None
        self.last_metric = None

    def stop(self, reason):
        self.running = False
        self.stop_reason = reason

    def __repr__(self):
        return (f"RunState(current_step={self.current_step}, "
                f"running={self.running}, stop_reason={self.stop_reason})")
