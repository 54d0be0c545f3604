"""
Simulation - headless driver for one Turing pattern run

Owns the grid, the parameters, the double-buffered fields, the
integrator and the run state, and exposes the cooperative driving loop:
advance one batch, observe, repeat. Renderers and exporters only ever
see fields between batches, after the buffer swap.

Usage:
    from turing_patterns.simulator import Simulation
    sim = Simulation(200, 200, rng=42)
    sim.seed_noise()
    reason = sim.run()
    polylines = sim.contours()
"""

import warnings

import numpy as np

from .contour import extract
from .convergence import RunState, StopReason, evaluate
from .errors import ConfigurationError, DivergenceDetected, StabilityWarning
from .field_pair import FieldPair
from .integrator import Integrator
from .params import SimulationParameters
from .presets import get_preset
from .render import DEFAULT_STEEPNESS, to_image
from .seeder import DEFAULT_NOISE_AMPLITUDE, Seeder


END_MESSAGES = {
    StopReason.CONVERGED: "pattern stabilized",
    StopReason.STEP_LIMIT: "step budget exhausted",
    StopReason.DIVERGED: "diverged (non-finite values)",
}


class Simulation:
    """One reaction-diffusion run on a width x height periodic grid."""

    def __init__(self, width, height, params=None, rng=None,
                 dtype=np.float32, divergence_guard=True, verbose=False):
        """
        Args:
            width, height: grid size (fixed for the lifetime of the run)
            params: SimulationParameters; the caller may keep a reference
                and edit it between batches
            rng: numpy Generator or int seed for the seeder
            dtype: field precision (float32 or float64)
            divergence_guard: stop and raise on NaN/Inf after a batch
            verbose: print end-of-run messages
        """
        self.fields = FieldPair(width, height, dtype=dtype)
        self.params = params if params is not None else SimulationParameters()
        self.params.validate()
        self.integrator = Integrator(self.fields, check_finite=divergence_guard)
        self.seeder = Seeder(rng)
        self.state = RunState()
        self.verbose = verbose
        self._brightness = None

    @classmethod
    def from_preset(cls, name, size=None, **kwargs):
        """Build a Simulation from a named preset.

        Args:
            name: preset key (see presets.PRESET_ORDER)
            size: optional (width, height) overriding the preset grid
        """
        p = get_preset(name)
        if p is None:
            raise ConfigurationError(f"Unknown preset: {name!r}")
        width, height = size if size is not None else p["size"]
        base = kwargs.pop("params", None)
        # Preset overrides go on a copy; the caller's object is left alone
        params = base.copy() if base is not None else SimulationParameters()
        params.set_params(**p["params"])
        return cls(width, height, params=params, **kwargs)

    @property
    def width(self):
        return self.fields.width

    @property
    def height(self):
        return self.fields.height

    # -- seeding ----------------------------------------------------------

    def seed_noise(self, amplitude=DEFAULT_NOISE_AMPLITUDE):
        self.seeder.noise(self.fields, amplitude=amplitude, state=self.state)

    def seed_image(self, brightness):
        """Seed from a brightness grid and remember it for reset()."""
        self.seeder.image(self.fields, brightness, state=self.state)
        self._brightness = np.array(brightness, dtype=np.float64)

    def clear_image(self):
        self._brightness = None

    def reset(self):
        """Re-seed from the remembered image, or from noise."""
        if self._brightness is not None:
            self.seeder.image(self.fields, self._brightness, state=self.state)
        else:
            self.seed_noise()

    # -- run control ------------------------------------------------------

    def start(self):
        if not self.params.is_stable():
            warnings.warn(
                f"dt={self.params.dt} exceeds the diffusion stability limit "
                f"{self.params.stability_limit():.6g}; the run may diverge",
                StabilityWarning, stacklevel=2)
        self.state.running = True
        self.state.stop_reason = None

    def pause(self):
        self.state.running = False

    def toggle(self):
        if self.state.running:
            self.pause()
        else:
            self.start()
        return self.state.running

    def restart(self):
        """Reset the fields and start running."""
        self.reset()
        self.start()

    def advance(self):
        """One driving iteration: a batch of micro-steps plus the stop check.

        Returns:
            StopReason for the batch, or None when paused.
        """
        state = self.state
        if not state.running:
            return None
        params = self.params
        params.validate()

        # Never step past the budget
        remaining = max(0, int(params.max_steps) - state.current_step)
        batch = min(int(params.steps_per_frame), remaining)

        metric = None
        if batch > 0:
            try:
                metric = self.integrator.step(params, steps=batch)
            except DivergenceDetected as e:
                state.current_step += batch
                e.step = state.current_step
                self._finish(StopReason.DIVERGED)
                raise
            state.current_step += batch
            state.last_metric = metric
        elif remaining > 0:
            # steps_per_frame == 0: nothing moved, nothing to judge
            return StopReason.CONTINUE

        reason = evaluate(metric, state.current_step, params.max_steps,
                          params.convergence_threshold)
        if reason.stopped:
            self._finish(reason)
        return reason

    def run(self, max_frames=None, on_frame=None):
        """Drive until the run stops or max_frames batches have run.

        Args:
            max_frames: optional cap on driving iterations
            on_frame: callback(sim) after each batch (renderer hook)

        Returns:
            Final StopReason (CONTINUE if max_frames cut the run short).
        """
        budget_left = self.params.max_steps > self.state.current_step
        if self.params.steps_per_frame == 0 and budget_left and max_frames is None:
            raise ConfigurationError(
                "steps_per_frame is 0: an unbounded run would never finish")
        if not self.state.running:
            self.start()

        reason = StopReason.CONTINUE
        frames = 0
        while self.state.running:
            if max_frames is not None and frames >= max_frames:
                break
            reason = self.advance()
            frames += 1
            if on_frame is not None:
                on_frame(self)
        return reason

    def _finish(self, reason):
        self.state.stop(reason)
        if self.verbose:
            print(f"[turing] {END_MESSAGES[reason]} at step "
                  f"{self.state.current_step}")

    # -- observation ------------------------------------------------------

    def field_a(self):
        return self.fields.snapshot("a")

    def field_b(self):
        return self.fields.snapshot("b")

    def contours(self, threshold=None, close_boundary=True):
        """Isolines of A at the bias level (or an explicit threshold)."""
        if threshold is None:
            threshold = self.params.bias
        return extract(self.fields.view("a"), self.width, self.height,
                       threshold, close_boundary=close_boundary)

    def render(self, steepness=DEFAULT_STEEPNESS):
        """Greyscale PIL image of A thresholded around the bias."""
        return to_image(self.fields.view("a"), self.params.bias, steepness)

    @property
    def progress(self):
        """Fraction of the step budget used, 0..1."""
        if self.params.max_steps <= 0:
            return 1.0
        return min(1.0, self.state.current_step / self.params.max_steps)

    @property
    def stats(self):
        """Return current run statistics."""
        a = self.fields.view("a")
        return {
            "step": self.state.current_step,
            "running": self.state.running,
            "stop_reason": self.state.stop_reason.value if self.state.stop_reason else None,
            "last_metric": self.state.last_metric,
            "mean": float(a.mean()),
            "min": float(a.min()),
            "max": float(a.max()),
            "coverage": float((a > self.params.bias).sum()) / a.size,
        }
