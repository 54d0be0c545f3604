"""
Simulation Parameters

Mutable configuration read by the integrator on every batch. The caller
owns the object and may edit any value between batches (for example a
slider moving Da mid-run); the engine never keeps its own copy.

Defaults are the classic FitzHugh-Nagumo Turing setup:
  Da=1, Db=100, alpha=-0.005, beta=10, dt=0.001, dx=1

Stability:
  Explicit Euler on the 5-point Laplacian needs roughly
      dt <= dx^2 / (4 * max(Da, Db))
  for the diffusion term alone. The bound is exposed as a diagnostic,
  dt is never clamped.
"""

import math
import numbers

from .errors import ConfigurationError


DEFAULTS = {
    "Da": 1.0,
    "Db": 100.0,
    "alpha": -0.005,
    "beta": 10.0,
    "dt": 0.001,
    "dx": 1.0,
    "steps_per_frame": 5,
    "max_steps": 5000,
    "bias": -0.05,
    "convergence_threshold": 1e-5,
}

PARAM_KEYS = list(DEFAULTS)

_INTEGER_KEYS = ("steps_per_frame", "max_steps")
_POSITIVE_KEYS = ("dt", "dx")


def check_params(values):
    """Raise ConfigurationError unless every value in the dict can be run.

    All parameters must be finite real numbers; dt and dx positive;
    steps_per_frame and max_steps non-negative integers; the
    convergence threshold non-negative.
    """
    for key in PARAM_KEYS:
        value = values[key]
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ConfigurationError(f"{key} must be a real number, got {value!r}")
        if not math.isfinite(value):
            raise ConfigurationError(f"{key} must be finite, got {value!r}")
    for key in _POSITIVE_KEYS:
        if not values[key] > 0:
            raise ConfigurationError(f"{key} must be positive, got {values[key]!r}")
    for key in _INTEGER_KEYS:
        value = values[key]
        if int(value) != value:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}")
        if value < 0:
            raise ConfigurationError(f"{key} must be >= 0, got {value!r}")
    if values["convergence_threshold"] < 0:
        raise ConfigurationError(
            f"convergence_threshold must be >= 0, got {values['convergence_threshold']!r}")


class SimulationParameters:
    """Diffusion, reaction, time stepping and threshold settings."""

    def __init__(self, **params):
        for key, value in DEFAULTS.items():
            setattr(self, key, value)
        self.set_params(**params)

    def set_params(self, **params):
        """Update any subset of parameters.

        The merged values are checked before anything is assigned, so a
        rejected update leaves the object exactly as it was.
        """
        unknown = sorted(set(params) - set(DEFAULTS))
        if unknown:
            raise ConfigurationError(
                f"Unknown parameter(s): {', '.join(unknown)}. "
                f"Expected one of: {', '.join(PARAM_KEYS)}")
        merged = self.get_params()
        merged.update(params)
        check_params(merged)
        for key, value in params.items():
            setattr(self, key, value)

    def get_params(self):
        """Return dict of current parameter values."""
        return {key: getattr(self, key) for key in PARAM_KEYS}

    def copy(self):
        return SimulationParameters(**self.get_params())

    def validate(self):
        """Raise ConfigurationError if the current values cannot be run."""
        check_params(self.get_params())

    def stability_limit(self):
        """Largest dt for which pure diffusion stays bounded."""
        d_max = max(abs(self.Da), abs(self.Db))
        if d_max == 0:
            return math.inf
        return self.dx * self.dx / (4.0 * d_max)

    def is_stable(self):
        return self.dt <= self.stability_limit()

    def __repr__(self):
        body = ", ".join(f"{k}={v!r}" for k, v in self.get_params().items())
        return f"SimulationParameters({body})"
