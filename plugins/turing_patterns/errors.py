"""
Error types for the Turing pattern engine

All errors are raised locally and deterministically from the inputs;
nothing in the engine retries on its own. Re-seeding after a divergence,
or fixing a bad configuration, is left to the caller.
"""


class ConfigurationError(ValueError):
    """Invalid grid dimensions or simulation parameters."""


class ShapeMismatchError(ValueError):
    """A seed grid or field does not match the configured grid size."""


class DivergenceDetected(ArithmeticError):
    """Non-finite values (NaN/Inf) appeared in a field after a step.

    Usually means dt is above the explicit Euler stability limit for
    the current diffusion coefficients.
    """

    def __init__(self, message, step=None):
        super().__init__(message)
        self.step = step


class StabilityWarning(RuntimeWarning):
    """dt exceeds the diffusion stability bound dx^2 / (4 * max(Da, Db))."""
