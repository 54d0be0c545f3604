"""
Initial Conditions

Two seeding modes, one per call:
  noise  - A and B independently uniform(-0.5, 0.5) * amplitude
  image  - A = brightness * 2 - 1 (maps [0, 1] -> [-1, 1]), B = small noise

Randomness always comes from an injected numpy Generator so runs can be
reproduced by seeding it.
"""

import numpy as np

from .errors import ShapeMismatchError


DEFAULT_NOISE_AMPLITUDE = 0.1


class Seeder:
    """Fills a FieldPair from noise or a brightness grid."""

    def __init__(self, rng=None):
        """
        Args:
            rng: numpy Generator, or an int seed for default_rng.
                None draws fresh OS entropy.
        """
        if rng is None or isinstance(rng, (int, np.integer)):
            rng = np.random.default_rng(rng)
        self.rng = rng

    def _noise(self, shape, amplitude):
        return (self.rng.random(shape) - 0.5) * amplitude

    def noise(self, fields, amplitude=DEFAULT_NOISE_AMPLITUDE, state=None):
        """Seed both species with uniform noise centred on zero."""
        fields.load(a=self._noise(fields.shape, amplitude),
                    b=self._noise(fields.shape, amplitude))
        if state is not None:
            state.reset_step()

    def image(self, fields, brightness, state=None):
        """Seed A from a brightness grid in [0, 1], B from noise.

        Args:
            fields: FieldPair to fill
            brightness: (height, width) array, or flat row-major array
                of width*height values, already resampled to the grid
            state: optional RunState whose step counter is reset
        """
        brightness = np.asarray(brightness, dtype=np.float64)
        if brightness.shape != fields.shape:
            if brightness.ndim == 1 and brightness.size == fields.size:
                brightness = brightness.reshape(fields.shape)
            else:
                raise ShapeMismatchError(
                    f"Brightness grid has shape {brightness.shape}, "
                    f"expected {fields.shape} (height, width)")
        fields.load(a=brightness * 2.0 - 1.0,
                    b=self._noise(fields.shape, DEFAULT_NOISE_AMPLITUDE))
        if state is not None:
            state.reset_step()
