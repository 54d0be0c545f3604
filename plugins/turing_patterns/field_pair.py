"""
Double-Buffered Field Storage

Holds the two species (A: fast-diffusing activator, B: slow-diffusing
inhibitor) plus one scratch twin for each. The integrator writes the
next state into the scratch buffers, then swap() flips which buffer is
live, so an observer only ever sees a fully written step.

All spatial access wraps periodically (torus):
  index(x, y) = (y mod height) * width + (x mod width)
"""

import numpy as np

from .errors import ConfigurationError, ShapeMismatchError


SPECIES = ("a", "b")


class FieldPair:
    """Live fields A, B and their scratch twins on a periodic grid."""

    def __init__(self, width, height, dtype=np.float32):
        if int(width) != width or int(height) != height:
            raise ConfigurationError(
                f"Grid dimensions must be integers, got {width!r}x{height!r}")
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.dtype = np.dtype(dtype)

        shape = (self.height, self.width)
        # _buffers[species][slot]; slot self._live is the observable one
        self._buffers = {
            name: [np.zeros(shape, dtype=self.dtype),
                   np.zeros(shape, dtype=self.dtype)]
            for name in SPECIES
        }
        self._live = 0

    @property
    def shape(self):
        return (self.height, self.width)

    @property
    def size(self):
        return self.width * self.height

    def index(self, x, y):
        """Row-major flat index with periodic wrap (always non-negative)."""
        return (y % self.height) * self.width + (x % self.width)

    def get(self, x, y, species="a"):
        return self._live_buffer(species).flat[self.index(x, y)].item()

    def set(self, x, y, value, species="a"):
        self._live_buffer(species).flat[self.index(x, y)] = value

    def swap(self):
        """Exchange live and scratch roles for both species (no copy)."""
        self._live ^= 1

    def load(self, a=None, b=None):
        """Copy arrays into the live fields. Each must match the grid shape."""
        for name, values in (("a", a), ("b", b)):
            if values is None:
                continue
            values = np.asarray(values)
            if values.shape != self.shape:
                if values.ndim == 1 and values.size == self.size:
                    values = values.reshape(self.shape)
                else:
                    raise ShapeMismatchError(
                        f"Field {name!r} has shape {values.shape}, "
                        f"expected {self.shape}")
            self._live_buffer(name)[...] = values

    def fill(self, a=None, b=None):
        """Set every live cell of A and/or B to a constant."""
        if a is not None:
            self._live_buffer("a").fill(a)
        if b is not None:
            self._live_buffer("b").fill(b)

    def snapshot(self, species="a"):
        """Independent copy of a live field, shape (height, width)."""
        return self._live_buffer(species).copy()

    def view(self, species="a"):
        """Read-only view of a live field.

        Only valid until the next swap(); renderers that keep the data
        across steps should use snapshot().
        """
        v = self._live_buffer(species).view()
        v.flags.writeable = False
        return v

    def all_finite(self):
        return bool(np.isfinite(self._live_buffer("a")).all()
                    and np.isfinite(self._live_buffer("b")).all())

    # -- integrator access ------------------------------------------------

    def _live_buffer(self, species):
        try:
            return self._buffers[species][self._live]
        except KeyError:
            raise ValueError(
                f"Unknown species {species!r}, expected one of {SPECIES}") from None

    def _scratch_buffer(self, species):
        return self._buffers[species][self._live ^ 1]
