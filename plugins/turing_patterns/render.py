"""
Threshold Rendering

Maps field A to a greyscale image with a steep logistic curve centred on
the bias level:

  intensity = 1 / (1 + exp(-k * (v - bias)))

Higher k gives a sharper black/white edge with less grey. Values above
the bias render light, values below render dark.
"""

import numpy as np
from PIL import Image


DEFAULT_STEEPNESS = 20.0


def intensity(field, bias, steepness=DEFAULT_STEEPNESS):
    """Logistic mapping of a field to [0, 1].

    Written as 0.5 * (1 + tanh(x / 2)), which is the same curve but
    cannot overflow for large |v - bias|.
    """
    x = np.asarray(field, dtype=np.float64) - bias
    return 0.5 * (1.0 + np.tanh(0.5 * steepness * x))


def to_image(field, bias, steepness=DEFAULT_STEEPNESS):
    """Render a (height, width) field as an 8-bit greyscale PIL image."""
    field = np.asarray(field)
    if field.ndim != 2:
        raise ValueError(f"Expected a 2D field, got shape {field.shape}")
    values = intensity(field, bias, steepness) * 255.0
    # Non-finite cells (diverged run) render black instead of garbage
    values[~np.isfinite(field)] = 0.0
    pixels = np.clip(np.rint(values), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)


def save_png(path, field, bias, steepness=DEFAULT_STEEPNESS, scale=1):
    """Render and save as PNG, optionally upscaled with nearest-neighbour."""
    img = to_image(field, bias, steepness)
    if scale != 1:
        img = img.resize((img.width * scale, img.height * scale),
                         Image.Resampling.NEAREST)
    img.save(path, format="PNG")
    return path
