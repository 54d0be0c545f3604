"""
Brightness Grids from Images

Decodes an image with Pillow, resamples it to the simulation grid and
returns per-pixel brightness in [0, 1] as the plain mean of R, G and B.
The result feeds Seeder.image().
"""

import numpy as np
from PIL import Image


def load_brightness(source, width, height):
    """
    Args:
        source: file path, file object or PIL Image
        width, height: simulation grid size

    Returns:
        (height, width) float64 array in [0, 1]
    """
    if isinstance(source, Image.Image):
        img = source
    else:
        img = Image.open(source)
    if img.mode in ("RGBA", "LA", "P"):
        # Transparent pixels read as black
        img = img.convert("RGBA")
        backdrop = Image.new("RGBA", img.size, (0, 0, 0, 255))
        img = Image.alpha_composite(backdrop, img)
    img = img.convert("RGB").resize((width, height), Image.Resampling.BILINEAR)
    rgb = np.asarray(img, dtype=np.float64)
    return rgb.mean(axis=2) / 255.0
