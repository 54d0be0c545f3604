"""
Marching Squares Isolines

Turns a sampled scalar field into polylines along field == threshold.

Each lattice cell has four sample corners. Corner bits:
  1 = (x, y)    2 = (x+1, y)    4 = (x+1, y+1)    8 = (x, y+1)
and four edges:
  0 = top (1-2)   1 = right (2-4)   2 = bottom (8-4)   3 = left (1-8)

A corner is "above" when value > threshold (equal counts as below), so a
crossed edge always has two distinct end values. The crossing point is
linear interpolation along the edge, t = (threshold - vA) / (vB - vA).

Saddle cells (cases 5 and 10, diagonal corners on the same side) are
resolved by the mean of the four corners: if the mean is above the
threshold the above corners are joined and the segments cut off the two
below corners, otherwise the below corners are joined.

Segments are stitched by the lattice edge their end points lie on, not
by comparing floats: two cells sharing an edge compute the same crossing
once. Output order follows the row-major position of each polyline's
first cell, so it is deterministic for a given input.

The sweep never wraps. With close_boundary (default) the field is
framed by a ring of below-threshold samples and crossings on the frame
are clamped onto the canvas border, so every region above the threshold
comes back as a closed ring, including regions cut by the border.
"""

from collections import deque, namedtuple

import numpy as np

from .errors import ConfigurationError, ShapeMismatchError


Polyline = namedtuple("Polyline", ["points", "closed"])
Polyline.__doc__ = """Contour path: (N, 2) array of (x, y) grid points.

A closed polyline does not repeat its first vertex at the end.
"""

# Corners at each end of edges 0..3
_EDGE_CORNERS = ((1, 2), (2, 4), (8, 4), (1, 8))
# Edges meeting at each corner
_CORNER_EDGES = {1: (0, 3), 2: (0, 1), 4: (1, 2), 8: (2, 3)}


def _segments_for_case(case, center_above):
    crossed = [e for e, (c0, c1) in enumerate(_EDGE_CORNERS)
               if bool(case & c0) != bool(case & c1)]
    if len(crossed) == 2:
        return (tuple(crossed),)
    if len(crossed) == 4:
        # Cut off the corners that end up isolated
        isolated = [c for c in (1, 2, 4, 8) if bool(case & c) != center_above]
        return tuple(_CORNER_EDGES[c] for c in isolated)
    return ()


_SEGMENT_TABLE = {
    (case, center_above): _segments_for_case(case, center_above)
    for case in range(16)
    for center_above in (False, True)
}


def _edge_key(x, y, edge):
    """Global identity of a cell edge: (orientation, x, y) of its start."""
    if edge == 0:
        return (0, x, y)
    if edge == 1:
        return (1, x + 1, y)
    if edge == 2:
        return (0, x, y + 1)
    return (1, x, y)


def _crossing(values, key, threshold):
    """Interpolated threshold crossing on a lattice edge."""
    vertical, x, y = key
    va = values[y, x]
    if vertical:
        vb = values[y + 1, x]
    else:
        vb = values[y, x + 1]
    denom = vb - va
    t = 0.5 if denom == 0 else (threshold - va) / denom
    if vertical:
        return (float(x), y + float(t))
    return (x + float(t), float(y))


def _as_grid(field, width, height):
    if int(width) != width or int(height) != height or width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Grid dimensions must be positive integers, got {width!r}x{height!r}")
    width, height = int(width), int(height)
    values = np.asarray(field, dtype=np.float64)
    if values.shape == (height, width):
        return values
    if values.ndim == 1 and values.size == width * height:
        return values.reshape(height, width)
    raise ShapeMismatchError(
        f"Field has shape {values.shape}, expected {width * height} values "
        f"or ({height}, {width})")


def _collect_segments(values, threshold):
    above = values > threshold
    case = (above[:-1, :-1] * 1 | above[:-1, 1:] * 2
            | above[1:, 1:] * 4 | above[1:, :-1] * 8)
    center = (values[:-1, :-1] + values[:-1, 1:]
              + values[1:, 1:] + values[1:, :-1]) * 0.25 > threshold

    segments = []
    rows, cols = np.nonzero((case != 0) & (case != 15))
    for y, x in zip(rows.tolist(), cols.tolist()):
        for e0, e1 in _SEGMENT_TABLE[(int(case[y, x]), bool(center[y, x]))]:
            segments.append((_edge_key(x, y, e0), _edge_key(x, y, e1)))
    return segments


def _stitch(segments):
    """Join segments sharing an edge key. Yields (keys, closed)."""
    touching = {}
    for i, (k0, k1) in enumerate(segments):
        touching.setdefault(k0, []).append(i)
        touching.setdefault(k1, []).append(i)

    used = [False] * len(segments)

    def follow(key):
        for j in touching[key]:
            if not used[j]:
                used[j] = True
                k0, k1 = segments[j]
                return k1 if k0 == key else k0
        return None

    for i, (start, end) in enumerate(segments):
        if used[i]:
            continue
        used[i] = True
        chain = deque([start, end])
        closed = False
        while True:
            key = follow(chain[-1])
            if key is None:
                break
            if key == start:
                closed = True
                break
            chain.append(key)
        if not closed:
            while True:
                key = follow(chain[0])
                if key is None:
                    break
                chain.appendleft(key)
        yield list(chain), closed


def _dedupe(points, closed):
    if len(points) > 1:
        keep = np.ones(len(points), dtype=bool)
        keep[1:] = np.any(points[1:] != points[:-1], axis=1)
        points = points[keep]
    if closed and len(points) > 1 and np.array_equal(points[0], points[-1]):
        points = points[:-1]
    return points


def extract(field, width, height, threshold, close_boundary=True):
    """Extract the threshold isolines of a sampled field.

    Args:
        field: (height, width) array or flat row-major sequence of
            width*height samples
        width, height: grid dimensions
        threshold: iso value
        close_boundary: close regions cut by the canvas border along
            the border; when False border-touching lines stay open

    Returns:
        List of Polyline(points, closed). Empty for a field that never
        rises above the threshold (including a field equal to it).
    """
    values = _as_grid(field, width, height)
    h, w = values.shape

    if close_boundary:
        framed = np.full((h + 2, w + 2), threshold, dtype=np.float64)
        framed[1:-1, 1:-1] = values
        values = framed
    if values.shape[0] < 2 or values.shape[1] < 2:
        return []

    segments = _collect_segments(values, threshold)
    points_by_key = {}
    polylines = []
    for keys, closed in _stitch(segments):
        coords = []
        for key in keys:
            p = points_by_key.get(key)
            if p is None:
                p = points_by_key[key] = _crossing(values, key, threshold)
            coords.append(p)
        points = np.array(coords, dtype=np.float64)
        if close_boundary:
            points -= 1.0
            np.clip(points[:, 0], 0.0, w - 1, out=points[:, 0])
            np.clip(points[:, 1], 0.0, h - 1, out=points[:, 1])
        points = _dedupe(points, closed)
        # Rings collapsed onto the border have no area
        if closed and len(points) < 3:
            continue
        polylines.append(Polyline(points, closed))
    return polylines
