"""
SVG Export of Isolines

White filled contour regions on a black background. Paths use the
even-odd fill rule so holes inside a region stay black. Grid sample
(x, y) sits at the centre of pixel (x, y), i.e. at (x + 0.5, y + 0.5)
in the viewBox.
"""


DEFAULT_SCALE = 5


def _fmt(v):
    s = f"{v:.3f}".rstrip("0").rstrip(".")
    return "0" if s == "-0" else s


def path_data(polyline):
    """Path 'd' attribute for one Polyline ('Z' only when closed)."""
    points, closed = polyline
    if len(points) == 0:
        return ""
    parts = []
    for i, (x, y) in enumerate(points):
        cmd = "M" if i == 0 else "L"
        parts.append(f"{cmd}{_fmt(x + 0.5)},{_fmt(y + 0.5)}")
    if closed:
        parts.append("Z")
    return "".join(parts)


def to_svg(polylines, width, height, scale=DEFAULT_SCALE):
    """Build an SVG document for the given contour set.

    Closed polylines are merged into one filled path; open ones (only
    produced with close_boundary=False) are drawn as white strokes.
    """
    closed_d = "".join(path_data(p) for p in polylines if p.closed)
    open_d = [path_data(p) for p in polylines if not p.closed]

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width * scale}" height="{height * scale}" '
        f'viewBox="0 0 {width} {height}">',
        '  <rect width="100%" height="100%" fill="black" />',
    ]
    if closed_d:
        lines.append(
            f'  <path d="{closed_d}" fill="white" fill-rule="evenodd" stroke="none" />')
    for d in open_d:
        if d:
            lines.append(
                f'  <path d="{d}" fill="none" stroke="white" stroke-width="0.5" />')
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def save_svg(path, polylines, width, height, scale=DEFAULT_SCALE):
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_svg(polylines, width, height, scale))
    return path
