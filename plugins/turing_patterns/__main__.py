"""
Turing Pattern Generator - Entry Point

Runs a simulation headless until the pattern stabilizes or the step
budget runs out, then writes the thresholded image and/or the isoline
vector export.

Usage:
    python -m turing_patterns [preset] [options]

Options:
    --size N | WxH      grid size (overrides the preset)
    --steps N           step budget (max_steps)
    --seed N            random seed for reproducible runs
    --image PATH        seed the activator field from an image
    --bias X            threshold for rendering and contours
    --set KEY=VALUE     any parameter (Da, Db, alpha, beta, dt, dx,
                        steps_per_frame, max_steps, bias,
                        convergence_threshold); repeatable
    --png PATH          save the rendered field
    --svg PATH          save the contour export
    --list              list presets
    --help, -h          show this help

Examples:
    python -m turing_patterns --png out.png --svg out.svg
    python -m turing_patterns preview --seed 7 --png preview.png
    python -m turing_patterns --image face.jpg --bias 0.1 --svg face.svg
"""

import sys

from .errors import ConfigurationError, DivergenceDetected
from .imaging import load_brightness
from .presets import DEFAULT_PRESET, PRESET_ORDER, list_presets
from .render import save_png
from .simulator import Simulation
from .svg import save_svg


def _parse_size(text):
    if "x" in text:
        w, h = text.split("x", 1)
        return int(w), int(h)
    n = int(text)
    return n, n


def _parse_value(text):
    try:
        return int(text)
    except ValueError:
        return float(text)


def parse_args(args):
    """Parse argv into an options dict. Returns None when nothing should run."""
    opts = {
        "preset": DEFAULT_PRESET,
        "size": None,
        "seed": None,
        "image": None,
        "png": None,
        "svg": None,
        "params": {},
    }
    i = 0
    while i < len(args):
        arg = args[i]
        has_value = i + 1 < len(args)
        if arg == "--size" and has_value:
            opts["size"] = _parse_size(args[i + 1])
            i += 2
        elif arg == "--steps" and has_value:
            opts["params"]["max_steps"] = int(args[i + 1])
            i += 2
        elif arg == "--seed" and has_value:
            opts["seed"] = int(args[i + 1])
            i += 2
        elif arg == "--image" and has_value:
            opts["image"] = args[i + 1]
            i += 2
        elif arg == "--bias" and has_value:
            opts["params"]["bias"] = float(args[i + 1])
            i += 2
        elif arg == "--set" and has_value:
            key, sep, value = args[i + 1].partition("=")
            if not sep:
                raise ConfigurationError(f"--set expects KEY=VALUE, got {args[i + 1]!r}")
            opts["params"][key] = _parse_value(value)
            i += 2
        elif arg == "--png" and has_value:
            opts["png"] = args[i + 1]
            i += 2
        elif arg == "--svg" and has_value:
            opts["svg"] = args[i + 1]
            i += 2
        elif arg == "--list":
            print("\nAvailable presets:\n")
            for key, name, desc in list_presets():
                print(f"  {key:10s} {name:16s} {desc}")
            print()
            return None
        elif arg in ("--help", "-h"):
            print(__doc__)
            return None
        elif arg in PRESET_ORDER:
            opts["preset"] = arg
            i += 1
        else:
            raise ConfigurationError(
                f"Unknown argument: {arg} (use --help for usage)")
    return opts


def run(opts):
    sim = Simulation.from_preset(opts["preset"], size=opts["size"],
                                 rng=opts["seed"], verbose=True)
    sim.params.set_params(**opts["params"])

    if opts["image"]:
        sim.seed_image(load_brightness(opts["image"], sim.width, sim.height))
    else:
        sim.seed_noise()

    print(f"[turing] {opts['preset']} @ {sim.width}x{sim.height}, "
          f"up to {sim.params.max_steps} steps")
    try:
        sim.run()
    except DivergenceDetected as e:
        print(f"[turing] {e}")
        return 1

    if opts["png"]:
        save_png(opts["png"], sim.field_a(), sim.params.bias)
        print(f"[turing] saved: {opts['png']}")
    if opts["svg"]:
        polylines = sim.contours()
        save_svg(opts["svg"], polylines, sim.width, sim.height)
        print(f"[turing] saved: {opts['svg']} ({len(polylines)} paths)")
    return 0


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    try:
        opts = parse_args(args)
        if opts is None:
            return 0
        return run(opts)
    except ValueError as e:
        # ConfigurationError, ShapeMismatchError and malformed numbers
        print(f"[turing] error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
