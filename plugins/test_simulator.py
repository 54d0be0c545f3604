"""
Tests for the headless driver.

Verifies:
1. Step-budget termination without overshoot
2. Convergence on a steady field
3. Determinism with a seeded generator
4. Divergence guard and stability warning
5. Seeding, reset and run control
"""

import math

import numpy as np
import pytest

from turing_patterns.convergence import StopReason
from turing_patterns.errors import (
    ConfigurationError, DivergenceDetected, ShapeMismatchError, StabilityWarning,
)
from turing_patterns.params import SimulationParameters
from turing_patterns.simulator import Simulation


def _sim(size=24, rng=11, **params):
    sim = Simulation(size, size, params=SimulationParameters(**params), rng=rng)
    sim.seed_noise()
    return sim


def test_stops_exactly_at_step_budget():
    sim = _sim(max_steps=10, steps_per_frame=5)
    reason = sim.run()

    assert reason is StopReason.STEP_LIMIT
    assert sim.state.current_step == 10
    assert sim.state.running is False
    assert sim.state.stop_reason is StopReason.STEP_LIMIT


def test_last_batch_is_trimmed_to_budget():
    sim = _sim(max_steps=12, steps_per_frame=5)
    sim.run()
    assert sim.state.current_step == 12


def test_zero_budget_stops_without_stepping():
    sim = _sim(max_steps=0)
    before = sim.field_a()
    assert sim.run() is StopReason.STEP_LIMIT
    assert sim.state.current_step == 0
    np.testing.assert_array_equal(sim.field_a(), before)


def test_converges_on_steady_state():
    """a = b = 0 with alpha = 0 is a fixed point: nothing changes."""
    sim = _sim(alpha=0.0, steps_per_frame=5)
    sim.fields.fill(a=0.0, b=0.0)

    assert sim.run() is StopReason.CONVERGED
    assert sim.state.current_step == 5
    assert sim.state.last_metric == 0.0


def test_runs_are_reproducible():
    first = _sim(rng=123, max_steps=40)
    second = _sim(rng=123, max_steps=40)
    first.run()
    second.run()

    np.testing.assert_array_equal(first.field_a(), second.field_a())
    np.testing.assert_array_equal(first.field_b(), second.field_b())


def test_different_seeds_differ():
    first = _sim(rng=1, max_steps=5)
    second = _sim(rng=2, max_steps=5)
    assert not np.array_equal(first.field_a(), second.field_a())


def test_divergence_stops_and_raises():
    sim = _sim(dt=1.0, steps_per_frame=50, max_steps=500)

    with pytest.warns(StabilityWarning):
        sim.start()
    with np.errstate(all="ignore"):
        with pytest.raises(DivergenceDetected) as info:
            sim.run()

    assert info.value.step == sim.state.current_step
    assert sim.state.running is False
    assert sim.state.stop_reason is StopReason.DIVERGED


def test_stable_defaults_do_not_warn(recwarn):
    sim = _sim()
    sim.start()
    assert not [w for w in recwarn if issubclass(w.category, StabilityWarning)]


def test_paused_advance_does_nothing():
    sim = _sim()
    assert sim.advance() is None
    assert sim.state.current_step == 0


def test_toggle_and_pause():
    sim = _sim()
    assert sim.toggle() is True
    sim.advance()
    assert sim.state.current_step == 5
    assert sim.toggle() is False
    sim.advance()
    assert sim.state.current_step == 5


def test_parameter_edits_apply_between_batches():
    sim = _sim(steps_per_frame=2)
    sim.start()
    sim.advance()
    sim.params.steps_per_frame = 7
    sim.advance()
    assert sim.state.current_step == 9


def test_zero_batch_never_converges():
    sim = _sim(steps_per_frame=0)
    with pytest.raises(ConfigurationError):
        sim.run()

    assert sim.run(max_frames=3) is StopReason.CONTINUE
    assert sim.state.current_step == 0
    assert sim.state.running is True


def test_zero_batch_with_spent_budget_stops():
    sim = _sim(steps_per_frame=0, max_steps=0)
    assert sim.run() is StopReason.STEP_LIMIT
    assert sim.state.running is False
    assert sim.state.current_step == 0


def test_max_frames_and_frame_hook():
    seen = []
    sim = _sim(max_steps=100)
    reason = sim.run(max_frames=4, on_frame=lambda s: seen.append(s.state.current_step))

    assert reason is StopReason.CONTINUE
    assert seen == [5, 10, 15, 20]


def test_image_seed_is_reused_on_reset():
    brightness = np.tile(np.linspace(0, 1, 16), (8, 1))
    sim = Simulation(16, 8, params=SimulationParameters(max_steps=20), rng=3,
                     dtype=np.float64)
    sim.seed_image(brightness)
    sim.run()
    assert sim.state.current_step == 20

    sim.reset()
    assert sim.state.current_step == 0
    np.testing.assert_allclose(sim.field_a(), brightness * 2 - 1)

    sim.clear_image()
    sim.reset()
    assert np.abs(sim.field_a()).max() <= 0.05


def test_restart_resets_and_runs():
    sim = _sim(max_steps=10)
    sim.run()
    assert not sim.state.running

    sim.restart()
    assert sim.state.running
    assert sim.state.current_step == 0
    assert sim.run() is StopReason.STEP_LIMIT


def test_image_seed_shape_checked():
    sim = Simulation(10, 6)
    with pytest.raises(ShapeMismatchError):
        sim.seed_image(np.zeros((10, 6)))


def test_snapshots_are_independent():
    sim = _sim()
    a = sim.field_a()
    a[:] = 99.0
    assert sim.field_a().max() < 1.0


def test_contours_and_render_use_bias():
    sim = _sim(size=32, max_steps=50, bias=0.0)
    sim.run()

    img = sim.render()
    assert img.size == (32, 32)
    assert img.mode == "L"

    polylines = sim.contours()
    assert all(p.closed for p in polylines)
    assert sim.contours(threshold=10.0) == []


def test_stats_and_progress():
    sim = _sim(max_steps=20)
    assert sim.progress == 0.0
    sim.run(max_frames=2)
    assert sim.progress == pytest.approx(0.5)

    stats = sim.stats
    assert stats["step"] == 10
    assert stats["running"] is True
    assert stats["stop_reason"] is None
    assert 0.0 <= stats["coverage"] <= 1.0
    assert stats["min"] <= stats["mean"] <= stats["max"]


def test_from_preset():
    sim = Simulation.from_preset("preview", rng=0)
    assert (sim.width, sim.height) == (160, 160)
    assert sim.params.max_steps == 2000

    small = Simulation.from_preset("bold", size=(20, 10))
    assert (small.width, small.height) == (20, 10)
    assert small.params.bias == -0.3

    with pytest.raises(ConfigurationError):
        Simulation.from_preset("nope")


def test_from_preset_copies_caller_params():
    mine = SimulationParameters(Da=2.0, bias=0.25)
    sim = Simulation.from_preset("bold", size=(8, 8), params=mine)

    assert mine.bias == 0.25, "caller's parameters must not take the preset values"
    assert sim.params is not mine
    assert sim.params.bias == -0.3
    assert sim.params.Da == 2.0


def test_invalid_construction():
    with pytest.raises(ConfigurationError):
        Simulation(0, 10)
    with pytest.raises(ConfigurationError):
        SimulationParameters(dx=0.0)
    with pytest.raises(ConfigurationError):
        SimulationParameters(steps_per_frame=-1)
    with pytest.raises(ConfigurationError):
        SimulationParameters(max_steps=-5)
    with pytest.raises(ConfigurationError):
        SimulationParameters(gamma=1.0)


@pytest.mark.parametrize("key,value", [
    ("max_steps", math.inf),
    ("max_steps", math.nan),
    ("steps_per_frame", None),
    ("steps_per_frame", 2.5),
    ("dt", "0.1"),
    ("dt", math.nan),
    ("dx", math.inf),
    ("Da", math.nan),
    ("bias", "high"),
    ("convergence_threshold", True),
])
def test_bad_values_raise_configuration_error(key, value):
    """Every unusable value surfaces as ConfigurationError, never a raw TypeError."""
    with pytest.raises(ConfigurationError):
        SimulationParameters(**{key: value})
    params = SimulationParameters()
    with pytest.raises(ConfigurationError):
        params.set_params(**{key: value})


def test_rejected_update_leaves_params_untouched():
    params = SimulationParameters()
    before = params.get_params()

    with pytest.raises(ConfigurationError):
        params.set_params(dt=-1.0, Da=2.0)

    assert params.get_params() == before
    assert params.dt == 0.001 and params.Da == 1.0
    params.validate()


def test_numpy_scalars_are_accepted():
    params = SimulationParameters(dt=np.float32(0.002), max_steps=np.int64(40))
    assert params.max_steps == 40


def test_stability_limit():
    params = SimulationParameters()
    assert params.stability_limit() == pytest.approx(1.0 / 400.0)
    assert params.is_stable()
    params.set_params(Da=0.0, Db=0.0)
    assert params.stability_limit() == float("inf")
