from __future__ import annotations

import numpy as np
import pytest

from attractors import AttractorId, UnknownField
from engine import AttractorEngine, TickOutput
from gesture import DetectorStatus, GestureStatus
from params import Params


def test_engine_starts_on_lorenz(engine: AttractorEngine) -> None:
    assert engine.current_field is AttractorId.LORENZ
    assert engine.viewpoint.pose.distance == pytest.approx(35.0)
    assert engine.detector_status is DetectorStatus.LOADING


def test_start_field_comes_from_params() -> None:
    eng = AttractorEngine(Params(num_particles=50, seed=1, start_field="thomas"))
    assert eng.current_field is AttractorId.THOMAS
    assert eng.viewpoint.pose.distance == pytest.approx(14.0)


def test_tick_output_is_finite_and_read_only(engine: AttractorEngine) -> None:
    for i in range(50):
        out = engine.tick(16.0 * i)
    assert isinstance(out, TickOutput)
    assert out.positions.shape == (200, 3)
    assert out.colors.shape == (200, 3)
    assert np.all(np.isfinite(out.positions))
    assert out.gesture_status is GestureStatus.NO_HAND
    assert out.switched is None
    with pytest.raises(ValueError):
        out.positions[0, 0] = 0.0


def test_switch_to_current_field_changes_nothing(engine: AttractorEngine) -> None:
    before = engine.sim.state.positions.copy()
    assert engine.request_switch("lorenz", animate=True, now=0.0) is False
    assert not engine.transition.active
    np.testing.assert_array_equal(engine.sim.state.positions, before)


def test_switch_while_morphing_is_dropped(engine: AttractorEngine) -> None:
    assert engine.request_switch("aizawa", animate=True, now=0.0)
    engine.tick(300.0)
    progress = engine.transition.t.progress

    assert engine.request_switch("thomas", animate=True, now=350.0) is False
    assert engine.transition.t.next_field is AttractorId.AIZAWA
    assert engine.transition.t.progress == progress


def test_unknown_field_is_rejected_without_side_effects(engine: AttractorEngine) -> None:
    before = engine.sim.state.positions.copy()
    with pytest.raises(UnknownField):
        engine.request_switch("rossler", animate=False)
    with pytest.raises(UnknownField):
        engine.request_switch("rossler", animate=True, now=0.0)
    assert engine.current_field is AttractorId.LORENZ
    assert not engine.transition.active
    np.testing.assert_array_equal(engine.sim.state.positions, before)


def test_lorenz_to_aizawa_scenario(engine: AttractorEngine) -> None:
    engine.request_switch("aizawa", animate=True, now=0.0)
    targets = engine.transition.t.targets

    out = engine.tick(600.0)
    assert out.transition_progress == 0.5
    assert engine.transition.t.ease == 0.5
    assert engine.transition.active
    assert out.switched is None

    out = engine.tick(1200.0)
    assert engine.current_field is AttractorId.AIZAWA
    assert not engine.transition.active
    assert out.switched is AttractorId.AIZAWA
    assert out.transition_progress == 1.0
    np.testing.assert_array_equal(engine.sim.state.positions, targets)

    out = engine.tick(1216.0)
    assert out.switched is None


def test_listeners_hear_completed_morphs(engine: AttractorEngine) -> None:
    heard = []
    engine.on_switched(heard.append)
    engine.request_switch("halvorsen", animate=True, now=0.0)
    for i in range(1, 13):
        engine.tick(100.0 * i)
    assert heard == [AttractorId.HALVORSEN]


def test_immediate_switch_reseeds_and_snaps_camera(engine: AttractorEngine) -> None:
    heard = []
    engine.on_switched(heard.append)

    assert engine.request_switch("thomas", animate=False)
    assert engine.current_field is AttractorId.THOMAS
    assert engine.viewpoint.pose.distance == pytest.approx(14.0)
    assert heard == [AttractorId.THOMAS]

    out = engine.tick(16.0)
    assert out.switched is AttractorId.THOMAS
    assert engine.request_switch("thomas", animate=False) is False


def test_immediate_switch_discards_inflight_morph(engine: AttractorEngine) -> None:
    engine.request_switch("aizawa", animate=True, now=0.0)
    engine.tick(400.0)
    assert engine.request_switch("arneodo", animate=False)
    assert not engine.transition.active
    assert engine.current_field is AttractorId.ARNEODO

    out = engine.tick(2000.0)
    assert engine.current_field is AttractorId.ARNEODO
    assert np.all(np.isfinite(out.positions))


def test_fist_cycles_to_next_attractor(engine: AttractorEngine, open_hand, fist) -> None:
    engine.push_hand_frame(open_hand)
    out = engine.tick(0.0)
    assert out.gesture_status is GestureStatus.HAND_OPEN
    assert not engine.viewpoint.auto_orbit

    engine.push_hand_frame(fist)
    out = engine.tick(16.0)
    assert out.gesture_status is GestureStatus.HAND_CLOSED
    assert engine.transition.active
    assert engine.transition.t.next_field is AttractorId.AIZAWA
    assert engine.transition.t.start_time == 16.0


def test_fist_during_morph_does_nothing(engine: AttractorEngine, open_hand, fist) -> None:
    engine.request_switch("aizawa", animate=True, now=0.0)
    engine.push_hand_frame(open_hand)
    engine.tick(100.0)
    engine.push_hand_frame(fist)
    engine.tick(200.0)
    assert engine.transition.t.next_field is AttractorId.AIZAWA
    assert engine.transition.t.start_time == 0.0


def test_missing_frame_means_no_hand(engine: AttractorEngine, open_hand) -> None:
    engine.push_hand_frame(open_hand)
    engine.tick(0.0)
    out = engine.tick(16.0)   # inbox drained, nothing new pushed
    assert out.gesture_status is GestureStatus.NO_HAND
    assert engine.viewpoint.auto_orbit


def test_detector_failure_is_only_a_status(engine: AttractorEngine) -> None:
    engine.set_detector_status(DetectorStatus.FAILED)
    out = engine.tick(0.0)
    assert out.detector_status is DetectorStatus.FAILED
    assert engine.status_text() == "Hand tracking failed"
    assert np.all(np.isfinite(out.positions))


def test_clock_is_used_when_now_is_omitted(params: Params) -> None:
    ticks = iter([0.0, 600.0])
    eng = AttractorEngine(params, clock=lambda: next(ticks))
    eng.request_switch("aizawa")
    out = eng.tick()
    assert out.transition_progress == 0.5
