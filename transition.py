# transition.py
# Dual-field morph between two attractors.
#
# While active, every particle carries two states: its position under the
# outgoing field and a target under the incoming field. Both get a full
# derivative evaluation each tick (scaled by 1-ease / ease), the render
# transforms are blended, and the camera distance drifts toward the incoming
# field at a flat 2% per tick. Not cancelable from the gesture path.

from __future__ import annotations
from dataclasses import dataclass
import logging
import numpy as np

from attractors import AttractorField, AttractorId, lookup
from params import _pget

logger = logging.getLogger(__name__)


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 3) / 2.0


@dataclass
class Transition:
    active: bool = False
    progress: float = 0.0
    ease: float = 0.0
    next_field: AttractorId | None = None
    start_time: float = 0.0
    duration: float = 1200.0

    # per-particle, only while active
    targets: np.ndarray | None = None
    color_start: np.ndarray | None = None
    color_end: np.ndarray | None = None


class TransitionController:
    def __init__(self, sim, params=None):
        self.sim = sim
        self.duration = float(_pget(params, "transition_ms", 1200.0))
        self.camera_ease = float(_pget(params, "camera_ease", 0.02))
        self.t = Transition(duration=self.duration)

    @property
    def active(self) -> bool:
        return self.t.active

    def begin(self, next_field, now: float) -> bool:
        """Start morphing toward `next_field`. No-op (False) if busy or already there."""
        incoming = lookup(next_field)
        state = self.sim.state
        if self.t.active or state is None or incoming.id is state.field_id:
            return False

        t = self.t
        t.color_start = state.colors.copy()
        t.targets = self.sim.seed_population(incoming)
        t.color_end = self.sim.draw_colors(incoming)
        t.next_field = incoming.id
        t.start_time = float(now)
        t.duration = self.duration
        t.progress = 0.0
        t.ease = 0.0
        t.active = True

        logger.info("Morph %s -> %s started", state.field_id.value, incoming.name)
        return True

    def cancel(self):
        self.t = Transition(duration=self.duration)

    def tick(self, now: float, viewpoint=None) -> AttractorId | None:
        """Advance the morph one tick. Returns the new field id on the tick it commits."""
        t = self.t
        if not t.active:
            return None

        sim = self.sim
        state = sim.state
        outgoing = lookup(state.field_id)
        incoming = lookup(t.next_field)

        elapsed = float(now) - t.start_time
        t.progress = max(0.0, min(elapsed / t.duration, 1.0))
        t.ease = ease = ease_in_out_cubic(t.progress)

        pos = state.positions
        tgt = t.targets
        with np.errstate(over="ignore", invalid="ignore"):
            pos += outgoing.velocity(pos) * (outgoing.time_step * (1.0 - ease))
            tgt += incoming.velocity(tgt) * (incoming.time_step * ease)
        sim.repair(outgoing, pos)
        sim.repair(incoming, tgt)

        blended = outgoing.to_render(pos) * (1.0 - ease) + incoming.to_render(tgt) * ease
        colors = t.color_start * (1.0 - ease) + t.color_end * ease
        sim.write_render(blended, colors)

        if viewpoint is not None:
            viewpoint.ease_distance(incoming.viewpoint_distance, self.camera_ease)

        if t.progress >= 1.0:
            return self._commit()
        return None

    def _commit(self) -> AttractorId:
        t = self.t
        state = self.sim.state
        state.positions[:] = t.targets
        state.field_id = t.next_field
        logger.info("Morph to %s complete", t.next_field.value)

        done = t.next_field
        self.t = Transition(duration=self.duration)
        return done
