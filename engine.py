"""
Per-tick orchestrator.

Keeps the API small:
  engine = AttractorEngine(params)
  engine.push_hand_frame(frame_or_none)     # detector callback, any thread
  out = engine.tick(now_ms)                 # once per rendered frame
  engine.request_switch("aizawa", animate=True)

One tick:
  inbox -> gesture (fist edge => next attractor) -> viewpoint pose
        -> morph tick  OR  steady sim step -> TickOutput
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import time
import numpy as np

from attractors import AttractorId, lookup, next_field, validate_catalog
from gesture import DetectorStatus, GestureClassifier, GestureStatus, HandFrame, HandInbox
from params import Params, _pget
from sim import ParticleSim
from transition import TransitionController
from viewpoint import CameraPose, ViewpointController

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.perf_counter() * 1000.0


@dataclass
class TickOutput:
    positions: np.ndarray           # (N, 3) float32, read-only
    colors: np.ndarray              # (N, 3) float32 RGB, read-only
    pose: CameraPose
    gesture_status: GestureStatus
    detector_status: DetectorStatus
    switched: AttractorId | None = None
    transition_progress: float = 0.0


class AttractorEngine:
    def __init__(self, params=None, rng=None, clock=None, pose_sink=None):
        validate_catalog()
        self.params = params if params is not None else Params()
        self.clock = clock or _now_ms

        start = lookup(_pget(self.params, "start_field", "lorenz"))
        self.sim = ParticleSim(self.params, rng=rng)
        self.sim.reset(start)
        self.transition = TransitionController(self.sim, self.params)
        self.gesture = GestureClassifier(self.params)
        self.viewpoint = ViewpointController(start.viewpoint_distance, self.params, sink=pose_sink)
        self.inbox = HandInbox()

        self.detector_status = DetectorStatus.LOADING
        self._listeners = []
        self._pending_switch: AttractorId | None = None

    # ---------- queries ----------

    @property
    def current_field(self) -> AttractorId:
        return self.sim.state.field_id

    def status_text(self) -> str:
        return self.gesture.status_text(self.detector_status)

    # ---------- inbound ----------

    def on_switched(self, fn):
        self._listeners.append(fn)
        return fn

    def set_detector_status(self, status: DetectorStatus):
        if status is not self.detector_status:
            logger.info("Hand detector: %s", status.value)
        self.detector_status = status

    def push_hand_frame(self, frame: HandFrame | None):
        self.inbox.push(frame)

    def request_switch(self, field_id, animate: bool = True, now: float | None = None) -> bool:
        """Switch attractor. Returns False when the request is a no-op.

        Raises UnknownField for ids outside the catalog (state untouched).
        """
        target = lookup(field_id)
        if animate:
            now = self.clock() if now is None else now
            return self.transition.begin(target.id, now)

        if target.id is self.current_field and not self.transition.active:
            return False
        self.transition.cancel()
        self.sim.reset(target)
        self.viewpoint.set_distance(target.viewpoint_distance)
        self._emit(target.id)
        return True

    # ---------- tick ----------

    def tick(self, now: float | None = None) -> TickOutput:
        now = self.clock() if now is None else float(now)
        frame = self.inbox.drain()

        status, fired = self.gesture.update(frame, now)
        if fired:
            nxt = next_field(self.current_field)
            if self.request_switch(nxt, animate=True, now=now):
                logger.info("Fist -> %s", nxt.value)

        field = lookup(self.current_field)
        pose = self.viewpoint.update(frame.palm if frame is not None else None, field.viewpoint_distance)

        switched = self._pending_switch
        self._pending_switch = None
        if self.transition.active:
            done = self.transition.tick(now, self.viewpoint)
            progress = 1.0 if done is not None else self.transition.t.progress
            if done is not None:
                self._emit(done)
                switched = self._pending_switch
                self._pending_switch = None
        else:
            self.sim.step(field, pose.distance)
            progress = 0.0

        positions, colors = self.sim.render_buffers()
        return TickOutput(
            positions=positions,
            colors=colors,
            pose=pose.copy(),
            gesture_status=status,
            detector_status=self.detector_status,
            switched=switched,
            transition_progress=progress,
        )

    def _emit(self, fid: AttractorId):
        self._pending_switch = fid
        for fn in list(self._listeners):
            fn(fid)
