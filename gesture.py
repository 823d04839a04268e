# gesture.py
# Fist detector: one optional hand frame per tick -> Unknown / Open / Closed,
# plus an edge-triggered, debounced "switch" event on Open -> Closed.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math
import threading
import numpy as np

from params import _pget

WRIST = 0
PALM_CENTER = 9
FINGER_TIPS = (8, 12, 16, 20)    # index, middle, ring, pinky
FINGER_BASES = (5, 9, 13, 17)
NUM_LANDMARKS = 21


class GestureStatus(Enum):
    NO_HAND = "no_hand"
    HAND_OPEN = "hand_open"
    HAND_CLOSED = "hand_closed"


class DetectorStatus(Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True, eq=False)
class HandFrame:
    """21 landmarks in normalized image coords (x, y[, z]), x/y in [0..1]."""
    landmarks: np.ndarray

    def __post_init__(self):
        lms = np.array(self.landmarks, dtype=np.float64)
        if lms.ndim != 2 or lms.shape[0] != NUM_LANDMARKS or lms.shape[1] not in (2, 3):
            raise ValueError(f"HandFrame needs ({NUM_LANDMARKS}, 2|3) landmarks, got {lms.shape}")
        lms.flags.writeable = False
        object.__setattr__(self, "landmarks", lms)

    def xy(self, idx: int) -> tuple[float, float]:
        return float(self.landmarks[idx, 0]), float(self.landmarks[idx, 1])

    @property
    def palm(self) -> tuple[float, float]:
        return self.xy(PALM_CENTER)


class HandInbox:
    """Single-slot mailbox between the detector callback and the tick loop.

    At most one frame is pending; a newer push overwrites an undrained one.
    """

    _EMPTY = object()

    def __init__(self):
        self._lock = threading.Lock()
        self._slot = self._EMPTY

    def push(self, frame: HandFrame | None):
        with self._lock:
            self._slot = frame

    def drain(self) -> HandFrame | None:
        with self._lock:
            frame, self._slot = self._slot, self._EMPTY
        return None if frame is self._EMPTY else frame


def curled_count(frame: HandFrame, ratio: float = 1.2) -> int:
    wx, wy = frame.xy(WRIST)
    n = 0
    for tip, base in zip(FINGER_TIPS, FINGER_BASES):
        tx, ty = frame.xy(tip)
        bx, by = frame.xy(base)
        if math.hypot(tx - wx, ty - wy) < ratio * math.hypot(bx - wx, by - wy):
            n += 1
    return n


def is_closed(frame: HandFrame, ratio: float = 1.2, min_curled: int = 3) -> bool:
    return curled_count(frame, ratio) >= min_curled


@dataclass
class GestureState:
    last_closed: bool | None = None
    debounce_until: float | None = None


class GestureClassifier:
    """Detect an open-hand -> fist edge, ignoring re-fists inside the cooldown."""

    def __init__(self, params=None):
        self.curl_ratio = float(_pget(params, "curl_ratio", 1.2))
        self.min_curled = int(_pget(params, "curled_for_closed", 3))
        self.cooldown = float(_pget(params, "debounce_ms", 1000.0))
        self.state = GestureState()
        self.status = GestureStatus.NO_HAND

    def debouncing(self, now: float) -> bool:
        du = self.state.debounce_until
        return du is not None and now < du

    def update(self, frame: HandFrame | None, now: float) -> tuple[GestureStatus, bool]:
        s = self.state
        if frame is None:
            # hand lost: an edge needs a fresh Open first
            s.last_closed = None
            self.status = GestureStatus.NO_HAND
            return self.status, False

        closed = is_closed(frame, self.curl_ratio, self.min_curled)
        fired = s.last_closed is False and closed and not self.debouncing(now)
        if fired:
            s.debounce_until = float(now) + self.cooldown

        s.last_closed = closed
        self.status = GestureStatus.HAND_CLOSED if closed else GestureStatus.HAND_OPEN
        return self.status, fired

    def status_text(self, detector: DetectorStatus = DetectorStatus.READY) -> str:
        if detector is DetectorStatus.FAILED:
            return "Hand tracking failed"
        if detector is DetectorStatus.LOADING:
            return "Loading model..."
        if self.status is GestureStatus.NO_HAND:
            return "No hand detected"
        if self.status is GestureStatus.HAND_CLOSED:
            return "Fist - switching!"
        return "Hand detected"
