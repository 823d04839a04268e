from __future__ import annotations

import numpy as np
import pytest

from engine import AttractorEngine
from gesture import HandFrame
from params import Params


@pytest.fixture
def params() -> Params:
    return Params(num_particles=200, seed=1234)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture
def engine(params: Params) -> AttractorEngine:
    return AttractorEngine(params, clock=lambda: 0.0)


def make_hand(curled: int = 0, palm=None) -> HandFrame:
    """Synthetic 21-landmark hand: wrist below, finger bases above it,
    the first `curled` of index/middle/ring/pinky folded back toward the wrist.

    Landmark 9 is both the palm center and the middle-finger base, so `palm`
    translates the whole hand there instead of moving that one point; the
    curl geometry is the same wherever the hand sits."""
    lms = np.zeros((21, 3))
    lms[:, 0] = 0.5
    lms[:, 1] = 0.6
    lms[0] = (0.5, 0.9, 0.0)                  # wrist: 0.2 below the bases
    for k, (base, tip) in enumerate(zip((5, 9, 13, 17), (8, 12, 16, 20))):
        x = 0.44 + 0.04 * k
        lms[base] = (x, 0.7, 0.0)
        tip_y = 0.8 if k < curled else 0.1    # 0.1 from wrist (curled) vs 0.8 (open)
        lms[tip] = (x, tip_y, 0.0)
    if palm is not None:
        lms[:, :2] += np.asarray(palm, dtype=np.float64) - lms[9, :2]
    return HandFrame(lms)


@pytest.fixture
def open_hand() -> HandFrame:
    return make_hand(curled=0)


@pytest.fixture
def fist() -> HandFrame:
    return make_hand(curled=4)


@pytest.fixture
def hand():
    return make_hand
