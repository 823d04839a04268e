from __future__ import annotations
from dataclasses import dataclass, field
import math
import numpy as np

from params import _pget


@dataclass
class CameraPose:
    position: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 35.0]))
    look_at: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.position - self.look_at))

    def copy(self) -> "CameraPose":
        return CameraPose(self.position.copy(), self.look_at.copy())


class ViewpointController:
    """
    Palm position -> orbiting camera, smoothed per axis.

    No hand: idle auto-orbit about the y axis.
    Pose is pushed to `sink(pose)` every tick if one is given.
    """

    def __init__(self, distance: float = 35.0, params=None, sink=None):
        self.smoothing = float(_pget(params, "view_smoothing", 0.1))
        self.height = float(_pget(params, "view_height", 20.0))
        speed = float(_pget(params, "auto_orbit_speed", 0.4))
        # OrbitControls.autoRotate at 60 fps
        self.orbit_step = 2.0 * math.pi / 60.0 / 60.0 * speed

        self.pose = CameraPose(np.array([0.0, 0.0, float(distance)]), np.zeros(3))
        self.auto_orbit = True
        self.sink = sink

    def target_for(self, palm_xy, radius: float) -> np.ndarray:
        nx = (float(palm_xy[0]) - 0.5) * 2.0
        ny = (float(palm_xy[1]) - 0.5) * 2.0
        azimuth = nx * math.pi
        return np.array([math.sin(azimuth) * radius, ny * -self.height, math.cos(azimuth) * radius])

    def update(self, palm_xy, radius: float) -> CameraPose:
        """palm_xy: normalized palm-center landmark, or None when no hand."""
        p = self.pose.position
        if palm_xy is None:
            self.auto_orbit = True
            c, s = math.cos(self.orbit_step), math.sin(self.orbit_step)
            x, z = p[0], p[2]
            p[0] = x * c + z * s
            p[2] = -x * s + z * c
        else:
            self.auto_orbit = False
            p += (self.target_for(palm_xy, radius) - p) * self.smoothing

        self.pose.look_at[:] = 0.0
        if self.sink is not None:
            self.sink(self.pose.copy())
        return self.pose

    def _set_radius(self, r: float):
        p = self.pose.position
        d = float(np.linalg.norm(p))
        if d < 1e-9:
            p[:] = (0.0, 0.0, r)
        else:
            p *= r / d

    def ease_distance(self, target: float, factor: float = 0.02):
        d = self.pose.distance
        self._set_radius(d + (float(target) - d) * factor)

    def set_distance(self, d: float):
        self._set_radius(float(d))
