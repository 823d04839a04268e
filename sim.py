"""
Particle population tracing one attractor field.

State:
- positions: Nx3 simulation coordinates (attractor space)
- colors:    Nx3 RGB in [0..1]

Per tick:
- forward Euler step under the current field (fixed dt, not wall-clock scaled)
- divergence repair: runaway / non-finite particles are reseeded (no burn-in)
- render buffer: (p + offset) * display_scale * distance_scale

The render buffers are reused across ticks; callers get read-only views.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import numpy as np

from attractors import AttractorField, AttractorId
from params import _pget

logger = logging.getLogger(__name__)


def hsl_to_rgb(h, s, l):
    """Vectorised HSL -> RGB, all channels in [0..1]."""
    h = np.mod(np.asarray(h, dtype=np.float64), 1.0)
    s = np.asarray(s, dtype=np.float64)
    l = np.asarray(l, dtype=np.float64)

    q = np.where(l <= 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q

    def _hue(t):
        t = np.mod(t, 1.0)
        return np.where(
            t < 1.0 / 6.0, p + (q - p) * 6.0 * t,
            np.where(
                t < 0.5, q,
                np.where(t < 2.0 / 3.0, p + (q - p) * 6.0 * (2.0 / 3.0 - t), p),
            ),
        )

    rgb = np.stack([_hue(h + 1.0 / 3.0), _hue(h), _hue(h - 1.0 / 3.0)], axis=-1)
    return np.clip(rgb, 0.0, 1.0)


def _readonly(a: np.ndarray) -> np.ndarray:
    v = a.view()
    v.flags.writeable = False
    return v


@dataclass
class SimulationState:
    field_id: AttractorId
    positions: np.ndarray   # (N, 3) float64
    colors: np.ndarray      # (N, 3) float32


class ParticleSim:
    def __init__(self, params=None, rng=None):
        self.num_particles = int(_pget(params, "num_particles", 8000))
        self.rng = rng if rng is not None else np.random.default_rng(_pget(params, "seed", None))

        self.half_extent = float(_pget(params, "seed_half_extent", 1.0))
        self.burn_in_min = int(_pget(params, "burn_in_min", 50))
        self.burn_in_max = int(_pget(params, "burn_in_max", 349))
        self.bound = float(_pget(params, "divergence_bound", 200.0))
        self.min_view_distance = float(_pget(params, "min_view_distance", 5.0))

        self.sat_min = float(_pget(params, "saturation_min", 0.7))
        self.sat_span = float(_pget(params, "saturation_span", 0.3))
        self.light_min = float(_pget(params, "lightness_min", 0.5))
        self.light_span = float(_pget(params, "lightness_span", 0.3))

        n = self.num_particles
        self.state: SimulationState | None = None
        self._render_pos = np.zeros((n, 3), dtype=np.float32)
        self.last_respawns = 0

    # ---------- seeding ----------

    def random_points(self, field: AttractorField, count: int) -> np.ndarray:
        """Uniform draw from the seed cube, shifted by the field's seed offset."""
        r = self.half_extent
        pts = self.rng.uniform(-r, r, size=(count, 3))
        return pts + np.asarray(field.seed_offset, dtype=np.float64)

    def burn_in(self, field: AttractorField, pts: np.ndarray) -> np.ndarray:
        """Run U{min..max} Euler steps per particle so points start on the manifold."""
        n = pts.shape[0]
        steps = self.rng.integers(self.burn_in_min, self.burn_in_max + 1, size=n)
        dt = field.time_step

        with np.errstate(over="ignore", invalid="ignore"):
            for j in range(int(steps.max()) if n else 0):
                live = steps > j
                pts[live] += field.velocity(pts[live]) * dt

        self.repair(field, pts)
        return pts

    def seed_population(self, field: AttractorField, count: int | None = None) -> np.ndarray:
        count = self.num_particles if count is None else int(count)
        return self.burn_in(field, self.random_points(field, count))

    def draw_colors(self, field: AttractorField, count: int | None = None) -> np.ndarray:
        count = self.num_particles if count is None else int(count)
        u = self.rng.random((count, 3))
        hue = np.mod(field.color_base_hue + (u[:, 0] - 0.5) * field.color_hue_range, 1.0)
        sat = self.sat_min + u[:, 1] * self.sat_span
        light = self.light_min + u[:, 2] * self.light_span
        return hsl_to_rgb(hue, sat, light).astype(np.float32)

    def reset(self, field: AttractorField):
        """Replace the whole population with a fresh, burnt-in one under `field`."""
        pos = self.seed_population(field)
        col = self.draw_colors(field)
        self.state = SimulationState(field.id, pos, col)
        self._render_pos[:] = field.to_render(pos)
        logger.info("Seeded %d particles on %s", self.num_particles, field.name)

    # ---------- stepping ----------

    def repair(self, field: AttractorField, pts: np.ndarray) -> int:
        """Reseed particles that left the bound or went non-finite. Returns count."""
        with np.errstate(over="ignore", invalid="ignore"):
            mag = np.sqrt(np.sum(pts * pts, axis=1))
        bad = ~np.isfinite(mag) | (mag > self.bound)
        k = int(np.count_nonzero(bad))
        if k:
            pts[bad] = self.random_points(field, k)
        return k

    def distance_scale(self, field: AttractorField, view_distance: float) -> float:
        return field.viewpoint_distance / max(float(view_distance), self.min_view_distance)

    def step(self, field: AttractorField, view_distance: float):
        if self.state is None:
            self.reset(field)

        pos = self.state.positions
        with np.errstate(over="ignore", invalid="ignore"):
            pos += field.velocity(pos) * field.time_step

        self.last_respawns = self.repair(field, pos)
        if self.last_respawns:
            logger.debug("Respawned %d diverged particles (%s)", self.last_respawns, field.name)

        self._render_pos[:] = field.to_render(pos, self.distance_scale(field, view_distance))
        return self.render_buffers()

    # ---------- render buffers ----------

    def write_render(self, render_pos: np.ndarray, colors: np.ndarray | None = None):
        self._render_pos[:] = render_pos
        if colors is not None:
            self.state.colors[:] = colors

    def render_buffers(self):
        return _readonly(self._render_pos), _readonly(self.state.colors)
