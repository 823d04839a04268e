# attractors.py
# Catalog of strange attractors. Each field is a pure vector function plus the
# per-field knobs used by the simulator, morph and camera.
#
# Derivatives are written against numpy arrays so a whole population steps in
# one call; they work on plain floats too.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable
import numpy as np


class AttractorError(Exception):
    pass


class UnknownField(AttractorError, KeyError):
    """Raised when an attractor id is not in the catalog."""

    def __str__(self):
        return f"Unknown attractor field: {self.args[0]!r}"


class AttractorId(Enum):
    LORENZ = "lorenz"
    AIZAWA = "aizawa"
    THOMAS = "thomas"
    HALVORSEN = "halvorsen"
    ARNEODO = "arneodo"


# Fist cycles through this order
CYCLE = (
    AttractorId.LORENZ,
    AttractorId.AIZAWA,
    AttractorId.THOMAS,
    AttractorId.HALVORSEN,
    AttractorId.ARNEODO,
)


def lorenz(x, y, z):
    s, r, b = 10.0, 28.0, 8.0 / 3.0
    return s * (y - x), x * (r - z) - y, x * y - b * z


def aizawa(x, y, z):
    a, b, c, d, e, f = 0.95, 0.7, 0.6, 3.5, 0.25, 0.1
    return (
        (z - b) * x - d * y,
        d * x + (z - b) * y,
        c + a * z - (z * z * z) / 3.0 - (x * x + y * y) * (1.0 + e * z) + f * z * x * x * x,
    )


def thomas(x, y, z):
    b = 0.208186
    return np.sin(y) - b * x, np.sin(z) - b * y, np.sin(x) - b * z


def halvorsen(x, y, z):
    a = 1.89
    return (
        -a * x - 4.0 * y - 4.0 * z - y * y,
        -a * y - 4.0 * z - 4.0 * x - z * z,
        -a * z - 4.0 * x - 4.0 * y - x * x,
    )


def arneodo(x, y, z):
    a, b, c = -5.5, 3.5, -1.0
    return y, z, -a * x - b * y - z + c * x * x * x


@dataclass(frozen=True)
class AttractorField:
    id: AttractorId
    derivative: Callable
    time_step: float
    display_scale: float
    viewpoint_distance: float
    spatial_offset: tuple[float, float, float] = (0.0, 0.0, 0.0)
    seed_offset: tuple[float, float, float] = (0.0, 0.0, 0.0)
    color_base_hue: float = 0.0
    color_hue_range: float = 0.0

    @property
    def name(self) -> str:
        return self.id.value

    def velocity(self, pts: np.ndarray) -> np.ndarray:
        """Derivative for an (N, 3) array of points, returned as (N, 3)."""
        dx, dy, dz = self.derivative(pts[:, 0], pts[:, 1], pts[:, 2])
        return np.stack([dx, dy, dz], axis=1)

    def to_render(self, pts: np.ndarray, extra_scale: float = 1.0) -> np.ndarray:
        s = self.display_scale * float(extra_scale)
        return (pts + np.asarray(self.spatial_offset, dtype=np.float64)) * s


# display_scale is the compact scale (0.6x of the nominal attractor scale)
CATALOG: dict[AttractorId, AttractorField] = {
    AttractorId.LORENZ: AttractorField(
        AttractorId.LORENZ, lorenz,
        time_step=0.005, display_scale=0.3, viewpoint_distance=35.0,
        spatial_offset=(0.0, 0.0, 25.0), seed_offset=(0.0, 0.0, 25.0),
        color_base_hue=0.55, color_hue_range=0.1,
    ),
    AttractorId.AIZAWA: AttractorField(
        AttractorId.AIZAWA, aizawa,
        time_step=0.01, display_scale=6.0, viewpoint_distance=22.0,
        color_base_hue=0.85, color_hue_range=0.1,
    ),
    AttractorId.THOMAS: AttractorField(
        AttractorId.THOMAS, thomas,
        time_step=0.05, display_scale=3.0, viewpoint_distance=14.0,
        color_base_hue=0.6, color_hue_range=0.15,
    ),
    AttractorId.HALVORSEN: AttractorField(
        AttractorId.HALVORSEN, halvorsen,
        time_step=0.008, display_scale=1.2, viewpoint_distance=20.0,
        color_base_hue=0.08, color_hue_range=0.08,
    ),
    AttractorId.ARNEODO: AttractorField(
        AttractorId.ARNEODO, arneodo,
        time_step=0.01, display_scale=1.5, viewpoint_distance=20.0,
        color_base_hue=0.0, color_hue_range=0.1,
    ),
}


def resolve(field_id) -> AttractorId:
    if isinstance(field_id, AttractorId):
        return field_id
    if isinstance(field_id, AttractorField):
        return field_id.id
    try:
        return AttractorId(str(field_id).strip().lower())
    except ValueError:
        raise UnknownField(field_id) from None


def lookup(field_id) -> AttractorField:
    fid = resolve(field_id)
    try:
        return CATALOG[fid]
    except KeyError:
        raise UnknownField(field_id) from None


def next_field(field_id) -> AttractorId:
    fid = resolve(field_id)
    return CYCLE[(CYCLE.index(fid) + 1) % len(CYCLE)]


def validate_catalog(catalog=None) -> None:
    catalog = CATALOG if catalog is None else catalog
    for fid in AttractorId:
        if fid not in catalog:
            raise ValueError(f"Catalog is missing field {fid.value!r}")
    for fid, f in catalog.items():
        if f.id is not fid:
            raise ValueError(f"Catalog key {fid.value!r} holds field {f.id.value!r}")
        if not f.time_step > 0.0:
            raise ValueError(f"{f.name}: time_step must be > 0 (got {f.time_step})")
        if not f.viewpoint_distance > 0.0:
            raise ValueError(f"{f.name}: viewpoint_distance must be > 0 (got {f.viewpoint_distance})")
        if not f.display_scale > 0.0:
            raise ValueError(f"{f.name}: display_scale must be > 0 (got {f.display_scale})")
        if not 0.0 <= f.color_base_hue < 1.0 or f.color_hue_range < 0.0:
            raise ValueError(f"{f.name}: color hue base/range out of range")
