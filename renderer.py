from __future__ import annotations
import math
import numpy as np
import cv2


class Renderer:
    """Lightweight point renderer: projects the particle buffer through a look-at camera."""

    def __init__(self, width: int = 960, height: int = 720, fov_deg: float = 50.0, near: float = 0.1):
        self.width = int(width)
        self.height = int(height)
        self.fov = math.radians(float(fov_deg))
        self.near = float(near)
        self.glow = True

    def project(self, positions, pose):
        """Returns (xs, ys, depth, keep_mask) in pixels for an (N, 3) buffer."""
        eye = np.asarray(pose.position, dtype=np.float64)
        fwd = np.asarray(pose.look_at, dtype=np.float64) - eye
        fwd /= (np.linalg.norm(fwd) + 1e-9)

        up = np.array([0.0, 1.0, 0.0])
        if abs(float(fwd @ up)) > 0.999:
            up = np.array([0.0, 0.0, -1.0])
        right = np.cross(fwd, up)
        right /= (np.linalg.norm(right) + 1e-9)
        cam_up = np.cross(right, fwd)

        rel = np.asarray(positions, dtype=np.float64) - eye
        xc = rel @ right
        yc = rel @ cam_up
        zc = rel @ fwd

        f = (self.height * 0.5) / math.tan(self.fov * 0.5)
        keep = zc > self.near
        zz = np.where(keep, zc, 1.0)
        xs = (self.width * 0.5 + (xc / zz) * f).astype(np.int32)
        ys = (self.height * 0.5 - (yc / zz) * f).astype(np.int32)
        keep &= (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        return xs, ys, zc, keep

    def render(self, positions, colors, pose):
        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        if len(positions) == 0:
            return img

        xs, ys, depth, keep = self.project(positions, pose)
        idx = np.nonzero(keep)[0]
        # far first so near points win
        idx = idx[np.argsort(-depth[idx])]

        rgb = np.clip(np.asarray(colors)[idx] * 255.0, 0, 255).astype(np.uint8)
        img[ys[idx], xs[idx]] = rgb[:, ::-1]  # RGB -> BGR

        if self.glow:
            img = cv2.dilate(img, np.ones((2, 2), np.uint8))
            blur = cv2.GaussianBlur(img, (0, 0), 3)
            img = cv2.addWeighted(img, 0.9, blur, 0.4, 0)
        return img


def draw_status(img, name: str, status: str, hand: bool):
    """Top-left attractor name + bottom-right hand status, like a small HUD panel."""
    h, w = img.shape[:2]
    cv2.putText(img, "ATTRACTOR", (20, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (200, 170, 120), 1, cv2.LINE_AA)
    cv2.putText(img, name.capitalize(), (20, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255, 255, 255), 2, cv2.LINE_AA)

    dot = (120, 220, 90) if hand else (90, 90, 240)
    cv2.circle(img, (w - 230, h - 170), 5, dot, -1, cv2.LINE_AA)
    cv2.putText(img, status, (w - 218, h - 165), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (235, 235, 235), 1, cv2.LINE_AA)
    cv2.putText(img, "1-5 switch | Shift+1-5 instant | Fist to cycle | ESC quit",
                (20, h - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.45, (160, 130, 90), 1, cv2.LINE_AA)
    return img


def draw_inset(img, cam_frame, margin: int = 16, size=(160, 120)):
    """Paste a small camera preview into the bottom-right corner."""
    if cam_frame is None:
        return img
    h, w = img.shape[:2]
    sw, sh = size
    small = cv2.resize(cam_frame, (sw, sh), interpolation=cv2.INTER_AREA)
    y0, x0 = h - sh - margin, w - sw - margin
    img[y0:y0 + sh, x0:x0 + sw] = small
    cv2.rectangle(img, (x0 - 1, y0 - 1), (x0 + sw, y0 + sh), (255, 170, 0), 2, cv2.LINE_AA)
    return img


HAND_CONNECTIONS = (
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17),
)


def draw_skeleton(img, frame, color=(255, 170, 0), dot=(255, 221, 0)):
    """Draw a hand frame's skeleton onto `img` (BGR), scaled to its size."""
    if frame is None:
        return img
    h, w = img.shape[:2]
    pts = [(int(x * w), int(y * h)) for x, y in frame.landmarks[:, :2]]
    for a, b in HAND_CONNECTIONS:
        cv2.line(img, pts[a], pts[b], color, 1, cv2.LINE_AA)
    for p in pts:
        cv2.circle(img, p, 2, dot, -1, cv2.LINE_AA)
    return img
