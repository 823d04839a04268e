import logging

import cv2
import numpy as np

import mediapipe as mp

from gesture import HandFrame

logger = logging.getLogger(__name__)


class HandTracker:
    """
    MediaPipe hands wrapper (one hand).

    process(frame_bgr) returns a HandFrame with normalized (x, y, z)
    landmarks, or None when no hand is in view.
    """

    def __init__(self, det_conf=0.5, track_conf=0.5):
        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=False,
            max_num_hands=1,
            model_complexity=1,
            min_detection_confidence=float(det_conf),
            min_tracking_confidence=float(track_conf),
        )
        logger.info("MediaPipe hands ready")

    def process(self, frame_bgr):
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # Fixes NORM_RECT without IMAGE_DIMENSIONS warning
        self.hands._image_width, self.hands._image_height = frame_bgr.shape[1], frame_bgr.shape[0]  # type: ignore[attr-defined]

        res = self.hands.process(frame_rgb)

        if not res.multi_hand_landmarks:
            return None

        hand_lms = res.multi_hand_landmarks[0]
        pts = np.array([(lm.x, lm.y, lm.z) for lm in hand_lms.landmark], dtype=np.float64)
        return HandFrame(pts)

    def close(self):
        self.hands.close()
