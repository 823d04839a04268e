# app.py - hand-steered strange attractors
import logging
import time
import cv2

from attractors import CYCLE, UnknownField
from engine import AttractorEngine
from gesture import DetectorStatus, GestureStatus
from logging_config import setup_logging
from params import Params
from renderer import Renderer, draw_inset, draw_skeleton, draw_status

logger = logging.getLogger(__name__)

WINDOW_NAME = "Attractor Morph"
WINDOW_W, WINDOW_H = 960, 720

MIRROR_CAMERA = True
ENABLE_HANDS = True

# Shift+1..5 on a US layout
INSTANT_KEYS = "!@#$%"


def open_camera(max_index=6):
    for i in range(max_index):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            ok, _ = cap.read()
            if ok:
                print(f"✅ Using camera index: {i}")
                return cap
        cap.release()
    raise RuntimeError(f"❌ No working camera found (0–{max_index-1}).")


def _init_tracker(engine):
    if not ENABLE_HANDS:
        engine.set_detector_status(DetectorStatus.FAILED)
        return None

    try:
        from hands import HandTracker
        tracker = HandTracker()
    except Exception:
        logger.exception("Hand tracker init failed")
        print("⚠️  Hand tracking failed - attractors keep running without it")
        engine.set_detector_status(DetectorStatus.FAILED)
        return None

    engine.set_detector_status(DetectorStatus.READY)
    print("✅ Hand tracking enabled (fist = next attractor, palm = orbit)")
    return tracker


def handle_key(engine, key: int):
    ch = chr(key)
    try:
        if ch in "12345":
            engine.request_switch(CYCLE[int(ch) - 1], animate=True)
        elif ch in INSTANT_KEYS:
            engine.request_switch(CYCLE[INSTANT_KEYS.index(ch)], animate=False)
    except UnknownField as e:
        logger.warning("%s", e)


def main():
    setup_logging()
    params = Params()
    engine = AttractorEngine(params)
    renderer = Renderer(WINDOW_W, WINDOW_H)

    cap = None
    try:
        cap = open_camera()
    except RuntimeError as e:
        print(e)

    tracker = _init_tracker(engine) if cap is not None else None
    if tracker is None:
        engine.set_detector_status(DetectorStatus.FAILED)

    @engine.on_switched
    def _announce(fid):
        print(f"✨ Attractor: {fid.value}")

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    print("\n" + "="*60)
    print("🌀 STRANGE ATTRACTORS")
    print("="*60)
    print("\n📋 CONTROLS:")
    print("   1-5 - Morph to Lorenz/Aizawa/Thomas/Halvorsen/Arneodo")
    print("   Shift+1-5 - Switch instantly")
    print("   Fist - Next attractor | Move palm - Orbit camera")
    print("   ESC - Exit")
    print("\n" + "="*60 + "\n")

    prev = time.time()
    fps_smooth = 0.0

    while True:
        cam_frame = None
        hand = None
        if cap is not None:
            ok, cam_frame = cap.read()
            if ok:
                if MIRROR_CAMERA:
                    cam_frame = cv2.flip(cam_frame, 1)
                if tracker is not None:
                    hand = tracker.process(cam_frame)
            else:
                cam_frame = None

        engine.push_hand_frame(hand)
        out = engine.tick()

        now = time.time()
        dt = max(1e-6, now - prev)
        prev = now
        fps = 1.0 / dt
        fps_smooth = fps if fps_smooth == 0 else 0.9 * fps_smooth + 0.1 * fps

        img = renderer.render(out.positions, out.colors, out.pose)
        if cam_frame is not None:
            draw_skeleton(cam_frame, hand)
            draw_inset(img, cam_frame)
        draw_status(img, engine.current_field.value, engine.status_text(),
                    out.gesture_status is not GestureStatus.NO_HAND)
        cv2.putText(img, f"FPS: {fps_smooth:5.1f}", (WINDOW_W - 130, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.55, (255, 255, 128), 1, cv2.LINE_AA)

        cv2.imshow(WINDOW_NAME, img)

        key = cv2.waitKey(1) & 0xFF
        if key == 27:
            break
        if key != 255:
            handle_key(engine, key)

    if cap is not None:
        cap.release()
    if tracker is not None:
        tracker.close()
    cv2.destroyAllWindows()

    print("\n✅ Shutdown complete")


if __name__ == "__main__":
    main()
