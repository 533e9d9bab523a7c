import logging
import time

import cv2
import numpy as np

from agro_brain.config import SAMPLE_SIZE
from agro_brain.debug_sink import DebugSink
from agro_brain.session import FrameSession
from ui.overlay_renderer import OverlayRenderer

logger = logging.getLogger(__name__)

WINDOW_NAME = "AgroBrain Camera"
KEY_ESC = 27
KEY_STOP = ord("s")
KEY_DEBUG = ord("d")


class CameraLoop:
    """
    Hosts one FrameSession on an OpenCV capture. One frame is handled
    end-to-end per iteration; the next frame is read only after it finished.
    """

    def __init__(self, classifier, camera_index=0, debug=False, display_size=None,
                 sample_size=SAMPLE_SIZE):
        self.classifier = classifier
        self.camera_index = camera_index
        self.display_size = display_size  # (w, h) of the window, None = frame size

        self.debug_sink = DebugSink(enabled=debug)
        self.session = FrameSession(debug_sink=self.debug_sink, sample_size=sample_size)
        self.renderer = OverlayRenderer()

        self.cap = None
        self.last_decision = None

        self.fps_start = time.time()
        self.fps_n = 0
        self.fps = 0.0

    def _update_fps(self):
        self.fps_n += 1
        dt = time.time() - self.fps_start
        if dt >= 1.0:
            self.fps = self.fps_n / dt
            self.fps_n = 0
            self.fps_start = time.time()

    def _open_camera(self):
        cap = cv2.VideoCapture(self.camera_index)
        if cap.isOpened():
            return cap
        cap.release()

        if self.camera_index != 0:
            logger.warning("Camera %s unavailable, falling back to camera 0", self.camera_index)
            cap = cv2.VideoCapture(0)
            if cap.isOpened():
                return cap
            cap.release()
        return None

    def start(self) -> bool:
        """Open the camera and start a fresh session."""
        self.cap = self._open_camera()
        if self.cap is None:
            logger.error("Could not open camera %s", self.camera_index)
            return False

        self.session.start()
        self.last_decision = None
        logger.info("Camera started. ESC exits, 's' stops/starts, 'd' toggles debug.")
        return True

    def stop(self):
        """Stop the session and release the camera."""
        self.session.stop()
        self.last_decision = None
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        logger.info("Camera stopped")

    def step(self, frame):
        """One tick: classify, correct, vote, draw."""
        H, W = frame.shape[:2]
        # Skipped ticks draw no banner
        self.last_decision = self.session.tick(frame, self.classifier.classify,
                                               ready=frame.size > 0,
                                               display_size=self.display_size)

        debug = self.debug_sink.info if self.debug_sink.enabled else None
        out = self.renderer.render(frame, self.last_decision, debug)

        cv2.putText(out, f"FPS: {self.fps:.1f}", (W - 140, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 0), 2, cv2.LINE_AA)
        return out

    def idle_frame(self, width=640, height=480):
        """Placeholder shown while the session is stopped."""
        out = np.zeros((height, width, 3), dtype=np.uint8)
        text = "Camera stopped - press 's' to start"
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, _), _ = cv2.getTextSize(text, font, 0.6, 1)
        cv2.putText(out, text, ((width - tw) // 2, height // 2),
                    font, 0.6, (170, 170, 170), 1, cv2.LINE_AA)
        return out

    def handle_key(self, key) -> bool:
        """
        React to a key press.

        Returns:
            False when the loop should exit
        """
        if key == KEY_ESC:
            return False
        if key == KEY_STOP:
            if self.session.running:
                self.stop()
            elif not self.start():
                logger.error("Restart failed, still stopped")
        elif key == KEY_DEBUG:
            state = self.debug_sink.toggle()
            logger.info("Debug panel %s", "on" if state else "off")
        return True

    def run(self) -> bool:
        if not self.start():
            return False

        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

        try:
            while True:
                if self.session.running:
                    ret, frame = self.cap.read()
                    if not ret:
                        logger.warning("Frame grab failed")
                        break

                    self._update_fps()
                    out = self.step(frame)
                    wait_ms = 1
                else:
                    out = self.idle_frame()
                    wait_ms = 30

                cv2.imshow(WINDOW_NAME, out)

                key = cv2.waitKey(wait_ms) & 0xFF
                if not self.handle_key(key):
                    break

        finally:
            self.stop()
            cv2.destroyAllWindows()

        return True
