"""
Camera capture module for the Focus Dashboard Engine.
Acquires and releases the webcam without blocking the event loop and
reports readiness to the telemetry feed.
"""

import asyncio
import logging
import time
from typing import Optional, Tuple, Any

import cv2

import config
from telemetry import TelemetryFeed

logger = logging.getLogger(__name__)


class CameraCapture:
    """
    Webcam capability backed by OpenCV.

    acquire() opens the device and checks that a first frame can be read.
    release() is idempotent and safe to call before acquire().
    """

    def __init__(
        self,
        feed: Optional[TelemetryFeed] = None,
        camera_index: int = config.CAMERA_INDEX,
        width: int = config.CAMERA_WIDTH,
        height: int = config.CAMERA_HEIGHT,
        target_fps: int = config.CAMERA_FPS
    ):
        """
        Initialize camera capture.

        Args:
            feed: Telemetry feed that receives the camera ready flag.
            camera_index: Camera device index (0 for default webcam)
            width: Frame width in pixels
            height: Frame height in pixels
            target_fps: Target frames per second
        """
        self.feed = feed
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.target_fps = target_fps

        self.cap: Optional[cv2.VideoCapture] = None
        self.is_running = False
        self.frame_count = 0
        self.start_time = 0.0

        # Bumped by release() so an in-flight acquire() can tell it was superseded
        self._generation = 0

    async def acquire(self) -> bool:
        """
        Open the camera.

        Returns:
            True if access to the camera was granted, False otherwise.
        """
        generation = self._generation
        loop = asyncio.get_running_loop()

        try:
            cap = await loop.run_in_executor(None, self._open)
        except Exception as e:
            logger.error("Error accessing webcam: %s", e)
            return False

        if cap is None:
            return False

        if generation != self._generation:
            # Released while the device was opening
            logger.info("Discarding camera acquired after release")
            cap.release()
            return False

        self.cap = cap
        self.is_running = True
        self.start_time = time.time()
        self.frame_count = 0

        ready = await self._check_playback()
        if generation != self._generation:
            return False

        self._set_ready(ready)
        return True

    def release(self):
        """Stop the camera capture and release resources. Safe to repeat."""
        self._generation += 1
        self.is_running = False

        if self.cap is not None:
            cap, self.cap = self.cap, None
            try:
                cap.release()
            except Exception as e:
                logger.warning("Error releasing camera: %s", e)

            elapsed = time.time() - self.start_time if self.start_time > 0 else 0
            logger.info("Camera stopped. Read %d frames in %.1fs", self.frame_count, elapsed)

        self._set_ready(False)

    async def read_frame(self) -> Tuple[bool, Optional[Any]]:
        """
        Read a frame from the camera without blocking the loop.

        Returns:
            Tuple of (success, frame). Frame is None if capture failed.
        """
        if not self.is_running or self.cap is None:
            return False, None

        cap = self.cap
        loop = asyncio.get_running_loop()
        ret, frame = await loop.run_in_executor(None, cap.read)

        if ret:
            self.frame_count += 1
            # Flip horizontally for mirror effect
            frame = cv2.flip(frame, 1)
        else:
            frame = None

        return ret, frame

    def _open(self) -> Optional[cv2.VideoCapture]:
        """Blocking open, run in the executor."""
        cap = cv2.VideoCapture(self.camera_index)

        if not cap.isOpened():
            logger.error("Could not open camera %d", self.camera_index)
            cap.release()
            return None

        # Set camera properties
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        cap.set(cv2.CAP_PROP_FPS, self.target_fps)

        actual_width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = cap.get(cv2.CAP_PROP_FPS)
        logger.info(
            "Camera started: %dx%d @ %.1f FPS", actual_width, actual_height, actual_fps
        )
        return cap

    async def _check_playback(self) -> bool:
        try:
            ret, _ = await self.read_frame()
        except Exception as e:
            logger.warning("Error playing video: %s", e)
            return False

        if not ret:
            logger.warning("Camera opened but no frame could be read")
        return ret

    def _set_ready(self, ready: bool):
        if self.feed is not None:
            self.feed.set_camera_state(ready=ready)
