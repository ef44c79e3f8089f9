"""
Telemetry feed module for the Focus Dashboard Engine.
Holds the latest focus measurements and camera state published by the
perception collaborator and hands out immutable snapshots to readers.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FocusTelemetry:
    """Snapshot of the focus measurements at one point in time."""
    attention_score: float = 0.0
    posture: float = 0.0
    time_distracted: int = 0


@dataclass(frozen=True)
class CameraState:
    """Snapshot of the webcam state."""
    ready: bool = False
    facing_camera: bool = False

    @property
    def live(self) -> bool:
        return self.ready and self.facing_camera


CameraListener = Callable[[CameraState], None]


class TelemetryFeed:
    """
    Latest-value store for focus telemetry and camera state.

    Only the perception/webcam collaborators write to the feed. Readers call
    get_telemetry() / get_camera_state() and receive frozen snapshots, so a
    value read once stays consistent for the rest of a tick.
    """

    def __init__(self):
        """Initialize an empty feed."""
        self._telemetry = FocusTelemetry()
        self._camera_state = CameraState()
        self._camera_listeners: List[CameraListener] = []

    def get_telemetry(self) -> FocusTelemetry:
        return self._telemetry

    def get_camera_state(self) -> CameraState:
        return self._camera_state

    def update(
        self,
        attention_score: Optional[float] = None,
        posture: Optional[float] = None,
        time_distracted: Optional[int] = None
    ) -> FocusTelemetry:
        """
        Publish new telemetry values. Omitted values keep their last value.

        Scores are clamped to [0, 1]. Seconds distracted never decrease within
        a session; a smaller value is ignored until reset() is called.

        Returns:
            The new telemetry snapshot.
        """
        current = self._telemetry

        if attention_score is None:
            attention_score = current.attention_score
        if posture is None:
            posture = current.posture

        if time_distracted is None:
            time_distracted = current.time_distracted
        else:
            time_distracted = max(0, int(time_distracted))
            if time_distracted < current.time_distracted:
                logger.debug(
                    "Ignoring decreasing time_distracted %d (current %d)",
                    time_distracted, current.time_distracted
                )
                time_distracted = current.time_distracted

        self._telemetry = FocusTelemetry(
            attention_score=float(np.clip(attention_score, 0.0, 1.0)),
            posture=float(np.clip(posture, 0.0, 1.0)),
            time_distracted=time_distracted
        )
        return self._telemetry

    def set_camera_state(
        self,
        ready: Optional[bool] = None,
        facing_camera: Optional[bool] = None
    ) -> CameraState:
        """
        Publish a new camera state and notify listeners if it changed.

        Returns:
            The new camera state snapshot.
        """
        current = self._camera_state
        new_state = CameraState(
            ready=current.ready if ready is None else bool(ready),
            facing_camera=current.facing_camera if facing_camera is None else bool(facing_camera)
        )
        if new_state == current:
            return current

        self._camera_state = new_state
        for listener in list(self._camera_listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Camera state listener failed")
        return new_state

    def add_camera_listener(self, listener: CameraListener):
        """Register a callback invoked with the new CameraState on change."""
        if listener not in self._camera_listeners:
            self._camera_listeners.append(listener)

    def remove_camera_listener(self, listener: CameraListener):
        """Unregister a camera state callback. Unknown callbacks are ignored."""
        if listener in self._camera_listeners:
            self._camera_listeners.remove(listener)

    def reset(self):
        """Clear telemetry for a new session. Camera state is kept."""
        self._telemetry = FocusTelemetry()
