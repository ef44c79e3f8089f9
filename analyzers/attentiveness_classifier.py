"""
Attentiveness Classifier module.
Samples focus telemetry on a fixed cadence and classifies the subject's
engagement state with a short human-readable rationale.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Callable, List

import config
from telemetry import TelemetryFeed, FocusTelemetry, CameraState

logger = logging.getLogger(__name__)


class AttentivenessState(Enum):
    """Enum for attentiveness states."""
    ATTENTIVE = "attentive"
    DISTRACTED = "distracted"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class AttentivenessReading:
    """Result of one classifier tick."""
    state: AttentivenessState
    description: str
    weighted_score: float = 0.0


ReadingCallback = Callable[[AttentivenessReading, FocusTelemetry], None]


def compute_weighted_score(
    telemetry: FocusTelemetry,
    attention_weight: float = config.WEIGHT_ATTENTION,
    posture_weight: float = config.WEIGHT_POSTURE
) -> float:
    """Composite attentiveness score used only for state classification."""
    return telemetry.attention_score * attention_weight + telemetry.posture * posture_weight


def classify_state(telemetry: FocusTelemetry) -> AttentivenessState:
    """
    Map a telemetry snapshot to an attentiveness state.

    Being distracted for longer than the override window wins over the
    weighted score, even when the score alone would read as attentive.

    Args:
        telemetry: Snapshot taken for the current tick.

    Returns:
        The classified AttentivenessState.
    """
    if telemetry.time_distracted > config.DISTRACTION_OVERRIDE_SECONDS:
        return AttentivenessState.DISTRACTED

    weighted = compute_weighted_score(telemetry)

    if weighted > config.ATTENTIVE_THRESHOLD:
        return AttentivenessState.ATTENTIVE
    if weighted < config.DISTRACTED_THRESHOLD:
        return AttentivenessState.DISTRACTED
    return AttentivenessState.UNKNOWN


def describe(
    state: AttentivenessState,
    telemetry: FocusTelemetry,
    rng: Optional[random.Random] = None
) -> str:
    """
    Pick the description shown next to a state.

    Args:
        state: State returned by classify_state().
        telemetry: The same snapshot the state was computed from.
        rng: Source for the generic phrases. Anything with a choice() method.

    Returns:
        Description string.
    """
    if rng is None:
        rng = random

    if state == AttentivenessState.ATTENTIVE:
        if telemetry.attention_score > config.STRONG_ATTENTION_THRESHOLD:
            return config.ATTENTIVE_PHRASES["strong_attention"]
        if telemetry.posture > config.OPTIMAL_POSTURE_THRESHOLD:
            return config.ATTENTIVE_PHRASES["optimal_posture"]
        return rng.choice(config.ATTENTIVE_RANDOM_PHRASES)

    if state == AttentivenessState.DISTRACTED:
        if telemetry.attention_score < config.LOW_ATTENTION_THRESHOLD:
            return config.DISTRACTED_PHRASES["low_attention"]
        if telemetry.posture < config.LOW_POSTURE_THRESHOLD:
            return config.DISTRACTED_PHRASES["low_posture"]
        if telemetry.time_distracted > config.DISTRACTION_OVERRIDE_SECONDS:
            return config.DISTRACTED_PHRASES["distracted_for"].format(
                seconds=telemetry.time_distracted
            )
        return rng.choice(config.DISTRACTED_RANDOM_PHRASES)

    return config.UNKNOWN_PHRASE


def classify(
    telemetry: FocusTelemetry,
    rng: Optional[random.Random] = None
) -> AttentivenessReading:
    """Classify a telemetry snapshot into a full reading."""
    state = classify_state(telemetry)
    return AttentivenessReading(
        state=state,
        description=describe(state, telemetry, rng),
        weighted_score=compute_weighted_score(telemetry)
    )


class AttentivenessClassifier:
    """
    Periodic attentiveness classifier.

    Sampling is enabled only while a session is active and the camera is both
    ready and facing the subject. The enabled flag is recomputed whenever one
    of those inputs changes; the timer starts on the rising edge and is
    cancelled on the falling edge. The flag only turns on once a timer task
    exists, so an input change seen outside a running loop is retried on
    the next one.
    """

    def __init__(
        self,
        feed: TelemetryFeed,
        interval: float = config.SAMPLING_INTERVAL,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the classifier.

        Args:
            feed: Telemetry feed to sample from (read-only use).
            interval: Seconds between ticks.
            rng: Random source for generic description phrases.
        """
        self.feed = feed
        self.interval = interval
        self.rng = rng if rng is not None else random.Random()

        # Inputs to the derived sampling flag
        self._session_active = False
        self._sampling_enabled = False

        self._task: Optional[asyncio.Task] = None
        self._last_reading: Optional[AttentivenessReading] = None
        self.tick_count = 0

        self._callbacks: List[ReadingCallback] = []

        self.feed.add_camera_listener(self._on_camera_state_change)

    @property
    def sampling_enabled(self) -> bool:
        return self._sampling_enabled

    @property
    def is_running(self) -> bool:
        """True while a sampling timer task is scheduled."""
        return self._task is not None and not self._task.done()

    @property
    def reading(self) -> Optional[AttentivenessReading]:
        """Latest reading, or None while sampling is disabled."""
        if not self._sampling_enabled:
            return None
        return self._last_reading

    @property
    def last_reading(self) -> Optional[AttentivenessReading]:
        """Latest reading regardless of whether sampling is enabled."""
        return self._last_reading

    def add_reading_callback(self, callback: ReadingCallback):
        """
        Register a callback called after each tick.

        Args:
            callback: Function that receives (reading, telemetry).
        """
        self._callbacks.append(callback)

    def set_session_active(self, active: bool):
        """
        Tell the classifier whether a recording session is running.

        Args:
            active: True while the session is recording.
        """
        active = bool(active)
        if active and not self._session_active:
            # New recording span, drop the previous session's reading
            self._last_reading = None
            self.tick_count = 0
        self._session_active = active
        self._refresh()

    def tick(self) -> Optional[AttentivenessReading]:
        """
        Run one classification on a fresh snapshot.

        Returns:
            The new reading, or None if the tick was skipped because the
            camera is not ready or not facing the subject.
        """
        camera = self.feed.get_camera_state()
        telemetry = self.feed.get_telemetry()

        if not camera.live:
            return None

        reading = classify(telemetry, self.rng)
        self._last_reading = reading
        self.tick_count += 1

        logger.debug(
            "Attentiveness metrics: weighted=%.3f attention=%.2f posture=%.2f "
            "distracted=%ds state=%s",
            reading.weighted_score,
            telemetry.attention_score,
            telemetry.posture,
            telemetry.time_distracted,
            reading.state.value
        )

        for callback in list(self._callbacks):
            try:
                callback(reading, telemetry)
            except Exception:
                logger.exception("Reading callback failed")

        return reading

    def stop(self):
        """Stop sampling immediately. No tick runs after this returns."""
        self._session_active = False
        self._refresh()

    def close(self):
        """Stop sampling and detach from the feed."""
        self.stop()
        self.feed.remove_camera_listener(self._on_camera_state_change)

    def _on_camera_state_change(self, camera_state: CameraState):
        self._refresh()

    def _refresh(self):
        """Recompute the sampling flag and start/stop the timer on edges."""
        enabled = self._session_active and self.feed.get_camera_state().live

        if enabled and not self.is_running:
            # Stays disabled until a timer is actually scheduled
            self._sampling_enabled = self._start_timer()
        elif not enabled and self._sampling_enabled:
            self._sampling_enabled = False
            self._cancel_timer()

    def _start_timer(self) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, sampling timer not started")
            return False

        self._cancel_timer()
        self._task = loop.create_task(self._sampling_loop())
        logger.info("Attentiveness detection started")
        return True

    def _cancel_timer(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Attentiveness detection stopped")

    async def _sampling_loop(self):
        while True:
            await asyncio.sleep(self.interval)
            if not self._sampling_enabled:
                return
            self.tick()
