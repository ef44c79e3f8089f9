"""
Focus Dashboard Engine - Main Orchestrator.
Combines all components into a unified interface for the live dashboard.
"""

import logging
import random
import time
from typing import Dict, Any, Optional, Callable

# Import telemetry and camera
from telemetry import TelemetryFeed
from camera import CameraCapture

# Import analyzers
from analyzers.attentiveness_classifier import AttentivenessClassifier

# Import scoring
from scoring.focus_meter import FocusMeter

# Import analytics
from analytics.session_analytics import SessionAnalytics
from analytics.report_generator import ReportGenerator

# Import session lifecycle
from session.session_controller import SessionController, SessionStatus

import config

logger = logging.getLogger(__name__)


class FocusDashboardEngine:
    """
    Main orchestrator for the attentiveness dashboard.

    Wires the telemetry feed, webcam, classifier and session controller
    together and exposes a read-only snapshot for the presentation layer.

    Can be used as:
    1. An async context manager that tears everything down on exit
    2. Imported and integrated into other applications via its components
    """

    def __init__(
        self,
        webcam=None,
        feed: Optional[TelemetryFeed] = None,
        summary_generator: Optional[Callable] = None,
        transcript_provider: Optional[Callable[[], str]] = None,
        interval: float = config.SAMPLING_INTERVAL,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the dashboard engine.

        Args:
            webcam: Webcam capability. Defaults to an OpenCV CameraCapture.
            feed: Telemetry feed written by the perception collaborator.
            summary_generator: Session summary generator. Defaults to
                ReportGenerator.generate_session_summary.
            transcript_provider: Returns the transcription captured so far.
            interval: Classifier sampling interval in seconds.
            rng: Random source for generic description phrases.
            clock: Wall clock in seconds.
        """
        self.feed = feed if feed is not None else TelemetryFeed()
        self.webcam = webcam if webcam is not None else CameraCapture(feed=self.feed)

        # Initialize analyzers
        self.classifier = AttentivenessClassifier(self.feed, interval=interval, rng=rng)

        # Initialize scoring
        self.focus_meter = FocusMeter()

        # Initialize analytics
        self.session_analytics = SessionAnalytics()
        self.report_generator = ReportGenerator()

        self.controller = SessionController(
            webcam=self.webcam,
            feed=self.feed,
            classifier=self.classifier,
            summary_generator=summary_generator or self.report_generator.generate_session_summary,
            transcript_provider=transcript_provider,
            clock=clock
        )

        self.classifier.add_reading_callback(self.session_analytics.record)
        self.controller.add_status_callback(self._on_status_change)

    def get_current_state(self) -> Dict[str, Any]:
        """
        Get a read-only view of the dashboard state.
        Useful for UI updates and quick status checks.

        Returns:
            State dictionary.
        """
        telemetry = self.feed.get_telemetry()
        camera = self.feed.get_camera_state()
        reading = self.classifier.reading if self.controller.is_recording else None

        return {
            "status": self.controller.status.value,
            "camera": {
                "enabled": self.controller.camera_enabled,
                "ready": camera.ready,
                "facing_camera": camera.facing_camera
            },
            "telemetry": {
                "attention_score": telemetry.attention_score,
                "posture": telemetry.posture,
                "time_distracted": telemetry.time_distracted
            },
            "focus_meter": self.focus_meter.measure(telemetry.attention_score),
            "attentiveness": None if reading is None else {
                "state": reading.state.value,
                "description": reading.description,
                "weighted_score": round(reading.weighted_score, 3)
            },
            "analytics": self.session_analytics.get_summary(),
            "summary": self.controller.summary
        }

    async def request_consent(self) -> bool:
        return await self.controller.request_consent()

    def decline_consent(self) -> bool:
        return self.controller.decline_consent()

    def reoffer_consent(self) -> bool:
        return self.controller.reoffer_consent()

    async def start_session(self) -> bool:
        return await self.controller.start_session()

    async def end_session(self) -> Optional[Any]:
        return await self.controller.end_session()

    def reset_session(self) -> bool:
        return self.controller.reset_session()

    def set_on_reading_callback(self, callback: Callable):
        """
        Set callback to be called after each classifier tick.

        Args:
            callback: Function that receives (reading, telemetry).
        """
        self.classifier.add_reading_callback(callback)

    def set_on_notice_callback(self, callback: Callable):
        """
        Set callback to be called when a notice is emitted.

        Args:
            callback: Function that receives a Notice.
        """
        self.controller.add_notice_callback(callback)

    def close(self):
        """Release all resources."""
        self.controller.teardown()
        self.classifier.close()

    def _on_status_change(self, old_status: SessionStatus, new_status: SessionStatus):
        if new_status == SessionStatus.RECORDING:
            self.feed.reset()
            self.session_analytics.start_session()
        elif new_status == SessionStatus.READY and old_status == SessionStatus.COMPLETE:
            self.session_analytics.reset()

    async def __aenter__(self):
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


# Convenience function for quick integration
def create_engine(webcam=None, **kwargs) -> FocusDashboardEngine:
    """
    Factory function to create a FocusDashboardEngine.

    Args:
        webcam: Webcam capability; an OpenCV camera is used if omitted.

    Returns:
        Configured FocusDashboardEngine instance.
    """
    return FocusDashboardEngine(webcam=webcam, **kwargs)
