"""
Session Analytics module.
Collects and aggregates classifier readings throughout the session.
"""

import time
from typing import Dict, Any, List, Optional, Callable

import numpy as np

import config
from analyzers.attentiveness_classifier import AttentivenessReading, AttentivenessState
from telemetry import FocusTelemetry


class SessionAnalytics:
    """
    Collects attentiveness readings for a session.
    Provides per-state tallies and time-series data for the dashboard.
    """

    def __init__(
        self,
        sample_rate: float = config.ANALYTICS_SAMPLE_RATE,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize session analytics.

        Args:
            sample_rate: Rate at which to sample the time series (seconds).
            clock: Time source in seconds.
        """
        self.sample_rate = sample_rate
        self.clock = clock
        self.start_time: Optional[float] = None
        self.last_sample_time: Optional[float] = None

        self.attentiveness_history: List[Dict] = []
        self._reset_data()

    def start_session(self):
        """Start a new analytics session."""
        self.start_time = self.clock()
        self.last_sample_time = None
        self._reset_data()

    def record(self, reading: AttentivenessReading, telemetry: FocusTelemetry):
        """
        Record one classifier tick.

        Args:
            reading: Reading produced by the classifier.
            telemetry: Snapshot the reading was computed from.
        """
        current_time = self.clock()

        if self.start_time is None:
            self.start_session()

        self.total_readings += 1
        self.state_counts[reading.state] += 1
        self.attention_samples.append(telemetry.attention_score)
        self.posture_samples.append(telemetry.posture)
        self.weighted_samples.append(reading.weighted_score)
        self.time_distracted = telemetry.time_distracted

        if (self.last_sample_time is None
                or current_time - self.last_sample_time >= self.sample_rate):
            self.attentiveness_history.append({
                "time": current_time - self.start_time,
                "state": reading.state.value,
                "weighted_score": reading.weighted_score,
                "attention_score": telemetry.attention_score,
                "posture": telemetry.posture
            })
            self.last_sample_time = current_time

    def get_summary(self) -> Dict[str, Any]:
        """
        Get aggregate summary of the session.

        Returns:
            Dictionary containing session summary metrics.
        """
        if self.total_readings == 0:
            return self._empty_summary()

        attentive = self.state_counts[AttentivenessState.ATTENTIVE]
        distracted = self.state_counts[AttentivenessState.DISTRACTED]

        return {
            "total_readings": self.total_readings,
            "attentive_readings": attentive,
            "distracted_readings": distracted,
            "unknown_readings": self.state_counts[AttentivenessState.UNKNOWN],
            "attentive_percentage": round(attentive / self.total_readings * 100, 1),
            "distracted_percentage": round(distracted / self.total_readings * 100, 1),
            "mean_attention_score": round(float(np.mean(self.attention_samples)), 3),
            "mean_posture_score": round(float(np.mean(self.posture_samples)), 3),
            "mean_weighted_score": round(float(np.mean(self.weighted_samples)), 3),
            "time_distracted": self.time_distracted
        }

    def get_time_series(self) -> Dict[str, List]:
        """Get time-series data."""
        return {"attentiveness": self.attentiveness_history}

    def _empty_summary(self) -> Dict[str, Any]:
        """Return empty summary when no data collected."""
        return {
            "total_readings": 0,
            "attentive_readings": 0,
            "distracted_readings": 0,
            "unknown_readings": 0,
            "attentive_percentage": 0,
            "distracted_percentage": 0,
            "mean_attention_score": 0,
            "mean_posture_score": 0,
            "mean_weighted_score": 0,
            "time_distracted": 0
        }

    def _reset_data(self):
        """Reset all collected data."""
        self.attentiveness_history = []
        self.total_readings = 0
        self.state_counts = {state: 0 for state in AttentivenessState}
        self.attention_samples: List[float] = []
        self.posture_samples: List[float] = []
        self.weighted_samples: List[float] = []
        self.time_distracted = 0

    def reset(self):
        """Reset analytics for a new session."""
        self.start_time = None
        self.last_sample_time = None
        self._reset_data()
