"""
Focus Meter module.
Converts the raw attention score into the dashboard's focus level reading.
"""

from enum import Enum
from typing import Dict, Any

import numpy as np

import config


class FocusLevel(Enum):
    """Enum for focus meter levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FocusMeter:
    """
    Focus level indicator driven by the attention score alone.

    This is a different signal from the weighted attentiveness score used by
    the classifier; the two are reported side by side.
    """

    def __init__(
        self,
        high_threshold: float = config.FOCUS_HIGH_THRESHOLD,
        medium_threshold: float = config.FOCUS_MEDIUM_THRESHOLD
    ):
        """
        Initialize the focus meter.

        Args:
            high_threshold: Attention score above which focus is high.
            medium_threshold: Attention score above which focus is medium.
        """
        self.high_threshold = high_threshold
        self.medium_threshold = medium_threshold

    def get_level(self, attention_score: float) -> FocusLevel:
        if attention_score > self.high_threshold:
            return FocusLevel.HIGH
        if attention_score > self.medium_threshold:
            return FocusLevel.MEDIUM
        return FocusLevel.LOW

    def measure(self, attention_score: float) -> Dict[str, Any]:
        """
        Compute the focus meter reading.

        Args:
            attention_score: Attention score in [0, 1].

        Returns:
            Dictionary with the rounded percentage and the focus level.
        """
        score = float(np.clip(attention_score, 0.0, 1.0))
        return {
            # Half rounds up, as the dashboard displays it
            "percentage": int(np.floor(score * 100 + 0.5)),
            "level": self.get_level(score)
        }
