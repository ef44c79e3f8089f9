"""
Configuration module for the Focus Dashboard Engine.
Contains all thresholds, parameters, and settings.
"""

import logging

# ============================================================================
# CAMERA SETTINGS
# ============================================================================
CAMERA_INDEX = 0
CAMERA_FPS = 30
CAMERA_WIDTH = 640
CAMERA_HEIGHT = 480

# ============================================================================
# SAMPLING SETTINGS
# ============================================================================
SAMPLING_INTERVAL = 0.5             # seconds between classifier ticks

# ============================================================================
# ATTENTIVENESS CLASSIFICATION SETTINGS
# ============================================================================
# Weighted score = attention * WEIGHT_ATTENTION + posture * WEIGHT_POSTURE
WEIGHT_ATTENTION = 0.6
WEIGHT_POSTURE = 0.4

ATTENTIVE_THRESHOLD = 0.65          # weighted score must be strictly above
DISTRACTED_THRESHOLD = 0.4          # weighted score must be strictly below
DISTRACTION_OVERRIDE_SECONDS = 5    # seconds distracted that force "distracted"

# Description selection thresholds
STRONG_ATTENTION_THRESHOLD = 0.8
OPTIMAL_POSTURE_THRESHOLD = 0.8
LOW_ATTENTION_THRESHOLD = 0.3
LOW_POSTURE_THRESHOLD = 0.3

# Description phrases
ATTENTIVE_PHRASES = {
    "strong_attention": "Strong engagement detected",
    "optimal_posture": "Optimal listening posture",
}
ATTENTIVE_RANDOM_PHRASES = (
    "Engaged eye contact maintained",
    "Active listening indicators",
    "Focused facial orientation",
    "Attention signals detected",
)

DISTRACTED_PHRASES = {
    "low_attention": "Limited screen focus detected",
    "low_posture": "Posture indicates disengagement",
    "distracted_for": "Distracted for {seconds}s",
}
DISTRACTED_RANDOM_PHRASES = (
    "Attention appears elsewhere",
    "Limited engagement signals",
    "Focus wavering",
    "Attention needs refocusing",
)

UNKNOWN_PHRASE = "Processing attention patterns..."

# ============================================================================
# FOCUS METER SETTINGS
# ============================================================================
# The focus meter uses the attention score alone, not the weighted score.
FOCUS_HIGH_THRESHOLD = 0.8
FOCUS_MEDIUM_THRESHOLD = 0.5

# ============================================================================
# NOTICE SETTINGS
# ============================================================================
NOTICE_MESSAGES = {
    "consent_granted": (
        "Ready to start",
        "Click 'Start Session' when you're ready to begin",
    ),
    "consent_required": (
        "Camera access required",
        "Please grant camera access to use the focus monitor",
    ),
    "consent_declined": (
        "Camera access declined",
        "You can still use the transcription features without camera access.",
    ),
    "session_started": (
        "Session started",
        "Focus monitoring and transcription are now active.",
    ),
    "session_complete": (
        "Session complete",
        "Your {duration} second session has been analyzed.",
    ),
}

# ============================================================================
# ANALYTICS SETTINGS
# ============================================================================
ANALYTICS_SAMPLE_RATE = 1.0         # Sample rate in seconds for time-series data

# ============================================================================
# LOGGING SETTINGS
# ============================================================================
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL):
    """Configure root logging for command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
