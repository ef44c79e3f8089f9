"""
Report Generator module.
Generates the end-of-session summary in dictionary and JSON form.
"""

import json
import time
from typing import Dict, Any, Optional
from datetime import datetime


class ReportGenerator:
    """
    Default session summary generator.

    generate_session_summary() matches the summary-generator contract used by
    the session controller: (duration, average_focus, time_distracted,
    transcript) -> summary.
    """

    # Number of transcript words kept in the excerpt
    EXCERPT_WORDS = 40

    def __init__(self):
        """Initialize report generator."""
        self.session_id: Optional[str] = None

    def generate_session_summary(
        self,
        duration: int,
        average_focus: float,
        time_distracted: int,
        transcript: str
    ) -> Dict[str, Any]:
        """
        Generate the session summary.

        Args:
            duration: Session length in whole seconds.
            average_focus: Attention score (0-1) reported for the session.
            time_distracted: Seconds spent distracted.
            transcript: Transcription captured during the session.

        Returns:
            Structured summary dictionary.
        """
        focus_percentage = round(average_focus * 100, 1)
        distracted_percentage = (
            round(min(time_distracted / duration, 1.0) * 100, 1) if duration > 0 else 0.0
        )
        words = transcript.split() if transcript else []

        return {
            "report_metadata": {
                "generated_at": datetime.now().isoformat(),
                "report_version": "1.0",
                "session_id": self.session_id or self._generate_session_id()
            },
            "session_summary": {
                "duration_seconds": duration,
                "duration_label": self._format_duration(duration)
            },
            "focus_metrics": {
                "average_focus": average_focus,
                "focus_percentage": focus_percentage,
                "rating": self._get_rating(focus_percentage),
                "time_distracted_seconds": time_distracted,
                "distracted_percentage": distracted_percentage
            },
            "transcript": {
                "word_count": len(words),
                "excerpt": " ".join(words[:self.EXCERPT_WORDS]),
                "text": transcript or ""
            },
            "recommendations": self._generate_recommendations(
                focus_percentage, distracted_percentage, len(words)
            )
        }

    def generate_json_report(
        self,
        duration: int,
        average_focus: float,
        time_distracted: int,
        transcript: str,
        pretty: bool = True
    ) -> str:
        """
        Generate JSON-formatted summary string.

        Returns:
            JSON string.
        """
        report = self.generate_session_summary(
            duration, average_focus, time_distracted, transcript
        )

        if pretty:
            return json.dumps(report, indent=2, default=str)
        return json.dumps(report, default=str)

    def _generate_session_id(self) -> str:
        """Generate a unique session ID."""
        timestamp = int(time.time() * 1000)
        return f"session_{timestamp}"

    def _format_duration(self, duration: int) -> str:
        minutes, seconds = divmod(max(duration, 0), 60)
        if minutes:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

    def _get_rating(self, score: float) -> str:
        """Get rating label for percentage scores."""
        if score >= 80:
            return "Excellent"
        elif score >= 60:
            return "Good"
        elif score >= 40:
            return "Fair"
        else:
            return "Needs Improvement"

    def _generate_recommendations(
        self,
        focus_percentage: float,
        distracted_percentage: float,
        word_count: int
    ) -> list:
        """Generate recommendations based on session metrics."""
        recommendations = []

        if focus_percentage < 60:
            recommendations.append(
                "Try to keep your attention on the screen. "
                "Closing unrelated windows can help you stay focused."
            )

        if distracted_percentage > 25:
            recommendations.append(
                "You were distracted for a large part of the session. "
                "Short breaks between sessions can make it easier to refocus."
            )

        if word_count == 0:
            recommendations.append(
                "No transcription was captured. Check your microphone if you "
                "want the session content included in the summary."
            )

        if not recommendations:
            recommendations.append(
                "Great job! Continue practicing to maintain this level of focus."
            )

        return recommendations

    def set_session_id(self, session_id: str):
        """Set a custom session ID."""
        self.session_id = session_id
