"""
Session Controller module.
Owns the consent -> recording -> summary lifecycle and decides when
attentiveness sampling is live.
"""

import inspect
import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import config
from analyzers.attentiveness_classifier import AttentivenessClassifier
from telemetry import TelemetryFeed

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    """Enum for session lifecycle states."""
    AWAITING_CONSENT = "awaiting_consent"
    CONSENT_DECLINED = "consent_declined"
    READY = "ready"
    RECORDING = "recording"
    COMPLETE = "complete"


class SessionEvent(Enum):
    """Events that drive the session lifecycle."""
    CONSENT_GRANTED = "consent_granted"
    CONSENT_DECLINED = "consent_declined"
    CONSENT_REOFFERED = "consent_reoffered"
    START = "start"
    END = "end"
    RESET = "reset"


# (current status, event) -> next status. Missing pairs are rejected.
TRANSITIONS: Dict[Tuple[SessionStatus, SessionEvent], SessionStatus] = {
    (SessionStatus.AWAITING_CONSENT, SessionEvent.CONSENT_GRANTED): SessionStatus.READY,
    (SessionStatus.AWAITING_CONSENT, SessionEvent.CONSENT_DECLINED): SessionStatus.CONSENT_DECLINED,
    (SessionStatus.CONSENT_DECLINED, SessionEvent.CONSENT_REOFFERED): SessionStatus.AWAITING_CONSENT,
    (SessionStatus.READY, SessionEvent.START): SessionStatus.RECORDING,
    (SessionStatus.RECORDING, SessionEvent.END): SessionStatus.COMPLETE,
    (SessionStatus.COMPLETE, SessionEvent.RESET): SessionStatus.READY,
}


class NoticeVariant(Enum):
    """Types of notices."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notice:
    """Represents a single user-facing notice."""

    def __init__(
        self,
        title: str,
        description: str,
        variant: NoticeVariant = NoticeVariant.DEFAULT
    ):
        self.title = title
        self.description = description
        self.variant = variant
        self.timestamp = time.time()

    def __repr__(self):
        return f"Notice({self.title!r}, {self.description!r}, {self.variant.value})"


@dataclass(frozen=True)
class Session:
    """Read-only view of the session for the presentation layer."""
    status: SessionStatus
    started_at: Optional[float]
    summary: Optional[Any]


SummaryGenerator = Callable[[int, float, int, str], Any]
StatusCallback = Callable[[SessionStatus, SessionStatus], None]
NoticeCallback = Callable[[Notice], None]


class SessionController:
    """
    Session lifecycle state machine.

    Every operation is checked against TRANSITIONS first; a disallowed
    operation is a logged no-op and has no side effects.
    """

    def __init__(
        self,
        webcam,
        feed: TelemetryFeed,
        classifier: AttentivenessClassifier,
        summary_generator: SummaryGenerator,
        transcript_provider: Optional[Callable[[], str]] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the session controller.

        Args:
            webcam: Object with async acquire() -> bool and idempotent release().
            feed: Telemetry feed read at session end.
            classifier: Classifier activated while recording.
            summary_generator: Called as (duration, average_focus,
                time_distracted, transcript); may return an awaitable.
            transcript_provider: Returns the transcription captured so far.
            clock: Wall clock in seconds.
        """
        self.webcam = webcam
        self.feed = feed
        self.classifier = classifier
        self.summary_generator = summary_generator
        self.transcript_provider = transcript_provider
        self.clock = clock

        self._status = SessionStatus.AWAITING_CONSENT
        self._started_at: Optional[float] = None
        self._summary: Optional[Any] = None

        # Guards for in-flight async operations
        self._acquiring = False
        self._ending = False
        self._closed = False

        # Camera is released at session end and taken again at the next start
        self._camera_held = False
        self._span = 0

        self._status_callbacks: List[StatusCallback] = []
        self._notice_callbacks: List[NoticeCallback] = []

    # ------------------------------------------------------------------ #
    # READ-ONLY STATE
    # ------------------------------------------------------------------ #

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def summary(self) -> Optional[Any]:
        return self._summary

    @property
    def is_recording(self) -> bool:
        return self._status == SessionStatus.RECORDING

    @property
    def camera_enabled(self) -> bool:
        """False until consent is granted, and for good once declined."""
        return not self._closed and self._status not in (
            SessionStatus.AWAITING_CONSENT, SessionStatus.CONSENT_DECLINED
        )

    @property
    def session(self) -> Session:
        return Session(
            status=self._status,
            started_at=self._started_at,
            summary=self._summary
        )

    def add_status_callback(self, callback: StatusCallback):
        """
        Register a callback called after every status change.

        Args:
            callback: Function that receives (old_status, new_status).
        """
        self._status_callbacks.append(callback)

    def add_notice_callback(self, callback: NoticeCallback):
        """
        Register a callback for user-facing notices.

        Args:
            callback: Function that receives a Notice.
        """
        self._notice_callbacks.append(callback)

    # ------------------------------------------------------------------ #
    # OPERATIONS
    # ------------------------------------------------------------------ #

    async def request_consent(self) -> bool:
        """
        Ask the webcam collaborator for camera access.

        Returns:
            True if access was granted. Failures are never raised; they move
            the session to CONSENT_DECLINED.
        """
        if self._acquiring or not self._allowed(SessionEvent.CONSENT_GRANTED):
            return self._status == SessionStatus.READY and not self._closed

        self._acquiring = True
        try:
            granted = await self._acquire_webcam()
        finally:
            self._acquiring = False

        if self._closed:
            # Torn down while the request was pending
            logger.info("Discarding camera consent result after teardown")
            self._release_webcam()
            return False

        if granted:
            self._camera_held = True
            self._transition(SessionEvent.CONSENT_GRANTED)
            self._notify("consent_granted")
        else:
            self._transition(SessionEvent.CONSENT_DECLINED)
            self._notify("consent_required", variant=NoticeVariant.DESTRUCTIVE)

        return granted

    def decline_consent(self) -> bool:
        """Decline camera access and continue in transcription-only mode."""
        if not self._transition(SessionEvent.CONSENT_DECLINED):
            return False
        self._notify("consent_declined")
        return True

    def reoffer_consent(self) -> bool:
        """Return a declined session to AWAITING_CONSENT."""
        return self._transition(SessionEvent.CONSENT_REOFFERED)

    async def start_session(self) -> bool:
        """
        Start recording.

        The webcam is released when a session ends, so a session started
        after reset_session() takes the camera again without a new consent
        prompt. If that fails the session still records, without
        attentiveness sampling.

        Returns:
            True if the session started, False if not in READY.
        """
        if not self._allowed(SessionEvent.START):
            self._log_rejected(SessionEvent.START)
            return False

        self._span += 1
        span = self._span

        self._started_at = self.clock()
        self._transition(SessionEvent.START)
        self.classifier.set_session_active(True)
        self._notify("session_started")

        if not self._camera_held:
            granted = await self._acquire_webcam()

            if span != self._span or not self.is_recording or self._closed:
                # Session ended or host shut down while the camera was opening
                logger.info("Discarding camera acquired for a finished session")
                if granted and (self._closed or not self.is_recording):
                    self._release_webcam()
                elif granted:
                    self._camera_held = True
            elif granted:
                self._camera_held = True
            else:
                logger.warning("Camera could not be re-acquired, recording without it")

        return True

    async def end_session(self) -> Optional[Any]:
        """
        End recording and produce the session summary.

        Returns:
            The summary, or None if no session was recording or the summary
            could not be produced.
        """
        if self._ending or not self._allowed(SessionEvent.END):
            self._log_rejected(SessionEvent.END)
            return None

        self._ending = True
        try:
            # Stop sampling before the first await so no tick lands after end
            self.classifier.set_session_active(False)

            started_at = self._started_at if self._started_at is not None else self.clock()
            duration = max(0, int(math.floor(self.clock() - started_at)))
            telemetry = self.feed.get_telemetry()
            transcript = self._get_transcript()

            try:
                summary = self.summary_generator(
                    duration,
                    telemetry.attention_score,
                    telemetry.time_distracted,
                    transcript
                )
                if inspect.isawaitable(summary):
                    summary = await summary
            except Exception:
                logger.exception("Session summary generation failed")
                summary = None

            if self._closed:
                logger.info("Discarding session summary generated after teardown")
                return None

            if summary is None:
                # Stay in RECORDING; resume sampling
                self.classifier.set_session_active(True)
                return None

            self._summary = summary
            self._started_at = None
            self._transition(SessionEvent.END)
            self._release_webcam()

            logger.info("Session complete after %d seconds", duration)
            self._notify("session_complete", duration=duration)
            return summary
        finally:
            self._ending = False

    def reset_session(self) -> bool:
        """
        Clear the summary and return to READY without asking for consent.

        Returns:
            True if the session was reset, False if not in COMPLETE.
        """
        if not self._allowed(SessionEvent.RESET):
            self._log_rejected(SessionEvent.RESET)
            return False

        self._summary = None
        self._transition(SessionEvent.RESET)
        return True

    def teardown(self):
        """
        Host shutdown. Stops sampling and releases the webcam in any state.
        Never raises and is safe to call more than once.
        """
        self._closed = True
        try:
            self.classifier.stop()
        except Exception:
            logger.exception("Error stopping attentiveness classifier")
        self._release_webcam()

    # ------------------------------------------------------------------ #
    # INTERNALS
    # ------------------------------------------------------------------ #

    def _allowed(self, event: SessionEvent) -> bool:
        return not self._closed and (self._status, event) in TRANSITIONS

    def _transition(self, event: SessionEvent) -> bool:
        """Apply an event from the transition table. Returns False if rejected."""
        if not self._allowed(event):
            self._log_rejected(event)
            return False

        old_status = self._status
        self._status = TRANSITIONS[(old_status, event)]
        logger.info("Session %s -> %s", old_status.value, self._status.value)

        for callback in list(self._status_callbacks):
            try:
                callback(old_status, self._status)
            except Exception:
                logger.exception("Status callback failed")
        return True

    def _log_rejected(self, event: SessionEvent):
        logger.debug("Ignoring %s while %s", event.value, self._status.value)

    def _get_transcript(self) -> str:
        if self.transcript_provider is None:
            return ""
        try:
            return self.transcript_provider() or ""
        except Exception:
            logger.exception("Transcript provider failed")
            return ""

    async def _acquire_webcam(self) -> bool:
        try:
            return bool(await self.webcam.acquire())
        except Exception:
            logger.exception("Webcam acquisition failed")
            return False

    def _release_webcam(self):
        self._camera_held = False
        try:
            self.webcam.release()
        except Exception:
            logger.exception("Error releasing webcam")

    def _notify(
        self,
        key: str,
        variant: NoticeVariant = NoticeVariant.DEFAULT,
        **fields
    ):
        title, description = config.NOTICE_MESSAGES[key]
        notice = Notice(title, description.format(**fields), variant)

        for callback in list(self._notice_callbacks):
            try:
                callback(notice)
            except Exception:
                logger.exception("Notice callback failed")
