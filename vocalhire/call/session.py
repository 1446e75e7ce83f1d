"""Candidate-side controller for one interview or practice call.

A `CallSession` owns the lifecycle of a single call from the candidate's
side: microphone permission, validation, the duplicate-respondent check,
call registration, the time budget and the end-of-call save. The voice
connection, the microphone and the backend are injected so the same state
machine runs against a browser bridge, a SIP client or test fakes.

States::

    idle -> mic_permission_pending -> ready -> starting -> active -> ended
                                                  |                   |
                                              old_user      feedback (real)
                                                            starting (practice -> real)
"""

import asyncio
import enum
import re
from typing import Any, Callable, Optional

import structlog

from vocalhire.config.constants import (
    PRACTICE_DURATION_SECONDS,
    TICKS_PER_SECOND,
    TIMER_TICK_SECONDS,
)
from vocalhire.schemas.interviews import PublicInterviewInfo

from . import transport as events
from .api_client import VocalHireAPIError, VocalHireClient
from .transport import CallTransport, MicrophoneProbe

logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PRACTICE_EMAIL = "practice@example.com"
PRACTICE_NAME = "Practice User"


class SessionState(str, enum.Enum):
    IDLE = "idle"
    MIC_PERMISSION_PENDING = "mic_permission_pending"
    READY = "ready"
    STARTING = "starting"
    ACTIVE = "active"
    ENDED = "ended"
    OLD_USER = "old_user"
    FEEDBACK = "feedback"


def _log_notice(message: str) -> None:
    logger.warning("Call session notice", message=message)


class CallSession:
    """Drives one candidate call through its states."""

    def __init__(
        self,
        interview: PublicInterviewInfo,
        transport: CallTransport,
        microphone: MicrophoneProbe,
        backend: VocalHireClient,
        notify: Callable[[str], None] = _log_notice,
        practice_seconds: int = PRACTICE_DURATION_SECONDS,
        tick_seconds: float = TIMER_TICK_SECONDS,
    ):
        self.interview = interview
        self.transport = transport
        self.microphone = microphone
        self.backend = backend
        self.notify = notify
        self.practice_seconds = practice_seconds
        self.tick_seconds = tick_seconds

        self.state = SessionState.IDLE
        self.mic_permission = "idle"
        self.name = ""
        self.email = ""
        self.is_practice = False
        self.call_id: Optional[str] = None

        self.is_muted = True
        self.active_turn = ""
        self.last_agent_text = ""
        self.last_user_text = ""
        self.tab_switch_count = 0

        self.ticks = 0
        self.practice_time_left = practice_seconds
        self._timer: Optional[asyncio.Task] = None

        transport.subscribe(self.handle_transport_event)

    # -- Derived state ------------------------------------------------------

    @property
    def is_valid_email(self) -> bool:
        return bool(EMAIL_PATTERN.match(self.email or ""))

    @property
    def elapsed_seconds(self) -> int:
        return self.ticks // TICKS_PER_SECOND

    @property
    def budget_seconds(self) -> Optional[int]:
        """Real-session time budget, or None if the interview sets none."""
        try:
            minutes = float(self.interview.time_duration)
        except (TypeError, ValueError):
            return None
        return int(minutes * 60)

    def dynamic_data(self, practice: bool, name: Optional[str]) -> dict[str, str]:
        """Variables the agent's prompt is filled with."""
        questions = self.interview.questions or []
        return {
            "mins": "2" if practice else str(self.interview.time_duration or ""),
            "objective": self.interview.objective or "",
            "questions": ", ".join(q.get("question", "") for q in questions),
            "name": name or "not provided",
            "job_context": self.interview.job_context or "No specific job context provided.",
        }

    # -- Microphone ---------------------------------------------------------

    async def initialize(self) -> SessionState:
        """Query microphone permission; already granted goes straight to ready."""
        self.state = SessionState.MIC_PERMISSION_PENDING
        try:
            self.mic_permission = await self.microphone.query_permission()
        except Exception as e:
            logger.error("Microphone permission query failed", error=str(e))
            self.mic_permission = "denied"

        if self.mic_permission == "granted":
            self.state = SessionState.READY
        return self.state

    async def request_microphone(self) -> bool:
        """Prompt for microphone access."""
        self.mic_permission = "checking"
        try:
            await self.microphone.acquire()
        except Exception as e:
            logger.error("Microphone permission request failed", error=str(e))
            self.mic_permission = "denied"
            self.notify("Microphone access denied. Please grant permission in settings.")
            return False

        self.mic_permission = "granted"
        if self.state in (SessionState.IDLE, SessionState.MIC_PERMISSION_PENDING):
            self.state = SessionState.READY
        return True

    async def _probe_microphone(self) -> bool:
        try:
            await self.microphone.acquire()
        except Exception as e:
            logger.error("Microphone liveness probe failed", error=str(e))
            self.notify("Could not access microphone. Please check connection and system settings.")
            return False
        return True

    # -- Starting -----------------------------------------------------------

    async def start(self, practice: bool = False) -> SessionState:
        """Validate, register the call and connect the transport."""
        if self.mic_permission != "granted":
            self.notify("Please grant microphone permission first.")
            await self.request_microphone()
            return self.state

        if self.state != SessionState.READY:
            logger.warning("Start ignored", state=self.state.value)
            return self.state

        if not practice and not self.interview.is_anonymous and (not self.is_valid_email or not self.name):
            self.notify("Please enter a valid email and your first name to start the interview.")
            return self.state

        if not await self._probe_microphone():
            return self.state

        anonymous_practice = practice and self.interview.is_anonymous
        email = PRACTICE_EMAIL if anonymous_practice else self.email
        name = PRACTICE_NAME if anonymous_practice else self.name

        self.state = SessionState.STARTING
        self.is_practice = practice

        if not practice and email:
            try:
                is_old_user = await self.backend.check_respondent(self.interview.id, email)
            except VocalHireAPIError:
                self._abort_start("An error occurred while starting the call.")
                return self.state
            if is_old_user:
                logger.info("Returning respondent", interview_id=self.interview.id)
                self.state = SessionState.OLD_USER
                return self.state

        try:
            registered = await self.backend.register_call(
                self.interview.interviewer_id,
                self.dynamic_data(practice, name),
                is_practice=practice,
                interview_id=None if practice else self.interview.id,
                name=name,
                email=email,
            )
        except VocalHireAPIError:
            self._abort_start("An error occurred while starting the call.")
            return self.state

        access_token = registered.get("access_token")
        if not access_token:
            self._abort_start("Could not initiate the call. Please try again.")
            return self.state

        self.call_id = registered.get("call_id")
        self.ticks = 0
        self.practice_time_left = self.practice_seconds

        try:
            await self.transport.start_call(access_token)
        except Exception as e:
            logger.error("Transport failed to start", call_id=self.call_id, error=str(e))
            self.call_id = None
            self._abort_start("An error occurred while starting the call.")
            return self.state

        self.state = SessionState.ACTIVE
        self._start_timer()
        logger.info("Call session active", call_id=self.call_id, practice=practice)
        return self.state

    def _abort_start(self, message: str) -> None:
        self.notify(message)
        self.is_practice = False
        self.state = SessionState.READY

    # -- Timers -------------------------------------------------------------

    def _start_timer(self) -> None:
        self._cancel_timer()
        runner = self._run_practice_timer if self.is_practice else self._run_interview_timer
        self._timer = asyncio.get_running_loop().create_task(runner())

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer and timer is not asyncio.current_task() and not timer.done():
            timer.cancel()

    async def _run_interview_timer(self) -> None:
        while self.state == SessionState.ACTIVE:
            await asyncio.sleep(self.tick_seconds)
            await self.tick_interview()

    async def _run_practice_timer(self) -> None:
        while self.state == SessionState.ACTIVE:
            await asyncio.sleep(1)
            await self.tick_practice()

    async def tick_interview(self) -> None:
        """One 10 ms tick of a real session; ends it when the budget is spent."""
        if self.state != SessionState.ACTIVE or self.is_practice:
            return
        self.ticks += 1
        budget = self.budget_seconds
        if budget is not None and self.elapsed_seconds >= budget:
            logger.info("Interview time budget reached", call_id=self.call_id, seconds=budget)
            self.transport.stop_call()
            await self._finish()

    async def tick_practice(self) -> None:
        """One second of the practice countdown; stops the call at zero."""
        if self.state != SessionState.ACTIVE or not self.is_practice:
            return
        self.practice_time_left = max(0, self.practice_time_left - 1)
        if self.practice_time_left == 0:
            logger.info("Practice time ended", call_id=self.call_id)
            self.transport.stop_call()
            await self._finish()

    # -- During the call ----------------------------------------------------

    async def handle_transport_event(self, name: str, payload: Optional[dict[str, Any]] = None) -> None:
        payload = payload or {}

        if name == events.CALL_STARTED:
            self.is_muted = True
            self.transport.mute()
        elif name == events.CALL_ENDED:
            await self._finish()
        elif name == events.AGENT_START_TALKING:
            self.active_turn = "agent"
        elif name == events.AGENT_STOP_TALKING:
            self.active_turn = "user"
        elif name == events.UPDATE:
            self._apply_transcript(payload.get("transcript") or [])
        elif name == events.ERROR:
            logger.error("Call transport error", call_id=self.call_id, error=payload.get("message"))
            self.transport.stop_call()
            self.notify("The call was interrupted by an error.")
            await self._finish()
        else:
            logger.debug("Ignoring transport event", event_name=name)

    def _apply_transcript(self, transcript: list[dict[str, Any]]) -> None:
        # Only the latest utterance per role is kept.
        latest: dict[str, str] = {}
        for turn in transcript:
            latest[turn.get("role", "")] = turn.get("content", "")
        self.last_agent_text = latest.get("agent", "")
        self.last_user_text = latest.get("user", "")

    def toggle_mute(self) -> bool:
        self.is_muted = not self.is_muted
        if self.is_muted:
            self.transport.mute()
        else:
            self.transport.unmute()
        return self.is_muted

    def record_tab_switch(self) -> None:
        if self.state == SessionState.ACTIVE and not self.is_practice:
            self.tab_switch_count += 1

    # -- Ending -------------------------------------------------------------

    async def end_call(self) -> SessionState:
        """Hang up at the candidate's request."""
        if self.state == SessionState.ACTIVE:
            self.transport.stop_call()
            await self._finish()
        return self.state

    async def _finish(self) -> None:
        if self.state not in (SessionState.ACTIVE, SessionState.STARTING):
            return
        self.state = SessionState.ENDED
        self._cancel_timer()

        if self.is_practice:
            logger.info("Practice session ended, nothing saved")
            return
        if not self.call_id:
            return

        try:
            await self.backend.save_response(self.call_id, is_ended=True, tab_switch_count=self.tab_switch_count)
            logger.info("Response saved", call_id=self.call_id, tab_switch_count=self.tab_switch_count)
        except VocalHireAPIError as e:
            logger.error("Failed to save response", call_id=self.call_id, error=e.message)

    async def submit_feedback(self, satisfaction: Optional[int], feedback: Optional[str]) -> SessionState:
        """Send the feedback form after a real interview."""
        if self.state != SessionState.ENDED or self.is_practice:
            logger.warning("Feedback ignored", state=self.state.value, practice=self.is_practice)
            return self.state

        try:
            await self.backend.submit_feedback(self.interview.id, self.email or None, satisfaction, feedback)
        except VocalHireAPIError:
            self.notify("Failed to submit feedback. Please try again.")
            return self.state

        self.state = SessionState.FEEDBACK
        return self.state

    async def start_interview_after_practice(self) -> SessionState:
        """Go from a finished practice straight into the real interview."""
        if self.state != SessionState.ENDED or not self.is_practice:
            logger.warning("Not at the end of a practice session", state=self.state.value)
            return self.state

        self.is_practice = False
        self.call_id = None
        self.last_agent_text = ""
        self.last_user_text = ""
        self.active_turn = ""
        self.state = SessionState.READY
        return await self.start(practice=False)

    async def close(self) -> None:
        """Tear down: stop timers and detach from the transport."""
        self._cancel_timer()
        self.transport.unsubscribe()
