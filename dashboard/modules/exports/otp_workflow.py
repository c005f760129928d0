"""
OTP-gated export workflow.

A manager must hold a valid export token before the unmasked
attendance fetch. The workflow walks through:

    IDLE -> AWAITING_OTP_SEND -> AWAITING_OTP_ENTRY -> VERIFYING
         -> AUTHORIZED -> FETCHING -> EMITTED

with FAILED reachable from every non-terminal state. A cached token
that is still valid short-circuits IDLE straight to AUTHORIZED. From
FAILED, retry() returns to OTP entry while the resend cooldown of the
last send is still running, and to sending a new OTP once it is over.

Only one network step runs at a time; calling another step while one
is in flight raises WorkflowBusyError. Once close() is called, a step
that is still in flight finishes but its outcome is dropped.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, Optional

from shared.config import Settings, get_settings
from shared.exceptions import DashboardError
from shared.models import Session
from shared.remote import RemoteClient

from modules.attendance.formatting import format_attendance_for_export
from modules.attendance.service import AttendanceService
from modules.auth.exceptions import EmptyOtpError
from modules.auth.session import SessionManager

from .csv_export import CsvExporter
from .exceptions import (
    ExportTokenMissingError,
    ExportTokenRejectedError,
    InvalidTransitionError,
    ResendNotAvailableError,
    WorkflowBusyError,
)
from .models import (
    EmittedFile,
    FileVariant,
    OtpState,
    SendExportOtpRequest,
    VerifyExportOtpRequest,
)
from .token_cache import ExportTokenCache

logger = logging.getLogger(__name__)

SEND_EXPORT_OTP_PATH = "/dashboard/send-export-otp"
VERIFY_EXPORT_OTP_PATH = "/dashboard/verify-export-otp"

ALLOWED_TRANSITIONS: dict[OtpState, frozenset[OtpState]] = {
    OtpState.IDLE: frozenset({OtpState.AWAITING_OTP_SEND, OtpState.AUTHORIZED, OtpState.FAILED}),
    OtpState.AWAITING_OTP_SEND: frozenset({OtpState.AWAITING_OTP_ENTRY, OtpState.FAILED}),
    OtpState.AWAITING_OTP_ENTRY: frozenset({OtpState.VERIFYING, OtpState.FAILED}),
    OtpState.VERIFYING: frozenset({OtpState.AUTHORIZED, OtpState.FAILED}),
    OtpState.AUTHORIZED: frozenset({OtpState.FETCHING, OtpState.FAILED}),
    OtpState.FETCHING: frozenset({OtpState.EMITTED, OtpState.FAILED}),
    OtpState.EMITTED: frozenset(),
    OtpState.FAILED: frozenset({OtpState.AWAITING_OTP_SEND, OtpState.AWAITING_OTP_ENTRY}),
}


class ResendCooldown:
    """
    Whole-second countdown gating OTP resend.

    can_resend becomes true exactly when the countdown reaches zero.
    """

    def __init__(
        self,
        seconds: int = 120,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._seconds = seconds
        self._remaining = 0
        self._sleep = sleep

    @property
    def seconds(self) -> int:
        return self._seconds

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def can_resend(self) -> bool:
        return self._remaining == 0

    def start(self) -> None:
        self._remaining = self._seconds

    def reset(self) -> None:
        self._remaining = 0

    def tick(self) -> int:
        self._remaining = max(0, self._remaining - 1)
        return self._remaining

    async def run(
        self,
        on_tick: Optional[Callable[[int], None]] = None,
        interval: float = 1.0,
    ) -> None:
        """Tick once per interval until zero."""
        while self._remaining > 0:
            await self._sleep(interval)
            remaining = self.tick()
            if on_tick:
                on_tick(remaining)


class ExportOtpWorkflow:
    """
    One export attempt by a manager.

    Args:
        actor: The logged-in manager
        data_type: Label for the exported dataset, e.g. "Attendance Data"
        record_count: Number of records the manager is exporting (audit)
        remote: API client for the OTP endpoints
        sessions: Session accessor; a 401 on OTP calls ends the session
        token_cache: Persisted export token
        attendance: Source of the unmasked attendance fetch
        exporter: Writes the resulting CSV file
    """

    def __init__(
        self,
        actor: Session,
        data_type: str,
        record_count: int,
        remote: RemoteClient,
        sessions: SessionManager,
        token_cache: ExportTokenCache,
        attendance: AttendanceService,
        exporter: CsvExporter,
        settings: Optional[Settings] = None,
        cooldown: Optional[ResendCooldown] = None,
    ):
        self._settings = settings or get_settings()
        self._actor = actor
        self._data_type = data_type
        self._record_count = record_count
        self._remote = remote
        self._sessions = sessions
        self._token_cache = token_cache
        self._attendance = attendance
        self._exporter = exporter
        self._cooldown = cooldown or ResendCooldown(self._settings.otp_resend_cooldown_seconds)
        self._cooldown_task: Optional[asyncio.Task] = None

        self._state = OtpState.IDLE
        self._busy = False
        self._closed = False
        self.otp_input = ""
        self.last_error: Optional[str] = None
        self.file: Optional[EmittedFile] = None

    @property
    def state(self) -> OtpState:
        return self._state

    @property
    def data_type(self) -> str:
        return self._data_type

    @property
    def record_count(self) -> int:
        return self._record_count

    @property
    def cooldown(self) -> ResendCooldown:
        return self._cooldown

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def is_closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def start(self) -> OtpState:
        """Use a valid cached token if there is one, otherwise ask for an OTP."""
        if self._state != OtpState.IDLE:
            raise InvalidTransitionError(self._state.value, "start")

        if self._token_cache.get_valid() is not None:
            logger.info("Valid export token cached, skipping OTP")
            self._transition(OtpState.AUTHORIZED)
        else:
            self._transition(OtpState.AWAITING_OTP_SEND)
        return self._state

    def retry(self) -> OtpState:
        """
        Recover from a failure.

        While the resend cooldown is still running the last OTP stays
        usable, so the operator goes back to entering it; otherwise a new
        OTP is needed.
        """
        if self._cooldown.can_resend:
            self._transition(OtpState.AWAITING_OTP_SEND)
        else:
            self._transition(OtpState.AWAITING_OTP_ENTRY)
        self.last_error = None
        self.otp_input = ""
        return self._state

    async def send_otp(self) -> None:
        """
        Ask the server to send an export OTP to the actor's phone.

        Raises:
            InvalidTransitionError: If not awaiting an OTP send
            WorkflowBusyError: If another step is in flight
            ResendNotAvailableError: If the cooldown from the last send is running
            DashboardError: If the server rejected the request
        """
        self._check_transition(OtpState.AWAITING_OTP_ENTRY)
        if not self._cooldown.can_resend:
            raise ResendNotAvailableError(self._cooldown.remaining)
        with self._in_flight():
            try:
                await self._request_otp()
            except DashboardError as e:
                if not self._closed:
                    self._fail(e)
                    raise
                return
        if self._closed:
            return

        self._transition(OtpState.AWAITING_OTP_ENTRY)
        self._start_cooldown()
        logger.info(f"Export OTP sent for {self._record_count} {self._data_type} records")

    async def resend(self) -> None:
        """
        Re-send the OTP once the cooldown has run out.

        Raises:
            ResendNotAvailableError: If the cooldown is still running
        """
        if self._state != OtpState.AWAITING_OTP_ENTRY:
            raise InvalidTransitionError(self._state.value, "resend")
        if not self._cooldown.can_resend:
            raise ResendNotAvailableError(self._cooldown.remaining)

        with self._in_flight():
            try:
                await self._request_otp()
            except DashboardError as e:
                if not self._closed:
                    self._fail(e)
                    raise
                return
        if self._closed:
            return

        self.otp_input = ""
        self.last_error = None
        self._start_cooldown()
        logger.info("Export OTP resent")

    async def verify(self, code: Optional[str] = None) -> None:
        """
        Verify the OTP and cache the returned export token.

        Args:
            code: The OTP; defaults to otp_input

        Raises:
            EmptyOtpError: If the code is blank (no request is sent)
            DashboardError: If verification failed; any cached token is cleared
        """
        self._check_transition(OtpState.VERIFYING)
        if self._busy:
            raise WorkflowBusyError()

        code = (self.otp_input if code is None else code).strip()
        if not code:
            raise EmptyOtpError()
        self.otp_input = code

        self._transition(OtpState.VERIFYING)
        body = VerifyExportOtpRequest(
            phone=self._actor.phone,
            otp=code,
            user_id=self._actor.id,
        ).model_dump()

        with self._in_flight():
            try:
                with self._sessions.expire_on_unauthorized():
                    data = await self._remote.post(
                        VERIFY_EXPORT_OTP_PATH,
                        bearer=self._actor.access_token,
                        json_body=body,
                        timeout=self._settings.otp_timeout_seconds,
                        fallback_message="Invalid OTP",
                    )
                token = (data or {}).get("access_token") if isinstance(data, dict) else None
                if not token:
                    raise ExportTokenMissingError()
            except DashboardError as e:
                if not self._closed:
                    self._token_cache.clear()
                    self._fail(e, keep_cooldown=True)
                    raise
                return
        if self._closed:
            return

        self._token_cache.save(token)
        self._stop_cooldown()
        self._cooldown.reset()
        self._transition(OtpState.AUTHORIZED)
        logger.info("Export OTP verified, export token cached")

    async def fetch_and_emit(self) -> Optional[EmittedFile]:
        """
        Fetch unmasked attendance with the export token and write the CSV.

        Returns:
            The written file, or None if the workflow was closed meanwhile

        Raises:
            ExportTokenRejectedError: If the token is gone or the fetch failed
            NoDataToExportError: If the server returned no records
        """
        self._check_transition(OtpState.FETCHING)
        if self._busy:
            raise WorkflowBusyError()

        token = self._token_cache.get_valid()
        if token is None:
            error = ExportTokenRejectedError("Export token expired")
            self._fail(error)
            raise error

        self._transition(OtpState.FETCHING)
        with self._in_flight():
            try:
                records = await self._attendance.fetch_unmasked_attendance(token.value)
            except DashboardError as e:
                if self._closed:
                    return None
                logger.warning(f"Unmasked fetch failed, discarding export token: {e.message}")
                self._token_cache.clear()
                error = ExportTokenRejectedError(e.message)
                self._fail(error)
                raise error from e
        if self._closed:
            return None

        try:
            self.file = self._exporter.emit(
                format_attendance_for_export(records),
                self._data_type,
                variant=FileVariant.UNMASKED,
            )
        except DashboardError as e:
            self._fail(e)
            raise

        self._transition(OtpState.EMITTED)
        return self.file

    def close(self) -> None:
        """Abandon the workflow; in-flight results are dropped."""
        self._closed = True
        self._stop_cooldown()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _request_otp(self) -> None:
        body = SendExportOtpRequest(
            phone=self._actor.phone,
            user_id=self._actor.id,
            data_type=self._data_type,
            record_count=self._record_count,
        ).model_dump()
        with self._sessions.expire_on_unauthorized():
            await self._remote.post(
                SEND_EXPORT_OTP_PATH,
                bearer=self._actor.access_token,
                json_body=body,
                timeout=self._settings.otp_timeout_seconds,
                fallback_message="Failed to send OTP",
            )

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        if self._busy:
            raise WorkflowBusyError()
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _check_transition(self, target: OtpState) -> None:
        if target not in ALLOWED_TRANSITIONS[self._state]:
            raise InvalidTransitionError(self._state.value, target.value)

    def _transition(self, target: OtpState) -> None:
        self._check_transition(target)
        logger.debug(f"Export workflow {self._state.value} -> {target.value}")
        self._state = target

    def _fail(self, error: DashboardError, keep_cooldown: bool = False) -> None:
        self.last_error = error.message
        if not keep_cooldown:
            self._stop_cooldown()
        self._transition(OtpState.FAILED)

    def _start_cooldown(self) -> None:
        self._stop_cooldown()
        self._cooldown.start()
        self._cooldown_task = asyncio.create_task(self._cooldown.run())

    def _stop_cooldown(self) -> None:
        if self._cooldown_task is not None and not self._cooldown_task.done():
            self._cooldown_task.cancel()
        self._cooldown_task = None
