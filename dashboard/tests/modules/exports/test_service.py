"""Tests for modules/exports/service.py."""

import csv

import pytest

from modules.attendance.models import AttendanceRecord
from modules.attendance.service import AttendanceService
from modules.attendance.sources import RemoteAttendanceSource
from modules.auth.exceptions import NotAuthenticatedError
from modules.exports.csv_export import CsvExporter
from modules.exports.exceptions import ExportNotAvailableError, NoDataToExportError
from modules.exports.interfaces import IExportService
from modules.exports.models import ExportPath, OtpState
from modules.exports.otp_workflow import SEND_EXPORT_OTP_PATH, VERIFY_EXPORT_OTP_PATH
from modules.exports.service import ExportService
from modules.exports.token_cache import ExportTokenCache
from shared.models import Role

MINUTE_MS = 60 * 1000


class TestExportService:
    @pytest.fixture
    def token_cache(self, store, clock):
        return ExportTokenCache(store, 30 * MINUTE_MS, clock)

    @pytest.fixture
    def service(self, remote, sessions, token_cache, settings, clock):
        return ExportService(
            remote=remote,
            sessions=sessions,
            attendance=AttendanceService(RemoteAttendanceSource(remote), sessions),
            token_cache=token_cache,
            exporter=CsvExporter(settings.export_dir, clock),
            settings=settings,
        )

    @pytest.fixture
    def records(self, attendance_payload):
        return [AttendanceRecord.model_validate(item) for item in attendance_payload]

    def test_implements_interface(self, service):
        assert isinstance(service, IExportService)

    @pytest.mark.asyncio
    async def test_requires_login(self, service, records):
        with pytest.raises(NotAuthenticatedError):
            await service.export("Attendance Data", records)

    @pytest.mark.asyncio
    async def test_super_admin_exports_directly(self, service, make_session, records, api):
        """Super admins get a file at once with no OTP traffic."""
        make_session(role="superadmin")

        decision = await service.export("Attendance Data", records)

        assert decision.path == ExportPath.DIRECT
        assert decision.workflow is None
        assert not decision.requires_otp
        assert decision.file.path.name == "attendance-data-2025-10-09.csv"
        with decision.file.path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 2
        assert rows[0]["Absence Reason"] == "Sick, malaria"
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_manager_without_token_goes_through_otp(
        self, service, make_session, records, api, clock, token_cache, attendance_payload
    ):
        make_session(role=Role.MANAGER)
        api.add("POST", SEND_EXPORT_OTP_PATH, json_body={})
        api.add("POST", VERIFY_EXPORT_OTP_PATH, json_body={"access_token": "export-token"})
        api.add("GET", "/attendances", json_body=attendance_payload)

        decision = await service.export("Attendance Data", records)

        assert decision.path == ExportPath.OTP_GATED
        assert decision.requires_otp
        workflow = decision.workflow
        assert workflow.state == OtpState.AWAITING_OTP_SEND
        try:
            await workflow.send_otp()
            clock.advance(2 * MINUTE_MS)
            await workflow.verify("123456")
            emitted = await workflow.fetch_and_emit()
        finally:
            workflow.close()

        assert token_cache.peek().issued_at == clock()
        assert emitted.path.name == "attendance-data-2025-10-09-unmasked.csv"
        assert emitted.row_count == len(attendance_payload)

    @pytest.mark.asyncio
    async def test_manager_with_fresh_token_skips_otp(
        self, service, make_session, records, api, token_cache, attendance_payload
    ):
        make_session()
        token_cache.save("export-token")
        api.add("GET", "/attendances", json_body=attendance_payload)

        decision = await service.export("Attendance Data", records)

        assert not decision.requires_otp
        assert decision.workflow.state == OtpState.EMITTED
        assert decision.file.path.name.endswith("-unmasked.csv")
        assert api.calls_to("POST", SEND_EXPORT_OTP_PATH) == []

    @pytest.mark.asyncio
    async def test_manager_with_stale_token_needs_otp(
        self, service, make_session, records, api, token_cache, clock
    ):
        token_cache.save("export-token")
        clock.advance(31 * MINUTE_MS)
        make_session()

        decision = await service.export("Attendance Data", records)

        assert decision.requires_otp
        assert decision.workflow.state == OtpState.AWAITING_OTP_SEND
        assert token_cache.peek() is None
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_field_worker_must_file_request(self, service, make_session, records, settings):
        make_session(role="field-worker")

        decision = await service.export("Attendance Data", records)

        assert decision.requires_request
        assert decision.file is None
        assert decision.workflow is None
        assert not settings.export_dir.exists()

    @pytest.mark.asyncio
    async def test_school_admin_has_no_export(self, service, make_session, records):
        make_session(role="schooladmin")
        with pytest.raises(ExportNotAvailableError):
            await service.export("Attendance Data", records)

    @pytest.mark.asyncio
    async def test_empty_dataset(self, service, make_session):
        make_session(role="superadmin")
        with pytest.raises(NoDataToExportError):
            await service.export("Attendance Data", [])

    def test_export_path(self, service, make_session):
        make_session(role="super-admin")
        assert service.export_path() == ExportPath.DIRECT
