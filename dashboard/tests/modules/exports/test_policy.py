"""Tests for modules/exports/policy.py."""

import pytest

from modules.exports.exceptions import ExportNotAvailableError, UnknownRoleError
from modules.exports.models import ExportPath
from modules.exports.policy import EXPORT_POLICY, resolve_export_path
from shared.exceptions import ConfigurationError
from shared.models import Role


class TestResolveExportPath:
    @pytest.mark.parametrize("role,path", [
        ("super-admin", ExportPath.DIRECT),
        ("superadmin", ExportPath.DIRECT),
        ("manager", ExportPath.OTP_GATED),
        ("field-worker", ExportPath.REQUEST_APPROVAL),
        (Role.FIELD_WORKER, ExportPath.REQUEST_APPROVAL),
    ])
    def test_each_role_has_exactly_one_path(self, role, path):
        assert resolve_export_path(role) == path

    def test_is_pure(self):
        """Same input, same output, no change to the policy table."""
        before = dict(EXPORT_POLICY)
        assert resolve_export_path("manager") == resolve_export_path("manager")
        assert dict(EXPORT_POLICY) == before

    def test_school_admin_has_no_path(self):
        with pytest.raises(ExportNotAvailableError) as exc_info:
            resolve_export_path("school-admin")
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.details["role"] == "schooladmin"

    def test_unknown_role(self):
        with pytest.raises(UnknownRoleError) as exc_info:
            resolve_export_path("janitor")
        assert isinstance(exc_info.value, ConfigurationError)

    def test_policy_override(self):
        """A replacement policy can give school admins a path."""
        policy = {**EXPORT_POLICY, Role.SCHOOL_ADMIN: ExportPath.REQUEST_APPROVAL}
        assert resolve_export_path("schooladmin", policy) == ExportPath.REQUEST_APPROVAL
