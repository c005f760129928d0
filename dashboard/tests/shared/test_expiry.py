"""Tests for shared/expiry.py."""

from datetime import timezone

from shared.expiry import deadline_passed, is_expired, iso_date, iso_timestamp, now_ms, to_datetime
from shared.models import Session

THIRTY_MINUTES_MS = 1_800_000


class TestIsExpired:
    def test_valid_at_exact_lifetime(self):
        """The boundary is inclusive: exactly lifetime_ms elapsed is still valid."""
        assert not is_expired(0, THIRTY_MINUTES_MS, THIRTY_MINUTES_MS)

    def test_expired_one_ms_later(self):
        assert is_expired(0, THIRTY_MINUTES_MS, THIRTY_MINUTES_MS + 1)

    def test_fresh_credential_is_valid(self):
        assert not is_expired(5_000, THIRTY_MINUTES_MS, 5_000)

    def test_same_rule_for_any_lifetime(self):
        """The session (20 min) and token (30 min) share one rule."""
        twenty_minutes = 1_200_000
        assert not is_expired(0, twenty_minutes, twenty_minutes)
        assert is_expired(0, twenty_minutes, twenty_minutes + 1)


class TestDeadlinePassed:
    def test_exclusive_boundary(self):
        """A fixed deadline is reached at exactly expires_at."""
        assert not deadline_passed(1_200_000, 1_199_999)
        assert deadline_passed(1_200_000, 1_200_000)

    def test_session_validity_follows_deadline(self):
        session = Session(id=1, phone="0241234567", role="manager", login_time=0, expires_at=1_200_000)
        for now in (0, 1_199_999, 1_200_000, 1_200_001):
            assert session.is_valid(now) is not deadline_passed(session.expires_at, now)


class TestTimestamps:
    def test_now_ms_is_epoch_millis(self):
        assert now_ms() > 1_600_000_000_000

    def test_to_datetime_is_utc(self):
        assert to_datetime(0).tzinfo == timezone.utc

    def test_iso_date_uses_utc_calendar_date(self):
        # 2025-10-09T23:30:00Z
        assert iso_date(1_760_052_600_000) == "2025-10-09"

    def test_iso_timestamp(self):
        assert iso_timestamp(1_760_000_000_000) == "2025-10-09T08:53:20.000Z"
