"""Tests for modules/exports/token_cache.py."""

from modules.exports.token_cache import ExportTokenCache
from shared.credential_store import EXPORT_TOKEN_KEY, EXPORT_TOKEN_TIMESTAMP_KEY

LIFETIME_MS = 30 * 60 * 1000


class TestExportTokenCache:
    def test_save_records_issuance_time(self, store, clock):
        cache = ExportTokenCache(store, LIFETIME_MS, clock)

        token = cache.save("export-token")

        assert token.issued_at == clock()
        assert store.get(EXPORT_TOKEN_KEY) == "export-token"
        assert store.get(EXPORT_TOKEN_TIMESTAMP_KEY) == str(clock())

    def test_valid_up_to_and_including_lifetime(self, store, clock):
        cache = ExportTokenCache(store, LIFETIME_MS, clock)
        cache.save("export-token")

        clock.advance(LIFETIME_MS)
        assert cache.get_valid() is not None

        clock.advance(1)
        assert cache.get_valid() is None

    def test_expired_token_is_discarded(self, store, clock):
        cache = ExportTokenCache(store, LIFETIME_MS, clock)
        cache.save("export-token")
        clock.advance(31 * 60 * 1000)

        assert cache.get_valid() is None
        assert store.get(EXPORT_TOKEN_KEY) is None
        assert store.get(EXPORT_TOKEN_TIMESTAMP_KEY) is None

    def test_incomplete_entry_is_discarded(self, store, clock):
        """A token without a timestamp is unusable."""
        store.set(EXPORT_TOKEN_KEY, "orphan")
        cache = ExportTokenCache(store, LIFETIME_MS, clock)

        assert cache.get_valid() is None
        assert store.get(EXPORT_TOKEN_KEY) is None

    def test_unreadable_timestamp(self, store, clock):
        store.set(EXPORT_TOKEN_KEY, "export-token")
        store.set(EXPORT_TOKEN_TIMESTAMP_KEY, "yesterday")
        cache = ExportTokenCache(store, LIFETIME_MS, clock)

        assert cache.peek() is None
        assert cache.get_valid() is None

    def test_save_replaces_previous(self, store, clock):
        cache = ExportTokenCache(store, LIFETIME_MS, clock)
        cache.save("old")
        clock.advance(1000)
        token = cache.save("new")

        assert cache.peek() == token
        assert token.value == "new"

    def test_clear(self, store, clock):
        cache = ExportTokenCache(store, LIFETIME_MS, clock)
        cache.save("export-token")
        cache.clear()
        assert cache.peek() is None
