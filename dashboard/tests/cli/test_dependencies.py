"""Tests for cli/dependencies.py."""

from cli.dependencies import ServiceContainer, get_container, reset_container


class TestServiceContainer:
    def test_services_share_one_session_store(self, settings, store, api, clock, make_session):
        container = ServiceContainer(settings, store, api.transport, clock)
        make_session(role="superadmin")

        assert container.auth.sessions.current().role == "superadmin"
        assert container.exports.export_path().value == "direct"
        assert container.export_requests.default_scope().is_approver_view

    def test_services_are_cached(self, settings, store, api):
        container = ServiceContainer(settings, store, api.transport)
        assert container.exports is container.exports
        assert container.exports.token_cache.lifetime_ms == 30 * 60 * 1000

    def test_degraded_mode_wires_sample_fallback(self, settings, store, api):
        assert ServiceContainer(settings, store, api.transport).attendance.degraded_mode is False

        degraded = settings.model_copy(update={"degraded_mode": True})
        assert ServiceContainer(degraded, store, api.transport).attendance.degraded_mode is True

    def test_reset_rebuilds_services(self, settings, store, api):
        container = ServiceContainer(settings, store, api.transport)
        auth = container.auth
        container.reset()
        assert container.auth is not auth
        assert container.store is store

    def test_exports_go_to_configured_dir(self, settings, store, api):
        container = ServiceContainer(settings, store, api.transport)
        assert container.exporter.output_dir == settings.export_dir


class TestGetContainer:
    def test_singleton(self):
        reset_container()
        try:
            assert get_container() is get_container()
        finally:
            reset_container()
