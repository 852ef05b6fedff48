"""Tests for the application factory and lifespan."""

from fastapi.testclient import TestClient

from revodev.main import create_app


class TestCreateApp:

    def test_sweeper_off_in_test_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "test")
        monkeypatch.delenv("GROQ_API_KEY", raising=False)
        app = create_app()
        assert app.state.start_sweeper is False

    def test_sweeper_on_outside_test_env(self, monkeypatch, rate_limiter, offline_llm):
        monkeypatch.setenv("APP_ENV", "production")
        assert create_app(offline_llm, rate_limiter).state.start_sweeper is True

    def test_proxy_headers_untrusted_by_default(self, monkeypatch, rate_limiter, offline_llm):
        monkeypatch.delenv("TRUST_PROXY_HEADERS", raising=False)
        assert create_app(offline_llm, rate_limiter, start_sweeper=False).state.trust_proxy_headers is False

    def test_proxy_headers_trusted_from_env(self, monkeypatch, rate_limiter, offline_llm):
        monkeypatch.setenv("TRUST_PROXY_HEADERS", "true")
        assert create_app(offline_llm, rate_limiter, start_sweeper=False).state.trust_proxy_headers is True


class TestLifespan:

    def test_sweeper_started_and_cancelled(self, rate_limiter, offline_llm):
        app = create_app(offline_llm, rate_limiter, start_sweeper=True)
        with TestClient(app) as client:
            task = app.state.sweeper_task
            assert task is not None
            assert not task.done()
            assert client.get("/").status_code == 200
        assert task.cancelled()

    def test_no_sweeper_when_disabled(self, rate_limiter, offline_llm):
        app = create_app(offline_llm, rate_limiter, start_sweeper=False)
        with TestClient(app):
            assert app.state.sweeper_task is None
