"""
Unit tests for settings, client factories and logging setup.
"""

from unittest.mock import patch

import pytest
import structlog
from pydantic import ValidationError

from config import database
from config.logging import configure_logging
from config.settings import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "supabase_url": "https://test-project.supabase.co",
        "supabase_key": "anon",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSettings:

    def test_defaults(self):
        settings = make_settings()

        assert settings.shopify_api_version == "2024-01"
        assert settings.catalog_page_size == 100
        assert settings.catalog_page_delay_seconds == 0.25
        assert settings.error_sample_size == 10
        assert settings.is_production is False

    def test_shopify_configured(self):
        assert make_settings(shopify_shop_domain="a.myshopify.com", shopify_admin_token="t").shopify_configured
        assert not make_settings(shopify_shop_domain="a.myshopify.com").shopify_configured

    def test_invalid_environment_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(environment="qa")

    def test_page_size_bounds(self):
        with pytest.raises(ValidationError):
            make_settings(catalog_page_size=0)


class TestClientFactories:

    def setup_method(self):
        database.reset_connection()

    def teardown_method(self):
        database.reset_connection()

    def test_write_client_prefers_service_key(self):
        settings = make_settings(supabase_service_key="service")

        with patch.object(database, "get_settings", return_value=settings), \
                patch.object(database, "create_client", side_effect=lambda url, key: ("client", key)):
            assert database.get_write_client() == ("client", "service")

    def test_write_client_falls_back_to_public(self):
        settings = make_settings()

        with patch.object(database, "get_settings", return_value=settings), \
                patch.object(database, "create_client", side_effect=lambda url, key: ("client", key)):
            assert database.get_admin_client() is None
            assert database.get_write_client() == ("client", "anon")

    def test_connection_failure_raises(self):
        settings = make_settings()

        with patch.object(database, "get_settings", return_value=settings), \
                patch.object(database, "create_client", side_effect=RuntimeError("bad url")):
            with pytest.raises(database.ConnectionError):
                database.get_supabase_client()


class TestConfigureLogging:

    def test_development_uses_console_renderer(self, reset_structlog):
        configure_logging(make_settings(log_level="DEBUG"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_production_uses_json_renderer(self, reset_structlog):
        configure_logging(make_settings(environment="production"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
