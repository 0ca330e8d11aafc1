"""Tests for settings and logging helpers"""
import logging
import pytest

from cartstore.config import DEFAULT_CART_KEY, Settings, load_settings
from cartstore.logging import PACKAGE_LOGGER, configure_logging, get_logger, log_safe


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CART_STORAGE_KEY", raising=False)
        monkeypatch.delenv("CART_TTL_SECONDS", raising=False)

        settings = load_settings()

        assert settings.cart_key == DEFAULT_CART_KEY
        assert settings.cart_ttl_seconds is None
        assert settings.redis_configured is False

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("UPSTASH_REDIS_REST_URL", "https://example.upstash.io")
        monkeypatch.setenv("UPSTASH_REDIS_REST_TOKEN", "token")
        monkeypatch.setenv("CART_STORAGE_KEY", "shop:cart")
        monkeypatch.setenv("CART_TTL_SECONDS", "86400")

        settings = load_settings()

        assert settings.redis_configured is True
        assert settings.cart_key == "shop:cart"
        assert settings.cart_ttl_seconds == 86400

    @pytest.mark.parametrize("raw", ["abc", "-1"])
    def test_invalid_ttl(self, monkeypatch, raw):
        monkeypatch.setenv("CART_TTL_SECONDS", raw)

        with pytest.raises(ValueError):
            load_settings()

    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", " warning ")

        assert load_settings().log_level == "WARNING"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValueError, match="LOG_LEVEL"):
            load_settings()


class TestLogging:

    def test_get_logger_is_cached(self):
        assert get_logger("cartstore.test") is get_logger("cartstore.test")
        assert isinstance(get_logger("cartstore.test"), logging.Logger)

    def test_configure_logging_applies_settings_level(self):
        try:
            package_logger = configure_logging(Settings("", "", log_level="ERROR"))

            assert package_logger.name == PACKAGE_LOGGER
            assert package_logger.level == logging.ERROR
            assert not get_logger("cartstore.cart.store").isEnabledFor(logging.WARNING)
        finally:
            configure_logging(Settings("", "", log_level="DEBUG"))

    def test_log_safe_escapes_control_characters(self):
        assert log_safe("a\nb") == "a\\nb"
        assert log_safe("line\r\nfake") == "line\\r\\nfake"
        assert log_safe("nul\x00\x7f") == "nul\\x00\\x7f"
        assert log_safe("Büro") == "Büro"

    def test_log_safe_empty_and_truncation(self):
        assert log_safe(None) == "N/A"
        assert log_safe("") == "N/A"
        assert log_safe("x" * 60, max_length=10) == "x" * 10 + "..."
        assert log_safe("cart:products") == "cart:products"
