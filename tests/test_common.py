"""Tests for common utilities."""

import pytest
from linfy.common.validators import (
    is_valid_url,
    is_valid_email,
    is_valid_password,
    normalize_email,
)
from linfy.common.headers import extract_forwarded_headers, get_client_ip, is_https
from linfy.common.url_builder import build_short_url
from linfy.config import Config


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, _ = is_valid_url("https://")
        assert not valid

        valid, _ = is_valid_url("https://exa mple.com")
        assert not valid

        valid, _ = is_valid_url("https://example.com:99999/")
        assert not valid

        valid, error = is_valid_url("https://example.com/a\x00b")
        assert not valid
        assert "control" in error

        valid, _ = is_valid_url("https://example.com/a\x7fb")
        assert not valid

    def test_url_too_long(self):
        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error

    def test_emails(self):
        assert is_valid_email("ada@example.com")[0]
        assert not is_valid_email("")[0]
        assert not is_valid_email("ada")[0]
        assert not is_valid_email("ada@example")[0]
        assert normalize_email("  Ada@Example.COM ") == "ada@example.com"

    def test_passwords(self):
        assert is_valid_password("secret1")[0]
        assert not is_valid_password("")[0]
        assert not is_valid_password("x" * 73)[0]
        # 72 bytes is the bcrypt ceiling
        assert is_valid_password("x" * 72)[0]


class TestHeaders:
    """Test header parsing utilities."""

    def test_extract_forwarded_headers(self):
        """Test extracting X-Forwarded-* headers."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "203.0.113.7, 10.0.0.1",
        }

        forwarded = extract_forwarded_headers(headers)

        assert forwarded["forwarded_proto"] == "https"
        assert forwarded["forwarded_host"] == "example.com"
        assert forwarded["forwarded_for"] == "203.0.113.7, 10.0.0.1"

    def test_client_ip_ignores_forwarded_for_by_default(self):
        headers = {"x-forwarded-for": "203.0.113.7"}
        assert get_client_ip(headers, "10.0.0.1") == "10.0.0.1"

    def test_client_ip_trusted_proxy(self):
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert get_client_ip(headers, "10.0.0.1", trust_forwarded_for=True) == "203.0.113.7"

    def test_client_ip_unknown(self):
        assert get_client_ip({}, None) == "unknown"

    def test_is_https(self):
        assert is_https({"x-forwarded-proto": "https"}, "http")
        assert is_https({}, "https")
        assert not is_https({}, "http")


class TestURLBuilder:
    """Test URL building utilities."""

    def test_build_short_url(self):
        """Test building short URL."""
        url = build_short_url("abc123", "https://example.com")
        assert url == "https://example.com/abc123"

    def test_build_short_url_trailing_slash(self):
        url = build_short_url("abc123", "https://example.com/")
        assert url == "https://example.com/abc123"

    def test_build_short_url_with_prefix(self):
        """Test building short URL with path prefix."""
        url = build_short_url("abc123", "https://example.com", "/api")
        assert url == "https://example.com/api/abc123"

        url = build_short_url("abc123", "https://example.com", "/api/")
        assert url == "https://example.com/api/abc123"


class TestConfig:
    """Test configuration helpers."""

    @pytest.mark.parametrize(
        "prefix,expected",
        [("", ""), ("/", ""), ("api", "/api"), ("/api/", "/api"), ("/v1/links", "/v1/links")],
    )
    def test_route_prefix(self, prefix, expected):
        assert Config(path_prefix=prefix).route_prefix == expected

    def test_safe_dump_masks_secret(self):
        config = Config(jwt_secret="top-secret-value-that-must-not-leak")
        dumped = config.safe_dump()
        assert dumped["jwt_secret"] == "***"
        assert "top-secret-value-that-must-not-leak" not in str(dumped)

    def test_is_production(self):
        assert Config(environment="production").is_production
        assert not Config(environment="development").is_production


class TestLogging:
    """Test logging setup."""

    def test_json_lines_escape_messages(self):
        import json
        import logging
        from linfy.common.logging_config import JsonLineFormatter

        record = logging.LogRecord("linfy.test", logging.INFO, __file__, 1, 'said "hi"\nbye', None, None)
        entry = json.loads(JsonLineFormatter().format(record))

        assert entry["message"] == 'said "hi"\nbye'
        assert entry["logger"] == "linfy.test"
        assert entry["level"] == "INFO"

    def test_setup_logging_idempotent(self):
        from linfy.common.logging_config import setup_logging

        setup_logging(level="DEBUG")
        logger = setup_logging(level="WARNING", json_format=True)

        assert len(logger.handlers) == 1
        assert logger.level == 30
