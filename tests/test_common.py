"""Tests for common utilities."""

import json
import logging

import pytest
from shortlinks.common.validators import is_valid_url, is_valid_short_code, validate_url, validate_shortcode
from shortlinks.common.headers import extract_forwarded_headers, build_base_url, get_referrer
from shortlinks.common.url_builder import build_short_url, normalize_path_prefix
from shortlinks.common.logging_config import JsonFormatter, setup_logging


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        assert validate_url("https://example.com/x")
        assert validate_url("http://example.com/path")
        assert validate_url("https://sub.example.com:8080/path?query=value")
        assert validate_url("http://localhost:8000")

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://x")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("https://")
        assert not valid
        assert "domain" in error.lower()

        assert not validate_url("javascript:alert(1)")
        assert not validate_url("/relative/path")
        assert not validate_url(None)

    def test_url_length_limit(self):
        assert validate_url("https://example.com/" + "a" * 2000)
        assert not validate_url("https://example.com/" + "a" * 2048)

    def test_valid_short_codes(self):
        """Test valid short code validation."""
        assert validate_shortcode("abcd12")
        assert validate_shortcode("ABCD")
        assert validate_shortcode("a1B2c3D4e5")

    def test_invalid_short_codes(self):
        """Test invalid short code validation."""
        valid, error = is_valid_short_code("ab")
        assert not valid
        assert "at least" in error.lower()

        valid, error = is_valid_short_code("a" * 11)
        assert not valid
        assert "at most" in error.lower()

        valid, error = is_valid_short_code("abc@123")
        assert not valid

        assert not validate_shortcode("test-code")
        assert not validate_shortcode("test_code")
        assert not validate_shortcode("abcd\n")
        assert not validate_shortcode("")


class TestHeaders:
    """Test header utilities."""

    def test_extract_forwarded_headers(self):
        """Test forwarded header extraction."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
            "X-Forwarded-For": "1.2.3.4",
        }

        result = extract_forwarded_headers(headers)
        assert result["forwarded_proto"] == "https"
        assert result["forwarded_host"] == "example.com"
        assert result["forwarded_for"] == "1.2.3.4"

    def test_build_base_url_from_headers(self):
        """Test base URL building from headers."""
        headers = {
            "X-Forwarded-Proto": "https",
            "X-Forwarded-Host": "example.com",
        }

        base_url = build_base_url(
            headers=headers,
            fallback_base_url="http://localhost:9200"
        )

        assert base_url == "https://example.com"

    def test_build_base_url_from_request(self):
        base_url = build_base_url(
            headers={},
            fallback_base_url="http://localhost:9200",
            request_scheme="http",
            request_host="testserver",
        )

        assert base_url == "http://testserver"

    def test_build_base_url_fallback(self):
        """Test base URL fallback."""
        base_url = build_base_url(
            headers={},
            fallback_base_url="http://localhost:9200/"
        )

        assert base_url == "http://localhost:9200"

    def test_get_referrer(self):
        assert get_referrer({"Referer": "https://news.example.com/"}) == "https://news.example.com/"
        assert get_referrer({"referer": "  "}) is None
        assert get_referrer({}) is None


class TestURLBuilder:
    """Test URL building utilities."""

    def test_build_short_url_no_prefix(self):
        """Test short URL building without prefix."""
        url = build_short_url(
            short_code="abc123",
            base_url="https://example.com",
            path_prefix=""
        )

        assert url == "https://example.com/abc123"

    def test_build_short_url_with_prefix(self):
        """Test short URL building with prefix."""
        url = build_short_url(
            short_code="abc123",
            base_url="https://example.com/",
            path_prefix="/s/"
        )

        assert url == "https://example.com/s/abc123"


class TestLoggingConfig:
    """Test logging setup."""

    def test_setup_is_idempotent(self):
        logger = setup_logging(level="DEBUG")
        logger = setup_logging(level="WARNING")

        assert logger.name == "shortlinks"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "service.log"
        logger = setup_logging(level="INFO", log_file=str(log_file))

        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert "written to file" in log_file.read_text()
        setup_logging(level="INFO")

    def test_json_formatter(self):
        record = logging.LogRecord("shortlinks.test", logging.INFO, __file__, 1, 'say "%s"', ("hi",), None)

        entry = json.loads(JsonFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "shortlinks.test"
        assert entry["message"] == 'say "hi"'


class TestPathPrefix:
    """Test the redirect mount prefix."""

    @pytest.mark.parametrize("raw, expected", [
        ("", ""),
        ("/", ""),
        ("s", "/s"),
        ("/s/", "/s"),
        (" go/links ", "/go/links"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_path_prefix(raw) == expected

    @pytest.mark.parametrize("raw", ["api", "/api/", "api/x"])
    def test_api_prefix_is_reserved(self, raw):
        with pytest.raises(ValueError):
            normalize_path_prefix(raw)

    def test_short_url_uses_mount_form(self):
        assert build_short_url("abc123", "https://example.com", "go/links/") == "https://example.com/go/links/abc123"
