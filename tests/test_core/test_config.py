"""Tests for application configuration settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from georesolver.core.config import Settings


class TestGeocodingSettings:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("GOOGLE_GEOCODING_API_KEY", None)
            settings = Settings(_env_file=None)

        assert settings.GOOGLE_GEOCODING_API_KEY is None
        assert settings.GEOCODING_CACHE_TTL == 86400  # 24 hours
        assert settings.GEOCODING_CACHE_MAX_SIZE == 1000
        assert settings.GEOCODING_RATE_LIMIT_MAX_REQUESTS == 60
        assert settings.GEOCODING_RATE_LIMIT_WINDOW == 60.0
        assert settings.CONFLICT_TIME_BUCKET_SECONDS == 3600

    def test_override_via_environment(self):
        with patch.dict(
            os.environ,
            {
                "GOOGLE_GEOCODING_API_KEY": "test-key",
                "GEOCODING_CACHE_TTL": "60",
                "GEOCODING_RATE_LIMIT_MAX_REQUESTS": "5",
            },
        ):
            settings = Settings(_env_file=None)

        assert settings.GOOGLE_GEOCODING_API_KEY == "test-key"
        assert settings.GEOCODING_CACHE_TTL == 60
        assert settings.GEOCODING_RATE_LIMIT_MAX_REQUESTS == 5

    def test_zero_cache_ttl_is_accepted(self):
        with patch.dict(os.environ, {"GEOCODING_CACHE_TTL": "0"}):
            settings = Settings(_env_file=None)

        assert settings.GEOCODING_CACHE_TTL == 0

    @pytest.mark.parametrize(
        "name,value",
        [
            ("GEOCODING_CACHE_TTL", "-1"),
            ("GEOCODING_RATE_LIMIT_MAX_REQUESTS", "0"),
            ("GEOCODING_PRIMARY_TIMEOUT", "0"),
            ("CONFLICT_TIME_BUCKET_SECONDS", "not-a-number"),
        ],
    )
    def test_invalid_values_raise(self, name, value):
        with patch.dict(os.environ, {name: value}):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)


class TestRedisSettings:
    def test_persistence_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("REDIS_URL", None)
            settings = Settings(_env_file=None)

        assert settings.REDIS_URL is None
        assert settings.REDIS_KEY_PREFIX == "georesolver:"

    def test_testing_switches_to_database_one(self):
        with patch.dict(
            os.environ, {"TESTING": "true", "REDIS_URL": "redis://cache:6379/0"}
        ):
            os.environ.pop("TEST_REDIS_URL", None)
            settings = Settings(_env_file=None)

        assert settings.REDIS_URL == "redis://cache:6379/1"

    def test_explicit_test_redis_url_wins(self):
        with patch.dict(
            os.environ,
            {
                "TESTING": "true",
                "REDIS_URL": "redis://cache:6379/0",
                "TEST_REDIS_URL": "redis://test-cache:6379/3",
            },
        ):
            settings = Settings(_env_file=None)

        assert settings.REDIS_URL == "redis://test-cache:6379/3"

    def test_outside_testing_url_is_kept(self):
        with patch.dict(
            os.environ, {"TESTING": "false", "REDIS_URL": "redis://cache:6379/0"}
        ):
            settings = Settings(_env_file=None)

        assert settings.REDIS_URL == "redis://cache:6379/0"
