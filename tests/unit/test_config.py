"""
Unit tests for configuration

Covers environment-driven application settings and the immutable session
store configuration built from them.
"""

import dataclasses
import os
from datetime import datetime
from unittest.mock import patch

import pytest

from sessionbridge.core.config import Settings
from sessionbridge.core.errors import ConfigurationError
from sessionbridge.store.config import StoreConfiguration, utcnow
from sessionbridge.store.ttl import ComputedTtl, DisabledTtl, FixedTtl

# Mark all tests in this module as unit tests
pytestmark = pytest.mark.unit


class TestSettings:
    """Test application settings configuration"""

    def test_default_settings(self):
        """Test default configuration values"""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.APP_NAME == "sessionbridge"
        assert settings.DATABASE_URL == "sqlite+aiosqlite:///./sessions.db"
        assert settings.SESSION_PREFIX == "sess"
        assert settings.SESSION_TTL is None
        assert settings.SESSION_DOCUMENT == "SessionData"
        assert settings.SESSION_EXPIRE_FIELD == "expires_at"
        assert settings.SESSION_MAX_AGE == 14 * 24 * 60 * 60

    def test_environment_variable_override(self):
        """Test that environment variables can override defaults"""
        with patch.dict(os.environ, {
            'SESSION_TTL': '3600',
            'session_prefix': 'app1:',
            'DATABASE_URL': 'postgresql+asyncpg://db/sessions',
        }):
            settings = Settings(_env_file=None)

        assert settings.SESSION_TTL == 3600
        assert settings.SESSION_PREFIX == "app1:"
        assert settings.DATABASE_URL == "postgresql+asyncpg://db/sessions"


class TestStoreConfiguration:
    """Test session store configuration derivation"""

    def test_defaults(self):
        config = StoreConfiguration()

        assert config.prefix == "sess"
        assert config.ttl == DisabledTtl()
        assert config.has_ttl is False
        assert config.enforces_expiry is False
        assert config.sid_field == "sid"
        assert config.data_field == "data"
        assert config.expire_field == "expires_at"
        assert config.scoped is False

    def test_none_prefix_falls_back_to_default(self):
        assert StoreConfiguration(prefix=None).prefix == "sess"

    def test_empty_prefix_is_kept(self):
        assert StoreConfiguration(prefix="").prefix == ""

    @pytest.mark.parametrize("ttl", [None, False, 0, float("nan")])
    def test_disabled_ttl_values(self, ttl):
        config = StoreConfiguration(ttl=ttl)

        assert isinstance(config.ttl, DisabledTtl)
        assert config.has_ttl is False

    def test_numeric_ttl_enables_expiry(self):
        config = StoreConfiguration(ttl=30)

        assert config.ttl == FixedTtl(30)
        assert config.has_ttl is True
        assert config.enforces_expiry is True

    def test_callable_ttl_enables_expiry(self):
        config = StoreConfiguration(ttl=lambda store, sid, session: 5)

        assert isinstance(config.ttl, ComputedTtl)
        assert config.has_ttl is True

    def test_ttl_without_expire_field_does_not_enforce(self):
        config = StoreConfiguration(ttl=30, expire_field=None)

        assert config.has_ttl is True
        assert config.enforces_expiry is False

    def test_has_ttl_is_not_an_init_argument(self):
        with pytest.raises(TypeError):
            StoreConfiguration(ttl=10, has_ttl=False)

    def test_configuration_is_immutable(self):
        config = StoreConfiguration(ttl=10)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.ttl = 0
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.has_ttl = False

    def test_invalid_ttl_type(self):
        with pytest.raises(ConfigurationError):
            StoreConfiguration(ttl="ten")

    def test_from_settings(self):
        with patch.dict(os.environ, {'SESSION_TTL': '120', 'SESSION_PREFIX': 'web:'}):
            settings = Settings(_env_file=None)

        config = StoreConfiguration.from_settings(settings, manager="sessions")

        assert config.prefix == "web:"
        assert config.ttl == FixedTtl(120)
        assert config.manager == "sessions"
        assert config.document == "SessionData"

    def test_from_settings_empty_expire_field_disables_it(self):
        with patch.dict(os.environ, {'SESSION_TTL': '120', 'SESSION_EXPIRE_FIELD': ''}):
            settings = Settings(_env_file=None)

        config = StoreConfiguration.from_settings(settings)

        assert config.expire_field is None
        assert config.enforces_expiry is False

    def test_default_clock_is_naive_utc(self):
        now = utcnow()

        assert isinstance(now, datetime)
        assert now.tzinfo is None
