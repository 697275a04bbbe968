"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    FormBuilderSettings,
    get_environment,
    get_environment_info,
    list_environment_variables,
)


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORM_MAX_DEPTH", raising=False)
        assert get_environment(EnvVar.FORM_MAX_DEPTH) == 10

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORM_MAX_DEPTH", "4")
        assert get_environment(EnvVar.FORM_MAX_DEPTH, override=7) == 7

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("FORM_MAX_DEPTH", "3")
        result = get_environment(EnvVar.FORM_MAX_DEPTH)
        assert result == 3
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("FBMS_TIMEOUT", "2.5")
        assert get_environment(EnvVar.FBMS_TIMEOUT) == 2.5

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORM_MAX_DEPTH", "deep")
        assert get_environment(EnvVar.FORM_MAX_DEPTH) == 10

    @pytest.mark.unit
    def test_none_default_for_oidc(self, monkeypatch):
        """Authentication is disabled unless configured."""
        monkeypatch.delenv("FBMS_OIDC_URL", raising=False)
        assert get_environment(EnvVar.FBMS_OIDC_URL) is None


class TestEnvironmentIntrospection:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.FORM_DEFAULT_USERNAME)
        assert isinstance(info, EnvConfig)
        assert info.default == "unknown"
        assert info.category == "form"

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Category filter only returns matching variables."""
        auth_vars = list_environment_variables("auth")
        assert auth_vars == [EnvVar.FBMS_OIDC_URL]
        assert len(list_environment_variables()) == len(EnvVar)


class TestFormBuilderSettings:
    """Tests for resolved settings."""

    @pytest.mark.unit
    def test_from_environment(self, monkeypatch):
        """Environment values and overrides are combined."""
        monkeypatch.setenv("FBMS_BASE_URL", "http://fbms.test/")
        monkeypatch.setenv("FORM_DEFAULT_USERNAME", "guest")
        settings = FormBuilderSettings.from_environment(form_fname="intake")
        assert settings.base_url == "http://fbms.test"
        assert settings.form_fname == "intake"
        assert settings.default_username == "guest"
        assert settings.forward_header == "x-fbms-formforward"

    @pytest.mark.unit
    def test_invalid_timeout(self):
        """Settings reject non-positive timeouts."""
        with pytest.raises(ValueError, match="Timeout must be positive"):
            FormBuilderSettings(base_url="http://fbms", timeout=0)

    @pytest.mark.unit
    def test_invalid_depth(self):
        """Settings reject negative depth ceilings."""
        with pytest.raises(ValueError, match="Max depth"):
            FormBuilderSettings(base_url="http://fbms", max_depth=-1)
