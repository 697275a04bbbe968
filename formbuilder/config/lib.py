"""Centralized environment configuration management for form-builder.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from formbuilder.config import EnvVar, get_environment
    >>>
    >>> depth = get_environment(EnvVar.FORM_MAX_DEPTH)  # Returns int: 10
    >>> base_url = get_environment(EnvVar.FBMS_BASE_URL, override="http://fbms")
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "FBMS_BASE_URL").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by form-builder.

    Categories:
        - service: Form builder microservice endpoints and transport
        - auth: Credential acquisition
        - form: Rendering and validation policy
    """

    # -------------------------------------------------------------------------
    # Service
    # -------------------------------------------------------------------------
    FBMS_BASE_URL = EnvConfig(
        name="FBMS_BASE_URL",
        default="http://localhost:8090/fbms",
        var_type=str,
        description="Base URL of the form builder microservice",
        category="service",
    )
    FBMS_FORM_FNAME = EnvConfig(
        name="FBMS_FORM_FNAME",
        default=None,
        var_type=str,
        description="Form name (fname) to load when none is given",
        category="service",
    )
    FBMS_TIMEOUT = EnvConfig(
        name="FBMS_TIMEOUT",
        default=30.0,
        var_type=float,
        description="HTTP request timeout in seconds",
        category="service",
    )
    FBMS_FORWARD_HEADER = EnvConfig(
        name="FBMS_FORWARD_HEADER",
        default="x-fbms-formforward",
        var_type=str,
        description="Response header naming the next form after a submission",
        category="service",
    )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------
    FBMS_OIDC_URL = EnvConfig(
        name="FBMS_OIDC_URL",
        default=None,
        var_type=str,
        description="OpenID Connect token endpoint returning a raw bearer token",
        category="auth",
    )

    # -------------------------------------------------------------------------
    # Form policy
    # -------------------------------------------------------------------------
    FORM_MAX_DEPTH = EnvConfig(
        name="FORM_MAX_DEPTH",
        default=10,
        var_type=int,
        description="Maximum schema nesting depth for rendering and validation",
        category="form",
    )
    FORM_DEFAULT_USERNAME = EnvConfig(
        name="FORM_DEFAULT_USERNAME",
        default="unknown",
        var_type=str,
        description="Submission author when no token subject is available",
        category="form",
    )
    FORM_CUSTOM_STYLES = EnvConfig(
        name="FORM_CUSTOM_STYLES",
        default=None,
        var_type=str,
        description="Extra CSS emitted in a <style> element of rendered forms",
        category="form",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type.
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable."""
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (service, auth, form).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


# =============================================================================
# Resolved settings
# =============================================================================


@dataclass
class FormBuilderSettings:
    """Resolved configuration for one form-builder engine.

    Attributes:
        base_url: FBMS base URL, without trailing slash.
        form_fname: Form name to load.
        oidc_url: Token endpoint; None disables authentication.
        timeout: HTTP timeout in seconds.
        forward_header: Response header carrying the next form name.
        max_depth: Nesting ceiling for rendering and validation.
        default_username: Envelope author when no token subject exists.
        custom_styles: Optional CSS injected into rendered forms.
    """

    base_url: str
    form_fname: str | None = None
    oidc_url: str | None = None
    timeout: float = 30.0
    forward_header: str = "x-fbms-formforward"
    max_depth: int = 10
    default_username: str = "unknown"
    custom_styles: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        self.base_url = self.base_url.rstrip("/")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")
        if self.max_depth < 0:
            raise ValueError(f"Max depth must not be negative, got {self.max_depth}")

    @classmethod
    def from_environment(cls, **overrides: Any) -> FormBuilderSettings:
        """Build settings from the environment, with keyword overrides.

        Example:
            >>> settings = FormBuilderSettings.from_environment(form_fname="intake")
        """
        fields = {
            "base_url": EnvVar.FBMS_BASE_URL,
            "form_fname": EnvVar.FBMS_FORM_FNAME,
            "oidc_url": EnvVar.FBMS_OIDC_URL,
            "timeout": EnvVar.FBMS_TIMEOUT,
            "forward_header": EnvVar.FBMS_FORWARD_HEADER,
            "max_depth": EnvVar.FORM_MAX_DEPTH,
            "default_username": EnvVar.FORM_DEFAULT_USERNAME,
            "custom_styles": EnvVar.FORM_CUSTOM_STYLES,
        }
        values = {
            attr: get_environment(env_var, override=overrides.get(attr))
            for attr, env_var in fields.items()
        }
        return cls(**values)


__all__ = [
    "EnvConfig",
    "EnvVar",
    "FormBuilderSettings",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
]
