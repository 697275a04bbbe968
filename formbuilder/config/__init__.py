"""Centralized configuration management for form-builder.

Example:
    >>> from formbuilder.config import EnvVar, get_environment
    >>>
    >>> timeout = get_environment(EnvVar.FBMS_TIMEOUT)  # Returns float: 30.0
    >>> settings = FormBuilderSettings.from_environment(form_fname="intake")

Environment Variable Categories:
    service: FBMS endpoint, timeout, forward header
    auth: OIDC token endpoint
    form: Depth ceiling, default username, custom styles
"""

from .lib import (
    EnvConfig,
    EnvVar,
    FormBuilderSettings,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

__all__ = [
    "EnvConfig",
    "EnvVar",
    "FormBuilderSettings",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
]
