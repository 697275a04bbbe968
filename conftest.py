"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Isolation of FBMS_* / FORM_* variables from the developer's shell
- Shared schema, UI hint and answers fixtures
"""

from __future__ import annotations

from typing import Any

import pytest
from dotenv import load_dotenv

from formbuilder.config import list_environment_variables

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove form-builder variables so tests see documented defaults."""
    for env_var in list_environment_variables():
        monkeypatch.delenv(env_var.value.name, raising=False)


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def contact_schema() -> dict[str, Any]:
    """Two-level contact form.

    ``name`` is required at the root; ``contact.email`` is required only
    within the ``contact`` group.
    """
    return {
        "title": "Contact",
        "description": "Tell us how to reach you",
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": {"type": "string", "title": "Name", "minLength": 2},
            "age": {"type": "integer", "title": "Age", "minimum": 0, "maximum": 130},
            "contact": {
                "type": "object",
                "title": "Contact details",
                "description": "Where we send confirmations",
                "required": ["email"],
                "properties": {
                    "email": {"type": "string", "format": "email", "title": "Email"},
                    "phone": {
                        "type": "string",
                        "title": "Phone",
                        "pattern": "^\\d{3}-\\d{3}-\\d{4}$",
                        "patternErrorMessage": "Use 555-555-5555",
                    },
                },
            },
            "subscribe": {"type": "boolean", "title": "Subscribe"},
        },
    }


@pytest.fixture
def choices_schema() -> dict[str, Any]:
    """Form exercising every enum-backed widget."""
    return {
        "title": "Preferences",
        "type": "object",
        "properties": {
            "notice": {"type": "string", "title": "Campus: Fresno", "enum": ["Fresno"]},
            "color": {"type": "string", "title": "Color", "enum": ["red", "green"]},
            "size": {"type": "string", "title": "Size", "enum": ["S", "M", "L"]},
            "channels": {
                "type": "array",
                "title": "Channels",
                "items": {"type": "string", "enum": ["email", "sms", "push"]},
            },
            "topics": {
                "type": "array",
                "title": "Topics",
                "items": {"type": "string", "enum": ["news", "events"]},
            },
            "comments": {"type": "string", "title": "Comments"},
        },
    }


@pytest.fixture
def choices_hints() -> dict[str, Any]:
    """UI hints for ``choices_schema``."""
    return {
        "size": {"ui:widget": "radio", "ui:options": {"inline": True}},
        "channels": {"ui:widget": "checkboxes"},
        "comments": {"ui:widget": "textarea"},
    }


@pytest.fixture
def valid_contact_answers() -> dict[str, Any]:
    """Answers that satisfy ``contact_schema``."""
    return {
        "name": "Jo Doe",
        "age": 42,
        "contact": {"email": "jo@example.org", "phone": "555-123-4567"},
        "subscribe": True,
    }
