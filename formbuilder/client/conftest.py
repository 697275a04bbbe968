"""Client module test fixtures."""

from __future__ import annotations

import jwt
import pytest


@pytest.fixture
def make_token():
    """Factory for HS256 test tokens carrying a given subject."""

    def _make(sub: str | None = "jdoe") -> str:
        claims = {"sub": sub} if sub else {"scope": "openid"}
        return jwt.encode(claims, "test-secret", algorithm="HS256")

    return _make


@pytest.fixture
def form_payload(contact_schema) -> dict:
    """Schema-source response body for the contact form."""
    return {
        "version": 3,
        "schema": contact_schema,
        "metadata": {"contact": {"phone": {"ui:widget": "text"}}},
    }
