"""Session module test fixtures."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt
import pytest

from formbuilder.config import FormBuilderSettings

BASE_URL = "http://fbms.test/fbms"
OIDC_URL = "http://portal.test/api/v5-1/userinfo"


@dataclass
class FakeFbms:
    """In-memory form builder service behind ``httpx.MockTransport``.

    Attributes:
        forms: Form payloads by fname.
        answers: Prior answers by fname.
        submit_statuses: Status codes returned by successive submissions;
            the last one repeats.
        submit_body: JSON body returned with submissions.
        forward_to: Value of the forward header on successful submissions.
        token_status: Status of the token endpoint.
        gate: When set, submissions wait on it before answering.
    """

    forms: dict[str, Any] = field(default_factory=dict)
    answers: dict[str, Any] = field(default_factory=dict)
    submit_statuses: list[int] = field(default_factory=lambda: [200])
    submit_body: Any = None
    forward_to: str | None = None
    token_status: int = 200
    gate: asyncio.Event | None = None
    submissions: list[dict] = field(default_factory=list)
    token_requests: int = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.url.host == "portal.test":
            self.token_requests += 1
            token = jwt.encode({"sub": "jdoe"}, "test-secret", algorithm="HS256")
            return httpx.Response(self.token_status, text=token)

        fname = path.rsplit("/", 1)[-1]
        if "/api/v1/forms/" in path:
            if fname not in self.forms:
                return httpx.Response(404)
            return httpx.Response(200, json=self.forms[fname])

        if request.method == "GET":
            if fname not in self.answers:
                return httpx.Response(404)
            return httpx.Response(200, json={"answers": self.answers[fname]})

        self.submissions.append(json.loads(request.content))
        if self.gate is not None:
            await self.gate.wait()
        index = min(len(self.submissions), len(self.submit_statuses)) - 1
        status = self.submit_statuses[index]
        headers = {}
        if 200 <= status < 300 and self.forward_to:
            headers["x-fbms-formforward"] = self.forward_to
        if self.submit_body is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, headers=headers, json=self.submit_body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fbms(contact_schema) -> FakeFbms:
    """Service with the contact form and a two-field follow-up form."""
    return FakeFbms(
        forms={
            "contact": {"version": 3, "schema": contact_schema, "metadata": {}},
            "next-form": {
                "version": 1,
                "schema": {
                    "title": "Next",
                    "type": "object",
                    "properties": {
                        "rating": {"type": "integer", "title": "Rating"},
                        "notes": {"type": "string", "title": "Notes"},
                    },
                },
            },
        },
        answers={"next-form": {"rating": 4}},
    )


@pytest.fixture
def settings() -> FormBuilderSettings:
    return FormBuilderSettings(base_url=BASE_URL, form_fname="contact")


@pytest.fixture
def oidc_settings() -> FormBuilderSettings:
    return FormBuilderSettings(base_url=BASE_URL, form_fname="contact", oidc_url=OIDC_URL)
