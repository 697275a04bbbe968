"""Tests for the FBMS client.

All HTTP traffic goes through ``httpx.MockTransport``.
"""

import json
import logging

import httpx
import pytest

from formbuilder.client import (
    ACCESS_DENIED_MESSAGE,
    AuthenticationError,
    FbmsClient,
    OidcTokenProvider,
    SchemaLoadError,
    ServerMessages,
    SubmissionError,
    decode_subject,
)
from formbuilder.schema import SubmissionEnvelope

BASE_URL = "http://fbms.test/fbms"
OIDC_URL = "http://portal.test/api/v5-1/userinfo"


def _http(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _envelope(**answers) -> SubmissionEnvelope:
    return SubmissionEnvelope(
        username="jdoe", form_fname="contact", form_version=3, answers=answers
    )


class TestServerMessages:
    """Tests for response notice parsing."""

    @pytest.mark.unit
    def test_parses_aliases(self):
        """messageHeader and messages are read from JSON bodies."""
        response = httpx.Response(
            200, json={"messageHeader": "Saved", "messages": ["a", "b"]}
        )
        messages = ServerMessages.from_response(response)
        assert messages.message_header == "Saved"
        assert messages.messages == ["a", "b"]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="<html>oops</html>"),
            httpx.Response(204),
            httpx.Response(200, json=["not", "a", "dict"]),
            httpx.Response(200, json={"messages": "not a list"}),
        ],
    )
    def test_tolerates_bad_bodies(self, response):
        """Unusable bodies give empty messages."""
        assert ServerMessages.from_response(response) == ServerMessages()

    @pytest.mark.unit
    def test_summary_precedence(self):
        """Header beats joined messages."""
        assert ServerMessages(messageHeader="H", messages=["m"]).summary() == "H"
        assert ServerMessages(messages=["a", "b"]).summary() == "a; b"
        assert ServerMessages().summary() is None


class TestDecodeSubject:
    """Tests for unverified token decoding."""

    @pytest.mark.unit
    def test_reads_sub(self, make_token):
        """The sub claim is returned."""
        assert decode_subject(make_token("jdoe")) == "jdoe"

    @pytest.mark.unit
    def test_missing_sub(self, make_token):
        """Tokens without sub give None."""
        assert decode_subject(make_token(None)) is None

    @pytest.mark.unit
    def test_garbage_token(self, caplog):
        """Undecodable tokens give None with a warning."""
        with caplog.at_level(logging.WARNING):
            assert decode_subject("not-a-jwt") is None
        assert "Could not decode token" in caplog.text


class TestOidcTokenProvider:
    """Tests for token acquisition."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_and_cache(self, make_token):
        """The token is fetched once and its subject becomes the username."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text=make_token("jdoe") + "\n")

        async with _http(handler) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            token = await provider.get_token()
            assert await provider.get_token() == token

        assert len(calls) == 1
        assert provider.username == "jdoe"
        assert not token.endswith("\n")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_undecodable_token_uses_default(self):
        """A token that is not a JWT keeps the default username."""
        async with _http(lambda r: httpx.Response(200, text="opaque")) as http:
            provider = OidcTokenProvider(OIDC_URL, http, default_username="guest")
            await provider.refresh()
        assert provider.token == "opaque"
        assert provider.username == "guest"

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response", [httpx.Response(401), httpx.Response(200, text="  ")]
    )
    async def test_failures_raise(self, response):
        """Non-2xx and empty bodies raise AuthenticationError."""
        async with _http(lambda r: response) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            with pytest.raises(AuthenticationError):
                await provider.refresh()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Connection failures raise AuthenticationError."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with _http(handler) as http:
            with pytest.raises(AuthenticationError, match="Token request failed"):
                await OidcTokenProvider(OIDC_URL, http).refresh()


class TestFetchForm:
    """Tests for schema loading."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_form(self, form_payload):
        """The form payload is parsed into a definition."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=form_payload)

        async with _http(handler) as http:
            form = await FbmsClient(BASE_URL + "/", http).fetch_form("contact")

        assert str(seen[0].url) == f"{BASE_URL}/api/v1/forms/contact"
        assert form.version == 3
        assert form.form_schema.title == "Contact"
        assert form.metadata == form_payload["metadata"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bare_schema_payload(self, contact_schema):
        """A payload without a schema key is itself the schema."""
        async with _http(lambda r: httpx.Response(200, json=contact_schema)) as http:
            form = await FbmsClient(BASE_URL, http).fetch_form("contact")
        assert form.form_schema.title == "Contact"
        assert form.version is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self):
        """Non-2xx raises SchemaLoadError with the status."""
        async with _http(lambda r: httpx.Response(404)) as http:
            with pytest.raises(SchemaLoadError) as exc_info:
                await FbmsClient(BASE_URL, http).fetch_form("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_json(self):
        """Non-JSON bodies raise SchemaLoadError."""
        async with _http(lambda r: httpx.Response(200, text="<html>")) as http:
            with pytest.raises(SchemaLoadError, match="Invalid form schema"):
                await FbmsClient(BASE_URL, http).fetch_form("contact")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bearer_header(self, make_token):
        """A cached token is sent as a bearer credential."""
        token = make_token()
        seen = []

        def handler(request):
            if request.url.path.endswith("userinfo"):
                return httpx.Response(200, text=token)
            seen.append(request)
            return httpx.Response(200, json={"schema": {"title": "T"}})

        async with _http(handler) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            await provider.get_token()
            await FbmsClient(BASE_URL, http, provider).fetch_form("contact")

        assert seen[0].headers["Authorization"] == f"Bearer {token}"


class TestFetchAnswers:
    """Tests for prior answers loading."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_answers(self):
        """Answers are returned with a cache-busting parameter."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"answers": {"name": "Jo"}})

        async with _http(handler) as http:
            answers = await FbmsClient(BASE_URL, http).fetch_answers("contact")

        assert answers == {"name": "Jo"}
        assert seen[0].url.path == "/fbms/api/v1/submissions/contact"
        assert "safarifix" in seen[0].url.params

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(404),
            httpx.Response(200, text="nope"),
            httpx.Response(200, json={"answers": None}),
            httpx.Response(200, json=[]),
        ],
    )
    async def test_failures_give_empty(self, response, caplog):
        """Any failure gives empty answers."""
        async with _http(lambda r: response) as http:
            assert await FbmsClient(BASE_URL, http).fetch_answers("contact") == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_error_gives_empty(self, caplog):
        """Transport errors are logged and give empty answers."""

        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with caplog.at_level(logging.WARNING):
            async with _http(handler) as http:
                assert await FbmsClient(BASE_URL, http).fetch_answers("contact") == {}
        assert "Could not fetch prior answers" in caplog.text


class TestSubmit:
    """Tests for submission and the 403 refresh path."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self):
        """The envelope is posted as JSON with wire names."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"messages": ["Thanks"]})

        async with _http(handler) as http:
            result = await FbmsClient(BASE_URL, http).submit(_envelope(name="Jo"))

        body = json.loads(seen[0].content)
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{BASE_URL}/api/v1/submissions/contact"
        assert body["formFname"] == "contact"
        assert body["formVersion"] == 3
        assert body["answers"] == {"name": "Jo"}
        assert isinstance(body["timestamp"], int)
        assert result.server_messages.messages == ["Thanks"]
        assert result.forward_to is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forward_header(self):
        """The forward header names the next form."""
        response = httpx.Response(200, headers={"X-FBMS-FormForward": "next-form"})
        async with _http(lambda r: response) as http:
            result = await FbmsClient(BASE_URL, http).submit(_envelope())
        assert result.forward_to == "next-form"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_error_message_precedence(self):
        """Errors prefer messageHeader, then messages, then the default."""
        cases = [
            (httpx.Response(400, json={"messageHeader": "Bad", "messages": ["x"]}), "Bad"),
            (httpx.Response(400, json={"messages": ["x", "y"]}), "x; y"),
            (httpx.Response(500, text="Internal Server Error"), "Failed to submit form"),
        ]
        for response, expected in cases:
            async with _http(lambda r, resp=response: resp) as http:
                with pytest.raises(SubmissionError) as exc_info:
                    await FbmsClient(BASE_URL, http).submit(_envelope())
            assert str(exc_info.value) == expected
            assert exc_info.value.status_code == response.status_code

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_refresh_then_success(self, make_token):
        """A 403 triggers exactly one refresh and one retry."""
        counts = {"submit": 0, "token": 0}

        def handler(request):
            if request.url.path.endswith("userinfo"):
                counts["token"] += 1
                return httpx.Response(200, text=make_token())
            counts["submit"] += 1
            return httpx.Response(403 if counts["submit"] == 1 else 200)

        async with _http(handler) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            result = await FbmsClient(BASE_URL, http, provider).submit(_envelope())

        assert result.status_code == 200
        assert counts == {"submit": 2, "token": 1}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_twice(self, make_token):
        """A second 403 raises the access denied error."""

        def handler(request):
            if request.url.path.endswith("userinfo"):
                return httpx.Response(200, text=make_token())
            return httpx.Response(403)

        async with _http(handler) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            with pytest.raises(AuthenticationError, match=ACCESS_DENIED_MESSAGE):
                await FbmsClient(BASE_URL, http, provider).submit(_envelope())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_refresh_failure(self):
        """A failed refresh raises the access denied error."""

        def handler(request):
            if request.url.path.endswith("userinfo"):
                return httpx.Response(500)
            return httpx.Response(403)

        async with _http(handler) as http:
            provider = OidcTokenProvider(OIDC_URL, http)
            with pytest.raises(AuthenticationError, match=ACCESS_DENIED_MESSAGE):
                await FbmsClient(BASE_URL, http, provider).submit(_envelope())

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_without_provider(self):
        """Without a token provider a 403 is an ordinary submission error."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403)

        async with _http(handler) as http:
            with pytest.raises(SubmissionError) as exc_info:
                await FbmsClient(BASE_URL, http).submit(_envelope())

        assert len(calls) == 1
        assert exc_info.value.status_code == 403
        assert str(exc_info.value) == "Failed to submit form"
