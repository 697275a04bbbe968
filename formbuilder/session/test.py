"""Tests for the form session state machine.

The service is faked with ``httpx.MockTransport`` (see conftest.py).
"""

import asyncio

import httpx
import pytest

from formbuilder.client import ACCESS_DENIED_MESSAGE
from formbuilder.config import FormBuilderSettings
from formbuilder.session import (
    SUBMIT_ERROR_EVENT,
    SUBMIT_SUCCESS_EVENT,
    FormBuilder,
    FormStatus,
)


async def _loaded(settings, http, answers=None) -> FormBuilder:
    builder = FormBuilder(settings, http=http)
    await builder.load()
    for path, value in (answers or {}).items():
        builder.handle_input_change(path, value)
    return builder


def _record(builder: FormBuilder) -> list[tuple[str, dict]]:
    events: list[tuple[str, dict]] = []
    for name in (SUBMIT_SUCCESS_EVENT, SUBMIT_ERROR_EVENT):
        builder.on(name, lambda detail, name=name: events.append((name, detail)))
    return events


VALID = {"name": "Jo Doe", "contact.email": "jo@example.org"}


class TestConstruction:
    """Tests for FormBuilder setup."""

    @pytest.mark.unit
    def test_requires_form_name(self):
        """A form name must come from the argument or the settings."""
        with pytest.raises(ValueError, match="form name"):
            FormBuilder(FormBuilderSettings(base_url="http://x"))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_default_username(self, settings):
        """Without an OIDC endpoint submissions use the default username."""
        async with FormBuilder(settings) as builder:
            assert builder.username == "unknown"
            assert builder.token_provider is None
            assert builder.status is FormStatus.LOADING


class TestLoad:
    """Tests for loading."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_load(self, fbms, settings):
        """Schema and prior answers load; status becomes IDLE."""
        fbms.answers["contact"] = {"name": "Prior"}
        async with fbms.client() as http:
            builder = await _loaded(settings, http)

        assert builder.status is FormStatus.IDLE
        assert builder.schema.title == "Contact"
        assert builder.definition.version == 3
        assert builder.get_nested_value("name") == "Prior"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_answers(self, fbms, settings):
        """Unavailable prior answers give an empty form."""
        async with fbms.client() as http:
            builder = await _loaded(settings, http)
        assert builder.answers == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_load_error(self, fbms):
        """A schema failure blocks the session."""
        settings = FormBuilderSettings(base_url="http://fbms.test/fbms", form_fname="gone")
        async with fbms.client() as http:
            builder = await _loaded(settings, http)

        assert builder.status is FormStatus.LOAD_ERROR
        assert "404" in builder.error
        assert "Error:" in builder.render_html()

        await builder.submit()
        assert fbms.submissions == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_load_fetches_token_first(self, fbms, oidc_settings):
        """The token is fetched during load and its subject is the username."""
        async with fbms.client() as http:
            builder = await _loaded(oidc_settings, http)
        assert fbms.token_requests == 1
        assert builder.username == "jdoe"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_token_failure_blocks_load(self, fbms, oidc_settings):
        """A token failure at load time ends in LOAD_ERROR with the error view."""
        fbms.token_status = 500
        async with fbms.client() as http:
            builder = await _loaded(oidc_settings, http)

            assert builder.status is FormStatus.LOAD_ERROR
            assert builder.error == "Authentication failed"
            assert builder.definition is None
            html = builder.render_html()
            assert "Authentication failed" in html
            assert "<form" not in html

            await builder.submit()
        assert fbms.submissions == []

    @pytest.mark.unit
    def test_loading_view(self, settings):
        """Before loading the loading placeholder renders."""
        builder = FormBuilder(settings, http=httpx.AsyncClient())
        assert "Loading form..." in builder.render_html()


class TestSubmit:
    """Tests for the submission state machine."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_answers_blocked(self, fbms, settings):
        """Empty answers produce required errors and no network call."""
        async with fbms.client() as http:
            builder = await _loaded(settings, http)
            events = _record(builder)
            await builder.submit()

        assert builder.field_errors == {
            "name": "This field is required",
            "contact.email": "This field is required",
        }
        assert builder.validation_failed
        assert builder.status is FormStatus.IDLE
        assert fbms.submissions == []
        assert events == []
        assert "Please correct the errors below." in builder.render_html()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, fbms, settings):
        """An accepted submission ends in SUCCESS with server messages."""
        fbms.submit_body = {"messageHeader": "Thanks", "messages": ["See you soon"]}
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            events = _record(builder)
            await builder.submit()

        assert builder.status is FormStatus.SUCCESS
        assert fbms.submissions[0]["username"] == "unknown"
        assert fbms.submissions[0]["formFname"] == "contact"
        assert fbms.submissions[0]["formVersion"] == 3
        assert fbms.submissions[0]["answers"] == {
            "name": "Jo Doe",
            "contact": {"email": "jo@example.org"},
        }

        assert [name for name, _ in events] == [SUBMIT_SUCCESS_EVENT]
        assert events[0][1]["data"]["answers"] == fbms.submissions[0]["answers"]

        html = builder.render_html()
        assert "Thanks" in html
        assert "See you soon" in html
        assert "<input" not in html

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_is_terminal(self, fbms, settings):
        """Submitting again after SUCCESS does nothing."""
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()
            await builder.submit()
        assert len(fbms.submissions) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forward(self, fbms, settings):
        """A forward header replaces the session with the next form."""
        fbms.forward_to = "next-form"
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            events = _record(builder)
            await builder.submit()

        assert builder.status is FormStatus.FORWARDED
        assert builder.fname == "next-form"
        assert builder.schema.title == "Next"
        assert builder.answers == {"rating": 4}
        assert builder.field_errors == {}
        assert events[0][0] == SUBMIT_SUCCESS_EVENT
        assert events[0][1]["data"]["formFname"] == "contact"

        html = builder.render_html()
        assert "Form submitted successfully!" in html
        assert 'name="rating"' in html
        assert 'name="notes"' in html

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forwarded_form_can_submit(self, fbms, settings):
        """The forwarded form submits under its own name."""
        fbms.forward_to = "next-form"
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()
            fbms.forward_to = None
            await builder.submit()

        assert [s["formFname"] for s in fbms.submissions] == ["contact", "next-form"]
        assert builder.status is FormStatus.SUCCESS

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_refresh_and_retry(self, fbms, oidc_settings):
        """A 403 refreshes credentials once and retries once."""
        fbms.submit_statuses = [403, 200]
        async with fbms.client() as http:
            builder = await _loaded(oidc_settings, http, VALID)
            await builder.submit()

        assert builder.status is FormStatus.SUCCESS
        assert len(fbms.submissions) == 2
        # One token fetch at load, one refresh
        assert fbms.token_requests == 2
        assert fbms.submissions[1]["username"] == "jdoe"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_after_refresh(self, fbms, oidc_settings):
        """A second 403 ends in ERROR with the access denied message."""
        fbms.submit_statuses = [403]
        async with fbms.client() as http:
            builder = await _loaded(oidc_settings, http, VALID)
            events = _record(builder)
            await builder.submit()

        assert builder.status is FormStatus.ERROR
        assert builder.error == ACCESS_DENIED_MESSAGE
        assert events == [(SUBMIT_ERROR_EVENT, {"error": ACCESS_DENIED_MESSAGE})]
        assert len(fbms.submissions) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_403_without_provider(self, fbms, settings):
        """Without OIDC a 403 is an ordinary failure with no retry."""
        fbms.submit_statuses = [403]
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()

        assert builder.status is FormStatus.ERROR
        assert builder.error == "Failed to submit form"
        assert len(fbms.submissions) == 1
        assert fbms.token_requests == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_server_error_message(self, fbms, settings):
        """Server-provided messages become the error text."""
        fbms.submit_statuses = [422]
        fbms.submit_body = {"messages": ["Name taken", "Try again"]}
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()

        assert builder.status is FormStatus.ERROR
        assert builder.error == "Name taken; Try again"
        assert "Name taken; Try again" in builder.render_html()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_transport_error(self, fbms, settings):
        """Transport failures end in ERROR without raising."""

        async def handler(request):
            if request.method == "POST":
                raise httpx.ConnectError("refused", request=request)
            return await fbms.handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            builder = await _loaded(settings, http, VALID)
            events = _record(builder)
            await builder.submit()

        assert builder.status is FormStatus.ERROR
        assert events == [(SUBMIT_ERROR_EVENT, {"error": "Failed to submit form"})]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error_allows_retry(self, fbms, settings):
        """An unexpected failure ends in ERROR and a later submit still goes out."""
        failures = [RuntimeError("boom")]

        async def handler(request):
            if request.method == "POST" and failures:
                raise failures.pop()
            return await fbms.handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            builder = await _loaded(settings, http, VALID)
            events = _record(builder)
            await builder.submit()

            assert builder.status is FormStatus.ERROR
            assert events == [(SUBMIT_ERROR_EVENT, {"error": "Failed to submit form"})]

            await builder.submit()

        assert builder.status is FormStatus.SUCCESS
        assert len(fbms.submissions) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_edit_after_error_returns_to_idle(self, fbms, settings):
        """Any edit after a failure re-enables submission."""
        fbms.submit_statuses = [500, 200]
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()
            assert builder.status is FormStatus.ERROR

            builder.handle_input_change("name", "Jo D.")
            assert builder.status is FormStatus.IDLE
            assert builder.error is None

            await builder.submit()
        assert builder.status is FormStatus.SUCCESS
        assert len(fbms.submissions) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_retry_from_error(self, fbms, settings):
        """Submit is allowed straight from ERROR."""
        fbms.submit_statuses = [500, 200]
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            await builder.submit()
            await builder.submit()
        assert builder.status is FormStatus.SUCCESS

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_double_submit_single_flight(self, fbms, settings):
        """A second submit while one is in flight is ignored."""
        fbms.gate = asyncio.Event()
        async with fbms.client() as http:
            builder = await _loaded(settings, http, VALID)
            first = asyncio.create_task(builder.submit())
            while not fbms.submissions:
                await asyncio.sleep(0)

            assert builder.status is FormStatus.SUBMITTING
            assert "Submitting..." in builder.render_html()
            await builder.submit()

            fbms.gate.set()
            await first

        assert len(fbms.submissions) == 1
        assert builder.status is FormStatus.SUCCESS


class TestHandlers:
    """Tests for answer editing."""

    @pytest.fixture
    def builder(self, settings, fbms) -> FormBuilder:
        builder = FormBuilder(settings, http=fbms.client())
        builder.status = FormStatus.IDLE
        return builder

    @pytest.mark.unit
    def test_input_change_clears_error(self, builder):
        """Editing a field clears only its own error."""
        builder.field_errors = {"name": "x", "age": "y"}
        before = builder.answers
        builder.handle_input_change("name", "Jo")
        assert builder.answers == {"name": "Jo"}
        assert before == {}
        assert builder.field_errors == {"age": "y"}

    @pytest.mark.unit
    def test_multi_select(self, builder):
        """Multi-select stores the selected values as a list."""
        builder.handle_multi_select_change("topics", ("news", "events"))
        assert builder.get_nested_value("topics") == ["news", "events"]

    @pytest.mark.unit
    def test_checkbox_array(self, builder):
        """Checking adds once; unchecking removes."""
        builder.handle_checkbox_array_change("channels", "sms", True)
        builder.handle_checkbox_array_change("channels", "sms", True)
        builder.handle_checkbox_array_change("channels", "email", True)
        assert builder.get_nested_value("channels") == ["sms", "email"]
        builder.handle_checkbox_array_change("channels", "sms", False)
        assert builder.get_nested_value("channels") == ["email"]

    @pytest.mark.unit
    def test_array_change_pads(self, builder):
        """Writing past the end pads with None."""
        builder.handle_array_change("items", 2, "c")
        assert builder.get_nested_value("items") == [None, None, "c"]
        builder.handle_array_change("items", 0, "a")
        assert builder.get_nested_value("items") == ["a", None, "c"]

    @pytest.mark.unit
    def test_reset(self, builder):
        """Reset clears answers and errors."""
        builder.handle_input_change("contact.email", "a@b.co")
        builder.field_errors = {"name": "x"}
        builder.validation_failed = True
        builder.handle_reset()
        assert builder.answers == {}
        assert builder.field_errors == {}
        assert not builder.validation_failed

    @pytest.mark.unit
    def test_schema_lookup_before_load(self, builder):
        """Schema lookups before loading give None."""
        assert builder.get_schema_at_path("name") is None
        assert builder.validate_form() is False
