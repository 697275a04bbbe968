"""Form session: loading, editing and submitting one form.

``FormBuilder`` owns the answers, field errors and submission status of a
single form instance. All answer writes go through the copy-on-write path
helpers so a view built from an earlier state is never mutated.

Status transitions:

    LOADING -> IDLE | LOAD_ERROR
    IDLE -> SUBMITTING -> SUCCESS | FORWARDED | ERROR
    ERROR -> IDLE (on any edit)
    FORWARDED -> SUBMITTING (the forwarded form is a fresh session)
"""

import asyncio
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Iterable

import httpx

from formbuilder.client import (
    AuthenticationError,
    FbmsClient,
    FormBuilderError,
    OidcTokenProvider,
    SchemaLoadError,
    ServerMessages,
)
from formbuilder.config import FormBuilderSettings
from formbuilder.core.log import get_logger
from formbuilder.paths import get_nested_value, get_schema_at_path, set_nested_value
from formbuilder.render import (
    RenderState,
    render_error_html,
    render_form_html,
    render_loading_html,
)
from formbuilder.schema import FormDefinition, SchemaNode, SubmissionEnvelope
from formbuilder.validation import validate_answers
from formbuilder.view import FormView, build_tree

logger = get_logger("session")

SUBMIT_SUCCESS_EVENT = "form-submit-success"
SUBMIT_ERROR_EVENT = "form-submit-error"
SUBMIT_FAILED_MESSAGE = "Failed to submit form"
AUTH_FAILED_MESSAGE = "Authentication failed"

Listener = Callable[[dict[str, Any]], None]


class FormStatus(Enum):
    """Lifecycle status of a form session."""

    LOADING = "loading"
    LOAD_ERROR = "load_error"
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FORWARDED = "forwarded"
    ERROR = "error"


class FormBuilder:
    """Engine for one schema-driven form.

    Example:
        >>> settings = FormBuilderSettings.from_environment(form_fname="intake")
        >>> async with FormBuilder(settings) as builder:
        ...     await builder.load()
        ...     builder.handle_input_change("name", "Jo")
        ...     await builder.submit()
        ...     builder.status
        <FormStatus.SUCCESS: 'success'>

    Attributes:
        settings: Resolved configuration.
        fname: Name of the form currently loaded.
        status: Current lifecycle status.
        definition: Loaded form definition.
        answers: Current answers (replaced, never mutated).
        field_errors: Message per dotted path.
        validation_failed: The last submit attempt failed validation.
        error: Load or submission error text.
        server_messages: Notice content from the last accepted submission.
    """

    def __init__(
        self,
        settings: FormBuilderSettings,
        http: httpx.AsyncClient | None = None,
        fname: str | None = None,
    ):
        self.settings = settings
        self.fname = fname or settings.form_fname
        if not self.fname:
            raise ValueError("A form name is required")

        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=settings.timeout)
        self.token_provider = (
            OidcTokenProvider(
                settings.oidc_url, self._http, default_username=settings.default_username
            )
            if settings.oidc_url
            else None
        )
        self.client = FbmsClient(
            settings.base_url,
            self._http,
            token_provider=self.token_provider,
            forward_header=settings.forward_header,
        )

        self.status = FormStatus.LOADING
        self.definition: FormDefinition | None = None
        self.answers: dict[str, Any] = {}
        self.field_errors: dict[str, str] = {}
        self.validation_failed = False
        self.error: str | None = None
        self.server_messages = ServerMessages()
        self._in_flight = False
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    async def __aenter__(self) -> "FormBuilder":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this builder created it."""
        if self._owns_http:
            await self._http.aclose()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def schema(self) -> SchemaNode | None:
        return self.definition.form_schema if self.definition else None

    @property
    def ui_hints(self) -> dict[str, Any]:
        if self.definition and self.definition.metadata:
            return self.definition.metadata
        return {}

    @property
    def username(self) -> str:
        if self.token_provider is not None:
            return self.token_provider.username
        return self.settings.default_username

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event: str, callback: Listener) -> None:
        """Register a listener for ``form-submit-success`` / ``form-submit-error``."""
        self._listeners[event].append(callback)

    def _emit(self, event: str, detail: dict[str, Any]) -> None:
        for callback in list(self._listeners.get(event, ())):
            callback(detail)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """Fetch credentials, then schema and prior answers concurrently.

        A token or schema failure leaves the session in ``LOAD_ERROR``;
        answers failures only yield empty answers.
        """
        self.status = FormStatus.LOADING
        self.error = None

        if self.token_provider is not None:
            try:
                await self.token_provider.get_token()
            except AuthenticationError as e:
                logger.error("Failed to authenticate for '%s': %s", self.fname, e)
                self.error = AUTH_FAILED_MESSAGE
                self.status = FormStatus.LOAD_ERROR
                return

        try:
            definition, answers = await self._fetch(self.fname)
        except SchemaLoadError as e:
            logger.error("Failed to load form '%s': %s", self.fname, e)
            self.error = str(e)
            self.status = FormStatus.LOAD_ERROR
            return

        self._replace(self.fname, definition, answers)
        self.status = FormStatus.IDLE
        logger.info("Loaded form '%s' (version %s)", self.fname, definition.version)

    async def _fetch(self, fname: str) -> tuple[FormDefinition, dict[str, Any]]:
        definition, answers = await asyncio.gather(
            self.client.fetch_form(fname),
            self.client.fetch_answers(fname),
        )
        return definition, answers

    def _replace(
        self, fname: str, definition: FormDefinition, answers: dict[str, Any]
    ) -> None:
        self.fname = fname
        self.definition = definition
        self.answers = answers
        self.field_errors = {}
        self.validation_failed = False

    # -------------------------------------------------------------------------
    # Answers
    # -------------------------------------------------------------------------

    def get_nested_value(self, path: str) -> Any:
        return get_nested_value(self.answers, path)

    def set_nested_value(self, path: str, value: Any) -> None:
        """Write one answer; an edit after a failed submit re-enables submit."""
        self.answers = set_nested_value(self.answers, path, value)
        if self.status is FormStatus.ERROR:
            self.status = FormStatus.IDLE
            self.error = None

    def get_schema_at_path(self, path: str) -> SchemaNode | None:
        return get_schema_at_path(self.schema, path)

    def _clear_error(self, path: str) -> None:
        if path in self.field_errors:
            self.field_errors = {k: v for k, v in self.field_errors.items() if k != path}

    def handle_input_change(self, path: str, value: Any) -> None:
        self.set_nested_value(path, value)
        self._clear_error(path)

    def handle_multi_select_change(self, path: str, values: Iterable[Any]) -> None:
        self.set_nested_value(path, list(values))
        self._clear_error(path)

    def handle_checkbox_array_change(self, path: str, option: Any, checked: bool) -> None:
        """Add or remove one option of a checkbox group."""
        current = self.get_nested_value(path)
        current = list(current) if isinstance(current, list) else []
        if checked:
            if option not in current:
                current.append(option)
        else:
            current = [v for v in current if v != option]
        self.set_nested_value(path, current)
        self._clear_error(path)

    def handle_array_change(self, path: str, index: int, value: Any) -> None:
        """Set one element of a list answer, padding with None as needed."""
        if index < 0:
            raise IndexError(f"Negative index {index} for '{path}'")
        current = self.get_nested_value(path)
        current = list(current) if isinstance(current, list) else []
        if index >= len(current):
            current.extend([None] * (index + 1 - len(current)))
        current[index] = value
        self.set_nested_value(path, current)

    def handle_reset(self) -> None:
        """Clear answers and errors."""
        if self.status is FormStatus.SUBMITTING:
            return
        self.answers = {}
        self.field_errors = {}
        self.validation_failed = False
        if self.status is FormStatus.ERROR:
            self.status = FormStatus.IDLE
            self.error = None

    # -------------------------------------------------------------------------
    # Validation and submission
    # -------------------------------------------------------------------------

    def validate_form(self) -> bool:
        """Validate all answers, replacing the field error map."""
        if self.schema is None:
            self.field_errors = {}
            return False
        self.field_errors = validate_answers(
            self.schema, self.answers, max_depth=self.settings.max_depth
        )
        return not self.field_errors

    async def submit(self) -> None:
        """Validate and submit the current answers.

        Never raises for service failures: they end in ``ERROR`` plus a
        ``form-submit-error`` event.
        """
        if self._in_flight or self.status in (FormStatus.SUBMITTING, FormStatus.SUCCESS):
            logger.debug("Ignoring submit while %s", self.status.value)
            return
        if self.definition is None:
            logger.debug("Ignoring submit before the form has loaded")
            return

        if not self.validate_form():
            self.validation_failed = True
            self.status = FormStatus.IDLE
            logger.info(
                "Submission of '%s' blocked by %d field error(s)",
                self.fname,
                len(self.field_errors),
            )
            return

        envelope = SubmissionEnvelope(
            username=self.username,
            form_fname=self.fname,
            form_version=self.definition.version,
            answers=self.answers,
        )

        self.validation_failed = False
        self.error = None
        self.status = FormStatus.SUBMITTING
        self._in_flight = True

        try:
            result = await self.client.submit(envelope)
            if result.forward_to:
                logger.info("Form '%s' forwards to '%s'", self.fname, result.forward_to)
                definition, answers = await self._fetch(result.forward_to)
        except FormBuilderError as e:
            self._fail(str(e) or SUBMIT_FAILED_MESSAGE)
            return
        except httpx.HTTPError as e:
            logger.error("Submission transport error: %s", e)
            self._fail(SUBMIT_FAILED_MESSAGE)
            return
        except Exception:
            logger.exception("Unexpected failure submitting '%s'", self.fname)
            self._fail(SUBMIT_FAILED_MESSAGE)
            return
        finally:
            self._in_flight = False

        self.server_messages = result.server_messages
        if result.forward_to:
            self._replace(result.forward_to, definition, answers)
            self.status = FormStatus.FORWARDED
        else:
            self.status = FormStatus.SUCCESS
        logger.info("Submitted form '%s' as %s", envelope.form_fname, envelope.username)
        self._emit(
            SUBMIT_SUCCESS_EVENT, {"data": envelope.model_dump(by_alias=True, mode="json")}
        )

    def _fail(self, message: str) -> None:
        logger.error("Submission of '%s' failed: %s", self.fname, message)
        self.error = message
        self.status = FormStatus.ERROR
        self._emit(SUBMIT_ERROR_EVENT, {"error": message})

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def view(self) -> FormView:
        """Build the render tree for the current state."""
        if self.schema is None:
            raise RuntimeError("Form is not loaded")
        return build_tree(
            self.schema,
            self.ui_hints,
            self.answers,
            self.field_errors,
            max_depth=self.settings.max_depth,
        )

    def render_state(self) -> RenderState:
        success = self.status in (FormStatus.SUCCESS, FormStatus.FORWARDED)
        return RenderState(
            submitting=self.status is FormStatus.SUBMITTING,
            show_controls=self.status is not FormStatus.SUCCESS,
            success=success,
            message_header=self.server_messages.message_header if success else None,
            messages=list(self.server_messages.messages) if success else [],
            error=self.error if self.status is FormStatus.ERROR else None,
            validation_failed=self.validation_failed,
            custom_styles=self.settings.custom_styles,
        )

    def render_html(self) -> str:
        """Render the session to HTML for its current status."""
        if self.status is FormStatus.LOADING:
            return render_loading_html()
        if self.status is FormStatus.LOAD_ERROR or self.schema is None:
            return render_error_html(self.error or "Invalid form schema")
        return render_form_html(self.view(), self.render_state())


__all__ = [
    "FormBuilder",
    "FormStatus",
    "Listener",
    "SUBMIT_ERROR_EVENT",
    "SUBMIT_SUCCESS_EVENT",
]
