"""HTTP client for the form builder microservice (FBMS).

Provides schema, prior-answer and submission calls over ``httpx.AsyncClient``
plus an OIDC token provider that fetches a raw bearer token and reads its
``sub`` claim for the submission username.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any

import httpx
import jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formbuilder.schema import FormDefinition, SubmissionEnvelope

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "unknown"
FORWARD_HEADER = "x-fbms-formforward"
ACCESS_DENIED_MESSAGE = "Access denied even after refreshing credentials"


# =============================================================================
# Errors
# =============================================================================


class FormBuilderError(Exception):
    """Base error for form builder service calls."""


class AuthenticationError(FormBuilderError):
    """Token fetch or refresh failed."""


class SchemaLoadError(FormBuilderError):
    """Form schema could not be loaded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(FormBuilderError):
    """Submission sink rejected the answers."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        server_messages: "ServerMessages | None" = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.server_messages = server_messages


# =============================================================================
# Response models
# =============================================================================


class ServerMessages(BaseModel):
    """Optional ``messageHeader`` / ``messages`` carried in FBMS responses."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_header: str | None = Field(None, alias="messageHeader")
    messages: list[str] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ServerMessages":
        """Parse a response body, tolerating empty or non-JSON bodies."""
        try:
            body = response.json()
        except ValueError:
            return cls()
        if not isinstance(body, dict):
            return cls()
        try:
            return cls.model_validate(body)
        except ValidationError:
            return cls()

    def summary(self) -> str | None:
        """Header if present, else the joined messages."""
        if self.message_header:
            return self.message_header
        if self.messages:
            return "; ".join(self.messages)
        return None


@dataclass
class SubmissionResult:
    """Outcome of an accepted submission.

    Attributes:
        status_code: HTTP status of the response.
        server_messages: Parsed notice content.
        forward_to: Name of the next form, when the service forwards.
    """

    status_code: int
    server_messages: ServerMessages = field(default_factory=ServerMessages)
    forward_to: str | None = None


# =============================================================================
# Authentication
# =============================================================================


class OidcTokenProvider:
    """Fetch bearer tokens from an OIDC endpoint that returns the raw token.

    Example:
        >>> provider = OidcTokenProvider("https://portal/api/v5-1/userinfo", client)
        >>> token = await provider.get_token()
        >>> provider.username
        'jdoe'

    Attributes:
        url: Token endpoint.
        token: Last fetched token.
        username: ``sub`` claim of the last token, or the default.
    """

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        default_username: str = DEFAULT_USERNAME,
    ):
        self.url = url
        self._client = client
        self.default_username = default_username
        self.token: str | None = None
        self.username: str = default_username

    async def get_token(self) -> str:
        """Return the cached token, fetching it on first use."""
        if self.token is None:
            return await self.refresh()
        return self.token

    async def refresh(self) -> str:
        """Fetch a fresh token.

        Raises:
            AuthenticationError: If the endpoint fails or returns nothing.
        """
        try:
            response = await self._client.get(self.url)
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Token request failed: {e}") from e

        if not response.is_success:
            raise AuthenticationError(
                f"Token endpoint returned {response.status_code}"
            )

        token = response.text.strip()
        if not token:
            raise AuthenticationError("Token endpoint returned an empty body")

        self.token = token
        self.username = decode_subject(token) or self.default_username
        return token


def decode_subject(token: str) -> str | None:
    """Read the ``sub`` claim without verifying the signature.

    Returns:
        str | None: The subject, or None when the token cannot be decoded.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError as e:
        logger.warning("Could not decode token: %s", e)
        return None
    sub = claims.get("sub")
    return str(sub) if sub else None


# =============================================================================
# FBMS client
# =============================================================================


class FbmsClient:
    """Async HTTP client for the form builder microservice.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     client = FbmsClient("https://portal/fbms", http)
        ...     form = await client.fetch_form("communication-preferences")

    Attributes:
        base_url: Service URL without trailing slash.
        forward_header: Response header naming the next form.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        token_provider: OidcTokenProvider | None = None,
        forward_header: str = FORWARD_HEADER,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client
        self.token_provider = token_provider
        self.forward_header = forward_header

    def form_url(self, fname: str) -> str:
        return f"{self.base_url}/api/v1/forms/{fname}"

    def submission_url(self, fname: str) -> str:
        return f"{self.base_url}/api/v1/submissions/{fname}"

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.token_provider is not None and self.token_provider.token:
            headers["Authorization"] = f"Bearer {self.token_provider.token}"
        return headers

    async def fetch_form(self, fname: str) -> FormDefinition:
        """Load a form definition.

        Raises:
            SchemaLoadError: On transport errors, non-2xx, or a bad payload.
        """
        try:
            response = await self._client.get(
                self.form_url(fname), headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise SchemaLoadError(f"Schema request failed: {e}") from e

        if not response.is_success:
            raise SchemaLoadError(
                f"Failed to fetch schema: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            return FormDefinition.from_payload(payload)
        except (ValueError, AttributeError, ValidationError) as e:
            raise SchemaLoadError(
                f"Invalid form schema: {e}", status_code=response.status_code
            ) from e

    async def fetch_answers(self, fname: str) -> dict[str, Any]:
        """Load prior answers; any failure yields empty answers."""
        try:
            response = await self._client.get(
                self.submission_url(fname),
                params={"safarifix": str(random.random())},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.warning("Could not fetch prior answers for '%s': %s", fname, e)
            return {}

        if not response.is_success:
            logger.warning(
                "Could not fetch prior answers for '%s': %s",
                fname,
                response.status_code,
            )
            return {}

        try:
            body = response.json()
        except ValueError:
            logger.warning("Prior answers for '%s' are not JSON", fname)
            return {}
        answers = body.get("answers") if isinstance(body, dict) else None
        return answers if isinstance(answers, dict) else {}

    async def submit(self, envelope: SubmissionEnvelope) -> SubmissionResult:
        """Post a submission, refreshing credentials once on 403.

        Raises:
            AuthenticationError: Still forbidden after a refresh, or the
                refresh itself failed.
            SubmissionError: Any other non-2xx response.
            httpx.HTTPError: Transport failures.
        """
        url = self.submission_url(envelope.form_fname)
        body = envelope.model_dump(by_alias=True, mode="json")

        response = await self._client.post(url, json=body, headers=self._headers())

        if response.status_code == 403 and self.token_provider is not None:
            logger.info("Submission forbidden; refreshing credentials")
            try:
                await self.token_provider.refresh()
            except AuthenticationError as e:
                raise AuthenticationError(ACCESS_DENIED_MESSAGE) from e
            response = await self._client.post(
                url, json=body, headers=self._headers()
            )
            if response.status_code == 403:
                raise AuthenticationError(ACCESS_DENIED_MESSAGE)

        messages = ServerMessages.from_response(response)
        if not response.is_success:
            raise SubmissionError(
                messages.summary() or "Failed to submit form",
                status_code=response.status_code,
                response_body=response.text[:500],
                server_messages=messages,
            )

        return SubmissionResult(
            status_code=response.status_code,
            server_messages=messages,
            forward_to=response.headers.get(self.forward_header) or None,
        )


__all__ = [
    "ACCESS_DENIED_MESSAGE",
    "AuthenticationError",
    "DEFAULT_USERNAME",
    "FORWARD_HEADER",
    "FbmsClient",
    "FormBuilderError",
    "OidcTokenProvider",
    "SchemaLoadError",
    "ServerMessages",
    "SubmissionError",
    "SubmissionResult",
    "decode_subject",
]
