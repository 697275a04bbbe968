"""Form builder microservice client."""

from formbuilder.client.lib import (
    ACCESS_DENIED_MESSAGE,
    DEFAULT_USERNAME,
    FORWARD_HEADER,
    AuthenticationError,
    FbmsClient,
    FormBuilderError,
    OidcTokenProvider,
    SchemaLoadError,
    ServerMessages,
    SubmissionError,
    SubmissionResult,
    decode_subject,
)

__all__ = [
    "FbmsClient",
    "OidcTokenProvider",
    "ServerMessages",
    "SubmissionResult",
    "FormBuilderError",
    "AuthenticationError",
    "SchemaLoadError",
    "SubmissionError",
    "decode_subject",
    "ACCESS_DENIED_MESSAGE",
    "DEFAULT_USERNAME",
    "FORWARD_HEADER",
]
