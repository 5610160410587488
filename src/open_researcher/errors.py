"""
Failure taxonomy for research runs.

Fatal failures are raised as ResearchError subclasses carrying a FailureKind so
transports can pick a tailored explanation. Tool failures never use these; the
executor turns them into text for the model.
"""

from enum import Enum

import anthropic


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    MODEL_UNAVAILABLE = "model_unavailable"
    FEATURE_NOT_ENABLED = "feature_not_enabled"
    TURN_LIMIT = "turn_limit"
    UNKNOWN = "unknown"


class ResearchError(Exception):
    """Base class for fatal research failures."""

    kind: FailureKind = FailureKind.UNKNOWN

    def __init__(self, message: str, kind: FailureKind | None = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class ConfigurationError(ResearchError):
    """A required credential or setting is missing."""

    kind = FailureKind.CONFIGURATION


class ModelBoundaryError(ResearchError):
    """The reasoning model rejected or failed a request."""


class TurnLimitError(ResearchError):
    """The model kept requesting tools past the configured turn cap."""

    kind = FailureKind.TURN_LIMIT


def classify_model_error(
    error: Exception, model_id: str, beta: str | None = None
) -> ModelBoundaryError:
    """
    Classify an exception raised by the reasoning-model client.

    Args:
        error: The exception raised by the client
        model_id: Model that was requested, quoted in the message
        beta: Beta feature header that was requested, if any

    Returns:
        ModelBoundaryError with its kind set and a prefixed message
    """
    message = str(error)
    lowered = message.lower()

    if (
        isinstance(error, anthropic.AuthenticationError)
        or "authentication" in lowered
        or "401" in lowered
        or "api key" in lowered
    ):
        return ModelBoundaryError(
            f"Authentication error: Please check your ANTHROPIC_API_KEY. Error: {message}",
            FailureKind.AUTHENTICATION,
        )
    if "beta" in lowered or (beta and beta.lower() in lowered):
        return ModelBoundaryError(
            f"Beta feature error: The {beta or 'requested'} beta may not be enabled for your account. Error: {message}",
            FailureKind.FEATURE_NOT_ENABLED,
        )
    if isinstance(error, anthropic.NotFoundError) or "model" in lowered:
        return ModelBoundaryError(
            f"Model error: The {model_id} model may not be available in your region or with your API key. Error: {message}",
            FailureKind.MODEL_UNAVAILABLE,
        )
    return ModelBoundaryError(
        f"Model request failed: {message}", FailureKind.UNKNOWN
    )
