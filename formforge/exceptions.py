from enum import Enum


class AuthenticationError(Exception):
    """Raised when OAuth credentials are missing or invalid."""


class IntegrationError(Exception):
    """Raised when an external API call fails."""


class RateLimitError(Exception):
    """Raised when an external API rate limit is hit."""


class FormValidationError(Exception):
    """Raised when a FormDefinition is structurally inconsistent."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class CompilationError(Exception):
    """Raised when a compiler meets input a validated definition cannot produce."""


class GenerationFailure(str, Enum):
    SAFETY_BLOCKED = "safety_blocked"
    INVALID_KEY = "invalid_key"
    EMPTY = "empty"
    OTHER = "other"


class GenerationError(IntegrationError):
    """Raised when the LLM collaborator fails to produce a usable result."""

    def __init__(self, reason: GenerationFailure, message: str):
        self.reason = reason
        super().__init__(message)


class OrchestratorError(IntegrationError):
    """Base for failures while creating a remote form."""


class UnauthenticatedError(OrchestratorError):
    """Raised when no signed-in session exists before creating a form."""


class CreationFailedError(OrchestratorError):
    """Raised when the backend did not create the form shell."""


class BatchMutationFailedError(OrchestratorError):
    """Raised when the batch of form mutations was rejected."""

    def __init__(self, backend_message: str, form_id: str):
        self.backend_message = backend_message
        self.form_id = form_id
        super().__init__(
            f"Could not populate form {form_id}. Reason: {backend_message}"
        )
