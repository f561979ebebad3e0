from fastmcp import FastMCP
from pydantic import ValidationError

from formforge.auth import GoogleAuthSession
from formforge.exceptions import (
    AuthenticationError,
    CompilationError,
    FormValidationError,
    GenerationError,
    IntegrationError,
    OrchestratorError,
    RateLimitError,
    UnauthenticatedError,
)
from formforge.models.common import Locale
from formforge.models.forms import FormDefinition
from formforge.services import apps_script
from formforge.services import form_mutations
from formforge.services import form_validation
from formforge.services import gemini as gemini_service
from formforge.services.forms import GoogleFormsBackend, RemoteFormOrchestrator

mcp = FastMCP("Formforge")

_KNOWN_ERRORS = (
    AuthenticationError, CompilationError, FormValidationError, IntegrationError, RateLimitError, ValidationError,
)


def _handle_mcp_error(e: Exception, locale: Locale = Locale.EN) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, FormValidationError):
        return {"error": "validation_error", "field": e.field, "message": e.reason,
                "action": "Fix the named field of the form definition and retry"}
    if isinstance(e, ValidationError):
        return {"error": "validation_error", "message": str(e), "action": "Send a definition matching the form schema"}
    if isinstance(e, (AuthenticationError, UnauthenticatedError)):
        return {"error": "auth_error", "message": str(e), "action": "Ask user to visit /auth/forms/setup"}
    if isinstance(e, RateLimitError):
        return {"error": "rate_limit", "message": str(e), "action": "Wait a moment and retry"}
    if isinstance(e, GenerationError):
        return {"error": "generation_error", "reason": e.reason.value, "message": str(e),
                "action": gemini_service.remediation_message(e.reason, locale)}
    if isinstance(e, CompilationError):
        return {"error": "compilation_error", "message": str(e)}
    if isinstance(e, OrchestratorError):
        return {"error": "orchestrator_error", "message": str(e)}
    if isinstance(e, IntegrationError):
        return {"error": "integration_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


@mcp.tool
def forms_generate_definition(text: str, locale: Locale = Locale.EN) -> dict:
    """Turn free text (markdown, HTML, plain list, or Google Forms JSON) into a form definition.
    Options ending with '*' are treated as correct quiz answers. Returns the validated definition."""
    try:
        definition = gemini_service.generate_form_definition(text, locale)
        return form_validation.validate_definition(definition).model_dump(by_alias=True, mode="json")
    except _KNOWN_ERRORS as e:
        return _handle_mcp_error(e, locale)


@mcp.tool
def forms_compile_script(definition: dict, create_results_sheet: bool = False, locale: Locale = Locale.EN) -> dict:
    """Generate a Google Apps Script that creates the form when run in the Apps Script editor.
    Set create_results_sheet to also create a linked responses spreadsheet."""
    try:
        validated = form_validation.validate_definition(FormDefinition.model_validate(definition))
        script = apps_script.compile_script(validated, create_results_sheet, locale)
        return {"script": script, "entry_function": apps_script.ENTRY_FUNCTION}
    except _KNOWN_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_compile_mutations(definition: dict) -> dict:
    """Preview the Google Forms API batchUpdate requests that would build this form definition."""
    try:
        validated = form_validation.validate_definition(FormDefinition.model_validate(definition))
        requests = form_mutations.to_batch_requests(form_mutations.compile_mutations(validated))
        return {"requests": requests, "count": len(requests)}
    except _KNOWN_ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def forms_create_remote(definition: dict, account: str = "default") -> dict:
    """Create a live Google Form from a form definition and return its share and edit URLs.
    Requires the user to have connected Google Forms via /auth/forms/setup."""
    try:
        validated = form_validation.validate_definition(FormDefinition.model_validate(definition))
        session = GoogleAuthSession(account)
        orchestrator = RemoteFormOrchestrator(auth=session, backend=GoogleFormsBackend(session))
        return orchestrator.create_remote_form(validated).model_dump()
    except _KNOWN_ERRORS as e:
        return _handle_mcp_error(e)
