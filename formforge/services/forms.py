import logging
from enum import Enum
from typing import Callable, Protocol

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from pydantic import BaseModel

from formforge.auth import AuthSession
from formforge.exceptions import (
    AuthenticationError,
    BatchMutationFailedError,
    CreationFailedError,
    IntegrationError,
    RateLimitError,
    UnauthenticatedError,
)
from formforge.models.forms import FormDefinition, RemoteForm
from formforge.models.mutations import MutationOp
from formforge.services.form_mutations import compile_mutations, to_batch_requests

logger = logging.getLogger(__name__)

FORMS_DISCOVERY_URL = "https://forms.googleapis.com/$discovery/rest?version=v1"


class FormShell(BaseModel):
    id: str
    edit_url: str
    share_url: str


class FormsBackend(Protocol):
    def create_shell(self, title: str) -> FormShell: ...

    def batch_mutate(self, form_id: str, ops: list[MutationOp]) -> None: ...


def _handle_api_error(e: HttpError):
    if e.resp.status == 429:
        raise RateLimitError("Forms API rate limit exceeded. Try again shortly.") from e
    if e.resp.status in (401, 403):
        raise AuthenticationError(
            "Forms credentials expired or revoked. Visit /auth/forms/setup to re-authenticate."
        ) from e
    raise IntegrationError(f"Forms API error: {e.reason}") from e


def _form_url(form_id: str) -> str:
    return f"https://docs.google.com/forms/d/{form_id}/edit"


class GoogleFormsBackend:
    """FormsBackend over the Google Forms REST API.

    The API client is built on first use from the session's bearer token.
    Requests are sent once; retrying is left to the caller.
    """

    def __init__(self, session: AuthSession):
        self.session = session
        self._service = None

    def _get_service(self):
        if self._service is None:
            try:
                token = self.session.get_token()
            except AuthenticationError:
                raise
            except Exception as e:
                raise AuthenticationError(
                    f"Failed to obtain Forms credentials: {e}. Visit /auth/forms/setup to re-authenticate."
                ) from e
            creds = Credentials(token=token)
            self._service = build(
                "forms",
                "v1",
                credentials=creds,
                discoveryServiceUrl=FORMS_DISCOVERY_URL,
                static_discovery=False,
            )
        return self._service

    def create_shell(self, title: str) -> FormShell:
        service = self._get_service()
        body = {"info": {"title": title, "documentTitle": title}}
        try:
            form = service.forms().create(body=body).execute()
        except HttpError as e:
            _handle_api_error(e)
        form_id = form.get("formId", "")
        return FormShell(
            id=form_id,
            edit_url=_form_url(form_id) if form_id else "",
            share_url=form.get("responderUri", ""),
        )

    def batch_mutate(self, form_id: str, ops: list[MutationOp]) -> None:
        service = self._get_service()
        try:
            service.forms().batchUpdate(
                formId=form_id,
                body={"requests": to_batch_requests(ops)},
            ).execute()
        except HttpError as e:
            _handle_api_error(e)


class OrchestratorState(str, Enum):
    IDLE = "idle"
    CREATING = "creating"
    POPULATING = "populating"
    DONE = "done"


class RemoteFormOrchestrator:
    """Creates a live Google Form from a definition in two sequential calls.

    The shell is created first; its id is needed for the single batch update
    that adds quiz settings and every item. A failure in either step sends the
    orchestrator back to IDLE and raises; nothing is retried here.
    """

    def __init__(
        self,
        auth: AuthSession,
        backend: FormsBackend,
        compiler: Callable[[FormDefinition], list[MutationOp]] = compile_mutations,
    ):
        self.auth = auth
        self.backend = backend
        self.compiler = compiler
        self.state = OrchestratorState.IDLE
        self.form_id: str | None = None
        self.share_url: str | None = None

    def _transition(self, state: OrchestratorState):
        logger.debug("Orchestrator %s -> %s", self.state.value, state.value)
        self.state = state

    def reset(self):
        self._transition(OrchestratorState.IDLE)
        self.form_id = None
        self.share_url = None

    def create_remote_form(self, definition: FormDefinition) -> RemoteForm:
        self.reset()
        if not self.auth.is_signed_in():
            raise UnauthenticatedError("Sign in with Google before creating a form.")

        self._transition(OrchestratorState.CREATING)
        try:
            shell = self.backend.create_shell(definition.title)
        except Exception as e:
            self.reset()
            logger.error("Form shell creation failed: %s", e)
            raise CreationFailedError(f"Could not create form. Reason: {e}") from e
        if not shell.id:
            self.reset()
            raise CreationFailedError("Failed to get formId from creation response.")
        self.form_id = shell.id

        self._transition(OrchestratorState.POPULATING)
        try:
            ops = self.compiler(definition)
            if ops:
                self.backend.batch_mutate(shell.id, ops)
        except Exception as e:
            form_id = self.form_id
            self.reset()
            logger.error("Batch update of form %s failed: %s", form_id, e)
            raise BatchMutationFailedError(str(e), form_id) from e

        self.share_url = shell.share_url
        self._transition(OrchestratorState.DONE)
        logger.info("Created form %s with %d operations", shell.id, len(ops))
        return RemoteForm(
            form_id=shell.id,
            edit_url=shell.edit_url,
            share_url=shell.share_url,
            operation_count=len(ops),
        )
