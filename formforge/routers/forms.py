from fastapi import APIRouter

from formforge.auth import GoogleAuthSession
from formforge.models.forms import (
    CompileScriptRequest,
    FormDefinition,
    GenerateFormRequest,
    MutationPlanResponse,
    RemoteForm,
    ScriptResponse,
)
from formforge.services import apps_script
from formforge.services import form_mutations
from formforge.services import form_validation
from formforge.services import gemini as gemini_service
from formforge.services.forms import GoogleFormsBackend, RemoteFormOrchestrator

router = APIRouter(prefix="/api/forms", tags=["forms"])


@router.post("/generate")
def generate_definition(request: GenerateFormRequest) -> FormDefinition:
    definition = gemini_service.generate_form_definition(request.text, request.locale)
    return form_validation.validate_definition(definition)


@router.post("/validate")
def validate_definition(definition: FormDefinition) -> FormDefinition:
    return form_validation.validate_definition(definition)


@router.post("/script")
def compile_script(request: CompileScriptRequest) -> ScriptResponse:
    definition = form_validation.validate_definition(request.definition)
    script = apps_script.compile_script(definition, request.create_results_sheet, request.locale)
    return ScriptResponse(script=script, locale=request.locale)


@router.post("/mutations")
def compile_mutations(definition: FormDefinition) -> MutationPlanResponse:
    definition = form_validation.validate_definition(definition)
    requests = form_mutations.to_batch_requests(form_mutations.compile_mutations(definition))
    return MutationPlanResponse(requests=requests, count=len(requests))


@router.post("/remote")
def create_remote_form(definition: FormDefinition, account: str = "default") -> RemoteForm:
    definition = form_validation.validate_definition(definition)
    session = GoogleAuthSession(account)
    orchestrator = RemoteFormOrchestrator(auth=session, backend=GoogleFormsBackend(session))
    return orchestrator.create_remote_form(definition)
