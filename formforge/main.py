import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from formforge.auth import _get_token_store, router as auth_router
from formforge.config import get_settings
from formforge.exceptions import (
    AuthenticationError,
    BatchMutationFailedError,
    CompilationError,
    FormValidationError,
    GenerationError,
    GenerationFailure,
    IntegrationError,
    OrchestratorError,
    RateLimitError,
    UnauthenticatedError,
)
from formforge.logging_setup import configure_logging
from formforge.mcp_server import mcp
from formforge.routers.forms import router as forms_router
from formforge.services.gemini import remediation_message


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return JSONResponse(
                status_code=403,
                content={"error_code": "forbidden", "message": "Localhost access only"},
            )
        return await call_next(request)


# --- FastAPI app ---

api = FastAPI(title="Formforge", version="0.1.0")
api.include_router(auth_router)
api.include_router(forms_router)


@api.get("/api/status")
def api_status() -> dict:
    accounts = _get_token_store().list_accounts()
    return {
        "forms": {"authenticated_accounts": accounts, "ready": len(accounts) > 0},
        "gemini": {"ready": bool(get_settings().gemini_api_key)},
    }


# --- Exception handlers ---

@api.exception_handler(FormValidationError)
async def validation_error_handler(request: Request, exc: FormValidationError):
    return JSONResponse(
        status_code=422,
        content={"error_code": "validation_error", "field": exc.field, "message": exc.reason},
    )


@api.exception_handler(CompilationError)
async def compilation_error_handler(request: Request, exc: CompilationError):
    return JSONResponse(status_code=500, content={"error_code": "compilation_error", "message": str(exc)})


@api.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    status = 401 if exc.reason == GenerationFailure.INVALID_KEY else 502
    return JSONResponse(
        status_code=status,
        content={
            "error_code": f"generation_{exc.reason.value}",
            "message": remediation_message(exc.reason),
            "detail": str(exc),
        },
    )


@api.exception_handler(UnauthenticatedError)
async def unauthenticated_error_handler(request: Request, exc: UnauthenticatedError):
    return JSONResponse(status_code=401, content={"error_code": "unauthenticated", "message": str(exc)})


@api.exception_handler(BatchMutationFailedError)
async def batch_error_handler(request: Request, exc: BatchMutationFailedError):
    return JSONResponse(
        status_code=502,
        content={"error_code": "batch_mutation_failed", "message": str(exc), "form_id": exc.form_id},
    )


@api.exception_handler(OrchestratorError)
async def orchestrator_error_handler(request: Request, exc: OrchestratorError):
    return JSONResponse(status_code=502, content={"error_code": "creation_failed", "message": str(exc)})


@api.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"error_code": "auth_error", "message": str(exc)})


@api.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    return JSONResponse(status_code=500, content={"error_code": "integration_error", "message": str(exc)})


@api.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    return JSONResponse(status_code=429, content={"error_code": "rate_limit", "message": str(exc)})


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=mcp_app.lifespan,
)


def run():
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "formforge.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
