from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from onboarding.core.config import settings
from onboarding.core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from onboarding.core.logging_config import configure_logging
from onboarding.models import Base  # noqa: F401 - register models
from onboarding.routers import bank_accounts, documents, health, members, merchants, onboarding

configure_logging()

app = FastAPI(
    title="Merchant Onboarding API",
    description="Merchant onboarding aggregate and audit trail",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health")
app.include_router(merchants.router, prefix="/merchants")
app.include_router(onboarding.router, prefix="/merchants")
app.include_router(bank_accounts.router, prefix="/merchants")
app.include_router(members.router, prefix="/merchants")
app.include_router(documents.router, prefix="/merchants")


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **extra})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(422, exc, fields=exc.fields)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error(409, exc)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    return _error(503, exc)
