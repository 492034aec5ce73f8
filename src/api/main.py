from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.responses import fail
from src.api.routes import auth, settings as user_settings
from src.core.config import settings
from src.core.exceptions import SettingsError, ValidationFailure
from src.util.logger import logger


app = FastAPI(title=settings.app_name, debug=settings.debug)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(user_settings.router)


# region error handlers


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if part != "body"]
        field = str(loc[-1]) if loc else "body"
        message = str(err.get("msg", "Invalid value."))
        # custom validators surface as "Value error, <message>"
        message = message.removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return fail(ValidationFailure.default_message, errors=_field_errors(exc))


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return fail(exc.message, exc.status_code, errors=exc.errors)


@app.exception_handler(SettingsError)
async def settings_error_handler(request: Request, exc: SettingsError):
    return fail(exc.message, exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    response = fail(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return fail(
        "Something went wrong. Please try again.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# endregion


@app.get("/")
def root():
    return {"message": f"Welcome to {settings.app_name}"}


@app.get("/healthcheck")
def healthcheck():
    return {"status": "Alive"}
