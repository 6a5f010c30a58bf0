"""Exception handlers that turn domain errors into JSON responses."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from project_module.exceptions import ProjectError

logger = logging.getLogger(__name__)

# ConflictError maps to 400: an already checked out project is a client-correctable request
STATUS_BY_KIND = {
    "not_found": 404,
    "forbidden": 403,
    "conflict": 400,
    "validation_error": 400,
}


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    logger.debug(f"{request.method} {request.url.path} -> {status_code} {exc.kind}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjectError, project_error_handler)
