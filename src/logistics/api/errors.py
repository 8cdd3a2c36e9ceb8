"""Exception handlers for the logistics API.

Protean's handlers cover validation failures (400). Missing objects answer
404 and conflicts with existing state answer 409.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from logistics.errors import ConflictError


async def _not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def _conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.messages})


def register_logistics_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ObjectNotFoundError, _not_found_handler)
    app.add_exception_handler(ConflictError, _conflict_handler)
