"""Request Body Parsing — one entry point for JSON and multipart admin payloads.

Invariants:
    - Multipart: the "file" part is returned separately; empty text fields dropped
    - JSON: body must be an object, else 400
    - Schema failures raise RequestValidationError, so they render exactly like
      FastAPI's own body validation (400 with field details)
"""

from typing import TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from pecup.core.errors import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_payload(request: Request) -> tuple[dict, UploadFile | None]:
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        form = await request.form()
        upload = form.get("file")
        payload = {
            key: value for key, value in form.items()
            if key != "file" and isinstance(value, str) and value != ""
        }
        return payload, upload if isinstance(upload, UploadFile) else None
    try:
        body = await request.json()
    except ValueError:
        raise InputValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise InputValidationError("Request body must be a JSON object")
    return body, None


def parse_model(model: type[ModelT], payload: dict) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
