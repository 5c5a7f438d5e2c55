"""Request validation decorator.

@validate_request binds the JSON request body to the Pydantic model named by
the view function's annotations. URL path parameters (present in
request.view_args) are passed through unchanged.

    @auth_bp.post("/auth/register")
    @validate_request
    def register(data: RegisterRequest):
        ...

Validation failures raise the project's ValidationError (HTTP 400) with
details describing each failing field.
"""

import inspect
from functools import wraps

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


def _redact(body: dict) -> dict:
    """Mask password fields before echoing a body back to the client."""
    return {
        key: "***" if "password" in key.lower() else value
        for key, value in body.items()
    }


def _format_errors(exc: PydanticValidationError) -> list[dict]:
    errors = []
    for err in exc.errors():
        errors.append({
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "expected_type": err["type"],
        })
    return errors


def validate_request(f):
    """
    Validate the JSON body against the Pydantic model in f's signature.

    Raises:
        TypeError: At decoration time if f has no parameters or its first
            parameter lacks an annotation; at request time if a body
            parameter is not annotated with a BaseModel subclass
        ValidationError: If the request body does not match the model
    """
    signature = inspect.signature(f)
    params = list(signature.parameters.values())
    if not params:
        raise TypeError(f"{f.__name__} has no parameters to validate")
    if params[0].annotation is inspect.Parameter.empty:
        raise TypeError(f"First parameter of {f.__name__} lacks a type annotation")

    @wraps(f)
    def wrapper(*args, **kwargs):
        view_args = request.view_args or {}
        for param in params:
            if param.name in view_args or param.name in kwargs:
                continue

            model = param.annotation
            if not (inspect.isclass(model) and issubclass(model, BaseModel)):
                raise TypeError(
                    f"Parameter '{param.name}' of {f.__name__} must be annotated "
                    f"with a Pydantic BaseModel subclass"
                )

            body = request.get_json(silent=True)
            if body is None:
                body = {}
            if not isinstance(body, dict):
                raise ValidationError(
                    "Request body must be a JSON object",
                    {"model": model.__name__, "received": body}
                )

            try:
                kwargs[param.name] = model(**body)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid request data",
                    {
                        "model": model.__name__,
                        "received": _redact(body),
                        "errors": _format_errors(e),
                    }
                )

        return f(*args, **kwargs)

    return wrapper
