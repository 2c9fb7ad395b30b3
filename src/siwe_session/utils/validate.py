"""Response-schema validation for wire bodies.

Schemas are pydantic models; their docstring doubles as the human readable
description carried by :class:`~siwe_session.auth.errors.ValidationError`.
"""

from __future__ import annotations

from typing import Any, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from siwe_session.auth.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class AuthRequestBody(BaseModel):
    """AuthRequestBody"""

    model_config = ConfigDict(extra="forbid")

    message: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class ClockResponse(BaseModel):
    """ClockResponse"""

    time: str = Field(..., description="Server time as an ISO-8601 string")


def _description(model: type[BaseModel]) -> str:
    return (model.__doc__ or model.__name__).strip().splitlines()[0]


def validate(obj: Any, model: type[ModelT]) -> ModelT:
    """Validate *obj* against *model* and return the parsed instance.

    Raises
    ------
    ValidationError
        Carrying the schema description and the list of violations.
    """
    try:
        return model.model_validate(obj)
    except pydantic.ValidationError as exc:
        issues = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        raise ValidationError(_description(model), issues) from None
