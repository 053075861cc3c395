import logging
from typing import Union

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .errors import QuoteError

logger = logging.getLogger(__name__)

# Validation messages shown to the workshop in Portuguese
ERROR_MESSAGES_PT = {
    "field required": "é um campo obrigatório",
    "input should be a valid integer": "deve ser um número inteiro",
    "input should be a valid number": "deve ser um número",
    "input should be a valid boolean": "deve ser verdadeiro ou falso",
    "input should be a valid dictionary": "deve ser um objeto",
    "input should be a valid list": "deve ser uma lista",
    "input should be a valid string": "deve ser um texto",
    "input should be a valid datetime": "não é uma data/hora válida",
    "input should be": "não é um valor permitido",
}


async def validation_exception_handler(request: Request, exc: Union[RequestValidationError, ValidationError]):
    """
    Handle validation errors from request bodies and response models
    """
    error_messages = []
    for error in exc.errors():
        field_name = " -> ".join([str(x) for x in error["loc"]])
        error_msg = error.get("msg", "")

        for en_msg, pt_msg in ERROR_MESSAGES_PT.items():
            if en_msg in error_msg.lower():
                error_msg = pt_msg
                break

        error_messages.append(f"Campo {field_name} {error_msg}")

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Dados inválidos",
            "errors": error_messages
        }
    )


async def quote_error_handler(request: Request, exc: QuoteError):
    logger.info(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
