"""
Response envelope shared by every endpoint: {"status", "message", "data"}
"""
from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any = None, message: str = "OK") -> dict:
    body = {"status": True, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return body


def failure(message: str, status_code: int, data: Optional[Any] = None) -> JSONResponse:
    body = {"status": False, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=body)
