"""
Enveloppe de réponse commune aux endpoints API.
- Succès: {"code": "SUCCESS", "message": "Success", "data": <payload>}
- Échec:  {"code": "FAIL", "message": "<message lisible>"}
"""
from typing import Any
from fastapi.responses import JSONResponse


def ok(data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": "SUCCESS", "message": "Success", "data": data},
    )


def fail(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": "FAIL", "message": message},
    )
