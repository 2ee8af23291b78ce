from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(data=None, status_code: int = 200, **extra) -> JSONResponse:
    # {success, data, ...} 공통 응답 형식
    body = {"success": True, "data": data}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def error_envelope(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )
