"""
Ledger error to HTTP response mapping.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.services.base import ErrorCode, LedgerError

HTTP_STATUS = {
    ErrorCode.NOT_AUTHORIZED: 403,
    ErrorCode.VAULT_NOT_FOUND: 404,
    ErrorCode.PROTOCOL_NOT_REGISTERED: 404,
    ErrorCode.POSITION_NOT_FOUND: 404,
    ErrorCode.INVALID_PROTOCOL: 400,
    ErrorCode.INVALID_AMOUNT: 400,
    ErrorCode.INVALID_PARAMETER: 400,
    ErrorCode.UNSUPPORTED_TOKEN: 400,
    ErrorCode.SLIPPAGE_TOO_HIGH: 400,
    ErrorCode.INSUFFICIENT_FUNDS: 409,
    ErrorCode.VAULT_FULL: 409,
    ErrorCode.LIQUIDATION_THRESHOLD: 409,
}


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS.get(exc.code, 400),
        content={"error": exc.code.value, "message": exc.message, "details": exc.details},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
