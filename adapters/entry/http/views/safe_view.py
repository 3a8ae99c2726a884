import logging

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from adapters.entry.http.dtos.safe_dtos import SafeCallRequest, SafeErrOut, SafeInfoOut, SafeTxOut
from core.services.exceptions import SafeError
from core.use_cases.safe_usecase import SafeUseCase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/safe", tags=["safe"])

_ERROR_RESPONSES = {
    400: {"model": SafeErrOut, "description": "bad params"},
    503: {"model": SafeErrOut, "description": "service unavailable"},
}


def get_use_case(request: Request) -> SafeUseCase:
    """
    The use case (one AsyncWeb3 + signer + template config) is built once in
    the app lifespan and shared by every request.
    """
    return request.app.state.safe_use_case


@router.get(
    "/{address}",
    response_model=SafeInfoOut,
    responses=_ERROR_RESPONSES,
    summary="Deterministic Safe address of a user and whether it is deployed",
)
async def calculate_address(
    address: str,
    use_case: SafeUseCase = Depends(get_use_case),
):
    return SafeInfoOut(**await use_case.info(address))


@router.post(
    "/{address}",
    response_model=SafeTxOut,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Deploy the user's Safe through the proxy factory (signed by backend PK)",
)
async def deploy_contract(
    address: str,
    use_case: SafeUseCase = Depends(get_use_case),
):
    return SafeTxOut(**await use_case.deploy(address))


@router.put(
    "/{address}",
    response_model=SafeTxOut,
    responses=_ERROR_RESPONSES,
    summary="Forward a signed execTransaction to the user's deployed Safe",
)
async def exec_transaction(
    address: str,
    body: SafeCallRequest,
    use_case: SafeUseCase = Depends(get_use_case),
):
    return SafeTxOut(**await use_case.exec(address, body.to_request()))


# ---------------------------------------------------------------------------
# Error rendering: {"code": <status>, "message": "..."}
# ---------------------------------------------------------------------------


async def safe_error_handler(request: Request, exc: SafeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "Bad parameters passed: " + ("; ".join(parts) or "invalid request body")
    return JSONResponse(status_code=400, content={"code": 400, "message": message})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SafeError, safe_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
