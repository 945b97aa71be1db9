"""
FastAPI REST API Module

Exposes the taxed token over HTTP. The calling account is taken from the
X-Caller header; owner-only endpoints live under /admin.
"""

from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Depends, Query, status
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .token import TaxedToken
from .config import get_config
from .errors import FailureReason, LedgerError
from .logging_config import setup_logging
from .schemas import (
    ApproveRequest, SetExemptionRequest, SetFeeRateRequest, SetTreasuryRequest,
    TokenInfoResponse, TransferFromRequest, TransferRequest
)


_STATUS_BY_REASON = {
    FailureReason.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    FailureReason.SYSTEM_PAUSED: status.HTTP_409_CONFLICT,
    FailureReason.NOT_INITIALIZED: status.HTTP_409_CONFLICT,
    FailureReason.ALREADY_INITIALIZED: status.HTTP_409_CONFLICT,
    FailureReason.VARIANT_MISMATCH: status.HTTP_409_CONFLICT,
}

_token: Optional[TaxedToken] = None


def bootstrap_token() -> TaxedToken:
    """Build a token from configuration and initialize it from the configured owner"""
    config = get_config()
    token = TaxedToken.from_config(config)
    if config.owner_address and token.owner() is None:
        token.initialize(
            config.owner_address,
            config.token_name,
            config.token_symbol,
            config.treasury_address or config.owner_address,
            config.initial_fee_rate,
        )
    return token


def get_token() -> TaxedToken:
    global _token
    if _token is None:
        _token = bootstrap_token()
    return _token


def set_token(token: Optional[TaxedToken]) -> None:
    """Replace the served token (used by tests)"""
    global _token
    _token = token


def caller_header(x_caller: str = Header(..., alias="X-Caller")) -> str:
    return x_caller


def to_http_error(error: LedgerError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_REASON.get(error.reason, status.HTTP_400_BAD_REQUEST),
        detail=error.to_dict()
    )


app = FastAPI(
    title="Fee Ledger API",
    description="Value-transfer ledger with a policy-driven treasury fee",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "fee_ledger_api", "version": "1.0.0"}


@app.get("/token", response_model=TokenInfoResponse)
def token_info(token: TaxedToken = Depends(get_token)):
    try:
        metadata = token.metadata()
    except LedgerError as e:
        raise to_http_error(e)
    return TokenInfoResponse(
        name=metadata.name,
        symbol=metadata.symbol,
        decimals=metadata.decimals,
        total_supply=str(token.total_supply()),
        owner=token.owner(),
        treasury=token.treasury(),
        fee_rate=token.current_fee_rate(),
        max_fee_rate=token.max_fee_rate(),
        fee_variant=token.policy.variant.value,
        paused=token.paused(),
    )


@app.get("/balances/{account}")
def get_balance(account: str, token: TaxedToken = Depends(get_token)):
    return {"account": account, "balance": str(token.balance_of(account))}


@app.get("/allowances/{owner}/{spender}")
def get_allowance(owner: str, spender: str, token: TaxedToken = Depends(get_token)):
    return {"owner": owner, "spender": spender, "amount": str(token.allowance(owner, spender))}


@app.get("/exemptions/{account}")
def get_exemption(account: str, token: TaxedToken = Depends(get_token)):
    return {"account": account, "exempt": token.is_exempt(account)}


@app.get("/tax")
def estimate_tax(amount: str = Query(..., pattern=r"^\d+$"), token: TaxedToken = Depends(get_token)):
    try:
        tax = token.calculate_tax(int(amount))
    except LedgerError as e:
        raise to_http_error(e)
    return {"amount": amount, "tax": str(tax), "fee_rate": token.current_fee_rate()}


@app.post("/transfer")
def transfer(
    request: TransferRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        success = token.transfer(caller, request.to, request.to_int())
    except LedgerError as e:
        raise to_http_error(e)
    return {"success": success, "balance": str(token.balance_of(caller))}


@app.post("/transfer-from")
def transfer_from(
    request: TransferFromRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        success = token.transfer_from(caller, request.owner, request.to, request.to_int())
    except LedgerError as e:
        raise to_http_error(e)
    return {"success": success, "allowance": str(token.allowance(request.owner, caller))}


@app.post("/approve")
def approve(
    request: ApproveRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        success = token.approve(caller, request.spender, request.to_int())
    except LedgerError as e:
        raise to_http_error(e)
    return {"success": success}


@app.post("/admin/treasury")
def set_treasury(
    request: SetTreasuryRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        token.set_treasury(caller, request.treasury)
    except LedgerError as e:
        raise to_http_error(e)
    return {"treasury": token.treasury()}


@app.post("/admin/fee-rate")
def set_fee_rate(
    request: SetFeeRateRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        token.set_fee_rate(caller, request.fee_rate)
    except LedgerError as e:
        raise to_http_error(e)
    return {"fee_rate": token.current_fee_rate()}


@app.post("/admin/exemptions")
def set_exemption(
    request: SetExemptionRequest,
    caller: str = Depends(caller_header),
    token: TaxedToken = Depends(get_token)
):
    try:
        token.set_exemption(caller, request.account, request.exempt)
    except LedgerError as e:
        raise to_http_error(e)
    return {"account": request.account, "exempt": token.is_exempt(request.account)}


@app.post("/admin/pause")
def pause(caller: str = Depends(caller_header), token: TaxedToken = Depends(get_token)):
    try:
        token.pause(caller)
    except LedgerError as e:
        raise to_http_error(e)
    return {"paused": token.paused()}


@app.post("/admin/unpause")
def unpause(caller: str = Depends(caller_header), token: TaxedToken = Depends(get_token)):
    try:
        token.unpause(caller)
    except LedgerError as e:
        raise to_http_error(e)
    return {"paused": token.paused()}


@app.get("/audit/verify")
def verify_audit(token: TaxedToken = Depends(get_token)):
    if token.audit_trail is None:
        raise HTTPException(status_code=404, detail="Audit logging is disabled")
    return token.audit_trail.verify_integrity()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format)
    uvicorn.run(
        "fee_ledger.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
