from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from cisops import metrics
from cisops.api.rate_limit import RATE_LIMITS, limiter
from cisops.core.audit import log_audit_event, log_failure
from cisops.core.exceptions import InvalidCredentialsError
from cisops.core.security import TokenExpiredError, TokenValidationError, decode_token
from cisops.models import schemas
from cisops.services.auth_service import AuthService, get_auth_service

router = APIRouter()

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user_id(authorization: str = Header(None)) -> int:
    if not authorization or not authorization.lower().startswith("bearer "):
        log_failure("auth.token.parse", user_id=None, error="missing_token")
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_token(token)
        return int(payload["sub"])  # type: ignore
    except TokenExpiredError as exc:
        log_failure("auth.token.expired", user_id=None, error="expired")
        raise HTTPException(status_code=401, detail="Token expired") from exc
    except TokenValidationError as exc:
        log_failure("auth.token.invalid", user_id=None, error="invalid")
        raise HTTPException(status_code=401, detail="Invalid token") from exc


@router.post("/register", response_model=schemas.UserOut)
@limiter.limit(RATE_LIMITS["register"])
def register(request: Request, payload: schemas.UserRegister, svc: AuthServiceDep):
    try:
        user = svc.register(payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    log_audit_event("auth.register", user_id=user.id)
    return user


@router.post("/login", response_model=schemas.TokenOut)
@limiter.limit(RATE_LIMITS["login"])
def login(request: Request, payload: schemas.LoginRequest, svc: AuthServiceDep):
    try:
        bundle = svc.login(payload)
    except InvalidCredentialsError:
        metrics.login_failed()
        log_failure("auth.login", user_id=None, error="invalid_credentials", username=payload.username)
        raise
    metrics.login_succeeded()
    log_audit_event("auth.login", user_id=bundle.user_id)
    return schemas.TokenOut(access_token=bundle.access_token, access_expires_at=bundle.access_expires_at)


@router.get("/me", response_model=schemas.UserOut)
def me(svc: AuthServiceDep, current_user_id: int = Depends(get_current_user_id)):
    return svc.get_user(current_user_id)
