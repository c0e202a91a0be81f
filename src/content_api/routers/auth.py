from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse
from typing import Optional

from content_api.auth import AuthService, extract_bearer_token
from content_api.dependencies import get_auth_service
from content_api.errors import InvalidOrExpiredToken
from content_api.schemas import LoginRequest, LoginResponse, VerifyResponse

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange the admin password for a bearer token."""
    token = auth.login(body.password)
    return LoginResponse(token=token)


@router.get("/verify", response_model=VerifyResponse)
def verify(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
):
    """Report whether the presented bearer token is still valid."""
    try:
        auth.verify(extract_bearer_token(authorization))
    except InvalidOrExpiredToken:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"valid": False})
    return VerifyResponse(valid=True)
