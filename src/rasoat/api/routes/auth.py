"""Administrator sign-in endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...schemas.auth import CurrentUserResponse, LoginRequest, LoginResponse
from ...services.auth import AuthError, Identity, get_auth_provider, is_authorized_user
from ..dependencies import bearer_scheme, get_current_identity

router = APIRouter(prefix="/auth", tags=["auth"])


def _provider_or_503():
    provider = get_auth_provider()
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dịch vụ đăng nhập chưa được cấu hình.",
        )
    return provider


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login(payload: LoginRequest) -> LoginResponse:
    provider = _provider_or_503()
    try:
        result = provider.sign_in(payload.email.strip(), payload.password)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        email=result.identity.email,
        authorized=is_authorized_user(result.identity),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(credentials=Depends(bearer_scheme)) -> Response:
    if credentials is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    provider = _provider_or_503()
    try:
        provider.sign_out(credentials.credentials)
    except AuthError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=CurrentUserResponse, status_code=status.HTTP_200_OK)
def current_user(identity: Identity | None = Depends(get_current_identity)) -> CurrentUserResponse:
    return CurrentUserResponse(
        email=identity.email if identity else None,
        authorized=is_authorized_user(identity),
    )
