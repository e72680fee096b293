"""Account registration, login and profile routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_session, get_token_service
from app.schemas import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, UserRead
from services.auth import AuthContext, AuthService, TokenService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    session: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(session, tokens)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    summary="Create a login account. Roles may be given in English or Arabic.",
)
def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    user = service.register(
        email=payload.email,
        password=payload.password,
        role=payload.role,
        firstname=payload.firstname,
        lastname=payload.lastname,
    )
    return RegisterResponse(message="User registered successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for a bearer token.")
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    token, user = service.login(email=payload.email, password=payload.password)
    return LoginResponse(token=token, user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead, summary="Profile of the authenticated user.")
def me(
    user: AuthContext = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> UserRead:
    return UserRead.model_validate(service.profile(user))
