"""
Sparkz Backend: Auth Route Handlers
====================================

What:  POST /auth/signup and POST /auth/login.
How:   Body validated by Pydantic, delegated to AuthService. Both answer
       {"token": ..., "user": {"id", "email", "dj_name"}}.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.schemas.auth import AuthResponse, LoginRequest, SignupRequest
from app.schemas.common import ErrorResponse
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    responses={
        409: {"description": "Email already registered", "model": ErrorResponse},
        502: {"description": "Live stream could not be provisioned", "model": ErrorResponse},
    },
    summary="Create an account",
    description=(
        "Registers a DJ account, provisions a dedicated Mux live stream for it and "
        "returns a bearer token valid for 7 days."
    ),
)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.signup(
        db=db,
        email=body.email,
        password=body.password,
        dj_name=body.dj_name,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
    },
    summary="Exchange credentials for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db=db, email=body.email, password=body.password)
