"""
FastAPI router for user endpoints.

Registration, email verification, login and profile CRUD under ``/users``.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, status

from accounts.dependencies import AccountServices, get_services, require_auth
from accounts.pipelines import users as pipelines
from accounts.schemas.users import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UpdateUserRequest,
    UserEnvelope,
    VerifyRequest,
)
from common.utils import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

Services = Annotated[AccountServices, Depends(get_services)]


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register(body: RegisterRequest, services: Services):
    """
    Register a new user account.

    Creates the user unverified and emails a verification code.
    """
    account = await pipelines.register_pipeline(
        store=services.store,
        hasher=services.hasher,
        codes=services.codes,
        email_service=services.email,
        first_name=body.firstName,
        last_name=body.lastName,
        email=body.email,
        password=body.password,
    )

    return success_response(
        {"userId": account.id},
        message="User created successfully. Check your email for verification code.",
    )


@router.post("/verify", response_model=MessageResponse)
async def verify(body: VerifyRequest, services: Services):
    """Confirm an email address with the code that was sent to it."""
    await pipelines.verify_pipeline(
        store=services.store,
        codes=services.codes,
        user_id=body.userId,
        verification_code=body.verificationCode,
    )

    return success_response(message="User verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(body: ResendVerificationRequest, services: Services):
    """Issue a fresh verification code. The previous code stops working."""
    await pipelines.resend_verification_pipeline(
        store=services.store,
        codes=services.codes,
        email_service=services.email,
        email=body.email,
    )

    return success_response(message="Verification code sent. Check your email.")


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, services: Services):
    """Authenticate a verified user and return an access token."""
    token, account = await pipelines.login_pipeline(
        store=services.store,
        hasher=services.hasher,
        tokens=services.tokens,
        email=body.email,
        password=body.password,
    )

    return success_response(
        {"token": token, "user": account.to_public()},
        message="Login successful",
    )


@router.get("/me", response_model=UserEnvelope)
async def get_me(
    claims: Annotated[Dict[str, Any], Depends(require_auth)],
    services: Services,
):
    """Get the account the bearer token was issued to."""
    account = await pipelines.current_user_pipeline(services.store, claims)
    return success_response({"user": account.to_public()})


@router.get("/user/{user_id}", response_model=UserEnvelope)
async def get_user(user_id: str, services: Services):
    """Get a user by ID."""
    account = await pipelines.get_user_pipeline(services.store, user_id)
    return success_response({"user": account.to_public()})


@router.put("/user/{user_id}", response_model=UserEnvelope)
async def update_user(user_id: str, body: UpdateUserRequest, services: Services):
    """Replace a user's first and last name."""
    account = await pipelines.update_user_pipeline(
        store=services.store,
        user_id=user_id,
        first_name=body.firstName,
        last_name=body.lastName,
    )
    return success_response({"user": account.to_public()})


@router.delete("/user/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, services: Services):
    """Delete a user permanently."""
    await pipelines.delete_user_pipeline(services.store, user_id)
    return success_response(message="User deleted successfully")
