from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from ..repositories import AccountService
from ..schemas import LoginRequest, MessageOut, SignupRequest, TokenOut
from ..services import get_account_service

router = APIRouter(tags=["accounts"])


# PUBLIC_INTERFACE
@router.post(
    "/signup",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Create an identity with email/password and store its profile in the users collection.",
    responses={
        201: {"description": "User created successfully"},
        400: {"description": "Missing fields or identity provider / store error"},
    },
)
def signup(
    payload: Optional[SignupRequest] = None,
    accounts: AccountService = Depends(get_account_service),
) -> MessageOut:
    payload = payload or SignupRequest()
    accounts.signup(payload.email, payload.password, payload.name)
    return MessageOut(message="User created successfully")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenOut,
    summary="Log in",
    description="Sign in with email/password and return an ID token for the Authorization header.",
    responses={
        200: {"description": "Signed in"},
        400: {"description": "Missing fields or sign-in rejected"},
    },
)
def login(
    payload: Optional[LoginRequest] = None,
    accounts: AccountService = Depends(get_account_service),
) -> TokenOut:
    payload = payload or LoginRequest()
    return TokenOut(token=accounts.login(payload.email, payload.password))
