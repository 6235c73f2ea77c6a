from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from ..auth import AuthContext, get_auth_context
from ..schemas import (
    AuthResponse,
    LoginRequest,
    ProfileOut,
    ProfileUpdate,
    ProfileUpdated,
    RegisterRequest,
)
from ..services import AccountService, ProfileService

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


def _get_profiles(request: Request) -> ProfileService:
    return ProfileService(request.app.state.stores.users)


def _get_accounts(request: Request) -> AccountService:
    return AccountService(request.app.state.stores.users, request.app.state.settings)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return its identity record with an access token.",
    responses={
        201: {"description": "Account created"},
        409: {"description": "Email already registered"},
        422: {"description": "Validation error"},
    },
)
def register(payload: RegisterRequest, accounts: AccountService = Depends(_get_accounts)) -> AuthResponse:
    return accounts.register(payload.name, payload.email, payload.password)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange email and password for an access token.",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid email or password"},
    },
)
def login(payload: LoginRequest, accounts: AccountService = Depends(_get_accounts)) -> AuthResponse:
    return accounts.login(payload.email, payload.password)


# PUBLIC_INTERFACE
@router.get(
    "/profile",
    response_model=ProfileOut,
    summary="Get Profile",
    description="Return the caller's own profile.",
    responses={401: {"description": "Not authenticated"}},
)
def get_profile(
    ctx: AuthContext = Depends(get_auth_context),
    profiles: ProfileService = Depends(_get_profiles),
) -> ProfileOut:
    user = profiles.get_profile(ctx)
    return ProfileOut(id=user["id"], name=user["name"], email=user["email"])


# PUBLIC_INTERFACE
@router.put(
    "/profile",
    response_model=ProfileUpdated,
    summary="Update Profile",
    description=(
        "Update the caller's name and/or email. Fields that are absent or blank "
        "are left unchanged."
    ),
    responses={
        200: {"description": "Profile updated"},
        401: {"description": "Not authenticated"},
        409: {"description": "Email already registered"},
    },
)
def update_profile(
    payload: ProfileUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    profiles: ProfileService = Depends(_get_profiles),
) -> ProfileUpdated:
    """
    Partial update of the caller's profile.
    """
    user = profiles.update_profile(ctx, payload)
    return ProfileUpdated(name=user["name"], email=user["email"])
