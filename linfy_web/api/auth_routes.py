"""Account routes under /auth. All except register/login need a bearer token."""

from fastapi import APIRouter, Depends, Request, status

from .schemas import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    UserResponse,
    UpdateProfileRequest,
    ProfileUpdateResponse,
    ChangePasswordRequest,
    MessageResponse,
    ApiKeyCreatedResponse,
    ApiKeyInfo,
    ApiKeyListResponse,
    ErrorResponse,
)
from ..dependencies import require_session

router = APIRouter()

AUTH_ERRORS = {401: {"model": ErrorResponse, "description": "Missing or invalid token"}}


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid field"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Register",
)
async def register(request: Request, body: RegisterRequest):
    accounts = request.app.state.account_service
    result = await accounts.register(body.name, body.email, body.password)
    return MessageResponse(**result)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing field"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
    summary="Log in",
    description="Exchange email and password for a 7-day session token.",
)
async def login(request: Request, body: LoginRequest):
    accounts = request.app.state.account_service
    result = await accounts.login(body.email, body.password)
    return LoginResponse(**result)


@router.get("/me", response_model=UserResponse, responses=AUTH_ERRORS, summary="Get profile")
async def get_me(request: Request, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    return UserResponse(**await accounts.get_profile(user_id))


@router.put(
    "/me",
    response_model=ProfileUpdateResponse,
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse, "description": "Nothing to update"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
    summary="Update profile",
)
async def update_me(request: Request, body: UpdateProfileRequest, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    result = await accounts.update_profile(user_id, name=body.name, email=body.email)
    return ProfileUpdateResponse(**result)


@router.put(
    "/me/password",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid token or old password is incorrect"},
        400: {"model": ErrorResponse, "description": "Missing field"},
    },
    summary="Change password",
)
async def change_password(request: Request, body: ChangePasswordRequest, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    result = await accounts.change_password(user_id, body.old_password, body.new_password)
    return MessageResponse(**result)


@router.get("/api-keys", response_model=ApiKeyListResponse, responses=AUTH_ERRORS, summary="List API keys")
async def list_api_keys(request: Request, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    keys = await accounts.list_api_keys(user_id)
    return ApiKeyListResponse(api_keys=[ApiKeyInfo(**k.to_public_dict()) for k in keys])


@router.post(
    "/api-keys",
    response_model=ApiKeyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**AUTH_ERRORS, 400: {"model": ErrorResponse, "description": "API key limit reached"}},
    summary="Create API key",
    description="Create an API key. The key is returned only in this response.",
)
async def create_api_key(request: Request, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    api_key = await accounts.create_api_key(user_id)
    return ApiKeyCreatedResponse(
        api_key=api_key.key,
        key_id=api_key.key_id,
        created_at=api_key.created_at,
    )


@router.delete(
    "/api-keys/{key_id}",
    response_model=MessageResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse, "description": "API key not found"}},
    summary="Revoke API key",
)
async def revoke_api_key(request: Request, key_id: str, user_id: str = Depends(require_session)):
    accounts = request.app.state.account_service
    result = await accounts.revoke_api_key(user_id, key_id)
    return MessageResponse(**result)
