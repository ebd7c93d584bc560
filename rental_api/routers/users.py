"""
User API endpoints: registration, login, profile and administration.
"""

from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Optional
from uuid import UUID

from rental_api.config import settings
from rental_api.models.user import User, UserRole
from rental_api.services.user import UserService
from rental_api.schemas.user import (
    UserRegister,
    UserLogin,
    UserUpdate,
    UserResponse,
    PasswordChangeRequest,
    LoginResponse,
    NidVerificationResponse,
)
from rental_api.schemas.error import get_crud_error_responses, get_error_responses
from rental_api.utils.auth import generate_token
from rental_api.utils.dependencies import (
    get_current_user,
    get_current_admin_user,
    get_user_service,
)


router = APIRouter(prefix="/user", tags=["Users"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Register as a tenant or landlord. Admin accounts cannot be created here.",
    responses=get_error_responses(400, 409, 422)
)
async def register(
    user_data: UserRegister,
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    """
    Register a new user.

    Raises:
        BadRequestError: If the password is weak or the admin role is requested
        ConflictError: If the email or NID is taken
    """
    user = await user_service.register_user(user_data)
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password and receive a JWT access token",
    responses=get_error_responses(401, 422, 429)
)
async def login(
    login_data: UserLogin,
    user_service: UserService = Depends(get_user_service)
) -> LoginResponse:
    user = await user_service.authenticate(login_data.email, login_data.password)
    return LoginResponse(
        access_token=generate_token(user),
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user.to_dict())
    )


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get own profile",
    responses=get_error_responses(401)
)
async def get_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Update own profile",
    responses=get_error_responses(400, 401, 422)
)
async def update_profile(
    profile_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> UserResponse:
    user = await user_service.update_profile(current_user.id, profile_data)
    return UserResponse.model_validate(user.to_dict())


@router.put(
    "/profile/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change own password",
    responses=get_error_responses(400, 401, 422)
)
async def change_password(
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
) -> None:
    await user_service.update_password(
        current_user.id, password_data.current_password, password_data.new_password
    )


@router.put(
    "/verify-nid/{user_id}",
    response_model=NidVerificationResponse,
    summary="Verify a user's NID",
    description="Check the NID format (10 or 17 digits) and record the verdict. Admin only.",
    responses=get_crud_error_responses()
)
async def verify_nid(
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> NidVerificationResponse:
    verified = await user_service.verify_nid(user_id)
    return NidVerificationResponse(
        user_id=user_id,
        is_nid_verified=verified,
        message="NID verified" if verified else "NID is invalid"
    )


@router.get(
    "/",
    response_model=List[UserResponse],
    summary="List users",
    description="Filter users by role and verification status. Admin only.",
    responses=get_error_responses(401, 403, 422)
)
async def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_nid_verified: Optional[bool] = Query(None, description="Filter by NID verification"),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$", description="Sort by registration date"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> List[UserResponse]:
    users = await user_service.list_users(role, is_nid_verified, sort_direction)
    return [UserResponse.model_validate(user.to_dict()) for user in users]


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    description="Delete a user that owns no properties and holds no leases or requests. Admin only.",
    responses=get_crud_error_responses()
)
async def delete_user(
    user_id: UUID = Path(..., description="User ID"),
    current_user: User = Depends(get_current_admin_user),
    user_service: UserService = Depends(get_user_service)
) -> None:
    await user_service.delete_user(user_id)
