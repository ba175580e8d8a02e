"""
Authentication endpoints for API v1.

Registration, login and "who am I".  Tokens are bearer tokens issued
by ``core.security.create_access_token`` and carry the user's email as
subject.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from skill_swap_api.app.core.security import create_access_token, get_current_user
from skill_swap_api.app.schemas.user import TokenResponse, UserLogin, UserRead, UserRegister
from skill_swap_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(data: UserRegister) -> TokenResponse:
    """Create an account and return a token for it."""
    user = await UserService.create_user(data)
    return TokenResponse(access_token=create_access_token({"sub": user.email}), user=user)


@router.post("/login", response_model=TokenResponse)
async def login(data: UserLogin) -> TokenResponse:
    user = await UserService.authenticate(data.email, data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if user.is_banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")
    return TokenResponse(access_token=create_access_token({"sub": user.email}), user=user)


@router.get("/me", response_model=UserRead)
async def me(current_user: dict = Depends(get_current_user)) -> UserRead:
    user = await UserService.get_user_by_id(current_user["user_id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
